"""
Argosy dispatcher: scan a token sequence, resolve options, bind positionals, route.

What this module provides
- Reply: the two-channel result of an option handler (consumption count, success).
- Outcome: the result of a whole dispatch (exit status, final action, fault or None).
- State: the scanner states, SCANNING (options) and POSITIONAL (terminal).
- Dispatcher: runs one dispatch over a Registry and never exits the process.
- dispatch(registry, prompt): convenience wrapper returning an Outcome.
- run(registry, prompt): the outermost entry point; renders the outcome and exits once.

Scanning rules (per action)
- "--name=value"  resolve "name" with the inline value, advance one token.
- "--name"        resolve "name" with the next token as candidate value.
- "-x"            same, short form (resolution is symmetric, "x" may be a long name).
- "--"            stop scanning; the following tokens are positional.
- anything else   switch to POSITIONAL; the rest of the tokens are positionals.

Option handlers reply with the number of tokens they consumed counting the option
token itself (1 for a plain switch, 2 when the following token was taken as value).
None means 1. The cursor always moves past the option token, past the value token
for options declared with the mandatory marker, and never beyond the input.

Routing
- MAIN with a handler: positionals are bound to MAIN.
- MAIN without a handler: the first positional names the sub-action, whose options
  are scanned from the next token on. Only one level of sub-action exists.

Faults raised by the components are caught by Dispatcher.dispatch() and returned in
the Outcome; exceptions raised by user handlers propagate unchanged.
"""
import difflib
import enum
import pkgutil
import re
import shlex
import sys
from collections.abc import Iterable
from typing import NamedTuple

from loguru import logger
from rich.console import Console

from .console import emit, report
from .faults import *
from .registry import MAIN, Registry
from .settings import configure, integral
from .usage import render
from .utils import Unset, coalesce, hook, ordinal, pluralize

_TOKEN = re.compile(r"(?P<dashes>--?)(?P<name>[^=]*)(?:=(?P<value>.*))?", re.DOTALL)


class Reply(NamedTuple):
    count: int = 1
    ok: bool = True


class Outcome(NamedTuple):
    status: int
    action: str
    fault: ParserFault | None = None


class State(enum.Enum):
    SCANNING = "scanning"
    POSITIONAL = "positional"


def _resolve_handler(handler, where):
    """
    return a callable for a declared handler (callable or "module:attribute" reference).
    """
    if callable(handler):
        return handler
    if isinstance(handler, str) and handler:
        try:
            return pkgutil.resolve_name(handler)
        except (ImportError, AttributeError, ValueError) as error:
            raise ConfigurationError(
                "handler %r of %s cannot be resolved" % (handler, where),
                hint="check the import reference given at declaration",
            ) from error
    raise ConfigurationError(
        "handler of %s is not callable (got %r)" % (where, handler),
        hint="declare a callable or an import reference string",
    )


def _reply(result, where):
    if result is None:
        return Reply()
    if isinstance(result, Reply):
        if isinstance(result.count, int) and not isinstance(result.count, bool):
            return result
    elif isinstance(result, int) and not isinstance(result, bool):
        return Reply(result)
    raise ConfigurationError(
        "handler of %s replied %r; expected None, an int or a Reply" % (where, result),
        hint="return the number of consumed tokens, or Reply(count, ok)",
    )


class Dispatcher:
    """
    One-shot interpreter of a token sequence against a Registry.

    The registry is only read. Each call to dispatch() is independent.
    status is the exit status reported for help requests (__status__ on __main__,
    else 0, when Unset).
    """

    def __init__(self, registry, /, *, status=Unset):
        if not isinstance(registry, Registry):
            raise TypeError("Dispatcher() argument must be a registry")
        self._registry = registry
        self._status = integral(coalesce(status, hook("__status__", 0)), "Dispatcher()")
        self._offset = 0

    @property
    def registry(self):
        return self._registry

    def dispatch(self, tokens, /):
        """
        interpret tokens and return an Outcome; never exits the process.
        """
        tokens = list(tokens)
        action = MAIN
        self._offset = 0
        try:
            while True:
                cursor = self._scan(action, tokens)
                rest = tokens[cursor:]
                if action == MAIN and self._registry.action(MAIN).handler is None:
                    action, tokens = self._route(rest)
                    self._offset += cursor + 1
                    continue
                return Outcome(self._bind(action, rest), action)
        except ParserFault as fault:
            logger.debug("dispatch stopped under {!r}: {}", action, fault.title)
            if fault.action is None:
                fault = settle(fault, action=action)
            if isinstance(fault, UsageExit):
                fault = settle(fault, status=self._status)
            return Outcome(fault.status, action, fault)

    def _scan(self, action, tokens):
        """
        scan option tokens of action; return the cursor of the first positional.
        """
        state = State.SCANNING
        cursor = 0
        while state is State.SCANNING and cursor < len(tokens):
            token = tokens[cursor]
            if token == "--":
                logger.debug("end of options at {} position", ordinal(self._offset + cursor + 1))
                state = State.POSITIONAL
                cursor += 1
            elif token.startswith("-"):
                cursor += self._resolve(action, tokens, cursor)
            else:
                state = State.POSITIONAL
        return cursor

    def _resolve(self, action, tokens, cursor):
        """
        resolve the option token at cursor, run its handler, return the advance.
        """
        token = tokens[cursor]
        match = _TOKEN.fullmatch(token)
        name = match["name"]
        inline = match["value"] if match["dashes"] == "--" else None
        if inline is None and match["dashes"] == "-" and match["value"] is not None:
            name = token[1:]

        option = self._registry.option(action, name)
        if option is None:
            suggestions = difflib.get_close_matches(token.split("=", 1)[0], self._registry.names(action), 3)
            try:
                hint = "did you mean %r? run with --help to see all options" % suggestions[0]
            except IndexError:
                hint = "run with --help to see all options"
            raise UnrecognizedOptionError(
                "unrecognized option %r at %s position" % (token, ordinal(self._offset + cursor + 1)),
                action=action,
                token=token,
                suggestions=suggestions,
                hint=hint,
            )

        where = "option %r" % token
        handler = _resolve_handler(option.handler, where)
        remaining = len(tokens) - cursor

        if inline is not None:
            logger.debug("option {!r} of {!r} takes inline value", name, action)
            reply = _reply(handler(inline), where)
            advance = 1
        else:
            following = tokens[cursor + 1] if remaining > 1 else None
            if option.mandatory and following is None:
                raise MissingValueError(
                    "option %r at %s position requires a value" % (token, ordinal(self._offset + cursor + 1)),
                    action=action,
                    token=token,
                    found=0,
                    expected=1,
                    hint="pass the value after a space or inline (--%s=<value>)" % (option.long or option.short),
                )
            reply = _reply(handler(following), where)
            advance = min(max(reply.count, 2 if option.mandatory else 1), remaining)

        if not reply.ok:
            raise HandlerFailureError(
                "option %r at %s position was rejected by its handler" % (token, ordinal(self._offset + cursor + 1)),
                action=action,
                token=token,
            )

        logger.debug("option {!r} of {!r} advanced {} token(s)", name, action, advance)
        return advance

    def _route(self, tokens):
        """
        pick the sub-action named by the first positional token of MAIN.
        """
        actions = [x.name for x in self._registry.actions()]
        if not tokens or not tokens[0]:
            raise MissingActionError(
                "an action is required",
                action=MAIN,
                hint="choose one of: %s" % ", ".join(actions) if actions else "no action is declared",
            )
        name, *rest = tokens
        if name == MAIN or name not in self._registry:
            suggestions = difflib.get_close_matches(name, actions, 3)
            try:
                hint = "did you mean %r? run with --help to see all actions" % suggestions[0]
            except IndexError:
                hint = "run with --help to see all actions"
            raise MissingActionError(
                "unrecognized action %r" % name,
                action=MAIN,
                token=name,
                suggestions=suggestions,
                hint=hint,
            )
        logger.debug("routing to action {!r} with {} token(s)", name, len(rest))
        return name, rest

    def _bind(self, action, tokens):
        """
        check positional counts and call the action handler; return its exit status.
        """
        required = self._registry.required(action)
        if len(tokens) < required:
            raise MissingArgumentsError(
                "expected at least %d positional %s, found %d" % (
                    required, pluralize("argument", required), len(tokens)
                ),
                action=action,
                found=len(tokens),
                expected=required,
                hint="run with --help to see the expected parameters",
            )

        declared = self._registry.action(action)
        if declared is None or declared.handler is None:
            raise MissingActionError(
                "action %r has no handler" % action,
                action=action,
                hint="declare the action with a handler",
            )

        handler = _resolve_handler(declared.handler, "action %r" % action)
        logger.debug("binding {} positional token(s) to {!r}", len(tokens), action)
        status = handler(tokens)
        return status if isinstance(status, int) and not isinstance(status, bool) else 0


def _tokenize(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


def dispatch(registry, prompt=Unset, /, *, status=Unset):
    """
    dispatch prompt (argv when Unset, shell-like string, or iterable of strings)
    against registry and return the Outcome.
    """
    return Dispatcher(registry, status=status).dispatch(_tokenize(prompt))


def run(registry, prompt=Unset, /, **settings):
    """
    Dispatch prompt against registry, render the result and exit the process.

    - help:                usage on standard output, exit with the configured status.
    - usage errors:        fault and usage on standard error, exit 2.
    - handler failures:    fault on standard error, exit 1.
    - configuration error: fault and traceback on standard error, exit 70.
    - success:             exit with the action handler's status (0 by default).

    settings are forwarded to configure() (program, colorful, fancy, status).
    """
    settings = configure(**settings)
    outcome = dispatch(registry, prompt, status=settings.status)
    fault = outcome.fault

    if fault is not None:
        fault = settle(fault, program=settings.program, colorful=settings.colorful, fancy=settings.fancy)

    if isinstance(fault, UsageExit):
        console = Console(highlight=False)
        emit(render(registry, fault.action or outcome.action, settings=settings, console=console), console=console)
    elif isinstance(fault, ConfigurationError):
        report(fault)
    elif fault is not None:
        console = Console(stderr=True, highlight=False)
        emit(fault, console=console)
        if fault.usage:
            emit(render(registry, fault.action or outcome.action, settings=settings, console=console), console=console)
    sys.exit(outcome.status)


__all__ = (
    "Reply",
    "Outcome",
    "State",
    "Dispatcher",
    "dispatch",
    "run",
)
