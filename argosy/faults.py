"""
Argosy faults (parse errors and signals) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the engine can surface.
  Codes are grouped by domain so logs and searches stay predictable.
- ParserFault: base exception. A fault is a value carrier: it holds a message plus
  read-only options (action, token, hint, ...) and knows how to render itself with
  rich. Faults are never printed where they are raised; the dispatcher converts them
  into an Outcome and the outermost runner renders them and exits once.
- Concrete kinds:
  • UnrecognizedOptionError   an option token has no declaration for the action.
  • MissingActionError        no handler-bearing action could be resolved.
  • MissingArgumentsError     fewer positional tokens than required.
  • MissingValueError         a value-taking option is the last token.
  • HandlerFailureError       an option handler replied ok=False.
  • ConfigurationError        a declared handler cannot be resolved or misbehaves.
  • UsageExit                 the help signal (not an error).

Every fault class declares
- code:   FaultCode
- title:  short, lowercased headline
- status: process exit status (instances may override through the "status" option)
- usage:  whether the action's usage text accompanies the fault

Host customization (through __main__)
- __codes__:  mapping FaultCode -> label, used by FaultCode.normalize().
- __styles__: palette overrides for the rich rendering.
- __prog__:   program name shown in the header.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, hook


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - signals (100xx):        USAGE
    - routing (111 0x):       MISSING_ACTION
    - options (111 1x):       UNRECOGNIZED_OPTION, MISSING_VALUE
    - positionals (111 2x):   MISSING_ARGUMENTS
    - delegated (111 3x):     HANDLER_FAILURE
    - configuration (111 4x): CONFIGURATION
    """
    # --- signals ---
    USAGE               = 10001

    # --- routing ---
    MISSING_ACTION      = 11101

    # --- options ---
    UNRECOGNIZED_OPTION = 11111
    MISSING_VALUE       = 11112

    # --- positionals ---
    MISSING_ARGUMENTS   = 11121

    # --- delegated ---
    HANDLER_FAILURE     = 11131

    # --- configuration ---
    CONFIGURATION       = 11141

    def normalize(self):
        """
        return a host-normalized label for this code (__codes__ on __main__),
        or the numeric value as a string.
        """
        return str(hook("__codes__", {}).get(self, self.value))


class ParserFault(Exception):
    code = Unset
    title = "fault"
    status = 1
    usage = False

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)
        self.status = options.get("status", type(self).status)

    @property
    def action(self):
        """
        the action under which the fault was detected, or None.
        """
        return self.options.get("action")

    def __str__(self):
        return self.message if self.message is not Unset else self.title

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | hook("__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        program = self.options.get("program") or hook("__prog__", os.path.basename(sys.argv[0]))
        code = self.code.normalize() if self.code else "?"

        header = Text.assemble(
            "[ ",
            text(program, "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        if hint := self.options.get("hint"):
            body = Group(message, Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        else:
            body = Group(message)

        if self.options.get("fancy", False):
            return Panel(body, title=header, title_align="left")
        return Group(header, body)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        # Keep the origin so reports still show where the fault was raised.
        fault.__cause__ = self.__cause__
        return fault.with_traceback(self.__traceback__)


class UnrecognizedOptionError(ParserFault):
    code = FaultCode.UNRECOGNIZED_OPTION
    title = "unrecognized option"
    status = 2
    usage = True


class MissingActionError(UnrecognizedOptionError):
    code = FaultCode.MISSING_ACTION
    title = "missing action"


class MissingArgumentsError(ParserFault):
    code = FaultCode.MISSING_ARGUMENTS
    title = "missing arguments"
    status = 2
    usage = True

    @property
    def found(self):
        return self.options.get("found", 0)

    @property
    def expected(self):
        return self.options.get("expected", 0)


class MissingValueError(MissingArgumentsError):
    code = FaultCode.MISSING_VALUE
    title = "missing option value"


class HandlerFailureError(ParserFault):
    code = FaultCode.HANDLER_FAILURE
    title = "handler failure"
    status = 1


class ConfigurationError(ParserFault):
    code = FaultCode.CONFIGURATION
    title = "configuration error"
    status = 70


class UsageExit(ParserFault):
    """
    help signal raised by the auto-registered -h/--help handlers.

    it carries no message; the runner prints the usage of its action to standard
    output and exits with its status (0 unless overridden by configuration).
    """
    code = FaultCode.USAGE
    title = "usage"
    status = 0
    usage = True

    def __rich__(self):
        return Text("")


def settle(fault, /, **options):
    """
    return a copy of fault with the given runtime options merged in.

    options that are Unset are ignored, so callers can forward optional context
    (program, colorful, fancy, status) without filtering it first.
    """
    if not isinstance(fault, ParserFault):
        raise TypeError("settle() argument must be a parser fault")
    return copy.replace(fault, **{name: value for name, value in options.items() if value is not Unset})


__all__ = (
    "FaultCode",
    "ParserFault",
    "UnrecognizedOptionError",
    "MissingActionError",
    "MissingArgumentsError",
    "MissingValueError",
    "HandlerFailureError",
    "ConfigurationError",
    "UsageExit",
    "settle",
)
