"""
Argosy registry: declarations of actions, options and positional parameters.

What this module provides
- Action, Option, Param: immutable declaration records.
- Registry: the single, exclusively-owned store of declarations. It is filled during
  setup through declare_action/declare_option/declare_param and only read afterwards
  by the dispatcher and the usage renderer.

Conventions
- MAIN names the root action. It always exists (with its -h/--help option) even if
  it was never declared; declaring it attaches a handler and help text.
- A trailing MARKER (":") on an option's short or long name means the option must
  consume a value token. Keys are stored with the marker as declared, so lookups
  retry with the marker appended.
- A positional parameter's name ends with an optional cardinality suffix:
  none (exactly one), "+" (one or more), "?" (zero or one), "*" (zero or more).
- Every declaration overwrites whatever was stored under the same key. Nothing is
  validated at declaration time; malformed declarations surface during dispatch.

Quick example
    >>> registry = Registry()
    >>> registry.declare_action("create", on_create, "create a widget")
    >>> registry.declare_param("create", "name", "widget name")
    >>> registry.declare_option("create", "o:", "output:", on_output, "write to OUTPUT")
"""
from typing import NamedTuple

from loguru import logger

from .faults import UsageExit
from .utils import rename

MAIN = "MAIN"
MARKER = ":"
SUFFIXES = ("+", "?", "*")


class Action(NamedTuple):
    name: str
    handler: object = None
    help: str | None = None


class Option(NamedTuple):
    action: str
    short: str | None
    long: str | None
    handler: object
    help: str | None = None
    mandatory: bool = False

    @property
    def flags(self):
        """
        display forms, short first ("-o", "--output").
        """
        return tuple(
            prefix + name for prefix, name in (("-", self.short), ("--", self.long)) if name
        )

    @property
    def argname(self):
        """
        value placeholder for mandatory options (OUTPUT_FILE for --output-file), else None.
        """
        if not self.mandatory:
            return None
        return (self.long or self.short).replace("-", "_").upper()


class Param(NamedTuple):
    action: str
    name: str
    help: str | None = None

    @property
    def cardinality(self):
        return self.name[-1] if self.name.endswith(SUFFIXES) else ""

    @property
    def label(self):
        return self.name[:-1] if self.cardinality else self.name

    @property
    def required(self):
        """
        number of tokens this parameter requires (plain and "+" require one).
        """
        return int(self.cardinality in ("", "+"))


def _strip(name):
    if not name:
        return None, False
    if name.endswith(MARKER):
        return name[:-len(MARKER)], True
    return name, False


def _helper(action):
    @rename("help")
    def helper(value=None, /):
        raise UsageExit(action=action)
    helper.__doc__ = f"show the usage of action {action!r} and exit"
    return helper


class Registry:
    """
    Store of every declaration, keyed per action.

    Layout
    - actions: name -> Action
    - options: (action, declared name) -> Option; an option is reachable by its
      short and its long key.
    - params:  action -> (declared name -> Param), in declaration order.
    """

    def __init__(self):
        self._actions = {}
        self._options = {}
        self._params = {}
        self._declare_helper(MAIN)

    def _declare_helper(self, action):
        self.declare_option(action, "h", "help", _helper(action), "show this help message and exit")

    def declare_action(self, action, handler=None, help=None, /):
        """
        Declare (or redeclare) an action and its -h/--help option.

        handler is a callable taking the positional token list, an import reference
        string ("package.module:attribute") resolved at dispatch time, or None for a
        handler-less action.
        """
        if action in self._actions:
            logger.trace("action {!r} redeclared", action)
        self._actions[action] = Action(action, handler, help)
        self._declare_helper(action)
        return handler

    def declare_option(self, action, short, long, handler, help=None, /):
        """
        Declare an option under action, reachable by its short and long names.

        Either name may be None. A trailing MARKER on either name makes the option
        mandatory-valued. handler is called with the candidate value and replies
        with its consumption (see argosy.dispatcher.Reply).
        """
        short_name, short_mandatory = _strip(short)
        long_name, long_mandatory = _strip(long)
        option = Option(action, short_name, long_name, handler, help, short_mandatory or long_mandatory)
        for key, name in ((short, short_name), (long, long_name)):
            if not name:
                continue
            # A spelling is stored once, with or without the marker.
            other = name if key.endswith(MARKER) else name + MARKER
            if self._options.pop((action, other), None) is not None or (action, key) in self._options:
                logger.trace("option {!r} of action {!r} overwritten", name, action)
            self._options[action, key] = option
        return handler

    def declare_param(self, action, name, help=None, /):
        """
        Declare a positional parameter of action; name carries its cardinality suffix.
        """
        params = self._params.setdefault(action, {})
        if name in params:
            logger.trace("parameter {!r} of action {!r} overwritten", name, action)
        params[name] = Param(action, name, help)

    def action(self, name, /):
        """
        the Action declared under name; MAIN resolves to a bare Action when undeclared.
        """
        try:
            return self._actions[name]
        except KeyError:
            return Action(MAIN) if name == MAIN else None

    def actions(self):
        """
        sub-actions (every declared action except MAIN), in declaration order.
        """
        return tuple(action for name, action in self._actions.items() if name != MAIN)

    def option(self, action, name, /):
        """
        the Option reachable as name under action, retrying with MARKER appended.
        """
        try:
            return self._options[action, name]
        except KeyError:
            return self._options.get((action, name + MARKER))

    def options(self, action, /):
        """
        distinct options still reachable under action, in declaration order.
        """
        distinct = {}
        for (owner, _), option in self._options.items():
            if owner == action:
                distinct.setdefault(id(option), option)
        return tuple(distinct.values())

    def flags(self, action, option, /):
        """
        display forms of option that still reach it under action, short first.

        a later declaration may take over one spelling and leave the other.
        """
        return tuple(
            prefix + name for prefix, name in (("-", option.short), ("--", option.long))
            if name and self.option(action, name) is option
        )

    def names(self, action, /):
        """
        every flag spelling (with dashes) reachable under action.
        """
        return tuple(
            ("--" if len(name.rstrip(MARKER)) > 1 else "-") + name.rstrip(MARKER)
            for owner, name in self._options if owner == action
        )

    def params(self, action, /):
        return tuple(self._params.get(action, {}).values())

    def required(self, action, /):
        """
        number of positional tokens action requires.
        """
        return sum(param.required for param in self.params(action))

    def __contains__(self, action):
        return action == MAIN or action in self._actions

    def __rich_repr__(self):
        yield "actions", tuple(self._actions)
        yield "options", len(self._options)
        yield "params", sum(map(len, self._params.values()))

    def __repr__(self):
        return "registry(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "MAIN",
    "MARKER",
    "Action",
    "Option",
    "Param",
    "Registry",
)
