"""
Runtime settings for rendering and exiting.

Settings are resolved once per run by configure(), in this order:
- explicit keyword arguments,
- hook attributes on the host's __main__ module
  (__prog__, __colorful__, __fancy__, __status__),
- defaults: basename(sys.argv[0]), no colour, no panel, help status 0.

They only affect presentation and the help exit status; parsing never reads them.
"""
import os.path
import sys
from typing import NamedTuple

from .utils import Unset, coalesce, hook


class Settings(NamedTuple):
    program: str
    colorful: bool = False
    fancy: bool = False
    status: int = 0


def configure(*, program=Unset, colorful=Unset, fancy=Unset, status=Unset):
    """
    build a Settings value from overrides, __main__ hooks and defaults.
    """
    program = coalesce(program, hook("__prog__", os.path.basename(sys.argv[0])))
    if not isinstance(program, str) or not (program := program.strip()):
        raise ValueError("configure() 'program' must be a non-empty string")

    return Settings(
        program=program,
        colorful=bool(coalesce(colorful, hook("__colorful__", False))),
        fancy=bool(coalesce(fancy, hook("__fancy__", False))),
        status=integral(coalesce(status, hook("__status__", 0)), "configure()"),
    )


def integral(status, where, /):
    """
    return status if it is usable as an exit status (an int, not a bool).
    """
    if not isinstance(status, int) or isinstance(status, bool):
        raise TypeError("%s 'status' must be an integer" % where)
    return status


__all__ = (
    "Settings",
    "configure",
)
