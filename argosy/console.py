"""
Output collaborators used by the runner.

- emit(renderable, stderr=False, console=Unset): write text or a rich renderable to standard output
  (requested help) or standard error (failures), or to the given console.
- report(fault, status=Unset): diagnostics for defects in the embedding program; prints
  the fault followed by its traceback on standard error and terminates the process.

Consoles are created per call so that redirected sys.stdout/sys.stderr are honoured.
"""
import sys

from rich.console import Console
from rich.traceback import Traceback

from .utils import Unset, coalesce


def emit(renderable, /, *, stderr=False, console=Unset):
    console = Console(stderr=stderr, highlight=False) if console is Unset else console
    console.print(renderable)


def report(fault, /, *, status=Unset):
    """
    print fault and its call-stack trace to standard error, then exit.

    the exit status defaults to the fault's own status attribute, or 1.
    """
    console = Console(stderr=True, highlight=False)
    console.print(fault)
    console.print(Traceback.from_exception(type(fault), fault, fault.__traceback__))
    sys.exit(coalesce(status, getattr(fault, "status", 1)))


__all__ = (
    "emit",
    "report",
)
