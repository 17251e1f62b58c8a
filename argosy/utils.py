"""
Argosy utilities (small helpers shared by the registry, dispatcher and renderers).

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (None is a valid
    option value: it is what a handler receives at the end of input).
- coalesce(value, default=None)
  • Replace Unset with a default, preserving every other value (None included).
- rename(callable, name) / @rename("name")
  • Give generated closures a readable __name__/__qualname__ for tracebacks.
- hook(name, default)
  • Read an optional attribute from the host program's __main__ module.
- ordinal(number) / pluralize(word, count)
  • Wording helpers for diagnostics ("second position", "2 arguments").

Names not in __all__ are internal and may change without notice.
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    - falsy, printable as "Unset", a single instance per process;
    - participates in PEP 604 unions (str | Unset) for isinstance checks;
    - cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is the Unset sentinel, in which case return default.

    Falsy values such as None, 0 or "" are preserved as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    - rename(callable, name) -> callable
    - @rename(name)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def hook(name, default=None, /):
    """
    Look up a host-provided hook on the __main__ module.

    The embedding program customizes behaviour by defining dunder attributes in its
    entry script (for example __prog__ = "tool" or __styles__ = {...}); when the
    attribute is missing, default is returned.
    """
    if not isinstance(name, str):
        raise TypeError("hook() first argument must be a string")
    return getattr(__import__("__main__"), name, default)


@functools.cache
def ordinal(number, /):
    """
    Return an English ordinal for a 1-based position ("first", ..., "11th", "22nd").
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1] if number > 0 else f"{number}th"
    except IndexError:
        pass
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}{({1: 'st', 2: 'nd', 3: 'rd'}).get(number % 10, 'th')}"


@functools.cache
def pluralize(word, count=2, /):
    """
    Best-effort English plural of a single lowercase word when count != 1.

    Only the regular patterns used in diagnostics are covered
    (s/sh/ch/x/z -> +es, consonant+y -> -ies, otherwise +s).
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() argument must be a string")
    if count == 1 or not word:
        return word
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


Unset = UnsetType()
"""
The "not provided" sentinel. Materialize it with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "hook",
    "ordinal",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
