"""
Argot utilities (small helpers shared by every layer).

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided", distinct from None (None is a legitimate
    default for output slots, so it cannot double as "missing").

- coalesce(value, default=None)
  • Materialize Unset into a concrete default while keeping falsey values ("" / 0 / None).

- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__ for readable tracebacks.

- mirror("attr")
  • Read-only property exposing self._attr; containers are handed out as copies so
    a parameter or registry cannot be mutated through its public surface.

- pluralize(word) / ordinal(number)
  • Wording helpers for diagnostics ("2 values", "at third position").

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Boolean-false, printable as "Unset", one instance per process and sealed
    against subclassing. Use the exported Unset instance, never the type.
    """

    def __or__(self, other, /):
        # PEP 604 unions in isinstance() checks: str | Unset
        try:
            return other | type(self)
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
    Return object unless it is Unset, in which case return default.

    Falsey values such as None, 0, "" or [] are returned as-is; only the
    sentinel is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable.

    - rename(callable, name) renames in place and returns the callable.
    - rename(name) returns a decorator doing the same.
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


def _detach(object):
    # Fresh containers all the way down; tuples stay tuples so metadata keeps its shape.
    if isinstance(object, tuple):
        return tuple(map(_detach, object))
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_detach, object))
    if isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    if isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Build a read-only property reading self._<name>.

    Container values are copied on every access, so callers may freely mutate
    what they receive without touching the owner.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(word, /):
    """
    Pluralize a single lowercase English word used in diagnostics.

    Only the regular rules are covered (s/sh/ch/x/z -> es, consonant+y -> ies);
    diagnostics never need irregular nouns.
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() argument must be a string")
    if not word:
        return word
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def quantify(count, word, /):
    """
    Format a count with its noun: quantify(1, "value") -> "1 value".
    """
    return f"{count} {word if count == 1 else pluralize(word)}"


@functools.cache
def ordinal(number, /):
    """
    Return an English ordinal for a 1-based position.

    1..10 are spelled out ("first" ... "tenth"); anything else is numeric
    with the right suffix ("11th", "22nd", "103rd").
    """
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1] if number > 0 else f"{number}th"
    except IndexError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Sentinel for "not provided".

Use it as a default where None is a value a caller may legitimately pass,
then materialize with coalesce().
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "quantify",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
