r"""
Argot parameter model: what a program declares it accepts.

Overview
- Kind: ARGUMENT (positional, order-significant) or OPTION (named, keyed by a
  long name and optionally a single-character short name).
- Narg: arity as a closed (arity, count) variant.
  • Narg.exactly(n)   n >= 1 values
  • Narg.AT_LEAST_ONE one or more values, greedily ("+")
  • Narg.ANY          zero or more values, greedily ("*")
  • Narg.ZERO         a switch: no value token, records a fixed value (0)
  • Narg.OPTIONAL     exactly one value when present, may be absent ("?")
  Narg.parse() also accepts the short notations shown in parentheses and
  positive integers.
- Parameter: one declared argument or option with its converter, output slot
  and help metadata. Read-only after construction.
- argument() / option() / switch(): the construction surface.

Metadata (sanitized on construction)
- name: long name of an option ("dry-run" for --dry-run) or label of an argument.
  Must match r"[^\W\d]\w*(-\w+)*" and carry no leading dashes.
- short: Unset | single character that is not whitespace, "-" or "=".
- narg: anything Narg.parse() accepts; defaults to Narg.exactly(1).
- type: callable converter from str, may raise to reject a value.
- slot: Unset | Slot. Unset means "write into the parse namespace under dest".
- default: written when the parameter receives nothing; Unset leaves the slot alone.
- target: value a switch records when triggered (True unless given).
- choices: allowed converted values; duplicates rejected unless a Set. A
  mapping gives each choice a description (the legend) listed in help.
- metavar / descr / hidden: help presentation.

Whether a kind may use a narg or a key is decided by the Registry (see
argot.registry), so this layer accepts any combination and the registry reports
it with the proper configuration error.

Quick example:
    >>> from argot.parameters import argument, option, switch
    >>> files = argument("files", "+")
    >>> count = option("count", "c", type=int)
    >>> verbose = switch("verbose", "v")
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping, Set
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from rich.text import Text

from .slots import Slot
from .utils import *


class Kind(Enum):
    ARGUMENT = "argument"
    OPTION = "option"


class Arity(Enum):
    EXACTLY = "n"
    AT_LEAST_ONE = "+"
    ANY = "*"
    ZERO = "0"
    OPTIONAL = "?"


class Narg(NamedTuple):
    """
    How many value tokens a parameter takes.

    lower/upper are the inclusive bounds (upper is None when unbounded),
    greedy tells whether the capture runs until interrupted, collection whether
    the bound value is a list rather than a single value.
    """
    arity: Arity
    count: int = 0

    @classmethod
    def exactly(cls, count, /):
        if not isinstance(count, int) or isinstance(count, bool):
            raise TypeError("Narg.exactly() argument must be an integer")
        if count < 1:
            raise ValueError("Narg.exactly() argument must be a positive integer")
        return cls(Arity.EXACTLY, count)

    @classmethod
    def parse(cls, object, /):
        """
        Normalize a Narg or one of the notations "?", "+", "*", 0, n >= 1.

        Hand-built Narg instances are checked like the notations: an exactly
        arity needs a positive integer count, the other arities ignore count
        and map to their shared constants.
        """
        match object:
            case Narg(arity=Arity.EXACTLY, count=count):
                return cls.exactly(count)
            case Narg(arity=Arity.OPTIONAL):
                return cls.OPTIONAL
            case Narg(arity=Arity.AT_LEAST_ONE):
                return cls.AT_LEAST_ONE
            case Narg(arity=Arity.ANY):
                return cls.ANY
            case Narg(arity=Arity.ZERO):
                return cls.ZERO
            case Narg():
                raise TypeError("narg arity must be an Arity")
            case bool():
                raise TypeError("narg must be a string or an integer")
            case "?":
                return cls.OPTIONAL
            case "+":
                return cls.AT_LEAST_ONE
            case "*":
                return cls.ANY
            case 0:
                return cls.ZERO
            case int() if object > 0:
                return cls.exactly(object)
            case int():
                raise ValueError("narg must be zero or a positive integer")
            case str():
                raise ValueError("narg must be one of '?', '+', or '*'")
            case _:
                raise TypeError("narg must be a string or an integer")

    @property
    def lower(self):
        match self.arity:
            case Arity.EXACTLY:
                return self.count
            case Arity.AT_LEAST_ONE | Arity.OPTIONAL:
                return 1
            case Arity.ANY | Arity.ZERO:
                return 0

    @property
    def upper(self):
        match self.arity:
            case Arity.EXACTLY:
                return self.count
            case Arity.OPTIONAL:
                return 1
            case Arity.ZERO:
                return 0
            case Arity.ANY | Arity.AT_LEAST_ONE:
                return None

    @property
    def greedy(self):
        return self.arity in (Arity.ANY, Arity.AT_LEAST_ONE)

    @property
    def collection(self):
        return self.greedy or (self.arity is Arity.EXACTLY and self.count > 1)

    def __str__(self):
        return str(self.count) if self.arity is Arity.EXACTLY else self.arity.value

    def __repr__(self):
        if self.arity is Arity.EXACTLY:
            return f"narg.exactly({self.count})"
        return f"narg({self.arity.value!r})"


Narg.AT_LEAST_ONE = Narg(Arity.AT_LEAST_ONE)
Narg.ANY = Narg(Arity.ANY)
Narg.ZERO = Narg(Arity.ZERO)
Narg.OPTIONAL = Narg(Arity.OPTIONAL, 1)


class ParameterType(type):
    """
    Metaclass giving parameters a typename, read-only fields and stable reprs.

    - __typename__ is derived from the class name and used in messages.
    - every name in __introspectable__ becomes a read-only property over "_<name>".
    - __repr__/__rich_repr__ list the introspectable fields (or __displayable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    # name: required word; short: optional single character.
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d]\w*(-\w+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a word without leading dashes (got {name!r})")
    metadata["name"] = name

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short.isspace() or short in "-="):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character other than '-' or '='")
    metadata["short"] = coalesce(short)


def _sanitize_values(cls, metadata, /):
    metadata["narg"] = Narg.parse(coalesce(metadata["narg"], Narg.exactly(1)))

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if not isinstance(metadata["slot"], Slot | Unset):
        raise TypeError(f"{cls.__typename__} 'slot' must be a slot")
    metadata["slot"] = coalesce(metadata["slot"])

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be a non-string iterable")
    legend = {}
    if isinstance(choices, Mapping):
        # choice -> description, shown under the parameter in help
        for choice, descr in choices.items():
            if not isinstance(descr, str | Text):
                raise TypeError(f"{cls.__typename__} choice descriptions must be strings")
            elif isinstance(descr, str) and not (descr := descr.strip()):
                raise ValueError(f"{cls.__typename__} choice descriptions cannot be empty")
            legend[choice] = descr
        choices = legend.keys()
    if not isinstance(choices, Set):
        # Reject duplicates and keep declaration order for help.
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = sanitized
    metadata["choices"] = tuple(choices)
    metadata["legend"] = MappingProxyType(legend)


def _sanitize_display(cls, metadata, /):
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Parameter(metaclass=ParameterType):
    """
    One declared argument or option.

    Instances are immutable records; the registry decides whether they are
    legal and the matcher/binder read them. Identity matters: two parameters
    with identical metadata are still two parameters.
    """

    __introspectable__ = (
        "kind",
        "name",
        "short",
        "narg",
        "type",
        "slot",
        "default",
        "target",
        "choices",
        "legend",
        "metavar",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "kind",
        "name",
        "short",
        "narg",
        "default",
        "choices",
    )

    def __new__(
            cls,
            kind,
            name,
            /,
            short=Unset,
            *,
            narg=Unset,
            type=str,
            slot=Unset,
            default=Unset,
            target=True,
            choices=(),
            metavar=Unset,
            descr=Unset,
            hidden=False,
    ):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")

        metadata = {
            "kind": kind,
            "name": name,
            "short": short,
            "narg": narg,
            "type": type,
            "slot": slot,
            "default": default,
            "target": target,
            "choices": choices,
            "metavar": metavar,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_names(cls, metadata)
        _sanitize_values(cls, metadata)
        _sanitize_display(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def dest(self):
        """Namespace key used when no explicit slot was given."""
        return self._name.replace("-", "_")

    @property
    def keys(self):
        """Command-line spellings matching this parameter ("--name", "-n")."""
        if self._kind is Kind.ARGUMENT:
            return ()
        return ("--" + self._name,) + (("-" + self._short,) if self._short else ())

    @property
    def label(self):
        """Name used in diagnostics: "--name" for options, the name for arguments."""
        return "--" + self._name if self._kind is Kind.OPTION else self._name

    @property
    def placeholder(self):
        """Value placeholder for help: the metavar, or the upper-cased name."""
        return coalesce(self._metavar, self._name.upper().replace("-", "_"))


def argument(name, narg=Unset, /, **options):
    """
    Declare a positional argument.

        argument("src")             one value
        argument("pair", 2)         exactly two values
        argument("files", "+")      one or more, greedy
    """
    return Parameter(Kind.ARGUMENT, name, narg=narg, **options)


def option(name, short=Unset, /, narg=Unset, **options):
    """
    Declare a value-bearing option.

        option("output", "o")               --output FILE / -o FILE / --output=FILE
        option("include", "I", "*")         zero or more values
        option("count", type=int)           converted with int()
    """
    return Parameter(Kind.OPTION, name, short, narg=narg, **options)


def switch(name, short=Unset, /, target=True, **options):
    """
    Declare a switch: an option taking no value that records target when present.
    """
    return Parameter(Kind.OPTION, name, short, narg=Narg.ZERO, target=target, **options)


__all__ = (
    # Enumerations
    "Kind",
    "Arity",

    # Types
    "Narg",
    "Parameter",

    # Constructors
    "argument",
    "option",
    "switch",
)

# Keep the metaclass out of star-imports and docs.
del ParameterType
