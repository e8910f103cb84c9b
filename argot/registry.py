"""
Argot registry: the declared schema of one command level, and its validator.

A Registry holds
- arguments, in positional match order,
- options, keyed by long name and by short character,
- subcommands, each owning a nested Registry (a tree, children never point back),
- help metadata (name, descr, epilog).

Lifecycle
- register()/add_subcommand() check each addition immediately (duplicate keys,
  kind x narg legality, arguments carrying a key).
- finalize() checks the whole tree once (subcommand position, slot aliasing,
  greedy ambiguity) and freezes it. Matching refuses registries that were not
  finalized, and a finalized registry refuses further additions.

Reserved names
- "--help" and "-h" exist implicitly on every level and cannot be declared.

The subcommand position is always after the last argument: once every argument
is satisfied, the next positional token names the subcommand.
"""
import logging
import re
from types import MappingProxyType
from typing import NamedTuple

from rich.text import Text

from .faults import *
from .parameters import Arity, Kind, Narg, Parameter
from .slots import Namespace
from .utils import *

log = logging.getLogger(__name__)

HELP_LONG = "help"
HELP_SHORT = "h"


class SubCommand(NamedTuple):
    name: str
    registry: "Registry"
    descr: str | Text | None = None


class Registry:
    """
    Ordered/keyed parameter schema for one command level.

    Parameters
    - name: Unset | str
      Program name at the root, used by help and diagnostics. Children are
      named by the subcommand they are attached under.
    - descr / epilog: Unset | str | Text
      Help paragraphs shown above/below the parameter listing.
    - required: bool
      When subcommands are declared, whether one must be selected.
    """

    name = mirror("name")
    descr = mirror("descr")
    epilog = mirror("epilog")
    required = mirror("required")
    finalized = mirror("finalized")

    def __init__(self, name=Unset, /, descr=Unset, epilog=Unset, *, required=True):
        for field, value in (("name", name), ("descr", descr), ("epilog", epilog)):
            if not isinstance(value, str | Text | Unset) or (field == "name" and isinstance(value, Text)):
                raise TypeError(f"registry {field!r} must be a string")
            if isinstance(value, str) and not value.strip():
                raise ValueError(f"registry {field!r} cannot be empty")

        self._name = coalesce(name)
        self._descr = coalesce(descr)
        self._epilog = coalesce(epilog)
        self._required = bool(required)
        self._finalized = False

        self._parameters = []
        self._arguments = []
        self._options = {}
        self._shorts = {}
        self._subcommands = {}

    @property
    def parameters(self):
        """Every declared parameter, in registration order."""
        return tuple(self._parameters)

    @property
    def arguments(self):
        """Positional arguments, in match order."""
        return tuple(self._arguments)

    @property
    def options(self):
        """Options keyed by long name."""
        return MappingProxyType(self._options)

    @property
    def shorts(self):
        """Options keyed by short character."""
        return MappingProxyType(self._shorts)

    @property
    def subcommands(self):
        """Subcommands keyed by name, in insertion order."""
        return MappingProxyType(self._subcommands)

    def long(self, name, /):
        return self._options.get(name)

    def short(self, char, /):
        return self._shorts.get(char)

    def _frozen(self, action):
        if self._finalized:
            raise RegistryFrozenError(
                f"cannot {action}: registry {self._name or '<root>'!r} is finalized",
                hint="declare every parameter and subcommand before calling finalize()",
            )

    def register(self, parameter, /):
        """
        Add a parameter and return it.

        Raises
        - RegistryFrozenError: the registry was finalized.
        - IllegalNargForKindError: an argument declared with a zero or optional arity.
        - IllegalKeyForKindError: an argument declared with a short name.
        - DuplicateNameError: the name, its dest or the short character is taken
          (including the reserved --help/-h), or the dest of a slotless parameter
          is one of the namespace methods (see Namespace.__reserved__).
        """
        self._frozen("register a parameter")
        if not isinstance(parameter, Parameter):
            raise TypeError("register() argument must be a parameter")

        match parameter:
            case Parameter(kind=Kind.ARGUMENT, narg=Narg(arity=Arity.ZERO | Arity.OPTIONAL)):
                raise IllegalNargForKindError(
                    f"argument {parameter.name!r} cannot take narg {str(parameter.narg)!r}",
                    parameter=parameter,
                    hint="zero and optional arities are for options only; use an option or narg='*'",
                )
            case Parameter(kind=Kind.ARGUMENT, short=str()):
                raise IllegalKeyForKindError(
                    f"argument {parameter.name!r} cannot have a short name",
                    parameter=parameter,
                    hint="arguments are matched by position; declare an option to use a key",
                )

        if parameter in self._parameters:
            raise DuplicateNameError(
                f"{parameter.kind.value} {parameter.name!r} is already registered",
                parameter=parameter,
                name=parameter.name,
            )

        if parameter.kind is Kind.OPTION and parameter.name == HELP_LONG:
            raise DuplicateNameError(
                "option '--help' is reserved",
                parameter=parameter,
                name=parameter.name,
                hint="help is provided on every level; pick another name",
            )
        if parameter.short == HELP_SHORT:
            raise DuplicateNameError(
                "short option '-h' is reserved",
                parameter=parameter,
                name=parameter.short,
                hint="help is provided on every level; pick another short name",
            )
        if parameter.slot is None and parameter.dest in Namespace.__reserved__:
            raise DuplicateNameError(
                f"{parameter.kind.value} dest {parameter.dest!r} is reserved by the namespace",
                parameter=parameter,
                name=parameter.name,
                hint="pick another name or give the parameter an explicit slot",
            )

        for other in self._parameters:
            if other.name == parameter.name or other.dest == parameter.dest:
                raise DuplicateNameError(
                    f"{parameter.kind.value} name {parameter.name!r} is already used by {other.kind.value} {other.label!r}",
                    parameter=parameter,
                    name=parameter.name,
                )
            if parameter.short and other.short == parameter.short:
                raise DuplicateNameError(
                    f"short option '-{parameter.short}' is already used by {other.label!r}",
                    parameter=parameter,
                    name=parameter.short,
                )

        self._parameters.append(parameter)
        if parameter.kind is Kind.ARGUMENT:
            self._arguments.append(parameter)
        else:
            self._options[parameter.name] = parameter
            if parameter.short:
                self._shorts[parameter.short] = parameter

        log.debug("registered %s %r (narg=%s) on %r", parameter.kind.value, parameter.label, parameter.narg, self._name)
        return parameter

    def _descendants(self):
        for subcommand in self._subcommands.values():
            yield subcommand.registry
            yield from subcommand.registry._descendants()

    def add_subcommand(self, name, registry, /, descr=Unset):
        """
        Attach registry under name and return it.

        Raises
        - RegistryFrozenError: this registry was finalized.
        - DuplicateSubcommandNameError: name is taken on this level or is one of
          the namespace methods.
        - ValueError: name is malformed, or attaching would create a cycle.
        """
        self._frozen("add a subcommand")
        if not isinstance(name, str):
            raise TypeError("add_subcommand() first argument must be a string")
        if not re.fullmatch(r"[^\W_][\w.-]*", name):
            raise ValueError(f"subcommand name {name!r} must be a word not starting with a dash")
        if not isinstance(registry, Registry):
            raise TypeError("add_subcommand() second argument must be a registry")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError("add_subcommand() 'descr' must be a string")
        if name in self._subcommands:
            raise DuplicateSubcommandNameError(
                f"subcommand {name!r} is already declared",
                name=name,
            )
        if name in Namespace.__reserved__:
            raise DuplicateSubcommandNameError(
                f"subcommand name {name!r} is reserved by the namespace",
                name=name,
                hint="pick another name; %s are namespace methods" % ", ".join(sorted(Namespace.__reserved__)),
            )
        if registry is self or any(child is self for child in registry._descendants()):
            raise ValueError(f"subcommand {name!r} would make the registry contain itself")

        self._subcommands[name] = SubCommand(name, registry, coalesce(descr, registry.descr))
        log.debug("attached subcommand %r under %r", name, self._name)
        return registry

    def subcommand(self, name, /, descr=Unset, epilog=Unset, *, required=True):
        """
        Create, attach and return an empty child registry named name.
        """
        return self.add_subcommand(name, Registry(name, descr, epilog, required=required))

    def _validate(self, slots, path):
        where = " ".join(path) or self._name or "<root>"

        # keys must resolve to a single option; rebuilt from the declaration list
        keys = {}
        for parameter in self._parameters:
            for key in parameter.keys:
                if keys.setdefault(key, parameter) is not parameter:
                    raise DuplicateNameError(
                        f"key {key!r} resolves to more than one option in {where!r}",
                        parameter=parameter,
                        name=key,
                    )

        for name in self._subcommands:
            for parameter in self._parameters:
                if parameter.dest == name.replace("-", "_"):
                    raise DuplicateNameError(
                        f"subcommand {name!r} clashes with {parameter.kind.value} {parameter.label!r} in {where!r}",
                        parameter=parameter,
                        name=name,
                    )

        greedy = [parameter for parameter in self._arguments if parameter.narg.greedy]
        if self._subcommands and greedy:
            raise IllegalSubcommandPositionError(
                f"greedy argument {greedy[0].name!r} would swallow the subcommand name in {where!r}",
                parameter=greedy[0],
                hint="give the argument an exact narg or move it into the subcommands",
            )
        if len(greedy) > 1:
            trigger(GreedyArgumentsWarning(
                f"arguments {', '.join(repr(parameter.name) for parameter in greedy)} are all greedy in {where!r}",
                hint="only an option between them can end the first capture",
                parameters=tuple(greedy),
            ), stacklevel=5 + len(path))

        slots = dict(slots)
        for parameter in self._parameters:
            if parameter.slot is None:
                continue
            if (other := slots.setdefault(parameter.slot, parameter)) is not parameter:
                raise AliasedSlotError(
                    f"{parameter.label!r} and {other.label!r} write the same slot {parameter.slot!r}",
                    parameter=parameter,
                    hint="give every parameter its own slot",
                )

        for subcommand in self._subcommands.values():
            subcommand.registry._validate(slots, path + (subcommand.name,))

        if not self._finalized:
            log.debug("finalized registry %r", where)
        self._finalized = True

    def finalize(self):
        """
        Validate the whole tree below this registry, freeze it and return it.

        Raises
        - DuplicateNameError: a key resolves to several options, or a subcommand
          name clashes with a parameter dest.
        - IllegalSubcommandPositionError: a greedy argument precedes the subcommands.
        - AliasedSlotError: two parameters on one root-to-leaf path share a slot.

        Warns
        - GreedyArgumentsWarning: more than one greedy argument on a level.
        """
        if not self._finalized:
            self._validate({}, ())
        return self

    def __rich_repr__(self):
        yield "name", self._name
        yield "arguments", self.arguments
        yield "options", tuple(self._options.values())
        yield "subcommands", tuple(self._subcommands)
        yield "finalized", self._finalized

    def __repr__(self):
        return f"registry({', '.join(f'{name}={value!r}' for name, value in self.__rich_repr__())})"


__all__ = (
    "SubCommand",
    "Registry",
)
