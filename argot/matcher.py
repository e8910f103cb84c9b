"""
Argot matching engine: a left-to-right state machine over classified tokens.

States
- EXPECTING_TOKEN     nothing open; the next token decides.
- BINDING_POSITIONAL  an argument capture is open and takes positional tokens.
- BINDING_OPTION      an option capture is open and takes positional tokens.
- DONE                input ended (or help/subcommand took over); captures are final.
- FAILED              a ParseError was raised; the matcher is unusable.

Per token
- "--help" / a short cluster holding "h" (unless that "h" is last and carries
  an inline value): matching stops at once and Help is returned, before any
  open capture is checked, so missing values never mask a help request.
- LongOption / ShortCluster: any open capture is closed first (an option token
  always interrupts), then each flag resolves to its option. Switches record
  themselves; an inline "=value" is the whole payload of the option it belongs
  to; otherwise the option opens a capture fed by the following positionals.
- Positional: feeds the open capture (closing it when its upper bound is
  reached), otherwise opens the next pending argument, otherwise names a
  subcommand when all arguments are consumed, otherwise is unexpected.

An interrupted greedy argument is never resumed: later positionals go to the
next argument. Every decision looks at one token; there is no backtracking.

The matcher only collects raw strings (Matches). Converting and writing them
is the binder's job, which runs after the whole subcommand chain matched.
"""
import difflib
import logging
from collections import deque
from enum import Enum
from typing import NamedTuple

from .faults import *
from .parameters import Arity, Kind
from .registry import HELP_LONG, HELP_SHORT, Registry, SubCommand
from .tokens import LongOption, Positional, ShortCluster, is_help
from .utils import *

log = logging.getLogger(__name__)


class State(Enum):
    EXPECTING_TOKEN = "expecting-token"
    BINDING_POSITIONAL = "binding-positional"
    BINDING_OPTION = "binding-option"
    DONE = "done"
    FAILED = "failed"


class Help(NamedTuple):
    token: LongOption | ShortCluster


class Dispatch(NamedTuple):
    subcommand: SubCommand
    token: Positional


class Capture:
    """
    Raw values collected for one parameter, with the token indexes they came from.
    """
    __slots__ = ("parameter", "values", "indexes", "index")

    def __init__(self, parameter, index, /):
        self.parameter = parameter
        self.values = []
        self.indexes = []
        self.index = index

    @property
    def full(self):
        return (upper := self.parameter.narg.upper) is not None and len(self.values) >= upper

    @property
    def satisfied(self):
        return len(self.values) >= self.parameter.narg.lower

    def push(self, value, index, /):
        self.values.append(value)
        self.indexes.append(index)

    def __rich_repr__(self):
        yield "parameter", self.parameter.label
        yield "values", self.values

    def __repr__(self):
        return f"capture({self.parameter.label!r}, {self.values!r})"


class Matches:
    """
    Outcome of one matched level: captures in the order they were opened.

    Lookups go by parameter (matches[parameter]) and return the Capture;
    selected is the SubCommand the level handed over to, if any.
    """

    def __init__(self, registry, captures, selected=None, /):
        self.registry = registry
        self.captures = tuple(captures)
        self.selected = selected
        self._index = {capture.parameter: capture for capture in self.captures}

    def __iter__(self):
        return iter(self.captures)

    def __len__(self):
        return len(self.captures)

    def __contains__(self, parameter):
        return parameter in self._index

    def __getitem__(self, parameter):
        return self._index[parameter]

    def get(self, parameter, default=None, /):
        return self._index.get(parameter, default)

    def __rich_repr__(self):
        yield "captures", self.captures
        yield "selected", self.selected.name if self.selected else None

    def __repr__(self):
        return f"matches({self.captures!r}, selected={self.selected.name if self.selected else None!r})"


class Matcher:
    """
    Match tokens of one command level against a finalized Registry.

    feed() takes one token and returns None, Help or Dispatch; close() applies
    the end-of-input rules and returns Matches. path holds the subcommand names
    leading to registry and prog the program name; both only word diagnostics
    (hints read "run 'git remote --help' ...") and travel with every error.
    """

    def __init__(self, registry, /, path=(), prog=Unset):
        if not isinstance(registry, Registry):
            raise TypeError("Matcher() argument must be a registry")
        if not registry.finalized:
            raise RegistryNotReadyError(
                f"registry {registry.name or '<root>'!r} must be finalized before parsing",
                hint="call finalize() once every parameter and subcommand is declared",
            )
        self._registry = registry
        self._path = tuple(path)
        self._route = " ".join((coalesce(prog, registry.name or "<prog>"),) + self._path)
        self._pending = deque(registry.arguments)
        self._capture = None
        self._captures = []
        self._invoked = set()
        self._selected = None
        self._state = State.EXPECTING_TOKEN

    @property
    def state(self):
        return self._state

    @property
    def capture(self):
        """The open capture, if any."""
        return self._capture

    def _fault(self, cls, message, /, **options):
        return cls(message, path=self._path, **options)

    def _shift(self, state):
        if state is not self._state:
            log.debug("%s: %s -> %s", self._route, self._state.value, state.value)
        self._state = state

    def feed(self, token, /):
        if self._state in (State.DONE, State.FAILED):
            raise RuntimeError(f"matcher is {self._state.value} and takes no more tokens")
        try:
            return self._feed(token)
        except ParseError:
            self._shift(State.FAILED)
            raise

    def _feed(self, token):
        if is_help(token):
            log.debug("%s: help requested at index %d", self._route, token.index)
            self._shift(State.DONE)
            return Help(token)

        match token:
            case LongOption(name=name, value=value):
                self._interrupt(token)
                self._option(self._registry.long(name), token.key, value, token)
            case ShortCluster(chars="", value=value):
                self._interrupt(token)
                raise self._fault(
                    UnknownOptionError,
                    "missing option name in %r at %s position" % (token.text, ordinal(token.index + 1)),
                    token=token.text,
                    index=token.index,
                    hint="write the short option before '=' (for example: -o=<value>)",
                )
            case ShortCluster(chars=chars, value=value):
                self._interrupt(token)
                for position, char in enumerate(chars, 1):
                    last = position == len(chars)
                    self._option(self._registry.short(char), "-" + char, value if last else None, token, head=not last)
            case Positional():
                return self._positional(token)
            case _:
                raise TypeError(f"feed() argument must be a token, not {type(token).__name__}")

    def _keys(self):
        keys = ["--" + HELP_LONG, "-" + HELP_SHORT]
        for parameter in self._registry.parameters:
            if not parameter.hidden:
                keys.extend(parameter.keys)
        return keys

    def _interrupt(self, token):
        if self._capture is not None:
            log.debug("%s: %r interrupts capture of %r", self._route, token.text, self._capture.parameter.label)
            self._close(self._capture, token)

    def _close(self, capture, token=None):
        if self._capture is capture:
            self._capture = None
            self._shift(State.EXPECTING_TOKEN)

        if capture.satisfied:
            return

        parameter = capture.parameter
        got = len(capture.values)
        expects = parameter.narg.lower
        if parameter.narg.arity is Arity.EXACTLY:
            amount = quantify(expects, "value")
        else:
            amount = "at least %s" % quantify(expects, "value")

        if token is None:
            where = "input ended"
        elif token.index == capture.index and got:
            where = "an inline value is a single value"
        elif token.index == capture.index:
            where = "only the last option of a cluster takes values"
        else:
            where = "interrupted by %r at %s position" % (token.text, ordinal(token.index + 1))

        raise self._fault(
            MissingRequiredValueError,
            "%s %r at %s position expects %s but got %d (%s)" % (
                parameter.kind.value, parameter.label, ordinal(capture.index + 1), amount, got, where
            ),
            token=None if token is None else token.text,
            index=None if token is None else token.index,
            parameter=parameter,
            hint="pass %s after %r; run '%s --help' to see the expected usage" % (
                amount, parameter.label, self._route
            ) if parameter.kind is Kind.OPTION else "add the missing values; run '%s --help' to see the expected order" % self._route,
        )

    def _option(self, parameter, key, value, token, *, head=False):
        if parameter is None and key in ("--" + HELP_LONG, "-" + HELP_SHORT):
            # only a trailing "h" carrying the inline value gets here
            raise self._fault(
                TooManyValuesError,
                "help option %r at %s position cannot take a value" % (key, ordinal(token.index + 1)),
                token=token.text,
                index=token.index,
                hint="remove everything from '=' (for example: %s)" % key,
            )

        if parameter is None:
            suggestions = difflib.get_close_matches(key, self._keys(), 5)
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self._route)
            except IndexError:
                hint = "run '%s --help' to see all available options" % self._route
            raise self._fault(
                UnknownOptionError,
                "unknown option %r at %s position" % (key, ordinal(token.index + 1)),
                token=token.text,
                index=token.index,
                suggestions=suggestions,
                hint=hint,
            )

        if parameter in self._invoked:
            raise self._fault(
                DuplicateOptionError,
                "option %r at %s position was already provided" % (key, ordinal(token.index + 1)),
                token=token.text,
                index=token.index,
                parameter=parameter,
                hint="keep a single %r; each option can be given only once" % parameter.label,
            )
        self._invoked.add(parameter)

        capture = Capture(parameter, token.index)
        self._captures.append(capture)
        log.debug("%s: matched option %r from %r", self._route, parameter.label, token.text)

        if parameter.narg.arity is Arity.ZERO:
            if value is not None:
                raise self._fault(
                    TooManyValuesError,
                    "switch %r at %s position cannot take a value" % (key, ordinal(token.index + 1)),
                    token=token.text,
                    index=token.index,
                    parameter=parameter,
                    hint="remove everything from '=' (for example: %s)" % key,
                )
            return

        if value is not None:
            # the inline value is the whole payload
            capture.push(value, token.index)
            self._close(capture, token)
            return

        if head:
            self._close(capture, token)
            return

        self._capture = capture
        self._shift(State.BINDING_OPTION)

    def _positional(self, token):
        if self._capture is not None:
            self._capture.push(token.text, token.index)
            if self._capture.full:
                self._close(self._capture)
            return None

        if self._pending:
            parameter = self._pending.popleft()
            capture = Capture(parameter, token.index)
            capture.push(token.text, token.index)
            self._captures.append(capture)
            log.debug("%s: argument %r opened by %r", self._route, parameter.label, token.text)
            if not capture.full:
                self._capture = capture
                self._shift(State.BINDING_POSITIONAL)
            return None

        subcommands = self._registry.subcommands
        if subcommands and self._selected is None:
            try:
                self._selected = subcommands[token.text]
            except KeyError:
                if not self._registry.required:
                    # optional levels treat stray names as plain extra values
                    raise self._fault(
                        UnexpectedPositionalError,
                        "unexpected positional argument %r at %s position" % (token.text, ordinal(token.index + 1)),
                        token=token.text,
                        index=token.index,
                        hint="remove this extra value or pick one of %s" % ", ".join(map(repr, subcommands)),
                    ) from None
                suggestions = difflib.get_close_matches(token.text, subcommands.keys(), 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see available subcommands" % (
                        suggestions[0], self._route
                    )
                except IndexError:
                    hint = "run '%s --help' to see available subcommands" % self._route
                raise self._fault(
                    UnknownSubcommandError,
                    "unknown subcommand %r at %s position" % (token.text, ordinal(token.index + 1)),
                    token=token.text,
                    index=token.index,
                    suggestions=suggestions,
                    hint=hint,
                ) from None
            log.debug("%s: dispatching to subcommand %r", self._route, token.text)
            return Dispatch(self._selected, token)

        raise self._fault(
            UnexpectedPositionalError,
            "unexpected positional argument %r at %s position" % (token.text, ordinal(token.index + 1)),
            token=token.text,
            index=token.index,
            hint="remove this extra value or run '%s --help' to see the expected usage" % self._route,
        )

    def close(self):
        """
        Apply the end-of-input rules and return the Matches of this level.

        Raises
        - MissingRequiredValueError: the open capture or a pending argument is short of values.
        - UnknownSubcommandError: subcommands are required and none was named.
        """
        if self._state is State.FAILED:
            raise RuntimeError("matcher failed and cannot be closed")
        try:
            if self._capture is not None:
                self._close(self._capture)

            missing = [parameter for parameter in self._pending if parameter.narg.lower > 0]
            if missing:
                raise self._fault(
                    MissingRequiredValueError,
                    "missing %s for argument %r" % (
                        "values" if missing[0].narg.lower > 1 else "value", missing[0].label
                    ),
                    token=None,
                    index=None,
                    parameter=missing[0],
                    missing=tuple(missing),
                    hint="add %s; run '%s --help' to see the expected order" % (
                        ", ".join(parameter.placeholder for parameter in missing), self._route
                    ),
                )

            subcommands = self._registry.subcommands
            if subcommands and self._registry.required and self._selected is None:
                raise self._fault(
                    UnknownSubcommandError,
                    "missing subcommand",
                    token=None,
                    index=None,
                    hint="choose one of %s; run '%s --help' for details" % (
                        ", ".join(map(repr, subcommands)), self._route
                    ),
                )
        except ParseError:
            self._shift(State.FAILED)
            raise

        self._shift(State.DONE)
        return Matches(self._registry, self._captures, self._selected)


__all__ = (
    "State",
    "Help",
    "Dispatch",
    "Capture",
    "Matches",
    "Matcher",
)
