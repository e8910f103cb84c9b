"""
Argot faults (errors, warnings and signals) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every issue the engine reports.
  Codes are grouped by domain: 11xxx parse errors, 12xxx warnings,
  21xxx configuration errors.
- ConfigurationError: programmer mistakes in a declared schema. Raised while a
  Registry is built or finalized, never while parsing real input. Each one is
  also a TypeError/ValueError/RuntimeError so generic handlers keep working.
- ParseError: user mistakes in an argument vector. Carries the offending token,
  its position, the parameter in context, a title and a single hint, and knows
  how to render itself with rich.
- RegistryWarning: questionable but legal schemas (e.g. several greedy
  arguments), surfaced through the warnings module.
- HelpRequested: the help short-circuit; a signal, not an error.
- trigger(): surface a fault with runtime options (raise, or print and exit).

UX goals
- Position-first, lowercase messages ("unknown option '--colour' at third position").
- One sentence per message, one actionable hint.
- Given the argument vector as the context option, the rendering repeats the
  argument line with a caret under the offending token.
- Styles are overridable through a __styles__ mapping in __main__, codes
  through a __codes__ mapping (see FaultCode.normalize()).
"""
import shlex
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_SUBCOMMAND
    - options (1111x): MALFORMED_TOKEN, UNKNOWN_OPTION, DUPLICATE_OPTION, TOO_MANY_VALUES
    - positionals (1112x): UNEXPECTED_POSITIONAL, MISSING_REQUIRED_VALUE
    - values (1113x): INVALID_VALUE, INVALID_CHOICE
    - warnings (121xx): GREEDY_ARGUMENTS
    - configuration (211xx): everything a Registry rejects
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option errors (11xxx) ---
    MALFORMED_TOKEN             = 11111
    UNKNOWN_OPTION              = 11112
    DUPLICATE_OPTION            = 11115
    TOO_MANY_VALUES             = 11118

    # --- positional errors (11xxx) ---
    UNEXPECTED_POSITIONAL       = 11121
    MISSING_REQUIRED_VALUE      = 11122

    # --- value errors (11xxx) ---
    INVALID_VALUE               = 11131
    INVALID_CHOICE              = 11132

    # --- warnings (12xxx) ---
    GREEDY_ARGUMENTS            = 12121

    # --- configuration errors (21xxx) ---
    DUPLICATE_NAME              = 21101
    ILLEGAL_NARG_FOR_KIND       = 21102
    ILLEGAL_KEY_FOR_KIND        = 21103
    DUPLICATE_SUBCOMMAND_NAME   = 21111
    ILLEGAL_SUBCOMMAND_POSITION = 21112
    ALIASED_SLOT                = 21121
    REGISTRY_NOT_READY          = 21131
    REGISTRY_FROZEN             = 21132

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to
        relabel numeric ids; without one the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    # Shared rich layout: bracketed header, message, argument line with caret,
    # hint line, then usage if any.
    main = __import__("__main__")
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", fault.options.get("prog", "argot")), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.code.normalize() if fault.code else "-", styler("code")),
        " | ",
        text(fault.title.title(), styler("title")),
        " ]"
    )
    parts = [text(fault.message, styler("message"))]
    if context := fault.options.get("context"):
        # the argument line as typed, caret under the token at index (past the end when None)
        quoted = [shlex.quote(token) for token in context]
        index = fault.options.get("index")
        offset = sum(len(token) + 1 for token in quoted[:index])
        parts.append(text(" ".join(quoted), styler("context")))
        parts.append(Text.assemble(" " * offset, text("^", styler("caret"))))
    if fault.hint:
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint"))))
    if usage := fault.options.get("usage"):
        parts.append(usage)

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class Fault(Exception):
    """
    Base of every error this package raises on purpose.

    A fault is a message plus a read-only mapping of options (token, index,
    parameter, hint, prog, colorful, ...). Subclasses pin their default code and
    title through __code__/__title__; explicit options win.
    """
    __code__ = Unset
    __title__ = "fault"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "context": "#E6E6F0",  # argument line as typed
            "caret": "bold #FF4DA6",  # pinky caret under the culprit
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class ConfigurationError(Fault):
    """
    A schema the engine refuses to run. Raised at build time only.
    """
    __title__ = "bad configuration"

    @property
    def parameter(self):
        return self.options.get("parameter")

    @property
    def name(self):
        return self.options.get("name")


class DuplicateNameError(ConfigurationError, ValueError):
    __code__ = FaultCode.DUPLICATE_NAME
    __title__ = "duplicate name"

class IllegalNargForKindError(ConfigurationError, TypeError):
    __code__ = FaultCode.ILLEGAL_NARG_FOR_KIND
    __title__ = "illegal arity"

class IllegalKeyForKindError(ConfigurationError, TypeError):
    __code__ = FaultCode.ILLEGAL_KEY_FOR_KIND
    __title__ = "illegal key"

class DuplicateSubcommandNameError(ConfigurationError, ValueError):
    __code__ = FaultCode.DUPLICATE_SUBCOMMAND_NAME
    __title__ = "duplicate subcommand"

class IllegalSubcommandPositionError(ConfigurationError, ValueError):
    __code__ = FaultCode.ILLEGAL_SUBCOMMAND_POSITION
    __title__ = "illegal subcommand position"

class AliasedSlotError(ConfigurationError, ValueError):
    __code__ = FaultCode.ALIASED_SLOT
    __title__ = "aliased slot"

class RegistryNotReadyError(ConfigurationError, RuntimeError):
    __code__ = FaultCode.REGISTRY_NOT_READY
    __title__ = "registry not ready"

class RegistryFrozenError(ConfigurationError, RuntimeError):
    __code__ = FaultCode.REGISTRY_FROZEN
    __title__ = "registry frozen"


class ParseError(Fault):
    """
    A user-facing error against a real argument vector.

    Options commonly carried
    - token: the raw token text involved (None at end of input).
    - index: 0-based position of that token in the argument vector.
    - parameter: the Parameter in context, when there is one.
    - suggestions: close matches for unknown names.
    """
    __title__ = "bad usage"

    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")

    @property
    def path(self):
        """Subcommand names leading to the level that failed."""
        return self.options.get("path", ())

    @property
    def parameter(self):
        return self.options.get("parameter")


class MalformedTokenError(ParseError):
    __code__ = FaultCode.MALFORMED_TOKEN
    __title__ = "malformed token"

class UnknownOptionError(ParseError):
    __code__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"

class DuplicateOptionError(ParseError):
    __code__ = FaultCode.DUPLICATE_OPTION
    __title__ = "duplicate option"

class UnexpectedPositionalError(ParseError):
    __code__ = FaultCode.UNEXPECTED_POSITIONAL
    __title__ = "unexpected positional"

class MissingRequiredValueError(ParseError):
    __code__ = FaultCode.MISSING_REQUIRED_VALUE
    __title__ = "missing value"

class TooManyValuesError(ParseError):
    __code__ = FaultCode.TOO_MANY_VALUES
    __title__ = "too many values"

class UnknownSubcommandError(ParseError):
    __code__ = FaultCode.UNKNOWN_SUBCOMMAND
    __title__ = "unknown subcommand"


class InvalidValueError(ParseError):
    """
    A raw value the parameter's converter rejected.

    raw holds the offending text, cause the converter's exception (also chained
    as __cause__ by the binder).
    """
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "invalid value"

    @property
    def raw(self):
        return self.options.get("raw")

    @property
    def cause(self):
        return self.options.get("cause")


class InvalidChoiceError(InvalidValueError):
    __code__ = FaultCode.INVALID_CHOICE
    __title__ = "invalid choice"


class RegistryWarning(Fault, Warning):
    """
    A legal but questionable schema. Emitted through warnings.warn().
    """
    __title__ = "questionable configuration"

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "message": "#D6D6DE",  # slightly lighter gray body
            "context": "#E6E6F0",  # argument line as typed
            "caret": "bold #FFC2E0",  # softer caret for warnings
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 2))
        console.print(self)


class GreedyArgumentsWarning(RegistryWarning):
    __code__ = FaultCode.GREEDY_ARGUMENTS
    __title__ = "ambiguous greedy arguments"


class HelpRequested(Exception):
    """
    Raised when -h/--help is met: matching stops and help must be rendered.

    registry is the level whose help was asked for, path the subcommand names
    leading to it (empty at the root).
    """

    def __init__(self, registry, path=(), /):
        super().__init__("help requested")
        self.registry = registry
        self.path = tuple(path)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see Fault).
    - options are merged into a copy of the fault before triggering.
    - with shell=True the fault is printed with rich (parse errors then exit 1);
      otherwise errors are raised and warnings go through warnings.warn().
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "Fault",
    "ConfigurationError",
    "DuplicateNameError",
    "IllegalNargForKindError",
    "IllegalKeyForKindError",
    "DuplicateSubcommandNameError",
    "IllegalSubcommandPositionError",
    "AliasedSlotError",
    "RegistryNotReadyError",
    "RegistryFrozenError",
    "ParseError",
    "MalformedTokenError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "UnexpectedPositionalError",
    "MissingRequiredValueError",
    "TooManyValuesError",
    "UnknownSubcommandError",
    "InvalidValueError",
    "InvalidChoiceError",
    "RegistryWarning",
    "GreedyArgumentsWarning",
    "HelpRequested",
    "trigger",
)
