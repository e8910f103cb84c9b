"""
Token classification: one raw argv entry in, one typed token out.

Rules (applied in order)
- "--name" / "--name=value"   -> LongOption; split at the first "=" only, so
  "--key=a=b" has the value "a=b" and "--key=" the empty value "".
- "-abc" / "-abc=value"       -> ShortCluster; every character before the first
  "=" is a short flag, the value (if any) belongs to the last flag.
- anything else               -> Positional, including a lone "-" (stdin by
  convention) and the empty string.

value is None when no "=" was present, which keeps "--key=" (empty value)
distinct from "--key" (value expected in the next token).

index is the 0-based position of the entry in the argument vector. It is kept
absolute when the tail of the vector is handed to a subcommand, so diagnostics
always point at the right entry.
"""
from typing import NamedTuple

from .faults import MalformedTokenError
from .utils import ordinal


class Positional(NamedTuple):
    text: str
    index: int


class LongOption(NamedTuple):
    name: str
    value: str | None
    text: str
    index: int

    @property
    def key(self):
        return "--" + self.name


class ShortCluster(NamedTuple):
    chars: str
    value: str | None
    text: str
    index: int


def _split(body):
    name, separator, value = body.partition("=")
    return name, value if separator else None


def classify(tokens, /, start=0):
    """
    Classify every raw entry of tokens; start is the index of the first one.

    Raises
    - MalformedTokenError: an entry is not a string.
    """
    classified = []
    for index, token in enumerate(tokens, start):
        if not isinstance(token, str):
            raise MalformedTokenError(
                "entry at %s position is not a string (got %s)" % (ordinal(index + 1), type(token).__name__),
                token=repr(token),
                index=index,
                hint="pass the argument vector as a list of strings",
            )
        if token.startswith("--"):
            classified.append(LongOption(*_split(token[2:]), token, index))
        elif token.startswith("-") and len(token) > 1:
            classified.append(ShortCluster(*_split(token[1:]), token, index))
        else:
            classified.append(Positional(token, index))
    return tuple(classified)


def is_help(token, /):
    """
    True for "--help" without inline value and for any short cluster holding
    "h". An inline value belongs to the last flag of a cluster, so only a
    trailing "h" with a value ("-h=1", "-vh=1") is not a help request.
    """
    match token:
        case LongOption(name="help", value=None):
            return True
        case ShortCluster(chars=chars, value=None):
            return "h" in chars
        case ShortCluster(chars=chars):
            return "h" in chars[:-1]
    return False


__all__ = (
    "Positional",
    "LongOption",
    "ShortCluster",
    "classify",
    "is_help",
)
