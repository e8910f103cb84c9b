"""
Subcommand dispatch: match a token stream level by level down the registry tree.

Each level gets its own Matcher. When a level names a subcommand, that level is
closed and every remaining token is matched against the subcommand's registry,
recursively. The result is one Route per visited level, root first; nothing is
bound yet, so a help request or an error anywhere leaves every slot untouched.
"""
import logging
from typing import NamedTuple

from .faults import HelpRequested
from .matcher import Dispatch, Help, Matcher, Matches
from .registry import Registry
from .utils import Unset, coalesce

log = logging.getLogger(__name__)


class Route(NamedTuple):
    registry: Registry
    path: tuple[str, ...]
    matches: Matches

    @property
    def selected(self):
        """Name of the subcommand this level handed over to, or None."""
        return self.matches.selected.name if self.matches.selected else None


def dispatch(registry, tokens, /, path=(), prog=Unset):
    """
    Match classified tokens against registry and its selected subcommands.

    path holds the subcommand names leading to registry and prog the program
    name, both only used to word hints and help requests.

    Raises
    - HelpRequested: a help token was met on some level.
    - ParseError: any matching error, from whichever level met it.
    """
    tokens = tuple(tokens)
    path = tuple(path)
    prog = coalesce(prog, registry.name or "<prog>")
    matcher = Matcher(registry, path, prog)

    for position, token in enumerate(tokens):
        match matcher.feed(token):
            case Help():
                raise HelpRequested(registry, path)
            case Dispatch(subcommand=subcommand):
                route = Route(registry, path, matcher.close())
                log.debug("handing %d tokens to %r", len(tokens) - position - 1, subcommand.name)
                return (route,) + dispatch(
                    subcommand.registry, tokens[position + 1:], path + (subcommand.name,), prog
                )

    return (Route(registry, path, matcher.close()),)


__all__ = (
    "Route",
    "dispatch",
)
