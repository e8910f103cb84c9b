"""
Argot parser: the public entry point tying the pieces together.

    registry ──finalize()──> Parser(registry).parse(argv)
                                 │
            classify ─> dispatch (one Matcher per level) ─> bind (per level)

- parse() is the library surface: it returns the namespace, or raises a
  ParseError (user mistake) or HelpRequested (-h/--help was given). Every level
  is matched before anything is bound, so a failure or a help request leaves
  all slots untouched; a conversion failure during binding keeps the writes
  made before it.
- run() / invoke() is the process surface: it reads sys.argv when no prompt is
  given, prints help and exits 0, or prints the error followed by the usage of
  the failing level and exits 1. Configuration errors are not handled here;
  they are programming mistakes and propagate.

Quick start
    from argot import Parser, Registry, argument, option, switch

    registry = Registry("copy", "copy files around")
    registry.register(argument("sources", "+"))
    registry.register(option("dest", "d"))
    registry.register(switch("force", "f", default=False))

    namespace = Parser(registry.finalize()).run()
    print(namespace.sources, namespace.dest, namespace.force)
"""
import os.path
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from . import help
from .binder import bind
from .dispatch import dispatch
from .faults import *
from .registry import Registry
from .slots import Namespace
from .tokens import classify
from .utils import *


class Parser:
    """
    Parse argument vectors against a finalized Registry tree.

    Parameters
    - registry: Registry
      Root of the schema. Must be finalized before the first parse.
    - prog: Unset | str
      Program name for usage lines and fault headers. Defaults to the
      registry name, then to the basename of sys.argv[0].
    - colorful: bool
      Style help and faults with the palette (see argot.help / argot.faults).
    - fancy: bool
      Wrap help and faults in rich panels.
    """

    registry = mirror("registry")
    prog = mirror("prog")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __init__(self, registry, /, prog=Unset, *, colorful=False, fancy=False):
        if not isinstance(registry, Registry):
            raise TypeError("Parser() first argument must be a registry")
        if not isinstance(prog, str | Unset):
            raise TypeError("Parser() 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError("Parser() 'prog' cannot be empty")

        self._registry = registry
        self._prog = coalesce(prog, registry.name or os.path.basename(sys.argv[0]) or "<prog>")
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    def _lookup(self, path):
        registry = self._registry
        for name in path:
            try:
                registry = registry.subcommands[name].registry
            except KeyError:
                raise LookupError(f"no subcommand {' '.join(path)!r} under {self._prog!r}") from None
        return registry

    def usage(self, path=(), /, **options):
        """Usage line (rich Text) of the level reached through path."""
        return help.usage(self._lookup(path), path, self._prog, colorful=self._colorful, **options)

    def help(self, path=(), /, **options):
        """Help page (rich renderable) of the level reached through path."""
        return help.render(
            self._lookup(path), path, self._prog, colorful=self._colorful, fancy=self._fancy, **options
        )

    def parse(self, tokens, /, namespace=Unset):
        """
        Match and bind tokens; return the namespace holding slot-less parameters.

        Raises
        - RegistryNotReadyError: the registry was not finalized.
        - HelpRequested: -h/--help was met (nothing was bound).
        - ParseError: the tokens do not fit the schema, or a value failed conversion.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        if not isinstance(namespace, Namespace | Unset):
            raise TypeError("parse() 'namespace' must be a namespace")

        routes = dispatch(self._registry, classify(tokens), prog=self._prog)

        namespace = coalesce(namespace, Namespace())
        target = namespace
        for route in routes:
            bind(route.matches, target, route.path)
            if route.selected is not None:
                target = target.select(route.selected)
        return namespace

    def run(self, prompt=Unset, /, namespace=Unset):
        """
        Parse like a command-line program would.

        prompt
        - Unset: tokens come from sys.argv[1:].
        - str: split with shlex.split.
        - Iterable[str]: used as-is.

        Prints help and exits 0 on -h/--help. On a parse error prints the fault,
        the argument line with a caret under the offending token and the usage
        of the failing level to stderr, then exits 1.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("run() argument must be a string or an iterable of strings")
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens, namespace)
        except HelpRequested as request:
            Console().print(self.help(request.path))
            sys.exit(0)
        except ParseError as error:
            trigger(
                error,
                prog=self._prog,
                shell=True,
                colorful=self._colorful,
                fancy=self._fancy,
                usage=self.usage(error.path),
                context=tuple(tokens),
            )

    def __invoke__(self, prompt=Unset):
        return self.run(prompt)

    def __rich_repr__(self):
        yield "registry", self._registry
        yield "prog", self._prog
        yield "colorful", self._colorful
        yield "fancy", self._fancy

    def __repr__(self):
        return f"parser({self._prog!r}, colorful={self._colorful!r}, fancy={self._fancy!r})"


def invoke(object, prompt=Unset, /):
    """
    Convenience runner.

    - object implementing __invoke__ (a Parser): run it with prompt.
    - a Registry: finalize it, wrap it in a Parser and run that.
    Returns the parsed namespace.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, Registry):
        return invoke(Parser(object.finalize()), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must be a registry or implement __invoke__ method") from None


__all__ = (
    "Parser",
    "invoke",
)
