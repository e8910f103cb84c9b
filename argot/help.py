"""
Argot help: usage lines and help pages rendered with rich from registry metadata.

Layout
    usage: prog sub [-h] [-c COUNT] [-v] SRC [DST ...] {build,test} ...

    description paragraph

    ╭──────────── subcommands ────────────╮
    │ name   help                          │
    ╰──────────────────────────────────────╯

    positional arguments:
      SRC            what to read
    options:
      -h, --help     show this help message and exit
      -c, --count COUNT
                     how many times

    epilog paragraph

Arity grammar: exactly(n) repeats the placeholder n times, "+" renders
"NAME [NAME ...]", "*" renders "[NAME ...]", "?" renders "[NAME]" and
switches show no placeholder. Choices replace the placeholder with "{a,b}";
choices declared with descriptions are listed one per line under the entry.

Palette keys
- usage-label, program-name, description-section, epilog-section
- group-label, argument-description
- option-name, switch-name, metavar, greedy-metavar, choice
- children-title, children-table, children, children-description
- panel-title

Define a __styles__ mapping in __main__ to override any entry; styling is only
applied when colorful is True.
"""
from collections import defaultdict, deque

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .parameters import Arity, Kind
from .registry import HELP_LONG, HELP_SHORT
from .utils import *

_palette = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "description-section": "italic #A3A3A3",  # Neutral gray
    "epilog-section": "#737373",  # Dim footer gray

    # === Groups / parameters ===
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",

    # === Names / metavars ===
    "option-name": "bold #00E6FF",
    "switch-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "greedy-metavar": "bold italic #FFD600",
    "choice": "bold #FF4D94",

    # === Subcommands table ===
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",
    "children": "bold #36C5F0",
    "children-description": "#9CA3AF",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}

HELP_DESCR = "show this help message and exit"


def _styling(colorful):
    styles = defaultdict(str, _palette | getattr(__import__("__main__"), "__styles__", {}))

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

    return styler, text


def _placeholder(parameter, styler, text):
    if parameter.choices:
        return Text.assemble(
            "{",
            Text(",").join(text(choice, styler("choice")) for choice in map(str, parameter.choices)),
            "}",
        )
    style = "greedy-metavar" if parameter.narg.greedy else "metavar"
    return text(parameter.placeholder, styler(style))


def _values(parameter, styler, text):
    """Placeholder shaped by arity, or None for switches."""
    placeholder = _placeholder(parameter, styler, text)
    match parameter.narg.arity:
        case Arity.ZERO:
            return None
        case Arity.OPTIONAL:
            return Text.assemble("[", placeholder, "]")
        case Arity.ANY:
            return Text.assemble("[", placeholder, " ...]")
        case Arity.AT_LEAST_ONE:
            return Text.assemble(placeholder, " [", placeholder.copy(), " ...]")
        case Arity.EXACTLY:
            return Text(" ").join(placeholder.copy() for _ in range(parameter.narg.count))


def _keys(parameter, styler, text):
    style = "switch-name" if parameter.narg.arity is Arity.ZERO else "option-name"
    return Text(", ").join(text(key, styler(style)) for key in reversed(parameter.keys))


def _subcommands(registry, styler, text):
    names = Text(",").join(text(name, styler("children")) for name in registry.subcommands)
    choice = Text.assemble("{", names, "} ...")
    return choice if registry.required else Text.assemble("[", choice, "]")


def usage(registry, path=(), /, prog=Unset, *, colorful=False, width=Unset, console=Unset):
    """
    Build the usage line of registry (reached through path) as rich Text.
    """
    styler, text = _styling(colorful)
    console = coalesce(console, Console())
    width = coalesce(width, console.width)
    prog = coalesce(prog, registry.name or "<prog>")

    line = Text()
    line.append("usage", styler("usage-label")).append(":")
    line.append(" ")
    line.append(text(" ".join((prog,) + tuple(path)), styler("program-name")))
    line.append(" ")

    offset = len(line)  # hanging indent for wrapped items
    inputs = deque([Text.assemble("[", text("-" + HELP_SHORT, styler("switch-name")), "]")])

    for parameter in registry.parameters:
        if parameter.hidden or parameter.kind is not Kind.OPTION:
            continue
        key = text("-" + parameter.short if parameter.short else "--" + parameter.name, styler(
            "switch-name" if parameter.narg.arity is Arity.ZERO else "option-name"
        ))
        if (values := _values(parameter, styler, text)) is not None:
            inputs.append(Text.assemble("[", key, " ", values, "]"))
        else:
            inputs.append(Text.assemble("[", key, "]"))

    for parameter in registry.arguments:
        if not parameter.hidden:
            inputs.append(_values(parameter, styler, text))

    if registry.subcommands:
        inputs.append(_subcommands(registry, styler, text))

    lines = Lines([inputs.popleft()])
    while inputs:
        if len(lines[-1]) + 1 + len(input := inputs.popleft()) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)

    line.append(lines.pop(0))
    for extra in lines:
        line.append("\n").append(" " * offset).append(extra)
    return line


def _entry(head, descr, styler, text, console, width):
    padding = 2  # before the names column
    indent = 17  # description column

    section = Text(" " * padding).append(head)
    if descr := text(descr, styler("argument-description")):
        if len(section) >= indent - 1:
            section.append("\n").append(" " * indent)
        else:
            section.append(" " * (indent - len(section)))
        wrapped = descr.wrap(console, max(width - indent, 8))
        section.append(wrapped.pop(0))
        for line in wrapped:
            section.append("\n").append(" " * indent).append(line)
    return section


def _legend(parameter, styler, text, console, width):
    """Choice descriptions listed under a parameter, one entry per choice."""
    section = Text()
    for choice, descr in parameter.legend.items():
        head = Text("  ").append(text(str(choice), styler("choice")))
        section.append(_entry(head, descr, styler, text, console, width)).append("\n")
    return section


def render(registry, path=(), /, prog=Unset, *, colorful=False, fancy=False, width=Unset, console=Unset):
    """
    Build the full help page of registry (reached through path) as a rich renderable.
    """
    styler, text = _styling(colorful)
    console = coalesce(console, Console())
    width = coalesce(width, console.width) - 4 * fancy  # panel gutters
    prog = coalesce(prog, registry.name or "<prog>")

    renders = [usage(registry, path, prog, colorful=colorful, width=width, console=console).append("\n")]

    if registry.descr:
        renders.append(text(registry.descr, styler("description-section")).append("\n"))

    if registry.subcommands:
        table = Table(
            "name", "help",
            title=text("subcommands", styler("children-title")),
            width=int(width * (2 / 3)),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for name, subcommand in registry.subcommands.items():
            if subcommand.descr:
                descr = text(subcommand.descr, styler("children-description"))
            else:
                descr = Text.assemble(
                    text("no description", styler("children-description")),
                    " — ",
                    text(f"run '{' '.join((prog,) + tuple(path) + (name,))} --help' for details"),
                )
            table.add_row(text(name, styler("children")), descr)
        renders.append(table)

    groups = Text()

    if arguments := [parameter for parameter in registry.arguments if not parameter.hidden]:
        groups.append(text("positional arguments", styler("group-label"))).append(":\n")
        for parameter in arguments:
            head = _placeholder(parameter, styler, text)
            groups.append(_entry(head, parameter.descr, styler, text, console, width)).append("\n")
            groups.append(_legend(parameter, styler, text, console, width))
        groups.append("\n")

    groups.append(text("options", styler("group-label"))).append(":\n")
    head = Text(", ").join(text(key, styler("switch-name")) for key in ("-" + HELP_SHORT, "--" + HELP_LONG))
    groups.append(_entry(head, HELP_DESCR, styler, text, console, width)).append("\n")
    for parameter in registry.parameters:
        if parameter.hidden or parameter.kind is not Kind.OPTION:
            continue
        head = _keys(parameter, styler, text)
        if (values := _values(parameter, styler, text)) is not None:
            head = Text.assemble(head, " ", values)
        groups.append(_entry(head, parameter.descr, styler, text, console, width)).append("\n")
        groups.append(_legend(parameter, styler, text, console, width))

    renders.append(groups)

    if registry.epilog:
        renders.append(text(registry.epilog, styler("epilog-section")).append("\n"))

    renders[-1].rstrip()

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{' '.join((prog,) + tuple(path))} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )
    return renderable


__all__ = (
    "usage",
    "render",
)
