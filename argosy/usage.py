"""
Usage rendering: help text derived entirely from registry contents.

render(registry, action) returns a rich renderable made of
- the summary line:
    usage: <program> [<action>] [-h] [-o OUTPUT] {create, remove} <name> [extra]...
  options in declaration order (short form preferred, ARGNAME for value-taking
  options), the sub-action set for MAIN, then the positional placeholders:
    <name>      exactly one         <name>...   one or more
    [name]      zero or one         [name]...   zero or more
  wrapped to the console width with a hanging indent;
- the action's help text as a description paragraph;
- the "command line actions" (MAIN only), "positional parameters" and "optional
  arguments" blocks, each only when non-empty, with the help column aligned at a
  fixed indent.

Rendering is pure and never fails: missing data yields missing sections. Printing and
exiting belong to the runner (argosy.dispatcher.run).

Palette keys (override through __styles__ on __main__; ignored unless colorful)
- usage-label, program-name, action-name, description-section
- block-label, option-name, metavar, param-name, argument-description
- panel-title
"""
from collections import defaultdict, deque

from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.text import Text

from .registry import MAIN
from .settings import configure
from .utils import Unset, hook

PADDING = 2   # Leading spaces before the names column
INDENT = 24   # Column where help text starts


def _placeholder(param, text):
    label = text(param.label, "param-name")
    match param.cardinality:
        case "+":
            return Text.assemble("<", label, ">...")
        case "?":
            return Text.assemble("[", label, "]")
        case "*":
            return Text.assemble("[", label, "]...")
        case _:
            return Text.assemble("<", label, ">")


def render(registry, action=MAIN, /, *, settings=Unset, console=Unset):
    """
    Build the usage renderable of action.

    Parameters
    - registry: Registry holding the declarations.
    - action: action name (MAIN by default).
    - settings: Settings for program name, colour and panel; configure() when Unset.
    - console: Console used for width and wrapping; a default Console when Unset.
    """
    settings = configure() if settings is Unset else settings
    console = Console() if console is Unset else console

    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "action-name": "bold #36C5F0",
        "description-section": "italic #A3A3A3",

        # === Blocks ===
        "block-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "param-name": "bold #22C55E",
        "argument-description": "#9CA3AF",

        # === Fancy panel ===
        "panel-title": "bold #FF4D94",
    } | hook("__styles__", {}))

    def text(fragment, style=""):
        if not settings.colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    width = console.width - 4 * settings.fancy
    renders = []

    # Summary line
    usage = Text()
    usage.append(text("usage", "usage-label")).append(": ")
    usage.append(text(settings.program, "program-name"))
    if action != MAIN:
        usage.append(" ").append(text(action, "action-name"))
    usage.append(" ")

    offset = len(usage)
    inputs = deque()

    options = [(x, flags) for x in registry.options(action) if (flags := registry.flags(action, x))]

    for option, flags in options:
        input = Text.assemble("[", text(flags[0], "option-name"))
        if option.argname:
            input.append(" ").append(text(option.argname, "metavar"))
        inputs.append(input.append("]"))

    if action == MAIN and (actions := registry.actions()):
        inputs.append(Text.assemble(
            "{", Text(", ").join(text(x.name, "action-name") for x in actions), "}"
        ))

    for param in registry.params(action):
        inputs.append(_placeholder(param, text))

    try:
        lines = Lines([inputs.popleft()])
    except IndexError:
        lines = Lines()

    while inputs:
        if len(lines[-1]) + 1 + len(input := inputs.popleft()) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)

    try:
        usage.append(lines.pop(0))
    except IndexError:
        usage.rstrip()
    for line in lines:
        usage.append("\n").append(" " * offset).append(line)

    renders.append(usage.append("\n"))

    # Description paragraph
    if descr := getattr(registry.action(action), "help", None):
        renders.append(text(descr, "description-section").append("\n"))

    def block(label, rows):
        section = Text()
        section.append(text(label, "block-label")).append(":\n")
        for names, descr in rows:
            row = Text(" " * PADDING).append(names)
            if descr:
                if len(row) >= INDENT - 1:
                    row.append("\n").append(" " * INDENT)
                else:
                    row.append(" " * (INDENT - len(row)))
                wrapped = text(descr, "argument-description").wrap(console, max(width - INDENT, 1))
                try:
                    row.append(wrapped.pop(0))
                except IndexError:
                    pass
                for line in wrapped:
                    row.append("\n").append(" " * INDENT).append(line)
            section.append(row).append("\n")
        return section

    blocks = []

    if action == MAIN and (actions := registry.actions()):
        blocks.append(block("command line actions", (
            (text(x.name, "action-name"), x.help) for x in actions
        )))

    if params := registry.params(action):
        blocks.append(block("positional parameters", (
            (text(x.label, "param-name"), x.help) for x in params
        )))

    if options:
        rows = []
        for option, flags in options:
            names = Text(", ").join(text(flag, "option-name") for flag in flags)
            if option.argname:
                names.append(" ").append(text(option.argname, "metavar"))
            rows.append((names, option.help))
        blocks.append(block("optional arguments", rows))

    if blocks:
        renders.append(Text("\n").join(blocks))

    renders[-1].rstrip()

    renderable = Group(*renders)

    if settings.fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[ ", f"{settings.program} HELP".upper(), " ]", style=styles["panel-title"] if settings.colorful else ""),
            title_align="left",
        )

    return renderable


__all__ = (
    "render",
)
