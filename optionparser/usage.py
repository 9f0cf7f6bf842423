"""
optionparser usage rendering.

Pure, read-only functions from a schema (and transitively its modes) to help
text. Everything is assembled as rich Text so the same rendering serves both
the colored console (when the schema is colorful) and plain strings
(Text.plain) for hosts and tests.

Layout
    usage: PROG [MODE-PATH] [OPTIONS] {MODE ...|PROGRAM PROGRAM_ARGUMENTS...|ARGS}

    <description, word-wrapped>

    where MODE is one of:
      add     add vectors
      cross   cross-product of vectors

    options:
      --count=INT [-n]  number of times to run

Wrapping
- Greedy: words are appended to the current line while they fit; a word is
  never split, so a line only exceeds the width when one word alone does.
- Option/mode lists use two columns; the left column is as wide as its widest
  entry, capped at option_max_size (entries wider than the cap get their
  description on the following lines).

Palette keys (override through a __styles__ mapping in __main__)
- usage-label, program-name, mode-path, description-section, group-label,
  option-name, metavar, short-code, mode-name, argument-description,
  tree-mode, tree-description
"""
import math
import os.path
import sys
from collections import defaultdict

from rich.containers import Lines
from rich.text import Text

from .utils import coalesce
from .valuetypes import label_of


def _palette(parser):
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "mode-path": "bold #36C5F0",  # SKY-BLUE → softer than cyan
        "description-section": "italic #A3A3A3",  # Neutral gray

        # === Groups / options ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "option-name": "bold #00E6FF",  # CYAN for options
        "metavar": "bold #FFD600",  # AMBER for parameters
        "short-code": "bold #22C55E",  # GREEN for short codes
        "mode-name": "bold #36C5F0",
        "argument-description": "#9CA3AF",  # Muted gray

        # === Mode tree ===
        "tree-mode": "bold #36C5F0",
        "tree-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    colorful = bool(getattr(parser, "colorful", False))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def program_name(parser, program=None, /):
    """
    Resolve the program name shown in usage text.

    Order: explicit argument, __prog__ in __main__, the root schema's
    program_name, then the basename of sys.argv[0].
    """
    if program:
        return program
    if prog := getattr(__import__("__main__"), "__prog__", None):
        return prog
    if prog := parser.root.program_name:
        return prog
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "program"


def _tokenize(text):
    """
    Whitespace split that keeps explicit newlines as standalone "\\n" items.
    """
    for index, line in enumerate(str(text).split("\n")):
        if index:
            yield "\n"
        yield from line.split()


def wordwrap(text, width, /):
    """
    Greedy word-wrap of a string into a list of lines no wider than width
    (except lines holding a single over-long word). Explicit newlines force a
    break.
    """
    if width < 1:
        raise ValueError("wordwrap() width must be positive")

    lines = []
    line = ""
    for token in _tokenize(text):
        if token == "\n":
            lines.append(line)
            line = ""
        elif not line:
            line = token
        elif len(line) + 1 + len(token) > width:
            lines.append(line)
            line = token
        else:
            line += " " + token
    if line:
        lines.append(line)
    return lines


def format_two_column(left_indent, left_max, separator, total_width, left_column, right_column, /):
    """
    Lay out (left, right) pairs as two aligned columns.

    - left_column: sequence of str | Text (never wrapped).
    - right_column: sequence of already wrapped line lists (str | Text).

    Returns a rich Lines of Text, one per output line.
    """
    output = Lines()
    widest = max((len(left) for left in left_column), default=0)
    left_size = min(widest, left_max)
    right_size = max(total_width - left_indent - left_size - separator, 1)

    for left, right in zip(left_column, right_column):
        wrapped = [Text(line) if isinstance(line, str) else line for line in right]
        if len(left) > left_size or not wrapped:
            output.append(Text.assemble(" " * left_indent, left))
            start = 0
        else:
            output.append(Text.assemble(
                " " * left_indent,
                left,
                " " * (left_size - len(left) + separator),
                wrapped[0],
            ))
            start = 1
        for line in wrapped[start:]:
            output.append(Text.assemble(" " * (left_indent + left_size + separator), line))
    return output


def _positional_suffix(parser, styler):
    if parser.modes:
        return [Text("MODE", styler("metavar")), Text("...")]
    if parser.wrapper:
        return [Text("PROGRAM", styler("metavar")), Text("PROGRAM_ARGUMENTS...", styler("metavar"))]
    match parser.positionals:
        case False:
            return []
        case True:
            return [Text("[ARGUMENTS...]", styler("metavar"))]
        case tuple() as types:
            return [Text(label_of(value_type), styler("metavar")) for value_type in types]
        case value_type:
            return [Text("[%s...]" % label_of(value_type), styler("metavar"))]


def render_usage(
        parser,
        /,
        width=80,
        option_max_size=None,
        separator=2,
        show_hidden=False,
        show_nonhidden=True,
        program=None,
):
    """
    Render the help text of one schema as rich Text.

    Parameters
    - width: target line width.
    - option_max_size: cap of the left column (default: ceil(width / 5)).
    - separator: spaces between the two columns.
    - show_hidden / show_nonhidden: which options are listed.
    - program: program name override (see program_name()).
    """
    styler = _palette(parser)
    option_max_size = option_max_size or math.ceil(width / 5)
    separator = separator or 2
    indent = 2

    # Usage line: program, mode path, [OPTIONS], trailing-token suffix.
    head = Text.assemble(("usage", styler("usage-label")), ": ", (program_name(parser, program), styler("program-name")))
    inputs = [Text(keyword, styler("mode-path")) for keyword in parser.path]
    if parser.options:
        inputs.append(Text("[OPTIONS]"))
    inputs.extend(_positional_suffix(parser, styler))

    offset = len(head) + 1
    lines = Lines()
    for input in inputs:
        if lines and len(lines[-1]) + 1 + len(input) > width - offset:
            lines.append(input)
        elif lines:
            lines[-1].append(Text(" ") + input)
        else:
            lines.append(input)

    usage = Text.assemble(head)
    for index, line in enumerate(lines):
        usage.append(" " if index == 0 else "\n" + " " * offset).append(line)

    renders = [usage]

    if parser.description:
        renders.append(Text(""))
        for line in wordwrap(parser.description, width):
            renders.append(Text(line, styler("description-section")))

    if parser.modes:
        renders.append(Text(""))
        renders.append(Text.assemble("where ", ("MODE", styler("metavar")), " is one of:"))
        left, right = [], []
        for keyword, child in parser.modes.items():
            entry = Text(keyword, styler("mode-name"))
            if aliases := parser.aliases_of(keyword):
                entry.append(" (%s)" % ", ".join(aliases))
            left.append(entry)
            right.append(coalesce(child.short_description, "") or "")
        renders.extend(_columns(indent, option_max_size, separator, width, left, right, styler))

    renders.append(Text(""))
    renders.append(Text("options", styler("group-label")).append(":"))
    left, right = [], []
    for argument in parser.options:
        if argument.hidden and not show_hidden:
            continue
        if not argument.hidden and not show_nonhidden:
            continue
        entry = Text("--" + argument.name, styler("option-name"))
        if argument.requires_argument():
            entry.append("=").append(argument.label, styler("metavar"))
        for code in argument.short_codes:
            entry.append(" [").append("-" + code, styler("short-code")).append("]")
        left.append(entry)
        right.append(argument.description)
    if not left:
        renders.append(Text(" " * indent + "None"))
    renders.extend(_columns(indent, option_max_size, separator, width, left, right, styler))

    return Text("\n").join(renders)


def _columns(indent, option_max_size, separator, width, left, right, styler):
    widest = max((len(entry) for entry in left), default=0)
    right_size = max(width - indent - min(widest, option_max_size) - separator, 1)
    wrapped = [
        [Text(line, styler("argument-description")) for line in wordwrap(item, right_size)]
        for item in right
    ]
    return format_two_column(indent, option_max_size, separator, width, left, wrapped)


def render_all(parser, /, show_hidden=True, show_nonhidden=True, **options):
    """
    Render a schema's help followed by the help of every descendant mode,
    each under a "--- options for MODE-PATH ---" banner (depth-first).
    """
    renders = [render_usage(parser, show_hidden=show_hidden, show_nonhidden=show_nonhidden, **options)]
    stack = list(reversed(parser.modes.values()))
    while stack:
        child = stack.pop()
        renders.append(Text(""))
        renders.append(Text("--- options for %s ---" % " ".join(child.path)))
        renders.append(render_usage(child, show_hidden=show_hidden, show_nonhidden=show_nonhidden, **options))
        stack.extend(reversed(child.modes.values()))
    return Text("\n").join(renders)


def render_mode_tree(parser, /, program=None, width=80):
    """
    Render the tree of mode keywords below a schema, one mode per line,
    indented two spaces per level, with its short description.
    """
    styler = _palette(parser)
    renders = [Text(" ".join((program_name(parser, program), *parser.path)), styler("program-name"))]

    def walk(node, depth):
        for keyword, child in node.modes.items():
            line = Text.assemble(" " * (2 * depth), (keyword, styler("tree-mode")))
            if aliases := node.aliases_of(keyword):
                line.append(" (%s)" % ", ".join(aliases))
            if child.short_description:
                line.append(" - ").append(child.short_description, styler("tree-description"))
            renders.append(line)
            walk(child, depth + 1)

    walk(parser, 1)
    return Text("\n").join(renders)


__all__ = (
    "wordwrap",
    "format_two_column",
    "program_name",
    "render_usage",
    "render_all",
    "render_mode_tree",
)
