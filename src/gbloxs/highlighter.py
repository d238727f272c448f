"""Syntax highlighting for captured command output.

Each line goes through two independent passes:

1. Classification. ``LINE_RULES`` is evaluated in order and the first matching
   rule gives the structural tag (directory, executable, file), falling back to
   plain. Emphasis is then checked on the content: success vocabulary first,
   error vocabulary second, so a line carrying both ends up with error emphasis.
2. Token decoration. Paths and standalone numbers get their own styles as spans
   on a rich ``Text``. The plain text of the line is never modified.
"""

import re
from enum import Enum

from rich.style import Style
from rich.text import Text


class LineTag(str, Enum):
    """Structural category of one output line."""

    DIRECTORY = "directory"
    EXECUTABLE = "executable"
    FILE = "file"
    PLAIN = "plain"


class Emphasis(str, Enum):
    ERROR = "error"
    SUCCESS = "success"


# Order matters: "-rwx" must be tested before "-rw".
LINE_RULES: list[tuple[re.Pattern[str], LineTag]] = [
    (re.compile(r"^d[rwx-]{9}"), LineTag.DIRECTORY),
    (re.compile(r"^-rwx"), LineTag.EXECUTABLE),
    (re.compile(r"^-rw"), LineTag.FILE),
]

EMPHASIS_RULES: list[tuple[re.Pattern[str], Emphasis]] = [
    (re.compile(r"success|ok|done|complete", re.IGNORECASE), Emphasis.SUCCESS),
    (re.compile(r"error|failed|fatal|exception", re.IGNORECASE), Emphasis.ERROR),
]

PATH_PATTERN = re.compile(r"/[^\s]+|\./[^\s]+|~\w+")
NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b")

TAG_STYLES: dict[LineTag, Style] = {
    LineTag.DIRECTORY: Style(color="color(39)"),
    LineTag.EXECUTABLE: Style(color="color(46)"),
    LineTag.FILE: Style(color="color(252)"),
    LineTag.PLAIN: Style(color="color(252)"),
}

EMPHASIS_STYLES: dict[Emphasis, Style] = {
    Emphasis.ERROR: Style(color="color(196)", bold=True),
    Emphasis.SUCCESS: Style(color="color(46)"),
}

PATH_STYLE = Style(color="color(220)", underline=True)
NUMBER_STYLE = Style(color="color(205)")


def classify_line(line: str) -> LineTag:
    """Structural tag of a raw line; first matching rule wins."""
    for pattern, tag in LINE_RULES:
        if pattern.search(line):
            return tag
    return LineTag.PLAIN


def emphasis_for(line: str) -> Emphasis | None:
    """Content emphasis of a raw line. Later rules override earlier ones."""
    emphasis = None
    for pattern, candidate in EMPHASIS_RULES:
        if pattern.search(line):
            emphasis = candidate
    return emphasis


def line_style(line: str) -> Style:
    style = TAG_STYLES[classify_line(line)]
    emphasis = emphasis_for(line)
    if emphasis is not None:
        style = style + EMPHASIS_STYLES[emphasis]
    return style


def decorate_tokens(text: Text) -> Text:
    """Add path and number spans in place and return ``text``."""
    text.highlight_regex(PATH_PATTERN, PATH_STYLE)
    text.highlight_regex(NUMBER_PATTERN, NUMBER_STYLE)
    return text


def highlight_line(line: str) -> Text:
    if not line:
        return Text("")
    return decorate_tokens(Text(line, style=line_style(line)))


def highlight(output: str) -> Text:
    """Highlight multi-line output; empty lines pass through unchanged."""
    lines = [highlight_line(line) for line in output.split("\n")]
    return Text("\n").join(lines)


def highlight_markup(output: str) -> str:
    """Highlighted output as rich console markup."""
    return highlight(output).markup
