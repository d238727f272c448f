"""Text renderer for session snapshots.

``render`` turns a SessionState into rich console markup using a jinja2
template. Block bodies go through the output highlighter.
"""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from rich.markup import escape

from .controller import SessionState
from .highlighter import highlight_line
from .models import Block, BlockType
from .seed import OVERLAY_COLUMNS, OVERLAY_ROWS

SPINNER_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"
PROGRESS_WIDTH = 40

BORDER_COLORS = {
    BlockType.COMMAND: "color(220)",
    BlockType.OUTPUT: "color(34)",
    BlockType.SUCCESS: "color(34)",
    BlockType.ERROR: "color(196)",
    BlockType.INFO: "color(39)",
}
DEFAULT_BORDER = "color(62)"
SELECTED_BORDER = "bold color(39)"

FOOTER = (
    "i: input | h: help | j/k: navigate | e: expand | c: copy | r: refresh | "
    "d: delete | x: execute | t: table | q: quit"
)

HELP_TEXT = """\
KEYBOARD SHORTCUTS

Navigation:
  j / ↓       Navigate down to next block
  k / ↑       Navigate up to previous block
  PgUp/PgDn   Scroll the selected block

Block Actions:
  e           Expand/collapse selected block
  c           Copy block content to clipboard
  r           Refresh/reload block content
  d           Delete selected block
  x           Execute command in selected block
  Space/Enter Toggle block expansion

Modes:
  i           Toggle input mode
  h           Toggle help (this screen)
  t           Toggle table view

Input Mode:
  /cmd        Execute shell command (e.g., /ls -la)
  !cmd        Execute shell command (alternative)
  ESC         Cancel input
  Enter       Submit input

General:
  q / Ctrl+C  Quit application
  Ctrl+L      Clear all blocks"""


def progress_bar(value: float, width: int = PROGRESS_WIDTH) -> str:
    filled = round(value * width)
    return f"[color(205)]{'█' * filled}[/][color(240)]{'░' * (width - filled)}[/]"


def spinner(frame: int) -> str:
    return SPINNER_FRAMES[frame % len(SPINNER_FRAMES)]


def render_table(data: list[list[str]]) -> list[str]:
    """Markup lines for a block's table; the first row is the header."""
    if not data:
        return []
    header = " │ ".join(f"[bold color(205)]{escape(cell)}[/]" for cell in data[0])
    plain_width = len(" │ ".join(data[0]))
    lines = [header, "─" * plain_width]
    for row in data[1:]:
        lines.append(" │ ".join(f"[color(252)]{escape(cell)}[/]" for cell in row))
    return lines


def render_overlay_table(cursor: int) -> list[str]:
    """The "t" overlay: fixed-width columns with the cursor row highlighted."""
    header = "".join(title.ljust(width) for title, width in OVERLAY_COLUMNS)
    lines = [f"[bold]{escape(header)}[/]", "─" * len(header)]
    for i, row in enumerate(OVERLAY_ROWS):
        text = escape("".join(cell.ljust(w) for cell, (_, w) in zip(row, OVERLAY_COLUMNS)))
        if i == cursor:
            lines.append(f"[color(229) on color(57)]{text}[/]")
        else:
            lines.append(text)
    return lines


def highlighted_window(block: Block, text: str) -> list[str]:
    """Visible part of ``text`` through the block's viewport, highlighted."""
    lines = [highlight_line(line).markup for line in block.viewport.window(text)]
    hidden = block.viewport.line_count - block.viewport.offset - len(lines)
    if hidden > 0:
        lines.append(f"[color(240)]… {hidden} more lines (PgDn)[/]")
    return lines


def block_body(block: Block, state: SessionState) -> list[str]:
    body: list[str] = []
    if block.type == BlockType.COMMAND:
        if block.command:
            body.append(f"[color(220)]$ {escape(block.command)}[/]")
        if block.is_loading:
            body.append(f"[color(205)]{spinner(state.spinner_frame)}[/] running…")
        elif block.output:
            body.extend(highlighted_window(block, block.output))
    elif block.type == BlockType.PROGRESS:
        bar = progress_bar(block.progress)
        if block.is_loading:
            bar += f" [color(205)]{spinner(state.spinner_frame)}[/]"
        body.append(bar)
        body.append(f"{block.progress * 100:.0f}% complete")
    elif block.type == BlockType.TABLE:
        body.extend(render_table(block.table_data) or render_overlay_table(state.table_cursor))
    elif block.type == BlockType.ERROR:
        body.append(f"[color(196)]✗ {escape(block.error)}[/]")
        if block.output:
            body.extend(highlighted_window(block, block.output))
        elif block.content:
            body.extend(highlight_line(line).markup for line in block.content.split("\n"))
    elif block.type == BlockType.SUCCESS:
        if block.content:
            first, *rest = block.content.split("\n")
            body.append(f"[color(46)]✓ {escape(first)}[/]")
            body.extend(f"[color(46)]{escape(line)}[/]" for line in rest)
        if block.output:
            body.extend(highlighted_window(block, block.output))
    elif block.content or block.output:
        body.extend(highlighted_window(block, block.body_text()))
    return body


def block_to_dict(block: Block, state: SessionState) -> dict:
    """Template context for one block."""
    if block.selected:
        border, top, side, bottom = SELECTED_BORDER, "╔═", "║", "╚═"
    else:
        border, top, side, bottom = BORDER_COLORS.get(block.type, DEFAULT_BORDER), "╭─", "│", "╰─"

    title = f"{'▼' if block.expanded else '▶'} {block.title}"
    if block.selected:
        title = f"● {title}"

    return {
        "border": border,
        "corner_top": top,
        "side": side,
        "corner_bottom": bottom,
        "title": title,
        "expanded": block.expanded,
        "time": block.timestamp.strftime("%H:%M:%S"),
        "body": block_body(block, state) if block.expanded else [],
        "metadata": sorted(block.metadata.items()),
    }


@lru_cache(maxsize=1)
def make_environment() -> Environment:
    template_dir = Path(__file__).parent / "templates"
    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )
    env.filters["esc"] = escape
    return env


def render(state: SessionState) -> str:
    """Render a session snapshot to rich console markup."""
    if state.width == 0:
        return "Loading..."

    template = make_environment().get_template("session.txt.j2")
    return template.render(
        show_help=state.show_help,
        help_lines=HELP_TEXT.split("\n"),
        overlay=render_overlay_table(state.table_cursor) if state.show_table else None,
        blocks=[block_to_dict(b, state) for b in state.session.blocks],
        input_mode=state.input_mode,
        input_text=state.input_text,
        footer=FOOTER,
    )
