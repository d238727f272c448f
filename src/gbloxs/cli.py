"""CLI entry point for gbloxs."""

import logging
import sys
from pathlib import Path

import typer

from .config import Settings

APP_HELP = """
Interactive terminal blocks: command output as navigable blocks.
"""

RUN_HELP = """
Start an interactive block session.

\b
Keys:
  j/k or arrows   move between blocks
  e, space, enter expand/collapse
  i               input mode (/cmd or !cmd runs a shell command)
  x               re-run the selected block's command
  c / r / d       copy / restart progress / delete
  h / t           help / table overlay
  ctrl+l          clear all blocks
  q, ctrl+c       quit

\b
Examples:
  gbloxs run
  gbloxs run --shell bash --no-seed --log-file /tmp/gbloxs.log
"""

EXEC_HELP = """
Run one shell command through the block lifecycle and print the result block.

The exit status of gbloxs mirrors the command: 0 on success, 1 on failure.

\b
Examples:
  gbloxs exec 'ls -la'
  gbloxs exec 'make test' --shell bash
"""

HIGHLIGHT_HELP = """
Highlight command output the way blocks display it.

\b
Examples:
  ls -la | gbloxs highlight
  gbloxs highlight build.log
"""

app = typer.Typer(add_completion=False, help=APP_HELP)


def setup_logging(settings: Settings, verbose: bool) -> None:
    """Log to the configured file; the terminal belongs to the UI."""
    if settings.log_file is None:
        logging.getLogger("gbloxs").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=settings.log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command(help=RUN_HELP)
def run(
    shell: str = typer.Option("sh", "--shell", envvar="GBLOXS_SHELL", help="Shell used for commands"),
    tick_interval: float = typer.Option(
        0.1, "--tick-interval", envvar="GBLOXS_TICK_INTERVAL", help="Seconds between progress ticks"
    ),
    seed: bool = typer.Option(True, "--seed/--no-seed", envvar="GBLOXS_SEED", help="Start with demo blocks"),
    log_file: Path | None = typer.Option(None, "--log-file", envvar="GBLOXS_LOG_FILE", help="Write logs here"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    from pydantic import ValidationError

    from .app import BlockTerminalApp

    try:
        settings = Settings(shell=shell, tick_interval=tick_interval, seed=seed, log_file=log_file)
    except ValidationError as e:
        typer.echo(f"Error: Invalid settings: {e}", err=True)
        raise typer.Exit(1)

    setup_logging(settings, verbose)

    BlockTerminalApp(settings).run()


@app.command("exec", help=EXEC_HELP)
def exec_command(
    command: str = typer.Argument(..., help="Shell command to run"),
    shell: str = typer.Option("sh", "--shell", envvar="GBLOXS_SHELL", help="Shell used for commands"),
    width: int = typer.Option(100, "--width", help="Render width"),
) -> None:
    from rich.console import Console

    from .events import Resized
    from .models import BlockType
    from .renderer import render
    from .runtime import HeadlessRuntime

    runtime = HeadlessRuntime(Settings(shell=shell, seed=False))
    runtime.dispatch(Resized(width=width, height=40))
    runtime.submit(f"!{command}")

    Console(width=width).print(render(runtime.state))
    block = runtime.state.session.blocks[-1]
    if block.type == BlockType.ERROR:
        raise typer.Exit(1)


@app.command(help=HIGHLIGHT_HELP)
def highlight(
    input_path: Path | None = typer.Argument(None, help="File to highlight (default: stdin)"),
) -> None:
    from rich.console import Console

    from .highlighter import highlight as highlight_text

    if input_path is None:
        text = sys.stdin.read()
    elif not input_path.exists():
        typer.echo(f"Error: File not found: {input_path}", err=True)
        raise typer.Exit(1)
    else:
        text = input_path.read_text(errors="replace")

    Console().print(highlight_text(text.rstrip("\n")))


if __name__ == "__main__":
    app()
