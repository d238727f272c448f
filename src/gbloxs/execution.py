"""Command execution lifecycle: Idle -> Running -> Succeeded | Failed.

``begin`` and ``complete`` are pure transitions on a Block. ``run_shell`` is the
only blocking part and is meant to be called away from the event loop; its
result comes back to the controller as a ``CommandCompleted`` event.
"""

import logging
import subprocess

from pydantic import BaseModel, ConfigDict

from .models import Block, BlockType
from .store import rebuild_viewport

logger = logging.getLogger(__name__)

COMMAND_PREFIXES = ("/", "!")
DEFAULT_SHELL = "sh"

SIMULATED_LISTING = "file1.txt\nfile2.txt\nfile3.txt\ndirectory1\ndirectory2"
SIMULATED_ERROR = "Error: Command failed"


class CommandResult(BaseModel):
    """Captured outcome of one shell invocation."""

    model_config = ConfigDict(frozen=True)

    output: str = ""
    exit_code: int | None = None  # None when the process never started
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.exit_code == 0


def parse_command_input(text: str) -> str | None:
    """Shell command for ``/cmd`` or ``!cmd`` input, None for plain text."""
    if text.startswith(COMMAND_PREFIXES):
        return text[1:]
    return None


def run_shell(command: str, shell: str = DEFAULT_SHELL) -> CommandResult:
    """Run ``<shell> -c <command>``, capturing stdout and stderr as one stream.

    Blocks until the process exits.
    """
    logger.debug("Running %s -c %r", shell, command)
    try:
        proc = subprocess.run(
            [shell, "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.warning("Could not start %s: %s", shell, e)
        return CommandResult(output="", exit_code=None, error=str(e))

    output = proc.stdout.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        return CommandResult(
            output=output, exit_code=proc.returncode, error=f"exit status {proc.returncode}"
        )
    return CommandResult(output=output, exit_code=0)


def begin(block: Block) -> Block:
    """Idle -> Running."""
    metadata = dict(block.metadata)
    metadata["executing"] = "true"
    return block.model_copy(update={"is_loading": True, "metadata": metadata})


def complete(block: Block, result: CommandResult, width: int, height: int) -> Block:
    """Running -> Succeeded or Failed, depending on ``result``."""
    metadata = dict(block.metadata)
    metadata.pop("executing", None)
    changes = {"is_loading": False, "metadata": metadata, "output": result.output}
    if result.succeeded:
        changes.update(type=BlockType.SUCCESS, error="")
    else:
        changes.update(type=BlockType.ERROR, error=result.error or "command failed")
    logger.debug("Block %s finished: %s", block.id, changes["type"].value)
    return rebuild_viewport(block.model_copy(update=changes), width, height)


def input_block(text: str) -> Block:
    """Command block for text submitted in input mode."""
    return Block(
        type=BlockType.COMMAND,
        title="User Input",
        content=text,
        command=parse_command_input(text) or text,
    )


def simulate(block: Block, width: int, height: int) -> Block:
    """Canned result for input that is not a shell command (demo only)."""
    text = block.content
    if text.startswith("ls"):
        changes = {"type": BlockType.SUCCESS, "output": SIMULATED_LISTING}
    elif text.startswith("error"):
        changes = {"type": BlockType.ERROR, "error": SIMULATED_ERROR}
    else:
        changes = {"type": BlockType.SUCCESS, "output": f"Executed: {text}\nStatus: OK"}
    return rebuild_viewport(block.model_copy(update=changes), width, height)
