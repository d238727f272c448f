"""System clipboard access through platform copy commands."""

import logging
import platform
import shutil
import subprocess
from collections.abc import Callable, Iterable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ClipboardOutcome(BaseModel):
    """Result of one copy attempt."""

    success: bool
    method: str
    error: str | None = None


def fallback_commands(system: str | None = None) -> Iterable[tuple[str, ...]]:
    """Copy commands available on this platform, most preferred first."""
    system = (system or platform.system()).lower()
    if system == "darwin":
        if shutil.which("pbcopy"):
            yield ("pbcopy",)
        return
    if system == "windows":
        yield ("powershell", "-Command", "Set-Clipboard")
        return
    # Linux / BSD
    if shutil.which("wl-copy"):
        yield ("wl-copy",)
    if shutil.which("xclip"):
        yield ("xclip", "-selection", "clipboard")
    if shutil.which("xsel"):
        yield ("xsel", "--clipboard", "--input")


def copy_to_clipboard(
    text: str, primary: Callable[[str], None] | None = None
) -> ClipboardOutcome:
    """Copy ``text``, trying ``primary`` (e.g. OSC 52) before platform commands."""
    last_error = None
    if primary is not None:
        try:
            primary(text)
            return ClipboardOutcome(success=True, method="osc52")
        except Exception as e:
            last_error = str(e)

    for command in fallback_commands():
        try:
            subprocess.run(command, check=True, input=text.encode("utf-8"), capture_output=True)
            return ClipboardOutcome(success=True, method=" ".join(command))
        except (OSError, subprocess.CalledProcessError) as e:
            last_error = f"{' '.join(command)}: {e}"
            logger.debug("Clipboard command failed: %s", last_error)

    return ClipboardOutcome(success=False, method="none", error=last_error or "no clipboard command found")
