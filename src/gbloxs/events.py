"""Events consumed by the session controller and effects it requests."""

from pydantic import BaseModel, ConfigDict

from .execution import CommandResult


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class KeyPressed(Event):
    """A keystroke. ``key`` uses Textual key names ("j", "down", "ctrl+l")."""

    key: str
    character: str | None = None


class Resized(Event):
    width: int
    height: int


class ProgressTick(Event):
    """Timer event advancing a Progress block."""

    block_id: str
    value: float  # progress when the tick was scheduled
    generation: int = 0


class SpinnerTick(Event):
    pass


class CommandCompleted(Event):
    block_id: str
    result: CommandResult


class ClipboardResult(Event):
    block_id: str
    ok: bool
    error: str | None = None


class Effect(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScheduleTick(Effect):
    tick: ProgressTick
    delay: float


class ExecuteCommand(Effect):
    block_id: str
    command: str


class CopyToClipboard(Effect):
    block_id: str
    text: str


class Quit(Effect):
    pass
