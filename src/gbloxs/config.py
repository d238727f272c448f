"""Runtime settings for a gbloxs session."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .execution import DEFAULT_SHELL
from .scheduler import PROGRESS_STEP, TICK_INTERVAL


class Settings(BaseModel):
    """Knobs shared by the controller and the runtimes.

    The CLI fills these from options, each of which can also be set through a
    ``GBLOXS_*`` environment variable.
    """

    model_config = ConfigDict(frozen=True)

    shell: str = DEFAULT_SHELL
    tick_interval: float = Field(default=TICK_INTERVAL, gt=0)
    progress_step: float = Field(default=PROGRESS_STEP, gt=0, le=1)
    viewport_height: int = Field(default=15, ge=1)  # applied on resize
    new_block_height: int = Field(default=10, ge=1)
    input_limit: int = Field(default=500, ge=1)
    seed: bool = True  # start with the demo blocks
    log_file: Path | None = None
