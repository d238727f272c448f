"""Domain models for gbloxs."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_VIEWPORT_WIDTH = 50
DEFAULT_VIEWPORT_HEIGHT = 10


class BlockType(str, Enum):
    """Kinds of blocks shown in a session."""

    COMMAND = "command"
    OUTPUT = "output"
    TABLE = "table"
    PROGRESS = "progress"
    INFO = "info"
    ERROR = "error"
    SUCCESS = "success"


def new_block_id() -> str:
    return uuid.uuid4().hex[:12]


class Viewport(BaseModel):
    """Scroll window over a block's body."""

    model_config = ConfigDict(frozen=True)

    width: int = DEFAULT_VIEWPORT_WIDTH
    height: int = DEFAULT_VIEWPORT_HEIGHT
    offset: int = 0
    line_count: int = 0

    @classmethod
    def for_content(cls, content: str, width: int, height: int) -> "Viewport":
        """Fresh viewport at the top of ``content``."""
        lines = content.splitlines() if content else []
        return cls(width=max(width, 0), height=max(height, 1), line_count=len(lines))

    @property
    def max_offset(self) -> int:
        return max(0, self.line_count - self.height)

    def resized(self, width: int, height: int) -> "Viewport":
        """Same content at a new size, keeping the offset in range."""
        vp = self.model_copy(update={"width": max(width, 0), "height": max(height, 1)})
        return vp.model_copy(update={"offset": min(vp.offset, vp.max_offset)})

    def scrolled(self, delta: int) -> "Viewport":
        offset = min(max(self.offset + delta, 0), self.max_offset)
        return self.model_copy(update={"offset": offset})

    def window(self, content: str) -> list[str]:
        """Lines of ``content`` currently visible."""
        lines = content.splitlines()
        return lines[self.offset : self.offset + self.height]


class Block(BaseModel):
    """A displayable unit of the session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_block_id)
    type: BlockType
    title: str = ""
    content: str = ""
    command: str = ""
    output: str = ""
    error: str = ""
    expanded: bool = True
    selected: bool = False  # derived from Session.selected_index
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    is_loading: bool = False
    metadata: dict[str, str] = {}
    table_data: list[list[str]] = []  # first row is the header
    timestamp: datetime = Field(default_factory=datetime.now)
    viewport: Viewport = Viewport()
    generation: int = 0  # bumped when progress restarts

    @property
    def is_executing(self) -> bool:
        return self.metadata.get("executing") == "true"

    def body_text(self) -> str:
        """Text the viewport scrolls over."""
        return self.output or self.content


class Session(BaseModel):
    """Ordered blocks plus the selection cursor."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[Block, ...] = ()
    selected_index: int = 0

    @property
    def ids(self) -> list[str]:
        return [b.id for b in self.blocks]
