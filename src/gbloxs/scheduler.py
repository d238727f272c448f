"""Progress animation scheduler.

Ticks are self-resubmitting: handling one tick yields at most one follow-up
tick for the same block. A tick for a block that was deleted, has finished,
or was restarted since the tick was scheduled is dropped without effect.
"""

import logging

from . import store
from .events import ProgressTick
from .models import Block, BlockType, Session

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.1  # seconds
PROGRESS_STEP = 0.01


def start(block: Block) -> ProgressTick:
    """First tick of a chain for ``block``."""
    return ProgressTick(block_id=block.id, value=block.progress, generation=block.generation)


def restart(block: Block) -> Block:
    """Reset progress to zero and invalidate ticks from earlier chains."""
    return block.model_copy(
        update={"progress": 0.0, "is_loading": True, "generation": block.generation + 1}
    )


def loading_progress_blocks(session: Session) -> list[Block]:
    return [b for b in session.blocks if b.type == BlockType.PROGRESS and b.is_loading]


def advance(
    session: Session, tick: ProgressTick, step: float = PROGRESS_STEP
) -> tuple[Session, ProgressTick | None]:
    """Apply one tick. Returns the new session and the next tick, if any."""
    index = store.index_of(session, tick.block_id)
    if index is None:
        logger.debug("Dropping tick for missing block %s", tick.block_id)
        return session, None
    block = session.blocks[index]
    if not block.is_loading or block.generation != tick.generation:
        logger.debug("Dropping stale tick for block %s", tick.block_id)
        return session, None

    # Rounded so repeated steps land exactly on 1.0.
    progress = min(round(block.progress + step, 6), 1.0)
    if progress >= 1.0:
        return store.update(session, index, progress=1.0, is_loading=False), None

    session = store.update(session, index, progress=progress)
    return session, ProgressTick(block_id=block.id, value=progress, generation=block.generation)
