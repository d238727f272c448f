"""Block session store: pure operations over a Session snapshot.

Every function returns a new Session. The ``selected`` flag on each block is
re-derived from ``selected_index`` whenever the selection could change, so it
can never drift from the cursor.
"""

from typing import Any

from .models import Block, Session, Viewport


def _check_index(session: Session, index: int) -> None:
    if not 0 <= index < len(session.blocks):
        raise IndexError(f"block index {index} out of range (have {len(session.blocks)})")


def _reselect(blocks: tuple[Block, ...], index: int) -> tuple[Block, ...]:
    """Set ``selected`` on exactly ``blocks[index]``, copying only changed blocks."""
    result = []
    for i, block in enumerate(blocks):
        want = i == index
        if block.selected != want:
            block = block.model_copy(update={"selected": want})
        result.append(block)
    return tuple(result)


def index_of(session: Session, block_id: str) -> int | None:
    """Position of the block with ``block_id``, or None if it is gone."""
    for i, block in enumerate(session.blocks):
        if block.id == block_id:
            return i
    return None


def selected_block(session: Session) -> Block | None:
    if not session.blocks:
        return None
    return session.blocks[session.selected_index]


def append(session: Session, block: Block) -> Session:
    """Add ``block`` at the end and make it the selection."""
    if index_of(session, block.id) is not None:
        raise ValueError(f"duplicate block id: {block.id}")
    blocks = session.blocks + (block,)
    index = len(blocks) - 1
    return Session(blocks=_reselect(blocks, index), selected_index=index)


def move_selection(session: Session, delta: int) -> Session:
    """Move the cursor by ``delta``, clamped to the ends (no wraparound)."""
    if not session.blocks:
        return session
    index = min(max(session.selected_index + delta, 0), len(session.blocks) - 1)
    if index == session.selected_index:
        return session
    return Session(blocks=_reselect(session.blocks, index), selected_index=index)


def replace(session: Session, index: int, block: Block) -> Session:
    _check_index(session, index)
    block = block.model_copy(update={"selected": index == session.selected_index})
    blocks = session.blocks[:index] + (block,) + session.blocks[index + 1 :]
    return session.model_copy(update={"blocks": blocks})


def update(session: Session, index: int, **changes: Any) -> Session:
    """Replace fields of one block."""
    _check_index(session, index)
    return replace(session, index, session.blocks[index].model_copy(update=changes))


def toggle_expand(session: Session, index: int) -> Session:
    _check_index(session, index)
    return update(session, index, expanded=not session.blocks[index].expanded)


def remove(session: Session, index: int) -> Session:
    """Delete one block. The last remaining block can never be deleted."""
    _check_index(session, index)
    if len(session.blocks) <= 1:
        return session
    blocks = session.blocks[:index] + session.blocks[index + 1 :]
    selected = session.selected_index
    if index <= selected:
        selected = min(selected, len(blocks) - 1)
    return Session(blocks=_reselect(blocks, selected), selected_index=selected)


def clear(session: Session) -> Session:
    return Session(blocks=(), selected_index=0)


def set_metadata(session: Session, index: int, key: str, value: str) -> Session:
    _check_index(session, index)
    metadata = dict(session.blocks[index].metadata)
    metadata[key] = value
    return update(session, index, metadata=metadata)


def clear_metadata(session: Session, index: int, key: str) -> Session:
    _check_index(session, index)
    metadata = dict(session.blocks[index].metadata)
    metadata.pop(key, None)
    return update(session, index, metadata=metadata)


def resize(session: Session, width: int, height: int) -> Session:
    """Apply a new viewport size to every block."""
    blocks = tuple(
        block.model_copy(update={"viewport": block.viewport.resized(width, height)})
        for block in session.blocks
    )
    return session.model_copy(update={"blocks": blocks})


def rebuild_viewport(block: Block, width: int, height: int) -> Block:
    """Fresh viewport over the block's current body text."""
    return block.model_copy(update={"viewport": Viewport.for_content(block.body_text(), width, height)})


def scroll(session: Session, index: int, delta: int) -> Session:
    _check_index(session, index)
    block = session.blocks[index]
    return update(session, index, viewport=block.viewport.scrolled(delta))
