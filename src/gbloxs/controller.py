"""Session controller: ``reduce(state, event) -> Transition``.

The reducer is pure. Anything that touches the outside world (timers, the
shell, the clipboard, quitting) is returned as an effect for a runtime to
perform; the runtime reports results back as further events.
"""

import logging
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from . import execution, scheduler, store
from .config import Settings
from .events import (
    ClipboardResult,
    CommandCompleted,
    CopyToClipboard,
    Effect,
    Event,
    ExecuteCommand,
    KeyPressed,
    ProgressTick,
    Quit,
    Resized,
    ScheduleTick,
    SpinnerTick,
)
from .models import Block, BlockType, Session
from .seed import OVERLAY_ROWS, seed_session

logger = logging.getLogger(__name__)

KEY_ALIASES = {"escape": "esc", " ": "space"}
VIEWPORT_MARGIN = 10
INFO_BLOCK_HEIGHT = 5


class SessionState(BaseModel):
    """Root snapshot: the block session plus UI state around it."""

    model_config = ConfigDict(frozen=True)

    session: Session = Session()
    settings: Settings = Settings()
    width: int = 0
    height: int = 0
    input_mode: bool = False
    input_text: str = ""
    show_help: bool = False
    show_table: bool = False
    table_cursor: int = 0
    spinner_frame: int = 0
    running: bool = True

    @property
    def block_width(self) -> int:
        return max(self.width - VIEWPORT_MARGIN, 0)


class Transition(NamedTuple):
    state: SessionState
    effects: list[Effect]


def _with(state: SessionState, **changes) -> SessionState:
    return state.model_copy(update=changes)


def _with_session(state: SessionState, session: Session) -> SessionState:
    return _with(state, session=session)


def normalize_key(key: str) -> str:
    key = KEY_ALIASES.get(key, key)
    if len(key) == 1 and key.isalpha():
        return key.lower()
    return key


def initial_state(settings: Settings | None = None) -> Transition:
    """Starting state and the ticks that animate its loading Progress blocks."""
    settings = settings or Settings()
    session = seed_session() if settings.seed else Session()
    effects: list[Effect] = [
        ScheduleTick(tick=scheduler.start(b), delay=settings.tick_interval)
        for b in scheduler.loading_progress_blocks(session)
    ]
    return Transition(SessionState(session=session, settings=settings), effects)


def reduce(state: SessionState, event: Event) -> Transition:
    """Apply one event and return the next state plus requested effects."""
    if isinstance(event, KeyPressed):
        if state.input_mode:
            return _on_input_key(state, event)
        return _on_key(state, normalize_key(event.key))
    if isinstance(event, Resized):
        session = store.resize(
            state.session, max(event.width - VIEWPORT_MARGIN, 0), state.settings.viewport_height
        )
        return Transition(_with(state, session=session, width=event.width, height=event.height), [])
    if isinstance(event, ProgressTick):
        return _on_tick(state, event)
    if isinstance(event, SpinnerTick):
        return Transition(_with(state, spinner_frame=state.spinner_frame + 1), [])
    if isinstance(event, CommandCompleted):
        return _on_command_completed(state, event)
    if isinstance(event, ClipboardResult):
        return _on_clipboard_result(state, event)

    logger.warning("Ignoring unknown event %r", event)
    return Transition(state, [])


# --- keystrokes -----------------------------------------------------------


def _on_key(state: SessionState, key: str) -> Transition:
    session = state.session
    selected = store.selected_block(session)
    index = session.selected_index

    if key in ("q", "ctrl+c"):
        return Transition(_with(state, running=False), [Quit()])
    if key == "i":
        return Transition(_with(state, input_mode=True), [])
    if key in ("j", "down"):
        return Transition(_move(state, 1), [])
    if key in ("k", "up"):
        return Transition(_move(state, -1), [])
    if key == "h":
        return Transition(_with(state, show_help=not state.show_help), [])
    if key == "t":
        return Transition(_with(state, show_table=not state.show_table), [])
    if key == "ctrl+l":
        return Transition(_with_session(state, store.clear(session)), [])

    if selected is None:
        return Transition(state, [])

    if key in ("e", "space", "enter"):
        return Transition(_with_session(state, store.toggle_expand(session, index)), [])
    if key == "d":
        return Transition(_with_session(state, store.remove(session, index)), [])
    if key == "c":
        return _copy(state, selected)
    if key == "r":
        return _refresh(state, selected, index)
    if key == "x":
        return _execute(state, selected, index)
    if key in ("pageup", "pagedown"):
        delta = selected.viewport.height if key == "pagedown" else -selected.viewport.height
        return Transition(_with_session(state, store.scroll(session, index, delta)), [])

    return Transition(state, [])


def _move(state: SessionState, delta: int) -> SessionState:
    state = _with_session(state, store.move_selection(state.session, delta))
    if state.show_table:
        cursor = min(max(state.table_cursor + delta, 0), len(OVERLAY_ROWS) - 1)
        state = _with(state, table_cursor=cursor)
    return state


def _copy(state: SessionState, block: Block) -> Transition:
    text = block.output or block.content or block.command
    if not text:
        return Transition(state, [])
    return Transition(state, [CopyToClipboard(block_id=block.id, text=text)])


def _refresh(state: SessionState, block: Block, index: int) -> Transition:
    if block.type != BlockType.PROGRESS:
        return Transition(state, [])
    block = scheduler.restart(block)
    session = store.replace(state.session, index, block)
    tick = ScheduleTick(tick=scheduler.start(block), delay=state.settings.tick_interval)
    return Transition(_with_session(state, session), [tick])


def _execute(state: SessionState, block: Block, index: int) -> Transition:
    if not block.command:
        return Transition(state, [])
    if block.is_executing:
        logger.debug("Block %s is already running", block.id)
        return Transition(state, [])
    session = store.replace(state.session, index, execution.begin(block))
    return Transition(
        _with_session(state, session), [ExecuteCommand(block_id=block.id, command=block.command)]
    )


def _on_input_key(state: SessionState, event: KeyPressed) -> Transition:
    key = KEY_ALIASES.get(event.key, event.key)
    if key == "esc":
        return Transition(_with(state, input_mode=False), [])
    if key == "enter":
        text = state.input_text
        state = _with(state, input_mode=False, input_text="")
        if not text:
            return Transition(state, [])
        return submit(state, text)
    if key == "backspace":
        return Transition(_with(state, input_text=state.input_text[:-1]), [])

    char = event.character
    if char and len(char) == 1 and char.isprintable():
        if len(state.input_text) >= state.settings.input_limit:
            return Transition(state, [])
        return Transition(_with(state, input_text=state.input_text + char), [])
    return Transition(state, [])


def submit(state: SessionState, text: str) -> Transition:
    """Turn submitted input into a block, executing it if it is a command.

    ``text`` is taken as is: no per-key filtering and no input limit.
    """
    block = execution.input_block(text)
    height = state.settings.new_block_height
    effects: list[Effect] = []
    if execution.parse_command_input(text) is not None:
        block = store.rebuild_viewport(execution.begin(block), state.block_width, height)
        effects.append(ExecuteCommand(block_id=block.id, command=block.command))
    else:
        block = execution.simulate(block, state.block_width, height)
    return Transition(_with_session(state, store.append(state.session, block)), effects)


# --- asynchronous results -------------------------------------------------


def _on_tick(state: SessionState, tick: ProgressTick) -> Transition:
    session, next_tick = scheduler.advance(state.session, tick, state.settings.progress_step)
    effects: list[Effect] = []
    if next_tick is not None:
        effects.append(ScheduleTick(tick=next_tick, delay=state.settings.tick_interval))
    return Transition(_with_session(state, session), effects)


def _on_command_completed(state: SessionState, event: CommandCompleted) -> Transition:
    index = store.index_of(state.session, event.block_id)
    if index is None or not state.session.blocks[index].is_executing:
        logger.debug("Dropping completion for block %s", event.block_id)
        return Transition(state, [])
    block = execution.complete(
        state.session.blocks[index],
        event.result,
        state.block_width,
        state.settings.new_block_height,
    )
    return Transition(_with_session(state, store.replace(state.session, index, block)), [])


def _on_clipboard_result(state: SessionState, event: ClipboardResult) -> Transition:
    session = state.session
    if event.ok:
        index = store.index_of(session, event.block_id)
        if index is not None:
            session = store.set_metadata(session, index, "copied", "true")
        notice = Block(type=BlockType.INFO, title="Info", content="Content copied to clipboard!")
    else:
        logger.warning("Clipboard copy failed: %s", event.error)
        notice = Block(
            type=BlockType.ERROR,
            title="Clipboard",
            error=f"Clipboard copy failed: {event.error or 'clipboard unavailable'}",
        )
    notice = store.rebuild_viewport(notice, state.block_width, INFO_BLOCK_HEIGHT)
    return Transition(_with_session(state, store.append(session, notice)), [])
