"""Textual host for an interactive gbloxs session."""

import asyncio
import logging
from functools import partial
from typing import Any, Awaitable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.widgets import Static

from .clipboard import copy_to_clipboard
from .config import Settings
from .controller import SessionState, initial_state, reduce
from .events import (
    ClipboardResult,
    CommandCompleted,
    CopyToClipboard,
    Effect,
    Event,
    ExecuteCommand,
    KeyPressed,
    Quit,
    Resized,
    ScheduleTick,
    SpinnerTick,
)
from .execution import run_shell
from .renderer import render

logger = logging.getLogger(__name__)

SPINNER_INTERVAL = 0.1


class BlockTerminalApp(App):
    """Feeds terminal events to the reducer and performs its effects."""

    CSS = """
    #blocks {
        height: 1fr;
    }
    """

    # Keys Textual or the scroll container would otherwise consume.
    BINDINGS = [
        Binding(key, f"press('{key}')", show=False, priority=True)
        for key in ("ctrl+c", "ctrl+l", "up", "down", "pageup", "pagedown")
    ]

    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        transition = initial_state(settings)
        self.state: SessionState = transition.state
        self._initial_effects = transition.effects
        self._pending_tasks: set[asyncio.Task[Any]] = set()

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="blocks"):
            yield Static(id="view")

    def on_mount(self) -> None:
        self.set_interval(SPINNER_INTERVAL, partial(self.apply_event, SpinnerTick()))
        self.apply_event(Resized(width=self.size.width, height=self.size.height))
        self._perform(self._initial_effects)

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(Resized(width=event.size.width, height=event.size.height))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.apply_event(KeyPressed(key=event.key, character=event.character))

    def action_press(self, key: str) -> None:
        self.apply_event(KeyPressed(key=key))

    # ----- reducer plumbing -------------------------------------------
    def apply_event(self, event: Event) -> None:
        transition = reduce(self.state, event)
        self.state = transition.state
        self._perform(transition.effects)
        self._refresh_view()

    def _refresh_view(self) -> None:
        try:
            view = self.query_one("#view", Static)
        except NoMatches:  # not composed yet
            return
        view.update(Text.from_markup(render(self.state)))

    def _perform(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, ScheduleTick):
                self.set_timer(effect.delay, partial(self.apply_event, effect.tick))
            elif isinstance(effect, ExecuteCommand):
                self._schedule_task(self._execute(effect))
            elif isinstance(effect, CopyToClipboard):
                outcome = copy_to_clipboard(effect.text, primary=self.copy_to_clipboard)
                self.apply_event(
                    ClipboardResult(block_id=effect.block_id, ok=outcome.success, error=outcome.error)
                )
            elif isinstance(effect, Quit):
                self.exit()
            else:
                logger.warning("Unhandled effect %r", effect)

    def _schedule_task(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    async def _execute(self, effect: ExecuteCommand) -> None:
        """Run the command on a worker thread so the UI keeps responding."""
        result = await asyncio.to_thread(run_shell, effect.command, self.state.settings.shell)
        self.apply_event(CommandCompleted(block_id=effect.block_id, result=result))
