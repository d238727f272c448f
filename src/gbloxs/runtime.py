"""Headless runtime: drives the controller without a terminal.

Effects are performed inline and in order. Shell commands run synchronously and
their completion is dispatched straight away; progress ticks are queued and
only delivered when ``fire_timers`` is called, so tests control time.
"""

import logging
from collections import deque
from collections.abc import Callable

from .clipboard import ClipboardOutcome, copy_to_clipboard
from .config import Settings
from .controller import SessionState, initial_state, reduce
from .controller import submit as submit_input
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
    ScheduleTick,
)
from .execution import CommandResult, run_shell

logger = logging.getLogger(__name__)


class HeadlessRuntime:
    """Synchronous effect interpreter around ``reduce``."""

    def __init__(
        self,
        settings: Settings | None = None,
        shell_runner: Callable[[str, str], CommandResult] = run_shell,
        clipboard: Callable[[str], ClipboardOutcome] = copy_to_clipboard,
    ) -> None:
        self._shell_runner = shell_runner
        self._clipboard = clipboard
        self.timers: deque[ProgressTick] = deque()
        self.delivered_ticks = 0
        transition = initial_state(settings)
        self.state: SessionState = transition.state
        self._perform(transition.effects)

    def dispatch(self, event: Event) -> SessionState:
        transition = reduce(self.state, event)
        self.state = transition.state
        self._perform(transition.effects)
        return self.state

    def submit(self, text: str) -> SessionState:
        """Submit ``text`` as if entered in input mode, bypassing the keystroke path."""
        transition = submit_input(self.state, text)
        self.state = transition.state
        self._perform(transition.effects)
        return self.state

    def press(self, *keys: str) -> SessionState:
        for key in keys:
            character = key if len(key) == 1 else None
            self.dispatch(KeyPressed(key=key, character=character))
        return self.state

    def type_text(self, text: str) -> SessionState:
        """Feed characters one by one, as the input field would receive them."""
        for char in text:
            self.dispatch(KeyPressed(key="space" if char == " " else char, character=char))
        return self.state

    def fire_timers(self) -> int:
        """Deliver every tick pending right now. Returns how many were delivered."""
        pending = len(self.timers)
        for _ in range(pending):
            self.delivered_ticks += 1
            self.dispatch(self.timers.popleft())
        return pending

    def run_until_idle(self, max_rounds: int = 10_000) -> int:
        rounds = 0
        while self.timers and rounds < max_rounds:
            self.fire_timers()
            rounds += 1
        return rounds

    def _perform(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, ScheduleTick):
                self.timers.append(effect.tick)
            elif isinstance(effect, ExecuteCommand):
                result = self._shell_runner(effect.command, self.state.settings.shell)
                self.dispatch(CommandCompleted(block_id=effect.block_id, result=result))
            elif isinstance(effect, CopyToClipboard):
                outcome = self._clipboard(effect.text)
                self.dispatch(
                    ClipboardResult(block_id=effect.block_id, ok=outcome.success, error=outcome.error)
                )
            elif isinstance(effect, Quit):
                logger.debug("Session quit")
            else:
                logger.warning("Unhandled effect %r", effect)
