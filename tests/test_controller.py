"""Tests for the session controller, driven through the headless runtime."""

from gbloxs.config import Settings
from gbloxs.controller import initial_state, reduce
from gbloxs.events import (
    CommandCompleted,
    ExecuteCommand,
    KeyPressed,
    ProgressTick,
    Quit,
    Resized,
    ScheduleTick,
    SpinnerTick,
)
from gbloxs.execution import CommandResult
from gbloxs.models import BlockType
from gbloxs.runtime import HeadlessRuntime
from gbloxs.seed import LISTING

from conftest import FakeClipboard


def submit(rt: HeadlessRuntime, text: str) -> None:
    rt.press("i")
    rt.type_text(text)
    rt.press("enter")


def fake_shell(command: str, shell: str) -> CommandResult:
    return CommandResult(output=f"ran {command}\n", exit_code=0)


class TestInitialState:
    """Tests for initial_state."""

    def test_seeded(self) -> None:
        state, effects = initial_state()
        assert [b.id for b in state.session.blocks] == ["1", "2", "3", "4", "5"]
        assert state.session.selected_index == 0
        assert state.session.blocks[0].selected

    def test_progress_tick_scheduled(self) -> None:
        _, effects = initial_state(Settings(tick_interval=0.25))
        assert len(effects) == 1
        assert isinstance(effects[0], ScheduleTick)
        assert effects[0].tick.block_id == "3"
        assert effects[0].tick.value == 0.65
        assert effects[0].delay == 0.25

    def test_unseeded(self) -> None:
        state, effects = initial_state(Settings(seed=False))
        assert state.session.blocks == ()
        assert effects == []


class TestScenarios:
    """End-to-end scenarios."""

    def test_echo_hello(self, empty_runtime: HeadlessRuntime) -> None:
        """Executing `echo hello` yields a Success block holding its output."""
        submit(empty_runtime, "/echo hello")
        block = empty_runtime.state.session.blocks[-1]
        assert block.type == BlockType.SUCCESS
        assert "hello" in block.output
        assert block.is_loading is False
        assert "executing" not in block.metadata

    def test_false_fails(self, empty_runtime: HeadlessRuntime) -> None:
        """An always-failing command yields an Error block."""
        submit(empty_runtime, "!false")
        block = empty_runtime.state.session.blocks[-1]
        assert block.type == BlockType.ERROR
        assert block.error
        assert block.is_loading is False

    def test_progress_runs_to_completion(self, runtime: HeadlessRuntime) -> None:
        """The seeded Progress block climbs from 0.65 to 1.0 and then stops."""
        runtime.run_until_idle()
        block = runtime.state.session.blocks[2]
        assert block.progress == 1.0
        assert block.is_loading is False
        assert runtime.delivered_ticks == 35
        assert not runtime.timers

    def test_tick_for_unknown_block(self, runtime: HeadlessRuntime) -> None:
        before = runtime.state
        runtime.dispatch(ProgressTick(block_id="nope", value=0.1))
        assert runtime.state == before
        assert len(runtime.timers) == 1

    def test_submitted_block_is_selected(self, runtime: HeadlessRuntime) -> None:
        submit(runtime, "hello")
        session = runtime.state.session
        assert session.selected_index == len(session.blocks) - 1
        assert session.blocks[-1].selected
        assert session.blocks[-1].output == "Executed: hello\nStatus: OK"


class TestNavigation:
    """Tests for selection and expansion keys."""

    def test_move_down_and_up(self, runtime: HeadlessRuntime) -> None:
        runtime.press("j", "down")
        assert runtime.state.session.selected_index == 2
        runtime.press("k")
        assert runtime.state.session.selected_index == 1
        runtime.press("up", "up")
        assert runtime.state.session.selected_index == 0

    def test_uppercase_keys(self, runtime: HeadlessRuntime) -> None:
        runtime.press("J")
        assert runtime.state.session.selected_index == 1

    def test_expand_toggle(self, runtime: HeadlessRuntime) -> None:
        runtime.press("e")
        assert runtime.state.session.blocks[0].expanded is False
        runtime.press("space")
        assert runtime.state.session.blocks[0].expanded is True
        runtime.press("enter")
        assert runtime.state.session.blocks[0].expanded is False

    def test_unknown_key_ignored(self, runtime: HeadlessRuntime) -> None:
        before = runtime.state
        runtime.press("z", "f5")
        assert runtime.state == before

    def test_delete(self, runtime: HeadlessRuntime) -> None:
        runtime.press("j", "d")
        session = runtime.state.session
        assert [b.id for b in session.blocks] == ["1", "3", "4", "5"]
        assert session.selected_index == 1
        assert session.blocks[1].selected

    def test_delete_only_block(self, empty_runtime: HeadlessRuntime) -> None:
        submit(empty_runtime, "hello")
        before = empty_runtime.state
        empty_runtime.press("d")
        assert empty_runtime.state == before

    def test_clear_all(self, runtime: HeadlessRuntime) -> None:
        runtime.press("j", "ctrl+l")
        assert runtime.state.session.blocks == ()
        assert runtime.state.session.selected_index == 0
        # Keys that need a selected block do nothing on an empty session.
        runtime.press("e", "d", "c", "x", "r", "j")
        assert runtime.state.session.blocks == ()

    def test_overlays(self, runtime: HeadlessRuntime) -> None:
        runtime.press("h", "t")
        assert runtime.state.show_help and runtime.state.show_table
        runtime.press("j", "j")
        assert runtime.state.table_cursor == 2
        runtime.press("h", "t")
        assert not runtime.state.show_help and not runtime.state.show_table

    def test_page_scrolling(self, empty_runtime: HeadlessRuntime) -> None:
        submit(empty_runtime, "/seq 1 40")
        empty_runtime.press("pagedown")
        viewport = empty_runtime.state.session.blocks[-1].viewport
        assert viewport.offset == viewport.height
        empty_runtime.press("pageup")
        assert empty_runtime.state.session.blocks[-1].viewport.offset == 0

    def test_quit(self, runtime: HeadlessRuntime) -> None:
        runtime.press("q")
        assert runtime.state.running is False

    def test_quit_emits_effect(self) -> None:
        state, _ = initial_state()
        _, effects = reduce(state, KeyPressed(key="ctrl+c"))
        assert effects == [Quit()]


class TestInputMode:
    """Tests for the input field."""

    def test_typing_and_backspace(self, runtime: HeadlessRuntime) -> None:
        runtime.press("i")
        runtime.type_text("Hi qx")
        runtime.press("backspace")
        assert runtime.state.input_mode
        assert runtime.state.input_text == "Hi q"
        assert runtime.state.running

    def test_escape_cancels(self, runtime: HeadlessRuntime) -> None:
        count = len(runtime.state.session.blocks)
        runtime.press("i")
        runtime.type_text("ls")
        runtime.press("escape")
        assert not runtime.state.input_mode
        assert len(runtime.state.session.blocks) == count

    def test_empty_submit(self, runtime: HeadlessRuntime) -> None:
        count = len(runtime.state.session.blocks)
        runtime.press("i", "enter")
        assert not runtime.state.input_mode
        assert len(runtime.state.session.blocks) == count

    def test_submit_clears_field(self, runtime: HeadlessRuntime) -> None:
        submit(runtime, "error now")
        assert runtime.state.input_text == ""
        assert runtime.state.session.blocks[-1].type == BlockType.ERROR

    def test_input_limit(self) -> None:
        rt = HeadlessRuntime(Settings(input_limit=3))
        rt.press("i")
        rt.type_text("abcdef")
        assert rt.state.input_text == "abc"


class TestExecution:
    """Tests for the execute key and command completions."""

    def test_execute_selected_command(self) -> None:
        rt = HeadlessRuntime(shell_runner=fake_shell)
        rt.press("x")
        block = rt.state.session.blocks[0]
        assert block.type == BlockType.SUCCESS
        assert block.output == "ran ls -la\n"

    def test_execute_without_command(self, runtime: HeadlessRuntime) -> None:
        runtime.press("j")
        before = runtime.state
        runtime.press("x")
        assert runtime.state.session.blocks == before.session.blocks

    def test_running_block_not_restarted(self) -> None:
        state, _ = initial_state()
        state, effects = reduce(state, KeyPressed(key="x"))
        assert effects == [ExecuteCommand(block_id="1", command="ls -la")]
        assert state.session.blocks[0].is_loading
        _, effects = reduce(state, KeyPressed(key="x"))
        assert effects == []

    def test_completion_for_deleted_block(self) -> None:
        state, _ = initial_state()
        result = CommandResult(output="x", exit_code=0)
        new_state, effects = reduce(state, CommandCompleted(block_id="gone", result=result))
        assert new_state == state
        assert effects == []

    def test_completion_for_idle_block(self) -> None:
        state, _ = initial_state()
        result = CommandResult(output="x", exit_code=0)
        new_state, _ = reduce(state, CommandCompleted(block_id="1", result=result))
        assert new_state == state


class TestClipboard:
    """Tests for copying."""

    def test_copy_output(self, runtime: HeadlessRuntime, clipboard: FakeClipboard) -> None:
        runtime.press("c")
        assert clipboard.copied == [LISTING]
        session = runtime.state.session
        assert session.blocks[0].metadata["copied"] == "true"
        assert session.blocks[-1].type == BlockType.INFO
        assert session.blocks[-1].content == "Content copied to clipboard!"
        assert session.blocks[-1].selected

    def test_copy_falls_back_to_content(self, runtime: HeadlessRuntime, clipboard: FakeClipboard) -> None:
        runtime.press("j", "c")
        assert clipboard.copied == [runtime.state.session.blocks[1].content]

    def test_nothing_to_copy(self, runtime: HeadlessRuntime, clipboard: FakeClipboard) -> None:
        count = len(runtime.state.session.blocks)
        runtime.press("j", "j", "c")  # progress block has no text
        assert clipboard.copied == []
        assert len(runtime.state.session.blocks) == count

    def test_copy_failure_reported(self) -> None:
        rt = HeadlessRuntime(clipboard=FakeClipboard(ok=False))
        rt.press("c")
        block = rt.state.session.blocks[-1]
        assert block.type == BlockType.ERROR
        assert "Clipboard copy failed" in block.error
        assert "copied" not in rt.state.session.blocks[0].metadata


class TestProgressKeys:
    """Tests for restarting progress."""

    def test_refresh_restarts(self, runtime: HeadlessRuntime) -> None:
        runtime.run_until_idle()
        runtime.press("j", "j", "r")
        block = runtime.state.session.blocks[2]
        assert block.progress == 0.0
        assert block.is_loading
        assert len(runtime.timers) == 1

    def test_refresh_while_running_single_chain(self, runtime: HeadlessRuntime) -> None:
        """The chain from before the restart is dropped."""
        runtime.fire_timers()
        runtime.press("j", "j", "r")
        assert len(runtime.timers) == 2
        runtime.fire_timers()
        assert runtime.state.session.blocks[2].progress == 0.01
        assert len(runtime.timers) == 1
        runtime.run_until_idle()
        assert runtime.state.session.blocks[2].progress == 1.0

    def test_refresh_ignored_for_other_blocks(self, runtime: HeadlessRuntime) -> None:
        before = runtime.state
        runtime.press("r")
        assert runtime.state == before

    def test_delete_stops_animation(self, runtime: HeadlessRuntime) -> None:
        runtime.press("j", "j", "d")
        runtime.fire_timers()
        assert not runtime.timers
        assert "3" not in runtime.state.session.ids


class TestOtherEvents:
    """Tests for resize and spinner events."""

    def test_resize_updates_viewports(self, runtime: HeadlessRuntime) -> None:
        runtime.dispatch(Resized(width=120, height=50))
        assert runtime.state.width == 120
        assert all(b.viewport.width == 110 for b in runtime.state.session.blocks)
        assert all(b.viewport.height == 15 for b in runtime.state.session.blocks)

    def test_spinner(self, runtime: HeadlessRuntime) -> None:
        frame = runtime.state.spinner_frame
        runtime.dispatch(SpinnerTick())
        assert runtime.state.spinner_frame == frame + 1


class TestSubmit:
    """Tests for submitting text directly, without the keystroke path."""

    def test_control_characters_kept(self) -> None:
        rt = HeadlessRuntime(Settings(seed=False), shell_runner=fake_shell)
        rt.submit("!echo a\necho b")
        block = rt.state.session.blocks[-1]
        assert block.command == "echo a\necho b"
        assert block.output == "ran echo a\necho b\n"

    def test_no_input_limit(self) -> None:
        rt = HeadlessRuntime(Settings(seed=False, input_limit=3), shell_runner=fake_shell)
        rt.submit("/echo " + "a" * 600)
        assert rt.state.session.blocks[-1].command == "echo " + "a" * 600

    def test_leaves_input_field_alone(self, runtime: HeadlessRuntime) -> None:
        runtime.press("i")
        runtime.type_text("draft")
        runtime.submit("hello")
        assert runtime.state.input_text == "draft"
        assert runtime.state.session.blocks[-1].output == "Executed: hello\nStatus: OK"
