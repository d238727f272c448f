"""Pytest configuration and fixtures."""

import pytest

from gbloxs.clipboard import ClipboardOutcome
from gbloxs.config import Settings
from gbloxs.events import Resized
from gbloxs.models import Block, BlockType, Session
from gbloxs.runtime import HeadlessRuntime
from gbloxs.seed import seed_session


class FakeClipboard:
    """Records copied text instead of touching the system clipboard."""

    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.copied: list[str] = []

    def __call__(self, text: str) -> ClipboardOutcome:
        if not self.ok:
            return ClipboardOutcome(success=False, method="none", error="no clipboard command found")
        self.copied.append(text)
        return ClipboardOutcome(success=True, method="fake")


@pytest.fixture
def seeded() -> Session:
    """The demo session: five blocks, first one selected."""
    return seed_session()


@pytest.fixture
def three_blocks() -> Session:
    """Three plain info blocks with the middle one selected."""
    blocks = tuple(
        Block(id=str(i), type=BlockType.INFO, title=f"Block {i}", selected=i == 1) for i in range(3)
    )
    return Session(blocks=blocks, selected_index=1)


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def runtime(clipboard: FakeClipboard) -> HeadlessRuntime:
    """Headless runtime over the demo session, sized like a small terminal."""
    rt = HeadlessRuntime(Settings(), clipboard=clipboard)
    rt.dispatch(Resized(width=100, height=40))
    return rt


@pytest.fixture
def empty_runtime(clipboard: FakeClipboard) -> HeadlessRuntime:
    rt = HeadlessRuntime(Settings(seed=False), clipboard=clipboard)
    rt.dispatch(Resized(width=100, height=40))
    return rt
