"""gbloxs: Interactive terminal sessions rendered as navigable blocks."""

from .controller import SessionState, Transition, initial_state, reduce
from .highlighter import LineTag, classify_line, highlight
from .models import Block, BlockType, Session, Viewport
from .renderer import render

__all__ = [
    "Block",
    "BlockType",
    "LineTag",
    "Session",
    "SessionState",
    "Transition",
    "Viewport",
    "classify_line",
    "highlight",
    "initial_state",
    "reduce",
    "render",
]
