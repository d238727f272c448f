"""Demo content a fresh session starts with."""

from .models import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH, Block, BlockType, Session
from .store import rebuild_viewport

LISTING = (
    "total 48\n"
    "drwxr-xr-x  8 user user  4096 Jan 15 10:30 .\n"
    "drwxr-xr-x 18 user user  4096 Jan 10 09:15 ..\n"
    "-rw-r--r--  1 user user  1024 Jan 15 10:25 file.txt"
)

PROCESS_TABLE = [
    ["Name", "Status", "CPU %", "Memory %"],
    ["nginx", "Running", "2.5", "15.3"],
    ["postgres", "Running", "1.2", "45.8"],
    ["redis", "Running", "0.8", "12.1"],
]

# Shown by the "t" overlay.
OVERLAY_COLUMNS = [("Name", 15), ("Status", 12), ("CPU %", 10), ("Memory %", 12)]
OVERLAY_ROWS = PROCESS_TABLE[1:] + [["node", "Running", "5.1", "28.4"]]


def seed_blocks() -> list[Block]:
    blocks = [
        Block(
            id="1",
            type=BlockType.COMMAND,
            title="Command Execution",
            command="ls -la",
            output=LISTING,
        ),
        Block(
            id="2",
            type=BlockType.INFO,
            title="System Information",
            content="OS: Linux\nKernel: 6.12.57\nArchitecture: amd64\nUptime: 5 days, 3 hours",
        ),
        Block(
            id="3",
            type=BlockType.PROGRESS,
            title="Progress Indicator",
            progress=0.65,
            is_loading=True,
        ),
        Block(id="4", type=BlockType.TABLE, title="Data Table", table_data=PROCESS_TABLE),
        Block(
            id="5",
            type=BlockType.SUCCESS,
            title="Success Message",
            content="✓ Operation completed successfully!\n✓ All checks passed\n✓ System is healthy",
        ),
    ]
    return [
        rebuild_viewport(b, DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_HEIGHT) for b in blocks
    ]


def seed_session() -> Session:
    blocks = seed_blocks()
    blocks[0] = blocks[0].model_copy(update={"selected": True})
    return Session(blocks=tuple(blocks), selected_index=0)
