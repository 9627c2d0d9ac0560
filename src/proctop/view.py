"""Text layout of the process list."""

import os

from proctop.columns import COLUMNS, COMMAND_COLUMN
from proctop.config import DisplayState
from proctop.models import ProcessRecord, Snapshot, SnapshotEntry
from proctop.viewport import Viewport


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def display_command(entry: SnapshotEntry, verbose: bool, tree: bool) -> str:
    """
    The command column text for an entry.

    Without ``verbose`` only the executable's base name is shown. Kernel
    threads have no command line, so their short name appears in brackets.
    """
    record = entry.record
    if record.is_kernel:
        text = f"[{record.name}]"
    elif verbose:
        text = record.command
    else:
        text = os.path.basename(record.command.split(" ", 1)[0]) or record.command

    if tree and entry.depth:
        text = "  " * (entry.depth - 1) + "└─ " + text
    return text


def owner_label(record: ProcessRecord) -> str:
    """User name, or the bare UID when it has no account."""
    if record.owner is not None:
        return record.owner
    return str(record.uid) if record.uid is not None else "?"


def format_row(entry: SnapshotEntry, state: DisplayState) -> str:
    record = entry.record
    cells = [
        f"{record.pid:>{COLUMNS['PID'].width}}",
        f"{owner_label(record)[:9]:<{COLUMNS['USER'].width}}",
        f"{record.cpu_percent:>{COLUMNS['CPU%'].width}.1f}",
        f"{record.memory_percent:>{COLUMNS['MEM%'].width}.1f}",
        f"{format_bytes(record.rss):>{COLUMNS['RSS'].width}}",
    ]
    return " ".join(cells) + " " + display_command(entry, state.verbose, state.tree)


def format_header(state: DisplayState) -> str:
    cells = []
    for column in COLUMNS.values():
        if column is COMMAND_COLUMN:
            continue
        align = "<" if column.title == "USER" else ">"
        title = column.title + ("*" if column.title == state.sort_column else "")
        cells.append(f"{title:{align}{column.width}}")
    command = COMMAND_COLUMN.title + ("*" if state.sort_column == COMMAND_COLUMN.title else "")
    return " ".join(cells) + " " + command


def format_summary(snapshot: Snapshot, state: DisplayState) -> str:
    """One-line status above the table."""
    return (
        f"Tasks: {len(snapshot)}  Sort: {state.sort_column}  "
        f"Tree: {'on' if state.tree else 'off'}  "
        f"Kernel: {'on' if state.show_kernel else 'off'}"
    )


def scroll(line: str, viewport: Viewport) -> str:
    """Apply the horizontal offset and clip to the viewport width."""
    return line[viewport.offset : viewport.offset + viewport.width]


def render_rows(snapshot: Snapshot, viewport: Viewport, state: DisplayState) -> list[tuple[str, bool]]:
    """Visible process lines, each paired with whether it is selected."""
    return [
        (scroll(format_row(snapshot.entries[index], state), viewport), index == viewport.selected)
        for index in viewport.visible_range()
    ]
