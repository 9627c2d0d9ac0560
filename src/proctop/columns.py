"""Column registry and the sorter."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from proctop.models import ProcessRecord


@dataclass(slots=True, frozen=True)
class Column:
    """A named, orderable attribute of a process record."""

    title: str
    width: int
    key: Callable[[ProcessRecord], Any]
    descending: bool = False  # Highest activity first for usage columns


PID_COLUMN = Column("PID", 7, lambda p: p.pid)
USER_COLUMN = Column("USER", 9, lambda p: p.owner or "")
CPU_PERCENT_COLUMN = Column("CPU%", 6, lambda p: p.cpu_percent, descending=True)
MEM_PERCENT_COLUMN = Column("MEM%", 6, lambda p: p.memory_percent, descending=True)
RSS_COLUMN = Column("RSS", 7, lambda p: p.rss, descending=True)
COMMAND_COLUMN = Column("COMMAND", 0, lambda p: p.command)

COLUMNS: dict[str, Column] = {
    column.title: column
    for column in (
        PID_COLUMN,
        USER_COLUMN,
        CPU_PERCENT_COLUMN,
        MEM_PERCENT_COLUMN,
        RSS_COLUMN,
        COMMAND_COLUMN,
    )
}

DEFAULT_SORT_COLUMN = CPU_PERCENT_COLUMN.title


def get_column(title: str) -> Column:
    """Look up a registered column by title. Raises KeyError if unknown."""
    return COLUMNS[title]


def next_column(title: str) -> str:
    """Return the title of the column after ``title``, wrapping around."""
    titles = list(COLUMNS)
    current_index = titles.index(title)
    return titles[(current_index + 1) % len(titles)]


def sort_records(records: Iterable[ProcessRecord], column: Column) -> list[ProcessRecord]:
    """
    Sort records by ``column`` in its natural direction.

    Ties break by ascending PID: ordering by PID first and relying on the
    stability of the second sort (which holds with reverse=True as well)
    gives a total, reproducible order.
    """
    by_pid = sorted(records, key=lambda p: p.pid)
    return sorted(by_pid, key=column.key, reverse=column.descending)
