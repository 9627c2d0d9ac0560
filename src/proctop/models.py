"""Data models for proctop."""

from dataclasses import dataclass, field
from enum import Enum


class ProcessKind(Enum):
    """Whether a process runs in user space or is a kernel thread."""

    USER = "user"
    KERNEL = "kernel"


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable sample of one OS process."""

    pid: int
    command: str  # '' for kernel threads
    owner: str | None = None  # None when the UID does not resolve
    uid: int | None = None
    parent_pid: int | None = None
    name: str = ""
    cpu_time: float = 0.0  # Cumulative user + system seconds
    rss: int = 0  # Bytes
    cpu_percent: float = 0.0
    memory_percent: float = 0.0

    @property
    def kind(self) -> ProcessKind:
        """Kernel threads are exactly the processes without a command line."""
        return ProcessKind.KERNEL if self.command == "" else ProcessKind.USER

    @property
    def is_kernel(self) -> bool:
        return self.kind is ProcessKind.KERNEL


@dataclass(slots=True, frozen=True)
class SnapshotEntry:
    """A record in display position, with its depth in tree mode."""

    record: ProcessRecord
    depth: int = 0


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Ordered process records for one instant, and how they were ordered."""

    entries: tuple[SnapshotEntry, ...] = ()
    sort_column: str = ""
    tree: bool = False
    show_kernel: bool = False
    taken_at: float = 0.0
    _index: dict[int, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for position, entry in enumerate(self.entries):
            self._index[entry.record.pid] = position

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def records(self) -> list[ProcessRecord]:
        return [entry.record for entry in self.entries]

    @property
    def pids(self) -> list[int]:
        return [entry.record.pid for entry in self.entries]

    def position_of(self, pid: int) -> int | None:
        """Return the display position of ``pid``, or None if absent."""
        return self._index.get(pid)
