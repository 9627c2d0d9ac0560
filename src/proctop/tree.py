"""Parent/child linkage of process records for hierarchical display."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from proctop.models import ProcessRecord, SnapshotEntry


@dataclass(slots=True)
class Forest:
    """
    Process records addressed by PID, with parent links held as PIDs.

    ``roots`` and each ``children`` list keep the order of the input
    sequence, so sorting the input first orders siblings too.
    """

    records: dict[int, ProcessRecord] = field(default_factory=dict)
    roots: list[int] = field(default_factory=list)
    children: dict[int, list[int]] = field(default_factory=dict)

    def walk(self) -> Iterator[SnapshotEntry]:
        """Yield every record in pre-order, each parent before its children."""
        stack = [(pid, 0) for pid in reversed(self.roots)]
        while stack:
            pid, depth = stack.pop()
            yield SnapshotEntry(self.records[pid], depth)
            for child in reversed(self.children.get(pid, ())):
                stack.append((child, depth + 1))


def _parent_in(record: ProcessRecord, records: dict[int, ProcessRecord]) -> int | None:
    parent = record.parent_pid
    if parent is None or parent == record.pid or parent not in records:
        return None
    return parent


def build_forest(records: Sequence[ProcessRecord]) -> Forest:
    """
    Link each record under its parent when the parent is in ``records``.

    Records whose parent was filtered out (or never existed) become roots
    themselves rather than disappearing with it.
    """
    forest = Forest(records={record.pid: record for record in records})

    parents: dict[int, int | None] = {
        record.pid: _parent_in(record, forest.records) for record in records
    }
    _break_cycles(parents)

    for record in records:
        parent = parents[record.pid]
        if parent is None:
            forest.roots.append(record.pid)
        else:
            forest.children.setdefault(parent, []).append(record.pid)
    return forest


def _break_cycles(parents: dict[int, int | None]) -> None:
    # PID reuse between reads can, in theory, produce a loop; cut it so the
    # lowest PID on the loop becomes a root.
    state: dict[int, int] = {}  # 1 = on current path, 2 = done
    for start in parents:
        path = []
        pid: int | None = start
        while pid is not None and pid not in state:
            state[pid] = 1
            path.append(pid)
            pid = parents[pid]
        if pid is not None and state[pid] == 1:
            loop = path[path.index(pid):]
            parents[min(loop)] = None
        for visited in path:
            state[visited] = 2


def flatten(records: Sequence[ProcessRecord]) -> list[SnapshotEntry]:
    """Build the forest for ``records`` and return its pre-order traversal."""
    return list(build_forest(records).walk())
