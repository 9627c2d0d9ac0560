"""Classification and allow-list filtering of process records."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from proctop.models import ProcessRecord


@dataclass(slots=True, frozen=True)
class Whitelist:
    """PIDs and user names to restrict the display to. Empty means everything."""

    pids: frozenset[int] = field(default_factory=frozenset)
    users: frozenset[str] = field(default_factory=frozenset)

    def admits(self, record: ProcessRecord) -> bool:
        """Check the record against every non-empty allow-list."""
        if self.pids and record.pid not in self.pids:
            return False
        if self.users and (record.owner is None or record.owner not in self.users):
            return False
        return True


def filter_records(
    records: Iterable[ProcessRecord],
    whitelist: Whitelist,
    show_kernel: bool = False,
) -> list[ProcessRecord]:
    """Keep the records passing kernel visibility and both allow-lists, in order."""
    return [
        record
        for record in records
        if (show_kernel or not record.is_kernel) and whitelist.admits(record)
    ]
