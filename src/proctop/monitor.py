"""Process monitoring engine for proctop."""

import dataclasses
import logging
import time
from collections.abc import Callable

import psutil

from proctop.columns import get_column, sort_records
from proctop.config import DisplayState
from proctop.enumerator import enumerate_processes
from proctop.filters import Whitelist, filter_records
from proctop.models import ProcessRecord, Snapshot, SnapshotEntry
from proctop.reader import ProcessReader
from proctop.tree import flatten

logger = logging.getLogger(__name__)


class CpuTracker:
    """
    Turns cumulative per-process CPU time into a share of wall-clock time.

    The share is the CPU seconds spent since the previous sample, divided by
    the elapsed time. A PID seen for the first time, or whose counter went
    backwards (PID reuse), reports 0.0.
    """

    def __init__(self) -> None:
        self._previous: dict[int, float] = {}
        self._previous_time: float | None = None

    def sample(self, times: dict[int, float], now: float) -> dict[int, float]:
        """Record ``times`` taken at ``now`` and return CPU percent per PID."""
        shares: dict[int, float] = {}
        elapsed = now - self._previous_time if self._previous_time is not None else 0.0

        for pid, total in times.items():
            before = self._previous.get(pid)
            if before is None or total < before or elapsed <= 0:
                shares[pid] = 0.0
            else:
                shares[pid] = (total - before) / elapsed * 100.0

        # Forget PIDs that are gone
        self._previous = dict(times)
        self._previous_time = now
        return shares


class Monitor:
    """
    Owns the current process snapshot and rebuilds it on demand.

    Each refresh enumerates every process from scratch, filters, sorts and
    optionally arranges the result as a tree, then swaps the new snapshot in
    with a single assignment. Processes that vanish or cannot be read are
    left out; the refresh itself still completes.
    """

    def __init__(
        self,
        whitelist: Whitelist | None = None,
        reader: ProcessReader | None = None,
        clock: Callable[[], float] = time.monotonic,
        memory_total: int | None = None,
    ) -> None:
        """
        Initialize the Monitor.

        Args:
            whitelist: PID and user allow-lists, fixed for the session.
            reader: Per-process reader.
            clock: Monotonic clock used for CPU share computation.
            memory_total: Physical memory in bytes. Queried from psutil if omitted.
        """
        self._whitelist = whitelist or Whitelist()
        self._reader = reader or ProcessReader()
        self._clock = clock
        self._memory_total = memory_total or psutil.virtual_memory().total
        self._cpu = CpuTracker()
        self._snapshot = Snapshot()

    @property
    def whitelist(self) -> Whitelist:
        return self._whitelist

    def current_snapshot(self) -> Snapshot:
        """Return the latest completed snapshot."""
        return self._snapshot

    def refresh(self, state: DisplayState) -> Snapshot:
        """Rebuild the snapshot for ``state`` and make it current."""
        started = self._clock()
        records = self._collect_processes(started)

        visible = filter_records(records, self._whitelist, show_kernel=state.show_kernel)
        ordered = sort_records(visible, get_column(state.sort_column))
        if state.tree:
            entries = flatten(ordered)
        else:
            entries = [SnapshotEntry(record) for record in ordered]

        snapshot = Snapshot(
            entries=tuple(entries),
            sort_column=state.sort_column,
            tree=state.tree,
            show_kernel=state.show_kernel,
            taken_at=started,
        )
        self._snapshot = snapshot

        logger.debug(
            "Refreshed %d/%d processes in %.3fs (sort=%s tree=%s kernel=%s)",
            len(snapshot),
            len(records),
            self._clock() - started,
            state.sort_column,
            state.tree,
            state.show_kernel,
        )
        return snapshot

    def _collect_processes(self, now: float) -> list[ProcessRecord]:
        """Enumerate processes and fill in their CPU and memory shares."""
        records = enumerate_processes(self._reader)
        shares = self._cpu.sample({record.pid: record.cpu_time for record in records}, now)

        return [
            dataclasses.replace(
                record,
                cpu_percent=shares.get(record.pid, 0.0),
                memory_percent=record.rss / self._memory_total * 100.0,
            )
            for record in records
        ]
