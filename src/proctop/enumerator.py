"""Discovery of live processes."""

import logging

import psutil

from proctop.errors import ProcessError, ProcfsUnavailable
from proctop.models import ProcessRecord
from proctop.reader import ProcessReader

logger = logging.getLogger(__name__)


def list_pids() -> list[int]:
    """
    List the live PIDs in ascending order.

    psutil only reports entries of the proc namespace named by an integer;
    PID 0 is not a process we can read and is left out.
    """
    try:
        pids = psutil.pids()
    except OSError as exc:
        raise ProcfsUnavailable(f"cannot list {psutil.PROCFS_PATH}: {exc.strerror or exc}") from exc

    return sorted(pid for pid in pids if pid > 0)


def enumerate_processes(reader: ProcessReader) -> list[ProcessRecord]:
    """
    Read every live process, skipping those that vanish or cannot be read.

    Records are returned in ascending PID order.
    """
    records: list[ProcessRecord] = []
    skipped = 0

    for pid in list_pids():
        try:
            records.append(reader.read(pid))
        except ProcessError as exc:
            # Process died mid-scan or is off limits; it simply won't show
            logger.debug("Skipping %s", exc)
            skipped += 1

    if skipped:
        logger.debug("Enumerated %d processes, skipped %d", len(records), skipped)
    return records
