"""Per-process reads through psutil."""

import pwd
from collections.abc import Iterable
from functools import lru_cache

import psutil

from proctop.errors import ProcessUnreadable, ProcessVanished
from proctop.models import ProcessRecord


def normalize_cmdline(args: Iterable[str]) -> str:
    """
    Turn an argv list into a shell-looking command string.

    Empty arguments, left behind by runs of NUL separators, are dropped.
    """
    return " ".join(part for part in args if part).strip()


@lru_cache(maxsize=256)
def username_for_uid(uid: int) -> str | None:
    """Resolve a numeric UID to a user name, or None if it has no account."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


class ProcessReader:
    """
    Reads identity, ownership and invocation facts for a single PID.

    Raises ProcessVanished when the process is gone and ProcessUnreadable
    when its data cannot be read or parsed. Both are per-process failures
    the caller is expected to skip.
    """

    def read(self, pid: int) -> ProcessRecord:
        """Sample process ``pid`` into a fresh ProcessRecord."""
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                command = normalize_cmdline(proc.cmdline())
                # Ownership follows the effective UID, not the real one
                uid = proc.uids().effective
                parent_pid = proc.ppid()
                name = proc.name()
                times = proc.cpu_times()
                rss = proc.memory_info().rss
        except psutil.NoSuchProcess as exc:
            # ZombieProcess included: it has already exited
            raise ProcessVanished(pid, str(exc)) from exc
        except psutil.AccessDenied as exc:
            raise ProcessUnreadable(pid, str(exc)) from exc
        except FileNotFoundError as exc:
            raise ProcessVanished(pid, str(exc)) from exc
        except (OSError, LookupError, ValueError) as exc:
            # psutil lets parse errors on malformed proc files through
            raise ProcessUnreadable(pid, f"malformed process data: {exc!r}") from exc

        return ProcessRecord(
            pid=pid,
            command=command,
            owner=username_for_uid(uid),
            uid=uid,
            parent_pid=parent_pid or None,
            name=name,
            cpu_time=times.user + times.system,
            rss=rss,
        )
