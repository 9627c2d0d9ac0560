"""Shared fixtures for proctop tests."""

import os
import pwd
from pathlib import Path

import psutil
import pytest

from proctop.models import ProcessRecord

UNKNOWN_UID = 987654
PAGE_SIZE = os.sysconf("SC_PAGE_SIZE")
CLOCK_TICKS = os.sysconf("SC_CLK_TCK")


class FakeProc:
    """A directory laid out like /proc, holding only what the reader needs."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def add(
        self,
        pid: int,
        cmdline: bytes = b"",
        uid: int | tuple[int, int, int, int] = 0,
        ppid: int = 1,
        name: str = "proc",
        utime: int = 0,
        stime: int = 0,
        rss_kb: int | None = None,
    ) -> Path:
        uids = uid if isinstance(uid, tuple) else (uid, uid, uid, uid)
        directory = self.root / str(pid)
        directory.mkdir(exist_ok=True)
        (directory / "cmdline").write_bytes(cmdline)

        status = (
            f"Name:\t{name}\n"
            "State:\tS (sleeping)\n"
            f"Pid:\t{pid}\n"
            f"PPid:\t{ppid}\n"
            f"Uid:\t{uids[0]}\t{uids[1]}\t{uids[2]}\t{uids[3]}\n"
            "Gid:\t0\t0\t0\t0\n"
        )
        if rss_kb is not None:
            status += f"VmRSS:\t{rss_kb:>8} kB\n"
        (directory / "status").write_text(status)

        # Fields after the comm: state, ppid ... utime (14), stime (15) ... starttime (22)
        fields = ["S", ppid, pid, pid, 0, -1, 4194560, 100, 0, 0, 0, utime, stime, 0, 0, 20, 0, 1, 0, 100]
        fields += [0] * 32
        (directory / "stat").write_text(f"{pid} ({name}) " + " ".join(map(str, fields)) + "\n")

        rss_pages = (rss_kb or 0) * 1024 // PAGE_SIZE
        (directory / "statm").write_text(f"{rss_pages * 4} {rss_pages} 0 0 0 {rss_pages} 0\n")
        return directory

    def remove(self, pid: int) -> None:
        directory = self.root / str(pid)
        for child in directory.iterdir():
            child.unlink()
        directory.rmdir()


@pytest.fixture
def fake_proc(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeProc:
    """An empty fake /proc with the usual non-PID clutter, used by psutil."""
    root = tmp_path / "proc"
    root.mkdir()
    (root / "self").mkdir()
    (root / "sys").mkdir()
    (root / "meminfo").write_text("MemTotal: 1024 kB\n")
    (root / "stat").write_text("cpu  0 0 0 0 0 0 0 0 0 0\nbtime 1700000000\n")
    monkeypatch.setattr(psutil, "PROCFS_PATH", str(root))
    return FakeProc(root)


@pytest.fixture
def current_user() -> tuple[int, str]:
    """UID and name of the account running the tests."""
    uid = os.getuid()
    return uid, pwd.getpwuid(uid).pw_name


def _make_record(pid: int, command: str = "/bin/true", **kwargs) -> ProcessRecord:
    kwargs.setdefault("owner", "root")
    return ProcessRecord(pid=pid, command=command, **kwargs)


@pytest.fixture
def make_record():
    """Factory for ProcessRecords with sensible defaults."""
    return _make_record


@pytest.fixture
def unknown_uid() -> int:
    """A UID with no account behind it."""
    return UNKNOWN_UID
