"""Exception hierarchy for proctop."""


class ProctopError(Exception):
    """Base class for all proctop errors."""

    exit_status = 3


class ProcessError(ProctopError):
    """A single process could not be sampled. Never fatal."""

    def __init__(self, pid: int, reason: str = "") -> None:
        self.pid = pid
        self.reason = reason
        super().__init__(f"pid {pid}: {reason}" if reason else f"pid {pid}")


class ProcessVanished(ProcessError):
    """The process exited between discovery and read."""


class ProcessUnreadable(ProcessError):
    """Permission denied or malformed per-process data."""


class ConfigError(ProctopError):
    """Invalid startup configuration."""

    exit_status = 1


class TerminalUnavailable(ProctopError):
    """No usable terminal to drive the dashboard."""

    exit_status = 2


class ProcfsUnavailable(ProctopError):
    """The process-information filesystem itself could not be listed."""


class SuspendFailed(ProctopError):
    """Signalling ourselves for job-control suspension failed."""
