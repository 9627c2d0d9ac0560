"""Startup configuration and the mutable display state."""

import argparse
import pwd
import re
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from proctop import __version__
from proctop.columns import COLUMNS, DEFAULT_SORT_COLUMN, next_column
from proctop.errors import ConfigError
from proctop.filters import Whitelist

DEFAULT_DELAY = 1.5  # Seconds

_DURATION_RE = re.compile(r"^\s*(?P<value>[+-]?\d+(?:\.\d*)?|[+-]?\.\d+)\s*(?P<unit>ms|s|m|h)?\s*$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


@dataclass(slots=True, frozen=True)
class Config:
    """Validated command-line configuration. Never changes after startup."""

    delay: float = DEFAULT_DELAY
    show_kernel: bool = False
    sort_column: str = DEFAULT_SORT_COLUMN
    tree: bool = False
    verbose: bool = False
    whitelist: Whitelist = field(default_factory=Whitelist)
    log_file: Path | None = None

    def __post_init__(self) -> None:
        check_delay(self.delay)
        if self.sort_column not in COLUMNS:
            raise ConfigError(f"{self.sort_column} is not a valid sort column")


@dataclass(slots=True)
class DisplayState:
    """
    Display options that can change at runtime.

    Owned and mutated by the scheduler in response to intents; the monitor
    and renderer are handed it on each call.
    """

    sort_column: str = DEFAULT_SORT_COLUMN
    tree: bool = False
    show_kernel: bool = False
    verbose: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "DisplayState":
        return cls(
            sort_column=config.sort_column,
            tree=config.tree,
            show_kernel=config.show_kernel,
            verbose=config.verbose,
        )

    def cycle_sort(self) -> str:
        """Cycle to the next sort column and return its title."""
        self.sort_column = next_column(self.sort_column)
        return self.sort_column


def check_delay(seconds: float) -> None:
    """Reject delays the ticker cannot wait for."""
    if seconds <= 0:
        raise ConfigError(f"delay ({seconds}s) must be positive")
    if seconds > threading.TIMEOUT_MAX:
        raise ConfigError(f"delay ({seconds}s) must not exceed {threading.TIMEOUT_MAX:.0f}s")


def parse_duration(value: str) -> float:
    """Parse ``1.5``, ``1500ms``, ``2s``, ``1m`` or ``1h`` into seconds."""
    match = _DURATION_RE.match(value)
    if match is None:
        raise ConfigError(f"invalid delay {value!r}")
    seconds = float(match.group("value")) * _UNIT_SECONDS[match.group("unit")]
    check_delay(seconds)
    return seconds


def parse_pids(value: str) -> frozenset[int]:
    """Parse a comma-separated PID list; every token must be a positive integer."""
    if not value:
        return frozenset()
    pids = set()
    for token in value.split(","):
        token = token.strip()
        if not (token.isascii() and token.isdigit()) or int(token) == 0:
            raise ConfigError(f"{token} is not a valid PID")
        pids.add(int(token))
    return frozenset(pids)


def parse_users(value: str) -> frozenset[str]:
    """Parse a comma-separated user list; every name must be a real account."""
    if not value:
        return frozenset()
    users = set()
    for username in value.split(","):
        username = username.strip()
        try:
            users.add(pwd.getpwnam(username).pw_name)
        except KeyError:
            raise ConfigError(f"user {username} does not exist") from None
    return frozenset(users)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="proctop",
        description="Interactive terminal process monitor.",
    )
    parser.add_argument(
        "-d", "--delay", default=str(DEFAULT_DELAY), help="delay between updates (e.g. 1.5, 500ms, 2s)"
    )
    parser.add_argument("-k", "--kernel", action="store_true", help="show kernel threads")
    parser.add_argument("-p", "--pids", default="", help="filter by PID (comma-separated list)")
    parser.add_argument(
        "-s",
        "--sort",
        default=DEFAULT_SORT_COLUMN,
        help=f"sort by the specified column ({', '.join(COLUMNS)})",
    )
    parser.add_argument("-t", "--tree", action="store_true", help="display process list as tree")
    parser.add_argument("-u", "--users", default="", help="filter by user (comma-separated list)")
    parser.add_argument("--verbose", action="store_true", help="show full command line with arguments")
    parser.add_argument("--log-file", type=Path, default=None, help="write debug log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config(argv: Sequence[str] | None = None) -> Config:
    """
    Parse and validate the command line.

    Raises ConfigError for any invalid value; nothing has been refreshed or
    drawn at that point.
    """
    args = build_parser().parse_args(argv)
    return Config(
        delay=parse_duration(args.delay),
        show_kernel=args.kernel,
        sort_column=args.sort,
        tree=args.tree,
        verbose=args.verbose,
        whitelist=Whitelist(pids=parse_pids(args.pids), users=parse_users(args.users)),
        log_file=args.log_file,
    )
