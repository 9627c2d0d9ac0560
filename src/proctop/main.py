"""Command-line entry point for proctop."""

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from proctop.app import ProctopApp
from proctop.config import load_config
from proctop.errors import ProctopError, TerminalUnavailable


def setup_logging(log_file: Path | None) -> None:
    """
    Route proctop's log records.

    The dashboard owns the terminal, so logs only go to a file when one is
    requested and are discarded otherwise.
    """
    package_logger = logging.getLogger("proctop")
    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        return

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s")
    )
    package_logger.addHandler(file_handler)
    package_logger.setLevel(logging.DEBUG)


def require_terminal() -> None:
    """Fail unless both stdin and stdout are attached to a terminal."""
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise TerminalUnavailable("standard input and output must be a terminal")


def fail(exc: ProctopError) -> int:
    print(f"proctop: {exc}", file=sys.stderr)
    return exc.exit_status


def main(argv: Sequence[str] | None = None) -> int:
    """Run proctop and return its exit status."""
    try:
        config = load_config(argv)
        setup_logging(config.log_file)
        require_terminal()
    except ProctopError as exc:
        return fail(exc)
    except OSError as exc:
        # Log file could not be opened
        print(f"proctop: {exc}", file=sys.stderr)
        return 1

    app = ProctopApp(config)
    app.run()
    if app.fatal_error is not None:
        return fail(app.fatal_error)
    return app.return_code or 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
