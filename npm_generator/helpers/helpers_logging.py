"""Simple logging helpers for the npmgen CLI."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

LOG_FILE_NAME = "npmgen.log"

_verbose = False
_log_file: Path | None = None


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    CYAN = '\033[96m'  # Alias for OKCYAN
    OKGREEN = '\033[92m'
    GREEN = '\033[92m'  # Alias for OKGREEN
    WARNING = '\033[93m'
    YELLOW = '\033[93m'  # Alias for WARNING
    FAIL = '\033[91m'
    RED = '\033[91m'  # Alias for FAIL
    ENDC = '\033[0m'
    RESET = '\033[0m'  # Alias for ENDC
    BOLD = '\033[1m'
    DIM = '\033[2m'


def set_verbose(enabled: bool, log_dir: Path | None = None) -> None:
    """Enable or disable verbose output.

    When enabled, debug messages are printed and appended to
    ``npmgen.log`` in ``log_dir`` (current directory by default).
    """
    global _verbose, _log_file
    _verbose = enabled
    if not enabled:
        _log_file = None
        return
    _log_file = (log_dir or Path.cwd()) / LOG_FILE_NAME
    if not _log_file.exists():
        _log_file.write_text(f"Log started at {_timestamp()}\n", encoding="utf-8")


def is_verbose() -> bool:
    """Return True when verbose output is enabled."""
    return _verbose


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _append_log(level: str, msg: str, payload: object | None = None) -> None:
    if _log_file is None:
        return
    line = f"[{_timestamp()}] {level.upper()}: {msg}\n"
    if payload is not None:
        line += json.dumps(payload, indent=2, default=str) + "\n"
    with _log_file.open("a", encoding="utf-8") as f:
        f.write(line)


def print_header(msg: str) -> None:
    """Print a header message."""
    print(f"{Colors.HEADER}{Colors.BOLD}{msg}{Colors.ENDC}")


def print_info(msg: str) -> None:
    """Print an info message."""
    print(f"{Colors.OKCYAN}{msg}{Colors.ENDC}")
    _append_log("info", msg)


def print_success(msg: str) -> None:
    """Print a success message."""
    print(f"{Colors.OKGREEN}✓ {msg}{Colors.ENDC}")
    _append_log("info", msg)


def print_warning(msg: str) -> None:
    """Print a warning message."""
    print(f"{Colors.YELLOW}⚠️  {msg}{Colors.ENDC}")
    _append_log("warn", msg)


def print_error(msg: str) -> None:
    """Print an error message."""
    print(f"{Colors.RED}❌ {msg}{Colors.ENDC}")
    _append_log("error", msg)


def print_debug(msg: str, payload: object | None = None) -> None:
    """Print a debug message (verbose mode only).

    Args:
        msg: Message text
        payload: Optional JSON-serializable object written to the log file
    """
    if not _verbose:
        return
    print(f"{Colors.DIM}[debug] {msg}{Colors.ENDC}")
    _append_log("debug", msg, payload)
