"""Detects and stops running IDE processes before cleaning."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import time
from dataclasses import dataclass

log = logging.getLogger(__name__)

_PROCESS_PATTERN = "kiro"
_PGREP_TIMEOUT = 10
_POLL_INTERVAL = 0.5


class ProcessError(Exception):
    """Raised when the IDE cannot be stopped."""


@dataclass(frozen=True, slots=True)
class IdeProcess:
    pid: int
    name: str


def pgrep_available() -> bool:
    """Check if pgrep is available on the system."""
    return shutil.which("pgrep") is not None


def find_ide_processes() -> list[IdeProcess]:
    """List running IDE processes.  Empty when pgrep is missing."""
    if not pgrep_available():
        log.debug("pgrep not available, cannot detect running IDE")
        return []

    try:
        proc = subprocess.run(
            ["pgrep", "-l", "-i", _PROCESS_PATTERN],
            capture_output=True,
            text=True,
            timeout=_PGREP_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        log.debug("pgrep failed: %s", exc)
        return []

    # Exit code 1 means no process matched.
    if proc.returncode != 0:
        return []

    own_pid = os.getpid()
    processes: list[IdeProcess] = []
    for line in proc.stdout.splitlines():
        parts = line.strip().split(maxsplit=1)
        if not parts or not parts[0].isdigit():
            continue
        pid = int(parts[0])
        if pid == own_pid:
            continue
        processes.append(IdeProcess(pid=pid, name=parts[1] if len(parts) > 1 else "kiro"))
    return processes


def is_ide_running() -> bool:
    return bool(find_ide_processes())


def stop_ide(graceful: bool = True) -> None:
    """Signal every IDE process to exit.

    Raises:
        ProcessError: If a process cannot be signalled.
    """
    sig = signal.SIGTERM if graceful else signal.SIGKILL
    for process in find_ide_processes():
        try:
            os.kill(process.pid, sig)
        except ProcessLookupError:
            continue
        except OSError as exc:
            raise ProcessError(f"Cannot stop process {process.pid} ({process.name}): {exc}") from exc
        log.info("Sent %s to %s (%d)", sig.name, process.name, process.pid)


def wait_for_exit(timeout: float = 5.0) -> bool:
    """Poll until no IDE process is left.  Returns False on timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if not is_ide_running():
            return True
        time.sleep(_POLL_INTERVAL)
    return not is_ide_running()
