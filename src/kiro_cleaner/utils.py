"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from kiro_cleaner.models.clean_result import CleanupCandidate, CleanupResult, DeletionFailure, ItemOutcome

log = logging.getLogger(__name__)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def mtime_to_datetime(mtime: float) -> datetime:
    """Convert a stat mtime to an aware UTC datetime."""
    return datetime.fromtimestamp(mtime, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """One visited filesystem entry."""

    path: Path
    is_dir: bool
    size: int
    modified: datetime


def walk_tree(root: Path | str) -> Iterator[WalkEntry]:
    """Walk a directory tree depth-first in sorted order.

    The root itself is yielded first.  Symlinks are never followed.
    Entries that cannot be listed or stat'ed are skipped.
    """
    root = Path(root)
    try:
        st = root.stat()
    except OSError:
        log.debug("Cannot access: %s", root)
        return
    if not stat.S_ISDIR(st.st_mode):
        return

    stack: list[WalkEntry] = [WalkEntry(root, True, 0, mtime_to_datetime(st.st_mtime))]
    while stack:
        current = stack.pop()
        yield current
        if not current.is_dir:
            continue
        try:
            with os.scandir(current.path) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError:
            log.debug("Cannot read directory: %s", current.path)
            continue

        found: list[WalkEntry] = []
        for child in children:
            try:
                st = child.stat(follow_symlinks=False)
            except OSError:
                log.debug("Cannot access: %s", child.path)
                continue
            path = Path(child.path)
            if stat.S_ISDIR(st.st_mode):
                found.append(WalkEntry(path, True, 0, mtime_to_datetime(st.st_mtime)))
            elif stat.S_ISREG(st.st_mode):
                found.append(WalkEntry(path, False, st.st_size, mtime_to_datetime(st.st_mtime)))
        # Reversed so the first child is popped first.
        stack.extend(reversed(found))


def remove_entries(candidates: list[CleanupCandidate]) -> CleanupResult:
    """Delete each candidate independently and collect per-item outcomes.

    A file that is already gone counts as skipped, not as an error.
    Any other failure is recorded and the remaining candidates are
    still processed.
    """
    result = CleanupResult()

    for candidate in candidates:
        path = candidate.entry.path
        try:
            path.unlink()
        except FileNotFoundError:
            log.debug("Already deleted: %s", path)
            result.skipped += 1
            result.outcomes.append(ItemOutcome(path, "skipped", "already deleted"))
            continue
        except OSError as e:
            log.warning("Cannot delete %s: %s", path, e)
            result.errors.append(DeletionFailure(path, str(e)))
            result.outcomes.append(ItemOutcome(path, "failed", str(e)))
            continue

        result.freed_bytes += candidate.size
        result.files_removed += 1
        result.outcomes.append(ItemOutcome(path, "deleted"))

    return result


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_relative_time(dt: datetime | None) -> str:
    """Format a datetime as relative time ('2 hours ago')."""
    if dt is None:
        return "never"

    seconds = int((datetime.now(timezone.utc) - dt).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        m = seconds // 60
        return f"{m} minute{'s' if m != 1 else ''} ago"
    if seconds < 86400:
        h = seconds // 3600
        return f"{h} hour{'s' if h != 1 else ''} ago"
    d = seconds // 86400
    if d < 30:
        return f"{d} day{'s' if d != 1 else ''} ago"
    mo = d // 30
    if mo < 12:
        return f"{mo} month{'s' if mo != 1 else ''} ago"
    y = d // 365
    return f"{y} year{'s' if y != 1 else ''} ago"
