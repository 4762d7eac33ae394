"""Locates the IDE's storage directories for the current platform."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from kiro_cleaner.utils import xdg_config_home

log = logging.getLogger(__name__)

_APP_DIR_NAMES = ("kiro", "Kiro")
_AGENT_SUBPATH = Path("User") / "globalStorage" / "kiro.kiroagent"


def candidate_storage_roots(platform: str | None = None) -> list[Path]:
    """Return every place the IDE may keep its data, existing or not."""
    platform = platform or sys.platform

    if platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
        return [base / name for name in _APP_DIR_NAMES]
    if platform == "win32":
        app_data = os.environ.get("APPDATA")
        if not app_data:
            return []
        return [Path(app_data) / name for name in _APP_DIR_NAMES]
    if platform.startswith("linux"):
        return [xdg_config_home() / name for name in _APP_DIR_NAMES]
    return [Path.home() / ".kiro", Path.home() / ".config" / "kiro"]


def find_storage_roots(platform: str | None = None) -> list[Path]:
    """Return the existing storage roots.  Empty when none exist."""
    roots: list[Path] = []
    seen: set[tuple[int, int]] = set()
    for candidate in candidate_storage_roots(platform):
        try:
            st = candidate.stat()
        except OSError:
            continue
        if not candidate.is_dir():
            continue
        # Case-insensitive filesystems report both spellings.
        key = (st.st_dev, st.st_ino)
        if key in seen:
            continue
        seen.add(key)
        roots.append(candidate)

    if not roots:
        log.info("No storage root found")
    return roots


def find_agent_path(platform: str | None = None) -> Path | None:
    """Return the transcript archive root, or None if it does not exist."""
    for root in find_storage_roots(platform):
        agent = root / _AGENT_SUBPATH
        if agent.is_dir():
            return agent
    log.info("No conversation archive found")
    return None
