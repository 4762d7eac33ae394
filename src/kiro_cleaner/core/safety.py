"""Default deletion policy per file category."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import PurePath

from kiro_cleaner.models.file_entry import FileCategory, FileEntry

PROTECTED_NAMES = frozenset({
    "config.json",
    "settings.json",
    "mcp.json",
    "sessions.json",
    "state.vscdb",
    "workspace.json",
    "storage.json",
    ".continuerc.json",
})

# Code index, migration records and the vector database.
PROTECTED_DIRS = frozenset({"index", ".migrations", "lancedb"})

LOG_MIN_AGE = timedelta(days=7)
TRANSCRIPT_MIN_AGE = timedelta(days=30)
BACKUP_MIN_AGE = timedelta(days=30)


class SafetyPolicy:
    """Decides whether a file may be deleted without an explicit override.

    Protected names and directories are checked before any category
    rule and always win.  When *roots* are given, only directories below
    the root holding the file count, as in the classifier.
    """

    def __init__(
        self,
        protected_names: frozenset[str] = PROTECTED_NAMES,
        protected_dirs: frozenset[str] = PROTECTED_DIRS,
        roots: tuple[PurePath, ...] = (),
    ) -> None:
        self._protected_names = protected_names
        self._protected_dirs = protected_dirs
        self._roots = tuple(PurePath(r) for r in roots)

    def _ancestors(self, path: PurePath) -> tuple[str, ...]:
        for root in self._roots:
            try:
                return path.relative_to(root).parts[:-1]
            except ValueError:
                continue
        return path.parts[:-1]

    def is_protected(self, entry: FileEntry) -> bool:
        if entry.name in self._protected_names:
            return True
        ancestors = self._ancestors(PurePath(entry.path))
        return any(part in self._protected_dirs for part in ancestors)

    def is_safe_to_delete(self, entry: FileEntry, now: datetime | None = None) -> bool:
        if self.is_protected(entry):
            return False

        age = (now or datetime.now(timezone.utc)) - entry.modified

        match entry.category:
            case FileCategory.TEMP | FileCategory.CACHE:
                return True
            case FileCategory.LOG:
                return age > LOG_MIN_AGE
            case FileCategory.DATABASE:
                return entry.is_transcript and age > TRANSCRIPT_MIN_AGE
            case FileCategory.BACKUP:
                return age > BACKUP_MIN_AGE
            case _:
                return False
