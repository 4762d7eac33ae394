"""Filesystem entry and category definitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

CHAT_EXTENSION = ".chat"


class FileCategory(str, Enum):
    """Semantic category assigned to every scanned file."""

    DATABASE = "database"
    CONFIG = "config"
    CACHE = "cache"
    LOG = "log"
    TEMP = "temp"
    IMAGE = "image"
    BACKUP = "backup"
    INDEX = "index"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Single classified file found during a storage scan.

    ``path`` is the unique key within a scan.  Entries are immutable
    once the classifier has assigned their category.
    """

    path: Path
    name: str
    size: int
    modified: datetime
    category: FileCategory = FileCategory.UNKNOWN

    @property
    def is_transcript(self) -> bool:
        return is_chat_file(self.name)


def is_chat_file(filename: str) -> bool:
    """Check whether a file name carries the transcript extension."""
    return filename.lower().endswith(CHAT_EXTENSION)
