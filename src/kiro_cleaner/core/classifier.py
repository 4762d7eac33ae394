"""Ordered path heuristics that assign a FileCategory to each file.

Rules are evaluated top to bottom and the first match wins, so the
order encodes precedence between overlapping signals: a ``.db`` file
inside a vector-database directory is index data, a ``.json`` file
inside a cache directory is cache, and so on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Callable, NamedTuple

from kiro_cleaner.models.file_entry import CHAT_EXTENSION, FileCategory, FileEntry
from kiro_cleaner.utils import WalkEntry

log = logging.getLogger(__name__)

DATABASE_EXTENSIONS = frozenset({".db", ".sqlite", ".sqlite3", ".vscdb", CHAT_EXTENSION})
INDEX_DIRS = frozenset({"index", "lancedb"})
INDEX_EXTENSIONS = frozenset({".lance", ".idx", ".index"})
CONFIG_NAMES = frozenset({
    "config.json",
    "settings.json",
    "mcp.json",
    "machineid",
    "languagepacks.json",
    "code.lock",
})
TEMP_EXTENSIONS = frozenset({".tmp", ".temp"})
CRASH_DIRS = frozenset({"crashpad", "crashes", "crash reports"})
DESKTOP_LOCK_NAMES = frozenset({"singletonlock", "singletonsocket", "singletoncookie"})
TEMP_NAMES = frozenset({"temp"})
SESSION_STATE_NAMES = frozenset({
    "cookies",
    "cookies-journal",
    "trust tokens",
    "trust tokens-journal",
    "transportsecurity",
    "network persistent state",
})
CACHE_DIRS = frozenset({
    "cacheddata",
    "cachedextensionvsixs",
    "cachedprofilesdata",
    "gpucache",
    "code cache",
    "dawncache",
    "dawngraphitecache",
    "dawnwebgpucache",
    "grshadercache",
    "shadercache",
    "service worker",
    "local storage",
    "session storage",
    "webstorage",
    "blob_storage",
    "shared_proto_db",
})
KV_SEGMENT_EXTENSIONS = frozenset({".ldb"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".ico"})
ARCHIVE_EXTENSIONS = frozenset({".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".bak"})
STRUCTURED_EXTENSIONS = frozenset({".json", ".xml", ".yaml", ".yml"})


class PathFacts(NamedTuple):
    """Pre-computed, lower-cased views of a path used by the rules."""

    path: PurePath
    name: str
    ext: str
    lower_path: str
    dirs: tuple[str, ...]


def path_facts(path: PurePath | str, root: PurePath | str | None = None) -> PathFacts:
    """Build the facts the rules look at.

    Ancestor directory names are taken relative to *root* when it is
    given, so that directories above the storage root never influence
    the outcome.
    """
    path = PurePath(path)
    rel = path
    if root is not None:
        try:
            rel = path.relative_to(root)
        except ValueError:
            log.debug("%s is not under %s, classifying by full path", path, root)
    name = path.name.lower()
    parts = rel.parts[1:] if rel.anchor else rel.parts
    dirs = tuple(part.lower() for part in parts[:-1])
    lower_path = "/" + "/".join(dirs + (name,))
    return PathFacts(path, name, path.suffix.lower(), lower_path, dirs)


def _under_index(f: PathFacts) -> bool:
    return any(d in INDEX_DIRS for d in f.dirs)


def _is_database(f: PathFacts) -> bool:
    return f.ext in DATABASE_EXTENSIONS


def _is_index(f: PathFacts) -> bool:
    return _under_index(f) or f.ext in INDEX_EXTENSIONS


def _is_config_name(f: PathFacts) -> bool:
    return f.name in CONFIG_NAMES


def _is_log(f: PathFacts) -> bool:
    return f.ext == ".log" or "/logs/" in f.lower_path or ".log" in f.name


def _is_temp(f: PathFacts) -> bool:
    return (
        f.ext in TEMP_EXTENSIONS
        or f.name in TEMP_NAMES
        or f.name in DESKTOP_LOCK_NAMES
        or any(d in CRASH_DIRS for d in f.dirs)
    )


def _is_session_state(f: PathFacts) -> bool:
    return f.name in SESSION_STATE_NAMES


def _is_cache(f: PathFacts) -> bool:
    return (
        "cache" in f.name
        or f.ext in KV_SEGMENT_EXTENSIONS
        or any("cache" in d or d in CACHE_DIRS for d in f.dirs)
    )


def _is_history(f: PathFacts) -> bool:
    return "history" in f.dirs


def _is_image(f: PathFacts) -> bool:
    return f.ext in IMAGE_EXTENSIONS


def _is_archive(f: PathFacts) -> bool:
    return f.ext in ARCHIVE_EXTENSIONS or "backup" in f.name


def _is_session_data(f: PathFacts) -> bool:
    return f.ext in STRUCTURED_EXTENSIONS and "session" in f.name


def _is_structured(f: PathFacts) -> bool:
    return f.ext in STRUCTURED_EXTENSIONS


@dataclass(frozen=True, slots=True)
class Rule:
    """Named predicate paired with the category it assigns."""

    name: str
    matches: Callable[[PathFacts], bool]
    category: FileCategory


RULES: tuple[Rule, ...] = (
    Rule("database_in_index", lambda f: _is_database(f) and _under_index(f), FileCategory.INDEX),
    Rule("database", _is_database, FileCategory.DATABASE),
    Rule("index", _is_index, FileCategory.INDEX),
    Rule("config_name", _is_config_name, FileCategory.CONFIG),
    Rule("log", _is_log, FileCategory.LOG),
    Rule("temp", _is_temp, FileCategory.TEMP),
    Rule("session_state", _is_session_state, FileCategory.CACHE),
    Rule("cache", _is_cache, FileCategory.CACHE),
    Rule("history", _is_history, FileCategory.BACKUP),
    Rule("image", _is_image, FileCategory.IMAGE),
    Rule("archive", _is_archive, FileCategory.BACKUP),
    Rule("session_data", _is_session_data, FileCategory.DATABASE),
    Rule("structured", _is_structured, FileCategory.CONFIG),
)


class PathClassifier:
    """Maps a file path to exactly one FileCategory."""

    def __init__(self, rules: tuple[Rule, ...] = RULES) -> None:
        self._rules = rules

    def match(self, path: PurePath | str, root: PurePath | str | None = None) -> Rule | None:
        """Return the first rule matching *path*, or None."""
        facts = path_facts(path, root)
        for rule in self._rules:
            if rule.matches(facts):
                return rule
        return None

    def classify(self, path: PurePath | str, root: PurePath | str | None = None) -> FileCategory:
        rule = self.match(path, root)
        return rule.category if rule is not None else FileCategory.UNKNOWN

    def entry_for(self, item: WalkEntry, root: Path | None = None) -> FileEntry:
        """Build a classified FileEntry from a walked file."""
        return FileEntry(
            path=item.path,
            name=item.path.name,
            size=item.size,
            modified=item.modified,
            category=self.classify(item.path, root),
        )
