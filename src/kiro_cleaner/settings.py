"""JSON-backed settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from kiro_cleaner.core.planner import CleanupOptions
from kiro_cleaner.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "kiro-cleaner"
_SETTINGS_FILE = "settings.json"

# Known keys with their defaults.  Values set through ``set_from_string``
# are coerced to the type of the default.
DEFAULTS: dict[str, Any] = {
    "cleanup.keep_logs": False,
    "cleanup.keep_cache": False,
    "cleanup.keep_chats": False,
    "cleanup.keep_index": False,
    "cleanup.keep_recent": 0,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("cleanup.keep_logs")  # reads data["cleanup"]["keep_logs"]
        settings.set("cleanup.keep_recent", 7)  # writes + saves
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        if default is None:
            default = DEFAULTS.get(key)
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def set_from_string(self, key: str, raw: str) -> Any:
        """Parse *raw* according to the key's default type and store it.

        Raises:
            KeyError: If *key* is not a known setting.
            ValueError: If *raw* cannot be converted.
        """
        if key not in DEFAULTS:
            raise KeyError(key)
        default = DEFAULTS[key]
        value: Any
        if isinstance(default, bool):
            lowered = raw.strip().lower()
            if lowered in _TRUE:
                value = True
            elif lowered in _FALSE:
                value = False
            else:
                raise ValueError(f"Expected a boolean for {key}, got {raw!r}")
        else:
            value = int(raw)
            if value < 0:
                raise ValueError(f"{key} must not be negative")
        self.set(key, value)
        return value

    def items(self) -> list[tuple[str, Any]]:
        """Return every known key with its effective value."""
        return [(key, self.get(key)) for key in DEFAULTS]

    def cleanup_options(self) -> CleanupOptions:
        """Build the planner options from the stored settings."""
        keep_recent = self.get("cleanup.keep_recent")
        if isinstance(keep_recent, bool) or not isinstance(keep_recent, int) or keep_recent < 0:
            log.warning("Invalid cleanup.keep_recent %r, using 0", keep_recent)
            keep_recent = 0
        return CleanupOptions(
            keep_logs=bool(self.get("cleanup.keep_logs")),
            keep_cache=bool(self.get("cleanup.keep_cache")),
            keep_chats=bool(self.get("cleanup.keep_chats")),
            keep_index=bool(self.get("cleanup.keep_index")),
            keep_recent=keep_recent,
        )

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings in %s: not an object", self._path)

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)
