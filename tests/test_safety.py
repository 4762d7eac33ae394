"""Tests for the deletion safety policy."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from kiro_cleaner.core.safety import SafetyPolicy
from kiro_cleaner.models.file_entry import FileCategory, FileEntry

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _entry(path: str, category: FileCategory, age_days: float = 0, size: int = 10) -> FileEntry:
    p = Path(path)
    return FileEntry(
        path=p,
        name=p.name,
        size=size,
        modified=NOW - timedelta(days=age_days),
        category=category,
    )


class TestProtection:
    @pytest.mark.parametrize(
        "name",
        ["config.json", "settings.json", "mcp.json", "sessions.json", "state.vscdb", "workspace.json"],
    )
    def test_protected_names(self, name):
        policy = SafetyPolicy()
        entry = _entry(f"/data/Kiro/User/{name}", FileCategory.TEMP, age_days=365)
        assert policy.is_protected(entry)
        assert not policy.is_safe_to_delete(entry, NOW)

    @pytest.mark.parametrize("directory", ["index", ".migrations", "lancedb"])
    def test_protected_directories(self, directory):
        policy = SafetyPolicy()
        entry = _entry(f"/data/agent/{directory}/segment.tmp", FileCategory.TEMP, age_days=365)
        assert policy.is_protected(entry)
        assert not policy.is_safe_to_delete(entry, NOW)

    def test_unprotected_file(self):
        policy = SafetyPolicy()
        assert not policy.is_protected(_entry("/data/Kiro/upload.tmp", FileCategory.TEMP))

    def test_file_named_like_protected_dir_is_not_protected(self):
        policy = SafetyPolicy()
        assert not policy.is_protected(_entry("/data/Kiro/Cache/index", FileCategory.CACHE))

    def test_directories_above_root_ignored(self):
        policy = SafetyPolicy(roots=(Path("/srv/index/Kiro"),))
        entry = _entry("/srv/index/Kiro/Cache/data_0", FileCategory.CACHE)
        assert not policy.is_protected(entry)
        assert policy.is_safe_to_delete(entry, NOW)

    def test_directories_below_root_still_protected(self):
        policy = SafetyPolicy(roots=(Path("/srv/index/Kiro"),))
        assert policy.is_protected(_entry("/srv/index/Kiro/lancedb/seg.tmp", FileCategory.TEMP))

    def test_path_outside_roots_uses_full_path(self):
        policy = SafetyPolicy(roots=(Path("/data/Kiro"),))
        assert policy.is_protected(_entry("/elsewhere/index/a.tmp", FileCategory.TEMP))

    def test_custom_protected_sets(self):
        policy = SafetyPolicy(protected_names=frozenset({"keep.tmp"}), protected_dirs=frozenset())
        assert policy.is_protected(_entry("/x/keep.tmp", FileCategory.TEMP))
        assert not policy.is_protected(_entry("/x/index/other.tmp", FileCategory.TEMP))


class TestCategoryRules:
    def test_temp_and_cache_always_safe(self):
        policy = SafetyPolicy()
        assert policy.is_safe_to_delete(_entry("/d/a.tmp", FileCategory.TEMP), NOW)
        assert policy.is_safe_to_delete(_entry("/d/Cache/data_0", FileCategory.CACHE), NOW)

    def test_log_needs_a_week(self):
        policy = SafetyPolicy()
        assert not policy.is_safe_to_delete(_entry("/d/main.log", FileCategory.LOG, age_days=3), NOW)
        assert not policy.is_safe_to_delete(_entry("/d/main.log", FileCategory.LOG, age_days=7), NOW)
        assert policy.is_safe_to_delete(_entry("/d/main.log", FileCategory.LOG, age_days=8), NOW)

    def test_transcript_needs_a_month(self):
        policy = SafetyPolicy()
        assert not policy.is_safe_to_delete(_entry("/d/ws/a.chat", FileCategory.DATABASE, age_days=10), NOW)
        assert policy.is_safe_to_delete(_entry("/d/ws/a.chat", FileCategory.DATABASE, age_days=31), NOW)

    def test_other_databases_never_safe(self):
        policy = SafetyPolicy()
        assert not policy.is_safe_to_delete(_entry("/d/store.db", FileCategory.DATABASE, age_days=900), NOW)

    def test_backup_needs_a_month(self):
        policy = SafetyPolicy()
        assert not policy.is_safe_to_delete(_entry("/d/History/x/a.ts", FileCategory.BACKUP, age_days=5), NOW)
        assert policy.is_safe_to_delete(_entry("/d/History/x/a.ts", FileCategory.BACKUP, age_days=45), NOW)

    @pytest.mark.parametrize(
        "category",
        [FileCategory.CONFIG, FileCategory.IMAGE, FileCategory.INDEX, FileCategory.UNKNOWN],
    )
    def test_remaining_categories_never_safe(self, category):
        policy = SafetyPolicy()
        assert not policy.is_safe_to_delete(_entry("/d/thing", category, age_days=1000), NOW)

    def test_defaults_to_current_time(self):
        policy = SafetyPolicy()
        entry = FileEntry(
            path=Path("/d/old.log"),
            name="old.log",
            size=1,
            modified=datetime.now(timezone.utc) - timedelta(days=30),
            category=FileCategory.LOG,
        )
        assert policy.is_safe_to_delete(entry)
