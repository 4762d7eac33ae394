"""Builds and executes cleanup plans."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from kiro_cleaner.core.safety import SafetyPolicy
from kiro_cleaner.models.clean_result import CleanupCandidate, CleanupPlan, CleanupResult
from kiro_cleaner.models.conversation import CleanableConversation
from kiro_cleaner.models.file_entry import FileCategory, FileEntry
from kiro_cleaner.utils import bytes_to_human, remove_entries

log = logging.getLogger(__name__)

_LARGE_PLAN_BYTES = 100 * 1024 * 1024
_LARGE_PLAN_COUNT = 100


@dataclass(frozen=True, slots=True)
class CleanupOptions:
    """User choices about what to keep.

    ``keep_recent`` protects everything modified within that many days;
    0 disables the cutoff.
    """

    keep_logs: bool = False
    keep_cache: bool = False
    keep_chats: bool = False
    keep_index: bool = False
    keep_recent: int = 0


class CleanupPlanner:
    """Selects files for deletion and carries out the plan."""

    def __init__(self, options: CleanupOptions | None = None, policy: SafetyPolicy | None = None) -> None:
        self.options = options or CleanupOptions()
        self.policy = policy or SafetyPolicy()

    def _reason_for(self, entry: FileEntry) -> str | None:
        opts = self.options
        match entry.category:
            case FileCategory.TEMP:
                return "temp"
            case FileCategory.LOG if not opts.keep_logs:
                return "log"
            case FileCategory.CACHE if not opts.keep_cache:
                return "cache"
            case FileCategory.INDEX if not opts.keep_index:
                return "index"
            case FileCategory.DATABASE if entry.is_transcript and not opts.keep_chats:
                return "chat"
            case FileCategory.BACKUP:
                return "history"
        return None

    def build_plan(
        self,
        entries: list[FileEntry],
        conversations: list[CleanableConversation] | None = None,
        now: datetime | None = None,
    ) -> CleanupPlan:
        """Select candidates from classified files and cleanable transcripts.

        Files modified after the ``keep_recent`` cutoff are never selected.
        Each path appears at most once in the plan.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.options.keep_recent) if self.options.keep_recent > 0 else None
        plan = CleanupPlan()
        seen: set[str] = set()

        def add(entry: FileEntry, reason: str) -> None:
            key = str(entry.path)
            if key in seen:
                return
            seen.add(key)
            plan.candidates.append(CleanupCandidate(entry=entry, reason=reason, size=entry.size))
            plan.total_bytes += entry.size
            if not self.policy.is_safe_to_delete(entry, now):
                plan.safe_to_delete = False
                plan.warnings.append(f"{entry.name} may not be safe to delete ({reason})")

        for entry in entries:
            if cutoff is not None and entry.modified > cutoff:
                continue
            reason = self._reason_for(entry)
            if reason is not None:
                add(entry, reason)

        if conversations and not self.options.keep_chats:
            for conv in conversations:
                if cutoff is not None and conv.modified > cutoff:
                    continue
                entry = FileEntry(
                    path=conv.path,
                    name=conv.path.name,
                    size=conv.size,
                    modified=conv.modified,
                    category=FileCategory.DATABASE,
                )
                add(entry, "chat")

        plan.recommendations = self._recommendations(plan)
        log.info("Planned %d candidates totaling %d bytes", len(plan.candidates), plan.total_bytes)
        return plan

    @staticmethod
    def _recommendations(plan: CleanupPlan) -> list[str]:
        if not plan.candidates:
            return ["Nothing to clean"]
        recs: list[str] = []
        if plan.total_bytes > _LARGE_PLAN_BYTES:
            recs.append(f"Cleaning will free {bytes_to_human(plan.total_bytes)}")
        if not plan.safe_to_delete:
            recs.append("Consider creating a backup before cleaning")
        if len(plan.candidates) > _LARGE_PLAN_COUNT:
            recs.append("Many files selected, consider cleaning in batches")
        return recs

    def execute(self, plan: CleanupPlan, dry_run: bool = False) -> CleanupResult:
        """Delete every candidate in *plan*.

        With *dry_run* nothing is touched and an empty result is returned.
        Per-item failures are collected, never raised.
        """
        if dry_run:
            log.info("Dry run: %d candidates left untouched", len(plan.candidates))
            return CleanupResult(dry_run=True)

        result = remove_entries(plan.candidates)
        log.info(
            "Cleaned %d files (%d bytes), %d skipped, %d errors",
            result.files_removed,
            result.freed_bytes,
            result.skipped,
            len(result.errors),
        )
        return result
