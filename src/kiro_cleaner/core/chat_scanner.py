"""Scanning and aggregation of per-workspace conversation transcripts."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

from kiro_cleaner.core.chat_parser import ConversationParser, MalformedArchive
from kiro_cleaner.core.locator import find_agent_path
from kiro_cleaner.models.conversation import (
    CleanableConversation,
    ConversationRecord,
    ConversationStats,
    WorkspaceAggregate,
)
from kiro_cleaner.models.file_entry import is_chat_file
from kiro_cleaner.models.progress import ProgressCallback, ProgressReporter
from kiro_cleaner.utils import mtime_to_datetime

log = logging.getLogger(__name__)

# Directories under the agent root that are not workspaces.
SPECIAL_DIRS = frozenset({
    "index",
    "dev_data",
    "workspace-sessions",
    ".migrations",
    ".diffs",
    ".utils",
    "default",
})


class ConversationScanner:
    """Walks the transcript archive and aggregates conversation statistics.

    The archive root holds one subdirectory per workspace, each with
    ``.chat`` files directly inside.  A missing root yields empty
    results rather than an error.
    """

    def __init__(
        self,
        base_path: Path | None = None,
        parser: ConversationParser | None = None,
        special_dirs: frozenset[str] = SPECIAL_DIRS,
    ) -> None:
        self._base_path = base_path
        self._parser = parser or ConversationParser()
        self._special_dirs = special_dirs

    @property
    def base_path(self) -> Path | None:
        """The archive root, located on first use when not given."""
        if self._base_path is None:
            self._base_path = find_agent_path()
        return self._base_path

    def _workspace_dirs(self) -> list[Path]:
        base = self.base_path
        if base is None:
            return []
        try:
            children = sorted(base.iterdir())
        except OSError:
            log.debug("Cannot read conversation archive: %s", base)
            return []

        dirs: list[Path] = []
        for child in children:
            if child.name.startswith(".") or child.name in self._special_dirs:
                continue
            try:
                if child.is_dir():
                    dirs.append(child)
            except OSError:
                log.debug("Cannot access: %s", child)
        return dirs

    def _chat_files(self, workspace: Path) -> Iterator[Path]:
        try:
            children = sorted(workspace.iterdir())
        except OSError:
            log.debug("Cannot read workspace: %s", workspace)
            return
        for child in children:
            try:
                if is_chat_file(child.name) and child.is_file():
                    yield child
            except OSError:
                log.debug("Cannot access: %s", child)

    def _parse(self, path: Path) -> ConversationRecord | None:
        try:
            return self._parser.parse_file(path)
        except MalformedArchive as exc:
            log.debug("Skipping transcript: %s", exc)
            return None

    def iter_records(self) -> Iterator[tuple[Path, ConversationRecord]]:
        """Yield (workspace_dir, record) for every parsable transcript."""
        for workspace in self._workspace_dirs():
            for chat_path in self._chat_files(workspace):
                record = self._parse(chat_path)
                if record is not None:
                    yield workspace, record

    def scan_workspaces(self, on_progress: ProgressCallback | None = None) -> list[WorkspaceAggregate]:
        """Return one aggregate per workspace with at least one transcript."""
        return self.get_conversation_stats(on_progress).workspace_breakdown

    def get_conversation_stats(self, on_progress: ProgressCallback | None = None) -> ConversationStats:
        """Scan all workspaces and build global statistics.

        Role totals are accumulated in the same walk.  The final progress
        snapshot always has ``is_complete`` set, even when the archive is
        missing.
        """
        reporter = ProgressReporter("chats", on_progress)
        stats = ConversationStats()

        for workspace in self._workspace_dirs():
            reporter.visit_dir(str(workspace))
            aggregate = WorkspaceAggregate(workspace_id=workspace.name, path=workspace)

            for chat_path in self._chat_files(workspace):
                record = self._parse(chat_path)
                if record is None:
                    continue
                aggregate.add(record)
                stats.human_messages += record.human_count
                stats.bot_messages += record.bot_count
                stats.tool_messages += record.tool_count
                reporter.visit_file(str(chat_path), record.size, "chat")

            # Workspaces without a single parsable transcript are dropped.
            if aggregate.conversation_count > 0:
                stats.workspace_breakdown.append(aggregate)

        for ws in stats.workspace_breakdown:
            stats.total_conversations += ws.conversation_count
            stats.total_messages += ws.total_messages
            stats.total_size += ws.total_size
            if ws.last_activity is not None and (
                stats.last_activity is None or ws.last_activity > stats.last_activity
            ):
                stats.last_activity = ws.last_activity

        if stats.total_conversations > 0:
            stats.avg_messages_per_conversation = stats.total_messages / stats.total_conversations

        reporter.finish()
        log.info(
            "Scanned %d conversations in %d workspaces",
            stats.total_conversations,
            len(stats.workspace_breakdown),
        )
        return stats

    def count_message_types(self) -> tuple[int, int, int]:
        """Re-walk the archive and return (human, bot, tool) totals."""
        human = bot = tool = 0
        for _workspace, record in self.iter_records():
            human += record.human_count
            bot += record.bot_count
            tool += record.tool_count
        return human, bot, tool

    def find_cleanable_conversations(
        self,
        age_days: int,
        size_bytes: int = 0,
        now: datetime | None = None,
    ) -> list[CleanableConversation]:
        """Find transcripts that qualify for cleanup.

        ``age_days == 0`` returns every transcript tagged ``all``.
        Otherwise a transcript older than the cutoff is tagged ``old``;
        failing that, one larger than *size_bytes* (when positive) is
        tagged ``large``.  Age is checked first.

        Transcripts are not parsed here, so malformed files still qualify.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=age_days)
        cleanable: list[CleanableConversation] = []

        for workspace in self._workspace_dirs():
            for chat_path in self._chat_files(workspace):
                try:
                    st = chat_path.stat()
                except OSError:
                    log.debug("Cannot access: %s", chat_path)
                    continue
                modified = mtime_to_datetime(st.st_mtime)

                if age_days == 0:
                    reason = "all"
                elif modified < cutoff:
                    reason = "old"
                elif size_bytes > 0 and st.st_size > size_bytes:
                    reason = "large"
                else:
                    continue
                cleanable.append(CleanableConversation(chat_path, st.st_size, modified, reason))

        return cleanable

    @staticmethod
    def calculate_space_savings(cleanable: list[CleanableConversation]) -> int:
        return sum(c.size for c in cleanable)
