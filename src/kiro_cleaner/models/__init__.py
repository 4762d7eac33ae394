"""Kiro cleaner data models."""

from kiro_cleaner.models.file_entry import FileCategory, FileEntry, is_chat_file
from kiro_cleaner.models.conversation import (
    CleanableConversation,
    ConversationMessage,
    ConversationMetadata,
    ConversationRecord,
    ConversationStats,
    WorkspaceAggregate,
)
from kiro_cleaner.models.clean_result import (
    CleanupCandidate,
    CleanupPlan,
    CleanupResult,
    DeletionFailure,
    ItemOutcome,
)
from kiro_cleaner.models.progress import ProgressReporter, ScanProgress
from kiro_cleaner.models.scan_result import ScanResult

__all__ = [
    "CleanableConversation",
    "CleanupCandidate",
    "CleanupPlan",
    "CleanupResult",
    "ConversationMessage",
    "ConversationMetadata",
    "ConversationRecord",
    "ConversationStats",
    "DeletionFailure",
    "FileCategory",
    "FileEntry",
    "ItemOutcome",
    "ProgressReporter",
    "ScanProgress",
    "ScanResult",
    "WorkspaceAggregate",
    "is_chat_file",
]
