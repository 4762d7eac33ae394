"""Conversation transcript data classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ConversationMessage:
    """One chat message; role is 'human', 'bot', 'tool' or anything else."""

    role: str
    content: str = ""


@dataclass(frozen=True, slots=True)
class ConversationMetadata:
    """Transcript metadata.  Start and end times are None when unknown."""

    model_id: str = ""
    model_provider: str = ""
    workflow: str = ""
    workflow_id: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class ConversationRecord:
    """Parsed transcript with per-role message counts.

    ``human_count + bot_count + tool_count <= message_count``; the gap is
    the number of messages with an unrecognized role.
    """

    path: Path
    size: int
    modified: datetime
    message_count: int = 0
    human_count: int = 0
    bot_count: int = 0
    tool_count: int = 0
    execution_id: str = ""
    action_id: str = ""
    metadata: ConversationMetadata = field(default_factory=ConversationMetadata)


@dataclass(slots=True)
class WorkspaceAggregate:
    """Totals for one workspace directory under the transcript root."""

    workspace_id: str
    path: Path
    conversation_count: int = 0
    total_messages: int = 0
    total_size: int = 0
    last_activity: datetime | None = None

    def add(self, record: ConversationRecord) -> None:
        self.conversation_count += 1
        self.total_messages += record.message_count
        self.total_size += record.size
        if self.last_activity is None or record.modified > self.last_activity:
            self.last_activity = record.modified


@dataclass(slots=True)
class ConversationStats:
    """Global conversation totals across all workspaces."""

    total_conversations: int = 0
    total_messages: int = 0
    total_size: int = 0
    human_messages: int = 0
    bot_messages: int = 0
    tool_messages: int = 0
    avg_messages_per_conversation: float = 0.0
    workspace_breakdown: list[WorkspaceAggregate] = field(default_factory=list)
    last_activity: datetime | None = None


@dataclass(frozen=True, slots=True)
class CleanableConversation:
    """Transcript selected for cleanup: reason is 'old', 'large' or 'all'."""

    path: Path
    size: int
    modified: datetime
    reason: str
