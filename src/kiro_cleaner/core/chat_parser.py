"""Parser for ``.chat`` conversation transcripts.

A transcript is a JSON object::

    {
        "executionId": "...",
        "actionId": "...",
        "chat": [{"role": "human", "content": "..."}, ...],
        "metadata": {
            "modelId": "...", "modelProvider": "...",
            "workflow": "...", "workflowId": "...",
            "startTime": 1700000000000, "endTime": 1700000060000
        }
    }

Timestamps are epoch milliseconds.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kiro_cleaner.models.conversation import ConversationMessage, ConversationMetadata, ConversationRecord
from kiro_cleaner.utils import mtime_to_datetime

log = logging.getLogger(__name__)


class MalformedArchive(Exception):
    """Raised when a transcript cannot be read or has the wrong shape."""


def count_messages(messages: list[ConversationMessage]) -> tuple[int, int, int]:
    """Return (human, bot, tool) counts.  Unrecognized roles count nowhere."""
    human = bot = tool = 0
    for msg in messages:
        match msg.role:
            case "human":
                human += 1
            case "bot":
                bot += 1
            case "tool":
                tool += 1
    return human, bot, tool


def millis_to_datetime(value: int | float | None) -> datetime | None:
    """Convert epoch milliseconds to a UTC datetime; zero or missing is None."""
    if not value or value <= 0:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _string(obj: dict[str, Any], key: str) -> str:
    value = obj.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedArchive(f"'{key}' must be a string")
    return value


def _timestamp(obj: dict[str, Any], key: str) -> datetime | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedArchive(f"'{key}' must be a number")
    try:
        return millis_to_datetime(value)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedArchive(f"'{key}' is out of range: {value}") from exc


def _parse_metadata(raw: Any) -> ConversationMetadata:
    if raw is None:
        return ConversationMetadata()
    if not isinstance(raw, dict):
        raise MalformedArchive("'metadata' must be an object")
    return ConversationMetadata(
        model_id=_string(raw, "modelId"),
        model_provider=_string(raw, "modelProvider"),
        workflow=_string(raw, "workflow"),
        workflow_id=_string(raw, "workflowId"),
        start_time=_timestamp(raw, "startTime"),
        end_time=_timestamp(raw, "endTime"),
    )


def _parse_messages(raw: Any) -> list[ConversationMessage]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedArchive("'chat' must be an array")
    messages: list[ConversationMessage] = []
    for item in raw:
        if not isinstance(item, dict):
            raise MalformedArchive("chat messages must be objects")
        role = item.get("role", "")
        content = item.get("content", "")
        if not isinstance(role, str):
            raise MalformedArchive("message 'role' must be a string")
        # Content may be structured; only the role matters for counting.
        messages.append(ConversationMessage(role=role, content=content if isinstance(content, str) else ""))
    return messages


class ConversationParser:
    """Turns transcript bytes into a ConversationRecord."""

    def parse_bytes(self, data: bytes | str, path: Path, size: int, modified: datetime) -> ConversationRecord:
        """Parse raw transcript data.

        Raises:
            MalformedArchive: If *data* is not JSON or not a transcript object.
        """
        try:
            doc = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedArchive(f"{path}: invalid JSON: {exc}") from exc
        except (RecursionError, MemoryError) as exc:
            raise MalformedArchive(f"{path}: too deeply nested or too large") from exc

        if not isinstance(doc, dict):
            raise MalformedArchive(f"{path}: top-level value must be an object")

        try:
            messages = _parse_messages(doc.get("chat"))
            metadata = _parse_metadata(doc.get("metadata"))
            execution_id = _string(doc, "executionId")
            action_id = _string(doc, "actionId")
        except MalformedArchive as exc:
            raise MalformedArchive(f"{path}: {exc}") from exc

        human, bot, tool = count_messages(messages)
        return ConversationRecord(
            path=path,
            size=size,
            modified=modified,
            message_count=len(messages),
            human_count=human,
            bot_count=bot,
            tool_count=tool,
            execution_id=execution_id,
            action_id=action_id,
            metadata=metadata,
        )

    def parse_file(self, path: Path) -> ConversationRecord:
        """Read and parse a transcript file from disk.

        Raises:
            MalformedArchive: If the file cannot be read or parsed.
        """
        try:
            st = path.stat()
            data = path.read_bytes()
        except OSError as exc:
            raise MalformedArchive(f"{path}: cannot read: {exc}") from exc
        return self.parse_bytes(data, path, st.st_size, mtime_to_datetime(st.st_mtime))
