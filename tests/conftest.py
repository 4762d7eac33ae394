"""Shared test fixtures."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

import pytest

from kiro_cleaner.settings import Settings

DAY = 86400


def age_file(path: Path, days: float) -> None:
    """Set a file's mtime to *days* in the past."""
    ts = time.time() - days * DAY
    os.utime(path, (ts, ts))


def chat_document(roles: list[str], **metadata) -> dict:
    return {
        "executionId": "exec-1",
        "actionId": "act-1",
        "chat": [{"role": role, "content": f"message {i}"} for i, role in enumerate(roles)],
        "metadata": {
            "modelId": "claude-sonnet",
            "modelProvider": "anthropic",
            "workflow": "chat",
            "workflowId": "wf-1",
            "startTime": 1700000000000,
            "endTime": 1700000060000,
            **metadata,
        },
    }


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Point the settings singleton at a temp config directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg_config"))
    monkeypatch.setattr(Settings, "_instance", None)
    return tmp_path / "xdg_config" / "kiro-cleaner" / "settings.json"


@pytest.fixture
def storage_root(tmp_path):
    """Empty IDE storage root."""
    root = tmp_path / "Kiro"
    root.mkdir()
    return root


@pytest.fixture
def agent_root(tmp_path):
    """Empty conversation archive root."""
    root = tmp_path / "agent"
    root.mkdir()
    return root


@pytest.fixture
def write_chat():
    """Write a transcript file; returns its path."""

    def _write(directory: Path, name: str, roles: list[str], age_days: float = 0, **metadata) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(json.dumps(chat_document(roles, **metadata)))
        if age_days:
            age_file(path, age_days)
        return path

    return _write
