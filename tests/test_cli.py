"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

import kiro_cleaner.cli as cli
import kiro_cleaner.core.chat_scanner as chat_scanner
import kiro_cleaner.core.file_scanner as file_scanner
from kiro_cleaner.cli import main

from conftest import age_file

pytestmark = pytest.mark.usefixtures("isolate_settings")


@pytest.fixture
def kiro(storage_root, agent_root, write_chat, monkeypatch):
    """Fake IDE storage with a few cleanable files and two transcripts."""
    (storage_root / "logs").mkdir()
    log_file = storage_root / "logs" / "main.log"
    log_file.write_bytes(b"x" * 100)
    age_file(log_file, 10)
    (storage_root / "upload.tmp").write_bytes(b"x" * 50)
    (storage_root / "User").mkdir()
    (storage_root / "User" / "settings.json").write_text("{}")
    write_chat(agent_root / "ws1", "a.chat", ["human", "bot"], age_days=40)
    write_chat(agent_root / "ws1", "b.chat", ["human", "bot", "tool"])

    monkeypatch.setattr(file_scanner, "find_storage_roots", lambda: [storage_root])
    monkeypatch.setattr(chat_scanner, "find_agent_path", lambda: agent_root)
    monkeypatch.setattr(cli, "is_ide_running", lambda: False)
    return storage_root


@pytest.fixture
def runner():
    return CliRunner()


class TestScan:
    def test_json(self, runner, kiro):
        result = runner.invoke(main, ["scan", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["categories"]["log"] == {"bytes": 100, "files": 1}
        assert data["categories"]["temp"]["files"] == 1
        assert data["categories"]["config"]["files"] == 1
        assert data["conversations"]["total"] == 2
        assert data["conversations"]["human_messages"] == 2
        assert data["conversations"]["workspaces"][0]["workspace_id"] == "ws1"

    def test_text(self, runner, kiro):
        result = runner.invoke(main, ["scan"])
        assert result.exit_code == 0, result.output
        assert "Log" in result.output
        assert "Conversations" in result.output

    def test_no_storage(self, runner, monkeypatch):
        monkeypatch.setattr(file_scanner, "find_storage_roots", lambda: [])
        result = runner.invoke(main, ["scan"])
        assert result.exit_code == 0
        assert "No Kiro storage found" in result.output


class TestClean:
    def test_dry_run_json(self, runner, kiro):
        result = runner.invoke(main, ["clean", "--dry-run", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "dry_run"
        reasons = {r["reason"]: r for r in data["results"]}
        assert reasons["log"]["would_free_bytes"] == 100
        assert reasons["temp"]["file_count"] == 1
        assert reasons["chat"]["file_count"] == 2
        assert (kiro / "upload.tmp").exists()

    def test_dry_run_text(self, runner, kiro):
        result = runner.invoke(main, ["clean", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "dry run" in result.output
        assert (kiro / "logs" / "main.log").exists()

    def test_clean_with_yes(self, runner, kiro, agent_root):
        result = runner.invoke(main, ["clean", "--yes", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "cleaned"
        assert data["files_removed"] == 4
        assert data["errors"] == []
        assert not (kiro / "upload.tmp").exists()
        assert not (agent_root / "ws1" / "a.chat").exists()
        assert (kiro / "User" / "settings.json").exists()

    def test_keep_flags(self, runner, kiro, agent_root):
        result = runner.invoke(main, ["clean", "--yes", "--keep-logs", "--keep-chats", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["files_removed"] == 1
        assert (kiro / "logs" / "main.log").exists()
        assert (agent_root / "ws1" / "b.chat").exists()

    def test_settings_used_as_defaults(self, runner, kiro, agent_root):
        runner.invoke(main, ["config", "set", "cleanup.keep_chats", "true"])
        result = runner.invoke(main, ["clean", "--yes", "--json"])
        assert result.exit_code == 0, result.output
        assert (agent_root / "ws1" / "a.chat").exists()

    def test_flag_overrides_settings(self, runner, kiro, agent_root):
        runner.invoke(main, ["config", "set", "cleanup.keep_chats", "true"])
        result = runner.invoke(main, ["clean", "--yes", "--no-keep-chats", "--json"])
        assert result.exit_code == 0, result.output
        assert not (agent_root / "ws1" / "a.chat").exists()

    def test_confirmation_declined(self, runner, kiro):
        result = runner.invoke(main, ["clean"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert (kiro / "upload.tmp").exists()

    def test_nothing_to_clean(self, runner, storage_root, agent_root, monkeypatch):
        monkeypatch.setattr(file_scanner, "find_storage_roots", lambda: [storage_root])
        monkeypatch.setattr(chat_scanner, "find_agent_path", lambda: agent_root)
        monkeypatch.setattr(cli, "is_ide_running", lambda: False)
        result = runner.invoke(main, ["clean", "--json"])
        assert json.loads(result.output)["status"] == "nothing_to_clean"

    def test_running_ide_prompts(self, runner, kiro, monkeypatch):
        monkeypatch.setattr(cli, "is_ide_running", lambda: True)
        result = runner.invoke(main, ["clean"], input="n\n")
        assert "Kiro is running" in result.output
        assert "Aborted" in result.output

    def test_kill_ide(self, runner, kiro, monkeypatch):
        stopped = []
        monkeypatch.setattr(cli, "is_ide_running", lambda: True)
        monkeypatch.setattr(cli, "stop_ide", lambda: stopped.append(True))
        monkeypatch.setattr(cli, "wait_for_exit", lambda: True)
        result = runner.invoke(main, ["clean", "--kill-ide", "--yes", "--json"])
        assert result.exit_code == 0, result.output
        assert stopped == [True]
        assert json.loads(result.output)["status"] == "cleaned"


class TestChats:
    def test_old_only(self, runner, kiro):
        result = runner.invoke(main, ["chats", "--older-than", "30", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [c["reason"] for c in data["conversations"]] == ["old"]
        assert data["conversations"][0]["path"].endswith("a.chat")

    def test_all(self, runner, kiro):
        result = runner.invoke(main, ["chats", "--older-than", "0"])
        assert result.exit_code == 0, result.output
        assert "2 conversations" in result.output

    def test_none(self, runner, kiro):
        result = runner.invoke(main, ["chats", "--older-than", "365"])
        assert "No cleanable conversations" in result.output


class TestConfig:
    def test_show_json(self, runner):
        result = runner.invoke(main, ["config", "show", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["cleanup.keep_recent"] == 0

    def test_set_and_show(self, runner, isolate_settings):
        result = runner.invoke(main, ["config", "set", "cleanup.keep_recent", "7"])
        assert result.exit_code == 0
        assert "cleanup.keep_recent = 7" in result.output
        assert json.loads(isolate_settings.read_text()) == {"cleanup": {"keep_recent": 7}}

    def test_unknown_key(self, runner):
        result = runner.invoke(main, ["config", "set", "nope", "1"])
        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_invalid_value(self, runner):
        result = runner.invoke(main, ["config", "set", "cleanup.keep_logs", "perhaps"])
        assert result.exit_code == 1
        assert "Invalid value" in result.output

