"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from chat_resume.cli import main


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, history_file, *args, **kwargs):
    return runner.invoke(main, ["--history-file", str(history_file), *args], **kwargs)


class TestChats:
    def test_lists_chats(self, runner, history_file):
        result = invoke(runner, history_file, "chats")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].split("\t") == ["-100500", "site", "conv_100"]
        assert lines[1].split("\t") == ["42", "api", "conv_002"]

    def test_no_history(self, runner, tmp_path):
        result = invoke(runner, tmp_path / "absent.json", "chats")
        assert result.exit_code == 0
        assert "No session history." in result.output


class TestHistory:
    def test_text(self, runner, history_file):
        result = invoke(runner, history_file, "history", "42")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert "conv_002" in lines[0]
        assert "add pagination to /users" in lines[0]
        assert "conv_001" in lines[1]

    def test_limit(self, runner, history_file):
        result = invoke(runner, history_file, "history", "42", "--limit", "1")
        assert len(result.output.strip().splitlines()) == 1

    def test_json(self, runner, history_file):
        result = invoke(runner, history_file, "history", "42", "--format", "json")
        data = json.loads(result.output)
        assert data["chatId"] == 42
        assert len(data["sessions"]) == 2

    def test_markdown(self, runner, history_file):
        result = invoke(runner, history_file, "history", "42", "--format", "md")
        assert "# Chat 42" in result.output

    def test_negative_chat_id(self, runner, history_file):
        result = invoke(runner, history_file, "history", "--", "-100500")
        assert result.exit_code == 0
        assert "conv_100" in result.output

    def test_unknown_chat(self, runner, history_file):
        result = invoke(runner, history_file, "history", "7")
        assert "No sessions for chat 7." in result.output


class TestShow:
    def test_shows_entry(self, runner, history_file):
        result = invoke(runner, history_file, "show", "42", "conv_002")
        assert result.exit_code == 0
        assert json.loads(result.output)["assistantSessionId"] == "asst-xyz"

    def test_unknown_entry(self, runner, history_file):
        result = invoke(runner, history_file, "show", "42", "conv_missing")
        assert result.exit_code == 1


class TestClear:
    def test_clear_with_confirmation(self, runner, history_file):
        result = invoke(runner, history_file, "clear", "42", input="y\n")
        assert result.exit_code == 0
        data = json.loads(history_file.read_text(encoding="utf-8"))
        assert "42" not in data["sessions"]
        assert "-100500" in data["sessions"]

    def test_clear_aborted(self, runner, history_file):
        result = invoke(runner, history_file, "clear", "42", input="n\n")
        assert result.exit_code == 1
        data = json.loads(history_file.read_text(encoding="utf-8"))
        assert "42" in data["sessions"]

    def test_clear_yes(self, runner, history_file):
        result = invoke(runner, history_file, "clear", "42", "--yes")
        assert result.exit_code == 0
        assert "Cleared session history for chat 42." in result.output

    def test_clear_unknown_chat(self, runner, history_file):
        result = invoke(runner, history_file, "clear", "7", "--yes")
        assert result.exit_code == 0
        assert "No sessions for chat 7." in result.output


class TestResolve:
    def test_existing_path(self, runner, tmp_path):
        result = runner.invoke(main, ["resolve", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output.strip() == str(tmp_path)
