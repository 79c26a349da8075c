"""Shared test fixtures for chat-resume."""

import json
from functools import partial

import pytest

from chat_resume.history import HistoryStore
from chat_resume.manager import SessionManager
from chat_resume.paths import resolve_working_directory
from chat_resume.storage import InMemoryStorage


class FailingStorage(InMemoryStorage):
    """In-memory storage whose reads and/or writes raise OSError."""

    def __init__(self, content=None, fail_read=False, fail_write=True):
        super().__init__(content)
        self.fail_read = fail_read
        self.fail_write = fail_write

    def read(self):
        if self.fail_read:
            raise PermissionError("read denied")
        return super().read()

    def write(self, content):
        if self.fail_write:
            raise OSError(28, "No space left on device")
        super().write(content)


def make_entry(conversation_id, project_path="/Users/testuser/dev/myapp", **overrides):
    """Build an on-disk history entry dict."""
    entry = {
        "conversationId": conversation_id,
        "projectPath": project_path,
        "projectName": project_path.rstrip("/").rsplit("/", 1)[-1],
        "lastMessagePreview": "",
        "createdAt": "2025-01-20T10:00:00.000Z",
        "lastActivity": "2025-01-20T11:30:00.000Z",
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def sample_document():
    """A history document with two chats, most recent entry first."""
    return {
        "sessions": {
            "42": [
                make_entry(
                    "conv_002",
                    "/Users/alice/dev/api",
                    assistantSessionId="asst-xyz",
                    lastMessagePreview="add pagination to /users",
                    createdAt="2025-01-21T09:00:00.000Z",
                    lastActivity="2025-01-21T09:45:00.000Z",
                ),
                make_entry("conv_001", "/Users/alice/dev/myapp", lastMessagePreview="refactor auth"),
            ],
            "-100500": [
                make_entry("conv_100", "/home/bob/work/site"),
            ],
        }
    }


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def seeded_storage(sample_document):
    return InMemoryStorage(json.dumps(sample_document))


@pytest.fixture
def store(memory_storage):
    return HistoryStore(memory_storage)


@pytest.fixture
def fake_home(tmp_path):
    """A home directory containing a ``proj`` project."""
    home = tmp_path / "home" / "bob"
    (home / "proj").mkdir(parents=True)
    return home


@pytest.fixture
def manager(store, fake_home):
    """A manager over in-memory history that resolves paths against ``fake_home``."""
    return SessionManager(store, resolver=partial(resolve_working_directory, home=str(fake_home)))


@pytest.fixture
def history_file(tmp_path, sample_document):
    """The sample document written to a history file on disk."""
    path = tmp_path / "state" / "sessions.json"
    path.parent.mkdir()
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path
