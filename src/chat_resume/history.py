"""Durable, per-chat history of conversations.

The whole history is held in memory as ``chat_id -> [HistoryEntry, ...]``,
most recent first and capped at ``MAX_HISTORY_PER_CHAT`` entries per chat.
It is loaded once when the store is built and the complete document is
written back after every mutation.

File layout::

    {"sessions": {"<chatId>": [{"conversationId": ..., "projectPath": ...}, ...]}}

A document that fails validation anywhere is discarded as a whole.
Storage errors are logged, never raised.
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .config import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_PER_CHAT, PREVIEW_LIMIT, get_history_path
from .core import HistoryDocument, HistoryEntry
from .storage import HistoryStorage, JsonFileStorage

logger = logging.getLogger(__name__)

_CHAT_KEY = re.compile(r"-?[0-9]+")


class HistoryStore:
    """Size-bounded conversation history keyed by chat id."""

    def __init__(self, storage: HistoryStorage):
        self.storage = storage
        self._sessions: dict[int, list[HistoryEntry]] = {}
        self.load()

    @classmethod
    def from_path(cls, path: Path | None = None) -> "HistoryStore":
        """Build a store backed by the JSON file at ``path`` (default location if None)."""
        return cls(JsonFileStorage(path if path is not None else get_history_path()))

    # ── Persistence ──────────────────────────────────────────────────

    def load(self) -> None:
        """Replace in-memory state with the stored document, or empty state on any failure."""
        self._sessions = {}

        try:
            content = self.storage.read()
        except UnicodeDecodeError as e:
            logger.warning("Invalid session history, starting fresh: %s", e)
            return
        except OSError as e:
            logger.error("Failed to read session history: %s", e)
            return

        if content is None:
            return

        try:
            document = HistoryDocument.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Invalid session history, starting fresh: %s", e)
            return

        for key, entries in document.sessions.items():
            if not _CHAT_KEY.fullmatch(key):
                logger.debug("Skipping non-numeric chat key %r", key)
                continue
            self._sessions[int(key)] = entries

    def reload(self) -> None:
        """Re-read the backing store, discarding in-memory state."""
        self.load()

    def save(self) -> bool:
        """Write the full history out. Returns False if the write failed."""
        document = {
            "sessions": {
                str(chat_id): [entry.to_dict() for entry in entries]
                for chat_id, entries in self._sessions.items()
            }
        }
        content = json.dumps(document, indent=2, ensure_ascii=False)

        try:
            self.storage.write(content)
        except (OSError, ValueError) as e:
            logger.error("Failed to save session history: %s", e)
            return False
        return True

    # ── Mutations ────────────────────────────────────────────────────

    def save_session(
        self,
        chat_id: int,
        conversation_id: str,
        project_path: str,
        last_message_preview: str = "",
        assistant_session_id: str | None = None,
    ) -> HistoryEntry:
        """Insert or update the entry for ``conversation_id``.

        An existing entry is replaced in place, keeping its ``created_at``
        and, when ``assistant_session_id`` is None, its assistant id. A new
        entry goes to the head of the list and the oldest entries beyond
        the cap are dropped.
        """
        history = self._sessions.setdefault(chat_id, [])
        index = _find_index(history, conversation_id)
        existing = history[index] if index is not None else None
        now = _timestamp()

        if assistant_session_id is None and existing is not None:
            assistant_session_id = existing.assistant_session_id

        entry = HistoryEntry(
            conversation_id=conversation_id,
            assistant_session_id=assistant_session_id,
            project_path=project_path,
            project_name=_project_name(project_path),
            last_message_preview=last_message_preview[:PREVIEW_LIMIT],
            created_at=existing.created_at if existing is not None else now,
            last_activity=now,
        )

        if index is not None:
            history[index] = entry
        else:
            history.insert(0, entry)
            del history[MAX_HISTORY_PER_CHAT:]

        self.save()
        return entry

    def update_last_message(self, chat_id: int, conversation_id: str, preview: str) -> None:
        """Set the preview of a known conversation; unknown ones are ignored."""
        self._update(chat_id, conversation_id, last_message_preview=preview[:PREVIEW_LIMIT])

    def update_assistant_session_id(self, chat_id: int, conversation_id: str, assistant_session_id: str) -> None:
        """Record the assistant's handle for a known conversation; unknown ones are ignored."""
        self._update(chat_id, conversation_id, assistant_session_id=assistant_session_id)

    def clear_history(self, chat_id: int) -> None:
        """Forget every entry for ``chat_id``."""
        self._sessions.pop(chat_id, None)
        logger.info("Cleared session history for chat %s", chat_id)
        self.save()

    # ── Queries ──────────────────────────────────────────────────────

    def get_history(self, chat_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        """Return up to ``limit`` entries, most recent first."""
        return self._sessions.get(chat_id, [])[:limit]

    def get_last_session(self, chat_id: int) -> HistoryEntry | None:
        history = self._sessions.get(chat_id)
        return history[0] if history else None

    def get_session_by_conversation_id(self, chat_id: int, conversation_id: str) -> HistoryEntry | None:
        history = self._sessions.get(chat_id, [])
        index = _find_index(history, conversation_id)
        return history[index] if index is not None else None

    def get_all_active_sessions(self) -> dict[int, HistoryEntry]:
        """Return the most recent entry of every chat that has history."""
        return {chat_id: history[0] for chat_id, history in self._sessions.items() if history}

    # ── Private helpers ──────────────────────────────────────────────

    def _update(self, chat_id: int, conversation_id: str, **changes) -> None:
        history = self._sessions.get(chat_id)
        if not history:
            logger.debug("No history for chat %s, ignoring update", chat_id)
            return

        index = _find_index(history, conversation_id)
        if index is None:
            logger.debug("Unknown conversation %s in chat %s, ignoring update", conversation_id, chat_id)
            return

        history[index] = history[index].model_copy(update={**changes, "last_activity": _timestamp()})
        self.save()


def _find_index(history: list[HistoryEntry], conversation_id: str) -> int | None:
    for i, entry in enumerate(history):
        if entry.conversation_id == conversation_id:
            return i
    return None


def _project_name(project_path: str) -> str:
    """Final path segment, ignoring a trailing separator."""
    return os.path.basename(project_path.rstrip("/")) or project_path


def _timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
