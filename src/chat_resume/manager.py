"""Live session cache backed by the durable history store.

At most one live :class:`Session` exists per chat. Every mutation of a
live session is checkpointed into the :class:`HistoryStore`, which
outlives the cache: clearing a session or restarting the process leaves
its history entry in place so the conversation can be resumed later.
"""

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .config import DEFAULT_HISTORY_LIMIT
from .core import HistoryEntry, Session
from .history import HistoryStore
from .paths import resolve_working_directory

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class SessionManager:
    """Tracks which conversation each chat is attached to."""

    def __init__(
        self,
        history: HistoryStore,
        resolver: Callable[[str], str] = resolve_working_directory,
    ):
        self.history = history
        self.resolver = resolver
        self._sessions: dict[int, Session] = {}

    def get_session(self, chat_id: int) -> Session | None:
        return self._sessions.get(chat_id)

    def create_session(self, chat_id: int, working_directory: str, conversation_id: str | None = None) -> Session:
        """Start a new live session for ``chat_id``, replacing any existing one."""
        resolved = self.resolver(working_directory)
        now = _now()
        session = Session(
            conversation_id=conversation_id or generate_conversation_id(),
            working_directory=resolved,
            created_at=now,
            last_activity=now,
        )
        self._sessions[chat_id] = session
        logger.info("Created session %s for chat %s in %s", session.conversation_id, chat_id, resolved)

        self.history.save_session(chat_id, session.conversation_id, resolved, "", session.assistant_session_id)
        return session

    def update_activity(self, chat_id: int, message_preview: str | None = None) -> None:
        session = self._sessions.get(chat_id)
        if session is None:
            return

        session.last_activity = _now()
        if message_preview:
            self.history.update_last_message(chat_id, session.conversation_id, message_preview)

    def set_working_directory(self, chat_id: int, directory: str) -> Session:
        """Point the live session at ``directory`` as given, or create one there.

        An explicit directory is trusted as-is; only new sessions go through
        path resolution.
        """
        session = self._sessions.get(chat_id)
        if session is None:
            return self.create_session(chat_id, directory)

        session.working_directory = directory
        session.last_activity = _now()
        self.history.save_session(chat_id, session.conversation_id, directory, "", session.assistant_session_id)
        return session

    def clear_session(self, chat_id: int) -> None:
        """Drop the live session; its history stays resumable."""
        if self._sessions.pop(chat_id, None) is not None:
            logger.info("Cleared live session for chat %s", chat_id)

    def resume_session(self, chat_id: int, conversation_id: str) -> Session | None:
        """Make a conversation from history the live session for ``chat_id``.

        Returns None, changing nothing, if the conversation is not in the
        chat's history. The resolved working directory is written back so a
        remapped path sticks for later resumes.
        """
        entry = self.history.get_session_by_conversation_id(chat_id, conversation_id)
        if entry is None:
            return None

        resolved = self.resolver(entry.project_path)
        now = _now()
        session = Session(
            conversation_id=entry.conversation_id,
            working_directory=resolved,
            created_at=_parse_iso(entry.created_at) or now,
            last_activity=now,
            assistant_session_id=entry.assistant_session_id,
        )
        self._sessions[chat_id] = session
        logger.info("Resumed session %s for chat %s in %s", conversation_id, chat_id, resolved)

        self.history.save_session(
            chat_id, conversation_id, resolved, entry.last_message_preview, entry.assistant_session_id
        )
        return session

    def resume_last_session(self, chat_id: int) -> Session | None:
        entry = self.history.get_last_session(chat_id)
        if entry is None:
            return None
        return self.resume_session(chat_id, entry.conversation_id)

    def get_session_history(self, chat_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        return self.history.get_history(chat_id, limit)

    def set_assistant_session_id(self, chat_id: int, assistant_session_id: str) -> None:
        """Attach the assistant process's own session handle to the live session."""
        session = self._sessions.get(chat_id)
        if session is None:
            return

        session.assistant_session_id = assistant_session_id
        session.last_activity = _now()
        self.history.update_assistant_session_id(chat_id, session.conversation_id, assistant_session_id)


def open_session_manager(path: Path | None = None) -> SessionManager:
    """Build a manager over the history file at ``path`` (default location if None)."""
    return SessionManager(HistoryStore.from_path(path))


def generate_conversation_id() -> str:
    """Return a unique id such as ``conv_1737367200000_k3x9q2a``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"conv_{int(time.time() * 1000)}_{suffix}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string."""
    if not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
