"""Track which conversation each chat is attached to and where it resumes."""

from .core import HistoryEntry, Session
from .history import HistoryStore
from .manager import SessionManager, open_session_manager
from .paths import resolve_working_directory

__all__ = [
    "HistoryEntry",
    "HistoryStore",
    "Session",
    "SessionManager",
    "open_session_manager",
    "resolve_working_directory",
]
