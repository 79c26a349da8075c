"""Core data models for chat-resume."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class Session:
    """The live binding of a chat to a conversation and working directory."""

    conversation_id: str
    working_directory: str  # already resolved for this machine
    created_at: datetime
    last_activity: datetime
    assistant_session_id: Optional[str] = None  # handle reported by the assistant process


class HistoryEntry(BaseModel):
    """Durable record of one conversation in a chat's history.

    Timestamps stay ISO-8601 strings so an entry round-trips through the
    history file unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    conversation_id: str = Field(alias="conversationId", strict=True)
    assistant_session_id: Optional[str] = Field(default=None, alias="assistantSessionId", strict=True)
    project_path: str = Field(alias="projectPath", strict=True)
    project_name: str = Field(alias="projectName", strict=True)
    last_message_preview: str = Field(alias="lastMessagePreview", strict=True)
    created_at: str = Field(alias="createdAt", strict=True)
    last_activity: str = Field(alias="lastActivity", strict=True)

    def to_dict(self) -> dict:
        """Return the on-disk (camelCase) form, omitting an unset assistant id."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HistoryDocument(BaseModel):
    """Top-level shape of the history file: chat id (as string) -> entries."""

    sessions: Dict[str, List[HistoryEntry]]
