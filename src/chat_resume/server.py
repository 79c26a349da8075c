"""Read-only FastAPI inspection server for chat-resume history."""

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from .config import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_PER_CHAT, get_history_path
from .export import history_to_json, history_to_markdown
from .history import HistoryStore

logger = logging.getLogger(__name__)

app = FastAPI(title="chat-resume", version="0.1.0")

# History store cache (opened on first request)
_store: HistoryStore | None = None


def _get_store() -> HistoryStore:
    """Open the history store once, then re-read it so changes by the owning process show up."""
    global _store
    if _store is None:
        path = get_history_path()
        _store = HistoryStore.from_path(path)
        logger.info("Serving session history from %s", path)
    else:
        _store.reload()
    return _store


# ── Routes ───────────────────────────────────────────────────────


@app.get("/api/chats")
async def get_chats():
    """Return every chat with history and its most recent session."""
    active = _get_store().get_all_active_sessions()
    return [
        {"chatId": chat_id, "latest": entry.to_dict()}
        for chat_id, entry in sorted(active.items())
    ]


@app.get("/api/chats/{chat_id}/history")
async def get_chat_history(
    chat_id: int,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_PER_CHAT),
):
    """Return a chat's most recent sessions."""
    entries = _get_store().get_history(chat_id, limit)
    return {
        "chatId": chat_id,
        "total": len(entries),
        "sessions": [entry.to_dict() for entry in entries],
    }


@app.get("/api/chats/{chat_id}/sessions/{conversation_id}")
async def get_chat_session(chat_id: int, conversation_id: str):
    """Return a single history entry."""
    entry = _get_store().get_session_by_conversation_id(chat_id, conversation_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return entry.to_dict()


@app.get("/api/export/{chat_id}")
async def export_chat(
    chat_id: int,
    format: str = Query("md", description="Export format: md or json"),
):
    """Export a chat's full history as Markdown or JSON."""
    entries = _get_store().get_history(chat_id, MAX_HISTORY_PER_CHAT)
    if not entries:
        raise HTTPException(status_code=404, detail="No history for chat")

    if format == "json":
        return Response(
            content=history_to_json(chat_id, entries),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="chat-{chat_id}.json"'},
        )
    else:
        return Response(
            content=history_to_markdown(chat_id, entries),
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="chat-{chat_id}.md"'},
        )
