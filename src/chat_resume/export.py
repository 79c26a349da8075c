"""Export a chat's session history to Markdown and JSON formats."""

import json

from .core import HistoryEntry


def history_to_markdown(chat_id: int, entries: list[HistoryEntry]) -> str:
    """Render a chat's history as Markdown, most recent first."""
    lines = [f"# Chat {chat_id}", ""]

    if not entries:
        lines.append("_No sessions._")
        return "\n".join(lines)

    for entry in entries:
        lines.append(f"## {entry.project_name}")
        lines.append("")
        lines.append(f"**Conversation:** {entry.conversation_id}")
        lines.append(f"**Project:** {entry.project_path}")
        if entry.assistant_session_id:
            lines.append(f"**Assistant session:** {entry.assistant_session_id}")
        lines.append(f"**Created:** {entry.created_at}")
        lines.append(f"**Last activity:** {entry.last_activity}")
        if entry.last_message_preview:
            lines.extend(["", f"> {entry.last_message_preview}"])
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def history_to_json(chat_id: int, entries: list[HistoryEntry]) -> str:
    """Render a chat's history as JSON, entries in their on-disk shape."""
    data = {
        "chatId": chat_id,
        "sessions": [entry.to_dict() for entry in entries],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
