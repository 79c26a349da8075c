"""Locations and limits for persisted session history."""

import os
from pathlib import Path

MAX_HISTORY_PER_CHAT = 20
PREVIEW_LIMIT = 100
DEFAULT_HISTORY_LIMIT = 5

# Home-directory roots tried in order when remapping a stored path.
HOME_PREFIXES = ("/Users/", "/home/")


def get_state_dir() -> Path:
    """Return the per-user state directory."""
    env = os.environ.get("CHAT_RESUME_HOME")
    if env:
        return Path(env)

    return Path.home() / ".chat-resume"


def get_history_path() -> Path:
    """Return the path to the session history JSON file."""
    env = os.environ.get("CHAT_RESUME_HISTORY_FILE")
    if env:
        return Path(env)

    return get_state_dir() / "sessions.json"
