"""Map stored working directories onto the current machine.

A conversation started on macOS as ``/Users/alice/dev/app`` can be resumed
on Linux as ``/home/bob/dev/app``: the username segment after a known home
prefix is swapped for the current user's home directory. When nothing
usable is found the current home directory is returned, so resolution
never fails.
"""

import logging
import os
from pathlib import Path

from .config import HOME_PREFIXES

logger = logging.getLogger(__name__)


def resolve_working_directory(stored_path: str, home: str | None = None) -> str:
    """Return a path for ``stored_path`` that exists on this machine.

    Args:
        stored_path: A previously recorded working directory.
        home: Override for the current user's home directory.

    Returns:
        ``stored_path`` if it exists, else its remapped equivalent under
        ``home`` if that exists, else ``home`` itself.
    """
    if home is None:
        home = str(Path.home())

    if os.path.exists(stored_path):
        return stored_path

    for prefix in HOME_PREFIXES:
        if not stored_path.startswith(prefix):
            continue

        rest = stored_path[len(prefix):]
        slash = rest.find("/")
        remapped = home if slash == -1 else home.rstrip("/") + rest[slash:]
        if os.path.exists(remapped):
            logger.debug("Remapped %s -> %s", stored_path, remapped)
            return remapped

    logger.debug("No usable path for %s, falling back to %s", stored_path, home)
    return home
