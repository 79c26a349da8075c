"""Backing stores for the serialized session history document."""

import os
from abc import ABC, abstractmethod
from pathlib import Path


class HistoryStorage(ABC):
    """Where the history document lives.

    Implementations move whole documents only; parsing and validation
    belong to the history store. Errors surface as ``OSError``.
    """

    @abstractmethod
    def read(self) -> str | None:
        """Return the stored document, or None if nothing has been stored."""
        ...

    @abstractmethod
    def write(self, content: str) -> None:
        """Replace the stored document with ``content``."""
        ...


class JsonFileStorage(HistoryStorage):
    """A single owner-only JSON file on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, content: str) -> None:
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        # A pre-existing tmp file keeps its old mode through O_CREAT.
        os.chmod(self.path, 0o600)


class InMemoryStorage(HistoryStorage):
    """Keeps the document in a string; nothing touches the filesystem."""

    def __init__(self, content: str | None = None):
        self.content = content
        self.writes = 0

    def read(self) -> str | None:
        return self.content

    def write(self, content: str) -> None:
        self.content = content
        self.writes += 1
