"""File source — finds and reads the text documents to scan."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


class FileSourceError(Exception):
    """A file could not be listed, read or decoded."""


class NotTextFileError(FileSourceError):
    """The file's extension is not in the allowed list."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Not a text file: {path}")
        self.path = path


class LocalFileSource:
    """Text files under a directory (recursively) or a single file."""

    __slots__ = ("root", "allowed_extensions")

    def __init__(self, root: str | Path, allowed_extensions: Iterable[str]) -> None:
        self.root = Path(root)
        self.allowed_extensions = {e.lstrip(".").lower() for e in allowed_extensions}

    def is_text_file(self, path: Path) -> bool:
        return path.suffix.lstrip(".").lower() in self.allowed_extensions

    def files(self) -> list[Path]:
        """Return matching files in a stable (sorted) order."""
        try:
            if self.root.is_dir():
                found = [p for p in self.root.rglob("*") if p.is_file() and self.is_text_file(p)]
            elif self.root.is_file():
                found = [self.root] if self.is_text_file(self.root) else []
            else:
                raise FileNotFoundError(f"No such file or directory: {self.root}")
        except OSError as e:
            raise FileSourceError(f"IO error: {e}") from e
        logger.debug("found %d text files under %s", len(found), self.root)
        return sorted(found)

    def read_file(self, path: str | Path) -> str:
        """Read ``path`` as strict UTF-8."""
        path = Path(path)
        if not self.is_text_file(path):
            raise NotTextFileError(path)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileSourceError(f"IO error: {e}") from e
        except UnicodeDecodeError as e:
            raise FileSourceError(f"{path}: not valid UTF-8 ({e.reason})") from e
