"""
Pluggable text storage for roadmap and context files.

The stores never touch the filesystem directly; they go through a Storage
backend. FileStorage is the real implementation and writes atomically
(temp file in the destination directory, flush, fsync, rename).
MemoryStorage keeps everything in a dict so the core can be exercised
without filesystem fixtures.

Example:
    >>> storage = MemoryStorage()
    >>> storage.write_text(Path("spiral.yml"), "milestones: []\\n")
    >>> storage.read_text(Path("spiral.yml"))
    'milestones: []\\n'
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from spiral.core.errors import StorageDecodeError, StorageError

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".spiral-temp-"


@runtime_checkable
class Storage(Protocol):
    """
    Protocol for storage backends used by RoadmapStore and ContextStore.

    Implementations must make write_text atomic: a reader either sees the
    previous content or the new content, never a partial write.
    """

    def exists(self, path: Path) -> bool:
        """Return True if something is stored at path."""
        ...

    def read_text(self, path: Path) -> str | None:
        """
        Return the stored text, or None if nothing is stored at path.

        Raises:
            StorageDecodeError: If the stored bytes are not valid text
        """
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Atomically replace the content stored at path."""
        ...

    def remove(self, path: Path) -> bool:
        """Remove path. Returns False if nothing was stored there."""
        ...


def atomic_write(path: Path, content: str) -> None:
    """
    Write content to path atomically.

    The data goes to a temporary file in the same directory, is flushed and
    fsynced, then renamed over the destination with os.replace. If anything
    fails before the rename completes, the temporary file is removed and the
    destination keeps its previous content.

    Args:
        path: Destination file
        content: Text to write (UTF-8)

    Raises:
        StorageError: If the directory, temp file, write or rename fails
    """
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=TEMP_PREFIX)
    except OSError as e:
        raise StorageError(f"Failed to create temp file in {directory}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)
    except OSError as e:
        _discard(temp_path)
        raise StorageError(f"Failed to write {path}: {e}") from e
    except BaseException:
        _discard(temp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(content), path)


def _discard(temp_path: str) -> None:
    try:
        os.unlink(temp_path)
    except OSError:
        pass


class FileStorage:
    """Storage backed by the local filesystem."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def read_text(self, path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageDecodeError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write_text(self, path: Path, content: str) -> None:
        atomic_write(path, content)

    def remove(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}") from e
        return True


class MemoryStorage:
    """In-memory storage, keyed by path. Used by tests and dry runs."""

    def __init__(self, files: dict[Path, str] | None = None) -> None:
        self.files: dict[Path, str] = dict(files or {})

    def exists(self, path: Path) -> bool:
        return path in self.files

    def read_text(self, path: Path) -> str | None:
        return self.files.get(path)

    def write_text(self, path: Path, content: str) -> None:
        self.files[path] = content

    def remove(self, path: Path) -> bool:
        return self.files.pop(path, None) is not None
