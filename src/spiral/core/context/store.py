"""
Context store for reading/writing the working context JSON file.

The context lives at <state_dir>/context.json. It is independent of the
roadmap: setting it never touches the roadmap file and it is not checked
against the roadmap when saved.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from spiral.core.context.models import WorkContext
from spiral.core.errors import ContextParseError, StorageDecodeError
from spiral.core.storage import FileStorage, Storage

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".spiral"
CONTEXT_FILE = "context.json"


class ContextStore:
    """
    Store for the current working context.

    Example:
        >>> store = ContextStore(Path(".spiral"))
        >>> store.save(WorkContext(milestone_id="D3", family="D"))
        >>> store.load().milestone_id
        'D3'
    """

    def __init__(self, state_dir: Path | None = None, storage: Storage | None = None) -> None:
        """
        Initialize ContextStore.

        Args:
            state_dir: Directory holding context.json (defaults to ./.spiral)
            storage: Storage backend (defaults to the local filesystem)
        """
        self.state_dir = state_dir or Path(DEFAULT_STATE_DIR)
        self.storage = storage or FileStorage()

    @property
    def file_path(self) -> Path:
        return self.state_dir / CONTEXT_FILE

    def load(self) -> WorkContext:
        """
        Load the persisted context.

        Returns:
            The stored context, or an empty one if none was ever saved

        Raises:
            ContextParseError: If the stored content is not a context
        """
        try:
            content = self.storage.read_text(self.file_path)
        except StorageDecodeError as e:
            raise ContextParseError(f"Failed to parse {self.file_path}: {e}") from e
        if content is None:
            return WorkContext()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ContextParseError(f"Failed to parse {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ContextParseError(f"Failed to parse {self.file_path}: expected an object")

        try:
            return WorkContext.model_validate(data)
        except ValidationError as e:
            raise ContextParseError(f"Failed to parse {self.file_path}: {e}") from e

    def save(self, context: WorkContext) -> None:
        """Overwrite the stored context atomically."""
        content = context.model_dump_json(indent=2, exclude_none=True) + "\n"
        self.storage.write_text(self.file_path, content)
        logger.debug("Saved context to %s: %s", self.file_path, context)

    def clear(self) -> bool:
        """
        Remove the stored context.

        Returns:
            True if a context was removed, False if there was none
        """
        removed = self.storage.remove(self.file_path)
        logger.debug("Cleared context at %s (existed: %s)", self.file_path, removed)
        return removed
