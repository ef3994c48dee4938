"""
Roadmap store for reading/writing the roadmap YAML file.

The whole roadmap is loaded at the start of a command and written back
wholesale at the end of a mutating command. Every save validates first and
writes through the storage backend, which replaces the file atomically.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from spiral.core.errors import RoadmapParseError, StorageDecodeError
from spiral.core.roadmap.models import Roadmap
from spiral.core.roadmap.validation import validate_roadmap
from spiral.core.storage import FileStorage, Storage

logger = logging.getLogger(__name__)


def dump_roadmap(roadmap: Roadmap) -> str:
    """
    Serialize a roadmap to YAML text.

    Key order follows the model field order and unset optionals are omitted
    rather than written as null.
    """
    data = roadmap.model_dump(exclude_none=True)
    return yaml.dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def parse_roadmap(content: str, source: str = "roadmap") -> Roadmap:
    """
    Decode YAML text into a Roadmap.

    An empty document yields an empty roadmap. Enum values are not checked
    here; that is validate_roadmap's job.

    Raises:
        RoadmapParseError: If the text is not YAML or not roadmap-shaped
    """
    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RoadmapParseError(f"Failed to parse {source}: {e}") from e

    if data is None:
        return Roadmap()
    if not isinstance(data, dict):
        raise RoadmapParseError(
            f"Failed to parse {source}: expected a mapping, got {type(data).__name__}"
        )

    try:
        return Roadmap.model_validate(data)
    except ValidationError as e:
        raise RoadmapParseError(f"Failed to parse {source}: {e}") from e


class RoadmapStore:
    """
    Store for the roadmap YAML file.

    Example:
        >>> store = RoadmapStore(Path("spiral.yml"))
        >>> roadmap = store.load()
        >>> roadmap.milestones.append(milestone)
        >>> store.save(roadmap)
    """

    def __init__(self, path: Path, storage: Storage | None = None) -> None:
        """
        Initialize RoadmapStore.

        Args:
            path: Roadmap file location
            storage: Storage backend (defaults to the local filesystem)
        """
        self.path = path
        self.storage = storage or FileStorage()

    def exists(self) -> bool:
        return self.storage.exists(self.path)

    def load(self) -> Roadmap:
        """
        Load the roadmap, creating an empty one if the file is missing.

        Returns:
            The decoded roadmap

        Raises:
            RoadmapParseError: If the file content is not a roadmap or not UTF-8
            StorageError: If the file cannot be read or the new file written
        """
        try:
            content = self.storage.read_text(self.path)
        except StorageDecodeError as e:
            raise RoadmapParseError(f"Failed to parse {self.path}: {e}") from e
        if content is None:
            logger.debug("Roadmap %s not found, creating empty roadmap", self.path)
            roadmap = Roadmap()
            self.save(roadmap)
            return roadmap

        roadmap = parse_roadmap(content, source=str(self.path))
        logger.debug(
            "Loaded %d milestones and %d tasks from %s",
            len(roadmap.milestones),
            len(roadmap.tasks),
            self.path,
        )
        return roadmap

    def validate(self, roadmap: Roadmap) -> None:
        """Check roadmap invariants. See validate_roadmap."""
        validate_roadmap(roadmap)

    def save(self, roadmap: Roadmap) -> None:
        """
        Validate and atomically write the roadmap.

        Nothing is written when validation fails.

        Raises:
            RoadmapValidationError: If the roadmap violates an invariant
            StorageError: If the write fails
        """
        self.validate(roadmap)
        self.storage.write_text(self.path, dump_roadmap(roadmap))
        logger.debug("Saved roadmap to %s", self.path)
