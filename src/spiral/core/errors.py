"""
Exception hierarchy for spiral.

Every error the core raises derives from SpiralError so the CLI can catch
a single base class and render it. Errors are never swallowed inside the
core; the only leniency is the generator skipping malformed sibling IDs.
"""


class SpiralError(Exception):
    """Base class for all spiral errors."""


class MalformedIDError(SpiralError, ValueError):
    """Raised when a string cannot be parsed as a roadmap ID."""

    def __init__(self, id_str: str, reason: str):
        super().__init__(f"Invalid ID '{id_str}': {reason}")
        self.id_str = id_str
        self.reason = reason


class InvalidParentError(SpiralError):
    """Raised for a wrong hierarchy level or a parent that does not exist."""


class DuplicateIDError(SpiralError):
    """Raised when an ID already exists in the roadmap."""

    def __init__(self, item_id: str, kind: str = "item"):
        super().__init__(f"{kind.capitalize()} ID {item_id} already exists")
        self.item_id = item_id
        self.kind = kind


class NotFoundError(SpiralError):
    """Raised when a milestone or task is not in the roadmap."""

    def __init__(self, item_id: str, kind: str = "item"):
        super().__init__(f"{kind.capitalize()} {item_id} not found")
        self.item_id = item_id
        self.kind = kind


class UnknownFieldError(SpiralError):
    """Raised when an update names a field outside the allowed set."""

    def __init__(self, field: str, allowed: list[str]):
        super().__init__(f"Unknown field: {field} (allowed: {', '.join(allowed)})")
        self.field = field
        self.allowed = allowed


class RoadmapValidationError(SpiralError):
    """Raised when a roadmap violates an invariant."""


class RoadmapParseError(SpiralError):
    """Raised when a roadmap file cannot be decoded into the roadmap shape."""


class ContextParseError(SpiralError):
    """Raised when the persisted context cannot be decoded."""


class StorageError(SpiralError):
    """Raised when reading, writing or renaming a file fails."""


class MissingContextError(SpiralError):
    """Raised when an operation needs a working context and none is usable."""


class StorageDecodeError(StorageError):
    """Raised when stored bytes are not valid UTF-8 text."""
