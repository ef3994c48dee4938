"""
Roadmap data models for spiral.

Defines the Milestone and Task records stored in the roadmap YAML file,
the Roadmap aggregate that holds them, the fixed value sets for the
enum-like fields, and typed update requests for partial edits.

Enum-like fields (priority, cycle_status, task status) are kept as plain
strings on the records so that a hand-edited file with an unexpected value
still loads. Membership is enforced by validation before every save.
"""

from datetime import date
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spiral.core.errors import UnknownFieldError


class Priority(str, Enum):
    """Priority levels shared by milestones and tasks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CycleStatus(str, Enum):
    """Whether a milestone is part of the active working cycle."""

    PLANNED = "planned"
    IN_CYCLE = "in-cycle"


class TaskStatus(str, Enum):
    """Task and subtask status values."""

    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    BLOCKED = "blocked"


PRIORITY_VALUES = [p.value for p in Priority]
CYCLE_STATUS_VALUES = [c.value for c in CycleStatus]
TASK_STATUS_VALUES = [s.value for s in TaskStatus]


def is_valid_priority(value: str | None) -> bool:
    """Empty or unset counts as valid."""
    return not value or value in PRIORITY_VALUES


def is_valid_cycle_status(value: str | None) -> bool:
    """Empty or unset counts as valid."""
    return not value or value in CYCLE_STATUS_VALUES


def is_valid_task_status(value: str | None) -> bool:
    """Empty or unset counts as valid."""
    return not value or value in TASK_STATUS_VALUES


def _coerce_enum(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    return v


def _scalar_to_str(v: Any) -> Any:
    """Read YAML scalars that are not strings (2024, true, 2024-01-01) as text."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float, date)):
        return str(v)
    return v


class Milestone(BaseModel):
    """
    A top-level goal in the roadmap.

    Example:
        >>> milestone = Milestone(id="D3", family="D", title="Offline sync")
        >>> milestone.status
        'planned'
    """

    id: str = Field(..., description="Level-0 roadmap ID (e.g., 'D3')")
    family: str = Field(..., description="Family letter, equal to the ID's family")
    title: str = Field(..., description="Milestone title")
    priority: str | None = Field(default=None, description="low, medium, high or critical")
    cycle_status: str | None = Field(default=None, description="planned or in-cycle")
    status: str | None = Field(default="planned", description="Free-form status")
    notes: str | None = Field(default=None, description="Optional notes")
    metadata: dict[str, str] | None = Field(default=None, description="Free-form key/values")

    # Unknown keys written by hand survive a load/save round-trip
    model_config = ConfigDict(extra="allow")

    @field_validator(
        "id", "family", "title", "priority", "cycle_status", "status", "notes", mode="before"
    )
    @classmethod
    def scalar_as_text(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @field_validator("priority", "cycle_status", mode="before")
    @classmethod
    def coerce_enum(cls, v: Any) -> Any:
        return _coerce_enum(v)

    @property
    def in_cycle(self) -> bool:
        return self.cycle_status == CycleStatus.IN_CYCLE.value


class Task(BaseModel):
    """
    A work item under a milestone (task) or under a task (subtask).

    Example:
        >>> task = Task(id="D3.1", parent_id="D3", title="Write the sync queue")
        >>> task.status
        'planned'
    """

    id: str = Field(..., description="Level-1 or level-2 roadmap ID (e.g., 'D3.1')")
    parent_id: str = Field(..., description="ID of the parent milestone or task")
    title: str = Field(..., description="Task title")
    status: str = Field(default=TaskStatus.PLANNED.value, description="Task status")
    priority: str | None = Field(default=None, description="low, medium, high or critical")
    notes: str | None = Field(default=None, description="Optional notes")
    metadata: dict[str, str] | None = Field(default=None, description="Free-form key/values")

    model_config = ConfigDict(extra="allow")

    @field_validator("id", "parent_id", "title", "status", "priority", "notes", mode="before")
    @classmethod
    def scalar_as_text(cls, v: Any) -> Any:
        return _scalar_to_str(v)

    @field_validator("status", "priority", mode="before")
    @classmethod
    def coerce_enum(cls, v: Any) -> Any:
        return _coerce_enum(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        """A null status in the file reads as an empty status."""
        return "" if v is None else v


class Roadmap(BaseModel):
    """
    The aggregate root: ordered milestones and ordered tasks.

    Tasks and subtasks share one list; a subtask is a task whose parent
    is another task.
    """

    milestones: list[Milestone] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)

    @field_validator("milestones", "tasks", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """An empty YAML key (``tasks:``) loads as None."""
        return [] if v is None else v

    def get_milestone(self, milestone_id: str) -> Milestone | None:
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        return None

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def has_item(self, item_id: str) -> bool:
        """True if a milestone or task carries this ID."""
        return self.get_milestone(item_id) is not None or self.get_task(item_id) is not None

    def tasks_by_parent(self, parent_id: str) -> list[Task]:
        """Tasks whose parent_id equals parent_id, in document order."""
        return [task for task in self.tasks if task.parent_id == parent_id]


class _UpdateRequest(BaseModel):
    """
    Base for typed partial-update requests.

    Only fields that were explicitly set are applied; a field set to an
    empty string clears it.
    """

    model_config = ConfigDict(extra="forbid")

    FIELDS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_fields(cls, fields: dict[str, str]):
        """
        Build an update request from name/value pairs.

        Raises:
            UnknownFieldError: If a name is not an updatable field
        """
        for name in fields:
            if name not in cls.FIELDS:
                raise UnknownFieldError(name, list(cls.FIELDS))
        return cls(**fields)

    def changes(self) -> dict[str, str | None]:
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class MilestoneUpdate(_UpdateRequest):
    """
    Fields of a milestone that can be changed after creation.

    The family is part of the milestone's identity and is not updatable.
    """

    FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "priority",
        "cycle_status",
        "status",
        "notes",
    )

    title: str | None = None
    priority: str | None = None
    cycle_status: str | None = None
    status: str | None = None
    notes: str | None = None


class TaskUpdate(_UpdateRequest):
    """Fields of a task or subtask that can be changed after creation."""

    FIELDS: ClassVar[tuple[str, ...]] = ("title", "status", "priority", "notes")

    title: str | None = None
    status: str | None = None
    priority: str | None = None
    notes: str | None = None
