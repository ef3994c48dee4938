"""
ID model for hierarchical roadmap identification.

A roadmap ID names a milestone, a task under a milestone, or a subtask
under a task. The family letter groups milestones into product areas.

ID Format Examples:
    - Milestone: D3
    - Task:      D3.1
    - Subtask:   D3.1.2

The hierarchy is structurally closed: dropping the deepest component of
any ID yields its parent's ID.
"""

import re
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class IdLevel(IntEnum):
    """Hierarchy level derived from which components an ID carries."""

    MILESTONE = 0
    TASK = 1
    SUBTASK = 2


class RoadmapId(BaseModel):
    """
    Roadmap ID: {family}{milestone}[.{task}[.{subtask}]] → D3.1.2

    Example:
        >>> task = RoadmapId(family="D", milestone=3, task=1)
        >>> str(task)
        'D3.1'
        >>> task.level
        <IdLevel.TASK: 1>
        >>> str(task.parent())
        'D3'
    """

    family: str
    milestone: int
    task: int | None = None
    subtask: int | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("family")
    @classmethod
    def validate_family(cls, v: str) -> str:
        """Validate family is a single ASCII letter."""
        if not re.match(r"^[A-Za-z]$", v):
            raise ValueError("Family must be a single letter: A-Z or a-z")
        return v

    @field_validator("milestone", "task", "subtask")
    @classmethod
    def validate_number(cls, v: int | None) -> int | None:
        """Validate that numbers are non-negative."""
        if v is not None and v < 0:
            raise ValueError("ID numbers must be non-negative")
        return v

    @model_validator(mode="after")
    def validate_structure(self) -> "RoadmapId":
        """A subtask number requires a task number."""
        if self.subtask is not None and self.task is None:
            raise ValueError("Subtask number requires a task number")
        return self

    @property
    def level(self) -> IdLevel:
        if self.subtask is not None:
            return IdLevel.SUBTASK
        if self.task is not None:
            return IdLevel.TASK
        return IdLevel.MILESTONE

    @property
    def commit_tag(self) -> str:
        """Format for git commit messages: [D3.1]"""
        return f"[{self}]"

    def parent(self) -> "RoadmapId | None":
        """
        Return the parent ID by dropping the deepest component.

        Milestones have no parent and return None.
        """
        if self.subtask is not None:
            return RoadmapId(family=self.family, milestone=self.milestone, task=self.task)
        if self.task is not None:
            return RoadmapId(family=self.family, milestone=self.milestone)
        return None

    def milestone_id(self) -> "RoadmapId":
        """Return the milestone this ID belongs to (itself for milestones)."""
        return RoadmapId(family=self.family, milestone=self.milestone)

    def child(self, number: int) -> "RoadmapId":
        """
        Return the ID of a direct child with the given number.

        Raises:
            ValueError: If this ID is a subtask (subtasks have no children)
        """
        if self.level == IdLevel.MILESTONE:
            return RoadmapId(family=self.family, milestone=self.milestone, task=number)
        if self.level == IdLevel.TASK:
            return RoadmapId(
                family=self.family,
                milestone=self.milestone,
                task=self.task,
                subtask=number,
            )
        raise ValueError(f"Subtask {self} cannot have children")

    def __str__(self) -> str:
        """Format as D3, D3.1 or D3.1.2"""
        if self.subtask is not None:
            return f"{self.family}{self.milestone}.{self.task}.{self.subtask}"
        if self.task is not None:
            return f"{self.family}{self.milestone}.{self.task}"
        return f"{self.family}{self.milestone}"
