"""
Working context model.

The context is a single pointer to the milestone (and optionally task) the
operator is focused on, plus a cached family letter. It is not checked
against the roadmap when written; a pointer to a deleted milestone is a
legal state that readers detect through the query layer.
"""

from pydantic import BaseModel, Field


class WorkContext(BaseModel):
    """Persisted current working item pointer."""

    milestone_id: str | None = Field(default=None, description="Current milestone ID")
    task_id: str | None = Field(default=None, description="Current task ID")
    family: str | None = Field(default=None, description="Cached family letter")

    def is_empty(self) -> bool:
        return not (self.milestone_id or self.task_id or self.family)
