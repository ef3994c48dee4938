"""
Configuration data model for spiral.

Defines the structure of .spiral.json and ~/.config/spiral/config.json,
with validation via Pydantic.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spiral.core.query import SortOrder
from spiral.core.roadmap.discovery import ROADMAP_CANDIDATES


def _check_family(v: str) -> str:
    if len(v) != 1 or not v.isascii() or not v.isalpha():
        raise ValueError(f"family must be a single letter, got '{v}'")
    return v


class SpiralConfig(BaseModel):
    """
    Top-level spiral configuration.

    Example:
        >>> config = SpiralConfig()
        >>> config.default_family
        'D'
    """

    roadmap_file: Optional[str] = Field(
        default=None,
        description="Roadmap file to use instead of searching for one",
    )
    roadmap_candidates: list[str] = Field(
        default_factory=lambda: list(ROADMAP_CANDIDATES),
        min_length=1,
        description="File names searched, in order, when roadmap_file is unset",
    )
    state_dir: str = Field(
        default=".spiral",
        description="Directory holding context.json, relative to the project",
    )
    default_family: str = Field(
        default="D",
        description="Family for new milestones when none is given or inferred",
    )
    commit_family: str = Field(
        default="S",
        description="Family for milestones auto-created by 'spiral commit --auto'",
    )
    sort_order: SortOrder = Field(
        default=SortOrder.TEXT,
        description="ID ordering in listings: 'text' or 'natural'",
    )

    # Unknown keys in config files are ignored rather than rejected
    model_config = ConfigDict(extra="ignore")

    @field_validator("default_family", "commit_family")
    @classmethod
    def validate_family(cls, v: str) -> str:
        return _check_family(v)

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v
