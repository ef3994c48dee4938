"""
ID system for hierarchical roadmap identification.

This package provides the typed ID model and utilities for the
milestone → task → subtask hierarchy.

Public API:
    Models:
        - RoadmapId: Typed ID (D3, D3.1, D3.1.2)
        - IdLevel: Hierarchy level (milestone, task, subtask)

    Parser functions:
        - parse_id: Parse string ID into typed model
        - format_id: Format typed model as string
        - validate_id: Check if string is valid ID format
        - get_level: Determine ID level without keeping the model
        - get_parent_id: Extract parent ID from hierarchical ID
        - extract_family: Extract the family letter
        - check_family: Reject a family that is not a single letter

    Generator:
        - IdGenerator: Next milestone/task/subtask IDs for a roadmap

Example:
    >>> from spiral.core.ids import RoadmapId, parse_id
    >>> task = RoadmapId(family="D", milestone=3, task=1)
    >>> str(task)
    'D3.1'
    >>> parse_id("D3.1") == task
    True
"""

from spiral.core.ids.generator import DEFAULT_FAMILY, IdGenerator
from spiral.core.ids.models import IdLevel, RoadmapId
from spiral.core.ids.parser import (
    check_family,
    extract_family,
    format_id,
    get_level,
    get_parent_id,
    parse_id,
    validate_id,
)

__all__ = [
    # Models
    "RoadmapId",
    "IdLevel",
    # Parser functions
    "parse_id",
    "format_id",
    "validate_id",
    "get_level",
    "get_parent_id",
    "extract_family",
    "check_family",
    # Generator
    "IdGenerator",
    "DEFAULT_FAMILY",
]
