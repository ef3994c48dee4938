"""
ID parser and validator for hierarchical roadmap identification.

This module converts string IDs into RoadmapId models and back. The
grammar is one leading letter (the family) followed by one to three
dot-separated non-negative integers:

- Milestone: D3
- Task: D3.1
- Subtask: D3.1.2

Public API:
    - parse_id: Parse string ID into typed model
    - format_id: Format a typed model as its canonical string
    - validate_id: Check if string is valid ID format
    - get_level: Determine the hierarchy level of a string ID
    - get_parent_id: Extract parent ID from hierarchical ID
    - extract_family: Extract the family letter from a string ID
"""

import re

from spiral.core.errors import MalformedIDError
from spiral.core.ids.models import IdLevel, RoadmapId

_FAMILY_REGEX = re.compile(r"[A-Za-z]")
_SEGMENT_REGEX = re.compile(r"[0-9]+")

# milestone, task, subtask
MAX_SEGMENTS = 3


def parse_id(id_str: str) -> RoadmapId:
    """
    Parse a string ID into its typed model.

    Args:
        id_str: The ID string to parse

    Returns:
        The typed RoadmapId

    Raises:
        MalformedIDError: If the input is empty, shorter than two characters,
            does not start with a letter, has more than three numeric
            segments, or has a segment that is not a non-negative integer

    Examples:
        >>> parse_id("D3.1")
        RoadmapId(family='D', milestone=3, task=1, subtask=None)
        >>> str(parse_id("D3.1.2").parent())
        'D3.1'
        >>> parse_id("3.1")
        Traceback (most recent call last):
            ...
        spiral.core.errors.MalformedIDError: Invalid ID '3.1': family must be alphabetic
    """
    if not id_str:
        raise MalformedIDError(id_str, "empty ID")
    if len(id_str) < 2:
        raise MalformedIDError(id_str, "too short")

    family = id_str[0]
    if not _FAMILY_REGEX.fullmatch(family):
        raise MalformedIDError(id_str, "family must be alphabetic")

    segments = id_str[1:].split(".")
    if len(segments) > MAX_SEGMENTS:
        raise MalformedIDError(id_str, f"at most {MAX_SEGMENTS} numeric segments allowed")

    numbers: list[int] = []
    for name, segment in zip(("milestone", "task", "subtask"), segments):
        if not _SEGMENT_REGEX.fullmatch(segment):
            raise MalformedIDError(id_str, f"invalid {name} number: '{segment}'")
        numbers.append(int(segment))

    milestone = numbers[0]
    task = numbers[1] if len(numbers) > 1 else None
    subtask = numbers[2] if len(numbers) > 2 else None
    return RoadmapId(family=family, milestone=milestone, task=task, subtask=subtask)


def format_id(id_obj: RoadmapId) -> str:
    """Format a RoadmapId as D3, D3.1 or D3.1.2."""
    return str(id_obj)


def validate_id(id_str: str) -> bool:
    """
    Check if a string is a valid ID format.

    Examples:
        >>> validate_id("D3.1")
        True
        >>> validate_id("D3.1.2.4")
        False
    """
    try:
        parse_id(id_str)
    except MalformedIDError:
        return False
    return True


def get_level(id_str: str) -> IdLevel:
    """
    Determine the hierarchy level of an ID.

    Raises:
        MalformedIDError: If the ID does not parse
    """
    return parse_id(id_str).level


def get_parent_id(id_str: str) -> str | None:
    """
    Extract the parent ID from a hierarchical ID.

    Returns None for milestones, which have no parent.

    Examples:
        >>> get_parent_id("D3.1.2")
        'D3.1'
        >>> get_parent_id("D3.1")
        'D3'
        >>> get_parent_id("D3") is None
        True

    Raises:
        MalformedIDError: If the ID does not parse
    """
    parent = parse_id(id_str).parent()
    return str(parent) if parent is not None else None


def extract_family(id_str: str) -> str:
    """
    Extract the family letter from any ID string.

    Raises:
        MalformedIDError: If the ID does not parse
    """
    return parse_id(id_str).family


def check_family(family: str) -> str:
    """
    Check that family is a single ASCII letter.

    Returns:
        The family, unchanged

    Raises:
        MalformedIDError: If family is empty, longer than one character or
            not a letter

    Examples:
        >>> check_family("D")
        'D'
        >>> check_family("DD")
        Traceback (most recent call last):
            ...
        spiral.core.errors.MalformedIDError: Invalid ID 'DD': family must be a single letter
    """
    if not _FAMILY_REGEX.fullmatch(family or ""):
        raise MalformedIDError(family, "family must be a single letter")
    return family
