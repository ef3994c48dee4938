"""
Roadmap invariant checks.

validate_roadmap runs the checks in a fixed order of passes and raises on
the first violation:

1. Empty milestone IDs/titles, empty task IDs/titles/parent IDs
2. Duplicate milestone IDs, duplicate task IDs
3. Milestone IDs that are not milestone-level IDs of the milestone's family
4. Task parents that resolve to neither a milestone nor a task
5. Enum-valued fields outside their value sets

Because the passes run over the whole roadmap, an empty title anywhere is
reported before a duplicate ID anywhere.
"""

from collections.abc import Callable

from spiral.core.errors import InvalidParentError, MalformedIDError, RoadmapValidationError
from spiral.core.ids import IdLevel, parse_id
from spiral.core.roadmap.models import (
    CYCLE_STATUS_VALUES,
    PRIORITY_VALUES,
    TASK_STATUS_VALUES,
    Milestone,
    Roadmap,
    Task,
    is_valid_cycle_status,
    is_valid_priority,
    is_valid_task_status,
)


def validate_roadmap(roadmap: Roadmap) -> None:
    """
    Check every roadmap invariant, failing fast on the first violation.

    Args:
        roadmap: Roadmap to check

    Raises:
        RoadmapValidationError: Describing the first violation found
    """
    _check_required_fields(roadmap)
    _check_duplicates(roadmap)
    _check_milestone_ids(roadmap)
    _check_parents(roadmap)
    _check_enums(roadmap)


def _check_required_fields(roadmap: Roadmap) -> None:
    for i, milestone in enumerate(roadmap.milestones):
        if not milestone.id:
            raise RoadmapValidationError(f"Milestone at index {i} has empty ID")
        if not milestone.title:
            raise RoadmapValidationError(f"Milestone {milestone.id} has empty title")

    for i, task in enumerate(roadmap.tasks):
        if not task.id:
            raise RoadmapValidationError(f"Task at index {i} has empty ID")
        if not task.title:
            raise RoadmapValidationError(f"Task {task.id} has empty title")
        if not task.parent_id:
            raise RoadmapValidationError(f"Task {task.id} has empty parent_id")


def _check_duplicates(roadmap: Roadmap) -> None:
    seen: set[str] = set()
    for milestone in roadmap.milestones:
        if milestone.id in seen:
            raise RoadmapValidationError(f"Duplicate milestone ID: {milestone.id}")
        seen.add(milestone.id)

    seen = set()
    for task in roadmap.tasks:
        if task.id in seen:
            raise RoadmapValidationError(f"Duplicate task ID: {task.id}")
        seen.add(task.id)


def _check_milestone_ids(roadmap: Roadmap) -> None:
    for milestone in roadmap.milestones:
        try:
            check_milestone_identity(milestone)
        except (MalformedIDError, InvalidParentError) as e:
            raise RoadmapValidationError(f"Milestone {milestone.id}: {e}") from e


def check_milestone_identity(milestone: Milestone) -> None:
    """
    Check that a milestone's ID is a milestone-level ID of its own family.

    Raises:
        MalformedIDError: If the ID does not parse
        InvalidParentError: If the ID is a task or subtask ID
        RoadmapValidationError: If the family field differs from the ID's family
    """
    parsed = parse_id(milestone.id)
    if parsed.level != IdLevel.MILESTONE:
        raise InvalidParentError(f"Milestone ID must not have a parent: {milestone.id}")
    if milestone.family != parsed.family:
        raise RoadmapValidationError(
            f"Milestone {milestone.id} family '{milestone.family}' "
            f"does not match ID family '{parsed.family}'"
        )


def _check_parents(roadmap: Roadmap) -> None:
    known = {m.id for m in roadmap.milestones} | {t.id for t in roadmap.tasks}
    for task in roadmap.tasks:
        if task.parent_id not in known:
            raise RoadmapValidationError(
                f"Task {task.id} references non-existent parent: {task.parent_id}"
            )


def _check_enums(roadmap: Roadmap) -> None:
    for milestone in roadmap.milestones:
        _check_value(milestone, "priority", is_valid_priority, PRIORITY_VALUES)
        _check_value(milestone, "cycle_status", is_valid_cycle_status, CYCLE_STATUS_VALUES)

    for task in roadmap.tasks:
        _check_value(task, "status", is_valid_task_status, TASK_STATUS_VALUES)
        _check_value(task, "priority", is_valid_priority, PRIORITY_VALUES)


def _check_value(
    item: Milestone | Task,
    field: str,
    is_valid: Callable[[str | None], bool],
    allowed: list[str],
) -> None:
    value = getattr(item, field)
    if not is_valid(value):
        kind = "Milestone" if isinstance(item, Milestone) else "Task"
        raise RoadmapValidationError(
            f"{kind} {item.id} has invalid {field}: {value} "
            f"(expected one of: {', '.join(allowed)})"
        )


def check_milestone_fields(milestone: Milestone) -> None:
    """
    Check a single milestone's own fields (title, ID, family and enum values).

    Used before inserting or updating so that a rejected change leaves the
    roadmap untouched.
    """
    if not milestone.id:
        raise RoadmapValidationError("Milestone ID cannot be empty")
    if not milestone.title:
        raise RoadmapValidationError("Milestone title cannot be empty")
    check_milestone_identity(milestone)
    _check_value(milestone, "priority", is_valid_priority, PRIORITY_VALUES)
    _check_value(milestone, "cycle_status", is_valid_cycle_status, CYCLE_STATUS_VALUES)


def check_task_fields(task: Task) -> None:
    """Check a single task's own fields (title, parent and enum values)."""
    if not task.id:
        raise RoadmapValidationError("Task ID cannot be empty")
    if not task.title:
        raise RoadmapValidationError("Task title cannot be empty")
    if not task.parent_id:
        raise RoadmapValidationError("Task parent_id cannot be empty")
    _check_value(task, "status", is_valid_task_status, TASK_STATUS_VALUES)
    _check_value(task, "priority", is_valid_priority, PRIORITY_VALUES)
