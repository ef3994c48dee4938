"""
Roadmap mutation operations.

All operations work on an in-memory Roadmap and leave it untouched when
they raise. Persisting the result is the caller's job (RoadmapStore.save).

Operations:
    - add_milestone / add_task: insert a record with a caller-supplied ID
    - create_milestone / create_task: mint the next ID, build and insert
    - update_milestone / update_task: apply a typed partial update
    - remove_item: delete a milestone or task, optionally with descendants
"""

from __future__ import annotations

import logging

from spiral.core.errors import InvalidParentError, NotFoundError
from spiral.core.ids import IdGenerator, IdLevel
from spiral.core.roadmap.models import (
    Milestone,
    MilestoneUpdate,
    Roadmap,
    Task,
    TaskStatus,
    TaskUpdate,
)
from spiral.core.roadmap.validation import check_milestone_fields, check_task_fields

logger = logging.getLogger(__name__)

# Optional fields where an empty string in an update means "unset"
_CLEARABLE = {"priority", "cycle_status", "notes"}


def add_milestone(roadmap: Roadmap, milestone: Milestone) -> Milestone:
    """
    Append a milestone to the roadmap.

    Args:
        roadmap: Roadmap to modify
        milestone: Fully populated milestone

    Returns:
        The inserted milestone

    Raises:
        DuplicateIDError: If a milestone with the same ID exists
        MalformedIDError: If the ID does not parse
        InvalidParentError: If the ID is not a milestone-level ID
        RoadmapValidationError: For an empty title, a family that does not
            match the ID, or an invalid enum value
    """
    check_milestone_fields(milestone)
    IdGenerator(roadmap).validate_unique(milestone.id)

    roadmap.milestones.append(milestone)
    logger.debug("Added milestone %s", milestone.id)
    return milestone


def add_task(roadmap: Roadmap, task: Task) -> Task:
    """
    Append a task or subtask to the roadmap.

    The task's parent_id must be the ID formed by dropping the last segment
    of its own ID, and that parent must exist: a milestone for a task, a
    task for a subtask.

    Raises:
        DuplicateIDError: If a task with the same ID exists
        MalformedIDError: If the ID does not parse
        InvalidParentError: If the ID level, parent_id or parent is wrong
        RoadmapValidationError: For an empty title or an invalid enum value
    """
    check_task_fields(task)
    parsed = IdGenerator(roadmap).validate_unique(task.id)
    if parsed.level == IdLevel.MILESTONE:
        raise InvalidParentError(f"Task ID must have a parent: {task.id}")

    expected_parent = str(parsed.parent())
    if task.parent_id != expected_parent:
        raise InvalidParentError(
            f"Task {task.id} must have parent {expected_parent}, got {task.parent_id}"
        )

    if parsed.level == IdLevel.TASK:
        parent_exists = roadmap.get_milestone(task.parent_id) is not None
    else:
        parent_exists = roadmap.get_task(task.parent_id) is not None
    if not parent_exists:
        raise InvalidParentError(f"Parent {task.parent_id} does not exist")

    roadmap.tasks.append(task)
    logger.debug("Added task %s under %s", task.id, task.parent_id)
    return task


def create_milestone(
    roadmap: Roadmap,
    title: str,
    family: str,
    *,
    milestone_id: str | None = None,
    priority: str | None = None,
    cycle_status: str | None = None,
    status: str | None = "planned",
    notes: str | None = None,
) -> Milestone:
    """
    Build a milestone, minting the next ID in family when none is given.

    Example:
        >>> milestone = create_milestone(roadmap, "Offline sync", "D")
        >>> milestone.id
        'D1'
    """
    if milestone_id is None:
        milestone_id = str(IdGenerator(roadmap).next_milestone_id(family))

    milestone = Milestone(
        id=milestone_id,
        family=family,
        title=title,
        priority=priority,
        cycle_status=cycle_status,
        status=status,
        notes=notes,
    )
    return add_milestone(roadmap, milestone)


def create_task(
    roadmap: Roadmap,
    title: str,
    parent_id: str,
    *,
    task_id: str | None = None,
    status: str = TaskStatus.PLANNED.value,
    priority: str | None = None,
    notes: str | None = None,
) -> Task:
    """
    Build a task or subtask under parent_id.

    When task_id is not given, the parent's level decides: a milestone
    parent gets the next task ID, a task parent the next subtask ID.
    """
    if task_id is None:
        family = parent_id[:1]
        task_id = str(IdGenerator(roadmap).suggest_id(family, parent_id))

    task = Task(
        id=task_id,
        parent_id=parent_id,
        title=title,
        status=status,
        priority=priority,
        notes=notes,
    )
    return add_task(roadmap, task)


def _apply(changes: dict[str, str | None]) -> dict[str, str | None]:
    return {
        name: (None if name in _CLEARABLE and value == "" else value)
        for name, value in changes.items()
    }


def update_milestone(roadmap: Roadmap, milestone_id: str, update: MilestoneUpdate) -> Milestone:
    """
    Apply a partial update to a milestone.

    Only fields set on the update change; the rest keep their values.

    Raises:
        NotFoundError: If no milestone has milestone_id
        RoadmapValidationError: If the result has an empty title, a family
            that does not match the ID, or an invalid enum value
    """
    for i, milestone in enumerate(roadmap.milestones):
        if milestone.id == milestone_id:
            updated = milestone.model_copy(update=_apply(update.changes()))
            check_milestone_fields(updated)
            roadmap.milestones[i] = updated
            logger.debug("Updated milestone %s: %s", milestone_id, update.changes())
            return updated

    raise NotFoundError(milestone_id, "milestone")


def update_task(roadmap: Roadmap, task_id: str, update: TaskUpdate) -> Task:
    """
    Apply a partial update to a task or subtask.

    Raises:
        NotFoundError: If no task has task_id
        RoadmapValidationError: If the result is invalid
    """
    for i, task in enumerate(roadmap.tasks):
        if task.id == task_id:
            changes = _apply(update.changes())
            if changes.get("status") is None and "status" in changes:
                changes["status"] = ""
            updated = task.model_copy(update=changes)
            check_task_fields(updated)
            roadmap.tasks[i] = updated
            logger.debug("Updated task %s: %s", task_id, update.changes())
            return updated

    raise NotFoundError(task_id, "task")


def descendants_of(roadmap: Roadmap, item_id: str) -> list[Task]:
    """All tasks below item_id, depth first, in document order per level."""
    found: list[Task] = []
    seen: set[str] = {item_id}
    pending = [item_id]
    while pending:
        parent = pending.pop()
        for task in roadmap.tasks_by_parent(parent):
            if task.id in seen:
                continue
            seen.add(task.id)
            found.append(task)
            pending.append(task.id)
    return found


def remove_item(roadmap: Roadmap, item_id: str, *, cascade: bool = False) -> list[str]:
    """
    Remove a milestone or task by ID.

    Args:
        roadmap: Roadmap to modify
        item_id: Milestone or task ID
        cascade: Also remove every task below the item

    Returns:
        IDs removed, the item itself first

    Raises:
        NotFoundError: If no milestone or task has item_id
        InvalidParentError: If the item has children and cascade is False
    """
    if not roadmap.has_item(item_id):
        raise NotFoundError(item_id)

    children = descendants_of(roadmap, item_id)
    if children and not cascade:
        raise InvalidParentError(
            f"{item_id} has {len(children)} child item(s); use cascade to remove them"
        )

    removed = {item_id} | {task.id for task in children}
    roadmap.milestones = [m for m in roadmap.milestones if m.id != item_id]
    roadmap.tasks = [t for t in roadmap.tasks if t.id not in removed]

    logger.debug("Removed %s", ", ".join(sorted(removed)))
    return [item_id] + [task.id for task in children]
