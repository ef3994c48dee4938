"""
Read-only queries over a roadmap.

Everything here is a pure function of a Roadmap (and sometimes a
WorkContext); nothing mutates its input. The CLI display commands use this
module exclusively.

Sorting defaults to plain text order, where "D10" sorts before "D2".
SortOrder.NATURAL compares parsed ID components numerically instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from spiral.core.context.models import WorkContext
from spiral.core.errors import MalformedIDError
from spiral.core.ids import parse_id
from spiral.core.roadmap.models import CycleStatus, Milestone, Roadmap, Task, TaskStatus

ItemT = TypeVar("ItemT", Milestone, Task)


class SortOrder(str, Enum):
    """How IDs are ordered in listings."""

    TEXT = "text"
    NATURAL = "natural"


class MilestoneFilter(BaseModel):
    """Milestone filter; unset fields match everything."""

    id: str | None = None
    family: str | None = None
    priority: str | None = None
    status: str | None = None
    cycle_status: str | None = None

    def matches(self, milestone: Milestone) -> bool:
        for name in ("id", "family", "priority", "status", "cycle_status"):
            wanted = getattr(self, name)
            if wanted and getattr(milestone, name) != wanted:
                return False
        return True


class TaskFilter(BaseModel):
    """Task filter; unset fields match everything."""

    id: str | None = None
    family: str | None = None
    parent_id: str | None = None
    priority: str | None = None
    status: str | None = None

    def matches(self, task: Task) -> bool:
        if self.family and not task.id.startswith(self.family):
            return False
        for name in ("id", "parent_id", "priority", "status"):
            wanted = getattr(self, name)
            if wanted and getattr(task, name) != wanted:
                return False
        return True


def filter_milestones(roadmap: Roadmap, criteria: MilestoneFilter | None = None) -> list[Milestone]:
    criteria = criteria or MilestoneFilter()
    return [m for m in roadmap.milestones if criteria.matches(m)]


def filter_tasks(roadmap: Roadmap, criteria: TaskFilter | None = None) -> list[Task]:
    criteria = criteria or TaskFilter()
    return [t for t in roadmap.tasks if criteria.matches(t)]


def _natural_key(item_id: str) -> tuple[int, str, tuple[int, ...], str]:
    try:
        parsed = parse_id(item_id)
    except MalformedIDError:
        return (1, "", (), item_id)
    numbers = tuple(n for n in (parsed.milestone, parsed.task, parsed.subtask) if n is not None)
    return (0, parsed.family, numbers, item_id)


def sort_by_id(items: Iterable[ItemT], order: SortOrder = SortOrder.TEXT) -> list[ItemT]:
    """
    Return items sorted by ID.

    Args:
        items: Milestones or tasks
        order: TEXT compares ID strings; NATURAL compares family then
            numbers, with unparseable IDs last

    Example:
        >>> [m.id for m in sort_by_id(milestones)]
        ['D1', 'D10', 'D2']
        >>> [m.id for m in sort_by_id(milestones, SortOrder.NATURAL)]
        ['D1', 'D2', 'D10']
    """
    if order == SortOrder.NATURAL:
        return sorted(items, key=lambda item: _natural_key(item.id))
    return sorted(items, key=lambda item: item.id)


def children_of(
    roadmap: Roadmap, parent_id: str, order: SortOrder | None = None
) -> list[Task]:
    """Direct children of parent_id. order=None keeps document order."""
    children = roadmap.tasks_by_parent(parent_id)
    if order is None:
        return children
    return sort_by_id(children, order)


def milestone_of(roadmap: Roadmap, task_id: str) -> Milestone | None:
    """
    Find the milestone a task ultimately belongs to.

    Follows parent_id links until a milestone is reached. Returns None for
    a dangling link or a parent cycle.
    """
    seen: set[str] = set()
    current = task_id
    while current not in seen:
        seen.add(current)
        milestone = roadmap.get_milestone(current)
        if milestone is not None:
            return milestone
        task = roadmap.get_task(current)
        if task is None:
            return None
        current = task.parent_id
    return None


def in_cycle_milestones(roadmap: Roadmap) -> list[Milestone]:
    return [m for m in roadmap.milestones if m.cycle_status == CycleStatus.IN_CYCLE.value]


def in_cycle_tasks(roadmap: Roadmap) -> list[Task]:
    """
    Tasks and subtasks whose owning milestone is in-cycle.

    Example:
        With D1 in-cycle (task D1.1) and D2 unset (task D2.1), the result
        is [D1.1].
    """
    in_cycle = {m.id for m in in_cycle_milestones(roadmap)}
    result = []
    for task in roadmap.tasks:
        milestone = milestone_of(roadmap, task.id)
        if milestone is not None and milestone.id in in_cycle:
            result.append(task)
    return result


@dataclass
class TaskNode:
    task: Task
    children: list[TaskNode] = field(default_factory=list)


@dataclass
class MilestoneNode:
    milestone: Milestone
    tasks: list[TaskNode] = field(default_factory=list)


@dataclass
class RoadmapTree:
    """Hierarchical view of a roadmap, plus tasks no milestone reaches."""

    milestones: list[MilestoneNode] = field(default_factory=list)
    orphans: list[Task] = field(default_factory=list)


def build_tree(roadmap: Roadmap, order: SortOrder = SortOrder.TEXT) -> RoadmapTree:
    """Build the milestone → task → subtask hierarchy for display."""
    placed: set[str] = set()

    def task_nodes(parent_id: str) -> list[TaskNode]:
        nodes = []
        for task in children_of(roadmap, parent_id, order):
            if task.id in placed:
                continue
            placed.add(task.id)
            nodes.append(TaskNode(task=task, children=task_nodes(task.id)))
        return nodes

    tree = RoadmapTree()
    for milestone in sort_by_id(roadmap.milestones, order):
        tree.milestones.append(MilestoneNode(milestone=milestone, tasks=task_nodes(milestone.id)))

    tree.orphans = sort_by_id((t for t in roadmap.tasks if t.id not in placed), order)
    return tree


class RoadmapStats(BaseModel):
    """Summary counts for a roadmap."""

    total_milestones: int = 0
    total_tasks: int = 0
    milestones_by_status: dict[str, int] = Field(default_factory=dict)
    tasks_by_status: dict[str, int] = Field(default_factory=dict)
    in_cycle_tasks: int = 0


def roadmap_stats(roadmap: Roadmap) -> RoadmapStats:
    """
    Count milestones and tasks.

    Milestones are grouped by cycle_status and tasks by status; an unset
    value is counted as planned.
    """
    milestones_by_status: dict[str, int] = {}
    for milestone in roadmap.milestones:
        key = milestone.cycle_status or CycleStatus.PLANNED.value
        milestones_by_status[key] = milestones_by_status.get(key, 0) + 1

    tasks_by_status: dict[str, int] = {}
    for task in roadmap.tasks:
        key = task.status or TaskStatus.PLANNED.value
        tasks_by_status[key] = tasks_by_status.get(key, 0) + 1

    return RoadmapStats(
        total_milestones=len(roadmap.milestones),
        total_tasks=len(roadmap.tasks),
        milestones_by_status=milestones_by_status,
        tasks_by_status=tasks_by_status,
        in_cycle_tasks=len(in_cycle_tasks(roadmap)),
    )


@dataclass
class ResolvedContext:
    """A context resolved against a roadmap."""

    context: WorkContext
    milestone: Milestone | None = None
    task: Task | None = None

    @property
    def stale(self) -> bool:
        """True when the context points at an item the roadmap lacks."""
        if self.context.milestone_id and self.milestone is None:
            return True
        return bool(self.context.task_id) and self.task is None

    @property
    def is_set(self) -> bool:
        return bool(self.context.milestone_id or self.context.task_id)


def resolve_context(roadmap: Roadmap, context: WorkContext) -> ResolvedContext:
    """Look up the context's milestone and task in the roadmap."""
    resolved = ResolvedContext(context=context)
    if context.milestone_id:
        resolved.milestone = roadmap.get_milestone(context.milestone_id)
    if context.task_id:
        resolved.task = roadmap.get_task(context.task_id)
    return resolved

