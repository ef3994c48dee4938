"""
ID generator for new roadmap items.

This module computes the next unused ID at each hierarchy level from a
snapshot of the roadmap. Numbering is always the maximum existing number
among matching siblings plus one, so gaps left by deleted items are never
reused. Scope is per (family, parent); there is no global counter.

Generator methods:
    - next_milestone_id: Next milestone in a family (D5 → D6)
    - next_task_id: Next task under a milestone (D3 → D3.4)
    - next_subtask_id: Next subtask under a task (D3.1 → D3.1.2)
    - suggest_id: Pick the right level from an optional parent
    - validate_unique: Reject an ID that already exists

Existing IDs that fail to parse are skipped while scanning siblings.

Example:
    >>> generator = IdGenerator(roadmap)
    >>> str(generator.next_milestone_id("D"))
    'D6'
    >>> str(generator.next_task_id("D3"))
    'D3.3'
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from spiral.core.errors import DuplicateIDError, InvalidParentError, MalformedIDError
from spiral.core.ids.models import IdLevel, RoadmapId
from spiral.core.ids.parser import check_family, parse_id

if TYPE_CHECKING:
    from spiral.core.context.models import WorkContext
    from spiral.core.roadmap.models import Roadmap

logger = logging.getLogger(__name__)

DEFAULT_FAMILY = "D"


def _try_parse(id_str: str) -> RoadmapId | None:
    try:
        return parse_id(id_str)
    except MalformedIDError as e:
        logger.debug("Skipping malformed ID while scanning siblings: %s", e)
        return None


class IdGenerator:
    """
    Computes next IDs against a roadmap snapshot.

    The generator holds a reference to the roadmap, so IDs added to the
    roadmap after construction are taken into account.
    """

    def __init__(self, roadmap: Roadmap) -> None:
        self.roadmap = roadmap

    def next_milestone_id(self, family: str) -> RoadmapId:
        """
        Generate the next milestone ID for a family.

        Args:
            family: Family letter (e.g., "D")

        Returns:
            family + (max existing milestone number + 1), or family1 when the
            family has no milestones yet

        Raises:
            MalformedIDError: If family is not a single letter
        """
        check_family(family)

        max_milestone = 0
        for milestone in self.roadmap.milestones:
            if milestone.family != family:
                continue
            parsed = _try_parse(milestone.id)
            if parsed is not None and parsed.family == family:
                max_milestone = max(max_milestone, parsed.milestone)

        return RoadmapId(family=family, milestone=max_milestone + 1)

    def next_task_id(self, milestone_id: str) -> RoadmapId:
        """
        Generate the next task ID under a milestone.

        Args:
            milestone_id: Parent milestone ID (must be level 0)

        Raises:
            InvalidParentError: If milestone_id does not parse or is not a
                milestone ID
        """
        parent = self._parse_parent(milestone_id, IdLevel.MILESTONE)

        max_task = 0
        for task in self.roadmap.tasks:
            if task.parent_id != milestone_id:
                continue
            parsed = _try_parse(task.id)
            if (
                parsed is not None
                and parsed.family == parent.family
                and parsed.milestone == parent.milestone
                and parsed.task is not None
            ):
                max_task = max(max_task, parsed.task)

        return parent.child(max_task + 1)

    def next_subtask_id(self, task_id: str) -> RoadmapId:
        """
        Generate the next subtask ID under a task.

        Args:
            task_id: Parent task ID (must be exactly level 1)

        Raises:
            InvalidParentError: If task_id does not parse or is not a task ID
        """
        parent = self._parse_parent(task_id, IdLevel.TASK)

        max_subtask = 0
        for task in self.roadmap.tasks:
            if task.parent_id != task_id:
                continue
            parsed = _try_parse(task.id)
            if (
                parsed is not None
                and parsed.family == parent.family
                and parsed.milestone == parent.milestone
                and parsed.task == parent.task
                and parsed.subtask is not None
            ):
                max_subtask = max(max_subtask, parsed.subtask)

        return parent.child(max_subtask + 1)

    def suggest_id(self, family: str, parent_id: str | None = None) -> RoadmapId:
        """
        Suggest an ID for a new item given an optional parent.

        No parent yields a milestone in family; a milestone parent yields a
        task; a task parent yields a subtask.

        Raises:
            InvalidParentError: If the parent does not parse or is a subtask
        """
        if not parent_id:
            return self.next_milestone_id(family)

        try:
            level = parse_id(parent_id).level
        except MalformedIDError as e:
            raise InvalidParentError(f"Invalid parent ID: {e}") from e

        if level == IdLevel.MILESTONE:
            return self.next_task_id(parent_id)
        if level == IdLevel.TASK:
            return self.next_subtask_id(parent_id)
        raise InvalidParentError(f"Cannot create child of subtask {parent_id}")

    def validate_unique(self, candidate: str) -> RoadmapId:
        """
        Check that candidate parses and is not already taken.

        Milestone IDs are checked against milestones; task and subtask IDs
        against the shared task list.

        Returns:
            The parsed candidate

        Raises:
            MalformedIDError: If candidate does not parse
            DuplicateIDError: If an item with that exact ID already exists
        """
        parsed = parse_id(candidate)
        if parsed.level == IdLevel.MILESTONE:
            if self.roadmap.get_milestone(candidate) is not None:
                raise DuplicateIDError(candidate, "milestone")
        elif self.roadmap.get_task(candidate) is not None:
            raise DuplicateIDError(candidate, "task")
        return parsed

    @staticmethod
    def family_from_context(context: WorkContext, default: str = DEFAULT_FAMILY) -> str:
        """
        Pick a family from the working context.

        Order: the cached family, then the family of the context milestone,
        then of the context task, then default.
        """
        if context.family:
            return context.family
        for id_str in (context.milestone_id, context.task_id):
            if id_str:
                parsed = _try_parse(id_str)
                if parsed is not None:
                    return parsed.family
        return default

    @staticmethod
    def _parse_parent(parent_id: str, expected: IdLevel) -> RoadmapId:
        try:
            parent = parse_id(parent_id)
        except MalformedIDError as e:
            raise InvalidParentError(f"Invalid {expected.name.lower()} ID: {e}") from e

        if parent.level != expected:
            raise InvalidParentError(
                f"Expected {expected.name.lower()} ID, got: {parent_id}"
            )
        return parent
