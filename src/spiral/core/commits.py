"""
Commit message tagging and smart-commit planning.

A tagged commit message starts with the work item ID in square brackets:

    [D3.1] Add retry queue

Only a leading tag whose content parses as an ID counts. Everything else is
an untagged message.

plan_commit records a finished piece of work in the roadmap: it picks a
target milestone, appends a done task for the message and returns the
tagged commit message. It never runs git; the CLI does that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from spiral.core.context.models import WorkContext
from spiral.core.errors import MalformedIDError, MissingContextError, NotFoundError
from spiral.core.ids import parse_id
from spiral.core.roadmap.models import (
    CycleStatus,
    Milestone,
    Priority,
    Roadmap,
    Task,
    TaskStatus,
)
from spiral.core.roadmap.operations import create_milestone, create_task

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_FAMILY = "S"
MAX_TITLE_LENGTH = 50


def format_commit_tag(item_id: str) -> str:
    """Format an ID as a commit tag: D3.1 → [D3.1]."""
    return f"[{item_id}]"


def format_commit_message(item_id: str, message: str) -> str:
    """Prefix message with the tag for item_id."""
    return f"{format_commit_tag(item_id)} {message}"


@dataclass(frozen=True)
class ParsedCommit:
    """Result of parse_commit_message. item_id is None when untagged."""

    item_id: str | None
    message: str
    tagged: bool


def parse_commit_message(message: str) -> ParsedCommit:
    """
    Split a leading [ID] tag off a commit message.

    One space after the closing bracket is dropped. A bracketed prefix that
    is not a valid ID leaves the message untagged and unchanged.

    Example:
        >>> parse_commit_message("[D3.1] Add retry queue")
        ParsedCommit(item_id='D3.1', message='Add retry queue', tagged=True)
        >>> parse_commit_message("[WIP] tweak").tagged
        False
    """
    untagged = ParsedCommit(item_id=None, message=message, tagged=False)
    if len(message) < 3 or not message.startswith("["):
        return untagged

    close = message.find("]", 1)
    if close == -1:
        return untagged

    item_id = message[1:close]
    try:
        parse_id(item_id)
    except MalformedIDError:
        return untagged

    rest = message[close + 1 :]
    if rest.startswith(" "):
        rest = rest[1:]
    return ParsedCommit(item_id=item_id, message=rest, tagged=True)


def extract_milestone_title(message: str) -> str:
    """
    Derive a milestone title from a commit message.

    Takes the part before the first " - ", capitalizes the first letter and
    lower-cases the rest, then truncates to 50 characters with "...".
    """
    title = message.split(" - ", 1)[0]
    if title:
        title = title[:1].upper() + title[1:].lower()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[: MAX_TITLE_LENGTH - 3] + "..."
    return title


@dataclass
class CommitPlan:
    """
    What a smart commit changed in the roadmap.

    Attributes:
        milestone: Milestone the task was recorded under
        task: The new done task
        commit_message: Tagged message for git
        created_milestone: True when the milestone was created for this commit
        new_context: Context to persist, or None to leave it as it is
        stale_context_id: Context milestone that no longer exists, if any
    """

    milestone: Milestone
    task: Task
    commit_message: str
    created_milestone: bool = False
    new_context: WorkContext | None = None
    stale_context_id: str | None = None


def plan_commit(
    roadmap: Roadmap,
    context: WorkContext,
    message: str,
    *,
    milestone_id: str | None = None,
    auto: bool = False,
    commit_family: str = DEFAULT_COMMIT_FAMILY,
) -> CommitPlan:
    """
    Record a commit as a done task and build its tagged message.

    The target milestone is, in order: milestone_id when given (which also
    becomes the new context), the context milestone when it still exists,
    or, in auto mode, a new in-cycle milestone in commit_family titled from
    the message (which becomes the new context).

    Args:
        roadmap: Roadmap to modify in place
        context: Current working context
        message: Commit message, also used as the task title
        milestone_id: Explicit target milestone
        auto: Create a milestone when there is no usable context
        commit_family: Family for auto-created milestones

    Raises:
        NotFoundError: If milestone_id is not in the roadmap
        MissingContextError: If there is no target and auto is False
        RoadmapValidationError: If message is empty
    """
    stale_context_id = None
    new_context = None
    created = False

    if milestone_id:
        milestone = roadmap.get_milestone(milestone_id)
        if milestone is None:
            raise NotFoundError(milestone_id, "milestone")
        new_context = WorkContext(milestone_id=milestone.id, family=milestone.family)
    else:
        milestone = None
        if context.milestone_id:
            milestone = roadmap.get_milestone(context.milestone_id)
            if milestone is None:
                stale_context_id = context.milestone_id
                logger.debug("Context milestone %s not found", stale_context_id)

        if milestone is None:
            if not auto:
                raise MissingContextError(
                    "No working context set; pass a milestone or use auto mode"
                )
            milestone = create_milestone(
                roadmap,
                extract_milestone_title(message),
                commit_family,
                priority=Priority.MEDIUM.value,
                cycle_status=CycleStatus.IN_CYCLE.value,
                status=TaskStatus.IN_PROGRESS.value,
            )
            created = True
            new_context = WorkContext(milestone_id=milestone.id, family=commit_family)

    task = create_task(roadmap, message, milestone.id, status=TaskStatus.DONE.value)
    logger.debug("Planned commit task %s under %s", task.id, milestone.id)

    return CommitPlan(
        milestone=milestone,
        task=task,
        commit_message=format_commit_message(task.id, message),
        created_milestone=created,
        new_context=new_context,
        stale_context_id=stale_context_id,
    )
