"""
spiral add - create milestones, tasks and subtasks.

IDs are generated when --id is omitted: the next milestone number in the
family, or the next task/subtask number under the parent.
"""

import typer
from rich.console import Console
from rich.markup import escape

from spiral.cli.common import Workspace, get_workspace, styled
from spiral.cli.errors import exit_with_error
from spiral.core.context import WorkContext
from spiral.core.errors import InvalidParentError, SpiralError
from spiral.core.ids import IdGenerator, IdLevel, extract_family, get_level
from spiral.core.roadmap import CycleStatus, create_milestone, create_task
from spiral.core.roadmap.models import Task

console = Console()
app = typer.Typer(help="Add milestones, tasks or subtasks")


@app.command()
def milestone(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", help="Milestone title"),
    milestone_id: str | None = typer.Option(
        None,
        "--id",
        help="Milestone ID (e.g., D3); generated when omitted",
    ),
    family: str | None = typer.Option(
        None,
        "--family",
        help="Product family letter (default from the working context, then config)",
    ),
    priority: str = typer.Option(
        "medium",
        "--priority",
        "-p",
        help="Priority: low, medium, high, critical",
    ),
    cycle_status: str = typer.Option(
        "planned",
        "--cycle-status",
        help="Cycle status: planned, in-cycle",
    ),
    notes: str | None = typer.Option(None, "--notes", help="Optional notes"),
) -> None:
    """
    Add a new milestone.

    Without --family or --id, the family comes from the working context,
    falling back to default_family. An in-cycle milestone becomes the
    working context.

    Examples:
        spiral add milestone --title "Offline sync"
        spiral add milestone --title "Billing" --family B --cycle-status in-cycle
        spiral add milestone --id D7 --title "Search"
    """
    workspace = get_workspace(ctx)

    try:
        if family is None and milestone_id:
            family = extract_family(milestone_id)
        elif family is None:
            family = IdGenerator.family_from_context(
                workspace.context.load(), workspace.config.default_family
            )

        roadmap = workspace.roadmap.load()
        created = create_milestone(
            roadmap,
            title,
            family,
            milestone_id=milestone_id,
            priority=priority or None,
            cycle_status=cycle_status or None,
            notes=notes,
        )
        workspace.roadmap.save(roadmap)

        console.print(
            f"[green]✅ Added milestone[/green] [cyan]{created.id}[/cyan]: {escape(created.title)}"
        )
        console.print(
            f"   Family: {escape(created.family)}, Priority: {styled(created.priority)}, "
            f"Cycle: {styled(created.cycle_status)}"
        )

        if created.cycle_status == CycleStatus.IN_CYCLE.value:
            workspace.context.save(
                WorkContext(milestone_id=created.id, family=created.family)
            )
            console.print(f"🎯 Set [cyan]{created.id}[/cyan] as current working context")
    except SpiralError as e:
        exit_with_error(e)


def _add_task(
    workspace: Workspace,
    parent: str,
    title: str,
    task_id: str | None,
    status: str,
    priority: str | None,
    notes: str | None,
    expected_parent_level: IdLevel,
) -> Task:
    if get_level(parent) != expected_parent_level:
        kind = "milestone" if expected_parent_level == IdLevel.MILESTONE else "task"
        raise InvalidParentError(f"Parent {parent} is not a {kind} ID")

    roadmap = workspace.roadmap.load()
    task = create_task(
        roadmap,
        title,
        parent,
        task_id=task_id,
        status=status,
        priority=priority or None,
        notes=notes,
    )
    workspace.roadmap.save(roadmap)
    return task


@app.command()
def task(
    ctx: typer.Context,
    parent: str = typer.Option(..., "--parent", help="Parent milestone ID (e.g., D3)"),
    title: str = typer.Option(..., "--title", "-t", help="Task title"),
    task_id: str | None = typer.Option(
        None,
        "--id",
        help="Task ID (e.g., D3.2); generated when omitted",
    ),
    status: str = typer.Option(
        "planned",
        "--status",
        "-s",
        help="Task status: planned, in-progress, done, blocked",
    ),
    priority: str | None = typer.Option(
        None,
        "--priority",
        "-p",
        help="Priority: low, medium, high, critical",
    ),
    notes: str | None = typer.Option(None, "--notes", help="Optional notes"),
) -> None:
    """
    Add a new task to a milestone.

    Examples:
        spiral add task --parent D3 --title "Write the sync queue"
        spiral add task --parent D3 --id D3.5 --title "Retry" --status in-progress
    """
    workspace = get_workspace(ctx)
    try:
        created = _add_task(
            workspace, parent, title, task_id, status, priority, notes, IdLevel.MILESTONE
        )
    except SpiralError as e:
        exit_with_error(e)

    console.print(
        f"[green]✅ Added task[/green] [yellow]{created.id}[/yellow]: {escape(created.title)}"
    )
    console.print(f"   Parent: {created.parent_id}, Status: {styled(created.status)}")


@app.command()
def subtask(
    ctx: typer.Context,
    parent: str = typer.Option(..., "--parent", help="Parent task ID (e.g., D3.1)"),
    title: str = typer.Option(..., "--title", "-t", help="Subtask title"),
    subtask_id: str | None = typer.Option(
        None,
        "--id",
        help="Subtask ID (e.g., D3.1.2); generated when omitted",
    ),
    status: str = typer.Option(
        "planned",
        "--status",
        "-s",
        help="Subtask status: planned, in-progress, done, blocked",
    ),
    priority: str | None = typer.Option(
        None,
        "--priority",
        "-p",
        help="Priority: low, medium, high, critical",
    ),
    notes: str | None = typer.Option(None, "--notes", help="Optional notes"),
) -> None:
    """
    Add a new subtask to a task.

    Examples:
        spiral add subtask --parent D3.1 --title "Handle conflicts"
    """
    workspace = get_workspace(ctx)
    try:
        created = _add_task(
            workspace, parent, title, subtask_id, status, priority, notes, IdLevel.TASK
        )
    except SpiralError as e:
        exit_with_error(e)

    console.print(
        f"[green]✅ Added subtask[/green] [yellow]{created.id}[/yellow]: {escape(created.title)}"
    )
    console.print(f"   Parent: {created.parent_id}, Status: {styled(created.status)}")
