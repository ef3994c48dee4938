"""
spiral update - change fields of existing milestones and tasks.

Fields can be given as typed options or as repeated ``--set key=value``
pairs; both end up in the same update request. An empty value clears an
optional field.
"""

import typer
from rich.console import Console
from rich.markup import escape

from spiral.cli.common import get_workspace
from spiral.cli.errors import ExitCode, exit_with_error, print_error
from spiral.core.errors import SpiralError
from spiral.core.roadmap import MilestoneUpdate, TaskUpdate, update_milestone, update_task

console = Console()
app = typer.Typer(help="Update milestones or tasks")


def parse_assignments(assignments: list[str] | None) -> dict[str, str]:
    """
    Parse ``key=value`` strings into a dict.

    Dashes in keys are accepted as underscores (cycle-status → cycle_status).

    Raises:
        typer.BadParameter: If an entry has no '='
    """
    fields: dict[str, str] = {}
    for item in assignments or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected key=value, got '{item}'", param_hint="--set")
        fields[key.strip().replace("-", "_")] = value
    return fields


def _collect(options: dict[str, str | None], assignments: list[str] | None) -> dict[str, str]:
    fields = {name: value for name, value in options.items() if value is not None}
    fields.update(parse_assignments(assignments))
    return fields


def _print_changes(item_id: str, changes: dict[str, str | None]) -> None:
    console.print(f"[green]✅ Updated[/green] [cyan]{item_id}[/cyan]")
    for name, value in changes.items():
        shown = escape(value) if value else "[dim](cleared)[/dim]"
        console.print(f"   {name}: {shown}")


@app.command()
def milestone(
    ctx: typer.Context,
    milestone_id: str = typer.Argument(..., help="Milestone ID (e.g., D3)"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    priority: str | None = typer.Option(
        None, "--priority", "-p", help="low, medium, high, critical"
    ),
    cycle_status: str | None = typer.Option(
        None, "--cycle-status", help="planned, in-cycle"
    ),
    status: str | None = typer.Option(None, "--status", "-s", help="Free-form status"),
    notes: str | None = typer.Option(None, "--notes", help="Notes"),
    assignments: list[str] | None = typer.Option(
        None,
        "--set",
        help="Field assignment key=value (can be repeated)",
    ),
) -> None:
    """
    Update a milestone.

    Examples:
        spiral update milestone D3 --cycle-status in-cycle
        spiral update milestone D3 --set priority=high --set notes=
    """
    workspace = get_workspace(ctx)
    fields = _collect(
        {
            "title": title,
            "priority": priority,
            "cycle_status": cycle_status,
            "status": status,
            "notes": notes,
        },
        assignments,
    )
    if not fields:
        print_error("Nothing to update", solution=f"spiral update milestone {milestone_id} --help")
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        request = MilestoneUpdate.from_fields(fields)
        roadmap = workspace.roadmap.load()
        update_milestone(roadmap, milestone_id, request)
        workspace.roadmap.save(roadmap)
    except SpiralError as e:
        exit_with_error(e)

    _print_changes(milestone_id, request.changes())


@app.command()
def task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task or subtask ID (e.g., D3.1)"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    status: str | None = typer.Option(
        None, "--status", "-s", help="planned, in-progress, done, blocked"
    ),
    priority: str | None = typer.Option(
        None, "--priority", "-p", help="low, medium, high, critical"
    ),
    notes: str | None = typer.Option(None, "--notes", help="Notes"),
    assignments: list[str] | None = typer.Option(
        None,
        "--set",
        help="Field assignment key=value (can be repeated)",
    ),
) -> None:
    """
    Update a task or subtask.

    Examples:
        spiral update task D3.1 --status done
        spiral update task D3.1.2 --set title="Handle merge conflicts"
    """
    workspace = get_workspace(ctx)
    fields = _collect(
        {"title": title, "status": status, "priority": priority, "notes": notes},
        assignments,
    )
    if not fields:
        print_error("Nothing to update", solution=f"spiral update task {task_id} --help")
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        request = TaskUpdate.from_fields(fields)
        roadmap = workspace.roadmap.load()
        update_task(roadmap, task_id, request)
        workspace.roadmap.save(roadmap)
    except SpiralError as e:
        exit_with_error(e)

    _print_changes(task_id, request.changes())
