"""
spiral context - show, set or clear the current working context.

The context names the milestone (and optionally task) you are working on.
``spiral commit`` records work under it.
"""

import typer
from rich.console import Console
from rich.markup import escape

from spiral.cli.common import get_workspace, styled, task_icon
from spiral.cli.errors import exit_with_error
from spiral.core.context import WorkContext
from spiral.core.errors import InvalidParentError, NotFoundError, SpiralError
from spiral.core.query import children_of, milestone_of, resolve_context

console = Console()
app = typer.Typer(help="Show or set the current working context")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Show or set the current working context.

    Without a subcommand, shows the current context.
    """
    if ctx.invoked_subcommand is None:
        show(ctx)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the current working context and its tasks."""
    workspace = get_workspace(ctx)

    try:
        context = workspace.context.load()
        if not (context.milestone_id or context.task_id):
            roadmap = None
        else:
            roadmap = workspace.roadmap.load()
    except SpiralError as e:
        exit_with_error(e)

    console.print("[bold]🎯 Current Working Context:[/bold]")
    console.print("===========================")

    if roadmap is None:
        console.print("No context set")
        console.print()
        console.print("Set context with:")
        console.print("  spiral context set D3")
        console.print("  spiral add milestone --id D3 --title 'My Milestone' --cycle-status in-cycle")
        return

    resolved = resolve_context(roadmap, context)
    if resolved.stale:
        missing = (
            context.milestone_id if resolved.milestone is None else context.task_id
        )
        console.print(f"[yellow]⚠️  Context points to non-existent item: {escape(missing or '')}[/yellow]")
        console.print("   Clear context with: spiral context clear")
        return

    milestone = resolved.milestone
    if milestone is None:
        return

    console.print(f"Milestone: [cyan]{escape(milestone.id)}[/cyan] - {escape(milestone.title)}")
    if milestone.cycle_status:
        console.print(f"Cycle Status: {styled(milestone.cycle_status)}")
    if milestone.family:
        console.print(f"Family: [magenta]{escape(milestone.family)}[/magenta]")
    if milestone.priority:
        console.print(f"Priority: {styled(milestone.priority)}")
    if resolved.task is not None:
        console.print(
            f"Task: [yellow]{escape(resolved.task.id)}[/yellow] - {escape(resolved.task.title)}"
        )

    tasks = children_of(roadmap, milestone.id, workspace.config.sort_order)
    if tasks:
        console.print("\n📝 Active tasks:")
        for task in tasks:
            console.print(
                f"   {task_icon(task.status)} [yellow]{escape(task.id)}[/yellow] - "
                f"{escape(task.title)} \\[{styled(task.status)}]"
            )
    else:
        console.print("\n💡 No tasks yet. Add one with:")
        console.print(f"   spiral add task --parent {milestone.id} --title 'My Task'")

    console.print("\n⚡ Quick actions:")
    console.print(f"   spiral add task --parent {milestone.id} --title 'New Task'")
    console.print("   spiral commit 'Work description'")
    console.print("   spiral show cycle")


@app.command("set")
def set_context(
    ctx: typer.Context,
    milestone_id: str = typer.Argument(..., help="Milestone ID to work on (e.g., D3)"),
    task_id: str | None = typer.Option(
        None,
        "--task",
        help="Task or subtask under the milestone to focus on",
    ),
) -> None:
    """
    Set the working context to a milestone.

    Examples:
        spiral context set D3
        spiral context set D3 --task D3.2
    """
    workspace = get_workspace(ctx)

    try:
        roadmap = workspace.roadmap.load()
        milestone = roadmap.get_milestone(milestone_id)
        if milestone is None:
            raise NotFoundError(milestone_id, "milestone")

        if task_id is not None:
            if roadmap.get_task(task_id) is None:
                raise NotFoundError(task_id, "task")
            owner = milestone_of(roadmap, task_id)
            if owner is None or owner.id != milestone_id:
                raise InvalidParentError(f"Task {task_id} is not under milestone {milestone_id}")

        workspace.context.save(
            WorkContext(milestone_id=milestone.id, task_id=task_id, family=milestone.family)
        )
    except SpiralError as e:
        exit_with_error(e)

    console.print(
        f"🎯 Set working context to: [cyan]{escape(milestone.id)}[/cyan] - {escape(milestone.title)}"
    )
    if milestone.family:
        console.print(f"   Family: [magenta]{escape(milestone.family)}[/magenta]")
    if task_id:
        console.print(f"   Task: [yellow]{escape(task_id)}[/yellow]")


@app.command()
def clear(ctx: typer.Context) -> None:
    """Clear the working context."""
    workspace = get_workspace(ctx)
    try:
        removed = workspace.context.clear()
    except SpiralError as e:
        exit_with_error(e)

    if removed:
        console.print("🗑️  Context cleared")
    else:
        console.print("[dim]No context was set[/dim]")
