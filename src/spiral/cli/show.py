"""
spiral show - display milestones, tasks, the current cycle and stats.

``spiral show`` on its own prints the full hierarchy. Listings sort by ID
as text unless --sort natural (or the sort_order setting) asks for numeric
order.
"""

import json
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spiral.cli.common import get_workspace, styled, task_icon
from spiral.cli.errors import ExitCode, exit_with_error, print_invalid_option_error
from spiral.core.errors import SpiralError
from spiral.core.query import (
    MilestoneFilter,
    MilestoneNode,
    SortOrder,
    TaskFilter,
    TaskNode,
    build_tree,
    children_of,
    filter_milestones,
    filter_tasks,
    in_cycle_milestones,
    in_cycle_tasks,
    roadmap_stats,
    sort_by_id,
)
from spiral.core.roadmap import Milestone, Roadmap, Task

console = Console()
app = typer.Typer(help="Display milestones, tasks, or cycle information")


def _sort_order(ctx: typer.Context, value: str | None) -> SortOrder:
    if value is None:
        return get_workspace(ctx).config.sort_order
    try:
        return SortOrder(value.lower())
    except ValueError:
        print_invalid_option_error(value, [o.value for o in SortOrder])
        raise typer.Exit(ExitCode.USER_ERROR)


def _load(ctx: typer.Context) -> Roadmap:
    try:
        return get_workspace(ctx).roadmap.load()
    except SpiralError as e:
        exit_with_error(e)


def _print_json(data: Any) -> None:
    console.print(
        json.dumps(data, indent=2, ensure_ascii=False),
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def _dump(item: Milestone | Task) -> dict[str, Any]:
    return item.model_dump(exclude_none=True)


def _task_json(node: TaskNode) -> dict[str, Any]:
    data = _dump(node.task)
    if node.children:
        data["subtasks"] = [_task_json(child) for child in node.children]
    return data


def _milestone_json(node: MilestoneNode) -> dict[str, Any]:
    data = _dump(node.milestone)
    data["tasks"] = [_task_json(child) for child in node.tasks]
    return data


def _milestone_line(milestone: Milestone) -> str:
    if milestone.in_cycle:
        icon = "🔄"
    elif milestone.status == "done":
        icon = "✅"
    else:
        icon = "📋"

    parts = [f"[cyan]{escape(milestone.id)}[/cyan]"]
    if milestone.family:
        parts.append(f"[magenta]\\[{escape(milestone.family)}][/magenta]")
    parts.append(escape(milestone.title))
    if milestone.priority:
        parts.append(styled(milestone.priority))
    if milestone.cycle_status:
        parts.append(styled(milestone.cycle_status))
    return f"{icon} {' '.join(parts)}"


def _task_line(task: Task) -> str:
    return (
        f"{task_icon(task.status)} [yellow]{escape(task.id)}[/yellow] - "
        f"{escape(task.title)} \\[{styled(task.status)}]"
    )


def _print_task_nodes(nodes: list[TaskNode], indent: str = "   ") -> None:
    for node in nodes:
        console.print(f"{indent}└─ {_task_line(node.task)}")
        _print_task_nodes(node.children, indent + "   ")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Display milestones, tasks, or cycle information.

    Without a subcommand, shows the complete roadmap hierarchy.
    """
    if ctx.invoked_subcommand is None:
        show_all(ctx, sort=None, json_output=False)


@app.command("all")
def show_all(
    ctx: typer.Context,
    sort: str | None = typer.Option(None, "--sort", help="ID order: text or natural"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show the complete roadmap as a milestone → task → subtask tree.

    Examples:
        spiral show all
        spiral show all --sort natural
        spiral show all --json
    """
    order = _sort_order(ctx, sort)
    roadmap = _load(ctx)
    tree = build_tree(roadmap, order)

    if json_output:
        _print_json(
            {
                "milestones": [_milestone_json(node) for node in tree.milestones],
                "orphans": [_dump(task) for task in tree.orphans],
            }
        )
        return

    console.print("[bold]🎯 Spiral Roadmap - Hierarchical View[/bold]")
    console.print("=====================================")

    if not tree.milestones and not tree.orphans:
        console.print("No milestones found. Create one with:")
        console.print("  spiral add milestone --title 'My Milestone' --family D")
        return

    for node in tree.milestones:
        console.print(_milestone_line(node.milestone))
        _print_task_nodes(node.tasks)
        console.print()

    if tree.orphans:
        console.print("[yellow]Tasks without a reachable milestone:[/yellow]")
        for task in tree.orphans:
            console.print(f"   {_task_line(task)} (parent: {escape(task.parent_id)})")


@app.command()
def milestones(
    ctx: typer.Context,
    item_id: str | None = typer.Option(None, "--id", help="Filter by ID"),
    family: str | None = typer.Option(None, "--family", help="Filter by family"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="Filter by priority"),
    status: str | None = typer.Option(None, "--status", "-s", help="Filter by status"),
    cycle_status: str | None = typer.Option(
        None, "--cycle-status", help="Filter by cycle status"
    ),
    sort: str | None = typer.Option(None, "--sort", help="ID order: text or natural"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    List milestones.

    Examples:
        spiral show milestones
        spiral show milestones --family D --cycle-status in-cycle
    """
    order = _sort_order(ctx, sort)
    roadmap = _load(ctx)
    criteria = MilestoneFilter(
        id=item_id,
        family=family,
        priority=priority,
        status=status,
        cycle_status=cycle_status,
    )
    found = sort_by_id(filter_milestones(roadmap, criteria), order)

    if json_output:
        _print_json([_dump(m) for m in found])
        return

    if not found:
        console.print("[yellow]No milestones found matching filters[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Family", justify="center")
    table.add_column("Title", overflow="fold")
    table.add_column("Priority")
    table.add_column("Cycle")
    table.add_column("Tasks", justify="right")

    for m in found:
        table.add_row(
            escape(m.id),
            escape(m.family),
            escape(m.title),
            styled(m.priority),
            styled(m.cycle_status),
            str(len(children_of(roadmap, m.id))),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(found)} milestones[/dim]")


@app.command()
def tasks(
    ctx: typer.Context,
    item_id: str | None = typer.Option(None, "--id", help="Filter by ID"),
    family: str | None = typer.Option(None, "--family", help="Filter by family"),
    parent: str | None = typer.Option(None, "--parent", help="Filter by parent ID"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="Filter by priority"),
    status: str | None = typer.Option(None, "--status", "-s", help="Filter by status"),
    sort: str | None = typer.Option(None, "--sort", help="ID order: text or natural"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    List tasks and subtasks.

    Examples:
        spiral show tasks --parent D3
        spiral show tasks --status in-progress
    """
    order = _sort_order(ctx, sort)
    roadmap = _load(ctx)
    criteria = TaskFilter(
        id=item_id,
        family=family,
        parent_id=parent,
        priority=priority,
        status=status,
    )
    found = sort_by_id(filter_tasks(roadmap, criteria), order)

    if json_output:
        _print_json([_dump(t) for t in found])
        return

    if not found:
        console.print("[yellow]No tasks found matching filters[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="yellow", no_wrap=True)
    table.add_column("Parent", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Title", overflow="fold")

    for t in found:
        table.add_row(escape(t.id), escape(t.parent_id), styled(t.status), escape(t.title))

    console.print(table)
    console.print(f"\n[dim]Total: {len(found)} tasks[/dim]")


@app.command()
def cycle(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show milestones in the current cycle with their tasks.
    """
    roadmap = _load(ctx)
    order = get_workspace(ctx).config.sort_order
    active = in_cycle_milestones(roadmap)
    active_tasks = in_cycle_tasks(roadmap)

    if json_output:
        _print_json(
            {
                "milestones": [_dump(m) for m in active],
                "tasks": [_dump(t) for t in active_tasks],
            }
        )
        return

    console.print("[bold]🔄 Current Cycle Status:[/bold]")
    console.print("=======================")

    if not active:
        console.print("No milestones currently in cycle")
        return

    for milestone in active:
        console.print(
            f"\n📋 [cyan]{escape(milestone.id)}[/cyan] - {escape(milestone.title)} "
            f"\\[{styled(milestone.cycle_status)}]"
        )
        children = children_of(roadmap, milestone.id, order)
        if not children:
            console.print("   └─ [dim]No tasks yet[/dim]")
        for task in children:
            console.print(f"   └─ {_task_line(task)}")

    console.print(
        f"\n📊 Summary: {len(active)} milestones, {len(active_tasks)} tasks in cycle"
    )


@app.command()
def stats(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """
    Show roadmap statistics.
    """
    summary = roadmap_stats(_load(ctx))

    if json_output:
        _print_json(summary.model_dump())
        return

    table = Table(title="Roadmap Statistics", show_header=False, box=None)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="bold")

    table.add_row("Milestones", str(summary.total_milestones))
    for status, count in sorted(summary.milestones_by_status.items()):
        table.add_row(f"  {escape(status)}", str(count))
    table.add_row("Tasks", str(summary.total_tasks))
    for status, count in sorted(summary.tasks_by_status.items()):
        table.add_row(f"  {escape(status)}", str(count))
    table.add_row("In-cycle tasks", str(summary.in_cycle_tasks))

    console.print(table)
