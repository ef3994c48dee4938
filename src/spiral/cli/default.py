"""
spiral CLI - Default command handler.

Implements the bare `spiral` command: a welcome panel naming the active
roadmap and context, quick actions, and the YAML files in the project.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from spiral.cli.common import Workspace
from spiral.core.errors import SpiralError
from spiral.core.query import resolve_context, roadmap_stats
from spiral.core.roadmap import list_yaml_files

console = Console()


def _context_line(workspace: Workspace) -> str:
    try:
        context = workspace.context.load()
    except SpiralError as e:
        return f"[red]unreadable[/red] [dim]({escape(str(e))})[/dim]"

    if not context.milestone_id:
        return "[dim]none[/dim]"

    line = f"[cyan]{escape(context.milestone_id)}[/cyan]"
    if context.task_id:
        line += f" / [yellow]{escape(context.task_id)}[/yellow]"
    return line


def _stats_line(workspace: Workspace) -> str:
    if not workspace.roadmap.exists():
        return "[dim]not created yet[/dim]"
    try:
        roadmap = workspace.roadmap.load()
    except SpiralError as e:
        return f"[red]unreadable[/red] [dim]({escape(str(e))})[/dim]"

    stats = roadmap_stats(roadmap)
    line = (
        f"[bold]{stats.total_milestones}[/bold] milestones, "
        f"[bold]{stats.total_tasks}[/bold] tasks, "
        f"[green]{stats.in_cycle_tasks}[/green] in cycle"
    )
    try:
        context = workspace.context.load()
    except SpiralError:
        return line
    if resolve_context(roadmap, context).stale:
        line += "\n   [yellow]Working context points at a missing item[/yellow]"
    return line


def default_command(workspace: Workspace) -> None:
    """Render the welcome panel for bare `spiral`."""
    try:
        roadmap_path = workspace.roadmap.path.relative_to(workspace.project_dir)
    except ValueError:
        roadmap_path = workspace.roadmap.path

    body = (
        f"[bold cyan]spiral[/bold cyan] [dim]roadmap tracker[/dim]\n\n"
        f"📋 Active roadmap: [bold]{escape(str(roadmap_path))}[/bold]\n"
        f"   {_stats_line(workspace)}\n"
        f"🎯 Context: {_context_line(workspace)}"
    )
    console.print(Panel(body, border_style="cyan", title="[bold]Welcome to Spiral[/bold]"))

    console.print()
    console.print("[bold]Quick actions:[/bold]")
    console.print("  spiral show all                          # View roadmap")
    console.print("  spiral add milestone --title 'My Feature' --family D")
    console.print("  spiral context set D1                    # Set working context")
    console.print("  spiral commit 'Work description' --git   # Record and commit")

    console.print()
    console.print("[bold]📁 YAML files:[/bold]")
    files = list_yaml_files(workspace.project_dir)
    if not files:
        console.print("  [dim]No YAML files found in current directory[/dim]")
    for path in files:
        console.print(f"  {escape(path.name)}")
