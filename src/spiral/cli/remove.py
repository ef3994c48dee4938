"""
spiral remove - delete a milestone or task from the roadmap.
"""

import typer
from rich.console import Console

from spiral.cli.common import get_workspace
from spiral.cli.errors import exit_with_error
from spiral.core.errors import SpiralError
from spiral.core.roadmap import remove_item

console = Console()


def remove(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., help="Milestone or task ID to remove"),
    cascade: bool = typer.Option(
        False,
        "--cascade",
        "-r",
        help="Also remove every task and subtask below the item",
    ),
) -> None:
    """
    Remove a milestone, task or subtask.

    Items with children are only removed with --cascade. The working
    context is left as it is; if it pointed at a removed item, a warning is
    printed.

    Examples:
        spiral remove D3.1.2
        spiral remove D3 --cascade
    """
    workspace = get_workspace(ctx)

    try:
        roadmap = workspace.roadmap.load()
        removed = remove_item(roadmap, item_id, cascade=cascade)
        workspace.roadmap.save(roadmap)
        console.print(f"[green]✅ Removed[/green] {', '.join(removed)}")

        context = workspace.context.load()
    except SpiralError as e:
        exit_with_error(e)

    stale = [i for i in (context.milestone_id, context.task_id) if i and i in removed]
    if stale:
        console.print(
            f"[yellow]Warning:[/yellow] working context points at removed item {stale[0]}"
        )
        console.print("[dim]→ Try: spiral context set <milestone-id>[/dim]")
