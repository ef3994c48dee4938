"""
spiral commit - record finished work in the roadmap and tag the commit.

Adds a done task for the message under the target milestone and prints
the tagged commit message. With --git it also stages everything and
creates the git commit. A failed git commit rolls the roadmap and context
back to their previous state.
"""

import typer
from rich.console import Console
from rich.markup import escape

from spiral.cli.common import Workspace, get_workspace
from spiral.cli.errors import exit_with_error
from spiral.core.commits import plan_commit
from spiral.core.errors import SpiralError
from spiral.utils.git import GitError, commit_all, is_git_repo

console = Console()


def commit(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Commit message (also the task title)"),
    milestone_id: str | None = typer.Option(
        None,
        "--milestone",
        help="Record under this milestone and make it the working context",
    ),
    auto: bool = typer.Option(
        False,
        "--auto",
        "-a",
        help="Create a milestone from the message when no context is set",
    ),
    git: bool = typer.Option(
        False,
        "--git",
        "-g",
        help="Run 'git add .' and 'git commit' with the tagged message",
    ),
) -> None:
    """
    Record work as a done task and produce a tagged commit message.

    The task goes under --milestone if given, else under the working
    context milestone. With no usable context, --auto creates a new
    in-cycle milestone (family from commit_family, default S) titled from
    the message.

    Examples:
        spiral commit "Add retry queue"
        spiral commit "Add retry queue" --git
        spiral commit "Search - index titles" --auto --git
        spiral commit "Fix pagination" --milestone D4
    """
    workspace = get_workspace(ctx)

    try:
        if git and not is_git_repo(workspace.project_dir):
            raise GitError("not in a git repository")

        roadmap = workspace.roadmap.load()
        context = workspace.context.load()
        snapshot = _snapshot(workspace)
        plan = plan_commit(
            roadmap,
            context,
            message,
            milestone_id=milestone_id,
            auto=auto,
            commit_family=workspace.config.commit_family,
        )
        workspace.roadmap.save(roadmap)
        if plan.new_context is not None:
            workspace.context.save(plan.new_context)

        if git:
            try:
                commit_all(plan.commit_message, cwd=workspace.project_dir)
            except GitError as e:
                _restore(workspace, snapshot)
                raise GitError(f"{e} (roadmap and context changes were rolled back)") from e

        if plan.stale_context_id:
            console.print(
                f"[yellow]⚠️  Context milestone {escape(plan.stale_context_id)} not found[/yellow]"
            )
        if plan.created_milestone:
            console.print(
                f"[green]✅ Created milestone:[/green] [cyan]{escape(plan.milestone.id)}[/cyan]"
                f" - {escape(plan.milestone.title)}"
            )
        console.print(
            f"[green]✅ Added task:[/green] [yellow]{escape(plan.task.id)}[/yellow]"
            f" under [cyan]{escape(plan.milestone.id)}[/cyan]"
        )
        if plan.new_context is not None:
            console.print(f"🎯 Set working context to: [cyan]{escape(plan.milestone.id)}[/cyan]")

        if git:
            console.print(f"[green]✅ Created commit:[/green] {escape(plan.commit_message)}")
        else:
            console.print(f"Commit message: {escape(plan.commit_message)}")
    except SpiralError as e:
        exit_with_error(e)


def _snapshot(workspace: Workspace) -> tuple[str | None, str | None]:
    """Raw roadmap and context text, as stored before the commit."""
    return (
        workspace.roadmap.storage.read_text(workspace.roadmap.path),
        workspace.context.storage.read_text(workspace.context.file_path),
    )


def _restore(workspace: Workspace, snapshot: tuple[str | None, str | None]) -> None:
    roadmap_text, context_text = snapshot
    if roadmap_text is not None:
        workspace.roadmap.storage.write_text(workspace.roadmap.path, roadmap_text)
    if context_text is None:
        workspace.context.clear()
    else:
        workspace.context.storage.write_text(workspace.context.file_path, context_text)
