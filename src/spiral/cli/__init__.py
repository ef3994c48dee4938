"""
spiral CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from spiral import __version__
from spiral.cli import add, commit, context, remove, show, update
from spiral.cli.argv import preprocess_argv
from spiral.cli.common import build_workspace, setup_logging
from spiral.cli.errors import ExitCode, print_error
from spiral.core.config import load_config, load_layered_env

# Help panel names for command grouping
PANEL_EDIT = "Edit the Roadmap"
PANEL_VIEW = "View the Roadmap"
PANEL_WORK = "Track Work"

app = typer.Typer(
    name="spiral",
    help="Git-friendly roadmap tracker: milestones, tasks and tagged commits",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    roadmap_file: Path | None = typer.Option(
        None,
        "--roadmap",
        "-f",
        help="Roadmap YAML file (default: first of spiral.yml, roadmap.yml, ...)",
    ),
) -> None:
    """
    spiral - keep your roadmap next to your code.

    Milestones (D3), tasks (D3.1) and subtasks (D3.1.2) live in a YAML file
    in the repository. Commits are tied to them with [ID] tags.

    Quick Start:
        spiral add milestone --title "Offline sync" --cycle-status in-cycle
        spiral add task --parent D1 --title "Write the sync queue"
        spiral commit "Add retry queue" --git
        spiral show all
    """
    setup_logging(debug)

    # Precedence: OS env > project .env > user .env
    project_dir = Path.cwd()
    load_layered_env(project_dir=project_dir)

    try:
        config = load_config(project_dir, use_cache=False)
    except ValidationError as e:
        print_error("Invalid spiral configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    # Tests may pass a storage backend through obj
    storage = (ctx.obj or {}).get("storage")
    workspace = build_workspace(
        project_dir, config, roadmap_override=roadmap_file, storage=storage
    )
    ctx.obj = {"debug": debug, "workspace": workspace}

    if ctx.invoked_subcommand is not None:
        return

    from spiral.cli.default import default_command

    default_command(workspace)


# =============================================================================
# Edit the Roadmap
# =============================================================================

app.add_typer(add.app, name="add", rich_help_panel=PANEL_EDIT)
app.add_typer(update.app, name="update", rich_help_panel=PANEL_EDIT)
app.command(name="remove", rich_help_panel=PANEL_EDIT)(remove.remove)


# =============================================================================
# View the Roadmap
# =============================================================================

app.add_typer(show.app, name="show", rich_help_panel=PANEL_VIEW)


# =============================================================================
# Track Work
# =============================================================================

app.add_typer(context.app, name="context", rich_help_panel=PANEL_WORK)
app.command(name="commit", rich_help_panel=PANEL_WORK)(commit.commit)


@app.command()
def version() -> None:
    """Show spiral version and exit."""
    console.print(f"spiral version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """
    Main CLI entry point.

    The argv preprocessor normalizes common patterns before Typer
    parses them (e.g. ``spiral --version``, ``spiral help add``,
    ``spiral show all --debug``).
    """
    sys.argv[1:] = preprocess_argv(sys.argv[1:])
    app()


__all__ = ["app", "cli_main"]
