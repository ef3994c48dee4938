"""
Standardized error handling and exit codes for the spiral CLI.

Core errors are mapped to an exit code and printed with a short hint on how
to fix them.
"""

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from spiral.core.errors import (
    ContextParseError,
    DuplicateIDError,
    InvalidParentError,
    MalformedIDError,
    MissingContextError,
    NotFoundError,
    RoadmapParseError,
    RoadmapValidationError,
    SpiralError,
    StorageError,
    UnknownFieldError,
)

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for spiral CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Filesystem or other environment failure."""

    USER_ERROR = 2
    """Bad input or bad roadmap data (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Milestone D9 not found",
        ...     solution="spiral show milestones",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def _solution_for(error: SpiralError) -> str | None:
    if isinstance(error, MalformedIDError):
        return "IDs look like D3, D3.1 or D3.1.2"
    if isinstance(error, NotFoundError):
        return "spiral show all"
    if isinstance(error, DuplicateIDError):
        return "omit --id to get the next free ID"
    if isinstance(error, InvalidParentError):
        return "spiral show all  # check the parent ID and its level"
    if isinstance(error, MissingContextError):
        return "spiral context set <milestone-id>  # or pass --auto"
    if isinstance(error, (RoadmapParseError, RoadmapValidationError)):
        return "fix the roadmap file by hand, then retry"
    if isinstance(error, ContextParseError):
        return "spiral context clear"
    return None


def exit_with_error(error: SpiralError) -> NoReturn:
    """
    Print a core error and exit with the matching exit code.

    StorageError exits with GENERAL_ERROR; everything else is a user or data
    problem and exits with USER_ERROR.
    """
    if isinstance(error, StorageError):
        print_error(str(error), reason="A file could not be read or written")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    reason = None
    if isinstance(error, UnknownFieldError):
        reason = f"Allowed fields: {', '.join(error.allowed)}"
    print_error(str(error), reason=reason, solution=_solution_for(error))
    raise typer.Exit(ExitCode.USER_ERROR)


def print_invalid_option_error(value: str, valid_options: list[str]) -> None:
    """Print error when an invalid option value is provided."""
    print_error(
        f"Invalid option: {value}",
        reason=f"Valid options are: {', '.join(valid_options)}",
    )
