"""
Shared CLI plumbing: logging setup, the per-invocation workspace and
small rendering helpers used by several commands.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.markup import escape

from spiral.core.config import SpiralConfig
from spiral.core.context import ContextStore
from spiral.core.roadmap import RoadmapStore, find_roadmap_file
from spiral.core.storage import Storage

STATUS_STYLES = {
    "planned": "blue",
    "in-cycle": "green",
    "in-progress": "yellow",
    "done": "green",
    "blocked": "red",
    "low": "dim",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}

TASK_ICONS = {
    "done": "✅",
    "in-progress": "🔄",
    "blocked": "🚫",
}


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for spiral commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@dataclass
class Workspace:
    """Stores and settings for one CLI invocation."""

    project_dir: Path
    config: SpiralConfig
    roadmap: RoadmapStore
    context: ContextStore


def resolve_roadmap_path(
    project_dir: Path, config: SpiralConfig, override: Path | None = None
) -> Path:
    """
    Pick the roadmap file: --roadmap, then config, then discovery.

    Relative paths are taken relative to project_dir.
    """
    if override is not None:
        chosen = override
    elif config.roadmap_file:
        chosen = Path(config.roadmap_file)
    else:
        return find_roadmap_file(project_dir, config.roadmap_candidates)
    return chosen if chosen.is_absolute() else project_dir / chosen


def build_workspace(
    project_dir: Path,
    config: SpiralConfig,
    *,
    roadmap_override: Path | None = None,
    storage: Storage | None = None,
) -> Workspace:
    return Workspace(
        project_dir=project_dir,
        config=config,
        roadmap=RoadmapStore(
            resolve_roadmap_path(project_dir, config, roadmap_override), storage=storage
        ),
        context=ContextStore(project_dir / config.state_dir, storage=storage),
    )


def get_workspace(ctx: typer.Context) -> Workspace:
    """Fetch the workspace the app callback stored on the context."""
    obj = ctx.find_root().obj or {}
    workspace = obj.get("workspace")
    if workspace is None:
        raise RuntimeError("spiral workspace not initialized")
    return workspace


def styled(value: str | None) -> str:
    """Render an enum-like value with its color, escaped for markup."""
    if not value:
        return "[dim]-[/dim]"
    style = STATUS_STYLES.get(value)
    text = escape(value)
    return f"[{style}]{text}[/{style}]" if style else text


def task_icon(status: str | None) -> str:
    return TASK_ICONS.get(status or "", "📝")
