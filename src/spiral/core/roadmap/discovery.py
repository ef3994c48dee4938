"""
Roadmap file discovery.

Looks for a roadmap file under one of the conventional names in a project
directory. The first existing candidate wins; when none exists, the first
candidate name is used so that the store creates it on first load.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

DEFAULT_ROADMAP_FILE = "spiral.yml"

ROADMAP_CANDIDATES: tuple[str, ...] = (
    "spiral.yml",
    "roadmap.yml",
    "milestones.yml",
    "spiral.yaml",
    "roadmap.yaml",
    "milestones.yaml",
)


def find_roadmap_file(
    project_dir: Path | None = None,
    candidates: Sequence[str] = ROADMAP_CANDIDATES,
) -> Path:
    """
    Find the roadmap file for a project.

    Args:
        project_dir: Directory to search (defaults to cwd)
        candidates: File names to try, in order

    Returns:
        Path of the first existing candidate, else project_dir/spiral.yml
    """
    project_dir = project_dir or Path.cwd()
    for name in candidates:
        path = project_dir / name
        if path.is_file():
            return path
    default = candidates[0] if candidates else DEFAULT_ROADMAP_FILE
    return project_dir / default


def list_yaml_files(project_dir: Path | None = None) -> list[Path]:
    """YAML files directly inside project_dir, sorted by name."""
    project_dir = project_dir or Path.cwd()
    files = list(project_dir.glob("*.yml")) + list(project_dir.glob("*.yaml"))
    return sorted(files, key=lambda p: p.name)
