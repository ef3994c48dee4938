"""
.env support for spiral settings.

Only SPIRAL_* assignments are taken from .env files. Other keys in a shared
project .env (tokens, database URLs) are left for the tools that own them.

Layers, highest first:

  shell environment > project .env > user .env (~/.config/spiral/.env)

A value already exported in the shell is never replaced.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "SPIRAL_"


def user_env_path() -> Path:
    return get_xdg_config_home() / "spiral" / ".env"


def read_spiral_env(path: Path) -> dict[str, str]:
    """SPIRAL_* assignments from one .env file; a missing file yields {}."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export SPIRAL_* settings from the user and project .env files.

    Args:
        project_dir: Directory holding the project .env (defaults to cwd)
        user_env_paths: User-level files, lowest precedence first
        project_env_paths: Project-level files, lowest precedence first

    Returns:
        The variables that were exported
    """
    project_dir = project_dir or Path.cwd()
    if user_env_paths is None:
        user_env_paths = [user_env_path()]
    if project_env_paths is None:
        project_env_paths = [project_dir / ".env"]

    merged: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        merged.update(read_spiral_env(Path(path)))

    exported: dict[str, str] = {}
    for key, value in merged.items():
        if key in os.environ:
            logger.debug("%s is set in the shell, ignoring .env value", key)
            continue
        os.environ[key] = value
        exported[key] = value

    if exported:
        logger.debug("Loaded from .env: %s", ", ".join(sorted(exported)))
    return exported
