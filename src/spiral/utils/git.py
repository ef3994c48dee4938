"""
Git utilities for spiral.

Thin subprocess wrappers used by ``spiral commit --git``. The core never
imports this module.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from spiral.core.errors import SpiralError

logger = logging.getLogger(__name__)


class GitError(SpiralError):
    """Raised when a git command fails or git is not installed."""


def is_git_repo(cwd: Path | None = None) -> bool:
    """Check whether cwd is inside a git work tree."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            capture_output=True,
            text=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        return False
    return result.returncode == 0 and result.stdout.strip() == "true"


def _run_git(args: list[str], cwd: Path | None = None) -> str:
    logger.debug("Running git %s", " ".join(args))
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise GitError("git is not installed") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        raise GitError(f"git {args[0]} failed: {detail}") from e
    return result.stdout


def commit_all(message: str, cwd: Path | None = None) -> str:
    """Stage every change and commit it.

    Runs ``git add .`` followed by ``git commit -m message``.

    Args:
        message: Commit message, usually tagged with a roadmap ID
        cwd: Repository directory (defaults to the process cwd)

    Returns:
        Output of git commit

    Raises:
        GitError: If either git command fails
    """
    _run_git(["add", "."], cwd=cwd)
    return _run_git(["commit", "-m", message], cwd=cwd)
