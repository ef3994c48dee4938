"""Utility modules for spiral."""

from .git import GitError, commit_all, is_git_repo

__all__ = [
    "GitError",
    "commit_all",
    "is_git_repo",
]
