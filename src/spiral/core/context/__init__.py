"""
Working context: the persisted pointer to the current milestone/task.
"""

from spiral.core.context.models import WorkContext
from spiral.core.context.store import CONTEXT_FILE, DEFAULT_STATE_DIR, ContextStore

__all__ = [
    "WorkContext",
    "ContextStore",
    "CONTEXT_FILE",
    "DEFAULT_STATE_DIR",
]
