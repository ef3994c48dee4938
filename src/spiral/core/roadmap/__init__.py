"""
Roadmap data model, persistence and mutation.

Public API:
    Models: Milestone, Task, Roadmap, MilestoneUpdate, TaskUpdate,
        Priority, CycleStatus, TaskStatus
    Validation: validate_roadmap
    Store: RoadmapStore
    Operations: add_milestone, add_task, create_milestone, create_task,
        update_milestone, update_task, remove_item
    Discovery: find_roadmap_file
"""

from spiral.core.roadmap.discovery import (
    DEFAULT_ROADMAP_FILE,
    ROADMAP_CANDIDATES,
    find_roadmap_file,
    list_yaml_files,
)
from spiral.core.roadmap.models import (
    CYCLE_STATUS_VALUES,
    PRIORITY_VALUES,
    TASK_STATUS_VALUES,
    CycleStatus,
    Milestone,
    MilestoneUpdate,
    Priority,
    Roadmap,
    Task,
    TaskStatus,
    TaskUpdate,
    is_valid_cycle_status,
    is_valid_priority,
    is_valid_task_status,
)
from spiral.core.roadmap.operations import (
    add_milestone,
    add_task,
    create_milestone,
    create_task,
    descendants_of,
    remove_item,
    update_milestone,
    update_task,
)
from spiral.core.roadmap.store import RoadmapStore, dump_roadmap, parse_roadmap
from spiral.core.roadmap.validation import validate_roadmap

__all__ = [
    # Models
    "Milestone",
    "Task",
    "Roadmap",
    "MilestoneUpdate",
    "TaskUpdate",
    "Priority",
    "CycleStatus",
    "TaskStatus",
    "PRIORITY_VALUES",
    "CYCLE_STATUS_VALUES",
    "TASK_STATUS_VALUES",
    "is_valid_priority",
    "is_valid_cycle_status",
    "is_valid_task_status",
    # Validation
    "validate_roadmap",
    # Store
    "RoadmapStore",
    "dump_roadmap",
    "parse_roadmap",
    # Operations
    "add_milestone",
    "add_task",
    "create_milestone",
    "create_task",
    "update_milestone",
    "update_task",
    "remove_item",
    "descendants_of",
    # Discovery
    "DEFAULT_ROADMAP_FILE",
    "ROADMAP_CANDIDATES",
    "find_roadmap_file",
    "list_yaml_files",
]
