"""
spiral - git-friendly roadmap tracker

Keeps milestones, tasks and subtasks in a YAML file next to the code and
ties commits to them with [ID] tags.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from spiral.core.ids.models import RoadmapId
from spiral.core.roadmap.models import Milestone, Roadmap, Task

__all__ = ["Milestone", "Roadmap", "RoadmapId", "Task", "__version__"]
