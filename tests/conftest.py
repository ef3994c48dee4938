"""
Pytest configuration and shared fixtures.

Provides sample roadmaps, in-memory and on-disk stores, and an isolated
project directory for CLI tests.
"""

from pathlib import Path

import pytest

from spiral.core.config import clear_cache
from spiral.core.context import ContextStore
from spiral.core.roadmap import Milestone, Roadmap, RoadmapStore, Task
from spiral.core.storage import MemoryStorage

# ==============================================================================
# Environment Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, .env files and SPIRAL_* variables out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "SPIRAL_ROADMAP",
        "SPIRAL_STATE_DIR",
        "SPIRAL_FAMILY",
        "SPIRAL_COMMIT_FAMILY",
        "SPIRAL_SORT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Roadmap Fixtures
# ==============================================================================


@pytest.fixture
def sample_roadmap() -> Roadmap:
    """
    A small roadmap covering every level and two families.

    D1 (in-cycle): D1.1 (done) with subtask D1.1.1, D1.2 (in-progress)
    D2 (no cycle status): D2.1
    E1 (planned): E1.1 (blocked)
    """
    return Roadmap(
        milestones=[
            Milestone(
                id="D1",
                family="D",
                title="Offline sync",
                priority="high",
                cycle_status="in-cycle",
            ),
            Milestone(id="D2", family="D", title="Search"),
            Milestone(
                id="E1",
                family="E",
                title="Billing",
                priority="low",
                cycle_status="planned",
            ),
        ],
        tasks=[
            Task(id="D1.1", parent_id="D1", title="Sync queue", status="done"),
            Task(id="D1.1.1", parent_id="D1.1", title="Retry backoff"),
            Task(id="D1.2", parent_id="D1", title="Conflict UI", status="in-progress"),
            Task(id="D2.1", parent_id="D2", title="Index titles"),
            Task(id="E1.1", parent_id="E1", title="Invoices", status="blocked"),
        ],
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Provide an empty in-memory storage backend."""
    return MemoryStorage()


@pytest.fixture
def memory_store(memory_storage) -> RoadmapStore:
    """Roadmap store on in-memory storage."""
    return RoadmapStore(Path("spiral.yml"), storage=memory_storage)


@pytest.fixture
def file_store(tmp_path) -> RoadmapStore:
    """Roadmap store on a real file in a temp directory."""
    return RoadmapStore(tmp_path / "spiral.yml")


@pytest.fixture
def context_store(tmp_path) -> ContextStore:
    """Context store under a temp state directory."""
    return ContextStore(tmp_path / ".spiral")


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def project_dir(tmp_path, monkeypatch) -> Path:
    """
    Provide a temporary project directory and make it the cwd.

    The directory starts empty: no roadmap file and no context.
    """
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def seeded_project(project_dir, sample_roadmap) -> Path:
    """Project directory whose spiral.yml holds the sample roadmap."""
    RoadmapStore(project_dir / "spiral.yml").save(sample_roadmap)
    return project_dir
