"""
Tests for roadmap mutation operations.

Every operation that raises must leave the roadmap exactly as it was.
"""

import pytest

from spiral.core.errors import (
    DuplicateIDError,
    InvalidParentError,
    MalformedIDError,
    NotFoundError,
    RoadmapValidationError,
    UnknownFieldError,
)
from spiral.core.roadmap import (
    Milestone,
    MilestoneUpdate,
    Roadmap,
    Task,
    TaskUpdate,
    add_milestone,
    add_task,
    create_milestone,
    create_task,
    descendants_of,
    remove_item,
    update_milestone,
    update_task,
    validate_roadmap,
)


class TestAddMilestone:
    """Tests for add_milestone."""

    def test_appends(self) -> None:
        roadmap = Roadmap()
        add_milestone(roadmap, Milestone(id="D1", family="D", title="Sync"))
        assert [m.id for m in roadmap.milestones] == ["D1"]

    def test_duplicate_leaves_roadmap_unchanged(self, sample_roadmap: Roadmap) -> None:
        before = sample_roadmap.model_copy(deep=True)
        with pytest.raises(DuplicateIDError, match="Milestone ID D1 already exists"):
            add_milestone(sample_roadmap, Milestone(id="D1", family="D", title="Again"))
        assert sample_roadmap == before

    def test_rejects_task_level_id(self) -> None:
        with pytest.raises(InvalidParentError):
            add_milestone(Roadmap(), Milestone(id="D1.1", family="D", title="T"))

    def test_rejects_family_mismatch(self) -> None:
        with pytest.raises(RoadmapValidationError, match="does not match"):
            add_milestone(Roadmap(), Milestone(id="D1", family="E", title="T"))

    def test_rejects_malformed_id(self) -> None:
        with pytest.raises(MalformedIDError):
            add_milestone(Roadmap(), Milestone(id="1D", family="D", title="T"))

    def test_rejects_empty_title(self) -> None:
        roadmap = Roadmap()
        with pytest.raises(RoadmapValidationError):
            add_milestone(roadmap, Milestone(id="D1", family="D", title=""))
        assert roadmap.milestones == []


class TestAddTask:
    """Tests for add_task."""

    def test_task_under_milestone(self, sample_roadmap: Roadmap) -> None:
        add_task(sample_roadmap, Task(id="D2.2", parent_id="D2", title="Rank"))
        validate_roadmap(sample_roadmap)

    def test_subtask_under_task(self, sample_roadmap: Roadmap) -> None:
        add_task(sample_roadmap, Task(id="D1.2.1", parent_id="D1.2", title="Dialog"))
        assert sample_roadmap.get_task("D1.2.1") is not None

    def test_parent_must_match_id(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(InvalidParentError, match="must have parent D1"):
            add_task(sample_roadmap, Task(id="D1.5", parent_id="D2", title="Wrong"))

    def test_parent_must_exist(self, sample_roadmap: Roadmap) -> None:
        before = sample_roadmap.model_copy(deep=True)
        with pytest.raises(InvalidParentError, match="Parent D7 does not exist"):
            add_task(sample_roadmap, Task(id="D7.1", parent_id="D7", title="Lost"))
        assert sample_roadmap == before

    def test_subtask_parent_must_be_task(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(InvalidParentError, match="Parent D2.9 does not exist"):
            add_task(sample_roadmap, Task(id="D2.9.1", parent_id="D2.9", title="Lost"))

    def test_rejects_milestone_id(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(InvalidParentError, match="must have a parent"):
            add_task(sample_roadmap, Task(id="D5", parent_id="D", title="T"))

    def test_duplicate(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(DuplicateIDError, match="Task ID D1.1 already exists"):
            add_task(sample_roadmap, Task(id="D1.1", parent_id="D1", title="Again"))

    def test_invalid_status(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(RoadmapValidationError, match="invalid status"):
            add_task(sample_roadmap, Task(id="D2.2", parent_id="D2", title="T", status="wip"))


class TestCreate:
    """Tests for create_milestone and create_task."""

    def test_create_milestone_mints_next_id(self, sample_roadmap: Roadmap) -> None:
        milestone = create_milestone(sample_roadmap, "Sharing", "D", priority="low")
        assert milestone.id == "D3"
        assert milestone.status == "planned"
        assert sample_roadmap.milestones[-1] is milestone

    def test_create_milestone_new_family(self, sample_roadmap: Roadmap) -> None:
        assert create_milestone(sample_roadmap, "Docs", "F").id == "F1"

    @pytest.mark.parametrize("family", ["DD", "1", ""])
    def test_create_milestone_invalid_family(self, sample_roadmap: Roadmap, family: str) -> None:
        before = sample_roadmap.model_copy(deep=True)
        with pytest.raises(MalformedIDError, match="single letter"):
            create_milestone(sample_roadmap, "X", family)
        assert sample_roadmap == before

    def test_create_milestone_explicit_id(self, sample_roadmap: Roadmap) -> None:
        milestone = create_milestone(sample_roadmap, "Later", "D", milestone_id="D10")
        assert milestone.id == "D10"
        assert create_milestone(sample_roadmap, "After", "D").id == "D11"

    def test_create_task(self, sample_roadmap: Roadmap) -> None:
        task = create_task(sample_roadmap, "Merge", "D1")
        assert task.id == "D1.3"
        assert task.status == "planned"

    def test_create_subtask(self, sample_roadmap: Roadmap) -> None:
        assert create_task(sample_roadmap, "Jitter", "D1.1").id == "D1.1.2"

    def test_create_task_with_status(self, sample_roadmap: Roadmap) -> None:
        assert create_task(sample_roadmap, "Ship", "E1", status="done").status == "done"

    def test_create_task_missing_parent(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(InvalidParentError):
            create_task(sample_roadmap, "Nope", "D8")

    def test_create_under_subtask(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(InvalidParentError, match="Cannot create child of subtask"):
            create_task(sample_roadmap, "Too deep", "D1.1.1")

    def test_every_created_id_is_new(self, sample_roadmap: Roadmap) -> None:
        ids = {create_task(sample_roadmap, f"T{i}", "D2").id for i in range(5)}
        assert ids == {"D2.2", "D2.3", "D2.4", "D2.5", "D2.6"}
        validate_roadmap(sample_roadmap)


class TestUpdate:
    """Tests for update_milestone and update_task."""

    def test_update_milestone_partial(self, sample_roadmap: Roadmap) -> None:
        updated = update_milestone(
            sample_roadmap, "D1", MilestoneUpdate.from_fields({"title": "Offline mode"})
        )
        assert updated.title == "Offline mode"
        assert updated.priority == "high"
        assert sample_roadmap.get_milestone("D1").title == "Offline mode"

    def test_empty_string_clears_optional(self, sample_roadmap: Roadmap) -> None:
        updated = update_milestone(
            sample_roadmap, "D1", MilestoneUpdate.from_fields({"priority": ""})
        )
        assert updated.priority is None

    def test_invalid_value_leaves_roadmap_unchanged(self, sample_roadmap: Roadmap) -> None:
        before = sample_roadmap.model_copy(deep=True)
        with pytest.raises(RoadmapValidationError):
            update_milestone(
                sample_roadmap, "D1", MilestoneUpdate.from_fields({"cycle_status": "now"})
            )
        assert sample_roadmap == before

    def test_empty_title_rejected(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(RoadmapValidationError):
            update_task(sample_roadmap, "D1.1", TaskUpdate.from_fields({"title": ""}))

    def test_update_task_status(self, sample_roadmap: Roadmap) -> None:
        updated = update_task(sample_roadmap, "D1.2", TaskUpdate.from_fields({"status": "done"}))
        assert updated.status == "done"
        assert sample_roadmap.get_task("D1.2").status == "done"

    def test_family_not_updatable(self, sample_roadmap: Roadmap) -> None:
        """The family is part of the ID, so an update cannot change it."""
        with pytest.raises(UnknownFieldError, match="family"):
            MilestoneUpdate.from_fields({"family": "E"})

    def test_minting_after_update_stays_unique(self, sample_roadmap: Roadmap) -> None:
        update_milestone(sample_roadmap, "D2", MilestoneUpdate.from_fields({"title": "Find"}))
        created = create_milestone(sample_roadmap, "Another", "D")
        assert created.id == "D3"
        validate_roadmap(sample_roadmap)

    def test_not_found(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(NotFoundError, match="Milestone D9 not found"):
            update_milestone(sample_roadmap, "D9", MilestoneUpdate.from_fields({"title": "x"}))
        with pytest.raises(NotFoundError, match="Task D9.1 not found"):
            update_task(sample_roadmap, "D9.1", TaskUpdate.from_fields({"title": "x"}))


class TestRemove:
    """Tests for descendants_of and remove_item."""

    def test_descendants(self, sample_roadmap: Roadmap) -> None:
        assert {t.id for t in descendants_of(sample_roadmap, "D1")} == {
            "D1.1",
            "D1.1.1",
            "D1.2",
        }
        assert descendants_of(sample_roadmap, "D1.2") == []

    def test_remove_leaf_task(self, sample_roadmap: Roadmap) -> None:
        assert remove_item(sample_roadmap, "D1.2") == ["D1.2"]
        assert sample_roadmap.get_task("D1.2") is None
        validate_roadmap(sample_roadmap)

    def test_remove_with_children_requires_cascade(self, sample_roadmap: Roadmap) -> None:
        before = sample_roadmap.model_copy(deep=True)
        with pytest.raises(InvalidParentError, match="3 child item"):
            remove_item(sample_roadmap, "D1")
        assert sample_roadmap == before

    def test_cascade(self, sample_roadmap: Roadmap) -> None:
        removed = remove_item(sample_roadmap, "D1", cascade=True)
        assert removed[0] == "D1"
        assert set(removed) == {"D1", "D1.1", "D1.1.1", "D1.2"}
        assert [m.id for m in sample_roadmap.milestones] == ["D2", "E1"]
        validate_roadmap(sample_roadmap)

    def test_not_found(self, sample_roadmap: Roadmap) -> None:
        with pytest.raises(NotFoundError, match="Item Z1 not found"):
            remove_item(sample_roadmap, "Z1")

    def test_numbering_follows_remaining_max(self, sample_roadmap: Roadmap) -> None:
        """Removing the highest sibling frees its number for the next item."""
        remove_item(sample_roadmap, "D1.2")
        assert create_task(sample_roadmap, "Next", "D1").id == "D1.2"
        remove_item(sample_roadmap, "D2", cascade=True)
        assert create_milestone(sample_roadmap, "New", "D").id == "D2"
