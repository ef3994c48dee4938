"""
Tests for the ID generator.

Covers max-plus-one numbering, scoping by family and parent, skipping of
malformed sibling IDs, and family selection from the working context.
"""

import logging

import pytest

from spiral.core.context import WorkContext
from spiral.core.errors import DuplicateIDError, InvalidParentError, MalformedIDError
from spiral.core.ids import DEFAULT_FAMILY, IdGenerator, RoadmapId
from spiral.core.roadmap import Milestone, Roadmap, Task


def _roadmap(milestone_ids: list[str], tasks: list[tuple[str, str]] | None = None) -> Roadmap:
    return Roadmap(
        milestones=[
            Milestone(id=mid, family=mid[0], title=f"Milestone {mid}") for mid in milestone_ids
        ],
        tasks=[
            Task(id=tid, parent_id=parent, title=f"Task {tid}")
            for tid, parent in (tasks or [])
        ],
    )


class TestNextMilestoneId:
    """Tests for next_milestone_id."""

    def test_empty_family_starts_at_one(self) -> None:
        generator = IdGenerator(Roadmap())
        assert generator.next_milestone_id("D") == RoadmapId(family="D", milestone=1)

    def test_max_plus_one_skips_gaps(self) -> None:
        """Gaps are never reused: D1, D2, D5 yields D6."""
        generator = IdGenerator(_roadmap(["D1", "D2", "D5"]))
        assert str(generator.next_milestone_id("D")) == "D6"

    def test_other_families_ignored(self) -> None:
        generator = IdGenerator(_roadmap(["D1", "E7"]))
        assert str(generator.next_milestone_id("D")) == "D2"
        assert str(generator.next_milestone_id("E")) == "E8"
        assert str(generator.next_milestone_id("F")) == "F1"

    def test_malformed_ids_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """A malformed milestone ID is ignored and logged at debug level."""
        roadmap = _roadmap(["D2"])
        roadmap.milestones.append(Milestone(id="Dx", family="D", title="Broken"))
        generator = IdGenerator(roadmap)

        with caplog.at_level(logging.DEBUG, logger="spiral.core.ids.generator"):
            assert str(generator.next_milestone_id("D")) == "D3"
        assert "Dx" in caplog.text

    def test_sees_items_added_after_construction(self) -> None:
        roadmap = _roadmap(["D1"])
        generator = IdGenerator(roadmap)
        roadmap.milestones.append(Milestone(id="D4", family="D", title="Late"))
        assert str(generator.next_milestone_id("D")) == "D5"

    @pytest.mark.parametrize("family", ["DD", "1", "", "Ä"])
    def test_invalid_family(self, family: str) -> None:
        with pytest.raises(MalformedIDError, match="single letter"):
            IdGenerator(Roadmap()).next_milestone_id(family)

    def test_suggest_without_parent_checks_family(self) -> None:
        with pytest.raises(MalformedIDError):
            IdGenerator(Roadmap()).suggest_id("DD")


class TestNextTaskId:
    """Tests for next_task_id."""

    def test_first_task(self) -> None:
        generator = IdGenerator(_roadmap(["D3"]))
        assert str(generator.next_task_id("D3")) == "D3.1"

    def test_max_plus_one(self) -> None:
        generator = IdGenerator(
            _roadmap(["D3"], [("D3.1", "D3"), ("D3.2", "D3"), ("D3.2.1", "D3.2")])
        )
        assert str(generator.next_task_id("D3")) == "D3.3"

    def test_scoped_to_parent(self) -> None:
        """Tasks under other milestones and families do not affect numbering."""
        generator = IdGenerator(
            _roadmap(
                ["D3", "D4", "E1"],
                [("D3.1", "D3"), ("D3.2", "D3"), ("D4.9", "D4"), ("E1.1", "E1")],
            )
        )
        assert str(generator.next_task_id("D3")) == "D3.3"
        assert str(generator.next_task_id("E1")) == "E1.2"

    def test_rejects_task_parent(self) -> None:
        generator = IdGenerator(Roadmap())
        with pytest.raises(InvalidParentError, match="Expected milestone ID"):
            generator.next_task_id("D3.1")

    def test_rejects_malformed_parent(self) -> None:
        generator = IdGenerator(Roadmap())
        with pytest.raises(InvalidParentError, match="Invalid milestone ID"):
            generator.next_task_id("3")


class TestNextSubtaskId:
    """Tests for next_subtask_id."""

    def test_first_subtask(self) -> None:
        generator = IdGenerator(_roadmap(["D3"], [("D3.1", "D3")]))
        assert str(generator.next_subtask_id("D3.1")) == "D3.1.1"

    def test_max_plus_one(self) -> None:
        generator = IdGenerator(
            _roadmap(
                ["D3"],
                [("D3.1", "D3"), ("D3.1.1", "D3.1"), ("D3.1.4", "D3.1"), ("D3.2.7", "D3.2")],
            )
        )
        assert str(generator.next_subtask_id("D3.1")) == "D3.1.5"

    def test_rejects_milestone_parent(self) -> None:
        generator = IdGenerator(Roadmap())
        with pytest.raises(InvalidParentError, match="Expected task ID"):
            generator.next_subtask_id("D3")

    def test_rejects_subtask_parent(self) -> None:
        generator = IdGenerator(Roadmap())
        with pytest.raises(InvalidParentError):
            generator.next_subtask_id("D3.1.1")


class TestSuggestId:
    """Tests for suggest_id."""

    def test_no_parent_suggests_milestone(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        assert str(generator.suggest_id("D")) == "D3"

    def test_milestone_parent_suggests_task(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        assert str(generator.suggest_id("D", "D1")) == "D1.3"

    def test_task_parent_suggests_subtask(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        assert str(generator.suggest_id("D", "D1.1")) == "D1.1.2"

    def test_subtask_parent_rejected(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        with pytest.raises(InvalidParentError, match="Cannot create child of subtask"):
            generator.suggest_id("D", "D1.1.1")

    def test_malformed_parent_rejected(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        with pytest.raises(InvalidParentError, match="Invalid parent ID"):
            generator.suggest_id("D", "1.1")


class TestValidateUnique:
    """Tests for validate_unique."""

    def test_unused_id_returns_parsed(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        assert generator.validate_unique("D9") == RoadmapId(family="D", milestone=9)

    def test_existing_milestone_rejected(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        with pytest.raises(DuplicateIDError, match="D1 already exists"):
            generator.validate_unique("D1")

    def test_existing_task_rejected(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        with pytest.raises(DuplicateIDError):
            generator.validate_unique("D1.1.1")

    def test_malformed_rejected(self, sample_roadmap: Roadmap) -> None:
        generator = IdGenerator(sample_roadmap)
        with pytest.raises(MalformedIDError):
            generator.validate_unique("D1.")


class TestFamilyFromContext:
    """Tests for IdGenerator.family_from_context."""

    def test_cached_family_wins(self) -> None:
        context = WorkContext(milestone_id="E2", family="Q")
        assert IdGenerator.family_from_context(context) == "Q"

    def test_milestone_family(self) -> None:
        context = WorkContext(milestone_id="E2")
        assert IdGenerator.family_from_context(context) == "E"

    def test_task_family(self) -> None:
        context = WorkContext(task_id="F4.1")
        assert IdGenerator.family_from_context(context) == "F"

    def test_default(self) -> None:
        assert IdGenerator.family_from_context(WorkContext()) == DEFAULT_FAMILY
        assert IdGenerator.family_from_context(WorkContext(), default="Z") == "Z"
