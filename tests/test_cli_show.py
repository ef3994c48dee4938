"""Tests for the `spiral show` commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from spiral.cli import app
from spiral.core.roadmap import Milestone, Roadmap, RoadmapStore

runner = CliRunner()


def _json(args: list[str]):
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestShowAll:
    """Tests for `spiral show all` and bare `spiral show`."""

    def test_empty_roadmap(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["show", "all"])
        assert result.exit_code == 0, result.output
        assert "No milestones found" in result.output

    def test_hierarchy(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "all"])

        assert result.exit_code == 0, result.output
        assert "Offline sync" in result.output
        assert "D1.1.1" in result.output
        assert "Invoices" in result.output

    def test_bare_show_is_show_all(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show"])
        assert result.exit_code == 0, result.output
        assert "Hierarchical View" in result.output

    def test_json_nesting(self, seeded_project: Path) -> None:
        data = _json(["show", "all", "--json"])

        assert [m["id"] for m in data["milestones"]] == ["D1", "D2", "E1"]
        d1 = data["milestones"][0]
        assert [t["id"] for t in d1["tasks"]] == ["D1.1", "D1.2"]
        assert [s["id"] for s in d1["tasks"][0]["subtasks"]] == ["D1.1.1"]
        assert "subtasks" not in d1["tasks"][1]
        assert data["orphans"] == []

    def test_json_omits_unset_fields(self, seeded_project: Path) -> None:
        data = _json(["show", "all", "--json"])
        d2 = data["milestones"][1]
        assert "priority" not in d2
        assert "notes" not in d2

    def test_invalid_sort(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "all", "--sort", "random"])
        assert result.exit_code == 2
        assert "Invalid option" in result.output

    def test_unreadable_roadmap(self, project_dir: Path) -> None:
        (project_dir / "spiral.yml").write_text("milestones: [unclosed\n")
        result = runner.invoke(app, ["show", "all"])
        assert result.exit_code == 2
        assert "Failed to parse" in result.output

    def test_roadmap_not_utf8(self, project_dir: Path) -> None:
        (project_dir / "spiral.yml").write_bytes(b"milestones: []\n# \xff\xfe\n")
        result = runner.invoke(app, ["show", "all"])
        assert result.exit_code == 2
        assert "UTF-8" in result.output


class TestShowMilestones:
    """Tests for `spiral show milestones`."""

    def test_table(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "milestones"])
        assert result.exit_code == 0, result.output
        assert "Billing" in result.output
        assert "Total: 3 milestones" in result.output

    def test_filter_family(self, seeded_project: Path) -> None:
        data = _json(["show", "milestones", "--family", "E", "--json"])
        assert [m["id"] for m in data] == ["E1"]

    def test_filter_cycle_status(self, seeded_project: Path) -> None:
        data = _json(["show", "milestones", "--cycle-status", "in-cycle", "--json"])
        assert [m["id"] for m in data] == ["D1"]

    def test_no_match(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "milestones", "--priority", "critical"])
        assert result.exit_code == 0, result.output
        assert "No milestones found" in result.output

    def test_sort_orders(self, project_dir: Path) -> None:
        roadmap = Roadmap(
            milestones=[
                Milestone(id=mid, family="D", title=mid) for mid in ("D2", "D10", "D1")
            ]
        )
        RoadmapStore(project_dir / "spiral.yml").save(roadmap)

        text = _json(["show", "milestones", "--json"])
        natural = _json(["show", "milestones", "--sort", "natural", "--json"])

        assert [m["id"] for m in text] == ["D1", "D10", "D2"]
        assert [m["id"] for m in natural] == ["D1", "D2", "D10"]

    def test_sort_from_env(self, project_dir: Path, monkeypatch) -> None:
        roadmap = Roadmap(
            milestones=[Milestone(id=mid, family="D", title=mid) for mid in ("D10", "D9")]
        )
        RoadmapStore(project_dir / "spiral.yml").save(roadmap)
        monkeypatch.setenv("SPIRAL_SORT", "natural")

        data = _json(["show", "milestones", "--json"])
        assert [m["id"] for m in data] == ["D9", "D10"]


class TestShowTasks:
    """Tests for `spiral show tasks`."""

    def test_table(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "tasks"])
        assert result.exit_code == 0, result.output
        assert "Total: 5 tasks" in result.output

    def test_filter_parent(self, seeded_project: Path) -> None:
        data = _json(["show", "tasks", "--parent", "D1", "--json"])
        assert [t["id"] for t in data] == ["D1.1", "D1.2"]

    def test_filter_status(self, seeded_project: Path) -> None:
        data = _json(["show", "tasks", "--status", "blocked", "--json"])
        assert [t["id"] for t in data] == ["E1.1"]

    def test_filter_family(self, seeded_project: Path) -> None:
        data = _json(["show", "tasks", "--family", "D", "--json"])
        assert [t["id"] for t in data] == ["D1.1", "D1.1.1", "D1.2", "D2.1"]


class TestShowCycle:
    """Tests for `spiral show cycle`."""

    def test_cycle(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "cycle"])
        assert result.exit_code == 0, result.output
        assert "Offline sync" in result.output
        assert "Search" not in result.output

    def test_cycle_json(self, seeded_project: Path) -> None:
        data = _json(["show", "cycle", "--json"])
        assert [m["id"] for m in data["milestones"]] == ["D1"]
        assert [t["id"] for t in data["tasks"]] == ["D1.1", "D1.1.1", "D1.2"]

    def test_nothing_in_cycle(self, project_dir: Path) -> None:
        roadmap = Roadmap(milestones=[Milestone(id="D1", family="D", title="Idle")])
        RoadmapStore(project_dir / "spiral.yml").save(roadmap)

        result = runner.invoke(app, ["show", "cycle"])
        assert result.exit_code == 0, result.output
        assert "No milestones currently in cycle" in result.output


class TestShowStats:
    """Tests for `spiral show stats`."""

    def test_stats_json(self, seeded_project: Path) -> None:
        data = _json(["show", "stats", "--json"])
        assert data["total_milestones"] == 3
        assert data["total_tasks"] == 5
        assert data["in_cycle_tasks"] == 3
        assert data["tasks_by_status"]["planned"] == 2

    def test_stats_table(self, seeded_project: Path) -> None:
        result = runner.invoke(app, ["show", "stats"])
        assert result.exit_code == 0, result.output
        assert "Roadmap Statistics" in result.output
        assert "In-cycle tasks" in result.output
