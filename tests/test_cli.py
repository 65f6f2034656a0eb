"""Tests for the family-tree CLI."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from family_tree import cli
from family_tree.cli import app
from family_tree.client import NetworkError

runner = CliRunner()


@pytest.fixture(autouse=True)
def _use_store(monkeypatch, store):
    monkeypatch.setattr(cli, "_open_store", lambda: store)


def test_show(store) -> None:
    result = runner.invoke(app, ["show"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Alice Smith" in result.output
    assert "Carol Smith" in result.output


def test_show_load_error(store) -> None:
    store.fail["get_graph"] = NetworkError("Network error: connection refused")
    result = runner.invoke(app, ["show"])
    assert result.exit_code == 1
    assert "connection refused" in result.output


def test_relatives(store) -> None:
    result = runner.invoke(app, ["relatives", "C"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Parent: Alice Smith" in result.output
    assert "Parent: Bob Smith" in result.output

    result = runner.invoke(app, ["relatives", "A"], catch_exceptions=False)
    assert "Spouse: Bob Smith" in result.output
    assert "Child: Carol Smith" in result.output


def test_relatives_unknown_person(store) -> None:
    result = runner.invoke(app, ["relatives", "nobody"])
    assert result.exit_code == 1


def test_export_json(tmp_path: Path, store) -> None:
    out = tmp_path / "tree.json"
    result = runner.invoke(app, ["export", str(out)], catch_exceptions=False)
    assert result.exit_code == 0

    data = json.loads(out.read_text())
    assert [n["id"] for n in data["nodes"]] == ["A", "B", "C"]
    assert data["nodes"][2]["position"] == {"x": 140.0, "y": 300.0}
    assert {e["id"] for e in data["edges"]} == {"parent-A-C", "parent-B-C", "union-A-B"}


def test_export_mermaid(tmp_path: Path, store) -> None:
    out = tmp_path / "out" / "tree.mmd"
    result = runner.invoke(app, ["export", str(out)], catch_exceptions=False)
    assert result.exit_code == 0
    text = out.read_text()
    assert text.startswith("flowchart TD")
    assert "N_A --> N_C" in text

    md = tmp_path / "tree.md"
    runner.invoke(app, ["export", str(md)], catch_exceptions=False)
    assert md.read_text().startswith("```mermaid\nflowchart TD")


def test_export_unsupported(tmp_path: Path, store) -> None:
    result = runner.invoke(app, ["export", str(tmp_path / "tree.txt")])
    assert result.exit_code == 1
    assert not (tmp_path / "tree.txt").exists()


def test_add_person(store) -> None:
    result = runner.invoke(
        app, ["add-person", "--first", "Dan", "--last", "Smith", "--gender", "male"], catch_exceptions=False
    )
    assert result.exit_code == 0
    assert "Created Dan Smith" in result.output
    assert store.persons[-1].first_name == "Dan"


def test_edit_person_keeps_other_fields(store) -> None:
    result = runner.invoke(app, ["edit-person", "A", "--occupation", "Pilot"], catch_exceptions=False)
    assert result.exit_code == 0
    alice = store.persons[0]
    assert alice.occupation == "Pilot"
    assert alice.first_name == "Alice"
    assert alice.birth_date == "1950-03-01"


def test_add_union(store) -> None:
    result = runner.invoke(
        app, ["add-union", "A", "C", "--status", "divorced", "--start", "1999-01-01"], catch_exceptions=False
    )
    assert result.exit_code == 0
    union = store.unions[-1]
    assert (union.person1_id, union.person2_id) == ("A", "C")
    assert union.is_ended


def test_add_parent(store) -> None:
    result = runner.invoke(app, ["add-parent", "B", "A", "--type", "step"], catch_exceptions=False)
    assert result.exit_code == 0
    assert store.parent_of[-1].key == ("B", "A")
    assert store.parent_of[-1].parent_type.value == "step"


def test_move_and_unpin(store) -> None:
    result = runner.invoke(app, ["move", "C", "320", "140"], catch_exceptions=False)
    assert result.exit_code == 0
    assert store.persons[2].persisted_position.to_dict() == {"x": 320, "y": 140}

    result = runner.invoke(app, ["unpin", "C"], catch_exceptions=False)
    assert result.exit_code == 0
    assert store.persons[2].persisted_position is None
    assert "(140, 300)" in result.output


def test_delete(store) -> None:
    result = runner.invoke(app, ["delete", "C", "--yes"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Deleted Carol Smith" in result.output
    assert "C" not in {p.id for p in store.persons}


def test_delete_declined(store) -> None:
    result = runner.invoke(app, ["delete", "C"], input="n\n", catch_exceptions=False)
    assert result.exit_code == 0
    assert "Aborted." in result.output
    assert "delete_person" not in store.call_names()


def test_delete_failure(store) -> None:
    from family_tree.client import ApiError

    store.fail["delete_person"] = ApiError("API request failed: Conflict", 409, "Conflict")
    result = runner.invoke(app, ["delete", "C", "--yes"])
    assert result.exit_code == 1
    assert "Conflict" in result.output


def test_delete_unknown_person(store) -> None:
    result = runner.invoke(app, ["delete", "ghost", "--yes"])
    assert result.exit_code == 1
    assert "No person selected" in result.output
