"""Tests for JSON snapshot export and import."""

from __future__ import annotations

import json

import pytest

from habitpulse.errors import InvalidHabitRecord
from habitpulse.services.snapshot import export_habits, import_habits


def test_export_writes_camel_case_snapshot(tmp_path, habit_factory):
    """Exporting habits writes a {"habits": [...]} document."""

    habits = [
        habit_factory(name="Read", completed_dates=["2024-01-01"]),
        habit_factory(name="Gym", frequency="weekly", custom_days=[1, 4]),
    ]
    output_path = tmp_path / "nested" / "habits.json"

    written = export_habits(habits=habits, output_path=output_path)

    assert written == output_path
    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert [h["name"] for h in data["habits"]] == ["Read", "Gym"]
    assert data["habits"][0]["completedDates"] == ["2024-01-01"]
    assert data["habits"][1]["customDays"] == [1, 4]


def test_export_then_import_preserves_habits(tmp_path, habit_factory):
    habits = [habit_factory(name="Read", completed_dates=["2024-01-02", "2024-01-01"])]
    path = export_habits(habits=habits, output_path=tmp_path / "habits.json")
    assert import_habits(path) == habits


def test_import_accepts_bare_list(tmp_path):
    path = tmp_path / "habits.json"
    path.write_text(json.dumps([{"id": "h1", "name": "Walk"}]), encoding="utf-8")
    (habit,) = import_habits(path)
    assert habit.id == "h1"
    assert habit.kind is None


def test_import_skips_invalid_records(tmp_path):
    path = tmp_path / "habits.json"
    payload = {
        "habits": [
            {"id": "h1", "name": "Walk", "completedDates": ["2024-01-01", "bad"]},
            {"name": "No id"},
            "not a record",
        ]
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    habits = import_habits(path)

    assert [h.id for h in habits] == ["h1"]
    assert habits[0].completed_dates == ("2024-01-01",)


def test_import_rejects_non_list_payload(tmp_path):
    path = tmp_path / "habits.json"
    path.write_text(json.dumps({"habits": {"id": "h1"}}), encoding="utf-8")
    with pytest.raises(InvalidHabitRecord):
        import_habits(path)
