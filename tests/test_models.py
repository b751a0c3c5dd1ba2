from __future__ import annotations

import pytest

from splitup.core.models import Cell, Goal, ProjectSnapshot, parse_quantity


def test_new_goal_starts_untouched():
    goal = Goal.create("Read books", 12)
    assert goal.total == goal.remaining == 12
    assert not goal.completed
    assert goal.progress == (0, 12)
    assert goal.progress_label == "0/12"


def test_partial_completion_decrements_remaining():
    goal = Goal.create("Run", 10).apply(4)
    assert goal.remaining == 6
    assert goal.progress_label == "4/10"
    assert not goal.completed


def test_applying_remaining_completes_goal():
    goal = Goal.create("Run", 10).apply(3).apply(7)
    assert goal.remaining == 0
    assert goal.completed


@pytest.mark.parametrize("amount", [0, -1, 11])
def test_out_of_range_amount_is_rejected(amount):
    assert Goal.create("Run", 10).apply(amount) is None


def test_edit_keeps_id_and_resets_remaining():
    goal = Goal.create("Run", 10).apply(5)
    edited = goal.edited("Swim", 20)
    assert edited.id == goal.id
    assert (edited.text, edited.total, edited.remaining, edited.completed) == ("Swim", 20, 20, False)


def test_snapshot_dict_layout(image_bytes):
    snapshot = ProjectSnapshot(
        id="P-1",
        image_bytes=image_bytes,
        goals=[Goal("G-1", "Books", 2, 1)],
        project_name="Reading",
        cells=[Cell(0, True), Cell(1)],
        grid_visible=True,
    )
    data = snapshot.to_dict()
    assert set(data) == {"id", "imageBytes", "goals", "projectName", "cells", "gridVisible"}
    assert data["goals"][0] == {"id": "G-1", "text": "Books", "total": 2, "remaining": 1, "completed": False}
    assert data["cells"] == [{"revealed": True, "position": 0}, {"revealed": False, "position": 1}]
    assert ProjectSnapshot.from_dict(data) == snapshot


@pytest.mark.parametrize(
    "raw,expected",
    [("12", 12), (" 7 ", 7), ("0", 0), (5, 5), (3.0, 3), ("", None), ("-2", None), ("abc", None),
     ("1.5", None), (None, None), (-4, None), (True, None), ("²", None)],
)
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


@pytest.mark.parametrize("total, remaining", [(3, 9), (3, -1), (-2, 0)])
def test_goal_rejects_remaining_outside_total(total, remaining):
    with pytest.raises(ValueError):
        Goal("G-1", "Books", total, remaining)


def test_goal_completion_follows_remaining():
    stored = {"id": "G-1", "text": "Books", "total": 3, "remaining": 2, "completed": True}
    assert not Goal.from_dict(stored).completed
    assert Goal("G-2", "Runs", 4, 0).completed
