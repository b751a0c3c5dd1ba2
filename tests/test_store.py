from __future__ import annotations

import pytest

from splitup.core.models import Cell, Goal, ProjectSnapshot
from splitup.core.storage import InMemoryStorage, JsonFileStorage
from splitup.core.store import ProjectDecodeError, ProjectStore, decode_projects, encode_projects


def make_snapshot(project_id: str, image: bytes, name: str = "Project") -> ProjectSnapshot:
    return ProjectSnapshot(
        id=project_id,
        image_bytes=image,
        goals=[Goal("G-1", "Books", 3, 1), Goal("G-2", "Runs", 1, 0, True)],
        project_name=name,
        cells=[Cell(0, True), Cell(1), Cell(2, True), Cell(3, True)],
        grid_visible=True,
    )


OVERRUN_GOAL = (
    b'[{"id": "x", "imageBytes": "", "projectName": "n", "cells": [], "gridVisible": false,'
    b' "goals": [{"id": "g", "text": "t", "total": 3, "remaining": 9, "completed": true}]}]'
)


class FailingStorage(InMemoryStorage):
    def write(self, key: str, data: bytes) -> None:
        raise OSError("disk full")


def test_save_then_load_round_trips(image_bytes):
    storage = InMemoryStorage()
    projects = [make_snapshot("P-1", image_bytes), make_snapshot("P-2", b"\x00\xff\x10raw", "Other")]
    assert ProjectStore(storage).save(projects)
    loaded = ProjectStore(storage).load()
    assert loaded == projects
    assert loaded[1].image_bytes == b"\x00\xff\x10raw"


def test_round_trip_through_file_storage(tmp_path, image_bytes):
    path = tmp_path / "storage.json"
    store = ProjectStore(JsonFileStorage(path))
    store.add(make_snapshot("P-1", image_bytes))
    assert ProjectStore(JsonFileStorage(path)).load() == [make_snapshot("P-1", image_bytes)]


def test_load_with_no_data_is_empty():
    assert ProjectStore(InMemoryStorage()).load() == []


@pytest.mark.parametrize(
    "blob",
    [b"not json", b"{}", b'[{"id": "x"}]', b"\xff\xfe", b'[{"id": "x", "imageBytes": "%%%"}]', OVERRUN_GOAL],
)
def test_load_with_corrupt_data_is_empty(blob):
    store = ProjectStore(InMemoryStorage({"savedProjects": blob}))
    assert store.load() == []
    assert store.projects == []


def test_decode_projects_raises_on_corrupt_data():
    with pytest.raises(ProjectDecodeError):
        decode_projects(b"[1]")


def test_encode_decode_preserve_order(image_bytes):
    projects = [make_snapshot(f"P-{i}", image_bytes, f"n{i}") for i in range(4)]
    assert [p.id for p in decode_projects(encode_projects(projects))] == ["P-0", "P-1", "P-2", "P-3"]


def test_remove_deletes_only_that_project(image_bytes):
    storage = InMemoryStorage()
    store = ProjectStore(storage)
    for project_id in ("P-1", "P-2", "P-3"):
        store.add(make_snapshot(project_id, image_bytes))
    assert store.remove("P-2")
    assert [p.id for p in store.projects] == ["P-1", "P-3"]
    assert [p.id for p in ProjectStore(storage).load()] == ["P-1", "P-3"]


def test_remove_unknown_id_is_noop(image_bytes):
    storage = InMemoryStorage()
    store = ProjectStore(storage)
    store.add(make_snapshot("P-1", image_bytes))
    before = storage.read("savedProjects")
    assert not store.remove("missing")
    assert [p.id for p in store.projects] == ["P-1"]
    assert storage.read("savedProjects") == before


def test_write_failure_is_reported_and_keeps_memory(image_bytes):
    store = ProjectStore(FailingStorage())
    assert store.add(make_snapshot("P-1", image_bytes)) is False
    assert [p.id for p in store.projects] == ["P-1"]
    store.add(make_snapshot("P-2", image_bytes))
    assert store.remove("P-1") is False
    assert [p.id for p in store.projects] == ["P-2"]


def test_custom_slot_is_used(image_bytes):
    storage = InMemoryStorage()
    ProjectStore(storage, slot="other").add(make_snapshot("P-1", image_bytes))
    assert storage.read("savedProjects") is None
    assert storage.read("other") is not None


def test_get_and_summaries(image_bytes):
    store = ProjectStore(InMemoryStorage(), thumbnail_factory=lambda data: b"thumb:" + data[:2])
    store.add(make_snapshot("P-1", image_bytes, "Reading"))
    assert store.get("P-1").project_name == "Reading"
    assert store.get("nope") is None
    (summary,) = store.summaries()
    assert (summary.id, summary.name, summary.thumbnail) == ("P-1", "Reading", b"thumb:" + image_bytes[:2])


def test_summaries_fall_back_to_image_when_thumbnail_fails():
    def broken(_data: bytes) -> bytes:
        raise ValueError("bad image")

    store = ProjectStore(InMemoryStorage(), thumbnail_factory=broken)
    store.add(make_snapshot("P-1", b"raw"))
    assert store.summaries()[0].thumbnail == b"raw"
