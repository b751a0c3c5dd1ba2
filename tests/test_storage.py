from __future__ import annotations

import json

import pytest

from splitup.core.storage import InMemoryStorage, JsonFileStorage, StorageError


def test_memory_storage_round_trip():
    storage = InMemoryStorage()
    assert storage.read("slot") is None
    storage.write("slot", b"\x00\x01payload")
    assert storage.read("slot") == b"\x00\x01payload"


def test_file_storage_missing_file_reads_none(tmp_path):
    storage = JsonFileStorage(tmp_path / "state.json")
    assert storage.read("savedProjects") is None


def test_file_storage_keeps_other_slots(tmp_path):
    path = tmp_path / "nested" / "state.json"
    storage = JsonFileStorage(path)
    storage.write("a", b"first")
    storage.write("b", b"\xff\xfe binary")
    reopened = JsonFileStorage(path)
    assert reopened.read("a") == b"first"
    assert reopened.read("b") == b"\xff\xfe binary"
    assert sorted(json.loads(path.read_text())) == ["a", "b"]


def test_file_storage_leaves_no_temp_files(tmp_path):
    storage = JsonFileStorage(tmp_path / "state.json")
    storage.write("slot", b"data")
    storage.write("slot", b"more data")
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_file_storage_corrupt_file_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")
    with pytest.raises(StorageError):
        JsonFileStorage(path).read("slot")


def test_file_storage_overwrites_corrupt_file_on_write(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]")
    storage = JsonFileStorage(path)
    storage.write("slot", b"fresh")
    assert storage.read("slot") == b"fresh"


def test_file_storage_moves_corrupt_file_aside(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")
    JsonFileStorage(path).write("slot", b"fresh")
    assert (tmp_path / "state.json.corrupt").read_text() == "{not json"
    assert JsonFileStorage(path).read("slot") == b"fresh"
