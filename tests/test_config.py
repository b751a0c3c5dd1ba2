from __future__ import annotations

import json

import pytest

from splitup.core.config import AppConfig, load_config


def test_defaults():
    config = AppConfig()
    assert config.storage.slot == "savedProjects"
    assert config.image.project_image_size == 300
    assert config.line_color() == (255, 255, 255)
    assert [name for name, _ in config.iter_sections()] == ["grid", "image", "storage"]


def test_update_from_mapping_merges_known_keys():
    config = AppConfig()
    config.update_from_mapping(
        {
            "grid": {"line_width": 3, "unknown": 1},
            "storage": {"path": "/tmp/x.json"},
            "missing_section": {"a": 1},
            "image": "not a mapping",
            "seed": 42,
        }
    )
    assert config.grid.line_width == 3
    assert not hasattr(config.grid, "unknown")
    assert config.storage.path == "/tmp/x.json"
    assert config.image.canvas_size == 640
    assert config.seed == 42


def test_load_config_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"grid": {"line_color": [0, 0, 0]}, "image": {"thumbnail_size": 90}}))
    config = load_config(path)
    assert config.line_color() == (0, 0, 0)
    assert config.image.thumbnail_size == 90
    assert config.to_dict()["image"]["thumbnail_size"] == 90


def test_load_config_without_path_uses_defaults():
    assert load_config(None) == AppConfig()


def test_load_config_rejects_non_object(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(path)
