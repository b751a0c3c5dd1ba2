from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class GridConfig:
    line_color: List[int] = field(default_factory=lambda: [255, 255, 255])
    line_width: int = 1
    grayscale_strength: float = 1.0  # 0..1, 1 = fully desaturated base image


@dataclass
class ImageConfig:
    project_image_size: int = 300
    thumbnail_size: int = 160
    canvas_size: int = 640


@dataclass
class StorageConfig:
    path: str = ".splitup_storage.json"
    slot: str = "savedProjects"


@dataclass
class AppConfig:
    grid: GridConfig = field(default_factory=GridConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    seed: Optional[int] = None
    privacy_policy_url: str = "https://familykorotkey.github.io/splitup-privacy-policy/"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def line_color(self) -> Tuple[int, int, int]:
        r, g, b = (int(v) for v in self.grid.line_color[:3])
        return r, g, b

    def update_from_mapping(self, data: Dict[str, Any]) -> None:
        """Merge settings from a nested mapping into the config."""
        for section_name, section_values in data.items():
            if section_name in ("seed", "privacy_policy_url"):
                setattr(self, section_name, section_values)
                continue
            section = getattr(self, section_name, None)
            if section is None:
                continue
            if not isinstance(section_values, dict):
                continue
            for key, value in section_values.items():
                if hasattr(section, key):
                    setattr(section, key, value)

    def iter_sections(self) -> Iterable[Tuple[str, Any]]:
        yield "grid", self.grid
        yield "image", self.image
        yield "storage", self.storage


DEFAULT_CONFIG = AppConfig()


def load_config(path: Optional[Path]) -> AppConfig:
    config = AppConfig()
    if path is None:
        return config
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    config.update_from_mapping(data)
    logger.info("Loaded config from %s", path)
    return config
