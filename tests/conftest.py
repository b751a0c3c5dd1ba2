from __future__ import annotations

import io
import random
import sys
from pathlib import Path

import pytest
from PIL import Image

# Ensure the repository root is importable without installing the package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from splitup.core.models import Goal  # noqa: E402


def png_bytes(size=(40, 30), color=(200, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def image_bytes() -> bytes:
    return png_bytes()


@pytest.fixture()
def goals() -> list[Goal]:
    return [
        Goal(id="G-1", text="Books", total=6, remaining=6),
        Goal(id="G-2", text="Runs", total=4, remaining=1),
    ]
