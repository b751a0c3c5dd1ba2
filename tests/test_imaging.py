from __future__ import annotations

import io

import pytest
from PIL import Image

from splitup.core.grid import grid_dimensions
from splitup.core.imaging import (
    ImageDecodeError,
    load_image,
    make_thumbnail,
    prepare_project_image,
    render_reveal,
)
from splitup.core.models import Cell
from splitup.core.reveal import initialize_cells


def test_load_image_rejects_garbage():
    with pytest.raises(ImageDecodeError):
        load_image(b"definitely not an image")


def test_prepare_project_image_is_square_png(image_bytes):
    data = prepare_project_image(image_bytes, 300)
    img = Image.open(io.BytesIO(data))
    assert img.format == "PNG"
    assert img.size == (300, 300)


def test_thumbnail_size(image_bytes):
    assert Image.open(io.BytesIO(make_thumbnail(image_bytes, 64))).size == (64, 64)


def test_render_without_image_is_placeholder():
    img = render_reveal(None, [], grid_dimensions(0), size=50)
    assert img.size == (50, 50)
    assert img.getpixel((25, 25)) == (8, 8, 8)


def test_render_hidden_grid_is_grayscale(image_bytes):
    data = image_bytes
    img = render_reveal(data, initialize_cells(4), grid_dimensions(4), size=100, grid_visible=False)
    r, g, b = img.getpixel((50, 50))
    assert r == g == b


def test_render_colours_revealed_cells_and_outlines_hidden(image_bytes):
    data = image_bytes
    cells = initialize_cells(4)
    cells[0] = Cell(0, True)
    img = render_reveal(data, cells, grid_dimensions(4), size=100, line_color=(0, 255, 0))
    assert all(abs(a - b) <= 2 for a, b in zip(img.getpixel((25, 25)), (200, 40, 40)))
    r, g, b = img.getpixel((75, 75))
    assert r == g == b
    assert img.getpixel((50, 75)) == (0, 255, 0)
