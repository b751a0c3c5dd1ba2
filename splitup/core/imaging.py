from __future__ import annotations

import io
from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from .grid import GridDimensions, cell_rect
from .models import Cell
from .reveal import reveal_mask


class ImageDecodeError(ValueError):
    pass


def load_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Unsupported or corrupt image data: {exc}") from exc
    return ImageOps.exif_transpose(img).convert("RGB")


def to_png_bytes(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def fill_square(img: Image.Image, size: int) -> Image.Image:
    """Scale to fill a ``size`` x ``size`` square, cropping the overflow."""
    return ImageOps.fit(img, (size, size), method=Image.Resampling.LANCZOS)


def prepare_project_image(data: bytes, size: int = 300) -> bytes:
    return to_png_bytes(fill_square(load_image(data), size))


def make_thumbnail(data: bytes, size: int = 160) -> bytes:
    return to_png_bytes(fill_square(load_image(data), size))


def placeholder_image(size: int, color: Tuple[int, int, int] = (8, 8, 8)) -> Image.Image:
    return Image.new("RGB", (size, size), color)


def render_reveal(
    data: Optional[bytes],
    cells: Sequence[Cell],
    dims: GridDimensions,
    size: int = 640,
    grid_visible: bool = True,
    line_color: Tuple[int, int, int] = (255, 255, 255),
    line_width: int = 1,
    grayscale_strength: float = 1.0,
) -> Image.Image:
    """
    Compose the project view: a desaturated base image with revealed cells
    shown in colour and hidden cells outlined.
    """
    if data is None:
        return placeholder_image(size)
    color = fill_square(load_image(data), size)
    gray = ImageOps.grayscale(color).convert("RGB")
    strength = max(0.0, min(1.0, float(grayscale_strength)))
    base = Image.blend(color, gray, strength)
    if not grid_visible or dims.capacity == 0:
        return base

    mask = np.zeros((size, size), dtype=np.uint8)
    revealed = reveal_mask(cells, dims)
    for row, column in zip(*np.nonzero(revealed)):
        index = int(row) * dims.columns + int(column)
        x0, y0, x1, y1 = cell_rect(index, dims, size, size)
        mask[int(round(y0)):int(round(y1)), int(round(x0)):int(round(x1))] = 255
    out = Image.composite(color, base, Image.fromarray(mask))

    draw = ImageDraw.Draw(out)
    for cell in cells:
        if cell.revealed or cell.position >= dims.capacity:
            continue
        x0, y0, x1, y1 = cell_rect(cell.position, dims, size, size)
        draw.rectangle((x0, y0, x1, y1), outline=line_color, width=line_width)
    return out
