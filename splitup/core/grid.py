from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class GridDimensions:
    rows: int = 0
    columns: int = 0

    @property
    def capacity(self) -> int:
        return self.rows * self.columns

    def to_tuple(self) -> Tuple[int, int]:
        return self.rows, self.columns


def grid_dimensions(total_cells: int) -> GridDimensions:
    """
    Near-square grid that holds ``total_cells`` cells.

    The last row may be partially filled; the grid never carries a fully
    empty row.
    """
    if total_cells < 0:
        raise ValueError(f"total_cells must be non-negative, got {total_cells}")
    if total_cells == 0:
        return GridDimensions(0, 0)
    columns = math.isqrt(total_cells)
    if columns * columns < total_cells:
        columns += 1
    rows = -(-total_cells // columns)
    return GridDimensions(rows, columns)


def cell_coordinate(index: int, columns: int) -> Tuple[int, int]:
    return index // columns, index % columns


def cell_rect(
    index: int, dims: GridDimensions, width: float, height: float
) -> Tuple[float, float, float, float]:
    """Pixel box ``(x0, y0, x1, y1)`` of a cell on a ``width`` x ``height`` canvas."""
    row, column = cell_coordinate(index, dims.columns)
    cell_w = width / dims.columns
    cell_h = height / dims.rows
    x0 = column * cell_w
    y0 = row * cell_h
    return x0, y0, x0 + cell_w, y0 + cell_h
