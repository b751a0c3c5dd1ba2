from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .grid import GridDimensions
from .models import Cell


def initialize_cells(total_cells: int, previous_cells: Iterable[Cell] = ()) -> List[Cell]:
    """
    Build cells ``0..total_cells-1``, carrying over the reveal flag of every
    position that already existed.
    """
    revealed = {cell.position for cell in previous_cells if cell.revealed}
    return [Cell(position=position, revealed=position in revealed) for position in range(total_cells)]


def reveal_random(
    cells: Sequence[Cell], count: int, rng: Optional[random.Random] = None
) -> Tuple[List[Cell], int]:
    """
    Reveal up to ``count`` distinct hidden cells chosen uniformly at random.

    Returns the updated cell list and the number of cells actually revealed,
    which is less than ``count`` once the hidden cells run out.
    """
    rng = rng or random.Random()
    updated = list(cells)
    hidden = [index for index, cell in enumerate(updated) if not cell.revealed]
    take = max(0, min(count, len(hidden)))
    # Partial Fisher-Yates: the first ``take`` slots end up a uniform sample.
    for i in range(take):
        j = rng.randrange(i, len(hidden))
        hidden[i], hidden[j] = hidden[j], hidden[i]
        index = hidden[i]
        updated[index] = Cell(position=updated[index].position, revealed=True)
    return updated, take


def cells_to_reveal(goal_cell_count: int, amount_applied: int, goal_total: int) -> int:
    if goal_total <= 0:
        return 0
    # Truncates a float product, so 49 * (1 / 49) yields 0. Reveal count and
    # goal completion are allowed to drift apart.
    return int(goal_cell_count * (amount_applied / goal_total))


def revealed_count(cells: Iterable[Cell]) -> int:
    return sum(1 for cell in cells if cell.revealed)


def reveal_mask(cells: Sequence[Cell], dims: GridDimensions) -> np.ndarray:
    mask = np.zeros((dims.rows, dims.columns), dtype=bool)
    if dims.columns == 0:
        return mask
    for cell in cells:
        if cell.revealed and cell.position < dims.capacity:
            mask[cell.position // dims.columns, cell.position % dims.columns] = True
    return mask
