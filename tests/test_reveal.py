from __future__ import annotations

import random

from splitup.core.grid import grid_dimensions
from splitup.core.models import Cell
from splitup.core.reveal import (
    cells_to_reveal,
    initialize_cells,
    reveal_mask,
    reveal_random,
    revealed_count,
)


def test_initialize_builds_hidden_positions():
    cells = initialize_cells(5)
    assert [c.position for c in cells] == [0, 1, 2, 3, 4]
    assert not any(c.revealed for c in cells)


def test_initialize_is_idempotent():
    previous = [Cell(0), Cell(1, True), Cell(2), Cell(3, True)]
    assert initialize_cells(6, previous) == initialize_cells(6, previous)


def test_resize_keeps_revealed_positions():
    previous = initialize_cells(10)
    previous[5] = Cell(5, True)
    grown = initialize_cells(20, previous)
    assert len(grown) == 20
    assert grown[5].revealed
    assert revealed_count(grown) == 1


def test_shrink_drops_positions_outside_new_total():
    previous = [Cell(i, True) for i in range(8)]
    shrunk = initialize_cells(3, previous)
    assert shrunk == [Cell(0, True), Cell(1, True), Cell(2, True)]


def test_reveal_random_reveals_exactly_count(rng):
    cells = initialize_cells(30)
    updated, revealed = reveal_random(cells, 7, rng)
    assert revealed == 7
    assert revealed_count(updated) == 7
    assert revealed_count(cells) == 0


def test_reveal_random_never_touches_revealed_cells(rng):
    cells = initialize_cells(10)
    cells[0] = Cell(0, True)
    cells[9] = Cell(9, True)
    updated, revealed = reveal_random(cells, 4, rng)
    assert revealed == 4
    assert revealed_count(updated) == 6
    assert updated[0].revealed and updated[9].revealed


def test_reveal_random_clamps_to_hidden_cells(rng):
    cells = initialize_cells(5)
    cells[2] = Cell(2, True)
    updated, revealed = reveal_random(cells, 50, rng)
    assert revealed == 4
    assert all(c.revealed for c in updated)


def test_reveal_random_with_zero_or_negative_count(rng):
    cells = initialize_cells(4)
    assert reveal_random(cells, 0, rng) == (cells, 0)
    assert reveal_random(cells, -3, rng)[1] == 0


def test_reveal_random_is_deterministic_for_a_seed():
    cells = initialize_cells(40)
    first, _ = reveal_random(cells, 10, random.Random(7))
    second, _ = reveal_random(cells, 10, random.Random(7))
    assert first == second


def test_reveal_random_covers_every_position_eventually():
    seen = set()
    source = random.Random(3)
    for _ in range(200):
        updated, _ = reveal_random(initialize_cells(6), 1, source)
        seen.update(c.position for c in updated if c.revealed)
    assert seen == set(range(6))


def test_cells_to_reveal_is_proportional():
    assert cells_to_reveal(100, 25, 100) == 25
    assert cells_to_reveal(10, 3, 7) == 4
    assert cells_to_reveal(3, 1, 3) == 1


def test_cells_to_reveal_truncates_float_proportion():
    assert cells_to_reveal(49, 1, 49) == 0
    assert cells_to_reveal(49, 49, 49) == 49


def test_cells_to_reveal_with_zero_total():
    assert cells_to_reveal(0, 5, 0) == 0


def test_reveal_mask_shape_and_positions():
    cells = initialize_cells(10)
    cells[5] = Cell(5, True)
    mask = reveal_mask(cells, grid_dimensions(10))
    assert mask.shape == (3, 4)
    assert mask[1, 1]
    assert mask.sum() == 1
