from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from .grid import GridDimensions, grid_dimensions
from .models import Cell, Goal, ProjectSnapshot, new_id
from .reveal import cells_to_reveal, initialize_cells, reveal_random, revealed_count

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


@dataclass(frozen=True)
class ProgressResult:
    goal: Goal
    requested: int
    revealed: int


class ProjectSession:
    """In-memory state of the project being edited."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.image_bytes: Optional[bytes] = None
        self.project_name: str = ""
        self.goals: List[Goal] = []
        self.cells: List[Cell] = []
        self.grid_visible = False

    @property
    def total_cells(self) -> int:
        return sum(goal.total for goal in self.goals)

    @property
    def remaining_total(self) -> int:
        return sum(goal.remaining for goal in self.goals)

    @property
    def dimensions(self) -> GridDimensions:
        return grid_dimensions(self.total_cells)

    @property
    def revealed_count(self) -> int:
        return revealed_count(self.cells)

    @property
    def has_image(self) -> bool:
        return self.image_bytes is not None

    def set_image(self, data: bytes) -> None:
        self.image_bytes = bytes(data)

    def goal(self, goal_id: str) -> Optional[Goal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def add_goal(self, text: str, quantity: int) -> Goal:
        if quantity < 0:
            raise ValueError("Goal quantity must be non-negative")
        goal = Goal.create(text, quantity)
        self.goals.append(goal)
        return goal

    def update_goal(self, goal_id: str, text: str, quantity: int) -> Optional[Goal]:
        if quantity < 0:
            raise ValueError("Goal quantity must be non-negative")
        for index, goal in enumerate(self.goals):
            if goal.id == goal_id:
                updated = goal.edited(text, quantity)
                self.goals[index] = updated
                return updated
        return None

    def divide(self) -> GridDimensions:
        self.cells = initialize_cells(self.total_cells, self.cells)
        self.grid_visible = True
        return self.dimensions

    def apply_progress(self, goal_id: str, amount: int) -> Optional[ProgressResult]:
        for index, goal in enumerate(self.goals):
            if goal.id != goal_id:
                continue
            updated = goal.apply(amount)
            if updated is None:
                logger.debug("Rejected amount %s for goal %s (remaining %s)", amount, goal_id, goal.remaining)
                return None
            self.goals[index] = updated
            # Each unit of a goal owns one cell, so its cell count is its total.
            requested = cells_to_reveal(goal.total, amount, goal.total)
            self.cells, revealed = reveal_random(self.cells, requested, self._rng)
            return ProgressResult(goal=updated, requested=requested, revealed=revealed)
        return None

    def snapshot(self, name: Optional[str] = None, image_bytes: Optional[bytes] = None) -> ProjectSnapshot:
        data = image_bytes if image_bytes is not None else self.image_bytes
        if data is None:
            raise ValueError("Cannot snapshot a project without an image")
        # Sized to the current total; the live session's cells are left alone.
        cells = initialize_cells(self.total_cells, self.cells)
        title = (name if name is not None else self.project_name).strip()
        if not title:
            title = self.goals[0].text if self.goals else UNTITLED
        return ProjectSnapshot(
            id=new_id(),
            image_bytes=data,
            goals=list(self.goals),
            project_name=title,
            cells=cells,
            grid_visible=self.grid_visible,
        )

    def restore(self, snapshot: ProjectSnapshot) -> None:
        self.image_bytes = snapshot.image_bytes
        self.project_name = snapshot.project_name
        self.goals = list(snapshot.goals)
        self.cells = list(snapshot.cells)
        self.grid_visible = snapshot.grid_visible

    def clear(self) -> None:
        self.image_bytes = None
        self.project_name = ""
        self.goals = []
        self.cells = []
        self.grid_visible = False
