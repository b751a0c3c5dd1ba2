from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


def new_id() -> str:
    return str(uuid.uuid4()).upper()


def parse_quantity(raw: Any) -> Optional[int]:
    """Parse a user-entered quantity; returns ``None`` for anything but a non-negative integer."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, float):
        if not raw.is_integer() or raw < 0:
            return None
        return int(raw)
    text = str(raw).strip()
    if not text.isascii() or not text.isdigit():
        return None
    return int(text)


@dataclass(frozen=True)
class Goal:
    id: str
    text: str
    total: int
    remaining: int
    completed: bool = False

    def __post_init__(self) -> None:
        if self.total < 0 or not 0 <= self.remaining <= self.total:
            raise ValueError(f"Goal {self.id!r} has remaining {self.remaining} outside 0..{self.total}")
        # Completion always follows the remaining count, whatever was stored.
        object.__setattr__(self, "completed", self.remaining == 0)

    @classmethod
    def create(cls, text: str, quantity: int) -> "Goal":
        return cls(id=new_id(), text=text, total=quantity, remaining=quantity, completed=quantity == 0)

    @property
    def done(self) -> int:
        return self.total - self.remaining

    @property
    def progress(self) -> Tuple[int, int]:
        return self.done, self.total

    @property
    def progress_label(self) -> str:
        return f"{self.done}/{self.total}"

    def edited(self, text: str, quantity: int) -> "Goal":
        # Changing the total always restarts the goal.
        return replace(self, text=text, total=quantity, remaining=quantity, completed=quantity == 0)

    def apply(self, amount: int) -> Optional["Goal"]:
        if amount <= 0 or amount > self.remaining:
            return None
        remaining = self.remaining - amount
        return replace(self, remaining=remaining, completed=remaining == 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "total": self.total,
            "remaining": self.remaining,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            total=int(data["total"]),
            remaining=int(data["remaining"]),
            completed=bool(data.get("completed", False)),
        )


@dataclass(frozen=True)
class Cell:
    position: int
    revealed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"revealed": self.revealed, "position": self.position}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cell":
        return cls(position=int(data["position"]), revealed=bool(data.get("revealed", False)))


@dataclass
class ProjectSnapshot:
    """A saved bundle of image, goals and cell state."""

    id: str
    image_bytes: bytes
    goals: List[Goal] = field(default_factory=list)
    project_name: str = ""
    cells: List[Cell] = field(default_factory=list)
    grid_visible: bool = False

    @property
    def revealed_count(self) -> int:
        return sum(1 for cell in self.cells if cell.revealed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "imageBytes": base64.b64encode(self.image_bytes).decode("ascii"),
            "goals": [goal.to_dict() for goal in self.goals],
            "projectName": self.project_name,
            "cells": [cell.to_dict() for cell in self.cells],
            "gridVisible": self.grid_visible,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSnapshot":
        return cls(
            id=str(data["id"]),
            image_bytes=base64.b64decode(data["imageBytes"], validate=True),
            goals=[Goal.from_dict(item) for item in data.get("goals", [])],
            project_name=str(data.get("projectName", "")),
            cells=[Cell.from_dict(item) for item in data.get("cells", [])],
            grid_visible=bool(data.get("gridVisible", False)),
        )


@dataclass(frozen=True)
class ProjectSummary:
    id: str
    name: str
    thumbnail: bytes
