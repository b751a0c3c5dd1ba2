from __future__ import annotations

import logging
import random
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from .config import AppConfig, DEFAULT_CONFIG
from .grid import GridDimensions
from .imaging import ImageDecodeError, load_image, prepare_project_image
from .models import Goal, ProjectSnapshot, ProjectSummary
from .session import ProgressResult, ProjectSession
from .store import ProjectStore

logger = logging.getLogger(__name__)


class ProjectController(QObject):
    image_changed = Signal(object)
    goals_changed = Signal(list)
    cells_changed = Signal(list)
    projects_changed = Signal(list)
    log_emitted = Signal(str)

    def __init__(
        self,
        store: ProjectStore,
        config: Optional[AppConfig] = None,
        session: Optional[ProjectSession] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or DEFAULT_CONFIG
        self._store = store
        self._session = session or ProjectSession(random.Random(self._config.seed))

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def session(self) -> ProjectSession:
        return self._session

    @property
    def dimensions(self) -> GridDimensions:
        return self._session.dimensions

    def load_projects(self) -> List[ProjectSummary]:
        self._store.load()
        summaries = self._store.summaries()
        self.projects_changed.emit(summaries)
        return summaries

    def project_summaries(self) -> List[ProjectSummary]:
        return self._store.summaries()

    def set_image(self, data: bytes) -> bool:
        try:
            load_image(data)
        except ImageDecodeError as exc:
            self.log_emitted.emit(f"Could not open image: {exc}")
            return False
        self._session.set_image(data)
        self.image_changed.emit(data)
        self.log_emitted.emit("Image loaded.")
        return True

    def set_project_name(self, name: str) -> None:
        self._session.project_name = name

    def add_goal(self, text: str, quantity: int) -> Goal:
        goal = self._session.add_goal(text, quantity)
        self._emit_goals()
        self.log_emitted.emit(f"Added goal '{goal.text}' ({goal.total}).")
        return goal

    def update_goal(self, goal_id: str, text: str, quantity: int) -> Optional[Goal]:
        goal = self._session.update_goal(goal_id, text, quantity)
        if goal is not None:
            self._emit_goals()
            self.log_emitted.emit(f"Updated goal '{goal.text}'.")
        return goal

    def divide(self) -> GridDimensions:
        dims = self._session.divide()
        self.cells_changed.emit(list(self._session.cells))
        self.log_emitted.emit(f"Divided image into {dims.rows} x {dims.columns} grid.")
        return dims

    def apply_progress(self, goal_id: str, amount: int) -> Optional[ProgressResult]:
        result = self._session.apply_progress(goal_id, amount)
        if result is None:
            self.log_emitted.emit("Amount must be between 1 and the remaining quantity.")
            return None
        self._emit_goals()
        self.cells_changed.emit(list(self._session.cells))
        message = f"'{result.goal.text}' {result.goal.progress_label}: revealed {result.revealed} cell(s)."
        if result.goal.completed:
            message += " Goal complete!"
        self.log_emitted.emit(message)
        return result

    def save_project(self) -> Optional[ProjectSnapshot]:
        if not self._session.has_image:
            self.log_emitted.emit("Pick an image before saving.")
            return None
        try:
            image = prepare_project_image(self._session.image_bytes, self._config.image.project_image_size)
        except ImageDecodeError as exc:
            self.log_emitted.emit(f"Could not save project image: {exc}")
            return None
        snapshot = self._session.snapshot(image_bytes=image)
        if self._store.add(snapshot):
            self.log_emitted.emit(f"Saved project '{snapshot.project_name}'.")
        else:
            self.log_emitted.emit("Project kept in memory but could not be written to storage.")
        self.projects_changed.emit(self._store.summaries())
        return snapshot

    def open_project(self, project_id: str) -> bool:
        snapshot = self._store.get(project_id)
        if snapshot is None:
            return False
        self._session.restore(snapshot)
        self.image_changed.emit(snapshot.image_bytes)
        self._emit_goals()
        self.cells_changed.emit(list(self._session.cells))
        self.log_emitted.emit(f"Opened project '{snapshot.project_name}'.")
        return True

    def delete_project(self, project_id: str) -> bool:
        """Return whether the project was dropped from the list, written or not."""
        if self._store.get(project_id) is None:
            return False
        if self._store.remove(project_id):
            self.log_emitted.emit("Project deleted.")
        else:
            self.log_emitted.emit("Project removed in memory but could not be written to storage.")
        self.projects_changed.emit(self._store.summaries())
        return True

    def clear(self) -> None:
        self._session.clear()
        self.image_changed.emit(None)
        self._emit_goals()
        self.cells_changed.emit([])

    def _emit_goals(self) -> None:
        self.goals_changed.emit(list(self._session.goals))
