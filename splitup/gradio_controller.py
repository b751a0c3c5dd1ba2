from __future__ import annotations

import logging
import random
import threading
from typing import Any, Dict, List, Optional

from splitup.core.config import DEFAULT_CONFIG, AppConfig
from splitup.core.imaging import ImageDecodeError, load_image, prepare_project_image, render_reveal
from splitup.core.models import Goal, ProjectSnapshot, ProjectSummary
from splitup.core.session import ProgressResult, ProjectSession
from splitup.core.store import ProjectStore

logger = logging.getLogger(__name__)

# Browser sessions share one ProjectStore; every store access holds this lock.
_STORE_LOCK = threading.Lock()


class GradioProjectController:
    """UI-agnostic controller tailored for Gradio callbacks."""

    def __init__(
        self,
        store: ProjectStore,
        config: Optional[AppConfig] = None,
        session: Optional[ProjectSession] = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._store = store
        self._session = session or ProjectSession(random.Random(self._config.seed))
        self._lock = threading.Lock()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def session(self) -> ProjectSession:
        return self._session

    def set_image(self, data: bytes) -> None:
        load_image(data)
        with self._lock:
            self._session.set_image(data)

    def set_project_name(self, name: str) -> None:
        with self._lock:
            self._session.project_name = name or ""

    def add_goal(self, text: str, quantity: int) -> Goal:
        with self._lock:
            return self._session.add_goal(text, quantity)

    def update_goal(self, goal_id: str, text: str, quantity: int) -> Optional[Goal]:
        with self._lock:
            return self._session.update_goal(goal_id, text, quantity)

    def divide(self) -> None:
        with self._lock:
            self._session.divide()

    def apply_progress(self, goal_id: str, amount: int) -> Optional[ProgressResult]:
        with self._lock:
            return self._session.apply_progress(goal_id, amount)

    def save_project(self) -> ProjectSnapshot:
        with self._lock:
            if not self._session.has_image:
                raise ValueError("Pick an image before saving.")
            image = prepare_project_image(self._session.image_bytes, self._config.image.project_image_size)
            snapshot = self._session.snapshot(image_bytes=image)
            with _STORE_LOCK:
                written = self._store.add(snapshot)
            if not written:
                logger.warning("Project %s saved in memory only", snapshot.id)
            return snapshot

    def open_project(self, project_id: str) -> bool:
        with self._lock:
            with _STORE_LOCK:
                snapshot = self._store.get(project_id)
            if snapshot is None:
                return False
            self._session.restore(snapshot)
            return True

    def delete_project(self, project_id: str) -> Optional[bool]:
        """
        ``None`` when no such project exists, otherwise whether the removal
        reached storage. A failed write still drops the project in memory.
        """
        with _STORE_LOCK:
            if self._store.get(project_id) is None:
                return None
            written = self._store.remove(project_id)
        if not written:
            logger.warning("Project %s removed in memory only", project_id)
        return written

    def clear(self) -> None:
        with self._lock:
            self._session.clear()

    def project_summaries(self) -> List[ProjectSummary]:
        with _STORE_LOCK:
            return self._store.summaries()

    def snapshot_payload(self) -> Dict[str, Any]:
        with self._lock:
            return _session_payload(self._session, self._config)


def _session_payload(session: ProjectSession, config: AppConfig) -> Dict[str, Any]:
    dims = session.dimensions
    try:
        image = render_reveal(
            session.image_bytes,
            session.cells,
            dims,
            size=config.image.canvas_size,
            grid_visible=session.grid_visible,
            line_color=config.line_color(),
            line_width=config.grid.line_width,
            grayscale_strength=config.grid.grayscale_strength,
        )
    except ImageDecodeError:
        logger.warning("Stored image could not be rendered", exc_info=True)
        image = None
    return {
        "image": image,
        "project_name": session.project_name,
        "goals": list(session.goals),
        "total": session.total_cells,
        "remaining": session.remaining_total,
        "rows": dims.rows,
        "columns": dims.columns,
        "revealed": session.revealed_count,
        "grid_visible": session.grid_visible,
        "has_image": session.has_image,
    }
