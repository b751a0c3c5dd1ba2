from __future__ import annotations

import binascii
import json
import logging
from typing import Callable, Iterable, List, Optional

from .models import ProjectSnapshot, ProjectSummary
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "savedProjects"

ThumbnailFactory = Callable[[bytes], bytes]


class ProjectDecodeError(ValueError):
    pass


def encode_projects(projects: Iterable[ProjectSnapshot]) -> bytes:
    return json.dumps([project.to_dict() for project in projects]).encode("utf-8")


def decode_projects(blob: bytes) -> List[ProjectSnapshot]:
    try:
        data = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ProjectDecodeError(f"Saved projects are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ProjectDecodeError("Saved projects must be a JSON array")
    try:
        return [ProjectSnapshot.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError, binascii.Error) as exc:
        raise ProjectDecodeError(f"Malformed project record: {exc}") from exc


class ProjectStore:
    """
    Owns the list of saved projects and mirrors it into one storage slot.

    Every mutation rewrites the whole list; there is no partial write.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        slot: str = DEFAULT_SLOT,
        thumbnail_factory: Optional[ThumbnailFactory] = None,
    ) -> None:
        self._storage = storage
        self._slot = slot
        self._thumbnail_factory = thumbnail_factory
        self._projects: List[ProjectSnapshot] = []

    @property
    def projects(self) -> List[ProjectSnapshot]:
        return list(self._projects)

    def load(self) -> List[ProjectSnapshot]:
        try:
            blob = self._storage.read(self._slot)
            projects = decode_projects(blob) if blob else []
        except Exception:
            # Corrupt or unreadable data counts as "nothing saved yet".
            logger.warning("Could not load saved projects from slot %r", self._slot, exc_info=True)
            projects = []
        self._projects = projects
        logger.debug("Loaded %d saved project(s)", len(projects))
        return list(projects)

    def save(self, projects: Optional[Iterable[ProjectSnapshot]] = None) -> bool:
        if projects is not None:
            self._projects = list(projects)
        try:
            self._storage.write(self._slot, encode_projects(self._projects))
        except Exception:
            logger.error("Failed to persist %d project(s)", len(self._projects), exc_info=True)
            return False
        return True

    def add(self, snapshot: ProjectSnapshot) -> bool:
        self._projects.append(snapshot)
        logger.info("Saving project %r (%s)", snapshot.project_name, snapshot.id)
        return self.save()

    def remove(self, project_id: str) -> bool:
        """
        Drop ``project_id`` and rewrite the slot.

        Returns ``False`` for an unknown id (nothing written) or when the write
        fails; in the latter case the project stays removed in memory.
        """
        remaining = [project for project in self._projects if project.id != project_id]
        if len(remaining) == len(self._projects):
            return False
        self._projects = remaining
        logger.info("Deleted project %s", project_id)
        return self.save()

    def get(self, project_id: str) -> Optional[ProjectSnapshot]:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def summaries(self) -> List[ProjectSummary]:
        summaries = []
        for project in self._projects:
            thumbnail = project.image_bytes
            if self._thumbnail_factory is not None:
                try:
                    thumbnail = self._thumbnail_factory(project.image_bytes)
                except Exception:
                    logger.debug("Thumbnail generation failed for %s", project.id, exc_info=True)
            summaries.append(ProjectSummary(id=project.id, name=project.project_name, thumbnail=thumbnail))
        return summaries
