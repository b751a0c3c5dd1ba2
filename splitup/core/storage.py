from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(OSError):
    pass


class KeyValueStorage(Protocol):
    """Named-slot persistence the project store writes through."""

    def read(self, key: str) -> Optional[bytes]:
        ...

    def write(self, key: str, data: bytes) -> None:
        ...


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._slots: Dict[str, bytes] = dict(initial or {})

    def read(self, key: str) -> Optional[bytes]:
        return self._slots.get(key)

    def write(self, key: str, data: bytes) -> None:
        self._slots[key] = bytes(data)


class JsonFileStorage:
    """
    Keeps every slot in a single JSON file, values base64-encoded.

    Writes replace the whole file through a temporary sibling so a reader
    sees either the previous document or the new one.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is None:
            path = Path.cwd() / ".splitup_storage.json"
        self.path = Path(path)

    def read(self, key: str) -> Optional[bytes]:
        slots = self._read_slots()
        value = slots.get(key)
        if value is None:
            return None
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, TypeError) as exc:
            raise StorageError(f"Slot {key!r} in {self.path} is not valid base64") from exc

    def write(self, key: str, data: bytes) -> None:
        try:
            slots = self._read_slots()
        except StorageError:
            backup = self.path.with_name(self.path.name + ".corrupt")
            os.replace(self.path, backup)
            logger.warning("Moved unreadable storage file %s aside to %s", self.path, backup)
            slots = {}
        slots[key] = base64.b64encode(data).decode("ascii")
        self._atomic_write(json.dumps(slots, indent=2).encode("utf-8"))

    def _read_slots(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Failed to read storage file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} does not contain a JSON object")
        return data

    def _atomic_write(self, payload: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=self.path.name, dir=self.path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
