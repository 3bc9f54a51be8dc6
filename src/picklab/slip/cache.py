"""Local key/value caches holding the serialized slip."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from picklab.slip.types import SlipItem, dump_items, load_items

logger = logging.getLogger(__name__)


class LocalCache(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryCache:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileCache:
    """One UTF-8 file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SlipCache:
    """Best-effort slip persistence on top of a ``LocalCache``; never raises."""

    def __init__(self, backend: LocalCache, key: str) -> None:
        self.backend = backend
        self.key = key

    def read(self) -> list[SlipItem]:
        try:
            payload = self.backend.get(self.key)
        except Exception as exc:
            logger.error("Error loading betting slip from cache: %s", exc)
            return []
        if not payload:
            return []
        try:
            return load_items(payload)
        except ValidationError as exc:
            logger.warning("Discarding unreadable cached slip: %s", exc)
            return []

    def write(self, items: list[SlipItem]) -> None:
        try:
            self.backend.set(self.key, dump_items(items))
        except Exception as exc:
            logger.error("Error saving betting slip to cache: %s", exc)

    def clear(self) -> None:
        try:
            self.backend.delete(self.key)
        except Exception as exc:
            logger.error("Error clearing cached betting slip: %s", exc)
