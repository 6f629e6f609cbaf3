"""Local key-value persistence used when the remote store is unreachable."""
from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from architect.core.exceptions import StoreError
from architect.utils.logging import get_logger
from architect.utils.schemas import ProjectRecord

LOGGER = get_logger(__name__)

KEY_PREFIX = "project_"


class KeyValueStore(ABC):

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def has_item(self, key: str) -> bool:
        ...


class FileKeyValueStore(KeyValueStore):
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StoreError(f"Invalid fallback key: {key!r}")
        return self.root / f"{key}.json"

    def _write(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")

    async def set_item(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as exc:
            raise StoreError(f"Local fallback write failed: {exc}") from exc
        LOGGER.info("Fallback item saved: %s (%d bytes)", key, len(value))

    async def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def has_item(self, key: str) -> bool:
        return self._path(key).exists()


class InMemoryKeyValueStore(KeyValueStore):

    def __init__(self) -> None:
        self.items: Dict[str, str] = {}

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def has_item(self, key: str) -> bool:
        return key in self.items


async def save_fallback_record(store: KeyValueStore, record: ProjectRecord) -> str:
    """Write the record once under a time-derived key and return that key."""
    stamp = int(time.time() * 1000)
    key = f"{KEY_PREFIX}{stamp}"
    suffix = 1
    while await store.has_item(key):
        key = f"{KEY_PREFIX}{stamp}_{suffix}"
        suffix += 1

    await store.set_item(key, json.dumps(record.to_payload(), ensure_ascii=False))
    return key
