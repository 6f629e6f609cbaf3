from __future__ import annotations

from typing import Optional

from architect.core.event_bus import EventEmitter
from architect.core.exceptions import StoreError
from architect.memory.fallback import KeyValueStore, save_fallback_record
from architect.memory.record_store import RecordStore
from architect.utils.logging import get_logger
from architect.utils.schemas import CycleResult, ProjectRecord

LOGGER = get_logger(__name__)


class CloserAgent:
    """Persists the finished project: remote store first, local fallback once on failure."""

    role = "closer"

    def __init__(
        self,
        store: RecordStore,
        fallback: KeyValueStore,
        emitter: Optional[EventEmitter] = None,
    ) -> None:
        self._store = store
        self._fallback = fallback
        self._emitter = emitter or EventEmitter()

    async def close(self, record: ProjectRecord) -> CycleResult:
        await self._emitter.emit("📦 AGENT CLOSER: Packaging project...", "agent")
        try:
            await self._store.insert_project(record)
            await self._emitter.emit("✅ CLOSER: Project saved to record store", "success")
        except StoreError as exc:
            LOGGER.warning("Primary store rejected %r: %s", record.name, exc)
            await self._emitter.emit(
                f"⚠️ CLOSER: DB save failed ({exc}), using local storage", "warning"
            )
            try:
                key = await save_fallback_record(self._fallback, record)
            except StoreError as fallback_exc:
                await self._emitter.emit(f"❌ CLOSER: Local save failed: {fallback_exc}", "error")
                raise
            await self._emitter.emit(f"✅ CLOSER: Project saved locally as {key}", "success")

        return CycleResult(project=record)
