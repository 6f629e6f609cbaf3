from __future__ import annotations

import asyncio
from typing import Optional

from architect.core.event_bus import EventEmitter
from architect.core.exceptions import CycleCancelled
from architect.core.orchestrator import Orchestrator
from architect.utils.logging import get_logger
from architect.utils.schemas import FactoryReport

LOGGER = get_logger(__name__)

DEFAULT_CYCLE_DELAY_SECONDS = 10.0


class CycleDriver:
    """
    Runs build cycles back to back with a fixed pause in between.

    The loop stops on the first failed cycle, when the stop event is set, or
    after ``max_cycles``. It never retries a failed cycle.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        emitter: Optional[EventEmitter] = None,
        delay: float = DEFAULT_CYCLE_DELAY_SECONDS,
    ) -> None:
        self._orchestrator = orchestrator
        self._emitter = emitter or EventEmitter()
        self.delay = delay
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task[FactoryReport]] = None

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    def request_stop(self, cancel: bool = False) -> None:
        """Stop after the current step; with ``cancel`` also cancel the running task."""
        self._stop_event.set()
        if cancel and self._task is not None and not self._task.done():
            self._task.cancel()

    def start(self, max_cycles: Optional[int] = None) -> "asyncio.Task[FactoryReport]":
        self._task = asyncio.create_task(self.run(max_cycles=max_cycles))
        return self._task

    async def run(
        self,
        stop_event: Optional[asyncio.Event] = None,
        max_cycles: Optional[int] = None,
    ) -> FactoryReport:
        if stop_event is not None:
            self._stop_event = stop_event
        stop = self._stop_event
        completed = 0

        await self._emitter.emit("🏭 FACTORY STARTED", "system")
        while True:
            if stop.is_set():
                return await self._finish(completed, "stopped")

            try:
                await self._orchestrator.execute_full_cycle(stop)
            except CycleCancelled:
                return await self._finish(completed, "stopped")
            except asyncio.CancelledError:
                LOGGER.info("Factory task cancelled after %d cycle(s)", completed)
                raise
            except Exception as exc:
                LOGGER.error("Factory stopping after failed cycle: %s", exc)
                await self._emitter.emit(f"💥 FACTORY ERROR: {exc}", "error")
                return FactoryReport(cycles_completed=completed, reason="failed", error=str(exc))

            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                return await self._finish(completed, "max_cycles")

            await self._emitter.emit(f"⏳ Waiting {self.delay:g}s before next cycle...", "system")
            await self._pause(stop)

    async def _pause(self, stop: asyncio.Event) -> None:
        try:
            await asyncio.wait_for(stop.wait(), timeout=self.delay)
        except asyncio.TimeoutError:
            pass

    async def _finish(self, completed: int, reason: str) -> FactoryReport:
        await self._emitter.emit(f"🛑 FACTORY STOPPED after {completed} cycle(s)", "system")
        return FactoryReport(cycles_completed=completed, reason=reason)
