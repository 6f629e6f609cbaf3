from __future__ import annotations

import asyncio
from typing import Awaitable, Dict, List, Optional

from architect.agents.builders import GrowthAgent, IntegratorAgent, LogicAgent, UIAgent
from architect.agents.closer import CloserAgent
from architect.agents.qa import DEFAULT_REVIEW_CHARS, QAAgent
from architect.agents.scout import ScoutAgent
from architect.core.event_bus import EventEmitter
from architect.core.exceptions import CycleCancelled, CycleTimeoutError
from architect.core.state import CycleState
from architect.llm.adapter import BaseLLMAdapter
from architect.memory.fallback import KeyValueStore
from architect.memory.record_store import RecordStore
from architect.utils.logging import get_logger
from architect.utils.schemas import BuildArtifacts, CycleResult, Idea, ProjectRecord

LOGGER = get_logger(__name__)


class Orchestrator:
    """Runs one build cycle: ideate, build in parallel, review, persist."""

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        store: RecordStore,
        fallback: KeyValueStore,
        emitter: Optional[EventEmitter] = None,
        *,
        scout_max_attempts: Optional[int] = None,
        qa_review_chars: int = DEFAULT_REVIEW_CHARS,
        cycle_timeout: Optional[float] = None,
    ) -> None:
        self._emitter = emitter or EventEmitter()
        self.scout = ScoutAgent(adapter, self._emitter, max_attempts=scout_max_attempts)
        self.builders = {
            "ui": UIAgent(adapter, self._emitter),
            "logic": LogicAgent(adapter, self._emitter),
            "integrator": IntegratorAgent(adapter, self._emitter),
            "growth": GrowthAgent(adapter, self._emitter),
        }
        self.qa = QAAgent(adapter, self._emitter, max_chars=qa_review_chars)
        self.closer = CloserAgent(store, fallback, self._emitter)
        self.cycle_timeout = cycle_timeout
        self.state = CycleState.IDLE

    async def execute_full_cycle(self, stop_event: Optional[asyncio.Event] = None) -> CycleResult:
        await self._emitter.emit("🚀 STARTING NEW BUILD CYCLE...", "system")
        self.state = CycleState.IDLE
        try:
            # The time budget covers ideation through review; a built record is always closed
            if self.cycle_timeout:
                try:
                    record = await asyncio.wait_for(self._produce(stop_event), timeout=self.cycle_timeout)
                except asyncio.TimeoutError as exc:
                    raise CycleTimeoutError(f"Cycle timed out after {self.cycle_timeout:g}s") from exc
            else:
                record = await self._produce(stop_event)

            self._transition(CycleState.CLOSING)
            result = await self.closer.close(record)
        except CycleCancelled:
            LOGGER.info("Cycle cancelled while %s", self.state.value)
            self.state = CycleState.FAILED
            await self._emitter.emit("🛑 CYCLE CANCELLED", "system")
            raise
        except asyncio.CancelledError:
            LOGGER.info("Cycle task cancelled while %s", self.state.value)
            self.state = CycleState.FAILED
            raise
        except Exception as exc:
            LOGGER.exception("Cycle failed while %s", self.state.value)
            self.state = CycleState.FAILED
            await self._emitter.emit(f"❌ CYCLE FAILED: {exc}", "error")
            raise

        self.state = CycleState.DONE
        await self._emitter.emit("✅ BUILD COMPLETE! Ready for next cycle.", "system")
        return result

    async def _produce(self, stop_event: Optional[asyncio.Event]) -> ProjectRecord:
        self._transition(CycleState.IDEATING)
        idea = await self.scout.find_idea(stop_event)
        # Last point where a stop request abandons the cycle; once building starts it runs to the end
        _check_stop(stop_event)

        self._transition(CycleState.BUILDING)
        await self._emitter.emit("🔄 PHASE 2: Parallel execution...", "system")
        artifacts = await self._build(idea)

        self._transition(CycleState.REVIEWING)
        code = artifacts.combined_code
        await self.qa.review(code)

        return ProjectRecord(
            name=idea.name,
            idea=idea.model_dump_json(),
            code=code,
            configs=artifacts.configs,
            growth_plan=artifacts.growth_plan,
            stack=idea.stack,
        )

    async def _build(self, idea: Idea) -> BuildArtifacts:
        outputs = await gather_fail_fast(
            {role: agent.run(idea) for role, agent in self.builders.items()}
        )
        return BuildArtifacts(
            ui_code=outputs["ui"],
            logic_code=outputs["logic"],
            configs=outputs["integrator"],
            growth_plan=outputs["growth"],
        )

    def _transition(self, state: CycleState) -> None:
        LOGGER.debug("Cycle state %s -> %s", self.state.value, state.value)
        self.state = state


def _check_stop(stop_event: Optional[asyncio.Event]) -> None:
    if stop_event is not None and stop_event.is_set():
        raise CycleCancelled("Stop requested")


async def gather_fail_fast(jobs: Dict[str, Awaitable[str]]) -> Dict[str, str]:
    """
    Run the jobs concurrently and return their results by name.

    The first job to raise cancels the others and its exception propagates.
    """
    tasks = {name: asyncio.ensure_future(job) for name, job in jobs.items()}
    try:
        done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(list(tasks.values()))
        raise

    failed = [t for t in done if not t.cancelled() and t.exception() is not None]
    if failed:
        await _cancel_all(list(pending))
        name = next(n for n, t in tasks.items() if t is failed[0])
        LOGGER.warning("Parallel job %r failed, cancelled %d sibling(s)", name, len(pending))
        raise failed[0].exception()

    return {name: task.result() for name, task in tasks.items()}


async def _cancel_all(tasks: List["asyncio.Future[str]"]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
