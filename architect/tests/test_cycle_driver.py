import asyncio

import pytest

from architect.core.cycle_driver import CycleDriver
from architect.core.event_bus import EventCollector, EventEmitter
from architect.core.exceptions import CompletionError, CycleCancelled
from architect.utils.schemas import CycleResult, ProjectRecord


class FakeOrchestrator:
    def __init__(self, outcomes=None, on_cycle=None):
        self.outcomes = list(outcomes or [])
        self.on_cycle = on_cycle
        self.cycles = 0

    async def execute_full_cycle(self, stop_event=None):
        self.cycles += 1
        if self.on_cycle is not None:
            self.on_cycle(self.cycles)
        await asyncio.sleep(0)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
        return CycleResult(project=ProjectRecord(name=f"P{self.cycles}"))


def _driver(orchestrator, collector=None, delay=0.0):
    return CycleDriver(orchestrator, EventEmitter(collector), delay=delay)


def test_runs_requested_number_of_cycles():
    async def inner():
        collector = EventCollector()
        orchestrator = FakeOrchestrator()
        report = await _driver(orchestrator, collector).run(max_cycles=3)

        assert report.cycles_completed == 3
        assert report.reason == "max_cycles"
        assert orchestrator.cycles == 3
        waits = [m for m in collector.messages() if m.startswith("⏳ Waiting")]
        assert len(waits) == 2

    asyncio.run(inner())


def test_first_failure_stops_the_loop():
    async def inner():
        collector = EventCollector()
        orchestrator = FakeOrchestrator([None, CompletionError("backend down"), None])
        report = await _driver(orchestrator, collector).run(max_cycles=10)

        assert report.reason == "failed"
        assert report.cycles_completed == 1
        assert report.error == "backend down"
        assert orchestrator.cycles == 2
        assert any("FACTORY ERROR: backend down" in e.message for e in collector.of_kind("error"))

    asyncio.run(inner())


def test_stop_event_ends_loop_between_cycles():
    async def inner():
        stop = asyncio.Event()
        orchestrator = FakeOrchestrator(on_cycle=lambda n: stop.set() if n == 2 else None)
        report = await _driver(orchestrator).run(stop_event=stop)

        assert report.reason == "stopped"
        assert report.cycles_completed == 2
        assert orchestrator.cycles == 2

    asyncio.run(inner())


def test_stop_interrupts_the_inter_cycle_delay():
    async def inner():
        orchestrator = FakeOrchestrator()
        driver = _driver(orchestrator, delay=30.0)
        task = driver.start()
        await asyncio.sleep(0.05)
        driver.request_stop()
        report = await asyncio.wait_for(task, timeout=1.0)

        assert report.reason == "stopped"
        assert report.cycles_completed == 1

    asyncio.run(inner())


def test_cancelled_cycle_is_reported_as_stopped():
    async def inner():
        orchestrator = FakeOrchestrator([CycleCancelled("Stop requested")])
        report = await _driver(orchestrator).run()
        assert report.reason == "stopped"
        assert report.cycles_completed == 0

    asyncio.run(inner())


def test_request_stop_with_cancel_aborts_running_cycle():
    async def inner():
        class HangingOrchestrator:
            async def execute_full_cycle(self, stop_event=None):
                await asyncio.sleep(60)

        driver = _driver(HangingOrchestrator())
        task = driver.start()
        await asyncio.sleep(0.01)
        driver.request_stop(cancel=True)
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(inner())
