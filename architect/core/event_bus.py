from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from architect.utils.logging import get_logger
from architect.utils.schemas import LogEvent, LogKind

LOGGER = get_logger(__name__)

LogSink = Callable[[LogEvent], Union[None, Awaitable[None]]]

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
}


class EventEmitter:
    """Pushes LogEvents to the caller's sink and mirrors them into logging."""

    def __init__(self, sink: Optional[LogSink] = None) -> None:
        self._sink = sink

    async def emit(self, message: str, kind: LogKind = "info") -> LogEvent:
        event = LogEvent(message=message, kind=kind)
        LOGGER.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind, message)

        if self._sink is None:
            return event

        # Sink is best effort; a broken observer never stops the pipeline
        try:
            result: Any = self._sink(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            LOGGER.exception("Log sink failed for event: %s", message[:100])
        return event


class EventCollector:
    """Sink that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[LogEvent] = []

    def __call__(self, event: LogEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: LogKind) -> List[LogEvent]:
        return [e for e in self.events if e.kind == kind]

    def messages(self) -> List[str]:
        return [e.message for e in self.events]
