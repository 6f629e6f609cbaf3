from __future__ import annotations

import asyncio
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_none,
)

from architect.core.event_bus import EventEmitter
from architect.core.exceptions import CycleCancelled, ParseError
from architect.llm.adapter import BaseLLMAdapter
from architect.utils.json_parser import parse_json_object
from architect.utils.logging import get_logger
from architect.utils.schemas import Idea

from . import prompts
from .base import BaseAgent
from .prompts import PromptBuilder

LOGGER = get_logger(__name__)


def parse_idea(raw: str) -> Idea:
    payload = parse_json_object(raw)
    try:
        return Idea.model_validate(payload)
    except PydanticValidationError as exc:
        raise ParseError(
            f"JSON does not describe an idea ({exc.error_count()} invalid field(s))", raw=raw
        ) from exc


class ScoutAgent(BaseAgent):
    """Finds one new app idea per cycle, asking again until the answer parses."""

    role = "scout"
    system_prompt = prompts.SCOUT_SYSTEM_PROMPT
    temperature = 0.9

    def __init__(
        self,
        adapter: Optional[BaseLLMAdapter] = None,
        emitter: Optional[EventEmitter] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        super().__init__(adapter, emitter)
        self.max_attempts = max_attempts
        self.attempts = 0

    async def find_idea(self, stop_event: Optional[asyncio.Event] = None) -> Idea:
        """
        Ask for an idea until one parses.

        Unbounded unless ``max_attempts`` is set, in which case the last
        ParseError propagates. ``stop_event`` is checked before each attempt;
        task cancellation is honoured at every await.
        """
        self.attempts = 0
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(ParseError),
            stop=stop_after_attempt(self.max_attempts) if self.max_attempts else stop_never,
            wait=wait_none(),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if stop_event is not None and stop_event.is_set():
                    raise CycleCancelled("Stop requested during ideation")
                idea = await self._attempt()
        return idea

    async def _attempt(self) -> Idea:
        self.attempts += 1
        await self._emitter.emit("🔍 AGENT SCOUT: Scanning market trends...", "agent")
        raw = await self._ask(PromptBuilder.scout())
        try:
            idea = parse_idea(raw)
        except ParseError as exc:
            LOGGER.warning("Scout attempt %d returned unusable output: %s", self.attempts, exc)
            if self.max_attempts and self.attempts >= self.max_attempts:
                await self._emitter.emit(
                    f"⚠️ SCOUT: Invalid JSON, giving up after {self.attempts} attempts", "warning"
                )
            else:
                await self._emitter.emit("⚠️ SCOUT: Invalid JSON, retrying...", "warning")
            raise

        await self._emitter.emit(f'✅ SCOUT: Found "{idea.name}"', "success")
        return idea
