from __future__ import annotations

from typing import Optional

from architect.core.event_bus import EventEmitter
from architect.llm.adapter import BaseLLMAdapter
from architect.utils.logging import get_logger
from architect.utils.schemas import ReviewResult

from . import prompts
from .base import BaseAgent
from .prompts import PromptBuilder

LOGGER = get_logger(__name__)

APPROVAL_MARKER = "APPROVED"
DEFAULT_REVIEW_CHARS = 3000


class QAAgent(BaseAgent):
    """Reviews the generated code. The verdict is advisory and never gates persistence."""

    role = "qa"
    system_prompt = prompts.QA_SYSTEM_PROMPT
    temperature = 0.2

    def __init__(
        self,
        adapter: Optional[BaseLLMAdapter] = None,
        emitter: Optional[EventEmitter] = None,
        max_chars: int = DEFAULT_REVIEW_CHARS,
    ) -> None:
        super().__init__(adapter, emitter)
        self.max_chars = max_chars

    async def review(self, code: str) -> ReviewResult:
        await self._emitter.emit("🔍 AGENT QA: Running quality checks...", "agent")
        if len(code) > self.max_chars:
            LOGGER.info("QA reviewing first %d of %d chars", self.max_chars, len(code))

        raw = await self._ask(PromptBuilder.qa(code, self.max_chars))
        result = ReviewResult(raw=raw, approved=APPROVAL_MARKER in raw)
        if result.approved:
            await self._emitter.emit("✅ QA: All checks passed", "success")
        else:
            await self._emitter.emit("⚠️ QA: Issues found (advisory, continuing)", "warning")
        return result
