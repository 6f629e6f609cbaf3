from __future__ import annotations

from typing import Optional

from architect.core.event_bus import EventEmitter
from architect.llm.adapter import BaseLLMAdapter, get_llm_adapter


class BaseAgent:
    """A fixed system prompt and temperature in front of the completion backend."""

    role: str = ""
    system_prompt: str = ""
    temperature: float = 0.7

    def __init__(
        self,
        adapter: Optional[BaseLLMAdapter] = None,
        emitter: Optional[EventEmitter] = None,
    ) -> None:
        self._adapter = adapter
        self._emitter = emitter or EventEmitter()

    @property
    def adapter(self) -> BaseLLMAdapter:
        if self._adapter is None:
            self._adapter = get_llm_adapter()
        return self._adapter

    async def _ask(self, user_prompt: str) -> str:
        return await self.adapter.complete(self.system_prompt, user_prompt, self.temperature)
