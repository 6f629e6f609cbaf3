from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from architect.core.exceptions import ValidationError
from architect.settings import Settings, get_settings

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


class BaseLLMAdapter(ABC):
    """Single request/response call to a text generation backend."""

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.7) -> str:
        _validate_prompt("system_prompt", system_prompt)
        _validate_prompt("user_prompt", user_prompt)
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            raise ValidationError("Invalid temperature: must be a number")
        if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
            raise ValidationError(
                f"Invalid temperature {temperature}: must be within "
                f"[{MIN_TEMPERATURE}, {MAX_TEMPERATURE}]"
            )
        return await self._invoke(system_prompt, user_prompt, float(temperature))

    @abstractmethod
    async def _invoke(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        ...


def _validate_prompt(field: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {field}: must be a non-empty string")


_cached_adapter: Optional[BaseLLMAdapter] = None


def get_llm_adapter(settings: Optional[Settings] = None) -> BaseLLMAdapter:
    global _cached_adapter
    if _cached_adapter and settings is None:
        return _cached_adapter

    settings = settings or get_settings()
    if settings.llm_mode == "mock":
        from .mock_adapter import MockLLMAdapter
        adapter: BaseLLMAdapter = MockLLMAdapter()
    else:
        from .openai_adapter import OpenAIAdapter
        adapter = OpenAIAdapter(
            api_key=settings.openai_api_key or "",
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
            max_tokens=settings.completion_max_tokens,
        )

    _cached_adapter = adapter
    return adapter


def reset_llm_adapter() -> None:
    global _cached_adapter
    _cached_adapter = None
