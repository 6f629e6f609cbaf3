from __future__ import annotations

import asyncio
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from architect.core.exceptions import CompletionError, ValidationError
from architect.utils.logging import get_logger

from .adapter import BaseLLMAdapter

LOGGER = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_TOKENS = 4000


class OpenAIAdapter(BaseLLMAdapter):
    """
    Chat-completions backend (OpenAI or any compatible endpoint).

    One outbound request per call: the SDK's own retries are disabled and
    nothing is cached, so a failure surfaces as ``CompletionError`` at once.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4",
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[Any] = None,
    ):
        if client is None and (not isinstance(api_key, str) or not api_key.strip()):
            raise ValidationError("Invalid api_key: must be a non-empty string")
        if timeout <= 0:
            raise ValidationError("Invalid timeout: must be positive")

        self.model = model
        self.timeout = float(timeout)
        self.max_tokens = max_tokens
        self.client = client or AsyncOpenAI(
            api_key=api_key.strip(),
            base_url=base_url,
            timeout=self.timeout,
            max_retries=0,
        )
        LOGGER.info("Initialized OpenAI adapter with model: %s", model)

    async def _invoke(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        LOGGER.info("Calling %s (temperature=%.2f)", self.model, temperature)
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as exc:
            LOGGER.error("Completion request timed out after %.1fs", self.timeout)
            raise CompletionError(f"Completion request timed out after {self.timeout:g}s") from exc
        except openai.APIStatusError as exc:
            message = _status_error_message(exc)
            LOGGER.error("Completion backend returned %s: %s", exc.status_code, message)
            raise CompletionError(f"Completion backend error ({exc.status_code}): {message}") from exc
        except openai.APIError as exc:
            LOGGER.error("Completion request failed: %s", exc)
            raise CompletionError(f"Completion request failed: {exc}") from exc

        content = _extract_content(response)
        LOGGER.info("Completion received (length=%d)", len(content))
        return content


def _extract_content(response: Any) -> str:
    try:
        choice = response.choices[0]
        content = choice.message.content
    except (AttributeError, IndexError, KeyError, TypeError) as exc:
        raise CompletionError("Malformed completion envelope: missing choices[0].message.content") from exc

    if not isinstance(content, str):
        raise CompletionError("Malformed completion envelope: message content is not text")

    if getattr(choice, "finish_reason", None) == "length":
        LOGGER.warning("Completion truncated by max_tokens (finish_reason=length)")
    return content


def _status_error_message(exc: "openai.APIStatusError") -> str:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return exc.message or f"HTTP {exc.status_code}"
