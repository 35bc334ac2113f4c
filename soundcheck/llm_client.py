"""OpenAI-compatible chat completion client used for planning and generation."""
from __future__ import annotations

import time
from typing import Any, Protocol

from soundcheck.config import settings
from soundcheck.errors import GenerationError, LLMConfigurationError
from soundcheck.services import logger as log_service


class CompletionProvider(Protocol):
    """Anything that turns role-tagged messages into one completion text."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        caller: str = ...,
    ) -> str: ...


class ChatCompletionClient:
    """Single-capability wrapper: role-tagged messages in, one completion text out.

    No retries. Provider exceptions propagate to the caller.
    """

    def __init__(self, openai_client: Any):
        self._client = openai_client

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        caller: str = "unknown",
    ) -> str:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            log_service.log_llm_call(
                model=model,
                caller=caller,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(e),
            )
            raise
        elapsed_ms = int((time.monotonic() - t0) * 1000)

        usage = getattr(response, "usage", None)
        log_service.log_llm_call(
            model=model,
            caller=caller,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            duration_ms=elapsed_ms,
        )

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise GenerationError(f"{caller}: provider returned no choices")
        content = getattr(choices[0].message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise GenerationError(f"{caller}: provider returned an empty completion")
        return content


def get_client() -> ChatCompletionClient:
    """Build the client from settings via the OpenAI SDK."""
    from openai import AsyncOpenAI

    if not settings.openai_api_key:
        raise LLMConfigurationError("OPENAI_API_KEY is not configured")
    base_url = settings.openai_base_url.strip() or "https://api.openai.com/v1"
    openai_client = AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=base_url,
    )
    return ChatCompletionClient(openai_client)


def get_model() -> str:
    """Get the model id used for answers and digests."""
    return settings.default_model


def get_planner_model() -> str:
    planner_override = settings.planner_model.strip()
    return planner_override or get_model()


_client: ChatCompletionClient | None = None


def client() -> ChatCompletionClient:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client
