from __future__ import annotations

import asyncio
from typing import Any

import pytest

from soundcheck.models.schemas import ArticleRecord, SearchQuery


class FakeLLM:
    """Generation provider stub: replays canned replies and records every request."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def complete(self, messages, *, model, temperature, max_tokens, caller="unknown"):
        self.calls.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "caller": caller,
            }
        )
        if not self.replies:
            raise AssertionError(f"unexpected LLM call from {caller}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeRetriever:
    """Retrieval stub keyed by query text; tracks call count and peak concurrency."""

    def __init__(self, results: dict[str, Any] | None = None, delay: float = 0.0):
        self.results = results or {}
        self.delay = delay
        self.queries: list[SearchQuery] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search(self, query: SearchQuery) -> list[ArticleRecord]:
        self.queries.append(query)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            result = self.results.get(query.text, [])
            if isinstance(result, BaseException):
                raise result
            return list(result)
        finally:
            self.in_flight -= 1


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def article(path: str, title: str | None = None, host: str = "pitchfork.com", **kwargs) -> ArticleRecord:
    return ArticleRecord(
        title=title or path.strip("/").replace("/", " "),
        url=f"https://{host}/{path.lstrip('/')}",
        snippet=kwargs.pop("snippet", f"Snippet for {path}"),
        **kwargs,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
