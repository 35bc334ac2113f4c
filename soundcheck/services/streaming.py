from __future__ import annotations

from typing import Any

from soundcheck.models.events import AssistantEvent, EventType
from soundcheck.models.schemas import ArticleRecord


def status(stage: str, **kwargs: Any) -> AssistantEvent:
    """Progress update: planning, searching, analyzing."""
    return AssistantEvent(event=EventType.STATUS, data={"stage": stage, **kwargs})


def sources_found(articles: list[ArticleRecord]) -> AssistantEvent:
    return AssistantEvent(
        event=EventType.SOURCES_FOUND,
        data={
            "count": len(articles),
            "sources": [{"title": a.title, "url": a.url} for a in articles],
        },
    )


def complete(text: str, sources: list[str] | None = None, **kwargs: Any) -> AssistantEvent:
    return AssistantEvent(
        event=EventType.COMPLETE,
        data={"text": text, "sources": sources or [], **kwargs},
    )


def error(message: str, **kwargs: Any) -> AssistantEvent:
    return AssistantEvent(event=EventType.ERROR, data={"message": message, **kwargs})
