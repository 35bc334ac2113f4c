from __future__ import annotations

from datetime import date
from typing import Any

import httpx

from soundcheck.config import settings
from soundcheck.errors import SearchProviderError
from soundcheck.models.schemas import ArticleRecord
from soundcheck.tools import web_utils


def _build_payload(
    query: str,
    *,
    max_results: int,
    include_domains: list[str] | None,
    start_date: date | None,
    max_characters: int,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "query": query,
        "numResults": max_results,
        "contents": {"text": {"maxCharacters": max_characters}},
    }
    if include_domains:
        payload["includeDomains"] = list(include_domains)
    if start_date:
        payload["startPublishedDate"] = f"{start_date.isoformat()}T00:00:00.000Z"
    return payload


def _map_results(payload: Any, snippet_chars: int) -> list[ArticleRecord]:
    if not isinstance(payload, dict):
        raise SearchProviderError("exa", "response is not a JSON object")
    raw_results = payload.get("results") or []
    if not isinstance(raw_results, list):
        raise SearchProviderError("exa", "'results' is not a list")

    mapped: list[ArticleRecord] = []
    for item in raw_results:
        if not isinstance(item, dict):
            continue
        url = (item.get("url") or "").strip()
        if not url:
            continue
        mapped.append(
            ArticleRecord(
                title=(item.get("title") or "").strip() or url,
                url=url,
                snippet=web_utils.clean_content(item.get("text") or "", snippet_chars),
                published_date=web_utils.parse_published_date(item.get("publishedDate")),
            )
        )
    return mapped


async def search(
    query: str,
    *,
    max_results: int = 10,
    include_domains: list[str] | None = None,
    start_date: date | None = None,
) -> list[ArticleRecord]:
    """Execute one Exa search with text contents and normalize results."""
    if not settings.exa_api_key:
        raise SearchProviderError("exa", "EXA_API_KEY is not configured")

    payload = _build_payload(
        query,
        max_results=max_results,
        include_domains=include_domains,
        start_date=start_date,
        max_characters=settings.search_text_max_chars,
    )
    endpoint = settings.exa_base_url.rstrip("/") + "/search"

    async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
        response = await client.post(
            endpoint,
            json=payload,
            headers={
                "Accept": "application/json",
                "x-api-key": settings.exa_api_key,
            },
        )
        response.raise_for_status()
        body = response.json()

    return _map_results(body, settings.snippet_max_chars)
