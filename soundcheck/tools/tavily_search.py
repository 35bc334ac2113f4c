from __future__ import annotations

from datetime import date
from typing import Any

from tavily import AsyncTavilyClient

from soundcheck.config import settings
from soundcheck.errors import SearchProviderError
from soundcheck.models.schemas import ArticleRecord
from soundcheck.tools import web_utils


async def search(
    query: str,
    *,
    max_results: int = 10,
    include_domains: list[str] | None = None,
    start_date: date | None = None,
) -> list[ArticleRecord]:
    """Execute a Tavily news search and return normalized articles."""
    if not settings.tavily_api_key:
        raise SearchProviderError("tavily", "TAVILY_API_KEY is not configured")

    client = AsyncTavilyClient(api_key=settings.tavily_api_key)

    kwargs: dict[str, Any] = {
        "query": query,
        "search_depth": "basic",
        "max_results": max_results,
        "topic": "news",
        "include_raw_content": False,
        "include_answer": False,
    }
    if include_domains:
        kwargs["include_domains"] = list(include_domains)
    if start_date:
        kwargs["start_date"] = start_date.isoformat()

    response = await client.search(**kwargs)
    if not isinstance(response, dict):
        raise SearchProviderError("tavily", "response is not a JSON object")

    articles: list[ArticleRecord] = []
    for r in response.get("results") or []:
        url = (r.get("url") or "").strip()
        if not url:
            continue
        # Tavily returns extracted page text in `content`; cap it like Exa's text budget
        text = (r.get("content") or "")[: settings.search_text_max_chars]
        articles.append(
            ArticleRecord(
                title=(r.get("title") or "").strip() or url,
                url=url,
                snippet=web_utils.clean_content(text, settings.snippet_max_chars),
                published_date=web_utils.parse_published_date(r.get("published_date")),
            )
        )
    return articles
