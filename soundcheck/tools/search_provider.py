from __future__ import annotations

import time

from loguru import logger

from soundcheck.config import settings
from soundcheck.models.schemas import ArticleRecord, SearchQuery
from soundcheck.services import logger as log_service
from soundcheck.tools import exa_search, tavily_search

PROVIDERS = {
    "exa": exa_search,
    "tavily": tavily_search,
}


def build_query(
    text: str,
    *,
    result_limit: int | None = None,
    days_back: int | None = None,
) -> SearchQuery:
    """SearchQuery scoped to the configured outlets and publication window."""
    return SearchQuery(
        text=text,
        domains=tuple(settings.search_domains),
        date_floor=settings.date_floor(days_back),
        result_limit=result_limit or settings.search_max_results,
    )


class RetrievalClient:
    """Runs one query against the configured search provider.

    Every failure degrades to an empty list; the caller decides what "no
    results" means. There is no retry here.
    """

    def __init__(self, provider: str | None = None):
        self.provider = (provider or settings.search_provider).lower().strip()

    async def search(self, query: SearchQuery) -> list[ArticleRecord]:
        t0 = time.monotonic()
        provider_module = PROVIDERS.get(self.provider)
        if provider_module is None:
            log_service.log_search_call(
                self.provider, query.text, error=f"Unsupported SEARCH_PROVIDER: {self.provider}"
            )
            return []

        try:
            articles = await provider_module.search(
                query.text,
                max_results=query.result_limit,
                include_domains=list(query.domains),
                start_date=query.date_floor,
            )
        except Exception as e:
            logger.opt(exception=True).debug(f"{self.provider} search raised for '{query.text}'")
            log_service.log_search_call(
                self.provider,
                query.text,
                duration_ms=int((time.monotonic() - t0) * 1000),
                error=str(e) or type(e).__name__,
            )
            return []

        log_service.log_search_call(
            self.provider,
            query.text,
            results=len(articles),
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return articles
