from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Protocol

from loguru import logger

from soundcheck.config import settings
from soundcheck.models.schemas import ArticleRecord, SearchQuery
from soundcheck.tools import web_utils
from soundcheck.tools.article_filter import is_article_page


class Retriever(Protocol):
    async def search(self, query: SearchQuery) -> list[ArticleRecord]: ...


@dataclass(slots=True)
class CollectStats:
    """Bookkeeping for one collect() call; handy in logs and tests."""

    calls: int = 0
    pauses: int = 0
    raw_results: int = 0
    duplicates_dropped: int = 0
    index_pages_dropped: int = 0
    failed_queries: list[str] = field(default_factory=list)


def chunked(items: list[SearchQuery], size: int) -> list[list[SearchQuery]]:
    size = max(size, 1)
    return [items[i : i + size] for i in range(0, len(items), size)]


def dedupe_articles(articles: Iterable[ArticleRecord]) -> tuple[list[ArticleRecord], int]:
    """Keep the first record per normalized URL. Returns (unique, dropped_count)."""
    seen: set[str] = set()
    unique: list[ArticleRecord] = []
    dropped = 0
    for article in articles:
        key = web_utils.normalize_url(article.url)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        unique.append(article)
    return unique, dropped


class BatchCollector:
    """Fans retrieval out in fixed-size concurrent groups.

    Groups are separated by a fixed cooldown so that no more than
    `batch_size` provider calls start inside one `delay_seconds` window.
    Every query is issued exactly once, failed or not.
    """

    def __init__(
        self,
        retriever: Retriever,
        *,
        batch_size: int | None = None,
        delay_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.retriever = retriever
        self.batch_size = max(int(batch_size or settings.search_batch_size), 1)
        self.delay_seconds = (
            settings.search_batch_delay_seconds if delay_seconds is None else delay_seconds
        )
        self._sleep = sleep

    async def _run_group(self, group: list[SearchQuery], stats: CollectStats) -> list[ArticleRecord]:
        stats.calls += len(group)
        raw = await asyncio.gather(
            *(self.retriever.search(query) for query in group),
            return_exceptions=True,
        )
        merged: list[ArticleRecord] = []
        for query, item in zip(group, raw):
            if isinstance(item, BaseException):
                logger.warning(f"Retrieval for '{query.text}' raised {type(item).__name__}: {item}")
                stats.failed_queries.append(query.text)
                continue
            merged.extend(item or [])
        return merged

    async def collect(self, queries: list[SearchQuery]) -> list[ArticleRecord]:
        """Run all queries, then dedupe by URL and drop index pages.

        An empty list means "nothing to report", not an error.
        """
        articles, _ = await self.collect_with_stats(queries)
        return articles

    async def collect_with_stats(
        self, queries: list[SearchQuery]
    ) -> tuple[list[ArticleRecord], CollectStats]:
        """Like collect(), also returning the bookkeeping for this call only."""
        stats = CollectStats()
        if not queries:
            return [], stats

        groups = chunked(list(queries), self.batch_size)
        merged: list[ArticleRecord] = []
        for index, group in enumerate(groups):
            if index > 0:
                stats.pauses += 1
                await self._sleep(self.delay_seconds)
            merged.extend(await self._run_group(group, stats))

        stats.raw_results = len(merged)
        unique, stats.duplicates_dropped = dedupe_articles(merged)
        articles = [a for a in unique if is_article_page(a.url)]
        stats.index_pages_dropped = len(unique) - len(articles)

        logger.info(
            f"Collected {len(articles)} articles from {stats.calls} queries "
            f"({stats.raw_results} raw, {stats.duplicates_dropped} duplicates, "
            f"{stats.index_pages_dropped} index pages, {stats.pauses} pauses)"
        )
        return articles, stats
