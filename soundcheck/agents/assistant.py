from __future__ import annotations

from typing import AsyncGenerator

from loguru import logger

from soundcheck import llm_client
from soundcheck.agents.query_planner import QueryPlanner
from soundcheck.agents.responder import ResponseGenerator
from soundcheck.config import settings
from soundcheck.models.events import AssistantEvent, EventType
from soundcheck.services import logger as log_service
from soundcheck.services import streaming
from soundcheck.services.batch_collector import BatchCollector, Retriever
from soundcheck.services.context_formatter import allowed_urls, format_context
from soundcheck.tools.search_provider import RetrievalClient, build_query


class Assistant:
    """Runs one user turn end to end.

    Answer flow:
      1. Plan: does the message need fresh articles, and which queries
      2. Collect: rate-limited fan-out over the planned queries
      3. Format the surviving articles into a numbered context block
      4. Generate an answer that may only cite those articles' URLs

    Digest flow skips planning and collects a fixed multi-angle query table.

    Each turn owns its article list and allowlist; nothing is shared between
    turns. Both flows yield progress events and always end with a `complete`
    event carrying the text to show the user.
    """

    def __init__(
        self,
        *,
        client: llm_client.CompletionProvider | None = None,
        retriever: Retriever | None = None,
        planner: QueryPlanner | None = None,
        responder: ResponseGenerator | None = None,
        collector: BatchCollector | None = None,
    ):
        self.planner = planner or QueryPlanner(client=client)
        self.responder = responder or ResponseGenerator(client=client)
        self.collector = collector or BatchCollector(retriever or RetrievalClient())

    async def answer_stream(self, user_message: str) -> AsyncGenerator[AssistantEvent, None]:
        try:
            yield streaming.status("planning")
            plan = await self.planner.plan(user_message)

            articles = []
            if plan.needs_search:
                yield streaming.status("searching", queries=plan.search_queries)
                articles = await self.collector.collect(
                    [build_query(text) for text in plan.search_queries]
                )

            context = format_context(articles)
            urls = allowed_urls(articles)
            if context:
                yield streaming.sources_found(articles)
                yield streaming.status("analyzing", sources=len(articles))

            result = await self.responder.answer(user_message, context or None, urls)
        except Exception as e:
            logger.opt(exception=True).error(f"Answer turn failed: {e}")
            log_service.log_event("turn_failed", "answer", error=str(e))
            yield streaming.error(str(e) or type(e).__name__, flow="answer")
            yield streaming.complete(settings.answer_error_message, failed=True)
            return

        yield streaming.complete(
            result.text,
            sources=result.allowed_urls,
            removed_citations=result.removed_urls,
            searched=plan.needs_search,
        )

    async def digest_stream(self, top_n: int | None = None) -> AsyncGenerator[AssistantEvent, None]:
        try:
            queries = [
                build_query(text, result_limit=settings.digest_max_results)
                for text in settings.weekly_queries
            ]
            yield streaming.status("searching", queries=[q.text for q in queries])
            articles = await self.collector.collect(queries)
            if not articles:
                logger.info("Weekly digest: no articles collected")
                yield streaming.complete(settings.no_news_message, no_news=True)
                return

            yield streaming.sources_found(articles)
            yield streaming.status("analyzing", sources=len(articles))
            result = await self.responder.digest(
                format_context(articles), top_n=top_n, allowed_urls=allowed_urls(articles)
            )
        except Exception as e:
            logger.opt(exception=True).error(f"Digest turn failed: {e}")
            log_service.log_event("turn_failed", "digest", error=str(e))
            yield streaming.error(str(e) or type(e).__name__, flow="digest")
            yield streaming.complete(settings.digest_error_message, failed=True)
            return

        yield streaming.complete(
            result.text,
            sources=result.allowed_urls,
            removed_citations=result.removed_urls,
        )

    @staticmethod
    async def _final_text(events: AsyncGenerator[AssistantEvent, None]) -> str:
        text = ""
        async for event in events:
            if event.event == EventType.COMPLETE:
                text = event.data.get("text", "")
        return text

    async def ask(self, user_message: str) -> str:
        """Convenience: run the answer flow and return only the final text."""
        return await self._final_text(self.answer_stream(user_message))

    async def weekly_digest(self, top_n: int | None = None) -> str:
        return await self._final_text(self.digest_stream(top_n))
