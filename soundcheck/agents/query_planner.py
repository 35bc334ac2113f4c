from __future__ import annotations

import json
from typing import Any

from loguru import logger
from pydantic import ValidationError

from soundcheck import llm_client
from soundcheck.config import settings
from soundcheck.errors import GenerationError
from soundcheck.models.schemas import QueryPlan
from soundcheck.services.prompt_store import render_prompt


def _extract_json_object(raw_text: str) -> dict[str, Any]:
    text = raw_text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("not an object", text, 0)
    return parsed


def _normalize_queries(raw_queries: list[str], limit: int) -> list[str]:
    cleaned: list[str] = []
    seen: set[str] = set()
    for item in raw_queries:
        query = " ".join(item.split()).strip()
        if not query or query.lower() in seen:
            continue
        seen.add(query.lower())
        cleaned.append(query)
        if len(cleaned) >= max(limit, 1):
            break
    return cleaned


class QueryPlanner:
    """Asks the model whether a message needs fresh articles, and which queries to run."""

    name = "planner"

    def __init__(self, client: llm_client.CompletionProvider | None = None, model: str | None = None):
        self.client = client
        self.model = model or llm_client.get_planner_model()
        self.max_queries = settings.planner_max_queries

    def parse(self, raw_text: str, user_message: str) -> QueryPlan:
        """Turn the model's reply into a QueryPlan, falling back to a literal search."""
        try:
            plan = QueryPlan.model_validate(_extract_json_object(raw_text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Planner reply could not be parsed ({type(e).__name__}); searching with the raw message")
            return QueryPlan.fallback(user_message)

        if not plan.needs_search:
            return plan.model_copy(update={"search_queries": []})

        queries = _normalize_queries(plan.search_queries, self.max_queries)
        if not queries:
            return QueryPlan.fallback(user_message, reasoning=plan.reasoning or "no queries planned")
        return plan.model_copy(update={"search_queries": queries})

    async def plan(self, user_message: str) -> QueryPlan:
        active_client = self.client or llm_client.client()
        messages = [
            {
                "role": "system",
                "content": render_prompt("planner.system_prompt", max_queries=self.max_queries),
            },
            {"role": "user", "content": user_message},
        ]
        try:
            raw = await active_client.complete(
                messages,
                model=self.model,
                temperature=0,
                max_tokens=300,
                caller=self.name,
            )
        except GenerationError:
            logger.warning("Planner returned an empty reply; searching with the raw message")
            return QueryPlan.fallback(user_message, reasoning="empty reply")

        plan = self.parse(raw, user_message)
        logger.info(
            f"Query plan: needs_search={plan.needs_search} queries={plan.search_queries} "
            f"reasoning={plan.reasoning!r}"
        )
        return plan
