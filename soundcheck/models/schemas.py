from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True)
class ArticleRecord:
    """Normalized retrieval result. Lives for one user turn only."""

    title: str
    url: str
    snippet: str = ""
    published_date: date | None = None


@dataclass(frozen=True, slots=True)
class SearchQuery:
    text: str
    domains: tuple[str, ...] = ()
    date_floor: date | None = None
    result_limit: int = 10


class QueryPlan(BaseModel):
    """Planner verdict for one user message. `reasoning` is diagnostic only."""

    model_config = ConfigDict(populate_by_name=True)

    needs_search: bool = Field(alias="needsSearch")
    search_queries: list[str] = Field(default_factory=list, alias="searchQueries")
    reasoning: str = ""

    @classmethod
    def fallback(cls, user_message: str, reasoning: str = "parse error") -> "QueryPlan":
        return cls(needs_search=True, search_queries=[user_message], reasoning=reasoning)


@dataclass(slots=True)
class GeneratedAnswer:
    text: str
    allowed_urls: list[str] = field(default_factory=list)
    removed_urls: list[str] = field(default_factory=list)
