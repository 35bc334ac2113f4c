"""Render retrieved articles into the numbered context block sent to the model."""
from __future__ import annotations

from typing import Sequence

from soundcheck.config import settings
from soundcheck.models.schemas import ArticleRecord


def format_article(index: int, article: ArticleRecord, date_format: str | None = None) -> str:
    source = f"Source: {article.url}"
    if article.published_date:
        source += f" ({article.published_date.strftime(date_format or settings.context_date_format)})"
    return f"[{index}] {article.title}\n{article.snippet}\n{source}"


def format_context(articles: Sequence[ArticleRecord] | None, date_format: str | None = None) -> str:
    """Numbered (1-based) context block. Empty input gives "" which means no context."""
    if not articles:
        return ""
    return "\n\n".join(
        format_article(index, article, date_format)
        for index, article in enumerate(articles, start=1)
    )


def allowed_urls(articles: Sequence[ArticleRecord] | None) -> list[str]:
    """URLs of exactly the articles rendered by format_context, in the same order."""
    return [article.url for article in articles or []]
