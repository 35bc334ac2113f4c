"""Classify URLs as single-article pages or index/category listings."""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable
from urllib.parse import urlparse

from soundcheck.config import settings

MIN_PATH_SEGMENTS = 2


@lru_cache(maxsize=16)
def _compile(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def is_article_page(url: str, index_patterns: Iterable[str] | None = None) -> bool:
    """Return True when `url` looks like a single article.

    Fails closed: anything that cannot be parsed as an http(s) URL is not an
    article. Paths with fewer than two non-empty segments, or matching one of
    the index-page patterns, are listings.
    """
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
        _ = parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    path = parsed.path or "/"
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < MIN_PATH_SEGMENTS:
        return False

    patterns = tuple(settings.index_page_patterns if index_patterns is None else index_patterns)
    compiled = _compile(patterns)
    lowered = path.lower()
    return not any(pattern.search(lowered) for pattern in compiled)
