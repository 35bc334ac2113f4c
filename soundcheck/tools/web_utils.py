from __future__ import annotations

import re
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from urllib.parse import urlparse, urlunparse


def normalize_url(url: str) -> str:
    """Canonical form used for dedup and allowlist comparison.

    Lowercases scheme and host, drops the fragment and a trailing slash.
    Query strings are kept since some outlets route articles through them.
    """
    text = url.strip()
    try:
        parsed = urlparse(text)
    except ValueError:
        return text
    if not parsed.scheme or not parsed.netloc:
        return text
    path = parsed.path.rstrip("/")
    return urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, "")
    )


def clean_content(text: str, max_length: int = 300) -> str:
    """Collapse whitespace and trim to max length."""
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > max_length:
        text = text[:max_length]
    return text


def parse_published_date(value: object) -> date | None:
    """Best-effort date parsing for provider payloads (ISO 8601 or RFC 2822)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    # RFC 2822, as used by RSS-backed news feeds
    try:
        return parsedate_to_datetime(raw).date()
    except (TypeError, ValueError):
        return None
