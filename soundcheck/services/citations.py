"""Post-generation check that a response cites only allowlisted URLs."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from soundcheck.tools import web_utils

MARKDOWN_LINK_RE = re.compile(
    r"\[([^\]\n]*)\]\(\s*<?((?:https?://|www\.)[^\s)>]+)>?\s*\)", re.IGNORECASE
)
# Schemeless "www." hosts count as links too; chat clients render them.
BARE_URL_RE = re.compile(
    r"(?:https?://|(?<![A-Za-z0-9.@/-])www\.)[^\s<>()\[\]\"'*`]+", re.IGNORECASE
)
# Sentence punctuation and markdown emphasis that may trail a bare URL
TRAILING_PUNCTUATION = ".,;:!?»”*_~`"
EMPTY_EMPHASIS_RE = re.compile(r"(\*\*|__|~~|`)\s*\1")


@dataclass(slots=True)
class CitationCheck:
    text: str
    removed_urls: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.removed_urls


def canonical_url(url: str) -> str:
    """Normalized form of a cited URL; a bare `www.` host is read as https."""
    text = url.strip()
    if text[:4].lower() == "www.":
        text = f"https://{text}"
    return web_utils.normalize_url(text)


def extract_urls(text: str) -> list[str]:
    """All cited URLs in order of appearance, markdown links and bare URLs alike."""
    found: list[str] = []
    for match in BARE_URL_RE.finditer(text or ""):
        url = match.group(0).rstrip(TRAILING_PUNCTUATION)
        if url[:4].lower() == "www.":
            url = f"https://{url}"
        found.append(url)
    return found


def enforce_allowlist(text: str, allowed_urls: Iterable[str]) -> CitationCheck:
    """Strip every URL that is not in `allowed_urls`.

    Disallowed markdown links keep their label; disallowed bare URLs are
    removed outright. Scheme case, host case and a trailing slash are
    ignored when comparing.
    """
    allowed = {canonical_url(url) for url in allowed_urls if url}
    removed: list[str] = []

    def is_allowed(url: str) -> bool:
        return canonical_url(url) in allowed

    def replace_link(match: re.Match[str]) -> str:
        label, url = match.group(1), match.group(2)
        if is_allowed(url):
            return match.group(0)
        removed.append(url)
        return label

    def replace_bare(match: re.Match[str]) -> str:
        raw = match.group(0)
        url = raw.rstrip(TRAILING_PUNCTUATION)
        tail = raw[len(url):]
        if is_allowed(url):
            return raw
        removed.append(url)
        return tail

    checked = MARKDOWN_LINK_RE.sub(replace_link, text or "")
    checked = BARE_URL_RE.sub(replace_bare, checked)
    if removed:
        # Leftovers of removed URLs: empty parens, empty emphasis, doubled spaces
        checked = re.sub(r"\(\s*\)", "", checked)
        checked = EMPTY_EMPHASIS_RE.sub("", checked)
        checked = re.sub(r"[ \t]{2,}", " ", checked)
        checked = re.sub(r"[ \t]+\n", "\n", checked).strip()
        logger.warning(f"Removed {len(removed)} citation(s) outside the allowlist: {removed}")
    return CitationCheck(text=checked, removed_urls=removed)
