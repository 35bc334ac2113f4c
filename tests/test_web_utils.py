from __future__ import annotations

from datetime import date, datetime

import pytest

from soundcheck.tools.web_utils import clean_content, normalize_url, parse_published_date


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://Pitchfork.COM/news/story/", "https://pitchfork.com/news/story"),
        ("https://pitchfork.com/news/story#comments", "https://pitchfork.com/news/story"),
        ("https://ra.co/news/81234?utm=x", "https://ra.co/news/81234?utm=x"),
        ("  https://nme.com/a/b  ", "https://nme.com/a/b"),
        ("not a url", "not a url"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_clean_content_collapses_whitespace_and_truncates():
    assert clean_content("  a \n\n b\tc  ", 300) == "a b c"
    assert clean_content("abcdef", 3) == "abc"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2026-10-14T09:00:00.000Z", date(2026, 10, 14)),
        ("2026-10-14", date(2026, 10, 14)),
        ("Tue, 13 Oct 2026 10:00:00 GMT", date(2026, 10, 13)),
        (datetime(2026, 1, 2, 3, 4), date(2026, 1, 2)),
        (date(2026, 1, 2), date(2026, 1, 2)),
        ("", None),
        ("yesterday", None),
        (None, None),
        (12345, None),
    ],
)
def test_parse_published_date(value, expected):
    assert parse_published_date(value) == expected
