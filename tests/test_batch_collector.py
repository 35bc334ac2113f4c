from __future__ import annotations

import asyncio
import math

import pytest

from conftest import FakeRetriever, RecordingSleep, article
from soundcheck.models.schemas import ArticleRecord, SearchQuery
from soundcheck.services.batch_collector import BatchCollector, chunked, dedupe_articles


def _queries(*texts: str) -> list[SearchQuery]:
    return [SearchQuery(text=t, domains=("pitchfork.com",), result_limit=10) for t in texts]


def test_chunked_splits_into_fixed_size_groups():
    groups = chunked(_queries("a", "b", "c", "d", "e", "f", "g"), 4)
    assert [len(g) for g in groups] == [4, 3]
    assert chunked([], 4) == []


def test_dedupe_articles_keeps_first_occurrence():
    first = article("news/story-one", title="first")
    dup = ArticleRecord(title="second", url="https://PITCHFORK.com/news/story-one/#comments")
    other = article("news/story-two")

    unique, dropped = dedupe_articles([first, dup, other])

    assert unique == [first, other]
    assert dropped == 1


@pytest.mark.asyncio
async def test_collect_merges_queries_and_drops_duplicate_urls():
    shared = article("news/shared-story", title="shared from q1")
    retriever = FakeRetriever(
        {
            "q1": [shared, article("news/only-in-q1")],
            "q2": [
                ArticleRecord(title="shared from q2", url=shared.url),
                article("news/only-in-q2"),
            ],
        }
    )
    collector = BatchCollector(retriever, batch_size=4, delay_seconds=0, sleep=RecordingSleep())

    articles, stats = await collector.collect_with_stats(_queries("q1", "q2"))

    urls = [a.url for a in articles]
    assert len(urls) == len(set(urls)) == 3
    assert articles[0].title == "shared from q1"
    assert stats.duplicates_dropped == 1


@pytest.mark.asyncio
async def test_collect_filters_index_pages_after_dedup():
    retriever = FakeRetriever(
        {
            "q1": [
                ArticleRecord(title="Reviews front", url="https://pitchfork.com/reviews/"),
                ArticleRecord(title="Tag page", url="https://pitchfork.com/tags/rock/"),
                article("reviews/albums/artist-album"),
            ]
        }
    )
    collector = BatchCollector(retriever, sleep=RecordingSleep())

    articles, stats = await collector.collect_with_stats(_queries("q1"))

    assert [a.url for a in articles] == ["https://pitchfork.com/reviews/albums/artist-album"]
    assert stats.index_pages_dropped == 2


@pytest.mark.asyncio
async def test_seven_queries_run_in_two_groups_with_one_pause(recording_sleep):
    texts = [f"weekly-{i}" for i in range(7)]
    retriever = FakeRetriever({t: [article(f"news/{t}")] for t in texts}, delay=0.01)
    collector = BatchCollector(retriever, batch_size=4, delay_seconds=1.2, sleep=recording_sleep)

    articles, stats = await collector.collect_with_stats(_queries(*texts))

    assert len(retriever.queries) == 7
    assert recording_sleep.calls == [1.2]
    assert len(recording_sleep.calls) == math.ceil(7 / 4) - 1
    assert retriever.max_in_flight <= 4
    assert len(articles) == 7
    assert stats.calls == 7
    assert stats.pauses == 1


@pytest.mark.asyncio
async def test_group_runs_concurrently_up_to_batch_size(recording_sleep):
    texts = [f"q{i}" for i in range(4)]
    retriever = FakeRetriever({}, delay=0.02)
    collector = BatchCollector(retriever, batch_size=4, sleep=recording_sleep)

    await collector.collect(_queries(*texts))

    assert retriever.max_in_flight == 4
    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_failing_query_is_not_retried_and_does_not_abort_batch(recording_sleep):
    retriever = FakeRetriever(
        {
            "broken": RuntimeError("provider exploded"),
            "fine": [article("news/fine-story")],
        }
    )
    collector = BatchCollector(retriever, batch_size=1, delay_seconds=0.5, sleep=recording_sleep)

    articles, stats = await collector.collect_with_stats(_queries("broken", "fine"))

    assert [q.text for q in retriever.queries] == ["broken", "fine"]
    assert [a.url for a in articles] == ["https://pitchfork.com/news/fine-story"]
    assert stats.failed_queries == ["broken"]
    assert recording_sleep.calls == [0.5]


@pytest.mark.asyncio
async def test_all_empty_results_return_empty_signal(recording_sleep):
    retriever = FakeRetriever({})
    collector = BatchCollector(retriever, batch_size=4, sleep=recording_sleep)

    assert await collector.collect(_queries("a", "b", "c", "d", "e")) == []
    assert len(retriever.queries) == 5


@pytest.mark.asyncio
async def test_no_queries_makes_no_calls(recording_sleep):
    retriever = FakeRetriever({})
    collector = BatchCollector(retriever, sleep=recording_sleep)

    assert await collector.collect([]) == []
    assert retriever.queries == []
    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_concurrent_collects_keep_separate_stats(recording_sleep):
    retriever = FakeRetriever(
        {
            "dup": [article("news/same"), article("news/same")],
            "broken": RuntimeError("provider exploded"),
        },
        delay=0.01,
    )
    collector = BatchCollector(retriever, batch_size=4, sleep=recording_sleep)

    (first, first_stats), (second, second_stats) = await asyncio.gather(
        collector.collect_with_stats(_queries("dup")),
        collector.collect_with_stats(_queries("broken")),
    )

    assert len(first) == 1
    assert first_stats.duplicates_dropped == 1
    assert first_stats.failed_queries == []
    assert second == []
    assert second_stats.failed_queries == ["broken"]
    assert second_stats.duplicates_dropped == 0
    assert not hasattr(collector, "last_stats")
