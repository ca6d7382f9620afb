"""
Tests for search cache, provider retries and the search pipeline.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from mediafinder.config.errors import ErrorCode, ProviderError
from mediafinder.domains.search.aggregator import FanOutCoordinator
from mediafinder.domains.search.contracts import ResultProcessor
from mediafinder.domains.search.models import (
    MediaCategory,
    NormalizedQuery,
    NormalizedResult,
    ProviderOutcome,
    SearchFilters,
    SearchPage,
    SortKey,
    SortOrder,
    SortSpec,
    SourceProvider,
)
from mediafinder.domains.search.ranking import FilterRankEngine

from .cache import SearchCache
from .contracts import ResultCache, SearchHistorySink
from .pipeline import SearchPipeline
from .resilience import RetryingProvider


def make_result(result_id: str, title: str, rating: float | None = None) -> NormalizedResult:
    return NormalizedResult(
        id=result_id,
        title=title,
        media_category=MediaCategory.FILM,
        rating=rating,
        source_provider=SourceProvider.TMDB,
    )


class StubAdapter:
    """Adapter returning a scripted sequence of outcomes."""

    def __init__(self, provider: SourceProvider, *outcomes: ProviderOutcome) -> None:
        self.provider = provider
        self._outcomes = list(outcomes)
        self.calls = 0

    async def search(self, text: str, page: int) -> ProviderOutcome:
        self.calls += 1
        if len(self._outcomes) > 1:
            return self._outcomes.pop(0)
        return self._outcomes[0]


def retryable_failure(provider: SourceProvider) -> ProviderOutcome:
    return ProviderOutcome.failure(
        provider,
        ProviderError(provider.value, "HTTP 503", code=ErrorCode.PROVIDER_BAD_STATUS, retryable=True),
    )


@pytest.fixture
async def cache():
    cache = SearchCache(max_size=10, default_ttl=60, cleanup_interval=0.01)
    yield cache
    await cache.close()


# --- SearchCache Tests ---


def test_cache_satisfies_contract() -> None:
    assert isinstance(SearchCache(), ResultCache)


async def test_cache_set_and_get(cache: SearchCache) -> None:
    page = SearchPage(results=[make_result("tmdb-1", "Alien")], total=1, page=1, total_pages=1)
    await cache.set("search:alien:x", page)

    entry = await cache.get("search:alien:x")

    assert entry is not None
    assert entry.response == page
    assert entry.hit_count == 1
    assert await cache.get("search:missing:x") is None
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


async def test_cache_expired_entry_is_dropped(cache: SearchCache) -> None:
    await cache.set("k", SearchPage())
    cache._cache["k"].expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

    assert await cache.get("k") is None
    assert cache.stats()["size"] == 0


async def test_cache_evicts_oldest_when_full() -> None:
    cache = SearchCache(max_size=3)
    for key in ("a", "b", "c"):
        await cache.set(key, SearchPage())
        cache._cache[key].created_at -= timedelta(seconds={"a": 3, "b": 2, "c": 1}[key])

    await cache.set("d", SearchPage())

    assert await cache.get("a") is None
    assert await cache.get("d") is not None
    assert cache.stats()["size"] == 3


async def test_cache_invalidate_by_pattern(cache: SearchCache) -> None:
    await cache.set("search:batman:1", SearchPage())
    await cache.set("search:batman begins:2", SearchPage())
    await cache.set("search:dune:3", SearchPage())

    removed = await cache.invalidate(r"^search:batman")

    assert removed == 2
    assert await cache.get("search:dune:3") is not None


async def test_cache_clear(cache: SearchCache) -> None:
    await cache.set("a", SearchPage())
    await cache.clear()
    assert cache.stats()["size"] == 0


async def test_cache_background_cleanup(cache: SearchCache) -> None:
    await cache.set("k", SearchPage())
    cache._cache["k"].expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)

    await cache.start()
    await asyncio.sleep(0.05)

    assert "k" not in cache._cache


async def test_cache_close_is_idempotent() -> None:
    cache = SearchCache()
    await cache.start()
    await cache.close()
    await cache.close()


def test_generate_key_normalizes_text() -> None:
    a = SearchCache.generate_key(NormalizedQuery(text="  Batman  Begins "))
    b = SearchCache.generate_key(NormalizedQuery(text="batman begins"))
    assert a == b
    assert a.startswith("search:batman begins:")


def test_generate_key_varies_with_options() -> None:
    base = NormalizedQuery(text="batman")
    variants = [
        NormalizedQuery(text="batman", page=2),
        NormalizedQuery(text="batman", media_type=MediaCategory.FILM),
        NormalizedQuery(text="batman", filters=SearchFilters(year_from=2000)),
        NormalizedQuery(text="batman", sort=SortSpec(key=SortKey.YEAR)),
        NormalizedQuery(text="batman", sort=SortSpec(order=SortOrder.ASC)),
    ]
    keys = {SearchCache.generate_key(q) for q in variants}
    assert len(keys) == len(variants)
    assert SearchCache.generate_key(base) not in keys


# --- RetryingProvider Tests ---


async def test_retry_recovers_from_retryable_failure() -> None:
    success = ProviderOutcome.success(SourceProvider.TMDB, [make_result("tmdb-1", "Alien")])
    adapter = StubAdapter(SourceProvider.TMDB, retryable_failure(SourceProvider.TMDB), success)
    provider = RetryingProvider(adapter, retries=2, wait_min=0, wait_max=0)

    outcome = await provider.search("alien", 1)

    assert outcome.ok
    assert adapter.calls == 2
    assert provider.provider == SourceProvider.TMDB


async def test_retry_returns_last_failure_when_exhausted() -> None:
    adapter = StubAdapter(SourceProvider.TMDB, retryable_failure(SourceProvider.TMDB))
    provider = RetryingProvider(adapter, retries=2, wait_min=0, wait_max=0)

    outcome = await provider.search("alien", 1)

    assert not outcome.ok
    assert outcome.error.retryable
    assert adapter.calls == 3


async def test_retry_skips_permanent_failure() -> None:
    failure = ProviderOutcome.failure(
        SourceProvider.TMDB,
        ProviderError("tmdb", "HTTP 401", code=ErrorCode.PROVIDER_BAD_STATUS),
    )
    adapter = StubAdapter(SourceProvider.TMDB, failure)

    outcome = await RetryingProvider(adapter, retries=3, wait_min=0, wait_max=0).search("alien", 1)

    assert not outcome.ok
    assert adapter.calls == 1


def test_retry_rejects_negative_retries() -> None:
    with pytest.raises(ValueError):
        RetryingProvider(StubAdapter(SourceProvider.TMDB, retryable_failure(SourceProvider.TMDB)), retries=-1)


# --- SearchPipeline Tests ---


def build_pipeline(
    *adapters: StubAdapter,
    cache: SearchCache | None = None,
    history: AsyncMock | None = None,
) -> SearchPipeline:
    return SearchPipeline(
        FanOutCoordinator(adapters, timeout_seconds=1),
        FilterRankEngine(page_size=20),
        cache=cache,
        history=history,
    )


async def test_pipeline_ranks_merged_results() -> None:
    films = StubAdapter(
        SourceProvider.TMDB,
        ProviderOutcome.success(
            SourceProvider.TMDB,
            [make_result("tmdb-1", "Batman Begins", 8.2), make_result("tmdb-2", "Joker", 8.4)],
        ),
    )
    anime = StubAdapter(
        SourceProvider.JIKAN,
        ProviderOutcome.success(
            SourceProvider.JIKAN, [make_result("jikan-anime-1", "Batman: The Animated Series", 9.0)]
        ),
    )

    page = await build_pipeline(films, anime).aggregate_and_rank("batman")

    assert [r.id for r in page.results] == ["jikan-anime-1", "tmdb-1", "tmdb-2"]
    assert page.total == 3
    assert page.total_pages == 1


async def test_pipeline_rejects_short_query() -> None:
    with pytest.raises(ValueError):
        await build_pipeline().aggregate_and_rank(" a ")


async def test_pipeline_serves_repeat_from_cache(cache: SearchCache) -> None:
    adapter = StubAdapter(
        SourceProvider.TMDB,
        ProviderOutcome.success(SourceProvider.TMDB, [make_result("tmdb-1", "Alien")]),
    )
    pipeline = build_pipeline(adapter, cache=cache)

    first = await pipeline.aggregate_and_rank("alien")
    second = await pipeline.aggregate_and_rank("Alien")

    assert adapter.calls == 1
    assert second == first


async def test_pipeline_cache_hits_are_isolated_from_callers(cache: SearchCache) -> None:
    adapter = StubAdapter(
        SourceProvider.TMDB,
        ProviderOutcome.success(SourceProvider.TMDB, [make_result("tmdb-1", "Alien")]),
    )
    pipeline = build_pipeline(adapter, cache=cache)

    first = await pipeline.aggregate_and_rank("alien")
    first.results.clear()
    second = await pipeline.aggregate_and_rank("alien")
    second.results.append(make_result("tmdb-2", "Aliens"))
    third = await pipeline.aggregate_and_rank("alien")

    assert adapter.calls == 1
    assert [r.id for r in second.results] == ["tmdb-1", "tmdb-2"]
    assert [r.id for r in third.results] == ["tmdb-1"]
    with pytest.raises(ValidationError):
        third.total = 99


def test_engine_satisfies_result_processor() -> None:
    assert isinstance(FilterRankEngine(), ResultProcessor)


async def test_pipeline_does_not_cache_partial_results(cache: SearchCache) -> None:
    ok = StubAdapter(
        SourceProvider.TMDB,
        ProviderOutcome.success(SourceProvider.TMDB, [make_result("tmdb-1", "Alien")]),
    )
    failing = StubAdapter(SourceProvider.JIKAN, retryable_failure(SourceProvider.JIKAN))
    pipeline = build_pipeline(ok, failing, cache=cache)

    await pipeline.aggregate_and_rank("alien")
    await pipeline.aggregate_and_rank("alien")

    assert ok.calls == 2
    assert cache.stats()["size"] == 0


async def test_pipeline_records_history_in_background() -> None:
    history = AsyncMock(spec=SearchHistorySink)
    adapter = StubAdapter(
        SourceProvider.TMDB,
        ProviderOutcome.success(SourceProvider.TMDB, [make_result("tmdb-1", "Alien")]),
    )
    pipeline = build_pipeline(adapter, history=history)

    await pipeline.aggregate_and_rank(
        "alien",
        media_type=MediaCategory.FILM,
        filters=SearchFilters(year_from=1979),
        sort=SortSpec(key=SortKey.YEAR),
        user_id="user-1",
    )
    await pipeline.drain()

    history.record_search.assert_awaited_once_with(
        "user-1",
        "alien",
        {"yearFrom": 1979, "mediaType": "film", "sortBy": "year", "sortOrder": "desc"},
        1,
    )


async def test_pipeline_history_failure_does_not_fail_search() -> None:
    history = AsyncMock(spec=SearchHistorySink)
    history.record_search.side_effect = RuntimeError("disk full")
    adapter = StubAdapter(SourceProvider.TMDB, ProviderOutcome.success(SourceProvider.TMDB, []))
    pipeline = build_pipeline(adapter, history=history)

    page = await pipeline.aggregate_and_rank("alien")
    await pipeline.drain()

    assert page.total == 0
    history.record_search.assert_awaited_once()


async def test_pipeline_all_providers_down() -> None:
    pipeline = build_pipeline(
        StubAdapter(SourceProvider.TMDB, retryable_failure(SourceProvider.TMDB)),
        StubAdapter(SourceProvider.OPEN_LIBRARY, retryable_failure(SourceProvider.OPEN_LIBRARY)),
        StubAdapter(SourceProvider.JIKAN, retryable_failure(SourceProvider.JIKAN)),
    )

    page = await pipeline.aggregate_and_rank("batman")

    assert page.model_dump(by_alias=True) == {
        "results": [],
        "total": 0,
        "page": 1,
        "totalPages": 0,
    }
