"""
Search Pipeline - Orchestrates one search through cache, fan-out and ranking.

Steps:
1. Cache lookup by normalized query
2. Concurrent provider fan-out under the global deadline
3. Merge, filter and rank
4. Cache store (only when every provider answered)
5. History recording in the background
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from mediafinder.domains.search.aggregator import FanOutCoordinator
from mediafinder.domains.search.contracts import ResultProcessor
from mediafinder.domains.search.models import (
    MediaCategory,
    NormalizedQuery,
    SearchFilters,
    SearchPage,
    SortSpec,
)
from mediafinder.domains.search.ranking import count_by_category

from .contracts import ResultCache, SearchHistorySink
from .cache import SearchCache

logger = logging.getLogger(__name__)

__all__ = ["SearchPipeline"]


class SearchPipeline:
    """
    Main search orchestration pipeline.

    Example:
        >>> pipeline = SearchPipeline(coordinator, FilterRankEngine())
        >>> page = await pipeline.aggregate_and_rank("batman", sort=SortSpec(key=SortKey.RATING))
    """

    def __init__(
        self,
        coordinator: FanOutCoordinator,
        engine: ResultProcessor,
        cache: ResultCache | None = None,
        history: SearchHistorySink | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            coordinator: Provider fan-out
            engine: Filter/rank stage
            cache: Optional result cache
            history: Optional search history sink
        """
        self._coordinator = coordinator
        self._engine = engine
        self._cache = cache
        self._history = history
        self._background: set[asyncio.Task[None]] = set()

    async def aggregate_and_rank(
        self,
        text: str,
        page: int = 1,
        media_type: MediaCategory | None = None,
        filters: SearchFilters | None = None,
        sort: SortSpec | None = None,
        user_id: str | None = None,
    ) -> SearchPage:
        """
        Run one search end to end.

        Raises:
            pydantic.ValidationError: text shorter than 2 characters or page out of range
        """
        query = NormalizedQuery(
            text=text.strip(),
            page=page,
            media_type=media_type,
            filters=filters or SearchFilters(),
            sort=sort or SortSpec(),
        )
        return await self.execute(query, user_id=user_id)

    async def execute(self, query: NormalizedQuery, user_id: str | None = None) -> SearchPage:
        """Execute an already-validated query."""
        start_time = time.perf_counter()
        cache_key = SearchCache.generate_key(query)

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                logger.info("Search '%s' served from cache", query.text[:50])
                self._record(user_id, query, cached.response.total)
                return cached.response.model_copy(deep=True)

        outcomes = await self._coordinator.collect(query)
        merged = self._coordinator.merge(outcomes)
        result_page = self._engine.process(merged, query)

        failed = [o.provider.value for o in outcomes if not o.ok]
        if self._cache is not None and not failed:
            await self._cache.set(cache_key, result_page.model_copy(deep=True))

        counts = count_by_category(result_page.results)
        logger.info(
            "Search '%s' page=%d: %d results %s in %.0fms (failed providers: %s)",
            query.text[:50],
            query.page,
            result_page.total,
            {category.value: n for category, n in counts.items()},
            (time.perf_counter() - start_time) * 1000,
            ", ".join(failed) or "none",
        )

        self._record(user_id, query, result_page.total)
        return result_page

    def _record(self, user_id: str | None, query: NormalizedQuery, results_count: int) -> None:
        """Schedule history recording; the search never waits on it."""
        if self._history is None:
            return
        task = asyncio.create_task(
            self._write_history(user_id, query, results_count),
            name="search-history",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _write_history(
        self, user_id: str | None, query: NormalizedQuery, results_count: int
    ) -> None:
        try:
            await self._history.record_search(
                user_id,
                query.text,
                _history_filters(query),
                results_count,
            )
        except Exception as e:
            logger.warning("Failed to record search history: %s", e)

    async def drain(self) -> None:
        """Wait for pending history writes."""
        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def _history_filters(query: NormalizedQuery) -> dict[str, Any]:
    filters = query.filters.model_dump(by_alias=True, exclude_none=True, exclude_defaults=True)
    if "genres" in filters:
        filters["genres"] = sorted(filters["genres"])
    if query.media_type is not None:
        filters["mediaType"] = query.media_type.value
    filters["sortBy"] = query.sort.key.value
    filters["sortOrder"] = query.sort.order.value
    return filters
