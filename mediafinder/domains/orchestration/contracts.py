"""
Orchestration Contracts - Interfaces for orchestration domain.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from mediafinder.domains.search.models import SearchPage

from .models import CachedResponse


@runtime_checkable
class ResultCache(Protocol):
    """Contract for search result caching."""

    async def get(self, key: str) -> CachedResponse | None:
        """Get cached page, or None when missing or expired."""
        ...

    async def set(
        self,
        key: str,
        response: SearchPage,
        ttl_seconds: int | None = None,
    ) -> None:
        """Cache a page."""
        ...

    async def invalidate(self, pattern: str) -> int:
        """Invalidate cache entries matching pattern."""
        ...


@runtime_checkable
class SearchHistorySink(Protocol):
    """Contract for recording executed searches."""

    async def record_search(
        self,
        user_id: str | None,
        query: str,
        filters: dict[str, Any] | None,
        results_count: int,
    ) -> None:
        """
        Record one search.

        Args:
            user_id: Caller, or None when anonymous
            query: Search text
            filters: Filters and sort the search ran with
            results_count: Number of results returned
        """
        ...
