"""
Search Cache - In-memory caching of ranked search pages with TTL support.

Provides efficient caching for repeated queries to avoid hitting every
remote catalog again within the TTL window.
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from mediafinder.domains.search.models import NormalizedQuery, SearchPage

from .models import CachedResponse

logger = logging.getLogger(__name__)

__all__ = ["SearchCache"]


class SearchCache:
    """
    In-memory search cache with TTL.

    Features:
    - Automatic TTL expiration
    - Background sweep of expired entries (start/close)
    - Pattern-based invalidation
    - Hit tracking for analytics
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 300,
        cleanup_interval: float = 300.0,
    ) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached entries
            default_ttl: Default TTL in seconds
            cleanup_interval: Seconds between background sweeps
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._cache: dict[str, CachedResponse] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._cleanup_interval = cleanup_interval
        self._cleanup_task: asyncio.Task[None] | None = None
        self._hits = 0
        self._misses = 0

    async def start(self) -> None:
        """Start the periodic cleanup task."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(
                self._cleanup_loop(), name="search-cache-cleanup"
            )

    async def close(self) -> None:
        """Stop the cleanup task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
            self._cleanup_task = None

    async def get(self, key: str) -> CachedResponse | None:
        """Get cached page if not expired."""
        entry = self._cache.get(key)
        if not entry:
            self._misses += 1
            return None

        if entry.is_expired():
            del self._cache[key]
            self._misses += 1
            logger.debug("Cache entry expired: %s", key[:48])
            return None

        entry.hit_count += 1
        self._hits += 1
        logger.debug("Cache hit: %s (hits: %d)", key[:48], entry.hit_count)
        return entry

    async def set(
        self,
        key: str,
        response: SearchPage,
        ttl_seconds: int | None = None,
    ) -> None:
        """Cache a page."""
        if key not in self._cache and len(self._cache) >= self._max_size:
            await self._evict_oldest()

        ttl = ttl_seconds or self._default_ttl
        now = datetime.now(timezone.utc)

        self._cache[key] = CachedResponse(
            key=key,
            response=response,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
            hit_count=0,
        )

        logger.debug("Cached response: %s (TTL: %ds)", key[:48], ttl)

    async def invalidate(self, pattern: str) -> int:
        """Invalidate cache entries matching pattern."""
        regex = re.compile(pattern)
        keys_to_delete = [k for k in self._cache if regex.search(k)]

        for key in keys_to_delete:
            del self._cache[key]

        logger.info("Invalidated %d cache entries matching: %s", len(keys_to_delete), pattern)
        return len(keys_to_delete)

    async def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._cache)
        self._cache.clear()
        logger.info("Cleared %d cache entries", count)

    async def cleanup_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = datetime.now(timezone.utc)
        expired = [k for k, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.debug("Removed %d expired cache entries", len(expired))
        return len(expired)

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            await self.cleanup_expired()

    async def _evict_oldest(self) -> None:
        """Evict oldest entries to make room."""
        if not self._cache:
            return

        # Sort by creation time and remove oldest 10%
        sorted_keys = sorted(
            self._cache.keys(),
            key=lambda k: self._cache[k].created_at,
        )
        evict_count = max(1, len(sorted_keys) // 10)

        for key in sorted_keys[:evict_count]:
            del self._cache[key]

        logger.debug("Evicted %d oldest cache entries", evict_count)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        lookups = self._hits + self._misses
        return {
            "size": len(self._cache),
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / lookups if lookups else 0.0,
        }

    @staticmethod
    def generate_key(query: NormalizedQuery) -> str:
        """
        Generate cache key from a normalized query.

        The readable prefix keeps keys addressable by invalidate(); the
        digest covers page, media type, filters and sort.
        """
        normalized = " ".join(query.text.lower().split())
        parts = [
            normalized,
            f"page:{query.page}",
            f"type:{query.media_type.value if query.media_type else 'all'}",
            f"genres:{','.join(sorted(query.filters.genres))}",
            f"year:{query.filters.year_from}-{query.filters.year_to}",
            f"rating:{query.filters.rating_from}-{query.filters.rating_to}",
            f"sort:{query.sort.key.value}:{query.sort.order.value}",
        ]
        digest = hashlib.sha256("|".join(parts).encode()).hexdigest()[:32]
        return f"search:{normalized}:{digest}"
