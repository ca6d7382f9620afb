"""
Filter & Rank Engine - Post-fetch filtering, ranking and page counting.

Filters (AND-combined, in order):
- media type
- year range (results without a year always pass)
- rating range (results without a rating always pass)
- genres (accepted but not applied; providers return no genre data)

Ranking keys: relevance, rating, year, title, popularity. DESC puts the
best match first for every key, ASC reverses it. Missing ratings and years
compare as 0 without touching the stored value.
"""

from __future__ import annotations

import locale
import logging
import math
import unicodedata
from collections.abc import Callable
from typing import Any

from .models import (
    MediaCategory,
    NormalizedQuery,
    NormalizedResult,
    SearchPage,
    SortKey,
    SortOrder,
)

logger = logging.getLogger(__name__)

__all__ = ["FilterRankEngine", "count_by_category", "title_collation_key", "within_range"]


def within_range(value: float | None, low: float | None, high: float | None) -> bool:
    """True when value is absent or lies inside the (optional) closed bounds."""
    if value is None:
        return True
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def title_collation_key(title: str) -> tuple[str, str]:
    """Locale-aware sort key: accents stripped, casefolded, then strxfrm."""
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return locale.strxfrm(base), title


class FilterRankEngine:
    """
    Pure filter/sort stage of the search pipeline.

    Example:
        >>> engine = FilterRankEngine(page_size=20)
        >>> page = engine.process(results, NormalizedQuery(text="batman"))
        >>> page.total_pages
    """

    def __init__(self, page_size: int = 20) -> None:
        """
        Initialize engine.

        Args:
            page_size: Results per presentation page, used for total_pages
        """
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    def process(
        self,
        results: list[NormalizedResult],
        query: NormalizedQuery,
    ) -> SearchPage:
        """
        Filter then rank results.

        The full list is returned; slicing to a page window is left to the
        presentation layer.
        """
        filtered = self.apply_filters(results, query)
        ranked = self.sort(filtered, query)
        total = len(ranked)

        return SearchPage(
            results=ranked,
            total=total,
            page=query.page,
            total_pages=math.ceil(total / self._page_size),
        )

    def apply_filters(
        self,
        results: list[NormalizedResult],
        query: NormalizedQuery,
    ) -> list[NormalizedResult]:
        """Apply media type, year, rating and genre filters."""
        filters = query.filters
        filtered = list(results)

        if query.media_type is not None:
            filtered = [r for r in filtered if r.media_category == query.media_type]

        if filters.year_from is not None or filters.year_to is not None:
            filtered = [
                r for r in filtered if within_range(r.year, filters.year_from, filters.year_to)
            ]

        if filters.rating_from is not None or filters.rating_to is not None:
            filtered = [
                r
                for r in filtered
                if within_range(r.rating, filters.rating_from, filters.rating_to)
            ]

        if filters.genres:
            # No provider adapter reports genres yet, so there is nothing to match on.
            logger.debug("Genre filter ignored: %s", sorted(filters.genres))

        return filtered

    def sort(
        self,
        results: list[NormalizedResult],
        query: NormalizedQuery,
    ) -> list[NormalizedResult]:
        """Stable sort; ties keep their incoming order in both directions."""
        key = self._sort_key(query.sort.key, query.text)
        return sorted(results, key=key, reverse=query.sort.order == SortOrder.DESC)

    @staticmethod
    def _sort_key(
        sort_key: SortKey, text: str
    ) -> Callable[[NormalizedResult], Any]:
        """Build an ascending sort key; DESC reverses it."""
        if sort_key == SortKey.RELEVANCE:
            needle = text.strip().casefold()
            return lambda r: (needle in r.title.casefold(), r.rating or 0.0)
        if sort_key in (SortKey.RATING, SortKey.POPULARITY):
            return lambda r: r.rating or 0.0
        if sort_key == SortKey.YEAR:
            return lambda r: r.year or 0
        if sort_key == SortKey.TITLE:
            return lambda r: title_collation_key(r.title)
        raise ValueError(f"Unsupported sort key: {sort_key}")


def count_by_category(results: list[NormalizedResult]) -> dict[MediaCategory, int]:
    """Tally results per media category (used for search summaries)."""
    counts: dict[MediaCategory, int] = {}
    for result in results:
        counts[result.media_category] = counts.get(result.media_category, 0) + 1
    return counts
