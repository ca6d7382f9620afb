"""
TMDB Client - Film and TV search via The Movie Database.

Uses the multi-search endpoint, which mixes movies, TV shows and people;
people are skipped.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mediafinder.adapters.base import HTTPProviderAdapter
from mediafinder.config.errors import ErrorCode, ProviderError
from mediafinder.domains.search.models import (
    MediaCategory,
    NormalizedResult,
    ProviderOutcome,
    SourceProvider,
)
from mediafinder.domains.search.normalization import (
    build_result_id,
    parse_rating,
    parse_text,
    parse_year,
)

logger = logging.getLogger(__name__)

__all__ = ["TMDBAdapter", "parse_tmdb_item", "parse_tmdb_response"]

TMDB_BASE_URL = "https://api.themoviedb.org/3"
POSTER_URL_TEMPLATE = "https://image.tmdb.org/t/p/w500{path}"

_CATEGORIES = {
    "movie": MediaCategory.FILM,
    "tv": MediaCategory.SERIES,
}


def parse_tmdb_item(item: Any) -> NormalizedResult | None:
    """Map one multi-search hit; returns None for people and unusable items."""
    if not isinstance(item, dict):
        return None

    media_type = item.get("media_type")
    category = _CATEGORIES.get(media_type) if isinstance(media_type, str) else None
    if category is None:
        return None

    result_id = build_result_id("tmdb", item.get("id"))
    title = parse_text(item.get("title")) or parse_text(item.get("name"))
    if result_id is None or title is None:
        return None

    year = parse_year(item.get("release_date")) or parse_year(item.get("first_air_date"))

    poster_path = parse_text(item.get("poster_path"))
    poster_url = POSTER_URL_TEMPLATE.format(path=poster_path) if poster_path else None

    # TMDB reports 0.0 for titles nobody has voted on yet.
    rating = parse_rating(item.get("vote_average"))
    if item.get("vote_count") == 0:
        rating = None

    return NormalizedResult(
        id=result_id,
        title=title,
        media_category=category,
        year=year,
        poster_url=poster_url,
        description=parse_text(item.get("overview")),
        rating=rating,
        source_provider=SourceProvider.TMDB,
    )


def parse_tmdb_response(payload: dict[str, Any]) -> list[NormalizedResult]:
    """Map a multi-search payload."""
    items = payload.get("results")
    if not isinstance(items, list):
        return []
    return [result for item in items if (result := parse_tmdb_item(item)) is not None]


class TMDBAdapter(HTTPProviderAdapter):
    """
    Film/TV catalog adapter.

    Example:
        >>> adapter = TMDBAdapter(api_key="...")
        >>> outcome = await adapter.search("batman", page=1)
    """

    provider = SourceProvider.TMDB

    def __init__(
        self,
        api_key: str | None,
        base_url: str = TMDB_BASE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize TMDB adapter.

        Args:
            api_key: TMDB v3 API key. Without one every search fails fast.
            base_url: API root
            client: Shared HTTP client
            timeout: Request timeout in seconds
        """
        super().__init__(base_url, client=client, timeout=timeout)
        self._api_key = api_key

    async def search(self, text: str, page: int) -> ProviderOutcome:
        if not self._api_key:
            logger.warning("TMDB API key not configured")
            return ProviderOutcome.failure(
                self.provider,
                ProviderError(
                    self.provider.value,
                    "TMDB API key not configured",
                    code=ErrorCode.PROVIDER_NOT_CONFIGURED,
                ),
            )
        return await super().search(text, page)

    async def _search(self, text: str, page: int) -> list[NormalizedResult]:
        payload = await self._get_json(
            "/search/multi",
            {"api_key": self._api_key, "query": text, "page": page},
        )
        return parse_tmdb_response(payload)
