"""
Jikan Client - Anime and manga search via the unofficial MyAnimeList API.

Features:
- Anime and manga sub-searches issued concurrently
- Each sub-search fails independently
- Fixed pause before each search to stay under Jikan's rate limit
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from mediafinder.adapters.base import HTTPProviderAdapter
from mediafinder.config.errors import ProviderError
from mediafinder.domains.search.models import MediaCategory, NormalizedResult, SourceProvider
from mediafinder.domains.search.normalization import (
    build_result_id,
    parse_rating,
    parse_text,
    parse_year,
)

logger = logging.getLogger(__name__)

__all__ = ["JikanAdapter", "parse_jikan_anime", "parse_jikan_manga", "parse_jikan_response"]

JIKAN_BASE_URL = "https://api.jikan.moe/v4"


def _poster(item: dict[str, Any]) -> str | None:
    images = item.get("images")
    if not isinstance(images, dict):
        return None
    jpg = images.get("jpg")
    if not isinstance(jpg, dict):
        return None
    return parse_text(jpg.get("image_url"))


def _date_from(value: Any) -> Any:
    """Pull the 'from' date out of Jikan's {from, to} period objects."""
    if isinstance(value, dict):
        return value.get("from")
    return None


def _parse_item(
    item: Any,
    prefix: str,
    category: MediaCategory,
    year: int | None,
) -> NormalizedResult | None:
    result_id = build_result_id(prefix, item.get("mal_id"))
    title = parse_text(item.get("title"))
    if result_id is None or title is None:
        return None

    return NormalizedResult(
        id=result_id,
        title=title,
        media_category=category,
        year=year,
        poster_url=_poster(item),
        description=parse_text(item.get("synopsis")),
        rating=parse_rating(item.get("score")),
        source_provider=SourceProvider.JIKAN,
    )


def parse_jikan_anime(item: Any) -> NormalizedResult | None:
    """Map one anime entry; year from 'year', else the airing start date."""
    if not isinstance(item, dict):
        return None
    year = parse_year(item.get("year")) or parse_year(_date_from(item.get("aired")))
    return _parse_item(item, "jikan-anime", MediaCategory.ANIMATION, year)


def parse_jikan_manga(item: Any) -> NormalizedResult | None:
    """Map one manga entry; year from the publication start date."""
    if not isinstance(item, dict):
        return None
    year = parse_year(_date_from(item.get("published")))
    return _parse_item(item, "jikan-manga", MediaCategory.COMIC, year)


def parse_jikan_response(payload: dict[str, Any], kind: str) -> list[NormalizedResult]:
    """Map an /anime or /manga payload."""
    items = payload.get("data")
    if not isinstance(items, list):
        return []
    parser = parse_jikan_anime if kind == "anime" else parse_jikan_manga
    return [result for item in items if (result := parser(item)) is not None]


class JikanAdapter(HTTPProviderAdapter):
    """
    Animation/comic catalog adapter.

    Example:
        >>> adapter = JikanAdapter()
        >>> outcome = await adapter.search("cowboy bebop", page=1)
    """

    provider = SourceProvider.JIKAN

    def __init__(
        self,
        base_url: str = JIKAN_BASE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        page_size: int = 10,
        request_delay: float = 0.1,
    ) -> None:
        """
        Initialize Jikan adapter.

        Args:
            base_url: API root
            client: Shared HTTP client
            timeout: Request timeout in seconds
            page_size: Items per sub-search
            request_delay: Pause in seconds before each search
        """
        super().__init__(base_url, client=client, timeout=timeout)
        self.page_size = page_size
        self.request_delay = request_delay

    async def _search(self, text: str, page: int) -> list[NormalizedResult]:
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

        anime, manga = await asyncio.gather(
            self._search_kind("anime", text, page),
            self._search_kind("manga", text, page),
        )

        if isinstance(anime, ProviderError) and isinstance(manga, ProviderError):
            raise ProviderError(
                self.provider.value,
                f"Anime and manga searches failed: {anime.message}; {manga.message}",
                code=anime.code,
                retryable=anime.retryable or manga.retryable,
            )

        results: list[NormalizedResult] = []
        for kind, outcome in (("anime", anime), ("manga", manga)):
            if isinstance(outcome, ProviderError):
                logger.warning("Jikan %s search failed: %s", kind, outcome.message)
                continue
            results.extend(outcome)
        return results

    async def _search_kind(
        self, kind: str, text: str, page: int
    ) -> list[NormalizedResult] | ProviderError:
        try:
            payload = await self._get_json(
                f"/{kind}",
                {"q": text, "page": page, "limit": self.page_size},
            )
        except ProviderError as e:
            return e

        try:
            return parse_jikan_response(payload, kind)
        except Exception as e:
            return self._malformed(e)
