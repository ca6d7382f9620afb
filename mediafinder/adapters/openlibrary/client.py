"""
Open Library Client - Book search.
"""

from __future__ import annotations

from typing import Any

import httpx

from mediafinder.adapters.base import HTTPProviderAdapter
from mediafinder.domains.search.models import MediaCategory, NormalizedResult, SourceProvider
from mediafinder.domains.search.normalization import build_result_id, parse_text, parse_year

__all__ = ["OpenLibraryAdapter", "parse_openlibrary_doc", "parse_openlibrary_response"]

OPENLIBRARY_BASE_URL = "https://openlibrary.org"
COVER_URL_TEMPLATE = "https://covers.openlibrary.org/b/id/{cover_id}-M.jpg"


def _clean_key(key: Any) -> str | None:
    if not isinstance(key, str):
        return None
    return key.replace("/works/", "").replace("/books/", "").strip() or None


def parse_openlibrary_doc(doc: Any) -> NormalizedResult | None:
    """Map one search doc. Books carry no rating."""
    if not isinstance(doc, dict):
        return None

    result_id = build_result_id("ol", _clean_key(doc.get("key")))
    title = parse_text(doc.get("title"))
    if result_id is None or title is None:
        return None

    cover_id = doc.get("cover_i")
    poster_url = (
        COVER_URL_TEMPLATE.format(cover_id=cover_id)
        if isinstance(cover_id, int) and not isinstance(cover_id, bool)
        else None
    )

    return NormalizedResult(
        id=result_id,
        title=title,
        media_category=MediaCategory.BOOK,
        year=parse_year(doc.get("first_publish_year")),
        poster_url=poster_url,
        description=parse_text(doc.get("subtitle")),
        rating=None,
        source_provider=SourceProvider.OPEN_LIBRARY,
    )


def parse_openlibrary_response(payload: dict[str, Any]) -> list[NormalizedResult]:
    """Map a search.json payload."""
    docs = payload.get("docs")
    if not isinstance(docs, list):
        return []
    return [result for doc in docs if (result := parse_openlibrary_doc(doc)) is not None]


class OpenLibraryAdapter(HTTPProviderAdapter):
    """
    Book catalog adapter.

    Pages are translated to limit/offset: page N starts at (N - 1) * page_size.
    """

    provider = SourceProvider.OPEN_LIBRARY

    def __init__(
        self,
        base_url: str = OPENLIBRARY_BASE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        page_size: int = 20,
    ) -> None:
        super().__init__(base_url, client=client, timeout=timeout)
        self.page_size = page_size

    async def _search(self, text: str, page: int) -> list[NormalizedResult]:
        payload = await self._get_json(
            "/search.json",
            {
                "q": text,
                "limit": self.page_size,
                "offset": (page - 1) * self.page_size,
            },
        )
        return parse_openlibrary_response(payload)
