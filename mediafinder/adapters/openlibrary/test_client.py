"""
Tests for Open Library adapter.
"""

from __future__ import annotations

import httpx

from mediafinder.config.errors import ErrorCode
from mediafinder.domains.search.models import MediaCategory, SourceProvider

from .client import OpenLibraryAdapter, parse_openlibrary_doc, parse_openlibrary_response

DOC = {
    "key": "/works/OL893415W",
    "title": "Dune",
    "subtitle": "Deluxe Edition",
    "first_publish_year": 1965,
    "cover_i": 11481354,
    "ratings_average": 4.2,
}


def test_parse_doc() -> None:
    result = parse_openlibrary_doc(DOC)
    assert result is not None
    assert result.id == "ol-OL893415W"
    assert result.title == "Dune"
    assert result.media_category == MediaCategory.BOOK
    assert result.year == 1965
    assert result.poster_url == "https://covers.openlibrary.org/b/id/11481354-M.jpg"
    assert result.description == "Deluxe Edition"
    assert result.source_provider == SourceProvider.OPEN_LIBRARY


def test_parse_doc_never_has_rating() -> None:
    result = parse_openlibrary_doc(DOC)
    assert result is not None
    assert result.rating is None


def test_parse_doc_minimal() -> None:
    result = parse_openlibrary_doc({"key": "/books/OL1M", "title": "Untitled Draft"})
    assert result is not None
    assert result.id == "ol-OL1M"
    assert result.year is None
    assert result.poster_url is None
    assert result.description is None


def test_parse_doc_rejects_incomplete() -> None:
    assert parse_openlibrary_doc({"title": "No key"}) is None
    assert parse_openlibrary_doc({"key": "/works/OL1W", "title": "  "}) is None
    assert parse_openlibrary_doc(None) is None


def test_parse_response_skips_bad_docs() -> None:
    results = parse_openlibrary_response({"docs": [DOC, {"title": "No key"}, "junk"]})
    assert [r.id for r in results] == ["ol-OL893415W"]
    assert parse_openlibrary_response({"numFound": 0}) == []


async def test_search_translates_page_to_offset() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"numFound": 1, "docs": [DOC]})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    adapter = OpenLibraryAdapter(base_url="https://ol.test", client=client, page_size=20)

    outcome = await adapter.search("dune", 3)

    assert outcome.ok
    assert [r.id for r in outcome.results] == ["ol-OL893415W"]
    params = seen[0].url.params
    assert seen[0].url.path == "/search.json"
    assert params["q"] == "dune"
    assert params["limit"] == "20"
    assert params["offset"] == "40"


async def test_search_failure_returns_error_outcome() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(502)))
    adapter = OpenLibraryAdapter(client=client)

    outcome = await adapter.search("dune", 1)

    assert not outcome.ok
    assert outcome.results == []
    assert outcome.error.code == ErrorCode.PROVIDER_BAD_STATUS
    assert outcome.error.provider == "openlibrary"
