"""
Tests for search domain models and field normalization.
"""

from __future__ import annotations

import math

import pytest

from mediafinder.config.errors import ErrorCode, ProviderError

from .models import (
    MediaCategory,
    NormalizedQuery,
    NormalizedResult,
    ProviderOutcome,
    SearchFilters,
    SearchPage,
    SortKey,
    SortOrder,
    SourceProvider,
)
from .normalization import build_result_id, parse_rating, parse_text, parse_year


# --- NormalizedQuery Tests ---


def test_query_defaults() -> None:
    """Test NormalizedQuery with minimal required fields."""
    query = NormalizedQuery(text="batman")
    assert query.page == 1
    assert query.media_type is None
    assert query.filters == SearchFilters()
    assert query.sort.key == SortKey.RELEVANCE
    assert query.sort.order == SortOrder.DESC


def test_query_text_min_length() -> None:
    """Test query text needs at least two characters."""
    with pytest.raises(ValueError):
        NormalizedQuery(text="a")
    assert NormalizedQuery(text="ab").text == "ab"


def test_query_page_bounds() -> None:
    """Test page must be 1-100."""
    assert NormalizedQuery(text="test", page=100).page == 100
    with pytest.raises(ValueError):
        NormalizedQuery(text="test", page=0)
    with pytest.raises(ValueError):
        NormalizedQuery(text="test", page=101)


def test_query_accepts_camel_case_aliases() -> None:
    """Test wire-format field names are accepted."""
    query = NormalizedQuery.model_validate(
        {
            "text": "dune",
            "mediaType": "book",
            "filters": {"yearFrom": 1960, "ratingTo": 8.5, "genres": ["sf"]},
            "sort": {"key": "year", "order": "asc"},
        }
    )
    assert query.media_type == MediaCategory.BOOK
    assert query.filters.year_from == 1960
    assert query.filters.rating_to == 8.5
    assert query.filters.genres == frozenset({"sf"})
    assert query.sort.key == SortKey.YEAR


def test_query_rejects_unknown_enum() -> None:
    """Test sort key membership is enforced."""
    with pytest.raises(ValueError):
        NormalizedQuery.model_validate({"text": "dune", "sort": {"key": "hype"}})


def test_query_is_immutable() -> None:
    """Test NormalizedQuery is frozen."""
    query = NormalizedQuery(text="test")
    with pytest.raises(Exception):
        query.text = "changed"  # type: ignore


# --- NormalizedResult Tests ---


def test_result_serializes_camel_case_without_absent_fields() -> None:
    """Test absent optional fields are omitted on the wire."""
    result = NormalizedResult(
        id="ol-OL1W",
        title="Dune",
        media_category=MediaCategory.BOOK,
        year=1965,
        source_provider=SourceProvider.OPEN_LIBRARY,
    )
    data = result.model_dump(by_alias=True, exclude_none=True, mode="json")
    assert data == {
        "id": "ol-OL1W",
        "title": "Dune",
        "mediaCategory": "book",
        "year": 1965,
        "sourceProvider": "openlibrary",
    }


def test_result_requires_title() -> None:
    """Test empty titles are rejected."""
    with pytest.raises(ValueError):
        NormalizedResult(
            id="tmdb-1",
            title="",
            media_category=MediaCategory.FILM,
            source_provider=SourceProvider.TMDB,
        )


def test_search_page_defaults() -> None:
    """Test empty page shape."""
    page = SearchPage()
    assert page.model_dump(by_alias=True) == {
        "results": [],
        "total": 0,
        "page": 1,
        "totalPages": 0,
    }


# --- ProviderOutcome Tests ---


def test_outcome_success_and_failure() -> None:
    """Test the two outcome constructors."""
    ok = ProviderOutcome.success(SourceProvider.TMDB, [])
    assert ok.ok
    assert ok.error is None

    error = ProviderError("jikan", "boom", code=ErrorCode.PROVIDER_BAD_STATUS)
    failed = ProviderOutcome.failure(SourceProvider.JIKAN, error)
    assert not failed.ok
    assert failed.results == []
    assert failed.error.code == ErrorCode.PROVIDER_BAD_STATUS


# --- Normalization Tests ---


def test_build_result_id() -> None:
    """Test provider-prefixed ids."""
    assert build_result_id("tmdb", 603) == "tmdb-603"
    assert build_result_id("ol", "OL45804W") == "ol-OL45804W"
    assert build_result_id("tmdb", None) is None
    assert build_result_id("tmdb", "") is None
    assert build_result_id("tmdb", True) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1999, 1999),
        ("2005-06-15", 2005),
        ("1998-04-03T00:00:00+00:00", 1998),
        ("1987", 1987),
        ("", None),
        ("unknown", None),
        (None, None),
        (0, None),
        (True, None),
    ],
)
def test_parse_year(value, expected) -> None:
    """Test year extraction from ints and date strings."""
    assert parse_year(value) == expected


def test_parse_rating_keeps_absent_distinct_from_zero() -> None:
    """Test missing ratings stay None while real zeros survive."""
    assert parse_rating(None) is None
    assert parse_rating("n/a") is None
    assert parse_rating("8.1") == 8.1
    assert parse_rating(math.nan) is None
    assert parse_rating(False) is None
    assert parse_rating(0) == 0.0
    assert parse_rating(7.25) == 7.25


def test_parse_text() -> None:
    """Test blank strings become None."""
    assert parse_text("  Dune  ") == "Dune"
    assert parse_text("   ") is None
    assert parse_text(42) is None
