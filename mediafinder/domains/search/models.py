"""
Search Models - Data types for the search domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from mediafinder.config.errors import ProviderError


class MediaCategory(str, Enum):
    """Kind of media a result describes."""

    FILM = "film"
    SERIES = "series"
    BOOK = "book"
    ANIMATION = "animation"
    COMIC = "comic"


class SourceProvider(str, Enum):
    """Remote catalog a result came from."""

    TMDB = "tmdb"
    OPEN_LIBRARY = "openlibrary"
    JIKAN = "jikan"


class SortKey(str, Enum):
    """Ranking keys."""

    RELEVANCE = "relevance"
    RATING = "rating"
    YEAR = "year"
    TITLE = "title"
    POPULARITY = "popularity"  # no separate metric; ranks like RATING


class SortOrder(str, Enum):
    """Sort direction. DESC puts the best match first."""

    ASC = "asc"
    DESC = "desc"


class SearchFilters(BaseModel):
    """Post-fetch filters. Inverted bounds are accepted and simply match less."""

    genres: frozenset[str] = Field(default_factory=frozenset)
    year_from: int | None = None
    year_to: int | None = None
    rating_from: float | None = None
    rating_to: float | None = None

    model_config = {"frozen": True, "alias_generator": to_camel, "populate_by_name": True}


class SortSpec(BaseModel):
    """Sort key and direction."""

    key: SortKey = SortKey.RELEVANCE
    order: SortOrder = SortOrder.DESC

    model_config = {"frozen": True}


class NormalizedQuery(BaseModel):
    """Search request as seen by the pipeline."""

    text: str = Field(..., min_length=2)
    page: int = Field(default=1, ge=1, le=100)
    media_type: MediaCategory | None = None
    filters: SearchFilters = Field(default_factory=SearchFilters)
    sort: SortSpec = Field(default_factory=SortSpec)

    model_config = {"frozen": True, "alias_generator": to_camel, "populate_by_name": True}


class NormalizedResult(BaseModel):
    """
    One catalog entry in the shape shared by every provider.

    Optional fields are None when the provider did not supply them; a
    missing rating is never stored as 0.
    """

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    media_category: MediaCategory
    year: int | None = None
    poster_url: str | None = None
    description: str | None = None
    rating: float | None = None
    source_provider: SourceProvider

    model_config = {"frozen": True, "alias_generator": to_camel, "populate_by_name": True}


class SearchPage(BaseModel):
    """Ranked results plus pagination counters."""

    results: list[NormalizedResult] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0

    model_config = {"frozen": True, "alias_generator": to_camel, "populate_by_name": True}


@dataclass
class ProviderOutcome:
    """Either the results of one provider call or the error that replaced them."""

    provider: SourceProvider
    results: list[NormalizedResult] = field(default_factory=list)
    error: ProviderError | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, provider: SourceProvider, results: list[NormalizedResult]
    ) -> ProviderOutcome:
        return cls(provider=provider, results=list(results))

    @classmethod
    def failure(cls, provider: SourceProvider, error: ProviderError) -> ProviderOutcome:
        return cls(provider=provider, error=error)
