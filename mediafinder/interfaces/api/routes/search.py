"""
Search Routes - Aggregated media search, history and suggestions.

Identity:
- Optional X-User-ID header; searches made with it are kept in history
- History endpoints require it
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from mediafinder.adapters import SearchHistoryRepository
from mediafinder.config.errors import SearchError
from mediafinder.domains.orchestration import SearchPipeline
from mediafinder.domains.search import (
    MediaCategory,
    NormalizedQuery,
    SearchFilters,
    SearchPage,
    SortKey,
    SortOrder,
    SortSpec,
)
from mediafinder.interfaces.api.deps import (
    get_history_repository,
    get_pipeline,
    get_user_id,
    require_user_id,
)

logger = logging.getLogger(__name__)

router = APIRouter()

E = TypeVar("E", bound=Enum)


class HistoryEntry(BaseModel):
    """One recorded search."""

    id: int
    query: str
    filters: dict[str, Any] = Field(default_factory=dict)
    results_count: int = 0
    created_at: str


class HistoryResponse(BaseModel):
    """Page of search history."""

    history: list[HistoryEntry]
    limit: int
    offset: int


class DeleteHistoryResponse(BaseModel):
    """Outcome of a history deletion."""

    message: str
    deleted: int


class Suggestion(BaseModel):
    """Suggested query."""

    query: str
    type: str  # popular, history or trending
    count: int | None = None
    last_searched: str | None = None


class SuggestionsResponse(BaseModel):
    """Suggested queries."""

    suggestions: list[Suggestion]


def _parse_enum(enum_type: type[E], value: str | None, field: str, default: E) -> E:
    if value is None or not value.strip():
        return default
    try:
        return enum_type(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise SearchError(f"Invalid {field} '{value}'. Allowed: {allowed}", field=field) from None


def _parse_media_type(value: str | None) -> MediaCategory | None:
    if value is None or value.strip().lower() in ("", "all"):
        return None
    try:
        return MediaCategory(value.strip().lower())
    except ValueError:
        allowed = ", ".join(["all", *(member.value for member in MediaCategory)])
        raise SearchError(
            f"Invalid type '{value}'. Allowed: {allowed}", field="type"
        ) from None


def build_query(
    q: str | None,
    page: int,
    media_type: str | None,
    genres: str | None,
    year_from: int | None,
    year_to: int | None,
    rating_from: float | None,
    rating_to: float | None,
    sort_by: str | None,
    sort_order: str | None,
) -> NormalizedQuery:
    """
    Validate raw query-string values into a NormalizedQuery.

    Raises:
        SearchError: naming the offending field
    """
    text = (q or "").strip()
    if len(text) < 2:
        raise SearchError("Query must be at least 2 characters long", field="q")
    if not 1 <= page <= 100:
        raise SearchError("Page must be between 1 and 100", field="page")

    genre_set = frozenset(g.strip() for g in (genres or "").split(",") if g.strip())

    return NormalizedQuery(
        text=text,
        page=page,
        media_type=_parse_media_type(media_type),
        filters=SearchFilters(
            genres=genre_set,
            year_from=year_from,
            year_to=year_to,
            rating_from=rating_from,
            rating_to=rating_to,
        ),
        sort=SortSpec(
            key=_parse_enum(SortKey, sort_by, "sortBy", SortKey.RELEVANCE),
            order=_parse_enum(SortOrder, sort_order, "sortOrder", SortOrder.DESC),
        ),
    )


@router.get("", response_model=SearchPage, response_model_exclude_none=True)
async def search(
    q: str | None = Query(default=None, description="Search text, 2+ characters"),
    page: int = Query(default=1),
    type: str | None = Query(default=None, description="all, film, series, book, animation or comic"),
    media_type: str | None = Query(default=None, alias="mediaType"),
    genres: str | None = Query(default=None, description="Comma-separated genres (accepted, not applied)"),
    year_from: int | None = Query(default=None, alias="yearFrom"),
    year_to: int | None = Query(default=None, alias="yearTo"),
    rating_from: float | None = Query(default=None, alias="ratingFrom"),
    rating_to: float | None = Query(default=None, alias="ratingTo"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    user_id: str | None = Depends(get_user_id),
    pipeline: SearchPipeline = Depends(get_pipeline),
) -> SearchPage:
    """
    Search every catalog at once.

    Providers that fail or miss the deadline contribute nothing; the
    request itself still succeeds.
    """
    query = build_query(
        q,
        page,
        type or media_type,
        genres,
        year_from,
        year_to,
        rating_from,
        rating_to,
        sort_by,
        sort_order,
    )
    return await pipeline.execute(query, user_id=user_id)


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(require_user_id),
    repo: SearchHistoryRepository = Depends(get_history_repository),
) -> HistoryResponse:
    """Caller's search history, newest first."""
    rows = await repo.get_history(user_id, limit=limit, offset=offset)
    return HistoryResponse(
        history=[HistoryEntry(**row) for row in rows],
        limit=limit,
        offset=offset,
    )


@router.delete("/history", response_model=DeleteHistoryResponse)
async def delete_history(
    id: int | None = Query(default=None, description="Entry to delete; omit to clear all"),
    user_id: str = Depends(require_user_id),
    repo: SearchHistoryRepository = Depends(get_history_repository),
) -> DeleteHistoryResponse:
    """Delete one history entry or the whole history."""
    deleted = await repo.delete_history(user_id, entry_id=id)
    if id is not None:
        message = "Search history entry deleted" if deleted else "Search history entry not found"
    else:
        message = "Search history cleared"
    logger.info("Deleted %d history entries for %s", deleted, user_id)
    return DeleteHistoryResponse(message=message, deleted=deleted)


@router.get("/suggestions", response_model=SuggestionsResponse, response_model_exclude_none=True)
async def get_suggestions(
    q: str | None = Query(default=None),
    limit: int = Query(default=10, ge=1, le=20),
    include_history: bool = Query(default=False, alias="includeHistory"),
    user_id: str | None = Depends(get_user_id),
    repo: SearchHistoryRepository = Depends(get_history_repository),
) -> SuggestionsResponse:
    """Popular and personal query suggestions, or trending ones without q."""
    rows = await repo.get_suggestions(
        q,
        user_id=user_id,
        limit=limit,
        include_history=include_history,
    )
    return SuggestionsResponse(suggestions=[Suggestion(**row) for row in rows])
