"""
API Dependencies - Dependency injection for FastAPI routes.

Services are built once per process in the app lifespan and kept on
``app.state.services``; routes reach them through the getters below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from fastapi import Header, Request

from mediafinder.adapters import (
    JikanAdapter,
    OpenLibraryAdapter,
    SearchHistoryRepository,
    TMDBAdapter,
)
from mediafinder.adapters.base import USER_AGENT
from mediafinder.config import Settings, get_settings
from mediafinder.config.errors import AuthenticationError, ErrorCode, MediaFinderError
from mediafinder.domains.orchestration import RetryingProvider, SearchCache, SearchPipeline
from mediafinder.domains.search import FanOutCoordinator, FilterRankEngine, ProviderAdapter

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Process-wide collaborators owned by the host."""

    http_client: httpx.AsyncClient
    adapters: list[ProviderAdapter]
    pipeline: SearchPipeline
    cache: SearchCache | None = None
    history: SearchHistoryRepository | None = None

    async def start(self) -> None:
        if self.cache is not None:
            await self.cache.start()
        if self.history is not None:
            await self.history.initialize()

    async def close(self) -> None:
        await self.pipeline.drain()
        if self.cache is not None:
            await self.cache.close()
        if self.history is not None:
            await self.history.close()
        await self.http_client.aclose()


def build_adapters(settings: Settings, client: httpx.AsyncClient) -> list[ProviderAdapter]:
    """Provider adapters in merge order: film/TV, books, animation/comics."""
    adapters: list[ProviderAdapter] = [
        TMDBAdapter(
            api_key=settings.tmdb_api_key,
            base_url=settings.tmdb_base_url,
            client=client,
        ),
        OpenLibraryAdapter(
            base_url=settings.openlibrary_base_url,
            client=client,
            page_size=settings.openlibrary_page_size,
        ),
        JikanAdapter(
            base_url=settings.jikan_base_url,
            client=client,
            page_size=settings.jikan_page_size,
            request_delay=settings.jikan_request_delay,
        ),
    ]
    if settings.provider_retry_attempts > 0:
        adapters = [
            RetryingProvider(adapter, retries=settings.provider_retry_attempts)
            for adapter in adapters
        ]
    return adapters


def build_services(settings: Settings | None = None) -> Services:
    """Wire adapters, cache, history and pipeline from settings."""
    settings = settings or get_settings()

    client = httpx.AsyncClient(
        timeout=settings.provider_request_timeout,
        headers={"User-Agent": USER_AGENT},
    )
    adapters = build_adapters(settings, client)

    cache = (
        SearchCache(
            max_size=settings.cache_max_size,
            default_ttl=settings.cache_ttl_seconds,
            cleanup_interval=settings.cache_cleanup_interval,
        )
        if settings.cache_enabled
        else None
    )
    history = (
        SearchHistoryRepository(settings.history_db_path) if settings.history_enabled else None
    )

    pipeline = SearchPipeline(
        FanOutCoordinator(adapters, timeout_seconds=settings.search_timeout_seconds),
        FilterRankEngine(page_size=settings.search_page_size),
        cache=cache,
        history=history,
    )

    logger.info(
        "Search services built: providers=%s cache=%s history=%s",
        [a.provider.value for a in adapters],
        settings.cache_enabled,
        settings.history_enabled,
    )
    return Services(
        http_client=client,
        adapters=adapters,
        pipeline=pipeline,
        cache=cache,
        history=history,
    )


def _services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise MediaFinderError(ErrorCode.INTERNAL_ERROR, "Services not initialized")
    return services


def get_pipeline(request: Request) -> SearchPipeline:
    """Get the search pipeline."""
    return _services(request).pipeline


def get_history_repository(request: Request) -> SearchHistoryRepository:
    """Get the search history repository."""
    history = _services(request).history
    if history is None:
        raise MediaFinderError(ErrorCode.NOT_FOUND, "Search history is disabled")
    return history


def get_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Caller identity from the X-User-ID header, if any."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity; 401 without one."""
    user_id = get_user_id(x_user_id)
    if user_id is None:
        raise AuthenticationError("X-User-ID header required")
    return user_id
