"""
FastAPI Main Application - Unified API entry point.

Run with: uvicorn mediafinder.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mediafinder import __version__
from mediafinder.config import get_settings
from mediafinder.config.errors import MediaFinderError

from .deps import build_services
from .middleware import (
    ErrorHandlerMiddleware,
    LatencyMiddleware,
    RequestIDMiddleware,
    error_response,
)
from .routes import health, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting MediaFinder API...")
    logger.info("  Search deadline: %.1fs", settings.search_timeout_seconds)
    logger.info("  TMDB key configured: %s", bool(settings.tmdb_api_key))

    services = build_services(settings)
    await services.start()
    app.state.services = services
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down MediaFinder API...")
    await services.close()
    app.state.services = None


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="MediaFinder API",
        description="Film, TV, book, anime and manga search across public catalogs",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    @app.exception_handler(MediaFinderError)
    async def handle_mediafinder_error(request: Request, exc: MediaFinderError):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("MediaFinderError: %s request_id=%s", exc.message, request_id)
        return error_response(exc, request_id)

    # Add middleware (order matters - last added = outermost)
    # 1. Error handling (innermost)
    app.add_middleware(ErrorHandlerMiddleware)

    # 2. Latency tracking
    app.add_middleware(LatencyMiddleware)

    # 3. Request ID (outermost custom - runs first)
    app.add_middleware(RequestIDMiddleware)

    # 4. CORS (framework middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID", "X-User-ID"],
    )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, prefix="/api/search", tags=["Search"])

    return app


# Create app instance
app = create_app()
