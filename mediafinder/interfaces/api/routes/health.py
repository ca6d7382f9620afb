"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter, Request

from mediafinder import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint."""
    services = getattr(request.app.state, "services", None)
    body: dict[str, Any] = {"status": "healthy", "service": "mediafinder"}
    if services is not None:
        body["providers"] = [adapter.provider.value for adapter in services.adapters]
        if services.cache is not None:
            body["cache"] = services.cache.stats()
    return body


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "MediaFinder API",
        "version": __version__,
        "description": "Film, TV, book, anime and manga search across public catalogs",
        "docs": "/docs",
    }
