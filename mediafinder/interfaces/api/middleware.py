"""
API Middleware - Request/response processing.

Provides:
- Request ID tracking
- Response latency measurement
- Error handling with taxonomy codes
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mediafinder.config.errors import ErrorCode, MediaFinderError

logger = logging.getLogger(__name__)

__all__ = [
    "ErrorHandlerMiddleware",
    "LatencyMiddleware",
    "RequestIDMiddleware",
    "error_response",
]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach request ID for tracing across logs and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        # Store in request state for access in handlers
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """Track and log request latency."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            "%s %s status=%d latency_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )

        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert MediaFinderError exceptions to structured JSON responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except MediaFinderError as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.warning(
                "MediaFinderError: %s request_id=%s details=%s",
                e.message,
                request_id,
                e.details,
            )
            return error_response(e, request_id)
        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled error: %s request_id=%s", str(e), request_id)
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "code": ErrorCode.INTERNAL_ERROR.value,
                        "message": "Internal server error",
                        "details": {},
                    },
                    "request_id": request_id,
                },
            )


def error_response(error: MediaFinderError, request_id: str) -> JSONResponse:
    """Build the structured error body for a MediaFinderError."""
    return JSONResponse(
        status_code=error_code_to_status(error.code),
        content={
            "error": error.to_dict(),
            "request_id": request_id,
        },
    )


def error_code_to_status(code: ErrorCode) -> int:
    """Map error codes to HTTP status codes."""
    mapping = {
        # 400 Bad Request
        ErrorCode.SEARCH_INVALID_QUERY: 400,
        # 401 Unauthorized
        ErrorCode.SECURITY_UNAUTHORIZED: 401,
        # 404 Not Found
        ErrorCode.NOT_FOUND: 404,
        # 503 Service Unavailable
        ErrorCode.STORAGE_CONNECTION_FAILED: 503,
        ErrorCode.STORAGE_READ_FAILED: 503,
        ErrorCode.STORAGE_WRITE_FAILED: 503,
        ErrorCode.PROVIDER_UNAVAILABLE: 503,
    }
    return mapping.get(code, 500)
