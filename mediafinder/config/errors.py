"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from mediafinder.config.errors import ErrorCode, MediaFinderError

    raise MediaFinderError(ErrorCode.NOT_FOUND, "Search history is disabled")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Search errors
    SEARCH_INVALID_QUERY = "SEARCH_INVALID_QUERY"

    # Provider errors (recovered inside the search core)
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    PROVIDER_BAD_STATUS = "PROVIDER_BAD_STATUS"
    PROVIDER_BAD_RESPONSE = "PROVIDER_BAD_RESPONSE"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # Security errors
    SECURITY_UNAUTHORIZED = "SECURITY_UNAUTHORIZED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"


class MediaFinderError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class SearchError(MediaFinderError):
    """Invalid search request (rejected before the search core runs)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if field:
            details["field"] = field
        self.field = field
        super().__init__(ErrorCode.SEARCH_INVALID_QUERY, message, details)


class ProviderError(MediaFinderError):
    """
    Failure of one remote catalog.

    Carried as a value inside a ProviderOutcome; the search core never lets
    it propagate to the caller.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        code: ErrorCode = ErrorCode.PROVIDER_UNAVAILABLE,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.provider = provider
        self.retryable = retryable
        details = dict(details or {})
        details.setdefault("provider", provider)
        super().__init__(code, message, details)


class StorageError(MediaFinderError):
    """Storage/database errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORAGE_CONNECTION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details)


class AuthenticationError(MediaFinderError):
    """Missing or invalid caller identity."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(ErrorCode.SECURITY_UNAUTHORIZED, message)
