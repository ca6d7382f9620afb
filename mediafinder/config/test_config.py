"""Tests for settings and error taxonomy."""

from pathlib import Path

import pytest

from .errors import (
    AuthenticationError,
    ErrorCode,
    MediaFinderError,
    ProviderError,
    SearchError,
    StorageError,
)
from .settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.tmdb_api_key is None
    assert settings.search_timeout_seconds == 15.0
    assert settings.search_page_size == 20
    assert settings.jikan_request_delay == 0.1
    assert settings.cache_ttl_seconds == 300
    assert settings.provider_retry_attempts == 0
    assert settings.history_db_path == Path("data/history.db")


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMDB_API_KEY", "secret")
    monkeypatch.setenv("SEARCH_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("cache_enabled", "false")

    settings = Settings(_env_file=None)

    assert settings.tmdb_api_key == "secret"
    assert settings.search_timeout_seconds == 5.0
    assert settings.cache_enabled is False


def test_error_to_dict() -> None:
    error = MediaFinderError(ErrorCode.NOT_FOUND, "Missing", {"id": 3})
    assert error.to_dict() == {"code": "NOT_FOUND", "message": "Missing", "details": {"id": 3}}
    assert "NOT_FOUND" in str(error)


def test_search_error_names_field() -> None:
    error = SearchError("Page must be between 1 and 100", field="page")
    assert error.code == ErrorCode.SEARCH_INVALID_QUERY
    assert error.details == {"field": "page"}


def test_provider_error_carries_provider() -> None:
    error = ProviderError("jikan", "HTTP 429", code=ErrorCode.PROVIDER_BAD_STATUS, retryable=True)
    assert error.provider == "jikan"
    assert error.retryable
    assert error.details["provider"] == "jikan"
    assert ProviderError("tmdb", "down").code == ErrorCode.PROVIDER_UNAVAILABLE


def test_other_error_codes() -> None:
    assert StorageError("locked").code == ErrorCode.STORAGE_CONNECTION_FAILED
    assert AuthenticationError().code == ErrorCode.SECURITY_UNAUTHORIZED
    assert StorageError("gone", code=ErrorCode.STORAGE_READ_FAILED).code == ErrorCode.STORAGE_READ_FAILED
