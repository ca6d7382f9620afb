"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Remote catalogs
    tmdb_api_key: str | None = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    openlibrary_base_url: str = "https://openlibrary.org"
    jikan_base_url: str = "https://api.jikan.moe/v4"

    # Provider behaviour
    provider_request_timeout: float = 10.0
    provider_retry_attempts: int = 0
    openlibrary_page_size: int = 20
    jikan_page_size: int = 10
    jikan_request_delay: float = 0.1

    # Search pipeline
    search_timeout_seconds: float = 15.0
    search_page_size: int = 20

    # Cache
    cache_enabled: bool = True
    cache_ttl_seconds: int = 300
    cache_max_size: int = 1000
    cache_cleanup_interval: float = 300.0

    # History / suggestions
    history_enabled: bool = True
    history_db_path: Path = Path("data/history.db")

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:4321",
        "http://127.0.0.1:3000",
    ]

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
