"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .base import HTTPProviderAdapter
from .jikan import JikanAdapter
from .openlibrary import OpenLibraryAdapter
from .sqlite import SearchHistoryRepository
from .tmdb import TMDBAdapter

__all__ = [
    # Catalog providers
    "HTTPProviderAdapter",
    "TMDBAdapter",
    "OpenLibraryAdapter",
    "JikanAdapter",
    # Storage
    "SearchHistoryRepository",
]
