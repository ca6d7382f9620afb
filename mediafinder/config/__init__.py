"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    AuthenticationError,
    ErrorCode,
    MediaFinderError,
    ProviderError,
    SearchError,
    StorageError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "MediaFinderError",
    "SearchError",
    "ProviderError",
    "StorageError",
    "AuthenticationError",
]
