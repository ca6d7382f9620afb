"""
SQLite Adapter - Search history and suggestion storage.
"""

from .repository import SearchHistoryRepository

__all__ = ["SearchHistoryRepository"]
