"""
TMDB Adapter - Film and TV catalog.
"""

from .client import TMDBAdapter, parse_tmdb_item, parse_tmdb_response

__all__ = ["TMDBAdapter", "parse_tmdb_item", "parse_tmdb_response"]
