"""
Jikan Adapter - Animation and comic catalog.
"""

from .client import JikanAdapter, parse_jikan_anime, parse_jikan_manga, parse_jikan_response

__all__ = ["JikanAdapter", "parse_jikan_anime", "parse_jikan_manga", "parse_jikan_response"]
