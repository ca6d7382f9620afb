"""
Search Domain - Multi-catalog search aggregation and ranking.

This domain handles:
- The shared result model every catalog maps into
- Concurrent provider fan-out with a global deadline
- Post-fetch filtering (media type, year, rating)
- Ranking (relevance, rating, year, title, popularity)
"""

from .aggregator import FanOutCoordinator
from .contracts import ProviderAdapter, ResultProcessor
from .models import (
    MediaCategory,
    NormalizedQuery,
    NormalizedResult,
    ProviderOutcome,
    SearchFilters,
    SearchPage,
    SortKey,
    SortOrder,
    SortSpec,
    SourceProvider,
)
from .ranking import FilterRankEngine

__all__ = [
    # Contracts
    "ProviderAdapter",
    "ResultProcessor",
    # Models
    "MediaCategory",
    "SourceProvider",
    "SortKey",
    "SortOrder",
    "SortSpec",
    "SearchFilters",
    "NormalizedQuery",
    "NormalizedResult",
    "ProviderOutcome",
    "SearchPage",
    # Implementations
    "FanOutCoordinator",
    "FilterRankEngine",
]
