"""
Orchestration Domain - Search pipeline coordination.

This domain handles:
- Result caching
- Provider retries
- Search pipeline orchestration
- Search history hand-off
"""

from .cache import SearchCache
from .contracts import ResultCache, SearchHistorySink
from .models import CachedResponse
from .pipeline import SearchPipeline
from .resilience import RetryingProvider

__all__ = [
    # Contracts
    "ResultCache",
    "SearchHistorySink",
    # Models
    "CachedResponse",
    # Implementations
    "SearchCache",
    "RetryingProvider",
    "SearchPipeline",
]
