"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import NormalizedQuery, NormalizedResult, ProviderOutcome, SearchPage, SourceProvider


@runtime_checkable
class ProviderAdapter(Protocol):
    """
    Contract for one remote catalog.

    Implementations must not raise: transport errors, bad statuses and
    malformed payloads are returned as a failed ProviderOutcome.
    """

    provider: SourceProvider

    async def search(self, text: str, page: int) -> ProviderOutcome:
        """Search the catalog and map hits to NormalizedResult."""
        ...


@runtime_checkable
class ResultProcessor(Protocol):
    """Contract for post-fetch filtering and ranking."""

    def process(
        self,
        results: list[NormalizedResult],
        query: NormalizedQuery,
    ) -> SearchPage:
        """Filter, sort and count results."""
        ...
