"""
Fan-out Coordinator - Concurrent provider calls under one global deadline.

Features:
- One asyncio task per provider adapter
- Single shared deadline; late providers count as empty
- Per-provider failure isolation
- Output order follows adapter registration, never completion order
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

from mediafinder.config.errors import ErrorCode, ProviderError

from .contracts import ProviderAdapter
from .models import NormalizedQuery, NormalizedResult, ProviderOutcome

logger = logging.getLogger(__name__)

__all__ = ["FanOutCoordinator"]

DEFAULT_TIMEOUT_SECONDS = 15.0


class FanOutCoordinator:
    """
    Issue every provider adapter concurrently and collect what arrives in time.

    Example:
        >>> coordinator = FanOutCoordinator([tmdb, openlibrary, jikan])
        >>> results = await coordinator.aggregate(NormalizedQuery(text="batman"))
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            adapters: Provider adapters, in the order their results are merged
            timeout_seconds: Global deadline for all adapters together
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._adapters = list(adapters)
        self._timeout = timeout_seconds

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    async def aggregate(self, query: NormalizedQuery) -> list[NormalizedResult]:
        """Fan out and return the merged results of every successful provider."""
        return self.merge(await self.collect(query))

    async def collect(self, query: NormalizedQuery) -> list[ProviderOutcome]:
        """
        Run all adapters and return one outcome per adapter.

        Adapters still running at the deadline are cancelled and reported as
        PROVIDER_TIMEOUT failures; their results are never awaited.
        """
        if not self._adapters:
            return []

        tasks = [
            asyncio.create_task(
                self._invoke(adapter, query),
                name=f"provider-{adapter.provider.value}",
            )
            for adapter in self._adapters
        ]

        _, pending = await asyncio.wait(tasks, timeout=self._timeout)
        for task in pending:
            task.cancel()

        outcomes: list[ProviderOutcome] = []
        for adapter, task in zip(self._adapters, tasks):
            if task in pending:
                logger.warning(
                    "Provider %s timed out after %.1fs",
                    adapter.provider.value,
                    self._timeout,
                )
                outcomes.append(
                    ProviderOutcome.failure(
                        adapter.provider,
                        ProviderError(
                            adapter.provider.value,
                            f"No response within {self._timeout:.1f}s",
                            code=ErrorCode.PROVIDER_TIMEOUT,
                            retryable=True,
                        ),
                    )
                )
            else:
                outcomes.append(task.result())

        return outcomes

    @staticmethod
    def merge(outcomes: Sequence[ProviderOutcome]) -> list[NormalizedResult]:
        """
        Concatenate successful outcomes in order.

        Failed outcomes contribute nothing. Repeated ids (a provider listing
        the same entry twice) keep their first occurrence only.
        """
        merged: list[NormalizedResult] = []
        seen: set[str] = set()

        for outcome in outcomes:
            if outcome.error is not None:
                logger.info(
                    "Dropping %s results: %s",
                    outcome.provider.value,
                    outcome.error.message,
                )
                continue
            for result in outcome.results:
                if result.id in seen:
                    logger.debug("Duplicate result id skipped: %s", result.id)
                    continue
                seen.add(result.id)
                merged.append(result)

        return merged

    async def _invoke(
        self,
        adapter: ProviderAdapter,
        query: NormalizedQuery,
    ) -> ProviderOutcome:
        """Call one adapter, turning any escaped exception into a failure outcome."""
        start_time = time.perf_counter()
        try:
            outcome = await adapter.search(query.text, query.page)
        except Exception as e:
            logger.exception("Provider %s raised unexpectedly", adapter.provider.value)
            outcome = ProviderOutcome.failure(
                adapter.provider,
                ProviderError(
                    adapter.provider.value,
                    f"Adapter raised {type(e).__name__}: {e}",
                ),
            )

        outcome.duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Provider %s finished: ok=%s results=%d latency_ms=%.1f",
            adapter.provider.value,
            outcome.ok,
            len(outcome.results),
            outcome.duration_ms,
        )
        return outcome
