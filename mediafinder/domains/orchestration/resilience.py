"""
Provider Resilience - Retry wrapper for provider adapters.

Retries only failures flagged as retryable (timeouts, connection errors,
429 and 5xx). The fan-out deadline still bounds the total time spent.
"""

from __future__ import annotations

import logging

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from mediafinder.domains.search.contracts import ProviderAdapter
from mediafinder.domains.search.models import ProviderOutcome, SourceProvider

logger = logging.getLogger(__name__)

__all__ = ["RetryingProvider"]


def _should_retry(outcome: ProviderOutcome) -> bool:
    return outcome.error is not None and outcome.error.retryable


def _last_outcome(retry_state: RetryCallState) -> ProviderOutcome:
    return retry_state.outcome.result()


class RetryingProvider:
    """
    Adapter decorator that re-issues retryable failures.

    Example:
        >>> adapter = RetryingProvider(TMDBAdapter(api_key="..."), retries=2)
        >>> outcome = await adapter.search("alien", page=1)
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        retries: int = 2,
        wait_min: float = 0.5,
        wait_max: float = 4.0,
    ) -> None:
        """
        Initialize wrapper.

        Args:
            adapter: Adapter to wrap
            retries: Extra attempts after the first call
            wait_min: Minimum backoff in seconds
            wait_max: Maximum backoff in seconds
        """
        if retries < 0:
            raise ValueError("retries must be >= 0")
        self._adapter = adapter
        self._retries = retries
        self._wait_min = wait_min
        self._wait_max = wait_max

    @property
    def provider(self) -> SourceProvider:
        return self._adapter.provider

    @property
    def wrapped(self) -> ProviderAdapter:
        return self._adapter

    async def search(self, text: str, page: int) -> ProviderOutcome:
        """Search with retries. Returns the last outcome once attempts run out."""
        retrying = AsyncRetrying(
            retry=retry_if_result(_should_retry),
            stop=stop_after_attempt(self._retries + 1),
            wait=wait_exponential(multiplier=self._wait_min, min=self._wait_min, max=self._wait_max),
            retry_error_callback=_last_outcome,
            before_sleep=self._log_retry,
        )
        return await retrying(self._adapter.search, text, page)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome.result()
        logger.warning(
            "Retrying %s after attempt %d: %s",
            self.provider.value,
            retry_state.attempt_number,
            outcome.error.message if outcome.error else "",
        )

    async def close(self) -> None:
        close = getattr(self._adapter, "close", None)
        if close is not None:
            await close()
