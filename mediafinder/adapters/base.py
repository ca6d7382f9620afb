"""
HTTP Provider Adapter - Shared plumbing for remote catalog adapters.

Features:
- Async HTTP client (shared or owned)
- Transport/status/payload errors mapped to ProviderError
- search() never raises; failures come back as ProviderOutcome
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mediafinder.config.errors import ErrorCode, ProviderError
from mediafinder.domains.search.models import NormalizedResult, ProviderOutcome, SourceProvider

logger = logging.getLogger(__name__)

__all__ = ["HTTPProviderAdapter"]

USER_AGENT = "mediafinder/1.0"


class HTTPProviderAdapter:
    """
    Base class for provider adapters backed by a JSON HTTP API.

    Subclasses set ``provider`` and implement ``_search``.
    """

    provider: SourceProvider

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize adapter.

        Args:
            base_url: API root, without trailing slash
            client: Shared HTTP client. When omitted the adapter creates and owns one.
            timeout: Per-request timeout in seconds (owned client only)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_client = True
        return self._client

    async def search(self, text: str, page: int) -> ProviderOutcome:
        """Search the catalog. Never raises."""
        try:
            results = await self._search(text, page)
        except ProviderError as e:
            logger.warning("%s search failed: %s", self.provider.value, e.message)
            return ProviderOutcome.failure(self.provider, e)
        except Exception as e:
            logger.warning("%s returned an unreadable payload: %r", self.provider.value, e)
            return ProviderOutcome.failure(self.provider, self._malformed(e))

        logger.debug("%s returned %d results for '%s'", self.provider.value, len(results), text[:50])
        return ProviderOutcome.success(self.provider, results)

    async def _search(self, text: str, page: int) -> list[NormalizedResult]:
        raise NotImplementedError

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        GET a JSON object.

        Raises:
            ProviderError: transport failure, non-2xx status or non-object body
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise self._error(
                f"Request timed out: {e}", ErrorCode.PROVIDER_TIMEOUT, retryable=True
            ) from e
        except httpx.HTTPError as e:
            raise self._error(
                f"Request failed: {e}", ErrorCode.PROVIDER_UNAVAILABLE, retryable=True
            ) from e

        if not response.is_success:
            status = response.status_code
            raise self._error(
                f"HTTP {status} from {path}",
                ErrorCode.PROVIDER_BAD_STATUS,
                retryable=status == 429 or status >= 500,
                details={"status": status},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise self._error(
                f"Invalid JSON from {path}", ErrorCode.PROVIDER_BAD_RESPONSE
            ) from e

        if not isinstance(data, dict):
            raise self._error(
                f"Unexpected payload type {type(data).__name__} from {path}",
                ErrorCode.PROVIDER_BAD_RESPONSE,
            )
        return data

    def _error(
        self,
        message: str,
        code: ErrorCode,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> ProviderError:
        return ProviderError(
            self.provider.value,
            message,
            code=code,
            retryable=retryable,
            details=details,
        )

    def _malformed(self, exc: Exception) -> ProviderError:
        """Wrap a payload-mapping failure."""
        return self._error(
            f"Malformed payload: {type(exc).__name__}: {exc}",
            ErrorCode.PROVIDER_BAD_RESPONSE,
        )

    async def close(self) -> None:
        """Close HTTP client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
