"""
Orchestration Models - Data types for orchestration domain.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from mediafinder.domains.search.models import SearchPage


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CachedResponse(BaseModel):
    """Cached search page."""

    key: str
    response: SearchPage
    created_at: datetime = Field(default_factory=_utcnow)
    expires_at: datetime | None = None
    hit_count: int = 0

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or _utcnow()) > self.expires_at
