from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """One cached fetch result, stored as a JSON file under the cache root."""

    url: str  # Source key: raw reference, or "template:<raw>" for templates
    hash: str  # SHA-256 of content, hex; informational only
    last_fetched: datetime
    ttl: int  # Minutes; 0 means the entry never expires
    content: str
    cache_path: str = ""
    expired: bool = False  # Computed at read time, never trusted from disk

    @property
    def expires_at(self) -> datetime | None:
        if self.ttl == 0:
            return None
        return self.last_fetched + timedelta(minutes=self.ttl)

    def is_expired(self, now: datetime | None = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= expires_at
