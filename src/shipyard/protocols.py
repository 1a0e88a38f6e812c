"""Protocol interfaces for swappable components.

The resolver references these protocols, not the concrete implementations.
This allows:
- Tests to use in-memory caches and fake transports with call counters
- The git plumbing library to be replaced without touching the resolver
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shipyard.models.cache import CacheEntry


class CacheProtocol(Protocol):
    """Interface for the fetched-document cache backend."""

    def get(self, key: str) -> CacheEntry | None: ...

    def put(self, key: str, content: str, ttl_minutes: int) -> CacheEntry: ...

    def list(self) -> list[CacheEntry]: ...

    def clear(self) -> int: ...


class HttpFetcherProtocol(Protocol):
    """Interface for the HTTP transport."""

    def fetch(self, url: str) -> bytes: ...


class GitFetcherProtocol(Protocol):
    """Interface for the git transport."""

    def fetch_file(self, repo_url: str, file_path: str, ref: str) -> bytes: ...
