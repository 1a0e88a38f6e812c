"""Runtime state container.

AppState is created once per CLI invocation (inside ``open_app_state``) and
passed explicitly to every command. There is no module-level instance.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from shipyard.cache import FileCache
from shipyard.fetcher import HttpFetcher, build_http_client
from shipyard.git_fetcher import GitFetcher
from shipyard.resolver import Resolver

if TYPE_CHECKING:
    from collections.abc import Iterator

    import httpx

    from shipyard.config import Settings

log = structlog.get_logger()


@dataclass
class AppState:
    """Holds the wired engine for one invocation."""

    settings: Settings
    http_client: httpx.Client
    cache: FileCache
    resolver: Resolver


@contextmanager
def open_app_state(settings: Settings) -> Iterator[AppState]:
    """Build all shared resources and tear them down afterwards."""
    http_client = build_http_client(settings.http)
    cache = FileCache(settings.cache.dir)
    resolver = Resolver(
        cache,
        HttpFetcher(http_client),
        GitFetcher(settings.git),
        ttl_minutes=settings.cache.ttl_minutes,
    )
    log.debug("engine_ready", cache_dir=str(cache.root), ttl_minutes=settings.cache.ttl_minutes)

    try:
        yield AppState(
            settings=settings,
            http_client=http_client,
            cache=cache,
            resolver=resolver,
        )
    finally:
        http_client.close()
