"""Shared test fixtures for the shipyard test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from shipyard.cache import FileCache
from shipyard.errors import GitCloneError, TransportError
from shipyard.resolver import Resolver

if TYPE_CHECKING:
    from pathlib import Path


class FakeHttpFetcher:
    """In-memory HTTP transport keyed by URL, counting every call."""

    def __init__(self, responses: dict[str, bytes | TransportError] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        result = self.responses[url]
        if isinstance(result, TransportError):
            raise result
        return result


class FakeGitFetcher:
    """In-memory git transport keyed by repository URL, counting every call.

    Unknown repository URLs fail like an unreachable remote.
    """

    def __init__(self, repos: dict[str, bytes | TransportError] | None = None) -> None:
        self.repos = dict(repos or {})
        self.calls: list[tuple[str, str, str]] = []

    def fetch_file(self, repo_url: str, file_path: str, ref: str) -> bytes:
        self.calls.append((repo_url, file_path, ref))
        result = self.repos.get(repo_url)
        if result is None:
            raise GitCloneError(repo_url, "Could not read from remote repository.")
        if isinstance(result, TransportError):
            raise result
        return result


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture()
def cache(cache_dir: Path) -> FileCache:
    return FileCache(cache_dir)


@pytest.fixture()
def http_fetcher() -> FakeHttpFetcher:
    return FakeHttpFetcher()


@pytest.fixture()
def git_fetcher() -> FakeGitFetcher:
    return FakeGitFetcher()


@pytest.fixture()
def resolver(
    cache: FileCache, http_fetcher: FakeHttpFetcher, git_fetcher: FakeGitFetcher
) -> Resolver:
    return Resolver(cache, http_fetcher, git_fetcher)
