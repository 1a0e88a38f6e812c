"""Integration test fixtures.

Wires the real engine (FileCache, HttpFetcher, GitFetcher, Resolver) through
open_app_state with an isolated cache directory. HTTP is mocked with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shipyard.config import Settings
from shipyard.state import open_app_state

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from shipyard.state import AppState


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(cache={"dir": str(tmp_path / "cache"), "ttl_minutes": 60})


@pytest.fixture()
def app_state(settings: Settings) -> Iterator[AppState]:
    with open_app_state(settings) as state:
        yield state


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Environment for CliRunner invocations: isolated cache, project in cwd."""
    monkeypatch.chdir(tmp_path)
    return {"SHIPYARD__CACHE__DIR": str(tmp_path / "cache")}
