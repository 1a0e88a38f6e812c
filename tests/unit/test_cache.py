"""Unit tests for shipyard.cache."""

from __future__ import annotations

import hashlib
import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from shipyard.cache import FileCache, cache_key_hash

if TYPE_CHECKING:
    from pathlib import Path


def _backdate(cache: FileCache, key: str, minutes: int) -> None:
    """Rewrite an entry's last_fetched to *minutes* ago."""
    path = cache.path_for(key)
    data = json.loads(path.read_text(encoding="utf-8"))
    data["last_fetched"] = (datetime.now(UTC) - timedelta(minutes=minutes)).isoformat()
    path.write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# get / put
# ---------------------------------------------------------------------------


class TestGetPut:
    def test_put_and_get_fresh(self, cache: FileCache) -> None:
        cache.put("https://example.com/shipyard.yaml", "type: monorepo", ttl_minutes=60)
        entry = cache.get("https://example.com/shipyard.yaml")
        assert entry is not None
        assert entry.url == "https://example.com/shipyard.yaml"
        assert entry.content == "type: monorepo"
        assert entry.ttl == 60
        assert entry.expired is False
        assert entry.hash == hashlib.sha256(b"type: monorepo").hexdigest()
        assert entry.last_fetched <= datetime.now(UTC)

    def test_get_missing_returns_none(self, cache: FileCache) -> None:
        assert cache.get("https://example.com/missing.yaml") is None

    def test_filename_is_key_hash(self, cache: FileCache, cache_dir: Path) -> None:
        key = "github:acme/configs/base.yaml"
        cache.put(key, "x: 1", ttl_minutes=60)
        assert (cache_dir / f"{cache_key_hash(key)}.json").is_file()
        assert cache.path_for(key) == cache.path_for(key)

    def test_put_overwrites(self, cache: FileCache) -> None:
        cache.put("k", "version 1", ttl_minutes=60)
        cache.put("k", "version 2", ttl_minutes=60)
        entry = cache.get("k")
        assert entry is not None
        assert entry.content == "version 2"

    def test_template_and_config_keys_are_separate(self, cache: FileCache) -> None:
        cache.put("github:o/r/x.md", "config", ttl_minutes=60)
        cache.put("template:github:o/r/x.md", "template", ttl_minutes=60)
        assert cache.get("github:o/r/x.md").content == "config"  # type: ignore[union-attr]
        assert cache.get("template:github:o/r/x.md").content == "template"  # type: ignore[union-attr]

    def test_negative_ttl_rejected(self, cache: FileCache) -> None:
        with pytest.raises(ValueError):
            cache.put("k", "x", ttl_minutes=-1)

    def test_no_temp_files_left_behind(self, cache: FileCache, cache_dir: Path) -> None:
        cache.put("k", "x", ttl_minutes=60)
        assert [p.suffix for p in cache_dir.iterdir()] == [".json"]


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


class TestExpiry:
    def test_entry_past_ttl_is_expired(self, cache: FileCache) -> None:
        cache.put("k", "stale content", ttl_minutes=60)
        _backdate(cache, "k", minutes=61)
        entry = cache.get("k")
        assert entry is not None
        assert entry.expired is True
        assert entry.content == "stale content"

    def test_entry_within_ttl_is_valid(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=60)
        _backdate(cache, "k", minutes=59)
        entry = cache.get("k")
        assert entry is not None
        assert entry.expired is False

    def test_zero_ttl_never_expires(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=0)
        _backdate(cache, "k", minutes=60 * 24 * 365)
        entry = cache.get("k")
        assert entry is not None
        assert entry.expired is False
        assert entry.expires_at is None

    def test_naive_timestamp_treated_as_utc(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=5)
        path = cache.path_for("k")
        data = json.loads(path.read_text(encoding="utf-8"))
        naive = (datetime.now(UTC) - timedelta(minutes=10)).replace(tzinfo=None)
        data["last_fetched"] = naive.isoformat()
        path.write_text(json.dumps(data), encoding="utf-8")
        entry = cache.get("k")
        assert entry is not None
        assert entry.expired is True


# ---------------------------------------------------------------------------
# Damaged entries
# ---------------------------------------------------------------------------


class TestDamagedEntries:
    def test_corrupt_json_is_a_miss(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=60)
        cache.path_for("k").write_text("{not json", encoding="utf-8")
        assert cache.get("k") is None

    def test_missing_fields_is_a_miss(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=60)
        cache.path_for("k").write_text(json.dumps({"url": "k"}), encoding="utf-8")
        assert cache.get("k") is None

    def test_foreign_key_in_file_is_a_miss(self, cache: FileCache) -> None:
        cache.put("other", "x", ttl_minutes=60)
        cache.path_for("k").parent.mkdir(parents=True, exist_ok=True)
        cache.path_for("k").write_bytes(cache.path_for("other").read_bytes())
        assert cache.get("k") is None

    def test_unwritable_root_raises_oserror(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        cache = FileCache(blocker / "cache")
        with pytest.raises(OSError):
            cache.put("k", "x", ttl_minutes=60)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


class TestListClear:
    def test_list_empty_when_root_missing(self, cache: FileCache) -> None:
        assert cache.list() == []

    def test_list_returns_entries_newest_first(self, cache: FileCache) -> None:
        cache.put("old", "a", ttl_minutes=60)
        cache.put("new", "b", ttl_minutes=60)
        _backdate(cache, "old", minutes=30)
        entries = cache.list()
        assert [e.url for e in entries] == ["new", "old"]
        assert all(e.cache_path for e in entries)

    def test_list_skips_corrupt_files(self, cache: FileCache, cache_dir: Path) -> None:
        cache.put("good", "a", ttl_minutes=60)
        (cache_dir / "garbage.json").write_text("][", encoding="utf-8")
        assert [e.url for e in cache.list()] == ["good"]

    def test_list_reports_expiry(self, cache: FileCache) -> None:
        cache.put("k", "x", ttl_minutes=1)
        _backdate(cache, "k", minutes=5)
        assert cache.list()[0].expired is True

    def test_clear_removes_everything(self, cache: FileCache) -> None:
        cache.put("a", "1", ttl_minutes=60)
        cache.put("b", "2", ttl_minutes=60)
        assert cache.clear() == 2
        assert cache.list() == []
        assert cache.get("a") is None

    def test_clear_when_root_missing(self, cache: FileCache) -> None:
        assert cache.clear() == 0
