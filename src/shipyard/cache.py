"""File-backed TTL cache for fetched remote documents.

One JSON file per key under the cache root; the filename is the SHA-256 of
the key, so the same reference always maps to the same file.

Read failures never leave this module: a missing, unreadable or corrupt
entry is logged and reported as a miss so the resolver can fall back to a
fresh fetch. Writes go to a temporary file in the same directory followed by
``os.replace``, so a reader sees either the old entry or the new one, never
a partial file. Writes are not locked; concurrent processes writing the same
key race and the last writer wins.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from shipyard.models.cache import CacheEntry

log = structlog.get_logger()

_ENTRY_SUFFIX = ".json"


def cache_key_hash(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class FileCache:
    """Directory of JSON cache entries implementing CacheProtocol."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root / f"{cache_key_hash(key)}{_ENTRY_SUFFIX}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str) -> CacheEntry | None:
        """Read an entry. Returns ``None`` on miss or read failure.

        Expired entries are returned with ``expired=True``; deciding whether
        to use them is up to the caller.
        """
        path = self.path_for(key)
        if not path.is_file():
            return None

        entry = self._read_entry(path)
        if entry is None:
            return None
        if entry.url != key:
            log.warning("cache_key_mismatch", key=key, stored_key=entry.url, path=str(path))
            return None
        return entry

    def list(self) -> list[CacheEntry]:
        """Return every readable entry, most recently fetched first."""
        if not self._root.is_dir():
            return []

        entries: list[CacheEntry] = []
        for path in self._root.glob(f"*{_ENTRY_SUFFIX}"):
            entry = self._read_entry(path)
            if entry is not None:
                entries.append(entry)
        return sorted(entries, key=lambda e: e.last_fetched, reverse=True)

    def _read_entry(self, path: Path) -> CacheEntry | None:
        try:
            entry = CacheEntry.model_validate_json(path.read_bytes())
        except (OSError, ValidationError, ValueError):
            log.warning("cache_read_error", path=str(path), exc_info=True)
            return None

        if entry.last_fetched.tzinfo is None:
            aware = entry.last_fetched.replace(tzinfo=UTC)
            entry = entry.model_copy(update={"last_fetched": aware})
        return entry.model_copy(update={"cache_path": str(path), "expired": entry.is_expired()})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, key: str, content: str, ttl_minutes: int) -> CacheEntry:
        """Write (or overwrite) the entry for *key*. Raises ``OSError`` on failure."""
        if ttl_minutes < 0:
            raise ValueError(f"ttl_minutes must be >= 0, got {ttl_minutes}")

        path = self.path_for(key)
        entry = CacheEntry(
            url=key,
            hash=hashlib.sha256(content.encode("utf-8")).hexdigest(),
            last_fetched=datetime.now(UTC),
            ttl=ttl_minutes,
            content=content,
            cache_path=str(path),
        )
        self._write_atomic(path, entry.model_dump_json(indent=2, exclude={"expired"}))
        log.debug("cache_write", key=key, path=str(path), ttl_minutes=ttl_minutes)
        return entry

    def _write_atomic(self, path: Path, data: str) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".entry-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> int:
        """Delete every entry. Returns how many were removed."""
        if not self._root.is_dir():
            return 0

        removed = 0
        for path in self._root.glob(f"*{_ENTRY_SUFFIX}"):
            path.unlink()
            removed += 1
        log.info("cache_cleared", root=str(self._root), removed=removed)
        return removed
