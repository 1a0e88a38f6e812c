"""Remote reference resolution.

Orchestrates classify -> cache lookup -> transport dispatch -> parse. The
resolver holds no global state: cache, transports and the diagnostics logger
are injected, so tests can swap any of them for fakes.

Fallback policy for git references: candidate URLs are tried strictly in
order and the first success wins. When every candidate fails, FetchError
reports the last candidate's error as the primary cause; earlier failures
are logged and kept on ``FetchError.attempts``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shipyard.classifier import classify
from shipyard.errors import FetchError, ParseError, TransportError
from shipyard.formats import detect, parse_document
from shipyard.models.config import ResolvedConfig
from shipyard.models.reference import DEFAULT_REF, ReferenceScheme

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from shipyard.models.reference import RemoteReference
    from shipyard.protocols import CacheProtocol, GitFetcherProtocol, HttpFetcherProtocol

DEFAULT_TTL_MINUTES = 60

# Keeps templates and configs fetched from the same reference in separate entries
TEMPLATE_KEY_PREFIX = "template:"


class Resolver:
    """Resolve remote references to parsed documents or raw template text."""

    def __init__(
        self,
        cache: CacheProtocol,
        http_fetcher: HttpFetcherProtocol,
        git_fetcher: GitFetcherProtocol,
        *,
        ttl_minutes: int = DEFAULT_TTL_MINUTES,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._cache = cache
        self._http = http_fetcher
        self._git = git_fetcher
        self._ttl_minutes = ttl_minutes
        self._log = logger if logger is not None else structlog.get_logger()

    @property
    def cache(self) -> CacheProtocol:
        return self._cache

    def resolve(self, raw: str, force_fresh: bool = False) -> ResolvedConfig:
        """Fetch (or read from cache) and parse the document at *raw*.

        Raises ClassificationError, TransportError (HttpStatusError,
        HttpNetworkError or FetchError) or ParseError.
        """
        content = self.fetch_text(raw, force_fresh=force_fresh)
        fmt = detect(raw, content)
        document = parse_document(content, fmt, source=raw)
        return ResolvedConfig(source=raw, format=fmt, document=document)

    def fetch_template(self, raw: str, force_fresh: bool = False) -> str:
        """Return the raw text at *raw*, cached under the template namespace."""
        return self.fetch_text(raw, force_fresh=force_fresh, cache_key=TEMPLATE_KEY_PREFIX + raw)

    def fetch_text(
        self,
        raw: str,
        *,
        force_fresh: bool = False,
        cache_key: str | None = None,
    ) -> str:
        """Return the text behind *raw*, consulting the cache unless *force_fresh*."""
        reference = classify(raw)
        key = cache_key or raw
        log = self._log.bind(reference=raw, cache_key=key)

        if force_fresh:
            log.debug("cache_bypassed", reason="force_fresh")
        else:
            entry = self._cache.get(key)
            if entry is not None and not entry.expired:
                log.debug("cache_hit", last_fetched=entry.last_fetched.isoformat())
                return entry.content
            log.debug("cache_miss", reason="expired" if entry is not None else "missing")

        payload = self._fetch_remote(reference, log)
        try:
            content = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(raw, "text", f"content is not valid UTF-8: {exc}") from exc

        try:
            self._cache.put(key, content, self._ttl_minutes)
        except OSError:
            # The fetched content is still returned; the next run just fetches again.
            log.warning("cache_write_error", exc_info=True)

        return content

    def _fetch_remote(self, reference: RemoteReference, log: FilteringBoundLogger) -> bytes:
        if reference.scheme is ReferenceScheme.HTTP:
            url = reference.url or reference.raw
            log.info("http_fetch_start", url=url)
            return self._http.fetch(url)

        ref = reference.ref or DEFAULT_REF
        candidates = reference.candidate_repo_urls
        attempts: list[tuple[str, TransportError]] = []

        for attempt, repo_url in enumerate(candidates, start=1):
            log.info(
                "git_fetch_attempt",
                attempt=attempt,
                total=len(candidates),
                repo_url=repo_url,
                file_path=reference.file_path,
                ref=ref,
            )
            try:
                content = self._git.fetch_file(repo_url, reference.file_path, ref)
            except TransportError as exc:
                log.warning(
                    "git_fetch_attempt_failed",
                    attempt=attempt,
                    repo_url=repo_url,
                    code=exc.code,
                    error=exc.message,
                )
                attempts.append((repo_url, exc))
                continue

            log.info("git_fetch_success", repo_url=repo_url, content_length=len(content))
            return content

        log.error("git_fetch_exhausted", attempts=len(attempts))
        raise FetchError(reference.raw, attempts) from attempts[-1][1]
