"""HTTP transport for remote documents.

The HttpFetcher receives an httpx.Client via constructor injection; whoever
builds the client owns its lifecycle. One GET per call, no retries: fallback
sequencing belongs to the resolver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from shipyard.errors import HttpNetworkError, HttpStatusError

if TYPE_CHECKING:
    from shipyard.config import HttpSettings

log = structlog.get_logger()


def build_http_client(settings: HttpSettings) -> httpx.Client:
    """Create the shared httpx client. Called once per CLI invocation."""
    return httpx.Client(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
    )


class HttpFetcher:
    """Plain HTTP(S) GET transport implementing HttpFetcherProtocol."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def fetch(self, url: str) -> bytes:
        """Fetch *url* and return the response body.

        Raises HttpStatusError for non-2xx responses and HttpNetworkError for
        malformed URLs and DNS, TLS, connection and timeout failures.
        """
        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise HttpNetworkError(url, exc) from exc

        if not response.is_success:
            raise HttpStatusError(url, response.status_code)

        log.debug(
            "http_fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.content
