"""Unit tests for shipyard.fetcher.

All HTTP calls are mocked with respx.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from shipyard.config import HttpSettings
from shipyard.errors import ErrorCode, HttpNetworkError, HttpStatusError
from shipyard.fetcher import HttpFetcher, build_http_client

URL = "https://example.com/shipyard.yaml"


@pytest.fixture()
def client():
    with httpx.Client() as c:
        yield c


@pytest.fixture()
def fetcher(client: httpx.Client) -> HttpFetcher:
    return HttpFetcher(client)


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


class TestFetchSuccess:
    @respx.mock
    def test_returns_body(self, fetcher: HttpFetcher) -> None:
        route = respx.get(URL).mock(return_value=httpx.Response(200, text="type: monorepo\n"))
        assert fetcher.fetch(URL) == b"type: monorepo\n"
        assert route.call_count == 1

    @respx.mock
    def test_follows_redirects(self) -> None:
        respx.get("https://example.com/old.yaml").mock(
            return_value=httpx.Response(301, headers={"Location": URL})
        )
        respx.get(URL).mock(return_value=httpx.Response(200, text="repo: example/repo"))
        with build_http_client(HttpSettings()) as client:
            assert HttpFetcher(client).fetch("https://example.com/old.yaml") == b"repo: example/repo"

    @respx.mock
    def test_sends_user_agent(self) -> None:
        route = respx.get(URL).mock(return_value=httpx.Response(200, text=""))
        with build_http_client(HttpSettings(user_agent="shipyard-test/1")) as client:
            HttpFetcher(client).fetch(URL)
        assert route.calls.last.request.headers["User-Agent"] == "shipyard-test/1"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFetchFailures:
    @respx.mock
    def test_404_raises_status_error(self, fetcher: HttpFetcher) -> None:
        respx.get(URL).mock(return_value=httpx.Response(404))
        with pytest.raises(HttpStatusError) as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.code == ErrorCode.HTTP_STATUS
        assert "HTTP 404" in exc_info.value.message
        assert exc_info.value.recoverable is False

    @respx.mock
    def test_500_is_recoverable(self, fetcher: HttpFetcher) -> None:
        respx.get(URL).mock(return_value=httpx.Response(500))
        with pytest.raises(HttpStatusError) as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.recoverable is True

    @respx.mock
    def test_connect_error_raises_network_error(self, fetcher: HttpFetcher) -> None:
        respx.get(URL).mock(side_effect=httpx.ConnectError("connection refused"))
        with pytest.raises(HttpNetworkError) as exc_info:
            fetcher.fetch(URL)
        assert exc_info.value.code == ErrorCode.NETWORK_ERROR
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_malformed_url_raises_network_error(self, fetcher: HttpFetcher) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.route().mock(return_value=httpx.Response(200))
            with pytest.raises(HttpNetworkError) as exc_info:
                fetcher.fetch("https://[::1/config.yaml")
        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
        assert route.call_count == 0

    @respx.mock
    def test_timeout_raises_network_error(self, fetcher: HttpFetcher) -> None:
        respx.get(URL).mock(side_effect=httpx.ReadTimeout("timed out"))
        with pytest.raises(HttpNetworkError):
            fetcher.fetch(URL)


# ---------------------------------------------------------------------------
# build_http_client
# ---------------------------------------------------------------------------


class TestBuildHttpClient:
    def test_applies_settings(self) -> None:
        with build_http_client(HttpSettings(timeout_seconds=5.0)) as client:
            assert client.follow_redirects is True
            assert client.timeout.read == 5.0
            assert client.headers["User-Agent"].startswith("shipyard/")
