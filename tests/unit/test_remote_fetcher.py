"""
Unit tests for rokcalendar.sources.remote_fetcher.RemoteCatalogFetcher

Covers:
- URL validation
- error classification (transport, timeout, status, server error field, payload)
- bounded retry on transport failures
- backoff calculation
"""

import random
from collections.abc import Callable
from types import SimpleNamespace

import httpx
import pytest

from rokcalendar.core.http_client import get_client_health
from rokcalendar.sources.remote_fetcher import (
    GENERIC_FETCH_ERROR,
    JITTER_MAX_FACTOR,
    MAX_BACKOFF_SECONDS,
    CatalogFetchError,
    CatalogHTTPError,
    CatalogNetworkError,
    CatalogPayloadError,
    CatalogServerError,
    CatalogTimeoutError,
    RemoteCatalogFetcher,
)

pytestmark = pytest.mark.unit

URL = "https://catalog.example.test/api/events"


def _fetcher(settings: SimpleNamespace, handler: Callable[[httpx.Request], httpx.Response]) -> RemoteCatalogFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteCatalogFetcher(settings, shared_client=client)


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(RemoteCatalogFetcher, "_calculate_backoff", lambda self, attempt, factor: 0)


class TestValidateUrl:
    @pytest.mark.parametrize("url", [URL, "http://localhost:8080/events"])
    def test_accepts_http_urls(self, url: str) -> None:
        assert RemoteCatalogFetcher.validate_url(url)

    @pytest.mark.parametrize("url", ["", "ftp://example.com/x", "file:///etc/passwd", "https://", "not a url"])
    def test_rejects_others(self, url: str) -> None:
        assert not RemoteCatalogFetcher.validate_url(url)

    async def test_fetch_rejects_invalid_url(self, simple_settings) -> None:
        fetcher = _fetcher(simple_settings, lambda request: httpx.Response(200, json=[]))
        with pytest.raises(CatalogFetchError) as exc_info:
            await fetcher.fetch_events("ftp://example.com/events")
        assert type(exc_info.value) is CatalogFetchError
        assert exc_info.value.user_message == GENERIC_FETCH_ERROR


class TestFetchEvents:
    async def test_success_returns_array(self, simple_settings, remote_payload) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=remote_payload)

        fetcher = _fetcher(simple_settings, handler)
        assert await fetcher.fetch_events(URL) == remote_payload
        assert str(seen[0].url) == URL

    async def test_status_error_prefers_server_message(self, simple_settings) -> None:
        fetcher = _fetcher(
            simple_settings, lambda request: httpx.Response(503, json={"message": "Upstream maintenance"})
        )

        with pytest.raises(CatalogHTTPError) as exc_info:
            await fetcher.fetch_events(URL)

        assert exc_info.value.status_code == 503
        assert exc_info.value.user_message == "Upstream maintenance"

    async def test_status_error_without_body_uses_generic_message(self, simple_settings) -> None:
        fetcher = _fetcher(simple_settings, lambda request: httpx.Response(404, text="Not Found"))

        with pytest.raises(CatalogHTTPError) as exc_info:
            await fetcher.fetch_events(URL)

        assert exc_info.value.user_message == GENERIC_FETCH_ERROR

    async def test_error_field_in_body(self, simple_settings) -> None:
        body = {"error": "quota", "message": "Too many requests today"}
        fetcher = _fetcher(simple_settings, lambda request: httpx.Response(200, json=body))

        with pytest.raises(CatalogServerError) as exc_info:
            await fetcher.fetch_events(URL)

        assert exc_info.value.user_message == "Too many requests today"

    async def test_error_field_without_message(self, simple_settings) -> None:
        fetcher = _fetcher(simple_settings, lambda request: httpx.Response(200, json={"error": "x"}))
        with pytest.raises(CatalogServerError) as exc_info:
            await fetcher.fetch_events(URL)
        assert exc_info.value.user_message == GENERIC_FETCH_ERROR

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>oops</html>"),
            httpx.Response(200, json={"events": []}),
        ],
        ids=["not-json", "not-array"],
    )
    async def test_payload_errors(self, simple_settings, response: httpx.Response) -> None:
        fetcher = _fetcher(simple_settings, lambda request: response)
        with pytest.raises(CatalogPayloadError):
            await fetcher.fetch_events(URL)

    async def test_timeout(self, simple_settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = _fetcher(simple_settings, handler)
        with pytest.raises(CatalogTimeoutError):
            await fetcher.fetch_events(URL)

    async def test_transport_failure_after_retries(self, simple_settings, no_backoff) -> None:
        simple_settings.max_retries = 2
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        fetcher = _fetcher(simple_settings, handler)
        with pytest.raises(CatalogNetworkError) as exc_info:
            await fetcher.fetch_events(URL)

        assert calls == 3
        assert exc_info.value.user_message == GENERIC_FETCH_ERROR
        assert get_client_health("catalog_fetcher")["error_count"] == 3

    async def test_retry_recovers(self, simple_settings, no_backoff, remote_payload) -> None:
        simple_settings.max_retries = 2
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, json=remote_payload)

        fetcher = _fetcher(simple_settings, handler)
        assert await fetcher.fetch_events(URL) == remote_payload
        assert calls == 2
        assert get_client_health("catalog_fetcher")["error_count"] == 0

    async def test_status_errors_are_not_retried(self, simple_settings, no_backoff) -> None:
        simple_settings.max_retries = 3
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        fetcher = _fetcher(simple_settings, handler)
        with pytest.raises(CatalogHTTPError):
            await fetcher.fetch_events(URL)
        assert calls == 1


class TestBackoff:
    def test_backoff_grows_and_is_capped(self, simple_settings, monkeypatch) -> None:
        monkeypatch.setattr(random, "uniform", lambda a, b: (a + b) / 2)
        fetcher = RemoteCatalogFetcher(simple_settings)

        b0 = fetcher._calculate_backoff(0, 2.0)
        b1 = fetcher._calculate_backoff(1, 2.0)
        b10 = fetcher._calculate_backoff(10, 2.0)

        assert b1 > b0
        assert b10 <= MAX_BACKOFF_SECONDS * (1.0 + JITTER_MAX_FACTOR)


class TestClientLifecycle:
    async def test_context_manager_uses_shared_pool(self, simple_settings) -> None:
        async with RemoteCatalogFetcher(simple_settings) as fetcher:
            assert fetcher.client is not None
            assert not fetcher.client.is_closed
            assert fetcher._owns_client is False

    async def test_close_leaves_injected_client_open(self, simple_settings) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))
        fetcher = RemoteCatalogFetcher(simple_settings, shared_client=client)

        await fetcher.close()

        assert not client.is_closed
        await client.aclose()
