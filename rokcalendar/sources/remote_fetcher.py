"""HTTP client for downloading the remote event catalog."""

import asyncio
import logging
import random
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from ..core.http_client import (
    DEFAULT_HEADERS,
    get_shared_client,
    record_client_error,
    record_client_success,
)

logger = logging.getLogger(__name__)

GENERIC_FETCH_ERROR = "Failed to fetch events"

# Backoff calculation constants
MAX_BACKOFF_SECONDS = 30.0
JITTER_MIN_FACTOR = 0.1
JITTER_MAX_FACTOR = 0.3


class CatalogFetchError(Exception):
    """Base exception for catalog fetch errors.

    ``user_message`` is the text shown next to the retry control.
    ``server_message`` is the upstream's own ``message`` field, if it sent one.
    """

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.server_message = user_message
        self.user_message = user_message or GENERIC_FETCH_ERROR


class CatalogNetworkError(CatalogFetchError):
    """Transport failure (DNS, connection refused, reset)."""


class CatalogTimeoutError(CatalogFetchError):
    """Request timed out."""


class CatalogHTTPError(CatalogFetchError):
    """Upstream answered with a non-success status."""

    def __init__(self, message: str, status_code: int, user_message: Optional[str] = None):
        super().__init__(message, user_message)
        self.status_code = status_code


class CatalogServerError(CatalogFetchError):
    """Upstream body carried an ``error`` field."""


class CatalogPayloadError(CatalogFetchError):
    """Body was not a JSON array of events."""


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class RemoteCatalogFetcher:
    """Async HTTP client for the remote event catalog."""

    def __init__(self, settings: Any, shared_client: Optional[httpx.AsyncClient] = None) -> None:
        """Initialize catalog fetcher.

        Args:
            settings: Object exposing request_timeout, max_retries and retry_backoff_factor
            shared_client: Optional HTTP client to use instead of the shared pool
        """
        self.settings = settings
        self.client: Optional[httpx.AsyncClient] = shared_client
        self._owns_client = False
        self._client_id = "catalog_fetcher"

        logger.debug("Catalog fetcher initialized (injected_client: %s)", shared_client is not None)

    async def __aenter__(self) -> "RemoteCatalogFetcher":
        await self._ensure_client()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self.client is not None and self._owns_client and not self.client.is_closed:
            await self.client.aclose()
            logger.debug("Closed individual HTTP client")
        if self._owns_client:
            self.client = None
            self._owns_client = False

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is not None and not self.client.is_closed:
            return self.client

        try:
            self.client = await get_shared_client(self._client_id)
            logger.debug("Using shared HTTP client for connection reuse")
        except RuntimeError as e:
            logger.warning("Failed to get shared HTTP client, creating individual client: %s", e)
            request_timeout = float(getattr(self.settings, "request_timeout", 30))
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(connect=10.0, read=request_timeout, write=10.0, pool=30.0),
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
            self._owns_client = True
        return self.client

    @staticmethod
    def validate_url(url: str) -> bool:
        """Allow only http(s) URLs with a hostname."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        return parsed.scheme in ("http", "https") and bool(parsed.hostname)

    async def fetch_events(self, url: str) -> list[dict[str, Any]]:
        """Fetch the raw event array from ``url``.

        Args:
            url: Catalog endpoint returning a JSON array

        Returns:
            The decoded JSON array (elements are not validated here)

        Raises:
            CatalogTimeoutError: Request timed out after all retries
            CatalogNetworkError: Transport failure after all retries
            CatalogHTTPError: Non-success status (not retried)
            CatalogServerError: JSON body with an ``error`` field
            CatalogPayloadError: Body is not JSON or not an array
        """
        if not self.validate_url(url):
            raise CatalogFetchError(f"Invalid catalog URL: {url!r}")

        client = await self._ensure_client()
        logger.debug("Fetching event catalog from %s", url)

        try:
            response = await self._get_with_retry(client, url)
        except httpx.TimeoutException as e:
            raise CatalogTimeoutError(f"Timeout fetching {url}: {e}") from e
        except httpx.TransportError as e:
            raise CatalogNetworkError(f"Network error fetching {url}: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            raise CatalogHTTPError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
                user_message=_server_message(body),
            )

        if body is None:
            raise CatalogPayloadError(f"Response from {url} is not valid JSON")

        if isinstance(body, dict) and "error" in body:
            raise CatalogServerError(
                f"Server reported error: {body.get('error')}",
                user_message=_server_message(body),
            )

        if not isinstance(body, list):
            raise CatalogPayloadError(
                f"Expected a JSON array from {url}, got {type(body).__name__}"
            )

        logger.info("Fetched %d catalog entries from %s", len(body), url)
        return body

    def _calculate_backoff(self, attempt: int, backoff_factor: float) -> float:
        """Exponential backoff with jitter, capped at MAX_BACKOFF_SECONDS."""
        base_backoff = min(backoff_factor**attempt, MAX_BACKOFF_SECONDS)
        jitter = random.uniform(JITTER_MIN_FACTOR, JITTER_MAX_FACTOR) * base_backoff  # nosec B311 - jitter not cryptographic
        return base_backoff + jitter

    async def _get_with_retry(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        """GET with bounded retry on transport failures. Status errors are returned as-is."""
        max_retries = int(getattr(self.settings, "max_retries", 2))
        backoff_factor = float(getattr(self.settings, "retry_backoff_factor", 1.5))
        timeout = float(getattr(self.settings, "request_timeout", 30))

        attempt = 0
        while True:
            try:
                response = await client.get(url, timeout=timeout)
            except (httpx.TimeoutException, httpx.TransportError) as e:
                await record_client_error(self._client_id)
                if attempt >= max_retries:
                    logger.error("All %d attempts failed for %s: %s", attempt + 1, url, e)
                    raise
                backoff_time = self._calculate_backoff(attempt, backoff_factor)
                logger.warning(
                    "Request failed (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1,
                    max_retries + 1,
                    backoff_time,
                    e,
                )
                await asyncio.sleep(backoff_time)
                attempt += 1
                continue

            await record_client_success(self._client_id)
            logger.debug(
                "Fetched %s (attempt %d) - status %d, %d bytes",
                url,
                attempt + 1,
                response.status_code,
                len(response.content),
            )
            return response
