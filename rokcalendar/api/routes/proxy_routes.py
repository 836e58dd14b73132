"""Upstream catalog proxy for the browser frontend."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from ...sources.remote_fetcher import (
    GENERIC_FETCH_ERROR,
    CatalogFetchError,
    CatalogHTTPError,
    CatalogNetworkError,
    CatalogPayloadError,
    CatalogServerError,
    CatalogTimeoutError,
)

logger = logging.getLogger(__name__)


def failure_message(exc: CatalogFetchError) -> str:
    """Message for the proxy's error body.

    The upstream's own ``message`` wins. Otherwise a short description of the
    failure kind is used, so upstream URLs never reach the client.
    """
    if exc.server_message:
        return exc.server_message
    if isinstance(exc, CatalogHTTPError):
        return f"Upstream returned HTTP {exc.status_code}"
    if isinstance(exc, CatalogTimeoutError):
        return "Upstream request timed out"
    if isinstance(exc, CatalogNetworkError):
        return "Upstream unreachable"
    if isinstance(exc, CatalogServerError):
        return "Upstream reported an error"
    if isinstance(exc, CatalogPayloadError):
        return "Upstream returned an invalid payload"
    return "Unknown error"


def register_proxy_routes(app: web.Application, fetcher: Any, upstream_url: str) -> None:
    """Register ``GET /api/events``.

    The response is always JSON: the upstream array with status 200, or
    ``{"error": "Failed to fetch events", "message": ...}`` with status 500.
    CORS headers are added by the CORS middleware.

    Args:
        app: aiohttp web application
        fetcher: Object with ``async fetch_events(url) -> list``
        upstream_url: Catalog endpoint to forward to
    """

    async def get_events(_request: web.Request) -> web.Response:
        try:
            events = await fetcher.fetch_events(upstream_url)
        except CatalogFetchError as exc:
            logger.error("Error fetching events: %s", exc)
            return web.json_response(
                {"error": GENERIC_FETCH_ERROR, "message": failure_message(exc)}, status=500
            )
        except Exception as exc:
            logger.exception("Unexpected error proxying event catalog")
            message = str(exc) or "Unknown error"
            return web.json_response({"error": GENERIC_FETCH_ERROR, "message": message}, status=500)

        return web.json_response(events, status=200)

    app.router.add_get("/api/events", get_events)
