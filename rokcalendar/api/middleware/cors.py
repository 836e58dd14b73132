"""Permissive CORS for the JSON API.

The browser frontend is served from a different origin, so every response
carries the same fixed headers and preflight requests on ``/api/*`` are
answered directly with an empty 204.
"""

from collections.abc import Callable
from typing import Any

from aiohttp import web

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def apply_cors_headers(response: web.StreamResponse) -> web.StreamResponse:
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


@web.middleware
async def cors_middleware(
    request: web.Request, handler: Callable[[web.Request], Any]
) -> web.StreamResponse:
    """Answer ``/api/*`` preflights and add CORS headers to every response."""
    if request.method == "OPTIONS" and request.path.startswith("/api/"):
        return apply_cors_headers(web.Response(status=204))

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        apply_cors_headers(exc)
        raise
    return apply_cors_headers(response)
