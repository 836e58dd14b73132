"""Request correlation ID middleware.

Every request gets an ID, taken from the client's headers or freshly
generated. It is stored in a context variable for log records and echoed back
in the ``X-Request-ID`` response header.
"""

import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from aiohttp import web

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
CORRELATION_ID_KEY = web.RequestKey("correlation_id", str)


@web.middleware
async def correlation_id_middleware(
    request: web.Request, handler: Callable[[web.Request], Any]
) -> web.StreamResponse:
    """Extract or generate correlation ID for request tracking.

    Priority for correlation ID extraction:
    1. X-Request-ID from client
    2. X-Correlation-ID from client
    3. Generate new UUID

    Args:
        request: aiohttp request object
        handler: Next handler in middleware chain

    Returns:
        Response with correlation ID added to headers
    """
    correlation_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )

    token = request_id_var.set(correlation_id)
    request[CORRELATION_ID_KEY] = correlation_id
    try:
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers["X-Request-ID"] = correlation_id
            raise
        response.headers["X-Request-ID"] = correlation_id
        return response
    finally:
        request_id_var.reset(token)


def get_request_id() -> str:
    """Get current request correlation ID from context.

    Returns:
        Current request correlation ID, or "no-request-id" if not set
    """
    request_id = request_id_var.get()
    return request_id if request_id else "no-request-id"
