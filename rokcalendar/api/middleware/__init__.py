"""Middleware components for request processing.

Request correlation IDs for log tracing, and CORS headers for the browser
frontend.
"""

from .correlation_id import CORRELATION_ID_KEY, correlation_id_middleware, get_request_id
from .cors import CORS_HEADERS, cors_middleware

__all__ = [
    "CORRELATION_ID_KEY",
    "CORS_HEADERS",
    "correlation_id_middleware",
    "cors_middleware",
    "get_request_id",
]
