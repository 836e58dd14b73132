"""Route modules for the rokcalendar server."""

from .calendar_routes import register_calendar_routes
from .proxy_routes import register_proxy_routes

__all__ = [
    "register_calendar_routes",
    "register_proxy_routes",
]
