"""
Central logging configuration for rokcalendar.

Quiets the chatty third-party libraries (aiohttp access logs, httpx) while
keeping rokcalendar's own modules at the requested level, and tags every
record with the request ID of the HTTP request that produced it.
"""

import logging
import os
from typing import Optional

ROKCAL_MODULES = [
    "rokcalendar",
    "rokcalendar.api.server",
    "rokcalendar.calendar.expander",
    "rokcalendar.calendar.index",
    "rokcalendar.sources.remote_fetcher",
    "rokcalendar.sources.template_store",
]

SUPPRESSED_LOGGERS = [
    "aiohttp.access",
    "aiohttp.server",
    "aiohttp.web_log",
    "httpx",
    "httpcore",
    "asyncio",
]


class CorrelationIdFilter(logging.Filter):
    """Add the current request ID to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily: the middleware package imports aiohttp
        from .api.middleware.correlation_id import get_request_id

        record.request_id = get_request_id()
        return True


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure log levels for rokcalendar and its dependencies.

    Args:
        debug_mode: Whether to enable debug logging for rokcalendar modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        ROKCAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        ROKCAL_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("ROKCAL_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("ROKCAL_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    # No force=True: keep the colour handler installed by rokcalendar._init_logging
    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    correlation_filter = CorrelationIdFilter()

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(request_id)s] %(levelname)s - %(name)s - %(message)s")
        )
        handler.addFilter(correlation_filter)
        root_logger.addHandler(handler)
    else:
        for existing_handler in root_logger.handlers:
            if not any(isinstance(f, CorrelationIdFilter) for f in existing_handler.filters):
                existing_handler.addFilter(correlation_filter)

    logger_config: dict[str, int] = {name: logging.WARNING for name in SUPPRESSED_LOGGERS}
    logger_config["aiohttp.web"] = logging.INFO

    module_level = logging.DEBUG if final_debug else logging.INFO
    for module in ROKCAL_MODULES:
        logger_config[module] = module_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for rokcalendar modules")
    else:
        root_logger.info("Production logging configuration applied")


def reset_logging_to_debug() -> None:
    """Reset all loggers, including suppressed third-party ones, to DEBUG."""
    logging.getLogger().setLevel(logging.DEBUG)
    for logger_name in SUPPRESSED_LOGGERS + ROKCAL_MODULES:
        logging.getLogger(logger_name).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ["rokcalendar", "aiohttp.access", "aiohttp.server", "httpx", "asyncio"]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
