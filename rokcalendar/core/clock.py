"""Local clock with a test override.

All calendar arithmetic uses the host's local clock as naive datetimes.
"""

from __future__ import annotations

import datetime
import logging
import os

logger = logging.getLogger(__name__)

TEST_TIME_ENV = "ROKCAL_TEST_TIME"


def now_local() -> datetime.datetime:
    """Return the current local time as a naive datetime.

    Can be overridden for testing via the ROKCAL_TEST_TIME environment variable.
    Format: ISO 8601 datetime string (e.g., "2025-01-15T08:20:00"). Aware values
    are converted to local time before the tzinfo is dropped.
    """
    test_time = os.environ.get(TEST_TIME_ENV)
    if test_time:
        try:
            from dateutil import parser as date_parser

            dt = date_parser.isoparse(test_time)
            if dt.tzinfo is not None:
                dt = dt.astimezone().replace(tzinfo=None)
            return dt
        except (ValueError, OverflowError) as e:
            logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)
            # Fall through to real time

    return datetime.datetime.now()


def today_local() -> datetime.date:
    """Current local calendar day (honours ROKCAL_TEST_TIME)."""
    return now_local().date()
