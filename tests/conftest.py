from collections.abc import AsyncIterator, Callable, Generator
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from rokcalendar.calendar.models import EventTemplate, EventType, PatternEntry, Priority
from rokcalendar.core.http_client import close_all_clients


@pytest.fixture
def simple_settings() -> SimpleNamespace:
    """Lightweight fetch settings used across tests.

    Fields:
      - request_timeout: HTTP read timeout in seconds
      - max_retries: retry attempts after a transport failure
      - retry_backoff_factor: base of the retry backoff
    """
    return SimpleNamespace(
        request_timeout=5,
        max_retries=0,
        retry_backoff_factor=1.5,
    )


@pytest.fixture
def fixed_now() -> datetime:
    """Deterministic 'now' (a Monday) for store and route tests."""
    return datetime(2025, 1, 6, 9, 30)


@pytest.fixture
def time_provider(fixed_now: datetime) -> Callable[[], datetime]:
    return lambda: fixed_now


@pytest.fixture
def pattern_template() -> Callable[..., EventTemplate]:
    """Factory for pattern-list templates."""

    def _make(
        template_id: str = "t1",
        title: str = "Ceremony",
        start: date = date(2025, 1, 1),
        frequency: str = "two-weeks",
        duration: int = 3,
        color: Optional[str] = None,
        extra_patterns: tuple[PatternEntry, ...] = (),
    ) -> EventTemplate:
        return EventTemplate(
            id=template_id,
            title=title,
            patterns=[
                PatternEntry(start_date=start, frequency=frequency, duration_days=duration),
                *extra_patterns,
            ],
            event_type=EventType.SPECIAL,
            priority=Priority.MEDIUM,
            color=color,
        )

    return _make


@pytest.fixture
def remote_payload() -> list[dict[str, Any]]:
    """Upstream catalog body in its wire shape."""
    return [
        {
            "title": "Ceremony of Karuak",
            "description": "Barbarian hunt",
            "color": "#ff0000",
            "pattern": [{"startDate": "2025-01-01", "frequency": "two-weeks", "duration": 3}],
        },
        {
            "title": "Golden Kingdom",
            "description": "",
            "color": "#ffd700",
            "pattern": [{"startDate": "2025-01-10", "frequency": "four-weeks", "duration": 7}],
        },
    ]


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear ROKCAL_* variables that change clock, config or logging behaviour."""
    for key in (
        "ROKCAL_TEST_TIME",
        "ROKCAL_DEBUG",
        "ROKCAL_LOG_LEVEL",
        "ROKCAL_SOURCE",
        "ROKCAL_LOCALE",
        "ROKCAL_WEB_PORT",
        "ROKCAL_SERVER_PORT",
        "ROKCAL_MONTHS_AHEAD",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients after every test."""
    yield
    await close_all_clients()
