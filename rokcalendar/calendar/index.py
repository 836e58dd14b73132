"""Occurrence index used by every calendar view.

The index buckets occurrences by day key and by month when it is built, so
view re-renders never scan the full occurrence list. It is immutable: a new
template set produces a new index.
"""

import bisect
import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Union

from .models import Occurrence

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def day_key(value: DateLike) -> str:
    """``YYYY-MM-DD`` key for a date or datetime (time of day ignored)."""
    return _as_date(value).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class MonthStats:
    """Summary of the start occurrences in one month."""

    total_events: int
    total_days: int
    events_by_type: dict[str, int] = field(default_factory=dict)


class OccurrenceIndex:
    """Read-only lookup structure over an expanded occurrence list."""

    def __init__(self, occurrences: Iterable[Occurrence]) -> None:
        self._occurrences: tuple[Occurrence, ...] = tuple(occurrences)
        self._by_day: dict[str, list[Occurrence]] = defaultdict(list)
        self._by_month: dict[tuple[int, int], list[Occurrence]] = defaultdict(list)

        for occurrence in self._occurrences:
            self._by_day[occurrence.day_key].append(occurrence)
            self._by_month[(occurrence.start.year, occurrence.start.month)].append(occurrence)

        # sorted() is stable, so equal starts keep expansion order
        self._starts: list[Occurrence] = sorted(
            (o for o in self._occurrences if o.is_start), key=lambda o: o.start
        )
        self._start_days: list[date] = [o.day for o in self._starts]

        logger.debug(
            "Built occurrence index: %d occurrences, %d days, %d months",
            len(self._occurrences),
            len(self._by_day),
            len(self._by_month),
        )

    def __len__(self) -> int:
        return len(self._occurrences)

    def all(self) -> tuple[Occurrence, ...]:
        """Every occurrence in expansion order."""
        return self._occurrences

    def occurrences_on_day(self, day: DateLike) -> list[Occurrence]:
        """All occurrences (start or during) falling on ``day``."""
        return list(self._by_day.get(day_key(day), ()))

    def occurrences_in_month(self, year: int, month: int) -> list[Occurrence]:
        """Occurrences in the month, one per distinct title, first seen wins.

        Deduplication is by title rather than template ID, so distinct
        templates sharing a title collapse into a single entry.
        """
        seen: set[str] = set()
        result: list[Occurrence] = []
        for occurrence in self._by_month.get((year, month), ()):
            if occurrence.title in seen:
                continue
            seen.add(occurrence.title)
            result.append(occurrence)
        return result

    def upcoming(self, from_date: DateLike, limit: int) -> list[Occurrence]:
        """Run starts on or after the day before ``from_date``, earliest first."""
        if limit <= 0:
            return []
        threshold = _as_date(from_date) - timedelta(days=1)
        position = bisect.bisect_left(self._start_days, threshold)
        return self._starts[position : position + limit]

    def days_in_month(self, year: int, month: int) -> list[tuple[str, list[Occurrence]]]:
        """Run starts of the month grouped by day key, in day order."""
        groups: dict[str, list[Occurrence]] = defaultdict(list)
        for occurrence in sorted(self._by_month.get((year, month), ()), key=lambda o: o.start):
            if occurrence.is_start:
                groups[occurrence.day_key].append(occurrence)
        return sorted(groups.items())

    def month_stats(self, year: int, month: int) -> MonthStats:
        """Counts of run starts in the month, overall and per event type."""
        starts = [o for o in self._by_month.get((year, month), ()) if o.is_start]
        by_type = Counter(o.template.event_type.value for o in starts)
        return MonthStats(
            total_events=len(starts),
            total_days=len({o.day_key for o in starts}),
            events_by_type=dict(by_type),
        )
