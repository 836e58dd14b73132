"""Unit tests for rokcalendar.calendar.index.OccurrenceIndex."""

from datetime import date, datetime

import pytest

from rokcalendar.calendar.expander import expand
from rokcalendar.calendar.index import OccurrenceIndex, day_key
from rokcalendar.calendar.models import EventTemplate, EventType, RepeatPattern

pytestmark = pytest.mark.unit


@pytest.fixture
def index(pattern_template) -> OccurrenceIndex:
    templates = [
        pattern_template(template_id="karuak", title="Karuak", start=date(2025, 1, 1), duration=3),
        pattern_template(
            template_id="gold", title="Golden Kingdom", start=date(2025, 1, 2), frequency="four-weeks", duration=1
        ),
        EventTemplate(
            id="ark",
            title="Ark of Osiris",
            start_time=datetime(2025, 1, 4, 20),
            end_time=datetime(2025, 1, 4, 22),
            repeat_pattern=RepeatPattern.WEEKLY,
            event_type=EventType.ALLIANCE_WAR,
        ),
    ]
    return OccurrenceIndex(expand(templates, datetime(2025, 3, 1)))


def test_day_key_ignores_time() -> None:
    assert day_key(datetime(2025, 1, 9, 23, 59)) == "2025-01-09"
    assert day_key(date(2025, 1, 9)) == "2025-01-09"


class TestDayQuery:
    def test_returns_exactly_the_occurrences_on_that_day(self, index: OccurrenceIndex) -> None:
        target = date(2025, 1, 2)

        result = index.occurrences_on_day(target)

        expected = [o for o in index.all() if o.day == target]
        assert result == expected
        assert {o.template.id for o in result} == {"karuak", "gold"}

    def test_during_days_are_included(self, index: OccurrenceIndex) -> None:
        result = index.occurrences_on_day(date(2025, 1, 3))
        assert [(o.template.id, o.is_during) for o in result] == [("karuak", True)]

    def test_accepts_datetime_and_empty_day(self, index: OccurrenceIndex) -> None:
        assert index.occurrences_on_day(datetime(2025, 1, 4, 8)) == index.occurrences_on_day(date(2025, 1, 4))
        assert index.occurrences_on_day(date(2025, 1, 7)) == []

    def test_result_is_a_copy(self, index: OccurrenceIndex) -> None:
        index.occurrences_on_day(date(2025, 1, 2)).clear()
        assert index.occurrences_on_day(date(2025, 1, 2))


class TestMonthQuery:
    def test_deduplicates_by_title_first_seen_wins(self, index: OccurrenceIndex) -> None:
        result = index.occurrences_in_month(2025, 1)

        titles = [o.title for o in result]
        assert sorted(titles) == ["Ark of Osiris", "Golden Kingdom", "Karuak"]
        karuak = next(o for o in result if o.title == "Karuak")
        assert karuak.day == date(2025, 1, 1)

    def test_templates_sharing_a_title_collapse(self, pattern_template) -> None:
        templates = [
            pattern_template(template_id="a", title="Same", start=date(2025, 5, 1), duration=1),
            pattern_template(template_id="b", title="Same", start=date(2025, 5, 3), duration=1),
        ]
        idx = OccurrenceIndex(expand(templates, datetime(2025, 6, 1)))

        result = idx.occurrences_in_month(2025, 5)

        assert [o.template.id for o in result] == ["a"]

    def test_empty_month(self, index: OccurrenceIndex) -> None:
        assert index.occurrences_in_month(2024, 12) == []

    def test_days_in_month_groups_run_starts(self, index: OccurrenceIndex) -> None:
        days = dict(index.days_in_month(2025, 1))

        assert list(days) == sorted(days)
        assert [o.template.id for o in days["2025-01-01"]] == ["karuak"]
        assert "2025-01-03" not in days  # during day only

    def test_month_stats(self, index: OccurrenceIndex) -> None:
        stats = index.month_stats(2025, 1)

        # karuak: 1, 15, 29; gold: 2, 30; ark: 4, 11, 18, 25
        assert stats.total_events == 9
        assert stats.total_days == 9
        assert stats.events_by_type == {"special": 5, "alliance_war": 4}


class TestUpcoming:
    def test_ordered_by_start_and_limited(self, index: OccurrenceIndex) -> None:
        result = index.upcoming(date(2025, 1, 10), 3)

        assert len(result) == 3
        assert [o.start for o in result] == sorted(o.start for o in result)
        assert all(o.is_start for o in result)

    def test_includes_starts_from_the_previous_day(self, index: OccurrenceIndex) -> None:
        result = index.upcoming(date(2025, 1, 5), 1)
        assert result[0].template.id == "ark"
        assert result[0].day == date(2025, 1, 4)

    def test_threshold_excludes_older_starts(self, index: OccurrenceIndex) -> None:
        threshold = date(2025, 1, 20)
        result = index.upcoming(threshold, 100)
        assert min(o.day for o in result) >= date(2025, 1, 19)

    def test_non_positive_limit(self, index: OccurrenceIndex) -> None:
        assert index.upcoming(date(2025, 1, 1), 0) == []
        assert index.upcoming(date(2025, 1, 1), -5) == []

    def test_beyond_horizon_is_empty(self, index: OccurrenceIndex) -> None:
        assert index.upcoming(date(2026, 1, 1), 10) == []
