"""Unit tests for rokcalendar.calendar.expander."""

import logging
from datetime import date, datetime, timedelta

import pytest

from rokcalendar.calendar.expander import (
    DEFAULT_CADENCE_DAYS,
    cadence_for,
    expand,
    horizon_months_ahead,
    horizon_years_ahead,
    iter_expand,
    shift,
)
from rokcalendar.calendar.models import EventTemplate, PatternEntry, RepeatPattern

pytestmark = pytest.mark.unit


def _single(template_id="s1", start=datetime(2025, 1, 6, 10), end=None, **kwargs):
    return EventTemplate(id=template_id, title=template_id, start_time=start, end_time=end, **kwargs)


class TestHorizon:
    def test_months_ahead_starts_at_midnight(self) -> None:
        assert horizon_months_ahead(datetime(2025, 1, 31, 15, 45), 1) == datetime(2025, 2, 28)

    def test_years_ahead_accepts_date(self) -> None:
        assert horizon_years_ahead(date(2024, 2, 29), 1) == datetime(2025, 2, 28)


class TestCadence:
    @pytest.mark.parametrize(
        ("frequency", "days"),
        [("one-week", 7), ("two-weeks", 14), ("four-weeks", 28), ("five-weeks", 35), ("eight-weeks", 56)],
    )
    def test_known_frequencies(self, frequency: str, days: int) -> None:
        assert cadence_for(frequency) == timedelta(days=days)

    def test_unknown_frequency_falls_back_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="rokcalendar.calendar.expander"):
            step = cadence_for("fortnightly-ish", "tpl-9")

        assert step == timedelta(days=DEFAULT_CADENCE_DAYS)
        assert "tpl-9" in caplog.text
        assert "fortnightly-ish" in caplog.text


class TestShift:
    def test_monthly_shift_clamps_to_month_end(self) -> None:
        start = datetime(2025, 1, 31, 8)
        assert shift(start, RepeatPattern.MONTHLY, 1) == datetime(2025, 2, 28, 8)
        # Shifts are applied from the base, so the 31st comes back in March
        assert shift(start, RepeatPattern.MONTHLY, 2) == datetime(2025, 3, 31, 8)

    def test_yearly_shift_from_leap_day(self) -> None:
        assert shift(datetime(2024, 2, 29), RepeatPattern.YEARLY, 1) == datetime(2025, 2, 28)

    def test_daily_and_weekly(self) -> None:
        base = datetime(2025, 1, 1, 12)
        assert shift(base, RepeatPattern.DAILY, 3) == datetime(2025, 1, 4, 12)
        assert shift(base, RepeatPattern.WEEKLY, 2) == datetime(2025, 1, 15, 12)


class TestPatternExpansion:
    def test_two_weeks_cadence_with_spans(self, pattern_template) -> None:
        template = pattern_template(start=date(2025, 1, 1), frequency="two-weeks", duration=3)

        result = expand([template], datetime(2025, 2, 1))

        starts = [o.day for o in result if o.is_start]
        assert starts == [date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 29)]
        during = [o.day for o in result if o.is_during]
        assert during == [
            date(2025, 1, 2),
            date(2025, 1, 3),
            date(2025, 1, 16),
            date(2025, 1, 17),
            date(2025, 1, 30),
            date(2025, 1, 31),
        ]
        assert len(result) == 9

    def test_every_day_of_a_run_is_covered_once(self, pattern_template) -> None:
        template = pattern_template(start=date(2025, 3, 3), frequency="one-week", duration=5)

        result = expand([template], datetime(2025, 3, 10))

        days = [o.day for o in result]
        assert days == [date(2025, 3, 3) + timedelta(days=i) for i in range(5)]
        assert [o.is_start for o in result] == [True, False, False, False, False]
        assert all(o.end == datetime(2025, 3, 8) for o in result)

    def test_horizon_is_exclusive_and_clips_spans(self, pattern_template) -> None:
        template = pattern_template(start=date(2025, 1, 1), frequency="two-weeks", duration=3)

        result = expand([template], datetime(2025, 1, 30))

        assert max(o.start for o in result) < datetime(2025, 1, 30)
        assert [o.day for o in result][-1] == date(2025, 1, 29)

    def test_start_on_horizon_is_excluded(self, pattern_template) -> None:
        template = pattern_template(start=date(2025, 1, 15), frequency="two-weeks", duration=1)
        assert expand([template], datetime(2025, 1, 15)) == []

    def test_unknown_frequency_matches_four_weeks(self, pattern_template) -> None:
        bogus = pattern_template(frequency="whenever", duration=2)
        four_weeks = pattern_template(frequency="four-weeks", duration=2)
        horizon = datetime(2025, 6, 1)

        def shape(occurrences):
            return [(o.occurrence_id, o.start, o.end, o.is_start, o.is_during) for o in occurrences]

        assert shape(expand([bogus], horizon)) == shape(expand([four_weeks], horizon))

    def test_multiple_patterns_expand_independently(self, pattern_template) -> None:
        template = pattern_template(
            start=date(2025, 1, 1),
            frequency="four-weeks",
            duration=1,
            extra_patterns=(PatternEntry(start_date=date(2025, 1, 10), frequency="eight-weeks"),),
        )

        result = expand([template], datetime(2025, 3, 1))

        ids = [o.occurrence_id for o in result]
        assert ids == ["t1-p0-20250101", "t1-p0-20250129", "t1-p0-20250226", "t1-p1-20250110"]
        assert len(set(ids)) == len(ids)

    def test_overlapping_runs_get_distinct_ids(self, pattern_template) -> None:
        template = pattern_template(start=date(2025, 1, 1), frequency="one-week", duration=10)

        result = expand([template], datetime(2025, 1, 20))

        ids = [o.occurrence_id for o in result]
        assert len(set(ids)) == len(ids)
        on_jan_8 = sorted(o.occurrence_id for o in result if o.day == date(2025, 1, 8))
        assert on_jan_8 == ["t1-p0-20250101-7", "t1-p0-20250108"]


class TestSingleRunExpansion:
    def test_non_repeating_template_keeps_its_id(self) -> None:
        template = _single(end=datetime(2025, 1, 8, 10))

        result = expand([template], datetime(2026, 1, 1))

        assert len(result) == 1
        assert result[0].occurrence_id == "s1"
        assert result[0].end == datetime(2025, 1, 8, 10)

    def test_end_defaults_to_start(self) -> None:
        template = _single()
        assert template.end_time == template.start_time

    def test_monthly_repetitions_shift_by_calendar_months(self) -> None:
        template = _single(
            start=datetime(2025, 1, 31, 10),
            end=datetime(2025, 2, 2, 10),
            repeat_pattern=RepeatPattern.MONTHLY,
        )

        result = expand([template], datetime(2026, 1, 1), repetitions=3)

        assert [o.start for o in result] == [
            datetime(2025, 1, 31, 10),
            datetime(2025, 2, 28, 10),
            datetime(2025, 3, 31, 10),
        ]
        assert [o.occurrence_id for o in result] == ["s1-0", "s1-1", "s1-2"]

    def test_repeat_count_caps_repetitions(self) -> None:
        template = _single(repeat_pattern=RepeatPattern.WEEKLY, repeat_count=2)
        assert len(expand([template], datetime(2026, 1, 1), repetitions=10)) == 2

    def test_unbounded_repeats_until_horizon(self) -> None:
        template = _single(repeat_pattern=RepeatPattern.WEEKLY)

        result = expand([template], datetime(2025, 2, 3))

        assert [o.day for o in result] == [
            date(2025, 1, 6),
            date(2025, 1, 13),
            date(2025, 1, 20),
            date(2025, 1, 27),
        ]

    def test_repetitions_are_clipped_at_horizon(self) -> None:
        template = _single(repeat_pattern=RepeatPattern.MONTHLY)
        result = expand([template], datetime(2025, 3, 1), repetitions=12)
        assert len(result) == 2


class TestMalformedTemplates:
    def test_bad_templates_are_skipped_with_warning(
        self, pattern_template, caplog: pytest.LogCaptureFixture
    ) -> None:
        good = pattern_template(template_id="good", duration=1)
        zero_duration = pattern_template(template_id="zero", duration=0)
        backwards = _single(
            template_id="backwards", start=datetime(2025, 1, 5), end=datetime(2025, 1, 4)
        )
        shapeless = EventTemplate(id="shapeless", title="No dates")
        negative = _single(template_id="negative", repeat_pattern=RepeatPattern.DAILY, repeat_count=-1)

        with caplog.at_level(logging.WARNING, logger="rokcalendar.calendar.expander"):
            result = expand(
                [zero_duration, backwards, good, shapeless, negative], datetime(2025, 2, 1)
            )

        assert {o.template.id for o in result} == {"good"}
        for skipped in ("zero", "backwards", "shapeless", "negative"):
            assert f"Skipping template {skipped}" in caplog.text


class TestDeterminism:
    def test_repeated_calls_are_identical(self, pattern_template) -> None:
        templates = [
            pattern_template(template_id="a", frequency="two-weeks", duration=3),
            pattern_template(template_id="b", title="Other", frequency="five-weeks", duration=2),
            _single(repeat_pattern=RepeatPattern.WEEKLY),
        ]
        horizon = datetime(2025, 12, 31)

        first = expand(templates, horizon, repetitions=5)
        second = expand(templates, horizon, repetitions=5)

        assert first == second
        assert [o.occurrence_id for o in first] == [o.occurrence_id for o in second]

    def test_output_is_grouped_by_template_in_input_order(self, pattern_template) -> None:
        templates = [
            pattern_template(template_id="late", start=date(2025, 3, 1), duration=1),
            pattern_template(template_id="early", start=date(2025, 1, 1), duration=1),
        ]

        ids = [o.template.id for o in expand(templates, datetime(2025, 4, 1))]

        assert ids[0] == "late"
        assert ids == sorted(ids, key=lambda i: 0 if i == "late" else 1)

    def test_iter_expand_is_lazy(self, pattern_template) -> None:
        generator = iter_expand([pattern_template()], datetime(2030, 1, 1))
        first = next(generator)
        assert first.occurrence_id == "t1-p0-20250101"
