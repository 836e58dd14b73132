"""Recurrence expansion for event templates.

Turns a list of :class:`EventTemplate` into a flat list of dated
:class:`Occurrence` objects bounded by a horizon. Expansion is a pure function
of its inputs: no clock reads and no random IDs, so repeated calls with the
same templates and horizon return identical output.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .models import EventTemplate, Frequency, Occurrence, PatternEntry, RepeatPattern

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

# Days between run starts for each known frequency
CADENCE_DAYS: dict[str, int] = {
    Frequency.ONE_WEEK.value: 7,
    Frequency.TWO_WEEKS.value: 14,
    Frequency.FOUR_WEEKS.value: 28,
    Frequency.FIVE_WEEKS.value: 35,
    Frequency.EIGHT_WEEKS.value: 56,
}

# Used for unrecognized frequency strings. Kept for compatibility with existing
# catalogs; a warning is logged every time it is applied.
DEFAULT_CADENCE_DAYS = 28

_REPEAT_UNITS: dict[RepeatPattern, relativedelta] = {
    RepeatPattern.DAILY: relativedelta(days=1),
    RepeatPattern.WEEKLY: relativedelta(weeks=1),
    RepeatPattern.MONTHLY: relativedelta(months=1),
    RepeatPattern.YEARLY: relativedelta(years=1),
}


class TemplateValidationError(ValueError):
    """Raised internally when a template cannot be expanded."""


def to_datetime(value: DateLike) -> datetime:
    """Normalize a date or datetime to a naive datetime (midnight for dates)."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def horizon_months_ahead(today: DateLike, months: int) -> datetime:
    """Horizon ending ``months`` calendar months after the start of ``today``."""
    start = to_datetime(today).replace(hour=0, minute=0, second=0, microsecond=0)
    return start + relativedelta(months=months)


def horizon_years_ahead(today: DateLike, years: int) -> datetime:
    """Horizon ending ``years`` years after the start of ``today``."""
    start = to_datetime(today).replace(hour=0, minute=0, second=0, microsecond=0)
    return start + relativedelta(years=years)


def cadence_for(frequency: str, template_id: str = "<unknown>") -> timedelta:
    """Return the step between run starts for a frequency string.

    Unrecognized values fall back to four weeks.
    """
    days = CADENCE_DAYS.get(frequency)
    if days is None:
        logger.warning(
            "Unrecognized frequency %r on template %s; falling back to %d days",
            frequency,
            template_id,
            DEFAULT_CADENCE_DAYS,
        )
        days = DEFAULT_CADENCE_DAYS
    return timedelta(days=days)


def shift(value: datetime, pattern: RepeatPattern, steps: int) -> datetime:
    """Shift ``value`` forward by ``steps`` units of ``pattern``.

    Month and year shifts clamp to the last day of shorter months.
    """
    return value + _REPEAT_UNITS[RepeatPattern(pattern)] * steps


def _validate(template: EventTemplate) -> None:
    if not template.has_temporal_shape:
        raise TemplateValidationError("template has neither start_time nor patterns")

    if template.is_pattern_based:
        for entry in template.patterns:
            if entry.duration_days < 1:
                raise TemplateValidationError(
                    f"non-positive duration {entry.duration_days} in pattern starting {entry.start_date}"
                )
        return

    if template.end_time is not None and template.start_time is not None:
        if template.end_time < template.start_time:
            raise TemplateValidationError(
                f"end_time {template.end_time} is before start_time {template.start_time}"
            )

    if template.repeat_count is not None and template.repeat_count < 0:
        raise TemplateValidationError(f"negative repeat_count {template.repeat_count}")


def _expand_single(
    template: EventTemplate,
    horizon_end: datetime,
    repetitions: Optional[int],
) -> Iterator[Occurrence]:
    start = template.start_time
    end = template.end_time or start
    assert start is not None  # guarded by _validate

    if template.repeat_pattern is None:
        if start < horizon_end:
            yield Occurrence(
                occurrence_id=template.id,
                template=template,
                start=start,
                end=end,
                is_start=True,
                is_during=False,
            )
        return

    limits = [n for n in (repetitions, template.repeat_count) if n is not None]
    count = min(limits) if limits else None

    index = 0
    while count is None or index < count:
        shifted_start = shift(start, template.repeat_pattern, index)
        if shifted_start >= horizon_end:
            break
        yield Occurrence(
            occurrence_id=f"{template.id}-{index}",
            template=template,
            start=shifted_start,
            end=shift(end, template.repeat_pattern, index),
            is_start=True,
            is_during=False,
        )
        index += 1


def _expand_pattern(
    template: EventTemplate,
    position: int,
    entry: PatternEntry,
    horizon_end: datetime,
) -> Iterator[Occurrence]:
    step = cadence_for(entry.frequency, template.id)
    current = to_datetime(entry.start_date)
    span = timedelta(days=entry.duration_days)

    # step is always positive, so current strictly advances towards the horizon
    while current < horizon_end:
        run_end = current + span
        yield Occurrence(
            occurrence_id=f"{template.id}-p{position}-{current:%Y%m%d}",
            template=template,
            start=current,
            end=run_end,
            is_start=True,
            is_during=False,
        )
        for offset in range(1, entry.duration_days):
            day = current + timedelta(days=offset)
            if day >= horizon_end:
                break
            yield Occurrence(
                occurrence_id=f"{template.id}-p{position}-{current:%Y%m%d}-{offset}",
                template=template,
                start=day,
                end=run_end,
                is_start=False,
                is_during=True,
            )
        current += step


def iter_expand(
    templates: Iterable[EventTemplate],
    horizon_end: DateLike,
    repetitions: Optional[int] = None,
) -> Iterator[Occurrence]:
    """Lazily expand templates into occurrences, template by template.

    Args:
        templates: Templates in the order their occurrences should be emitted
        horizon_end: Exclusive upper bound for occurrence starts
        repetitions: Number of repetitions for single-run templates with a
            ``repeat_pattern``; ``None`` repeats until the horizon

    Yields:
        Occurrence objects, grouped by template in input order
    """
    horizon = to_datetime(horizon_end)

    for template in templates:
        try:
            _validate(template)
        except TemplateValidationError as exc:
            logger.warning("Skipping template %s (%r): %s", template.id, template.title, exc)
            continue

        if template.is_pattern_based:
            for position, entry in enumerate(template.patterns):
                yield from _expand_pattern(template, position, entry, horizon)
        else:
            yield from _expand_single(template, horizon, repetitions)


def expand(
    templates: Iterable[EventTemplate],
    horizon_end: DateLike,
    repetitions: Optional[int] = None,
) -> list[Occurrence]:
    """Expand templates into a new list of occurrences.

    See :func:`iter_expand` for argument details.
    """
    occurrences = list(iter_expand(templates, horizon_end, repetitions))
    logger.debug(
        "Expanded templates into %d occurrences (horizon=%s, repetitions=%s)",
        len(occurrences),
        horizon_end,
        repetitions,
    )
    return occurrences
