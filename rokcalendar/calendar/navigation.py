"""View navigation state for the month and week grids.

All transitions return a new :class:`ViewState`; none of them touch the
occurrence index.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

MONDAY = 0
SUNDAY = 6


class Granularity(str, Enum):
    """Unit moved by previous/next."""

    MONTH = "month"
    WEEK = "week"


@dataclass(frozen=True)
class ViewState:
    """What the calendar is currently showing."""

    anchor: date
    granularity: Granularity = Granularity.MONTH


def _step(granularity: Granularity) -> relativedelta:
    if granularity == Granularity.WEEK:
        return relativedelta(weeks=1)
    return relativedelta(months=1)


def initial_state(today: date) -> ViewState:
    return ViewState(anchor=today, granularity=Granularity.MONTH)


def previous(state: ViewState) -> ViewState:
    return replace(state, anchor=state.anchor - _step(state.granularity))


def next_period(state: ViewState) -> ViewState:
    return replace(state, anchor=state.anchor + _step(state.granularity))


def today(state: ViewState, now: date) -> ViewState:
    return replace(state, anchor=now)


def set_granularity(state: ViewState, granularity: Granularity) -> ViewState:
    return replace(state, granularity=Granularity(granularity))


def jump_to(state: ViewState, target: date) -> ViewState:
    return replace(state, anchor=target)


def start_of_week(day: date, week_start: int = MONDAY) -> date:
    """First day of the week containing ``day``.

    Args:
        day: Any day in the week
        week_start: ``date.weekday()`` number the week starts on (0=Monday, 6=Sunday)
    """
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def week_days(state: ViewState, week_start: int = MONDAY) -> list[date]:
    """The seven days of the anchor's week."""
    first = start_of_week(state.anchor, week_start)
    return [first + timedelta(days=i) for i in range(7)]


def visible_range(state: ViewState, week_start: int = MONDAY) -> tuple[date, date]:
    """First and last day (inclusive) shown for the current granularity."""
    if state.granularity == Granularity.WEEK:
        first = start_of_week(state.anchor, week_start)
        return first, first + timedelta(days=6)
    first = state.anchor.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


def is_current_period(state: ViewState, now: date, week_start: int = MONDAY) -> bool:
    """True when ``now`` falls inside the visible range."""
    first, last = visible_range(state, week_start)
    return first <= now <= last
