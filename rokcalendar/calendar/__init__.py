"""Event templates, recurrence expansion and the occurrence index."""

from .expander import expand, horizon_months_ahead, horizon_years_ahead, iter_expand
from .index import OccurrenceIndex
from .models import (
    EventCategory,
    EventTemplate,
    EventType,
    Frequency,
    Occurrence,
    PatternEntry,
    Priority,
    RepeatPattern,
)

__all__ = [
    "EventCategory",
    "EventTemplate",
    "EventType",
    "Frequency",
    "Occurrence",
    "OccurrenceIndex",
    "PatternEntry",
    "Priority",
    "RepeatPattern",
    "expand",
    "horizon_months_ahead",
    "horizon_years_ahead",
    "iter_expand",
]
