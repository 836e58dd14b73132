"""Translate remote catalog entries into canonical event templates.

The remote catalog uses its own shape::

    {"pattern": [{"startDate": "2025-01-01", "frequency": "two-weeks", "duration": 3}],
     "title": "...", "description": "...", "color": "#ff0000"}

It has no event type or priority, and a free-form colour. Entries become
pattern-list templates of type ``special`` and priority ``medium`` that keep
the remote colour as a display override.
"""

import logging
import re
from collections.abc import Iterable
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..calendar.models import EventTemplate, EventType, PatternEntry, Priority

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


class RemotePattern(BaseModel):
    """One ``pattern`` element of a remote entry."""

    start_date: date = Field(..., alias="startDate")
    frequency: str = Field(default="four-weeks")
    duration: int = Field(default=1)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RemoteEvent(BaseModel):
    """A remote catalog entry as received over the wire."""

    title: str
    description: str = ""
    color: Optional[str] = None
    pattern: list[RemotePattern] = Field(default_factory=list)
    id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


def _slug(text: str) -> str:
    return _SLUG_RE.sub("-", text.lower()).strip("-") or "event"


def to_template(raw: Any, position: int) -> EventTemplate:
    """Convert one raw remote entry into an :class:`EventTemplate`.

    Args:
        raw: Decoded JSON element
        position: Index of the element in the payload, used to keep IDs unique

    Raises:
        pydantic.ValidationError: If the entry does not match the remote shape
    """
    remote = RemoteEvent.model_validate(raw)
    template_id = remote.id or f"remote-{position}-{_slug(remote.title)}"
    return EventTemplate(
        id=template_id,
        title=remote.title,
        description=remote.description,
        patterns=[
            PatternEntry(
                start_date=p.start_date,
                frequency=p.frequency,
                duration_days=p.duration,
            )
            for p in remote.pattern
        ],
        event_type=EventType.SPECIAL,
        priority=Priority.MEDIUM,
        color=remote.color,
        repeatable=True,
    )


def templates_from_payload(payload: Iterable[Any]) -> list[EventTemplate]:
    """Convert a fetched payload, skipping entries that fail validation."""
    templates: list[EventTemplate] = []
    skipped = 0
    for position, raw in enumerate(payload):
        try:
            templates.append(to_template(raw, position))
        except ValidationError as exc:
            skipped += 1
            logger.warning(
                "Skipping remote catalog entry %d: %d validation error(s): %s",
                position,
                exc.error_count(),
                exc.errors(include_url=False)[:1],
            )
    if skipped:
        logger.info("Converted %d remote entries (%d skipped)", len(templates), skipped)
    return templates
