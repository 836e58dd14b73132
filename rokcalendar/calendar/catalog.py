"""Static catalog of base event templates.

Start and end times are offsets from the start of the anchor's week or month,
so the catalog is rebuilt relative to whatever day the calendar opens on.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from .expander import expand, horizon_months_ahead
from .models import EventCategory, EventTemplate, EventType, Occurrence, Priority, RepeatPattern
from .navigation import MONDAY, start_of_week

logger = logging.getLogger(__name__)

WEEK = "week"
MONTH = "month"


@dataclass(frozen=True)
class _CatalogEntry:
    id: str
    title: str
    description: str
    base: str  # WEEK or MONTH
    start_offset: timedelta
    end_offset: timedelta
    event_type: EventType
    category: EventCategory
    priority: Priority
    rewards: tuple[str, ...]
    requirements: Optional[str] = None
    repeat_pattern: Optional[RepeatPattern] = None
    min_power: Optional[int] = None


def _days(n: int, hours: int = 0) -> timedelta:
    return timedelta(days=n, hours=hours)


def _kvk(season: int, title: str, description: str, reward: str, requirements: str) -> _CatalogEntry:
    first_day = 15 + 30 * (season - 1)
    return _CatalogEntry(
        id=f"kvk-{season}",
        title=f"KvK Season {season}: {title}",
        description=description,
        base=MONTH,
        start_offset=_days(first_day),
        end_offset=_days(first_day + 30),
        event_type=EventType.KVK,
        category=EventCategory.KVK_SEASON,
        priority=Priority.CRITICAL,
        rewards=("KvK Commander", "KvK Avatar Frame", reward),
        requirements=requirements,
        repeat_pattern=RepeatPattern.MONTHLY,
    )


_CATALOG: tuple[_CatalogEntry, ...] = (
    # Weekly
    _CatalogEntry(
        id="weekly-1",
        title="Ceremony of Karuak",
        description="Server-wide monster hunt earning individual and alliance points",
        base=WEEK,
        start_offset=_days(1),
        end_offset=_days(3),
        event_type=EventType.CEREMONY,
        category=EventCategory.WEEKLY,
        priority=Priority.HIGH,
        rewards=("Gold Sculptures", "Universal Sculptures", "Training Speedups"),
        requirements="City Hall 16",
        repeat_pattern=RepeatPattern.WEEKLY,
    ),
    _CatalogEntry(
        id="weekly-2",
        title="Strategic Reserves",
        description="Gather and spend resources to earn rewards",
        base=WEEK,
        start_offset=_days(3),
        end_offset=_days(5),
        event_type=EventType.RESOURCE,
        category=EventCategory.WEEKLY,
        priority=Priority.MEDIUM,
        rewards=("Gems", "Resource Packs", "Speedups"),
        requirements="City Hall 12",
        repeat_pattern=RepeatPattern.WEEKLY,
    ),
    # Monthly
    _CatalogEntry(
        id="monthly-1",
        title="Mightiest Governor (MGE)",
        description="Compete for a new legendary commander",
        base=MONTH,
        start_offset=_days(5),
        end_offset=_days(12),
        event_type=EventType.COMPETITIVE,
        category=EventCategory.MONTHLY,
        priority=Priority.CRITICAL,
        rewards=("Gold Sculptures", "Legendary Commander", "Avatar Frame"),
        requirements="City Hall 25, minimum power",
        repeat_pattern=RepeatPattern.MONTHLY,
        min_power=5_000_000,
    ),
    _CatalogEntry(
        id="monthly-2",
        title="Golden Kingdom",
        description="Kingdom-wide competition across several stages",
        base=MONTH,
        start_offset=_days(10),
        end_offset=_days(17),
        event_type=EventType.KINGDOM,
        category=EventCategory.MONTHLY,
        priority=Priority.HIGH,
        rewards=("Universal Sculptures", "Gems", "Special Frame"),
        requirements="City Hall 20",
        repeat_pattern=RepeatPattern.MONTHLY,
    ),
    # Alliance
    _CatalogEntry(
        id="alliance-1",
        title="Ark of Osiris",
        description="30 vs 30 alliance battlefield: capture and defend the Ark",
        base=WEEK,
        start_offset=_days(2),
        end_offset=_days(2, hours=2),
        event_type=EventType.ALLIANCE_WAR,
        category=EventCategory.WEEKLY,
        priority=Priority.HIGH,
        rewards=("Osiris Chest", "Commander Sculptures", "Materials"),
        requirements="Alliance level 4, 30 members",
        repeat_pattern=RepeatPattern.WEEKLY,
    ),
    # Wheel
    _CatalogEntry(
        id="wheel-1",
        title="Wheel of Fortune",
        description="Spin the wheel for the newly released commander",
        base=MONTH,
        start_offset=_days(3),
        end_offset=_days(10),
        event_type=EventType.WHEEL,
        category=EventCategory.MONTHLY,
        priority=Priority.HIGH,
        rewards=("New Commander", "Gold Sculptures", "Gems"),
        requirements="City Hall 16",
        repeat_pattern=RepeatPattern.MONTHLY,
    ),
    # Recharge
    _CatalogEntry(
        id="recharge-1",
        title="More Than Gems",
        description="Bonus rewards for purchasing gems",
        base=MONTH,
        start_offset=_days(1),
        end_offset=_days(4),
        event_type=EventType.RECHARGE,
        category=EventCategory.MONTHLY,
        priority=Priority.MEDIUM,
        rewards=("Bonus Gems", "Commander Sculptures", "Speedups"),
        requirements="Gem purchase",
        repeat_pattern=RepeatPattern.MONTHLY,
    ),
    # Seasonal
    _CatalogEntry(
        id="seasonal-1",
        title="Olympia",
        description="Sports festival with minigames and challenges",
        base=MONTH,
        start_offset=_days(7),
        end_offset=_days(14),
        event_type=EventType.SPECIAL,
        category=EventCategory.SEASONAL,
        priority=Priority.MEDIUM,
        rewards=("Olympia Medal", "Special Avatar", "Resources"),
        requirements="City Hall 10",
        repeat_pattern=RepeatPattern.MONTHLY,
    ),
    # Kingdom vs Kingdom
    _kvk(1, "Heroic Anthem", "First KvK campaign: eight kingdoms clash in the Lost Kingdom",
         "Special Items", "City Hall 16, kingdom at least 60 days old"),
    _kvk(2, "Storm of Stratagems", "Second KvK season with Holy Grounds and crystals",
         "Crystal Key", "City Hall 18, KvK S1 completed"),
    _kvk(3, "Siege of Orleans", "Third KvK season with an advanced Ark of Osiris",
         "Legendary Items", "City Hall 20, KvK S2 completed"),
    _kvk(4, "Eastern Continent", "KvK on the Asian map with new mechanics",
         "Asian Artifacts", "City Hall 22, KvK S3 completed"),
    _kvk(5, "Dynasty", "KvK with Dynasty and Imperial Conquest mechanics",
         "Imperial Treasures", "City Hall 24, KvK S4 completed"),
    _kvk(6, "Inferno", "Hell-themed KvK with Infernal Altars",
         "Infernal Rewards", "City Hall 25, KvK S5 completed"),
    _kvk(7, "Sanctuary", "KvK fought over sacred sanctuaries",
         "Divine Artifacts", "City Hall 25, KvK S6 completed"),
    _kvk(8, "New World", "KvK on an uncharted continent",
         "Advanced Rewards", "City Hall 25, KvK S7 completed"),
)


def base_templates(anchor: date, week_start: int = MONDAY) -> list[EventTemplate]:
    """Build the catalog relative to the week and month containing ``anchor``.

    Args:
        anchor: Day the calendar is opened on
        week_start: ``date.weekday()`` number weeks start on

    Returns:
        Base templates in catalog order
    """
    week_base = datetime.combine(start_of_week(anchor, week_start), time.min)
    month_base = datetime.combine(anchor.replace(day=1), time.min)

    templates = []
    for entry in _CATALOG:
        base = week_base if entry.base == WEEK else month_base
        templates.append(
            EventTemplate(
                id=entry.id,
                title=entry.title,
                description=entry.description,
                start_time=base + entry.start_offset,
                end_time=base + entry.end_offset,
                repeat_pattern=entry.repeat_pattern,
                event_type=entry.event_type,
                category=entry.category,
                priority=entry.priority,
                rewards=list(entry.rewards),
                requirements=entry.requirements,
                min_power=entry.min_power,
                repeatable=entry.repeat_pattern is not None,
            )
        )
    return templates


def generate_repeated_events(
    anchor: date, months_ahead: int = 12, week_start: int = MONDAY
) -> list[Occurrence]:
    """Expand the static catalog ``months_ahead`` repetitions into the future.

    Each repeating template produces up to ``months_ahead`` copies (days,
    weeks, months or years apart depending on its pattern), clipped at a
    horizon ``months_ahead`` months after ``anchor``.
    """
    templates = base_templates(anchor, week_start)
    horizon = horizon_months_ahead(anchor, months_ahead)
    occurrences = expand(templates, horizon, repetitions=months_ahead)
    logger.debug(
        "Generated %d static occurrences from %d templates", len(occurrences), len(templates)
    )
    return occurrences
