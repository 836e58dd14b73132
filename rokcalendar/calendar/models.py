"""Data models for event templates and expanded occurrences."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


class EventType(str, Enum):
    """Closed set of in-game event kinds. Each maps to a display colour and label."""

    KINGDOM = "kingdom"
    ALLIANCE = "alliance"
    PERSONAL = "personal"
    SPECIAL = "special"
    KVK = "kvk"
    CEREMONY = "ceremony"
    TRAINING = "training"
    COMPETITIVE = "competitive"
    GATHERING = "gathering"
    EXPEDITION = "expedition"
    WHEEL = "wheel"
    CARD = "card"
    POWER = "power"
    BUILDING = "building"
    RESEARCH = "research"
    COMMANDER = "commander"
    TROOP = "troop"
    BARBARIAN = "barbarian"
    FORT = "fort"
    RESOURCE = "resource"
    VIP = "vip"
    RECHARGE = "recharge"
    ALLIANCE_WAR = "alliance_war"


class Priority(str, Enum):
    """Event priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventCategory(str, Enum):
    """Catalog grouping shown in the detail panel."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SEASONAL = "seasonal"
    KVK_SEASON = "kvk_season"
    SPECIAL_OCCASION = "special_occasion"
    LIMITED_TIME = "limited_time"
    PERMANENT = "permanent"


class RepeatPattern(str, Enum):
    """Calendar unit used to shift single-run templates."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Frequency(str, Enum):
    """Cadence strings used by pattern-list templates."""

    ONE_WEEK = "one-week"
    TWO_WEEKS = "two-weeks"
    FOUR_WEEKS = "four-weeks"
    FIVE_WEEKS = "five-weeks"
    EIGHT_WEEKS = "eight-weeks"


class PatternEntry(BaseModel):
    """One independent recurring slot of a pattern-list template.

    ``frequency`` stays a plain string so values outside :class:`Frequency`
    reach the expander, which applies the four-week fallback.
    """

    start_date: date = Field(..., description="First day of the first run")
    frequency: str = Field(..., description="Cadence between run starts")
    duration_days: int = Field(default=1, description="Days covered by each run")

    model_config = ConfigDict(frozen=True)


class EventTemplate(BaseModel):
    """Base definition of a recurring or one-off game event."""

    # Core properties
    id: str = Field(..., description="Unique template ID")
    title: str = Field(..., description="Display title")
    description: str = Field(default="", description="Display description")

    # Single-run shape
    start_time: Optional[datetime] = Field(default=None, description="Local start timestamp")
    end_time: Optional[datetime] = Field(default=None, description="Local end timestamp")
    repeat_pattern: Optional[RepeatPattern] = Field(
        default=None, description="Unit used to repeat the single run"
    )
    repeat_count: Optional[int] = Field(
        default=None, description="Maximum repetitions for this template (None = unbounded)"
    )

    # Pattern-list shape
    patterns: list[PatternEntry] = Field(default_factory=list, description="Recurring slots")

    # Classification
    event_type: EventType = Field(default=EventType.SPECIAL, description="Event kind")
    category: Optional[EventCategory] = Field(default=None, description="Catalog grouping")
    priority: Priority = Field(default=Priority.MEDIUM, description="Priority level")
    color: Optional[str] = Field(
        default=None, description="Free-form colour overriding the event type colour"
    )

    # Details
    rewards: list[str] = Field(default_factory=list, description="Reward labels")
    requirements: Optional[str] = Field(default=None, description="Entry requirements")
    min_power: Optional[int] = Field(default=None, description="Minimum governor power")
    kingdom_level: Optional[int] = Field(
        default=None, description="Days since kingdom founding required"
    )
    event_stage: Optional[str] = Field(default=None, description="Stage label")

    # Flags (display only, never mutated)
    completed: bool = Field(default=False)
    repeatable: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _default_end_time(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("start_time") is not None:
            if data.get("end_time") is None:
                data = {**data, "end_time": data["start_time"]}
        return data

    @property
    def is_pattern_based(self) -> bool:
        """True when the template is expanded from its pattern list."""
        return bool(self.patterns)

    @property
    def has_temporal_shape(self) -> bool:
        """True when the template can be placed on the calendar at all."""
        return self.is_pattern_based or self.start_time is not None


class Occurrence(BaseModel):
    """One dated instance produced by expanding a template."""

    occurrence_id: str = Field(..., description="Deterministic occurrence ID")
    template: EventTemplate = Field(..., description="Owning template (shared)")
    start: datetime = Field(..., description="Day (pattern runs) or timestamp (single runs)")
    end: datetime = Field(..., description="End of the run this occurrence belongs to")
    is_start: bool = Field(default=True, description="First day of a run")
    is_during: bool = Field(default=False, description="Day 2..N of a multi-day run")

    model_config = ConfigDict(frozen=True)

    @property
    def day(self) -> date:
        """Calendar day of this occurrence."""
        return self.start.date()

    @property
    def day_key(self) -> str:
        """``YYYY-MM-DD`` bucket key."""
        return self.start.strftime("%Y-%m-%d")

    @property
    def title(self) -> str:
        return self.template.title

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()
