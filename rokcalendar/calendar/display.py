"""Display labels and colours for event types and priorities.

Colours are locale independent. Labels and date formatting come from an
explicit :class:`DisplayLocale` passed by the caller; there is no process-wide
default locale.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Mapping, Union

from .models import EventTemplate, EventType, Priority
from .navigation import MONDAY, SUNDAY


class UnknownDisplayValueError(ValueError):
    """Raised when a value outside the closed enumerations is looked up."""


class UnknownLocaleError(LookupError):
    """Raised for locale codes without a built-in table."""


EVENT_TYPE_COLORS: Mapping[EventType, str] = MappingProxyType(
    {
        EventType.KINGDOM: "blue",
        EventType.ALLIANCE: "green",
        EventType.PERSONAL: "orange",
        EventType.SPECIAL: "purple",
        EventType.KVK: "red",
        EventType.CEREMONY: "gold",
        EventType.TRAINING: "cyan",
        EventType.COMPETITIVE: "magenta",
        EventType.GATHERING: "lime",
        EventType.EXPEDITION: "volcano",
        EventType.WHEEL: "geekblue",
        EventType.CARD: "purple",
        EventType.POWER: "red",
        EventType.BUILDING: "orange",
        EventType.RESEARCH: "blue",
        EventType.COMMANDER: "cyan",
        EventType.TROOP: "green",
        EventType.BARBARIAN: "volcano",
        EventType.FORT: "magenta",
        EventType.RESOURCE: "lime",
        EventType.VIP: "gold",
        EventType.RECHARGE: "geekblue",
        EventType.ALLIANCE_WAR: "red",
    }
)

PRIORITY_COLORS: Mapping[Priority, str] = MappingProxyType(
    {
        Priority.LOW: "green",
        Priority.MEDIUM: "orange",
        Priority.HIGH: "red",
        Priority.CRITICAL: "magenta",
    }
)


@dataclass(frozen=True)
class DisplayLocale:
    """Strings and formats for one UI language."""

    code: str
    event_type_labels: Mapping[EventType, str]
    priority_labels: Mapping[Priority, str]
    weekday_names: tuple[str, ...]  # Monday first, matching date.weekday()
    weekday_short: tuple[str, ...]
    date_format: str
    week_start: int


VI = DisplayLocale(
    code="vi",
    event_type_labels=MappingProxyType(
        {
            EventType.KINGDOM: "Toàn Vương Quốc",
            EventType.ALLIANCE: "Liên Minh",
            EventType.PERSONAL: "Cá Nhân",
            EventType.SPECIAL: "Đặc Biệt",
            EventType.KVK: "KVK",
            EventType.CEREMONY: "Lễ Hội",
            EventType.TRAINING: "Đào Tạo",
            EventType.COMPETITIVE: "Cạnh Tranh",
            EventType.GATHERING: "Thu Thập",
            EventType.EXPEDITION: "Thám Hiểm",
            EventType.WHEEL: "Vòng Quay",
            EventType.CARD: "Thẻ Bài",
            EventType.POWER: "Sức Mạnh",
            EventType.BUILDING: "Xây Dựng",
            EventType.RESEARCH: "Nghiên Cứu",
            EventType.COMMANDER: "Tướng",
            EventType.TROOP: "Quân Đội",
            EventType.BARBARIAN: "Barbarian",
            EventType.FORT: "Pháo Đài",
            EventType.RESOURCE: "Tài Nguyên",
            EventType.VIP: "VIP",
            EventType.RECHARGE: "Nạp",
            EventType.ALLIANCE_WAR: "Chiến Liên Minh",
        }
    ),
    priority_labels=MappingProxyType(
        {
            Priority.LOW: "Thấp",
            Priority.MEDIUM: "Trung bình",
            Priority.HIGH: "Cao",
            Priority.CRITICAL: "Tối cao",
        }
    ),
    weekday_names=("Thứ Hai", "Thứ Ba", "Thứ Tư", "Thứ Năm", "Thứ Sáu", "Thứ Bảy", "Chủ Nhật"),
    weekday_short=("T2", "T3", "T4", "T5", "T6", "T7", "CN"),
    date_format="%d/%m/%Y",
    week_start=MONDAY,
)

EN = DisplayLocale(
    code="en",
    event_type_labels=MappingProxyType(
        {
            EventType.KINGDOM: "Kingdom",
            EventType.ALLIANCE: "Alliance",
            EventType.PERSONAL: "Personal",
            EventType.SPECIAL: "Special",
            EventType.KVK: "KvK",
            EventType.CEREMONY: "Ceremony",
            EventType.TRAINING: "Training",
            EventType.COMPETITIVE: "Competitive",
            EventType.GATHERING: "Gathering",
            EventType.EXPEDITION: "Expedition",
            EventType.WHEEL: "Wheel",
            EventType.CARD: "Card",
            EventType.POWER: "Power",
            EventType.BUILDING: "Building",
            EventType.RESEARCH: "Research",
            EventType.COMMANDER: "Commander",
            EventType.TROOP: "Troop",
            EventType.BARBARIAN: "Barbarian",
            EventType.FORT: "Fort",
            EventType.RESOURCE: "Resource",
            EventType.VIP: "VIP",
            EventType.RECHARGE: "Recharge",
            EventType.ALLIANCE_WAR: "Alliance War",
        }
    ),
    priority_labels=MappingProxyType(
        {
            Priority.LOW: "Low",
            Priority.MEDIUM: "Medium",
            Priority.HIGH: "High",
            Priority.CRITICAL: "Critical",
        }
    ),
    weekday_names=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
    weekday_short=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    date_format="%m/%d/%Y",
    week_start=SUNDAY,
)

LOCALES: Mapping[str, DisplayLocale] = MappingProxyType({VI.code: VI, EN.code: EN})


def get_locale(code: str) -> DisplayLocale:
    """Look up a built-in locale by code (case-insensitive)."""
    try:
        return LOCALES[code.lower()]
    except (KeyError, AttributeError):
        raise UnknownLocaleError(f"Unknown display locale: {code!r}") from None


def _event_type(value: Union[EventType, str]) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise UnknownDisplayValueError(f"Unknown event type: {value!r}") from None


def _priority(value: Union[Priority, str]) -> Priority:
    try:
        return Priority(value)
    except ValueError:
        raise UnknownDisplayValueError(f"Unknown priority: {value!r}") from None


def event_type_color(value: Union[EventType, str]) -> str:
    return EVENT_TYPE_COLORS[_event_type(value)]


def event_type_label(value: Union[EventType, str], locale: DisplayLocale) -> str:
    return locale.event_type_labels[_event_type(value)]


def priority_color(value: Union[Priority, str]) -> str:
    return PRIORITY_COLORS[_priority(value)]


def priority_label(value: Union[Priority, str], locale: DisplayLocale) -> str:
    return locale.priority_labels[_priority(value)]


def template_color(template: EventTemplate) -> str:
    """Colour to paint a template with: its own colour, else its type colour."""
    if template.color:
        return template.color
    return event_type_color(template.event_type)


def weekday_name(day: date, locale: DisplayLocale, short: bool = False) -> str:
    names = locale.weekday_short if short else locale.weekday_names
    return names[day.weekday()]


def format_day(day: date, locale: DisplayLocale) -> str:
    """Format a day using the locale's date pattern, e.g. ``19/10/2026``."""
    return day.strftime(locale.date_format)
