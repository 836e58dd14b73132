"""Calendar query routes: day, month, upcoming, view navigation, refresh, health."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from typing import Any, Optional

from aiohttp import web

from ...calendar import navigation
from ...calendar.display import (
    DisplayLocale,
    event_type_label,
    format_day,
    priority_color,
    priority_label,
    template_color,
    weekday_name,
)
from ...calendar.index import MonthStats
from ...calendar.models import Occurrence
from ...sources.template_store import StoreStatus, TemplateStore

logger = logging.getLogger(__name__)

NAV_ACTIONS = ("previous", "next", "today")


class QueryError(ValueError):
    """Invalid query parameter; rendered as a 400 response."""


def _serialize_iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def occurrence_to_api_model(occ: Occurrence, locale: DisplayLocale) -> dict[str, Any]:
    """Convert an occurrence to the JSON shape consumed by the frontend."""
    template = occ.template
    return {
        "id": occ.occurrence_id,
        "template_id": template.id,
        "title": template.title,
        "description": template.description,
        "day": occ.day_key,
        "start": occ.start.isoformat(),
        "end": occ.end.isoformat(),
        "is_start": occ.is_start,
        "is_during": occ.is_during,
        "event_type": template.event_type.value,
        "event_type_label": event_type_label(template.event_type, locale),
        "color": template_color(template),
        "priority": template.priority.value,
        "priority_label": priority_label(template.priority, locale),
        "priority_color": priority_color(template.priority),
        "category": template.category.value if template.category else None,
        "rewards": list(template.rewards),
        "requirements": template.requirements,
        "min_power": template.min_power,
        "kingdom_level": template.kingdom_level,
        "event_stage": template.event_stage,
        "completed": template.completed,
        "repeatable": template.repeatable,
    }


def status_to_api_model(status: StoreStatus) -> dict[str, Any]:
    return {
        "loading": status.loading,
        "error_message": status.error_message,
        "template_count": status.template_count,
        "occurrence_count": status.occurrence_count,
        "last_loaded_at": _serialize_iso(status.last_loaded_at),
    }


def stats_to_api_model(stats: MonthStats) -> dict[str, Any]:
    return {
        "total_events": stats.total_events,
        "total_days": stats.total_days,
        "events_by_type": dict(stats.events_by_type),
    }


def _parse_date(raw: Optional[str], name: str, default: datetime.date) -> datetime.date:
    if raw is None or raw == "":
        return default
    try:
        return datetime.date.fromisoformat(raw)
    except ValueError:
        raise QueryError(f"'{name}' must be a date in YYYY-MM-DD format") from None


def _parse_int(raw: Optional[str], name: str, default: Optional[int] = None) -> int:
    if raw is None or raw == "":
        if default is None:
            raise QueryError(f"'{name}' is required")
        return default
    try:
        return int(raw)
    except ValueError:
        raise QueryError(f"'{name}' must be an integer") from None


def register_calendar_routes(
    app: web.Application,
    store: TemplateStore,
    locale: DisplayLocale,
    time_provider: Callable[[], datetime.datetime],
    upcoming_limit: int = 10,
) -> None:
    """Register calendar query routes.

    Args:
        app: aiohttp web application
        store: Template store owning the current occurrence index
        locale: Display locale used for labels, date formats and week start
        time_provider: Returns the current local time
        upcoming_limit: Default size of the upcoming list
    """

    def _serialize_all(occurrences: list[Occurrence]) -> list[dict[str, Any]]:
        return [occurrence_to_api_model(o, locale) for o in occurrences]

    def _bad_request(exc: QueryError) -> web.Response:
        return web.json_response({"error": str(exc)}, status=400)

    async def get_day(request: web.Request) -> web.Response:
        try:
            day = _parse_date(request.query.get("date"), "date", time_provider().date())
        except QueryError as exc:
            return _bad_request(exc)

        occurrences = store.index.occurrences_on_day(day)
        return web.json_response(
            {
                "date": day.isoformat(),
                "label": format_day(day, locale),
                "weekday": weekday_name(day, locale),
                "occurrences": _serialize_all(occurrences),
            }
        )

    async def get_month(request: web.Request) -> web.Response:
        today = time_provider().date()
        try:
            year = _parse_int(request.query.get("year"), "year", today.year)
            month = _parse_int(request.query.get("month"), "month", today.month)
            if not 1 <= month <= 12:
                raise QueryError("'month' must be between 1 and 12")
            if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
                raise QueryError("'year' is out of range")
        except QueryError as exc:
            return _bad_request(exc)

        index = store.index
        return web.json_response(
            {
                "year": year,
                "month": month,
                "occurrences": _serialize_all(index.occurrences_in_month(year, month)),
                "days": [
                    {"date": key, "occurrences": _serialize_all(occs)}
                    for key, occs in index.days_in_month(year, month)
                ],
                "stats": stats_to_api_model(index.month_stats(year, month)),
            }
        )

    async def get_upcoming(request: web.Request) -> web.Response:
        try:
            from_date = _parse_date(request.query.get("from"), "from", time_provider().date())
            limit = _parse_int(request.query.get("limit"), "limit", upcoming_limit)
            if limit < 0:
                raise QueryError("'limit' must not be negative")
        except QueryError as exc:
            return _bad_request(exc)

        occurrences = store.index.upcoming(from_date, limit)
        return web.json_response(
            {"from": from_date.isoformat(), "limit": limit, "occurrences": _serialize_all(occurrences)}
        )

    async def get_view(request: web.Request) -> web.Response:
        now = time_provider().date()
        try:
            anchor = _parse_date(request.query.get("anchor"), "anchor", now)
            raw_granularity = request.query.get("granularity") or navigation.Granularity.MONTH.value
            try:
                granularity = navigation.Granularity(raw_granularity)
            except ValueError:
                raise QueryError("'granularity' must be 'month' or 'week'") from None
            action = request.query.get("action")
            if action is not None and action not in NAV_ACTIONS:
                raise QueryError(f"'action' must be one of {', '.join(NAV_ACTIONS)}")
        except QueryError as exc:
            return _bad_request(exc)

        state = navigation.ViewState(anchor=anchor, granularity=granularity)
        if action == "previous":
            state = navigation.previous(state)
        elif action == "next":
            state = navigation.next_period(state)
        elif action == "today":
            state = navigation.today(state, now)

        first, last = navigation.visible_range(state, locale.week_start)
        body: dict[str, Any] = {
            "anchor": state.anchor.isoformat(),
            "granularity": state.granularity.value,
            "range": {"start": first.isoformat(), "end": last.isoformat()},
            "is_current_period": navigation.is_current_period(state, now, locale.week_start),
        }
        if state.granularity == navigation.Granularity.WEEK:
            body["days"] = [
                {
                    "date": d.isoformat(),
                    "label": format_day(d, locale),
                    "weekday": weekday_name(d, locale, short=True),
                    "occurrences": _serialize_all(store.index.occurrences_on_day(d)),
                }
                for d in navigation.week_days(state, locale.week_start)
            ]
        return web.json_response(body)

    async def post_refresh(_request: web.Request) -> web.Response:
        if store.fetcher is None or not store.catalog_url:
            return web.json_response(
                {"error": "refresh is only available with the remote source"}, status=409
            )
        refreshed = await store.retry()
        status = store.snapshot()
        logger.info("Refresh requested: refreshed=%s error=%s", refreshed, status.error_message)
        return web.json_response({"refreshed": refreshed, "status": status_to_api_model(status)})

    async def health_check(_request: web.Request) -> web.Response:
        status = store.snapshot()
        healthy = status.error_message is None
        return web.json_response(
            {
                "status": "ok" if healthy else "degraded",
                "server_time_iso": _serialize_iso(time_provider()),
                "locale": locale.code,
                "store": status_to_api_model(status),
            },
            status=200 if healthy else 503,
        )

    app.router.add_get("/api/calendar/day", get_day)
    app.router.add_get("/api/calendar/month", get_month)
    app.router.add_get("/api/calendar/upcoming", get_upcoming)
    app.router.add_get("/api/calendar/view", get_view)
    app.router.add_post("/api/calendar/refresh", post_refresh)
    app.router.add_get("/health", health_check)
