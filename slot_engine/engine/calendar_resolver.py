"""
Working-calendar resolution: which hours a resource is open on a given date.

Combines the weekly schedule and daily breaks with the resource's time zone
to produce absolute instants for one calendar date. Missing or malformed
configuration never raises here; it resolves to the documented defaults
(``DEFAULT_WEEKLY_SCHEDULE``, no breaks, policy values from settings) and
logs a warning.

Usage:
    ctx = load_resource_context(config_store, "salon-1")
    day = resolve_day(ctx, date(2025, 3, 18))
    if day.open_window is None:
        ...  # closed
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from slot_engine.config import AppConfig, settings
from slot_engine.logging_context import get_request_logger
from slot_engine.schemas.calendar_schema import (
    DEFAULT_WEEKLY_SCHEDULE,
    WEEKDAYS,
    BreakWindow,
    DaySchedule,
    ServicePolicy,
    WeeklySchedule,
)
from slot_engine.schemas.interval_schema import Interval
from slot_engine.stores.base import ResourceConfigStore
from slot_engine.utils import local_instant, parse_hhmm

logger = get_request_logger(__name__)


@dataclass(frozen=True)
class AnchoredBreak:
    """A break window pinned to a specific date."""
    label: str
    interval: Interval


@dataclass(frozen=True)
class ResolvedDay:
    """Open window and breaks for one resource on one date."""
    resource_id: str
    day: date
    tz: ZoneInfo
    open_window: Optional[Interval] = None
    breaks: list[AnchoredBreak] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.open_window is not None


@dataclass(frozen=True)
class ResourceContext:
    """Everything the engine needs to know about a resource's configuration."""
    resource_id: str
    tz: ZoneInfo
    schedule: WeeklySchedule
    breaks: list[BreakWindow]
    policy: ServicePolicy
    currency: str


def default_policy(config: AppConfig = settings) -> ServicePolicy:
    """Service policy used when a resource has none configured."""
    return ServicePolicy(
        slot_duration_minutes=config.policy.slot_duration_minutes,
        buffer_minutes=config.policy.buffer_minutes,
        advance_booking_days=config.policy.advance_booking_days,
        allow_same_day_booking=config.policy.same_day_booking,
        cancellation_hours=config.policy.cancellation_hours,
    )


def _resolve_zone(resource_id: str, name: Optional[str], config: AppConfig) -> ZoneInfo:
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Resource %s has unknown time zone %r, using %s",
                resource_id, name, config.resources.timezone,
            )
    return ZoneInfo(config.resources.timezone)


def load_resource_context(
    config_store: ResourceConfigStore,
    resource_id: str,
    config: AppConfig = settings,
) -> ResourceContext:
    """Read a resource's configuration, filling gaps with defaults.

    Store failures (``StoreUnavailableError``) propagate.
    """
    schedule = config_store.get_weekly_schedule(resource_id)
    if schedule is None:
        logger.debug("Resource %s has no schedule, using default", resource_id)
        schedule = DEFAULT_WEEKLY_SCHEDULE

    policy = config_store.get_service_policy(resource_id)
    if policy is None:
        logger.debug("Resource %s has no service policy, using defaults", resource_id)
        policy = default_policy(config)

    return ResourceContext(
        resource_id=resource_id,
        tz=_resolve_zone(resource_id, config_store.get_timezone(resource_id), config),
        schedule=schedule,
        breaks=config_store.get_break_windows(resource_id) or [],
        policy=policy,
        currency=config_store.get_currency(resource_id) or config.resources.currency,
    )


def resolve_day(ctx: ResourceContext, day: date) -> ResolvedDay:
    """Resolve the open window and anchored breaks for ``day``.

    A disabled weekday yields ``open_window=None``; that is a closed day,
    not an error.
    """
    entry = ctx.schedule.for_date(day)
    if not entry.enabled:
        return ResolvedDay(resource_id=ctx.resource_id, day=day, tz=ctx.tz)

    opens = local_instant(day, entry.open_time, ctx.tz)
    closes = local_instant(day, entry.close_time, ctx.tz)
    if opens >= closes:
        # Only reachable when a DST shift swallows the whole opening.
        logger.warning(
            "Resource %s opening hours collapse on %s, treating as closed",
            ctx.resource_id, day,
        )
        return ResolvedDay(resource_id=ctx.resource_id, day=day, tz=ctx.tz)

    breaks = []
    for window in ctx.breaks:
        start = local_instant(day, window.start, ctx.tz)
        end = local_instant(day, window.end, ctx.tz)
        if start < end:
            breaks.append(AnchoredBreak(label=window.label, interval=Interval(start=start, end=end)))

    return ResolvedDay(
        resource_id=ctx.resource_id,
        day=day,
        tz=ctx.tz,
        open_window=Interval(start=opens, end=closes),
        breaks=breaks,
    )


def parse_weekly_schedule(raw: Optional[dict[str, Any]]) -> WeeklySchedule:
    """Build a schedule from the stored ``working_hours`` JSON.

    Accepts ``{"monday": {"enabled": true, "start": "09:00", "end": "17:00"}}``.
    Missing days fall back to the default entry; malformed days are disabled.
    """
    if not raw:
        return DEFAULT_WEEKLY_SCHEDULE

    days: dict[str, DaySchedule] = {}
    for name in WEEKDAYS:
        entry = raw.get(name)
        if entry is None:
            days[name] = getattr(DEFAULT_WEEKLY_SCHEDULE, name)
            continue
        try:
            days[name] = DaySchedule(
                enabled=bool(entry.get("enabled", False)),
                open_time=parse_hhmm(entry.get("start", "09:00")),
                close_time=parse_hhmm(entry.get("end", "17:00")),
            )
        except (ValidationError, ValueError, AttributeError, TypeError):
            logger.warning("Malformed working hours for %s: %r, marking closed", name, entry)
            days[name] = DaySchedule(enabled=False)
    return WeeklySchedule(**days)


def parse_break_windows(raw: Optional[list[dict[str, Any]]]) -> list[BreakWindow]:
    """Build break windows from ``[{"start", "end", "title"}]``, dropping bad rows."""
    breaks = []
    for entry in raw or []:
        try:
            breaks.append(BreakWindow(
                label=entry.get("title") or entry.get("label") or "Break",
                start=parse_hhmm(entry["start"]),
                end=parse_hhmm(entry["end"]),
            ))
        except (ValidationError, ValueError, KeyError, AttributeError, TypeError):
            logger.warning("Dropping malformed break window: %r", entry)
    return breaks
