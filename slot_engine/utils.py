"""Shared time helpers used across the slot engine."""

import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?$")


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string into a ``time``.

    Examples:
        >>> parse_hhmm("09:30")
        datetime.time(9, 30)
        >>> parse_hhmm("9:05")
        datetime.time(9, 5)
    """
    match = _HHMM.match(value.strip())
    if not match:
        raise ValueError(f"Invalid HH:MM time: {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(moment: datetime, tz: ZoneInfo) -> str:
    """Format an aware instant as local ``HH:MM`` in the given zone."""
    return moment.astimezone(tz).strftime("%H:%M")


def local_instant(day: date, clock: time, tz: ZoneInfo) -> datetime:
    """Combine a calendar date and wall-clock time in ``tz`` into a UTC instant.

    Times falling in a DST gap are shifted forward by the zone rules;
    ambiguous times resolve to the first occurrence (``fold=0``).
    """
    return datetime.combine(day, clock, tzinfo=tz).astimezone(timezone.utc)


def local_day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return ``[day 00:00, next day 00:00)`` in ``tz`` as UTC instants."""
    return local_instant(day, time.min, tz), local_instant(day + timedelta(days=1), time.min, tz)


def local_date(moment: datetime, tz: ZoneInfo) -> date:
    """The calendar date of an aware instant as seen in ``tz``."""
    return moment.astimezone(tz).date()


def minutes(value: int) -> timedelta:
    return timedelta(minutes=value)
