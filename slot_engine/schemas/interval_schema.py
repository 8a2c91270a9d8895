"""Half-open time intervals and the busy intervals built from them."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Interval(BaseModel):
    """An absolute ``[start, end)`` span. Both ends must be timezone-aware."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _require_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("interval bounds must be timezone-aware instants")
        return value

    @model_validator(mode="after")
    def _check_order(self) -> "Interval":
        if self.start >= self.end:
            raise ValueError(f"interval start {self.start} must be before end {self.end}")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)

    def contains(self, instant: datetime) -> bool:
        return contains(self, instant)

    def within(self, other: "Interval") -> bool:
        """True if this interval lies entirely inside ``other``."""
        return other.start <= self.start and self.end <= other.end


def overlaps(a: Interval, b: Interval) -> bool:
    """Half-open overlap test. Intervals that only touch do not overlap."""
    return a.start < b.end and b.start < a.end


def contains(a: Interval, instant: datetime) -> bool:
    return a.start <= instant < a.end


class BusySource(str, Enum):
    """Where a blocking interval came from."""
    INTERNAL_BOOKING = "internal_booking"
    EXTERNAL_CALENDAR = "external_calendar"
    MANUAL_BLOCK = "manual_block"


class BusyInterval(BaseModel):
    """A query-time projection of anything that blocks a resource."""

    model_config = ConfigDict(frozen=True)

    interval: Interval
    source_kind: BusySource
    label: str
    reference_id: Optional[str] = None

    def describe(self) -> str:
        return f"Conflicts with {self.label} ({self.source_kind.value})"
