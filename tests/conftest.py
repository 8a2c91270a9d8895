"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from slot_engine.engine.availability import SlotAvailabilityEngine
from slot_engine.schemas.booking_schema import Reservation, ReservationStatus
from slot_engine.schemas.calendar_schema import DaySchedule, ServicePolicy, WeeklySchedule
from slot_engine.schemas.interval_schema import BusyInterval, BusySource, Interval
from slot_engine.stores.memory import (
    InMemoryExternalBusyCache,
    InMemoryReservationStore,
    InMemoryResourceConfigStore,
)
from slot_engine.utils import local_instant, parse_hhmm

LONDON = ZoneInfo("Europe/London")
RESOURCE = "res-1"

# Monday; London is on GMT in mid-March, so local time equals UTC.
TODAY = date(2025, 3, 17)
TOMORROW = date(2025, 3, 18)
SATURDAY = date(2025, 3, 22)
NOW = datetime(2025, 3, 17, 7, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def at(day: date, hhmm: str, tz: ZoneInfo = LONDON) -> datetime:
    """Local wall-clock time on ``day`` as an aware UTC instant."""
    return local_instant(day, parse_hhmm(hhmm), tz)


def span(day: date, start: str, end: str, tz: ZoneInfo = LONDON) -> Interval:
    return Interval(start=at(day, start, tz), end=at(day, end, tz))


def make_schedule(open_time: str = "09:00", close_time: str = "12:00") -> WeeklySchedule:
    """Weekdays open with the given hours, weekend closed."""
    weekday = DaySchedule(
        enabled=True, open_time=parse_hhmm(open_time), close_time=parse_hhmm(close_time)
    )
    closed = DaySchedule(enabled=False)
    return WeeklySchedule(
        monday=weekday, tuesday=weekday, wednesday=weekday, thursday=weekday,
        friday=weekday, saturday=closed, sunday=closed,
    )


def make_policy(**overrides) -> ServicePolicy:
    values = {
        "slot_duration_minutes": 60,
        "buffer_minutes": 0,
        "advance_booking_days": 7,
        "allow_same_day_booking": True,
        "cancellation_hours": 24,
    }
    values.update(overrides)
    return ServicePolicy(**values)


def make_reservation(
    interval: Interval,
    reservation_id: str = "resv-1",
    customer_id: str = "cust-1",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    service_name: str = "Haircut",
    resource_id: str = RESOURCE,
) -> Reservation:
    return Reservation(
        id=reservation_id,
        resource_id=resource_id,
        customer_id=customer_id,
        interval=interval,
        service_name=service_name,
        price=Decimal("30"),
        currency="GBP",
        status=status,
        created_at=NOW,
    )


def make_busy(
    interval: Interval,
    label: str = "Team meeting",
    kind: BusySource = BusySource.EXTERNAL_CALENDAR,
    reference_id: Optional[str] = None,
) -> BusyInterval:
    return BusyInterval(interval=interval, source_kind=kind, label=label, reference_id=reference_id)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def config_store():
    store = InMemoryResourceConfigStore()
    store.configure(
        RESOURCE,
        schedule=make_schedule(),
        policy=make_policy(),
        timezone="Europe/London",
        currency="GBP",
    )
    return store


@pytest.fixture
def reservation_store():
    return InMemoryReservationStore()


@pytest.fixture
def external_cache():
    return InMemoryExternalBusyCache()


@pytest.fixture
def engine(config_store, reservation_store, external_cache, clock):
    return SlotAvailabilityEngine(config_store, reservation_store, external_cache, clock=clock)
