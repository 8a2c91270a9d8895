"""Slot, reservation, and result models exchanged with callers."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from slot_engine.schemas.interval_schema import Interval


class SlotQueryReason(str, Enum):
    """Why a slot query produced the slots it did."""
    OK = "ok"
    CLOSED = "closed"
    PAST_DATE = "past_date"
    BEYOND_HORIZON = "beyond_horizon"
    SAME_DAY_DISABLED = "same_day_disabled"
    BOOKING_DISABLED = "booking_disabled"
    UNKNOWN_SERVICE = "unknown_service"
    INVALID_DURATION = "invalid_duration"


class Slot(BaseModel):
    """One candidate appointment window, available or not."""
    interval: Interval
    duration_minutes: int
    available: bool
    block_reason: Optional[str] = None
    blocked_by: Optional[str] = None
    start_label: str = ""
    end_label: str = ""
    service_name: Optional[str] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None


class SlotQueryResult(BaseModel):
    """Slots for one resource and date plus the query's status."""
    resource_id: str
    day: date
    timezone: str
    slots: list[Slot] = Field(default_factory=list)
    reason: SlotQueryReason = SlotQueryReason.OK
    complete: bool = True
    warnings: list[str] = Field(default_factory=list)

    @property
    def available_slots(self) -> list[Slot]:
        return [s for s in self.slots if s.available]


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Statuses that hold a resource's time.
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


class ServiceDetails(BaseModel):
    """What the customer is booking."""
    service_name: str = "Service"
    price: Decimal = Decimal("0")
    currency: Optional[str] = None
    notes: Optional[str] = None


class Reservation(BaseModel):
    """Durable booking record."""
    id: str
    resource_id: str
    customer_id: str
    interval: Interval
    service_name: str
    price: Decimal = Decimal("0")
    currency: str
    status: ReservationStatus = ReservationStatus.PENDING
    notes: Optional[str] = None
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class BookingError(str, Enum):
    SLOT_NO_LONGER_AVAILABLE = "slot_no_longer_available"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    OUTSIDE_BOOKING_WINDOW = "outside_booking_window"
    BOOKING_DISABLED = "booking_disabled"


class BookingResult(BaseModel):
    """Outcome of a booking attempt."""
    success: bool
    message: str
    reservation_id: Optional[str] = None
    error: Optional[BookingError] = None
    replayed: bool = False


class CancellationError(str, Enum):
    NOT_FOUND = "not_found"
    NOT_CANCELLABLE = "not_cancellable"


class CancellationResult(BaseModel):
    """Outcome of a cancellation attempt."""
    success: bool
    message: str
    reservation_id: str
    status: Optional[ReservationStatus] = None
    error: Optional[CancellationError] = None
