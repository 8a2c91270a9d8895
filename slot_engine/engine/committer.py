"""
Reservation commit path and the cancellation contract.

``book()`` never trusts what a caller saw earlier. It re-resolves the day,
re-aggregates busy time, checks the requested interval against external
calendars and breaks, then hands the write to the store's atomic
insert-if-no-overlap. The store is the only place two overlapping
reservations could collide, so that is where the collision is decided.

Usage:
    committer = ReservationCommitter(config_store, reservation_store, aggregator)
    result = committer.book("salon-1", "cust-9", interval, ServiceDetails(service_name="Cut"))
    if not result.success and result.error == BookingError.SLOT_NO_LONGER_AVAILABLE:
        ...  # re-query slots and let the customer pick again
"""

import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from slot_engine.config import AppConfig, settings
from slot_engine.engine.busy_aggregator import BusyTimeAggregator
from slot_engine.engine.calendar_resolver import load_resource_context, resolve_day
from slot_engine.engine.slot_generator import booking_window_reason
from slot_engine.logging_context import get_request_logger
from slot_engine.schemas.booking_schema import (
    BookingError,
    BookingResult,
    CancellationError,
    CancellationResult,
    Reservation,
    ReservationStatus,
    ServiceDetails,
)
from slot_engine.schemas.interval_schema import BusySource, Interval
from slot_engine.stores.base import ReservationStore, ResourceConfigStore
from slot_engine.utils import local_date, utc_now

logger = get_request_logger(__name__)


def is_cancellable(
    status: ReservationStatus,
    start: datetime,
    now: datetime,
    cutoff_hours: int,
) -> bool:
    """Whether a customer may cancel a reservation right now.

    Pending reservations can always be withdrawn. Confirmed ones only while
    more than ``cutoff_hours`` remain before the start. Every other status
    is final.
    """
    if status == ReservationStatus.PENDING:
        return True
    if status == ReservationStatus.CONFIRMED:
        return start - now > timedelta(hours=cutoff_hours)
    return False


def reservation_is_cancellable(
    reservation: Reservation, now: datetime, cutoff_hours: int
) -> bool:
    return is_cancellable(reservation.status, reservation.interval.start, now, cutoff_hours)


def _failure(error: BookingError, message: str) -> BookingResult:
    return BookingResult(success=False, error=error, message=message)


class ReservationCommitter:
    """Validates and commits bookings; applies customer cancellations."""

    def __init__(
        self,
        config_store: ResourceConfigStore,
        reservation_store: ReservationStore,
        aggregator: BusyTimeAggregator,
        clock: Callable[[], datetime] = utc_now,
        config: AppConfig = settings,
    ) -> None:
        self.config_store = config_store
        self.reservation_store = reservation_store
        self.aggregator = aggregator
        self.config = config
        self._clock = clock

    def book(
        self,
        resource_id: str,
        customer_id: str,
        interval: Interval,
        details: ServiceDetails,
    ) -> BookingResult:
        """
        Re-validate ``interval`` and commit a Pending reservation.

        Returns:
            BookingResult with the reservation ID on success. Lost races
            and invalid requests come back as ``success=False`` with a
            ``BookingError``.

        Raises:
            StoreUnavailableError: Reservations or configuration unreadable.
            CommitTimeoutError: The write did not finish in time; outcome unknown.
        """
        now = self._clock()
        ctx = load_resource_context(self.config_store, resource_id, self.config)
        day = local_date(interval.start, ctx.tz)

        if not ctx.policy.booking_enabled:
            return _failure(BookingError.BOOKING_DISABLED, "Online booking is turned off for this resource.")

        window_reason = booking_window_reason(day, local_date(now, ctx.tz), ctx.policy)
        if window_reason is not None or interval.start <= now:
            reason = window_reason.value if window_reason else "start_passed"
            return _failure(
                BookingError.OUTSIDE_BOOKING_WINDOW,
                f"{day.isoformat()} cannot be booked ({reason}).",
            )

        resolved = resolve_day(ctx, day)
        if resolved.open_window is None or not interval.within(resolved.open_window):
            return _failure(
                BookingError.OUTSIDE_WORKING_HOURS,
                "Requested time is outside working hours.",
            )
        for window in resolved.breaks:
            if window.interval.overlaps(interval):
                return _failure(
                    BookingError.OUTSIDE_WORKING_HOURS,
                    f"Requested time falls during {window.label}.",
                )

        # Internal reservations are decided atomically by the store below.
        busy = self.aggregator.collect(resource_id, day, ctx.tz)
        for item in busy.intervals:
            if item.source_kind != BusySource.INTERNAL_BOOKING and item.interval.overlaps(interval):
                logger.info(
                    "Booking rejected for %s on %s: %s", customer_id, resource_id, item.describe()
                )
                return _failure(BookingError.SLOT_NO_LONGER_AVAILABLE, "That time is no longer available.")

        reservation = Reservation(
            id=str(uuid.uuid4()),
            resource_id=resource_id,
            customer_id=customer_id,
            interval=interval,
            service_name=details.service_name,
            price=details.price,
            currency=details.currency or ctx.currency,
            status=ReservationStatus.PENDING,
            notes=details.notes,
            created_at=now,
        )
        outcome = self.reservation_store.insert_reservation_if_no_overlap(
            reservation, timeout=self.config.engine.commit_timeout_sec
        )

        if outcome.replayed:
            logger.info(
                "Duplicate booking request for %s on %s returned existing %s",
                customer_id, resource_id, outcome.reservation.id,
            )
            return BookingResult(
                success=True,
                reservation_id=outcome.reservation.id,
                replayed=True,
                message="This booking already exists.",
            )
        if not outcome.created:
            logger.info(
                "Booking race lost for %s on %s at %s (held by %s)",
                customer_id, resource_id, interval.start.isoformat(),
                outcome.conflict.id if outcome.conflict else "unknown",
            )
            return _failure(BookingError.SLOT_NO_LONGER_AVAILABLE, "That time is no longer available.")

        logger.info(
            "Reservation %s created for %s on %s at %s",
            reservation.id, customer_id, resource_id, interval.start.isoformat(),
        )
        return BookingResult(
            success=True,
            reservation_id=reservation.id,
            message=f"Booking requested for {interval.start.astimezone(ctx.tz):%Y-%m-%d %H:%M}.",
        )

    def cancel(
        self,
        reservation_id: str,
        actor: str,
        reason: Optional[str] = None,
    ) -> CancellationResult:
        """Cancel a reservation if the cancellation rules allow it."""
        reservation = self.reservation_store.get_reservation(reservation_id)
        if reservation is None:
            return CancellationResult(
                success=False,
                reservation_id=reservation_id,
                error=CancellationError.NOT_FOUND,
                message=f"Reservation {reservation_id} not found.",
            )

        now = self._clock()
        ctx = load_resource_context(self.config_store, reservation.resource_id, self.config)
        if not reservation_is_cancellable(reservation, now, ctx.policy.cancellation_hours):
            return CancellationResult(
                success=False,
                reservation_id=reservation_id,
                status=reservation.status,
                error=CancellationError.NOT_CANCELLABLE,
                message=(
                    f"Reservation {reservation_id} can no longer be cancelled "
                    f"(status {reservation.status.value}, {ctx.policy.cancellation_hours}h notice required)."
                ),
            )

        updated = self.reservation_store.transition_status(
            reservation_id,
            expected=reservation.status,
            new_status=ReservationStatus.CANCELLED,
            cancelled_at=now,
            cancelled_by=actor,
            cancellation_reason=reason,
        )
        if updated is None:
            current = self.reservation_store.get_reservation(reservation_id)
            return CancellationResult(
                success=False,
                reservation_id=reservation_id,
                status=current.status if current else None,
                error=CancellationError.NOT_CANCELLABLE,
                message=f"Reservation {reservation_id} changed while cancelling; please retry.",
            )

        logger.info("Reservation %s cancelled by %s", reservation_id, actor)
        return CancellationResult(
            success=True,
            reservation_id=reservation_id,
            status=updated.status,
            message=f"Reservation {reservation_id} has been cancelled.",
        )
