"""
Slot availability engine: the entry points other components call.

Read path: ``get_available_slots`` resolves the day, aggregates busy time,
and generates labelled slots. It holds no locks and writes nothing, so any
number of callers may run it concurrently.

Write path: ``book`` and ``cancel`` delegate to ``ReservationCommitter``.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional, TypedDict

from slot_engine.config import AppConfig, settings
from slot_engine.engine.busy_aggregator import BusyTimeAggregator
from slot_engine.engine.calendar_resolver import load_resource_context, resolve_day
from slot_engine.engine.committer import ReservationCommitter, reservation_is_cancellable
from slot_engine.engine.slot_generator import generate_slots, rejection_reason
from slot_engine.logging_context import get_request_logger, new_request_id
from slot_engine.schemas.booking_schema import (
    BookingResult,
    CancellationResult,
    Reservation,
    ServiceDetails,
    SlotQueryReason,
    SlotQueryResult,
)
from slot_engine.schemas.interval_schema import Interval
from slot_engine.stores.base import ExternalBusySource, ReservationStore, ResourceConfigStore
from slot_engine.utils import local_date, utc_now

logger = get_request_logger(__name__)


class DateAvailability(TypedDict):
    """Summary of availability for a single date."""

    date: str
    day_name: str
    slot_count: int


class SlotAvailabilityEngine:
    """Computes bookable slots and commits bookings for configured resources."""

    def __init__(
        self,
        config_store: ResourceConfigStore,
        reservation_store: ReservationStore,
        external_source: ExternalBusySource,
        clock: Callable[[], datetime] = utc_now,
        config: AppConfig = settings,
    ) -> None:
        self.config_store = config_store
        self.config = config
        self._clock = clock
        self.aggregator = BusyTimeAggregator(
            reservation_store,
            external_source,
            max_external_age=timedelta(minutes=config.engine.external_busy_max_age_minutes),
            clock=clock,
        )
        self.committer = ReservationCommitter(
            config_store, reservation_store, self.aggregator, clock=clock, config=config
        )

    def get_available_slots(
        self,
        resource_id: str,
        day: date,
        service_duration_minutes: Optional[int] = None,
        service_name: Optional[str] = None,
    ) -> SlotQueryResult:
        """
        Compute every slot for ``resource_id`` on ``day``.

        Args:
            service_duration_minutes: Explicit duration override.
            service_name: Name of one of the policy's service options; its
                duration, price and currency label the slots.

        Raises:
            StoreUnavailableError: Internal reservations or configuration unreadable.
        """
        new_request_id()
        now = self._clock()
        ctx = load_resource_context(self.config_store, resource_id, self.config)
        result = SlotQueryResult(resource_id=resource_id, day=day, timezone=ctx.tz.key)

        duration = service_duration_minutes
        price = None
        currency = ctx.currency
        if service_name is not None:
            option = ctx.policy.option_for(service_name)
            if option is None:
                result.reason = SlotQueryReason.UNKNOWN_SERVICE
                return result
            if duration is None:
                duration = option.duration_minutes
            price = option.price
            currency = option.currency or ctx.currency

        resolved = resolve_day(ctx, day)
        reason = rejection_reason(resolved, ctx.policy, now)
        if reason is not None:
            result.reason = reason
            return result

        busy = self.aggregator.collect(resource_id, day, ctx.tz)
        generated = generate_slots(
            resolved,
            busy.intervals,
            ctx.policy,
            now,
            duration_minutes=duration,
            service_name=service_name,
            price=price,
            currency=currency,
        )
        result.reason = generated.reason
        result.slots = generated.slots
        result.complete = busy.complete
        result.warnings = busy.warnings
        logger.info(
            "Slots for %s on %s: %d total, %d available, complete=%s",
            resource_id, day, len(result.slots), len(result.available_slots), result.complete,
        )
        return result

    def get_availability_calendar(
        self,
        resource_id: str,
        start: date,
        end: date,
        service_duration_minutes: Optional[int] = None,
    ) -> dict[date, SlotQueryResult]:
        """Slot results for each date in ``[start, end]`` inclusive."""
        span = (end - start).days + 1
        if span < 1:
            raise ValueError(f"end date {end} is before start date {start}")
        if span > self.config.engine.max_calendar_days:
            raise ValueError(
                f"calendar range of {span} days exceeds limit of "
                f"{self.config.engine.max_calendar_days}"
            )
        return {
            start + timedelta(days=offset): self.get_available_slots(
                resource_id, start + timedelta(days=offset), service_duration_minutes
            )
            for offset in range(span)
        }

    def find_next_available(
        self,
        resource_id: str,
        from_date: Optional[date] = None,
        limit: int = 5,
        service_duration_minutes: Optional[int] = None,
    ) -> list[DateAvailability]:
        """Get the next ``limit`` dates with at least one available slot."""
        ctx = load_resource_context(self.config_store, resource_id, self.config)
        today = local_date(self._clock(), ctx.tz)
        cursor = max(from_date or today, today)
        horizon = today + timedelta(days=ctx.policy.advance_booking_days)

        results: list[DateAvailability] = []
        while cursor <= horizon and len(results) < limit:
            day_result = self.get_available_slots(resource_id, cursor, service_duration_minutes)
            count = len(day_result.available_slots)
            if count:
                results.append({
                    "date": cursor.isoformat(),
                    "day_name": cursor.strftime("%A"),
                    "slot_count": count,
                })
            cursor += timedelta(days=1)
        return results

    def book(
        self,
        resource_id: str,
        customer_id: str,
        interval: Interval,
        details: Optional[ServiceDetails] = None,
    ) -> BookingResult:
        new_request_id()
        return self.committer.book(resource_id, customer_id, interval, details or ServiceDetails())

    def cancel(
        self, reservation_id: str, actor: str, reason: Optional[str] = None
    ) -> CancellationResult:
        new_request_id()
        return self.committer.cancel(reservation_id, actor, reason)

    def is_cancellable(
        self,
        reservation: Reservation,
        now: Optional[datetime] = None,
        cutoff_hours: Optional[int] = None,
    ) -> bool:
        """Cancellation eligibility, defaulting to the resource's configured cutoff."""
        if cutoff_hours is None:
            ctx = load_resource_context(self.config_store, reservation.resource_id, self.config)
            cutoff_hours = ctx.policy.cancellation_hours
        return reservation_is_cancellable(reservation, now or self._clock(), cutoff_hours)
