"""
Busy-time aggregation across internal reservations and external calendars.

Internal reservations are authoritative: if they cannot be read the query
fails with ``StoreUnavailableError``. External calendar data is advisory:
an outage or a stale snapshot degrades the result to internal-only (or
possibly out of date) and marks it incomplete, but never fails the query.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from slot_engine.config import settings
from slot_engine.errors import ExternalSourceError, StoreUnavailableError
from slot_engine.logging_context import get_request_logger
from slot_engine.schemas.interval_schema import BusyInterval, BusySource, Interval
from slot_engine.stores.base import ExternalBusySource, ReservationStore
from slot_engine.utils import local_day_bounds, utc_now

logger = get_request_logger(__name__)


@dataclass
class AggregatedBusy:
    """All intervals blocking a resource on one date."""
    intervals: list[BusyInterval] = field(default_factory=list)
    complete: bool = True
    warnings: list[str] = field(default_factory=list)


def _sort_key(busy: BusyInterval) -> tuple:
    return (busy.interval.start, busy.interval.end, busy.source_kind.value, busy.label)


class BusyTimeAggregator:
    """Collects blocking intervals for a resource from every busy-time source."""

    def __init__(
        self,
        reservation_store: ReservationStore,
        external_source: ExternalBusySource,
        max_external_age: timedelta = timedelta(
            minutes=settings.engine.external_busy_max_age_minutes
        ),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.reservation_store = reservation_store
        self.external_source = external_source
        self.max_external_age = max_external_age
        self._clock = clock

    def collect(self, resource_id: str, day: date, tz: ZoneInfo) -> AggregatedBusy:
        """Return busy intervals overlapping ``[day 00:00, day+1 00:00)`` in ``tz``."""
        start, end = local_day_bounds(day, tz)
        return self.collect_window(resource_id, Interval(start=start, end=end))

    def collect_window(self, resource_id: str, window: Interval) -> AggregatedBusy:
        result = AggregatedBusy(intervals=self._internal_busy(resource_id, window))
        self._add_external_busy(resource_id, window, result)
        result.intervals.sort(key=_sort_key)
        logger.debug(
            "Aggregated %d busy intervals for %s (complete=%s)",
            len(result.intervals), resource_id, result.complete,
        )
        return result

    def _internal_busy(self, resource_id: str, window: Interval) -> list[BusyInterval]:
        try:
            reservations = self.reservation_store.query_reservations(resource_id, window)
        except (ConnectionError, TimeoutError) as exc:
            raise StoreUnavailableError(
                f"could not read reservations for {resource_id}: {exc}"
            ) from exc
        return [
            BusyInterval(
                interval=r.interval,
                source_kind=BusySource.INTERNAL_BOOKING,
                label=r.service_name or "Booking",
                reference_id=r.id,
            )
            for r in reservations
        ]

    def _add_external_busy(
        self, resource_id: str, window: Interval, result: AggregatedBusy
    ) -> None:
        try:
            snapshot = self.external_source.query_external_busy(resource_id, window)
        except Exception as exc:
            # Any provider failure degrades the result; only internal reads are fatal.
            logger.warning(
                "External busy times unavailable for %s, using internal bookings only: %s",
                resource_id, exc, exc_info=not isinstance(exc, ExternalSourceError),
            )
            result.complete = False
            result.warnings.append("External calendars could not be checked.")
            return

        result.intervals.extend(b for b in snapshot.intervals if b.interval.overlaps(window))

        if snapshot.synced_at is not None:
            age = self._clock() - snapshot.synced_at
            if age > self.max_external_age:
                logger.warning(
                    "External busy times for %s are %s old (limit %s)",
                    resource_id, age, self.max_external_age,
                )
                result.complete = False
                result.warnings.append(
                    f"External calendars last synced at {snapshot.synced_at.isoformat()}."
                )
