"""
In-memory collaborators for development, the CLI demo, and tests.

In production these would be replaced by the hosted database (reservations
and listing settings) and the calendar-sync read model (external busy
times). The reservation store enforces the no-double-booking rule the same
way a database advisory lock would: one lock per resource, held across the
overlap check and the write.
"""

import threading
import time
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from slot_engine.errors import CommitTimeoutError, ExternalSourceError, StoreUnavailableError
from slot_engine.schemas.booking_schema import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
)
from slot_engine.schemas.calendar_schema import BreakWindow, ServicePolicy, WeeklySchedule
from slot_engine.schemas.interval_schema import BusyInterval, Interval
from slot_engine.stores.base import ExternalBusySnapshot, InsertOutcome


class InMemoryReservationStore:
    """Reservation table with a per-resource write lock."""

    def __init__(self, write_delay_sec: float = 0.0) -> None:
        # Widens the check-to-write gap so tests can provoke races.
        self.write_delay_sec = write_delay_sec
        self.online = True
        self._reservations: dict[str, Reservation] = {}
        self._by_resource: dict[str, list[str]] = defaultdict(list)
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, resource_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(resource_id)
            if lock is None:
                lock = self._locks[resource_id] = threading.Lock()
            return lock

    def _ensure_online(self) -> None:
        if not self.online:
            raise StoreUnavailableError("reservation store is unreachable")

    def query_reservations(
        self,
        resource_id: str,
        window: Interval,
        statuses: Iterable[ReservationStatus] = ACTIVE_STATUSES,
    ) -> list[Reservation]:
        self._ensure_online()
        wanted = set(statuses)
        # Reads never wait on a commit in progress.
        ids = list(self._by_resource.get(resource_id, []))
        rows = [self._reservations[rid] for rid in ids]
        return [r for r in rows if r.status in wanted and r.interval.overlaps(window)]

    def insert_reservation_if_no_overlap(
        self, reservation: Reservation, timeout: float
    ) -> InsertOutcome:
        self._ensure_online()
        lock = self._lock_for(reservation.resource_id)
        if not lock.acquire(timeout=timeout):
            raise CommitTimeoutError(
                f"timed out waiting for resource {reservation.resource_id} after {timeout}s"
            )
        try:
            conflict = None
            for rid in self._by_resource.get(reservation.resource_id, []):
                existing = self._reservations[rid]
                if not existing.is_active or not existing.interval.overlaps(reservation.interval):
                    continue
                if (
                    existing.customer_id == reservation.customer_id
                    and existing.interval == reservation.interval
                ):
                    return InsertOutcome(reservation=existing, replayed=True)
                conflict = conflict or existing

            if conflict is not None:
                return InsertOutcome(conflict=conflict)

            if self.write_delay_sec:
                time.sleep(self.write_delay_sec)

            self._reservations[reservation.id] = reservation
            self._by_resource[reservation.resource_id].append(reservation.id)
            return InsertOutcome(reservation=reservation, created=True)
        finally:
            lock.release()

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        self._ensure_online()
        return self._reservations.get(reservation_id)

    def transition_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
        **changes,
    ) -> Optional[Reservation]:
        self._ensure_online()
        current = self._reservations.get(reservation_id)
        if current is None:
            return None
        with self._lock_for(current.resource_id):
            current = self._reservations[reservation_id]
            if current.status != expected:
                return None
            updated = current.model_copy(update={"status": new_status, **changes})
            self._reservations[reservation_id] = updated
            return updated

    def add(self, reservation: Reservation) -> Reservation:
        """Seed a reservation directly, bypassing the overlap check."""
        self._reservations[reservation.id] = reservation
        self._by_resource[reservation.resource_id].append(reservation.id)
        return reservation

    def reset(self) -> None:
        """Clear all reservations. Used by test fixtures for isolation."""
        self._reservations.clear()
        self._by_resource.clear()
        self.online = True


class InMemoryExternalBusyCache:
    """Snapshot of externally synced calendars and manual blocks per resource."""

    def __init__(self) -> None:
        self.online = True
        self._intervals: dict[str, list[BusyInterval]] = defaultdict(list)
        self._synced_at: dict[str, datetime] = {}

    def add(self, resource_id: str, busy: BusyInterval) -> None:
        self._intervals[resource_id].append(busy)

    def mark_synced(self, resource_id: str, synced_at: datetime) -> None:
        self._synced_at[resource_id] = synced_at

    def query_external_busy(self, resource_id: str, window: Interval) -> ExternalBusySnapshot:
        if not self.online:
            raise ExternalSourceError("calendar sync cache is unreachable")
        return ExternalBusySnapshot(
            intervals=[b for b in self._intervals.get(resource_id, []) if b.interval.overlaps(window)],
            synced_at=self._synced_at.get(resource_id),
        )

    def reset(self) -> None:
        self._intervals.clear()
        self._synced_at.clear()
        self.online = True


class InMemoryResourceConfigStore:
    """Listing settings keyed by resource ID. Missing entries return None."""

    def __init__(self) -> None:
        self.online = True
        self._schedules: dict[str, WeeklySchedule] = {}
        self._policies: dict[str, ServicePolicy] = {}
        self._breaks: dict[str, list[BreakWindow]] = {}
        self._timezones: dict[str, str] = {}
        self._currencies: dict[str, str] = {}

    def _ensure_online(self) -> None:
        if not self.online:
            raise StoreUnavailableError("resource configuration store is unreachable")

    def configure(
        self,
        resource_id: str,
        schedule: Optional[WeeklySchedule] = None,
        policy: Optional[ServicePolicy] = None,
        breaks: Optional[list[BreakWindow]] = None,
        timezone: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> None:
        if schedule is not None:
            self._schedules[resource_id] = schedule
        if policy is not None:
            self._policies[resource_id] = policy
        if breaks is not None:
            self._breaks[resource_id] = breaks
        if timezone is not None:
            self._timezones[resource_id] = timezone
        if currency is not None:
            self._currencies[resource_id] = currency

    def get_weekly_schedule(self, resource_id: str) -> Optional[WeeklySchedule]:
        self._ensure_online()
        return self._schedules.get(resource_id)

    def get_service_policy(self, resource_id: str) -> Optional[ServicePolicy]:
        self._ensure_online()
        return self._policies.get(resource_id)

    def get_break_windows(self, resource_id: str) -> Optional[list[BreakWindow]]:
        self._ensure_online()
        return self._breaks.get(resource_id)

    def get_timezone(self, resource_id: str) -> Optional[str]:
        self._ensure_online()
        return self._timezones.get(resource_id)

    def get_currency(self, resource_id: str) -> Optional[str]:
        self._ensure_online()
        return self._currencies.get(resource_id)
