"""
Collaborator interfaces the engine reads from and writes to.

Production deployments back these with the hosted database, the
calendar-sync read model, and the listing settings table. The engine
only depends on the shapes below.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Protocol

from slot_engine.schemas.booking_schema import (
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
)
from slot_engine.schemas.calendar_schema import BreakWindow, ServicePolicy, WeeklySchedule
from slot_engine.schemas.interval_schema import BusyInterval, Interval


@dataclass
class InsertOutcome:
    """Result of an atomic insert-if-no-overlap.

    Exactly one of ``created``, ``replayed`` or ``conflict`` describes what
    happened. ``reservation`` is the stored record for the first two.
    """
    reservation: Optional[Reservation] = None
    created: bool = False
    replayed: bool = False
    conflict: Optional[Reservation] = None


@dataclass
class ExternalBusySnapshot:
    """Externally synced busy intervals as of ``synced_at``.

    ``synced_at`` is None when the resource has no calendar connection,
    in which case there is nothing that could be stale.
    """
    intervals: list[BusyInterval] = field(default_factory=list)
    synced_at: Optional[datetime] = None


class ReservationStore(Protocol):
    def query_reservations(
        self,
        resource_id: str,
        window: Interval,
        statuses: Iterable[ReservationStatus] = ACTIVE_STATUSES,
    ) -> list[Reservation]:
        """Reservations in ``statuses`` whose interval overlaps ``window``."""
        ...

    def insert_reservation_if_no_overlap(
        self, reservation: Reservation, timeout: float
    ) -> InsertOutcome:
        """Atomically insert unless an active reservation overlaps it."""
        ...

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        ...

    def transition_status(
        self,
        reservation_id: str,
        expected: ReservationStatus,
        new_status: ReservationStatus,
        **changes,
    ) -> Optional[Reservation]:
        """Compare-and-set a status change. Returns None if ``expected`` no longer holds."""
        ...


class ExternalBusySource(Protocol):
    def query_external_busy(self, resource_id: str, window: Interval) -> ExternalBusySnapshot:
        """Synced busy intervals overlapping ``window``.

        Implementations should raise ``ExternalSourceError``. Any exception
        raised here marks the query incomplete instead of failing it.
        """
        ...


class ResourceConfigStore(Protocol):
    def get_weekly_schedule(self, resource_id: str) -> Optional[WeeklySchedule]:
        ...

    def get_service_policy(self, resource_id: str) -> Optional[ServicePolicy]:
        ...

    def get_break_windows(self, resource_id: str) -> Optional[list[BreakWindow]]:
        ...

    def get_timezone(self, resource_id: str) -> Optional[str]:
        ...

    def get_currency(self, resource_id: str) -> Optional[str]:
        ...
