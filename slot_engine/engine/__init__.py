from slot_engine.engine.availability import DateAvailability, SlotAvailabilityEngine
from slot_engine.engine.busy_aggregator import AggregatedBusy, BusyTimeAggregator
from slot_engine.engine.calendar_resolver import (
    ResolvedDay,
    ResourceContext,
    load_resource_context,
    parse_break_windows,
    parse_weekly_schedule,
    resolve_day,
)
from slot_engine.engine.committer import (
    ReservationCommitter,
    is_cancellable,
    reservation_is_cancellable,
)
from slot_engine.engine.slot_generator import GeneratedSlots, generate_slots

__all__ = [
    "SlotAvailabilityEngine",
    "DateAvailability",
    "BusyTimeAggregator",
    "AggregatedBusy",
    "ResolvedDay",
    "ResourceContext",
    "load_resource_context",
    "resolve_day",
    "parse_weekly_schedule",
    "parse_break_windows",
    "ReservationCommitter",
    "is_cancellable",
    "reservation_is_cancellable",
    "GeneratedSlots",
    "generate_slots",
]
