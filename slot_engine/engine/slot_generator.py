"""
Slot generation: walk a day's open window in fixed steps and label each slot.

Candidates are ``[t, t + duration)`` for ``t = open, open + step, ...``
while the candidate still ends by closing time, where
``step = duration + buffer``. Buffer time belongs to no slot. Every
candidate is emitted, available or not, in chronological order, so callers
can show taken slots instead of silently hiding them.

The generator is pure: the only time input is the ``now`` it is given.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from slot_engine.engine.calendar_resolver import AnchoredBreak, ResolvedDay
from slot_engine.logging_context import get_request_logger
from slot_engine.schemas.booking_schema import Slot, SlotQueryReason
from slot_engine.schemas.calendar_schema import ServicePolicy
from slot_engine.schemas.interval_schema import BusyInterval, Interval
from slot_engine.utils import format_hhmm, local_date, minutes

logger = get_request_logger(__name__)

PAST_START_REASON = "Start time has passed"


@dataclass
class GeneratedSlots:
    """Slots for one day, or the reason there are none."""
    reason: SlotQueryReason = SlotQueryReason.OK
    slots: list[Slot] = field(default_factory=list)


def booking_window_reason(
    day: date, today: date, policy: ServicePolicy
) -> Optional[SlotQueryReason]:
    """Check the date against the past / horizon / same-day rules.

    Returns None when the date may be booked.
    """
    if day < today:
        return SlotQueryReason.PAST_DATE
    if (day - today).days > policy.advance_booking_days:
        return SlotQueryReason.BEYOND_HORIZON
    if day == today and not policy.allow_same_day_booking:
        return SlotQueryReason.SAME_DAY_DISABLED
    return None


def rejection_reason(
    resolved: ResolvedDay, policy: ServicePolicy, now: datetime
) -> Optional[SlotQueryReason]:
    """Reasons a day yields no slots at all, checked before any walking."""
    if not policy.booking_enabled:
        return SlotQueryReason.BOOKING_DISABLED
    if not resolved.is_open:
        return SlotQueryReason.CLOSED
    return booking_window_reason(resolved.day, local_date(now, resolved.tz), policy)


def find_conflict(
    candidate: Interval,
    busy: Sequence[BusyInterval],
    breaks: Sequence[AnchoredBreak],
) -> Optional[tuple[str, Optional[str]]]:
    """First thing blocking ``candidate`` as ``(reason, reference_id)``, or None."""
    for item in busy:
        if item.interval.overlaps(candidate):
            return item.describe(), item.reference_id
    for window in breaks:
        if window.interval.overlaps(candidate):
            return f"During {window.label}", None
    return None


def generate_slots(
    resolved: ResolvedDay,
    busy: Sequence[BusyInterval],
    policy: ServicePolicy,
    now: datetime,
    duration_minutes: Optional[int] = None,
    service_name: Optional[str] = None,
    price: Optional[Decimal] = None,
    currency: Optional[str] = None,
) -> GeneratedSlots:
    """
    Produce the labelled slot sequence for a resolved day.

    Args:
        resolved: Open window and anchored breaks for the date.
        busy: Blocking intervals from every source.
        policy: Duration, buffer and booking-window rules.
        now: The single clock reading used for past/same-day checks.
        duration_minutes: Overrides ``policy.slot_duration_minutes``.

    Returns:
        GeneratedSlots with ``reason=OK`` and the slots, or an empty list
        and the reason the day was rejected.
    """
    reason = rejection_reason(resolved, policy, now)
    if reason is not None:
        logger.debug("No slots for %s on %s: %s", resolved.resource_id, resolved.day, reason.value)
        return GeneratedSlots(reason=reason)

    duration = duration_minutes if duration_minutes is not None else policy.slot_duration_minutes
    if duration < 1:
        return GeneratedSlots(reason=SlotQueryReason.INVALID_DURATION)

    window = resolved.open_window
    if duration > window.duration / timedelta(minutes=1):
        # Nothing fits. Only an explicit override makes this an invalid request.
        if duration_minutes is not None:
            return GeneratedSlots(reason=SlotQueryReason.INVALID_DURATION)
        return GeneratedSlots()

    length = minutes(duration)
    step: timedelta = minutes(duration + policy.buffer_minutes)

    slots: list[Slot] = []
    cursor = window.start
    while cursor + length <= window.end:
        candidate = Interval(start=cursor, end=cursor + length)
        conflict = find_conflict(candidate, busy, resolved.breaks)
        if conflict is None and candidate.start <= now:
            conflict = (PAST_START_REASON, None)

        slots.append(Slot(
            interval=candidate,
            duration_minutes=duration,
            available=conflict is None,
            block_reason=conflict[0] if conflict else None,
            blocked_by=conflict[1] if conflict else None,
            start_label=format_hhmm(candidate.start, resolved.tz),
            end_label=format_hhmm(candidate.end, resolved.tz),
            service_name=service_name,
            price=price,
            currency=currency,
        ))
        if step > window.end - cursor:
            break
        cursor += step

    logger.debug(
        "Generated %d slots (%d available) for %s on %s",
        len(slots), sum(1 for s in slots if s.available), resolved.resource_id, resolved.day,
    )
    return GeneratedSlots(slots=slots)
