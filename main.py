"""
Slot engine demo entry point.

Seeds in-memory stores with a sample resource (weekday hours, a lunch
break, one existing booking and one synced calendar event) and runs the
read or write path against it. No database or calendar credentials needed.

Usage:
    python main.py slots --date 2025-03-18
    python main.py slots --date 2025-03-18 --service "Colour"
    python main.py next --limit 3
    python main.py book --date 2025-03-18 --time 14:00 --customer cust-42
"""

import argparse
import sys
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from slot_engine.config import settings
from slot_engine.engine import SlotAvailabilityEngine, parse_break_windows, parse_weekly_schedule
from slot_engine.schemas.booking_schema import Reservation, ServiceDetails, SlotQueryResult
from slot_engine.schemas.calendar_schema import ServiceOption, ServicePolicy
from slot_engine.schemas.interval_schema import BusyInterval, BusySource, Interval
from slot_engine.stores.memory import (
    InMemoryExternalBusyCache,
    InMemoryReservationStore,
    InMemoryResourceConfigStore,
)
from slot_engine.utils import local_instant, parse_hhmm, utc_now

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RESET = "\033[0m"

DEMO_RESOURCE = "demo-salon"

DEMO_WORKING_HOURS = {
    "monday": {"enabled": True, "start": "09:00", "end": "17:00"},
    "tuesday": {"enabled": True, "start": "09:00", "end": "17:00"},
    "wednesday": {"enabled": True, "start": "09:00", "end": "17:00"},
    "thursday": {"enabled": True, "start": "10:00", "end": "19:00"},
    "friday": {"enabled": True, "start": "09:00", "end": "17:00"},
    "saturday": {"enabled": True, "start": "09:00", "end": "13:00"},
    "sunday": {"enabled": False, "start": "10:00", "end": "16:00"},
}

DEMO_BREAKS = [{"start": "12:00", "end": "13:00", "title": "Lunch Break"}]


def build_demo_engine(day: date) -> SlotAvailabilityEngine:
    """Create an engine over seeded in-memory stores."""
    config_store = InMemoryResourceConfigStore()
    reservations = InMemoryReservationStore()
    external = InMemoryExternalBusyCache()

    config_store.configure(
        DEMO_RESOURCE,
        schedule=parse_weekly_schedule(DEMO_WORKING_HOURS),
        breaks=parse_break_windows(DEMO_BREAKS),
        policy=ServicePolicy(
            slot_duration_minutes=45,
            buffer_minutes=15,
            advance_booking_days=30,
            allow_same_day_booking=True,
            service_options=[
                ServiceOption(name="Cut", duration_minutes=45, price=Decimal("35")),
                ServiceOption(name="Colour", duration_minutes=90, price=Decimal("80")),
            ],
        ),
        timezone=settings.resources.timezone,
    )

    local = ZoneInfo(settings.resources.timezone)
    reservations.add(Reservation(
        id="seed-booking-1",
        resource_id=DEMO_RESOURCE,
        customer_id="cust-seed",
        interval=Interval(
            start=local_instant(day, time(10, 0), local),
            end=local_instant(day, time(10, 45), local),
        ),
        service_name="Cut",
        currency=settings.resources.currency,
        created_at=utc_now(),
    ))
    external.add(DEMO_RESOURCE, BusyInterval(
        interval=Interval(
            start=local_instant(day, time(15, 0), local),
            end=local_instant(day, time(16, 0), local),
        ),
        source_kind=BusySource.EXTERNAL_CALENDAR,
        label="Dentist",
    ))
    external.mark_synced(DEMO_RESOURCE, utc_now())
    return SlotAvailabilityEngine(config_store, reservations, external)


def _print_result(result: SlotQueryResult) -> None:
    print(f"\nSlots for {result.resource_id} on {result.day} ({result.timezone})")
    if result.reason.value != "ok":
        print(f"  {YELLOW}No slots: {result.reason.value}{RESET}")
        return
    for slot in result.slots:
        if slot.available:
            print(f"  {GREEN}{slot.start_label}-{slot.end_label}  available{RESET}")
        else:
            print(f"  {RED}{slot.start_label}-{slot.end_label}  {slot.block_reason}{RESET}")
    if not result.complete:
        for warning in result.warnings:
            print(f"  {DIM}note: {warning}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Query and book slots against demo data.")
    sub = parser.add_subparsers(dest="command", required=True)

    slots_cmd = sub.add_parser("slots", help="List all slots for a date.")
    slots_cmd.add_argument("--date", type=date.fromisoformat, default=None)
    slots_cmd.add_argument("--service", type=str, default=None, help="Service option name.")

    next_cmd = sub.add_parser("next", help="List the next dates with free slots.")
    next_cmd.add_argument("--limit", type=int, default=5)

    book_cmd = sub.add_parser("book", help="Book a slot.")
    book_cmd.add_argument("--date", type=date.fromisoformat, required=True)
    book_cmd.add_argument("--time", type=str, required=True, help="Local start time, HH:MM.")
    book_cmd.add_argument("--customer", type=str, default="cust-demo")
    book_cmd.add_argument("--minutes", type=int, default=45)

    args = parser.parse_args()
    day = getattr(args, "date", None) or (datetime.now().date() + timedelta(days=1))
    engine = build_demo_engine(day)

    if args.command == "slots":
        _print_result(engine.get_available_slots(DEMO_RESOURCE, day, service_name=args.service))
    elif args.command == "next":
        for entry in engine.find_next_available(DEMO_RESOURCE, limit=args.limit):
            print(f"  {entry['date']} ({entry['day_name']}): {entry['slot_count']} free")
    else:
        local = ZoneInfo(settings.resources.timezone)
        start = local_instant(day, parse_hhmm(args.time), local)
        interval = Interval(start=start, end=start + timedelta(minutes=args.minutes))
        result = engine.book(DEMO_RESOURCE, args.customer, interval, ServiceDetails(service_name="Cut"))
        colour = GREEN if result.success else RED
        print(f"{colour}{result.message}{RESET}")
        if not result.success:
            sys.exit(1)


if __name__ == "__main__":
    main()
