"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from engine/__init__.py work correctly.
"""


class TestSchemaImports:
    def test_import_interval_schema(self):
        from slot_engine.schemas.interval_schema import BusyInterval, BusySource, Interval
        assert BusySource.MANUAL_BLOCK == "manual_block"

    def test_import_calendar_schema(self):
        from slot_engine.schemas.calendar_schema import (
            DEFAULT_WEEKLY_SCHEDULE, WEEKDAYS, ServicePolicy,
        )
        assert len(WEEKDAYS) == 7
        assert DEFAULT_WEEKLY_SCHEDULE.monday.enabled

    def test_import_booking_schema(self):
        from slot_engine.schemas.booking_schema import (
            ACTIVE_STATUSES, BookingError, ReservationStatus, SlotQueryReason,
        )
        assert ReservationStatus.CANCELLED not in ACTIVE_STATUSES
        assert BookingError.SLOT_NO_LONGER_AVAILABLE == "slot_no_longer_available"


class TestStoreImports:
    def test_import_memory_stores(self):
        from slot_engine.stores.memory import (
            InMemoryExternalBusyCache, InMemoryReservationStore, InMemoryResourceConfigStore,
        )
        store = InMemoryReservationStore()
        assert store.online

    def test_import_protocols(self):
        from slot_engine.stores.base import (
            ExternalBusySource, ReservationStore, ResourceConfigStore,
        )
        assert ReservationStore is not None


class TestEngineImports:
    def test_engine_package_reexports(self):
        from slot_engine.engine import (
            BusyTimeAggregator, ReservationCommitter, SlotAvailabilityEngine,
            generate_slots, resolve_day,
        )
        assert callable(generate_slots)
        assert callable(resolve_day)

    def test_errors_hierarchy(self):
        from slot_engine.errors import (
            CommitTimeoutError, ExternalSourceError, SlotEngineError, StoreUnavailableError,
        )
        for error in (CommitTimeoutError, ExternalSourceError, StoreUnavailableError):
            assert issubclass(error, SlotEngineError)


class TestConfigImport:
    def test_import_config(self):
        from slot_engine.config import settings
        assert settings.resources.timezone
        assert settings.policy.slot_duration_minutes >= 1
        assert settings.engine.max_calendar_days >= 1


class TestCliDemo:
    def test_demo_engine_builds(self):
        from datetime import date, timedelta

        from main import DEMO_RESOURCE, build_demo_engine
        today = date.today()
        tuesday = today + timedelta(days=(1 - today.weekday()) % 7 or 7)
        engine = build_demo_engine(tuesday)
        result = engine.get_available_slots(DEMO_RESOURCE, tuesday)
        assert result.slots
        assert any(s.blocked_by == "seed-booking-1" for s in result.slots)
