"""Resource configuration: weekly hours, breaks, and service policy."""

from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

WEEKDAYS: tuple[str, ...] = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)


class DaySchedule(BaseModel):
    """Opening hours for one weekday."""
    enabled: bool = False
    open_time: time = time(9, 0)
    close_time: time = time(17, 0)

    @model_validator(mode="after")
    def _check_hours(self) -> "DaySchedule":
        if self.enabled and self.open_time >= self.close_time:
            raise ValueError(
                f"open_time {self.open_time} must be before close_time {self.close_time}"
            )
        return self


class WeeklySchedule(BaseModel):
    """Recurring opening hours keyed by weekday, Monday through Sunday."""

    monday: DaySchedule
    tuesday: DaySchedule
    wednesday: DaySchedule
    thursday: DaySchedule
    friday: DaySchedule
    saturday: DaySchedule
    sunday: DaySchedule

    def for_date(self, day: date) -> DaySchedule:
        return getattr(self, WEEKDAYS[day.weekday()])


# Weekdays 09:00-17:00 open; weekend entries keep their hours but are disabled.
DEFAULT_WEEKLY_SCHEDULE = WeeklySchedule(
    monday=DaySchedule(enabled=True, open_time=time(9, 0), close_time=time(17, 0)),
    tuesday=DaySchedule(enabled=True, open_time=time(9, 0), close_time=time(17, 0)),
    wednesday=DaySchedule(enabled=True, open_time=time(9, 0), close_time=time(17, 0)),
    thursday=DaySchedule(enabled=True, open_time=time(9, 0), close_time=time(17, 0)),
    friday=DaySchedule(enabled=True, open_time=time(9, 0), close_time=time(17, 0)),
    saturday=DaySchedule(enabled=False, open_time=time(9, 0), close_time=time(15, 0)),
    sunday=DaySchedule(enabled=False, open_time=time(10, 0), close_time=time(16, 0)),
)


class BreakWindow(BaseModel):
    """A recurring daily exclusion such as a lunch break."""
    label: str
    start: time
    end: time

    @model_validator(mode="after")
    def _check_order(self) -> "BreakWindow":
        if self.start >= self.end:
            raise ValueError(f"break '{self.label}' must start before it ends")
        return self


class ServiceOption(BaseModel):
    """A named service a resource offers, with its own duration and price."""
    name: str
    duration_minutes: int = Field(ge=1)
    price: Decimal = Decimal("0")
    currency: Optional[str] = None


class ServicePolicy(BaseModel):
    """Per-resource booking rules."""
    slot_duration_minutes: int = Field(ge=1)
    buffer_minutes: int = Field(default=0, ge=0)
    advance_booking_days: int = Field(default=30, ge=0)
    allow_same_day_booking: bool = True
    booking_enabled: bool = True
    cancellation_hours: int = Field(default=24, ge=0)
    service_options: list[ServiceOption] = Field(default_factory=list)

    def option_for(self, name: str) -> Optional[ServiceOption]:
        normalized = name.strip().lower()
        for option in self.service_options:
            if option.name.lower() == normalized:
                return option
        return None
