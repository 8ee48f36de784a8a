from slotbook.engine.conflict_filter import ConflictFilter, Slot
from slotbook.engine.lifecycle import AppointmentLifecycle, Transition
from slotbook.engine.slot_generator import SlotGenerator
from slotbook.engine.weekly_availability import (
    DEFAULT_DAY_RANGE,
    TimeRange,
    Weekday,
    WeeklyAvailability,
)

__all__ = [
    "WeeklyAvailability",
    "TimeRange",
    "Weekday",
    "DEFAULT_DAY_RANGE",
    "SlotGenerator",
    "ConflictFilter",
    "Slot",
    "AppointmentLifecycle",
    "Transition",
]
