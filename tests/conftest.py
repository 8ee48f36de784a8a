"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from slotbook.engine.weekly_availability import WeeklyAvailability
from slotbook.schemas.appointment_schema import Appointment, AppointmentStatus
from slotbook.services.availability_service import AvailabilityService
from slotbook.services.booking_service import BookingService
from slotbook.services.catalog import Service, ServiceCatalog
from slotbook.services.events import EventBus
from slotbook.store.memory import InMemoryAppointmentStore

# Thursday; the next Monday is 2026-10-19
NOW = datetime(2026, 10, 15, 12, 0)
NEXT_MONDAY = date(2026, 10, 19)
LAST_MONDAY = date(2026, 10, 12)

SERVICE_ID = "svc-1"

MONDAY_MORNING = {"monday": [{"start": "09:00", "end": "12:00"}]}
MONDAY_WITH_LUNCH = {
    "monday": [
        {"start": "09:00", "end": "12:00"},
        {"start": "13:00", "end": "15:00"},
    ],
}


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def at(day: date, hhmm: str) -> datetime:
    """Helper to build a local instant from a date and ``HH:MM``."""
    hour, minute = (int(p) for p in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute)


def make_appointment(
    appointment_date: datetime,
    service_id: str = SERVICE_ID,
    customer_id: str = "cust-a",
    status: AppointmentStatus = AppointmentStatus.CONFIRMED,
    appointment_id: Optional[str] = None,
) -> Appointment:
    """Helper to create an Appointment with sensible defaults."""
    return Appointment(
        id=appointment_id or f"APT-{customer_id}-{appointment_date:%m%d%H%M}",
        service_id=service_id,
        customer_id=customer_id,
        appointment_date=appointment_date,
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def catalog():
    return ServiceCatalog([
        Service(
            id=SERVICE_ID,
            title="Haircut",
            availability=WeeklyAvailability.from_dict(MONDAY_MORNING),
        ),
    ])


@pytest.fixture
def store():
    return InMemoryAppointmentStore()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def recorded_events(events):
    received = []
    events.subscribe(received.append)
    return received


@pytest.fixture
def booking_service(catalog, store, events, clock):
    return BookingService(catalog, store, events=events, clock=clock)


@pytest.fixture
def availability_service(catalog, store, clock):
    return AvailabilityService(catalog, store, clock=clock)
