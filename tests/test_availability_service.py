"""Tests for slot listings and the bookable-dates calendar."""

from datetime import date, timedelta

import pytest

from slotbook.errors import ValidationError
from slotbook.services.availability_service import AvailabilityService
from tests.conftest import NEXT_MONDAY, NOW, SERVICE_ID, at, make_appointment

FOLLOWING_MONDAY = NEXT_MONDAY + timedelta(days=7)


def _fill_monday(store, day):
    for i, hhmm in enumerate(("09:00", "10:00", "11:00")):
        store.add(make_appointment(at(day, hhmm), customer_id=f"cust-{i}"))


class TestSlotsFor:
    def test_lists_every_slot_of_the_day(self, availability_service):
        slots = availability_service.slots_for(SERVICE_ID, NEXT_MONDAY)
        assert [(s.time_label, s.available) for s in slots] == [
            ("09:00", True),
            ("10:00", True),
            ("11:00", True),
        ]

    def test_existing_booking_greyed_out(self, availability_service, store):
        store.add(make_appointment(at(NEXT_MONDAY, "10:00")))
        slots = availability_service.slots_for(SERVICE_ID, NEXT_MONDAY)
        assert [(s.time_label, s.available) for s in slots] == [
            ("09:00", True),
            ("10:00", False),
            ("11:00", True),
        ]

    def test_repeated_reads_are_identical(self, availability_service, store):
        store.add(make_appointment(at(NEXT_MONDAY, "11:00")))
        first = availability_service.slots_for(SERVICE_ID, NEXT_MONDAY)
        second = availability_service.slots_for(SERVICE_ID, NEXT_MONDAY)
        assert first == second

    def test_closed_day_is_empty(self, availability_service):
        assert availability_service.slots_for(SERVICE_ID, NEXT_MONDAY + timedelta(days=2)) == []

    def test_unknown_service_raises(self, availability_service):
        with pytest.raises(ValidationError):
            availability_service.slots_for("missing", NEXT_MONDAY)


class TestBookableDates:
    def test_mondays_within_window(self, availability_service):
        dates = availability_service.bookable_dates(SERVICE_ID, days=14)
        assert dates == [NEXT_MONDAY, FOLLOWING_MONDAY]

    def test_fully_booked_day_skipped(self, availability_service, store):
        _fill_monday(store, NEXT_MONDAY)
        dates = availability_service.bookable_dates(SERVICE_ID, days=14)
        assert dates == [FOLLOWING_MONDAY]

    def test_window_clamped_to_today(self, availability_service):
        start = NOW.date() - timedelta(days=5)
        dates = availability_service.bookable_dates(SERVICE_ID, start=start, days=10)
        assert dates == [NEXT_MONDAY]

    def test_window_in_future(self, availability_service):
        dates = availability_service.bookable_dates(SERVICE_ID, start=FOLLOWING_MONDAY, days=1)
        assert dates == [FOLLOWING_MONDAY]

    def test_default_window_uses_horizon(self, catalog, store, clock):
        service = AvailabilityService(catalog, store, clock=clock, horizon_days=7)
        assert service.bookable_dates(SERVICE_ID) == [NEXT_MONDAY]


class TestNextAvailable:
    def test_first_open_slot(self, availability_service):
        assert availability_service.next_available(SERVICE_ID) == at(NEXT_MONDAY, "09:00")

    def test_skips_booked_slots(self, availability_service, store):
        store.add(make_appointment(at(NEXT_MONDAY, "09:00")))
        assert availability_service.next_available(SERVICE_ID) == at(NEXT_MONDAY, "10:00")

    def test_after_given_instant(self, availability_service):
        after = at(NEXT_MONDAY, "10:00")
        assert availability_service.next_available(SERVICE_ID, after=after) == at(NEXT_MONDAY, "11:00")

    def test_rolls_over_to_next_week(self, availability_service, store):
        _fill_monday(store, NEXT_MONDAY)
        assert availability_service.next_available(SERVICE_ID) == at(FOLLOWING_MONDAY, "09:00")

    def test_none_beyond_horizon(self, catalog, store, clock):
        service = AvailabilityService(catalog, store, clock=clock, horizon_days=3)
        assert service.next_available(SERVICE_ID) is None

    def test_today_only_future_slots(self, availability_service, clock):
        clock.now = at(NEXT_MONDAY, "10:30")
        assert availability_service.next_available(SERVICE_ID) == at(NEXT_MONDAY, "11:00")
        assert availability_service.bookable_dates(SERVICE_ID, days=1) == [NEXT_MONDAY]
        clock.now = at(NEXT_MONDAY, "11:30")
        assert availability_service.bookable_dates(SERVICE_ID, days=1) == []


def test_bookable_dates_returns_dates(availability_service):
    assert all(isinstance(d, date) for d in availability_service.bookable_dates(SERVICE_ID, days=7))
