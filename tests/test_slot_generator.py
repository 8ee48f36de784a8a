"""Tests for candidate slot generation."""

from datetime import datetime, timedelta

import pytest

from slotbook.engine.slot_generator import SlotGenerator
from slotbook.engine.weekly_availability import WeeklyAvailability
from tests.conftest import (
    LAST_MONDAY,
    MONDAY_MORNING,
    MONDAY_WITH_LUNCH,
    NEXT_MONDAY,
    NOW,
    at,
)


def _labels(slots):
    return [s.strftime("%H:%M") for s in slots]


@pytest.fixture
def generator():
    return SlotGenerator(granularity_minutes=60)


class TestSingleRange:
    def test_morning_range_excludes_end(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:00", "10:00", "11:00"]

    def test_slots_fall_on_requested_date(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert all(s.date() == NEXT_MONDAY for s in slots)

    def test_trailing_partial_hour_still_offered(self, generator):
        weekly = WeeklyAvailability.from_dict({"monday": [{"start": "09:00", "end": "11:30"}]})
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:00", "10:00", "11:00"]

    def test_range_shorter_than_granularity_yields_start(self, generator):
        weekly = WeeklyAvailability.from_dict({"monday": [{"start": "09:15", "end": "09:45"}]})
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:15"]

    def test_closed_day_yields_nothing(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        tuesday = NEXT_MONDAY + timedelta(days=1)
        assert generator.generate(tuesday, weekly, NOW) == []


class TestMultipleRanges:
    def test_lunch_break_is_not_bridged(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_WITH_LUNCH)
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:00", "10:00", "11:00", "13:00", "14:00"]

    def test_output_is_chronological_for_unsorted_input(self, generator):
        weekly = WeeklyAvailability.from_dict({
            "monday": [
                {"start": "13:00", "end": "15:00"},
                {"start": "09:00", "end": "11:00"},
            ],
        })
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert slots == sorted(slots)
        assert _labels(slots) == ["09:00", "10:00", "13:00", "14:00"]

    def test_touching_ranges_do_not_duplicate(self, generator):
        weekly = WeeklyAvailability.from_dict({
            "monday": [
                {"start": "09:00", "end": "10:30"},
                {"start": "10:30", "end": "12:00"},
            ],
        })
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:00", "10:00", "10:30", "11:30"]
        assert len(slots) == len(set(slots))


class TestPastAndToday:
    def test_past_date_yields_nothing(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        assert generator.generate(LAST_MONDAY, weekly, NOW) == []

    def test_today_drops_started_and_current_slots(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_WITH_LUNCH)
        now = at(NEXT_MONDAY, "10:30")
        slots = generator.generate(NEXT_MONDAY, weekly, now)
        assert _labels(slots) == ["11:00", "13:00", "14:00"]

    def test_today_slot_equal_to_now_is_dropped(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        now = at(NEXT_MONDAY, "10:00")
        slots = generator.generate(NEXT_MONDAY, weekly, now)
        assert _labels(slots) == ["11:00"]

    def test_today_after_closing_yields_nothing(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        now = at(NEXT_MONDAY, "18:00")
        assert generator.generate(NEXT_MONDAY, weekly, now) == []

    def test_date_only_comparison_for_past(self, generator):
        # Late on Sunday the next morning is still offered in full
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        now = datetime(2026, 10, 18, 23, 59)
        assert len(generator.generate(NEXT_MONDAY, weekly, now)) == 3


class TestGranularity:
    def test_half_hour_granularity(self):
        generator = SlotGenerator(granularity_minutes=30)
        weekly = WeeklyAvailability.from_dict({"monday": [{"start": "09:00", "end": "10:30"}]})
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert _labels(slots) == ["09:00", "09:30", "10:00"]

    def test_default_granularity_from_settings(self):
        assert SlotGenerator().granularity == timedelta(minutes=60)

    def test_every_slot_is_aligned_to_its_range(self, generator):
        weekly = WeeklyAvailability.from_dict({
            "monday": [
                {"start": "08:15", "end": "11:00"},
                {"start": "13:40", "end": "16:00"},
            ],
        })
        slots = generator.generate(NEXT_MONDAY, weekly, NOW)
        assert slots
        for slot in slots:
            assert any(
                at(NEXT_MONDAY, r.start.strftime("%H:%M")) <= slot < at(NEXT_MONDAY, r.end.strftime("%H:%M"))
                and (slot - at(NEXT_MONDAY, r.start.strftime("%H:%M"))) % generator.granularity == timedelta(0)
                for r in weekly.ranges_for("monday")
            )


class TestAlignment:
    def test_generated_slot_is_aligned(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        assert generator.is_aligned(at(NEXT_MONDAY, "10:00"), weekly)

    def test_off_grid_minute_not_aligned(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        assert not generator.is_aligned(at(NEXT_MONDAY, "10:30"), weekly)

    def test_range_end_not_aligned(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        assert not generator.is_aligned(at(NEXT_MONDAY, "12:00"), weekly)

    def test_seconds_not_aligned(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        assert not generator.is_aligned(at(NEXT_MONDAY, "10:00").replace(second=5), weekly)

    def test_closed_day_not_aligned(self, generator):
        weekly = WeeklyAvailability.from_dict(MONDAY_MORNING)
        tuesday = NEXT_MONDAY + timedelta(days=1)
        assert not generator.is_aligned(at(tuesday, "10:00"), weekly)

    def test_invalid_granularity_rejected(self):
        with pytest.raises(ValueError):
            SlotGenerator(granularity_minutes=-5)

    def test_zero_granularity_rejected(self):
        with pytest.raises(ValueError, match="granularity"):
            SlotGenerator(granularity_minutes=0)
