"""
Candidate slot generation from weekly open hours.

Pure and side-effect free: the same (date, weekly hours, now) always
yields the same slots, so reads can be computed concurrently without
any locking.

Policy:
    - Dates strictly before today yield nothing.
    - Each range is walked from its start in granularity steps while the
      step is still before the range end. Only the slot *start* is checked,
      so a final slot may run past the end of the range.
    - On today's date only start-times strictly after ``now`` are kept.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from slotbook.config import settings
from slotbook.engine.weekly_availability import TimeRange, Weekday, WeeklyAvailability

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Walks a day's open ranges in fixed granularity steps."""

    def __init__(self, granularity_minutes: Optional[int] = None) -> None:
        minutes = granularity_minutes
        if minutes is None:
            minutes = settings.scheduling.slot_granularity_minutes
        if minutes < 1:
            raise ValueError(f"Slot granularity must be >= 1 minute, got {minutes}")
        self._step = timedelta(minutes=minutes)

    @property
    def granularity(self) -> timedelta:
        return self._step

    def generate(
        self, day: date, weekly: WeeklyAvailability, now: datetime
    ) -> list[datetime]:
        """
        Return the chronological candidate start-times for ``day``.

        Args:
            day: Local calendar date to generate for.
            weekly: The service's weekly open hours.
            now: Current local wall-clock instant.

        Returns:
            Sorted, de-duplicated slot start-times.
        """
        today = now.date()
        if day < today:
            return []

        ranges = weekly.ranges_for(Weekday.from_date(day))
        if not ranges:
            return []

        candidates: set[datetime] = set()
        for time_range in ranges:
            candidates.update(self._walk(day, time_range))

        if day == today:
            candidates = {slot for slot in candidates if slot > now}

        return sorted(candidates)

    def _walk(self, day: date, time_range: TimeRange) -> list[datetime]:
        cursor = datetime.combine(day, time_range.start)
        end = datetime.combine(day, time_range.end)
        starts = []
        while cursor < end:
            starts.append(cursor)
            cursor += self._step
        return starts

    def is_aligned(self, instant: datetime, weekly: WeeklyAvailability) -> bool:
        """True when ``instant`` is ``range.start + k * granularity`` inside a range.

        Ignores ``now``; used to tell a misaligned request apart from one
        that is simply no longer offered.
        """
        if instant.second or instant.microsecond:
            return False
        return instant in self._walk_all(instant.date(), weekly)

    def _walk_all(self, day: date, weekly: WeeklyAvailability) -> set[datetime]:
        starts: set[datetime] = set()
        for time_range in weekly.ranges_for(Weekday.from_date(day)):
            starts.update(self._walk(day, time_range))
        return starts
