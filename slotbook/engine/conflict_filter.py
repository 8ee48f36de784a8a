"""
Removes already-booked instants from a day's candidate slots.

Slots and bookings share the same granularity, so a conflict is an
exact-instant match to the minute. No range-overlap logic is needed.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from slotbook.schemas.appointment_schema import Appointment, AppointmentStatus
from slotbook.utils import format_hhmm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    """A derived bookable instant, tagged with whether it is still open."""
    start: datetime
    available: bool

    @property
    def time_label(self) -> str:
        return format_hhmm(self.start)


def _minute(instant: datetime) -> datetime:
    return instant.replace(second=0, microsecond=0)


class ConflictFilter:
    """Tags each candidate slot as available or booked."""

    def booked_instants(
        self, appointments: Iterable[Appointment], day: date
    ) -> set[datetime]:
        """CONFIRMED appointment instants falling on ``day``, to the minute."""
        return {
            _minute(a.appointment_date)
            for a in appointments
            if a.status == AppointmentStatus.CONFIRMED and a.appointment_date.date() == day
        }

    def classify(
        self, candidates: Iterable[datetime], appointments: Iterable[Appointment]
    ) -> list[Slot]:
        """Tag every candidate, keeping booked ones so a UI can grey them out."""
        candidates = list(candidates)
        if not candidates:
            return []

        booked: set[datetime] = set()
        appointments = list(appointments)
        for day in {c.date() for c in candidates}:
            booked |= self.booked_instants(appointments, day)

        return [Slot(start=c, available=_minute(c) not in booked) for c in candidates]

    def available(
        self, candidates: Iterable[datetime], appointments: Iterable[Appointment]
    ) -> list[datetime]:
        """Only the start-times that are still open."""
        return [slot.start for slot in self.classify(candidates, appointments) if slot.available]
