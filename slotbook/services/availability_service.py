"""
Read side of the booking engine: what can be booked, and when.

Every call recomputes from the weekly hours and the store's current
CONFIRMED appointments. Nothing here writes or locks.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional

from slotbook.config import settings
from slotbook.engine.conflict_filter import ConflictFilter, Slot
from slotbook.engine.slot_generator import SlotGenerator
from slotbook.engine.weekly_availability import WeeklyAvailability
from slotbook.logging_context import get_request_logger
from slotbook.services.catalog import ServiceCatalog
from slotbook.store.base import AppointmentStore

logger = get_request_logger(__name__)

Clock = Callable[[], datetime]


class AvailabilityService:
    """Slot listings and calendar views for a service."""

    def __init__(
        self,
        catalog: ServiceCatalog,
        store: AppointmentStore,
        clock: Clock = datetime.now,
        generator: Optional[SlotGenerator] = None,
        conflicts: Optional[ConflictFilter] = None,
        horizon_days: Optional[int] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._clock = clock
        self._generator = generator or SlotGenerator()
        self._conflicts = conflicts or ConflictFilter()
        self._horizon_days = horizon_days or settings.scheduling.booking_horizon_days

    def slots_for(self, service_id: str, day: date) -> list[Slot]:
        """
        All of ``day``'s slots for a service, each tagged available or booked.

        Raises:
            ValidationError: The service does not exist or is unpublished.
        """
        service = self._catalog.require_bookable(service_id)
        return self._slots(service_id, service.availability, day, self._clock())

    def _slots(
        self, service_id: str, weekly: WeeklyAvailability, day: date, now: datetime
    ) -> list[Slot]:
        candidates = self._generator.generate(day, weekly, now)
        if not candidates:
            return []
        booked = self._store.confirmed_on(service_id, day)
        return self._conflicts.classify(candidates, booked)

    def bookable_dates(
        self, service_id: str, start: Optional[date] = None, days: Optional[int] = None
    ) -> list[date]:
        """Dates in ``[start, start + days)`` with at least one open slot."""
        service = self._catalog.require_bookable(service_id)
        now = self._clock()
        first = max(start or now.date(), now.date())
        span = days if days is not None else self._horizon_days
        last = (start or now.date()) + timedelta(days=span)

        results = []
        day = first
        while day < last:
            if any(s.available for s in self._slots(service_id, service.availability, day, now)):
                results.append(day)
            day += timedelta(days=1)
        return results

    def next_available(
        self, service_id: str, after: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Earliest open slot within the booking horizon, if any."""
        service = self._catalog.require_bookable(service_id)
        now = self._clock()
        floor = max(after, now) if after is not None else now
        day = floor.date()
        for _ in range(self._horizon_days):
            for slot in self._slots(service_id, service.availability, day, now):
                if slot.available and slot.start > floor:
                    return slot.start
            day += timedelta(days=1)
        logger.info("No availability for service %s within %d days", service_id, self._horizon_days)
        return None
