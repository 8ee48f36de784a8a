"""
Booking and appointment status changes.

A booking is re-validated against live state on the server, whatever the
client was shown:
    1. The service exists and is published.
    2. The instant is a slot the generator produces for that date, and it
       is not already held by a CONFIRMED appointment.
    3. The instant is still in the future when the row is committed.
The commit itself is the store's atomic check-and-insert. Losing that race
is a ConflictError; the engine never retries on the caller's behalf.

Failures come back as an AppointmentResult carrying the typed error, never
as a raised exception.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from slotbook.engine.conflict_filter import ConflictFilter
from slotbook.engine.lifecycle import AppointmentLifecycle
from slotbook.engine.slot_generator import SlotGenerator
from slotbook.errors import BookingError, ConflictError, NotFoundError, ValidationError
from slotbook.logging_context import get_request_logger
from slotbook.schemas.appointment_schema import Actor, Appointment, AppointmentStatus
from slotbook.services.catalog import ServiceCatalog
from slotbook.services.events import BookingEvent, BookingEventType, EventBus
from slotbook.store.base import AppointmentStore
from slotbook.utils import format_hhmm, to_local_naive

logger = get_request_logger(__name__)

Clock = Callable[[], datetime]

_STATUS_EVENTS: dict[AppointmentStatus, BookingEventType] = {
    AppointmentStatus.CANCELED: BookingEventType.CANCELED,
    AppointmentStatus.COMPLETED: BookingEventType.COMPLETED,
}


@dataclass(frozen=True)
class AppointmentResult:
    """Outcome of a booking or status change: an appointment or a typed error."""

    appointment: Optional[Appointment] = None
    error: Optional[BookingError] = None

    @property
    def success(self) -> bool:
        return self.error is None


def _new_appointment_id() -> str:
    return f"APT-{uuid.uuid4().hex[:10].upper()}"


def _is_upcoming(appointment: Appointment, now: datetime) -> bool:
    return appointment.is_confirmed and appointment.appointment_date >= now


class BookingService:
    """Creates appointments and drives their lifecycle."""

    def __init__(
        self,
        catalog: ServiceCatalog,
        store: AppointmentStore,
        events: Optional[EventBus] = None,
        clock: Clock = datetime.now,
        generator: Optional[SlotGenerator] = None,
        conflicts: Optional[ConflictFilter] = None,
        lifecycle: Optional[AppointmentLifecycle] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._events = events or EventBus()
        self._clock = clock
        self._generator = generator or SlotGenerator()
        self._conflicts = conflicts or ConflictFilter()
        self._lifecycle = lifecycle or AppointmentLifecycle()

    # ------------------------------------------------------------------ #
    # Booking
    # ------------------------------------------------------------------ #

    def book(
        self, service_id: str, appointment_date: datetime, customer_id: str
    ) -> AppointmentResult:
        """Reserve ``appointment_date`` on a service for a customer."""
        try:
            appointment = self._book(service_id, appointment_date, customer_id)
        except ConflictError as exc:
            logger.warning(
                "Booking conflict: service=%s at=%s customer=%s",
                service_id, appointment_date, customer_id,
            )
            return AppointmentResult(error=exc)
        except BookingError as exc:
            logger.info("Booking rejected (%s): %s", exc.code, exc.message)
            return AppointmentResult(error=exc)
        return AppointmentResult(appointment=appointment)

    def _book(
        self, service_id: str, appointment_date: datetime, customer_id: str
    ) -> Appointment:
        if not customer_id or not customer_id.strip():
            raise ValidationError("A customer is required to book", code="customer_required")

        service = self._catalog.require_bookable(service_id)
        requested = to_local_naive(appointment_date)
        now = self._clock()
        details = {"service_id": service_id, "appointment_date": requested.isoformat()}

        if requested <= now:
            raise ValidationError(
                "Cannot book a time in the past", code="slot_in_past", details=details
            )
        if not self._generator.is_aligned(requested, service.availability):
            raise ValidationError(
                f"{requested:%Y-%m-%d %H:%M} is not a bookable slot for this service",
                code="slot_not_offered",
                details=details,
            )

        candidates = self._generator.generate(requested.date(), service.availability, now)
        booked = self._store.confirmed_on(service_id, requested.date())
        slot = next(
            (s for s in self._conflicts.classify(candidates, booked) if s.start == requested),
            None,
        )
        if slot is None:
            raise ValidationError(
                f"{requested:%Y-%m-%d %H:%M} is not a bookable slot for this service",
                code="slot_not_offered",
                details=details,
            )
        if not slot.available:
            raise ConflictError("This time slot is no longer available.", details=details)

        # The clock may have moved past the slot since it was offered
        committed_at = self._clock()
        if requested <= committed_at:
            raise ValidationError(
                "Cannot book a time in the past", code="slot_in_past", details=details
            )

        appointment = self._store.add(
            Appointment(
                id=_new_appointment_id(),
                service_id=service_id,
                customer_id=customer_id,
                appointment_date=requested,
                status=AppointmentStatus.CONFIRMED,
                created_at=committed_at,
                updated_at=committed_at,
            )
        )
        logger.info(
            "Booking created: %s for %s on service %s at %s %s",
            appointment.id, customer_id, service_id,
            requested.date().isoformat(), format_hhmm(requested),
        )
        self._events.publish(
            BookingEvent(
                type=BookingEventType.CREATED,
                appointment=appointment,
                occurred_at=committed_at,
                actor_id=customer_id,
            )
        )
        return appointment

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def change_status(
        self, appointment_id: str, new_status: AppointmentStatus, actor: Actor
    ) -> AppointmentResult:
        """Apply a lifecycle transition on behalf of ``actor``."""
        try:
            appointment = self._change_status(appointment_id, new_status, actor)
        except BookingError as exc:
            logger.info(
                "Status change to %s on %s rejected (%s): %s",
                new_status.value, appointment_id, exc.code, exc.message,
            )
            return AppointmentResult(error=exc)
        return AppointmentResult(appointment=appointment)

    def cancel(self, appointment_id: str, actor: Actor) -> AppointmentResult:
        return self.change_status(appointment_id, AppointmentStatus.CANCELED, actor)

    def complete(self, appointment_id: str, actor: Actor) -> AppointmentResult:
        return self.change_status(appointment_id, AppointmentStatus.COMPLETED, actor)

    def _change_status(
        self, appointment_id: str, new_status: AppointmentStatus, actor: Actor
    ) -> Appointment:
        current = self._require(appointment_id)
        now = self._clock()
        self._lifecycle.check(current, new_status, actor, now)

        updated = self._store.update_status(
            appointment_id, expected=current.status, new=new_status, updated_at=now
        )
        logger.info(
            "Appointment %s %s -> %s by %s %s",
            appointment_id, current.status.value, new_status.value,
            actor.role.value, actor.actor_id,
        )
        self._events.publish(
            BookingEvent(
                type=_STATUS_EVENTS[new_status],
                appointment=updated,
                occurred_at=now,
                actor_id=actor.actor_id,
            )
        )
        return updated

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def _require(self, appointment_id: str) -> Appointment:
        appointment = self._store.get(appointment_id)
        if appointment is None:
            raise NotFoundError(
                f"Appointment {appointment_id} not found",
                details={"appointment_id": appointment_id},
            )
        return appointment

    def get_appointment(self, appointment_id: str) -> AppointmentResult:
        try:
            return AppointmentResult(appointment=self._require(appointment_id))
        except NotFoundError as exc:
            return AppointmentResult(error=exc)

    def appointments_for(
        self, customer_id: str, upcoming: Optional[bool] = None
    ) -> list[Appointment]:
        """A customer's appointments, oldest first.

        ``upcoming=True`` keeps CONFIRMED appointments that have not started;
        ``upcoming=False`` keeps everything else.
        """
        appointments = self._store.list_for_customer(customer_id)
        if upcoming is None:
            return appointments
        now = self._clock()
        return [a for a in appointments if _is_upcoming(a, now) is upcoming]

    def all_appointments(
        self, status: Optional[AppointmentStatus] = None, day: Optional[date] = None
    ) -> list[Appointment]:
        """Every appointment for the service owner's dashboard."""
        return self._store.list_all(status=status, day=day)
