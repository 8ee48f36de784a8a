"""
In-process appointment store.

A single lock serializes the check-and-insert and status updates. It is
held only for the dict operations, never while slots are generated.
"""

import logging
import threading
from datetime import date, datetime
from typing import Optional

from slotbook.errors import ConflictError, NotFoundError, StateError
from slotbook.schemas.appointment_schema import Appointment, AppointmentStatus
from slotbook.store.base import AppointmentStore

logger = logging.getLogger(__name__)

SlotKey = tuple[str, datetime]


class InMemoryAppointmentStore(AppointmentStore):
    """Dict-backed store; the confirmed-slot index enforces uniqueness."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._appointments: dict[str, Appointment] = {}
        self._confirmed: dict[SlotKey, str] = {}

    @staticmethod
    def _key(appointment: Appointment) -> SlotKey:
        return (appointment.service_id, appointment.appointment_date)

    def add(self, appointment: Appointment) -> Appointment:
        key = self._key(appointment)
        with self._lock:
            if appointment.is_confirmed:
                holder = self._confirmed.get(key)
                if holder is not None:
                    raise ConflictError(
                        "This time slot is no longer available.",
                        details={
                            "service_id": appointment.service_id,
                            "appointment_date": appointment.appointment_date.isoformat(),
                        },
                    )
                self._confirmed[key] = appointment.id
            self._appointments[appointment.id] = appointment
        return appointment

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    def confirmed_on(self, service_id: str, day: date) -> list[Appointment]:
        with self._lock:
            ids = [
                appt_id for (svc, instant), appt_id in self._confirmed.items()
                if svc == service_id and instant.date() == day
            ]
            found = [self._appointments[appt_id] for appt_id in ids]
        return sorted(found, key=lambda a: a.appointment_date)

    def update_status(
        self,
        appointment_id: str,
        expected: AppointmentStatus,
        new: AppointmentStatus,
        updated_at: datetime,
    ) -> Appointment:
        with self._lock:
            current = self._appointments.get(appointment_id)
            if current is None:
                raise NotFoundError(
                    f"Appointment {appointment_id} not found",
                    details={"appointment_id": appointment_id},
                )
            if current.status != expected:
                raise StateError(
                    f"Appointment {appointment_id} is {current.status.value}, "
                    f"expected {expected.value}",
                    details={"appointment_id": appointment_id, "status": current.status.value},
                )

            updated = current.model_copy(update={"status": new, "updated_at": updated_at})
            self._appointments[appointment_id] = updated
            if expected == AppointmentStatus.CONFIRMED:
                self._confirmed.pop(self._key(current), None)
        return updated

    def list_for_customer(self, customer_id: str) -> list[Appointment]:
        with self._lock:
            found = [a for a in self._appointments.values() if a.customer_id == customer_id]
        return sorted(found, key=lambda a: a.appointment_date)

    def list_all(
        self, status: Optional[AppointmentStatus] = None, day: Optional[date] = None
    ) -> list[Appointment]:
        with self._lock:
            found = [
                a for a in self._appointments.values()
                if (status is None or a.status == status)
                and (day is None or a.appointment_date.date() == day)
            ]
        return sorted(found, key=lambda a: a.appointment_date)

    def reset(self) -> None:
        """Clear all appointments. Used by test fixtures for isolation."""
        with self._lock:
            self._appointments.clear()
            self._confirmed.clear()
