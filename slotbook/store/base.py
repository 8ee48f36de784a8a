"""
Appointment store contract.

Implementations must make ``add`` an atomic check-and-insert: two
concurrent adds of a CONFIRMED appointment for the same service and
instant must result in exactly one row and one ConflictError.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional

from slotbook.schemas.appointment_schema import Appointment, AppointmentStatus


class AppointmentStore(ABC):
    """Persistence for appointments with per-slot uniqueness."""

    @abstractmethod
    def add(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment.

        Raises:
            ConflictError: Another CONFIRMED appointment holds the same
                service and instant.
        """

    @abstractmethod
    def get(self, appointment_id: str) -> Optional[Appointment]:
        """Fetch one appointment by id."""

    @abstractmethod
    def confirmed_on(self, service_id: str, day: date) -> list[Appointment]:
        """CONFIRMED appointments of a service whose instant falls on ``day``."""

    @abstractmethod
    def update_status(
        self,
        appointment_id: str,
        expected: AppointmentStatus,
        new: AppointmentStatus,
        updated_at: datetime,
    ) -> Appointment:
        """Compare-and-set the status.

        Raises:
            NotFoundError: Unknown appointment id.
            StateError: The stored status is no longer ``expected``.
        """

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> list[Appointment]:
        """All appointments of a customer, oldest instant first."""

    @abstractmethod
    def list_all(
        self, status: Optional[AppointmentStatus] = None, day: Optional[date] = None
    ) -> list[Appointment]:
        """Every appointment, optionally narrowed to one status and date, oldest first."""
