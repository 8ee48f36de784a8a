"""Appointment data models and the acting principal."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class ActorRole(str, Enum):
    """Who is acting on a booking or appointment."""
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


@dataclass(frozen=True)
class Actor:
    """
    Request-scoped principal passed explicitly into every mutating call.

    There is no ambient session: callers resolve the actor from their own
    auth layer and hand it over.
    """
    role: ActorRole
    actor_id: str

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


class Appointment(BaseModel):
    """One reservation of a service at an exact local instant."""
    id: str
    service_id: str
    customer_id: str
    appointment_date: datetime
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    created_at: datetime
    updated_at: datetime

    @property
    def is_confirmed(self) -> bool:
        return self.status == AppointmentStatus.CONFIRMED
