"""
Finite state machine governing an appointment's status.

CONFIRMED is the only non-terminal state. It may move to CANCELED
(admin at any time, owning customer before the appointment starts) or
to COMPLETED (admin only). COMPLETED and CANCELED never change again.

Every transition must be explicitly defined. A request without a
matching transition fails with StateError; a request the actor is not
entitled to make fails with ForbiddenError. Nothing is silently ignored.

Usage:
    lifecycle = AppointmentLifecycle()
    canceled = lifecycle.transition(appt, AppointmentStatus.CANCELED, actor, now)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from slotbook.errors import ForbiddenError, StateError
from slotbook.schemas.appointment_schema import (
    Actor,
    ActorRole,
    Appointment,
    AppointmentStatus,
)

logger = logging.getLogger(__name__)

Guard = Callable[[Appointment, Actor, datetime], Optional[str]]


def _customer_owns_and_before_start(
    appointment: Appointment, actor: Actor, now: datetime
) -> Optional[str]:
    """Self-service cancel: own appointment, not yet started."""
    if actor.actor_id != appointment.customer_id:
        return "Customers may only cancel their own appointments"
    if now >= appointment.appointment_date:
        return "Appointment has already started; ask the service owner to cancel it"
    return None


@dataclass(frozen=True)
class Transition:
    """A single valid status transition and who may trigger it."""
    from_status: AppointmentStatus
    to_status: AppointmentStatus
    role: ActorRole
    guard: Optional[Guard] = None


class AppointmentLifecycle:
    """Validates and applies appointment status transitions."""

    TRANSITIONS: list[Transition] = [
        # --- Cancellation ---
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED, ActorRole.ADMIN),
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED, ActorRole.CUSTOMER,
                   guard=_customer_owns_and_before_start),

        # --- Service rendered ---
        Transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, ActorRole.ADMIN),
    ]

    TERMINAL: frozenset[AppointmentStatus] = frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED}
    )

    def is_terminal(self, status: AppointmentStatus) -> bool:
        return status in self.TERMINAL

    def get_valid_targets(
        self, status: AppointmentStatus, role: Optional[ActorRole] = None
    ) -> list[AppointmentStatus]:
        """Statuses reachable from ``status``, optionally for one role only."""
        targets = []
        for t in self.TRANSITIONS:
            if t.from_status == status and (role is None or t.role == role):
                if t.to_status not in targets:
                    targets.append(t.to_status)
        return targets

    def check(
        self,
        appointment: Appointment,
        target: AppointmentStatus,
        actor: Actor,
        now: datetime,
    ) -> Transition:
        """
        Find the transition that allows ``actor`` to move ``appointment`` to ``target``.

        Raises:
            StateError: No transition exists from the current status to ``target``.
            ForbiddenError: A transition exists but not for this actor.
        """
        current = appointment.status
        candidates = [
            t for t in self.TRANSITIONS
            if t.from_status == current and t.to_status == target
        ]
        if not candidates:
            valid = [s.value for s in self.get_valid_targets(current)]
            raise StateError(
                f"Cannot move appointment {appointment.id} from {current.value} "
                f"to {target.value}. Valid targets: {valid}",
                details={"from": current.value, "to": target.value, "valid": valid},
            )

        refusal = f"Role {actor.role.value} may not set status {target.value}"
        for t in candidates:
            if t.role != actor.role:
                continue
            if t.guard is not None:
                refusal = t.guard(appointment, actor, now) or ""
                if refusal:
                    continue
            return t

        raise ForbiddenError(
            refusal,
            details={"appointment_id": appointment.id, "role": actor.role.value},
        )

    def transition(
        self,
        appointment: Appointment,
        target: AppointmentStatus,
        actor: Actor,
        now: datetime,
    ) -> Appointment:
        """Return a copy of ``appointment`` in ``target`` status."""
        self.check(appointment, target, actor, now)
        logger.debug(
            "Appointment %s: %s -> %s (by %s %s)",
            appointment.id, appointment.status.value, target.value,
            actor.role.value, actor.actor_id,
        )
        return appointment.model_copy(update={"status": target, "updated_at": now})
