"""Booking lifecycle events for notification consumers."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from slotbook.schemas.appointment_schema import Appointment

logger = logging.getLogger(__name__)


class BookingEventType(str, Enum):
    """What happened to an appointment."""
    CREATED = "booking_created"
    CANCELED = "booking_canceled"
    COMPLETED = "booking_completed"


@dataclass(frozen=True)
class BookingEvent:
    """Emitted after the store commit, never before."""
    type: BookingEventType
    appointment: Appointment
    occurred_at: datetime
    actor_id: Optional[str] = None


EventHandler = Callable[[BookingEvent], None]


class EventBus:
    """
    Synchronous fan-out to subscribers.

    A subscriber that raises is logged with its traceback; the booking it
    reports on is already committed and stays committed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def publish(self, event: BookingEvent) -> None:
        with self._lock:
            handlers = list(self._handlers)
        logger.debug(
            "Publishing %s for appointment %s to %d subscriber(s)",
            event.type.value, event.appointment.id, len(handlers),
        )
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Event handler %r failed for %s (appointment %s)",
                    handler, event.type.value, event.appointment.id,
                )
