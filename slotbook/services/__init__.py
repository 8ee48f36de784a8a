from slotbook.services.availability_service import AvailabilityService
from slotbook.services.booking_service import AppointmentResult, BookingService
from slotbook.services.catalog import Service, ServiceCatalog
from slotbook.services.events import BookingEvent, BookingEventType, EventBus

__all__ = [
    "AvailabilityService",
    "BookingService",
    "AppointmentResult",
    "ServiceCatalog",
    "Service",
    "EventBus",
    "BookingEvent",
    "BookingEventType",
]
