"""Request and response payloads for the HTTP surface."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from slotbook.schemas.appointment_schema import AppointmentStatus


class TimeRangePayload(BaseModel):
    """One open-hours interval, wall-clock ``HH:MM``."""
    start: str = Field(pattern=r"^\d{1,2}:\d{2}$")
    end: str = Field(pattern=r"^\d{1,2}:\d{2}$")


class WeeklyAvailabilityPayload(BaseModel):
    """Whole-week open hours, submitted as one document."""
    monday: list[TimeRangePayload] = Field(default_factory=list)
    tuesday: list[TimeRangePayload] = Field(default_factory=list)
    wednesday: list[TimeRangePayload] = Field(default_factory=list)
    thursday: list[TimeRangePayload] = Field(default_factory=list)
    friday: list[TimeRangePayload] = Field(default_factory=list)
    saturday: list[TimeRangePayload] = Field(default_factory=list)
    sunday: list[TimeRangePayload] = Field(default_factory=list)


class SlotView(BaseModel):
    """Single slot as rendered on the booking calendar."""
    time: str
    available: bool


class AvailabilityResponse(BaseModel):
    """Slots for one service on one date."""
    service_id: str
    date: date
    slots: list[SlotView] = Field(default_factory=list)


class BookableDatesResponse(BaseModel):
    """Dates with at least one open slot."""
    service_id: str
    dates: list[date] = Field(default_factory=list)
    next_available: Optional[datetime] = None


class BookingRequest(BaseModel):
    """Booking attempt for an exact instant."""
    service_id: str
    customer_id: str
    appointment_date: datetime


class StatusUpdateRequest(BaseModel):
    """Requested lifecycle change."""
    status: AppointmentStatus


class ErrorResponse(BaseModel):
    """Body returned for every typed booking error."""
    message: str
    code: str
    details: dict[str, Any] = Field(default_factory=dict)
