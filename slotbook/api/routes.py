"""HTTP routes wrapping availability reads, booking, and status changes."""

import logging
from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status

from slotbook.errors import ForbiddenError, ValidationError
from slotbook.schemas.api_schema import (
    AvailabilityResponse,
    BookableDatesResponse,
    BookingRequest,
    SlotView,
    StatusUpdateRequest,
    WeeklyAvailabilityPayload,
)
from slotbook.schemas.appointment_schema import (
    Actor,
    ActorRole,
    Appointment,
    AppointmentStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Booking"])


def get_context(request: Request):
    return request.app.state.context


def get_actor(
    x_actor_role: str = Header(...),
    x_actor_id: str = Header(...),
) -> Actor:
    """Resolve the acting principal from request headers."""
    try:
        role = ActorRole(x_actor_role.strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown actor role: {x_actor_role!r}", code="invalid_actor_role"
        ) from None
    return Actor(role=role, actor_id=x_actor_id.strip())


def _unwrap(result) -> Appointment:
    if not result.success:
        raise result.error
    return result.appointment


# --------------------------------------------------------------------- #
# Availability
# --------------------------------------------------------------------- #

@router.get("/services/{service_id}/availability", response_model=AvailabilityResponse)
def get_availability(
    service_id: str,
    day: date = Query(..., alias="date"),
    context=Depends(get_context),
):
    """Every slot of the date, flagged available or already booked."""
    slots = context.availability.slots_for(service_id, day)
    return AvailabilityResponse(
        service_id=service_id,
        date=day,
        slots=[SlotView(time=s.time_label, available=s.available) for s in slots],
    )


@router.get("/services/{service_id}/bookable-dates", response_model=BookableDatesResponse)
def get_bookable_dates(
    service_id: str,
    start: Optional[date] = None,
    days: Optional[int] = Query(None, ge=1, le=366),
    context=Depends(get_context),
):
    """Calendar view: dates that still have an open slot."""
    return BookableDatesResponse(
        service_id=service_id,
        dates=context.availability.bookable_dates(service_id, start=start, days=days),
        next_available=context.availability.next_available(
            service_id, after=datetime.combine(start, time.min) if start else None
        ),
    )


@router.put("/services/{service_id}/availability", response_model=WeeklyAvailabilityPayload)
def replace_availability(
    service_id: str,
    payload: WeeklyAvailabilityPayload,
    actor: Actor = Depends(get_actor),
    context=Depends(get_context),
):
    """Replace the whole weekly schedule. Admin only."""
    service = context.catalog.replace_availability(service_id, payload.model_dump(), actor)
    return service.availability.to_dict()


# --------------------------------------------------------------------- #
# Appointments
# --------------------------------------------------------------------- #

@router.post(
    "/appointments", response_model=Appointment, status_code=status.HTTP_201_CREATED
)
def book_appointment(payload: BookingRequest, context=Depends(get_context)):
    """Book an exact instant. 409 when taken, 422 when not bookable."""
    result = context.booking.book(
        payload.service_id, payload.appointment_date, payload.customer_id
    )
    return _unwrap(result)


@router.get("/appointments", response_model=list[Appointment])
def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    day: Optional[date] = Query(None, alias="date"),
    actor: Actor = Depends(get_actor),
    context=Depends(get_context),
):
    """Owner dashboard: every appointment, filterable by status and date."""
    if not actor.is_admin:
        raise ForbiddenError("Only the service owner may list all appointments")
    return context.booking.all_appointments(status=status_filter, day=day)


@router.get("/appointments/{appointment_id}", response_model=Appointment)
def get_appointment(appointment_id: str, context=Depends(get_context)):
    return _unwrap(context.booking.get_appointment(appointment_id))


@router.patch("/appointments/{appointment_id}/status", response_model=Appointment)
def update_appointment_status(
    appointment_id: str,
    payload: StatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    context=Depends(get_context),
):
    """Cancel or complete an appointment."""
    return _unwrap(context.booking.change_status(appointment_id, payload.status, actor))


@router.get("/customers/{customer_id}/appointments", response_model=list[Appointment])
def list_customer_appointments(
    customer_id: str,
    upcoming: Optional[bool] = None,
    actor: Actor = Depends(get_actor),
    context=Depends(get_context),
):
    if not actor.is_admin and actor.actor_id != customer_id:
        raise ForbiddenError("Customers may only view their own appointments")
    return context.booking.appointments_for(customer_id, upcoming=upcoming)
