"""
FastAPI application factory.

Wires the catalog, store, event bus and services into one context held
on ``app.state`` and maps every typed booking error to its HTTP status.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slotbook.api.routes import router
from slotbook.config import settings
from slotbook.errors import BookingError
from slotbook.logging_context import bind_request, new_request_id
from slotbook.services.availability_service import AvailabilityService
from slotbook.services.booking_service import BookingService
from slotbook.services.catalog import ServiceCatalog
from slotbook.services.events import EventBus
from slotbook.store import AppointmentStore, build_store

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs, built once per application."""
    catalog: ServiceCatalog
    store: AppointmentStore
    availability: AvailabilityService
    booking: BookingService
    events: EventBus = field(default_factory=EventBus)


def build_context(
    catalog: Optional[ServiceCatalog] = None,
    store: Optional[AppointmentStore] = None,
    events: Optional[EventBus] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> AppContext:
    catalog = catalog or ServiceCatalog()
    store = store or build_store(
        settings.storage.backend,
        database_url=settings.storage.database_url,
        echo=settings.storage.echo,
    )
    events = events or EventBus()
    return AppContext(
        catalog=catalog,
        store=store,
        events=events,
        availability=AvailabilityService(catalog, store, clock=clock),
        booking=BookingService(catalog, store, events=events, clock=clock),
    )


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    app = FastAPI(title=settings.app_name)
    app.state.context = context or build_context()
    app.include_router(router)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or new_request_id()
        with bind_request(request_id, request.method, request.url.path):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        if exc.http_status >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    return app
