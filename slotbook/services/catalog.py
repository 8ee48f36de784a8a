"""
Bookable service registry with weekly open hours.

Records arrive from the product API as loose JSON. They are normalized
on ingestion: ``published`` becomes a real boolean and ``availability``
becomes a validated WeeklyAvailability. Anything that cannot be
normalized is a data-integrity fault, logged and raised.
"""

import json
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Union

from slotbook.engine.weekly_availability import WeeklyAvailability
from slotbook.errors import (
    AvailabilityIntegrityError,
    ForbiddenError,
    InvalidAvailabilityError,
    ValidationError,
)
from slotbook.schemas.appointment_schema import Actor
from slotbook.utils import normalize_published

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Service:
    """A bookable service and its recurring open hours."""

    id: str
    title: str
    published: bool = True
    availability: WeeklyAvailability = field(default_factory=WeeklyAvailability)


class ServiceCatalog:
    """Thread-safe in-memory view of the services that can be booked."""

    def __init__(self, services: Iterable[Service] = ()) -> None:
        self._lock = threading.Lock()
        self._services: dict[str, Service] = {s.id: s for s in services}

    # ------------------------------------------------------------------ #
    # Ingestion
    # ------------------------------------------------------------------ #

    @staticmethod
    def parse_record(record: Mapping[str, Any]) -> Service:
        """Normalize one product record from the collaborator API."""
        service_id = str(record.get("id", "")).strip()
        if not service_id:
            raise AvailabilityIntegrityError("Service record has no id", details={"record": dict(record)})
        try:
            published = normalize_published(record.get("published"))
            availability = WeeklyAvailability.from_dict(record.get("availability"))
        except (ValueError, InvalidAvailabilityError) as exc:
            logger.error("Malformed service record %s: %s", service_id, exc)
            raise AvailabilityIntegrityError(
                f"Service {service_id} has malformed data: {exc}",
                details={"service_id": service_id},
            ) from exc
        return Service(
            id=service_id,
            title=str(record.get("title") or ""),
            published=published,
            availability=availability,
        )

    def load_records(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Ingest product records, replacing any with the same id."""
        parsed = [self.parse_record(r) for r in records]
        with self._lock:
            for service in parsed:
                self._services[service.id] = service
        logger.info("Loaded %d services into catalog", len(parsed))
        return len(parsed)

    def load_json_file(self, path: str) -> int:
        """Ingest a JSON array of product records exported by the product API."""
        with open(path, encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise AvailabilityIntegrityError(
                f"Catalog file {path} must hold a JSON array of services"
            )
        return self.load_records(records)

    def add(self, service: Service) -> Service:
        with self._lock:
            self._services[service.id] = service
        return service

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def get(self, service_id: str) -> Optional[Service]:
        return self._services.get(service_id)

    def require_bookable(self, service_id: str) -> Service:
        """Return a published service or raise ValidationError."""
        service = self._services.get(service_id)
        if service is None:
            raise ValidationError(
                f"Service {service_id} does not exist",
                code="service_not_found",
                details={"service_id": service_id},
            )
        if not service.published:
            raise ValidationError(
                f"Service {service_id} is not open for booking",
                code="service_unpublished",
                details={"service_id": service_id},
            )
        return service

    def published_services(self) -> list[Service]:
        return sorted(
            (s for s in self._services.values() if s.published), key=lambda s: s.id
        )

    # ------------------------------------------------------------------ #
    # Admin update
    # ------------------------------------------------------------------ #

    def replace_availability(
        self,
        service_id: str,
        weekly: Union[WeeklyAvailability, Mapping[str, Any]],
        actor: Actor,
    ) -> Service:
        """Swap a service's whole weekly map in one step. Admin only."""
        if not actor.is_admin:
            raise ForbiddenError(
                "Only the service owner may change open hours",
                details={"service_id": service_id, "role": actor.role.value},
            )
        if not isinstance(weekly, WeeklyAvailability):
            weekly = WeeklyAvailability.from_dict(weekly)

        with self._lock:
            current = self._services.get(service_id)
            if current is None:
                raise ValidationError(
                    f"Service {service_id} does not exist",
                    code="service_not_found",
                    details={"service_id": service_id},
                )
            updated = replace(current, availability=weekly)
            self._services[service_id] = updated

        logger.info(
            "Open hours replaced for service %s by %s (active days: %s)",
            service_id, actor.actor_id, [d.value for d in weekly.active_days()],
        )
        return updated
