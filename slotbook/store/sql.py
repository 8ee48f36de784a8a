"""
SQLAlchemy-backed appointment store.

Slot uniqueness lives in the database: a partial unique index on
(service_id, appointment_date) over CONFIRMED rows. Concurrent inserts
for the same slot race on that index and exactly one commits; the loser
gets an IntegrityError, surfaced as ConflictError. Canceling or
completing a row drops it out of the index, which frees the slot.
"""

import logging
import threading
from contextlib import nullcontext
from datetime import date, datetime, time, timedelta
from typing import ContextManager, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Engine,
    Index,
    String,
    create_engine,
    select,
    text,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from slotbook.errors import ConflictError, NotFoundError, StateError
from slotbook.schemas.appointment_schema import Appointment, AppointmentStatus
from slotbook.store.base import AppointmentStore

logger = logging.getLogger(__name__)

_CONFIRMED_ONLY = text("status = 'CONFIRMED'")


class Base(DeclarativeBase):
    pass


class AppointmentRow(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    appointment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('CONFIRMED', 'COMPLETED', 'CANCELED')",
            name="ck_appointments_status",
        ),
        # At most one CONFIRMED appointment per service and instant
        Index(
            "uq_appointments_confirmed_slot",
            "service_id",
            "appointment_date",
            unique=True,
            sqlite_where=_CONFIRMED_ONLY,
            postgresql_where=_CONFIRMED_ONLY,
        ),
    )

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentRow":
        return cls(
            id=appointment.id,
            service_id=appointment.service_id,
            customer_id=appointment.customer_id,
            appointment_date=appointment.appointment_date,
            status=appointment.status.value,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )

    def to_model(self) -> Appointment:
        return Appointment(
            id=self.id,
            service_id=self.service_id,
            customer_id=self.customer_id,
            appointment_date=self.appointment_date,
            status=AppointmentStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return (
            f"<AppointmentRow(id={self.id}, service={self.service_id}, "
            f"at={self.appointment_date}, status={self.status})>"
        )


def is_memory_sqlite(engine: Engine) -> bool:
    """True when every session of ``engine`` shares one in-memory SQLite connection."""
    return engine.dialect.name == "sqlite" and engine.url.database in (None, "", ":memory:")


def create_store_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across request threads."""
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class SqlAppointmentStore(AppointmentStore):
    """Appointment store on a relational database.

    An in-memory SQLite engine hands the same connection to every session,
    so sessions on it are serialized; one thread's rollback would otherwise
    end another thread's transaction.
    """

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        self._shared_connection_lock: Optional[threading.Lock] = (
            threading.Lock() if is_memory_sqlite(engine) else None
        )
        if create_schema:
            Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlAppointmentStore":
        return cls(create_store_engine(database_url, echo=echo))

    def _exclusive(self) -> ContextManager:
        if self._shared_connection_lock is None:
            return nullcontext()
        return self._shared_connection_lock

    def add(self, appointment: Appointment) -> Appointment:
        with self._exclusive(), self._session_factory() as session:
            session.add(AppointmentRow.from_model(appointment))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                logger.info(
                    "Slot already taken: service=%s at=%s",
                    appointment.service_id, appointment.appointment_date,
                )
                raise ConflictError(
                    "This time slot is no longer available.",
                    details={
                        "service_id": appointment.service_id,
                        "appointment_date": appointment.appointment_date.isoformat(),
                    },
                ) from exc
        return appointment

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._exclusive(), self._session_factory() as session:
            row = session.get(AppointmentRow, appointment_id)
            return row.to_model() if row is not None else None

    def confirmed_on(self, service_id: str, day: date) -> list[Appointment]:
        stmt = (
            select(AppointmentRow)
            .where(
                AppointmentRow.service_id == service_id,
                AppointmentRow.status == AppointmentStatus.CONFIRMED.value,
                *_on_day(day),
            )
            .order_by(AppointmentRow.appointment_date)
        )
        return self._fetch(stmt)

    def update_status(
        self,
        appointment_id: str,
        expected: AppointmentStatus,
        new: AppointmentStatus,
        updated_at: datetime,
    ) -> Appointment:
        stmt = (
            update(AppointmentRow)
            .where(
                AppointmentRow.id == appointment_id,
                AppointmentRow.status == expected.value,
            )
            .values(status=new.value, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        with self._exclusive(), self._session_factory() as session:
            result = session.execute(stmt)
            row = session.get(AppointmentRow, appointment_id)
            if result.rowcount == 0:
                found_status = row.status if row is not None else None
                session.rollback()
                if found_status is None:
                    raise NotFoundError(
                        f"Appointment {appointment_id} not found",
                        details={"appointment_id": appointment_id},
                    )
                raise StateError(
                    f"Appointment {appointment_id} is {found_status}, expected {expected.value}",
                    details={"appointment_id": appointment_id, "status": found_status},
                )
            session.commit()
            return row.to_model()

    def list_for_customer(self, customer_id: str) -> list[Appointment]:
        stmt = (
            select(AppointmentRow)
            .where(AppointmentRow.customer_id == customer_id)
            .order_by(AppointmentRow.appointment_date)
        )
        return self._fetch(stmt)

    def list_all(
        self, status: Optional[AppointmentStatus] = None, day: Optional[date] = None
    ) -> list[Appointment]:
        stmt = select(AppointmentRow).order_by(AppointmentRow.appointment_date)
        if status is not None:
            stmt = stmt.where(AppointmentRow.status == status.value)
        if day is not None:
            stmt = stmt.where(*_on_day(day))
        return self._fetch(stmt)

    def _fetch(self, stmt) -> list[Appointment]:
        with self._exclusive(), self._session_factory() as session:
            return [row.to_model() for row in session.scalars(stmt)]


def _on_day(day: date) -> tuple:
    start = datetime.combine(day, time.min)
    return (
        AppointmentRow.appointment_date >= start,
        AppointmentRow.appointment_date < start + timedelta(days=1),
    )
