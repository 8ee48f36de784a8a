from slotbook.store.base import AppointmentStore
from slotbook.store.memory import InMemoryAppointmentStore
from slotbook.store.sql import SqlAppointmentStore


def build_store(backend: str, database_url: str = "", echo: bool = False) -> AppointmentStore:
    """Instantiate the configured appointment store."""
    if backend == "memory":
        return InMemoryAppointmentStore()
    if backend == "sql":
        return SqlAppointmentStore.from_url(database_url, echo=echo)
    raise ValueError(f"Unknown store backend: {backend!r}")


__all__ = [
    "AppointmentStore",
    "InMemoryAppointmentStore",
    "SqlAppointmentStore",
    "build_store",
]
