"""Per-request logging context for the booking API.

The HTTP middleware binds a RequestContext (correlation id, method, path)
for the lifetime of one request. Log records emitted anywhere below it,
from the route through the services down to the store, carry
``request_id`` and ``request_route`` so a single availability read or
booking attempt can be followed across modules. Outside a request both
fields fall back to ``-``.

Usage:
    from slotbook.logging_context import bind_request, get_request_logger

    logger = get_request_logger(__name__)
    with bind_request("REQ-abc123", "POST", "/appointments"):
        logger.info("Booking slot")  # → [REQ-abc123 POST /appointments] Booking slot
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class RequestContext:
    """What is known about the request currently being served."""
    request_id: str = "-"
    method: Optional[str] = None
    path: Optional[str] = None

    @property
    def route(self) -> str:
        if self.method is None or self.path is None:
            return "-"
        return f"{self.method} {self.path}"


_NO_REQUEST = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("request_context", default=_NO_REQUEST)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def bind_request(
    request_id: str, method: Optional[str] = None, path: Optional[str] = None
) -> Iterator[RequestContext]:
    """Make ``request_id`` current until the block exits, then restore the previous one."""
    context = RequestContext(request_id=request_id, method=method, path=path)
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def current_request() -> RequestContext:
    return _current.get()


def get_request_id() -> str:
    return _current.get().request_id


class RequestIdFilter(logging.Filter):
    """Injects request_id and request_route into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _current.get()
        record.request_id = context.request_id  # type: ignore[attr-defined]
        record.request_route = context.route  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
