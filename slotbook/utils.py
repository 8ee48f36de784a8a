"""Shared utilities used across the booking engine."""

from datetime import datetime, time
from typing import Any, Union

_TRUE_VALUES = frozenset({"true", "1", "yes"})
_FALSE_VALUES = frozenset({"false", "0", "no", ""})


def parse_hhmm(value: str) -> time:
    """Parse a wall-clock ``HH:MM`` string.

    Examples:
        >>> parse_hhmm("09:30")
        datetime.time(9, 30)
        >>> parse_hhmm(" 7:05 ")
        datetime.time(7, 5)
    """
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_hhmm(value: Union[time, datetime]) -> str:
    """Render a time or datetime as ``HH:MM``."""
    return value.strftime("%H:%M")


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local wall-clock time.

    Naive values are assumed to already be local and pass through.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def normalize_published(value: Any) -> bool:
    """Normalize the ``published`` flag to a boolean.

    Examples:
        >>> normalize_published("true")
        True
        >>> normalize_published(0)
        False
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Unrecognized published value: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ValueError(f"Unrecognized published value: {value!r}")
