"""
Recurring weekly open hours for a bookable service.

A WeeklyAvailability maps each weekday to an ordered run of wall-clock
TimeRanges. Validation happens at construction, so every instance that
exists is well-formed: start < end for each range, and no two ranges of
the same day overlap. Days are independent of each other.

Usage:
    weekly = WeeklyAvailability.from_dict({
        "monday": [{"start": "09:00", "end": "12:00"}, {"start": "13:00", "end": "15:00"}],
    })
    weekly.is_day_active(Weekday.MONDAY)   # True
    weekly.ranges_for("tuesday")           # ()
"""

import logging
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Mapping, Optional, Union

from slotbook.errors import InvalidAvailabilityError
from slotbook.utils import format_hhmm, parse_hhmm

logger = logging.getLogger(__name__)


class Weekday(str, Enum):
    """Weekday keys, ordered as ``date.weekday()`` numbers them."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        return _WEEKDAY_ORDER[day.weekday()]

    @classmethod
    def coerce(cls, value: Union["Weekday", str]) -> "Weekday":
        if isinstance(value, Weekday):
            return value
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise InvalidAvailabilityError(
                f"Unknown weekday: {value!r}", details={"day": value}
            ) from None


_WEEKDAY_ORDER: tuple[Weekday, ...] = tuple(Weekday)


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open wall-clock interval ``[start, end)``."""
    start: time
    end: time

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeRange":
        try:
            return cls(parse_hhmm(start), parse_hhmm(end))
        except (ValueError, AttributeError):
            raise InvalidAvailabilityError(
                f"Times must be HH:MM, got {start!r}-{end!r}",
                details={"start": start, "end": end},
            ) from None

    def to_dict(self) -> dict[str, str]:
        return {"start": format_hhmm(self.start), "end": format_hhmm(self.end)}

    def __str__(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


# Range a newly opened day starts with in the admin editor.
DEFAULT_DAY_RANGE = TimeRange(time(9, 0), time(18, 0))


def _validate_day(day: Weekday, ranges: tuple[TimeRange, ...]) -> tuple[TimeRange, ...]:
    """Return the day's ranges sorted by start, or raise on a bad range."""
    for r in ranges:
        if r.start >= r.end:
            raise InvalidAvailabilityError(
                f"Range {r} on {day.value} must start before it ends",
                details={"day": day.value, "range": r.to_dict()},
            )

    ordered = tuple(sorted(ranges))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise InvalidAvailabilityError(
                f"Ranges {previous} and {current} overlap on {day.value}",
                details={
                    "day": day.value,
                    "ranges": [previous.to_dict(), current.to_dict()],
                },
            )
    return ordered


@dataclass(frozen=True)
class WeeklyAvailability:
    """Validated, immutable weekly open-hours schedule."""

    days: Mapping[Weekday, tuple[TimeRange, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[Weekday, tuple[TimeRange, ...]] = {}
        for key, ranges in self.days.items():
            day = Weekday.coerce(key)
            normalized[day] = _validate_day(day, tuple(ranges))
        object.__setattr__(self, "days", normalized)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WeeklyAvailability":
        """Build from the ``{"monday": [{"start": .., "end": ..}], ..}`` document.

        ``None`` means the service has no open hours at all.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidAvailabilityError(
                f"Availability must be a mapping of weekdays, got {type(data).__name__}"
            )

        days: dict[Weekday, tuple[TimeRange, ...]] = {}
        for key, raw_ranges in data.items():
            day = Weekday.coerce(key)
            if raw_ranges is None:
                raw_ranges = []
            if not isinstance(raw_ranges, (list, tuple)):
                raise InvalidAvailabilityError(
                    f"Ranges for {day.value} must be a list",
                    details={"day": day.value},
                )
            parsed = []
            for raw in raw_ranges:
                if not isinstance(raw, Mapping) or "start" not in raw or "end" not in raw:
                    raise InvalidAvailabilityError(
                        f"Each range on {day.value} needs 'start' and 'end'",
                        details={"day": day.value},
                    )
                parsed.append(TimeRange.parse(raw["start"], raw["end"]))
            days[day] = tuple(parsed)
        return cls(days)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        """Full seven-day document; closed days map to an empty list."""
        return {
            day.value: [r.to_dict() for r in self.days.get(day, ())]
            for day in Weekday
        }

    def ranges_for(self, day: Union[Weekday, str]) -> tuple[TimeRange, ...]:
        """Ordered ranges for a weekday, empty when closed."""
        return self.days.get(Weekday.coerce(day), ())

    def is_day_active(self, day: Union[Weekday, str]) -> bool:
        """True when the weekday has at least one open range."""
        return bool(self.ranges_for(day))

    def active_days(self) -> list[Weekday]:
        return [day for day in Weekday if self.is_day_active(day)]
