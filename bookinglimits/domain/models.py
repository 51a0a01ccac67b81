"""
Domain models for week partitioning and booking limitation checks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pendulum import DateTime


LIMITATION_FIELDS = {
    "hours_per_day": "hoursPerDay",
    "number_per_day": "numberPerDay",
    "number_per_week": "numberPerWeek",
}


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must not be after end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

    def contains(self, start: DateTime, end: DateTime) -> bool:
        """Check if the interval [start, end] lies fully inside this range."""
        return start >= self.start and end <= self.end

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('DD.MM.YYYY HH:mm')}"


@dataclass(frozen=True)
class WeekWindow(TimeRange):
    """One calendar-week-aligned slice of a query range."""


@dataclass(frozen=True)
class WeekBounds:
    """
    Result of partitioning a query range into weeks.

    ``start`` and ``end`` are the normalized query bounds, ``weeks`` the
    contiguous week windows covering them in chronological order.
    """
    start: DateTime
    end: DateTime
    weeks: List[WeekWindow] = field(default_factory=list)

    def contains(self, start: DateTime, end: DateTime) -> bool:
        """Check if [start, end] lies fully inside the normalized query range."""
        return start >= self.start and end <= self.end


@dataclass(frozen=True)
class Booking:
    """
    The occupied interval of one reservation.

    Bookings come from the marketplace transaction store and are only read
    here, so no ordering invariant is enforced on start and end.
    """
    start: DateTime
    end: DateTime
    booking_id: Optional[str] = None

    def duration_hours(self) -> float:
        """Absolute duration in hours."""
        return abs(self.end.timestamp() - self.start.timestamp()) / 3600

    def weekday_index(self) -> int:
        """Weekday of the start, 0=Sunday .. 6=Saturday."""
        return (self.start.weekday() + 1) % 7


@dataclass
class DayAggregate:
    """Booked hours and booking count accumulated for one weekday."""
    hours_total: float = 0.0
    number_total: int = 0

    def add(self, booking: Booking) -> None:
        self.hours_total += booking.duration_hours()
        self.number_total += 1


def _coerce_limit(value: Any) -> Optional[float]:
    """
    Turn a stored limit into a number.

    Anything that is not a finite number (or a numeric string) means
    "no limit on this axis".
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


@dataclass(frozen=True)
class LimitationConfig:
    """
    Per-listing caps on booking volume.

    ``None`` on a field means no limit on that axis. ``declared`` records
    that the stored data held at least one truthy raw value, so a text
    input of "0" still counts as a cap.
    """
    hours_per_day: Optional[float] = None
    number_per_day: Optional[float] = None
    number_per_week: Optional[float] = None
    declared: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def from_public_data(cls, data: Any) -> Optional["LimitationConfig"]:
        """
        Build a config from a listing's ``bookingLimitations`` value.

        Returns None when the value is absent or not a mapping.
        """
        if not isinstance(data, Mapping):
            return None

        raw_values = {attr: data.get(key) for attr, key in LIMITATION_FIELDS.items()}

        return cls(
            **{attr: _coerce_limit(raw) for attr, raw in raw_values.items()},
            declared=any(bool(raw) for raw in raw_values.values()),
        )

    @classmethod
    def from_form(
        cls,
        unlimited: bool,
        values: Mapping[str, Any] | None = None,
    ) -> "LimitationConfig":
        """
        Build a config from the listing settings form.

        Choosing "unlimited" resets every axis; otherwise the submitted values
        are merged over all-null defaults. Keys may be given in either the
        snake_case or the camelCase spelling.
        """
        if unlimited or not values:
            return cls()

        merged: Dict[str, Optional[float]] = {}
        declared = False
        for attr, key in LIMITATION_FIELDS.items():
            raw = values.get(attr, values.get(key))
            merged[attr] = _coerce_limit(raw)
            declared = declared or bool(raw)
        return cls(**merged, declared=declared)

    def is_unlimited(self) -> bool:
        """True when every axis is unset or zero and no text value was stored."""
        if self.declared:
            return False
        return not any((self.hours_per_day, self.number_per_day, self.number_per_week))

    def to_public_data(self) -> Dict[str, Optional[float]]:
        """Serialize back to the ``bookingLimitations`` payload shape."""
        payload: Dict[str, Optional[float]] = {}
        for attr, key in LIMITATION_FIELDS.items():
            value = getattr(self, attr)
            if value is not None and float(value).is_integer():
                value = int(value)
            payload[key] = value
        return payload


@dataclass
class Listing:
    """
    A marketplace listing.

    Only the limitation config is interpreted; ``raw`` carries the original
    API record through untouched.
    """
    listing_id: str
    title: str = ""
    limitations: Optional[LimitationConfig] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> "Listing":
        """Build a listing from an Integration API ``listing`` resource."""
        identifier = record.get("id")
        if isinstance(identifier, Mapping):
            identifier = identifier.get("uuid")

        attributes = record.get("attributes") or {}
        public_data = attributes.get("publicData") or {}

        return cls(
            listing_id=str(identifier),
            title=attributes.get("title") or "",
            limitations=LimitationConfig.from_public_data(
                public_data.get("bookingLimitations")
            ),
            raw=dict(record),
        )
