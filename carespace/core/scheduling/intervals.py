"""
Interval conflict checks.

Half-open semantics: [start, end). Intervals that only touch at an
endpoint do not conflict. Used for both space bookings and doctor
schedule entries.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Iterable, Optional

from carespace.core.errors import InvalidInput
from carespace.core.timestamps import parse_time

if TYPE_CHECKING:
    from carespace.models.entities import Booking, ScheduleEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """A half-open time interval."""

    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, duration_hours: float) -> "Interval":
        return cls(start, start + timedelta(hours=duration_hours))

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)


def validate_duration(duration_hours: float, max_hours: Optional[float] = None) -> float:
    """Check a requested duration in hours.

    Args:
        duration_hours: Requested duration
        max_hours: Upper bound, or None for no bound

    Returns:
        The duration as a float

    Raises:
        InvalidInput: If the duration is not a finite positive number
            or exceeds max_hours
    """
    try:
        hours = float(duration_hours)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Duration must be a number, got {duration_hours!r}") from e

    if not math.isfinite(hours) or hours <= 0:
        raise InvalidInput(f"Duration must be a positive number of hours, got {duration_hours}")
    if max_hours is not None and hours > max_hours:
        raise InvalidInput(f"Duration must be at most {max_hours:g} hours, got {hours:g}")
    return hours


def overlaps(
    candidate_start: datetime,
    candidate_end: datetime,
    existing_start: datetime,
    existing_end: datetime,
) -> bool:
    """Check whether two half-open intervals overlap."""
    return candidate_start < existing_end and candidate_end > existing_start


def parse_slot(day: date, slot: str) -> Optional[Interval]:
    """Parse a schedule slot like "09:00-11:00" into an interval on `day`.

    Args:
        day: Date the slot belongs to
        slot: Slot text

    Returns:
        Interval, or None for "OFF" and for slots that cannot be parsed
    """
    text = (slot or "").strip()
    if not text or text.upper() == "OFF":
        return None

    start_text, sep, end_text = text.partition("-")
    if not sep:
        logger.warning(f"Ignoring schedule slot without a range: {slot!r}")
        return None

    try:
        start = datetime.combine(day, parse_time(start_text))
        end = datetime.combine(day, parse_time(end_text))
    except ValueError:
        logger.warning(f"Ignoring unparsable schedule slot: {slot!r}")
        return None

    if end <= start:
        logger.warning(f"Ignoring empty schedule slot: {slot!r}")
        return None

    return Interval(start, end)


def schedule_conflicts(entry: "ScheduleEntry", interval: Interval) -> bool:
    """Check whether a schedule entry blocks the interval.

    An "OFF" entry blocks the whole day it belongs to.
    """
    if entry.is_off:
        return True
    slot = parse_slot(entry.date, entry.time)
    return slot is not None and slot.overlaps(interval)


def conflicting_bookings(
    bookings: Iterable["Booking"],
    interval: Interval,
) -> list["Booking"]:
    """Return the bookings that overlap the interval, in input order."""
    return [
        booking
        for booking in bookings
        if overlaps(interval.start, interval.end, booking.start, booking.end)
    ]
