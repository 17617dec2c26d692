"""
Booking creation and listing.

`create_booking` is the only writer of the entity store. The conflict
check, the append and the flush all run under the store's write lock,
so two overlapping requests for the same space can never both succeed.
"""

import logging
import threading
import time
from datetime import date, datetime
from typing import Optional, Union

from carespace.core.errors import (
    Conflict,
    InvalidInput,
    InvalidInterval,
    NotBookable,
    NotFound,
    PersistenceUnconfirmed,
    StorageFailure,
)
from carespace.core.scheduling.intervals import (
    Interval,
    conflicting_bookings,
    validate_duration,
)
from carespace.core.timestamps import format_timestamp, parse_date, parse_timestamp
from carespace.infra.store import EntityStore, get_entity_store
from carespace.models.entities import DEFAULT_ACTIVITY, DEFAULT_STATUS, Booking

logger = logging.getLogger(__name__)

BOOKING_ID_PREFIX = "BK"

# A supplied duration may differ from end - start by at most one minute.
DURATION_TOLERANCE_HOURS = 1 / 60


def _coerce_timestamp(value: Union[str, datetime, None], label: str) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    try:
        return parse_timestamp(value or "")
    except ValueError as e:
        raise InvalidInput(f"Invalid or missing {label}: {value!r}") from e


class BookingIdGenerator:
    """Millisecond-timestamp identifiers ("BK1752588000000").

    Strictly increasing within the process, and bumped past any id
    already in use.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, taken: Optional[set[str]] = None) -> str:
        taken = taken or set()
        with self._lock:
            candidate = max(int(self._clock() * 1000), self._last + 1)
            while f"{BOOKING_ID_PREFIX}{candidate}" in taken:
                candidate += 1
            self._last = candidate
            return f"{BOOKING_ID_PREFIX}{candidate}"


class BookingService:
    """Validates and commits bookings against the entity store."""

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        id_generator: Optional[BookingIdGenerator] = None,
    ):
        """Initialize service.

        Args:
            store: Entity store (singleton when not provided)
            id_generator: Booking id source
        """
        self._store = store
        self._ids = id_generator or BookingIdGenerator()

    @property
    def store(self) -> EntityStore:
        return self._store or get_entity_store()

    def create_booking(
        self,
        space_id: str,
        start: Union[str, datetime],
        end: Union[str, datetime],
        doctor_id: Optional[str] = None,
        duration_hours: Optional[float] = None,
        activity: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """Create a booking for a space.

        Args:
            space_id: Space to book
            start: Start instant (ISO string or datetime)
            end: End instant, must be after start
            doctor_id: Optional doctor the booking is for
            duration_hours: Optional duration; must agree with end - start.
                The stored duration is always derived from start/end.
            activity: Activity label (defaults to "General")
            notes: Free-text notes

        Returns:
            The committed Booking

        Raises:
            InvalidInput: Missing space id, unparsable timestamps, or a
                duration that is not finite or disagrees with start/end
            InvalidInterval: end <= start
            NotFound: Unknown space or doctor
            NotBookable: Space is flagged as not bookable
            Conflict: Interval overlaps existing bookings on the space
            PersistenceUnconfirmed: Booking kept in memory but the flush failed
        """
        start_dt = _coerce_timestamp(start, "start time")
        end_dt = _coerce_timestamp(end, "end time")
        if end_dt <= start_dt:
            raise InvalidInterval(
                f"End time {format_timestamp(end_dt)} must be after "
                f"start time {format_timestamp(start_dt)}"
            )

        space_id = (space_id or "").strip()
        if not space_id:
            raise InvalidInput("Space ID is required")

        space = self.store.get_space(space_id)
        if space is None:
            raise NotFound(f"Space '{space_id}' does not exist")
        if not space.bookable:
            raise NotBookable(f"Space '{space_id}' is not available for booking")

        doctor_id = (doctor_id or "").strip() or None
        if doctor_id and self.store.get_doctor(doctor_id) is None:
            raise NotFound(f"Doctor '{doctor_id}' does not exist")

        interval = Interval(start_dt, end_dt)
        if duration_hours is not None:
            given = validate_duration(duration_hours)
            if abs(given - interval.duration_hours) > DURATION_TOLERANCE_HOURS:
                raise InvalidInput(
                    f"Duration {given:g}h does not match the interval "
                    f"({interval.duration_hours:g}h between start and end)"
                )

        with self.store.write_lock():
            conflicts = conflicting_bookings(self.store.bookings_for_space(space_id), interval)
            if conflicts:
                logger.info(
                    f"Booking conflict on {space_id} for "
                    f"{format_timestamp(start_dt)}-{format_timestamp(end_dt)}: "
                    f"{[b.id for b in conflicts]}"
                )
                raise Conflict(
                    "This space is already booked for the requested time period",
                    conflicts,
                )

            booking = Booking(
                id=self._ids.next_id(self.store.booking_ids()),
                space_id=space_id,
                doctor_id=doctor_id,
                start=start_dt,
                end=end_dt,
                duration_hours=interval.duration_hours,
                activity=(activity or "").strip() or DEFAULT_ACTIVITY,
                notes=(notes or "").strip(),
                status=DEFAULT_STATUS,
                created_at=datetime.now(),
            )

            try:
                self.store.add_booking(booking)
            except StorageFailure as e:
                logger.error(f"Booking {booking.id} accepted but not persisted: {e}")
                raise PersistenceUnconfirmed(
                    f"Booking {booking.id} was accepted but could not be saved: {e.message}",
                    booking=booking,
                ) from e

        logger.info(
            f"Created booking {booking.id} for space {space_id} "
            f"({format_timestamp(start_dt)} - {format_timestamp(end_dt)})"
        )
        return booking

    def list_bookings(
        self,
        space_id: Optional[str] = None,
        date: Union[str, date, None] = None,
        doctor_id: Optional[str] = None,
    ) -> list[Booking]:
        """List bookings, optionally filtered, ordered by start time.

        Args:
            space_id: Only bookings for this space
            date: Only bookings starting on this date
            doctor_id: Only bookings assigned to this doctor

        Raises:
            InvalidInput: If the date filter is unparsable
        """
        day = None
        if isinstance(date, datetime):
            day = date.date()
        elif isinstance(date, str) and date:
            try:
                day = parse_date(date)
            except ValueError as e:
                raise InvalidInput(f"Invalid date: {date!r}") from e
        elif date:
            day = date

        bookings = self.store.bookings
        if space_id:
            bookings = [b for b in bookings if b.space_id == space_id]
        if day:
            bookings = [b for b in bookings if b.start.date() == day]
        if doctor_id:
            bookings = [b for b in bookings if b.doctor_id == doctor_id]

        return sorted(bookings, key=lambda b: b.start)


# Singleton
_service: Optional[BookingService] = None


def get_booking_service() -> BookingService:
    """Get singleton BookingService."""
    global _service
    if _service is None:
        _service = BookingService()
    return _service


def reset_booking_service() -> None:
    """Drop the singleton service (useful for testing)."""
    global _service
    _service = None
