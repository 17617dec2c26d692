"""
Domain errors for availability checks and bookings.

The availability engine reports "not available" as data. Only the
booking path and input validation raise these.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from carespace.models.entities import Booking


class CareSpaceError(Exception):
    """Base class for all domain errors."""

    error = "Server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(CareSpaceError):
    """Missing or malformed date, time, duration or interval."""

    error = "Invalid input"


class InvalidInterval(InvalidInput):
    """Booking interval where end <= start."""

    error = "Invalid interval"


class NotFound(CareSpaceError):
    """Referenced space or doctor does not exist."""

    error = "Not found"


class NotBookable(CareSpaceError):
    """Space exists but is flagged as not bookable."""

    error = "Space not bookable"


class Conflict(CareSpaceError):
    """Requested interval overlaps existing bookings on the space."""

    error = "Booking conflict"

    def __init__(self, message: str, conflicts: list["Booking"]):
        super().__init__(message)
        self.conflicts = conflicts


class StorageFailure(CareSpaceError):
    """Reading or flushing a backing file failed."""

    error = "Storage failure"


class PersistenceUnconfirmed(StorageFailure):
    """Booking was accepted in memory but the flush to disk failed."""

    error = "Persistence unconfirmed"

    def __init__(self, message: str, booking: Optional["Booking"] = None):
        super().__init__(message)
        self.booking = booking
