"""
Entity models for doctors, spaces, schedule entries and bookings.

Each entity maps to one CSV row. Header names follow the data files
exactly, so `from_row`/`to_row` are the only places that know them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from carespace.core.timestamps import (
    format_timestamp,
    parse_date,
    parse_timestamp,
)


DOCTOR_FIELDS = [
    "Id",
    "Name",
    "Email",
    "Specialty",
    "Dedicated Space in Office",
    "Home Office",
    "Office Id",
]

SPACE_FIELDS = [
    "Space ID",
    "SpaceName",
    "Category",
    "Capacity (people)",
    "Area (sqm)",
    "Bookable",
    "Specialized Equipment",
    "Conference Equip.",
    "uses",
]

SCHEDULE_FIELDS = ["DoctorID", "Date", "Time", "Activity", "Location", "Notes"]

BOOKING_FIELDS = [
    "Booking ID",
    "Space ID",
    "Doctor ID",
    "Start Timestamp",
    "End Timestamp",
    "Duration (hours)",
    "Activity",
    "Notes",
    "Status",
    "Created At",
]

OFF_SLOT = "OFF"
DEFAULT_ACTIVITY = "General"
DEFAULT_STATUS = "Confirmed"


def _flag(value: Optional[str]) -> bool:
    """Parse yes/no style flags ("yes", "Yes", "true", "1")."""
    return (value or "").strip().lower() in ("yes", "y", "true", "1")


def _int(value: Optional[str], default: int = 0) -> int:
    try:
        return int(float((value or "").strip()))
    except ValueError:
        return default


def _float(value: Optional[str], default: float = 0.0) -> float:
    try:
        return float((value or "").strip())
    except ValueError:
        return default


def _format_hours(hours: float) -> str:
    return f"{hours:g}"


@dataclass
class Doctor:
    """Staff member with a specialty. Reference data, never edited here."""

    id: str
    name: str
    specialty: str = ""
    email: str = ""
    has_dedicated_office: bool = False
    has_home_office: bool = False
    office_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Doctor":
        """Create from a CSV row dict."""
        return cls(
            id=(row.get("Id") or "").strip(),
            name=(row.get("Name") or "").strip(),
            specialty=(row.get("Specialty") or "").strip(),
            email=(row.get("Email") or "").strip(),
            has_dedicated_office=_flag(row.get("Dedicated Space in Office")),
            has_home_office=_flag(row.get("Home Office")),
            office_id=(row.get("Office Id") or "").strip() or None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "specialty": self.specialty,
            "has_dedicated_office": self.has_dedicated_office,
            "has_home_office": self.has_home_office,
            "office_id": self.office_id,
        }


@dataclass
class Space:
    """Bookable physical location ("room")."""

    id: str
    name: str
    category: str = ""
    capacity: int = 0
    area: float = 0.0
    bookable: bool = False
    equipment: str = "None"
    conference_equipment: str = "None"
    uses: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "Space":
        """Create from a CSV row dict."""
        return cls(
            id=(row.get("Space ID") or "").strip(),
            name=(row.get("SpaceName") or "").strip(),
            category=(row.get("Category") or "").strip(),
            capacity=max(_int(row.get("Capacity (people)")), 0),
            area=_float(row.get("Area (sqm)")),
            bookable=_flag(row.get("Bookable")),
            equipment=(row.get("Specialized Equipment") or "").strip() or "None",
            conference_equipment=(row.get("Conference Equip.") or "").strip() or "None",
            uses=(row.get("uses") or "").strip(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "capacity": self.capacity,
            "area": self.area,
            "bookable": self.bookable,
            "equipment": self.equipment,
            "conference_equipment": self.conference_equipment,
            "uses": self.uses,
        }


@dataclass
class ScheduleEntry:
    """A doctor's pre-existing commitment on a date.

    `time` is either a "HH:MM-HH:MM" range or "OFF" for the whole day.
    """

    doctor_id: str
    date: date
    time: str
    activity: str = ""
    location: str = ""
    notes: str = ""

    @property
    def is_off(self) -> bool:
        return self.time.strip().upper() == OFF_SLOT

    @classmethod
    def from_row(cls, row: dict) -> "ScheduleEntry":
        """Create from a CSV row dict.

        Raises:
            ValueError: If the date column is not an ISO date
        """
        return cls(
            doctor_id=(row.get("DoctorID") or "").strip(),
            date=parse_date(row.get("Date") or ""),
            time=(row.get("Time") or "").strip(),
            activity=(row.get("Activity") or "").strip(),
            location=(row.get("Location") or "").strip(),
            notes=(row.get("Notes") or "").strip(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "doctor_id": self.doctor_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "activity": self.activity,
            "location": self.location,
            "notes": self.notes,
        }


@dataclass
class Booking:
    """A reservation of one space for one interval."""

    id: str
    space_id: str
    start: datetime
    end: datetime
    doctor_id: Optional[str] = None
    duration_hours: float = 0.0
    activity: str = DEFAULT_ACTIVITY
    notes: str = ""
    status: str = DEFAULT_STATUS
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if not self.duration_hours:
            self.duration_hours = (self.end - self.start).total_seconds() / 3600

    @property
    def date(self) -> date:
        return self.start.date()

    @classmethod
    def from_row(cls, row: dict) -> "Booking":
        """Create from a CSV row dict.

        Raises:
            ValueError: If the start or end timestamp cannot be parsed
        """
        created_raw = (row.get("Created At") or "").strip()
        return cls(
            id=(row.get("Booking ID") or "").strip(),
            space_id=(row.get("Space ID") or "").strip(),
            doctor_id=(row.get("Doctor ID") or "").strip() or None,
            start=parse_timestamp(row.get("Start Timestamp") or ""),
            end=parse_timestamp(row.get("End Timestamp") or ""),
            duration_hours=_float(row.get("Duration (hours)")),
            activity=(row.get("Activity") or "").strip() or DEFAULT_ACTIVITY,
            notes=(row.get("Notes") or "").strip(),
            status=(row.get("Status") or "").strip() or DEFAULT_STATUS,
            created_at=parse_timestamp(created_raw) if created_raw else datetime.now(),
        )

    def to_row(self) -> dict:
        """Convert to a CSV row dict keyed by BOOKING_FIELDS."""
        return {
            "Booking ID": self.id,
            "Space ID": self.space_id,
            "Doctor ID": self.doctor_id or "",
            "Start Timestamp": format_timestamp(self.start),
            "End Timestamp": format_timestamp(self.end),
            "Duration (hours)": _format_hours(self.duration_hours),
            "Activity": self.activity,
            "Notes": self.notes,
            "Status": self.status,
            "Created At": format_timestamp(self.created_at),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "space_id": self.space_id,
            "doctor_id": self.doctor_id,
            "start": format_timestamp(self.start),
            "end": format_timestamp(self.end),
            "duration_hours": self.duration_hours,
            "activity": self.activity,
            "notes": self.notes,
            "status": self.status,
            "created_at": format_timestamp(self.created_at),
        }
