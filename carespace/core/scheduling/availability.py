"""
Availability Engine.

Answers "who and what is free at time T": doctor availability from the
schedule entries, space availability from existing bookings filtered by
activity compatibility, and the optimal doctor/space matches.

Every call is a pure read of the entity store. Not being available is
reported as data, never raised.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Union

from carespace.config import Settings, get_settings
from carespace.core.errors import InvalidInput, NotFound
from carespace.core.scheduling.compatibility import (
    ActivityClassifier,
    SpecialtyMatcher,
    load_rule_tables,
)
from carespace.core.scheduling.intervals import (
    Interval,
    conflicting_bookings,
    schedule_conflicts,
    validate_duration,
)
from carespace.core.scheduling.matching import OptimalMatch, generate_matches
from carespace.core.timestamps import format_timestamp, parse_date, parse_time
from carespace.infra.store import EntityStore, get_entity_store
from carespace.models.entities import Booking, Doctor, ScheduleEntry, Space

logger = logging.getLogger(__name__)

REASON_NO_SCHEDULE = "No schedule found for this date"
REASON_AVAILABLE = "Available during requested time"
REASON_DOCTOR_BUSY = "Busy during requested time"
REASON_DOCTOR_OFF = "Off for the day"
REASON_SPACE_BOOKED = "Booked during requested time"


@dataclass
class DoctorAvailability:
    """Availability of one doctor for the requested interval."""

    doctor: Doctor
    available: bool
    reason: str
    schedule: list[ScheduleEntry] = field(default_factory=list)

    @property
    def doctor_id(self) -> str:
        return self.doctor.id

    @property
    def specialty(self) -> str:
        return self.doctor.specialty

    def to_dict(self) -> dict:
        return {
            "doctor_id": self.doctor.id,
            "doctor_name": self.doctor.name,
            "specialty": self.doctor.specialty,
            "available": self.available,
            "reason": self.reason,
            "schedule": [entry.to_dict() for entry in self.schedule],
        }


@dataclass
class AlternativeSlot:
    """A free interval suggested for a space that is booked at the requested time."""

    space_id: str
    space_name: str
    interval: Interval

    def to_dict(self) -> dict:
        return {
            "space_id": self.space_id,
            "space_name": self.space_name,
            "start_time": self.interval.start.strftime("%H:%M"),
            "end_time": self.interval.end.strftime("%H:%M"),
            "duration_hours": self.interval.duration_hours,
        }


@dataclass
class SpaceAvailability:
    """Availability of one space for the requested interval."""

    space: Space
    available: bool
    reason: str
    conflicting_bookings: list[Booking] = field(default_factory=list)
    alternatives: list[AlternativeSlot] = field(default_factory=list)

    @property
    def space_id(self) -> str:
        return self.space.id

    def to_dict(self) -> dict:
        return {
            "space_id": self.space.id,
            "space_name": self.space.name,
            "category": self.space.category,
            "capacity": self.space.capacity,
            "area": self.space.area,
            "equipment": self.space.equipment,
            "uses": self.space.uses,
            "available": self.available,
            "reason": self.reason,
            "conflicting_bookings": [
                {
                    "booking_id": b.id,
                    "start_time": format_timestamp(b.start),
                    "end_time": format_timestamp(b.end),
                    "duration_hours": b.duration_hours,
                }
                for b in self.conflicting_bookings
            ],
            "alternatives": [slot.to_dict() for slot in self.alternatives],
        }


@dataclass
class AvailabilityResult:
    """Result of a CheckAvailability query."""

    requested: Interval
    duration_hours: float
    doctor_availability: list[DoctorAvailability]
    space_availability: list[SpaceAvailability]
    optimal_matches: list[OptimalMatch]
    specialty: Optional[str] = None
    activity: Optional[str] = None

    @property
    def available_doctors(self) -> list[DoctorAvailability]:
        return [d for d in self.doctor_availability if d.available]

    @property
    def available_spaces(self) -> list[SpaceAvailability]:
        return [s for s in self.space_availability if s.available]

    def summary(self) -> dict[str, int]:
        return {
            "total_doctors": len(self.doctor_availability),
            "total_spaces": len(self.space_availability),
            "available_doctors": len(self.available_doctors),
            "available_spaces": len(self.available_spaces),
            "optimal_matches": len(self.optimal_matches),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "requested_start": format_timestamp(self.requested.start),
            "requested_end": format_timestamp(self.requested.end),
            "requested_duration": self.duration_hours,
            "requested_specialty": self.specialty,
            "requested_activity": self.activity,
            "doctor_availability": [d.to_dict() for d in self.doctor_availability],
            "space_availability": [s.to_dict() for s in self.space_availability],
            "available_doctors": len(self.available_doctors),
            "available_spaces": len(self.available_spaces),
            "optimal_matches": [m.to_dict() for m in self.optimal_matches],
            "summary": self.summary(),
        }


@dataclass
class DoctorDayAvailability:
    """Result of a GetDoctorAvailability query."""

    doctor_id: str
    date: date
    available: bool
    reason: str
    schedule: list[ScheduleEntry] = field(default_factory=list)
    requested: Optional[Interval] = None

    def to_dict(self) -> dict:
        result = {
            "doctor_id": self.doctor_id,
            "date": self.date.isoformat(),
            "available": self.available,
            "reason": self.reason,
            "schedule": [entry.to_dict() for entry in self.schedule],
        }
        if self.requested:
            result["requested_start"] = format_timestamp(self.requested.start)
            result["requested_end"] = format_timestamp(self.requested.end)
        return result


@dataclass
class SpaceAlternatives:
    """Alternative slots for a space that is booked at the requested time."""

    space: Space
    alternatives: list[AlternativeSlot]

    def to_dict(self) -> dict:
        return {
            "space": self.space.to_dict(),
            "alternatives": [slot.to_dict() for slot in self.alternatives],
        }


@dataclass
class Suggestions:
    """Doctors, free spaces and alternative slots for a chat request."""

    doctors: list[Doctor] = field(default_factory=list)
    doctor_availability: list[DoctorDayAvailability] = field(default_factory=list)
    spaces: list[Space] = field(default_factory=list)
    alternative_slots: list[SpaceAlternatives] = field(default_factory=list)
    requested: Optional[Interval] = None

    def message(self) -> str:
        """Markdown summary shown by chat front-ends."""
        lines = []
        if self.doctors:
            lines.append(f"**Available doctors:** {len(self.doctors)} found")
            by_id = {record.doctor_id: record for record in self.doctor_availability}
            for doctor in self.doctors:
                record = by_id.get(doctor.id)
                if record is not None:
                    label = "Available" if record.available else "Unavailable"
                    lines.append(f"- **{doctor.name}** ({doctor.specialty}): {label}")
            lines.append("")

        if self.spaces:
            lines.append(f"**Available spaces:** {len(self.spaces)} found")
        else:
            lines.append("**No spaces available** for the requested time.")
            if self.alternative_slots:
                lines.append("Alternative time slots are available for some spaces.")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        result = {
            "doctors": [doctor.to_dict() for doctor in self.doctors],
            "doctor_availability": [record.to_dict() for record in self.doctor_availability],
            "spaces": [space.to_dict() for space in self.spaces],
            "alternative_slots": [entry.to_dict() for entry in self.alternative_slots],
            "message": self.message(),
        }
        if self.requested:
            result["requested_start"] = format_timestamp(self.requested.start)
            result["requested_end"] = format_timestamp(self.requested.end)
        return result


def _coerce_date(value: Union[str, date, None]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_date(value or "")
    except ValueError as e:
        raise InvalidInput(f"Invalid or missing date: {value!r}") from e


def _coerce_time(value: Union[str, time, None]) -> time:
    if isinstance(value, time):
        return value
    try:
        return parse_time(value or "")
    except ValueError as e:
        raise InvalidInput(f"Invalid or missing time: {value!r}") from e


class AvailabilityEngine:
    """
    Read-side query engine over the entity store.

    Coordinates:
    - Interval conflict checks (doctor schedules and space bookings)
    - Activity compatibility filtering of spaces
    - Optimal-match generation
    """

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        classifier: Optional[ActivityClassifier] = None,
        matcher: Optional[SpecialtyMatcher] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize engine with optional dependencies.

        Args:
            store: Entity store (singleton when not provided)
            classifier: Activity classifier (built-in rules when not provided)
            matcher: Specialty matcher (built-in rules when not provided)
            settings: Application settings
        """
        self._store = store
        self.classifier = classifier or ActivityClassifier()
        self.matcher = matcher or SpecialtyMatcher()
        self.settings = settings or get_settings()

    @property
    def store(self) -> EntityStore:
        return self._store or get_entity_store()

    def requested_interval(
        self,
        day: Union[str, date, None],
        at: Union[str, time, None],
        duration_hours: Optional[float] = None,
    ) -> Interval:
        """Build [start, start + duration) from request parameters.

        Raises:
            InvalidInput: If the date or time is missing or unparsable,
                or the duration is not a positive number within
                `max_duration_hours`
        """
        parsed_date = _coerce_date(day)
        parsed_time = _coerce_time(at)
        if duration_hours is None:
            duration_hours = self.settings.default_duration_hours
        duration_hours = validate_duration(duration_hours, self.settings.max_duration_hours)
        start = datetime.combine(parsed_date, parsed_time)
        return Interval.from_duration(start, duration_hours)

    def check_availability(
        self,
        date: Union[str, date, None],
        time: Union[str, time, None],
        duration_hours: Optional[float] = None,
        specialty: Optional[str] = None,
        activity: Optional[str] = None,
    ) -> AvailabilityResult:
        """Compute doctor and space availability for a requested slot.

        Args:
            date: Requested date (ISO string or date)
            time: Requested start time ("HH:MM" or time)
            duration_hours: Requested duration (settings default when None)
            specialty: Optional specialty substring filter for doctors
            activity: Optional activity label used to filter spaces

        Returns:
            AvailabilityResult

        Raises:
            InvalidInput: If the date or time is missing or unparsable
        """
        interval = self.requested_interval(date, time, duration_hours)
        day = interval.start.date()

        doctors = self.store.doctors
        if specialty:
            needle = specialty.lower()
            doctors = [d for d in doctors if needle in d.specialty.lower()]

        doctor_availability = [
            self._doctor_availability(doctor, day, interval) for doctor in doctors
        ]

        spaces = [s for s in self.store.spaces if s.bookable]
        if activity:
            spaces = self.classifier.filter_spaces(activity, spaces)

        space_availability = [
            self._space_availability(space, interval) for space in spaces
        ]

        matches = generate_matches(doctor_availability, space_availability, self.matcher)

        result = AvailabilityResult(
            requested=interval,
            duration_hours=interval.duration_hours,
            doctor_availability=doctor_availability,
            space_availability=space_availability,
            optimal_matches=matches,
            specialty=specialty,
            activity=activity,
        )

        logger.debug(
            f"Availability {format_timestamp(interval.start)} "
            f"+{interval.duration_hours:g}h: {result.summary()}"
        )
        return result

    def get_doctor_availability(
        self,
        doctor_id: str,
        date: Union[str, date, None],
        time: Union[str, time, None] = None,
        duration_hours: Optional[float] = None,
    ) -> DoctorDayAvailability:
        """Availability of one doctor on one date.

        With a time, availability is judged against [time, time + duration).
        Without one, the doctor is available unless an entry marks the day
        "OFF"; a day with no entries is available.

        Raises:
            NotFound: If the doctor does not exist
            InvalidInput: If the date or time is unparsable
        """
        doctor = self.store.get_doctor(doctor_id)
        if doctor is None:
            raise NotFound(f"Doctor '{doctor_id}' does not exist")

        day = _coerce_date(date)
        entries = self.store.schedule_for(doctor.id, day)

        if time is not None:
            interval = self.requested_interval(day, time, duration_hours)
            record = self._doctor_availability(doctor, day, interval)
            return DoctorDayAvailability(
                doctor_id=doctor.id,
                date=day,
                available=record.available,
                reason=record.reason,
                schedule=entries,
                requested=interval,
            )

        if not entries:
            return DoctorDayAvailability(doctor.id, day, True, REASON_NO_SCHEDULE)

        off = any(entry.is_off for entry in entries)
        return DoctorDayAvailability(
            doctor_id=doctor.id,
            date=day,
            available=not off,
            reason=REASON_DOCTOR_OFF if off else "Scheduled to work this day",
            schedule=entries,
        )

    def free_spaces(
        self,
        date: Union[str, date, None] = None,
        time: Union[str, time, None] = None,
        duration_hours: Optional[float] = None,
        category: Optional[str] = None,
    ) -> list[Space]:
        """Bookable spaces, optionally by category and free at a time.

        The booking check applies only when both date and time are given.

        Raises:
            InvalidInput: If the date, time or duration is invalid
        """
        if duration_hours is not None:
            validate_duration(duration_hours, self.settings.max_duration_hours)

        spaces = [s for s in self.store.spaces if s.bookable]
        if category:
            needle = category.lower()
            spaces = [s for s in spaces if needle in s.category.lower()]

        if date and time:
            interval = self.requested_interval(date, time, duration_hours)
            spaces = [
                s
                for s in spaces
                if not conflicting_bookings(self.store.bookings_for_space(s.id), interval)
            ]
        return spaces

    def suggestions(
        self,
        specialty: Optional[str] = None,
        date: Union[str, date, None] = None,
        time: Union[str, time, None] = None,
        duration_hours: Optional[float] = None,
    ) -> Suggestions:
        """Doctors, free spaces and alternative slots for a chat request.

        Doctors are those of the specialty with a dedicated office, with
        their day availability when a date is given. Free spaces and
        alternative slots for booked spaces need both date and time.

        Raises:
            InvalidInput: If the date, time or duration is invalid
        """
        if duration_hours is not None:
            validate_duration(duration_hours, self.settings.max_duration_hours)
        day = _coerce_date(date) if date else None

        result = Suggestions()
        if specialty:
            needle = specialty.lower()
            result.doctors = [
                d
                for d in self.store.doctors
                if d.has_dedicated_office and needle in d.specialty.lower()
            ]
            if day:
                result.doctor_availability = [
                    self.get_doctor_availability(d.id, day) for d in result.doctors
                ]

        if day and time:
            interval = self.requested_interval(day, time, duration_hours)
            result.requested = interval
            for space in self.store.spaces:
                if not space.bookable:
                    continue
                if not conflicting_bookings(self.store.bookings_for_space(space.id), interval):
                    result.spaces.append(space)
                    continue
                alternatives = self.suggest_alternatives(space, day, interval.duration_hours)
                if alternatives:
                    result.alternative_slots.append(SpaceAlternatives(space, alternatives))

        logger.debug(
            f"Suggestions for specialty={specialty!r} date={date} time={time}: "
            f"{len(result.doctors)} doctors, {len(result.spaces)} spaces, "
            f"{len(result.alternative_slots)} with alternatives"
        )
        return result

    def suggest_alternatives(
        self,
        space: Space,
        day: date,
        duration_hours: float,
    ) -> list[AlternativeSlot]:
        """Free hourly start times for a space on a date.

        Probes every whole hour from `alternative_slot_start_hour` to
        `alternative_slot_end_hour` inclusive and keeps at most
        `max_alternative_slots` conflict-free intervals.
        """
        bookings = self.store.bookings_for_space(space.id)
        slots: list[AlternativeSlot] = []

        for hour in range(
            self.settings.alternative_slot_start_hour,
            self.settings.alternative_slot_end_hour + 1,
        ):
            if len(slots) >= self.settings.max_alternative_slots:
                break
            start = datetime.combine(day, time(hour=hour))
            candidate = Interval.from_duration(start, duration_hours)
            if not conflicting_bookings(bookings, candidate):
                slots.append(AlternativeSlot(space.id, space.name, candidate))

        return slots

    def _doctor_availability(
        self,
        doctor: Doctor,
        day: date,
        interval: Interval,
    ) -> DoctorAvailability:
        entries = self.store.schedule_for(doctor.id, day)

        if not entries:
            return DoctorAvailability(doctor, True, REASON_NO_SCHEDULE)

        busy = any(schedule_conflicts(entry, interval) for entry in entries)
        return DoctorAvailability(
            doctor=doctor,
            available=not busy,
            reason=REASON_DOCTOR_BUSY if busy else REASON_AVAILABLE,
            schedule=entries,
        )

    def _space_availability(self, space: Space, interval: Interval) -> SpaceAvailability:
        conflicts = conflicting_bookings(self.store.bookings_for_space(space.id), interval)

        if not conflicts:
            return SpaceAvailability(space, True, REASON_AVAILABLE)

        return SpaceAvailability(
            space=space,
            available=False,
            reason=REASON_SPACE_BOOKED,
            conflicting_bookings=conflicts,
            alternatives=self.suggest_alternatives(
                space, interval.start.date(), interval.duration_hours
            ),
        )


# Singleton
_engine: Optional[AvailabilityEngine] = None


def get_availability_engine() -> AvailabilityEngine:
    """Get singleton AvailabilityEngine configured from settings."""
    global _engine
    if _engine is None:
        settings = get_settings()
        tables = load_rule_tables(settings.activity_rules_file)
        _engine = AvailabilityEngine(
            classifier=ActivityClassifier(tables.activity_rules),
            matcher=SpecialtyMatcher(tables.specialty_rules),
            settings=settings,
        )
    return _engine


def reset_availability_engine() -> None:
    """Drop the singleton engine (useful for testing)."""
    global _engine
    _engine = None
