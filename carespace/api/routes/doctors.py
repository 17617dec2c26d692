"""
Doctor Endpoints.

Doctor directory, schedule entries and per-day availability.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from carespace.api.envelope import ok, ok_list
from carespace.core.errors import InvalidInput, NotFound
from carespace.core.scheduling.availability import get_availability_engine
from carespace.core.timestamps import parse_date
from carespace.infra.store import get_entity_store
from carespace.models.entities import Doctor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])
calendars_router = APIRouter(prefix="/doctor-calendars", tags=["Doctors"])


def _require_doctor(doctor_id: str) -> Doctor:
    doctor = get_entity_store().get_doctor(doctor_id)
    if doctor is None:
        raise NotFound(f"Doctor '{doctor_id}' does not exist")
    return doctor


@router.get("", summary="List all doctors")
def list_doctors() -> dict:
    return ok_list(get_entity_store().doctors)


@router.get("/available", summary="Doctors with a dedicated office")
@router.get("/with-office", include_in_schema=False)
def doctors_with_office() -> dict:
    doctors = [d for d in get_entity_store().doctors if d.has_dedicated_office]
    return ok_list(doctors)


@router.get("/specialty/{specialty}", summary="Doctors by specialty")
def doctors_by_specialty(specialty: str) -> dict:
    """Case-insensitive substring match on the specialty."""
    needle = specialty.lower()
    doctors = [d for d in get_entity_store().doctors if needle in d.specialty.lower()]
    return ok_list(doctors)


@router.get("/{doctor_id}", summary="Get a doctor")
def get_doctor(doctor_id: str) -> dict:
    return ok(_require_doctor(doctor_id).to_dict())


@router.get("/{doctor_id}/calendar", summary="A doctor's schedule entries")
def doctor_calendar(doctor_id: str) -> dict:
    doctor = _require_doctor(doctor_id)
    entries = get_entity_store().schedule_for(doctor.id)
    if not entries:
        raise NotFound(f"No calendar entries found for doctor '{doctor_id}'")
    return ok_list(entries)


@router.get("/{doctor_id}/calendar/range", summary="Schedule entries in a date range")
def doctor_calendar_range(
    doctor_id: str,
    start_date: str = Query(..., description="First date, YYYY-MM-DD"),
    end_date: str = Query(..., description="Last date (inclusive), YYYY-MM-DD"),
) -> dict:
    doctor = _require_doctor(doctor_id)
    try:
        first = parse_date(start_date)
        last = parse_date(end_date)
    except ValueError as e:
        raise InvalidInput(f"Invalid date range: {start_date!r} - {end_date!r}") from e

    entries = [
        entry
        for entry in get_entity_store().schedule_for(doctor.id)
        if first <= entry.date <= last
    ]
    return ok_list(entries)


@router.get("/{doctor_id}/availability/{date}", summary="Doctor availability on a date")
def doctor_availability(
    doctor_id: str,
    date: str,
    time: Optional[str] = Query(default=None, description="Start time, HH:MM"),
    duration: Optional[float] = Query(default=None, description="Duration in hours"),
) -> dict:
    result = get_availability_engine().get_doctor_availability(
        doctor_id, date, time=time, duration_hours=duration
    )
    return ok(result.to_dict())


@calendars_router.get("", summary="All doctor schedule entries")
def list_doctor_calendars() -> dict:
    return ok_list(get_entity_store().schedule)
