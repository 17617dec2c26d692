"""
Chat Helper Endpoints.

Lookups used by chat front-ends: doctor search, free spaces and
combined suggestions.
"""

from typing import Optional

from fastapi import APIRouter, Query

from carespace.api.envelope import ok, ok_list
from carespace.core.scheduling.availability import get_availability_engine
from carespace.infra.store import get_entity_store

router = APIRouter(prefix="/chatbot", tags=["Chat"])


@router.get("/search-doctors", summary="Search doctors")
def search_doctors(
    query: Optional[str] = Query(default=None, description="Matches name, specialty or email"),
    specialty: Optional[str] = Query(default=None),
) -> dict:
    doctors = get_entity_store().doctors

    if query:
        needle = query.lower()
        doctors = [
            d
            for d in doctors
            if needle in d.name.lower()
            or needle in d.specialty.lower()
            or needle in d.email.lower()
        ]

    if specialty:
        needle = specialty.lower()
        doctors = [d for d in doctors if needle in d.specialty.lower()]

    body = ok_list(doctors)
    body.update({"query": query, "specialty": specialty})
    return body


@router.get("/available-spaces", summary="Find free bookable spaces")
def available_spaces(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    time: Optional[str] = Query(default=None, description="HH:MM"),
    duration: Optional[float] = Query(default=None, description="Duration in hours"),
    category: Optional[str] = Query(default=None),
) -> dict:
    spaces = get_availability_engine().free_spaces(
        date=date, time=time, duration_hours=duration, category=category
    )
    body = ok_list(spaces)
    body.update({"date": date, "time": time, "duration": duration, "category": category})
    return body


@router.get("/suggestions", summary="Doctors, free spaces and alternative slots")
def suggestions(
    specialty: Optional[str] = Query(default=None),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    time: Optional[str] = Query(default=None, description="HH:MM"),
    duration: Optional[float] = Query(default=None, description="Duration in hours"),
) -> dict:
    """
    Suggestions for a chat request.

    Lists doctors of the specialty who have a dedicated office and their
    availability for the day, the spaces free at the requested time, and
    up to three alternative start times for each booked space.
    """
    result = get_availability_engine().suggestions(
        specialty=specialty, date=date, time=time, duration_hours=duration
    )
    data = result.to_dict()
    data["request_details"] = {
        "date": date,
        "time": time,
        "duration": duration,
        "specialty": specialty,
    }
    return ok(data)
