"""Availability check endpoint."""

from typing import Optional

from fastapi import APIRouter, Query

from carespace.api.envelope import ok
from carespace.core.scheduling.availability import get_availability_engine

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.get(
    "/check",
    summary="Check doctor and space availability",
    description=(
        "Availability of every doctor and every compatible bookable space "
        "for [date time, date time + duration), with suggested matches."
    ),
)
def check_availability(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    time: Optional[str] = Query(default=None, description="HH:MM"),
    duration: Optional[float] = Query(default=None, description="Duration in hours"),
    specialty: Optional[str] = Query(default=None),
    activity: Optional[str] = Query(default=None),
) -> dict:
    result = get_availability_engine().check_availability(
        date=date,
        time=time,
        duration_hours=duration,
        specialty=specialty,
        activity=activity,
    )
    return ok(result.to_dict())
