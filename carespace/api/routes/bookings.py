"""
Booking Endpoints.

Listing and creation of space bookings. Creation is the only write
operation of the API.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from carespace.api.envelope import ok, ok_list
from carespace.core.scheduling.booking import get_booking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


class CreateBookingRequest(BaseModel):
    """Booking creation request.

    Missing or malformed timestamps are reported by the booking service
    as invalid input, so every field is optional at this layer.
    """

    space_id: Optional[str] = Field(
        default=None,
        description="Space to book",
        examples=["S101"],
    )
    doctor_id: Optional[str] = Field(
        default=None,
        description="Doctor the booking is for",
        examples=["D1"],
    )
    start_time: Optional[str] = Field(
        default=None,
        description="Start timestamp, ISO 8601",
        examples=["2025-07-15T14:00:00"],
    )
    end_time: Optional[str] = Field(
        default=None,
        description="End timestamp, ISO 8601, after start_time",
        examples=["2025-07-15T16:00:00"],
    )
    duration: Optional[float] = Field(
        default=None,
        description="Duration in hours; must match the timestamps when given",
    )
    activity: Optional[str] = Field(default=None, examples=["Consultation"])
    notes: Optional[str] = Field(default=None, max_length=2000)


@router.get("", summary="List bookings")
def list_bookings(
    space_id: Optional[str] = Query(default=None),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    doctor_id: Optional[str] = Query(default=None),
) -> dict:
    bookings = get_booking_service().list_bookings(
        space_id=space_id, date=date, doctor_id=doctor_id
    )
    return ok_list(bookings)


@router.get("/space/{space_id}", summary="Bookings for a space")
def bookings_for_space(space_id: str) -> dict:
    return ok_list(get_booking_service().list_bookings(space_id=space_id))


@router.get("/date/{date}", summary="Bookings starting on a date")
def bookings_for_date(date: str) -> dict:
    return ok_list(get_booking_service().list_bookings(date=date))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a booking",
    responses={
        400: {"description": "Invalid input, invalid interval or space not bookable"},
        404: {"description": "Unknown space or doctor"},
        409: {"description": "Overlaps an existing booking on the space"},
        500: {"description": "Booking accepted but not persisted"},
    },
)
def create_booking(request: CreateBookingRequest) -> dict:
    """
    Create a booking.

    The overlap check and the write are atomic: of two overlapping
    requests for the same space, exactly one succeeds.
    """
    booking = get_booking_service().create_booking(
        space_id=request.space_id,
        start=request.start_time,
        end=request.end_time,
        doctor_id=request.doctor_id,
        duration_hours=request.duration,
        activity=request.activity,
        notes=request.notes,
    )
    return ok(booking.to_dict())
