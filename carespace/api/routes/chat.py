"""
Chat API Endpoint.

Handles conversational messages: booking requests, "my bookings" and
small talk, answered by the chat assistant.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from carespace.core.assistant import get_chat_assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


class ChatRequest(BaseModel):
    """Chat message request."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="User's message",
        examples=["I need a room for labwork tomorrow from 2 to 4"],
    )
    doctor_id: Optional[str] = Field(
        default=None,
        description="Doctor the user speaks for, used for \"my bookings\"",
        examples=["D1"],
    )


class ChatResponse(BaseModel):
    """Chat response."""

    message: str = Field(
        ...,
        description="Assistant reply (markdown)",
    )
    intent: str = Field(
        ...,
        description="Detected intent of the message",
    )
    request: dict = Field(
        default_factory=dict,
        description="Booking request pieces extracted from the message",
    )
    availability: Optional[dict] = Field(
        default=None,
        description="Availability result when a complete request was checked",
    )
    processing_time_ms: Optional[float] = Field(
        default=None,
        description="Processing time in milliseconds",
    )


@router.post(
    "",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    summary="Send a chat message",
    description="Send a message to the assistant and get a reply.",
)
def chat(request: ChatRequest) -> ChatResponse:
    """
    Process a chat message.

    A message carrying an activity, a date and a time runs a full
    availability check; anything less gets a prompt for the missing pieces.
    """
    start_time = time.time()
    reply = get_chat_assistant().reply(request.message, doctor_id=request.doctor_id)
    elapsed_ms = (time.time() - start_time) * 1000

    return ChatResponse(
        message=reply.message,
        intent=reply.intent,
        request=reply.request.to_dict(),
        availability=reply.availability.to_dict() if reply.availability else None,
        processing_time_ms=round(elapsed_ms, 2),
    )
