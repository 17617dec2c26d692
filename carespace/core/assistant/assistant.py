"""
Chat Assistant.

Turns a free-text message into a reply: lists a doctor's own bookings,
runs an availability check for a complete booking request, or answers
with a template. Replies are markdown.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from carespace.core.assistant.slots import (
    ChatIntent,
    ExtractedRequest,
    RequestExtractor,
)
from carespace.core.scheduling.availability import (
    AvailabilityEngine,
    AvailabilityResult,
    get_availability_engine,
)
from carespace.core.scheduling.booking import BookingService, get_booking_service
from carespace.models.entities import Booking

logger = logging.getLogger(__name__)


TEMPLATES = {
    ChatIntent.GREETING: (
        "Hello! I can help you find available doctors and spaces. "
        "Tell me what you need, for example: "
        "\"I need a room for a consultation tomorrow at 2 PM\"."
    ),
    ChatIntent.HELP: (
        "I can:\n"
        "- find free spaces for an activity (\"labwork on 2025-07-15 from 2 to 4\")\n"
        "- list your bookings (\"show my bookings\")\n"
        "Include the activity, the date and the time in your request."
    ),
    ChatIntent.BOOKING: (
        "To book a space, tell me the activity, the date and the time, "
        "for example \"research tomorrow at 10am for 2 hours\"."
    ),
    ChatIntent.SCHEDULE: (
        "Ask for \"my bookings\" to see your upcoming space bookings."
    ),
    ChatIntent.AVAILABILITY: (
        "Which date and time should I check? "
        "For example \"consultation on July 15th at 9am\"."
    ),
    ChatIntent.UNKNOWN: (
        "I'm not sure I understood. Try \"help\" to see what I can do."
    ),
}


@dataclass
class ChatReply:
    """Assistant reply with the request it was built from."""

    message: str
    request: ExtractedRequest
    availability: Optional[AvailabilityResult] = None

    @property
    def intent(self) -> str:
        return self.request.intent.value

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "intent": self.intent,
            "request": self.request.to_dict(),
            "availability": self.availability.to_dict() if self.availability else None,
        }


class ChatAssistant:
    """Answers chat messages using the availability engine and bookings."""

    def __init__(
        self,
        engine: Optional[AvailabilityEngine] = None,
        booking_service: Optional[BookingService] = None,
        extractor: Optional[RequestExtractor] = None,
    ):
        """Initialize assistant.

        Args:
            engine: Availability engine (singleton if not provided)
            booking_service: Booking service (singleton if not provided)
            extractor: Request extractor (engine's activity rules if not provided)
        """
        self.engine = engine or get_availability_engine()
        self.booking_service = booking_service or get_booking_service()
        self.extractor = extractor or RequestExtractor(self.engine.classifier)

    def reply(
        self,
        message: str,
        doctor_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ChatReply:
        """Reply to a chat message.

        Args:
            message: User's message
            doctor_id: Doctor the user speaks for, needed for "my bookings"
            today: Reference date for relative dates

        Returns:
            ChatReply
        """
        request = self.extractor.extract(message, today)
        logger.info(f"Chat intent: {request.intent.value}")

        if request.intent == ChatIntent.MY_BOOKINGS:
            return ChatReply(self._my_bookings(doctor_id), request)

        if request.intent == ChatIntent.BOOKING_REQUEST:
            missing = self._missing_pieces(request)
            if missing:
                return ChatReply(self._ask_for(missing, request), request)

            result = self.engine.check_availability(
                date=request.requested_date,
                time=request.requested_time,
                duration_hours=request.duration_hours,
                specialty=self.engine.classifier.specialty_for(request.activity),
                activity=request.activity,
            )
            return ChatReply(self._format_availability(result), request, result)

        return ChatReply(TEMPLATES[request.intent], request)

    def _missing_pieces(self, request: ExtractedRequest) -> list[str]:
        missing = []
        if not request.activity:
            missing.append("the activity")
        if request.requested_date is None:
            missing.append("the date")
        if request.requested_time is None:
            missing.append("the time")
        return missing

    def _ask_for(self, missing: list[str], request: ExtractedRequest) -> str:
        known = []
        if request.activity:
            known.append(f"activity **{request.activity}**")
        if request.requested_date:
            known.append(f"date **{request.requested_date.isoformat()}**")
        if request.requested_time:
            known.append(f"time **{request.requested_time.strftime('%H:%M')}**")

        prefix = f"Got {', '.join(known)}. " if known else ""
        return f"{prefix}Please tell me {' and '.join(missing)}."

    def _my_bookings(self, doctor_id: Optional[str]) -> str:
        if not doctor_id:
            return "Tell me which doctor you are so I can look up your bookings."

        bookings = self.booking_service.list_bookings(doctor_id=doctor_id)
        if not bookings:
            return "You have no space bookings."

        by_date: dict[date, list[Booking]] = {}
        for booking in bookings:
            by_date.setdefault(booking.date, []).append(booking)

        store = self.booking_service.store
        lines = [f"**Your bookings** ({len(bookings)}):", ""]
        for day, day_bookings in by_date.items():
            lines.append(f"**{day.strftime('%A, %B %d, %Y')}**")
            for booking in day_bookings:
                space = store.get_space(booking.space_id)
                space_name = space.name if space else booking.space_id
                lines.append(
                    f"- {booking.start.strftime('%H:%M')}-{booking.end.strftime('%H:%M')} "
                    f"{space_name} ({booking.activity})"
                )
            lines.append("")
        return "\n".join(lines).rstrip()

    def _format_availability(self, result: AvailabilityResult) -> str:
        start = result.requested.start
        header = (
            f"Availability for **{result.activity or 'any activity'}** on "
            f"{start.strftime('%Y-%m-%d')} at {start.strftime('%H:%M')} "
            f"({result.duration_hours:g}h):"
        )
        lines = [header, ""]

        doctors = result.available_doctors
        if doctors:
            lines += ["**Available doctors**", "", "| ID | Name | Specialty |", "|---|---|---|"]
            lines += [
                f"| {d.doctor.id} | {d.doctor.name} | {d.doctor.specialty} |" for d in doctors
            ]
        else:
            lines.append("No doctors are available at that time.")
        lines.append("")

        spaces = result.available_spaces
        if spaces:
            lines += ["**Available spaces**", "", "| ID | Name | Category | Capacity |", "|---|---|---|---|"]
            lines += [
                f"| {s.space.id} | {s.space.name} | {s.space.category} | {s.space.capacity} |"
                for s in spaces
            ]
        else:
            lines.append("No available spaces found. Try a different time.")
            alternatives = [
                slot for s in result.space_availability for slot in s.alternatives
            ]
            if alternatives:
                lines += ["", "**Free slots the same day**"]
                lines += [
                    f"- {slot.space_name}: {slot.interval.start.strftime('%H:%M')}-"
                    f"{slot.interval.end.strftime('%H:%M')}"
                    for slot in alternatives
                ]
        lines.append("")

        if result.optimal_matches:
            lines += ["**Suggested matches**", ""]
            lines += [
                f"- {m.doctor.doctor.name} in {m.space.space.name}"
                for m in result.optimal_matches
            ]

        return "\n".join(lines).rstrip()


# Singleton
_assistant: Optional[ChatAssistant] = None


def get_chat_assistant() -> ChatAssistant:
    """Get singleton ChatAssistant."""
    global _assistant
    if _assistant is None:
        _assistant = ChatAssistant()
    return _assistant


def reset_chat_assistant() -> None:
    """Drop the singleton assistant (useful for testing)."""
    global _assistant
    _assistant = None
