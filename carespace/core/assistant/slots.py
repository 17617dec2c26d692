"""
Heuristic request extraction for the chat front-end.

Pulls a booking request (activity, date, time, duration) and a coarse
intent out of a free-text message. This is a convenience layer: it
recognises a handful of phrasings and leaves everything else unset.

Recognised:
- dates: "today", "tomorrow", "2025-07-15", "July 15th"
- times: "2 PM", "at 9am", "14:00", "2:30pm"
- ranges: "from 2 to 4" (bare hours 1-7 read as PM, sets the duration)
- durations: "2 hours", "1.5 hrs", "30 minutes"
- activities: any keyword of the activity rule table
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

from carespace.core.scheduling.compatibility import ActivityClassifier

logger = logging.getLogger(__name__)


class ChatIntent(str, Enum):
    """What the user is asking for."""

    GREETING = "greeting"
    HELP = "help"
    MY_BOOKINGS = "my_bookings"
    BOOKING_REQUEST = "booking_request"
    BOOKING = "booking"
    SCHEDULE = "schedule"
    AVAILABILITY = "availability"
    UNKNOWN = "unknown"


MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

MY_BOOKINGS_PHRASES = (
    "my booking",
    "my schedule",
    "my appointments",
    "my calendar",
    "my meetings",
    "what do i have",
    "when am i",
)

# (pattern, intent), checked in order after bookings and requests
KEYWORD_INTENTS: list[tuple[str, ChatIntent]] = [
    (r"\b(hello|hi|hey)\b", ChatIntent.GREETING),
    (r"\bhelp\b", ChatIntent.HELP),
    (r"\bbook(ing)?\b", ChatIntent.BOOKING),
    (r"\b(schedule|appointments?)\b", ChatIntent.SCHEDULE),
    (r"\b(availability|available)\b", ChatIntent.AVAILABILITY),
]

ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
MONTH_DAY_RE = re.compile(
    r"\b(" + "|".join(MONTHS) + r")\s+(\d{1,2})(?:st|nd|rd|th)?\b", re.IGNORECASE
)
RANGE_RE = re.compile(
    r"\bfrom\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*(?:to|-)\s*(\d{1,2})(?::(\d{2}))?\s*(am|pm)?",
    re.IGNORECASE,
)
AMPM_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE)
CLOCK_RE = re.compile(r"(?<![\d-])(\d{1,2}):(\d{2})(?![\d-])")
HOURS_RE = re.compile(r"\b(\d+(?:\.\d+)?)\s*(?:hours?|hrs?)\b", re.IGNORECASE)
MINUTES_RE = re.compile(r"\b(\d+)\s*(?:minutes?|mins?)\b", re.IGNORECASE)


@dataclass
class ExtractedRequest:
    """Booking request pieces found in a message."""

    intent: ChatIntent = ChatIntent.UNKNOWN
    activity: Optional[str] = None
    requested_date: Optional[date] = None
    requested_time: Optional[time] = None
    duration_hours: Optional[float] = None
    date_raw: Optional[str] = None
    time_raw: Optional[str] = None

    @property
    def has_datetime(self) -> bool:
        return self.requested_date is not None or self.requested_time is not None

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        result = {"intent": self.intent.value}
        if self.activity:
            result["activity"] = self.activity
        if self.requested_date:
            result["date"] = self.requested_date.isoformat()
        if self.requested_time:
            result["time"] = self.requested_time.strftime("%H:%M")
        if self.duration_hours is not None:
            result["duration_hours"] = self.duration_hours
        if self.date_raw:
            result["date_raw"] = self.date_raw
        if self.time_raw:
            result["time_raw"] = self.time_raw
        return result


def _to_24h(hour: int, ampm: Optional[str]) -> int:
    if ampm:
        ampm = ampm.lower()
        if ampm == "pm" and hour != 12:
            return hour + 12
        if ampm == "am" and hour == 12:
            return 0
        return hour
    # Bare hours in a range: 1-7 are afternoon hours ("from 2 to 4")
    if 1 <= hour <= 7:
        return hour + 12
    return hour


class RequestExtractor:
    """Keyword and regex based extraction of booking requests."""

    def __init__(self, classifier: Optional[ActivityClassifier] = None):
        """Initialize extractor.

        Args:
            classifier: Activity rules whose keywords name activities
        """
        self.classifier = classifier or ActivityClassifier()

    def extract(self, message: str, today: Optional[date] = None) -> ExtractedRequest:
        """Extract a booking request from a message.

        Args:
            message: User's message
            today: Reference date for relative dates (defaults to today)

        Returns:
            ExtractedRequest with any pieces found
        """
        text = (message or "").strip()
        if not text:
            return ExtractedRequest()

        today = today or date.today()
        lower = text.lower()

        if any(phrase in lower for phrase in MY_BOOKINGS_PHRASES):
            return ExtractedRequest(intent=ChatIntent.MY_BOOKINGS)

        result = ExtractedRequest(activity=self._activity(lower))
        self._extract_date(text, lower, today, result)
        self._extract_time(text, result)
        if result.duration_hours is None:
            result.duration_hours = self._duration(text)

        if result.activity or result.has_datetime:
            result.intent = ChatIntent.BOOKING_REQUEST
        else:
            result.intent = self._keyword_intent(lower)

        logger.debug(f"Extracted chat request: {result.to_dict()}")
        return result

    def _activity(self, lower: str) -> Optional[str]:
        for rule in self.classifier.rules:
            for keyword in rule.keywords:
                if keyword.lower() in lower:
                    return keyword
        return None

    def _extract_date(
        self,
        text: str,
        lower: str,
        today: date,
        result: ExtractedRequest,
    ) -> None:
        if "tomorrow" in lower:
            result.requested_date = today + timedelta(days=1)
            result.date_raw = "tomorrow"
            return
        if "today" in lower:
            result.requested_date = today
            result.date_raw = "today"
            return

        match = ISO_DATE_RE.search(text)
        if match:
            try:
                result.requested_date = date.fromisoformat(match.group(1))
                result.date_raw = match.group(1)
            except ValueError:
                logger.debug(f"Ignoring invalid date: {match.group(1)}")
            return

        match = MONTH_DAY_RE.search(text)
        if match:
            month = MONTHS.index(match.group(1).lower()) + 1
            try:
                result.requested_date = date(today.year, month, int(match.group(2)))
                result.date_raw = match.group(0)
            except ValueError:
                logger.debug(f"Ignoring invalid date: {match.group(0)}")

    def _extract_time(self, text: str, result: ExtractedRequest) -> None:
        match = RANGE_RE.search(text)
        if match:
            start_hour = _to_24h(int(match.group(1)), match.group(3) or match.group(6))
            end_hour = _to_24h(int(match.group(4)), match.group(6))
            start_min = int(match.group(2) or 0)
            end_min = int(match.group(5) or 0)
            if 0 <= start_hour < 24 and 0 <= end_hour < 24 and start_min < 60 and end_min < 60:
                result.requested_time = time(start_hour, start_min)
                result.time_raw = match.group(0).strip()
                span = (end_hour * 60 + end_min) - (start_hour * 60 + start_min)
                if span > 0:
                    result.duration_hours = span / 60
                return

        match = AMPM_RE.search(text)
        if match:
            hour = _to_24h(int(match.group(1)), match.group(3))
            minute = int(match.group(2) or 0)
            if 0 <= hour < 24 and minute < 60:
                result.requested_time = time(hour, minute)
                result.time_raw = match.group(0).strip()
                return

        match = CLOCK_RE.search(text)
        if match:
            hour, minute = int(match.group(1)), int(match.group(2))
            if hour < 24 and minute < 60:
                result.requested_time = time(hour, minute)
                result.time_raw = match.group(0).strip()

    def _duration(self, text: str) -> Optional[float]:
        match = HOURS_RE.search(text)
        if match:
            return float(match.group(1))
        match = MINUTES_RE.search(text)
        if match:
            return int(match.group(1)) / 60
        return None

    def _keyword_intent(self, lower: str) -> ChatIntent:
        for pattern, intent in KEYWORD_INTENTS:
            if re.search(pattern, lower):
                return intent
        return ChatIntent.UNKNOWN


def parse_request(
    text: str,
    today: Optional[date] = None,
    classifier: Optional[ActivityClassifier] = None,
) -> ExtractedRequest:
    """Extract a booking request from text with the given activity rules."""
    return RequestExtractor(classifier).extract(text, today)
