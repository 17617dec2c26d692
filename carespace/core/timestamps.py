"""Date, time and timestamp parsing shared by the store and the engine.

All instants are naive local datetimes. Aware inputs (a trailing "Z" or
an explicit offset) are converted to local time and stripped of tzinfo.
"""

from datetime import date, datetime, time


def parse_date(value: str) -> date:
    """Parse an ISO date ("2025-07-15").

    Raises:
        ValueError: If the value is empty or not an ISO date
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("date is required")
    return date.fromisoformat(value)


def parse_time(value: str) -> time:
    """Parse a clock time ("14:00", "9:30", "14:00:00").

    Raises:
        ValueError: If the value is empty or not a clock time
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("time is required")
    parts = value.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"invalid time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Raises:
        ValueError: If the value is empty or not ISO-8601
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("timestamp is required")
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a naive datetime as ISO-8601 with seconds precision."""
    return value.isoformat(timespec="seconds")
