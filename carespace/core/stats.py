"""Aggregate statistics over the entity store."""

from datetime import datetime
from typing import Optional

from carespace.infra.store import EntityStore


def overall_stats(store: EntityStore, now: Optional[datetime] = None) -> dict:
    """Totals for doctors, spaces and bookings.

    Args:
        store: Entity store
        now: Reference instant for "upcoming" bookings (defaults to now)
    """
    now = now or datetime.now()
    doctors = store.doctors
    spaces = store.spaces
    bookings = store.bookings

    return {
        "doctors": {
            "total": len(doctors),
            "with_dedicated_space": sum(1 for d in doctors if d.has_dedicated_office),
            "specialties": len({d.specialty for d in doctors}),
        },
        "spaces": {
            "total": len(spaces),
            "bookable": sum(1 for s in spaces if s.bookable),
            "categories": len({s.category for s in spaces}),
        },
        "bookings": {
            "total": len(bookings),
            "upcoming": sum(1 for b in bookings if b.start > now),
        },
        "timestamp": now.isoformat(timespec="seconds"),
    }


def specialty_stats(store: EntityStore) -> dict[str, dict[str, int]]:
    """Doctor counts per specialty, in first-seen order."""
    stats: dict[str, dict[str, int]] = {}
    for doctor in store.doctors:
        entry = stats.setdefault(doctor.specialty, {"count": 0, "with_dedicated_space": 0})
        entry["count"] += 1
        if doctor.has_dedicated_office:
            entry["with_dedicated_space"] += 1
    return stats
