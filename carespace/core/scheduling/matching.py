"""
Optimal-match generation.

Pairs every available doctor with every available space whose category
suits the doctor's specialty. Matches are suggestions: two matches may
name the same space, and booking contention is settled when one of
them is actually booked.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from carespace.core.scheduling.compatibility import SpecialtyMatcher

if TYPE_CHECKING:
    from carespace.core.scheduling.availability import (
        DoctorAvailability,
        SpaceAvailability,
    )

HIGH_COMPATIBILITY = "High"


@dataclass
class OptimalMatch:
    """A suggested doctor/space pairing."""

    doctor: "DoctorAvailability"
    space: "SpaceAvailability"
    compatibility: str = HIGH_COMPATIBILITY

    def to_dict(self) -> dict:
        return {
            "doctor": self.doctor.to_dict(),
            "space": self.space.to_dict(),
            "compatibility": self.compatibility,
        }


def generate_matches(
    doctors: Sequence["DoctorAvailability"],
    spaces: Sequence["SpaceAvailability"],
    matcher: Optional[SpecialtyMatcher] = None,
) -> list[OptimalMatch]:
    """Build the compatible cross product of available doctors and spaces.

    Unavailable entries in either list are ignored. Output order is
    doctor-major, following input order.

    Args:
        doctors: Doctor availability records
        spaces: Space availability records
        matcher: Specialty rules (built-in table when None)

    Returns:
        One OptimalMatch per compatible pair
    """
    matcher = matcher or SpecialtyMatcher()
    available_spaces = [s for s in spaces if s.available]

    matches = []
    for doctor in doctors:
        if not doctor.available:
            continue
        for space in available_spaces:
            if matcher.is_compatible(doctor.specialty, space.space.category):
                matches.append(OptimalMatch(doctor=doctor, space=space))
    return matches
