"""
Scheduling Module

Provides the interval conflict checker, the activity/specialty
compatibility rules, the availability engine, optimal-match generation
and booking creation.

Usage:
    from carespace.core.scheduling import (
        get_availability_engine,
        get_booking_service,
    )

    result = get_availability_engine().check_availability(
        date="2025-07-15",
        time="13:30",
        duration_hours=1,
        activity="consultation",
    )
    print(result.summary())
"""

# Interval Conflict Checker
from carespace.core.scheduling.intervals import (
    Interval,
    overlaps,
    parse_slot,
    schedule_conflicts,
    conflicting_bookings,
    validate_duration,
)

# Compatibility Rules
from carespace.core.scheduling.compatibility import (
    ActivityRule,
    SpecialtyRule,
    ActivityClassifier,
    SpecialtyMatcher,
    RuleTables,
    load_rule_tables,
)

# Optimal Matches
from carespace.core.scheduling.matching import (
    OptimalMatch,
    generate_matches,
)

# Availability Engine
from carespace.core.scheduling.availability import (
    AvailabilityEngine,
    AvailabilityResult,
    DoctorAvailability,
    SpaceAvailability,
    DoctorDayAvailability,
    AlternativeSlot,
    SpaceAlternatives,
    Suggestions,
    get_availability_engine,
)

# Booking Mutator
from carespace.core.scheduling.booking import (
    BookingService,
    BookingIdGenerator,
    get_booking_service,
)

__all__ = [
    # Intervals
    "Interval",
    "overlaps",
    "parse_slot",
    "schedule_conflicts",
    "conflicting_bookings",
    "validate_duration",
    # Compatibility
    "ActivityRule",
    "SpecialtyRule",
    "ActivityClassifier",
    "SpecialtyMatcher",
    "RuleTables",
    "load_rule_tables",
    # Matching
    "OptimalMatch",
    "generate_matches",
    # Availability
    "AvailabilityEngine",
    "AvailabilityResult",
    "DoctorAvailability",
    "SpaceAvailability",
    "DoctorDayAvailability",
    "AlternativeSlot",
    "SpaceAlternatives",
    "Suggestions",
    "get_availability_engine",
    # Booking
    "BookingService",
    "BookingIdGenerator",
    "get_booking_service",
]
