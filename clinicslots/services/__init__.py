"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityDataSource,
    AvailabilityFailure,
    AvailabilityResult,
    AvailabilityService,
    CalendarDay,
    CalendarResult,
    NextSlotsResult,
    TimeCheckResult,
)

__all__ = [
    "AvailabilityDataSource",
    "AvailabilityFailure",
    "AvailabilityResult",
    "AvailabilityService",
    "CalendarDay",
    "CalendarResult",
    "NextSlotsResult",
    "TimeCheckResult",
]
