"""
Core business logic for calculating bookable appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .expiration import ExpirationFilter
from .models import Appointment, ExpirationPolicy, ScheduleWindow, TimeSlot, as_date
from .occupancy import OccupancyFilter
from .schedule_resolver import ScheduleResolver
from .slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates the bookable slots of one attendant on one date.

    Algorithm:
    1. Resolve the schedule windows that apply to the date
    2. Expand each window into slots of the service duration
    3. Remove slots overlapping non-cancelled appointments
    4. Remove slots that already started or start inside the grace buffer
    5. Return unique slots sorted by start time

    Each call works on fresh lists only, so one instance can serve
    concurrent callers.
    """

    def __init__(
        self,
        resolver: Optional[ScheduleResolver] = None,
        generator: Optional[SlotGenerator] = None,
        occupancy: Optional[OccupancyFilter] = None,
        expiration: Optional[ExpirationFilter] = None,
    ):
        self.resolver = resolver or ScheduleResolver()
        self.generator = generator or SlotGenerator()
        self.occupancy = occupancy or OccupancyFilter()
        self.expiration = expiration or ExpirationFilter()

    def find_available_slots(
        self,
        *,
        attendant_id: str,
        day: date,
        service_id: Optional[str],
        duration_minutes: int,
        windows: Iterable[ScheduleWindow],
        appointments: Iterable[Appointment],
        policy: ExpirationPolicy,
    ) -> List[TimeSlot]:
        """
        Find all bookable slots for an attendant on a date.

        Args:
            attendant_id: Attendant whose calendar is queried
            day: Target calendar date
            service_id: Requested service, or None for any service
            duration_minutes: Length of every generated slot
            windows: Schedule windows visible for the attendant
            appointments: The attendant's appointments (any status)
            policy: Wall-clock "now" and grace buffer

        Returns:
            List of TimeSlot objects sorted by start time
        """
        day = as_date(day)

        # Step 1: Applicable windows
        applicable = self.resolver.resolve(attendant_id, day, service_id, windows)
        if not applicable:
            logger.debug("No schedule windows for attendant %s on %s", attendant_id, day)
            return []

        # Step 2: Candidate slots
        candidates = self.generator.generate(day, applicable, duration_minutes)

        # Step 3: Occupancy
        same_day = [
            appt for appt in appointments
            if appt.attendant_id == attendant_id and appt.date == day
        ]
        free = self.occupancy.apply(candidates, same_day)

        # Step 4: Expiration
        offerable = self.expiration.apply(free, policy)

        logger.debug(
            "Attendant %s on %s: %d windows, %d candidates, %d free, %d offerable",
            attendant_id,
            day,
            len(applicable),
            len(candidates),
            len(free),
            len(offerable),
        )

        # Step 5: Overlapping windows may generate the same slot twice
        return self._unique_sorted(offerable)

    @staticmethod
    def _unique_sorted(slots: List[TimeSlot]) -> List[TimeSlot]:
        unique = {slot.time_range: slot for slot in slots}
        return sorted(unique.values(), key=lambda s: (s.time_range.start, s.time_range.end))
