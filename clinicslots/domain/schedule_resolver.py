"""
Resolution of an attendant's schedule windows for a single calendar date.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .models import ScheduleWindow, as_date

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """
    Picks the schedule windows that apply to one attendant on one date.

    Precedence:
    1. Windows of other attendants and windows for another service are ignored.
    2. A specific-date window applies on its date. An inactive one offers no
       time itself but still overrides, which is how a single day is blocked.
    3. An active recurring window applies on its weekday unless its hours
       overlap a specific-date window of the same date.
    """

    def resolve(
        self,
        attendant_id: str,
        day: date,
        service_id: Optional[str],
        windows: Iterable[ScheduleWindow],
    ) -> List[ScheduleWindow]:
        """
        Return the applicable windows ordered by start time.

        Args:
            attendant_id: Attendant whose calendar is queried
            day: Target calendar date
            service_id: Requested service, or None for any service
            windows: Every window visible for the attendant

        Returns:
            Active applicable windows, sorted by (start, end)
        """
        day = as_date(day)
        weekday = day.isoweekday()

        candidates = [
            window for window in windows
            if window.attendant_id == attendant_id and window.serves(service_id)
        ]

        overrides = [w for w in candidates if w.specific_date == day]
        recurring = [
            w for w in candidates
            if w.is_recurring and w.active and w.day_of_week == weekday
        ]

        kept_recurring = []
        for window in recurring:
            if any(window.overlaps_hours(override) for override in overrides):
                logger.debug(
                    "Recurring window %s replaced by a specific-date window on %s",
                    window.id,
                    day,
                )
                continue
            kept_recurring.append(window)

        applicable = [w for w in overrides if w.active] + kept_recurring

        return sorted(applicable, key=lambda w: (w.start_time, w.end_time))
