"""
Expansion of schedule windows into fixed-duration candidate slots.
"""

from datetime import date
from typing import Iterable, List

from .models import ScheduleWindow, TimeRange, TimeSlot


class SlotGenerator:
    """
    Cuts each window into consecutive slots of the service duration.

    Windows are expanded independently: a slot never crosses a window
    boundary, and a trailing remainder shorter than the duration is dropped.
    """

    def generate(
        self,
        day: date,
        windows: Iterable[ScheduleWindow],
        duration_minutes: int,
    ) -> List[TimeSlot]:
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

        slots: List[TimeSlot] = []
        for window in windows:
            slots.extend(self._expand_window(day, window, duration_minutes))
        return slots

    def _expand_window(
        self,
        day: date,
        window: ScheduleWindow,
        duration_minutes: int,
    ) -> List[TimeSlot]:
        """
        Example:
        Window: 08:00 - 09:45, duration 30
        Result: [08:00-08:30, 08:30-09:00, 09:00-09:30]
        """
        bounds = window.time_range_on(day)
        slots: List[TimeSlot] = []

        current = bounds.start
        while True:
            slot_end = current.add(minutes=duration_minutes)
            if slot_end > bounds.end:
                break
            slots.append(TimeSlot(time_range=TimeRange(start=current, end=slot_end)))
            current = slot_end

        return slots
