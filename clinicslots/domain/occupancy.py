"""
Removal of candidate slots that collide with booked appointments.
"""

from typing import Iterable, List

from .models import Appointment, TimeSlot


class OccupancyFilter:
    """
    Drops every slot that overlaps a non-cancelled appointment.

    Overlap is half-open: a slot ending exactly when an appointment starts
    (or starting exactly when one ends) is kept.
    """

    def apply(
        self,
        slots: Iterable[TimeSlot],
        appointments: Iterable[Appointment],
    ) -> List[TimeSlot]:
        busy = [appt.time_range for appt in appointments if appt.blocks_slots]

        if not busy:
            return list(slots)

        return [
            slot for slot in slots
            if not any(slot.time_range.overlaps(booked) for booked in busy)
        ]
