"""
Removal of slots that are too close to "now" to be offered.
"""

from typing import Iterable, List

from .models import ExpirationPolicy, TimeSlot


class ExpirationFilter:
    """
    Applies an :class:`ExpirationPolicy` to candidate slots.

    Slot starts and the policy's ``now`` are both naive wall-clock values
    built from calendar fields, so the comparison does not depend on the
    host's UTC offset.
    """

    def is_expired(self, slot: TimeSlot, policy: ExpirationPolicy) -> bool:
        slot_day = slot.date
        if slot_day < policy.today:
            return True
        if slot_day > policy.today:
            return False
        return slot.time_range.start < policy.cutoff

    def apply(self, slots: Iterable[TimeSlot], policy: ExpirationPolicy) -> List[TimeSlot]:
        return [slot for slot in slots if not self.is_expired(slot, policy)]
