"""
Domain models for schedule windows, appointments and bookable slots.

All date-times in this module are naive wall-clock values in the clinic's
local calendar. They are always built from explicit calendar fields, never
from a UTC instant shifted by an offset.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

import pendulum
from pendulum import DateTime

DEFAULT_GRACE_BUFFER_MINUTES = 15

WEEKDAY_NAMES = {
    1: "Segunda-feira",
    2: "Terça-feira",
    3: "Quarta-feira",
    4: "Quinta-feira",
    5: "Sexta-feira",
    6: "Sábado",
    7: "Domingo",
}


def wall_clock(day: date, at: time) -> DateTime:
    """Combine a calendar date and a time of day into a naive wall-clock DateTime."""
    return pendulum.naive(day.year, day.month, day.day, at.hour, at.minute)


def as_date(value: date) -> pendulum.Date:
    """Normalize any ``date`` (including datetimes) to a pendulum Date."""
    return pendulum.date(value.year, value.month, value.day)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps with another.

        Ranges that merely touch (one ends exactly when the other starts)
        do not overlap.
        """
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD/MM/YYYY HH:mm')} - {self.end.format('HH:mm')}"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle statuses."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        """Parse a stored status value, accepting the datastore's spellings."""
        key = value.strip().lower().replace("-", "_")
        if key == "confirmed":
            return cls.SCHEDULED
        return cls(key)

    @property
    def blocks_slots(self) -> bool:
        return self is not AppointmentStatus.CANCELLED


@dataclass(frozen=True)
class Attendant:
    """A service provider whose calendar is queried."""
    id: str
    active: bool = True


@dataclass(frozen=True)
class ScheduleWindow:
    """
    A recurring weekly or one-off availability window.

    Exactly one of ``day_of_week`` (1=Monday ... 7=Sunday) and
    ``specific_date`` is set. A null ``service_id`` means the window serves
    any service.
    """
    id: str
    attendant_id: str
    start_time: time
    end_time: time
    day_of_week: Optional[int] = None
    specific_date: Optional[date] = None
    service_id: Optional[str] = None
    active: bool = True

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Window {self.id}: start time {self.start_time} must be before end time {self.end_time}"
            )
        if (self.day_of_week is None) == (self.specific_date is None):
            raise ValueError(
                f"Window {self.id}: exactly one of day_of_week and specific_date must be set"
            )
        if self.day_of_week is not None and not 1 <= self.day_of_week <= 7:
            raise ValueError(
                f"Window {self.id}: day_of_week must be between 1 and 7, got {self.day_of_week}"
            )
        if self.specific_date is not None:
            object.__setattr__(self, "specific_date", as_date(self.specific_date))

    @property
    def is_recurring(self) -> bool:
        return self.specific_date is None

    def serves(self, service_id: Optional[str]) -> bool:
        """Check whether the window may be used for the requested service."""
        if service_id is None or self.service_id is None:
            return True
        return self.service_id == service_id

    def overlaps_hours(self, other: "ScheduleWindow") -> bool:
        """Half-open overlap of the two windows' time-of-day ranges."""
        return self.start_time < other.end_time and other.start_time < self.end_time

    def time_range_on(self, day: date) -> TimeRange:
        """The window's wall-clock range on a given calendar date."""
        return TimeRange(start=wall_clock(day, self.start_time), end=wall_clock(day, self.end_time))


@dataclass(frozen=True)
class Appointment:
    """
    A booked occupation of an attendant's time.

    Every status except ``cancelled`` blocks overlapping slots.
    """
    id: str
    attendant_id: str
    date: date
    start_time: time
    end_time: time
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Appointment {self.id}: start time {self.start_time} must be before end time {self.end_time}"
            )
        object.__setattr__(self, "date", as_date(self.date))

    @property
    def blocks_slots(self) -> bool:
        return self.status.blocks_slots

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=wall_clock(self.date, self.start_time), end=wall_clock(self.date, self.end_time))


@dataclass(frozen=True)
class TimeSlot:
    """
    A fixed-duration bookable sub-interval of a schedule window.

    Slots are created per availability query and never persisted.
    """
    time_range: TimeRange

    @property
    def date(self) -> pendulum.Date:
        return self.time_range.start.date()

    @property
    def start_time(self) -> time:
        return self.time_range.start.time()

    @property
    def end_time(self) -> time:
        return self.time_range.end.time()

    @property
    def duration_minutes(self) -> int:
        return self.time_range.duration_minutes()

    def to_dict(self) -> dict:
        return {
            "start_time": self.time_range.start.format("HH:mm"),
            "end_time": self.time_range.end.format("HH:mm"),
        }

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Dia da semana, DD/MM/YYYY | HH:MM – HH:MM (N min)
        """
        start = self.time_range.start
        end = self.time_range.end

        weekday = WEEKDAY_NAMES[start.isoweekday()]
        date_str = start.format("DD/MM/YYYY")
        time_str = f"{start.format('HH:mm')} – {end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes} min)"


@dataclass(frozen=True)
class ExpirationPolicy:
    """
    Decides which of today's slots are too close to book.

    ``now`` is a naive wall-clock DateTime in the clinic's calendar. Use
    :meth:`from_components` or :meth:`at` instead of passing an aware value.
    """
    now: DateTime
    grace_buffer_minutes: int = DEFAULT_GRACE_BUFFER_MINUTES

    def __post_init__(self):
        if self.now.tzinfo is not None:
            raise ValueError("now must be a naive wall-clock value; use ExpirationPolicy.at()")
        if self.grace_buffer_minutes < 0:
            raise ValueError(f"grace_buffer_minutes must not be negative, got {self.grace_buffer_minutes}")

    @classmethod
    def from_components(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int,
        minute: int,
        grace_buffer_minutes: int = DEFAULT_GRACE_BUFFER_MINUTES,
    ) -> "ExpirationPolicy":
        return cls(now=pendulum.naive(year, month, day, hour, minute), grace_buffer_minutes=grace_buffer_minutes)

    @classmethod
    def at(
        cls,
        moment: datetime,
        grace_buffer_minutes: int = DEFAULT_GRACE_BUFFER_MINUTES,
    ) -> "ExpirationPolicy":
        """
        Build a policy from the wall-clock fields of ``moment``.

        Any tzinfo on ``moment`` is discarded, not converted: the caller is
        expected to express "now" in the clinic's local calendar.
        """
        return cls.from_components(
            moment.year,
            moment.month,
            moment.day,
            moment.hour,
            moment.minute,
            grace_buffer_minutes=grace_buffer_minutes,
        )

    @property
    def today(self) -> pendulum.Date:
        return self.now.date()

    @property
    def cutoff(self) -> DateTime:
        """Earliest start a slot on ``today`` may have to remain offerable."""
        return self.now.add(minutes=self.grace_buffer_minutes)
