"""
Application services for answering availability queries.

The service validates caller input, fetches schedule windows and
appointments through a data source adapter, and delegates the actual
computation to the domain-level ``SlotCalculator``. The data source is a
simple protocol so tests can plug in an in-memory stub.

Results are snapshots: a slot offered here is not reserved. The booking
flow must re-check for conflicts when it writes the appointment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, List, Optional, Protocol, Sequence, Union

import pendulum

from ..config import AvailabilityConfig
from ..domain.exceptions import InvalidRequestError
from ..domain.models import (
    Appointment,
    Attendant,
    ExpirationPolicy,
    ScheduleWindow,
    TimeSlot,
    as_date,
    wall_clock,
)
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)

DateInput = Union[str, date]
TimeInput = Union[str, time]


class AvailabilityDataSource(Protocol):
    """Protocol describing the read access needed by the service."""

    def fetch_attendant(self, attendant_id: str) -> Optional[Attendant]:
        """Return the attendant, or None when it does not exist."""

    def fetch_schedule_windows(self, attendant_id: str) -> List[ScheduleWindow]:
        """Return every schedule window of the attendant."""

    def fetch_appointments(self, attendant_id: str, day: date) -> List[Appointment]:
        """Return the attendant's appointments on a date, at least all non-cancelled ones."""


@dataclass
class AvailabilityFailure:
    """Structured rejection of an invalid query."""
    reason: str
    success: bool = False

    def to_dict(self) -> dict:
        return {"success": False, "reason": self.reason}


@dataclass
class AvailabilityResult:
    """Bookable slots of one attendant on one date."""
    date: pendulum.Date
    slots: List[TimeSlot] = field(default_factory=list)
    success: bool = True

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "slots": [slot.to_dict() for slot in self.slots],
            "success": True,
        }


@dataclass
class CalendarDay:
    """Per-day summary inside an availability calendar."""
    date: pendulum.Date
    slots: List[TimeSlot] = field(default_factory=list)

    @property
    def day_of_week(self) -> int:
        return self.date.isoweekday()

    @property
    def is_available(self) -> bool:
        return bool(self.slots)

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "is_available": self.is_available,
            "total_slots": self.total_slots,
            "slots": [slot.to_dict() for slot in self.slots],
        }


@dataclass
class CalendarResult:
    """Availability over an inclusive date range, keyed by ISO date."""
    start_date: pendulum.Date
    end_date: pendulum.Date
    days: Dict[str, CalendarDay] = field(default_factory=dict)
    success: bool = True

    def to_dict(self) -> dict:
        return {
            "period": {"start_date": self.start_date.isoformat(), "end_date": self.end_date.isoformat()},
            "calendar": {key: day.to_dict() for key, day in self.days.items()},
            "success": True,
        }


@dataclass
class TimeCheckResult:
    """Whether one exact start time is offerable, with nearby alternatives."""
    date: pendulum.Date
    requested_time: time
    duration_minutes: int
    is_available: bool
    alternatives: List[TimeSlot] = field(default_factory=list)
    success: bool = True

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "requested_time": self.requested_time.strftime("%H:%M"),
            "service_duration": self.duration_minutes,
            "is_available": self.is_available,
            "alternative_slots": [slot.to_dict() for slot in self.alternatives],
            "success": True,
        }


@dataclass
class NextSlotsResult:
    """The earliest offerable slots across several days."""
    slots: List[TimeSlot] = field(default_factory=list)
    success: bool = True

    def to_dict(self) -> dict:
        return {
            "slots": [
                {"date": slot.date.isoformat(), **slot.to_dict()}
                for slot in self.slots
            ],
            "success": True,
        }


def parse_request_date(value: DateInput, name: str = "date") -> pendulum.Date:
    """
    Parse a calendar date given as ``YYYY-MM-DD`` or as a date object.

    Raises:
        InvalidRequestError: If the value is not a valid calendar date
    """
    if isinstance(value, date):
        return as_date(value)
    if not isinstance(value, str):
        raise InvalidRequestError(f"{name} must be a YYYY-MM-DD string, got {value!r}")
    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid {name} '{value}': {exc}") from exc


def parse_request_time(value: TimeInput) -> time:
    """
    Parse a time of day given as ``HH:MM`` or as a time object.

    Raises:
        InvalidRequestError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return time(value.hour, value.minute)
    try:
        parsed = time.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid start time '{value}': {exc}") from exc
    return time(parsed.hour, parsed.minute)


def _require_positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidRequestError(f"{name} must be a positive integer, got {value!r}")
    return value


def _require_attendant_id(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError("attendant_id is required")
    return value


class AvailabilityService:
    """
    Answers availability queries for the booking screens.

    Invalid input is reported as :class:`AvailabilityFailure`; errors raised
    by the data source propagate unchanged.
    """

    def __init__(
        self,
        data_source: AvailabilityDataSource,
        slot_calculator: Optional[SlotCalculator] = None,
        settings: Optional[AvailabilityConfig] = None,
    ) -> None:
        self._data_source = data_source
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._settings = settings or AvailabilityConfig()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def compute_availability(
        self,
        attendant_id: str,
        date: DateInput,
        service_id: Optional[str],
        service_duration_minutes: int,
        now: datetime,
        grace_buffer_minutes: Optional[int] = None,
    ) -> Union[AvailabilityResult, AvailabilityFailure]:
        """
        Compute the bookable slots of an attendant on a date.

        Args:
            attendant_id: Attendant whose calendar is queried
            date: Calendar date (``YYYY-MM-DD`` or date)
            service_id: Requested service, or None for any service
            service_duration_minutes: Length of each offered slot
            now: Current wall-clock time in the clinic's calendar
            grace_buffer_minutes: Minimum lead time; defaults to the configured value

        Returns:
            AvailabilityResult, or AvailabilityFailure for invalid input
        """
        try:
            attendant_id = _require_attendant_id(attendant_id)
            day = parse_request_date(date)
            duration = _require_positive_int("service_duration_minutes", service_duration_minutes)
            policy = self._build_policy(now, grace_buffer_minutes)
            attendant = self._require_attendant(attendant_id)
        except InvalidRequestError as exc:
            return self._reject(exc)

        if not attendant.active:
            logger.info("Attendant %s is inactive; no slots offered", attendant_id)
            return AvailabilityResult(date=day)

        windows = self._data_source.fetch_schedule_windows(attendant_id)
        slots = self._slots_for_day(attendant_id, day, service_id, duration, windows, policy)

        return AvailabilityResult(date=day, slots=slots)

    def availability_calendar(
        self,
        attendant_id: str,
        start_date: DateInput,
        end_date: DateInput,
        service_id: Optional[str],
        service_duration_minutes: int,
        now: datetime,
        grace_buffer_minutes: Optional[int] = None,
    ) -> Union[CalendarResult, AvailabilityFailure]:
        """Summarize availability for every date of an inclusive range."""
        try:
            attendant_id = _require_attendant_id(attendant_id)
            start = parse_request_date(start_date, "start_date")
            end = parse_request_date(end_date, "end_date")
            if start > end:
                raise InvalidRequestError("start_date must not be after end_date")
            span = start.diff(end).in_days() + 1
            if span > self._settings.max_calendar_days:
                raise InvalidRequestError(
                    f"Date range spans {span} days; at most {self._settings.max_calendar_days} allowed"
                )
            duration = _require_positive_int("service_duration_minutes", service_duration_minutes)
            policy = self._build_policy(now, grace_buffer_minutes)
            attendant = self._require_attendant(attendant_id)
        except InvalidRequestError as exc:
            return self._reject(exc)

        result = CalendarResult(start_date=start, end_date=end)
        windows = self._data_source.fetch_schedule_windows(attendant_id) if attendant.active else []

        for offset in range(span):
            day = start.add(days=offset)
            slots: List[TimeSlot] = []
            if attendant.active:
                slots = self._slots_for_day(attendant_id, day, service_id, duration, windows, policy)
            result.days[day.isoformat()] = CalendarDay(date=day, slots=slots)

        return result

    def check_time(
        self,
        attendant_id: str,
        date: DateInput,
        start_time: TimeInput,
        service_id: Optional[str],
        service_duration_minutes: int,
        now: datetime,
        grace_buffer_minutes: Optional[int] = None,
    ) -> Union[TimeCheckResult, AvailabilityFailure]:
        """
        Check whether a slot starting exactly at ``start_time`` is offerable.

        When it is not, up to ``max_alternatives`` slots starting within
        ``alternatives_window_minutes`` of the requested time are suggested.
        """
        try:
            requested = parse_request_time(start_time)
        except InvalidRequestError as exc:
            return self._reject(exc)

        availability = self.compute_availability(
            attendant_id,
            date,
            service_id,
            service_duration_minutes,
            now,
            grace_buffer_minutes,
        )
        if isinstance(availability, AvailabilityFailure):
            return availability

        is_available = any(slot.start_time == requested for slot in availability.slots)

        alternatives: List[TimeSlot] = []
        if not is_available:
            requested_at = wall_clock(availability.date, requested)
            window_seconds = self._settings.alternatives_window_minutes * 60
            alternatives = [
                slot for slot in availability.slots
                if abs((slot.time_range.start - requested_at).total_seconds()) <= window_seconds
            ][: self._settings.max_alternatives]

        return TimeCheckResult(
            date=availability.date,
            requested_time=requested,
            duration_minutes=service_duration_minutes,
            is_available=is_available,
            alternatives=alternatives,
        )

    def next_available_slots(
        self,
        attendant_id: str,
        from_date: DateInput,
        service_id: Optional[str],
        service_duration_minutes: int,
        now: datetime,
        limit: int = 10,
        grace_buffer_minutes: Optional[int] = None,
    ) -> Union[NextSlotsResult, AvailabilityFailure]:
        """Collect the first ``limit`` offerable slots from ``from_date`` onwards."""
        try:
            attendant_id = _require_attendant_id(attendant_id)
            start = parse_request_date(from_date, "from_date")
            limit = _require_positive_int("limit", limit)
            duration = _require_positive_int("service_duration_minutes", service_duration_minutes)
            policy = self._build_policy(now, grace_buffer_minutes)
            attendant = self._require_attendant(attendant_id)
        except InvalidRequestError as exc:
            return self._reject(exc)

        if not attendant.active:
            return NextSlotsResult()

        windows = self._data_source.fetch_schedule_windows(attendant_id)
        found: List[TimeSlot] = []

        for offset in range(self._settings.search_horizon_days + 1):
            day = start.add(days=offset)
            found.extend(self._slots_for_day(attendant_id, day, service_id, duration, windows, policy))
            if len(found) >= limit:
                break

        return NextSlotsResult(slots=found[:limit])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _slots_for_day(
        self,
        attendant_id: str,
        day: pendulum.Date,
        service_id: Optional[str],
        duration: int,
        windows: Sequence[ScheduleWindow],
        policy: ExpirationPolicy,
    ) -> List[TimeSlot]:
        # Every slot of a past date is expired; skip the appointment fetch
        if day < policy.today:
            return []

        appointments = self._data_source.fetch_appointments(attendant_id, day)

        return self._slot_calculator.find_available_slots(
            attendant_id=attendant_id,
            day=day,
            service_id=service_id,
            duration_minutes=duration,
            windows=windows,
            appointments=appointments,
            policy=policy,
        )

    def _build_policy(self, now: datetime, grace_buffer_minutes: Optional[int]) -> ExpirationPolicy:
        if not isinstance(now, datetime):
            raise InvalidRequestError(f"now must be a datetime, got {now!r}")

        if grace_buffer_minutes is None:
            grace_buffer_minutes = self._settings.grace_buffer_minutes
        if isinstance(grace_buffer_minutes, bool) or not isinstance(grace_buffer_minutes, int) or grace_buffer_minutes < 0:
            raise InvalidRequestError(
                f"grace_buffer_minutes must be a non-negative integer, got {grace_buffer_minutes!r}"
            )

        return ExpirationPolicy.at(now, grace_buffer_minutes=grace_buffer_minutes)

    def _require_attendant(self, attendant_id: str) -> Attendant:
        attendant = self._data_source.fetch_attendant(attendant_id)
        if attendant is None:
            raise InvalidRequestError(f"Unknown attendant: {attendant_id}")
        return attendant

    @staticmethod
    def _reject(exc: InvalidRequestError) -> AvailabilityFailure:
        logger.info("Rejected availability query: %s", exc)
        return AvailabilityFailure(reason=str(exc))
