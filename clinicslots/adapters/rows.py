"""
Parsing of datastore rows into domain models.

Rows use the hosted datastore's column names (``attendant_id``,
``specific_date``, ``appointment_date`` ...). Values arrive as strings.
"""

import logging
from datetime import time
from typing import Any, Dict, Iterable, List, Optional

import pendulum

from ..domain.exceptions import DataSourceError
from ..domain.models import Appointment, AppointmentStatus, Attendant, ScheduleWindow, wall_clock

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def parse_time(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into a time of day."""
    parsed = time.fromisoformat(value.strip())
    return time(parsed.hour, parsed.minute)


def parse_date(value: str) -> pendulum.Date:
    """Parse a ``YYYY-MM-DD`` calendar date without any timezone shift."""
    return pendulum.from_format(value.strip()[:10], "YYYY-MM-DD").date()


def _optional(row: Row, key: str) -> Optional[Any]:
    value = row.get(key)
    if value in (None, ""):
        return None
    return value


def _active(row: Row) -> bool:
    for key in ("is_active", "active", "is_available"):
        if key in row and row[key] is not None:
            return bool(row[key])
    return True


def attendant_from_row(row: Row) -> Attendant:
    return Attendant(id=str(row["id"]), active=_active(row))


def window_from_row(row: Row) -> ScheduleWindow:
    """
    Build a ScheduleWindow from a row.

    Raises:
        KeyError, ValueError: If the row is incomplete or inconsistent
    """
    specific_date = _optional(row, "specific_date")
    day_of_week = _optional(row, "day_of_week")

    if specific_date is not None:
        # A stored weekday next to a specific date is informational only
        day_of_week = None
    elif day_of_week is not None:
        day_of_week = int(day_of_week)
        # Some rows store Sunday as 0
        if day_of_week == 0:
            day_of_week = 7

    service_id = _optional(row, "service_id")

    return ScheduleWindow(
        id=str(row["id"]),
        attendant_id=str(row["attendant_id"]),
        start_time=parse_time(row["start_time"]),
        end_time=parse_time(row["end_time"]),
        day_of_week=day_of_week,
        specific_date=parse_date(specific_date) if specific_date is not None else None,
        service_id=str(service_id) if service_id is not None else None,
        active=_active(row),
    )


def appointment_from_row(row: Row) -> Appointment:
    """
    Build an Appointment from a row.

    A missing ``end_time`` is derived from ``service_duration`` minutes.

    Raises:
        KeyError, ValueError: If the row is incomplete or inconsistent
    """
    day = parse_date(row.get("appointment_date") or row["date"])
    start = parse_time(row.get("start_time") or row["appointment_time"])

    end_value = _optional(row, "end_time")
    if end_value is not None:
        end = parse_time(end_value)
    else:
        duration = int(row["service_duration"])
        end_moment = wall_clock(day, start).add(minutes=duration)
        if end_moment.date() != day:
            raise ValueError(f"Appointment {row.get('id')} runs past midnight")
        end = time(end_moment.hour, end_moment.minute)

    return Appointment(
        id=str(row["id"]),
        attendant_id=str(row["attendant_id"]),
        date=day,
        start_time=start,
        end_time=end,
        status=AppointmentStatus.parse(row.get("status") or "scheduled"),
    )


def windows_from_rows(rows: Iterable[Row]) -> List[ScheduleWindow]:
    """Parse window rows, skipping malformed ones."""
    windows: List[ScheduleWindow] = []
    for row in rows:
        try:
            windows.append(window_from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping invalid schedule window row %s: %s", row.get("id"), exc)
    return windows


def appointments_from_rows(rows: Iterable[Row]) -> List[Appointment]:
    """
    Parse appointment rows.

    Raises:
        DataSourceError: On the first malformed row. Ignoring an appointment
            would expose its time as free.
    """
    appointments: List[Appointment] = []
    for row in rows:
        try:
            appointments.append(appointment_from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            raise DataSourceError(f"Invalid appointment row {row.get('id')}: {exc}") from exc
    return appointments
