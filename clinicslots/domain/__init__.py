"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import ClinicSlotsError, ConfigError, DataSourceError, InvalidRequestError
from .expiration import ExpirationFilter
from .models import (
    Appointment,
    AppointmentStatus,
    Attendant,
    ExpirationPolicy,
    ScheduleWindow,
    TimeRange,
    TimeSlot,
)
from .occupancy import OccupancyFilter
from .schedule_resolver import ScheduleResolver
from .slot_calculator import SlotCalculator
from .slot_generator import SlotGenerator

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "Attendant",
    "ClinicSlotsError",
    "ConfigError",
    "DataSourceError",
    "ExpirationFilter",
    "ExpirationPolicy",
    "InvalidRequestError",
    "OccupancyFilter",
    "ScheduleResolver",
    "ScheduleWindow",
    "SlotCalculator",
    "SlotGenerator",
    "TimeRange",
    "TimeSlot",
]
