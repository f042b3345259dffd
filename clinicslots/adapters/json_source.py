"""
File-backed data source for fixtures and offline use.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import DataSourceError
from ..domain.models import Appointment, Attendant, ScheduleWindow, as_date
from .rows import appointments_from_rows, attendant_from_row, windows_from_rows

logger = logging.getLogger(__name__)


class JsonDataSource:
    """
    Data source that serves rows from a JSON document.

    The document mirrors the hosted datastore's tables:

        {
            "attendants": [{"id": "...", "is_active": true}],
            "schedule_windows": [{"id": "...", "attendant_id": "...", ...}],
            "appointments": [{"id": "...", "attendant_id": "...", ...}]
        }
    """

    def __init__(self, data: Dict[str, Any]):
        self._attendants: List[Dict[str, Any]] = list(data.get("attendants", []))
        self._windows: List[Dict[str, Any]] = list(data.get("schedule_windows", []))
        self._appointments: List[Dict[str, Any]] = list(data.get("appointments", []))

    @classmethod
    def from_file(cls, path: Path) -> "JsonDataSource":
        """
        Load the document from disk.

        Raises:
            DataSourceError: If the file is missing or is not valid JSON
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataSourceError(f"Could not read data file {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError(f"Data file {path} must contain a JSON object")

        return cls(data)

    def fetch_attendant(self, attendant_id: str) -> Optional[Attendant]:
        for row in self._attendants:
            if str(row.get("id")) == attendant_id:
                return attendant_from_row(row)
        return None

    def fetch_schedule_windows(self, attendant_id: str) -> List[ScheduleWindow]:
        rows = [row for row in self._windows if str(row.get("attendant_id")) == attendant_id]
        return windows_from_rows(rows)

    def fetch_appointments(self, attendant_id: str, day: date) -> List[Appointment]:
        day = as_date(day)
        rows = [row for row in self._appointments if str(row.get("attendant_id")) == attendant_id]
        appointments = appointments_from_rows(rows)
        matching = [appt for appt in appointments if appt.date == day]
        logger.debug("Loaded %d appointments for %s on %s", len(matching), attendant_id, day)
        return matching
