"""
Read adapter for the hosted datastore's PostgREST HTTP interface.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import DataSourceError
from ..domain.models import Appointment, Attendant, ScheduleWindow, as_date
from .rows import appointments_from_rows, attendant_from_row, windows_from_rows

logger = logging.getLogger(__name__)


class RestDataSource:
    """
    Client for the datastore tables the availability engine reads.

    Only ``GET`` requests are issued; writes belong to the booking flow.
    """

    ATTENDANTS_TABLE = "attendants"
    WINDOWS_TABLE = "schedule_windows"
    APPOINTMENTS_TABLE = "appointments"

    def __init__(self, base_url: str, api_key: str, timeout: float = 30.0):
        """
        Initialize the REST client.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Anon or service key sent as ``apikey`` and bearer token
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def fetch_attendant(self, attendant_id: str) -> Optional[Attendant]:
        rows = self._select(self.ATTENDANTS_TABLE, {"id": f"eq.{attendant_id}", "limit": "1"})
        if not rows:
            return None
        return attendant_from_row(rows[0])

    def fetch_schedule_windows(self, attendant_id: str) -> List[ScheduleWindow]:
        rows = self._select(
            self.WINDOWS_TABLE,
            {"attendant_id": f"eq.{attendant_id}", "order": "start_time.asc"},
        )
        return windows_from_rows(rows)

    def fetch_appointments(self, attendant_id: str, day: date) -> List[Appointment]:
        day = as_date(day)
        rows = self._select(
            self.APPOINTMENTS_TABLE,
            {
                "attendant_id": f"eq.{attendant_id}",
                "appointment_date": f"eq.{day.isoformat()}",
                "status": "neq.cancelled",
            },
        )
        return appointments_from_rows(rows)

    def _select(self, table: str, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        Run a filtered select against one table.

        Raises:
            DataSourceError: If the request fails or the payload is not a list
        """
        url = f"{self.base_url}/rest/v1/{table}"
        params = {"select": "*", **filters}

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as exc:
            raise DataSourceError(f"Failed to fetch {table}: {exc}") from exc
        except ValueError as exc:
            raise DataSourceError(f"Invalid JSON from {table}: {exc}") from exc

        if not isinstance(data, list):
            raise DataSourceError(f"Unexpected payload from {table}: expected a list of rows")

        logger.debug("Fetched %d rows from %s", len(data), table)
        return data
