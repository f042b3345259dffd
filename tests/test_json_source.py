"""
Tests for the JSON file data source.
"""

import json
from datetime import time

import pendulum
import pytest

from clinicslots.adapters import JsonDataSource, build_data_source
from clinicslots.config import DataSourceConfig
from clinicslots.domain.exceptions import DataSourceError

DOCUMENT = {
    "attendants": [{"id": "a1", "is_active": True}, {"id": "a2", "is_active": False}],
    "schedule_windows": [
        {"id": "w1", "attendant_id": "a1", "day_of_week": 1, "start_time": "08:00", "end_time": "10:00"},
        {"id": "w2", "attendant_id": "a2", "day_of_week": 1, "start_time": "08:00", "end_time": "10:00"},
        {"id": "broken", "attendant_id": "a1", "start_time": "08:00", "end_time": "10:00"},
    ],
    "appointments": [
        {"id": "p1", "attendant_id": "a1", "appointment_date": "2024-01-15", "start_time": "08:30", "end_time": "09:00"},
        {"id": "p2", "attendant_id": "a1", "appointment_date": "2024-01-16", "start_time": "08:30", "end_time": "09:00"},
        {"id": "p3", "attendant_id": "a2", "appointment_date": "2024-01-15", "start_time": "08:30", "end_time": "09:00"},
    ],
}


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    return path


class TestJsonDataSource:

    def test_fetch_attendant(self, data_file):
        source = JsonDataSource.from_file(data_file)

        assert source.fetch_attendant("a1").active
        assert not source.fetch_attendant("a2").active
        assert source.fetch_attendant("nobody") is None

    def test_fetch_schedule_windows_skips_broken_rows(self, data_file):
        windows = JsonDataSource.from_file(data_file).fetch_schedule_windows("a1")

        assert [w.id for w in windows] == ["w1"]
        assert windows[0].start_time == time(8, 0)

    def test_fetch_appointments_by_date(self, data_file):
        source = JsonDataSource.from_file(data_file)

        appointments = source.fetch_appointments("a1", pendulum.date(2024, 1, 15))

        assert [a.id for a in appointments] == ["p1"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError, match="Could not read"):
            JsonDataSource.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DataSourceError):
            JsonDataSource.from_file(path)

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(DataSourceError, match="JSON object"):
            JsonDataSource.from_file(path)

    def test_build_data_source(self, data_file):
        source = build_data_source(DataSourceConfig(kind="json", path=data_file))

        assert isinstance(source, JsonDataSource)
