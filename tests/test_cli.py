"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from clinicslots import __version__
from clinicslots.cli.app import app

SAMPLE_DATA = Path(__file__).parent.parent / "sample_data.json"

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: America/Sao_Paulo\n"
        "data_source:\n"
        "  kind: json\n"
        f"  path: {SAMPLE_DATA}\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args):
    return runner.invoke(app, [*args, "--config", str(config_file)])


class TestSlotsCommand:

    def test_json_output(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--date", "2024-01-15", "--now", "2024-01-15 07:00", "--json")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert [slot["start_time"] for slot in payload["slots"]] == [
            "08:00", "09:00", "09:30", "13:00", "13:30", "14:00", "14:30", "16:00", "16:30",
        ]

    def test_day_off_override(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--date", "2024-01-22", "--now", "2024-01-15 07:00", "--json")

        payload = json.loads(result.output)
        assert [slot["start_time"] for slot in payload["slots"]] == ["14:00", "14:30", "15:00", "15:30", "16:00", "16:30"]

    def test_table_output(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--date", "2024-01-15", "--now", "2024-01-15 07:00")

        assert result.exit_code == 0
        assert "13:30" in result.output

    def test_no_slots_message(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--date", "2024-01-16", "--now", "2024-01-15 07:00")

        assert result.exit_code == 0
        assert "Nenhum horário disponível" in result.output

    def test_invalid_date_exits_with_error(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--date", "2024-02-30", "--now", "2024-01-15 07:00")

        assert result.exit_code == 1
        assert "Consulta inválida" in result.output

    def test_unknown_attendant(self, config_file):
        result = _invoke(config_file, "slots", "att-ninguem", "--date", "2024-01-15", "--now", "2024-01-15 07:00")

        assert result.exit_code == 1

    def test_invalid_now(self, config_file):
        result = _invoke(config_file, "slots", "att-ana", "--now", "amanhã")

        assert result.exit_code == 1

    def test_missing_config(self, tmp_path):
        result = _invoke(tmp_path / "nope.yaml", "slots", "att-ana")

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestOtherCommands:

    def test_calendar_json(self, config_file):
        result = _invoke(config_file, "calendar", "att-ana", "--start", "2024-01-15", "--now", "2024-01-15 07:00", "--json")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["period"] == {"start_date": "2024-01-15", "end_date": "2024-01-21"}
        assert payload["calendar"]["2024-01-15"]["total_slots"] == 9
        assert not payload["calendar"]["2024-01-16"]["is_available"]

    def test_calendar_service_filter(self, config_file):
        result = _invoke(
            config_file,
            "calendar", "att-ana", "--start", "2024-01-17", "--end", "2024-01-17",
            "--service", "svc-consulta", "--now", "2024-01-15 07:00", "--json",
        )

        payload = json.loads(result.output)
        assert payload["calendar"]["2024-01-17"]["total_slots"] == 0

    def test_check_booked_time(self, config_file):
        result = _invoke(config_file, "check", "att-ana", "08:30", "--date", "2024-01-15", "--now", "2024-01-15 07:00")

        assert result.exit_code == 0
        assert "não está disponível" in result.output
        assert "Alternativas próximas" in result.output

    def test_check_free_time_json(self, config_file):
        result = _invoke(
            config_file, "check", "att-ana", "13:00", "--date", "2024-01-15", "--now", "2024-01-15 07:00", "--json"
        )

        payload = json.loads(result.output)
        assert payload["is_available"] is True
        assert payload["alternative_slots"] == []

    def test_next_slots_json(self, config_file):
        result = _invoke(
            config_file, "next", "att-bruno", "--from", "2024-01-15", "--limit", "2", "--now", "2024-01-15 07:00", "--json"
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["slots"] == [
            {"date": "2024-01-19", "start_time": "07:30", "end_time": "08:00"},
            {"date": "2024-01-19", "start_time": "08:00", "end_time": "08:30"},
        ]

    def test_next_slots_inactive_attendant(self, config_file):
        result = _invoke(config_file, "next", "att-inativo", "--now", "2024-01-15 07:00")

        assert result.exit_code == 0
        assert "Nenhum horário" in result.output

    def test_next_slots_list_output(self, config_file):
        result = _invoke(config_file, "next", "att-bruno", "--from", "2024-01-15", "--limit", "1", "--now", "2024-01-15 07:00")

        assert result.exit_code == 0, result.output
        assert "Sexta-feira, 19/01/2024 | 07:30 – 08:00 (30 min)" in result.output

    @pytest.mark.parametrize("command", [
        ["slots", "att-ana", "--date", "2024-01-15"],
        ["calendar", "att-ana", "--start", "2024-01-15"],
        ["check", "att-ana", "09:00", "--date", "2024-01-15"],
        ["next", "att-ana", "--from", "2024-01-15"],
    ])
    def test_zero_duration_is_rejected(self, config_file, command):
        result = _invoke(config_file, *command, "--duration", "0", "--now", "2024-01-15 07:00", "--json")

        assert result.exit_code == 1
        assert "service_duration_minutes" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
