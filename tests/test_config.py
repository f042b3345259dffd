"""
Tests for YAML configuration loading.
"""

from pathlib import Path

import pendulum
import pytest
from pydantic import ValidationError

from clinicslots.config import AppConfig, AvailabilityConfig, DataSourceConfig
from clinicslots.domain.exceptions import ConfigError


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:

    def test_load_minimal(self, tmp_path):
        path = _write(tmp_path, "data_source:\n  kind: json\n  path: data.json\n")

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "America/Sao_Paulo"
        assert config.availability.grace_buffer_minutes == 15
        assert config.data_source.path == tmp_path / "data.json"

    def test_absolute_data_path_untouched(self, tmp_path):
        data_path = tmp_path / "elsewhere" / "data.json"
        path = _write(tmp_path, f"data_source:\n  path: {data_path}\n")

        assert AppConfig.load_from_yaml(path).data_source.path == data_path

    def test_availability_overrides(self, tmp_path):
        path = _write(
            tmp_path,
            "timezone: Europe/Lisbon\n"
            "availability:\n  grace_buffer_minutes: 0\n  max_alternatives: 3\n"
            "data_source:\n  path: data.json\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "Europe/Lisbon"
        assert config.availability.grace_buffer_minutes == 0
        assert config.availability.max_alternatives == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "data_source: [unclosed\n")

        with pytest.raises(ConfigError):
            AppConfig.load_from_yaml(path)

    def test_non_mapping_root(self, tmp_path):
        path = _write(tmp_path, "- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            AppConfig.load_from_yaml(path)

    def test_missing_data_source(self, tmp_path):
        path = _write(tmp_path, "timezone: UTC\n")

        with pytest.raises(ValidationError):
            AppConfig.load_from_yaml(path)

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            AppConfig(timezone="Mars/Olympus_Mons", data_source=DataSourceConfig(path="data.json"))

    def test_local_now_uses_configured_timezone(self):
        config = AppConfig(timezone="Asia/Tokyo", data_source=DataSourceConfig(path="data.json"))

        assert config.local_now().timezone_name == "Asia/Tokyo"


class TestSectionValidation:

    def test_negative_grace_rejected(self):
        with pytest.raises(ValidationError):
            AvailabilityConfig(grace_buffer_minutes=-1)

    @pytest.mark.parametrize("field", ["default_duration_minutes", "search_horizon_days", "max_alternatives"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            AvailabilityConfig(**{field: 0})

    def test_json_requires_path(self):
        with pytest.raises(ValidationError, match="path"):
            DataSourceConfig(kind="json")

    def test_rest_requires_url_and_key(self):
        with pytest.raises(ValidationError, match="api_key"):
            DataSourceConfig(kind="rest", url="https://clinic.example.com")

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            DataSourceConfig(kind="sql", path="data.json")

    def test_example_config_loads(self):
        example = Path(__file__).parent.parent / "config.example.yaml"

        config = AppConfig.load_from_yaml(example)

        assert config.data_source.kind == "json"
        assert config.data_source.path.name == "sample_data.json"
        assert pendulum.timezone(config.timezone).name == "America/Sao_Paulo"
