"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ConfigError
from .domain.models import DEFAULT_GRACE_BUFFER_MINUTES


class AvailabilityConfig(BaseModel):
    """Tunables of the availability queries."""
    grace_buffer_minutes: int = DEFAULT_GRACE_BUFFER_MINUTES
    default_duration_minutes: int = 30
    search_horizon_days: int = 30
    max_calendar_days: int = 62
    alternatives_window_minutes: int = 120
    max_alternatives: int = 5

    @field_validator("grace_buffer_minutes")
    @classmethod
    def validate_grace_buffer(cls, value: int) -> int:
        """Grace buffer may be zero but never negative."""
        if value < 0:
            raise ValueError("grace_buffer_minutes must not be negative")
        return value

    @field_validator(
        "default_duration_minutes",
        "search_horizon_days",
        "max_calendar_days",
        "alternatives_window_minutes",
        "max_alternatives",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure counts and durations are positive."""
        if value <= 0:
            raise ValueError(f"value must be greater than zero, got {value}")
        return value


class DataSourceConfig(BaseModel):
    """Where schedule windows and appointments are read from."""
    kind: Literal["json", "rest"] = "json"
    path: Optional[Path] = None
    url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 30.0

    @model_validator(mode="after")
    def validate_kind_settings(self) -> "DataSourceConfig":
        """Each source kind needs its own connection settings."""
        if self.kind == "json" and self.path is None:
            raise ValueError("data_source.path is required for a json data source")
        if self.kind == "rest" and not (self.url and self.api_key):
            raise ValueError("data_source.url and data_source.api_key are required for a rest data source")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Sao_Paulo"
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    data_source: DataSourceConfig

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA timezone names early."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative data file paths are resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If the YAML cannot be parsed
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        source_path = config.data_source.path
        if source_path is not None and not source_path.is_absolute():
            config.data_source.path = config_path.parent / source_path

        return config

    def local_now(self) -> pendulum.DateTime:
        """Current wall-clock time in the clinic's timezone."""
        return pendulum.now(self.timezone)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
