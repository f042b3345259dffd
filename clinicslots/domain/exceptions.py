"""
Domain-specific exception hierarchy for the clinic slot engine.
"""


class ClinicSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(ClinicSlotsError):
    """Raised when an availability query violates its input contract."""


class DataSourceError(ClinicSlotsError):
    """Raised when schedule or appointment data cannot be fetched or parsed."""


class ConfigError(ClinicSlotsError):
    """Raised when the configuration file cannot be loaded."""
