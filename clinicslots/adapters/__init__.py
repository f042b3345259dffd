"""
Adapters layer - Datastore access (JSON fixtures and the hosted REST API).
"""

from ..config import DataSourceConfig
from .json_source import JsonDataSource
from .rest_source import RestDataSource

__all__ = ["JsonDataSource", "RestDataSource", "build_data_source"]


def build_data_source(config: DataSourceConfig):
    """Instantiate the data source described by the configuration."""
    if config.kind == "rest":
        return RestDataSource(base_url=config.url, api_key=config.api_key, timeout=config.timeout)
    return JsonDataSource.from_file(config.path)
