"""Configuration management."""

from .config import (
    Config,
    DataSourceConfig,
    LoggingConfig,
    create_datasource,
    load_config,
)

__all__ = [
    "Config",
    "DataSourceConfig",
    "LoggingConfig",
    "create_datasource",
    "load_config",
]
