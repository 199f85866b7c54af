"""Configuration management for ad hoc table access."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import yaml
from pathlib import Path

from ..datasources.base import DataSource
from ..datasources.duckdb import DuckDBDataSource
from ..datasources.postgresql import PostgreSQLDataSource
from ..statement.formats import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_TIME_FORMAT,
    DateTimeFormats,
)

DATASOURCE_TYPES = {
    "duckdb": DuckDBDataSource,
    "postgresql": PostgreSQLDataSource,
}


@dataclass
class DataSourceConfig:
    """Configuration for a single data source."""

    name: str
    type: str  # "postgresql", "duckdb"
    config: Dict[str, Any]


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    datasources: Dict[str, DataSourceConfig] = field(default_factory=dict)
    formats: DateTimeFormats = field(default_factory=DateTimeFormats)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def default_datasource(self) -> Optional[DataSourceConfig]:
        """First configured data source, None if there are none."""
        for ds_config in self.datasources.values():
            return ds_config
        return None


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        datasources:
          warehouse:
            type: postgresql
            host: localhost
            port: 5432
            database: mydb
            user: user
            password: pass

          local_duckdb:
            type: duckdb
            path: /data/local.duckdb
            read_only: false

        formats:
          date_format: MM/dd/yyyy
          time_format: HH:mm:ss

        logging:
          level: DEBUG
          structured: false
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Parse data sources
    datasources = {}
    for name, ds_config in (data.get("datasources") or {}).items():
        ds_config = dict(ds_config)
        ds_type = ds_config.pop("type")
        if ds_type not in DATASOURCE_TYPES:
            raise ValueError(f"Unsupported data source type: {ds_type}")
        datasources[name] = DataSourceConfig(name=name, type=ds_type, config=ds_config)

    # Parse formats
    formats_data = data.get("formats") or {}
    formats = DateTimeFormats(
        date_format=formats_data.get("date_format", DEFAULT_DATE_FORMAT),
        time_format=formats_data.get("time_format", DEFAULT_TIME_FORMAT),
    )

    # Parse logging config
    logging_data = data.get("logging") or {}
    logging_config = LoggingConfig(**logging_data)

    return Config(datasources=datasources, formats=formats, logging=logging_config)


def create_datasource(ds_config: DataSourceConfig) -> DataSource:
    """Instantiate the data source class for a config entry."""
    datasource_class = DATASOURCE_TYPES.get(ds_config.type)
    if datasource_class is None:
        raise ValueError(f"Unsupported data source type: {ds_config.type}")
    return datasource_class(ds_config.name, ds_config.config)
