"""Tests for configuration loading."""

import pytest

from adhoc_sql.config import Config, DataSourceConfig, create_datasource, load_config
from adhoc_sql.datasources.duckdb import DuckDBDataSource
from adhoc_sql.datasources.postgresql import PostgreSQLDataSource


def _write_config(tmp_path, text):
    config_path = tmp_path / "adhoc.yaml"
    config_path.write_text(text)
    return str(config_path)


def test_load_full_config(tmp_path):
    """Data sources, formats and logging are all read."""
    config_path = _write_config(
        tmp_path,
        """
datasources:
  warehouse:
    type: postgresql
    host: localhost
    port: 5432
    database: analytics
    user: test
    password: test
  local_duckdb:
    type: duckdb
    path: /tmp/local.duckdb
    read_only: true

formats:
  date_format: yyyy-MM-dd
  time_format: HH:mm

logging:
  level: DEBUG
  structured: true
""",
    )

    config = load_config(config_path)

    assert list(config.datasources) == ["warehouse", "local_duckdb"]
    pg_config = config.datasources["warehouse"]
    assert pg_config.type == "postgresql"
    assert pg_config.config["database"] == "analytics"
    assert "type" not in pg_config.config

    duck_config = config.datasources["local_duckdb"]
    assert duck_config.config == {"path": "/tmp/local.duckdb", "read_only": True}

    assert config.formats.date_format == "yyyy-MM-dd"
    assert config.formats.timestamp_format == "yyyy-MM-dd HH:mm"
    assert config.logging.level == "DEBUG"
    assert config.logging.structured is True
    assert config.logging.log_file is None

    assert config.default_datasource() is pg_config


def test_load_minimal_config(tmp_path):
    """Missing sections fall back to defaults."""
    config_path = _write_config(
        tmp_path,
        """
datasources:
  mem:
    type: duckdb
    path: ":memory:"
""",
    )

    config = load_config(config_path)

    assert config.formats.date_format == "MM/dd/yyyy"
    assert config.formats.time_format == "HH:mm:ss"
    assert config.logging.level == "INFO"
    assert config.logging.structured is False


def test_load_empty_config(tmp_path):
    config = load_config(_write_config(tmp_path, ""))

    assert config.datasources == {}
    assert config.default_datasource() is None


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_unknown_datasource_type(tmp_path):
    config_path = _write_config(
        tmp_path,
        """
datasources:
  legacy:
    type: oracle
""",
    )

    with pytest.raises(ValueError, match="oracle"):
        load_config(config_path)


def test_create_datasource():
    """Config entries instantiate the matching connector without connecting."""
    duck = create_datasource(DataSourceConfig("mem", "duckdb", {"path": ":memory:"}))
    assert isinstance(duck, DuckDBDataSource)
    assert duck.name == "mem"
    assert not duck.is_connected()

    pg = create_datasource(
        DataSourceConfig("pg", "postgresql", {"host": "localhost", "database": "db"})
    )
    assert isinstance(pg, PostgreSQLDataSource)

    with pytest.raises(ValueError):
        create_datasource(DataSourceConfig("x", "sqlite", {}))


def test_default_config_is_empty():
    config = Config()

    assert config.datasources == {}
    assert config.formats.date_format == "MM/dd/yyyy"
    assert config.logging.level == "INFO"
