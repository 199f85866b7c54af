"""Shared fixtures: an in-memory DuckDB seeded with test tables."""

import pytest

from adhoc_sql.catalog.schema import ColumnMetadata, SqlType, TableMetadata
from adhoc_sql.datasources.duckdb import DuckDBDataSource
from tests.helpers import RANDOM_NAMES_ROWS


def _seed_test_table(conn) -> None:
    conn.execute("CREATE SEQUENCE test_table_seq START 1")
    conn.execute(
        """
        CREATE TABLE test_table (
            id INTEGER PRIMARY KEY DEFAULT nextval('test_table_seq'),
            name VARCHAR(100),
            bigtext_value VARCHAR,
            double_value DOUBLE,
            int_value INTEGER,
            bigint_value BIGINT,
            decimal_value DECIMAL(10,2),
            date_value DATE,
            time_value TIME,
            datetime_value TIMESTAMP
        )
        """
    )


def _seed_random_names(conn) -> None:
    conn.execute(
        """
        CREATE TABLE random_names (
            id INTEGER PRIMARY KEY,
            first_name VARCHAR,
            last_name VARCHAR,
            control_index INTEGER
        )
        """
    )
    # Every fifth last name starts with 'B' (20 of 103 rows)
    conn.execute(
        f"""
        INSERT INTO random_names
        SELECT
            i,
            'First' || i,
            CASE WHEN i % 5 = 0 THEN 'Baker' || i ELSE 'Smith' || i END,
            1000 - i
        FROM generate_series(1, {RANDOM_NAMES_ROWS}) AS t(i)
        """
    )


@pytest.fixture
def duckdb_datasource():
    """In-memory DuckDB with test_table and random_names."""
    ds = DuckDBDataSource("test_duck", {"path": ":memory:", "read_only": False})
    ds.connect()

    _seed_test_table(ds.connection)
    _seed_random_names(ds.connection)

    yield ds

    ds.disconnect()


@pytest.fixture
def random_names_table() -> TableMetadata:
    """Hand-built metadata for RANDOM_NAMES (no database needed)."""
    columns = (
        ColumnMetadata("ID", SqlType.INTEGER, "INTEGER", 10, 0, position=1),
        ColumnMetadata("FIRST", SqlType.VARCHAR, "VARCHAR", 50, 0, position=2),
        ColumnMetadata("LAST", SqlType.VARCHAR, "VARCHAR", 50, 0, position=3),
        ColumnMetadata("CONTROL_INDEX", SqlType.INTEGER, "INTEGER", 10, 0, position=4),
    )
    return TableMetadata(
        table_name="RANDOM_NAMES",
        key_names=frozenset({"ID"}),
        columns_in_order=columns,
    )
