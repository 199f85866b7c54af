"""Data source connectors."""

from .base import ColumnDescriptor, DataSource, TableEntry
from .postgresql import PostgreSQLDataSource
from .duckdb import DuckDBDataSource

__all__ = [
    "ColumnDescriptor",
    "DataSource",
    "TableEntry",
    "PostgreSQLDataSource",
    "DuckDBDataSource",
]
