"""Table metadata and schema discovery."""

from .schema import ColumnMetadata, Nullability, SqlType, TableMetadata
from .discovery import discover_table, split_table_reference

__all__ = [
    "ColumnMetadata",
    "Nullability",
    "SqlType",
    "TableMetadata",
    "discover_table",
    "split_table_reference",
]
