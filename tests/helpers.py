"""Shared utilities for discovery and statement tests."""

from typing import Dict, List, Optional, Sequence, Tuple

from adhoc_sql.datasources.base import ColumnDescriptor, TableEntry

# Rows seeded into random_names by the duckdb_datasource fixture
RANDOM_NAMES_ROWS = 103


class FakeIntrospectionSource:
    """Schema introspection source backed by a dictionary.

    ``tables`` maps (catalog, schema, table) to (key names, column
    descriptors). Name matching is case-exact; None filters match anything.
    """

    def __init__(
        self,
        tables: Dict[Tuple[str, str, str], Tuple[List[str], List[ColumnDescriptor]]],
    ):
        self.tables = tables
        self.column_lookups: List[Tuple[Optional[str], Optional[str], str]] = []

    def _matching(self, catalog, schema, table):
        for (cat, sch, name), entry in self.tables.items():
            if catalog is not None and catalog != cat:
                continue
            if schema is not None and schema != sch:
                continue
            if name != table:
                continue
            yield entry

    def get_primary_keys(self, catalog, schema, table) -> List[str]:
        keys = []
        for key_names, _ in self._matching(catalog, schema, table):
            keys.extend(key_names)
        return keys

    def get_columns(self, catalog, schema, table, column_pattern=None):
        self.column_lookups.append((catalog, schema, table))
        columns = []
        for _, descriptors in self._matching(catalog, schema, table):
            columns.extend(descriptors)
        return columns

    def list_tables(
        self, catalog, schema, name_pattern=None, types: Optional[Sequence[str]] = None
    ) -> List[TableEntry]:
        entries = []
        for cat, sch, name in self.tables:
            if catalog is not None and catalog != cat:
                continue
            if schema is not None and schema != sch:
                continue
            entries.append(TableEntry(catalog=cat, schema=sch, name=name))
        return entries

    def __repr__(self) -> str:
        return "FakeIntrospectionSource()"


def make_descriptor(
    table: str,
    name: str,
    type_name: str,
    position: int,
    catalog: str = "db",
    schema: str = "public",
    **kwargs,
) -> ColumnDescriptor:
    """Build a column descriptor with sensible defaults."""
    return ColumnDescriptor(
        table_catalog=catalog,
        table_schema=schema,
        table_name=table,
        name=name,
        type_name=type_name,
        position=position,
        **kwargs,
    )
