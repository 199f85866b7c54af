"""Generic CRUD access to one table through a data source."""

from typing import Any, Dict, List, Optional

import pyarrow as pa

from ..catalog.discovery import discover_table, split_table_reference
from ..catalog.schema import TableMetadata
from ..datasources.base import DataSource
from ..utils.logging import get_contextual_logger
from .binder import ParameterBinder
from .builder import Record, SQLStatementWithParameters, StatementBuilder
from .formats import DateTimeFormats
from .marshaler import ResultMarshaler
from .order import OrderByClause
from .wrappers import QueryWrapper


class AdHocTable:
    """Select, insert, update and delete rows as string records.

    Driver errors propagate unchanged. A select, update or delete without key
    data has no WHERE clause and applies to every row.
    """

    def __init__(
        self,
        table: TableMetadata,
        datasource: DataSource,
        formats: Optional[DateTimeFormats] = None,
    ):
        """Initialize table access.

        Args:
            table: Discovered table metadata
            datasource: Connected data source that executes statements
            formats: Date/time patterns for binding and marshaling
        """
        if formats is None:
            formats = DateTimeFormats()
        self.table = table
        self.datasource = datasource
        self.formats = formats
        self.builder = StatementBuilder(table)
        self.binder = ParameterBinder(formats)
        self.marshaler = ResultMarshaler(formats)
        self.logger = get_contextual_logger(
            __name__,
            {"table": table.full_table_name(), "datasource": datasource.name},
        )

    @classmethod
    def open(
        cls,
        datasource: DataSource,
        table_ref: str,
        formats: Optional[DateTimeFormats] = None,
    ) -> "AdHocTable":
        """Discover a table from a ``[catalog.][schema.]table`` reference.

        The returned table may have no columns when nothing matched; check
        ``exists()``.
        """
        catalog, schema, table_name = split_table_reference(table_ref)
        datasource.ensure_connected()
        table = discover_table(datasource, catalog, schema, table_name)
        return cls(table, datasource, formats)

    def exists(self) -> bool:
        """Check whether discovery found any columns."""
        return self.table.has_columns()

    def describe(self) -> str:
        return self.table.describe()

    def select(
        self,
        key_data: Optional[Record] = None,
        order_by: Optional[OrderByClause] = None,
        query_wrapper: Optional[QueryWrapper] = None,
    ) -> List[Record]:
        """Select rows matching ``key_data`` (all rows when empty).

        Args:
            key_data: Fields to match with equality
            order_by: Optional ordering
            query_wrapper: Optional filter/pagination wrapper

        Returns:
            Matching rows as records
        """
        statement = self.builder.prepare_select(key_data, order_by, query_wrapper)
        records: List[Record] = []

        def visit(row: Dict[str, Any], schema: pa.Schema) -> None:
            records.append(self.marshaler.marshal_row(row, schema))

        self.datasource.for_each_row(statement.sql, self._bind(statement), visit)
        self.logger.debug(f"Selected {len(records)} rows")
        return records

    def insert(self, data: Record) -> Record:
        """Insert a row.

        Returns:
            Values of the primary-key columns generated by the insert
        """
        statement = self.builder.prepare_insert(data)
        generated = self.datasource.execute_insert(
            statement.sql, self._bind(statement), self.builder.key_column_names()
        )
        keys: Record = {}
        for name, value in generated.items():
            keys[name] = self.marshaler.to_string(value)
        self.logger.debug(f"Inserted row, generated keys {keys}")
        return keys

    def update(self, data: Record, key_data: Optional[Record] = None) -> bool:
        """Update rows.

        Without ``key_data`` the row is located by the primary-key values in
        ``data`` and keys cannot change. With ``key_data`` the row is located
        by those fields and ``data`` may change key columns.
        """
        statement = self.builder.prepare_update(data, key_data)
        return self.datasource.execute_update(statement.sql, self._bind(statement))

    def delete(self, key_data: Optional[Record]) -> bool:
        """Delete rows matching ``key_data``; empty key data deletes every row."""
        statement = self.builder.prepare_delete(key_data)
        return self.datasource.execute_update(statement.sql, self._bind(statement))

    def _bind(self, statement: SQLStatementWithParameters) -> List[Any]:
        return self.binder.bind(statement.parameters)

    def __repr__(self) -> str:
        return f"AdHocTable({self.table.full_table_name()}, {self.datasource.name})"
