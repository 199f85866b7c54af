"""Builds parameterized select/insert/update/delete statements for one table.

Every statement is driven by the table metadata alone. Field names that are
not columns of the table are skipped silently, both in the SQL text and in
the parameter list. Empty key data means no WHERE clause at all: a select,
update or delete built that way touches every row.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from ..catalog.schema import ColumnMetadata, TableMetadata
from .order import OrderByClause
from .wrappers import QueryWrapper

Record = Dict[str, str]

# Alias given to the select when a wrapper nests it as a subquery
WRAP_ALIAS = "z"

ColumnAction = Callable[[str], None]
KeyedColumnAction = Callable[[str, Optional[str]], None]


@dataclass(frozen=True)
class ColumnValue:
    """A statement parameter: the column it binds to and its raw string value."""

    column: ColumnMetadata
    value: Optional[str]


@dataclass
class SQLStatementWithParameters:
    """SQL text with its parameters in placeholder order."""

    sql: str
    parameters: List[ColumnValue] = field(default_factory=list)


class StatementBuilder:
    """Statement builder for a single table."""

    def __init__(self, table: TableMetadata):
        """Initialize builder.

        Args:
            table: Metadata of the table statements are built for
        """
        self.table = table

    def key_column_names(self) -> List[str]:
        """Primary-key columns present in the metadata, by position."""
        names = []
        for col in self.table.columns_in_order:
            if col.name in self.table.key_names:
                names.append(col.name)
        return names

    def build_select(
        self,
        key_names: Optional[Iterable[str]] = None,
        order_by: Optional[OrderByClause] = None,
        query_wrapper: Optional[QueryWrapper] = None,
        action: Optional[ColumnAction] = None,
    ) -> str:
        """Build ``select * from <table> [where k = ? and ...] [order by ...]``.

        The where clause and ORDER BY stay inside the subquery when a wrapper
        is given; the wrapper is always applied last, with alias ``z``.

        Args:
            key_names: Fields to match with ``=`` predicates, in order
            order_by: Optional ORDER BY clause
            query_wrapper: Optional wrapper applied to the finished select
            action: Called with each field that became a predicate

        Returns:
            SQL text
        """
        sql = f"select * from {self.table.full_table_name()}"
        sql += self._where_clause(key_names, action)
        if order_by is not None and order_by.has_order_by_columns():
            sql += " " + order_by.to_sql()
        if query_wrapper is not None:
            return query_wrapper.wrap(sql, WRAP_ALIAS)
        return sql

    def build_insert(
        self, column_names: Iterable[str], action: Optional[ColumnAction] = None
    ) -> str:
        """Build ``insert into <table> (a, b) values (?, ?);``."""
        columns = []
        for column_name in column_names:
            if not self.table.has_column(column_name):
                continue
            if action is not None:
                action(column_name)
            columns.append(column_name)
        placeholders = ", ".join("?" for _ in columns)
        return (
            f"insert into {self.table.full_table_name()} "
            f"({', '.join(columns)}) values ({placeholders});"
        )

    def build_update(
        self,
        column_names: Iterable[str],
        key_data: Optional[Record] = None,
        action: Optional[KeyedColumnAction] = None,
    ) -> str:
        """Build ``update <table> set a = ?, ... where k = ? ...;``.

        Without ``key_data`` the where clause uses the table's primary key and
        ``action`` gets ``(key, None)``, so key values come from the data and
        cannot be changed. With ``key_data`` the where clause uses those
        fields instead and ``action`` gets ``(key, key_data[key])``, which
        lets the data change key columns.

        Args:
            column_names: Fields to set
            key_data: Optional explicit key record
            action: Called with ``(field, key_value_or_None)`` per parameter

        Returns:
            SQL text
        """
        assignments = []
        for column_name in column_names:
            if not self.table.has_column(column_name):
                continue
            if action is not None:
                action(column_name, None)
            assignments.append(f"{column_name} = ?")

        sql = f"update {self.table.full_table_name()} set {', '.join(assignments)}"

        if key_data is None:
            sql += self._where_clause(
                self.key_column_names(),
                None if action is None else lambda name: action(name, None),
            )
        else:
            sql += self._where_clause(
                list(key_data.keys()),
                None if action is None else lambda name: action(name, key_data[name]),
            )
        return sql + ";"

    def build_delete(
        self,
        key_names: Optional[Iterable[str]] = None,
        action: Optional[ColumnAction] = None,
    ) -> str:
        """Build ``delete from <table> [where k = ? ...];``.

        No key names means no where clause: every row is deleted.
        """
        sql = f"delete from {self.table.full_table_name()}"
        sql += self._where_clause(key_names, action)
        return sql + ";"

    def _where_clause(
        self, key_names: Optional[Iterable[str]], action: Optional[ColumnAction]
    ) -> str:
        """Build `` where a = ? and b = ?`` for known columns, empty if none."""
        if not key_names:
            return ""
        predicates = []
        for key_name in key_names:
            if not self.table.has_column(key_name):
                continue
            if action is not None:
                action(key_name)
            predicates.append(f"{key_name} = ?")
        if not predicates:
            return ""
        return " where " + " and ".join(predicates)

    def prepare_select(
        self,
        key_data: Optional[Record] = None,
        order_by: Optional[OrderByClause] = None,
        query_wrapper: Optional[QueryWrapper] = None,
    ) -> SQLStatementWithParameters:
        """Build a select matching ``key_data`` and collect its parameters."""
        parameters: List[ColumnValue] = []
        keys = list(key_data.keys()) if key_data else None

        def collect(column_name: str) -> None:
            parameters.append(self._column_value(column_name, key_data[column_name]))

        sql = self.build_select(keys, order_by, query_wrapper, collect)
        return SQLStatementWithParameters(sql, parameters)

    def prepare_insert(self, data: Record) -> SQLStatementWithParameters:
        """Build an insert of ``data`` and collect its parameters."""
        parameters: List[ColumnValue] = []

        def collect(column_name: str) -> None:
            parameters.append(self._column_value(column_name, data[column_name]))

        sql = self.build_insert(list(data.keys()), collect)
        return SQLStatementWithParameters(sql, parameters)

    def prepare_update(
        self, data: Record, key_data: Optional[Record] = None
    ) -> SQLStatementWithParameters:
        """Build an update of ``data`` and collect its parameters.

        Set values come first, then key values, matching placeholder order.
        """
        parameters: List[ColumnValue] = []

        def collect(column_name: str, key_value: Optional[str]) -> None:
            value = key_value if key_value is not None else data.get(column_name)
            parameters.append(self._column_value(column_name, value))

        sql = self.build_update(list(data.keys()), key_data, collect)
        return SQLStatementWithParameters(sql, parameters)

    def prepare_delete(self, key_data: Optional[Record]) -> SQLStatementWithParameters:
        """Build a delete matching ``key_data`` and collect its parameters."""
        parameters: List[ColumnValue] = []
        keys = list(key_data.keys()) if key_data else None

        def collect(column_name: str) -> None:
            parameters.append(self._column_value(column_name, key_data[column_name]))

        sql = self.build_delete(keys, collect)
        return SQLStatementWithParameters(sql, parameters)

    def _column_value(self, column_name: str, value: Optional[str]) -> ColumnValue:
        return ColumnValue(self.table.columns_by_name[column_name], value)
