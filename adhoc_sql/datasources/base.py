"""Base data source interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple
import pyarrow as pa
import sqlglot

RowVisitor = Callable[[Dict[str, Any], pa.Schema], None]

# Stands in for a ``?`` placeholder while a statement is re-read
PARAM_MARKER = "__adhoc_param__"


@dataclass
class ColumnDescriptor:
    """Column as reported by schema introspection."""

    table_catalog: Optional[str]
    table_schema: Optional[str]
    table_name: str
    name: str
    type_name: str
    position: int
    size: Optional[int] = None
    scale: Optional[int] = None
    nullable: Optional[bool] = None
    default_value: Optional[str] = None
    is_auto_increment: Optional[bool] = None


@dataclass
class TableEntry:
    """A table, view, alias or synonym listed by schema introspection."""

    catalog: Optional[str]
    schema: Optional[str]
    name: str
    table_type: str = "TABLE"


class DataSource(ABC):
    """Abstract base class for data sources.

    A data source is both the schema introspection source used by table
    discovery and the executor for generated statements. Statements arrive
    in the builder's form (backtick-quoted table, ``?`` placeholders) and are
    translated to the engine dialect before execution.
    """

    dialect = "duckdb"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize data source.

        Args:
            name: Unique name for this data source
            config: Configuration dictionary
        """
        self.name = name
        self.config = config
        self.connection = None
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the data source."""
        pass

    @abstractmethod
    def get_primary_keys(
        self, catalog: Optional[str], schema: Optional[str], table: str
    ) -> List[str]:
        """List primary-key column names of a table.

        Args:
            catalog: Catalog name, None for any
            schema: Schema name, None for any
            table: Exact table name

        Returns:
            Primary-key column names, empty when there are none
        """
        pass

    @abstractmethod
    def get_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        column_pattern: Optional[str] = None,
    ) -> List[ColumnDescriptor]:
        """Describe the columns of a table.

        Args:
            catalog: Catalog name, None for any
            schema: Schema name, None for any
            table: Exact table name
            column_pattern: Optional LIKE pattern on column names

        Returns:
            Column descriptors ordered by position
        """
        pass

    @abstractmethod
    def list_tables(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None,
        types: Optional[Sequence[str]] = None,
    ) -> List[TableEntry]:
        """List tables visible under a catalog/schema filter.

        Args:
            catalog: Catalog name, None for any
            schema: Schema name, None for any
            name_pattern: Optional LIKE pattern on table names
            types: Table types to include (TABLE, VIEW, ALIAS, SYNONYM)

        Returns:
            Matching entries with the names the engine reports
        """
        pass

    @abstractmethod
    def execute_query(
        self, query: str, parameters: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        """Execute a SQL query and return results as Arrow record batches.

        Args:
            query: SQL query string
            parameters: Bound values for ``?`` placeholders

        Returns:
            Iterator of Arrow record batches
        """
        pass

    @abstractmethod
    def execute_insert(
        self,
        statement: str,
        parameters: Sequence[Any],
        generated_columns: Sequence[str],
    ) -> Dict[str, Any]:
        """Execute an insert and return the requested generated column values.

        Args:
            statement: Insert statement
            parameters: Bound values for ``?`` placeholders
            generated_columns: Columns whose values should be returned

        Returns:
            Mapping of generated column name to value, empty if none
        """
        pass

    @abstractmethod
    def execute_update(self, statement: str, parameters: Sequence[Any]) -> bool:
        """Execute an update or delete.

        Returns:
            True once the statement completed
        """
        pass

    def for_each_row(
        self,
        query: str,
        parameters: Optional[Sequence[Any]],
        visitor: RowVisitor,
    ) -> int:
        """Execute a query and call ``visitor(row, schema)`` once per row.

        Returns:
            Number of rows visited
        """
        count = 0
        for batch in self.execute_query(query, parameters):
            for row in batch.to_pylist():
                visitor(row, batch.schema)
                count += 1
        return count

    def translate_statement(self, statement: str) -> str:
        """Translate builder SQL into this source's dialect.

        Backtick-quoted names become the engine's quoted identifiers and
        ``?`` placeholders take the engine's parameter style. Everything else,
        raw filter text included, is read with the engine's own dialect.
        """
        marked = mark_statement(strip_terminator(statement))
        sql = sqlglot.transpile(marked, read=self.dialect, write=self.dialect)[0]
        return self.finish_placeholders(sql)

    def finish_placeholders(self, sql: str) -> str:
        """Put the engine's parameter marker where each ``?`` stood."""
        return sql.replace(PARAM_MARKER, "?")

    def is_connected(self) -> bool:
        """Check if data source is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    def ensure_connected(self) -> None:
        """Ensure data source is connected.

        Raises:
            ConnectionError: If connection cannot be established
        """
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        """Context manager entry."""
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"


def strip_terminator(statement: str) -> str:
    """Remove a trailing ``;`` and surrounding whitespace."""
    clean = statement.strip()
    if clean.endswith(";"):
        clean = clean[:-1].rstrip()
    return clean


def quote_identifier(name: str) -> str:
    """Quote an identifier with double quotes."""
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def build_where_clause(
    conditions: Sequence[Tuple[str, Optional[Any]]], placeholder: str = "?"
) -> Tuple[str, List[Any]]:
    """Build a WHERE clause from (column, value) pairs, skipping None values.

    A column ending in `` LIKE`` uses LIKE instead of equality.

    Returns:
        Tuple of (clause text, parameters); clause is empty when nothing applies
    """
    predicates = []
    params = []
    for column, value in conditions:
        if value is None:
            continue
        if column.endswith(" LIKE"):
            predicates.append(f"{column} {placeholder}")
        else:
            predicates.append(f"{column} = {placeholder}")
        params.append(value)
    if not predicates:
        return "", params
    return " WHERE " + " AND ".join(predicates), params


def mark_statement(statement: str) -> str:
    """Requote backtick names and swap ``?`` for ``PARAM_MARKER``.

    Quoted strings and double-quoted identifiers pass through unchanged.
    """
    out = []
    i = 0
    length = len(statement)
    while i < length:
        char = statement[i]
        if char in ("'", '"', "`"):
            end = _closing_quote(statement, i)
            if char == "`" and end is not None:
                name = statement[i + 1:end - 1].replace("``", "`")
                out.append(quote_identifier(name))
            else:
                out.append(statement[i:end])
            i = length if end is None else end
        elif char == "?":
            out.append(PARAM_MARKER)
            i += 1
        else:
            out.append(char)
            i += 1
    return "".join(out)


def _closing_quote(text: str, start: int) -> Optional[int]:
    """Index just past the quote closing the one at ``start``, None if open."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == quote:
            if i + 1 < len(text) and text[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return None
