"""DuckDB data source implementation."""

from typing import Any, Dict, Iterator, List, Optional, Sequence
import pyarrow as pa
import duckdb
import logging

from .base import (
    ColumnDescriptor,
    DataSource,
    TableEntry,
    build_where_clause,
    quote_identifier,
)

logger = logging.getLogger(__name__)

# information_schema.tables.table_type values for the generic table types
TABLE_TYPE_MAP = {
    "TABLE": "BASE TABLE",
    "VIEW": "VIEW",
    "LOCAL TEMPORARY": "LOCAL TEMPORARY",
}


class DuckDBDataSource(DataSource):
    """DuckDB data source connector."""

    dialect = "duckdb"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize DuckDB data source.

        Config should include:
            - path: Path to DuckDB database file (or :memory: for in-memory)
            - read_only: Whether to open in read-only mode (default: False)
        """
        super().__init__(name, config)
        self.connection = None
        self.db_path = config.get("path", ":memory:")
        self.read_only = config.get("read_only", False)

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        self._connected = True
        logger.info(f"Successfully connected to DuckDB: {self.name}")

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def get_primary_keys(
        self, catalog: Optional[str], schema: Optional[str], table: str
    ) -> List[str]:
        """List primary-key columns from duckdb_constraints()."""
        where, params = build_where_clause(
            [
                ("constraint_type", "PRIMARY KEY"),
                ("table_name", table),
                ("database_name", catalog),
                ("schema_name", schema),
            ]
        )
        result = self.connection.execute(
            f"SELECT constraint_column_names FROM duckdb_constraints(){where}",
            params,
        ).fetchall()
        keys = []
        for row in result:
            for column_name in row[0]:
                if column_name not in keys:
                    keys.append(column_name)
        return keys

    def get_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        column_pattern: Optional[str] = None,
    ) -> List[ColumnDescriptor]:
        """Describe columns from information_schema."""
        where, params = build_where_clause(
            [
                ("table_name", table),
                ("table_catalog", catalog),
                ("table_schema", schema),
                ("column_name LIKE", column_pattern),
            ]
        )
        result = self.connection.execute(
            f"""
            SELECT
                table_catalog,
                table_schema,
                table_name,
                column_name,
                data_type,
                ordinal_position,
                character_maximum_length,
                numeric_precision,
                numeric_scale,
                is_nullable,
                column_default
            FROM information_schema.columns{where}
            ORDER BY table_catalog, table_schema, ordinal_position
            """,
            params,
        ).fetchall()

        columns = []
        for row in result:
            default = row[10]
            columns.append(
                ColumnDescriptor(
                    table_catalog=row[0],
                    table_schema=row[1],
                    table_name=row[2],
                    name=row[3],
                    type_name=row[4],
                    position=row[5],
                    size=row[6] if row[6] is not None else row[7],
                    scale=row[8],
                    nullable=row[9] == "YES",
                    default_value=default,
                    is_auto_increment=_is_sequence_default(default),
                )
            )
        return columns

    def list_tables(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None,
        types: Optional[Sequence[str]] = None,
    ) -> List[TableEntry]:
        """List tables and views from information_schema."""
        where, params = build_where_clause(
            [
                ("table_catalog", catalog),
                ("table_schema", schema),
                ("table_name LIKE", name_pattern),
            ]
        )
        if types is not None:
            table_types = _map_table_types(types)
            if not table_types:
                return []
            placeholders = ", ".join("?" for _ in table_types)
            joiner = " AND " if where else " WHERE "
            where = f"{where}{joiner}table_type IN ({placeholders})"
            params.extend(table_types)

        result = self.connection.execute(
            f"""
            SELECT table_catalog, table_schema, table_name, table_type
            FROM information_schema.tables{where}
            ORDER BY table_catalog, table_schema, table_name
            """,
            params,
        ).fetchall()
        tables = []
        for row in result:
            tables.append(
                TableEntry(catalog=row[0], schema=row[1], name=row[2], table_type=row[3])
            )
        return tables

    def execute_query(
        self, query: str, parameters: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        """Execute query and yield Arrow record batches."""
        sql = self.translate_statement(query)
        logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
        result = self._execute(sql, parameters)
        arrow_table = result.fetch_arrow_table()

        batch_size = 10000
        for batch in arrow_table.to_batches(max_chunksize=batch_size):
            yield batch

    def execute_insert(
        self,
        statement: str,
        parameters: Sequence[Any],
        generated_columns: Sequence[str],
    ) -> Dict[str, Any]:
        """Execute an insert, returning generated columns via RETURNING."""
        sql = self.translate_statement(statement)
        if generated_columns:
            returning = ", ".join(quote_identifier(col) for col in generated_columns)
            sql = f"{sql} RETURNING {returning}"
        logger.debug(f"Executing insert on {self.name}: {sql[:100]}...")
        result = self._execute(sql, parameters)
        if not generated_columns:
            return {}

        row = result.fetchone()
        if row is None:
            return {}
        return dict(zip(generated_columns, row))

    def execute_update(self, statement: str, parameters: Sequence[Any]) -> bool:
        """Execute an update or delete statement."""
        sql = self.translate_statement(statement)
        logger.debug(f"Executing update on {self.name}: {sql[:100]}...")
        self._execute(sql, parameters)
        return True

    def _execute(self, sql: str, parameters: Optional[Sequence[Any]]):
        if parameters:
            return self.connection.execute(sql, list(parameters))
        return self.connection.execute(sql)


def _is_sequence_default(default: Optional[str]) -> bool:
    if default is None:
        return False
    return default.lower().startswith("nextval(")


def _map_table_types(types: Sequence[str]) -> List[str]:
    mapped = []
    for table_type in types:
        engine_type = TABLE_TYPE_MAP.get(table_type.upper())
        if engine_type and engine_type not in mapped:
            mapped.append(engine_type)
    return mapped
