"""PostgreSQL data source implementation."""

from typing import Any, Dict, Iterator, List, Optional, Sequence
import pyarrow as pa
import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
import logging

from .base import (
    ColumnDescriptor,
    DataSource,
    PARAM_MARKER,
    TableEntry,
    build_where_clause,
    quote_identifier,
)

logger = logging.getLogger(__name__)

TABLE_TYPE_MAP = {
    "TABLE": "BASE TABLE",
    "VIEW": "VIEW",
    "LOCAL TEMPORARY": "LOCAL TEMPORARY",
    "FOREIGN TABLE": "FOREIGN",
}


class PostgreSQLDataSource(DataSource):
    """PostgreSQL data source connector with connection pooling."""

    dialect = "postgres"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize PostgreSQL data source.

        Config should include:
            - host: Database host
            - port: Database port
            - database: Database name
            - user: Username
            - password: Password
            - min_connections: Minimum connections in pool (default: 1)
            - max_connections: Maximum connections in pool (default: 5)
        """
        super().__init__(name, config)
        self._pool = None
        self._min_connections = config.get("min_connections", 1)
        self._max_connections = config.get("max_connections", 5)

    def connect(self) -> None:
        """Establish connection pool to PostgreSQL."""
        try:
            logger.info(f"Connecting to PostgreSQL database '{self.config['database']}' at {self.config['host']}")
            self._pool = pool.ThreadedConnectionPool(
                self._min_connections,
                self._max_connections,
                host=self.config["host"],
                port=self.config.get("port", 5432),
                database=self.config["database"],
                user=self.config["user"],
                password=self.config["password"],
            )
            # Get a test connection to verify it works
            conn = self._pool.getconn()
            self._pool.putconn(conn)
            self.connection = conn  # Store for compatibility
            self._connected = True
            logger.info(f"Successfully connected to PostgreSQL: {self.name}")
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to PostgreSQL {self.name}: {e}")
            raise ConnectionError(f"PostgreSQL connection failed: {e}") from e

    def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()
            logger.info(f"Disconnected from PostgreSQL: {self.name}")
            self._pool = None
            self.connection = None
            self._connected = False

    def _get_connection(self):
        """Get a connection from the pool."""
        if not self._pool:
            raise RuntimeError(f"Not connected to {self.name}")
        return self._pool.getconn()

    def _return_connection(self, conn):
        """Return a connection to the pool."""
        if self._pool:
            self._pool.putconn(conn)

    def finish_placeholders(self, sql: str) -> str:
        """Use ``%s`` placeholders for psycopg2."""
        # psycopg2 formats every '%' once parameters are passed
        return sql.replace("%", "%%").replace(PARAM_MARKER, "%s")

    def get_primary_keys(
        self, catalog: Optional[str], schema: Optional[str], table: str
    ) -> List[str]:
        """List primary-key columns from information_schema."""
        where, params = build_where_clause(
            [
                ("tc.constraint_type", "PRIMARY KEY"),
                ("tc.table_name", table),
                ("tc.table_catalog", catalog),
                ("tc.table_schema", schema),
            ],
            placeholder="%s",
        )
        rows = self._fetch_all(
            f"""
            SELECT kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
              ON tc.constraint_name = kcu.constraint_name
             AND tc.table_schema = kcu.table_schema
             AND tc.table_name = kcu.table_name
            {where}
            ORDER BY kcu.ordinal_position
            """,
            params,
        )
        keys = []
        for row in rows:
            if row["column_name"] not in keys:
                keys.append(row["column_name"])
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
            ],
            placeholder="%s",
        )
        rows = self._fetch_all(
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
                column_default,
                is_identity
            FROM information_schema.columns
            {where}
            ORDER BY table_catalog, table_schema, ordinal_position
            """,
            params,
        )

        columns = []
        for row in rows:
            default = row["column_default"]
            size = row["character_maximum_length"]
            if size is None:
                size = row["numeric_precision"]
            auto_increment = row["is_identity"] == "YES" or (
                default is not None and default.startswith("nextval(")
            )
            columns.append(
                ColumnDescriptor(
                    table_catalog=row["table_catalog"],
                    table_schema=row["table_schema"],
                    table_name=row["table_name"],
                    name=row["column_name"],
                    type_name=row["data_type"],
                    position=row["ordinal_position"],
                    size=size,
                    scale=row["numeric_scale"],
                    nullable=row["is_nullable"] == "YES",
                    default_value=default,
                    is_auto_increment=auto_increment,
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
            ],
            placeholder="%s",
        )
        if types is not None:
            table_types = []
            for table_type in types:
                mapped = TABLE_TYPE_MAP.get(table_type.upper())
                if mapped and mapped not in table_types:
                    table_types.append(mapped)
            if not table_types:
                return []
            joiner = " AND " if where else " WHERE "
            where = f"{where}{joiner}table_type = ANY(%s)"
            params.append(table_types)

        rows = self._fetch_all(
            f"""
            SELECT table_catalog, table_schema, table_name, table_type
            FROM information_schema.tables
            {where}
            ORDER BY table_catalog, table_schema, table_name
            """,
            params,
        )
        tables = []
        for row in rows:
            tables.append(
                TableEntry(
                    catalog=row["table_catalog"],
                    schema=row["table_schema"],
                    name=row["table_name"],
                    table_type=row["table_type"],
                )
            )
        return tables

    def execute_query(
        self, query: str, parameters: Optional[Sequence[Any]] = None
    ) -> Iterator[pa.RecordBatch]:
        """Execute query and yield Arrow record batches."""
        sql = self.translate_statement(query)
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
                cursor.execute(sql, tuple(parameters or ()))

                columns = self._extract_column_names(cursor.description)

                batch_size = 10000
                while True:
                    rows = cursor.fetchmany(batch_size)
                    if not rows:
                        break

                    data = self._build_column_data(columns, rows)
                    batch = pa.RecordBatch.from_pydict(data)
                    yield batch
            conn.rollback()
        except psycopg2.Error as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            conn.rollback()
            raise
        finally:
            self._return_connection(conn)

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
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing insert on {self.name}: {sql[:100]}...")
                cursor.execute(sql, tuple(parameters))
                row = cursor.fetchone() if generated_columns else None
            conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Insert failed on {self.name}: {e}")
            conn.rollback()
            raise
        finally:
            self._return_connection(conn)

        if row is None:
            return {}
        return dict(zip(generated_columns, row))

    def execute_update(self, statement: str, parameters: Sequence[Any]) -> bool:
        """Execute an update or delete statement."""
        sql = self.translate_statement(statement)
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing update on {self.name}: {sql[:100]}...")
                cursor.execute(sql, tuple(parameters))
            conn.commit()
            return True
        except psycopg2.Error as e:
            logger.error(f"Update failed on {self.name}: {e}")
            conn.rollback()
            raise
        finally:
            self._return_connection(conn)

    def _fetch_all(self, sql: str, params: List[Any]) -> List[Dict[str, Any]]:
        """Run an introspection query and return rows as dictionaries."""
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(sql, tuple(params))
                rows = cursor.fetchall()
            conn.rollback()
            return rows
        except psycopg2.Error as e:
            logger.error(f"Introspection query failed on {self.name}: {e}")
            conn.rollback()
            raise
        finally:
            self._return_connection(conn)

    def _extract_column_names(self, description) -> List[str]:
        """Extract column names from cursor description."""
        columns = []
        for desc in description:
            columns.append(desc[0])
        return columns

    def _build_column_data(self, columns: List[str], rows: List) -> Dict[str, List]:
        """Build column data dictionary from rows."""
        data = {}
        for col in columns:
            data[col] = []

        for row in rows:
            for i, col in enumerate(columns):
                data[col].append(row[i])

        return data


