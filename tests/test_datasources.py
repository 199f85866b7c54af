"""Tests for data source connectors."""

from adhoc_sql.datasources.base import (
    PARAM_MARKER,
    build_where_clause,
    mark_statement,
    strip_terminator,
)
from adhoc_sql.datasources.duckdb import DuckDBDataSource
from adhoc_sql.datasources.postgresql import PostgreSQLDataSource


def test_duckdb_connection(duckdb_datasource):
    """Test DuckDB connection."""
    assert duckdb_datasource.is_connected()
    assert duckdb_datasource.connection is not None


def test_duckdb_context_manager():
    """The context manager connects and disconnects."""
    ds = DuckDBDataSource("ctx", {"path": ":memory:"})

    with ds as connected:
        assert connected.is_connected()

    assert not ds.is_connected()
    assert ds.connection is None


def test_duckdb_primary_keys(duckdb_datasource):
    assert duckdb_datasource.get_primary_keys(None, None, "test_table") == ["id"]
    assert duckdb_datasource.get_primary_keys("memory", "main", "random_names") == ["id"]
    assert duckdb_datasource.get_primary_keys(None, None, "missing") == []


def test_duckdb_get_columns(duckdb_datasource):
    """Columns come back in position order with catalog and schema."""
    columns = duckdb_datasource.get_columns(None, None, "random_names")

    assert [col.name for col in columns] == ["id", "first_name", "last_name", "control_index"]
    assert [col.position for col in columns] == [1, 2, 3, 4]
    assert columns[0].table_catalog == "memory"
    assert columns[0].table_schema == "main"
    assert columns[0].type_name == "INTEGER"
    assert columns[0].nullable is False
    assert columns[1].nullable is True


def test_duckdb_get_columns_pattern(duckdb_datasource):
    columns = duckdb_datasource.get_columns(None, None, "random_names", "%name")

    assert [col.name for col in columns] == ["first_name", "last_name"]


def test_duckdb_autoincrement_detection(duckdb_datasource):
    """Sequence defaults mark a column as auto-increment."""
    columns = {col.name: col for col in duckdb_datasource.get_columns(None, None, "test_table")}

    assert columns["id"].is_auto_increment is True
    assert "nextval" in columns["id"].default_value
    assert columns["name"].is_auto_increment is False


def test_duckdb_list_tables(duckdb_datasource):
    duckdb_datasource.connection.execute(
        "CREATE VIEW baker_names AS SELECT * FROM random_names WHERE last_name LIKE 'B%'"
    )

    names = [entry.name for entry in duckdb_datasource.list_tables("memory", "main")]
    assert names == ["baker_names", "random_names", "test_table"]

    tables_only = duckdb_datasource.list_tables("memory", "main", None, ["TABLE"])
    assert [entry.name for entry in tables_only] == ["random_names", "test_table"]
    assert tables_only[0].catalog == "memory"
    assert tables_only[0].schema == "main"

    views = duckdb_datasource.list_tables("memory", None, "baker%", ["VIEW", "SYNONYM"])
    assert [entry.name for entry in views] == ["baker_names"]

    assert duckdb_datasource.list_tables(None, None, None, ["SYNONYM"]) == []


def test_duckdb_execute_query(duckdb_datasource):
    """Builder-style SQL is translated and executed."""
    batches = list(
        duckdb_datasource.execute_query(
            "select * from `random_names` where id = ? order by id asc", [5]
        )
    )

    rows = [row for batch in batches for row in batch.to_pylist()]
    assert rows == [
        {"id": 5, "first_name": "First5", "last_name": "Baker5", "control_index": 995}
    ]


def test_duckdb_for_each_row(duckdb_datasource):
    seen = []

    count = duckdb_datasource.for_each_row(
        "select id from `random_names` where control_index > ?",
        [990],
        lambda row, schema: seen.append((row["id"], schema.names)),
    )

    assert count == 9
    assert sorted(row_id for row_id, _ in seen) == list(range(1, 10))
    assert seen[0][1] == ["id"]


def test_duckdb_execute_insert_returns_generated_keys(duckdb_datasource):
    keys = duckdb_datasource.execute_insert(
        "insert into `test_table` (name) values (?);", ["first"], ["id"]
    )
    assert keys == {"id": 1}

    keys = duckdb_datasource.execute_insert(
        "insert into `test_table` (name) values (?);", ["second"], ["id"]
    )
    assert keys == {"id": 2}


def test_duckdb_execute_insert_without_keys(duckdb_datasource):
    keys = duckdb_datasource.execute_insert(
        "insert into `random_names` (id, first_name) values (?, ?);", [500, "Zed"], []
    )

    assert keys == {}


def test_duckdb_execute_update(duckdb_datasource):
    assert duckdb_datasource.execute_update(
        "delete from `random_names` where id > ?;", [100]
    ) is True

    count = duckdb_datasource.connection.execute("SELECT COUNT(*) FROM random_names").fetchone()[0]
    assert count == 100


def test_translate_statement_duckdb():
    ds = DuckDBDataSource("t", {})

    assert ds.translate_statement("select * from `orders` where id = ?;") == (
        'SELECT * FROM "orders" WHERE id = ?'
    )


def test_translate_statement_keeps_filter_text():
    """Only backtick names and placeholders change; quoted text stays put."""
    ds = DuckDBDataSource("t", {})

    sql = ds.translate_statement(
        "select * from `odd``name` where \"Status\" = ? and note = 'why?' "
        "and a || b = 'x'"
    )

    assert '"odd`name"' in sql
    assert '"Status" = ?' in sql
    assert "'why?'" in sql
    assert "||" in sql


def test_mark_statement():
    assert mark_statement("select * from `t` where a = ? and b = '?'") == (
        f"select * from \"t\" where a = {PARAM_MARKER} and b = '?'"
    )


def test_translate_statement_postgresql():
    """PostgreSQL uses %s placeholders and escapes literal percent signs."""
    ds = PostgreSQLDataSource("pg", {"host": "localhost", "database": "db"})

    sql = ds.translate_statement(
        "select z.* from (select * from sales.`orders` where id = ?) z "
        "where note like 'A%' limit 10 offset 0"
    )

    assert '"orders"' in sql
    assert "id = %s" in sql
    assert "'A%%'" in sql
    assert "?" not in sql


def test_strip_terminator():
    assert strip_terminator("delete from t; ") == "delete from t"
    assert strip_terminator("select 1") == "select 1"


def test_build_where_clause():
    where, params = build_where_clause(
        [("a", 1), ("b", None), ("c LIKE", "x%")], placeholder="%s"
    )

    assert where == " WHERE a = %s AND c LIKE %s"
    assert params == [1, "x%"]

    assert build_where_clause([("a", None)]) == ("", [])


def test_duckdb_default_config():
    """An empty config opens a writable in-memory database."""
    ds = DuckDBDataSource("d", {})

    assert ds.db_path == ":memory:"
    assert ds.read_only is False
    assert not ds.is_connected()
