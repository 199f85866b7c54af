"""Command line access to ad hoc table CRUD."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import click
import duckdb
import psycopg2

from ..config import Config, DataSourceConfig, create_datasource, load_config
from ..datasources.base import DataSource
from ..statement import (
    AdHocTable,
    FilterWrapper,
    MultiQueryWrapper,
    OrderByClause,
    OrderByDirection,
    PaginationWrapper,
    PagingMethod,
    ParameterBindingError,
    QueryWrapper,
    Record,
)
from ..utils.logging import setup_logging

DEFAULT_ROWS_PER_PAGE = 25


class RecordPrinter:
    """Formats records for CLI display."""

    def __init__(self, emit: Callable[[str], None]):
        self.emit = emit

    def display(self, records: List[Record], headers: List[str], elapsed_ms: float) -> None:
        rows = self._build_rows(records, headers)
        lines = self._format_table(headers, rows)
        for line in lines:
            self.emit(line)
        summary = f"{len(records)} rows in {elapsed_ms:.2f} ms"
        self.emit(summary)

    def _build_rows(self, records: List[Record], headers: List[str]) -> List[List[str]]:
        rows: List[List[str]] = []
        for record in records:
            row = []
            for header in headers:
                row.append(record.get(header, ""))
            rows.append(row)
        return rows

    def _format_table(self, headers: List[str], rows: List[List[str]]) -> List[str]:
        widths = self._compute_widths(headers, rows)
        border = self._build_border(widths)
        lines: List[str] = []
        lines.append(border)
        lines.append(self._format_row(headers, widths))
        lines.append(border)
        for row in rows:
            lines.append(self._format_row(row, widths))
        lines.append(border)
        return lines

    def _compute_widths(self, headers: List[str], rows: List[List[str]]) -> List[int]:
        widths = [len(header) for header in headers]
        for row in rows:
            for index, text in enumerate(row):
                if len(text) > widths[index]:
                    widths[index] = len(text)
        return widths

    def _build_border(self, widths: List[int]) -> str:
        parts: List[str] = ["+"]
        for width in widths:
            parts.append("-" * (width + 2))
            parts.append("+")
        return "".join(parts)

    def _format_row(self, values: List[str], widths: List[int]) -> str:
        parts: List[str] = ["|"]
        for value, width in zip(values, widths):
            parts.append(f" {value.ljust(width)} ")
            parts.append("|")
        return "".join(parts)


class CliSession:
    """Lazily connected data source shared by one CLI invocation."""

    def __init__(self, config: Config, ds_config: DataSourceConfig, seed_demo: bool):
        self.config = config
        self.ds_config = ds_config
        self.seed_demo = seed_demo
        self._datasource: Optional[DataSource] = None

    @property
    def datasource(self) -> DataSource:
        if self._datasource is None:
            datasource = create_datasource(self.ds_config)
            datasource.connect()
            if self.seed_demo:
                _seed_demo_data(datasource)
            self._datasource = datasource
        return self._datasource

    def open_table(self, table_ref: str) -> AdHocTable:
        """Discover a table, failing the command when it does not exist."""
        table = AdHocTable.open(self.datasource, table_ref, self.config.formats)
        if not table.exists():
            raise click.ClickException(f"Table not found: {table_ref}")
        return table

    def close(self) -> None:
        if self._datasource is not None:
            self._datasource.disconnect()
            self._datasource = None


def parse_assignments(values: Sequence[str], option: str) -> Record:
    """Parse ``COL=VALUE`` arguments into a record."""
    record: Record = {}
    for value in values:
        name, sep, text = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected COLUMN=VALUE, got '{value}'", param_hint=option)
        record[name] = text
    return record


def parse_order_by(values: Sequence[str]) -> Optional[OrderByClause]:
    """Parse ``COL`` / ``COL:asc`` / ``COL:desc`` arguments."""
    if not values:
        return None
    order_by = OrderByClause()
    for value in values:
        column, _, direction_text = value.rpartition(":")
        direction = OrderByDirection.make(direction_text)
        if not column or direction is None:
            column = value
            direction = OrderByDirection.ASCENDING
        order_by.add_order_by(column, direction)
    return order_by


def build_query_wrapper(
    predicate: Optional[str],
    page: Optional[int],
    rows: Optional[int],
    method: str,
) -> Optional[QueryWrapper]:
    """Combine the filter and pagination options, filter innermost."""
    wrappers: List[QueryWrapper] = []
    if predicate:
        wrappers.append(FilterWrapper(predicate))
    if page is not None or rows is not None:
        wrappers.append(
            PaginationWrapper(
                page or 0,
                rows or DEFAULT_ROWS_PER_PAGE,
                PagingMethod.make(method),
            )
        )
    if not wrappers:
        return None
    if len(wrappers) == 1:
        return wrappers[0]
    return MultiQueryWrapper(wrappers)


def _load_config_bundle(config_path: Optional[str]) -> Tuple[Config, Optional[str]]:
    if config_path:
        config = load_config(config_path)
        return config, None
    config = _build_default_config()
    note = "Using in-memory DuckDB data source with demo tables."
    return config, note


def _build_default_config() -> Config:
    config = Config()
    ds_config = DataSourceConfig(
        name="duckdb_mem",
        type="duckdb",
        config={"path": ":memory:", "read_only": False},
    )
    config.datasources[ds_config.name] = ds_config
    return config


def _select_datasource_config(config: Config, name: Optional[str]) -> DataSourceConfig:
    if name is not None:
        ds_config = config.datasources.get(name)
        if ds_config is None:
            raise click.ClickException(f"Unknown data source: {name}")
        return ds_config
    ds_config = config.default_datasource()
    if ds_config is None:
        raise click.ClickException("No data sources configured")
    return ds_config


def _seed_demo_data(datasource: DataSource) -> None:
    connection = datasource.connection
    if connection is None:
        return
    _create_demo_users(connection)
    _insert_demo_users(connection)


def _create_demo_users(connection) -> None:
    connection.execute("CREATE SEQUENCE IF NOT EXISTS demo_users_seq START 1")
    sql = """
        CREATE TABLE IF NOT EXISTS demo_users (
            id INTEGER PRIMARY KEY DEFAULT nextval('demo_users_seq'),
            name VARCHAR,
            age INTEGER,
            city VARCHAR,
            signup_date DATE
        )
    """
    connection.execute(sql)


def _insert_demo_users(connection) -> None:
    sql = """
        INSERT INTO demo_users (name, age, city, signup_date) VALUES
        ('Alice', 30, 'New York', DATE '2023-01-15'),
        ('Bob', 34, 'Boston', DATE '2023-02-20'),
        ('Carlos', 28, 'Austin', DATE '2023-03-05'),
        ('Diana', 41, 'Chicago', DATE '2023-04-11'),
        ('Eve', 25, 'Seattle', NULL)
    """
    connection.execute("DELETE FROM demo_users")
    connection.execute(sql)


def _run(action: Callable[[], None]) -> None:
    """Run a command body, reporting statement errors without a traceback."""
    try:
        action()
    except (duckdb.Error, psycopg2.Error, ParameterBindingError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file. Defaults to an in-memory DuckDB demo.",
)
@click.option(
    "-d",
    "--datasource",
    "datasource_name",
    default=None,
    help="Configured data source to use. Defaults to the first one.",
)
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    datasource_name: Optional[str],
    log_level: Optional[str],
) -> None:
    """Select, insert, update and delete rows of any table."""
    config, note = _load_config_bundle(config_path)
    setup_logging(
        level=log_level or config.logging.level,
        structured=config.logging.structured,
        log_file=config.logging.log_file,
    )
    ds_config = _select_datasource_config(config, datasource_name)
    session = CliSession(config, ds_config, seed_demo=note is not None)
    ctx.obj = session
    ctx.call_on_close(session.close)
    if note:
        click.echo(note, err=True)


@cli.command()
@click.argument("table_ref")
@click.pass_obj
def describe(session: CliSession, table_ref: str) -> None:
    """Describe TABLE_REF ([catalog.][schema.]table)."""
    table = session.open_table(table_ref)
    click.echo(table.describe())


@cli.command()
@click.argument("table_ref")
@click.option("-k", "--key", "keys", multiple=True, help="COLUMN=VALUE equality match.")
@click.option("-o", "--order-by", "order_by", multiple=True, help="COLUMN[:asc|desc].")
@click.option("-f", "--filter", "predicate", default=None, help="Raw SQL predicate.")
@click.option("--page", type=click.IntRange(min=0), default=None, help="0-based page.")
@click.option("--rows", type=click.IntRange(min=1), default=None, help="Rows per page.")
@click.option(
    "--method",
    type=click.Choice(["limit_offset", "rownum"], case_sensitive=False),
    default="limit_offset",
    show_default=True,
)
@click.option("--sql", "show_sql", is_flag=True, help="Print the statement instead of running it.")
@click.pass_obj
def select(
    session: CliSession,
    table_ref: str,
    keys: Tuple[str, ...],
    order_by: Tuple[str, ...],
    predicate: Optional[str],
    page: Optional[int],
    rows: Optional[int],
    method: str,
    show_sql: bool,
) -> None:
    """Select rows from TABLE_REF."""
    table = session.open_table(table_ref)
    key_data = parse_assignments(keys, "--key")
    clause = parse_order_by(order_by)
    wrapper = build_query_wrapper(predicate, page, rows, method)

    def action() -> None:
        if show_sql:
            statement = table.builder.prepare_select(key_data, clause, wrapper)
            click.echo(statement.sql)
            return
        start = time.time()
        records = table.select(key_data, clause, wrapper)
        elapsed = (time.time() - start) * 1000
        headers = _headers(table, records)
        RecordPrinter(click.echo).display(records, headers, elapsed)

    _run(action)


@cli.command()
@click.argument("table_ref")
@click.argument("values", nargs=-1, required=True)
@click.option("--sql", "show_sql", is_flag=True, help="Print the statement instead of running it.")
@click.pass_obj
def insert(session: CliSession, table_ref: str, values: Tuple[str, ...], show_sql: bool) -> None:
    """Insert a row of COLUMN=VALUE pairs into TABLE_REF."""
    table = session.open_table(table_ref)
    data = parse_assignments(values, "VALUES")

    def action() -> None:
        if show_sql:
            click.echo(table.builder.prepare_insert(data).sql)
            return
        generated = table.insert(data)
        click.echo(f"Inserted 1 row into {table.table.full_table_name()}")
        _echo_record(generated)

    _run(action)


@cli.command()
@click.argument("table_ref")
@click.argument("values", nargs=-1, required=True)
@click.option("-k", "--key", "keys", multiple=True, help="COLUMN=VALUE row match.")
@click.option("--sql", "show_sql", is_flag=True, help="Print the statement instead of running it.")
@click.pass_obj
def update(
    session: CliSession,
    table_ref: str,
    values: Tuple[str, ...],
    keys: Tuple[str, ...],
    show_sql: bool,
) -> None:
    """Update TABLE_REF with COLUMN=VALUE pairs.

    Without --key the row is matched on the primary-key values in VALUES.
    """
    table = session.open_table(table_ref)
    data = parse_assignments(values, "VALUES")
    key_data = parse_assignments(keys, "--key") if keys else None

    def action() -> None:
        if show_sql:
            click.echo(table.builder.prepare_update(data, key_data).sql)
            return
        table.update(data, key_data)
        click.echo(f"Updated {table.table.full_table_name()}")

    _run(action)


@cli.command()
@click.argument("table_ref")
@click.option("-k", "--key", "keys", multiple=True, help="COLUMN=VALUE row match.")
@click.option("--yes", is_flag=True, help="Do not ask before deleting every row.")
@click.option("--sql", "show_sql", is_flag=True, help="Print the statement instead of running it.")
@click.pass_obj
def delete(
    session: CliSession,
    table_ref: str,
    keys: Tuple[str, ...],
    yes: bool,
    show_sql: bool,
) -> None:
    """Delete rows of TABLE_REF matching --key (every row without one)."""
    table = session.open_table(table_ref)
    key_data = parse_assignments(keys, "--key")

    def action() -> None:
        statement = table.builder.prepare_delete(key_data)
        if show_sql:
            click.echo(statement.sql)
            return
        if not statement.parameters and not yes:
            click.confirm(
                f"No --key matches a column. Delete every row of "
                f"{table.table.full_table_name()}?",
                abort=True,
            )
        table.delete(key_data)
        click.echo(f"Deleted from {table.table.full_table_name()}")

    _run(action)


def _headers(table: AdHocTable, records: List[Record]) -> List[str]:
    if records:
        return list(records[0].keys())
    return [col.name for col in table.table.columns_in_order]


def _echo_record(record: Dict[str, str]) -> None:
    for name, value in record.items():
        click.echo(f"  {name} = {value}")


if __name__ == "__main__":
    cli()
