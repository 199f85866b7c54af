"""Schema discovery for a single table."""

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from .schema import ColumnMetadata, Nullability, SqlType, TableMetadata

if TYPE_CHECKING:
    from ..datasources.base import ColumnDescriptor, DataSource

logger = logging.getLogger(__name__)

TABLE_TYPES = ("TABLE", "VIEW", "ALIAS", "SYNONYM")


def discover_table(
    source: "DataSource",
    catalog: Optional[str],
    schema: Optional[str],
    table_name: str,
) -> TableMetadata:
    """Build table metadata from a live introspection source.

    The exact catalog/schema/table triple is tried first. When that finds no
    columns, every table, view, alias and synonym visible under the
    catalog/schema filter is scanned for a case-insensitive name match and
    the lookup is retried with the names the engine reported for it.

    Args:
        source: Introspection source (usually a connected DataSource)
        catalog: Catalog name, or None to search all catalogs
        schema: Schema name, or None to search all schemas
        table_name: Table name as typed by the caller

    Returns:
        Table metadata. When nothing matches, the metadata has no columns and
        no keys; this is not an error.
    """
    metadata = _load_table_metadata(source, catalog, schema, table_name)
    if metadata is not None:
        logger.debug(f"Found table {metadata.full_table_name()} by exact name")
        return metadata

    wanted = table_name.lower()
    for entry in source.list_tables(catalog, schema, None, TABLE_TYPES):
        if entry.name.lower() != wanted:
            continue
        metadata = _load_table_metadata(source, entry.catalog, entry.schema, entry.name)
        if metadata is not None:
            logger.debug(
                f"Found table {metadata.full_table_name()} for '{table_name}' "
                "by case-insensitive match"
            )
            return metadata

    logger.info(f"Table '{table_name}' not found on {source}")
    return TableMetadata(table_name=table_name, catalog=catalog, schema=schema)


def _load_table_metadata(
    source: "DataSource",
    catalog: Optional[str],
    schema: Optional[str],
    table_name: str,
) -> Optional[TableMetadata]:
    """Load keys and columns for one exact triple, None if it has no columns."""
    key_names = source.get_primary_keys(catalog, schema, table_name)
    descriptors = source.get_columns(catalog, schema, table_name, None)
    if not descriptors:
        return None

    columns = build_columns(descriptors)
    return TableMetadata(
        table_name=table_name,
        catalog=catalog,
        schema=schema,
        key_names=frozenset(key_names),
        columns_in_order=tuple(columns),
    )


def build_columns(descriptors: List["ColumnDescriptor"]) -> List[ColumnMetadata]:
    """Convert introspection descriptors to column metadata, by position."""
    columns = []
    for desc in sorted(descriptors, key=lambda d: d.position):
        columns.append(
            ColumnMetadata(
                name=desc.name,
                sql_type=SqlType.from_type_name(desc.type_name),
                type_name=desc.type_name,
                size=desc.size or 0,
                scale=desc.scale or 0,
                nullable=Nullability.from_flag(desc.nullable),
                position=desc.position,
                is_auto_increment=bool(desc.is_auto_increment),
                default_value=desc.default_value,
            )
        )
    return columns


def split_table_reference(
    table_ref: str,
) -> Tuple[Optional[str], Optional[str], str]:
    """Split a dotted table reference into (catalog, schema, table).

    Supports formats:
    - table
    - schema.table
    - catalog.schema.table (extra segments are ignored)

    Empty segments become None.
    """
    parts = table_ref.split(".")
    catalog = None
    schema = None

    if len(parts) == 1:
        table = parts[0]
    elif len(parts) == 2:
        schema, table = parts
    else:
        catalog, schema, table = parts[0], parts[1], parts[2]

    return (catalog or None, schema or None, table)
