"""Table and column metadata classes."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Optional, Tuple


class SqlType(IntEnum):
    """SQL type codes (same numbering as java.sql.Types)."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    OTHER = 1111
    BLOB = 2004
    CLOB = 2005
    BOOLEAN = 16
    NCLOB = 2011
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014

    @property
    def is_temporal(self) -> bool:
        return self in _TEMPORAL_TYPES

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC_TYPES

    @property
    def is_large_text(self) -> bool:
        return self in _LARGE_TEXT_TYPES

    @classmethod
    def from_type_name(cls, type_name: Optional[str]) -> "SqlType":
        """Map a database type string to a SqlType.

        Args:
            type_name: Type name as reported by the engine (e.g. ``DECIMAL(10,2)``,
                ``character varying``, ``timestamp with time zone``)

        Returns:
            Mapped SqlType, OTHER when nothing matches
        """
        type_str = (type_name or "").upper()

        if type_str.startswith("INTERVAL"):
            return cls.OTHER

        # Date/Time
        if "TIMESTAMP" in type_str or "DATETIME" in type_str:
            if "TIME ZONE" in type_str or "TIMESTAMPTZ" in type_str:
                return cls.TIMESTAMP_WITH_TIMEZONE
            return cls.TIMESTAMP
        if "DATE" in type_str:
            return cls.DATE
        if "TIME" in type_str:
            if "TIME ZONE" in type_str or "TIMETZ" in type_str:
                return cls.TIME_WITH_TIMEZONE
            return cls.TIME

        # Boolean
        if "BOOL" in type_str:
            return cls.BOOLEAN

        # Integer types
        if "TINYINT" in type_str:
            return cls.TINYINT
        if "SMALLINT" in type_str or type_str == "INT2":
            return cls.SMALLINT
        if (
            "BIGINT" in type_str
            or "HUGEINT" in type_str
            or "BIGSERIAL" in type_str
            or type_str == "INT8"
        ):
            return cls.BIGINT
        if "INT" in type_str or "SERIAL" in type_str:
            return cls.INTEGER

        # Exact and approximate numerics
        if "DECIMAL" in type_str:
            return cls.DECIMAL
        if "NUMERIC" in type_str:
            return cls.NUMERIC
        if "DOUBLE" in type_str or type_str == "FLOAT8":
            return cls.DOUBLE
        if "REAL" in type_str or type_str == "FLOAT4":
            return cls.REAL
        if "FLOAT" in type_str:
            return cls.FLOAT

        # Character types
        if "NCLOB" in type_str:
            return cls.NCLOB
        if "CLOB" in type_str:
            return cls.CLOB
        if "TEXT" in type_str:
            return cls.LONGVARCHAR
        if "CHAR" in type_str or "STRING" in type_str:
            if "VAR" in type_str:
                return cls.VARCHAR
            if type_str.startswith("CHAR") or type_str.startswith("NCHAR"):
                return cls.CHAR
            return cls.VARCHAR

        # Binary
        if "BLOB" in type_str:
            return cls.BLOB
        if "BYTEA" in type_str or "BINARY" in type_str:
            return cls.VARBINARY

        return cls.OTHER


_TEMPORAL_TYPES = frozenset(
    {
        SqlType.DATE,
        SqlType.TIME,
        SqlType.TIMESTAMP,
        SqlType.TIME_WITH_TIMEZONE,
        SqlType.TIMESTAMP_WITH_TIMEZONE,
    }
)

_NUMERIC_TYPES = frozenset(
    {
        SqlType.DECIMAL,
        SqlType.FLOAT,
        SqlType.DOUBLE,
        SqlType.NUMERIC,
        SqlType.INTEGER,
        SqlType.BIGINT,
        SqlType.REAL,
        SqlType.SMALLINT,
        SqlType.TINYINT,
    }
)

_LARGE_TEXT_TYPES = frozenset({SqlType.CLOB, SqlType.NCLOB})


class Nullability(Enum):
    """Tri-state nullability reported by schema introspection."""

    NO_NULLS = 0
    NULLABLE = 1
    UNKNOWN = 2

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> "Nullability":
        if flag is None:
            return cls.UNKNOWN
        if flag:
            return cls.NULLABLE
        return cls.NO_NULLS


@dataclass(frozen=True)
class ColumnMetadata:
    """Column metadata."""

    name: str
    sql_type: SqlType
    type_name: str
    size: int = 0
    scale: int = 0
    nullable: Nullability = Nullability.UNKNOWN
    position: int = 0
    is_auto_increment: bool = False
    default_value: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name} {self.type_name} {self.size}"

    def __repr__(self) -> str:
        return f"ColumnMetadata({self.name}, {self.sql_type.name})"


@dataclass(frozen=True)
class TableMetadata:
    """Table metadata built once by schema discovery.

    ``columns_by_name`` is derived from ``columns_in_order`` so both always
    hold the same columns. A table with no columns is valid: it is how
    discovery reports that nothing matched.
    """

    table_name: str
    catalog: Optional[str] = None
    schema: Optional[str] = None
    key_names: FrozenSet[str] = frozenset()
    columns_in_order: Tuple[ColumnMetadata, ...] = ()
    columns_by_name: Dict[str, ColumnMetadata] = field(
        default=None, init=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "key_names", frozenset(self.key_names))
        object.__setattr__(self, "columns_in_order", tuple(self.columns_in_order))
        by_name = {}
        for col in self.columns_in_order:
            by_name[col.name] = col
        object.__setattr__(self, "columns_by_name", by_name)

    def has_columns(self) -> bool:
        """Check whether discovery found the table."""
        return len(self.columns_in_order) > 0

    def has_column(self, name: str) -> bool:
        """Check if a column exists (case-exact)."""
        return name in self.columns_by_name

    def get_column(self, name: str) -> Optional[ColumnMetadata]:
        """Get column by its exact name."""
        return self.columns_by_name.get(name)

    def full_table_name(self) -> str:
        """Get the qualified table name with a backtick-quoted table."""
        parts = []
        if self.catalog is not None:
            parts.append(self.catalog)
            parts.append(".")
        if self.schema is not None:
            parts.append(self.schema)
            parts.append(".")
        parts.append(f"`{self.table_name}`")
        return "".join(parts)

    def describe(self) -> str:
        """Describe the table as ``name (col type size, ...)``."""
        columns = ", ".join(str(col) for col in self.columns_in_order)
        return f"{self.full_table_name()} ({columns})"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"TableMetadata({self.full_table_name()}, cols={len(self.columns_in_order)})"
