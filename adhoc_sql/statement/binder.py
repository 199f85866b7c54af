"""Converts string parameter values into typed driver values."""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from ..catalog.schema import SqlType
from .builder import ColumnValue
from .formats import DateTimeFormats, parse_temporal

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.\-]")

_INTEGER_TYPES = frozenset(
    {SqlType.INTEGER, SqlType.BIGINT, SqlType.SMALLINT, SqlType.TINYINT}
)
_FLOAT_TYPES = frozenset({SqlType.FLOAT, SqlType.DOUBLE, SqlType.REAL})


class ParameterBindingError(ValueError):
    """Exception raised when a numeric value cannot be bound."""

    pass


class ParameterBinder:
    """Turns (column, string) parameters into values for a DB-API driver.

    Empty or missing strings bind NULL. Temporal strings that do not parse
    against the configured pattern also bind NULL.
    """

    def __init__(self, formats: Optional[DateTimeFormats] = None):
        if formats is None:
            formats = DateTimeFormats()
        self.formats = formats

    def bind(self, parameters: Sequence[ColumnValue]) -> List[Any]:
        """Convert every parameter, keeping placeholder order."""
        values = []
        for parameter in parameters:
            values.append(self.bind_value(parameter))
        return values

    def bind_value(self, parameter: ColumnValue) -> Any:
        """Convert a single parameter."""
        value = parameter.value
        sql_type = parameter.column.sql_type
        if value is None or value == "":
            return None

        if sql_type.is_temporal:
            parsed = parse_temporal(value, sql_type, self.formats)
            if parsed is None:
                logger.debug(
                    f"Could not parse '{value}' for {parameter.column.name} "
                    f"with '{self.formats.pattern_for(sql_type)}', binding NULL"
                )
            return parsed

        if sql_type.is_numeric:
            return self._bind_numeric(parameter.column.name, value, sql_type)

        # Large text is bound as the plain string
        return value

    def _bind_numeric(self, column_name: str, value: str, sql_type: SqlType) -> Any:
        """Strip everything but digits, '.' and '-' and convert."""
        cleaned = _NON_NUMERIC.sub("", value)
        try:
            if sql_type in _INTEGER_TYPES:
                return int(cleaned)
            if sql_type in _FLOAT_TYPES:
                return float(cleaned)
            return Decimal(cleaned)
        except (ValueError, InvalidOperation) as e:
            raise ParameterBindingError(
                f"Value '{value}' for column {column_name} is not a valid {sql_type.name}"
            ) from e
