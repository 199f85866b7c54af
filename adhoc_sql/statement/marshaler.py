"""Converts result rows into string records."""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

import pyarrow as pa

from ..catalog.schema import SqlType
from .builder import Record
from .formats import DateTimeFormats, format_temporal


class ResultMarshaler:
    """Turns result rows into records of strings.

    Temporal columns are formatted with the configured patterns; everything
    else uses the driver value's string form. NULL becomes an empty string,
    so NULL and ``""`` cannot be told apart in a record.
    """

    def __init__(self, formats: Optional[DateTimeFormats] = None):
        if formats is None:
            formats = DateTimeFormats()
        self.formats = formats

    def marshal_batch(self, batch: pa.RecordBatch) -> List[Record]:
        """Convert every row of a record batch."""
        records = []
        for row in batch.to_pylist():
            records.append(self.marshal_row(row, batch.schema))
        return records

    def marshal_row(self, row: Dict[str, Any], schema: pa.Schema) -> Record:
        """Convert one row, in result column order."""
        record: Record = {}
        for result_field in schema:
            value = row.get(result_field.name)
            record[result_field.name] = self.to_string(value, result_field.type)
        return record

    def to_string(self, value: Any, arrow_type: Optional[pa.DataType] = None) -> str:
        """Render one value."""
        if value is None:
            return ""
        sql_type = temporal_type(arrow_type, value)
        if sql_type is not None:
            return format_temporal(value, sql_type, self.formats)
        return str(value)


def temporal_type(arrow_type: Optional[pa.DataType], value: Any) -> Optional[SqlType]:
    """Temporal SqlType of a result column, None for other columns.

    The Arrow type decides when present; otherwise the Python value does.
    """
    if arrow_type is not None:
        if pa.types.is_timestamp(arrow_type):
            return SqlType.TIMESTAMP
        if pa.types.is_date(arrow_type):
            return SqlType.DATE
        if pa.types.is_time(arrow_type):
            return SqlType.TIME
        if not pa.types.is_null(arrow_type):
            return None
    if isinstance(value, datetime):
        return SqlType.TIMESTAMP
    if isinstance(value, date):
        return SqlType.DATE
    if isinstance(value, time):
        return SqlType.TIME
    return None
