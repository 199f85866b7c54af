"""Date/time patterns shared by parameter binding and result marshaling.

Patterns use the ``MM/dd/yyyy`` / ``HH:mm:ss`` letter style and are
translated to ``strftime`` directives when used.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Union

from ..catalog.schema import SqlType

DEFAULT_DATE_FORMAT = "MM/dd/yyyy"
DEFAULT_TIME_FORMAT = "HH:mm:ss"

Temporal = Union[date, time, datetime]

_DIRECTIVES = {
    "y": {1: "%Y", 2: "%y", 4: "%Y"},
    "M": {1: "%m", 2: "%m", 3: "%b", 4: "%B"},
    "d": {1: "%d", 2: "%d"},
    "H": {1: "%H", 2: "%H"},
    "h": {1: "%I", 2: "%I"},
    "m": {1: "%M", 2: "%M"},
    "s": {1: "%S", 2: "%S"},
    "S": {1: "%f", 2: "%f", 3: "%f"},
    "a": {1: "%p"},
    "E": {1: "%a", 2: "%a", 3: "%a", 4: "%A"},
    "Z": {1: "%z"},
}


@dataclass
class DateTimeFormats:
    """Date and time patterns used for temporal columns."""

    date_format: str = DEFAULT_DATE_FORMAT
    time_format: str = DEFAULT_TIME_FORMAT

    @property
    def timestamp_format(self) -> str:
        return f"{self.date_format} {self.time_format}"

    def pattern_for(self, sql_type: SqlType) -> str:
        """Pick the pattern for a column type.

        DATE uses the date pattern, TIME the time pattern, anything else the
        combined timestamp pattern.
        """
        if sql_type == SqlType.DATE:
            return self.date_format
        if sql_type == SqlType.TIME:
            return self.time_format
        return self.timestamp_format


def to_strftime(pattern: str, full_year: bool = False) -> str:
    """Translate a ``yyyy-MM-dd`` style pattern into strftime directives.

    Text inside single quotes is literal and ``''`` is a quote character.
    With ``full_year`` every ``y`` run reads a four-digit year.
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                out.append("'")
                i += 2
                continue
            i += 1
            literal = []
            while i < n:
                if pattern[i] == "'":
                    if i + 1 < n and pattern[i + 1] == "'":
                        literal.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
            out.append("".join(literal).replace("%", "%%"))
            continue
        if ch in _DIRECTIVES:
            run = 1
            while i + run < n and pattern[i + run] == ch:
                run += 1
            widths = _DIRECTIVES[ch]
            if full_year and ch == "y":
                out.append("%Y")
            else:
                out.append(widths.get(run, widths[max(widths)]))
            i += run
            continue
        out.append("%%" if ch == "%" else ch)
        i += 1
    return "".join(out)


def parse_temporal(
    value: str, sql_type: SqlType, formats: DateTimeFormats
) -> Optional[Temporal]:
    """Parse a string for a temporal column.

    The pattern and the value are both cut to the shorter of the two lengths
    before parsing, so a value may stop early (``04/11`` against
    ``MM/dd/yyyy``). When the cut leaves a short year run, a four-digit year
    is still accepted (``1/2/2024`` reads as 2024-01-02).

    Returns:
        date, time or datetime matching the column type; None if unparseable
    """
    pattern = formats.pattern_for(sql_type)
    length = min(len(value), len(pattern))
    text = value[:length]
    directives = to_strftime(pattern[:length])
    parsed = _strptime(text, directives)
    if parsed is None:
        full_year = to_strftime(pattern[:length], full_year=True)
        if full_year != directives:
            parsed = _strptime(text, full_year)
    if parsed is None:
        return None
    if sql_type == SqlType.DATE:
        return parsed.date()
    if sql_type == SqlType.TIME:
        return parsed.time()
    return parsed


def format_temporal(value: Temporal, sql_type: SqlType, formats: DateTimeFormats) -> str:
    """Format a date, time or datetime with the pattern for its column type."""
    return value.strftime(to_strftime(formats.pattern_for(sql_type)))


def _strptime(text: str, directives: str) -> Optional[datetime]:
    try:
        return datetime.strptime(text, directives)
    except ValueError:
        return None
