"""ORDER BY clause construction."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional


class OrderByDirection(Enum):
    """Sort direction of an ORDER BY entry."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    @classmethod
    def make(cls, value: Optional[str]) -> Optional["OrderByDirection"]:
        """Parse ``asc``/``desc`` (any case), None for anything else."""
        if value is None:
            return None
        lowered = value.strip().lower()
        for direction in cls:
            if direction.value == lowered:
                return direction
        return None

    def __str__(self) -> str:
        return self.value


@dataclass
class OrderBy:
    """One ORDER BY entry.

    The column may be any expression the engine accepts in ORDER BY,
    including a select-list position.
    """

    column: str
    direction: OrderByDirection

    def to_sql(self) -> str:
        return f"{self.column} {self.direction}"


class OrderByClause:
    """Ordered, editable list of ORDER BY entries."""

    def __init__(self):
        self._entries: List[OrderBy] = []
        self._index: Dict[str, OrderBy] = {}

    def has_order_by_columns(self) -> bool:
        """Check if any ordering has been set."""
        return len(self._entries) > 0

    def get_order_by_direction(self, column: Optional[str]) -> str:
        """Return ``asc``/``desc`` for a column, empty string if unsorted."""
        if column is None:
            return ""
        entry = self._index.get(column)
        if entry is None:
            return ""
        return str(entry.direction)

    def add_order_by(
        self, column: str, direction: Optional[OrderByDirection]
    ) -> None:
        """Append a column or change its direction in place.

        A None direction removes the column.
        """
        existing = self._index.get(column)
        if direction is None:
            if existing is not None:
                self._remove(column, existing)
            return
        if existing is None:
            self._append(OrderBy(column, direction))
        else:
            existing.direction = direction

    def toggle_sort(self, column: str) -> None:
        """Cycle a column through ascending, descending and unsorted."""
        existing = self._index.get(column)
        if existing is None:
            self._append(OrderBy(column, OrderByDirection.ASCENDING))
        elif existing.direction == OrderByDirection.ASCENDING:
            existing.direction = OrderByDirection.DESCENDING
        else:
            self._remove(column, existing)

    def _append(self, entry: OrderBy) -> None:
        self._entries.append(entry)
        self._index[entry.column] = entry

    def _remove(self, column: str, entry: OrderBy) -> None:
        self._entries.remove(entry)
        del self._index[column]

    def to_sql(self) -> str:
        """Render ``order by col dir, ...``; empty string when unsorted."""
        if not self._entries:
            return ""
        return "order by " + ", ".join(entry.to_sql() for entry in self._entries)

    def __iter__(self) -> Iterator[OrderBy]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, column: str) -> bool:
        return column in self._index

    def __str__(self) -> str:
        return self.to_sql()

    def __repr__(self) -> str:
        return f"OrderByClause({self.to_sql()!r})"
