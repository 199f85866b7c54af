"""Query wrappers that nest a query as a subquery.

Example:
    FilterWrapper("name like 'J%'").wrap("select * from mytable", "z")
    -> "select z.* from (select * from mytable) z where name like 'J%'"
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional

ROW_NUMBER_COLUMN = "xxx_rownumber_xxx"


class QueryWrapper(ABC):
    """Turns a query into a subquery of a new query."""

    @abstractmethod
    def wrap(self, base_query: str, wrap_alias: str) -> str:
        """Wrap an SQL query.

        Args:
            base_query: Query to wrap
            wrap_alias: Alias for the subquery; must be a valid table alias

        Returns:
            Wrapped query
        """
        pass


class FilterWrapper(QueryWrapper):
    """Adds a WHERE predicate around an existing query.

    Useful for canned queries whose own where clause is awkward to edit.
    """

    def __init__(self, predicate: str):
        self.predicate = predicate

    def wrap(self, base_query: str, wrap_alias: str) -> str:
        return (
            f"select {wrap_alias}.* from ({base_query}) {wrap_alias} "
            f"where {self.predicate}"
        )

    def __repr__(self) -> str:
        return f"FilterWrapper({self.predicate!r})"


class PagingMethod(Enum):
    """Supported pagination methods."""

    LIMIT_OFFSET = "limit_offset"  # MySQL, PostgreSQL, DuckDB, ...
    ROWNUM = "rownum"  # ROW_NUMBER() window

    @classmethod
    def make(cls, value: str) -> "PagingMethod":
        lowered = value.strip().lower()
        for method in cls:
            if method.value == lowered or method.name.lower() == lowered:
                return method
        raise ValueError(f"Unsupported paging method: {value}")


class PaginationWrapper(QueryWrapper):
    """Returns one page of a query's rows.

    Pages are 0-based; the ROWNUM window bounds are 1-based and inclusive.
    """

    def __init__(
        self, page: int, rows: int, method: PagingMethod = PagingMethod.LIMIT_OFFSET
    ):
        if page < 0:
            raise ValueError(f"Page must be >= 0, got {page}")
        if rows <= 0:
            raise ValueError(f"Rows per page must be > 0, got {rows}")
        self.page = page
        self.rows = rows
        self.method = method

    @property
    def first_row(self) -> int:
        return self.page * self.rows + 1

    @property
    def last_row(self) -> int:
        return (self.page + 1) * self.rows

    def wrap(self, base_query: str, wrap_alias: str) -> str:
        if self.method == PagingMethod.ROWNUM:
            return (
                f"select {wrap_alias}.*, ROW_NUMBER() as {ROW_NUMBER_COLUMN} "
                f"from ({base_query}) {wrap_alias} "
                f"where {ROW_NUMBER_COLUMN} between {self.first_row} and {self.last_row}"
            )
        return (
            f"select {wrap_alias}.* from ({base_query}) {wrap_alias} "
            f"limit {self.rows} offset {self.page * self.rows}"
        )

    def __repr__(self) -> str:
        return f"PaginationWrapper(page={self.page}, rows={self.rows}, {self.method.name})"


class MultiQueryWrapper(QueryWrapper):
    """Applies several wrappers in order.

    The first wrapper added is the innermost. Each level gets the alias with
    a 1-based level number appended so nested aliases never collide.
    """

    def __init__(self, wrappers: Optional[Iterable[QueryWrapper]] = None):
        self.wrappers: List[QueryWrapper] = []
        if wrappers is not None:
            for wrapper in wrappers:
                self.add_wrapper(wrapper)

    def add_wrapper(self, wrapper: QueryWrapper) -> "MultiQueryWrapper":
        """Add a new outermost wrapper."""
        self.wrappers.append(wrapper)
        return self

    def wrap(self, base_query: str, wrap_alias: str) -> str:
        wrapped_query = base_query
        level = 0
        for wrapper in self.wrappers:
            level += 1
            wrapped_query = wrapper.wrap(wrapped_query, f"{wrap_alias}{level}")
        return wrapped_query

    def __len__(self) -> int:
        return len(self.wrappers)

    def __repr__(self) -> str:
        return f"MultiQueryWrapper({self.wrappers!r})"
