"""Statement building, parameter binding and result marshaling."""

from .order import OrderBy, OrderByClause, OrderByDirection
from .wrappers import (
    FilterWrapper,
    MultiQueryWrapper,
    PaginationWrapper,
    PagingMethod,
    QueryWrapper,
)
from .formats import DateTimeFormats
from .builder import (
    ColumnValue,
    Record,
    SQLStatementWithParameters,
    StatementBuilder,
)
from .binder import ParameterBinder, ParameterBindingError
from .marshaler import ResultMarshaler
from .table import AdHocTable

__all__ = [
    "OrderBy",
    "OrderByClause",
    "OrderByDirection",
    "FilterWrapper",
    "MultiQueryWrapper",
    "PaginationWrapper",
    "PagingMethod",
    "QueryWrapper",
    "DateTimeFormats",
    "ColumnValue",
    "Record",
    "SQLStatementWithParameters",
    "StatementBuilder",
    "ParameterBinder",
    "ParameterBindingError",
    "ResultMarshaler",
    "AdHocTable",
]
