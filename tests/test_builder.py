"""Tests for statement building."""

import pytest

from adhoc_sql.statement.builder import StatementBuilder
from adhoc_sql.statement.order import OrderByClause, OrderByDirection
from adhoc_sql.statement.wrappers import (
    FilterWrapper,
    MultiQueryWrapper,
    PaginationWrapper,
    PagingMethod,
)


@pytest.fixture
def builder(random_names_table):
    return StatementBuilder(random_names_table)


def test_select_all(builder):
    """No keys means no where clause."""
    assert builder.build_select() == "select * from `RANDOM_NAMES`"
    assert builder.build_select([]) == "select * from `RANDOM_NAMES`"


def test_select_order_by(builder):
    """ORDER BY follows the table name."""
    order_by = OrderByClause()
    order_by.add_order_by("LAST", OrderByDirection.ASCENDING)

    assert builder.build_select(None, order_by, None, None) == (
        "select * from `RANDOM_NAMES` order by LAST asc"
    )


def test_select_empty_order_by(builder):
    """An empty clause adds nothing."""
    assert builder.build_select(None, OrderByClause()) == "select * from `RANDOM_NAMES`"


def test_select_filter(builder):
    assert builder.build_select(None, None, FilterWrapper("LAST like 'Ander%'"), None) == (
        "select z.* from (select * from `RANDOM_NAMES`) z where LAST like 'Ander%'"
    )


def test_select_limit_offset(builder):
    wrapper = PaginationWrapper(0, 100, PagingMethod.LIMIT_OFFSET)

    assert builder.build_select(None, None, wrapper, None) == (
        "select z.* from (select * from `RANDOM_NAMES`) z limit 100 offset 0"
    )


def test_select_rownum(builder):
    wrapper = PaginationWrapper(0, 100, PagingMethod.ROWNUM)

    assert builder.build_select(None, None, wrapper, None) == (
        "select z.*, ROW_NUMBER() as xxx_rownumber_xxx from "
        "(select * from `RANDOM_NAMES`) z where xxx_rownumber_xxx between 1 and 100"
    )


def test_select_multi_wrapper(builder):
    wrapper = MultiQueryWrapper(
        [FilterWrapper("LAST like 'B%'"), PaginationWrapper(0, 25, PagingMethod.LIMIT_OFFSET)]
    )

    assert builder.build_select(None, None, wrapper, None) == (
        "select z2.* from (select z1.* from (select * from `RANDOM_NAMES`) z1 "
        "where LAST like 'B%') z2 limit 25 offset 0"
    )


def test_select_keys_and_order_stay_inside_wrapper(builder):
    """Where and ORDER BY are part of the wrapped subquery."""
    order_by = OrderByClause()
    order_by.add_order_by("FIRST", OrderByDirection.DESCENDING)

    sql = builder.build_select(["LAST"], order_by, PaginationWrapper(1, 10))

    assert sql == (
        "select z.* from (select * from `RANDOM_NAMES` where LAST = ? "
        "order by FIRST desc) z limit 10 offset 10"
    )


@pytest.mark.parametrize(
    "key_names, known",
    [
        (["ID"], 1),
        (["FIRST", "LAST"], 2),
        (["NOPE"], 0),
        (["ID", "NOPE", "LAST", "ALSO_NOPE"], 2),
        ([], 0),
    ],
)
def test_select_placeholders_match_known_keys(builder, key_names, known):
    """Unknown key fields add no predicate and no placeholder."""
    seen = []
    sql = builder.build_select(key_names, action=seen.append)

    assert sql.count("?") == known
    assert len(seen) == known
    if known == 0:
        assert "where" not in sql


def test_select_keys_in_supplied_order(builder):
    sql = builder.build_select(["LAST", "NOPE", "FIRST"])

    assert sql == "select * from `RANDOM_NAMES` where LAST = ? and FIRST = ?"


def test_prepare_select_parameters(builder):
    """Parameters follow the predicates."""
    statement = builder.prepare_select({"LAST": "Smith", "EXTRA": "x", "ID": "7"})

    assert statement.sql == "select * from `RANDOM_NAMES` where LAST = ? and ID = ?"
    assert [(p.column.name, p.value) for p in statement.parameters] == [
        ("LAST", "Smith"),
        ("ID", "7"),
    ]


def test_prepare_select_without_keys(builder):
    statement = builder.prepare_select({})

    assert statement.sql == "select * from `RANDOM_NAMES`"
    assert statement.parameters == []


def test_insert(builder):
    """Unknown fields are dropped from columns and parameters."""
    statement = builder.prepare_insert({"FIRST": "Ann", "BOGUS": "?", "LAST": "Lee"})

    assert statement.sql == "insert into `RANDOM_NAMES` (FIRST, LAST) values (?, ?);"
    assert [(p.column.name, p.value) for p in statement.parameters] == [
        ("FIRST", "Ann"),
        ("LAST", "Lee"),
    ]


def test_update_by_table_keys(builder):
    """Set values first, then the primary-key values taken from the data."""
    statement = builder.prepare_update({"ID": "5", "FIRST": "Ann", "BOGUS": "x"})

    assert statement.sql == "update `RANDOM_NAMES` set ID = ?, FIRST = ? where ID = ?;"
    assert [(p.column.name, p.value) for p in statement.parameters] == [
        ("ID", "5"),
        ("FIRST", "Ann"),
        ("ID", "5"),
    ]


def test_update_with_key_data(builder):
    """Explicit keys locate the row, so key columns can change."""
    statement = builder.prepare_update({"ID": "6", "LAST": "Lee"}, {"ID": "5"})

    assert statement.sql == "update `RANDOM_NAMES` set ID = ?, LAST = ? where ID = ?;"
    assert [p.value for p in statement.parameters] == ["6", "Lee", "5"]


def test_update_with_empty_key_data_touches_every_row(builder):
    statement = builder.prepare_update({"LAST": "Lee"}, {})

    assert statement.sql == "update `RANDOM_NAMES` set LAST = ?;"
    assert [p.value for p in statement.parameters] == ["Lee"]


def test_update_key_action_arguments(builder):
    """The action sees None for set values and key values for key fields."""
    calls = []
    builder.build_update(["FIRST"], {"ID": "9"}, lambda name, key: calls.append((name, key)))

    assert calls == [("FIRST", None), ("ID", "9")]


def test_delete(builder):
    statement = builder.prepare_delete({"ID": "3"})

    assert statement.sql == "delete from `RANDOM_NAMES` where ID = ?;"
    assert [p.value for p in statement.parameters] == ["3"]


def test_delete_without_keys_deletes_everything(builder):
    assert builder.prepare_delete(None).sql == "delete from `RANDOM_NAMES`;"
    assert builder.build_delete(["NOPE"]) == "delete from `RANDOM_NAMES`;"


def test_key_column_names_by_position(random_names_table):
    builder = StatementBuilder(random_names_table)

    assert builder.key_column_names() == ["ID"]
