"""Tests for logging setup and contextual loggers."""

import json
import logging

from adhoc_sql.utils.logging import (
    LoggerAdapter,
    StructuredFormatter,
    get_contextual_logger,
)


def test_contextual_logger_carries_table():
    logger = get_contextual_logger("adhoc_sql.test", {"table": "`orders`"})

    assert isinstance(logger, LoggerAdapter)
    assert logger.logger is logging.getLogger("adhoc_sql.test")

    msg, kwargs = logger.process("Row inserted", {})
    assert msg == "Row inserted"
    assert kwargs["extra"]["extra_fields"] == {"table": "`orders`"}


def test_structured_formatter_includes_context():
    record = logging.LogRecord(
        "adhoc_sql.test", logging.INFO, __file__, 10, "Row inserted", None, None
    )
    record.extra_fields = {"table": "`orders`"}

    data = json.loads(StructuredFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "adhoc_sql.test"
    assert data["message"] == "Row inserted"
    assert data["table"] == "`orders`"
