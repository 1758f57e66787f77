from __future__ import annotations

import json
import logging

from seekstore.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_ID = 7


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.kind = "Article"
    record.id = EXPECTED_ID

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["kind"] == "Article"
    assert payload["id"] == EXPECTED_ID
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"association": "comments"}

    payload = json.loads(_json_formatter(record))

    assert payload["association"] == "comments"


def test_json_formatter_renders_unserializable_values() -> None:
    record = _record()
    record.sql = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["sql"].startswith("<object object")


def test_logger_extra_reaches_formatter(caplog) -> None:
    log = logging.getLogger("seekstore.test")
    with caplog.at_level(logging.WARNING):
        log.warning("Destroy associated object comments error", extra={"parent": "Article"})

    payload = json.loads(_json_formatter(caplog.records[0]))
    assert payload["parent"] == "Article"
    assert payload["level"] == "WARNING"


def test_json_formatter_collapses_sql_and_stamps_time() -> None:
    record = _record("Statement failed")
    record.sql = "SELECT id\n    FROM articles\n    WHERE id = %s"

    payload = json.loads(_json_formatter(record))

    assert payload["sql"] == "SELECT id FROM articles WHERE id = %s"
    assert payload["ts"].endswith("+00:00")


def test_configure_logging_quiets_driver_loggers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="debug", json_logs=True)
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("psycopg.pool").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
