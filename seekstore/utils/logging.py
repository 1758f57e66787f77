"""
Logging setup for seekstore.

Everything logs through stdlib `logging`: accessors and the cascade report
through module loggers, the CLI calls `configure_logging` once at start-up.
Console output is a single pipe-separated line; with ``LOG_JSON=1`` each
record becomes one JSON object carrying every ``extra=`` field, which is how
the executor attaches the failing SQL and the cascade the association name.

Usage:
    from seekstore.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=True)
    log = get_logger(__name__)
    log.warning("Destroy associated object comments error", extra={"parent": "article"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}

# Third-party loggers that chatter at INFO about pool housekeeping.
_DRIVER_LOGGERS = ("psycopg", "psycopg.pool")


def _one_line(sql: str) -> str:
    return " ".join(sql.split())


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as a JSON string, promoting ``extra=`` fields."""
    payload: Dict[str, Any] = {
        "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in vars(record).items():
        if key in _RESERVED_ATTRS:
            continue
        payload[key] = _one_line(value) if key == "sql" and isinstance(value, str) else value
    # older call sites pass a nested dict as `extra={"extra": {...}}`
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update(nested)
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    driver_level: str = "WARNING",
) -> None:
    """
    Configure the root logger for the CLI and scripts.

    Parameters
    ----------
    level : str
        Level name for seekstore and the root logger, e.g. "DEBUG".
    json_logs : bool
        Emit JSON objects instead of console lines.
    driver_level : str
        Level for the psycopg and psycopg_pool loggers.
    """
    level = level.upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
                }
            },
            "loggers": {name: {"level": driver_level.upper()} for name in _DRIVER_LOGGERS},
            "root": {"handlers": ["default"], "level": level},
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Module logger; the root logger when `name` is None."""
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
