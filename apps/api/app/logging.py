from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from app.context import get_correlation_id, get_principal_id, get_scope_level

# Request identity rendered at the top level of every JSON line.
IDENTITY_FIELDS = ("correlation_id", "principal_id", "scope")

# ``extra=`` keys copied into "fields"; anything else a caller attaches is dropped.
EVENT_FIELDS = frozenset(
    {
        "method",
        "path",
        "status_code",
        "duration_ms",
        "role_source",
        "status",
        "error",
    }
)

_MAX_ERROR_LENGTH = 500

_default_record_factory = logging.getLogRecordFactory()


def _correlated_record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
    # Stamped at creation so handlers outside the request context (caplog) still see it.
    record = _default_record_factory(*args, **kwargs)
    if getattr(record, "correlation_id", None) is None:
        record.correlation_id = get_correlation_id()
    return record


class RequestIdentityFilter(logging.Filter):
    """Fill in the principal and resolved scope a record was not given explicitly."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "principal_id", None) is None:
            record.principal_id = get_principal_id()
        if getattr(record, "scope", None) is None:
            record.scope = get_scope_level()
        return True


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key in IDENTITY_FIELDS:
            payload[key] = getattr(record, key, None)

        fields = {key: value for key, value in vars(record).items() if key in EVENT_FIELDS and value is not None}
        if isinstance(fields.get("error"), str):
            fields["error"] = fields["error"][:_MAX_ERROR_LENGTH]
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        payload["fields"] = fields
        return json.dumps(payload, default=str)


def configure_logging(level_name: str | None = None) -> None:
    """Route the root logger to stdout as JSON lines; safe to call more than once."""

    root_logger = logging.getLogger()
    if any(isinstance(handler.formatter, JsonLogFormatter) for handler in root_logger.handlers):
        return

    level = logging.getLevelName((level_name or os.getenv("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())
    handler.addFilter(RequestIdentityFilter())

    root_logger.handlers.clear()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    logging.setLogRecordFactory(_correlated_record_factory)
