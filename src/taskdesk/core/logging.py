"""JSON logging shared by the HTTP and RPC front-ends."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import current_call

# Everything a bare LogRecord carries; anything else on a record came from ``extra``.
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_CALL_FIELDS = ("request_id", "transport", "operation")

# Third-party loggers routed through the JSON handler without propagating.
_FRAMEWORK_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "grpc")


class JsonLogFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def __init__(self, *, defaults: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._defaults = defaults or {}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            **self._defaults,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CALL_FIELDS:
            payload[field] = getattr(record, field, "-")

        for key, value in vars(record).items():
            if key not in _STANDARD_RECORD_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp records with the request id, transport and operation of the current call."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        call = current_call()
        record.request_id = call.request_id
        record.transport = call.transport
        record.operation = call.operation
        return True


def configure_logging(settings: Settings) -> None:
    """Route the root, server and SQL loggers through one JSON stdout handler."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler_only = {"handlers": ["default"], "propagate": False}

    loggers: dict[str, dict[str, Any]] = {
        "": {"handlers": ["default"], "level": level},
        "sqlalchemy.engine": {
            **handler_only,
            "level": logging.INFO if settings.db_echo else logging.WARNING,
        },
    }
    for name in _FRAMEWORK_LOGGERS:
        loggers[name] = {**handler_only, "level": level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonLogFormatter,
                    "defaults": {
                        "service": settings.project_name,
                        "environment": settings.environment,
                    },
                }
            },
            "filters": {"call_context": {"()": RequestContextFilter}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "level": level,
                    "filters": ["call_context"],
                }
            },
            "loggers": loggers,
        }
    )


__all__ = ["JsonLogFormatter", "RequestContextFilter", "configure_logging"]
