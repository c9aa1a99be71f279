import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, MutableMapping, Tuple

_STANDARD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    "message", "asctime",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # operation/request_id are promoted; everything else passed via extra= is nested.
        for key in ("operation", "request_id"):
            value = record.__dict__.get(key)
            if value is not None:
                payload[key] = value

        extras = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _STANDARD_ATTRS and k not in ("operation", "request_id")
        }
        if extras:
            payload["extra"] = extras

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info:
            payload["stack_info"] = record.stack_info

        return json.dumps(payload, default=str)


class OperationLogger(logging.LoggerAdapter):
    """
    Logger handle bound to one operation (bulk_upsert, submit, ...).

    Bound fields are merged under any per-call extra= so callers can keep
    adding context without losing the operation/request identity.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        merged = dict(self.extra or {})
        merged.update(kwargs.get("extra") or {})
        kwargs["extra"] = merged
        return msg, kwargs

    def bind(self, **fields: Any) -> "OperationLogger":
        merged = dict(self.extra or {})
        merged.update(fields)
        return OperationLogger(self.logger, merged)


def operation_logger(name: str, operation: str, **fields: Any) -> OperationLogger:
    return OperationLogger(logging.getLogger(name), {"operation": operation, **fields})


def configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(message)s",
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.setFormatter(JsonFormatter())
