"""Structured logging for the metering service."""

import json
import logging
from datetime import UTC, datetime

from chatmeter.middleware import CorrelationIDFilter

SERVICE_NAME = "chatmeter"

# Record attributes lifted into the JSON payload when passed via ``extra=``.
CONTEXT_FIELDS = ("api_key_id", "bucket", "job", "affected")

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line, tagged with request and metering context."""

    def __init__(self, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id is not None:
            payload["correlation_id"] = correlation_id
        context = {
            name: getattr(record, name)
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        }
        if context:
            payload["context"] = context
        if record.exc_info and record.exc_info[1]:
            payload["error"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


def configure_logging(*, log_format: str = "text", debug: bool = False) -> None:
    """Install a single stderr handler on the root logger."""
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(CorrelationIDFilter())
    handler.setFormatter(
        JSONFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT)
    )
    root.addHandler(handler)

    # SQL echo is only useful while debugging upserts.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if debug else logging.WARNING
    )
