from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for structured logs."""

    EXTRA_KEYS = ("service", "endpoint", "method", "status")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key in self.EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        return json.dumps(payload, separators=(",", ":"))


class ServiceFilter(logging.Filter):
    """Stamp every record with a fixed ``service`` label."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self.service_name
        return True


def configure_logging(
    fmt: str | None = None,
    *,
    level: str | int | None = None,
    service_name: str | None = None,
    stream: Any = None,
) -> logging.Handler:
    """Configure the root logger with plain text or JSON output.

    Args:
        fmt: 'json' or 'text'. Defaults to LOG_FORMAT env or 'text'.
        level: log level; defaults to LOG_LEVEL env or INFO.
        service_name: optional service label injected into every record.
        stream: output stream, stdout by default.

    Returns the installed handler.
    """

    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    level = level or os.getenv("LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
    if service_name:
        handler.addFilter(ServiceFilter(service_name))
    root.addHandler(handler)
    return handler
