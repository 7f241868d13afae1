"""Logging setup: JSON lines on stderr plus a small ring buffer for the API."""

from __future__ import annotations

import logging
import os
from collections import deque
from datetime import datetime
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

# Extra attributes the report flow attaches via ``extra=``; copied into buffer entries.
CONTEXT_FIELDS = ("city", "recipient", "strategy", "report_id")

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, Any]] = deque(maxlen=200)


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.service = self.service_name
        return True


class _BufferHandler(logging.Handler):
    """Keep the most recent records around for ``GET /logs``."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, Any] = {
                "time": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            context = {
                key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)
            }
            if context:
                entry["context"] = context
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            # A broken buffer must never take logging down with it
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    """Configure the root logger once; later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    service = service_name or os.getenv("SERVICE_NAME", "weather-intel")

    stream = logging.StreamHandler()
    stream.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(service)s")
    )
    stream.addFilter(_ServiceNameFilter(service))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stream)
    root.addHandler(_BufferHandler())
    root.setLevel(level)
    # httpx logs every request at INFO; the report flow already logs attempts
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(limit: int = 100, level: Optional[str] = None) -> list[dict[str, Any]]:
    entries = list(_LOG_BUFFER)
    if level:
        entries = [entry for entry in entries if entry["level"] == level.upper()]
    return entries[:limit]


__all__ = ["CONTEXT_FIELDS", "setup_logging", "get_log_buffer"]
