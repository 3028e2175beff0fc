"""Structured logging utilities for dataset computation."""
import json
import logging
import uuid
from datetime import UTC, datetime
from typing import Any, Optional

CORRELATION_PREFIX = "REQ_"


class StructuredLogger:
    """
    Emits one JSON object per log line.

    Every entry carries the request correlation ID so the per-dataset events
    of one ``/api/data`` call can be grouped together. Keyword arguments
    passed to the level methods land under ``context``.
    """

    def __init__(self, logger_name: str, correlation_id: Optional[str] = None):
        self.logger = logging.getLogger(logger_name)
        self._correlation_id = correlation_id

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    def set_correlation_id(self, correlation_id: str):
        self._correlation_id = correlation_id

    def clear_correlation_id(self):
        self._correlation_id = None

    @staticmethod
    def generate_correlation_id() -> str:
        return f"{CORRELATION_PREFIX}{uuid.uuid4().hex[:12]}"

    def _emit(self, level: int, message: str, context: dict[str, Any]):
        # Skip serialization for entries the logger would drop
        if not self.logger.isEnabledFor(level):
            return

        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self.logger.name,
            "message": message,
            "correlation_id": self._correlation_id or "none",
        }
        if context:
            entry["context"] = context

        self.logger.log(level, json.dumps(entry, default=str))

    def debug(self, message: str, **context):
        self._emit(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._emit(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._emit(logging.ERROR, message, context)


def get_structured_logger(
    name: str, correlation_id: Optional[str] = None
) -> StructuredLogger:
    """Create a structured logger, optionally bound to a correlation ID."""
    return StructuredLogger(name, correlation_id)
