"""Structured JSON logging configuration.

Configures Python logging to emit one JSON object per line with the fields
timestamp, level, logger, message and request_id. Relay and probe records add
contextual fields through ``extra``: target_url, endpoint_name, status_code,
duration_ms and error_reason.

Query strings relayed through the proxy can carry keys and tokens, so messages
are scrubbed before they are written.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from feedrelay.middleware.request_id import RequestIdLogFilter


# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(api.key|apikey|secret|password|token|authorization)"
    r"[\s]*[=:]\s*[^\s&]+",
    re.IGNORECASE,
)

_EXTRA_FIELDS = (
    "target_url",
    "endpoint_name",
    "status_code",
    "duration_ms",
    "method",
    "config_revision",
)


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields.

    Each entry contains at minimum: request_id, level, timestamp, message.
    Additional fields can be attached via the ``extra`` dict on log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                value = getattr(record, name)
                entry[name] = self._sanitize(value) if isinstance(value, str) else value

        if hasattr(record, "error_reason"):
            entry["error_reason"] = self._sanitize(
                str(getattr(record, "error_reason"))
            )

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str, ensure_ascii=False)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdLogFilter())
    root.addHandler(handler)
