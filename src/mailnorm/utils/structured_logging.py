"""
Structured Logging Module
Provides JSON-formatted logging for better integration with log aggregation tools
"""

import json
import logging
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    Formats log records as one JSON object per line.

    Extra context goes in ``extra={"extra_fields": {...}}`` and is merged
    into the top-level object.

    SECURITY STORY: Message content is personal data. Fields that could hold
    a raw message, a body, or an API credential are replaced with
    "[REDACTED]" before the record is written, so a careless
    ``extra_fields={"raw": raw}`` never leaks a mailbox into the logs.
    """

    SENSITIVE_FIELDS = {
        'raw', 'body', 'snippet', 'token', 'authorization', 'password', 'secret'
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update({
                k: self._sanitize_value(k, v)
                for k, v in record.extra_fields.items()
            })

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        """Return "[REDACTED]" for keys that name sensitive content"""
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in self.SENSITIVE_FIELDS):
            return "[REDACTED]"
        return value
