"""
Structured Logging Module
Provides JSON-formatted logging for better integration with log aggregation tools
"""

import json
import logging
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs log records as JSON.

    Extra context is attached with
    ``logger.info("msg", extra={"extra_fields": {"path": ..., "attachments": 3}})``.

    SECURITY STORY: Message content never belongs in logs. Extra fields whose
    names look like bodies, payloads or credentials are replaced with
    "[REDACTED]" so a careless ``extra_fields={"body": ...}`` cannot leak a
    whole email into a log aggregator.
    """

    SENSITIVE_FIELDS = {
        'body', 'html', 'data', 'payload', 'content',
        'password', 'token', 'secret', 'credential'
    }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: Python logging.LogRecord to format

        Returns:
            JSON string with structured log data
        """
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
            filtered_extra = {
                k: self._sanitize_value(k, v)
                for k, v in record.extra_fields.items()
            }
            log_data.update(filtered_extra)

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        """
        Replace values of sensitive fields with "[REDACTED]"

        Args:
            key: Field name
            value: Field value

        Returns:
            Original value or "[REDACTED]" for sensitive fields
        """
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in self.SENSITIVE_FIELDS):
            return "[REDACTED]"
        return value
