"""Logging utilities with attachment context and structured logging support.

This module provides:
- Attachment ID context for tracking image cache operations across awaits
- AttachmentContextFilter for adding that context to log records
- JSONFormatter for structured JSON logging (log aggregators)
- TimingContext for measuring operation durations
- Per-module log level configuration
"""

from __future__ import annotations

import contextvars
import json
import logging
import time
from datetime import UTC, datetime
from typing import Any

# Context variable for the attachment currently being handled
attachment_id_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "attachment_id", default=None
)


def get_attachment_id() -> str | None:
    """Get the current attachment ID from context."""
    return attachment_id_context.get()


def set_attachment_id(attachment_id: str | None) -> contextvars.Token[str | None]:
    """Set the attachment ID in context.

    Args:
        attachment_id: The attachment ID to set

    Returns:
        Token for resetting the context
    """
    return attachment_id_context.set(attachment_id)


def reset_attachment_id(token: contextvars.Token[str | None]) -> None:
    """Restore the attachment ID that was current before ``set_attachment_id``."""
    attachment_id_context.reset(token)


class AttachmentContextFilter(logging.Filter):
    """Filter that adds the attachment ID context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add attachment ID to the log record.

        Returns:
            Always True (record is always processed)
        """
        aid = attachment_id_context.get()
        record.attachment_id = aid if aid else "-"
        return True


# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "attachment_id",
        "message",
    }
)


class JSONFormatter(logging.Formatter):
    """Formatter that outputs logs as JSON for log aggregators.

    Each log entry includes:
    - timestamp: ISO 8601 format
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - attachment_id: Attachment being handled (if set)
    - Extra fields from log record
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "attachment_id", "-") != "-":
            log_entry["attachment_id"] = record.attachment_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TimingContext:
    """Context manager for measuring operation duration.

    Usage:
        with TimingContext("scan_images", logger) as timing:
            # ... do work ...
        print(timing.duration_ms)
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None) -> None:
        """Initialize timing context.

        Args:
            operation_name: Name of the operation being timed
            logger: Logger to use for automatic logging (optional)
        """
        self.operation_name = operation_name
        self.logger = logger
        self.start_time: float | None = None
        self.end_time: float | None = None

    def __enter__(self) -> TimingContext:
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.end_time = time.perf_counter()
        if self.logger:
            level = logging.WARNING if exc_type else logging.DEBUG
            self.logger.log(
                level,
                f"{self.operation_name} completed",
                extra={
                    "operation": self.operation_name,
                    "duration_ms": self.duration_ms,
                    "success": exc_type is None,
                },
            )

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds, or 0 if not yet started."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time else time.perf_counter()
        return (end - self.start_time) * 1000


def set_module_log_level(module_name: str, level: str | int) -> None:
    """Set log level for a specific module.

    Args:
        module_name: Module name (e.g., "msglogger.storage")
        level: Log level (string like "DEBUG" or int like logging.DEBUG)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger(module_name).setLevel(level)


def configure_module_levels(config: dict[str, str]) -> None:
    """Configure log levels for multiple modules.

    Args:
        config: Dict mapping module names to log levels
    """
    for module_name, level in config.items():
        set_module_log_level(module_name, level)
