# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging configuration for Veil.

Provides:
- JSON formatter for production (machine-parseable)
- Standard formatter for development (human-readable)
- Operation IDs grouping the records of one materialization
- Redaction of key material before it reaches a log record
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from .exceptions import ConfigException

_operation_id: ContextVar[str | None] = ContextVar("operation_id", default=None)

# Key names whose values must never be written to a log
SENSITIVE_KEYS = {
    "key",
    "private",
    "secret",
    "plaintext",
    "nonce",
}


def get_operation_id() -> str | None:
    """Get the current operation ID, or None outside an operation."""
    return _operation_id.get()


@contextmanager
def operation_context(
    operation_id: str | None = None,
) -> Generator[str, None, None]:
    """Context manager for operation ID scope.

    Args:
        operation_id: Optional ID to use. If None, generates a new one.

    Yields:
        The operation ID being used.

    Example:
        with operation_context() as oid:
            logger.debug("Sealing payload")  # Will include oid
    """
    oid = operation_id or str(uuid.uuid4())
    token = _operation_id.set(oid)
    try:
        yield oid
    finally:
        _operation_id.reset(token)


def redact(data: Any) -> Any:
    """Recursively replace values stored under sensitive key names.

    Args:
        data: Mapping, list or scalar destined for ``extra_data``

    Returns:
        Sanitized copy of data
    """
    if isinstance(data, dict):
        result = {}
        for name, value in data.items():
            if any(s in str(name).lower() for s in SENSITIVE_KEYS):
                result[name] = "[REDACTED]"
            else:
                result[name] = redact(value)
        return result
    elif isinstance(data, list):
        return [redact(item) for item in data]
    elif isinstance(data, (bytes, bytearray)):
        return f"<{len(data)} bytes>"
    else:
        return data


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production environments.

    Includes the operation ID when present in context.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: LogRecord to format.

        Returns:
            JSON string with timestamp, level, logger, message, and optional operation ID.
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        operation_id = get_operation_id()
        if operation_id:
            log_data["operation_id"] = operation_id

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = redact(record.extra_data)

        return json.dumps(log_data)


class StandardFormatter(logging.Formatter):
    """Standard log formatter for development.

    Human-readable format with colors for terminal output.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    OPERATION_COLOR = "\033[90m"  # Gray

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        # Copy so other handlers see the original record
        record = logging.makeLogRecord(record.__dict__)

        operation_id = get_operation_id()
        if operation_id:
            short_oid = operation_id[:8]
            if self.use_colors:
                oid_str = f"{self.OPERATION_COLOR}[{short_oid}]{self.RESET} "
            else:
                oid_str = f"[{short_oid}] "
            record.msg = oid_str + str(record.msg)

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure the root logger for applications built on Veil.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (auto-detect if None)
        log_file: Optional file to write logs to

    Environment variables:
        VEIL_LOG_LEVEL: Log level used when ``level`` is None
        VEIL_LOG_FORMAT: Log format ("json" or "text", auto-detect if unset)
        VEIL_LOG_FILE: Log file path

    Raises:
        ConfigException: If VEIL_LOG_FORMAT holds an unknown format
    """
    from .config import LOG_FORMATS, get_config

    config = get_config()

    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        format_env = config.log_format.lower()
        if format_env not in LOG_FORMATS:
            raise ConfigException(f"Unknown log format: {config.log_format}", setting="log_format")
        if format_env == "json":
            json_format = True
        elif format_env == "text":
            json_format = False
        else:
            json_format = not sys.stderr.isatty()

    log_file = config.log_file if log_file is None else log_file

    formatter: logging.Formatter
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        # Always use JSON for file output
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger
    """
    return logging.getLogger(name)
