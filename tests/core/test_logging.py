"""Tests for veil.core.logging module."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from veil.core.exceptions import ConfigException
from veil.core.logging import (
    JSONFormatter,
    StandardFormatter,
    configure_logging,
    get_logger,
    get_operation_id,
    operation_context,
    redact,
)


def _record(level: int = logging.INFO, msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


# ============================================================================
# Operation ID Tests
# ============================================================================


class TestOperationId:
    """Tests for operation ID scoping."""

    def test_default_none(self):
        """Should return None outside an operation."""
        assert get_operation_id() is None

    def test_context_generates_id(self):
        """Context manager should generate a UUID if not provided."""
        with operation_context() as oid:
            assert len(oid) == 36
            assert get_operation_id() == oid

        assert get_operation_id() is None

    def test_context_uses_provided_id(self):
        """Context manager should use provided ID."""
        with operation_context("materialize-1") as oid:
            assert oid == "materialize-1"
            assert get_operation_id() == "materialize-1"

    def test_nested_contexts(self):
        """Inner context should restore the outer ID on exit."""
        with operation_context("outer"):
            with operation_context("inner"):
                assert get_operation_id() == "inner"
            assert get_operation_id() == "outer"


# ============================================================================
# Redaction Tests
# ============================================================================


class TestRedact:
    """Tests for key material redaction."""

    def test_redacts_sensitive_names(self):
        """Values under key-like names are replaced."""
        data = {"private_key": b"x" * 32, "wrapped_keys": {"alice": b"y"}, "nonce": b"n", "recipient": "alice"}
        result = redact(data)

        assert result["private_key"] == "[REDACTED]"
        assert result["wrapped_keys"] == "[REDACTED]"
        assert result["nonce"] == "[REDACTED]"
        assert result["recipient"] == "alice"

    def test_bytes_reduced_to_length(self):
        """Raw bytes never appear; only their length does."""
        assert redact({"blob": b"abcd"}) == {"blob": "<4 bytes>"}

    def test_nested_lists(self):
        """Lists are sanitized recursively."""
        assert redact([{"secret": "s"}, "ok"]) == [{"secret": "[REDACTED]"}, "ok"]

    def test_does_not_mutate_input(self):
        """redact returns a copy."""
        data = {"plaintext": "hello"}
        redact(data)
        assert data == {"plaintext": "hello"}


# ============================================================================
# Formatter Tests
# ============================================================================


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_format_basic_message(self):
        """Should format basic log message as JSON."""
        data = json.loads(JSONFormatter().format(_record()))

        assert "timestamp" in data
        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "operation_id" not in data
        assert "source" not in data

    def test_format_includes_operation_id(self):
        """Should include operation ID when present."""
        with operation_context("op-abc"):
            data = json.loads(JSONFormatter().format(_record()))

        assert data["operation_id"] == "op-abc"

    def test_format_includes_source_for_warnings(self):
        """Should include source info for warnings and above."""
        record = _record(level=logging.WARNING)
        record.funcName = "test_function"

        data = json.loads(JSONFormatter().format(record))

        assert data["source"] == {"file": "/path/to/file.py", "line": 42, "function": "test_function"}

    def test_format_includes_exception(self):
        """Should include exception info when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()
        record = _record(level=logging.ERROR)
        record.exc_info = exc_info

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]

    def test_format_redacts_extra_data(self):
        """extra_data is included with key material redacted."""
        record = _record()
        record.extra_data = {"recipient_count": 2, "symmetric_key": b"k" * 32}

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"] == {"recipient_count": 2, "symmetric_key": "[REDACTED]"}


class TestStandardFormatter:
    """Tests for StandardFormatter class."""

    def test_format_basic_message(self):
        """Should format basic log message."""
        output = StandardFormatter(use_colors=False).format(_record())

        assert "test.logger" in output
        assert "INFO" in output
        assert "Test message" in output

    def test_format_includes_short_operation_id(self):
        """Should prefix the first 8 chars of the operation ID."""
        with operation_context("12345678-aaaa-bbbb"):
            output = StandardFormatter(use_colors=False).format(_record())

        assert "[12345678] Test message" in output

    def test_does_not_mutate_record(self):
        """Formatting should leave the original record unchanged."""
        record = _record()
        with operation_context("abcdefgh"):
            StandardFormatter(use_colors=False).format(record)

        assert record.msg == "Test message"


# ============================================================================
# configure_logging Tests
# ============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_format(self, clean_env, restore_root_logger):
        """Explicit json_format installs a JSONFormatter."""
        configure_logging(level="DEBUG", json_format=True)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_format_from_env(self, clean_env, monkeypatch, restore_root_logger):
        """VEIL_LOG_FORMAT=text selects the standard formatter."""
        monkeypatch.setenv("VEIL_LOG_FORMAT", "text")
        monkeypatch.setenv("VEIL_LOG_LEVEL", "WARNING")

        configure_logging()

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StandardFormatter)

    def test_unknown_format_rejected(self, clean_env, monkeypatch, restore_root_logger):
        """An unknown VEIL_LOG_FORMAT raises ConfigException."""
        monkeypatch.setenv("VEIL_LOG_FORMAT", "xml")

        with pytest.raises(ConfigException):
            configure_logging()

    def test_log_file_uses_json(self, clean_env, tmp_path, restore_root_logger):
        """A log file handler always formats as JSON."""
        log_file = tmp_path / "veil.log"

        configure_logging(json_format=False, log_file=str(log_file))

        root = restore_root_logger
        file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert isinstance(file_handlers[0].formatter, JSONFormatter)


def test_get_logger():
    """get_logger returns the named logger."""
    assert get_logger("veil.test") is logging.getLogger("veil.test")
