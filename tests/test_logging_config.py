"""Tests for logging configuration and formatters."""

import json
import logging
import sys

import pytest

from carer_directory.logging import ComponentLoggerAdapter, get_logger
from carer_directory.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from carer_directory.logging.context import clear_log_context, log_context


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def logger():
    """Create a test logger with no handlers attached."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()

    yield test_logger

    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level

    yield root_logger

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def make_key_value_formatter():
    return KeyValueFormatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def test_json_formatter_basic(logger):
    """Test JSONFormatter produces valid JSON with mandatory fields."""
    formatter = JSONFormatter()
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "Test message", (), None)

    log_obj = json.loads(formatter.format(record))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert "timestamp" in log_obj


def test_json_formatter_with_extra_fields(logger):
    """Test JSONFormatter includes extra fields with their JSON types."""
    formatter = JSONFormatter()
    record = logger.makeRecord(
        "test",
        logging.INFO,
        "test.py",
        1,
        "Loaded carers",
        (),
        None,
        extra={"event": "directory.fetch.completed", "carer_count": 3, "store_configured": True},
    )

    log_obj = json.loads(formatter.format(record))

    assert log_obj["event"] == "directory.fetch.completed"
    assert log_obj["carer_count"] == 3
    assert log_obj["store_configured"] is True


def test_json_formatter_stringifies_unknown_types(logger):
    """Test values JSON cannot represent are written as strings."""
    formatter = JSONFormatter()
    record = logger.makeRecord(
        "test", logging.INFO, "test.py", 1, "msg", (), None, extra={"roles": {"carer"}}
    )

    log_obj = json.loads(formatter.format(record))

    assert log_obj["roles"] == "{'carer'}"


def test_json_formatter_includes_exception(logger):
    """Test exception tracebacks are rendered into exc_info."""
    formatter = JSONFormatter()
    try:
        raise RuntimeError("store offline")
    except RuntimeError:
        record = logger.makeRecord(
            "test", logging.ERROR, "test.py", 1, "Fetch failed", (), sys.exc_info()
        )

    log_obj = json.loads(formatter.format(record))

    assert "RuntimeError: store offline" in log_obj["exc_info"]


def test_timestamp_format_in_json(logger):
    """Test that JSON formatter produces YYYY-MM-DDTHH:MM:SS.sssZ timestamps."""
    formatter = JSONFormatter()
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "Test message", (), None)

    timestamp = json.loads(formatter.format(record))["timestamp"]

    assert timestamp.endswith("Z")
    assert "T" in timestamp
    assert len(timestamp) == 24


def test_json_formatter_no_duplicate_fields(logger):
    """Test that standard LogRecord attributes are not emitted as extras."""
    formatter = JSONFormatter()
    record = logger.makeRecord(
        "test", logging.INFO, "test.py", 1, "Test message", (), None, extra={"event": "test.event"}
    )

    log_obj = json.loads(formatter.format(record))

    assert "name" not in log_obj
    assert "lineno" not in log_obj
    assert log_obj["event"] == "test.event"


def test_contextual_filter_adds_static_fields(logger):
    """Test ContextualFilter adds service and environment fields."""
    contextual_filter = ContextualFilter(service="test-service", environment="test")
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "Test message", (), None)

    assert contextual_filter.filter(record) is True
    assert record.service == "test-service"
    assert record.environment == "test"


def test_contextual_filter_defaults_to_service_name(logger):
    contextual_filter = ContextualFilter()
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "msg", (), None)

    contextual_filter.filter(record)

    assert record.service == SERVICE_NAME
    assert record.environment == "local"


def test_contextual_filter_adds_context_fields(logger):
    """Test ContextualFilter copies the active log context onto records."""
    contextual_filter = ContextualFilter()

    with log_context(fetch_id="f00d", carer_id="amelia-stone"):
        record = logger.makeRecord("test", logging.INFO, "test.py", 1, "msg", (), None)
        contextual_filter.filter(record)

    assert record.fetch_id == "f00d"
    assert record.carer_id == "amelia-stone"


def test_contextual_filter_keeps_explicit_extra(logger):
    """Test fields passed via extra win over the log context."""
    contextual_filter = ContextualFilter()

    with log_context(carer_id="from-context"):
        record = logger.makeRecord(
            "test", logging.INFO, "test.py", 1, "msg", (), None, extra={"carer_id": "explicit"}
        )
        contextual_filter.filter(record)

    assert record.carer_id == "explicit"


def test_json_formatter_with_context(logger):
    """Test full pipeline: context + filter + JSON formatter."""
    formatter = JSONFormatter()
    contextual_filter = ContextualFilter(service="carer-directory", environment="test")

    with log_context(fetch_id="f00d"):
        record = logger.makeRecord(
            "test",
            logging.INFO,
            "test.py",
            1,
            "Directory fetch started",
            (),
            None,
            extra={"event": "directory.fetch.started"},
        )
        contextual_filter.filter(record)
        log_obj = json.loads(formatter.format(record))

    assert log_obj["message"] == "Directory fetch started"
    assert log_obj["event"] == "directory.fetch.started"
    assert log_obj["service"] == "carer-directory"
    assert log_obj["environment"] == "test"
    assert log_obj["fetch_id"] == "f00d"


def test_key_value_formatter_basic(logger):
    """Test KeyValueFormatter produces readable output."""
    formatter = make_key_value_formatter()
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "Test message", (), None)

    output = formatter.format(record)

    assert "[INFO]" in output
    assert "Test message" in output


def test_key_value_formatter_with_extras(logger):
    """Test KeyValueFormatter appends sorted key=value pairs."""
    formatter = make_key_value_formatter()
    record = logger.makeRecord(
        "test",
        logging.INFO,
        "test.py",
        1,
        "Test message",
        (),
        None,
        extra={"event": "directory.review.added", "rating": 4},
    )

    output = formatter.format(record)

    assert output.endswith("event=directory.review.added rating=4")


def test_key_value_formatter_quotes_and_literals(logger):
    """Test strings with spaces are quoted; booleans and None use JSON-like literals."""
    formatter = make_key_value_formatter()
    record = logger.makeRecord(
        "test",
        logging.INFO,
        "test.py",
        1,
        "msg",
        (),
        None,
        extra={"reason": "store offline", "enabled": False, "target": None},
    )

    output = formatter.format(record)

    assert 'reason="store offline"' in output
    assert "enabled=false" in output
    assert "target=null" in output


def test_key_value_formatter_omits_service_fields(logger):
    """Test service and environment are left out of human-readable lines."""
    formatter = make_key_value_formatter()
    record = logger.makeRecord("test", logging.INFO, "test.py", 1, "msg", (), None)
    ContextualFilter(environment="test").filter(record)

    output = formatter.format(record)

    assert "service=" not in output
    assert "environment=" not in output


def test_configure_logging_invalid_level():
    """Test configure_logging rejects invalid log level."""
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="INVALID")


def test_configure_logging_invalid_format():
    """Test configure_logging rejects invalid format type."""
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="invalid")


def test_configure_logging_json_format(restore_root_logger):
    """Test configure_logging installs a single JSON handler."""
    configure_logging(level="DEBUG", format_type="json", environment="test")

    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
    assert restore_root_logger.level == logging.DEBUG


def test_configure_logging_key_value_format(restore_root_logger):
    """Test configure_logging installs a key-value handler with the contextual filter."""
    configure_logging(level="warning", format_type="key-value", environment="test")

    handler = restore_root_logger.handlers[0]
    assert isinstance(handler.formatter, KeyValueFormatter)
    assert any(isinstance(f, ContextualFilter) for f in handler.filters)
    assert restore_root_logger.level == logging.WARNING


def test_get_logger_without_component():
    assert isinstance(get_logger("carer_directory.tests"), logging.Logger)


def test_get_logger_with_component_stamps_records(caplog):
    """Test the component adapter adds component and keeps call-site extras."""
    adapter = get_logger("carer_directory.tests", component="directory")
    assert isinstance(adapter, ComponentLoggerAdapter)

    with caplog.at_level(logging.INFO, logger="carer_directory.tests"):
        adapter.info("Review added", extra={"event": "directory.review.added"})

    record = caplog.records[-1]
    assert record.component == "directory"
    assert record.event == "directory.review.added"
