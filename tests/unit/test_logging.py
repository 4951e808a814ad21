"""
Unit tests for structured logging utilities.
"""

import json
import logging
from io import StringIO

import pytest

from api_error_monitor.utils.logging import (
    JSONFormatter,
    get_logger,
    log_capture,
    log_error_with_context,
    log_sink_delivery,
)


@pytest.fixture
def captured_logger():
    """Context logger writing JSON lines into a buffer."""
    logger = get_logger("test_monitor_logging")

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger.logger.addHandler(handler)
    logger.logger.setLevel(logging.DEBUG)

    yield logger, stream

    logger.logger.removeHandler(handler)


def test_json_formatter():
    """Test JSON formatter produces valid JSON output."""
    formatter = JSONFormatter()

    logger = logging.getLogger("test")
    logger.setLevel(logging.INFO)

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.info("Test message", extra={"app_name": "ShopApp", "endpoint": "/products"})
    logger.removeHandler(handler)

    log_data = json.loads(stream.getvalue())

    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test"
    assert log_data["message"] == "Test message"
    assert log_data["app_name"] == "ShopApp"
    assert log_data["endpoint"] == "/products"
    assert "source" in log_data


def test_get_logger_with_context():
    """Test getting logger with context."""
    logger = get_logger("test_module", app_name="ShopApp")

    assert logger.extra["app_name"] == "ShopApp"

    scoped = logger.with_context(endpoint="/orders")
    assert scoped.extra == {"app_name": "ShopApp", "endpoint": "/orders"}
    assert logger.extra == {"app_name": "ShopApp"}


def test_log_capture(captured_logger):
    """Test capture logging."""
    logger, stream = captured_logger

    log_capture(
        logger,
        app_name="ShopApp",
        endpoint="/products/7",
        key="price",
        expected_type="double",
        received_type="String",
    )

    log_data = json.loads(stream.getvalue())

    assert log_data["app_name"] == "ShopApp"
    assert log_data["endpoint"] == "/products/7"
    assert log_data["key"] == "price"
    assert log_data["context"]["expected_type"] == "double"
    assert log_data["context"]["received_type"] == "String"


def test_log_sink_delivery(captured_logger):
    """Test successful delivery logging."""
    logger, stream = captured_logger

    log_sink_delivery(logger, sink="webhook", endpoint="/products", status_code=204, duration_ms=12.345)

    log_data = json.loads(stream.getvalue())

    assert log_data["level"] == "INFO"
    assert log_data["status_code"] == 204
    assert log_data["context"]["sink"] == "webhook"
    assert log_data["context"]["duration_ms"] == 12.35


def test_log_sink_delivery_with_error(captured_logger):
    """Test failed delivery logging."""
    logger, stream = captured_logger

    log_sink_delivery(logger, sink="webhook", endpoint="/products", error="Connection timeout")

    log_data = json.loads(stream.getvalue())

    assert log_data["level"] == "WARNING"
    assert log_data["context"]["error"] == "Connection timeout"


def test_log_error_with_context(captured_logger):
    """Test error logging attaches the exception."""
    logger, stream = captured_logger

    try:
        raise RuntimeError("disk full")
    except RuntimeError as e:
        log_error_with_context(logger, "Failed to capture error", e, endpoint="/products")

    log_data = json.loads(stream.getvalue())

    assert log_data["level"] == "ERROR"
    assert log_data["endpoint"] == "/products"
    assert log_data["error"]["type"] == "RuntimeError"
    assert "disk full" in log_data["error"]["stack_trace"]
