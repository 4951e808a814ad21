"""
Utility modules for the API error monitor.
"""

from api_error_monitor.utils.logging import (
    get_logger,
    setup_logging,
    JSONFormatter,
    ContextLoggerAdapter,
    log_capture,
    log_sink_delivery,
    log_error_with_context,
)
from api_error_monitor.utils.metrics import CaptureMetrics
from api_error_monitor.utils.resilience import (
    linear_backoff_delay,
    retry_until_success,
    run_with_timeout,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ContextLoggerAdapter",
    "log_capture",
    "log_sink_delivery",
    "log_error_with_context",
    "CaptureMetrics",
    "linear_backoff_delay",
    "retry_until_success",
    "run_with_timeout",
]
