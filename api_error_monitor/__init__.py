"""Capture, analyze and report JSON API response parsing errors."""

from api_error_monitor.analyzers.error_parser import ErrorParser, parse_error
from api_error_monitor.config import MonitorSettings, get_settings
from api_error_monitor.interceptors.httpx_hooks import MonitoredClient, install_response_hook
from api_error_monitor.models import ApiErrorInfo, ApiErrorReport, DrainResult, ErrorKind
from api_error_monitor.monitor import ApiErrorMonitor
from api_error_monitor.services import LocalFileReporter, ReporterQueue, WebhookReporter

__version__ = "0.1.0"

__all__ = [
    "ApiErrorMonitor",
    "MonitorSettings",
    "get_settings",
    "ErrorParser",
    "parse_error",
    "ApiErrorInfo",
    "ApiErrorReport",
    "DrainResult",
    "ErrorKind",
    "LocalFileReporter",
    "ReporterQueue",
    "WebhookReporter",
    "MonitoredClient",
    "install_response_hook",
]
