"""Delivery and storage collaborators."""

from api_error_monitor.services.local_file_reporter import LocalFileReporter
from api_error_monitor.services.reporter_queue import ReporterQueue, ReportSink
from api_error_monitor.services.webhook_reporter import (
    WebhookReporter,
    build_embed,
    build_payload,
)

__all__ = [
    'LocalFileReporter',
    'ReporterQueue',
    'ReportSink',
    'WebhookReporter',
    'build_embed',
    'build_payload',
]
