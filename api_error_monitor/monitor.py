"""
API error monitor.

Captures errors raised while interpreting API responses, extracts the
offending key and type pair, and dispatches a report to local storage and
the webhook sink, queueing failed deliveries for a later retry.

Nothing in this module raises into the embedding application: the monitor
observes the original error and leaves its handling to the caller.
"""

import asyncio
import time
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, List, Optional

from api_error_monitor.analyzers.classifier import (
    classify_error,
    format_stack_trace,
    is_network_noise,
)
from api_error_monitor.analyzers.error_parser import ErrorParser
from api_error_monitor.analyzers.message_cleaner import strip_stack_trace
from api_error_monitor.config import MonitorSettings, get_settings
from api_error_monitor.models.error_info import ApiErrorInfo
from api_error_monitor.models.report import ApiErrorReport
from api_error_monitor.models.results import DrainResult
from api_error_monitor.services.local_file_reporter import LocalFileReporter
from api_error_monitor.services.reporter_queue import ReporterQueue
from api_error_monitor.services.webhook_reporter import WebhookReporter
from api_error_monitor.utils.logging import get_logger, log_capture, log_error_with_context
from api_error_monitor.utils.metrics import CaptureMetrics

logger = get_logger(__name__)


class ApiErrorMonitor:
    """
    Main entry point for monitoring and reporting API parsing errors.

    Orchestrates:
    - Filtering (disabled monitor, development mode, network noise)
    - Extraction through ErrorParser and merging with caller overrides
    - Local persistence, webhook delivery and the retry queue

    Example:
        monitor = ApiErrorMonitor.create("ShopApp", webhook_url=url)
        try:
            product = Product.from_json(payload)
        except Exception as e:
            await monitor.capture(e, e.__traceback__, endpoint=str(request.url))
            raise
    """

    def __init__(
        self,
        config: MonitorSettings,
        webhook_reporter: Optional[WebhookReporter] = None,
        local_reporter: Optional[LocalFileReporter] = None,
        parser: Optional[ErrorParser] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the monitor.

        Args:
            config: Monitor settings
            webhook_reporter: Sink override (default: built from config.webhook_url)
            local_reporter: Store override (default: built from config)
            parser: Extraction override (default: built from config)
            sleep: Sleep coroutine used between retry attempts
        """
        self._config = config
        self.logger = logger.with_context(app_name=config.app_name)
        self.metrics = CaptureMetrics(config.app_name)

        self._parser = parser or ErrorParser(
            development_mode=config.development_mode,
            source_search_roots=config.source_search_roots,
            source_lookup_timeout=config.source_lookup_timeout,
        )

        if webhook_reporter is None and config.webhook_url:
            webhook_reporter = WebhookReporter(
                webhook_url=config.webhook_url,
                enabled=config.enabled,
                timeout=config.webhook_timeout,
            )
        self._webhook_reporter = webhook_reporter

        if local_reporter is None and config.enable_local_logging:
            local_reporter = LocalFileReporter(
                enabled=config.enabled,
                custom_log_directory=config.custom_log_directory,
            )
        self._local_reporter = local_reporter

        self._reporter_queue: Optional[ReporterQueue] = None
        if self._webhook_reporter is not None:
            self._reporter_queue = ReporterQueue(
                reporter=self._webhook_reporter,
                max_retries=config.max_retries,
                retry_delay=config.retry_delay,
                sleep=sleep,
                metrics=self.metrics,
            )

    @classmethod
    def create(cls, app_name: str, **options: Any) -> "ApiErrorMonitor":
        """
        Build a monitor from keyword options.

        Args:
            app_name: Name of the reporting application
            **options: Any MonitorSettings field (webhook_url, max_retries, ...)

        Returns:
            Configured monitor
        """
        return cls(MonitorSettings(app_name=app_name, **options))

    @classmethod
    def from_settings(cls, settings: Optional[MonitorSettings] = None) -> "ApiErrorMonitor":
        """Build a monitor from API_ERROR_MONITOR_* environment settings."""
        return cls(settings or get_settings())

    @property
    def config(self) -> MonitorSettings:
        return self._config

    @property
    def is_enabled(self) -> bool:
        return self._config.enabled

    def _should_skip(self) -> Optional[str]:
        if not self._config.enabled:
            return "disabled"
        if self._config.development_mode and not self._config.enable_in_development_mode:
            return "development_mode"
        return None

    async def capture(
        self,
        error: Any,
        stack_trace: Any = None,
        *,
        endpoint: str,
        request_data: Optional[Mapping] = None,
        response_data: Any = None,
        key: Optional[str] = None,
        expected_type: Optional[str] = None,
        received_type: Optional[str] = None,
    ) -> None:
        """
        Capture and report an API parsing error.

        Explicit key/expected_type/received_type arguments take precedence
        over extracted values. Never raises.

        Args:
            error: The caught exception (or its message)
            stack_trace: Traceback object, formatted trace text, or None
                (defaults to the exception's own traceback)
            endpoint: Endpoint URL where the error occurred
            request_data: Outbound request body, if it was a mapping
            response_data: Raw or decoded response body
            key: Offending JSON key, if known to the caller
            expected_type: Expected type, if known to the caller
            received_type: Received type, if known to the caller
        """
        try:
            await self._capture(
                error,
                stack_trace,
                endpoint=endpoint,
                request_data=request_data,
                response_data=response_data,
                key=key,
                expected_type=expected_type,
                received_type=received_type,
            )
        except Exception as e:
            self.metrics.record_error(e)
            log_error_with_context(self.logger, "Failed to capture error", e, endpoint=endpoint)

    async def _capture(
        self,
        error: Any,
        stack_trace: Any,
        *,
        endpoint: str,
        request_data: Optional[Mapping],
        response_data: Any,
        key: Optional[str],
        expected_type: Optional[str],
        received_type: Optional[str],
    ) -> None:
        skip_reason = self._should_skip()
        if skip_reason is not None:
            self.metrics.record_skip(skip_reason)
            self.logger.debug(f"Capture skipped: {skip_reason}")
            return

        classified = classify_error(error)
        if self._config.ignore_network_errors and is_network_noise(classified):
            self.metrics.record_skip("network")
            self.logger.debug(f"Ignoring network error: {classified.error_type}")
            return

        if stack_trace is None and isinstance(error, BaseException):
            stack_trace = error.__traceback__
        trace_text = format_stack_trace(stack_trace)
        corpus = f"{classified.message}\n{trace_text}" if trace_text else classified.message

        info = await self._extract(classified, corpus)
        merged = ApiErrorInfo(
            key=key if key is not None else info.key,
            expected_type=expected_type if expected_type is not None else info.expected_type,
            received_type=received_type if received_type is not None else info.received_type,
        )

        if not classified.message.strip() and merged.is_empty:
            self.metrics.record_skip("no_signal")
            self.logger.debug("Capture skipped: empty error message and nothing extracted")
            return

        report = ApiErrorReport(
            app_name=self._config.app_name,
            endpoint=endpoint,
            key=merged.key,
            expected_type=merged.expected_type,
            received_type=merged.received_type,
            error_message=strip_stack_trace(classified.message),
            # Stack traces stay out of stored and delivered reports
            stack_trace=None,
            request_data=dict(request_data) if isinstance(request_data, Mapping) else None,
            response_data=response_data,
        )
        self.metrics.record_capture()
        log_capture(
            self.logger,
            app_name=report.app_name,
            endpoint=report.endpoint,
            key=report.key,
            expected_type=report.expected_type,
            received_type=report.received_type,
        )

        await self._dispatch(report)

        if self._config.development_mode:
            self.logger.debug(str(report))

    async def _extract(self, classified, corpus: str) -> ApiErrorInfo:
        if self._parser.development_mode:
            # Source lookup does blocking file I/O
            return await asyncio.to_thread(self._parser.parse, classified, corpus)
        return self._parser.parse(classified, corpus)

    async def _dispatch(self, report: ApiErrorReport) -> None:
        if self._local_reporter is not None:
            try:
                persisted = await self._local_reporter.report(report)
            except Exception as e:
                self.logger.warning(f"Local report storage failed: {e}")
                persisted = False
            self.metrics.record_persist(persisted)

        if self._webhook_reporter is None:
            return

        start = time.perf_counter()
        try:
            delivered = await self._webhook_reporter.report(report)
        except Exception as e:
            self.logger.warning(f"Webhook delivery raised: {e}")
            delivered = False
        duration_ms = (time.perf_counter() - start) * 1000

        self.metrics.record_delivery(delivered, duration_ms)
        if not delivered and self._reporter_queue is not None:
            self._reporter_queue.enqueue(report)

    async def process_queue(self) -> DrainResult:
        """
        Retry queued reports (call this when the network is available).

        Returns:
            DrainResult; empty when no webhook is configured
        """
        if self._reporter_queue is None:
            return DrainResult()
        try:
            return await self._reporter_queue.process_queue()
        except Exception as e:
            log_error_with_context(self.logger, "Failed to process retry queue", e)
            return DrainResult()

    async def get_local_reports(self) -> List[ApiErrorReport]:
        """Get all locally stored reports, most recent first."""
        if self._local_reporter is None:
            return []
        return await self._local_reporter.get_all_reports()

    async def clear_local_reports(self) -> bool:
        """Delete all locally stored reports."""
        if self._local_reporter is None:
            return False
        return await self._local_reporter.clear_reports()

    def get_local_log_directory_path(self) -> Optional[str]:
        """Get the local report directory, or None when local logging is off."""
        if self._local_reporter is None:
            return None
        return self._local_reporter.directory_path()

    @property
    def queue_size(self) -> int:
        return self._reporter_queue.queue_size if self._reporter_queue is not None else 0

    def clear_queue(self) -> None:
        if self._reporter_queue is not None:
            self._reporter_queue.clear()

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.get_summary()

    async def aclose(self) -> None:
        """Close the webhook HTTP client."""
        if self._webhook_reporter is not None:
            await self._webhook_reporter.close()

    async def __aenter__(self) -> "ApiErrorMonitor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
