"""
Retry queue for reports whose webhook delivery failed.

In-memory FIFO for the process lifetime. Producers append at any time,
including while a drain is running; drains are serialized so there is a
single consumer removing from the front.
"""

import asyncio
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, Protocol

from api_error_monitor.models.report import ApiErrorReport
from api_error_monitor.models.results import DrainResult
from api_error_monitor.utils.logging import get_logger
from api_error_monitor.utils.metrics import CaptureMetrics
from api_error_monitor.utils.resilience import retry_until_success

logger = get_logger(__name__)


class ReportSink(Protocol):
    """Anything that can deliver a report and say whether it succeeded."""

    async def report(self, report: ApiErrorReport) -> bool: ...


class ReporterQueue:
    """Queue for storing failed reports to retry later."""

    def __init__(
        self,
        reporter: ReportSink,
        max_retries: int = 3,
        retry_delay: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        metrics: Optional[CaptureMetrics] = None,
    ):
        """
        Initialize the retry queue.

        Args:
            reporter: Sink used for redelivery
            max_retries: Delivery attempts per report during a drain
            retry_delay: Base delay in seconds; attempt n waits retry_delay * n
            sleep: Sleep coroutine, injectable for tests
            metrics: Optional metrics collector
        """
        self.reporter = reporter
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._metrics = metrics
        self._queue: Deque[ApiErrorReport] = deque()
        self._drain_lock = asyncio.Lock()

    def enqueue(self, report: ApiErrorReport) -> None:
        """Add a report to the back of the queue."""
        self._queue.append(report)
        if self._metrics is not None:
            self._metrics.record_queued()
        logger.debug(f"Report queued for retry ({len(self._queue)} pending)")

    async def process_queue(self) -> DrainResult:
        """
        Retry every queued report in FIFO order.

        Reports still failing after ``max_retries`` attempts are dropped.
        Reports enqueued while the drain runs are processed by the same drain.

        Returns:
            DrainResult with delivered and dropped counts
        """
        async with self._drain_lock:
            result = DrainResult()

            while self._queue:
                report = self._queue.popleft()
                result.processed += 1

                delivered = await retry_until_success(
                    lambda: self.reporter.report(report),
                    max_retries=self.max_retries,
                    base_delay=self.retry_delay,
                    sleep=self._sleep,
                    name="webhook delivery",
                )

                if delivered:
                    result.delivered += 1
                    if self._metrics is not None:
                        self._metrics.record_delivery(True)
                else:
                    result.dropped += 1
                    if self._metrics is not None:
                        self._metrics.record_dropped()
                    logger.warning(
                        f"Dropping report for {report.endpoint} after {self.max_retries} attempts",
                        extra={"endpoint": report.endpoint},
                    )

            if result.processed:
                logger.info(
                    f"Retry queue drained: {result.delivered}/{result.processed} delivered"
                )
            return result

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        """Discard every queued report."""
        self._queue.clear()
