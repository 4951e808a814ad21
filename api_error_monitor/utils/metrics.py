"""
Metrics collection for the monitor.

This module tracks:
- Captured and skipped errors
- Local persistence outcomes
- Sink deliveries, retry queue growth and drops
- Sink delivery latency
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from api_error_monitor.utils.logging import get_logger

logger = get_logger(__name__)


class CaptureMetrics:
    """
    Process-lifetime counters for one monitor instance.

    Tracks:
    - captures (reports built) and skips (disabled, network noise, no signal)
    - persisted / persist failures
    - delivered / queued / dropped reports
    - sink latency samples
    """

    def __init__(self, app_name: str):
        """
        Initialize metrics collector.

        Args:
            app_name: Name of the reporting application
        """
        self.app_name = app_name
        self.started_at = datetime.now(timezone.utc)

        self.captured: int = 0
        self.skipped: Dict[str, int] = {}
        self.persisted: int = 0
        self.persist_failures: int = 0
        self.delivered: int = 0
        self.queued: int = 0
        self.dropped: int = 0
        self.sink_latencies: List[float] = []
        self.last_error: Optional[str] = None

    def record_capture(self) -> None:
        self.captured += 1

    def record_skip(self, reason: str) -> None:
        """
        Record a capture that produced no report.

        Args:
            reason: Why the capture was skipped ('disabled', 'network', ...)
        """
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def record_persist(self, success: bool) -> None:
        if success:
            self.persisted += 1
        else:
            self.persist_failures += 1

    def record_delivery(self, success: bool, duration_ms: Optional[float] = None) -> None:
        """
        Record a sink delivery attempt.

        Args:
            success: Whether the sink accepted the report
            duration_ms: Delivery duration in milliseconds (if measured)
        """
        if success:
            self.delivered += 1
        if duration_ms is not None:
            self.sink_latencies.append(duration_ms)

    def record_queued(self) -> None:
        self.queued += 1

    def record_dropped(self) -> None:
        self.dropped += 1

    def record_error(self, error: Exception) -> None:
        self.last_error = f"{type(error).__name__}: {error}"

    def get_summary(self) -> Dict[str, Any]:
        """
        Get metrics summary.

        Returns:
            Dictionary with all counters and average sink latency
        """
        avg_latency = None
        if self.sink_latencies:
            avg_latency = round(sum(self.sink_latencies) / len(self.sink_latencies), 2)

        return {
            "app_name": self.app_name,
            "started_at": self.started_at.isoformat(),
            "captured": self.captured,
            "skipped": dict(self.skipped),
            "persisted": self.persisted,
            "persist_failures": self.persist_failures,
            "delivered": self.delivered,
            "queued": self.queued,
            "dropped": self.dropped,
            "avg_sink_latency_ms": avg_latency,
            "last_error": self.last_error,
        }

    def log_summary(self) -> None:
        """Emit the summary as a structured log entry."""
        logger.info(
            f"Monitor metrics for {self.app_name}",
            extra={"app_name": self.app_name, "metrics": self.get_summary()}
        )
