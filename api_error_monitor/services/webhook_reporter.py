"""
Webhook reporter.

Posts error reports to a Discord-compatible webhook as a single embed.
Delivery failures are returned as False by ``send`` (and its alias
``report``, used by the retry queue) and never raised to the caller.
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from api_error_monitor.analyzers.key_scanner import PRIMITIVE_TYPE_NAMES
from api_error_monitor.analyzers.message_cleaner import strip_stack_trace, truncate
from api_error_monitor.errors import SinkDeliveryError
from api_error_monitor.models.report import ApiErrorReport
from api_error_monitor.utils.logging import get_logger, log_sink_delivery

logger = get_logger(__name__)


EMBED_TITLE = "🚨 API Parsing Error"
COLOR_TYPE_MISMATCH = 0xFF0000
COLOR_NULL_VALUE = 0xFFFF00

# Discord rejects field values above 1024 characters
MAX_FIELD_LENGTH = 1000


class WebhookReporter:
    """Sends error reports to a webhook endpoint."""

    def __init__(
        self,
        webhook_url: str,
        enabled: bool = True,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the webhook reporter.

        Args:
            webhook_url: Webhook URL reports are posted to
            enabled: When False, ``report`` returns False without sending
            timeout: Request timeout in seconds
            client: Optional shared httpx client (owned by the caller)
        """
        self.webhook_url = webhook_url
        self.enabled = enabled
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this reporter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def report(self, report: ApiErrorReport) -> bool:
        """Deliver a report; same as ``send``. Never raises."""
        return await self.send(report)

    async def send(self, report: ApiErrorReport) -> bool:
        """
        Send an error report to the webhook.

        Args:
            report: Report to send

        Returns:
            True on a 2xx response, False otherwise (never raises)
        """
        if not self.enabled:
            return False

        try:
            await self._post(report)
            return True
        except SinkDeliveryError as e:
            log_sink_delivery(
                logger,
                sink="webhook",
                endpoint=report.endpoint,
                status_code=e.status_code,
                error=str(e),
            )
            return False
        except Exception as e:
            log_sink_delivery(logger, sink="webhook", endpoint=report.endpoint, error=str(e))
            return False

    async def _post(self, report: ApiErrorReport) -> None:
        """
        Post a report, raising on failure.

        Args:
            report: Report to send

        Raises:
            SinkDeliveryError: On transport errors or non-2xx responses
        """
        payload = build_payload(report)
        start = time.perf_counter()

        try:
            response = await self._get_client().post(self.webhook_url, json=payload)
        except httpx.HTTPError as e:
            raise SinkDeliveryError(f"Webhook request failed: {e}") from e

        duration_ms = (time.perf_counter() - start) * 1000
        if not 200 <= response.status_code < 300:
            raise SinkDeliveryError(
                f"Webhook returned status {response.status_code}",
                status_code=response.status_code,
            )

        log_sink_delivery(
            logger,
            sink="webhook",
            endpoint=report.endpoint,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )


def _reportable_key(key: Optional[str]) -> Optional[str]:
    if not key or key in PRIMITIVE_TYPE_NAMES:
        return None
    return key


def build_embed(report: ApiErrorReport) -> Dict[str, Any]:
    """
    Render a report as a Discord embed.

    Args:
        report: Report to render

    Returns:
        Embed dictionary
    """
    timestamp = report.timestamp.isoformat()
    fields: List[Dict[str, Any]] = [
        {"name": "App Name", "value": report.app_name, "inline": True},
        {"name": "Endpoint", "value": f"`{report.endpoint}`", "inline": False},
    ]

    key = _reportable_key(report.key)
    if key is not None:
        fields.append({"name": "Key", "value": f"`{key}`", "inline": True})

    if report.expected_type is not None:
        fields.append({"name": "Expected Type", "value": f"`{report.expected_type}`", "inline": True})

    if report.received_type is not None:
        fields.append({"name": "Received Type", "value": f"`{report.received_type}`", "inline": True})

    fields.append({"name": "Timestamp", "value": timestamp, "inline": False})

    message = truncate(strip_stack_trace(report.error_message), MAX_FIELD_LENGTH)
    fields.append({"name": "Error Message", "value": f"```{message}```", "inline": False})

    if report.stack_trace:
        fields.append({
            "name": "Stack Trace",
            "value": f"```{truncate(report.stack_trace, MAX_FIELD_LENGTH)}```",
            "inline": False,
        })

    color = COLOR_NULL_VALUE if report.received_type == "null" else COLOR_TYPE_MISMATCH

    return {
        "title": EMBED_TITLE,
        "color": color,
        "fields": fields,
        "timestamp": timestamp,
    }


def build_payload(report: ApiErrorReport) -> Dict[str, Any]:
    """Build the webhook request body for a report."""
    return {"embeds": [build_embed(report)]}
