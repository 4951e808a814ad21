"""
httpx integration.

Two ways to feed response-parsing failures to the monitor:
- MonitoredClient wraps an httpx.AsyncClient; a failing ``from_json``
  callback is captured and re-raised to the caller.
- install_response_hook adds a response event hook to an existing client;
  the hook captures a failing ``from_json`` callback and lets the response
  through unchanged.
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional

import httpx

from api_error_monitor.monitor import ApiErrorMonitor
from api_error_monitor.utils.logging import get_logger

logger = get_logger(__name__)

FromJson = Callable[[Any], Any]


def _request_body(kwargs: dict) -> Optional[Mapping]:
    body = kwargs.get("json")
    if body is None:
        body = kwargs.get("data")
    return body if isinstance(body, Mapping) else None


class MonitoredClient:
    """httpx.AsyncClient wrapper that reports response-parsing failures."""

    def __init__(
        self,
        monitor: ApiErrorMonitor,
        client: Optional[httpx.AsyncClient] = None,
        **client_kwargs: Any,
    ):
        """
        Initialize the monitored client.

        Args:
            monitor: Monitor that receives captured errors
            client: Existing client to wrap (owned by the caller)
            **client_kwargs: Arguments for a new httpx.AsyncClient
        """
        self.monitor = monitor
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**client_kwargs)

    async def request(
        self,
        method: str,
        url: Any,
        *,
        from_json: Optional[FromJson] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request, optionally decoding the body with ``from_json``.

        Transport errors and ``from_json`` failures are captured, then
        re-raised unchanged.

        Args:
            method: HTTP method
            url: Request URL
            from_json: Callback receiving the decoded JSON body
            **kwargs: Passed through to httpx.AsyncClient.request

        Returns:
            The httpx response
        """
        request_data = _request_body(kwargs)

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            await self.monitor.capture(
                e,
                e.__traceback__,
                endpoint=str(url),
                request_data=request_data,
            )
            raise

        if from_json is not None:
            try:
                from_json(response.json())
            except Exception as e:
                await self.monitor.capture(
                    e,
                    e.__traceback__,
                    endpoint=str(response.request.url),
                    request_data=request_data,
                    response_data=response.text,
                )
                raise

        return response

    async def get(self, url: Any, *, from_json: Optional[FromJson] = None, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, from_json=from_json, **kwargs)

    async def post(self, url: Any, *, from_json: Optional[FromJson] = None, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, from_json=from_json, **kwargs)

    async def put(self, url: Any, *, from_json: Optional[FromJson] = None, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, from_json=from_json, **kwargs)

    async def delete(self, url: Any, *, from_json: Optional[FromJson] = None, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, from_json=from_json, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "MonitoredClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def install_response_hook(
    client: httpx.AsyncClient,
    monitor: ApiErrorMonitor,
    from_json: FromJson,
) -> Callable[[httpx.Response], Any]:
    """
    Add a response hook that runs ``from_json`` and captures its failures.

    The hook never raises; the caller's own parsing is unaffected.

    Args:
        client: Client to install the hook on
        monitor: Monitor that receives captured errors
        from_json: Callback receiving the decoded JSON body

    Returns:
        The installed hook
    """
    async def on_response(response: httpx.Response) -> None:
        if response.is_error:
            return
        try:
            await response.aread()
            from_json(response.json())
        except Exception as e:
            try:
                response_data = response.text
            except httpx.ResponseNotRead:
                response_data = None
            await monitor.capture(
                e,
                e.__traceback__,
                endpoint=str(response.request.url),
                response_data=response_data,
            )

    hooks = client.event_hooks
    hooks["response"] = [*hooks.get("response", []), on_response]
    client.event_hooks = hooks
    return on_response
