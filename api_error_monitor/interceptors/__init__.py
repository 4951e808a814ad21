"""HTTP client integrations."""

from api_error_monitor.interceptors.httpx_hooks import MonitoredClient, install_response_hook

__all__ = ["MonitoredClient", "install_response_hook"]
