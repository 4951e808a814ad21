"""
Monitor configuration management.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class MonitorSettings(BaseSettings):
    """Monitor settings loaded from API_ERROR_MONITOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="API_ERROR_MONITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str
    enabled: bool = True
    log_level: str = "INFO"

    # Webhook sink (disabled when no URL is set)
    webhook_url: Optional[str] = None
    webhook_timeout: float = 10.0

    # Development mode
    development_mode: bool = False
    enable_in_development_mode: bool = False
    source_search_roots: List[str] = []
    source_lookup_timeout: float = 2.0

    # Local storage
    enable_local_logging: bool = True
    custom_log_directory: Optional[str] = None

    # Retry queue
    max_retries: int = 3
    retry_delay: float = 5.0  # seconds; attempt n waits retry_delay * n

    # Filtering
    ignore_network_errors: bool = True


@lru_cache
def get_settings() -> MonitorSettings:
    """Get the settings instance built from the environment."""
    return MonitorSettings()
