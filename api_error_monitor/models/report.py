"""API error report data model."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiErrorReport(BaseModel):
    """
    Durable, transmittable record of one API parsing error.

    Serialized with camelCase keys (appName, expectedType, ...) for the
    local store. Immutable once constructed.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    app_name: str
    endpoint: str
    error_message: str
    timestamp: datetime = Field(default_factory=_utcnow)
    key: Optional[str] = None
    expected_type: Optional[str] = None
    received_type: Optional[str] = None
    stack_trace: Optional[str] = None
    request_data: Optional[Dict[str, Any]] = None
    response_data: Any = None

    @field_validator("timestamp")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC so stored reports stay comparable
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ApiErrorReport":
        """Build a report from a dict produced by ``to_json``."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        return (
            "ApiErrorReport:\n"
            f"  App Name: {self.app_name}\n"
            f"  Endpoint: {self.endpoint}\n"
            f"  Key: {self.key or 'N/A'}\n"
            f"  Expected Type: {self.expected_type or 'N/A'}\n"
            f"  Received Type: {self.received_type or 'N/A'}\n"
            f"  Timestamp: {self.timestamp.isoformat()}\n"
            f"  Error: {self.error_message}\n"
            f"  Stack Trace: {self.stack_trace or 'N/A'}\n"
        )
