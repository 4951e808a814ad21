"""Extraction result and error classification models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    """Classification of the original application error."""

    TYPE_MISMATCH = "type_mismatch"
    MISSING_KEY = "missing_key"
    NULL_VALUE = "null_value"
    NETWORK = "network"
    UNCLASSIFIED = "unclassified"


class TypePair(BaseModel):
    """Received/expected type pair pulled out of diagnostic text."""

    model_config = ConfigDict(frozen=True)

    received_type: Optional[str] = None
    expected_type: Optional[str] = None

    def fill_missing(self, other: "TypePair") -> "TypePair":
        """Return a pair with empty fields taken from ``other``."""
        return TypePair(
            received_type=self.received_type or other.received_type,
            expected_type=self.expected_type or other.expected_type,
        )

    @property
    def is_complete(self) -> bool:
        return self.received_type is not None and self.expected_type is not None


class ApiErrorInfo(BaseModel):
    """Information extracted from an error."""

    model_config = ConfigDict(frozen=True)

    key: Optional[str] = None
    expected_type: Optional[str] = None
    received_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.key is None and self.expected_type is None and self.received_type is None


class ClassifiedError(BaseModel):
    """Uniform view of a caught error, built once at the capture boundary."""

    model_config = ConfigDict(frozen=True)

    message: str
    kind: ErrorKind = ErrorKind.UNCLASSIFIED
    error_type: str = "Exception"
    # The error value's own diagnostic string, when it differs from message
    detail: Optional[str] = None
