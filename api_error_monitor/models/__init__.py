"""Data models for the API error monitor."""

from .error_info import ApiErrorInfo, ClassifiedError, ErrorKind, TypePair
from .report import ApiErrorReport
from .results import DrainResult

__all__ = [
    # Extraction models
    "ApiErrorInfo",
    "TypePair",
    # Classification models
    "ErrorKind",
    "ClassifiedError",
    # Report models
    "ApiErrorReport",
    # Result models
    "DrainResult",
]
