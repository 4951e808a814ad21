"""Exceptions raised inside the monitor's own collaborators.

None of these reach the embedding application: each is caught at the
nearest boundary (sink, store, monitor) and turned into a failed result.
"""


class MonitorError(Exception):
    """Base exception for API error monitor faults."""
    pass


class SinkDeliveryError(MonitorError):
    """Raised when the sink rejects a report or cannot be reached."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(MonitorError):
    """Raised when a report cannot be written to or read from local storage."""
    pass


class SourceLookupError(MonitorError):
    """Raised when a source location cannot be resolved to a readable line."""
    pass
