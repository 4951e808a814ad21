"""Operation result data models."""

from pydantic import BaseModel


class DrainResult(BaseModel):
    """Result of draining the retry queue."""

    processed: int = 0
    delivered: int = 0
    dropped: int = 0
