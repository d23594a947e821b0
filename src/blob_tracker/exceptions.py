"""Custom exception classes for Blob Tracker."""

from typing import Any, Optional


class BlobTrackerError(Exception):
    """Base exception for all Blob Tracker errors."""

    pass


class InvalidArgumentError(BlobTrackerError, ValueError):
    """Raised when an argument is missing, malformed or out of range."""

    def __init__(self, message: str, value: Optional[Any] = None):
        self.value = value
        super().__init__(message)


class FailedPreconditionError(BlobTrackerError, RuntimeError):
    """Raised when an operation needs setup that has not been performed."""

    pass


class NotFoundError(BlobTrackerError, KeyError):
    """Raised when an entity is not part of the current update cycle."""

    def __init__(self, message: str, entity_id: Optional[int] = None):
        self.entity_id = entity_id
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument by default
        return str(self.args[0]) if self.args else ""


class InternalStateError(BlobTrackerError, RuntimeError):
    """Raised when the tracker's internal state is inconsistent."""

    pass
