"""Exceptions raised by the calorie tracker."""

from typing import Optional


class CalorieTrackerError(Exception):
    """Base class for calorie tracker errors."""


class ValidationError(CalorieTrackerError, ValueError):
    """Caller-supplied data is malformed (empty name, non-numeric calories)."""


class StorageError(CalorieTrackerError):
    """
    The durable store could not read or write.
    
    The tracker mutates memory before writing through, so when this is
    raised from a tracker operation the change is applied in memory but
    may not be saved.
    """
    
    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
