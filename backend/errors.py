# backend/errors.py
"""
Exception taxonomy for availability data.

Route handlers let these propagate; app.py maps each kind to an HTTP status.
"""

from typing import List, Optional


class AvailabilityError(Exception):
    """Base class for every availability-model error."""


class FormatError(AvailabilityError):
    """A time string is not HH:MM."""


class RangeError(AvailabilityError):
    """A time value or grid parameter is outside its domain."""


class OverlapError(AvailabilityError):
    """A new or resized interval intersects an existing one."""


class NotFoundError(AvailabilityError):
    """A referenced interval, day or teacher does not exist."""


class ValidationError(AvailabilityError):
    """A day or week breaks the interval invariants and cannot be stored."""

    def __init__(self, message: str, violations: Optional[List[str]] = None):
        super().__init__(message)
        self.violations = list(violations or [])


class PersistenceError(AvailabilityError):
    """The database could not store or load a week."""
