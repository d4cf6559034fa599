"""
Domain-specific exception hierarchy for the free time finder application.
"""


class FreeTimeFinderError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(FreeTimeFinderError, ValueError):
    """Raised when an availability request is rejected before computation."""


class BusyPeriodSourceError(FreeTimeFinderError):
    """Raised when busy-period data cannot be loaded at all."""
