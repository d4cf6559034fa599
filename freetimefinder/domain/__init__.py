"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import BusyPeriodSourceError, FreeTimeFinderError, InvalidRequestError
from .free_slot_finder import FreeSlotFinder
from .interval_merger import IntervalMerger
from .models import AvailabilityResult, FreeSlot, Interval, SearchWindow

__all__ = [
    "AvailabilityResult",
    "BusyPeriodSourceError",
    "FreeSlot",
    "FreeSlotFinder",
    "FreeTimeFinderError",
    "Interval",
    "IntervalMerger",
    "InvalidRequestError",
    "SearchWindow",
]
