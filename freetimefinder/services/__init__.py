"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityQuery, AvailabilityService, BusyPeriodSourceProtocol

__all__ = ["AvailabilityQuery", "AvailabilityService", "BusyPeriodSourceProtocol"]
