"""
Domain models for busy intervals, search windows and free slots.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from pendulum import DateTime


def _utc_string(instant: DateTime) -> str:
    """Serialize an instant as an ISO 8601 UTC timestamp (``...Z``)."""
    return instant.in_timezone("UTC").to_iso8601_string()


@dataclass(frozen=True)
class Interval:
    """
    Represents an immutable span of time with start and end instant.

    Invariant: start must not be after end. Zero-length intervals are allowed
    but cover no time.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in whole minutes (rounded down)."""
        return int((self.end - self.start).total_seconds() // 60)

    def is_empty(self) -> bool:
        """Check if the interval covers no time."""
        return self.start == self.end

    def overlaps(self, other: "Interval") -> bool:
        """Check if this interval shares covered time with another."""
        return self.start < other.end and self.end > other.start

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": _utc_string(self.start),
            "end": _utc_string(self.end),
        }

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class SearchWindow:
    """
    The bounded range within which free slots are sought.
    """
    range_start: DateTime
    range_end: DateTime

    def __post_init__(self):
        if self.range_start > self.range_end:
            raise ValueError(
                f"Range start {self.range_start} must not be after range end {self.range_end}"
            )


@dataclass(frozen=True)
class FreeSlot:
    """
    Represents a found free time slot.
    """
    start: DateTime
    end: DateTime
    duration_minutes: int

    @classmethod
    def between(cls, start: DateTime, end: DateTime) -> "FreeSlot":
        """Build a slot for [start, end), deriving its whole-minute duration."""
        return cls(start=start, end=end, duration_minutes=Interval(start, end).duration_minutes())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": _utc_string(self.start),
            "end": _utc_string(self.end),
            "durationMinutes": self.duration_minutes,
        }

    def format_display(self, timezone: str = "UTC") -> str:
        """
        Format the slot for display in the given timezone.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm (N min)
        """
        start = self.start.in_timezone(timezone)
        end = self.end.in_timezone(timezone)

        weekday = start.format("dddd")
        date_str = start.format("YYYY-MM-DD")
        if end.date() == start.date():
            time_str = f"{start.format('HH:mm')} - {end.format('HH:mm')}"
        else:
            time_str = f"{start.format('HH:mm')} - {end.format('YYYY-MM-DD HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes} min)"


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Outcome of an availability search: qualifying free slots plus the merged
    busy timeline they were derived from.
    """
    free_slots: List[FreeSlot] = field(default_factory=list)
    merged_busy_periods: List[Interval] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "freeSlots": [slot.to_dict() for slot in self.free_slots],
            "mergedBusyPeriods": [period.to_dict() for period in self.merged_busy_periods],
        }
