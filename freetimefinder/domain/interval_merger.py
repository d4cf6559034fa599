"""
Merging of raw busy intervals reported by several calendars.

Pure domain logic: no I/O, and caller-supplied intervals are never mutated.
"""

from typing import Iterable, List, Mapping, Optional, Sequence

from .models import Interval


class IntervalMerger:
    """
    Flattens per-calendar busy data and merges it into one busy timeline.

    Algorithm:
    1. Drop zero-length intervals (they cover no time)
    2. Sort by start time
    3. Sweep left to right, extending the current interval while the next
       one starts at or before its end (touching intervals are merged)
    4. Emit a new interval whenever a genuine gap appears

    The result is sorted, non-overlapping and maximal: no two consecutive
    intervals satisfy ``next.start <= prev.end``.
    """

    @staticmethod
    def flatten(
        raw_busy_data: Mapping[str, Optional[Sequence[Interval]]]
    ) -> List[Interval]:
        """
        Collect the busy intervals of all calendars into a single list.

        A calendar that is missing, or maps to None, contributes nothing.
        """
        flattened: List[Interval] = []

        for busy_ranges in raw_busy_data.values():
            if busy_ranges:
                flattened.extend(busy_ranges)

        return flattened

    def merge(self, intervals: Iterable[Interval]) -> List[Interval]:
        """
        Merge intervals into a sorted, non-overlapping busy timeline.

        Example: [10:00-12:00, 11:00-13:00, 13:00-14:00] -> [10:00-14:00]
        """
        sorted_intervals = sorted(
            (interval for interval in intervals if not interval.is_empty()),
            key=lambda r: r.start,
        )

        if not sorted_intervals:
            return []

        merged: List[Interval] = []
        current_start = sorted_intervals[0].start
        current_end = sorted_intervals[0].end

        for interval in sorted_intervals[1:]:
            if interval.start <= current_end:
                current_end = max(current_end, interval.end)
            else:
                merged.append(Interval(start=current_start, end=current_end))
                current_start = interval.start
                current_end = interval.end

        merged.append(Interval(start=current_start, end=current_end))

        return merged

    def merge_calendars(
        self,
        raw_busy_data: Mapping[str, Optional[Sequence[Interval]]]
    ) -> List[Interval]:
        """Flatten per-calendar busy data and merge it into one timeline."""
        return self.merge(self.flatten(raw_busy_data))
