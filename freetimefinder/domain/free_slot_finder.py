"""
Core business logic for deriving free slots from a merged busy timeline.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import List, Sequence

from pendulum import DateTime

from .models import FreeSlot, Interval, SearchWindow


class FreeSlotFinder:
    """
    Finds all maximal free slots of a minimum length inside a search window.

    The busy timeline must already be sorted and merged (see IntervalMerger).
    Request validation (positive duration, ordered window) happens upstream.
    """

    def find_free_slots(
        self,
        busy_timeline: Sequence[Interval],
        window: SearchWindow,
        min_duration_minutes: int
    ) -> List[FreeSlot]:
        """
        Walk the busy timeline and collect the gaps inside the window.

        Args:
            busy_timeline: Sorted, merged busy intervals
            window: The range to search
            min_duration_minutes: Minimum gap length in whole minutes (inclusive)

        Returns:
            List of FreeSlot objects, earliest first

        Example:
        Window: 09:00 - 17:00, busy: [10:00-10:30], minimum 30
        Result: [09:00-10:00 (60), 10:30-17:00 (390)]
        """
        free_slots: List[FreeSlot] = []
        cursor = window.range_start

        for busy in busy_timeline:
            if busy.start >= window.range_end:
                # Sorted timeline: nothing later can touch the window
                break

            if busy.end <= cursor:
                continue

            if busy.start > cursor:
                self._add_if_long_enough(free_slots, cursor, busy.start, min_duration_minutes)

            cursor = max(cursor, busy.end)

        if cursor < window.range_end:
            self._add_if_long_enough(free_slots, cursor, window.range_end, min_duration_minutes)

        return free_slots

    @staticmethod
    def _add_if_long_enough(
        free_slots: List[FreeSlot],
        start: DateTime,
        end: DateTime,
        min_duration_minutes: int
    ) -> None:
        slot = FreeSlot.between(start, end)
        if slot.duration_minutes >= min_duration_minutes:
            free_slots.append(slot)
