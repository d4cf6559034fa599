"""
Tests for free slot finder.
"""

import random

import pendulum
import pytest

from freetimefinder.domain.free_slot_finder import FreeSlotFinder
from freetimefinder.domain.interval_merger import IntervalMerger
from freetimefinder.domain.models import FreeSlot, Interval, SearchWindow

DAY_START = pendulum.datetime(2024, 1, 15, tz="UTC")


def _at(hhmm: str) -> pendulum.DateTime:
    return pendulum.parse(f"2024-01-15 {hhmm}", tz="UTC")


def _interval(start: str, end: str) -> Interval:
    return Interval(start=_at(start), end=_at(end))


def _window(start: str = "09:00", end: str = "17:00") -> SearchWindow:
    return SearchWindow(range_start=_at(start), range_end=_at(end))


class TestFreeSlotFinder:
    """Tests for FreeSlotFinder."""

    def test_no_busy_time(self):
        """An empty timeline leaves the whole window free."""
        slots = FreeSlotFinder().find_free_slots([], _window(), 30)

        assert slots == [FreeSlot(start=_at("09:00"), end=_at("17:00"), duration_minutes=480)]

    def test_fully_booked_window(self):
        """Busy time spanning the whole window leaves nothing."""
        slots = FreeSlotFinder().find_free_slots([_interval("09:00", "17:00")], _window(), 60)

        assert slots == []

    def test_gap_on_both_sides(self):
        """Busy 10:00-10:30 splits the window into two slots."""
        slots = FreeSlotFinder().find_free_slots([_interval("10:00", "10:30")], _window(), 30)

        assert slots == [
            FreeSlot(start=_at("09:00"), end=_at("10:00"), duration_minutes=60),
            FreeSlot(start=_at("10:30"), end=_at("17:00"), duration_minutes=390),
        ]

    def test_gaps_between_busy_periods(self):
        slots = FreeSlotFinder().find_free_slots(
            [_interval("10:00", "11:00"), _interval("14:00", "15:00")],
            _window(),
            30,
        )

        assert [(s.start, s.end) for s in slots] == [
            (_at("09:00"), _at("10:00")),
            (_at("11:00"), _at("14:00")),
            (_at("15:00"), _at("17:00")),
        ]

    def test_gap_exactly_minimum_duration_is_included(self):
        slots = FreeSlotFinder().find_free_slots(
            [_interval("09:00", "10:00"), _interval("10:30", "17:00")],
            _window(),
            30,
        )

        assert slots == [FreeSlot(start=_at("10:00"), end=_at("10:30"), duration_minutes=30)]

    def test_gap_one_minute_short_is_excluded(self):
        slots = FreeSlotFinder().find_free_slots(
            [_interval("09:00", "10:00"), _interval("10:29", "17:00")],
            _window(),
            30,
        )

        assert slots == []

    def test_partial_minutes_do_not_count(self):
        """A gap of 29 minutes 59 seconds does not satisfy a 30 minute minimum."""
        busy_end = pendulum.parse("2024-01-15 10:29:59", tz="UTC")
        timeline = [_interval("09:00", "10:00"), Interval(start=busy_end, end=_at("17:00"))]

        assert FreeSlotFinder().find_free_slots(timeline, _window(), 30) == []
        assert FreeSlotFinder().find_free_slots(timeline, _window(), 29)[0].duration_minutes == 29

    def test_busy_time_outside_window_is_ignored(self):
        """Busy periods before or after the window do not produce slots beyond it."""
        slots = FreeSlotFinder().find_free_slots(
            [_interval("07:00", "08:00"), _interval("18:00", "19:00")],
            _window(),
            30,
        )

        assert slots == [FreeSlot(start=_at("09:00"), end=_at("17:00"), duration_minutes=480)]

    def test_busy_time_overlapping_window_edges(self):
        """Busy periods straddling the window boundaries clip the slots."""
        slots = FreeSlotFinder().find_free_slots(
            [_interval("08:00", "09:30"), _interval("16:00", "18:00")],
            _window(),
            30,
        )

        assert slots == [FreeSlot(start=_at("09:30"), end=_at("16:00"), duration_minutes=390)]

    def test_busy_time_starting_at_window_end(self):
        slots = FreeSlotFinder().find_free_slots([_interval("17:00", "18:00")], _window(), 30)

        assert slots == [FreeSlot(start=_at("09:00"), end=_at("17:00"), duration_minutes=480)]

    def test_empty_window(self):
        """A window with no length has no free time."""
        assert FreeSlotFinder().find_free_slots([], _window("09:00", "09:00"), 1) == []

    def test_short_gaps_are_filtered(self):
        """Only gaps meeting the minimum survive."""
        timeline = [_interval("09:00", "09:45"), _interval("10:00", "17:00")]

        assert FreeSlotFinder().find_free_slots(timeline, _window(), 30) == []
        assert FreeSlotFinder().find_free_slots(timeline, _window(), 15) == [
            FreeSlot(start=_at("09:45"), end=_at("10:00"), duration_minutes=15)
        ]


class TestFreeSlotFinderProperties:
    """Invariants checked over seeded random timelines."""

    @pytest.mark.parametrize("seed", range(30))
    def test_slots_are_valid_and_maximal(self, seed):
        rng = random.Random(seed)
        raw = []
        for _ in range(rng.randrange(0, 15)):
            start = rng.randrange(6 * 60, 20 * 60)
            raw.append(
                Interval(
                    start=DAY_START.add(minutes=start),
                    end=DAY_START.add(minutes=start + rng.choice([0, 10, 30, 45, 120])),
                )
            )
        timeline = IntervalMerger().merge(raw)
        window = _window("09:00", "17:00")
        min_duration = rng.choice([1, 15, 30, 60])

        slots = FreeSlotFinder().find_free_slots(timeline, window, min_duration)

        for slot in slots:
            assert window.range_start <= slot.start < slot.end <= window.range_end
            assert slot.duration_minutes >= min_duration
            assert slot.duration_minutes == int((slot.end - slot.start).total_seconds() // 60)
            for busy in timeline:
                assert not Interval(start=slot.start, end=slot.end).overlaps(busy)
            # Maximal: each edge is the window edge or touches busy time
            assert slot.start == window.range_start or any(b.end == slot.start for b in timeline)
            assert slot.end == window.range_end or any(b.start == slot.end for b in timeline)

        for previous, following in zip(slots, slots[1:]):
            assert previous.end < following.start
