"""
Tests for domain models.
"""

import pendulum
import pytest

from freetimefinder.domain.models import AvailabilityResult, FreeSlot, Interval, SearchWindow


def _at(hhmm: str) -> pendulum.DateTime:
    return pendulum.parse(f"2024-01-15 {hhmm}", tz="UTC")


class TestInterval:
    """Tests for Interval model."""

    def test_create_valid_interval(self):
        """Test creating a valid interval."""
        start = _at("09:00")
        end = _at("17:00")

        interval = Interval(start=start, end=end)

        assert interval.start == start
        assert interval.end == end
        assert interval.duration_minutes() == 480  # 8 hours

    def test_zero_length_interval_is_allowed(self):
        """A zero-length interval is legal but empty."""
        interval = Interval(start=_at("10:00"), end=_at("10:00"))

        assert interval.is_empty()
        assert interval.duration_minutes() == 0

    def test_invalid_interval_raises_error(self):
        """Test that an interval ending before it starts raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must not be after end time"):
            Interval(start=_at("17:00"), end=_at("09:00"))

    def test_duration_rounds_down_to_whole_minutes(self):
        """Seconds beyond the last full minute are dropped."""
        interval = Interval(
            start=_at("09:00"),
            end=pendulum.parse("2024-01-15 09:30:59.999", tz="UTC"),
        )

        assert interval.duration_minutes() == 30

    def test_overlaps(self):
        """Touching intervals share no covered time."""
        morning = Interval(start=_at("09:00"), end=_at("12:00"))
        midday = Interval(start=_at("11:00"), end=_at("14:00"))
        afternoon = Interval(start=_at("14:00"), end=_at("17:00"))

        assert morning.overlaps(midday)
        assert midday.overlaps(morning)
        assert not midday.overlaps(afternoon)

    def test_comparison_is_absolute_across_timezones(self):
        """Instants in different zones order by absolute time."""
        utc = pendulum.parse("2024-01-15T10:00:00", tz="UTC")
        berlin = pendulum.parse("2024-01-15T10:30:00", tz="Europe/Berlin")  # 09:30 UTC

        assert berlin < utc
        assert Interval(start=berlin, end=utc).duration_minutes() == 30

    def test_to_dict(self):
        """Intervals serialize to ISO 8601 strings."""
        interval = Interval(start=_at("10:00"), end=_at("11:00"))

        assert interval.to_dict() == {
            "start": "2024-01-15T10:00:00Z",
            "end": "2024-01-15T11:00:00Z",
        }


class TestSearchWindow:
    """Tests for SearchWindow model."""

    def test_empty_window_is_allowed(self):
        window = SearchWindow(range_start=_at("09:00"), range_end=_at("09:00"))

        assert window.range_start == window.range_end

    def test_reversed_window_raises_error(self):
        with pytest.raises(ValueError, match="must not be after range end"):
            SearchWindow(range_start=_at("17:00"), range_end=_at("09:00"))


class TestFreeSlot:
    """Tests for FreeSlot model."""

    def test_between_derives_duration(self):
        slot = FreeSlot.between(_at("10:30"), _at("17:00"))

        assert slot.duration_minutes == 390

    def test_to_dict_uses_camel_case_duration(self):
        slot = FreeSlot.between(_at("09:00"), _at("10:00"))

        assert slot.to_dict() == {
            "start": "2024-01-15T09:00:00Z",
            "end": "2024-01-15T10:00:00Z",
            "durationMinutes": 60,
        }

    def test_format_display(self):
        """Slots are rendered in the requested timezone."""
        slot = FreeSlot.between(_at("09:00"), _at("10:00"))

        assert slot.format_display("UTC") == "Monday, 2024-01-15 | 09:00 - 10:00 (60 min)"
        assert slot.format_display("Europe/Berlin") == "Monday, 2024-01-15 | 10:00 - 11:00 (60 min)"

    def test_format_display_across_midnight(self):
        slot = FreeSlot.between(_at("22:00"), pendulum.parse("2024-01-16 02:00", tz="UTC"))

        assert slot.format_display() == "Monday, 2024-01-15 | 22:00 - 2024-01-16 02:00 (240 min)"


class TestAvailabilityResult:
    """Tests for AvailabilityResult model."""

    def test_to_dict(self):
        result = AvailabilityResult(
            free_slots=[FreeSlot.between(_at("09:00"), _at("10:00"))],
            merged_busy_periods=[Interval(start=_at("10:00"), end=_at("17:00"))],
        )

        assert result.to_dict() == {
            "freeSlots": [
                {"start": "2024-01-15T09:00:00Z", "end": "2024-01-15T10:00:00Z", "durationMinutes": 60}
            ],
            "mergedBusyPeriods": [
                {"start": "2024-01-15T10:00:00Z", "end": "2024-01-15T17:00:00Z"}
            ],
        }

    def test_empty_result(self):
        assert AvailabilityResult().to_dict() == {"freeSlots": [], "mergedBusyPeriods": []}
