"""
Application service for finding common free time across calendars.

The service validates the request, fetches busy periods via a busy-period
source adapter and delegates the interval algebra to the domain-level
``IntervalMerger`` and ``FreeSlotFinder``. This keeps the CLI thin and
allows the data source to be swapped for a stub in tests.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Protocol, Sequence

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..domain.exceptions import InvalidRequestError
from ..domain.free_slot_finder import FreeSlotFinder
from ..domain.interval_merger import IntervalMerger
from ..domain.models import AvailabilityResult, Interval, SearchWindow

logger = logging.getLogger(__name__)

MAX_CALENDARS = 50


class BusyPeriodSourceProtocol(Protocol):
    """Protocol describing the busy-period source behaviour needed by the service."""

    async def get_busy_periods(
        self,
        calendar_ids: Sequence[str],
        range_start: DateTime,
        range_end: DateTime,
    ) -> Dict[str, List[Interval]]:
        """Return busy intervals per calendar id."""


class AvailabilityQuery(BaseModel):
    """Validated availability request."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    calendar_ids: List[str] = Field(min_length=1, max_length=MAX_CALENDARS)
    range_start: DateTime
    range_end: DateTime
    min_duration_minutes: int = Field(gt=0)

    @field_validator("range_start", "range_end", mode="before")
    @classmethod
    def validate_instant(cls, value: Any) -> Any:
        """Accept any timezone-aware datetime as an absolute instant."""
        if not isinstance(value, datetime):
            return value
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("range boundaries must be timezone-aware")
        if not isinstance(value, DateTime):
            return pendulum.instance(value)
        return value

    @field_validator("calendar_ids")
    @classmethod
    def validate_calendar_ids(cls, value: List[str]) -> List[str]:
        """Ensure calendar ids are non-blank and unique."""
        if any(not calendar_id.strip() for calendar_id in value):
            raise ValueError("calendar ids must not be blank")
        duplicates = sorted({calendar_id for calendar_id in value if value.count(calendar_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate calendar ids: {', '.join(duplicates)}")
        return value

    @model_validator(mode="after")
    def validate_range_order(self) -> "AvailabilityQuery":
        """Ensure the search window does not end before it starts."""
        if self.range_start > self.range_end:
            raise ValueError("range_start must not be after range_end")
        return self

    @property
    def window(self) -> SearchWindow:
        return SearchWindow(range_start=self.range_start, range_end=self.range_end)


class AvailabilityService:
    """
    Orchestrates busy-period retrieval, merging and free-slot search.

    Dependency inversion toward a protocol makes it easy to plug in the
    file-backed source or a stub implementation in tests.
    """

    def __init__(
        self,
        busy_source: BusyPeriodSourceProtocol,
        merger: IntervalMerger | None = None,
        finder: FreeSlotFinder | None = None,
    ) -> None:
        self._busy_source = busy_source
        self._merger = merger or IntervalMerger()
        self._finder = finder or FreeSlotFinder()

    @staticmethod
    def build_query(
        *,
        calendar_ids: Sequence[str],
        range_start: DateTime,
        range_end: DateTime,
        min_duration_minutes: int,
    ) -> AvailabilityQuery:
        """
        Validate raw request values.

        Raises:
            InvalidRequestError: If any part of the request is invalid
        """
        try:
            return AvailabilityQuery(
                calendar_ids=list(calendar_ids),
                range_start=range_start,
                range_end=range_end,
                min_duration_minutes=min_duration_minutes,
            )
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidRequestError(f"Invalid availability request: {problems}") from exc

    async def find_free_time(
        self,
        *,
        calendar_ids: Sequence[str],
        range_start: DateTime,
        range_end: DateTime,
        min_duration_minutes: int,
    ) -> AvailabilityResult:
        """
        Validate the request, fetch busy data and compute free slots.
        """
        query = self.build_query(
            calendar_ids=calendar_ids,
            range_start=range_start,
            range_end=range_end,
            min_duration_minutes=min_duration_minutes,
        )

        busy_periods = await self.fetch_busy_periods(query)

        return self.calculate(
            busy_periods=busy_periods,
            window=query.window,
            min_duration_minutes=query.min_duration_minutes,
        )

    async def fetch_busy_periods(self, query: AvailabilityQuery) -> Dict[str, List[Interval]]:
        """Fetch busy periods for the requested calendars."""
        busy_periods = await self._busy_source.get_busy_periods(
            calendar_ids=list(query.calendar_ids),
            range_start=query.range_start,
            range_end=query.range_end,
        )

        return self._ensure_busy_period_entries(query.calendar_ids, busy_periods)

    def calculate(
        self,
        *,
        busy_periods: Dict[str, List[Interval]],
        window: SearchWindow,
        min_duration_minutes: int,
    ) -> AvailabilityResult:
        """Merge busy data and derive the free slots within the window."""
        merged = self._merger.merge_calendars(busy_periods)
        free_slots = self._finder.find_free_slots(
            busy_timeline=merged,
            window=window,
            min_duration_minutes=min_duration_minutes,
        )

        logger.info(
            "Found %d free slot(s) of at least %d minutes (%d merged busy period(s))",
            len(free_slots),
            min_duration_minutes,
            len(merged),
        )

        return AvailabilityResult(free_slots=free_slots, merged_busy_periods=merged)

    @staticmethod
    def _ensure_busy_period_entries(
        calendar_ids: Sequence[str],
        busy_periods: Dict[str, List[Interval]],
    ) -> Dict[str, List[Interval]]:
        """
        Restrict the busy map to the requested calendars, one entry each.

        Sources may omit calendars they could not read or return None for
        them; both are normalised to an explicit empty list.
        """
        normalized: Dict[str, List[Interval]] = {}

        for calendar_id in calendar_ids:
            ranges = busy_periods.get(calendar_id)
            if ranges is None:
                logger.warning("No busy data returned for calendar %s, treating as free", calendar_id)
            normalized[calendar_id] = list(ranges or [])

        return normalized
