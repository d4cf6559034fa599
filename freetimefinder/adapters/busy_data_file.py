"""
File-backed busy-period source.

Loads busy times from a JSON document instead of a live calendar API, so the
solver can run against exported free/busy responses or hand-written fixtures.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BusyPeriodSourceError
from ..domain.models import Interval

logger = logging.getLogger(__name__)


class BusyDataFileSource:
    """
    Busy-period source that reads calendar data from a JSON file.

    Two layouts are understood:

    1. A free/busy query response::

        {
            "calendars": {
                "primary": {
                    "busy": [{"start": "...", "end": "..."}],
                    "errors": [{"domain": "global", "reason": "notFound"}]
                }
            }
        }

    2. A flat list of events::

        [{"calendarId": "primary", "start": "...", "end": "..."}]

    Calendars that report errors, are missing from the file, or contain
    unparseable items simply contribute no busy time for those entries.
    """

    def __init__(self, data_file: Path, timezone: str = "UTC"):
        """
        Initialize the source.

        Args:
            data_file: Path to the JSON busy-data file
            timezone: IANA timezone used for timestamps without an offset
        """
        self.data_file = Path(data_file)
        self.timezone = timezone
        self._calendars: Dict[str, List[Dict[str, Any]]] | None = None

    def _load_calendar_data(self) -> Dict[str, List[Dict[str, Any]]]:
        """Load and normalize the JSON file into calendar id -> raw busy items."""
        if self._calendars is not None:
            return self._calendars

        if not self.data_file.exists():
            raise BusyPeriodSourceError(f"Busy data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise BusyPeriodSourceError(f"Could not read busy data from {self.data_file}: {exc}") from exc

        if isinstance(data, dict):
            self._calendars = self._from_freebusy_response(data)
        elif isinstance(data, list):
            self._calendars = self._from_event_list(data)
        else:
            raise BusyPeriodSourceError(
                f"Busy data in {self.data_file} must be an object or a list, got {type(data).__name__}"
            )

        return self._calendars

    def _from_freebusy_response(self, data: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
        calendars: Dict[str, List[Dict[str, Any]]] = {}

        raw_calendars = data.get("calendars") or {}
        if not isinstance(raw_calendars, dict):
            raise BusyPeriodSourceError(
                f"'calendars' in {self.data_file} must be an object, got {type(raw_calendars).__name__}"
            )

        for calendar_id, calendar_data in raw_calendars.items():
            if not isinstance(calendar_data, dict):
                logger.warning("Ignoring malformed entry for calendar %s", calendar_id)
                continue

            errors = calendar_data.get("errors")
            if errors:
                logger.warning("Calendar %s reported errors, treating as free: %s", calendar_id, errors)

            busy = calendar_data.get("busy") or []
            if not isinstance(busy, list):
                logger.warning("Ignoring malformed busy list for calendar %s", calendar_id)
                busy = []

            calendars[calendar_id] = list(busy)

        return calendars

    @staticmethod
    def _from_event_list(events: Iterable[Any]) -> Dict[str, List[Dict[str, Any]]]:
        calendars: Dict[str, List[Dict[str, Any]]] = {}

        for event in events:
            if not isinstance(event, dict) or not isinstance(event.get("calendarId"), str):
                logger.warning("Ignoring event without calendarId: %r", event)
                continue
            calendars.setdefault(event["calendarId"], []).append(event)

        return calendars

    async def get_busy_periods(
        self,
        calendar_ids: Sequence[str],
        range_start: DateTime,
        range_end: DateTime
    ) -> Dict[str, List[Interval]]:
        """
        Load busy intervals for the requested calendars.

        Args:
            calendar_ids: Calendar identifiers to look up
            range_start: Start of the time window
            range_end: End of the time window

        Returns:
            Dictionary mapping calendar id -> list of busy Interval objects

        Raises:
            BusyPeriodSourceError: If the data file cannot be loaded
        """
        calendars = self._load_calendar_data()
        busy_periods: Dict[str, List[Interval]] = {}

        for calendar_id in calendar_ids:
            if calendar_id not in calendars:
                logger.warning("No busy data for calendar %s, treating as free", calendar_id)
                busy_periods[calendar_id] = []
                continue

            calendar_busy: List[Interval] = []

            for item in calendars[calendar_id]:
                try:
                    busy = Interval(
                        start=self._parse_datetime(item["start"]),
                        end=self._parse_datetime(item["end"]),
                    )
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping busy item %r of calendar %s: %s", item, calendar_id, e)
                    continue

                # Only keep busy time that touches the requested window
                if busy.start < range_end and busy.end > range_start:
                    calendar_busy.append(busy)

            logger.debug("Calendar %s: %d busy period(s) in range", calendar_id, len(calendar_busy))
            busy_periods[calendar_id] = calendar_busy

        return busy_periods

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """
        Parse an ISO 8601 timestamp into a pendulum DateTime.

        Timestamps without an offset are interpreted in the source timezone.
        """
        dt = pendulum.parse(datetime_str, tz=self.timezone)

        if isinstance(dt, DateTime):
            return dt

        raise ValueError(f"Could not parse datetime: {datetime_str}")
