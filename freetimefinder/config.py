"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional, Sequence

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    start_hour: int = 9
    end_hour: int = 17

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure slot duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the default window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class CalendarEntry(BaseModel):
    """Calendar alias configuration."""
    name: str  # Used as alias
    calendar_id: str


class AppConfig(BaseModel):
    """Application configuration."""
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: str = "UTC"
    busy_data_file: Optional[Path] = None
    calendars: List[CalendarEntry] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("calendars")
    @classmethod
    def validate_calendars(cls, value: List[CalendarEntry]) -> List[CalendarEntry]:
        """Ensure calendar aliases and ids are unique."""
        seen_names: set[str] = set()
        seen_ids: set[str] = set()
        for calendar in value:
            name_key = calendar.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate calendar name detected: {calendar.name}")
            if calendar.calendar_id in seen_ids:
                raise ValueError(f"Duplicate calendar id detected: {calendar.calendar_id}")
            seen_names.add(name_key)
            seen_ids.add(calendar.calendar_id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``busy_data_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        if config.busy_data_file is not None and not config.busy_data_file.is_absolute():
            config = config.model_copy(
                update={"busy_data_file": config_path.parent / config.busy_data_file}
            )

        return config

    def find_calendar_by_name(self, name: str) -> CalendarEntry | None:
        """Find a calendar by its name (alias)."""
        for calendar in self.calendars:
            if calendar.name.lower() == name.lower():
                return calendar
        return None

    def resolve_calendar(self, identifier: str) -> str:
        """
        Resolve a calendar identifier (alias or raw calendar id) to a calendar id.

        Unknown identifiers are passed through as raw calendar ids.
        """
        calendar = self.find_calendar_by_name(identifier)
        if calendar:
            return calendar.calendar_id
        return identifier

    def resolve_calendars(self, identifiers: Sequence[str]) -> List[str]:
        """
        Resolve multiple calendar identifiers, dropping repeated ones.

        Args:
            identifiers: Iterable of calendar aliases or calendar ids.

        Returns:
            List of unique calendar ids, in request order.
        """
        resolved_ids: List[str] = []

        for identifier in identifiers:
            calendar_id = self.resolve_calendar(identifier)
            if calendar_id not in resolved_ids:
                resolved_ids.append(calendar_id)

        return resolved_ids


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
