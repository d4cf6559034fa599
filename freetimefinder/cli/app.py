"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import FreeTimeFinderError
from ..domain.models import AvailabilityResult
from ..adapters.busy_data_file import BusyDataFileSource
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="freetimefinder",
    help="Find common free time across several calendars",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """
    Load the configuration file.

    An explicitly given file must exist; when falling back to the default
    location a missing file means built-in defaults.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    config_path = get_default_config_path()
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return AppConfig()

    return AppConfig.load_from_yaml(config_path)


def _parse_boundary(value: str, tz: str, hour: int) -> DateTime:
    """
    Parse a window boundary given as a date (YYYY-MM-DD) or an ISO 8601 datetime.

    A bare date is anchored at the given hour.
    """
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).set(hour=hour)
    except ValueError:
        pass

    parsed = pendulum.parse(value, tz=tz)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Could not parse datetime: {value}")
    return parsed


def _determine_time_range(
    *,
    config: AppConfig,
    tz: str,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the search window based on shortcut flags or explicit boundaries.
    Returns (range_start, range_end).
    """
    if this_week and next_week:
        raise typer.BadParameter("--this-week and --next-week cannot be combined.")

    now = pendulum.now(tz)

    if this_week:
        return now, now.end_of("week")

    if next_week:
        next_monday = now.next(pendulum.MONDAY).start_of("day")
        end_of_week = next_monday.add(days=6).end_of("day")
        return next_monday, end_of_week

    start_hour = config.defaults.start_hour
    end_hour = config.defaults.end_hour

    if start_option:
        range_start = _parse_boundary(start_option, tz, start_hour)
    else:
        range_start = now.start_of("day").set(hour=start_hour)

    if end_option:
        range_end = _parse_boundary(end_option, tz, end_hour)
    else:
        range_end = range_start.start_of("day").set(hour=end_hour)

    return range_start, range_end


def _render_result(result: AvailabilityResult, min_duration: int, tz: str) -> None:
    console.print()
    if not result.free_slots:
        console.print(
            f"[yellow]No free slots of {min_duration} minutes found in the specified range.[/yellow]"
        )
    else:
        console.print(
            f"[bold green]Found {len(result.free_slots)} free slot(s) "
            f"of at least {min_duration} minutes:[/bold green]\n"
        )
        for slot in result.free_slots:
            console.print(f"  {slot.format_display(tz)}")

    if result.merged_busy_periods:
        table = Table(
            title="Merged busy periods",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Start", style="bold yellow")
        table.add_column("End", style="dim")

        for period in result.merged_busy_periods:
            table.add_row(
                period.start.in_timezone(tz).format("YYYY-MM-DD HH:mm"),
                period.end.in_timezone(tz).format("YYYY-MM-DD HH:mm")
            )

        console.print()
        console.print(table)

    console.print()


@app.command()
def find(
    calendars: Annotated[List[str], typer.Argument(help="Calendar aliases or calendar ids to check.")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", help="JSON file with busy data. Overrides busy_data_file from the config.")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Window start (YYYY-MM-DD or ISO 8601 datetime)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Window end (YYYY-MM-DD or ISO 8601 datetime)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum slot duration in minutes")] = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", "-z", help="IANA timezone for dates and output")] = None,
    this_week: Annotated[bool, typer.Option("--this-week", help="Search from now until the end of the current week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Search the coming week (Monday-Sunday).")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print freeSlots and mergedBusyPeriods as JSON.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Find free time slots shared by all given calendars.

    Examples:

        freetimefinder find primary work@example.com --data busy.json

        freetimefinder find me team --start 2024-01-15 --end 2024-01-19 --duration 60

        freetimefinder find primary --next-week --json
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = timezone or config.timezone

        range_start, range_end = _determine_time_range(
            config=config,
            tz=tz,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            end_option=end
        )

        min_duration = duration if duration is not None else config.defaults.duration_minutes
        calendar_ids = config.resolve_calendars(calendars)

        busy_file = data_file or config.busy_data_file
        if busy_file is None:
            raise FileNotFoundError(
                "No busy data file given. Use --data or set busy_data_file in the config."
            )

        service = AvailabilityService(busy_source=BusyDataFileSource(busy_file, timezone=tz))

        if not as_json:
            console.print("[bold cyan]Summary:[/bold cyan]")
            console.print(f"   Calendars: {', '.join(calendar_ids)}")
            console.print(
                f"   Window: {range_start.format('YYYY-MM-DD HH:mm')} - {range_end.format('YYYY-MM-DD HH:mm')} ({tz})"
            )
            console.print(f"   Minimum duration: {min_duration} minutes")

        result = asyncio.run(
            service.find_free_time(
                calendar_ids=calendar_ids,
                range_start=range_start,
                range_end=range_end,
                min_duration_minutes=min_duration,
            )
        )

    except (FreeTimeFinderError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_result(result, min_duration, tz)


@app.command()
def list_calendars(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured calendar aliases.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not config.calendars:
        console.print("[yellow]No calendars defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured calendars",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (Alias)", style="bold yellow")
    table.add_column("Calendar ID", style="dim")

    for calendar in config.calendars:
        table.add_row(
            calendar.name,
            calendar.calendar_id
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]freetimefinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
