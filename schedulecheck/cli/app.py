"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..adapters.file_repository import JsonFileScheduleRepository
from ..config import AppConfig, get_default_config_path
from ..domain.builder import ScheduleBuilder
from ..domain.exceptions import ScheduleError
from ..domain.models import TimeOfDay, parse_date
from ..services.schedule_service import ScheduleService

app = typer.Typer(
    name="schedulecheck",
    help="Query schedule availability and detect booking conflicts",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
OwnerOption = Annotated[str, typer.Option("--owner", "-o", help="Owner alias or id")]
StartOption = Annotated[Optional[str], typer.Option("--start", help="Window start (HH:MM)")]
EndOption = Annotated[Optional[str], typer.Option("--end", help="Window end (HH:MM)")]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load configuration and set up logging from it."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return config


def _build_service(config: AppConfig) -> ScheduleService:
    repository = JsonFileScheduleRepository(config.data_file)
    return ScheduleService(
        repository=repository,
        ignore_availability=config.conflicts.ignore_availability,
    )


def _resolve_window(config: AppConfig, start: Optional[str], end: Optional[str]) -> tuple[TimeOfDay, TimeOfDay]:
    """Use explicit bounds when given, otherwise the configured day."""
    window_start = TimeOfDay.parse(start) if start else config.defaults.get_start_time()
    window_end = TimeOfDay.parse(end) if end else config.defaults.get_end_time()
    return window_start, window_end


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command()
def active(
    query_date: Annotated[str, typer.Argument(help="Date to query (YYYY-MM-DD)")],
    owners: Annotated[List[str], typer.Option("--owner", "-o", help="Owner alias or id (repeatable)")],
    start: StartOption = None,
    end: EndOption = None,
    available_only: Annotated[bool, typer.Option("--available-only", help="Only periods marked available")] = False,
    config_file: ConfigOption = None,
):
    """
    List the periods active on a date.

    Examples:

        schedulecheck active 2025-03-15 --owner alice
        schedulecheck active 2025-03-15 -o alice -o bob --start 09:00 --end 12:00
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config)
        day = parse_date(query_date)
        window = _resolve_window(config, start, end) if start or end else None

        table = Table(
            title=f"Active periods on {day.isoformat()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Owner", style="dim")
        table.add_column("Schedule", style="bold yellow")
        table.add_column("Type")
        table.add_column("Period")
        table.add_column("Available")

        match_count = 0
        for owner_id in config.resolve_owners(owners):
            matches = service.active_periods(owner_id, day, window=window, only_available=available_only)
            for match in matches:
                table.add_row(
                    owner_id,
                    match.schedule.name,
                    match.schedule.schedule_type.value,
                    str(match.period),
                    "yes" if match.period.is_available else "no",
                )
            match_count += len(matches)

        console.print()
        if match_count == 0:
            console.print(f"[yellow]No active periods on {day.isoformat()}.[/yellow]")
        else:
            console.print(table)
        console.print()

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def check(
    query_date: Annotated[str, typer.Argument(help="Date of the proposed booking (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End time (HH:MM)")],
    owner: OwnerOption,
    config_file: ConfigOption = None,
):
    """
    Check whether a proposed appointment conflicts with existing schedules.

    Exits with status 1 when a conflict is found.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config)
        owner_id = config.resolve_owner(owner)

        proposed = (
            ScheduleBuilder.for_owner(owner_id)
            .named("Proposed appointment")
            .appointment()
            .on(query_date)
            .add_period(start, end)
            .build()
        )
        conflicts = service.find_conflicts(proposed)

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)
        return

    console.print()
    if not conflicts:
        console.print(f"[bold green]✓ No conflicts for {proposed.start_date.isoformat()} {start} - {end}[/bold green]\n")
        return

    console.print(f"[bold red]✗ {len(conflicts)} conflicting period(s):[/bold red]\n")
    for match in conflicts:
        console.print(f"  {escape(match.format_display())}")
    console.print()
    raise typer.Exit(1)


@app.command()
def free(
    query_date: Annotated[str, typer.Argument(help="Date to query (YYYY-MM-DD)")],
    owner: OwnerOption,
    start: StartOption = None,
    end: EndOption = None,
    min_duration: Annotated[int, typer.Option("--min-duration", "-d", help="Minimum free window in minutes")] = 0,
    config_file: ConfigOption = None,
):
    """
    Show the free windows of an owner on a date.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config)
        day = parse_date(query_date)
        window_start, window_end = _resolve_window(config, start, end)

        windows = service.free_windows(
            config.resolve_owner(owner),
            day,
            window_start,
            window_end,
            min_duration_minutes=min_duration,
        )

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)
        return

    console.print()
    if not windows:
        console.print("[yellow]⚠ No free windows found.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(windows)} free window(s) on {day.isoformat()}:[/bold green]\n")
    for window in windows:
        console.print(f"  {window} ({window.duration_minutes()} min)")
    console.print()


@app.command()
def slots(
    query_date: Annotated[str, typer.Argument(help="Date to query (YYYY-MM-DD)")],
    owner: OwnerOption,
    start: StartOption = None,
    end: EndOption = None,
    slot_minutes: Annotated[Optional[int], typer.Option("--slot-minutes", "-s", help="Slot length in minutes")] = None,
    config_file: ConfigOption = None,
):
    """
    List bookable slots of a fixed length for an owner on a date.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config)
        day = parse_date(query_date)
        window_start, window_end = _resolve_window(config, start, end)

        available = service.available_slots(
            config.resolve_owner(owner),
            day,
            window_start,
            window_end,
            slot_minutes=slot_minutes or config.defaults.slot_minutes,
        )

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)
        return

    console.print()
    if not available:
        console.print("[yellow]⚠ No available slots.[/yellow]\n")
        return

    for slot in available:
        console.print(f"  {slot}")
    console.print()


@app.command()
def list_owners(
    config_file: ConfigOption = None,
):
    """
    List all configured owners.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
        return

    if not config.owners:
        console.print("[yellow]No owners defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured owners",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (Alias)", style="bold yellow")
    table.add_column("Id", style="dim")

    for owner in config.owners:
        table.add_row(owner.name, owner.id)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]schedulecheck[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
