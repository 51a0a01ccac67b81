"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingLimitsError, InvalidRangeError
from ..domain.models import LimitationConfig, Listing
from ..domain.week_partitioner import WeekPartitioner
from ..services.listing_filter import ListingFilterService
from ..adapters.integration_client import build_integration_client
from ..adapters.mock_integration_client import MockIntegrationClient

app = typer.Typer(
    name="bookinglimits",
    help="Filter marketplace listings by their recurring booking limits",
    add_completion=False
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """
    Load the config file, falling back to defaults in mock mode.
    """
    config_path = config_file or get_default_config_path()

    if mock and not config_path.exists():
        return AppConfig()

    return AppConfig.load_from_yaml(config_path)


def _build_client(config: AppConfig, mock: bool):
    if mock:
        return MockIntegrationClient(timezone=config.timezone)
    return build_integration_client(config)


def _format_limits(listing: Listing) -> str:
    limits = listing.limitations
    if limits is None or limits.is_unlimited():
        return "unlimited"

    parts = []
    for key, value in limits.to_public_data().items():
        if value is not None:
            parts.append(f"{key}={value}")
    return ", ".join(parts)


@app.command("filter")
def filter_listings(
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date, exclusive (YYYY-MM-DD)")] = None,
    bounds: Annotated[Optional[str], typer.Option("--bounds", help="Map bounds 'ne_lat,ne_lng,sw_lat,sw_lng'")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock data and skip authentication.")] = False,
):
    """
    List the listings that still have capacity in the date range.

    Examples:

        bookinglimits filter --start 2024-01-01 --end 2024-01-22 --mock

        bookinglimits filter --start 2024-01-01 --end 2024-01-22 --bounds 52.6,13.8,52.3,13.1
    """
    try:
        config = _load_config(config_file, mock)

        if mock:
            console.print("[yellow]⚠  MOCK MODE: using bundled test data[/yellow]\n")

        service = ListingFilterService(
            client=_build_client(config, mock),
            partitioner=WeekPartitioner(timezone=config.timezone),
            fetch_timeout=config.fetch.timeout_seconds,
            on_failure=config.fetch.on_failure,
        )

        params = {"start": start, "end": end, "bounds": bounds}
        outcome = asyncio.run(service.find_visible_listings(params))

    except (FileNotFoundError, ValueError, BookingLimitsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    for failure in outcome.failures:
        console.print(f"[red]✗ {failure}[/red]")

    if outcome.aborted:
        console.print("[bold red]Error:[/bold red] booking fetch failed, no listings filtered.")
        raise typer.Exit(1)

    if not outcome.listings:
        console.print("[yellow]⚠ No visible listings in this range.[/yellow]")
        return

    table = Table(
        title=f"Visible listings ({len(outcome.listings)})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold yellow")
    table.add_column("Limits")

    for listing in outcome.listings:
        table.add_row(listing.listing_id, listing.title, _format_limits(listing))

    console.print()
    console.print(table)
    console.print()


@app.command()
def weeks(
    start: Annotated[str, typer.Option("--start", help="Start date (YYYY-MM-DD)")],
    end: Annotated[str, typer.Option("--end", help="End date (YYYY-MM-DD)")],
    exclude_end: Annotated[bool, typer.Option("--exclude-end", help="Treat the end date as exclusive.")] = False,
    timezone: Annotated[str, typer.Option("--timezone", "-t", help="IANA timezone for calendar days")] = "UTC",
):
    """
    Show how a date range is split into calendar weeks.
    """
    try:
        start_date = ListingFilterService.parse_date(start, timezone)
        end_date = ListingFilterService.parse_date(end, timezone)
    except InvalidRangeError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    bounds = WeekPartitioner(timezone=timezone).partition(start_date, end_date, exclude_end=exclude_end)

    if not bounds.weeks:
        console.print("[yellow]⚠ The range contains no weeks.[/yellow]")
        return

    table = Table(title="Week windows", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Start")
    table.add_column("End")

    for index, week in enumerate(bounds.weeks, 1):
        table.add_row(
            str(index),
            week.start.format("ddd DD.MM.YYYY HH:mm"),
            week.end.format("ddd DD.MM.YYYY HH:mm"),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def set_limits(
    listing_id: Annotated[str, typer.Argument(help="Listing UUID")],
    unlimited: Annotated[bool, typer.Option("--unlimited", help="Accept all bookings (clears every limit).")] = False,
    hours_per_day: Annotated[Optional[float], typer.Option("--hours-per-day", help="Max booked hours per day")] = None,
    number_per_day: Annotated[Optional[int], typer.Option("--number-per-day", help="Max bookings per day")] = None,
    number_per_week: Annotated[Optional[int], typer.Option("--number-per-week", help="Max bookings per week")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Update the in-memory mock data only.")] = False,
):
    """
    Save booking limitations on a listing.
    """
    limits = LimitationConfig.from_form(
        unlimited,
        {
            "hours_per_day": hours_per_day,
            "number_per_day": number_per_day,
            "number_per_week": number_per_week,
        },
    )

    try:
        config = _load_config(config_file, mock)
        client = _build_client(config, mock)
        listing = client.update_listing_limitations(listing_id, limits)
    except (FileNotFoundError, ValueError, BookingLimitsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Limitations saved for {listing.title or listing.listing_id}[/green]")
    console.print(json.dumps({"bookingLimitations": limits.to_public_data()}, indent=2))
    console.print()


@app.command()
def test_auth(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Test Integration API authentication.
    """
    try:
        config = _load_config(config_file, mock=False)
        client = build_integration_client(config)
        marketplace = client.test_connection()
    except (FileNotFoundError, ValueError, BookingLimitsError) as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)

    name = (marketplace.get("data") or {}).get("attributes", {}).get("name", "N/A")
    console.print(f"\n[bold green]✓ Authenticated[/bold green] against marketplace [bold]{name}[/bold]\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookinglimits[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
