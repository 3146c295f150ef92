"""
CLI interface for FillTrip.

Provides command-line access to trip cost calculation, vehicle search and
the monthly views of recorded trips and refuel logs.
"""

import asyncio
import sys
from typing import Optional, Sequence, Tuple

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from filltrip.config.loader import AppConfig, load_app_config
from filltrip.core.aggregation import (
    REFUEL_SUM_FIELDS,
    TRIP_SUM_FIELDS,
    group_by_month,
    normalize_refuel_entry,
    normalize_trip_entry,
    overall_totals,
)
from filltrip.core.fuel_cost import (
    DEFAULT_FUEL_TYPE,
    compute_fuel_cost,
    missing_fields,
    parse_calculation_input,
)
from filltrip.core.matcher import search, select_vehicle
from filltrip.core.trip_recorder import RouteContext, TripRecorder, route_context
from filltrip.core.units import Currency, format_money, parse_currency
from filltrip.logging import configure_logging
from filltrip.sdk.persistence_client import PersistenceClient, PersistenceError
from filltrip.sdk.routing_client import Coordinates, RoutingClient, RoutingError

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

FIELD_LABELS = {
    "distance_value": "distance",
    "efficiency_value": "efficiency",
    "price_per_liter": "fuel price",
}


def _get_config(ctx: typer.Context) -> AppConfig:
    if ctx.obj is None:
        ctx.obj = load_app_config()
    return ctx.obj


def _persistence_client(config: AppConfig) -> PersistenceClient:
    return PersistenceClient(config.api.base_url, timeout=config.api.timeout)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML configuration file"
    )
):
    """FillTrip CLI."""
    try:
        config = load_app_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    configure_logging(config.logging.level, format_json=config.logging.json)
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        console.print("FillTrip - Use --help to see available commands")


@app.command()
def calculate(
    ctx: typer.Context,
    distance: str = typer.Argument(..., help="Trip distance"),
    distance_unit: str = typer.Option("km", "--unit", "-u", help="Distance unit: km or miles"),
    efficiency: Optional[str] = typer.Option(
        None, "--efficiency", "-e", help="Fuel efficiency of the vehicle"
    ),
    efficiency_unit: str = typer.Option(
        "km/L", "--efficiency-unit", help="Efficiency unit: km/L or mpg"
    ),
    vehicle: Optional[str] = typer.Option(
        None, "--vehicle", "-v", help="Look up efficiency by make and model"
    ),
    price: Optional[str] = typer.Option(None, "--price", "-p", help="Fuel price per liter"),
    currency: str = typer.Option("PHP", "--currency", help="Currency: PHP or USD"),
    fuel_type: str = typer.Option(DEFAULT_FUEL_TYPE, "--fuel-type", help="Fuel type"),
    start_name: Optional[str] = typer.Option(None, "--from", help="Route start name"),
    end_name: Optional[str] = typer.Option(None, "--to", help="Route end name"),
    record: bool = typer.Option(
        False, "--record", "-r", help="Save the trip to your history (route trips only)"
    )
):
    """
    Calculate the fuel needed for a trip and what it will cost.

    With --vehicle, the best catalog match supplies the efficiency in km/L
    unless --efficiency is also given.
    """
    config = _get_config(ctx)

    selected = None
    if vehicle:
        matches = search(vehicle, config=config.matcher)
        if matches:
            selected = select_vehicle(matches[0].record)
            console.print(f"Vehicle: {selected.label} ({selected.efficiency_value:.2f} km/L)")
            if efficiency is None:
                efficiency = str(selected.efficiency_value)
                efficiency_unit = selected.efficiency_unit.value
        else:
            console.print(f"[yellow]No vehicle matches '{vehicle}'[/]")

    try:
        calc_input = parse_calculation_input(
            distance,
            distance_unit=distance_unit,
            efficiency=efficiency,
            efficiency_unit=efficiency_unit,
            price_per_liter=price,
            currency=currency,
            fuel_type=fuel_type
        )
    except ValueError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    missing = missing_fields(calc_input)
    if missing:
        labels = ", ".join(FIELD_LABELS[name] for name in missing)
        console.print(f"[red]Please fill all required fields with valid values:[/] {labels}")
        sys.exit(EXIT_CODE_FAIL)

    result = compute_fuel_cost(calc_input)

    console.print("\n[bold]Fuel Calculation[/bold]")
    console.print("-" * 40)
    console.print(f"Distance: {result.distance_km:,.2f} km")
    console.print(f"Fuel needed: {result.liters_needed:,.2f} L")
    console.print(f"Total cost: {format_money(result.total_cost, result.currency)}")

    route = None
    if start_name and end_name:
        route = RouteContext(start_name, end_name, result.distance_km)

    if route is not None and record:
        recorder = TripRecorder(_persistence_client(config))

        async def _record() -> bool:
            task = recorder.maybe_record_trip(
                calc_input,
                result,
                route,
                is_authenticated=True,
                vehicle=selected.record if selected else None
            )
            return await task if task is not None else False

        if asyncio.run(_record()):
            console.print("[green]✓[/] Trip saved")

    sys.exit(EXIT_CODE_PASS)


@app.command()
def vehicles(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Make and/or model, e.g. 'toyota vios'")
):
    """Search the vehicle catalog."""
    config = _get_config(ctx)
    matches = search(query, config=config.matcher)

    if not matches:
        console.print(f"[dim]No vehicles found for '{query}'[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title="Vehicles")
    table.add_column("Vehicle")
    table.add_column("Years")
    table.add_column("Type")
    table.add_column("km/L", justify="right")
    table.add_column("Score", justify="right")

    for match in matches:
        vehicle = match.record
        table.add_row(
            f"{vehicle.make} {vehicle.model}",
            vehicle.typical_years,
            vehicle.category.value,
            f"{vehicle.km_per_liter_avg:.2f}",
            str(match.score)
        )

    console.print(table)
    sys.exit(EXIT_CODE_PASS)


def _display_groups(title: str, groups, sum_fields: Sequence[str], currency: Currency,
                    cost_field: str, liters_field: str) -> None:
    """Print month groups and the overall totals."""
    console.print(f"\n[bold]{title}[/bold]")
    console.print("-" * 40)

    if not groups:
        console.print("\n[dim]No entries found.[/]")
        return

    totals = overall_totals(groups, sum_fields)
    console.print(
        f"Entries: {totals.total_entries}  "
        f"Total cost: {format_money(totals.totals[cost_field], currency)}  "
        f"Total fuel: {totals.totals[liters_field]:,.2f} L"
    )

    for group in groups:
        console.print(
            f"\n[bold]{group.label}[/bold]  "
            f"{group.total_entries} entries, "
            f"{format_money(group.totals[cost_field], currency)}, "
            f"{group.totals[liters_field]:,.2f} L"
        )


def _fetch_and_group(fetch, normalize, sum_fields):
    try:
        items = asyncio.run(fetch())
    except PersistenceError as e:
        console.print(f"[red]Error:[/] Failed to load entries: {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    entries = [normalize(item) for item in items if isinstance(item, dict)]
    return group_by_month(entries, sum_fields)


@app.command()
def logs(
    ctx: typer.Context,
    currency: str = typer.Option("PHP", "--currency", help="Currency symbol for totals")
):
    """Show refuel logs grouped by month."""
    config = _get_config(ctx)
    try:
        display_currency = parse_currency(currency)
    except ValueError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    client = _persistence_client(config)
    groups = _fetch_and_group(client.list_refuels, normalize_refuel_entry, REFUEL_SUM_FIELDS)
    _display_groups("Fuel Logs", groups, REFUEL_SUM_FIELDS, display_currency, "totalCost", "liters")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def trips(
    ctx: typer.Context,
    currency: str = typer.Option("PHP", "--currency", help="Currency symbol for totals")
):
    """Show recorded trips grouped by month."""
    config = _get_config(ctx)
    try:
        display_currency = parse_currency(currency)
    except ValueError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    client = _persistence_client(config)
    groups = _fetch_and_group(client.list_trips, normalize_trip_entry, TRIP_SUM_FIELDS)
    _display_groups("Trips", groups, TRIP_SUM_FIELDS, display_currency, "fuelCost", "litersNeeded")
    if groups:
        totals = overall_totals(groups, TRIP_SUM_FIELDS)
        console.print(f"\nTotal distance: {totals.totals['distanceKm']:,.2f} km")
    sys.exit(EXIT_CODE_PASS)


def _parse_point(value: str) -> Tuple[float, float]:
    try:
        longitude, latitude = (float(part) for part in value.split(","))
    except ValueError:
        raise typer.BadParameter(f"Expected LONGITUDE,LATITUDE, got '{value}'")
    return longitude, latitude


@app.command()
def route(
    ctx: typer.Context,
    start: str = typer.Argument(..., help="Start as LONGITUDE,LATITUDE"),
    end: str = typer.Argument(..., help="End as LONGITUDE,LATITUDE"),
    start_name: Optional[str] = typer.Option(None, "--from", help="Start name"),
    end_name: Optional[str] = typer.Option(None, "--to", help="End name")
):
    """Look up the driving distance and time between two points."""
    config = _get_config(ctx)
    if not config.routing.access_token:
        console.print("[red]Error:[/] No routing access token configured")
        sys.exit(EXIT_CODE_FAIL)

    start_point = Coordinates(*_parse_point(start))
    end_point = Coordinates(*_parse_point(end))
    client = RoutingClient(config.routing.access_token, base_url=config.routing.base_url)

    try:
        info = asyncio.run(client.fetch_route(start_point, end_point))
    except RoutingError as e:
        console.print(f"[red]Error:[/] Unable to calculate route: {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if info is None:
        console.print("[yellow]No route found[/]")
        sys.exit(EXIT_CODE_FAIL)

    context = route_context(info, start_name, end_name)
    console.print(f"\n[bold]{context.start_name} → {context.end_name}[/bold]")
    console.print(f"Distance: {context.distance_km:.2f} km")
    console.print(f"Duration: {info.duration_min} min")
    console.print(
        f"\nNext: filltrip calculate {context.distance_km:.2f} "
        f"--from \"{context.start_name}\" --to \"{context.end_name}\""
    )
    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
