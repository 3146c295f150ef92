"""
Recording of calculated trips.

A calculation whose distance came from a planned route is stored with the
persistence service so it shows up in the user's trip history. Recording
is secondary to the calculation: it runs in the background and its
failures are logged, never raised.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import httpx

from ..logging import get_logger
from ..sdk.persistence_client import PersistenceClient, PersistenceError
from ..sdk.routing_client import RouteInfo
from .catalog import VehicleRecord, vehicle_label
from .fuel_cost import CalculationInput, CalculationResult
from .units import to_km_per_liter

logger = get_logger(__name__)

DEFAULT_START_NAME = "Start Location"
DEFAULT_END_NAME = "End Location"


@dataclass(frozen=True)
class RouteContext:
    """Marks a calculation whose distance came from a planned route."""
    start_name: str
    end_name: str
    distance_km: float


def route_context(
    route: RouteInfo,
    start_name: Optional[str] = None,
    end_name: Optional[str] = None
) -> RouteContext:
    """Route context handed to the calculator for a planned route.

    The distance is rounded to two decimals, as shown to the user.
    """
    return RouteContext(
        start_name=start_name or DEFAULT_START_NAME,
        end_name=end_name or DEFAULT_END_NAME,
        distance_km=round(route.distance_km, 2),
    )


@dataclass(frozen=True)
class TripRecord:
    """Trip as stored by the persistence service. Distances are km."""
    start_name: str
    end_name: str
    distance_km: float
    efficiency_km_per_l: float
    liters_needed: float
    price_per_liter: float
    fuel_cost: float
    currency: str
    fuel_type: str
    vehicle_label: str
    created_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        """Wire format expected by ``trips_add.php``."""
        return {
            "startLocationName": self.start_name,
            "endLocationName": self.end_name,
            "distanceKm": self.distance_km,
            "efficiencyKmPerL": self.efficiency_km_per_l,
            "litersNeeded": self.liters_needed,
            "pricePerLiter": self.price_per_liter,
            "fuelCost": self.fuel_cost,
            "currency": self.currency,
            "fuelType": self.fuel_type,
            "vehicleLabel": self.vehicle_label,
            "createdAt": self.created_at.isoformat(),
        }


def build_trip_record(
    calc_input: CalculationInput,
    result: CalculationResult,
    route: RouteContext,
    vehicle: Optional[VehicleRecord] = None,
    created_at: Optional[datetime] = None
) -> TripRecord:
    """Package a finished calculation and its route for storage.

    Args:
        calc_input: Input the calculation ran on
        result: Result of ``compute_fuel_cost`` for that input
        route: Named endpoints of the planned route
        vehicle: Catalog vehicle the user picked, if any
        created_at: Record timestamp (defaults to now, UTC)

    Returns:
        TripRecord with the normalized kilometers from the result
    """
    return TripRecord(
        start_name=route.start_name,
        end_name=route.end_name,
        distance_km=result.distance_km,
        efficiency_km_per_l=to_km_per_liter(calc_input.efficiency_value, calc_input.efficiency_unit),
        liters_needed=result.liters_needed,
        price_per_liter=calc_input.price_per_liter,
        fuel_cost=result.total_cost,
        currency=result.currency.value,
        fuel_type=calc_input.fuel_type,
        vehicle_label=vehicle_label(vehicle) if vehicle is not None else "",
        created_at=created_at or datetime.now(timezone.utc),
    )


class TripRecorder:
    """Submits trip records without holding up the calculation."""

    def __init__(self, client: PersistenceClient):
        self.client = client
        self._pending: Set[asyncio.Task] = set()

    def maybe_record_trip(
        self,
        calc_input: CalculationInput,
        result: CalculationResult,
        route: Optional[RouteContext],
        is_authenticated: bool,
        vehicle: Optional[VehicleRecord] = None
    ) -> Optional[asyncio.Task]:
        """Schedule a trip submission when the calculation came from a route.

        Does nothing unless there is both a route context and an
        authenticated user. Must be called from inside a running event loop.

        Returns:
            The background task, or None when nothing was scheduled. Its
            result is informational only and may be ignored.
        """
        if route is None or not is_authenticated:
            return None

        record = build_trip_record(calc_input, result, route, vehicle)
        task = asyncio.get_running_loop().create_task(self.record_trip(record))
        # Hold a reference until done so the task is not garbage collected
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def record_trip(self, record: TripRecord) -> bool:
        """Submit one trip record.

        Returns:
            True if the service stored the trip, False otherwise. Never raises
            for submission failures.
        """
        try:
            trip = await self.client.add_trip(record.to_payload())
        except (PersistenceError, httpx.HTTPError) as e:
            logger.warning(
                "Trip recording failed",
                start=record.start_name,
                end=record.end_name,
                error=str(e)
            )
            return False

        logger.info(
            "Trip recorded",
            start=record.start_name,
            end=record.end_name,
            distance_km=record.distance_km,
            trip_id=trip.get("id")
        )
        return True

    async def drain(self) -> None:
        """Wait for submissions still in flight (e.g. before exiting)."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
