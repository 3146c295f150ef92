"""
Unit tests for trip recording.

Tests record construction, the route/auth gate and failure swallowing.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from filltrip.core.catalog import VEHICLE_CATALOG
from filltrip.core.fuel_cost import CalculationInput, compute_fuel_cost
from filltrip.core.trip_recorder import (
    RouteContext,
    TripRecorder,
    build_trip_record,
    route_context,
)
from filltrip.core.units import Currency, DistanceUnit, EfficiencyUnit
from filltrip.sdk.persistence_client import PersistenceError
from filltrip.sdk.routing_client import RouteInfo


CREATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _input(distance=150.0, unit=DistanceUnit.KM, efficiency=15.0,
           efficiency_unit=EfficiencyUnit.KM_PER_LITER):
    return CalculationInput(
        distance_value=distance,
        distance_unit=unit,
        efficiency_value=efficiency,
        efficiency_unit=efficiency_unit,
        price_per_liter=56.0,
        currency=Currency.PHP,
        fuel_type="Diesel",
    )


ROUTE = RouteContext(start_name="Makati", end_name="Tagaytay", distance_km=150.0)


class TestBuildTripRecord:
    """Test TripRecord construction."""

    def test_record_fields(self):
        """Verify a record carries the calculation and route."""
        calc_input = _input()
        result = compute_fuel_cost(calc_input)
        record = build_trip_record(calc_input, result, ROUTE, created_at=CREATED_AT)

        assert record.start_name == "Makati"
        assert record.end_name == "Tagaytay"
        assert record.distance_km == 150.0
        assert record.efficiency_km_per_l == 15.0
        assert record.liters_needed == pytest.approx(10.0)
        assert record.fuel_cost == pytest.approx(560.0)
        assert record.currency == "PHP"
        assert record.fuel_type == "Diesel"
        assert record.vehicle_label == ""
        assert record.created_at == CREATED_AT

    def test_vehicle_label(self):
        """Verify the selected vehicle is labelled with its first year."""
        calc_input = _input()
        vehicle = VEHICLE_CATALOG.get("toyota-vios-2013")
        record = build_trip_record(calc_input, compute_fuel_cost(calc_input), ROUTE, vehicle)
        assert record.vehicle_label == "2013 Toyota Vios"

    def test_distance_stored_in_km(self):
        """Verify miles input is stored as kilometers."""
        calc_input = _input(distance=100.0, unit=DistanceUnit.MILES)
        record = build_trip_record(calc_input, compute_fuel_cost(calc_input), ROUTE)
        assert record.distance_km == pytest.approx(160.934)

    def test_payload_wire_names(self):
        """Verify the JSON payload uses the service's field names."""
        calc_input = _input()
        record = build_trip_record(calc_input, compute_fuel_cost(calc_input), ROUTE, created_at=CREATED_AT)
        payload = record.to_payload()

        assert payload["startLocationName"] == "Makati"
        assert payload["endLocationName"] == "Tagaytay"
        assert payload["distanceKm"] == 150.0
        assert payload["fuelCost"] == pytest.approx(560.0)
        assert payload["createdAt"] == "2024-05-01T12:00:00+00:00"
        assert set(payload) == {
            "startLocationName", "endLocationName", "distanceKm", "efficiencyKmPerL",
            "litersNeeded", "pricePerLiter", "fuelCost", "currency", "fuelType",
            "vehicleLabel", "createdAt",
        }


class TestRouteContext:
    """Test building a route context from a fetched route."""

    def test_defaults_and_rounding(self):
        """Verify default names and two-decimal distance."""
        context = route_context(RouteInfo(distance_km=12.3456, duration_min=20))
        assert context == RouteContext("Start Location", "End Location", 12.35)

    def test_named_endpoints(self):
        """Verify given names are kept."""
        context = route_context(RouteInfo(distance_km=5.0, duration_min=9), "Home", "Office")
        assert (context.start_name, context.end_name) == ("Home", "Office")


class TestTripRecorder:
    """Test background submission."""

    def setup_method(self):
        """Set up a recorder over a mocked persistence client."""
        self.client = Mock()
        self.client.add_trip = AsyncMock(return_value={"id": 42})
        self.recorder = TripRecorder(self.client)
        self.calc_input = _input()
        self.result = compute_fuel_cost(self.calc_input)

    def test_no_route_is_noop(self):
        """Verify manual-entry calculations are not recorded."""
        async def run():
            return self.recorder.maybe_record_trip(self.calc_input, self.result, None, True)

        assert asyncio.run(run()) is None
        self.client.add_trip.assert_not_called()

    def test_unauthenticated_is_noop(self):
        """Verify guests' trips are not recorded."""
        async def run():
            return self.recorder.maybe_record_trip(self.calc_input, self.result, ROUTE, False)

        assert asyncio.run(run()) is None
        self.client.add_trip.assert_not_called()

    def test_route_and_user_submits(self):
        """Verify a routed, authenticated calculation is submitted."""
        async def run():
            task = self.recorder.maybe_record_trip(self.calc_input, self.result, ROUTE, True)
            assert task is not None
            return await task

        assert asyncio.run(run()) is True
        self.client.add_trip.assert_awaited_once()
        payload = self.client.add_trip.await_args.args[0]
        assert payload["startLocationName"] == "Makati"
        assert payload["litersNeeded"] == pytest.approx(10.0)

    def test_drain_waits_for_pending(self):
        """Verify drain completes in-flight submissions."""
        async def run():
            self.recorder.maybe_record_trip(self.calc_input, self.result, ROUTE, True)
            await self.recorder.drain()

        asyncio.run(run())
        self.client.add_trip.assert_awaited_once()

    @pytest.mark.parametrize("error", [
        PersistenceError("HTTP error 500 from trips_add.php", status_code=500),
        PersistenceError("Invalid JSON from trips_add.php"),
        httpx.ConnectError("connection refused"),
    ])
    def test_failures_are_swallowed_and_logged(self, error):
        """Verify submission failures never reach the caller."""
        self.client.add_trip = AsyncMock(side_effect=error)

        async def run():
            task = self.recorder.maybe_record_trip(self.calc_input, self.result, ROUTE, True)
            return await task

        with patch("filltrip.core.trip_recorder.logger") as mock_logger:
            assert asyncio.run(run()) is False
            mock_logger.warning.assert_called_once()
            assert mock_logger.warning.call_args.kwargs["error"] == str(error)
