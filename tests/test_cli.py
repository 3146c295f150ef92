"""
Tests for the CLI interface.
"""
import os
import shutil
import tempfile
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from filltrip.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL
from filltrip.core.aggregation import month_label
from filltrip.sdk.persistence_client import PersistenceError
from filltrip.sdk.routing_client import RouteInfo

runner = CliRunner()


@pytest.fixture
def mock_client():
    """Mock the persistence client used by the CLI."""
    client = MagicMock()
    client.add_trip = AsyncMock(return_value={"id": 1})
    client.list_refuels = AsyncMock(return_value=[])
    client.list_trips = AsyncMock(return_value=[])
    with patch('filltrip.cli.main._persistence_client', return_value=client):
        yield client


class TestCalculate:
    """Test the calculate command."""

    def test_basic_calculation(self):
        """Test liters and cost for a manual entry."""
        result = runner.invoke(app, ["calculate", "150", "--efficiency", "15", "--price", "56"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Fuel needed: 10.00 L" in result.output
        assert "Total cost: ₱560.00" in result.output

    def test_miles_and_mpg(self):
        """Test that other units are normalized before display."""
        result = runner.invoke(app, [
            "calculate", "100", "--unit", "miles",
            "--efficiency", "40", "--efficiency-unit", "mpg",
            "--price", "1", "--currency", "USD"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Distance: 160.93 km" in result.output
        assert "Fuel needed: 9.46 L" in result.output
        assert "$9.46" in result.output

    def test_vehicle_lookup_prefills_efficiency(self):
        """Test that the best vehicle match supplies km/L."""
        result = runner.invoke(app, ["calculate", "150", "--vehicle", "toyota vios", "--price", "56"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Vehicle: 2019 Toyota Vios (16.50 km/L)" in result.output
        assert "Fuel needed: 9.09 L" in result.output

    def test_unknown_vehicle_reports_missing_efficiency(self):
        """Test that a failed lookup leaves efficiency missing."""
        result = runner.invoke(app, ["calculate", "150", "--vehicle", "zzzz", "--price", "56"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "No vehicle matches 'zzzz'" in result.output
        assert "efficiency" in result.output

    def test_missing_fields_listed(self):
        """Test that invalid input is reported instead of computed."""
        result = runner.invoke(app, ["calculate", "0", "--efficiency", "15"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "distance, fuel price" in result.output

    def test_invalid_unit(self):
        """Test that unsupported units are rejected."""
        result = runner.invoke(app, [
            "calculate", "150", "--efficiency", "15",
            "--efficiency-unit", "L/100km", "--price", "56"
        ])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Unsupported efficiency unit" in result.output

    def test_route_trip_is_recorded(self, mock_client):
        """Test that a route calculation with --record is saved."""
        result = runner.invoke(app, [
            "calculate", "150", "--efficiency", "15", "--price", "56",
            "--from", "Makati", "--to", "Tagaytay", "--record"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Trip saved" in result.output
        mock_client.add_trip.assert_awaited_once()
        payload = mock_client.add_trip.await_args.args[0]
        assert payload["startLocationName"] == "Makati"
        assert payload["endLocationName"] == "Tagaytay"
        assert payload["distanceKm"] == 150.0

    def test_failed_recording_does_not_fail_calculation(self, mock_client):
        """Test that a submission failure is invisible to the user."""
        mock_client.add_trip.side_effect = PersistenceError("HTTP error 500 from trips_add.php")

        result = runner.invoke(app, [
            "calculate", "150", "--efficiency", "15", "--price", "56",
            "--from", "Makati", "--to", "Tagaytay", "--record"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Total cost: ₱560.00" in result.output
        assert "Trip saved" not in result.output

    def test_manual_trip_not_recorded(self, mock_client):
        """Test that --record without a route does nothing."""
        result = runner.invoke(app, [
            "calculate", "150", "--efficiency", "15", "--price", "56", "--record"
        ])

        assert result.exit_code == EXIT_CODE_PASS
        mock_client.add_trip.assert_not_called()


class TestVehicles:
    """Test the vehicles command."""

    def test_search_results(self):
        """Test that matches are listed."""
        result = runner.invoke(app, ["vehicles", "toy vios"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Toyota Vios" in result.output
        assert "2013-2018" in result.output

    def test_no_results(self):
        """Test the empty result message."""
        result = runner.invoke(app, ["vehicles", "x"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No vehicles found" in result.output


class TestMonthlyViews:
    """Test the logs and trips commands."""

    def test_logs_grouped_by_month(self, mock_client):
        """Test refuel logs are grouped with totals."""
        mock_client.list_refuels.return_value = [
            {"id": "1", "createdAt": "2024-01-05T08:00:00", "totalCost": "1000", "liters": "20"},
            {"id": "2", "createdAt": "2024-02-01T08:00:00", "totalCost": 500, "liters": 10},
        ]

        result = runner.invoke(app, ["logs"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Entries: 2" in result.output
        assert "₱1,500.00" in result.output
        assert month_label("2024-02") in result.output
        assert result.output.index(month_label("2024-02")) < result.output.index(month_label("2024-01"))

    def test_logs_empty(self, mock_client):
        """Test the empty state."""
        result = runner.invoke(app, ["logs"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No entries found" in result.output

    def test_logs_service_failure(self, mock_client):
        """Test that a failed fetch is reported."""
        mock_client.list_refuels.side_effect = PersistenceError("Not logged in")

        result = runner.invoke(app, ["logs"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Failed to load entries: Not logged in" in result.output

    def test_trips_total_distance(self, mock_client):
        """Test trip totals include distance."""
        mock_client.list_trips.return_value = [
            {"createdAt": "2024-05-01T10:00:00", "fuelCost": 560, "litersNeeded": 10, "distanceKm": "150"},
            {"createdAt": "2024-05-09T10:00:00", "fuelCost": "280", "litersNeeded": "5", "distanceKm": 75.5},
        ]

        result = runner.invoke(app, ["trips"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Total distance: 225.50 km" in result.output


class TestRoute:
    """Test the route command."""

    def test_requires_token(self):
        """Test that a missing token is reported."""
        result = runner.invoke(app, ["route", "121.02,14.55", "120.96,14.10"],
                               env={"FILLTRIP_MAPBOX_TOKEN": ""})

        assert result.exit_code == EXIT_CODE_FAIL
        assert "No routing access token" in result.output

    def test_route_summary(self):
        """Test distance and duration output."""
        with patch('filltrip.cli.main.RoutingClient') as mock_routing:
            mock_routing.return_value.fetch_route = AsyncMock(
                return_value=RouteInfo(distance_km=12.3456, duration_min=25)
            )
            result = runner.invoke(
                app, ["route", "121.02,14.55", "120.96,14.10", "--from", "Home"],
                env={"FILLTRIP_MAPBOX_TOKEN": "pk.test"}
            )

        assert result.exit_code == EXIT_CODE_PASS
        assert "Home → End Location" in result.output
        assert "Distance: 12.35 km" in result.output
        assert "Duration: 25 min" in result.output

    def test_bad_point(self):
        """Test that malformed coordinates are rejected."""
        result = runner.invoke(app, ["route", "nowhere", "120.96,14.10"],
                               env={"FILLTRIP_MAPBOX_TOKEN": "pk.test"})

        assert result.exit_code != EXIT_CODE_PASS


class TestConfigOption:
    """Test the global --config option."""

    def setup_method(self):
        """Create a temporary directory for config files."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def _write_config(self, text):
        path = os.path.join(self.temp_dir, "filltrip.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_unparsable_yaml(self):
        """Test that malformed YAML is reported as a configuration error."""
        path = self._write_config("api: [unclosed\n")

        result = runner.invoke(app, ["--config", path, "vehicles", "vios"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Configuration error" in result.output
        assert "Invalid YAML" in result.output

    def test_unknown_key(self):
        """Test that invalid settings are reported as a configuration error."""
        path = self._write_config("colour: blue\n")

        result = runner.invoke(app, ["--config", path, "vehicles", "vios"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Configuration error" in result.output

    def test_matcher_settings_applied(self):
        """Test that matcher settings from the file limit results."""
        path = self._write_config("matcher:\n  max_results: 1\n")

        result = runner.invoke(app, ["--config", path, "vehicles", "toyota"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Vios" in result.output
        assert "Wigo" not in result.output
