"""
Driving route lookup through the Mapbox Directions API.

Converts the provider's meters and seconds into the kilometers and minutes
the calculator works with.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..core.units import meters_to_km, seconds_to_minutes
from ..logging import get_logger

logger = get_logger(__name__)

MAPBOX_DIRECTIONS_URL = "https://api.mapbox.com/directions/v5/mapbox/driving"


class RoutingError(Exception):
    """Raised when the routing provider cannot be reached or answers badly."""


@dataclass(frozen=True)
class Coordinates:
    longitude: float
    latitude: float


@dataclass(frozen=True)
class RouteInfo:
    """First route returned by the provider, in calculator units."""
    distance_km: float
    duration_min: int
    coordinates: List[Tuple[float, float]] = field(default_factory=list)
    steps: List[Dict[str, Any]] = field(default_factory=list)


def parse_directions_response(data: Dict[str, Any]) -> Optional[RouteInfo]:
    """Build a RouteInfo from a Directions API response body.

    Returns:
        RouteInfo for the first route, or None when there is no route
    """
    routes = data.get("routes") or []
    if not routes:
        return None

    route = routes[0]
    legs = route.get("legs") or []
    geometry = route.get("geometry") or {}

    return RouteInfo(
        distance_km=meters_to_km(float(route["distance"])),
        duration_min=seconds_to_minutes(float(route["duration"])),
        coordinates=[tuple(point) for point in geometry.get("coordinates", [])],
        steps=legs[0].get("steps", []) if legs else [],
    )


class RoutingClient:
    """Async client for driving directions between two points."""

    def __init__(
        self,
        access_token: str,
        base_url: str = MAPBOX_DIRECTIONS_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the routing client.

        Raises:
            ValueError: If access_token is missing/empty
        """
        if not access_token or not access_token.strip():
            raise ValueError("access_token is required and cannot be empty")

        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._client = client

    async def fetch_route(self, start: Coordinates, end: Coordinates) -> Optional[RouteInfo]:
        """Fetch the driving route between two points.

        Returns:
            RouteInfo, or None when the provider finds no route

        Raises:
            RoutingError: On transport errors, non-2xx or unreadable responses
        """
        url = (
            f"{self.base_url}/{start.longitude},{start.latitude};"
            f"{end.longitude},{end.latitude}"
        )
        params = {
            "geometries": "geojson",
            "steps": "true",
            "access_token": self.access_token,
        }

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Routing API error", status_code=e.response.status_code)
            raise RoutingError(f"Routing API error {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("Routing connection error", error=str(e))
            raise RoutingError(f"Routing connection error: {e}") from e
        except ValueError as e:
            raise RoutingError("Invalid JSON from routing API") from e

        try:
            return parse_directions_response(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RoutingError(f"Malformed route in response: {e}") from e
