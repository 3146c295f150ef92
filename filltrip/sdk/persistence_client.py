"""
Client for the FillTrip persistence service.

The service stores per-user trips and refuel logs and answers every call
with a JSON envelope: ``{"success": bool, ...payload, "error"?: str}``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class PersistenceError(Exception):
    """Raised when the persistence service cannot complete a request."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PersistenceClient:
    """Async client for the persistence service.

    Makes exactly one attempt per call; retrying is left to the caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the persistence client.

        Args:
            base_url: Service root, e.g. "http://127.0.0.1/filltrip-db"
            timeout: Request timeout in seconds
            client: Shared httpx client; one is created per call when omitted

        Raises:
            ValueError: If base_url is missing/empty
        """
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required and cannot be empty")

        self.base_url = base_url.strip().rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._client = client

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        """Send one request and unwrap the service envelope.

        Raises:
            PersistenceError: On transport errors, non-2xx responses,
                non-JSON bodies or ``success: false``
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"HTTP error {e.response.status_code} from {endpoint}",
                status_code=e.response.status_code
            ) from e
        except httpx.RequestError as e:
            raise PersistenceError(f"Connection error calling {endpoint}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceError(f"Invalid JSON from {endpoint}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected response shape from {endpoint}")
        if not data.get("success"):
            raise PersistenceError(data.get("error") or f"{endpoint} reported failure")

        return data

    @staticmethod
    def _extract_items(data: Dict[str, Any], endpoint: str) -> List[Dict[str, Any]]:
        items = data.get("items", data.get("trips"))
        if not isinstance(items, list):
            raise PersistenceError(f"Missing item list in response from {endpoint}")
        return items

    async def add_trip(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Store a recorded trip.

        Args:
            record: Trip payload in wire format

        Returns:
            The stored trip as echoed by the service (may be empty)
        """
        data = await self._request("POST", "trips_add.php", json=record)
        trip = data.get("trip")
        return trip if isinstance(trip, dict) else {}

    async def list_trips(self) -> List[Dict[str, Any]]:
        """Fetch the current user's recorded trips."""
        data = await self._request("GET", "trips_list.php")
        return self._extract_items(data, "trips_list.php")

    async def list_refuels(self) -> List[Dict[str, Any]]:
        """Fetch the current user's refuel log entries."""
        data = await self._request("GET", "refuel_list.php")
        return self._extract_items(data, "refuel_list.php")

    async def add_refuel(
        self,
        vehicle_name: str,
        odometer_km: float,
        liters: float,
        price_per_liter: float,
        total_cost: Optional[float] = None,
        fuel_type: str = "Gasoline / Unleaded (91)",
        station: str = "",
        currency: str = "PHP",
        created_at: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Store a refuel log entry.

        The total cost defaults to liters times price per liter.

        Raises:
            ValueError: If the vehicle name is empty or a quantity is not positive
            PersistenceError: If the service rejects the entry
        """
        if not vehicle_name or not vehicle_name.strip():
            raise ValueError("vehicle_name is required and cannot be empty")
        if odometer_km <= 0 or liters <= 0 or price_per_liter <= 0:
            raise ValueError("odometer_km, liters and price_per_liter must be > 0")

        if total_cost is None:
            total_cost = liters * price_per_liter
        stamp = created_at or datetime.now(timezone.utc)

        payload = {
            "vehicleName": vehicle_name.strip(),
            "odometerKm": odometer_km,
            "distanceUnit": "km",
            "liters": liters,
            "fuelUnit": "liters",
            "pricePerLiter": price_per_liter,
            "totalCost": total_cost,
            "fuelType": fuel_type,
            "station": station.strip(),
            "currency": currency,
            "createdAt": stamp.isoformat(),
        }
        data = await self._request("POST", "refuel_add.php", json=payload)
        logger.info("Refuel entry added", vehicle_name=payload["vehicleName"], liters=liters)
        return data

    async def delete_refuel(self, entry_id: int) -> bool:
        """Delete a refuel log entry.

        Returns:
            True when the service confirms the deletion
        """
        data = await self._request("POST", "refuel_delete.php", data={"id": str(entry_id)})
        return bool(data.get("deleted"))
