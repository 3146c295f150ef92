"""
Fuel volume and cost calculation.

Combines a trip distance, a vehicle's fuel efficiency and the fuel price
into the liters needed and the total cost of the trip.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from .units import (
    Currency,
    DistanceUnit,
    EfficiencyUnit,
    distance_to_km,
    parse_currency,
    parse_distance_unit,
    parse_efficiency_unit,
    to_liters_per_100km,
)


DEFAULT_FUEL_TYPE = "Gasoline / Unleaded (91)"

FUEL_TYPES = (
    "Gasoline / Unleaded (91)",
    "Gasoline / Unleaded (95)",
    "Diesel",
    "Premium Gasoline (98)",
)

# Numeric fields that must be finite and > 0 before computing
REQUIRED_FIELDS = ("distance_value", "efficiency_value", "price_per_liter")


@dataclass(frozen=True)
class CalculationInput:
    """One calculation attempt, exactly as the user entered it."""
    distance_value: Optional[float]
    distance_unit: DistanceUnit
    efficiency_value: Optional[float]
    efficiency_unit: EfficiencyUnit
    price_per_liter: Optional[float]
    currency: Currency = Currency.PHP
    fuel_type: str = DEFAULT_FUEL_TYPE


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of a fuel cost calculation.

    Values are unrounded; formatting belongs to the presentation layer.
    """
    liters_needed: float
    total_cost: float
    currency: Currency
    distance_km: float


def _is_valid_positive(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def missing_fields(calc_input: CalculationInput) -> List[str]:
    """List the numeric fields that prevent a calculation.

    A field is missing when it is absent, non-numeric, not finite or not
    strictly positive.

    Args:
        calc_input: Input to validate

    Returns:
        Field names in form order; empty when the input is complete
    """
    return [
        name for name in REQUIRED_FIELDS
        if not _is_valid_positive(getattr(calc_input, name))
    ]


def can_calculate(calc_input: CalculationInput) -> bool:
    """Whether the calculate action should be enabled for this input."""
    return not missing_fields(calc_input)


def compute_fuel_cost(calc_input: CalculationInput) -> CalculationResult:
    """Compute liters needed and total cost for a trip.

    Defined only for inputs where ``can_calculate`` is true. The caller is
    responsible for checking that first; this function does not validate.

    Args:
        calc_input: Distance, efficiency and price for the trip

    Returns:
        CalculationResult in the input's currency
    """
    distance_km = distance_to_km(calc_input.distance_value, calc_input.distance_unit)
    l100 = to_liters_per_100km(calc_input.efficiency_value, calc_input.efficiency_unit)

    liters_needed = (distance_km / 100) * l100
    total_cost = liters_needed * calc_input.price_per_liter

    return CalculationResult(
        liters_needed=liters_needed,
        total_cost=total_cost,
        currency=calc_input.currency,
        distance_km=distance_km,
    )


def _parse_number(raw: Any) -> Optional[float]:
    """Read a form value as a float; blank or unreadable values become None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_calculation_input(
    distance: Any,
    distance_unit: str = "km",
    efficiency: Any = None,
    efficiency_unit: str = "km/L",
    price_per_liter: Any = None,
    currency: str = "PHP",
    fuel_type: str = DEFAULT_FUEL_TYPE,
) -> CalculationInput:
    """Build a CalculationInput from raw form values.

    Numbers may be given as strings; anything unreadable is kept as None so
    that ``missing_fields`` reports it. Unit and currency names are parsed
    strictly.

    Raises:
        ValueError: If a unit or currency name is not supported
    """
    return CalculationInput(
        distance_value=_parse_number(distance),
        distance_unit=parse_distance_unit(distance_unit),
        efficiency_value=_parse_number(efficiency),
        efficiency_unit=parse_efficiency_unit(efficiency_unit),
        price_per_liter=_parse_number(price_per_liter),
        currency=parse_currency(currency),
        fuel_type=fuel_type or DEFAULT_FUEL_TYPE,
    )
