"""
Unit conversions for distance, fuel efficiency and money.

Everything downstream of the input boundary works in kilometers and
liters per 100 km.
"""

import math
from enum import Enum
from typing import Any, Optional


KM_PER_MILE = 1.60934
# 100 km/L expressed in US miles per gallon
MPG_TO_L100_FACTOR = 235.214583


class DistanceUnit(Enum):
    """Distance units accepted at the input boundary."""
    KM = "km"
    MILES = "miles"


class EfficiencyUnit(Enum):
    """Fuel efficiency units accepted at the input boundary."""
    KM_PER_LITER = "km/L"
    MPG = "mpg"


class Currency(Enum):
    """Supported currencies. No conversion is ever performed between them."""
    PHP = "PHP"
    USD = "USD"


CURRENCY_SYMBOLS = {
    Currency.PHP: "₱",
    Currency.USD: "$",
}


def miles_to_km(miles: float) -> float:
    """Convert miles to kilometers."""
    return miles * KM_PER_MILE


def meters_to_km(meters: float) -> float:
    """Convert meters (routing provider distance) to kilometers."""
    return meters / 1000


def seconds_to_minutes(seconds: float) -> int:
    """Convert seconds (routing provider duration) to whole minutes, halves up."""
    return int(math.floor(seconds / 60 + 0.5))


def distance_to_km(value: float, unit: DistanceUnit) -> float:
    """Normalize a user supplied distance to kilometers.

    This is the only place distances are converted; callers store the
    returned kilometers and never convert again.
    """
    if unit == DistanceUnit.KM:
        return value
    return miles_to_km(value)


def to_liters_per_100km(value: Optional[float], unit: Any) -> float:
    """Convert a fuel efficiency value to liters per 100 km.

    Returns 0.0 when the value is missing or not positive, or when the unit
    is not recognized. A zero result therefore does not mean the vehicle
    consumes nothing; validate the value with ``missing_fields`` and parse
    the unit with ``parse_efficiency_unit`` before trusting it.

    Args:
        value: Efficiency in ``unit``
        unit: An EfficiencyUnit or its string value ("km/L", "mpg")

    Returns:
        Liters needed to travel 100 km
    """
    if value is None or not math.isfinite(value) or value <= 0:
        return 0.0

    if isinstance(unit, EfficiencyUnit):
        unit = unit.value

    if unit == EfficiencyUnit.KM_PER_LITER.value:
        return 100 / value
    if unit == EfficiencyUnit.MPG.value:
        return MPG_TO_L100_FACTOR / value
    return 0.0


def to_km_per_liter(value: float, unit: EfficiencyUnit) -> float:
    """Express an efficiency value in km/L, the unit trips are stored in."""
    if unit == EfficiencyUnit.MPG:
        return value * 100 / MPG_TO_L100_FACTOR
    return value


def parse_distance_unit(name: str) -> DistanceUnit:
    """Parse a distance unit name.

    Raises:
        ValueError: If the unit is not supported
    """
    for unit in DistanceUnit:
        if unit.value == name:
            return unit
    raise ValueError(f"Unsupported distance unit: {name}")


def parse_efficiency_unit(name: str) -> EfficiencyUnit:
    """Parse an efficiency unit name.

    Raises:
        ValueError: If the unit is not supported
    """
    for unit in EfficiencyUnit:
        if unit.value == name:
            return unit
    raise ValueError(f"Unsupported efficiency unit: {name}")


def parse_currency(code: str) -> Currency:
    """Parse a currency code, case-insensitively.

    Raises:
        ValueError: If the currency is not supported
    """
    try:
        return Currency(code.upper())
    except (ValueError, AttributeError):
        raise ValueError(f"Unsupported currency: {code}")


def currency_symbol(currency: Currency) -> str:
    return CURRENCY_SYMBOLS[currency]


def format_money(amount: Any, currency: Currency) -> str:
    """Format an amount with its currency symbol and two decimals.

    Non-numeric, NaN and infinite amounts render as zero.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        amount = 0.0
    elif not math.isfinite(amount):
        amount = 0.0
    return f"{currency_symbol(currency)}{amount:,.2f}"
