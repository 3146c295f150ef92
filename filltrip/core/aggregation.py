"""
Monthly grouping of refuel logs and recorded trips.

Records come from the persistence service as JSON objects whose numeric
fields may be strings, numbers or garbage. Grouping never mutates its input
and never fails because of one bad record.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from filltrip.logging import get_logger

logger = get_logger(__name__)


REFUEL_SUM_FIELDS = ("totalCost", "liters")
TRIP_SUM_FIELDS = ("fuelCost", "litersNeeded", "distanceKm")


@dataclass(frozen=True)
class MonthGroup:
    """Records of one calendar month, most recent first."""
    key: str  # "YYYY-MM"
    label: str  # e.g. "January 2024"
    items: Tuple[Mapping[str, Any], ...]
    total_entries: int
    totals: Dict[str, float]


@dataclass(frozen=True)
class OverallTotals:
    """Totals across every valid record of an aggregation."""
    total_entries: int
    totals: Dict[str, float]


def safe_number(value: Any, default: float = 0.0) -> float:
    """Read a number the service may have sent as a string.

    Non-numeric, NaN and infinite values give ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            return default
    if not math.isfinite(number):
        return default
    return number


def parse_created_at(value: Any) -> Optional[datetime]:
    """Parse a ``createdAt`` stamp into a naive local datetime.

    Timezone-aware and date-only stamps are read as UTC and converted to
    local time; naive date-time stamps are taken to be local already.
    Returns None when the value is missing or cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            parsed = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
        else:
            parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def month_label(key: str) -> str:
    """Localized "Month Year" label for a "YYYY-MM" key."""
    return datetime.strptime(f"{key}-01", "%Y-%m-%d").strftime("%B %Y")


def group_by_month(
    records: Sequence[Any],
    sum_fields: Sequence[str] = REFUEL_SUM_FIELDS,
) -> List[MonthGroup]:
    """Group records by the calendar month of their ``createdAt``.

    Records that are not mappings, or whose ``createdAt`` is missing or
    unparsable, are left out of every group and every sum.

    Args:
        records: Records as returned by the persistence service
        sum_fields: Numeric fields to total per group

    Returns:
        Groups ordered newest month first, each with its items ordered
        newest first
    """
    buckets: Dict[str, List[Tuple[datetime, Mapping[str, Any]]]] = {}
    dropped = 0

    for record in records:
        if not isinstance(record, Mapping):
            dropped += 1
            continue
        created_at = parse_created_at(record.get("createdAt"))
        if created_at is None:
            dropped += 1
            continue
        buckets.setdefault(month_key(created_at), []).append((created_at, record))

    if dropped:
        logger.debug("Dropped records without a usable createdAt", dropped=dropped)

    groups = []
    for key in sorted(buckets, reverse=True):
        # Stable: equal stamps keep input order
        entries = sorted(buckets[key], key=lambda e: e[0], reverse=True)
        items = tuple(record for _, record in entries)

        totals = {
            name: sum(safe_number(item.get(name)) for item in items)
            for name in sum_fields
        }

        groups.append(MonthGroup(
            key=key,
            label=month_label(key),
            items=items,
            total_entries=len(items),
            totals=totals,
        ))

    return groups


def overall_totals(
    groups: Sequence[MonthGroup],
    sum_fields: Sequence[str] = REFUEL_SUM_FIELDS,
) -> OverallTotals:
    """Add up per-group totals into global totals."""
    return OverallTotals(
        total_entries=sum(group.total_entries for group in groups),
        totals={
            name: sum(group.totals.get(name, 0.0) for group in groups)
            for name in sum_fields
        },
    )


def normalize_refuel_entry(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce a refuel log entry's fields into proper types.

    Returns a new dict; the input is left untouched.
    """
    entry = dict(raw)
    entry["id"] = int(safe_number(raw.get("id")))
    for name in ("odometerKm", "liters", "pricePerLiter", "totalCost"):
        entry[name] = safe_number(raw.get(name))
    entry["distanceUnit"] = raw.get("distanceUnit") or "km"
    entry["fuelUnit"] = raw.get("fuelUnit") or "liters"
    entry["currency"] = raw.get("currency") or "PHP"
    return entry


def normalize_trip_entry(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce a recorded trip's fields into proper types.

    Returns a new dict; the input is left untouched.
    """
    entry = dict(raw)
    entry["id"] = int(safe_number(raw.get("id")))
    for name in ("distanceKm", "efficiencyKmPerL", "litersNeeded", "pricePerLiter", "fuelCost"):
        entry[name] = safe_number(raw.get(name))
    entry["currency"] = raw.get("currency") or "PHP"
    return entry
