"""
Free-text vehicle search over the catalog.

Ranks catalog entries by how well every token of the query matches the
entry's make and model.
"""

from dataclasses import dataclass
from typing import List

from .catalog import VEHICLE_CATALOG, VehicleCatalog, VehicleRecord, vehicle_label
from .units import EfficiencyUnit


@dataclass(frozen=True)
class MatcherConfig:
    """Scoring constants for vehicle search."""
    prefix_score: int = 15     # search text starts with the token
    contains_score: int = 8    # search text contains the token
    max_results: int = 10
    min_query_length: int = 2

    def __post_init__(self):
        """Validate scoring configuration."""
        if self.prefix_score < 0:
            raise ValueError("prefix_score cannot be negative")
        if self.contains_score < 0:
            raise ValueError("contains_score cannot be negative")
        if self.max_results <= 0:
            raise ValueError("max_results must be > 0")
        if self.min_query_length < 1:
            raise ValueError("min_query_length must be >= 1")


DEFAULT_MATCHER_CONFIG = MatcherConfig()


@dataclass(frozen=True)
class VehicleMatch:
    """A catalog entry that matched a query, with its relevance score."""
    record: VehicleRecord
    score: int


@dataclass(frozen=True)
class VehicleSelection:
    """Form prefill produced by choosing a matched vehicle."""
    record: VehicleRecord
    label: str
    efficiency_value: float
    efficiency_unit: EfficiencyUnit


def tokenize(query: str) -> List[str]:
    """Split a lowercased query on whitespace, dropping empty tokens."""
    return [token for token in query.lower().split() if token]


def search(
    query: str,
    catalog: VehicleCatalog = VEHICLE_CATALOG,
    config: MatcherConfig = DEFAULT_MATCHER_CONFIG,
) -> List[VehicleMatch]:
    """Find catalog entries matching every token of a free-text query.

    An entry is a candidate only when each token is a substring of its
    lowercase "make model" text. Each token adds ``prefix_score`` when the
    text starts with it and ``contains_score`` when the text contains it;
    both apply to a leading token. Results are ordered by score, highest
    first, with catalog order kept among equal scores.

    Args:
        query: Text typed by the user
        catalog: Catalog to search
        config: Scoring constants

    Returns:
        At most ``config.max_results`` matches; empty when the query is too
        short or nothing matches
    """
    normalized = query.strip().lower()
    if len(normalized) < config.min_query_length:
        return []

    tokens = tokenize(normalized)

    matches = []
    for record in catalog:
        text = record.search_text
        if not all(token in text for token in tokens):
            continue

        score = 0
        for token in tokens:
            if text.startswith(token):
                score += config.prefix_score
            if token in text:
                score += config.contains_score
        matches.append(VehicleMatch(record=record, score=score))

    # sorted() is stable, so ties keep catalog order
    matches = sorted(matches, key=lambda m: m.score, reverse=True)
    return matches[:config.max_results]


def select_vehicle(record: VehicleRecord) -> VehicleSelection:
    """Prefill values for a chosen vehicle: its label and average km/L."""
    return VehicleSelection(
        record=record,
        label=vehicle_label(record),
        efficiency_value=round(record.km_per_liter_avg, 2),
        efficiency_unit=EfficiencyUnit.KM_PER_LITER,
    )
