"""
Diagnostics for a finished partition.

Nothing here mutates the partition.
"""

from collections import deque
from typing import Dict, List, Sequence

import numpy as np
from pydantic import BaseModel, Field

from .archetypes import Archetype
from .countries import CountryNode


class ValidationResult(BaseModel):
    """Summary of partition quality."""

    is_connected: bool = Field(description="Whether every country is contiguous")
    disconnected_countries: List[str] = Field(
        default_factory=list, description="Tags of countries failing the connectivity check"
    )
    value_std_dev: float = Field(description="Population standard deviation of country values")
    country_type_distribution: Dict[Archetype, int] = Field(
        default_factory=dict, description="Number of countries per archetype"
    )


def is_country_connected(country: CountryNode) -> bool:
    """
    Check that every member is reachable from the seed.

    The search crosses states owned by the same country and impassable
    states, and counts the members it reaches.
    """
    visited = {country.seed.id}
    queue = deque([country.seed])
    reached_members = 0

    while queue:
        current = queue.popleft()
        if country.contains(current):
            reached_members += 1
        for neighbor in current.adjacent_nodes:
            if neighbor.id in visited:
                continue
            if country.contains(neighbor) or neighbor.is_impassable:
                visited.add(neighbor.id)
                queue.append(neighbor)

    return reached_members == country.state_count


def value_std_dev(countries: Sequence[CountryNode]) -> float:
    if not countries:
        return 0.0
    return float(np.std([country.value for country in countries]))


def type_distribution(countries: Sequence[CountryNode]) -> Dict[Archetype, int]:
    distribution: Dict[Archetype, int] = {}
    for country in countries:
        if country.archetype is None:
            continue
        distribution[country.archetype] = distribution.get(country.archetype, 0) + 1
    return distribution


def validate_partition(countries: Sequence[CountryNode]) -> ValidationResult:
    """
    Run all partition checks.

    Args:
        countries: Finished countries

    Returns:
        ValidationResult with connectivity, value spread and archetype histogram
    """
    disconnected = [country.tag for country in countries if not is_country_connected(country)]
    return ValidationResult(
        is_connected=not disconnected,
        disconnected_countries=disconnected,
        value_std_dev=value_std_dev(countries),
        country_type_distribution=type_distribution(countries),
    )
