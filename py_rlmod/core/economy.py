"""
Economic attribute generation and state valuation.

Each passable land state receives a factory cap, factories and resources
drawn from the bands of its archetype profile. The state value is a
weighted sum of the attributes normalized by their configured ceilings.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from ..config.generator_settings import EconomySettings
from .archetypes import (
    BALANCED_RESOURCE_NOISE,
    BALANCED_RESOURCE_TOLERANCE,
    BALANCED_RESOURCES_PER_FACTORY,
    INDUSTRIAL_RESOURCES_PER_FACTORY,
    RESOURCE_FACTORY_RATIO,
    Archetype,
    ArchetypeProfile,
    get_profile,
)
from .prng import MapPRNG


@dataclass
class EconomicAttributes:
    """Mutable economic attributes of one state."""

    factories: int = 0
    max_factories: int = 0
    resources: int = 0
    total_victory_points: int = 0


def clamp(value: int, low: int, high: int) -> int:
    """Clamp into [low, high]; when low exceeds high the ceiling wins."""
    low = min(low, high)
    return max(low, min(value, high))


def _band(fractions: Tuple[float, float], limit: int) -> Tuple[int, int]:
    low, high = fractions
    return int(limit * low), int(limit * high)


def _generate_industrial(
    profile: ArchetypeProfile, cap: int, economy: EconomySettings, prng: MapPRNG
) -> Tuple[int, int]:
    factory_low, factory_high = _band(profile.factory_band, cap)
    factories = prng.randint(factory_low, factory_high)

    _, resource_high = _band(profile.resource_band, economy.max_resources)
    resource_max = prng.randint(factories * INDUSTRIAL_RESOURCES_PER_FACTORY, resource_high)
    resource_max = min(resource_max, resource_high)
    resources = prng.randint(0, resource_max + 1)
    return factories, resources


def _generate_resource(
    profile: ArchetypeProfile, cap: int, economy: EconomySettings, prng: MapPRNG
) -> Tuple[int, int]:
    resource_low, resource_high = _band(profile.resource_band, economy.max_resources)
    resources = prng.randint(resource_low, resource_high + 1)

    _, factory_high = _band(profile.factory_band, cap)
    factory_max = min(int(resources * RESOURCE_FACTORY_RATIO), factory_high)
    factories = prng.randint(0, factory_max + 1)
    return factories, resources


def _generate_balanced(
    profile: ArchetypeProfile, cap: int, economy: EconomySettings, prng: MapPRNG
) -> Tuple[int, int]:
    factory_low, factory_high = _band(profile.factory_band, cap)
    factories = prng.randint(factory_low, factory_high + 1)

    resource_low, resource_high = _band(profile.resource_band, economy.max_resources)
    resources = prng.randint(resource_low, resource_high + 1)

    # Pull resources towards a fixed ratio to the factory count
    standard = factories * BALANCED_RESOURCES_PER_FACTORY
    if abs(resources - standard) > BALANCED_RESOURCE_TOLERANCE:
        noise = prng.randint(-BALANCED_RESOURCE_NOISE, BALANCED_RESOURCE_NOISE + 1)
        resources = clamp(standard + noise, 0, economy.max_resources)
    return factories, resources


_GENERATORS: Dict[
    Archetype, Callable[[ArchetypeProfile, int, EconomySettings, MapPRNG], Tuple[int, int]]
] = {
    Archetype.INDUSTRIAL: _generate_industrial,
    Archetype.RESOURCE: _generate_resource,
    Archetype.BALANCED: _generate_balanced,
}


def generate_economy(
    archetype: Archetype,
    total_victory_points: int,
    economy: EconomySettings,
    prng: MapPRNG,
) -> EconomicAttributes:
    """
    Draw the economic attributes of a passable land state.

    Args:
        archetype: State archetype
        total_victory_points: Sum of the state's victory points
        economy: Attribute ceilings
        prng: Run generator

    Returns:
        Freshly generated attributes
    """
    profile = get_profile(archetype)
    cap_low, cap_high = _band(profile.factory_cap_band, economy.max_factories)
    max_factories = prng.randint(cap_low, cap_high + 1)

    factories, resources = _GENERATORS[archetype](profile, max_factories, economy, prng)

    return EconomicAttributes(
        factories=clamp(factories, 0, max_factories),
        max_factories=max_factories,
        resources=clamp(resources, 0, economy.max_resources),
        total_victory_points=total_victory_points,
    )


def state_value(attributes: EconomicAttributes, economy: EconomySettings) -> float:
    """Weighted, normalized value of a state's attributes on a 0-100 scale."""
    victory_points = min(attributes.total_victory_points, economy.max_victory_points)
    return (
        attributes.factories / economy.max_factories * 100 * economy.factories_weight
        + attributes.max_factories / economy.max_factories * 100 * economy.max_factories_weight
        + attributes.resources / economy.max_resources * 100 * economy.resources_weight
        + victory_points / economy.max_victory_points * 100 * economy.victory_points_weight
    )
