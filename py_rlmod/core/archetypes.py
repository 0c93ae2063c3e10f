"""
Economic archetypes for states and countries.

Every state is Industrial, Resource or Balanced. The archetype selects the
generation bands for its economic attributes and the rules used when the
value balancer rescales them. All archetype-specific numbers live in the
ARCHETYPE_PROFILES table.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .prng import MapPRNG


class Archetype(str, Enum):
    """Economic profile of a state or country."""

    INDUSTRIAL = "Industrial"
    RESOURCE = "Resource"
    BALANCED = "Balanced"


# Majority-vote tie-break order, strongest first
ARCHETYPE_PRIORITY: Tuple[Archetype, ...] = (
    Archetype.INDUSTRIAL,
    Archetype.RESOURCE,
    Archetype.BALANCED,
)


class AdjustRule(str, Enum):
    """How the balancer rescales one attribute."""

    AMPLIFY = "amplify"
    DAMP = "damp"
    JITTER = "jitter"


# Balancing multipliers
AMPLIFY_GAIN = 1.2
AMPLIFY_FLOOR = 0.8
DAMP_GAIN = 0.8
DAMP_CAP = 1.0
JITTER_RANGE = (0.9, 1.1)

# Balanced states keep resources close to this many per factory
BALANCED_RESOURCES_PER_FACTORY = 50
BALANCED_RESOURCE_TOLERANCE = 50
BALANCED_RESOURCE_NOISE = 25

# Industrial states get at least this many resources per factory (before the band cap)
INDUSTRIAL_RESOURCES_PER_FACTORY = 10

# Resource states get at most one factory per this many resources
RESOURCE_FACTORY_RATIO = 0.005


@dataclass(frozen=True)
class ArchetypeProfile:
    """Generation bands and balancing rules for one archetype.

    Bands are (low, high) fractions. ``factory_cap_band`` is relative to the
    configured factory ceiling, ``factory_band`` to the state's own factory
    cap and ``resource_band`` to the configured resource ceiling.
    """

    archetype: Archetype
    factory_cap_band: Tuple[float, float]
    factory_band: Tuple[float, float]
    resource_band: Tuple[float, float]
    factory_rule: AdjustRule
    resource_rule: AdjustRule
    factory_floor: int = 0
    resource_floor: int = 0


ARCHETYPE_PROFILES: Dict[Archetype, ArchetypeProfile] = {
    Archetype.INDUSTRIAL: ArchetypeProfile(
        archetype=Archetype.INDUSTRIAL,
        factory_cap_band=(0.7, 1.0),
        factory_band=(0.5, 0.7),
        resource_band=(0.0, 0.3),
        factory_rule=AdjustRule.AMPLIFY,
        resource_rule=AdjustRule.DAMP,
        factory_floor=1,
    ),
    Archetype.RESOURCE: ArchetypeProfile(
        archetype=Archetype.RESOURCE,
        factory_cap_band=(0.1, 0.3),
        factory_band=(0.0, 0.7),
        resource_band=(0.7, 1.0),
        factory_rule=AdjustRule.DAMP,
        resource_rule=AdjustRule.AMPLIFY,
        resource_floor=1,
    ),
    Archetype.BALANCED: ArchetypeProfile(
        archetype=Archetype.BALANCED,
        factory_cap_band=(0.3, 0.7),
        factory_band=(0.3, 0.7),
        resource_band=(0.3, 0.7),
        factory_rule=AdjustRule.JITTER,
        resource_rule=AdjustRule.JITTER,
    ),
}


def get_profile(archetype: Archetype) -> ArchetypeProfile:
    return ARCHETYPE_PROFILES[archetype]


def stratified_archetypes(count: int, prng: MapPRNG) -> List[Archetype]:
    """
    Draw ``count`` archetypes with every archetype represented equally.

    The multiset holds each archetype floor(count/3) or ceil(count/3) times
    and is then shuffled, so the global supply is balanced regardless of
    ``count`` and neighbouring states do not clump by chance alone.

    Args:
        count: Number of archetypes to draw
        prng: Run generator

    Returns:
        List of archetypes in draw order
    """
    full_rounds, remainder = divmod(count, len(ARCHETYPE_PRIORITY))
    archetypes = list(ARCHETYPE_PRIORITY) * full_rounds
    archetypes.extend(ARCHETYPE_PRIORITY[:remainder])
    prng.shuffle(archetypes)
    return archetypes


def majority_archetype(archetypes: Iterable[Archetype]) -> Optional[Archetype]:
    """
    Most common archetype; ties go to the earlier entry of ARCHETYPE_PRIORITY.

    Returns None for an empty input.
    """
    counts = Counter(archetypes)
    if not counts:
        return None
    best = max(counts.values())
    for archetype in ARCHETYPE_PRIORITY:
        if counts.get(archetype, 0) == best:
            return archetype
    return None
