"""
Countries produced by the partitioner, and the tag pool they draw from.
"""

from __future__ import annotations

import string
from collections import Counter
from typing import Container, Dict, Iterable, List, Optional

from ..errors import PartitionConfigurationError
from .archetypes import Archetype, majority_archetype
from .prng import MapPRNG
from .state_graph import StateNode


class CountryNode:
    """A country grown from a single seed state.

    Members and border are insertion-ordered maps keyed by state ID so that
    iteration, and therefore tie-breaking, is reproducible. The border holds
    the unclaimed states adjacent to any member and is updated on every
    claim instead of being recomputed.
    """

    def __init__(
        self,
        index: int,
        tag: str,
        seed: StateNode,
        claimed: Container[int] = (),
    ):
        """
        Create a country owning only its seed.

        Args:
            index: Position of the country in the run's country table
            tag: Unique country tag
            seed: Initial state
            claimed: State IDs already owned by any country
        """
        self.index = index
        self.tag = tag
        self.seed = seed
        self.members: Dict[int, StateNode] = {}
        self.border: Dict[int, StateNode] = {}
        self.archetype: Optional[Archetype] = None
        self._archetype_counts: Counter = Counter()

        self.add_member(seed, claimed)

    def __repr__(self) -> str:
        return (
            f"CountryNode(tag={self.tag!r}, seed={self.seed.id}, "
            f"members={len(self.members)}, archetype={self.archetype})"
        )

    def add_member(self, node: StateNode, claimed: Container[int] = ()) -> List[StateNode]:
        """
        Take ownership of a state and extend the border around it.

        Args:
            node: State to add
            claimed: State IDs already owned by any country

        Returns:
            States newly added to the border
        """
        self.members[node.id] = node
        node.owner = self.index
        self.border.pop(node.id, None)

        if node.is_passable_land and node.archetype is not None:
            self._archetype_counts[node.archetype] += 1
            self.archetype = majority_archetype(self._archetype_counts.elements())

        added: List[StateNode] = []
        for neighbor in node.adjacent_nodes:
            if (
                neighbor.id in self.members
                or neighbor.id in self.border
                or neighbor.id in claimed
            ):
                continue
            self.border[neighbor.id] = neighbor
            added.append(neighbor)
        return added

    def drop_from_border(self, node: StateNode) -> None:
        self.border.pop(node.id, None)

    def passable_border(self) -> List[StateNode]:
        """Border states the country may grow into."""
        return [node for node in self.border.values() if node.is_passable_land]

    def contains(self, node: StateNode) -> bool:
        return node.id in self.members

    @property
    def value(self) -> float:
        return sum(node.value for node in self.members.values())

    @property
    def state_count(self) -> int:
        return len(self.members)

    @property
    def land_state_count(self) -> int:
        """Members excluding impassable and ocean states."""
        return sum(1 for node in self.members.values() if node.is_passable_land)

    def land_members(self) -> List[StateNode]:
        return [node for node in self.members.values() if node.is_passable_land]


def default_country_tags() -> List[str]:
    """Three-character tags D00..Z99, used when no tag list is supplied."""
    letters = string.ascii_uppercase[string.ascii_uppercase.index("D"):]
    return [f"{letter}{number:02d}" for letter in letters for number in range(100)]


class CountryTagPool:
    """Country tags drawn without replacement."""

    def __init__(self, tags: Optional[Iterable[str]] = None, reserved: Iterable[str] = ()):
        reserved_tags = {tag.upper() for tag in reserved}
        pool = default_country_tags() if tags is None else list(tags)
        # Keep first occurrence order, drop duplicates and reserved tags
        self._available: List[str] = [
            tag for tag in dict.fromkeys(pool) if tag.upper() not in reserved_tags
        ]

    def __len__(self) -> int:
        return len(self._available)

    @property
    def available(self) -> List[str]:
        return list(self._available)

    def draw(self, prng: MapPRNG) -> str:
        """Remove and return a random tag."""
        if not self._available:
            raise PartitionConfigurationError("Country tag pool is exhausted")
        return self._available.pop(prng.randint(0, len(self._available)))
