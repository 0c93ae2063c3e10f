"""
Country partitioning over the state graph.

The partitioner runs through a fixed sequence of phases:

1. Seeding - pick one seed state per country from a moderate-dispersion band
2. Growing - sweep all countries, each claiming its best scored border state
3. Stalled - a sweep claimed nothing
4. Finalizing - attach leftover land, then impassable and ocean states
5. Done

All mutable run state lives in a PartitionContext, so independent runs
never share claims.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np
import structlog

from ..config.generator_settings import PartitionSettings
from ..errors import PartitionConfigurationError
from .countries import CountryNode, CountryTagPool
from .distance_cache import UNREACHABLE, ShortestPathCache
from .prng import MapPRNG
from .state_graph import StateGraph, StateNode

logger = structlog.get_logger()


class PartitionPhase(str, Enum):
    """Partitioner state machine phases."""

    SEEDING = "seeding"
    GROWING = "growing"
    STALLED = "stalled"
    FINALIZING = "finalizing"
    DONE = "done"


class PartitionContext:
    """Claims, countries and frontier bookkeeping for one partition run."""

    def __init__(self, graph: StateGraph, distances: ShortestPathCache):
        self.graph = graph
        self.distances = distances
        self.phase = PartitionPhase.SEEDING
        self.countries: List[CountryNode] = []
        self.claimed: Dict[int, int] = {}  # state id -> country index
        self.unassigned: List[StateNode] = []
        self.sweeps = 0

        # state id -> countries whose border currently holds that state
        self._frontier: Dict[int, Dict[int, CountryNode]] = {}
        self._seed_matrix: Optional[np.ndarray] = None

    def found_country(self, seed: StateNode, tag: str) -> CountryNode:
        """Create a country on an unclaimed seed state."""
        if seed.id in self.claimed:
            raise ValueError(f"State {seed.id} is already claimed")

        country = CountryNode(len(self.countries), tag, seed, self.claimed)
        self.countries.append(country)
        self._record_claim(country, seed, list(country.border.values()))
        return country

    def claim(self, country: CountryNode, node: StateNode) -> None:
        """Give an unclaimed state to a country and update every border."""
        if node.id in self.claimed:
            raise ValueError(f"State {node.id} is already claimed")
        added = country.add_member(node, self.claimed)
        self._record_claim(country, node, added)

    def _record_claim(
        self, country: CountryNode, node: StateNode, added_border: List[StateNode]
    ) -> None:
        self.claimed[node.id] = country.index
        for border_node in added_border:
            self._frontier.setdefault(border_node.id, {})[country.index] = country
        for other in self._frontier.pop(node.id, {}).values():
            other.drop_from_border(node)

    def is_claimed(self, node: StateNode) -> bool:
        return node.id in self.claimed

    def bordering_countries(self, node: StateNode) -> List[CountryNode]:
        """Countries whose border currently contains ``node``."""
        return list(self._frontier.get(node.id, {}).values())

    def owner_of(self, node: StateNode) -> Optional[CountryNode]:
        index = self.claimed.get(node.id)
        return None if index is None else self.countries[index]

    @property
    def seeds(self) -> List[StateNode]:
        return [country.seed for country in self.countries]

    def seed_matrix(self) -> np.ndarray:
        """Distance rows of all seeds, shape (countries, nodes), in country order."""
        if self._seed_matrix is None or len(self._seed_matrix) != len(self.countries):
            self._seed_matrix = np.stack(
                [self.distances.row(country.seed.id) for country in self.countries]
            )
        return self._seed_matrix


class Partitioner:
    """Splits the passable land of a state graph into contiguous countries."""

    def __init__(
        self,
        graph: StateGraph,
        countries_count: int,
        prng: MapPRNG,
        distances: Optional[ShortestPathCache] = None,
        tag_pool: Optional[CountryTagPool] = None,
        options: Optional[PartitionSettings] = None,
    ):
        """
        Initialize the partitioner.

        Args:
            graph: State graph with adjacency wired
            countries_count: Number of countries to create
            prng: Run generator
            distances: Shared distance cache, created if omitted
            tag_pool: Tags to draw from, defaults to the built-in pool
            options: Score weights and seed band
        """
        self.graph = graph
        self.countries_count = countries_count
        self.prng = prng
        self.distances = distances or ShortestPathCache(graph)
        self.tag_pool = tag_pool or CountryTagPool()
        self.options = options or PartitionSettings()

        self.validate_request()

    def validate_request(self) -> None:
        """Reject requests that cannot be satisfied, before any work is done."""
        if self.countries_count < 1:
            raise PartitionConfigurationError(
                f"Country count must be positive, got {self.countries_count}"
            )

        passable = self.graph.passable_land_count
        if self.countries_count > passable:
            raise PartitionConfigurationError(
                f"Cannot create {self.countries_count} countries from "
                f"{passable} passable land states"
            )

        if self.countries_count > len(self.tag_pool):
            raise PartitionConfigurationError(
                f"Cannot create {self.countries_count} countries with "
                f"{len(self.tag_pool)} available tags"
            )

    def run(self) -> PartitionContext:
        """
        Run all partition phases.

        Returns:
            Finished PartitionContext holding the countries
        """
        context = PartitionContext(self.graph, self.distances)

        seeds = self.select_seeds()
        for seed in seeds:
            context.found_country(seed, self.tag_pool.draw(self.prng))

        self.grow(context)
        self.finalize(context)
        return context

    def select_seeds(self) -> List[StateNode]:
        """
        Pick one seed per country.

        The first seed is uniform. Every later seed is drawn uniformly from
        the middle band of the remaining candidates ordered by their summed
        distance to the seeds chosen so far.

        Returns:
            Seed states in selection order
        """
        logger.info("Selecting country seeds", countries=self.countries_count)

        candidates = self.graph.passable_land
        first = self.prng.choice(candidates)
        seeds = [first]

        remaining = [node for node in candidates if node is not first]
        remaining_index = np.array(
            [self.graph.index[node.id] for node in remaining], dtype=np.int64
        )
        distance_sums = np.zeros(len(self.graph), dtype=np.int64)
        unreachable_cost = len(self.graph)

        while len(seeds) < self.countries_count:
            row = self.distances.row(seeds[-1].id)
            distance_sums += np.where(row == UNREACHABLE, unreachable_cost, row)

            order = np.argsort(distance_sums[remaining_index], kind="stable")
            count = len(order)
            low = int(count * self.options.seed_band_low)
            high = int(count * self.options.seed_band_high)
            band = order[low:high]

            if len(band) == 0:
                picked = self.prng.randint(0, count)
            else:
                picked = int(band[self.prng.randint(0, len(band))])

            seeds.append(remaining.pop(picked))
            remaining_index = np.delete(remaining_index, picked)

        # Seeds anchor the dispersion scores, keep their rows cached
        self.distances.warm(seed.id for seed in seeds)
        logger.debug("Seeds selected", seeds=[seed.id for seed in seeds])
        return seeds

    def grow(self, context: PartitionContext) -> None:
        """Sweep all countries until a full sweep claims nothing."""
        context.phase = PartitionPhase.GROWING
        logger.info("Growing countries", countries=len(context.countries))

        while True:
            context.sweeps += 1
            claimed = 0

            for country in context.countries:
                candidates = country.passable_border()
                if not candidates:
                    continue

                best = self.select_candidate(country, candidates, context)
                if best is None:
                    continue

                context.claim(country, best)
                claimed += 1

            logger.debug("Growth sweep finished", sweep=context.sweeps, claimed=claimed)
            if claimed == 0:
                break

        context.phase = PartitionPhase.STALLED
        logger.info(
            "Growth stalled",
            sweeps=context.sweeps,
            claimed=len(context.claimed),
        )

    def select_candidate(
        self,
        country: CountryNode,
        candidates: Sequence[StateNode],
        context: PartitionContext,
    ) -> Optional[StateNode]:
        """
        Pick the border state with the highest weighted score.

        Each term is divided by its maximum over the candidates; a term whose
        maximum is zero contributes nothing. Ties keep the first candidate.
        """
        candidates = [
            node for node in candidates if node.is_passable_land and not context.is_claimed(node)
        ]
        if not candidates:
            return None

        values = np.array([node.value for node in candidates], dtype=np.float64)
        dispersions = np.array(
            [self.dispersion(node, country, context) for node in candidates], dtype=np.float64
        )
        type_matches = np.array(
            [self.type_match(node, context) for node in candidates], dtype=np.float64
        )

        scores = (
            self.options.value_weight * _normalize(values)
            + self.options.dispersion_weight * _normalize(dispersions)
            + self.options.type_match_weight * _normalize(type_matches)
        )
        # argmax returns the first maximum
        return candidates[int(np.argmax(scores))]

    def dispersion(
        self, node: StateNode, country: CountryNode, context: PartitionContext
    ) -> float:
        """Mean distance from ``node`` to the reachable seeds of rival countries."""
        column = context.seed_matrix()[:, self.graph.index[node.id]]
        mask = column != UNREACHABLE
        mask[country.index] = False
        if not mask.any():
            return 0.0
        return float(column[mask].mean())

    def type_match(self, node: StateNode, context: PartitionContext) -> float:
        """Share of the countries bordering ``node`` whose archetype equals its own."""
        bordering = context.bordering_countries(node)
        if not bordering:
            return 0.0
        matches = sum(1 for country in bordering if country.archetype == node.archetype)
        return matches / len(bordering)

    def finalize(self, context: PartitionContext) -> None:
        """Assign leftover land, then attach impassable and ocean states."""
        context.phase = PartitionPhase.FINALIZING
        logger.info("Finalizing partition")

        leftover = self._flood_leftover_land(context)

        # Land cut off from every country, even across impassable states
        isolated = 0
        for node in self.graph.passable_land:
            if context.is_claimed(node):
                continue
            component = self._unclaimed_component(node, context)
            owner = self.prng.choice(context.countries)
            for member in component:
                context.claim(owner, member)
            isolated += len(component)

        for node in self.graph.nodes:
            if node.is_passable_land or context.is_claimed(node):
                continue
            owner = self._first_land_owner(node, context)
            if owner is None:
                context.unassigned.append(node)
                continue
            context.claim(owner, node)

        context.phase = PartitionPhase.DONE
        logger.info(
            "Partition finished",
            countries=len(context.countries),
            leftover_land=leftover,
            isolated_land=isolated,
            unassigned=len(context.unassigned),
        )

    def _flood_leftover_land(self, context: PartitionContext) -> int:
        """
        Give unclaimed land to the country that reaches it first across impassable states.

        A breadth-first flood starts from all owned land at once. Impassable
        states carry the label of the country that reached them and unclaimed
        land is claimed for that label, so every claimed state keeps a path
        to its country through its own states or impassable ones.

        Returns:
            Number of land states claimed
        """
        labels: Dict[int, CountryNode] = {}
        queue = deque()
        for node in self.graph.nodes:
            owner = context.owner_of(node)
            if owner is not None and node.is_passable_land:
                labels[node.id] = owner
                queue.append(node)

        claimed = 0
        while queue:
            current = queue.popleft()
            owner = labels[current.id]
            for neighbor in current.adjacent_nodes:
                if neighbor.id in labels:
                    continue
                if neighbor.is_impassable:
                    labels[neighbor.id] = owner
                    queue.append(neighbor)
                elif neighbor.is_passable_land and not context.is_claimed(neighbor):
                    labels[neighbor.id] = owner
                    context.claim(owner, neighbor)
                    claimed += 1
                    queue.append(neighbor)
        return claimed

    def _unclaimed_component(
        self, start: StateNode, context: PartitionContext
    ) -> List[StateNode]:
        """
        Unclaimed passable land reachable from ``start``.

        The search crosses impassable states like the leftover flood does, so
        land pockets joined only through impassable states form one component.
        """
        component = [start]
        seen = {start.id}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in current.adjacent_nodes:
                if neighbor.id in seen or context.is_claimed(neighbor):
                    continue
                if neighbor.is_impassable:
                    seen.add(neighbor.id)
                    queue.append(neighbor)
                elif neighbor.is_passable_land:
                    seen.add(neighbor.id)
                    component.append(neighbor)
                    queue.append(neighbor)
        return component

    def _first_land_owner(
        self, node: StateNode, context: PartitionContext
    ) -> Optional[CountryNode]:
        for neighbor in node.adjacent_nodes:
            if neighbor.is_passable_land:
                owner = context.owner_of(neighbor)
                if owner is not None:
                    return owner
        return None


def _normalize(values: np.ndarray) -> np.ndarray:
    peak = values.max() if len(values) else 0.0
    if peak <= 0:
        return np.zeros_like(values)
    return values / peak
