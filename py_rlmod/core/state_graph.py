"""
State graph construction.

Converts the states read from the game files, plus the province adjacency
relation and the sea province clusters, into a graph of StateNode objects:

1. Validate input states and index province ownership
2. Draw stratified archetypes for all states
3. Generate economic attributes per state, in input order
4. Group sea provinces into ocean nodes (negative IDs)
5. Discover state adjacency from province adjacency
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import structlog

from ..config.generator_settings import EconomySettings
from ..errors import InvalidStateGraphError
from .archetypes import Archetype, stratified_archetypes
from .economy import EconomicAttributes, generate_economy, state_value
from .prng import MapPRNG
from .provinces import Province, ProvinceType, State, build_adjacency

logger = structlog.get_logger()


@dataclass(eq=False)
class StateNode:
    """A state in the partition graph.

    Ocean nodes aggregate connected sea provinces and always carry a
    negative ID. Ownership is recorded as an index into the country table of
    the current partition run, never as a reference to the country.
    """

    id: int
    provinces: Tuple[int, ...]
    economy: EconomySettings = field(repr=False)
    archetype: Optional[Archetype] = None
    attributes: EconomicAttributes = field(default_factory=EconomicAttributes)
    is_impassable: bool = False
    is_ocean: bool = False
    is_coastal: bool = False
    name: str = ""
    manpower: int = 0
    owner: Optional[int] = None
    _adjacent: Dict[int, "StateNode"] = field(default_factory=dict, repr=False)

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_passable_land(self) -> bool:
        return not self.is_impassable and not self.is_ocean

    @property
    def adjacent_nodes(self) -> List["StateNode"]:
        """Neighbouring nodes in discovery order."""
        return list(self._adjacent.values())

    @property
    def adjacent_ids(self) -> List[int]:
        return list(self._adjacent.keys())

    def is_adjacent(self, other: "StateNode") -> bool:
        return other.id in self._adjacent

    def link(self, other: "StateNode") -> None:
        """Record a symmetric adjacency edge."""
        if other is self:
            return
        self._adjacent.setdefault(other.id, other)
        other._adjacent.setdefault(self.id, self)

    @property
    def factories(self) -> int:
        return self.attributes.factories

    @factories.setter
    def factories(self, value: int) -> None:
        self.attributes.factories = value

    @property
    def resources(self) -> int:
        return self.attributes.resources

    @resources.setter
    def resources(self, value: int) -> None:
        self.attributes.resources = value

    @property
    def max_factories(self) -> int:
        return self.attributes.max_factories

    @property
    def total_victory_points(self) -> int:
        return self.attributes.total_victory_points

    @property
    def value(self) -> float:
        """Weighted attribute value; zero for impassable and ocean nodes."""
        if not self.is_passable_land:
            return 0.0
        return state_value(self.attributes, self.economy)


class StateGraph:
    """All state nodes of one generation run."""

    def __init__(self, nodes: Sequence[StateNode]):
        self.nodes: List[StateNode] = list(nodes)
        self.by_id: Dict[int, StateNode] = {node.id: node for node in self.nodes}
        # Dense position of every node, used by array-backed algorithms
        self.index: Dict[int, int] = {node.id: i for i, node in enumerate(self.nodes)}

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __getitem__(self, state_id: int) -> StateNode:
        return self.by_id[state_id]

    @property
    def passable_land(self) -> List[StateNode]:
        return [node for node in self.nodes if node.is_passable_land]

    @property
    def passable_land_count(self) -> int:
        return sum(1 for node in self.nodes if node.is_passable_land)

    @property
    def ocean_nodes(self) -> List[StateNode]:
        return [node for node in self.nodes if node.is_ocean]

    def edge_count(self) -> int:
        return sum(len(node.adjacent_ids) for node in self.nodes) // 2


class StateGraphBuilder:
    """Builds a StateGraph from game states and provinces."""

    def __init__(
        self,
        states: Sequence[State],
        provinces: Iterable[Province],
        ocean_clusters: Iterable[Iterable[int]] = (),
        economy: Optional[EconomySettings] = None,
        prng: Optional[MapPRNG] = None,
    ):
        """
        Initialize the builder.

        Args:
            states: States read from the game files
            provinces: Provinces with coastal flag and adjacency
            ocean_clusters: Province ID groups classified as sea regions
            economy: Attribute ceilings and value weights
            prng: Run generator
        """
        self.states = list(states)
        self.provinces: Mapping[int, Province] = {p.id: p for p in provinces}
        self.ocean_clusters = [list(cluster) for cluster in ocean_clusters]
        self.economy = economy or EconomySettings()
        self.prng = prng or MapPRNG(0)

        self.adjacency: Dict[int, Set[int]] = build_adjacency(self.provinces.values())
        self.province_owner: Dict[int, StateNode] = {}

    def build(self) -> StateGraph:
        """
        Build the complete state graph.

        Returns:
            StateGraph with archetypes, attributes and adjacency assigned
        """
        logger.info("Building state graph", states=len(self.states))

        self._validate_states()

        nodes = self._create_state_nodes()
        ocean_nodes = self._create_ocean_nodes()
        nodes.extend(ocean_nodes)

        self._discover_adjacency(nodes)

        graph = StateGraph(nodes)
        logger.info(
            "State graph built",
            nodes=len(graph),
            ocean_nodes=len(ocean_nodes),
            passable_land=graph.passable_land_count,
            edges=graph.edge_count(),
        )
        return graph

    def _validate_states(self) -> None:
        seen_states: Set[int] = set()
        seen_provinces: Dict[int, int] = {}

        for state in self.states:
            if state.id in seen_states:
                raise InvalidStateGraphError(f"Duplicate state id {state.id}")
            seen_states.add(state.id)

            if not state.provinces:
                raise InvalidStateGraphError(f"State {state.id} has no provinces")

            for province_id in state.provinces:
                if province_id in seen_provinces:
                    raise InvalidStateGraphError(
                        f"Province {province_id} belongs to states "
                        f"{seen_provinces[province_id]} and {state.id}"
                    )
                seen_provinces[province_id] = state.id

    def _create_state_nodes(self) -> List[StateNode]:
        """Create land state nodes; consumes archetype and economy draws."""
        archetypes = stratified_archetypes(len(self.states), self.prng)

        nodes: List[StateNode] = []
        for state, archetype in zip(self.states, archetypes):
            attributes = generate_economy(
                archetype, state.total_victory_points, self.economy, self.prng
            )
            is_coastal = any(
                self.provinces[p].is_coastal for p in state.provinces if p in self.provinces
            )
            node = StateNode(
                id=state.id,
                provinces=tuple(state.provinces),
                economy=self.economy,
                archetype=archetype,
                attributes=attributes,
                is_impassable=state.is_impassable,
                is_coastal=is_coastal,
                name=state.name,
                manpower=state.manpower,
            )
            for province_id in node.provinces:
                self.province_owner[province_id] = node
            nodes.append(node)

        logger.debug("Created state nodes", count=len(nodes))
        return nodes

    def _create_ocean_nodes(self) -> List[StateNode]:
        """Split every sea cluster into connected components, one node each."""
        nodes: List[StateNode] = []
        next_id = -1

        for cluster in self.ocean_clusters:
            sea_provinces = [p for p in cluster if self._is_sea_province(p)]
            for component in self._connected_components(sea_provinces):
                node = StateNode(
                    id=next_id,
                    provinces=tuple(component),
                    economy=self.economy,
                    is_ocean=True,
                )
                for province_id in component:
                    self.province_owner[province_id] = node
                nodes.append(node)
                next_id -= 1

        logger.debug("Created ocean nodes", count=len(nodes))
        return nodes

    def _is_sea_province(self, province_id: int) -> bool:
        if province_id in self.province_owner:
            return False
        province = self.provinces.get(province_id)
        return province is None or province.type != ProvinceType.LAND

    def _connected_components(self, provinces: List[int]) -> List[List[int]]:
        remaining = dict.fromkeys(provinces)
        components: List[List[int]] = []

        for start in provinces:
            if start not in remaining:
                continue
            del remaining[start]
            component = [start]
            stack = [start]
            while stack:
                current = stack.pop()
                for neighbor in sorted(self.adjacency.get(current, ())):
                    if neighbor in remaining:
                        del remaining[neighbor]
                        component.append(neighbor)
                        stack.append(neighbor)
            components.append(component)

        return components

    def _discover_adjacency(self, nodes: List[StateNode]) -> None:
        """
        Link every pair of nodes whose provinces touch.

        Equivalent to testing every unordered pair of states for a
        province-level contact, but walks the province adjacency once through
        the ownership index instead.
        """
        for node in nodes:
            for province_id in node.provinces:
                for neighbor_province in sorted(self.adjacency.get(province_id, ())):
                    other = self.province_owner.get(neighbor_province)
                    if other is not None and other is not node:
                        node.link(other)
