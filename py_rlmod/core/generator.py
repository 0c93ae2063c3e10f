"""
Country generation pipeline.

Process:
1. Check the request against the input states
2. Build the state graph (archetypes, attributes, ocean nodes, adjacency)
3. Partition passable land into countries
4. Balance country values
5. Validate the result

A single MapPRNG seeded from the settings is consumed in this order:
archetype stratification, per-state attribute generation in input order,
seed selection, tag draws, random picks while finalizing, target value
samples, balancing jitter. The same seed and inputs therefore always give
the same countries and attribute values.
"""

from typing import Iterable, List, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from ..config.generator_settings import GeneratorSettings
from ..errors import PartitionConfigurationError
from .archetypes import Archetype
from .balancer import BalanceAdjustment, ValueBalancer
from .countries import CountryNode, CountryTagPool
from .distance_cache import ShortestPathCache
from .partitioner import PartitionContext, Partitioner
from .prng import MapPRNG
from .provinces import Province, State
from .state_graph import StateGraph, StateGraphBuilder, StateNode
from .validator import ValidationResult, validate_partition

logger = structlog.get_logger()


class StateRecord(BaseModel):
    """Final attributes of one state, as handed to the script writer."""

    id: int
    name: str = ""
    archetype: Optional[Archetype] = None
    is_impassable: bool = False
    is_coastal: bool = False
    factories: int = 0
    max_factories: int = 0
    resources: int = 0
    victory_points: int = 0
    manpower: int = 0
    provinces: List[int] = Field(default_factory=list)


class CountryRecord(BaseModel):
    """A generated country, as handed to the script writer."""

    tag: str
    archetype: Optional[Archetype] = None
    seed_state: int
    value: float
    states: List[StateRecord] = Field(default_factory=list)


def state_record(node: StateNode) -> StateRecord:
    return StateRecord(
        id=node.id,
        name=node.name,
        archetype=node.archetype,
        is_impassable=node.is_impassable,
        is_coastal=node.is_coastal,
        factories=node.factories,
        max_factories=node.max_factories,
        resources=node.resources,
        victory_points=node.total_victory_points,
        manpower=node.manpower,
        provinces=list(node.provinces),
    )


def country_record(country: CountryNode) -> CountryRecord:
    """Snapshot a country; ocean members are left out."""
    return CountryRecord(
        tag=country.tag,
        archetype=country.archetype,
        seed_state=country.seed.id,
        value=country.value,
        states=[state_record(node) for node in country.members.values() if not node.is_ocean],
    )


class GenerationResult:
    """Everything produced by one generation run."""

    def __init__(
        self,
        graph: StateGraph,
        context: PartitionContext,
        adjustments: List[BalanceAdjustment],
        validation: ValidationResult,
        random_calls: int,
    ):
        self.graph = graph
        self.context = context
        self.adjustments = adjustments
        self.validation = validation
        self.random_calls = random_calls

    @property
    def countries(self) -> List[CountryNode]:
        return self.context.countries

    @property
    def unassigned(self) -> List[StateNode]:
        return self.context.unassigned

    def to_records(self) -> List[CountryRecord]:
        return [country_record(country) for country in self.countries]


class MapGenerator:
    """Generates balanced countries from game states."""

    def __init__(
        self,
        states: Sequence[State],
        provinces: Iterable[Province],
        ocean_clusters: Iterable[Iterable[int]] = (),
        settings: Optional[GeneratorSettings] = None,
        tag_pool: Optional[CountryTagPool] = None,
    ):
        """
        Initialize the generator.

        Args:
            states: States read from the game files
            provinces: Provinces with coastal flag and adjacency
            ocean_clusters: Province ID groups classified as sea regions
            settings: Generation settings
            tag_pool: Country tags to draw from
        """
        self.states = list(states)
        self.provinces = list(provinces)
        self.ocean_clusters = [list(cluster) for cluster in ocean_clusters]
        self.settings = settings or GeneratorSettings()
        self.tag_pool = tag_pool or CountryTagPool()

    def validate_request(self) -> None:
        """Reject impossible requests before any generation work."""
        count = self.settings.countries_count
        passable = sum(1 for state in self.states if not state.is_impassable)
        if count > passable:
            raise PartitionConfigurationError(
                f"Cannot create {count} countries from {passable} passable land states"
            )
        if count > len(self.tag_pool):
            raise PartitionConfigurationError(
                f"Cannot create {count} countries with {len(self.tag_pool)} available tags"
            )

    def generate(self) -> GenerationResult:
        """
        Run the full pipeline.

        Returns:
            GenerationResult with graph, countries, balancing log and validation
        """
        logger.info(
            "Starting country generation",
            states=len(self.states),
            countries=self.settings.countries_count,
            seed=self.settings.random_seed,
        )
        self.validate_request()

        prng = MapPRNG(self.settings.random_seed)

        graph = StateGraphBuilder(
            self.states,
            self.provinces,
            self.ocean_clusters,
            economy=self.settings.economy,
            prng=prng,
        ).build()

        distances = ShortestPathCache(graph)
        partitioner = Partitioner(
            graph,
            self.settings.countries_count,
            prng,
            distances=distances,
            # Fresh copy so repeated runs draw from the same pool
            tag_pool=CountryTagPool(self.tag_pool.available),
            options=self.settings.partition,
        )
        context = partitioner.run()

        adjustments: List[BalanceAdjustment] = []
        if self.settings.balance.enabled:
            balancer = ValueBalancer(prng, self.settings.balance, self.settings.economy)
            adjustments = balancer.balance(context.countries)

        validation = validate_partition(context.countries)
        logger.info(
            "Country generation finished",
            countries=len(context.countries),
            connected=validation.is_connected,
            value_std_dev=round(validation.value_std_dev, 2),
            random_calls=prng.call_count,
        )
        return GenerationResult(graph, context, adjustments, validation, prng.call_count)
