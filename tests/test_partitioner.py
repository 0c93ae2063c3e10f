"""
Unit tests for country partitioning.

Tests cover:
- Request validation
- Seed selection
- Candidate scoring
- Growth and border bookkeeping
- Finalization of leftover land, impassable and ocean states
"""

import pytest

from py_rlmod.config.generator_settings import EconomySettings, PartitionSettings
from py_rlmod.core.countries import CountryTagPool
from py_rlmod.core.distance_cache import ShortestPathCache
from py_rlmod.core.economy import EconomicAttributes
from py_rlmod.core.partitioner import PartitionContext, PartitionPhase, Partitioner
from py_rlmod.core.prng import MapPRNG
from py_rlmod.core.state_graph import StateGraphBuilder
from py_rlmod.core.validator import is_country_connected, validate_partition
from py_rlmod.errors import PartitionConfigurationError

from graph_helpers import build_graph, grid_edges, line_edges, sea_province, single_province_map


def _owned_ids(context):
    return sorted(node_id for country in context.countries for node_id in country.members)


class TestRequestValidation:
    """Test rejection of impossible requests."""

    def setup_method(self):
        self.graph = build_graph(5, line_edges(5), impassable=[3])

    def test_zero_countries(self):
        with pytest.raises(PartitionConfigurationError):
            Partitioner(self.graph, 0, MapPRNG(1))

    def test_more_countries_than_land(self):
        """Impassable states do not count as seed candidates."""
        with pytest.raises(PartitionConfigurationError):
            Partitioner(self.graph, 5, MapPRNG(1))

    def test_more_countries_than_tags(self):
        with pytest.raises(PartitionConfigurationError):
            Partitioner(self.graph, 2, MapPRNG(1), tag_pool=CountryTagPool(["AAA"]))

    def test_exact_land_count_accepted(self):
        context = Partitioner(self.graph, 4, MapPRNG(1)).run()
        assert len(context.countries) == 4
        assert all(country.land_state_count == 1 for country in context.countries)


class TestSeedSelection:
    """Test seed selection."""

    def test_seeds_are_distinct_passable_land(self):
        graph = build_graph(40, grid_edges(8, 5), impassable=[3, 11, 19, 27])
        seeds = Partitioner(graph, 10, MapPRNG(7)).select_seeds()
        assert len(seeds) == 10
        assert len({seed.id for seed in seeds}) == 10
        assert all(seed.is_passable_land for seed in seeds)

    def test_band_collapse_falls_back(self):
        """With too few candidates for a band, the pick is uniform."""
        graph = build_graph(3, line_edges(3), impassable=[2])
        seeds = Partitioner(graph, 2, MapPRNG(3)).select_seeds()
        assert sorted(seed.id for seed in seeds) == [1, 3]

    def test_second_seed_from_middle_band(self):
        """On a line, the second seed sits at a moderate distance from the first."""
        graph = build_graph(41, line_edges(41))
        seeds = Partitioner(graph, 2, MapPRNG(11)).select_seeds()
        distances = ShortestPathCache(graph)
        others = sorted(
            distances.distance(seeds[0].id, node.id) for node in graph if node is not seeds[0]
        )
        low, high = int(40 * 0.425), int(40 * 0.575)
        picked = distances.distance(seeds[0].id, seeds[1].id)
        assert others[low] <= picked <= others[high - 1]

    def test_seed_rows_are_cached(self):
        graph = build_graph(20, grid_edges(5, 4))
        partitioner = Partitioner(graph, 4, MapPRNG(2))
        seeds = partitioner.select_seeds()
        assert partitioner.distances.cached_sources() == len(seeds)


class TestScoring:
    """Test candidate scoring terms."""

    def setup_method(self):
        self.graph = build_graph(5, line_edges(5))
        self.distances = ShortestPathCache(self.graph)
        self.context = PartitionContext(self.graph, self.distances)
        self.first = self.context.found_country(self.graph[1], "AAA")
        self.second = self.context.found_country(self.graph[5], "BBB")

    def test_dispersion_uses_rival_seeds(self):
        partitioner = Partitioner(self.graph, 2, MapPRNG(1), distances=self.distances)
        assert partitioner.dispersion(self.graph[3], self.first, self.context) == 2.0
        assert partitioner.dispersion(self.graph[2], self.first, self.context) == 3.0
        assert partitioner.dispersion(self.graph[2], self.second, self.context) == 1.0

    def test_type_match(self):
        partitioner = Partitioner(self.graph, 2, MapPRNG(1), distances=self.distances)
        node = self.graph[2]
        expected = 1.0 if node.archetype == self.first.archetype else 0.0
        assert partitioner.type_match(node, self.context) == expected
        # node 3 borders nobody yet
        assert partitioner.type_match(self.graph[3], self.context) == 0.0

    def test_value_only_picks_richest(self):
        options = PartitionSettings(value_weight=1.0, dispersion_weight=0.0, type_match_weight=0.0)
        graph = build_graph(3, line_edges(3))
        graph[1].attributes = EconomicAttributes()
        graph[3].attributes = EconomicAttributes(factories=10, max_factories=20)
        context = PartitionContext(graph, ShortestPathCache(graph))
        country = context.found_country(graph[2], "AAA")

        partitioner = Partitioner(graph, 1, MapPRNG(1), options=options)
        assert partitioner.select_candidate(country, [graph[1], graph[3]], context) is graph[3]

    def test_all_zero_scores_keep_first(self):
        options = PartitionSettings(value_weight=1.0, dispersion_weight=0.0, type_match_weight=0.0)
        graph = build_graph(3, line_edges(3))
        graph[1].attributes = EconomicAttributes()
        graph[3].attributes = EconomicAttributes()
        context = PartitionContext(graph, ShortestPathCache(graph))
        country = context.found_country(graph[2], "AAA")

        partitioner = Partitioner(graph, 1, MapPRNG(1), options=options)
        assert partitioner.select_candidate(country, [graph[3], graph[1]], context) is graph[3]

    def test_claimed_candidates_skipped(self):
        partitioner = Partitioner(self.graph, 2, MapPRNG(1), distances=self.distances)
        assert partitioner.select_candidate(self.first, [self.graph[5]], self.context) is None


class TestPartitionContext:
    """Test claim bookkeeping."""

    def setup_method(self):
        self.graph = build_graph(5, line_edges(5))
        self.context = PartitionContext(self.graph, ShortestPathCache(self.graph))

    def test_double_claim_rejected(self):
        country = self.context.found_country(self.graph[1], "AAA")
        with pytest.raises(ValueError):
            self.context.claim(country, self.graph[1])
        with pytest.raises(ValueError):
            self.context.found_country(self.graph[1], "BBB")

    def test_claim_removes_node_from_rival_borders(self):
        first = self.context.found_country(self.graph[1], "AAA")
        second = self.context.found_country(self.graph[3], "BBB")
        assert 2 in first.border and 2 in second.border

        self.context.claim(first, self.graph[2])
        assert 2 not in second.border
        assert self.graph[2].owner == first.index
        assert self.context.owner_of(self.graph[2]) is first
        assert list(second.border) == [4]

    def test_bordering_countries(self):
        first = self.context.found_country(self.graph[1], "AAA")
        second = self.context.found_country(self.graph[3], "BBB")
        assert self.context.bordering_countries(self.graph[2]) == [first, second]


class TestPartitionRun:
    """Test complete partition runs."""

    def test_grid_fully_partitioned(self):
        graph = build_graph(100, grid_edges(10, 10))
        context = Partitioner(graph, 5, MapPRNG(114514)).run()

        assert context.phase == PartitionPhase.DONE
        assert len(context.countries) == 5
        assert _owned_ids(context) == list(range(1, 101))
        assert len({country.tag for country in context.countries}) == 5
        assert validate_partition(context.countries).is_connected

    def test_borders_hold_only_unclaimed_states(self):
        graph = build_graph(60, grid_edges(10, 6), impassable=[15, 16, 45])
        partitioner = Partitioner(graph, 4, MapPRNG(5))
        context = PartitionContext(graph, partitioner.distances)
        for seed in partitioner.select_seeds():
            context.found_country(seed, partitioner.tag_pool.draw(partitioner.prng))

        partitioner.grow(context)
        assert context.phase == PartitionPhase.STALLED
        for country in context.countries:
            for node_id in country.border:
                assert node_id not in context.claimed
        assert all(is_country_connected(c) for c in context.countries)

    def test_land_behind_impassable_stays_connected(self):
        """Land reachable only across an impassable state joins a neighbouring country."""
        graph = build_graph(5, line_edges(5), impassable=[4])
        context = Partitioner(graph, 1, MapPRNG(1)).run()
        country = context.countries[0]
        assert country.land_state_count == 4
        assert country.contains(graph[4])
        assert is_country_connected(country)
        assert context.unassigned == []

    def test_two_countries_across_impassable(self):
        graph = build_graph(5, line_edges(5), impassable=[4])
        context = Partitioner(graph, 2, MapPRNG(9)).run()
        assert sum(c.land_state_count for c in context.countries) == 4
        assert validate_partition(context.countries).is_connected

    def test_isolated_impassable_unassigned(self):
        graph = build_graph(3, [(1, 2)], impassable=[3])
        context = Partitioner(graph, 1, MapPRNG(1)).run()
        assert context.unassigned == [graph[3]]
        assert graph[3].owner is None

    def test_isolated_land_is_still_assigned(self):
        """Land no country can reach still gets an owner."""
        graph = build_graph(4, [(1, 2), (3, 4)])
        context = Partitioner(graph, 1, MapPRNG(1)).run()
        assert _owned_ids(context) == [1, 2, 3, 4]
        assert not is_country_connected(context.countries[0])

    def test_unreached_pockets_joined_by_impassable_share_owner(self):
        """Unreached land linked through an impassable state goes to one country."""
        # six unconnected seeds, then 7-8-9 with 8 impassable
        graph = build_graph(9, [(7, 8), (8, 9)], impassable=[8])
        partitioner = Partitioner(graph, 6, MapPRNG(1))
        context = PartitionContext(graph, partitioner.distances)
        for state_id in range(1, 7):
            context.found_country(graph[state_id], f"T{state_id:02d}")

        partitioner.finalize(context)
        assert graph[7].owner is not None
        assert graph[7].owner == graph[9].owner
        assert graph[8].owner == graph[7].owner
        assert context.unassigned == []

    def test_ocean_attached_to_land_owner(self):
        states, provinces = single_province_map(3, line_edges(3))
        provinces.append(sea_province(10, [1, 2, 3]))
        graph = StateGraphBuilder(
            states, provinces, [[10]], economy=EconomySettings(), prng=MapPRNG(1)
        ).build()
        context = Partitioner(graph, 2, MapPRNG(1)).run()

        ocean = graph[-1]
        assert ocean.owner is not None
        owner = context.countries[ocean.owner]
        assert owner.contains(ocean)
        assert owner.land_state_count >= 1
        assert sum(c.land_state_count for c in context.countries) == 3

    def test_deterministic(self):
        def run():
            graph = build_graph(80, grid_edges(10, 8), impassable=[5, 25, 44, 63], seed=3)
            context = Partitioner(graph, 6, MapPRNG(42)).run()
            return [(c.tag, list(c.members)) for c in context.countries]

        assert run() == run()
