"""
Tests for economic attribute generation and state valuation.

Tests cover:
- Attribute bands per archetype
- Clamping rules
- Normalized state value
"""

import pytest

from py_rlmod.config.generator_settings import EconomySettings
from py_rlmod.core.archetypes import Archetype
from py_rlmod.core.economy import EconomicAttributes, clamp, generate_economy, state_value
from py_rlmod.core.prng import MapPRNG


class TestClamp:
    """Test the clamp helper."""

    def test_inside_range(self):
        assert clamp(5, 0, 10) == 5

    def test_below_and_above(self):
        assert clamp(-3, 0, 10) == 0
        assert clamp(42, 0, 10) == 10

    def test_ceiling_wins_over_floor(self):
        """A floor above the ceiling collapses onto the ceiling."""
        assert clamp(3, 5, 2) == 2
        assert clamp(9, 5, 2) == 2


class TestGenerateEconomy:
    """Test attribute generation bands."""

    def setup_method(self):
        self.economy = EconomySettings()
        self.prng = MapPRNG(114514)

    def _draw(self, archetype, count=300):
        return [generate_economy(archetype, 0, self.economy, self.prng) for _ in range(count)]

    def test_industrial_bands(self):
        """Industrial states have a high cap and at least half of it built."""
        for attributes in self._draw(Archetype.INDUSTRIAL):
            assert 17 <= attributes.max_factories <= 25
            assert int(attributes.max_factories * 0.5) <= attributes.factories
            assert attributes.factories <= int(attributes.max_factories * 0.7)
            assert 0 <= attributes.resources <= 180

    def test_resource_bands(self):
        """Resource states are rich in resources and poor in factories."""
        for attributes in self._draw(Archetype.RESOURCE):
            assert 2 <= attributes.max_factories <= 7
            assert 420 <= attributes.resources <= 600
            assert attributes.factories <= int(attributes.resources * 0.005)
            assert attributes.factories <= int(attributes.max_factories * 0.7)

    def test_balanced_bands(self):
        """Balanced states keep resources near fifty per factory."""
        for attributes in self._draw(Archetype.BALANCED):
            assert 7 <= attributes.max_factories <= 17
            assert int(attributes.max_factories * 0.3) <= attributes.factories
            assert attributes.factories <= int(attributes.max_factories * 0.7)
            assert 0 <= attributes.resources <= 600
            assert abs(attributes.resources - attributes.factories * 50) <= 50

    def test_factories_never_exceed_cap(self):
        for archetype in Archetype:
            for attributes in self._draw(archetype, 100):
                assert 0 <= attributes.factories <= attributes.max_factories

    def test_victory_points_carried(self):
        attributes = generate_economy(Archetype.BALANCED, 12, self.economy, self.prng)
        assert attributes.total_victory_points == 12

    def test_reproducible(self):
        a = generate_economy(Archetype.INDUSTRIAL, 3, self.economy, MapPRNG(9))
        b = generate_economy(Archetype.INDUSTRIAL, 3, self.economy, MapPRNG(9))
        assert a == b


class TestStateValue:
    """Test state valuation."""

    def setup_method(self):
        self.economy = EconomySettings()

    def test_empty_state(self):
        assert state_value(EconomicAttributes(), self.economy) == 0.0

    def test_full_state(self):
        """Every attribute at its ceiling scores 100."""
        attributes = EconomicAttributes(
            factories=25, max_factories=25, resources=600, total_victory_points=50
        )
        assert state_value(attributes, self.economy) == pytest.approx(100.0)

    def test_victory_points_capped(self):
        capped = EconomicAttributes(total_victory_points=50)
        excess = EconomicAttributes(total_victory_points=500)
        assert state_value(excess, self.economy) == pytest.approx(state_value(capped, self.economy))

    def test_weighted_terms(self):
        attributes = EconomicAttributes(factories=10, max_factories=20, resources=300)
        expected = 10 / 25 * 100 * 0.4 + 20 / 25 * 100 * 0.15 + 300 / 600 * 100 * 0.25
        assert state_value(attributes, self.economy) == pytest.approx(expected)
