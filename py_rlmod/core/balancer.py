"""
Country value balancing.

Target values are sampled from a normal distribution and matched rank for
rank against the realized country values. Countries whose value is off by
more than the dead zone have the factories and resources of their land
states rescaled according to each state's archetype. This is a single
pass: it narrows the gap but does not guarantee the dead zone is reached.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from ..config.generator_settings import BalanceSettings, EconomySettings
from .archetypes import (
    AMPLIFY_FLOOR,
    AMPLIFY_GAIN,
    DAMP_CAP,
    DAMP_GAIN,
    JITTER_RANGE,
    AdjustRule,
    get_profile,
)
from .countries import CountryNode
from .economy import clamp
from .prng import MapPRNG
from .state_graph import StateNode

logger = structlog.get_logger()


@dataclass
class BalanceAdjustment:
    """Outcome of balancing one country."""

    tag: str
    current_value: float
    target_value: float
    ratio: float
    adjusted: bool
    new_value: float


class ValueBalancer:
    """Rescales member attributes so country values follow a target distribution."""

    def __init__(
        self,
        prng: MapPRNG,
        options: Optional[BalanceSettings] = None,
        economy: Optional[EconomySettings] = None,
    ):
        self.prng = prng
        self.options = options or BalanceSettings()
        self.economy = economy or EconomySettings()

    def sample_targets(self, count: int) -> List[float]:
        """Draw ``count`` target values and sort them ascending."""
        return sorted(
            self.prng.gauss(self.options.value_mean, self.options.value_std_dev)
            for _ in range(count)
        )

    def balance(self, countries: Sequence[CountryNode]) -> List[BalanceAdjustment]:
        """
        Run the balancing pass.

        Args:
            countries: Finalized countries

        Returns:
            One adjustment record per country, in ascending current-value order
        """
        logger.info("Balancing country values", countries=len(countries))

        targets = self.sample_targets(len(countries))
        # sorted() is stable, equal values keep country order
        ordered = sorted(countries, key=lambda country: country.value)

        adjustments: List[BalanceAdjustment] = []
        for country, target in zip(ordered, targets):
            current = country.value
            ratio = target / current if current else math.nan

            if not self.needs_adjustment(ratio):
                adjustments.append(
                    BalanceAdjustment(country.tag, current, target, ratio, False, current)
                )
                continue

            for node in country.land_members():
                self.adjust_state(node, ratio)

            adjustments.append(
                BalanceAdjustment(country.tag, current, target, ratio, True, country.value)
            )

        adjusted = sum(1 for a in adjustments if a.adjusted)
        logger.info("Balancing finished", adjusted=adjusted, skipped=len(adjustments) - adjusted)
        return adjustments

    def needs_adjustment(self, ratio: float) -> bool:
        """False for NaN ratios and ratios inside the dead zone."""
        if math.isnan(ratio) or math.isinf(ratio):
            return False
        return not (1 - self.options.dead_zone <= ratio <= 1 + self.options.dead_zone)

    def adjust_state(self, node: StateNode, ratio: float) -> None:
        """Rescale one land state's factories and resources by ``ratio``."""
        profile = get_profile(node.archetype)

        # Floors are computed from the values before this adjustment
        original_factories = node.factories
        original_resources = node.resources

        node.factories = self._apply_rule(
            profile.factory_rule,
            original_factories,
            ratio,
            profile.factory_floor,
            node.max_factories,
        )
        node.resources = self._apply_rule(
            profile.resource_rule,
            original_resources,
            ratio,
            profile.resource_floor,
            self.economy.max_resources,
        )

    def _apply_rule(
        self, rule: AdjustRule, original: int, ratio: float, floor: int, ceiling: int
    ) -> int:
        if rule == AdjustRule.AMPLIFY:
            scaled = int(original * ratio * AMPLIFY_GAIN)
            floor = max(floor, int(original * ratio * AMPLIFY_FLOOR))
        elif rule == AdjustRule.DAMP:
            scaled = int(original * min(ratio * DAMP_GAIN, DAMP_CAP))
        else:
            scaled = int(original * ratio * self.prng.uniform(*JITTER_RANGE))
        return clamp(scaled, floor, ceiling)
