"""
Settings for country generation.

This module defines the tunable limits, weights and bands used by the
state graph builder, the partitioner and the value balancer.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .config import Settings


class EconomySettings(BaseModel):
    """Limits and weights for state economic attributes."""

    # Attribute ceilings
    max_factories: int = Field(default=25, ge=1, description="Highest factory cap any state can have")
    max_resources: int = Field(default=600, ge=1, description="Highest resource amount any state can have")
    max_victory_points: int = Field(
        default=50, ge=1, description="Victory point total that maps to a full value score"
    )

    # Value weights
    factories_weight: float = Field(default=0.4, ge=0, description="Weight of factories in state value")
    max_factories_weight: float = Field(
        default=0.15, ge=0, description="Weight of the factory cap in state value"
    )
    resources_weight: float = Field(default=0.25, ge=0, description="Weight of resources in state value")
    victory_points_weight: float = Field(
        default=0.2, ge=0, description="Weight of victory points in state value"
    )


class PartitionSettings(BaseModel):
    """Settings for seed selection and country growth."""

    # Candidate score weights
    value_weight: float = Field(default=0.5, ge=0, description="Weight of normalized state value")
    dispersion_weight: float = Field(
        default=0.3, ge=0, description="Weight of normalized distance to rival seeds"
    )
    type_match_weight: float = Field(
        default=0.2, ge=0, description="Weight of normalized archetype agreement"
    )

    # Seed selection band, as fractions of the candidate ordering
    seed_band_low: float = Field(default=0.425, ge=0, le=1, description="Lower percentile of the seed band")
    seed_band_high: float = Field(default=0.575, ge=0, le=1, description="Upper percentile of the seed band")

    @model_validator(mode="after")
    def _check_band(self) -> "PartitionSettings":
        if self.seed_band_low > self.seed_band_high:
            raise ValueError("seed_band_low must not exceed seed_band_high")
        return self


class BalanceSettings(BaseModel):
    """Settings for the post-partition value balancing pass."""

    enabled: bool = Field(default=True, description="Whether to run the balancing pass")
    value_mean: float = Field(default=5000.0, description="Mean of the target value distribution")
    value_std_dev: float = Field(default=1000.0, ge=0, description="Standard deviation of target values")
    dead_zone: float = Field(
        default=0.05, ge=0, lt=1, description="Ratios within 1 +/- dead_zone are left untouched"
    )


class GeneratorSettings(BaseModel):
    """Complete settings for one generation run."""

    countries_count: int = Field(default=100, ge=1, description="Target number of countries")
    random_seed: int = Field(default=114514, description="Seed for the generation PRNG")

    economy: EconomySettings = Field(default_factory=EconomySettings)
    partition: PartitionSettings = Field(default_factory=PartitionSettings)
    balance: BalanceSettings = Field(default_factory=BalanceSettings)

    @classmethod
    def from_settings(
        cls, settings: Settings, countries_count: Optional[int] = None
    ) -> "GeneratorSettings":
        """Build generator settings from process-level settings."""
        return cls(
            countries_count=(
                settings.countries_count if countries_count is None else countries_count
            ),
            random_seed=settings.random_seed,
            balance=BalanceSettings(
                value_mean=settings.value_mean,
                value_std_dev=settings.value_std_dev,
            ),
        )
