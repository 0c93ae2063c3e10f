"""
Configuration modules for map generation.
"""

from .config import Settings, settings
from .generator_settings import (
    BalanceSettings,
    EconomySettings,
    GeneratorSettings,
    PartitionSettings,
)

__all__ = [
    "Settings",
    "settings",
    "BalanceSettings",
    "EconomySettings",
    "GeneratorSettings",
    "PartitionSettings",
]
