"""
Core country generation functionality.
"""

from .archetypes import Archetype, ArchetypeProfile, ARCHETYPE_PROFILES
from .balancer import ValueBalancer
from .countries import CountryNode, CountryTagPool
from .distance_cache import UNREACHABLE, ShortestPathCache
from .generator import CountryRecord, GenerationResult, MapGenerator, StateRecord
from .partitioner import PartitionContext, PartitionPhase, Partitioner
from .prng import MapPRNG
from .provinces import Province, ProvinceType, State, VictoryPoint
from .state_graph import StateGraph, StateGraphBuilder, StateNode
from .validator import ValidationResult, validate_partition

__all__ = ['Archetype', 'ArchetypeProfile', 'ARCHETYPE_PROFILES',
           'ValueBalancer', 'CountryNode', 'CountryTagPool',
           'UNREACHABLE', 'ShortestPathCache',
           'CountryRecord', 'GenerationResult', 'MapGenerator', 'StateRecord',
           'PartitionContext', 'PartitionPhase', 'Partitioner', 'MapPRNG',
           'Province', 'ProvinceType', 'State', 'VictoryPoint',
           'StateGraph', 'StateGraphBuilder', 'StateNode',
           'ValidationResult', 'validate_partition']
