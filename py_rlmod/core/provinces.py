"""
Input records supplied by the map file reader.

Provinces are the finest map unit; states group provinces and are the unit
the partitioner works on.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Set

from pydantic import BaseModel, ConfigDict, Field


class ProvinceType(str, Enum):
    """Terrain class of a province."""

    LAND = "land"
    SEA = "sea"
    LAKE = "lake"


class Province(BaseModel):
    """A single province with its adjacency."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Unique province identifier")
    type: ProvinceType = Field(default=ProvinceType.LAND, description="Land, sea or lake")
    is_coastal: bool = Field(default=False, description="Whether the province touches the sea")
    adjacencies: FrozenSet[int] = Field(
        default_factory=frozenset, description="IDs of adjacent provinces"
    )


class VictoryPoint(BaseModel):
    """Victory point placed on a province."""

    model_config = ConfigDict(frozen=True)

    province_id: int = Field(description="Province carrying the victory point")
    value: int = Field(ge=0, description="Victory point value")


class State(BaseModel):
    """A state as read from the game files."""

    id: int = Field(ge=0, description="Unique state identifier")
    name: str = Field(default="", description="State name")
    provinces: List[int] = Field(default_factory=list, description="Province IDs in this state")
    is_impassable: bool = Field(default=False, description="Whether the state blocks movement")
    victory_points: List[VictoryPoint] = Field(
        default_factory=list, description="Victory points inside the state"
    )
    manpower: int = Field(default=0, ge=0, description="State manpower")

    @property
    def total_victory_points(self) -> int:
        return sum(vp.value for vp in self.victory_points)


def build_adjacency(provinces: Iterable[Province]) -> Dict[int, Set[int]]:
    """
    Build a symmetric province adjacency map.

    Args:
        provinces: Provinces with (possibly one-sided) adjacency lists

    Returns:
        Mapping of province ID to the set of adjacent province IDs
    """
    adjacency: Dict[int, Set[int]] = {}
    for province in provinces:
        adjacency.setdefault(province.id, set())
        for other in province.adjacencies:
            if other == province.id:
                continue
            adjacency[province.id].add(other)
            adjacency.setdefault(other, set()).add(province.id)
    return adjacency
