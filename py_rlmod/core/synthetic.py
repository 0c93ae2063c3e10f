"""
Synthetic state sets for demos and tests.

Builds a rectangular grid of single-province states with 4-neighbour
adjacency plus random diagonal links, marks an exact fraction of them
impassable and optionally adds a strip of sea provinces along the west edge.
"""

import math
from typing import Dict, List, NamedTuple, Set

from .prng import MapPRNG
from .provinces import Province, ProvinceType, State, VictoryPoint


class SyntheticMap(NamedTuple):
    """Inputs for the generator."""

    states: List[State]
    provinces: List[Province]
    ocean_clusters: List[List[int]]


def _grid_shape(count: int) -> tuple:
    width = max(1, int(math.sqrt(count * 1.6)))
    height = math.ceil(count / width)
    return width, height


def generate_synthetic_states(
    count: int,
    impassable_fraction: float = 0.1,
    seed: int = 114514,
    diagonal_chance: float = 0.2,
    max_victory_points: int = 50,
    with_ocean: bool = False,
) -> SyntheticMap:
    """
    Generate a synthetic map.

    Args:
        count: Number of land states
        impassable_fraction: Exact share of states marked impassable (rounded down)
        seed: Seed for the synthetic layout, independent of the generation seed
        diagonal_chance: Probability of linking a state to its south-east neighbour
        max_victory_points: Upper bound (exclusive) for a state's victory points
        with_ocean: Add a column of sea provinces west of the grid

    Returns:
        SyntheticMap with states, provinces and ocean clusters
    """
    prng = MapPRNG(seed)
    width, height = _grid_shape(count)

    adjacency: Dict[int, Set[int]] = {i: set() for i in range(count)}

    def connect(a: int, b: int) -> None:
        if 0 <= b < count and a != b:
            adjacency[a].add(b)
            adjacency[b].add(a)

    for i in range(count):
        x, y = i % width, i // width
        if x + 1 < width:
            connect(i, i + 1)
        if y + 1 < height:
            connect(i, i + width)
        if x + 1 < width and y + 1 < height and prng.random() < diagonal_chance:
            connect(i, i + width + 1)

    impassable = set(prng.sample(range(count), int(count * impassable_fraction)))

    states: List[State] = []
    for i in range(count):
        victory_points = []
        value = prng.randint(0, max_victory_points)
        if value > 0:
            victory_points.append(VictoryPoint(province_id=i + 1, value=value))
        states.append(
            State(
                id=i + 1,
                name=f"State {i + 1}",
                provinces=[i + 1],
                is_impassable=i in impassable,
                victory_points=victory_points,
                manpower=prng.randint(1000, 100000),
            )
        )

    provinces: List[Province] = []
    ocean_clusters: List[List[int]] = []
    sea_ids: List[int] = []

    if with_ocean:
        # One sea province per grid row, linked to each other and to the west column
        sea_base = count + 1
        for row in range(height):
            sea_ids.append(sea_base + row)
        ocean_clusters.append(list(sea_ids))

    for i in range(count):
        neighbors = {n + 1 for n in adjacency[i]}
        is_coastal = False
        if with_ocean and i % width == 0:
            neighbors.add(sea_ids[i // width])
            is_coastal = True
        provinces.append(
            Province(id=i + 1, is_coastal=is_coastal, adjacencies=frozenset(neighbors))
        )

    for row, sea_id in enumerate(sea_ids):
        neighbors = set()
        if row > 0:
            neighbors.add(sea_ids[row - 1])
        if row + 1 < len(sea_ids):
            neighbors.add(sea_ids[row + 1])
        land = row * width
        if land < count:
            neighbors.add(land + 1)
        provinces.append(
            Province(id=sea_id, type=ProvinceType.SEA, adjacencies=frozenset(neighbors))
        )

    return SyntheticMap(states, provinces, ocean_clusters)
