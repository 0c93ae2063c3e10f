"""
All-pairs shortest path cache over the state graph.

Edges have uniform hop cost, so every single-source query is a breadth
first search. Each search stores its whole result row, so any later query
touching either endpoint is answered from the cache. The traversable graph
never changes after construction, so cached rows stay valid for the run.
"""

from typing import Dict, Iterable

import numpy as np
import structlog
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import shortest_path

from .state_graph import StateGraph

logger = structlog.get_logger()

UNREACHABLE = -1


class ShortestPathCache:
    """Memoized hop distances between state nodes.

    Impassable nodes are cut out of the traversal graph, so paths never pass
    through them and an impassable node only reaches itself.
    """

    def __init__(self, graph: StateGraph):
        self.graph = graph
        self.size = len(graph)
        self.bfs_runs = 0
        self._rows: Dict[int, np.ndarray] = {}
        self._csgraph = self._build_csgraph()

    def _build_csgraph(self) -> csr_matrix:
        rows = []
        cols = []
        for node in self.graph.nodes:
            if node.is_impassable:
                continue
            i = self.graph.index[node.id]
            for neighbor in node.adjacent_nodes:
                if neighbor.is_impassable:
                    continue
                rows.append(i)
                cols.append(self.graph.index[neighbor.id])

        data = np.ones(len(rows), dtype=np.int8)
        return csr_matrix((data, (rows, cols)), shape=(self.size, self.size))

    def _search(self, index: int) -> np.ndarray:
        """Single-source BFS from a dense node index."""
        self.bfs_runs += 1
        distances = shortest_path(
            self._csgraph, directed=False, unweighted=True, indices=index
        )
        row = np.full(self.size, UNREACHABLE, dtype=np.int32)
        reachable = np.isfinite(distances)
        row[reachable] = distances[reachable].astype(np.int32)
        return row

    def row(self, state_id: int) -> np.ndarray:
        """
        Distances from one state to every node, indexed like ``graph.nodes``.

        Args:
            state_id: Source state ID

        Returns:
            Read-only int32 array; UNREACHABLE marks nodes with no path
        """
        index = self.graph.index[state_id]
        cached = self._rows.get(index)
        if cached is None:
            cached = self._search(index)
            cached.setflags(write=False)
            self._rows[index] = cached
        return cached

    def distance(self, a: int, b: int) -> int:
        """
        Hop count between two states.

        Args:
            a: First state ID
            b: Second state ID

        Returns:
            Number of edges on a shortest path, or UNREACHABLE
        """
        if a == b:
            return 0

        i = self.graph.index[a]
        j = self.graph.index[b]
        low, high = (i, j) if i < j else (j, i)

        cached = self._rows.get(low)
        if cached is not None:
            return int(cached[high])
        cached = self._rows.get(high)
        if cached is not None:
            return int(cached[low])

        return int(self.row(self.graph.nodes[low].id)[high])

    def is_cached(self, a: int, b: int) -> bool:
        if a == b:
            return True
        return self.graph.index[a] in self._rows or self.graph.index[b] in self._rows

    def warm(self, state_ids: Iterable[int]) -> None:
        """Run the searches for the given sources ahead of time."""
        for state_id in state_ids:
            self.row(state_id)

    def compute_all(self) -> np.ndarray:
        """
        Fill the cache for every source.

        Returns:
            Dense (n, n) distance matrix in node order
        """
        logger.info("Computing all-pairs distances", nodes=self.size)
        matrix = np.empty((self.size, self.size), dtype=np.int32)
        for node in self.graph.nodes:
            matrix[self.graph.index[node.id]] = self.row(node.id)
        return matrix

    def cached_sources(self) -> int:
        return len(self._rows)

    def clear(self) -> None:
        self._rows.clear()
