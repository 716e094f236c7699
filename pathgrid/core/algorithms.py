"""Algorithm registry: identifiers, display labels and the search() entry point."""

from typing import Dict, Optional, Type

from pathgrid.core.astar import AStarAlgo
from pathgrid.core.bfs import BFSAlgo
from pathgrid.core.dfs import DFSAlgo
from pathgrid.core.dijkstra import DijkstraAlgo
from pathgrid.core.errors import UnknownAlgorithmError
from pathgrid.core.grid import Grid
from pathgrid.core.search import SearchAlgo
from pathgrid.core.types import Position, SearchResult

ALGORITHMS: Dict[str, Type[SearchAlgo]] = {
    "dijkstra": DijkstraAlgo,
    "astar": AStarAlgo,
    "bfs": BFSAlgo,
    "dfs": DFSAlgo,
}

ALGORITHM_LABELS: Dict[str, str] = {
    "dijkstra": "Dijkstra",
    "astar": "A*",
    "bfs": "BFS",
    "dfs": "DFS",
}

_ALIASES = {"a*": "astar", "a-star": "astar", "a_star": "astar"}


def normalize_algorithm(identifier: str) -> str:
    key = (identifier or "").strip().lower()
    key = _ALIASES.get(key, key)
    if key not in ALGORITHMS:
        raise UnknownAlgorithmError(
            f"unknown algorithm {identifier!r}; expected one of {', '.join(ALGORITHMS)}",
            algorithm=identifier, error_code="ALGO_UNKNOWN")
    return key


def make_algo(identifier: str) -> SearchAlgo:
    key = normalize_algorithm(identifier)
    return ALGORITHMS[key](name=ALGORITHM_LABELS[key])


def search(identifier: str, grid: Grid, start: Optional[Position] = None,
           end: Optional[Position] = None) -> SearchResult:
    algo = make_algo(identifier)
    algo.init(grid, start, end)
    return algo.search()
