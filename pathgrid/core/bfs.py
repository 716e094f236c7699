from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set

from pathgrid.core.grid import Grid
from pathgrid.core.neighbors import neighbors
from pathgrid.core.search import SearchAlgo
from pathgrid.core.types import Cell, Position, SearchResult


@dataclass
class BFSAlgo(SearchAlgo):
    """Breadth-first search (unweighted shortest path).

    Each cell is enqueued once; its predecessor is fixed at that moment.
    """
    name: str = "BFS"

    queue: Deque[Cell] = field(default_factory=deque)
    discovered: Set[str] = field(default_factory=set)

    def _seed(self, start: Cell) -> None:
        self.queue = deque([start])
        self.discovered = {start.key}

    def _next(self) -> Optional[Cell]:
        return self.queue.popleft() if self.queue else None

    def _frontier_size(self) -> int:
        return len(self.queue)

    def _expand(self, u: Cell) -> List[Cell]:
        opened_now: List[Cell] = []
        for v in neighbors(self.grid, u):
            if v.key in self.discovered:
                continue
            self.discovered.add(v.key)
            v.predecessor = u.key
            v.cost = u.cost + 1
            self.queue.append(v)
            opened_now.append(v)
        return opened_now


def bfs(grid: Grid, start: Optional[Position] = None,
        end: Optional[Position] = None) -> SearchResult:
    algo = BFSAlgo()
    algo.init(grid, start, end)
    return algo.search()
