from dataclasses import dataclass, field
from typing import List, Optional

from pathgrid.core.grid import Grid
from pathgrid.core.neighbors import neighbors
from pathgrid.core.search import SearchAlgo
from pathgrid.core.types import Cell, Position, SearchResult, WALL


@dataclass
class DFSAlgo(SearchAlgo):
    """Depth-first search. Finds *a* path, not necessarily the shortest."""
    name: str = "DFS"

    stack: List[Cell] = field(default_factory=list)

    def _working_copy(self, grid: Grid) -> Grid:
        work = grid.snapshot()
        # walls count as visited so they never reach the stack
        for c in work.iter_cells():
            if c.category == WALL:
                c.visited = True
        return work

    def _seed(self, start: Cell) -> None:
        self.stack = [start]

    def _next(self) -> Optional[Cell]:
        while self.stack:
            n = self.stack.pop()
            if not n.visited:
                return n
        return None

    def _frontier_size(self) -> int:
        return len(self.stack)

    def _expand(self, u: Cell) -> List[Cell]:
        opened_now: List[Cell] = []
        for v in neighbors(self.grid, u):
            # latest push wins: it is the entry the cell will be popped under
            v.predecessor = u.key
            v.cost = u.cost + 1
            self.stack.append(v)
            opened_now.append(v)
        return opened_now


def dfs(grid: Grid, start: Optional[Position] = None,
        end: Optional[Position] = None) -> SearchResult:
    algo = DFSAlgo()
    algo.init(grid, start, end)
    return algo.search()
