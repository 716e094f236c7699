#!/usr/bin/env python3
"""
A*: one expansion per step() for animation.

Heuristic:
- Manhattan distance to the end cell (admissible on a 4-connected unit grid).

Tie-breaking in the PQ:
- (f, discovery order): lower f, then the cell that entered the frontier first.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from pathgrid.core.grid import Grid
from pathgrid.core.neighbors import manhattan, neighbors
from pathgrid.core.search import PriorityFrontier, SearchAlgo
from pathgrid.core.types import Cell, Position, SearchResult


@dataclass
class AStarAlgo(SearchAlgo):
    name: str = "A*"

    frontier: PriorityFrontier = field(default_factory=PriorityFrontier)

    # -------------------- helpers --------------------

    def _h(self, c: Cell) -> int:
        return manhattan(c.position, self.end)

    def _f(self, c: Cell) -> float:
        return c.cost + self._h(c)

    # -------------------- hooks --------------------

    def _seed(self, start: Cell) -> None:
        self.frontier = PriorityFrontier()
        self.frontier.push(start, self._f(start))

    def _next(self) -> Optional[Cell]:
        return self.frontier.pop()

    def _frontier_size(self) -> int:
        return len(self.frontier)

    def _expand(self, u: Cell) -> List[Cell]:
        opened_now: List[Cell] = []
        for v in neighbors(self.grid, u):
            alt = u.cost + 1
            if alt < v.cost:
                v.cost = alt
                v.predecessor = u.key
                if self.frontier.push(v, self._f(v)):
                    opened_now.append(v)
        return opened_now


def astar(grid: Grid, start: Optional[Position] = None,
          end: Optional[Position] = None) -> SearchResult:
    algo = AStarAlgo()
    algo.init(grid, start, end)
    return algo.search()
