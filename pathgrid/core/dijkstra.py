#!/usr/bin/env python3

from dataclasses import dataclass, field
from typing import List, Optional

from pathgrid.core.grid import Grid
from pathgrid.core.neighbors import euclidean, neighbors
from pathgrid.core.search import PriorityFrontier, SearchAlgo
from pathgrid.core.types import Cell, Position, SearchResult


@dataclass
class DijkstraAlgo(SearchAlgo):
    name: str = "Dijkstra"

    frontier: PriorityFrontier = field(default_factory=PriorityFrontier)

    def _seed(self, start: Cell) -> None:
        self.frontier = PriorityFrontier()
        self.frontier.push(start, start.cost)

    def _next(self) -> Optional[Cell]:
        return self.frontier.pop()

    def _frontier_size(self) -> int:
        return len(self.frontier)

    def _expand(self, u: Cell) -> List[Cell]:
        opened_now: List[Cell] = []
        for v in neighbors(self.grid, u):
            # edge weight is the distance between cell coordinates
            alt = u.cost + euclidean(u.position, v.position)
            if alt < v.cost:
                v.cost = alt
                v.predecessor = u.key
                if self.frontier.push(v, v.cost):
                    opened_now.append(v)
        return opened_now


def dijkstra(grid: Grid, start: Optional[Position] = None,
             end: Optional[Position] = None) -> SearchResult:
    algo = DijkstraAlgo()
    algo.init(grid, start, end)
    return algo.search()
