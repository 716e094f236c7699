#!/usr/bin/env python3
"""
Shared search contract: one expansion per step() for animation.

Every algorithm exposes the same API:
- init(grid, start, end) - reset() - step() -> StepResult - search() -> SearchResult

init() never keeps a reference it mutates: the run works on grid.snapshot(),
so cost/visited/predecessor state from one run cannot leak into the next.

A cell is marked visited and appended to `visited` when it is selected from
the frontier, so the mapping's insertion order is the expansion order.
"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pathgrid.core.errors import InvalidPositionError, SearchError
from pathgrid.core.grid import Grid
from pathgrid.core.path import reconstruct_path
from pathgrid.core.types import Cell, Position, SearchResult, StepResult

logger = logging.getLogger(__name__)


class PriorityFrontier:
    """Min-priority frontier; equal priorities go to the earliest-discovered cell.

    Improving a cell pushes a fresh heap entry and leaves the old one behind;
    stale entries are dropped on pop.
    """

    def __init__(self):
        self._heap: List[Tuple[float, int, str]] = []
        self._seq: Dict[str, int] = {}
        self._live: Dict[str, float] = {}
        self._cells: Dict[str, Cell] = {}

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, key: str) -> bool:
        return key in self._live

    def push(self, cell: Cell, priority: float) -> bool:
        """Queue or re-prioritize `cell`. Returns True on first discovery."""
        key = cell.key
        first = key not in self._seq
        if first:
            self._seq[key] = len(self._seq)
        self._live[key] = priority
        self._cells[key] = cell
        heapq.heappush(self._heap, (priority, self._seq[key], key))
        return first

    def pop(self) -> Optional[Cell]:
        while self._heap:
            priority, _, key = heapq.heappop(self._heap)
            if self._live.get(key) != priority:
                continue   # stale
            del self._live[key]
            return self._cells[key]
        return None


@dataclass
class SearchAlgo:
    name: str = "search"

    # Internal state
    source: Optional[Grid] = None      # caller's grid, read only
    grid: Optional[Grid] = None        # working snapshot
    start: Optional[Position] = None
    end: Optional[Position] = None
    visited: Dict[str, Cell] = field(default_factory=dict)
    path: List[Cell] = field(default_factory=list)
    popped_count: int = 0
    done: bool = False
    no_path: bool = False

    # -------------------- lifecycle --------------------

    def init(self, grid: Grid, start: Optional[Position] = None,
             end: Optional[Position] = None) -> None:
        """Validate the endpoints and prepare a fresh run over `grid`."""
        start = grid.start if start is None else tuple(start)
        end = grid.end if end is None else tuple(end)
        for label, pos in (("start", start), ("end", end)):
            if not grid.in_bounds(pos):
                raise InvalidPositionError(f"{label} {pos} is out of bounds", position=pos)
            if grid.is_wall(pos):
                raise InvalidPositionError(f"{label} {pos} is a wall", position=pos)
        if start == end:
            raise InvalidPositionError(f"start and end are both {start}", position=start)

        self.source = grid
        self.start = start
        self.end = end
        self.reset()

    def reset(self) -> None:
        """Clear all state and seed with the start cell."""
        if self.source is None:
            return
        self.grid = self._working_copy(self.source)
        self.visited = {}
        self.path = []
        self.popped_count = 0
        self.done = False
        self.no_path = False

        s = self.grid.cell(self.start)
        s.cost = 0
        self._seed(s)

    def _working_copy(self, grid: Grid) -> Grid:
        return grid.snapshot()

    # -------------------- per-algorithm hooks --------------------

    def _seed(self, start: Cell) -> None:
        raise NotImplementedError

    def _next(self) -> Optional[Cell]:
        """Remove and return the next cell to expand, or None when exhausted."""
        raise NotImplementedError

    def _expand(self, cell: Cell) -> List[Cell]:
        """Offer the neighbors of `cell` to the frontier; return newly opened ones."""
        raise NotImplementedError

    def _frontier_size(self) -> int:
        return 0

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        if self.grid is None:
            return StepResult(status="idle", metrics={"algo": self.name})

        if self.done:
            return StepResult(status="done", path=self.path,
                              metrics=self._metrics(path_len=len(self.path)))

        if self.no_path:
            return StepResult(status="no_path", metrics=self._metrics())

        u = self._next()
        if u is None:
            self.no_path = True
            logger.debug("%s: no path after %d expansions", self.name, self.popped_count)
            return StepResult(status="no_path", metrics=self._metrics())

        self.popped_count += 1
        u.visited = True
        self.visited[u.key] = u

        if u.position == self.end:
            self.done = True
            self.path = reconstruct_path(u, self.visited, self.grid)
            logger.debug("%s: reached %s, visited=%d path=%d",
                         self.name, self.end, len(self.visited), len(self.path))
            return StepResult(status="done", closed=[u], current=u, path=self.path,
                              metrics=self._metrics(path_len=len(self.path)))

        opened_now = self._expand(u)
        return StepResult(status="running", opened=opened_now, closed=[u], current=u,
                          metrics=self._metrics())

    def search(self) -> SearchResult:
        """Run to completion without yielding and return the result."""
        if self.grid is None:
            raise SearchError(f"{self.name}: init() must be called before search()")
        while not (self.done or self.no_path):
            self.step()
        return self.result()

    def result(self) -> SearchResult:
        return SearchResult(visited=dict(self.visited), path=list(self.path), found=self.done)

    # -------------------- metrics --------------------

    def _metrics(self, path_len: int = 0) -> dict:
        total = None
        if self.done and self.grid is not None:
            total = self.grid.cell(self.end).cost
        return {
            "algo": self.name,
            "popped": self.popped_count,
            "open_size": self._frontier_size(),
            "closed_count": len(self.visited),
            "path_len": path_len,
            "total_cost": total,
        }
