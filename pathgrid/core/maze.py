"""
Maze generation with an iterative recursive backtracker.

Only cells with odd row and column are lattice nodes; connecting two nodes
two cells apart knocks out the wall cell between them. After carving, the
start and end markers are joined to the nearest passage so both are always
reachable.

MazeGenerator.frames() is an async generator of grid snapshots, one per
carve step. The consumer sets the pace: carving does not advance until the
next snapshot is requested. With step_delay == 0 no intermediate snapshots
are produced and only `result` matters.
"""

import asyncio
import logging
import math
import random
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Union

from pathgrid.core.errors import InvalidPositionError, MazeGenerationError
from pathgrid.core.grid import Grid
from pathgrid.core.neighbors import manhattan
from pathgrid.core.types import Position, EMPTY, WALL, END, MARKERS

logger = logging.getLogger(__name__)

LATTICE_ORIGIN: Position = (1, 1)

# two cells away: up, left, down, right
LATTICE_STEPS = ((-2, 0), (0, -2), (2, 0), (0, 2))


class MazeGenerator:
    def __init__(self, grid: Grid, step_delay: float = 0.0,
                 rng: Union[random.Random, int, None] = None,
                 start: Optional[Position] = None):
        if step_delay < 0:
            raise MazeGenerationError(f"step_delay must be >= 0, got {step_delay}")
        end = grid.find(END)
        if end is None:
            raise MazeGenerationError("End position not found in grid", error_code="MAZE_NO_END")
        if not grid.in_bounds(LATTICE_ORIGIN):
            raise MazeGenerationError(
                f"grid {grid.rows}x{grid.cols} too small for a maze (need at least 2x2)",
                error_code="MAZE_TOO_SMALL")

        start = grid.start if start is None else tuple(start)
        if not grid.in_bounds(start):
            raise InvalidPositionError(f"start {start} outside {grid.rows}x{grid.cols} grid",
                                       position=start, error_code="MAZE_BAD_START")
        if start == end:
            raise InvalidPositionError(f"start and end both at {start}",
                                       position=start, error_code="MAZE_BAD_START")

        self.source = grid
        self.start: Position = start
        self.end: Position = end
        self.step_delay = step_delay
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)
        self.step_count = 0
        self.result: Optional[Grid] = None

    # -------------------- carving --------------------

    def _fresh_walls(self) -> Grid:
        grid = self.source.copy()
        for c in grid.iter_cells():
            c.category = WALL
            c.reset_traversal()
        grid.start, grid.end = self.start, self.end
        # markers are stamped first so they are never picked as lattice nodes
        grid.stamp_markers()
        return grid

    @staticmethod
    def _unvisited_lattice_neighbors(grid: Grid, r: int, c: int) -> List[Position]:
        out: List[Position] = []
        for dr, dc in LATTICE_STEPS:
            nr, nc = r + dr, c + dc
            if not grid.in_bounds((nr, nc)):
                continue
            if grid.cells[nr][nc].category == WALL:
                out.append((nr, nc))
        return out

    async def frames(self) -> AsyncIterator[Grid]:
        """Carve the maze, yielding a fresh copy of the grid after each carve step."""
        animate = self.step_delay > 0
        grid = self._fresh_walls()

        stack: List[Position] = [LATTICE_ORIGIN]
        grid.cell(LATTICE_ORIGIN).category = EMPTY
        if animate:
            yield grid.copy()

        while stack:
            r, c = stack[-1]
            options = self._unvisited_lattice_neighbors(grid, r, c)
            if not options:
                stack.pop()   # backtrack
                continue

            nr, nc = self.rng.choice(options)
            grid.cells[(r + nr) // 2][(c + nc) // 2].category = EMPTY
            grid.cells[nr][nc].category = EMPTY
            stack.append((nr, nc))
            self.step_count += 1

            if animate:
                await asyncio.sleep(self.step_delay)
                yield grid.copy()

        connect_to_nearest_passage(grid, self.start)
        connect_to_nearest_passage(grid, self.end)
        grid.stamp_markers()

        logger.debug("maze %dx%d carved in %d steps", grid.rows, grid.cols, self.step_count)
        self.result = grid

    async def generate(self, on_step: Optional[Callable[[Grid], Awaitable[None]]] = None) -> Grid:
        """Run to completion, awaiting `on_step` for every intermediate snapshot."""
        async for frame in self.frames():
            if on_step is not None:
                await on_step(frame)
        return self.result


def connect_to_nearest_passage(grid: Grid, node: Position) -> None:
    """Carve an L-shaped corridor (rows first, then columns) from the nearest
    EMPTY cell to `node`. Marker cells along the way are left alone."""
    nearest: Optional[Position] = None
    best = math.inf
    for cell in grid.iter_cells():
        if cell.category == EMPTY:
            d = manhattan(cell.position, node)
            if d < best:
                best = d
                nearest = cell.position

    if nearest is None:
        logger.warning("no passage to connect %s to; leaving it as is", node)
        return

    r, c = nearest
    while r != node[0]:
        r = r + 1 if r < node[0] else r - 1
        if grid.cells[r][c].category not in MARKERS:
            grid.cells[r][c].category = EMPTY
    while c != node[1]:
        c = c + 1 if c < node[1] else c - 1
        if grid.cells[r][c].category not in MARKERS:
            grid.cells[r][c].category = EMPTY


def generate_maze(grid: Grid, step_delay: float = 0.0,
                  rng: Union[random.Random, int, None] = None) -> Grid:
    """Blocking helper: generate a maze for `grid` and return the finished grid."""
    return asyncio.run(MazeGenerator(grid, step_delay=step_delay, rng=rng).generate())
