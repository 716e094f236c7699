import math
from typing import List, Tuple

from pathgrid.core.types import Cell, Position, WALL

# up, right, down, left -- shared by every algorithm so ties break the same way
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


def neighbors(grid, cell: Cell) -> List[Cell]:
    """Return in-bounds, non-wall, not-yet-visited 4-neighbors of `cell`."""
    out: List[Cell] = []
    for dr, dc in DIRECTIONS:
        r, c = cell.row + dr, cell.col + dc
        if not (0 <= r < grid.rows and 0 <= c < grid.cols):
            continue
        n = grid.cells[r][c]
        if n.category != WALL and not n.visited:
            out.append(n)
    return out


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def euclidean(a: Position, b: Position) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])
