import pytest

from pathgrid.core.algorithms import ALGORITHMS
from pathgrid.core.grid import Grid
from pathgrid.core.types import WALL

ALL_ALGORITHMS = list(ALGORITHMS)
OPTIMAL_ALGORITHMS = ["dijkstra", "astar", "bfs"]


def build_grid(rows, cols, start, end, walls=()):
    grid = Grid.create(rows, cols, start, end)
    for pos in walls:
        grid.set_category(pos, WALL)
    return grid


@pytest.fixture
def open_3x3():
    return build_grid(3, 3, (0, 0), (2, 2))


@pytest.fixture
def wall_row_5x5():
    """5x5 with row 2 walled off except a gap at column 4."""
    return build_grid(5, 5, (0, 0), (4, 0), walls=[(2, c) for c in range(4)])


@pytest.fixture
def sealed_end():
    """End cell in the bottom-right corner boxed in by walls."""
    return build_grid(5, 5, (0, 0), (4, 4), walls=[(3, 4), (4, 3), (3, 3)])
