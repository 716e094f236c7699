"""
Grid model: board construction, coordinate rules, snapshots and editing.

Coordinates are (row, col) with the origin at the top-left; a grid always
holds exactly one START and one END cell.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from pathgrid.core.config import GridConfig
from pathgrid.core.errors import GridDimensionError, GridError, InvalidPositionError
from pathgrid.core.types import (
    Cell, Position, EMPTY, WALL, START, END, VISITED, PATH, CATEGORIES, MARKERS,
)

logger = logging.getLogger(__name__)


def default_start_end(rows: int, cols: int) -> Tuple[Position, Position]:
    start = (min(rows - 1, rows // 4), min(cols - 1, cols // 4))
    end = (min(rows - 1, rows // 4), min(cols - 1, (3 * cols) // 4))
    return start, end


def _next_free(rows: int, cols: int, taken: Position) -> Position:
    """First position after `taken` in row-major order, wrapping around."""
    total = rows * cols
    if total < 2:
        raise GridDimensionError("grid needs at least two cells for start and end",
                                 rows=rows, cols=cols)
    idx = (taken[0] * cols + taken[1] + 1) % total
    return divmod(idx, cols)


def _check_dims(rows: int, cols: int) -> None:
    if rows < 1 or cols < 1:
        raise GridDimensionError(f"grid dimensions must be >= 1, got {rows}x{cols}",
                                 rows=rows, cols=cols)


@dataclass
class Grid:
    rows: int
    cols: int
    cells: List[List[Cell]]   # [row][col]
    start: Position
    end: Position

    # -------------------- construction --------------------

    @classmethod
    def create(cls, rows: int, cols: int,
               start: Optional[Position] = None,
               end: Optional[Position] = None) -> "Grid":
        _check_dims(rows, cols)
        default_start, default_end = default_start_end(rows, cols)
        start = tuple(start) if start is not None else default_start
        if end is None:
            end = default_end
            if end == start:
                end = _next_free(rows, cols, start)
        end = tuple(end)

        for name, pos in (("start", start), ("end", end)):
            r, c = pos
            if not (0 <= r < rows and 0 <= c < cols):
                raise InvalidPositionError(f"{name} {pos} outside {rows}x{cols} grid",
                                           position=pos)
        if start == end:
            raise InvalidPositionError(f"start and end both at {start}", position=start)

        cells = [[Cell(r, c) for c in range(cols)] for r in range(rows)]
        grid = cls(rows, cols, cells, start, end)
        grid.stamp_markers()
        return grid

    @classmethod
    def from_config(cls, config: GridConfig) -> "Grid":
        return cls.create(config.rows, config.cols, config.start, config.end)

    def stamp_markers(self) -> None:
        s = self.cell(self.start)
        s.category = START
        s.cost = 0
        self.cell(self.end).category = END

    # -------------------- coordinates --------------------

    def in_bounds(self, pos: Position) -> bool:
        r, c = pos
        return 0 <= r < self.rows and 0 <= c < self.cols

    def cell(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise InvalidPositionError(f"{pos} outside {self.rows}x{self.cols} grid",
                                       position=tuple(pos))
        r, c = pos
        return self.cells[r][c]

    def is_wall(self, pos: Position) -> bool:
        return self.cell(pos).category == WALL

    def is_marker(self, pos: Position) -> bool:
        return tuple(pos) in (self.start, self.end)

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def count(self, category: str) -> int:
        return sum(1 for c in self.iter_cells() if c.category == category)

    def find(self, category: str) -> Optional[Position]:
        for c in self.iter_cells():
            if c.category == category:
                return c.position
        return None

    # -------------------- copies --------------------

    def snapshot(self) -> "Grid":
        """Independent working copy for one search run (traversal state cleared)."""
        cells = [[Cell(c.row, c.col, c.category) for c in row] for row in self.cells]
        return Grid(self.rows, self.cols, cells, self.start, self.end)

    def copy(self) -> "Grid":
        cells = [[Cell(c.row, c.col, c.category, c.cost, c.visited, c.predecessor)
                  for c in row] for row in self.cells]
        return Grid(self.rows, self.cols, cells, self.start, self.end)

    def cleared(self) -> "Grid":
        return Grid.create(self.rows, self.cols, self.start, self.end)

    def resized(self, rows: int, cols: int) -> "Grid":
        """New grid of the given size keeping overlapping walls; markers are clamped."""
        _check_dims(rows, cols)
        start = (min(rows - 1, self.start[0]), min(cols - 1, self.start[1]))
        end = (min(rows - 1, self.end[0]), min(cols - 1, self.end[1]))
        if end == start:
            end = _next_free(rows, cols, start)

        cells = [[Cell(r, c) for c in range(cols)] for r in range(rows)]
        for r in range(min(rows, self.rows)):
            for c in range(min(cols, self.cols)):
                if self.cells[r][c].category == WALL:
                    cells[r][c].category = WALL

        grid = Grid(rows, cols, cells, start, end)
        grid.stamp_markers()   # overrides a wall under a clamped marker
        logger.debug("resized grid %dx%d -> %dx%d", self.rows, self.cols, rows, cols)
        return grid

    # -------------------- editing --------------------

    def set_category(self, pos: Position, category: str) -> None:
        if category not in CATEGORIES:
            raise GridError(f"unknown category {category!r}")
        if category in MARKERS:
            raise GridError("markers are placed with move_start/move_end")
        if self.is_marker(pos):
            raise InvalidPositionError(f"{pos} holds a marker", position=tuple(pos))
        self.cell(pos).category = category

    def toggle_wall(self, pos: Position) -> str:
        new = EMPTY if self.is_wall(pos) else WALL
        self.set_category(pos, new)
        return new

    def _check_marker_target(self, pos: Position, other: Position) -> Position:
        pos = tuple(pos)
        if self.is_wall(pos):
            raise InvalidPositionError(f"{pos} is a wall", position=pos)
        if pos == other:
            raise InvalidPositionError(f"{pos} holds the other marker", position=pos)
        return pos

    def move_start(self, pos: Position) -> None:
        pos = self._check_marker_target(pos, self.end)
        old = self.cell(self.start)
        old.category = EMPTY
        old.reset_traversal()
        self.start = pos
        self.stamp_markers()

    def move_end(self, pos: Position) -> None:
        pos = self._check_marker_target(pos, self.start)
        old = self.cell(self.end)
        old.category = EMPTY
        old.reset_traversal()
        self.end = pos
        self.stamp_markers()

    def reset_path(self) -> None:
        """Drop visited/path paint and traversal state; walls and markers stay."""
        for c in self.iter_cells():
            c.reset_traversal()
            if c.category in (VISITED, PATH):
                c.category = EMPTY
        self.stamp_markers()
