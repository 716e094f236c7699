"""
UI session state: everything the viewer shows, without any pygame.

The viewer routes input here (press/enter/release on cells, button actions)
and calls tick() on its own clock; tick() advances whichever run is active:

- search: `batch_size` expansions per tick, painted as VISITED, then the path
  revealed `batch_size` cells per tick
- maze:   one carve snapshot per tick, pulled from MazeGenerator.frames()

With speed 0 both complete immediately.
"""

import asyncio
import logging
import random
from collections import deque
from typing import Deque, Iterable, Optional, Tuple, Union

from pathgrid.core.algorithms import ALGORITHM_LABELS, make_algo, normalize_algorithm
from pathgrid.core.config import AppConfig, SPEED_CHOICES_MS
from pathgrid.core.errors import ConfigurationError, PathgridError
from pathgrid.core.grid import Grid
from pathgrid.core.maze import MazeGenerator
from pathgrid.core.search import SearchAlgo
from pathgrid.core.types import Cell, Position, SearchResult, START, END, VISITED, PATH

logger = logging.getLogger(__name__)


def fit_dimensions(width_px: int, height_px: int, min_cell_px: int) -> Tuple[int, int, int]:
    """Rows, cols and integer cell size filling a viewport with cells >= min_cell_px."""
    min_cell_px = max(1, min_cell_px)
    cols = max(1, width_px // min_cell_px)
    rows = max(1, height_px // min_cell_px)
    cell = max(1, int(min(width_px / cols, height_px / rows)))
    cols = max(1, width_px // cell)
    rows = max(1, height_px // cell)
    return rows, cols, cell


def _empty_metrics(algo_label: str) -> dict:
    return {
        "algo": algo_label,
        "popped": 0,
        "open_size": 0,
        "closed_count": 0,
        "path_len": 0,
        "total_cost": None,
    }


class Session:
    def __init__(self, config: Optional[AppConfig] = None,
                 rng: Union[random.Random, int, None] = None):
        self.config = config or AppConfig()
        self.grid = Grid.from_config(self.config.grid_config())
        self.algorithm = normalize_algorithm(self.config.algorithm)
        self.speed_ms = self.config.speed_ms
        self.batch_size = max(1, self.config.batch_size)
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)

        self.running = False
        self.state = "Idle"

        # mouse editing
        self.mouse_down = False
        self.draw_mode: Optional[str] = None
        self.dragging: Optional[str] = None   # START | END
        self._last_cell: Optional[Position] = None

        # active runs
        self.algo: Optional[SearchAlgo] = None
        self.last_result: Optional[SearchResult] = None
        self._path_queue: Deque[Cell] = deque()
        self._maze: Optional[MazeGenerator] = None
        self._maze_frames = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self.metrics = _empty_metrics(self.algorithm_label)

    @property
    def algorithm_label(self) -> str:
        return ALGORITHM_LABELS[self.algorithm]

    @property
    def generating(self) -> bool:
        return self._maze_frames is not None

    # -------------------- mouse editing --------------------

    def press(self, pos: Position) -> None:
        if self.running or not self.grid.in_bounds(pos):
            return
        pos = tuple(pos)
        self.mouse_down = True
        self.dragging = None
        self.draw_mode = None
        self._last_cell = pos

        if pos == self.grid.start:
            self.dragging = START
        elif pos == self.grid.end:
            self.dragging = END
        else:
            self.draw_mode = self.grid.toggle_wall(pos)

    def enter(self, pos: Position) -> None:
        if not self.mouse_down or self.running or not self.grid.in_bounds(pos):
            return
        pos = tuple(pos)
        if pos == self._last_cell:
            return
        self._last_cell = pos

        if self.dragging is not None:
            if self.grid.is_wall(pos) or self.grid.is_marker(pos):
                return
            if self.dragging == START:
                self.grid.move_start(pos)
            else:
                self.grid.move_end(pos)
            return

        if self.grid.is_marker(pos) or self.draw_mode is None:
            return
        self.grid.set_category(pos, self.draw_mode)

    def release(self) -> None:
        self.mouse_down = False
        self.dragging = None
        self.draw_mode = None
        self._last_cell = None

    # -------------------- actions --------------------

    def set_algorithm(self, identifier: str) -> bool:
        if self.running:
            return False
        self.algorithm = normalize_algorithm(identifier)
        self.metrics = _empty_metrics(self.algorithm_label)
        return True

    def set_speed(self, speed_ms: int) -> None:
        if speed_ms < 0:
            raise ConfigurationError(f"speed must be >= 0 ms, got {speed_ms}")
        self.speed_ms = int(speed_ms)

    def bump_speed(self, direction: int) -> None:
        """direction > 0 -> faster (shorter delay), < 0 -> slower."""
        if direction > 0:
            faster = [s for s in SPEED_CHOICES_MS if s < self.speed_ms]
            if faster:
                self.speed_ms = faster[-1]
        elif direction < 0:
            slower = [s for s in SPEED_CHOICES_MS if s > self.speed_ms]
            if slower:
                self.speed_ms = slower[0]

    def reset_path(self) -> bool:
        if self.running:
            return False
        self.grid.reset_path()
        self.last_result = None
        self.state = "Idle"
        self.metrics = _empty_metrics(self.algorithm_label)
        return True

    def reset_grid(self) -> bool:
        if self.running:
            return False
        self.grid = self.grid.cleared()
        self.last_result = None
        self.state = "Idle"
        self.metrics = _empty_metrics(self.algorithm_label)
        return True

    def resize(self, rows: int, cols: int) -> bool:
        if (rows, cols) == (self.grid.rows, self.grid.cols):
            return False
        self._stop_runs()
        self.grid = self.grid.resized(rows, cols)
        self.last_result = None
        self.state = "Idle"
        return True

    def fit_to_viewport(self, width_px: int, height_px: int) -> int:
        """Resize the grid to the viewport; returns the cell size in pixels."""
        rows, cols, cell = fit_dimensions(width_px, height_px, self.config.min_cell_px)
        self.resize(rows, cols)
        return cell

    def start_search(self) -> bool:
        if self.running:
            return False
        self.reset_path()
        self.algo = make_algo(self.algorithm)
        try:
            self.algo.init(self.grid)
        except PathgridError as ex:
            logger.error("cannot start %s: %s", self.algorithm_label, ex)
            self.algo = None
            return False

        if self.speed_ms == 0:
            result = self.algo.search()
            self._paint(result.visited.values(), VISITED)
            self._paint(result.path, PATH)
            self._finish(result)
            return True

        self.running = True
        self.state = "Running"
        return True

    def generate_maze(self) -> bool:
        if self.running:
            return False
        fresh = self.grid.cleared()
        try:
            gen = MazeGenerator(fresh, step_delay=self.speed_ms / 1000.0, rng=self.rng)
        except PathgridError as ex:
            logger.error("cannot generate maze: %s", ex)
            return False

        self.last_result = None
        self.metrics = _empty_metrics(self.algorithm_label)
        if self.speed_ms == 0:
            self.grid = self._event_loop().run_until_complete(gen.generate())
            self.state = "Idle"
            logger.info("maze generated (%dx%d)", self.grid.rows, self.grid.cols)
            return True

        self.grid = fresh
        self._maze = gen
        self._maze_frames = gen.frames()
        self.running = True
        self.state = "Generating"
        return True

    # -------------------- ticking --------------------

    def tick(self) -> bool:
        """Advance the active run by one frame. Returns False when idle."""
        if self._maze_frames is not None:
            return self._tick_maze()
        if not self.running or self.algo is None:
            return False

        if self._path_queue:
            batch = [self._path_queue.popleft()
                     for _ in range(min(self.batch_size, len(self._path_queue)))]
            self._paint(batch, PATH)
            if not self._path_queue:
                self._finish(self.last_result)
            return True

        for _ in range(self.batch_size):
            res = self.algo.step()
            self._paint(res.closed, VISITED)
            if res.metrics:
                self.metrics = res.metrics
            if res.status in ("done", "no_path"):
                self.last_result = self.algo.result()
                self._path_queue.extend(self.last_result.path)
                if not self._path_queue:
                    self._finish(self.last_result)
                break
        return True

    def _tick_maze(self) -> bool:
        try:
            frame = self._event_loop().run_until_complete(self._maze_frames.__anext__())
        except StopAsyncIteration:
            self.grid = self._maze.result
            self._maze = None
            self._maze_frames = None
            self.running = False
            self.state = "Idle"
            logger.info("maze generated (%dx%d)", self.grid.rows, self.grid.cols)
            return True
        self.grid = frame
        return True

    # -------------------- helpers --------------------

    def _paint(self, cells: Iterable[Cell], category: str) -> None:
        for c in cells:
            pos = c.position
            if self.grid.is_marker(pos):
                continue
            target = self.grid.cell(pos)
            target.category = category
            if category == VISITED:
                target.visited = True

    def _finish(self, result: SearchResult) -> None:
        self.running = False
        self.last_result = result
        self.state = "Done" if result.found else "No path"
        self.metrics = self.algo.step().metrics
        logger.info("%s: visited %d cells, path %d cells (%s)",
                    self.algorithm_label, len(result.visited), len(result.path), self.state)

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop

    def _stop_runs(self) -> None:
        if self._maze_frames is not None:
            # no cancellation inside the generator: close it and drop its frames
            self._event_loop().run_until_complete(self._maze_frames.aclose())
            self._maze_frames = None
            self._maze = None
        self.algo = None
        self._path_queue.clear()
        self.running = False

    def close(self) -> None:
        self._stop_runs()
        if self._loop is not None and not self._loop.is_closed():
            self._loop.close()
