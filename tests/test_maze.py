import asyncio
import random

import pytest

from conftest import build_grid
from pathgrid.core.algorithms import search
from pathgrid.core.errors import InvalidPositionError, MazeGenerationError
from pathgrid.core.grid import Grid
from pathgrid.core.maze import MazeGenerator, connect_to_nearest_passage, generate_maze
from pathgrid.core.types import EMPTY, WALL, START, END


def collect_frames(gen):
    async def run():
        return [frame async for frame in gen.frames()]
    return asyncio.run(run())


class TestMazeGeneration:
    @pytest.mark.parametrize("rows,cols", [(3, 3), (4, 7), (9, 9), (12, 5), (25, 6)])
    @pytest.mark.parametrize("seed", [0, 1, 42])
    def test_markers_and_connectivity(self, rows, cols, seed):
        maze = generate_maze(Grid.create(rows, cols), rng=seed)
        assert maze.count(START) == 1
        assert maze.count(END) == 1
        assert search("bfs", maze).found

    def test_lattice_nodes_are_open(self):
        maze = generate_maze(Grid.create(9, 9, (0, 0), (8, 8)), rng=3)
        for r in range(1, 9, 2):
            for c in range(1, 9, 2):
                assert maze.cell((r, c)).category == EMPTY

    def test_seed_is_reproducible(self):
        a = generate_maze(Grid.create(11, 11), rng=7)
        b = generate_maze(Grid.create(11, 11), rng=random.Random(7))
        assert [c.category for c in a.iter_cells()] == [c.category for c in b.iter_cells()]

    def test_existing_walls_are_replaced(self):
        grid = build_grid(7, 7, (0, 0), (6, 6), walls=[(1, 1), (3, 3)])
        maze = generate_maze(grid, rng=1)
        assert maze.cell((1, 1)).category == EMPTY
        assert maze.cell((3, 3)).category == EMPTY
        assert grid.count(WALL) == 2

    def test_generate_returns_result(self):
        gen = MazeGenerator(Grid.create(7, 7, (0, 0), (6, 6)), rng=5)
        maze = asyncio.run(gen.generate())
        assert maze is gen.result
        # 3x3 lattice nodes are joined by a spanning tree
        assert gen.step_count == 8

    def test_markers_stay_put(self):
        grid = Grid.create(9, 9, (2, 2), (7, 4))
        maze = generate_maze(grid, rng=11)
        assert maze.start == (2, 2)
        assert maze.end == (7, 4)
        assert maze.cell((2, 2)).category == START
        assert maze.cell((7, 4)).category == END


class TestFrames:
    def test_no_frames_without_delay(self):
        gen = MazeGenerator(Grid.create(7, 7), step_delay=0, rng=2)
        assert collect_frames(gen) == []
        assert gen.result is not None

    def test_one_frame_per_carve(self):
        gen = MazeGenerator(Grid.create(5, 5, (0, 0), (4, 4)), step_delay=0.001, rng=2)
        frames = collect_frames(gen)
        assert len(frames) == gen.step_count + 1 == 4
        assert frames[0].count(EMPTY) == 1
        open_counts = [f.count(EMPTY) for f in frames]
        assert open_counts == sorted(open_counts)
        assert open_counts[-1] == 7

    def test_frames_are_independent_copies(self):
        gen = MazeGenerator(Grid.create(7, 7), step_delay=0.001, rng=4)
        frames = collect_frames(gen)
        assert len({id(f) for f in frames}) == len(frames)
        assert all(f is not gen.result for f in frames)
        assert frames[0].count(EMPTY) < frames[-1].count(EMPTY)

    def test_on_step_is_awaited_per_frame(self):
        seen = []

        async def sink(frame):
            seen.append(frame.count(EMPTY))

        gen = MazeGenerator(Grid.create(5, 5, (0, 0), (4, 4)), step_delay=0.001, rng=9)
        asyncio.run(gen.generate(on_step=sink))
        assert seen == [1, 3, 5, 7]


class TestMazeErrors:
    def test_missing_end(self):
        grid = Grid.create(5, 5, (0, 0), (4, 4))
        grid.cell((4, 4)).category = EMPTY
        with pytest.raises(MazeGenerationError) as exc:
            MazeGenerator(grid)
        assert exc.value.error_code == "MAZE_NO_END"

    def test_too_small(self):
        with pytest.raises(MazeGenerationError) as exc:
            MazeGenerator(Grid.create(1, 5))
        assert exc.value.error_code == "MAZE_TOO_SMALL"

    def test_negative_delay(self):
        with pytest.raises(MazeGenerationError):
            MazeGenerator(Grid.create(5, 5), step_delay=-1)

    @pytest.mark.parametrize("start", [(6, 6), (7, 0), (-1, 2)])
    def test_start_override_must_be_free_and_in_bounds(self, start):
        grid = Grid.create(7, 7, (0, 0), (6, 6))
        with pytest.raises(InvalidPositionError) as exc:
            MazeGenerator(grid, start=start)
        assert exc.value.error_code == "MAZE_BAD_START"

    def test_start_override(self):
        gen = MazeGenerator(Grid.create(7, 7, (0, 0), (6, 6)), start=(2, 4), rng=1)
        maze = asyncio.run(gen.generate())
        assert maze.start == (2, 4)
        assert maze.count(START) == maze.count(END) == 1
        assert maze.cell((0, 0)).category != START
        assert search("bfs", maze).found


class TestConnectToNearestPassage:
    def test_carves_rows_then_columns(self):
        grid = Grid.create(5, 5, (0, 0), (4, 4))
        for c in grid.iter_cells():
            if c.category == EMPTY:
                c.category = WALL
        grid.cell((0, 4)).category = EMPTY
        connect_to_nearest_passage(grid, (4, 0))
        # corridor leaves (0, 4) down column 4 (skipping the end marker) then along row 4
        for r in range(1, 4):
            assert grid.cell((r, 4)).category == EMPTY
        assert grid.cell((4, 4)).category == END
        for c in range(1, 4):
            assert grid.cell((4, c)).category == EMPTY
        assert grid.cell((4, 0)).category == EMPTY

    def test_no_passage_is_a_no_op(self, caplog):
        grid = Grid.create(3, 3, (0, 0), (2, 2))
        for c in grid.iter_cells():
            if c.category == EMPTY:
                c.category = WALL
        before = [c.category for c in grid.iter_cells()]
        connect_to_nearest_passage(grid, (0, 0))
        assert [c.category for c in grid.iter_cells()] == before
        assert "no passage" in caplog.text
