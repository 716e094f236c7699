import math

import pytest

from conftest import ALL_ALGORITHMS, OPTIMAL_ALGORITHMS, build_grid
from pathgrid.core.algorithms import ALGORITHM_LABELS, make_algo, normalize_algorithm, search
from pathgrid.core.dijkstra import DijkstraAlgo, dijkstra
from pathgrid.core.errors import InvalidPositionError, SearchError, UnknownAlgorithmError
from pathgrid.core.neighbors import manhattan
from pathgrid.core.types import EMPTY, WALL, START, END


def assert_valid_path(grid, result, start, end):
    positions = [start] + result.path_positions + [end]
    assert start not in result.path_positions
    assert end not in result.path_positions
    for a, b in zip(positions, positions[1:]):
        assert manhattan(a, b) == 1
    for pos in result.path_positions:
        assert not grid.is_wall(pos)


class TestOpenGrid:
    @pytest.mark.parametrize("algo", OPTIMAL_ALGORITHMS)
    @pytest.mark.parametrize("start,end", [
        ((0, 0), (4, 4)),
        ((4, 0), (0, 3)),
        ((2, 2), (2, 0)),
        ((0, 4), (3, 1)),
    ])
    def test_manhattan_optimal(self, algo, start, end):
        grid = build_grid(5, 5, start, end)
        result = search(algo, grid)
        assert result.found
        assert result.edge_count == manhattan(start, end)
        assert_valid_path(grid, result, start, end)

    @pytest.mark.parametrize("start,end", [((0, 0), (4, 4)), ((4, 0), (0, 3))])
    def test_dfs_path_at_least_manhattan(self, start, end):
        grid = build_grid(5, 5, start, end)
        result = search("dfs", grid)
        assert result.found
        assert result.edge_count >= manhattan(start, end)
        assert_valid_path(grid, result, start, end)

    @pytest.mark.parametrize("algo", OPTIMAL_ALGORITHMS)
    def test_3x3_corner_to_corner(self, algo, open_3x3):
        result = search(algo, open_3x3)
        assert result.found
        assert len(result.path) == 3
        assert result.edge_count == 4
        assert result.path[0].position in ((0, 1), (1, 0))
        assert result.path[-1].position in ((1, 2), (2, 1))

    def test_bfs_predecessor_fixed_at_first_enqueue(self, open_3x3):
        result = search("bfs", open_3x3)
        # (1, 2) is enqueued from (0, 2) before (1, 1) is expanded
        assert result.path_positions == [(0, 1), (0, 2), (1, 2)]
        assert result.visited_order[:3] == [(0, 0), (0, 1), (1, 0)]

    @pytest.mark.parametrize("algo", OPTIMAL_ALGORITHMS)
    def test_adjacent_markers(self, algo):
        grid = build_grid(3, 3, (0, 0), (0, 1))
        result = search(algo, grid)
        assert result.found
        assert result.path == []
        assert result.edge_count == 1

    def test_dijkstra_total_cost(self, open_3x3):
        algo = DijkstraAlgo()
        algo.init(open_3x3)
        algo.search()
        assert algo.step().metrics["total_cost"] == pytest.approx(4.0)


class TestWalls:
    @pytest.mark.parametrize("algo", OPTIMAL_ALGORITHMS)
    def test_detour_through_gap(self, algo, wall_row_5x5):
        result = search(algo, wall_row_5x5)
        assert result.found
        assert result.edge_count == 12
        assert result.edge_count > manhattan((0, 0), (4, 0))
        assert (2, 4) in result.path_positions
        assert_valid_path(wall_row_5x5, result, (0, 0), (4, 0))

    def test_dfs_through_gap(self, wall_row_5x5):
        result = search("dfs", wall_row_5x5)
        assert result.found
        assert (2, 4) in result.path_positions
        assert_valid_path(wall_row_5x5, result, (0, 0), (4, 0))

    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_unreachable_end(self, algo, sealed_end):
        result = search(algo, sealed_end)
        assert not result.found
        assert result.path == []
        assert result.edge_count == 0

        component = {
            c.position for c in sealed_end.iter_cells()
            if c.category in (EMPTY, START)
        }
        assert set(result.visited_order) == component
        assert len(result.visited) == len(component) == 21

    @pytest.mark.parametrize("algo", ["dijkstra", "astar"])
    def test_priority_visit_order_around_wall(self, algo):
        grid = build_grid(3, 4, (0, 0), (0, 3), walls=[(0, 2), (1, 2)])
        result = search(algo, grid)
        assert result.visited_order == [
            (0, 0), (0, 1), (1, 0), (1, 1), (2, 0),
            (2, 1), (2, 2), (2, 3), (1, 3), (0, 3),
        ]
        assert result.path_positions == [(0, 1), (1, 1), (2, 1), (2, 2), (2, 3), (1, 3)]

    @pytest.mark.parametrize("algo,order", [
        ("dijkstra", [(0, 0), (0, 1), (1, 0), (0, 2)]),
        ("astar", [(0, 0), (0, 1), (0, 2)]),
    ])
    def test_equal_priorities_expand_in_discovery_order(self, algo, order):
        grid = build_grid(3, 3, (0, 0), (0, 2))
        result = search(algo, grid)
        assert result.visited_order == order
        assert result.path_positions == [(0, 1)]

    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_walls_never_visited(self, algo, wall_row_5x5):
        result = search(algo, wall_row_5x5)
        for pos in result.visited_order:
            assert not wall_row_5x5.is_wall(pos)


class TestRuns:
    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_idempotent(self, algo):
        walls = [(1, 1), (1, 2), (3, 3), (2, 3)]
        a = build_grid(6, 6, (0, 0), (5, 4), walls)
        b = build_grid(6, 6, (0, 0), (5, 4), walls)
        first, second = search(algo, a), search(algo, b)
        assert first.visited_order == second.visited_order
        assert first.path_positions == second.path_positions

    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_caller_grid_untouched(self, algo, wall_row_5x5):
        before = [(c.category, c.cost, c.visited, c.predecessor)
                  for c in wall_row_5x5.iter_cells()]
        search(algo, wall_row_5x5)
        after = [(c.category, c.cost, c.visited, c.predecessor)
                 for c in wall_row_5x5.iter_cells()]
        assert before == after

    @pytest.mark.parametrize("first", ALL_ALGORITHMS)
    def test_no_state_bleed_between_algorithms(self, first, wall_row_5x5):
        baseline = search("dfs", wall_row_5x5)
        search(first, wall_row_5x5)
        again = search("dfs", wall_row_5x5)
        assert again.visited_order == baseline.visited_order
        assert again.path_positions == baseline.path_positions

    def test_module_functions_match_registry(self, wall_row_5x5):
        assert (dijkstra(wall_row_5x5).visited_order
                == search("dijkstra", wall_row_5x5).visited_order)

    def test_explicit_endpoints_override_markers(self, open_3x3):
        result = search("bfs", open_3x3, start=(2, 0), end=(2, 2))
        assert result.found
        assert result.path_positions == [(2, 1)]


class TestStepApi:
    def test_idle_before_init(self):
        assert DijkstraAlgo().step().status == "idle"

    def test_search_requires_init(self):
        with pytest.raises(SearchError):
            DijkstraAlgo().search()

    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_closed_cells_replay_visited_order(self, algo, wall_row_5x5):
        runner = make_algo(algo)
        runner.init(wall_row_5x5)
        closed = []
        statuses = []
        while True:
            res = runner.step()
            statuses.append(res.status)
            closed.extend(c.position for c in res.closed)
            if res.status in ("done", "no_path"):
                break
        assert statuses[0] == "running"
        assert statuses[-1] == "done"
        assert closed == runner.result().visited_order
        assert closed[0] == (0, 0)
        assert closed[-1] == (4, 0)

    def test_finished_run_keeps_reporting(self, open_3x3):
        runner = make_algo("astar")
        runner.init(open_3x3)
        result = runner.search()
        res = runner.step()
        assert res.status == "done"
        assert [c.position for c in res.path] == result.path_positions
        assert res.metrics["path_len"] == 3
        assert res.metrics["algo"] == "A*"

    def test_reset_replays_identically(self, wall_row_5x5):
        runner = make_algo("dfs")
        runner.init(wall_row_5x5)
        first = runner.search()
        runner.reset()
        second = runner.search()
        assert first.visited_order == second.visited_order

    def test_start_cost_is_zero(self, open_3x3):
        runner = make_algo("bfs")
        runner.init(open_3x3)
        assert runner.grid.cell((0, 0)).cost == 0
        assert runner.grid.cell((1, 1)).cost == math.inf


class TestValidation:
    @pytest.mark.parametrize("algo", ALL_ALGORITHMS)
    def test_end_on_wall(self, algo, open_3x3):
        open_3x3.set_category((1, 1), WALL)
        with pytest.raises(InvalidPositionError):
            search(algo, open_3x3, end=(1, 1))

    def test_out_of_bounds_start(self, open_3x3):
        with pytest.raises(InvalidPositionError) as exc:
            search("bfs", open_3x3, start=(5, 5))
        assert exc.value.position == (5, 5)

    def test_same_start_and_end(self, open_3x3):
        with pytest.raises(InvalidPositionError):
            search("astar", open_3x3, start=(1, 1), end=(1, 1))


class TestRegistry:
    @pytest.mark.parametrize("raw,key", [
        ("dijkstra", "dijkstra"),
        ("A*", "astar"),
        ("a-star", "astar"),
        (" BFS ", "bfs"),
        ("dfs", "dfs"),
    ])
    def test_normalize(self, raw, key):
        assert normalize_algorithm(raw) == key

    def test_unknown_algorithm(self, open_3x3):
        with pytest.raises(UnknownAlgorithmError) as exc:
            search("greedy", open_3x3)
        assert exc.value.algorithm == "greedy"
        assert exc.value.error_code == "ALGO_UNKNOWN"
        assert str(exc.value).startswith("[ALGO_UNKNOWN]")

    def test_labels(self):
        for key in ALL_ALGORITHMS:
            assert make_algo(key).name == ALGORITHM_LABELS[key]

    def test_markers_survive_in_result_grid(self, open_3x3):
        runner = make_algo("dijkstra")
        runner.init(open_3x3)
        runner.search()
        assert runner.grid.cell((0, 0)).category == START
        assert runner.grid.cell((2, 2)).category == END
