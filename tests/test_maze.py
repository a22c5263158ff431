"""Tests for maze generation and the Grid type."""

import numpy as np
import pytest

from maze_rl.domain.maze import MazeGenerator, MazeTuning, _count_open, generate
from maze_rl.domain.paths import has_path, reachable_from
from maze_rl.domain.types import Grid
from maze_rl.utils.rng import SeededRNG

SIZES = [2, 3, 4, 5, 8, 13, 21, 34, 50]
DENSITIES = [0.0, 0.2, 0.4, 0.7, 1.0]


@pytest.mark.parametrize("size", SIZES)
@pytest.mark.parametrize("density", DENSITIES)
def test_generated_maze_is_solvable(size, density):
    grid = generate(size, density, SeededRNG(size * 100 + int(density * 10)))

    assert grid.size == size
    assert not grid.is_wall(0, 0)
    assert not grid.is_wall(size - 1, size - 1)
    assert has_path(grid)


def test_many_seeds_stay_solvable():
    for seed in range(60):
        size = 5 + seed % 8
        density = (seed % 11) / 10
        grid = generate(size, density, SeededRNG(seed))
        assert grid.start == (0, 0)
        assert grid.goal == (size - 1, size - 1)
        assert has_path(grid), f"seed {seed} produced an unsolvable maze"


def test_generate_without_rng_uses_default_source():
    grid = generate(9, 0.3)
    assert has_path(grid)


@pytest.mark.parametrize("size,density", [(1, 0.3), (0, 0.3), (10, -0.1), (10, 1.5)])
def test_invalid_parameters_fail_fast(size, density):
    with pytest.raises(ValueError):
        generate(size, density, SeededRNG(0))


def test_same_seed_gives_same_maze():
    assert generate(15, 0.3, SeededRNG(42)) == generate(15, 0.3, SeededRNG(42))


def test_different_seeds_give_valid_and_varied_mazes():
    grids = [generate(10, 0.2, SeededRNG(seed)) for seed in range(5)]

    for grid in grids:
        assert has_path(grid)
        assert grid.is_open(0, 0) and grid.is_open(9, 9)

    layouts = {tuple(map(tuple, grid.to_rows())) for grid in grids}
    assert len(layouts) > 1


def test_pure_backtracker_carves_a_spanning_tree():
    # No relaxation and no extra connections leaves only the carved corridors
    tuning = MazeTuning(relaxation_floor=0.0, relaxation_scale=0.0, connection_ratio=0.0)
    grid = MazeGenerator(SeededRNG(3), tuning).generate(9, 0.5)

    cells_per_side = 5
    open_cells = {(x, y) for y in range(9) for x in range(9) if grid.is_open(x, y)}
    assert len(open_cells) == 2 * cells_per_side ** 2 - 1
    assert reachable_from(grid) == open_cells

    # Every cell on even coordinates is a carved room
    for y in range(0, 9, 2):
        for x in range(0, 9, 2):
            assert grid.is_open(x, y)


def test_relaxation_opens_more_walls_at_low_density():
    low = MazeGenerator(SeededRNG(5)).generate(31, 0.0)
    high = MazeGenerator(SeededRNG(5)).generate(31, 1.0)
    assert low.wall_count < high.wall_count


def test_relaxation_only_opens_walls_with_few_open_neighbors():
    # A removal probability of 1 opens every wall the neighbour rule allows
    generator = MazeGenerator(SeededRNG(4), MazeTuning(relaxation_floor=1.0, protected_radius=0))
    cells = np.ones((9, 9), dtype=bool)
    generator._carve_passages(cells, (0, 0))
    before = cells.copy()

    generator._relax_walls(cells, 1.0, (0, 0), (8, 8))

    assert cells.sum() < before.sum()
    for y in range(1, 8):
        for x in range(1, 8):
            if before[y, x] and _count_open(before, x, y) >= 3:
                assert cells[y, x]
            if cells[y, x]:
                # Open neighbour counts only grow during the pass
                assert _count_open(cells, x, y) >= 3
    assert (cells[0, :] == before[0, :]).all()
    assert (cells[:, 0] == before[:, 0]).all()


def _connection_fixture():
    # The centre wall joins two open cells; every other interior wall
    # touches at most one open cell, even after the centre opens
    cells = np.ones((5, 5), dtype=bool)
    cells[2, 1] = False
    cells[2, 3] = False
    return cells


def test_connections_only_open_walls_joining_corridors():
    cells = _connection_fixture()
    expected = cells.copy()
    expected[2, 2] = False

    MazeGenerator(SeededRNG(6), MazeTuning(connection_ratio=20.0))._add_connections(cells)

    assert (cells == expected).all()


def test_connections_respect_neighbor_threshold():
    cells = _connection_fixture()
    tuning = MazeTuning(connection_ratio=20.0, min_connection_neighbors=3)

    MazeGenerator(SeededRNG(6), tuning)._add_connections(cells)

    assert (cells == _connection_fixture()).all()


def test_relaxation_keeps_start_and_goal_surroundings():
    tuning = MazeTuning(connection_ratio=0.0)
    baseline = MazeTuning(relaxation_floor=0.0, relaxation_scale=0.0, connection_ratio=0.0)
    relaxed = MazeGenerator(SeededRNG(8), tuning).generate(21, 0.0)
    carved = MazeGenerator(SeededRNG(8), baseline).generate(21, 0.0)

    # The carving pass consumes the same random draws first, so the two
    # grids only differ where relaxation opened walls
    for y in range(3):
        for x in range(3):
            assert relaxed.is_wall(x, y) == carved.is_wall(x, y)
            assert relaxed.is_wall(20 - x, 20 - y) == carved.is_wall(20 - x, 20 - y)


def test_l_path_repair_connects_start_and_goal():
    cells = np.ones((6, 6), dtype=bool)
    MazeGenerator._carve_l_path(cells, (0, 0), (5, 5))
    cells[0, 0] = False

    grid = Grid(cells)
    assert has_path(grid)
    assert all(grid.is_open(x, 0) for x in range(6))
    assert all(grid.is_open(5, y) for y in range(6))
    assert grid.wall_count == 36 - 11


def test_size_two_maze_is_repaired():
    grid = generate(2, 0.3, SeededRNG(0))
    assert has_path(grid)


class TestGrid:

    def test_out_of_bounds_is_wall(self, open_grid):
        grid = open_grid(4)
        assert grid.is_wall(-1, 0)
        assert grid.is_wall(0, 4)
        assert grid.classify(4, 4) == "wall"

    def test_classify(self):
        grid = Grid.from_rows([
            [0, 1, 0],
            [0, 0, 0],
            [1, 0, 0],
        ])
        assert grid.classify(1, 0) == "wall"
        assert grid.classify(0, 0) == "open"
        assert grid.classify(2, 2) == "goal"
        assert grid.is_goal(2, 2)
        assert grid.open_neighbor_count(1, 1) == 3

    def test_grid_is_read_only(self, open_grid):
        grid = open_grid(3)
        with pytest.raises(ValueError):
            grid.walls[1, 1] = True

    def test_source_array_is_copied(self):
        cells = np.zeros((3, 3), dtype=bool)
        grid = Grid(cells)
        cells[1, 1] = True
        assert grid.is_open(1, 1)

    @pytest.mark.parametrize("rows", [
        [[1, 0], [0, 0]],
        [[0, 0], [0, 1]],
    ])
    def test_closed_start_or_goal_rejected(self, rows):
        with pytest.raises(ValueError):
            Grid.from_rows(rows)

    def test_non_square_rejected(self):
        with pytest.raises(ValueError):
            Grid(np.zeros((2, 3), dtype=bool))

    def test_equality_is_structural(self):
        a = Grid.from_rows([[0, 1], [0, 0]])
        b = Grid.from_rows([[0, 1], [0, 0]])
        c = Grid.from_rows([[0, 0], [0, 0]])
        assert a == b
        assert a != c
