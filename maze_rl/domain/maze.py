"""Maze generation with a guaranteed start-to-goal path."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .paths import has_path
from .types import ACTION_DELTAS, Coord, Grid, validate_maze_params
from ..utils.rng import SeededRNG, get_default_rng

logger = logging.getLogger(__name__)


class MazeGenerationError(RuntimeError):
    """Raised when a generated grid fails its reachability check after repair."""


@dataclass(frozen=True)
class MazeTuning:
    """Thresholds that shape maze character after carving."""
    relaxation_floor: float = 0.1  # Minimum wall removal probability
    relaxation_scale: float = 0.3  # Removal probability per unit of openness
    max_open_neighbors: int = 3  # Only relax walls with fewer open neighbors
    protected_radius: int = 2  # Cells this close to start/goal are never relaxed
    connection_ratio: float = 0.1  # Extra connection attempts per unit of size
    min_connection_neighbors: int = 2

    def removal_probability(self, wall_density: float) -> float:
        return max(self.relaxation_floor, (1.0 - wall_density) * self.relaxation_scale)


def _count_open(cells: np.ndarray, x: int, y: int) -> int:
    size = cells.shape[0]
    count = 0
    for dx, dy in ACTION_DELTAS.values():
        nx, ny = x + dx, y + dy
        if 0 <= nx < size and 0 <= ny < size and not cells[ny, nx]:
            count += 1
    return count


class MazeGenerator:
    """
    Builds square mazes in several passes over a wall matrix.

    A randomized depth-first backtracker carves single-width corridors, a
    relaxation pass opens extra walls according to the wall density, a boost
    pass adds a few cross connections, and a final check carves an L-shaped
    corridor if the probabilistic passes left the goal unreachable.
    """

    def __init__(self, rng: Optional[SeededRNG] = None, tuning: Optional[MazeTuning] = None):
        self.rng = rng if rng is not None else get_default_rng()
        self.tuning = tuning or MazeTuning()

    def generate(self, size: int, wall_density: float) -> Grid:
        """
        Generate a maze.

        Args:
            size: Side length (must be >= 2)
            wall_density: Wall density in [0, 1]; lower values open more walls

        Returns:
            Grid with open start and goal and a path between them

        Raises:
            ValueError: If size or wall_density is out of range
            MazeGenerationError: If the repaired grid is still unsolvable
        """
        validate_maze_params(size, wall_density)
        logger.debug("Generating %dx%d maze with wall density %.2f", size, size, wall_density)

        start: Coord = (0, 0)
        goal: Coord = (size - 1, size - 1)

        # Start with all walls
        cells = np.ones((size, size), dtype=bool)

        self._carve_passages(cells, start)
        self._relax_walls(cells, wall_density, start, goal)

        cells[start[1], start[0]] = False
        cells[goal[1], goal[0]] = False

        self._add_connections(cells)

        grid = Grid(cells)
        if not has_path(grid):
            logger.debug("Maze %dx%d lost connectivity, carving fallback corridor", size, size)
            self._carve_l_path(cells, start, goal)
            grid = Grid(cells)
            if not has_path(grid):
                raise MazeGenerationError(f"No path from {start} to {goal} after repair")

        return grid

    def _carve_passages(self, cells: np.ndarray, start: Coord) -> None:
        """Randomized depth-first backtracking over cells two apart."""
        size = cells.shape[0]
        visited = np.zeros_like(cells)

        x, y = start
        visited[y, x] = True
        cells[y, x] = False
        stack: List[Coord] = [start]

        while stack:
            x, y = stack[-1]

            neighbors: List[Tuple[int, int, int, int]] = []
            for dx, dy in ACTION_DELTAS.values():
                nx, ny = x + dx * 2, y + dy * 2
                if 0 <= nx < size and 0 <= ny < size and not visited[ny, nx]:
                    neighbors.append((nx, ny, x + dx, y + dy))

            if not neighbors:
                # Backtrack
                stack.pop()
                continue

            nx, ny, wall_x, wall_y = self.rng.choice(neighbors)

            # Remove wall between current cell and chosen neighbor
            cells[wall_y, wall_x] = False
            cells[ny, nx] = False
            visited[ny, nx] = True
            stack.append((nx, ny))

    def _relax_walls(self, cells: np.ndarray, wall_density: float,
                     start: Coord, goal: Coord) -> None:
        """Open interior walls at random without creating open rooms."""
        size = cells.shape[0]
        probability = self.tuning.removal_probability(wall_density)
        radius = self.tuning.protected_radius

        for y in range(1, size - 1):
            for x in range(1, size - 1):
                if not cells[y, x]:
                    continue

                near_start = abs(x - start[0]) <= radius and abs(y - start[1]) <= radius
                near_goal = abs(x - goal[0]) <= radius and abs(y - goal[1]) <= radius
                if near_start or near_goal:
                    continue

                if (self.rng.random() < probability and
                        _count_open(cells, x, y) < self.tuning.max_open_neighbors):
                    cells[y, x] = False

    def _add_connections(self, cells: np.ndarray) -> None:
        """Open a few interior walls that already join two corridors."""
        size = cells.shape[0]
        if size <= 2:
            return

        attempts = int(size * self.tuning.connection_ratio)
        for _ in range(attempts):
            x = self.rng.randint(1, size - 2)
            y = self.rng.randint(1, size - 2)
            if cells[y, x] and _count_open(cells, x, y) >= self.tuning.min_connection_neighbors:
                cells[y, x] = False

    @staticmethod
    def _carve_l_path(cells: np.ndarray, start: Coord, goal: Coord) -> None:
        """Open a corridor along the start row, then down the goal column."""
        x, y = start
        while x < goal[0]:
            cells[y, x] = False
            x += 1
        while y < goal[1]:
            cells[y, x] = False
            y += 1
        cells[goal[1], goal[0]] = False


def generate(size: int, wall_density: float, rng: Optional[SeededRNG] = None,
             tuning: Optional[MazeTuning] = None) -> Grid:
    """Generate a solvable maze; see MazeGenerator.generate."""
    return MazeGenerator(rng, tuning).generate(size, wall_density)
