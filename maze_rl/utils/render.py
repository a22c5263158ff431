"""Plain-text rendering of mazes and trajectories."""

from typing import Iterable, Optional

from ..domain.types import Coord, Grid

WALL_CHAR = "#"
OPEN_CHAR = "."
PATH_CHAR = "*"
START_CHAR = "S"
GOAL_CHAR = "G"


def render_grid(grid: Grid, path: Optional[Iterable[Coord]] = None) -> str:
    """Render the grid one row per line, optionally tracing a path."""
    rows = [[WALL_CHAR if grid.is_wall(x, y) else OPEN_CHAR for x in range(grid.size)]
            for y in range(grid.size)]

    if path is not None:
        for x, y in path:
            if grid.is_valid_coord((x, y)) and not grid.is_wall(x, y):
                rows[y][x] = PATH_CHAR

    sx, sy = grid.start
    gx, gy = grid.goal
    rows[sy][sx] = START_CHAR
    rows[gy][gx] = GOAL_CHAR

    return "\n".join("".join(row) for row in rows)
