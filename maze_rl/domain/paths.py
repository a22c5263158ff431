"""Breadth-first path search over open grid cells."""

from collections import deque
from typing import Dict, List, Optional, Set

from .types import ACTION_DELTAS, Coord, Grid


def find_path_bfs(grid: Grid, start: Optional[Coord] = None,
                  target: Optional[Coord] = None) -> Optional[List[Coord]]:
    """
    Find a shortest 4-directional path of open cells.

    Args:
        grid: Grid to search
        start: Start coordinate (grid start if None)
        target: Target coordinate (grid goal if None)

    Returns:
        List of coordinates from start to target inclusive, or None if the
        target is unreachable
    """
    start = grid.start if start is None else start
    target = grid.goal if target is None else target

    if grid.is_wall(*start) or grid.is_wall(*target):
        return None

    queue = deque([start])
    parent: Dict[Coord, Coord] = {}
    visited = {start}

    while queue:
        current = queue.popleft()

        if current == target:
            # Reconstruct path
            path = [current]
            while current in parent:
                current = parent[current]
                path.append(current)
            path.reverse()
            return path

        for dx, dy in ACTION_DELTAS.values():
            neighbor = (current[0] + dx, current[1] + dy)
            if neighbor not in visited and grid.is_open(*neighbor):
                visited.add(neighbor)
                parent[neighbor] = current
                queue.append(neighbor)

    return None


def has_path(grid: Grid, start: Optional[Coord] = None, target: Optional[Coord] = None) -> bool:
    """Check whether target is reachable from start."""
    return find_path_bfs(grid, start, target) is not None


def shortest_path_length(grid: Grid) -> Optional[int]:
    """Number of moves on a shortest start-to-goal path, None if unreachable."""
    path = find_path_bfs(grid)
    return len(path) - 1 if path is not None else None


def reachable_from(grid: Grid, start: Optional[Coord] = None) -> Set[Coord]:
    """Analyze which open cells are reachable from start."""
    start = grid.start if start is None else start
    if grid.is_wall(*start):
        return set()

    queue = deque([start])
    reachable = {start}

    while queue:
        x, y = queue.popleft()
        for dx, dy in ACTION_DELTAS.values():
            neighbor = (x + dx, y + dy)
            if neighbor not in reachable and grid.is_open(*neighbor):
                reachable.add(neighbor)
                queue.append(neighbor)

    return reachable
