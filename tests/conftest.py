import numpy as np
import pytest

from maze_rl.domain.types import Grid
from maze_rl.utils.rng import SeededRNG


@pytest.fixture
def rng():
    return SeededRNG(1234)


@pytest.fixture
def open_grid():
    """Factory for wall-free square grids."""
    def _make(size: int) -> Grid:
        return Grid(np.zeros((size, size), dtype=bool))
    return _make
