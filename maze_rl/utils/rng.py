"""Random number generation utilities for maze generation and exploration."""

import random
from typing import Optional


class SeededRNG:
    """Seeded random number generator for reproducible results.

    Each instance owns its own generator so that a maze and an agent can be
    driven by independent, injectable random sources.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        """Generate random integer in [a, b]."""
        return self._random.randint(a, b)

    def choice(self, seq):
        """Choose random element from sequence."""
        return self._random.choice(seq)

    def spawn(self) -> "SeededRNG":
        """Derive an independent child generator from this one."""
        return SeededRNG(self._random.randrange(2**31 - 1))


# Default RNG instance
default_rng = SeededRNG()


def set_global_seed(seed: Optional[int]):
    """Replace the default generator used when no RNG is injected."""
    global default_rng
    default_rng = SeededRNG(seed)


def get_default_rng() -> SeededRNG:
    """Return the current default generator."""
    return default_rng
