"""Core type definitions for the maze Q-learning system."""

from dataclasses import dataclass
from typing import Optional, Tuple, Literal, Dict, List
import numpy as np

# Coordinate type for grid positions, (x, y)
Coord = Tuple[int, int]

# Cell classifications exposed to renderers
CellState = Literal["open", "wall", "goal"]

# Actions the agent can take
Action = Literal["up", "right", "down", "left"]

# Declaration order doubles as the greedy tie-break order
ACTIONS: Tuple[Action, ...] = ("up", "right", "down", "left")

ACTION_DELTAS: Dict[Action, Coord] = {
    "up": (0, -1),
    "right": (1, 0),
    "down": (0, 1),
    "left": (-1, 0),
}

# Rewards
REWARD_GOAL = 100.0
REWARD_WALL = -10.0
REWARD_STEP = -1.0


def validate_rate(name: str, value: float, allow_zero: bool = False) -> float:
    """
    Check that a learning parameter lies in (0, 1], or [0, 1] with allow_zero.

    Raises:
        ValueError: If the value is outside its range
    """
    low_ok = value >= 0.0 if allow_zero else value > 0.0
    if not (low_ok and value <= 1.0):
        bounds = "[0, 1]" if allow_zero else "(0, 1]"
        raise ValueError(f"{name} must be in {bounds}, got {value}")
    return float(value)


def validate_maze_params(size: int, wall_density: float) -> None:
    """Validate maze dimensions and density."""
    if size < 2:
        raise ValueError(f"Maze size must be at least 2, got {size}")
    if not (0.0 <= wall_density <= 1.0):
        raise ValueError(f"Wall density must be between 0.0 and 1.0, got {wall_density}")


@dataclass
class QValues:
    """Stores Q-values for all actions at a state."""
    up: float = 0.0
    right: float = 0.0
    down: float = 0.0
    left: float = 0.0

    def as_array(self) -> np.ndarray:
        """Return Q-values as numpy array in action declaration order."""
        return np.array([self.up, self.right, self.down, self.left])

    def get(self, action: Action) -> float:
        """Get the Q-value for an action."""
        return getattr(self, action)

    def set(self, action: Action, value: float) -> None:
        """Set the Q-value for an action."""
        setattr(self, action, float(value))

    def max_value(self) -> float:
        """Get the maximum Q-value."""
        return max(self.up, self.right, self.down, self.left)

    def best_action(self) -> Action:
        """Get the action with highest Q-value; ties go to the first declared."""
        # np.argmax returns the first index among equal maxima
        return ACTIONS[int(np.argmax(self.as_array()))]

    def as_dict(self) -> Dict[Action, float]:
        """Return Q-values keyed by action name."""
        return {action: self.get(action) for action in ACTIONS}

    def __len__(self) -> int:
        """Number of actions."""
        return len(ACTIONS)


@dataclass(frozen=True, eq=False)
class Grid:
    """
    Immutable square maze grid.

    ``walls`` is indexed ``[y, x]`` with True marking a wall. Start is always
    (0, 0) and the goal is always (size - 1, size - 1); both must be open.
    """
    walls: np.ndarray

    def __post_init__(self):
        walls = np.array(self.walls, dtype=bool)
        if walls.ndim != 2 or walls.shape[0] != walls.shape[1]:
            raise ValueError(f"Grid must be square, got shape {walls.shape}")
        if walls.shape[0] < 2:
            raise ValueError(f"Grid size must be at least 2, got {walls.shape[0]}")
        if walls[0, 0] or walls[-1, -1]:
            raise ValueError("Start and goal cells must be open")
        walls.flags.writeable = False
        object.__setattr__(self, "walls", walls)

    @classmethod
    def from_rows(cls, rows: List[List[int]]) -> "Grid":
        """Build a grid from nested rows where 1 is a wall and 0 is open."""
        return cls(np.array(rows, dtype=bool))

    @property
    def size(self) -> int:
        return int(self.walls.shape[0])

    @property
    def start(self) -> Coord:
        return (0, 0)

    @property
    def goal(self) -> Coord:
        return (self.size - 1, self.size - 1)

    def is_valid_coord(self, coord: Coord) -> bool:
        """Check if coordinate is within grid bounds."""
        x, y = coord
        return 0 <= x < self.size and 0 <= y < self.size

    def is_wall(self, x: int, y: int) -> bool:
        """Out-of-bounds coordinates classify as wall."""
        if not self.is_valid_coord((x, y)):
            return True
        return bool(self.walls[y, x])

    def is_open(self, x: int, y: int) -> bool:
        return not self.is_wall(x, y)

    def is_goal(self, x: int, y: int) -> bool:
        return (x, y) == self.goal

    def classify(self, x: int, y: int) -> CellState:
        """Classify a cell for rendering."""
        if self.is_wall(x, y):
            return "wall"
        if self.is_goal(x, y):
            return "goal"
        return "open"

    def open_neighbor_count(self, x: int, y: int) -> int:
        """Count 4-adjacent open cells."""
        return sum(1 for dx, dy in ACTION_DELTAS.values() if self.is_open(x + dx, y + dy))

    @property
    def wall_count(self) -> int:
        return int(self.walls.sum())

    def to_rows(self) -> List[List[int]]:
        """Plain nested rows (1 = wall, 0 = open) for exporters."""
        return self.walls.astype(int).tolist()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return bool(np.array_equal(self.walls, other.walls))

    __hash__ = None


@dataclass(frozen=True)
class MazeConfig:
    """Maze dimensions and wall density."""
    size: int = 15
    wall_density: float = 0.3

    def __post_init__(self):
        validate_maze_params(self.size, self.wall_density)


@dataclass(frozen=True)
class RLConfig:
    """Configuration for a training session."""
    learning_rate: float = 0.1
    discount_factor: float = 0.9
    exploration_rate: float = 0.1
    total_episodes: int = 1000
    max_steps: int = 1000
    history_size: int = 100  # Rolling window of per-episode step counts
    log_interval: int = 50

    def __post_init__(self):
        validate_rate("learning_rate", self.learning_rate)
        validate_rate("discount_factor", self.discount_factor)
        validate_rate("exploration_rate", self.exploration_rate, allow_zero=True)
        if self.total_episodes < 1:
            raise ValueError(f"total_episodes must be positive, got {self.total_episodes}")
        if self.max_steps < 1:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")
        if self.history_size < 1:
            raise ValueError(f"history_size must be positive, got {self.history_size}")
        if self.log_interval < 1:
            raise ValueError(f"log_interval must be positive, got {self.log_interval}")


@dataclass(frozen=True)
class EpisodeResult:
    """Outcome of a single episode; path starts with the start position."""
    path: Tuple[Coord, ...]
    success: bool
    steps: int
    total_reward: float

    @property
    def final_position(self) -> Coord:
        return self.path[-1]


@dataclass(frozen=True)
class Episode:
    """Represents a single training episode as recorded by the driver."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    epsilon_used: float
    elapsed_time: float = 0.0  # Time taken for this episode in seconds


@dataclass
class TrainingStats:
    """Cumulative training statistics, updated after every episode."""
    total_episodes: int = 0
    total_steps: int = 0
    successful_episodes: int = 0
    best_steps: Optional[int] = None  # Fewest steps among successful episodes
    states_explored: int = 0
    total_values: int = 0
    max_value: float = 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_steps(self) -> float:
        return self.total_steps / self.total_episodes if self.total_episodes > 0 else 0.0

    def record(self, result: EpisodeResult) -> None:
        """Fold one episode outcome into the running totals."""
        self.total_episodes += 1
        self.total_steps += result.steps
        if result.success:
            self.successful_episodes += 1
            if self.best_steps is None or result.steps < self.best_steps:
                self.best_steps = result.steps

    def as_dict(self) -> Dict[str, object]:
        return {
            "total_episodes": self.total_episodes,
            "total_steps": self.total_steps,
            "successful_episodes": self.successful_episodes,
            "success_rate": self.success_rate,
            "average_steps": self.average_steps,
            "best_steps": self.best_steps,
            "states_explored": self.states_explored,
            "total_values": self.total_values,
            "max_value": self.max_value,
        }
