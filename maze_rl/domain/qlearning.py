"""Q-Learning agent for maze navigation."""

from typing import Dict, Optional

from .types import (
    ACTIONS, ACTION_DELTAS, REWARD_GOAL, REWARD_STEP, REWARD_WALL,
    Action, Coord, EpisodeResult, Grid, QValues, validate_rate,
)
from ..utils.rng import SeededRNG, get_default_rng


class QLearningAgent:
    """
    Tabular Q-learning agent with an epsilon-greedy policy.

    The value table maps a state (x, y) to the values of all four actions.
    A state is fully initialised to zeros the first time choose_action or
    update touches it; read-only queries never initialise.
    """

    def __init__(self, maze_size: int, learning_rate: float = 0.1,
                 discount_factor: float = 0.9, exploration_rate: float = 0.1,
                 rng: Optional[SeededRNG] = None):
        if maze_size < 2:
            raise ValueError(f"Maze size must be at least 2, got {maze_size}")
        self.maze_size = maze_size
        self.learning_rate = validate_rate("learning_rate", learning_rate)
        self.discount_factor = validate_rate("discount_factor", discount_factor)
        self.exploration_rate = validate_rate("exploration_rate", exploration_rate, allow_zero=True)
        self.rng = rng if rng is not None else get_default_rng()
        self.q_table: Dict[Coord, QValues] = {}

    def _ensure_state(self, state: Coord) -> QValues:
        q_values = self.q_table.get(state)
        if q_values is None:
            q_values = QValues()
            self.q_table[state] = q_values
        return q_values

    def update_parameters(self, learning_rate: Optional[float] = None,
                          discount_factor: Optional[float] = None,
                          exploration_rate: Optional[float] = None) -> None:
        """Change learning parameters; takes effect on the next decision."""
        # Validate everything before touching anything
        if learning_rate is not None:
            learning_rate = validate_rate("learning_rate", learning_rate)
        if discount_factor is not None:
            discount_factor = validate_rate("discount_factor", discount_factor)
        if exploration_rate is not None:
            exploration_rate = validate_rate("exploration_rate", exploration_rate, allow_zero=True)

        if learning_rate is not None:
            self.learning_rate = learning_rate
        if discount_factor is not None:
            self.discount_factor = discount_factor
        if exploration_rate is not None:
            self.exploration_rate = exploration_rate

    def choose_action(self, state: Coord) -> Action:
        """Select action using epsilon-greedy policy."""
        q_values = self._ensure_state(state)

        if self.rng.random() < self.exploration_rate:
            return self.rng.choice(ACTIONS)
        return q_values.best_action()

    @staticmethod
    def next_position(state: Coord, action: Action) -> Coord:
        dx, dy = ACTION_DELTAS[action]
        return (state[0] + dx, state[1] + dy)

    @staticmethod
    def reward(from_pos: Coord, to_pos: Coord, grid: Grid, goal: Coord) -> float:
        """
        Reward for attempting a move from from_pos to to_pos.

        Invalid moves (off the grid or into a wall) cost REWARD_WALL, reaching
        the goal earns REWARD_GOAL, and any other move costs REWARD_STEP.
        """
        if grid.is_wall(*to_pos):
            return REWARD_WALL
        if to_pos == goal:
            return REWARD_GOAL
        return REWARD_STEP

    def update(self, state: Coord, action: Action, reward: float, next_state: Coord) -> None:
        """Update Q-value using Q-learning update rule."""
        q_values = self._ensure_state(state)
        next_q_max = self._ensure_state(next_state).max_value()

        current_q = q_values.get(action)
        target = reward + self.discount_factor * next_q_max
        q_values.set(action, current_q + self.learning_rate * (target - current_q))

    def _check_grid(self, grid: Grid) -> None:
        if grid.size != self.maze_size:
            raise ValueError(f"Agent was built for size {self.maze_size}, got a grid of size {grid.size}")

    def run_episode(self, grid: Grid, start: Optional[Coord] = None,
                    goal: Optional[Coord] = None, max_steps: int = 1000) -> EpisodeResult:
        """
        Run one learning episode.

        Args:
            grid: Maze to navigate
            start: Start position (grid start if None)
            goal: Goal position (grid goal if None)
            max_steps: Step budget (must be >= 1)

        Returns:
            EpisodeResult whose path begins with start and has one entry per
            step, including steps where the agent bumped into a wall
        """
        if max_steps < 1:
            raise ValueError(f"max_steps must be positive, got {max_steps}")
        self._check_grid(grid)
        start = grid.start if start is None else start
        goal = grid.goal if goal is None else goal

        state = start
        path = [state]
        total_reward = 0.0
        steps = 0

        while steps < max_steps:
            action = self.choose_action(state)
            candidate = self.next_position(state, action)

            reward = self.reward(state, candidate, grid, goal)
            total_reward += reward

            # Invalid moves leave the agent in place and are learned as a self-loop
            next_state = state if grid.is_wall(*candidate) else candidate
            self.update(state, action, reward, next_state)

            state = next_state
            steps += 1
            path.append(state)

            if state == goal:
                return EpisodeResult(tuple(path), True, steps, total_reward)

        return EpisodeResult(tuple(path), False, steps, total_reward)

    def greedy_path(self, grid: Grid, start: Optional[Coord] = None,
                    goal: Optional[Coord] = None, max_steps: Optional[int] = None) -> EpisodeResult:
        """
        Follow the learned policy without exploring or learning.

        Stops early at a state that has never been visited or when the
        greedy action runs into a wall.
        """
        self._check_grid(grid)
        start = grid.start if start is None else start
        goal = grid.goal if goal is None else goal
        if max_steps is None:
            max_steps = grid.size * grid.size

        state = start
        path = [state]
        total_reward = 0.0

        for _ in range(max_steps):
            q_values = self.q_table.get(state)
            if q_values is None:
                break

            action = q_values.best_action()
            candidate = self.next_position(state, action)
            total_reward += self.reward(state, candidate, grid, goal)
            if grid.is_wall(*candidate):
                break

            state = candidate
            path.append(state)
            if state == goal:
                return EpisodeResult(tuple(path), True, len(path) - 1, total_reward)

        return EpisodeResult(tuple(path), False, len(path) - 1, total_reward)

    def get_value(self, state: Coord) -> Optional[Dict[Action, float]]:
        """Action values for a state, or None if it has never been visited."""
        q_values = self.q_table.get(state)
        return q_values.as_dict() if q_values is not None else None

    def states_explored(self) -> int:
        return len(self.q_table)

    def total_values(self) -> int:
        return sum(len(q_values) for q_values in self.q_table.values())

    def max_value(self) -> float:
        """Largest stored action value, 0.0 for an empty table."""
        if not self.q_table:
            return 0.0
        return max(q_values.max_value() for q_values in self.q_table.values())

    def export_table(self) -> Dict[Coord, Dict[Action, float]]:
        """Copy of the whole table as plain nested dicts."""
        return {state: q_values.as_dict() for state, q_values in self.q_table.items()}

    def reset(self) -> None:
        """Clear all learned values; parameters are kept."""
        self.q_table.clear()
