"""Training session driver connecting the maze generator and the agent."""

import logging
import time
from collections import Counter, deque
from dataclasses import asdict, replace
from typing import Callable, Deque, Dict, List, Optional

import numpy as np

from ..domain.maze import MazeGenerator, MazeTuning
from ..domain.qlearning import QLearningAgent
from ..domain.types import (
    Coord, Episode, EpisodeResult, Grid, MazeConfig, RLConfig, TrainingStats,
)
from ..utils.rng import SeededRNG, get_default_rng
from .fsm import TrainingState, TrainingStateMachine

logger = logging.getLogger(__name__)

EpisodeCallback = Callable[["TrainingSession", EpisodeResult], None]

_LEARNING_PARAMETERS = ("learning_rate", "discount_factor", "exploration_rate")


class TrainingSession:
    """
    Runs a Q-learning agent against one maze for many episodes.

    The session owns the maze, the agent, cumulative statistics, a rolling
    history of per-episode step counts and per-cell visit counts. Training is
    a plain sequential loop; callbacks run between episodes and may pause or
    stop the session.
    """

    def __init__(self, maze_config: Optional[MazeConfig] = None,
                 rl_config: Optional[RLConfig] = None,
                 rng: Optional[SeededRNG] = None,
                 tuning: Optional[MazeTuning] = None):
        self.maze_config = maze_config or MazeConfig()
        self.rl_config = rl_config or RLConfig()
        self.rng = rng if rng is not None else get_default_rng()
        self.tuning = tuning
        self.fsm = TrainingStateMachine()
        self.fsm.add_listener(self._log_state_change)

        self.grid: Grid
        self.agent: QLearningAgent
        self.stats = TrainingStats()
        self.history: Deque[int] = deque(maxlen=self.rl_config.history_size)
        self.recent_episodes: Deque[Episode] = deque(maxlen=self.rl_config.history_size)
        self.visit_counts: Counter = Counter()
        self.last_result: Optional[EpisodeResult] = None

        self.new_maze()

    @property
    def state(self) -> TrainingState:
        return self.fsm.current_state

    @property
    def status(self) -> str:
        return self.fsm.description

    @staticmethod
    def _log_state_change(previous: TrainingState, current: TrainingState) -> None:
        logger.info("Training state %s -> %s", previous.name.lower(), current.name.lower())

    def new_maze(self, maze_config: Optional[MazeConfig] = None) -> Grid:
        """Generate a new maze with a fresh agent and cleared progress."""
        if maze_config is not None:
            self.maze_config = maze_config

        self.fsm.reset_to_idle()

        generator = MazeGenerator(self.rng.spawn(), self.tuning)
        self.grid = generator.generate(self.maze_config.size, self.maze_config.wall_density)
        self.agent = QLearningAgent(
            self.maze_config.size,
            learning_rate=self.rl_config.learning_rate,
            discount_factor=self.rl_config.discount_factor,
            exploration_rate=self.rl_config.exploration_rate,
            rng=self.rng.spawn(),
        )
        self._clear_progress()

        logger.info("New %dx%d maze with %d walls", self.grid.size, self.grid.size, self.grid.wall_count)
        return self.grid

    def reset(self) -> None:
        """Forget everything learned on the current maze."""
        self.fsm.reset_to_idle()
        self.agent.reset()
        self._clear_progress()

    def _clear_progress(self) -> None:
        self.stats = TrainingStats()
        self.history.clear()
        self.recent_episodes.clear()
        self.visit_counts.clear()
        self.last_result = None

    def apply_parameters(self, **changes) -> RLConfig:
        """
        Replace the session configuration with updated values.

        Learning parameters are forwarded to the agent and apply from its
        next decision.

        Raises:
            ValueError: If a value is out of range or the field is unknown
        """
        try:
            new_config = replace(self.rl_config, **changes)
        except TypeError as e:
            raise ValueError(f"Unknown training parameter: {e}") from e

        self.agent.update_parameters(**{
            name: changes[name] for name in _LEARNING_PARAMETERS if name in changes
        })

        if new_config.history_size != self.rl_config.history_size:
            self.history = deque(self.history, maxlen=new_config.history_size)
            self.recent_episodes = deque(self.recent_episodes, maxlen=new_config.history_size)

        self.rl_config = new_config
        return new_config

    def run_episode(self) -> EpisodeResult:
        """Run a single episode and fold it into the statistics."""
        epsilon_used = self.agent.exploration_rate
        episode_start_time = time.perf_counter()

        result = self.agent.run_episode(self.grid, max_steps=self.rl_config.max_steps)

        elapsed = time.perf_counter() - episode_start_time
        self._record(result, epsilon_used, elapsed)
        return result

    def _record(self, result: EpisodeResult, epsilon_used: float, elapsed: float) -> None:
        self.stats.record(result)
        self.stats.states_explored = self.agent.states_explored()
        self.stats.total_values = self.agent.total_values()
        self.stats.max_value = self.agent.max_value()

        self.history.append(result.steps)
        self.visit_counts.update(result.path)
        self.recent_episodes.append(Episode(
            number=self.stats.total_episodes,
            steps=result.steps,
            total_reward=result.total_reward,
            reached_goal=result.success,
            epsilon_used=epsilon_used,
            elapsed_time=elapsed,
        ))
        self.last_result = result

    def train(self, episodes: Optional[int] = None,
              on_episode: Optional[EpisodeCallback] = None) -> TrainingStats:
        """
        Train for a number of episodes.

        Args:
            episodes: Episodes to run in this call; if None, run until the
                configured total_episodes have been completed
            on_episode: Called after every episode; may pause() or stop()

        Returns:
            The cumulative statistics

        Raises:
            RuntimeError: If training cannot start from the current state
        """
        if episodes is None:
            episodes = max(0, self.rl_config.total_episodes - self.stats.total_episodes)
        elif episodes < 0:
            raise ValueError(f"episodes must not be negative, got {episodes}")

        if not self.fsm.start_training():
            raise RuntimeError(f"Cannot start training while {self.fsm.current_state.name.lower()}")

        logger.info("Starting training from episode %d for %d episodes",
                    self.stats.total_episodes, episodes)

        try:
            for _ in range(episodes):
                if not self.fsm.is_training():
                    break

                result = self.run_episode()
                if on_episode:
                    on_episode(self, result)

                if self.stats.total_episodes % self.rl_config.log_interval == 0:
                    self._log_progress()
        except Exception:
            self.fsm.fail_error()
            raise

        if self.fsm.is_training():
            self.fsm.complete()
            logger.info("Training completed: %d successful runs out of %d episodes",
                        self.stats.successful_episodes, self.stats.total_episodes)

        return self.stats

    def _log_progress(self) -> None:
        recent = list(self.recent_episodes)
        recent_success = sum(1 for ep in recent if ep.reached_goal) / len(recent) if recent else 0.0
        logger.info("Episode %d: recent success rate %.1f%%, average steps %.1f, epsilon %.3f",
                    self.stats.total_episodes, recent_success * 100,
                    self.stats.average_steps, self.agent.exploration_rate)

    def pause(self) -> bool:
        """Pause training after the current episode."""
        return self.fsm.pause()

    def resume(self, on_episode: Optional[EpisodeCallback] = None) -> Optional[TrainingStats]:
        """Continue a paused session towards the configured total."""
        if not self.fsm.is_paused():
            return None
        return self.train(on_episode=on_episode)

    def stop(self) -> bool:
        """Stop training; statistics and learned values are kept."""
        if self.fsm.is_idle():
            return False
        return self.fsm.reset_to_idle()

    def moving_average(self, window: Optional[int] = None) -> List[float]:
        """
        Moving average of recent per-episode step counts.

        Without an explicit window the average only kicks in once more than
        ten episodes are in the history, using min(10, len // 5).
        """
        history = list(self.history)
        if window is None:
            if len(history) <= 10:
                return []
            window = min(10, len(history) // 5)
        if window < 1:
            raise ValueError(f"window must be positive, got {window}")
        if len(history) < window:
            return []

        kernel = np.ones(window) / window
        return np.convolve(np.array(history, dtype=float), kernel, mode="valid").tolist()

    def snapshot(self) -> Dict[str, object]:
        """Plain-data view of the session for exporters."""
        return {
            "maze_config": asdict(self.maze_config),
            "rl_config": asdict(self.rl_config),
            "state": self.fsm.current_state.name.lower(),
            "maze": self.grid.to_rows(),
            "stats": self.stats.as_dict(),
            "episode_history": list(self.history),
            "q_table": self.agent.export_table(),
        }

    def visits(self, coord: Coord) -> int:
        return self.visit_counts.get(coord, 0)
