"""Maze Q-Learning - a tabular reinforcement learning agent for generated mazes.

This package generates solvable grid mazes and trains a Q-Learning agent that
learns to navigate from the top-left start to the bottom-right goal.
"""

from .app.trainer import TrainingSession
from .domain.maze import MazeGenerationError, MazeGenerator, MazeTuning, generate
from .domain.qlearning import QLearningAgent
from .domain.types import EpisodeResult, Grid, MazeConfig, RLConfig, TrainingStats
from .utils.rng import SeededRNG

__version__ = "1.0.0"

__all__ = [
    "EpisodeResult",
    "Grid",
    "MazeConfig",
    "MazeGenerationError",
    "MazeGenerator",
    "MazeTuning",
    "QLearningAgent",
    "RLConfig",
    "SeededRNG",
    "TrainingSession",
    "TrainingStats",
    "generate",
]
