"""Command line entry point: train an agent on a generated maze."""

import argparse
import logging
import sys
from typing import List, Optional

from .app.trainer import TrainingSession
from .domain.paths import shortest_path_length
from .domain.types import MazeConfig, RLConfig
from .utils.render import render_grid
from .utils.rng import set_global_seed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="maze_rl", description="Train a Q-learning agent on a generated maze")
    parser.add_argument("--size", type=int, default=15, help="Maze side length")
    parser.add_argument("--density", type=float, default=0.3, help="Wall density between 0 and 1")
    parser.add_argument("--episodes", type=int, default=1000, help="Number of episodes to train")
    parser.add_argument("--max-steps", type=int, default=1000, help="Step budget per episode")
    parser.add_argument("--learning-rate", type=float, default=0.1, help="Learning rate (alpha)")
    parser.add_argument("--discount-factor", type=float, default=0.9, help="Discount factor (gamma)")
    parser.add_argument("--exploration-rate", type=float, default=0.1, help="Exploration rate (epsilon)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--log-interval", type=int, default=100, help="Episodes between progress log lines")
    parser.add_argument("--show-maze", action="store_true", help="Print the maze and the learned path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        maze_config = MazeConfig(size=args.size, wall_density=args.density)
        rl_config = RLConfig(
            learning_rate=args.learning_rate,
            discount_factor=args.discount_factor,
            exploration_rate=args.exploration_rate,
            total_episodes=args.episodes,
            max_steps=args.max_steps,
            log_interval=args.log_interval,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    set_global_seed(args.seed)
    session = TrainingSession(maze_config, rl_config)
    grid = session.grid

    print(f"Maze: {grid.size}x{grid.size}, {grid.wall_count} walls")
    print(f"Start: {grid.start} -> Goal: {grid.goal}")
    print(f"Shortest path: {shortest_path_length(grid)} steps")

    try:
        stats = session.train()
    except KeyboardInterrupt:
        session.stop()
        print("\nTraining interrupted by user")
        stats = session.stats

    print("\nTraining summary:")
    print(f"   Episodes: {stats.total_episodes}")
    print(f"   Successful episodes: {stats.successful_episodes}")
    print(f"   Success rate: {stats.success_rate:.1%}")
    print(f"   Average steps: {stats.average_steps:.1f}")
    print(f"   Best steps: {stats.best_steps if stats.best_steps is not None else '-'}")
    print(f"   States explored: {stats.states_explored}")
    print(f"   Q-values stored: {stats.total_values}")
    print(f"   Max Q-value: {stats.max_value:.2f}")

    greedy = session.agent.greedy_path(grid)
    if greedy.success:
        print(f"\nGreedy policy reaches the goal in {greedy.steps} steps")
    else:
        print(f"\nGreedy policy stalls at {greedy.final_position} after {greedy.steps} steps")

    if args.show_maze:
        print()
        print(render_grid(grid, greedy.path))

    return 0


if __name__ == "__main__":
    sys.exit(main())
