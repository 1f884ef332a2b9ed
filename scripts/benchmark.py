"""
Performance benchmark script for Atomica.

Tests the speed of the game engine, the molecule detector and the path finder.
"""
import argparse
import sys
import time
from pathlib import Path
from typing import Dict, Any, Optional
import numpy as np
from tqdm import tqdm

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomica.board import Board
from atomica.engine import GameEngine, random_move
from atomica.molecule import MoleculeDetector
from atomica.pathfinding import PathFinder
from atomica.pieces import make_atom
from atomica.settings import GameSettings
from utils.logger import GameLogger, MetricsTracker


def benchmark_engine(
    num_games: int = 100,
    seed: int = 42,
    max_moves: int = 1000,
    log_dir: Optional[str] = None,
) -> Dict[str, float]:
    """
    Benchmark the game engine with random play.

    Args:
        num_games: Number of games to play
        seed: Random seed
        max_moves: Move cap per game
        log_dir: Write one JSON line per game here if given

    Returns:
        Dictionary of benchmark results
    """
    game_logger = GameLogger(log_dir, "benchmark") if log_dir else None
    tracker = MetricsTracker(window_size=num_games)

    total_moves = 0
    total_time = 0.0

    for i in tqdm(range(num_games), desc="Playing"):
        engine = GameEngine(settings=GameSettings.default(), seed=seed + i)
        engine.start()

        start = time.perf_counter()
        while not engine.is_game_over() and engine.moves_made < max_moves:
            if not random_move(engine).success:
                break
        total_time += time.perf_counter() - start
        total_moves += engine.moves_made

        stats = engine.get_statistics()
        tracker.add('score', stats['score'])
        tracker.add('molecules', stats['molecules'])
        if game_logger is not None:
            game_logger.log_game(stats)

    if game_logger is not None:
        game_logger.save_summary()

    return {
        'num_games': num_games,
        'total_moves': total_moves,
        'total_time': total_time,
        'moves_per_second': total_moves / total_time if total_time else 0.0,
        'avg_moves_per_game': total_moves / num_games,
        'score': tracker.get_summary('score'),
        'molecules': tracker.get_summary('molecules'),
    }


def random_board(rng: np.random.Generator, size: int, colors: int, fill: float) -> Board:
    board = Board(size, size)
    for cell in board.cells():
        if rng.random() < fill:
            board.place_piece(make_atom(int(rng.integers(colors))), cell.col, cell.row)
    return board


def benchmark_detector(num_boards: int = 1000, size: int = 10, seed: int = 42) -> Dict[str, float]:
    """Time molecule detection on random, densely filled boards."""
    rng = np.random.default_rng(seed)
    boards = [random_board(rng, size, 3, 0.8) for _ in range(num_boards)]

    start = time.perf_counter()
    found = 0
    for board in tqdm(boards, desc="Detecting"):
        found += len(MoleculeDetector(board).detect_molecules())
    elapsed = time.perf_counter() - start

    return {
        'num_boards': num_boards,
        'molecules_found': found,
        'total_time': elapsed,
        'boards_per_second': num_boards / elapsed,
    }


def benchmark_pathfinder(num_searches: int = 1000, size: int = 20, seed: int = 42) -> Dict[str, float]:
    """Time corner-to-corner searches on boards with scattered obstacles."""
    rng = np.random.default_rng(seed)
    finder = PathFinder()

    start = time.perf_counter()
    found = 0
    for _ in tqdm(range(num_searches), desc="Searching"):
        board = random_board(rng, size, 3, 0.25)
        board.remove_piece(0, 0)
        board.remove_piece(size - 1, size - 1)
        if finder.find_shortest_path(board, (0, 0), (size - 1, size - 1)) is not None:
            found += 1
    elapsed = time.perf_counter() - start

    return {
        'num_searches': num_searches,
        'paths_found': found,
        'total_time': elapsed,
        'searches_per_second': num_searches / elapsed,
    }


def print_results(title: str, results: Dict[str, Any]) -> None:
    """Print benchmark results."""
    print(f"\n{'='*60}")
    print(title)
    print('='*60)
    for key, value in results.items():
        if isinstance(value, float):
            print(f"  {key}: {value:.2f}")
        elif isinstance(value, dict):
            print(f"  {key}:")
            for k, v in value.items():
                print(f"    {k}: {v:.2f}")
        else:
            print(f"  {key}: {value}")
    print('='*60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Benchmark Atomica")
    parser.add_argument("--engine", action="store_true", help="Benchmark game engine")
    parser.add_argument("--detector", action="store_true", help="Benchmark molecule detection")
    parser.add_argument("--pathfinder", action="store_true", help="Benchmark path search")
    parser.add_argument("--all", action="store_true", help="Run all benchmarks")
    parser.add_argument("--games", type=int, default=100, help="Games for the engine benchmark")
    parser.add_argument("--log-dir", type=str, default=None, help="Directory for per-game JSON logs")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args()

    if args.all or args.engine:
        results = benchmark_engine(num_games=args.games, seed=args.seed, log_dir=args.log_dir)
        print_results("GAME ENGINE BENCHMARK", results)

    if args.all or args.detector:
        results = benchmark_detector(seed=args.seed)
        print_results("MOLECULE DETECTOR BENCHMARK", results)

    if args.all or args.pathfinder:
        results = benchmark_pathfinder(seed=args.seed)
        print_results("PATH FINDER BENCHMARK", results)

    if not any([args.all, args.engine, args.detector, args.pathfinder]):
        print("No benchmark selected. Use --all to run all benchmarks.")
        parser.print_help()


if __name__ == "__main__":
    main()
