"""
Interactive play script for Atomica.

Play manually in the terminal, or watch a random agent.
"""
import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional
import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomica.engine import GameEngine, play_random_game
from atomica.settings import GameSettings
from atomica.situation import GameSituation
from atomica.exceptions import AtomicaError
from utils.logger import configure_logging


def clear_screen():
    """Clear the terminal screen."""
    os.system('cls' if os.name == 'nt' else 'clear')


def load_settings(config_path: Optional[str]) -> GameSettings:
    """Load settings from YAML, or use the defaults."""
    if config_path is None:
        return GameSettings.default()
    return GameSettings.from_yaml(config_path)


def play_manual(settings: GameSettings, seed: int = 42, layout: Optional[str] = None) -> None:
    """
    Play Atomica manually in the terminal.

    Args:
        settings: Game settings
        seed: Random seed
        layout: Optional saved situation (JSON) to start from
    """
    situation = GameSituation.load(layout) if layout else None
    engine = GameEngine(settings=settings, situation=situation, seed=seed)
    engine.start()

    print("\n" + "="*60)
    print("ATOMICA - Manual Play")
    print("="*60)
    print("\nControls:")
    print("  Enter move as: from_col from_row to_col to_row (e.g., '0 3 4 3')")
    print("  Type 's <file>' to save, 'f' to flush, 'q' to quit, 'r' to restart")
    print("="*60 + "\n")

    message = ""
    while True:
        clear_screen()
        print(engine)
        if message:
            print(f"\n{message}")
            message = ""

        if engine.is_game_over():
            print("\n*** GAME OVER! ***")
            print(f"Final Score: {engine.score:,}")
            print(f"Level: {engine.level_number}")
            print(f"Moves: {engine.moves_made}")

            action = input("\nPlay again? (y/n): ").strip().lower()
            if action == 'y':
                engine.reset()
                engine.start()
                continue
            break

        user_input = input("\nEnter move: ").strip()
        command = user_input.lower()

        if command == 'q':
            print("Thanks for playing!")
            break
        if command == 'r':
            engine.reset()
            engine.start()
            continue
        if command == 'f':
            engine.flush_tokens()
            continue
        if command.startswith('s '):
            engine.situation.save(user_input[2:].strip())
            message = "Saved."
            continue

        try:
            from_col, from_row, to_col, to_row = (int(p) for p in user_input.split())
        except ValueError:
            message = "Invalid input. Use format: from_col from_row to_col to_row"
            continue

        result = engine.move((from_col, from_row), (to_col, to_row))
        if not result.success:
            message = "Invalid move! Try again."
            continue

        if result.molecules:
            message = (f"*** {len(result.molecules)} molecules! "
                       f"+{result.score_gained} points ***")
        if result.level_changed:
            message += f"\n*** Level {engine.level_number} ***"
            time.sleep(1)


def play_random(settings: GameSettings, num_games: int = 10, seed: int = 42) -> None:
    """
    Play random games and show statistics.

    Args:
        settings: Game settings
        num_games: Number of games to play
        seed: Random seed
    """
    print(f"\nPlaying {num_games} random games...")

    scores = []
    moves = []
    molecules = []

    for i in range(num_games):
        stats = play_random_game(seed=seed + i, settings=settings.copy())
        scores.append(stats['score'])
        moves.append(stats['moves_made'])
        molecules.append(stats['molecules'])

        print(f"Game {i+1}: Score={stats['score']:,}, "
              f"Level={stats['level']}, "
              f"Moves={stats['moves_made']}, "
              f"Molecules={stats['molecules']}")

    print("\n" + "="*60)
    print("RANDOM AGENT STATISTICS")
    print("="*60)
    print(f"Games: {num_games}")
    print(f"Mean Score: {np.mean(scores):.1f} +/- {np.std(scores):.1f}")
    print(f"Max Score: {max(scores)}")
    print(f"Mean Moves: {np.mean(moves):.1f}")
    print(f"Mean Molecules: {np.mean(molecules):.1f}")
    print("="*60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Play Atomica")
    parser.add_argument(
        "--mode",
        type=str,
        choices=["manual", "random"],
        default="manual",
        help="Play mode: play manually or watch a random agent"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a settings YAML file (e.g. config/default.yaml)"
    )
    parser.add_argument(
        "--layout",
        type=str,
        default=None,
        help="Saved situation to start from (manual mode)"
    )
    parser.add_argument(
        "--games",
        type=int,
        default=10,
        help="Number of games to play (random mode)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log engine events"
    )

    args = parser.parse_args()
    configure_logging(logging.INFO if args.verbose else logging.WARNING)

    try:
        settings = load_settings(args.config)
    except (OSError, AtomicaError) as e:
        print(f"Could not load settings: {e}")
        sys.exit(1)

    if args.mode == "manual":
        try:
            play_manual(settings, seed=args.seed, layout=args.layout)
        except (OSError, AtomicaError) as e:
            print(f"Could not load layout: {e}")
            sys.exit(1)
    elif args.mode == "random":
        play_random(settings, num_games=args.games, seed=args.seed)


if __name__ == "__main__":
    main()
