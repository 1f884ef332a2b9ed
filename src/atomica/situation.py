"""
Atomica Game Situation.

Everything that changes while a game is played, in one place:
board contents, score, current level and the game-over flag. A situation can
be turned into a plain dictionary (and JSON file) and restored from it.
"""
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import numpy as np

from .board import Board, Cell, CODE_KINDS
from .exceptions import ConfigurationError, SituationFormatError
from .pieces import Piece
from .settings import GameSettings, Level

SNAPSHOT_VERSION = 1


class GameSituation:
    """Mutable state of a game or of a layout being edited."""

    def __init__(self, settings: GameSettings):
        self.settings = settings
        self.board = Board(settings.cols, settings.rows)
        self.score = 0
        self.current_level: Level = settings.first_level
        self.game_over = False

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def cols(self) -> int:
        return self.board.cols

    @property
    def rows(self) -> int:
        return self.board.rows

    @property
    def indicators_per_round(self) -> int:
        return self.settings.indicators_per_round

    @property
    def last_level(self) -> Level:
        return self.settings.last_level

    def get_level(self, number: int) -> Level:
        return self.settings.get_level(number)

    def is_last_level(self) -> bool:
        return self.settings.is_last_level(self.current_level)

    def add_score(self, points: int) -> None:
        self.score += points

    def atoms(self) -> List[Piece]:
        return self.board.atoms()

    def indicators(self) -> List[Piece]:
        return self.board.indicators()

    def pieces(self) -> List[Piece]:
        return self.board.pieces()

    def empty_cells(self, allow_indicator_cells: bool = False) -> List[Cell]:
        return self.board.empty_cells(allow_indicator_cells)

    def clear(self) -> None:
        """Remove every piece from the board."""
        self.board.reset()

    def reset(self) -> None:
        """Clear the board and start over at the first level with no score."""
        self.board.reset()
        self.score = 0
        self.current_level = self.settings.first_level
        self.game_over = False

    def _resize(self, attr: str, value: int) -> None:
        previous = getattr(self.settings, attr)
        setattr(self.settings, attr, value)
        try:
            self.settings.validate()
        except ConfigurationError:
            setattr(self.settings, attr, previous)
            raise

    def set_cols(self, cols: int) -> None:
        """Resize horizontally. All pieces are discarded."""
        self._resize("cols", cols)
        self.board.set_cols(cols)

    def set_rows(self, rows: int) -> None:
        """Resize vertically. All pieces are discarded."""
        self._resize("rows", rows)
        self.board.set_rows(rows)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert the whole situation to a JSON-compatible dictionary."""
        return {
            "version": SNAPSHOT_VERSION,
            "settings": self.settings.to_dict(),
            "score": int(self.score),
            "level": self.current_level.number,
            "game_over": bool(self.game_over),
            "board": {
                "kinds": self.board.kind_grid().tolist(),
                "colors": self.board.color_grid().tolist(),
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSituation":
        """Rebuild a situation from :meth:`to_dict` output."""
        try:
            settings = GameSettings.from_dict(data["settings"])
            situation = cls(settings)
            situation.score = int(data["score"])
            situation.current_level = settings.get_level(int(data["level"]))
            situation.game_over = bool(data.get("game_over", False))
            kinds = np.asarray(data["board"]["kinds"], dtype=np.int64)
            colors = np.asarray(data["board"]["colors"], dtype=np.int64)
        except (KeyError, TypeError, ValueError, OverflowError, ConfigurationError) as e:
            raise SituationFormatError(f"Invalid game situation: {e}") from e

        expected = (settings.rows, settings.cols)
        if kinds.shape != expected or colors.shape != expected:
            raise SituationFormatError(
                f"Board shape {kinds.shape}/{colors.shape} does not match settings {expected}"
            )
        if situation.score < 0:
            raise SituationFormatError(f"Score must be non-negative, got {situation.score}")
        unknown = set(np.unique(kinds).tolist()) - set(CODE_KINDS)
        if unknown:
            raise SituationFormatError(f"Unknown piece kinds {sorted(unknown)}")
        occupied = kinds != 0
        max_colors = settings.last_level.number_of_colors
        if np.any(colors[occupied] < 0) or np.any(colors[occupied] >= max_colors):
            raise SituationFormatError("Piece color out of range")

        situation.board.set_state(np.stack([kinds, colors]))
        return situation

    def save(self, path: Union[str, Path]) -> None:
        """Write the situation to a JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "GameSituation":
        """Read a situation from a JSON file."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SituationFormatError(f"Could not parse {path}: {e}") from e
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (f"GameSituation({self.cols}x{self.rows}, score={self.score}, "
                f"level={self.current_level.number}, game_over={self.game_over})")
