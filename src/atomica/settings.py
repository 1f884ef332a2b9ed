"""
Atomica Game Settings.

Board dimensions, the level table and the per-round indicator quota. The
engine treats settings as read-only; only the current level pointer (kept in
the game situation) moves during play.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Union
import yaml

from .board import Board
from .exceptions import ConfigurationError


MIN_NUMBER_OF_COLORS = 3
MAX_NUMBER_OF_COLORS = 12
MIN_SCORE = 0
MAX_SCORE = 100000
DEFAULT_INDICATORS_PER_ROUND = 5
DEFAULT_BASE_FACTOR = 50
MIN_BASE_FACTOR = 1
MAX_BASE_FACTOR = 1000


@dataclass
class Level:
    """A level: reaching ``required_score`` moves the game on to the next one."""
    number: int
    required_score: int
    number_of_colors: int

    def validate(self) -> None:
        if self.number < 1:
            raise ConfigurationError(f"Invalid level number {self.number}")
        if not MIN_SCORE <= self.required_score <= MAX_SCORE:
            raise ConfigurationError(
                f"Level {self.number}: required score must be {MIN_SCORE}-{MAX_SCORE}, "
                f"got {self.required_score}"
            )
        if not MIN_NUMBER_OF_COLORS <= self.number_of_colors <= MAX_NUMBER_OF_COLORS:
            raise ConfigurationError(
                f"Level {self.number}: number of colors must be "
                f"{MIN_NUMBER_OF_COLORS}-{MAX_NUMBER_OF_COLORS}, got {self.number_of_colors}"
            )


DEFAULT_LEVELS = [
    (1, 1000, 3),
    (2, 2000, 4),
    (3, 4000, 5),
    (4, 7000, 6),
    (5, 10000, 7),
    (6, 15000, 8),
    (7, 25000, 9),
    (8, 50000, 10),
    (9, 100000, 11),
    (10, 0, 12),
]


@dataclass
class GameSettings:
    """
    Complete configuration of a game.

    ``base_factor`` is kept for compatibility with saved settings; scoring
    does not use it.
    """
    cols: int = Board.DEFAULT_COLS
    rows: int = Board.DEFAULT_ROWS
    levels: List[Level] = field(default_factory=list)
    indicators_per_round: int = DEFAULT_INDICATORS_PER_ROUND
    base_factor: int = DEFAULT_BASE_FACTOR

    def __post_init__(self):
        self.levels = [lvl if isinstance(lvl, Level) else Level(*lvl) for lvl in self.levels]
        self.validate()

    def validate(self) -> None:
        """Check every constraint, raising ConfigurationError on the first violation."""
        for name, value in (("cols", self.cols), ("rows", self.rows)):
            if not Board.MIN_SIZE <= value <= Board.MAX_SIZE:
                raise ConfigurationError(
                    f"{name} must be {Board.MIN_SIZE}-{Board.MAX_SIZE}, got {value}"
                )
        if not self.levels:
            raise ConfigurationError("At least one level is required")
        for index, level in enumerate(self.levels, start=1):
            level.validate()
            if level.number != index:
                raise ConfigurationError(
                    f"Levels must be numbered 1..n in order, found {level.number} at position {index}"
                )
        for previous, level in zip(self.levels, self.levels[1:]):
            if level.number_of_colors <= previous.number_of_colors:
                raise ConfigurationError(
                    f"Level {level.number} must have more colors than level {previous.number}"
                )
        if self.indicators_per_round < 1:
            raise ConfigurationError(
                f"indicators_per_round must be at least 1, got {self.indicators_per_round}"
            )
        if not MIN_BASE_FACTOR <= self.base_factor <= MAX_BASE_FACTOR:
            raise ConfigurationError(
                f"base_factor must be {MIN_BASE_FACTOR}-{MAX_BASE_FACTOR}, got {self.base_factor}"
            )

    @property
    def first_level(self) -> Level:
        return self.levels[0]

    @property
    def last_level(self) -> Level:
        return self.levels[-1]

    def get_level(self, number: int) -> Level:
        """Get a level by its 1-based number."""
        if number <= 0 or number > len(self.levels):
            raise ConfigurationError(f"Invalid level number {number}")
        return self.levels[number - 1]

    def is_last_level(self, level: Level) -> bool:
        return level.number == self.last_level.number

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> "GameSettings":
        """The standard ten-level game on a 10x10 board."""
        return cls(levels=[Level(*lvl) for lvl in DEFAULT_LEVELS])

    @classmethod
    def editor_default(cls) -> "GameSettings":
        """A single three-color level, used when authoring layouts."""
        return cls(levels=[Level(1, 0, MIN_NUMBER_OF_COLORS)])

    def copy(self) -> "GameSettings":
        return GameSettings.from_dict(self.to_dict())

    # ------------------------------------------------------------------
    # (De)serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "cols": self.cols,
            "rows": self.rows,
            "indicators_per_round": self.indicators_per_round,
            "base_factor": self.base_factor,
            "levels": [asdict(level) for level in self.levels],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSettings":
        """Create from dictionary, filling in defaults for missing keys."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings must be a mapping, got {type(data).__name__}")
        try:
            levels = [
                Level(
                    number=int(level["number"]),
                    required_score=int(level["required_score"]),
                    number_of_colors=int(level["number_of_colors"]),
                )
                for level in data.get("levels", [Level(*lvl).__dict__ for lvl in DEFAULT_LEVELS])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid level definition: {e}") from e
        return cls(
            cols=int(data.get("cols", Board.DEFAULT_COLS)),
            rows=int(data.get("rows", Board.DEFAULT_ROWS)),
            levels=levels,
            indicators_per_round=int(data.get("indicators_per_round", DEFAULT_INDICATORS_PER_ROUND)),
            base_factor=int(data.get("base_factor", DEFAULT_BASE_FACTOR)),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "GameSettings":
        """Load settings from a YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save settings to a YAML file."""
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
