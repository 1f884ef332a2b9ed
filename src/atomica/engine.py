"""
Atomica Game Engine.

This module implements the complete game logic including:
- Game start (random seeding, or resuming a hand-authored layout)
- Atom moves validated by path search
- Round transitions (indicators turn into atoms, new indicators appear)
- Molecule scoring with combo multiplier
- Level changes and game over detection
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence
import numpy as np

from .board import Board, Cell
from .molecule import Molecule, MoleculeDetector
from .pathfinding import Path, PathFinder
from .pieces import Piece, make_atom, make_indicator
from .settings import GameSettings, Level
from .situation import GameSituation
from utils.logger import get_logger

logger = get_logger(__name__)


class GameStatus(Enum):
    """Game status enumeration."""
    AWAITING_FIRST_ROUND = "awaiting_first_round"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class MoveResult:
    """Result of a move action."""
    success: bool
    path: Optional[Path] = None
    molecules: List[Molecule] = field(default_factory=list)
    score_gained: int = 0
    rounds_started: int = 0
    level_changed: bool = False
    game_over: bool = False


class GameEngine:
    """
    Atomica game engine.

    The engine owns a :class:`GameSituation` and drives it through rounds.
    Every public operation runs to completion and reports failure through
    its return value; invalid moves never raise.
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        situation: Optional[GameSituation] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize a new game.

        Args:
            settings: Game settings (default settings if omitted)
            situation: Existing situation to continue, e.g. an authored layout
            seed: Random seed for reproducibility
        """
        if situation is None:
            situation = GameSituation(settings or GameSettings.default())
        self.situation = situation
        self.rng = np.random.default_rng(seed)
        self.path_finder = PathFinder()

        self.molecules_in_round: List[Molecule] = []
        self.molecules_in_game: List[Molecule] = []
        self.moves_made = 0
        self.status = (GameStatus.GAME_OVER if situation.game_over
                       else GameStatus.AWAITING_FIRST_ROUND)

        self._observers: List[Callable[["GameEngine"], None]] = []
        self._detected_this_call: List[Molecule] = []

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.situation.board

    @property
    def settings(self) -> GameSettings:
        return self.situation.settings

    @property
    def cols(self) -> int:
        return self.situation.cols

    @property
    def rows(self) -> int:
        return self.situation.rows

    @property
    def score(self) -> int:
        return self.situation.score

    @property
    def level(self) -> Level:
        return self.situation.current_level

    @property
    def level_number(self) -> int:
        return self.situation.current_level.number

    @property
    def molecule_number(self) -> int:
        """Molecules detected so far."""
        return len(self.molecules_in_game)

    def is_game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    def query_piece(self, col: int, row: int) -> Optional[Piece]:
        return self.board.query_piece(col, row)

    def query_atom(self, col: int, row: int) -> Optional[Piece]:
        return self.board.query_atom(col, row)

    def scores_until_next_level(self) -> int:
        """Points still missing for the next level; 0 on the last level."""
        if self.situation.is_last_level():
            return 0
        return self.level.required_score - self.score

    def find_shortest_path(self, from_cell: Sequence[int], to_cell: Sequence[int]) -> Optional[Path]:
        return self.path_finder.find_shortest_path(self.board, Cell(*from_cell), Cell(*to_cell))

    def can_move(self, atom: Piece, destination: Sequence[int]) -> bool:
        """Check whether ``atom`` could be moved to ``destination`` right now."""
        if self.status != GameStatus.PLAYING or not self._owns_atom(atom):
            return False
        return self.find_shortest_path(atom.position, destination) is not None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[["GameEngine"], None]) -> None:
        """Call ``callback(engine)`` after every state change."""
        self._observers.append(callback)

    def unsubscribe(self, callback: Callable[["GameEngine"], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)

    # ------------------------------------------------------------------
    # Game flow
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start the game.

        An empty board is seeded with indicators and atoms. A board that
        already holds pieces gets its indicators topped up to the quota, and
        if it holds no atom at all the first round transition happens right
        away so there is something to play.

        Returns:
            True if the game was started, False if it was already running or over
        """
        if self.status != GameStatus.AWAITING_FIRST_ROUND:
            return False

        self._first_round()
        if not self.situation.atoms():
            self._next_round()

        self.status = GameStatus.PLAYING
        logger.info("Game started on %dx%d board at level %d",
                    self.cols, self.rows, self.level_number)
        self._notify()
        return True

    def move_atom(self, atom: Piece, destination: Sequence[int]) -> MoveResult:
        """
        Move an atom to another cell.

        The move fails without any change if the game is not running, the
        destination is blocked, or no path leads there.
        """
        if self.status != GameStatus.PLAYING or not self._owns_atom(atom):
            return MoveResult(success=False)
        destination = Cell(*destination)
        if not self.board.in_bounds(*destination) or self.board.is_blocked(*destination):
            return MoveResult(success=False)

        path = self.find_shortest_path(atom.position, destination)
        if path is None:
            return MoveResult(success=False)

        score_before = self.score
        level_before = self.level_number
        self._detected_this_call = []
        rounds = 0

        self.board.place_piece(atom, destination.col, destination.row)
        self.moves_made += 1

        # a move that forms no molecule ends the round; so does clearing the board
        if not self._check_new_molecules() or not self.situation.atoms():
            self._next_round()
            rounds += 1

        # keep the board playable: the new indicators become atoms right away
        if not self.situation.atoms():
            self._next_round()
            rounds += 1

        if len(self.situation.empty_cells(allow_indicator_cells=True)) <= 1:
            self._set_game_over()

        self._notify()
        return MoveResult(
            success=True,
            path=path,
            molecules=list(self._detected_this_call),
            score_gained=self.score - score_before,
            rounds_started=rounds,
            level_changed=self.level_number != level_before,
            game_over=self.is_game_over(),
        )

    def move(self, from_cell: Sequence[int], to_cell: Sequence[int]) -> MoveResult:
        """Move the atom standing on ``from_cell``."""
        atom = self.board.query_atom(*from_cell)
        if atom is None:
            return MoveResult(success=False)
        return self.move_atom(atom, to_cell)

    def flush_tokens(self) -> None:
        """
        Let every piece fall down its column as far as the empty cells go.

        Afterwards the molecule counters are cleared and the board is checked
        for molecules once.
        """
        rows, cols = self.rows, self.cols
        for row in range(rows - 2, -1, -1):
            for col in range(cols):
                piece = self.board.query_piece(col, row)
                if piece is None:
                    continue
                target = None
                next_row = row + 1
                while self.board.is_empty(col, next_row):
                    target = next_row
                    next_row += 1
                if target is not None:
                    self.board.place_piece(piece, col, target)

        self.molecules_in_round.clear()
        self.molecules_in_game.clear()
        self._detected_this_call = []
        self._check_new_molecules()
        self._notify()

    def reset(self, seed: Optional[int] = None) -> None:
        """Clear the board and score and wait for :meth:`start` again."""
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.situation.reset()
        self.molecules_in_round.clear()
        self.molecules_in_game.clear()
        self.moves_made = 0
        self.status = GameStatus.AWAITING_FIRST_ROUND
        self._notify()

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def _owns_atom(self, atom: Piece) -> bool:
        if atom is None or not atom.is_atom or not atom.is_placed:
            return False
        return self.board.query_piece(atom.col, atom.row) is atom

    def _first_round(self) -> None:
        if not self.situation.pieces():
            self._place_new_indicators()
            self._place_new_atoms()
        else:
            self._assure_first_round_has_indicators()

    def _next_round(self) -> None:
        """Indicators become atoms, the new board is scored, then new indicators appear."""
        self.molecules_in_round.clear()
        self._transform_indicators()
        self._check_new_molecules()
        self._place_new_indicators()

    def _transform_indicators(self) -> None:
        for indicator in self.situation.indicators():
            self.board.place_piece(indicator.converted(), indicator.col, indicator.row)

    def _assure_first_round_has_indicators(self) -> None:
        indicators = self.situation.indicators()
        missing = self.situation.indicators_per_round - len(indicators)
        if missing <= 0:
            return
        for color in self._random_colors(missing, distinct=True):
            cell = self._find_random_empty_cell()
            if cell is not None:
                self.board.place_piece(make_indicator(color), cell.col, cell.row)

    def _place_new_indicators(self) -> None:
        for color in self._random_colors(self.situation.indicators_per_round):
            cell = self._find_random_empty_cell()
            if cell is not None:
                self.board.place_piece(make_indicator(color), cell.col, cell.row)

    def _place_new_atoms(self) -> None:
        for color in self._random_colors(self.situation.indicators_per_round):
            cell = self._find_random_empty_cell()
            if cell is None:
                return
            self.board.place_piece(make_atom(color), cell.col, cell.row)

    def _random_colors(self, count: int, distinct: bool = False) -> List[int]:
        """
        Draw colors allowed by the current level.

        With ``distinct`` no color repeats, so fewer colors than requested
        come back when the level does not have enough of them.
        """
        number_of_colors = self.level.number_of_colors
        if distinct:
            count = min(count, number_of_colors)
            colors = self.rng.choice(number_of_colors, size=count, replace=False)
        else:
            colors = self.rng.integers(0, number_of_colors, size=count)
        return [int(c) for c in colors]

    def _find_random_empty_cell(self) -> Optional[Cell]:
        empty = self.situation.empty_cells(allow_indicator_cells=False)
        if not empty:
            return None
        return empty[int(self.rng.integers(len(empty)))]

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _check_new_molecules(self) -> List[Molecule]:
        """Detect, score and remove molecules; may change the level."""
        molecules = MoleculeDetector(self.board).detect_molecules()
        if not molecules:
            return []

        logger.info("%d molecules found", len(molecules))
        self._add_molecule_score(molecules)
        self.molecules_in_game.extend(molecules)
        self._detected_this_call.extend(molecules)
        self._remove_molecules(molecules)
        self._check_level_change()
        return molecules

    @staticmethod
    def calc_molecule_score(molecule: Molecule) -> int:
        return molecule.size * molecule.size

    def _add_molecule_score(self, molecules: List[Molecule]) -> None:
        for molecule in molecules:
            self.molecules_in_round.append(molecule)
            score = self.calc_molecule_score(molecule)
            combo = len(self.molecules_in_round)
            if combo > 1:
                score *= combo
                logger.info("%d Combo", combo)
            self.situation.add_score(score)
            logger.info("%d scores added for molecule with %d atoms", score, molecule.size)

    def _remove_molecules(self, molecules: List[Molecule]) -> None:
        for molecule in molecules:
            for atom in molecule.atoms:
                if atom.is_placed:
                    self.board.remove_piece(atom.col, atom.row)

    def _check_level_change(self) -> bool:
        """Advance past every level whose required score has been reached."""
        current = self.level
        if self.situation.is_last_level():
            return False
        if self.score < current.required_score:
            return False

        next_level = self.situation.get_level(current.number + 1)
        while (self.score >= next_level.required_score
               and not self.settings.is_last_level(next_level)):
            next_level = self.situation.get_level(next_level.number + 1)

        if next_level is current:
            return False
        self.situation.current_level = next_level
        logger.info("Level changed to %d", next_level.number)
        return True

    def _set_game_over(self) -> None:
        self.status = GameStatus.GAME_OVER
        self.situation.game_over = True
        logger.info("Game over with %d points at level %d", self.score, self.level_number)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of the whole mutable game state."""
        return self.situation.to_dict()

    def set_state(self, state: Dict[str, Any]) -> None:
        """
        Restore a snapshot.

        Counters are cleared and, unless the snapshot is already over, the
        game waits for :meth:`start`.
        """
        self.situation = GameSituation.from_dict(state)
        self.molecules_in_round.clear()
        self.molecules_in_game.clear()
        self.moves_made = 0
        self.status = (GameStatus.GAME_OVER if self.situation.game_over
                       else GameStatus.AWAITING_FIRST_ROUND)
        self._notify()

    def get_statistics(self) -> Dict[str, Any]:
        """Get game statistics."""
        return {
            'score': self.score,
            'level': self.level_number,
            'moves_made': self.moves_made,
            'molecules': self.molecule_number,
            'atoms': len(self.situation.atoms()),
            'board_fill_ratio': len(self.situation.atoms()) / self.board.size,
            'game_over': self.is_game_over(),
        }

    def __str__(self) -> str:
        """String representation of the game state."""
        lines = [str(self.board)]
        lines.append(f"\nScore: {self.score} | Level: {self.level_number} | "
                     f"To next level: {self.scores_until_next_level()} | "
                     f"Molecules: {self.molecule_number} | Status: {self.status.value}")
        return "\n".join(lines)


def random_move(engine: GameEngine, max_attempts: int = 200) -> MoveResult:
    """Try random (atom, destination) pairs until one move succeeds."""
    atoms = engine.situation.atoms()
    targets = engine.situation.empty_cells(allow_indicator_cells=True)
    if not atoms or not targets:
        return MoveResult(success=False)
    for _ in range(max_attempts):
        atom = atoms[int(engine.rng.integers(len(atoms)))]
        target = targets[int(engine.rng.integers(len(targets)))]
        result = engine.move_atom(atom, target)
        if result.success:
            return result
    return MoveResult(success=False)


def play_random_game(
    seed: Optional[int] = None,
    settings: Optional[GameSettings] = None,
    max_moves: int = 1000,
) -> Dict[str, Any]:
    """
    Play a complete game with random moves.

    Args:
        seed: Random seed
        settings: Game settings (default settings if omitted)
        max_moves: Stop after this many moves even if the game is not over

    Returns:
        Dictionary with game statistics
    """
    engine = GameEngine(settings=settings, seed=seed)
    engine.start()

    while not engine.is_game_over() and engine.moves_made < max_moves:
        if not random_move(engine).success:
            break

    return engine.get_statistics()
