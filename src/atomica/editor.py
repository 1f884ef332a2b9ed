"""
Atomica Layout Editor.

Authoring of starting boards by hand. Placement is validated so that an
authored layout never holds more indicators than the round quota and never
starts with a ready-made molecule.
"""
from enum import Enum
from typing import Callable, List, Optional

from .exceptions import ConfigurationError
from .molecule import MoleculeDetector
from .pieces import Piece
from .settings import GameSettings
from .situation import GameSituation
from utils.logger import get_logger

logger = get_logger(__name__)


class EditorMode(Enum):
    DELETE = "delete"
    ADD = "add"
    MOVE = "move"


class Editor:
    """Edits a :class:`GameSituation` piece by piece."""

    def __init__(self, settings: Optional[GameSettings] = None):
        self.situation = GameSituation(settings or GameSettings.editor_default())
        self.mode = EditorMode.MOVE
        self.piece_to_add: Optional[Piece] = None
        self.piece_to_move: Optional[Piece] = None
        self._observers: List[Callable[["Editor"], None]] = []

    @property
    def board(self):
        return self.situation.board

    @property
    def cols(self) -> int:
        return self.situation.cols

    @property
    def rows(self) -> int:
        return self.situation.rows

    @property
    def number_of_colors(self) -> int:
        return self.situation.current_level.number_of_colors

    def subscribe(self, callback: Callable[["Editor"], None]) -> None:
        self._observers.append(callback)

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)

    def query_piece(self, col: int, row: int) -> Optional[Piece]:
        return self.board.query_piece(col, row)

    def set_situation(self, situation: GameSituation) -> None:
        if situation is not None:
            self.situation = situation
            self._notify()

    def set_mode(self, mode: EditorMode) -> None:
        """Switch mode; selections that make no sense in the new mode are dropped."""
        self.mode = mode
        if mode in (EditorMode.DELETE, EditorMode.MOVE):
            self.piece_to_add = None
            self.piece_to_move = None
        elif mode == EditorMode.ADD:
            self.piece_to_move = None
        self._notify()

    def change_cols(self, cols: int) -> None:
        """Resize the board; this clears it."""
        if self.situation.cols != cols:
            self.situation.set_cols(cols)
            self._notify()

    def change_rows(self, rows: int) -> None:
        """Resize the board; this clears it."""
        if self.situation.rows != rows:
            self.situation.set_rows(rows)
            self._notify()

    def clear_situation(self) -> None:
        self.situation.clear()
        self._notify()

    def place_piece(self, piece: Piece, col: int, row: int) -> bool:
        """
        Place (or move) a piece.

        Rejected when the cell is missing or occupied, when an indicator
        would exceed the quota (unless it is one of the indicators already
        on the board being moved), or when an atom would complete a molecule.
        A rejected move leaves the piece where it was.
        """
        if piece is None or not self.board.in_bounds(col, row):
            return False

        if self.board.query_piece(col, row) is not None:
            logger.info("The cell (%d, %d) already contains a piece", col, row)
            return False

        if piece.is_indicator:
            indicators = self.situation.indicators()
            if (len(indicators) >= self.situation.indicators_per_round
                    and not any(ind is piece for ind in indicators)):
                logger.info("Indicator could not be placed, the board already has %d",
                            len(indicators))
                return False

        if piece.is_atom:
            old_position = piece.position
            self.board.place_piece(piece, col, row)
            if MoleculeDetector(self.board).detect_molecules():
                self.board.remove_piece(col, row)
                if old_position is not None:
                    self.board.place_piece(piece, *old_position)
                logger.info("Atom could not be placed at (%d, %d), it would form a molecule",
                            col, row)
                return False

        self.board.place_piece(piece, col, row)
        self._notify()
        return True

    def remove_piece(self, col: int, row: int) -> Optional[Piece]:
        removed = self.board.remove_piece(col, row)
        if removed is not None:
            self._notify()
        return removed

    def set_number_of_colors(self, number_of_colors: int) -> None:
        """Change the allowed colors and drop every piece whose color is no longer valid."""
        level = self.situation.current_level
        if level.number_of_colors != number_of_colors:
            previous = level.number_of_colors
            level.number_of_colors = number_of_colors
            try:
                self.situation.settings.validate()
            except ConfigurationError:
                level.number_of_colors = previous
                raise
            self._remove_invalid_pieces()
        self._notify()

    def _remove_invalid_pieces(self) -> None:
        for piece in self.situation.pieces():
            if piece.color >= self.number_of_colors:
                self.board.remove_piece(piece.col, piece.row)
