"""
Atomica Board Module.

This module implements the game board with:
- cols x rows grid of cells, each holding at most one piece
- Single-owner bookkeeping between cells and pieces
- Bounds-safe queries (out-of-range coordinates simply find nothing)
- Empty cell / atom / indicator enumeration in row-major order
"""
from typing import Iterable, List, NamedTuple, Optional
import numpy as np

from .pieces import Piece, PieceKind, piece_from_symbol


EMPTY_COLOR = -1
KIND_CODES = {None: 0, PieceKind.ATOM: 1, PieceKind.INDICATOR: 2}
CODE_KINDS = {code: kind for kind, code in KIND_CODES.items()}


class Cell(NamedTuple):
    """Coordinates of a board cell."""
    col: int
    row: int


class Board:
    """
    Represents the Atomica game board.

    The grid is a 2D numpy object array indexed ``grid[row, col]`` where every
    entry is either None or the Piece currently sitting on that cell. The
    board is the only owner of pieces: whenever a piece is placed, moved or
    removed, its logical position is updated here.
    """

    MIN_SIZE = 3
    MAX_SIZE = 30
    DEFAULT_COLS = 10
    DEFAULT_ROWS = 10

    def __init__(self, cols: int = DEFAULT_COLS, rows: int = DEFAULT_ROWS):
        """Initialize an empty board."""
        self._cols = cols
        self._rows = rows
        self.grid = self._new_grid()

    def _new_grid(self) -> np.ndarray:
        return np.full((self._rows, self._cols), None, dtype=object)

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def size(self) -> int:
        """Return the number of cells."""
        return self._cols * self._rows

    def _discard_all(self) -> None:
        for piece in self.pieces():
            piece.col = None
            piece.row = None

    def reset(self) -> None:
        """Empty every cell."""
        self._discard_all()
        self.grid = self._new_grid()

    def set_cols(self, cols: int) -> None:
        """Change the number of columns. All pieces are discarded."""
        self._discard_all()
        self._cols = cols
        self.grid = self._new_grid()

    def set_rows(self, rows: int) -> None:
        """Change the number of rows. All pieces are discarded."""
        self._discard_all()
        self._rows = rows
        self.grid = self._new_grid()

    def in_bounds(self, col: int, row: int) -> bool:
        """Check if coordinates are within board bounds."""
        return 0 <= col < self._cols and 0 <= row < self._rows

    def cell(self, col: int, row: int) -> Optional[Cell]:
        """Return the cell at the given coordinates, or None outside the grid."""
        if not self.in_bounds(col, row):
            return None
        return Cell(col, row)

    def cells(self) -> List[Cell]:
        """All cells in row-major order."""
        return [Cell(c, r) for r in range(self._rows) for c in range(self._cols)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def place_piece(self, piece: Piece, col: int, row: int) -> bool:
        """
        Put a piece on a cell.

        A piece already sitting elsewhere is moved, not duplicated. A piece
        already on the target cell is replaced and becomes unplaced.

        Returns:
            True on success, False if the cell does not exist
        """
        if not self.in_bounds(col, row):
            return False

        if piece.is_placed:
            old_col, old_row = piece.position
            if self.in_bounds(old_col, old_row) and self.grid[old_row, old_col] is piece:
                self.grid[old_row, old_col] = None

        previous = self.grid[row, col]
        if previous is not None and previous is not piece:
            previous.col = None
            previous.row = None

        self.grid[row, col] = piece
        piece.col = col
        piece.row = row
        return True

    def remove_piece(self, col: int, row: int) -> Optional[Piece]:
        """
        Remove the piece on a cell.

        Returns:
            The removed piece, or None if the cell was empty or does not exist
        """
        piece = self.query_piece(col, row)
        if piece is None:
            return None
        self.grid[row, col] = None
        piece.col = None
        piece.row = None
        return piece

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_piece(self, col: int, row: int) -> Optional[Piece]:
        """Return the piece on a cell, or None (also for out-of-range cells)."""
        if not self.in_bounds(col, row):
            return None
        return self.grid[row, col]

    def query_atom(self, col: int, row: int, color: Optional[int] = None) -> Optional[Piece]:
        """Return the atom on a cell, optionally only if it has the given color."""
        piece = self.query_piece(col, row)
        if piece is None or not piece.is_atom:
            return None
        if color is not None and piece.color != color:
            return None
        return piece

    def query_indicator(self, col: int, row: int) -> Optional[Piece]:
        """Return the indicator on a cell, or None."""
        piece = self.query_piece(col, row)
        if piece is None or not piece.is_indicator:
            return None
        return piece

    def is_empty(self, col: int, row: int) -> bool:
        """Check if an existing cell holds no piece."""
        return self.in_bounds(col, row) and self.grid[row, col] is None

    def is_blocked(self, col: int, row: int) -> bool:
        """Only atoms block a cell; indicators can be walked over."""
        return self.query_atom(col, row) is not None

    def pieces(self) -> List[Piece]:
        """All pieces in row-major order."""
        return [p for p in self.grid.flat if p is not None]

    def atoms(self) -> List[Piece]:
        """All atoms in row-major order."""
        return [p for p in self.grid.flat if p is not None and p.is_atom]

    def indicators(self) -> List[Piece]:
        """All indicators in row-major order."""
        return [p for p in self.grid.flat if p is not None and p.is_indicator]

    def empty_cells(self, allow_indicator_cells: bool = False) -> List[Cell]:
        """
        Get all empty cells in row-major order.

        Args:
            allow_indicator_cells: Also count cells holding an indicator as empty
        """
        empty = []
        for row in range(self._rows):
            for col in range(self._cols):
                piece = self.grid[row, col]
                if piece is None or (allow_indicator_cells and piece.is_indicator):
                    empty.append(Cell(col, row))
        return empty

    # ------------------------------------------------------------------
    # Array views and (de)serialization
    # ------------------------------------------------------------------

    def color_grid(self) -> np.ndarray:
        """Colors as an int8 array; empty cells are -1."""
        colors = np.full((self._rows, self._cols), EMPTY_COLOR, dtype=np.int8)
        for piece in self.pieces():
            colors[piece.row, piece.col] = piece.color
        return colors

    def kind_grid(self) -> np.ndarray:
        """Piece kinds as an int8 array: 0 empty, 1 atom, 2 indicator."""
        kinds = np.zeros((self._rows, self._cols), dtype=np.int8)
        for piece in self.pieces():
            kinds[piece.row, piece.col] = KIND_CODES[piece.kind]
        return kinds

    def get_state(self) -> np.ndarray:
        """Get the board state as a (2, rows, cols) array of kinds and colors."""
        return np.stack([self.kind_grid(), self.color_grid()])

    def set_state(self, state: np.ndarray) -> None:
        """Rebuild the board from a (2, rows, cols) array of kinds and colors."""
        kinds, colors = np.asarray(state)
        rows, cols = kinds.shape
        self._discard_all()
        self._rows = rows
        self._cols = cols
        self.grid = self._new_grid()
        for row in range(rows):
            for col in range(cols):
                kind = CODE_KINDS[int(kinds[row, col])]
                if kind is not None:
                    self.place_piece(Piece(kind, int(colors[row, col])), col, row)

    def copy(self) -> "Board":
        """Create a deep copy of this board with fresh pieces."""
        new_board = Board(self._cols, self._rows)
        for piece in self.pieces():
            new_board.place_piece(piece.copy(), piece.col, piece.row)
        return new_board

    @classmethod
    def from_rows(cls, lines: Iterable[str]) -> "Board":
        """
        Build a board from text rows.

        Upper-case letters are atoms, lower-case letters indicators and '.'
        empty cells; 'A'/'a' is color 0, 'B'/'b' color 1 and so on.
        """
        lines = [line.strip() for line in lines if line.strip()]
        board = cls(len(lines[0]), len(lines))
        for row, line in enumerate(lines):
            if len(line) != board.cols:
                raise ValueError(f"Row {row} has {len(line)} cells, expected {board.cols}")
            for col, symbol in enumerate(line):
                piece = piece_from_symbol(symbol)
                if piece is not None:
                    board.place_piece(piece, col, row)
        return board

    def to_rows(self) -> List[str]:
        """Inverse of :meth:`from_rows`."""
        return [
            "".join(
                self.grid[row, col].symbol() if self.grid[row, col] is not None else "."
                for col in range(self._cols)
            )
            for row in range(self._rows)
        ]

    def __str__(self) -> str:
        """Create a string visualization of the board."""
        lines = []
        lines.append("   " + " ".join(str(i % 10) for i in range(self._cols)))
        lines.append("   " + "-" * (self._cols * 2 - 1))
        for row, text in enumerate(self.to_rows()):
            lines.append(f"{row:2d}|" + " ".join(text))
        lines.append("   " + "-" * (self._cols * 2 - 1))
        lines.append(f"Atoms: {len(self.atoms())}, Indicators: {len(self.indicators())}, "
                     f"Empty: {len(self.empty_cells())}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Board(cols={self._cols}, rows={self._rows}, pieces={len(self.pieces())})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return False
        return np.array_equal(self.get_state(), other.get_state())

    __hash__ = None
