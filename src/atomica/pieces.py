"""
Atomica Piece Definitions.

This module defines the two kinds of pieces that can sit on a board cell:
- Atoms: colored pieces that block movement and form molecules
- Indicators: latent pieces that turn into atoms at the next round

A piece only stores its logical position as data. The board that holds it
keeps that position up to date on every placement and removal.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class PieceKind(Enum):
    """Kind of a piece."""
    ATOM = "atom"
    INDICATOR = "indicator"


@dataclass(eq=False)
class Piece:
    """
    A colored piece on the board.

    Pieces compare by identity: two atoms of the same color are still two
    different pieces, which is what molecule claiming and the editor quota
    rely on.
    """
    kind: PieceKind
    color: int
    col: Optional[int] = field(default=None, repr=False)
    row: Optional[int] = field(default=None, repr=False)

    def __post_init__(self):
        if not isinstance(self.kind, PieceKind):
            raise ValueError(f"Unknown piece kind: {self.kind!r}")
        if self.color < 0:
            raise ValueError(f"Color index must be non-negative, got {self.color}")

    @property
    def is_atom(self) -> bool:
        return self.kind is PieceKind.ATOM

    @property
    def is_indicator(self) -> bool:
        return self.kind is PieceKind.INDICATOR

    @property
    def position(self) -> Optional[Tuple[int, int]]:
        """Return the (col, row) the piece sits on, or None if unplaced."""
        if self.col is None or self.row is None:
            return None
        return (self.col, self.row)

    @property
    def is_placed(self) -> bool:
        return self.position is not None

    def converted(self) -> "Piece":
        """
        Return the atom this indicator turns into.

        The result is always a new, unplaced piece; the indicator itself is
        left untouched so the board can swap one for the other.
        """
        return Piece(PieceKind.ATOM, self.color)

    def copy(self) -> "Piece":
        """Create an unplaced piece of the same kind and color."""
        return Piece(self.kind, self.color)

    def symbol(self) -> str:
        """Short text symbol: upper-case letter for atoms, lower-case for indicators."""
        letter = chr(ord("A") + self.color % 26)
        return letter if self.is_atom else letter.lower()

    def __repr__(self) -> str:
        where = f" at {self.position}" if self.is_placed else ""
        return f"Piece({self.kind.value}, color={self.color}{where})"


def make_atom(color: int) -> Piece:
    """Create a new unplaced atom."""
    return Piece(PieceKind.ATOM, color)


def make_indicator(color: int) -> Piece:
    """Create a new unplaced indicator."""
    return Piece(PieceKind.INDICATOR, color)


def piece_from_symbol(symbol: str) -> Optional[Piece]:
    """
    Parse a piece from its text symbol.

    '.' means an empty cell and yields None.
    """
    if symbol == ".":
        return None
    if len(symbol) != 1 or not symbol.isalpha():
        raise ValueError(f"Invalid piece symbol: {symbol!r}")
    color = ord(symbol.upper()) - ord("A")
    kind = PieceKind.ATOM if symbol.isupper() else PieceKind.INDICATOR
    return Piece(kind, color)
