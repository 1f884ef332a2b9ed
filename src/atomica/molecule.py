"""
Atomica Molecule Detection.

A molecule is a filled, axis-aligned rectangle of at least 2x2 atoms that
all share one color. The detector scans the board in row-major order and,
for every unclaimed atom, grows the largest rectangle it can find starting
from the 2x2 block to its south-east.
"""
from typing import Iterable, List, Optional, Set, Tuple

from .board import Board, Cell
from .pieces import Piece

MIN_MOLECULE_SIZE = 4


class Molecule:
    """A same-colored rectangle of atoms together with its bounding box."""

    def __init__(self, color: int, atoms: Iterable[Piece] = ()):
        self.color = color
        self.atoms: List[Piece] = []
        self._ids: Set[int] = set()
        self.min_row = -1
        self.max_row = -1
        self.min_col = -1
        self.max_col = -1
        self.add_atoms(atoms)

    def copy(self) -> "Molecule":
        return Molecule(self.color, self.atoms)

    def add_atom(self, atom: Piece) -> None:
        """Add an atom and widen the bounding box. Duplicates and other colors are ignored."""
        if id(atom) in self._ids or atom.color != self.color or not atom.is_placed:
            return
        col, row = atom.col, atom.row
        if self.min_row == -1 or row < self.min_row:
            self.min_row = row
        if self.min_col == -1 or col < self.min_col:
            self.min_col = col
        if self.max_row == -1 or row > self.max_row:
            self.max_row = row
        if self.max_col == -1 or col > self.max_col:
            self.max_col = col
        self.atoms.append(atom)
        self._ids.add(id(atom))

    def add_atoms(self, atoms: Iterable[Piece]) -> None:
        for atom in atoms:
            self.add_atom(atom)

    def contains(self, atom: Piece) -> bool:
        return id(atom) in self._ids

    @property
    def size(self) -> int:
        return len(self.atoms)

    @property
    def width(self) -> int:
        return self.max_col - self.min_col + 1

    @property
    def height(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def bounding_box(self) -> Tuple[int, int, int, int]:
        """(min_row, max_row, min_col, max_col)"""
        return (self.min_row, self.max_row, self.min_col, self.max_col)

    def is_valid(self) -> bool:
        """A molecule has no holes and at least four atoms."""
        return self.size >= MIN_MOLECULE_SIZE and self.size == self.width * self.height

    def cells(self) -> List[Cell]:
        return [Cell(atom.col, atom.row) for atom in self.atoms]

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (f"Molecule(color={self.color}, size={self.size}, "
                f"rows={self.min_row}-{self.max_row}, cols={self.min_col}-{self.max_col})")


class MoleculeDetector:
    """
    Finds all disjoint maximal molecules on a board.

    Each call to :meth:`detect_molecules` is one detection pass. Atoms that
    end up in a molecule are claimed for the rest of the pass, so the result
    depends on scan order: the first molecule to claim an atom wins, even if
    a later seed could have built a bigger rectangle through it.
    """

    def __init__(self, board: Board):
        self.board = board
        self.detected: List[Molecule] = []
        self._claimed: Set[int] = set()

    def detect_molecules(self) -> List[Molecule]:
        """
        Run one detection pass.

        Returns:
            Molecules in the order their seed atom was scanned
        """
        self.detected = []
        self._claimed = set()
        for atom in self.board.atoms():
            if self._is_claimed(atom):
                continue
            molecule = self._detect_from(atom)
            if molecule is not None:
                self.detected.append(molecule)
                self._claimed.update(id(a) for a in molecule.atoms)
        return self.detected

    def _is_claimed(self, atom: Piece) -> bool:
        return id(atom) in self._claimed

    def _free_atom(self, col: int, row: int, color: int) -> Optional[Piece]:
        atom = self.board.query_atom(col, row, color)
        if atom is None or self._is_claimed(atom):
            return None
        return atom

    def _detect_from(self, start: Piece) -> Optional[Molecule]:
        seed = self._seed_block(start)
        if seed is None:
            return None
        return self._grow(seed)

    def _seed_block(self, start: Piece) -> Optional[Molecule]:
        """The 2x2 block with ``start`` as its top-left atom."""
        col, row, color = start.col, start.row, start.color
        east = self._free_atom(col + 1, row, color)
        if east is None:
            return None
        south = self._free_atom(col, row + 1, color)
        if south is None:
            return None
        south_east = self._free_atom(col + 1, row + 1, color)
        if south_east is None:
            return None
        molecule = Molecule(color, (start, east, south, south_east))
        return molecule if molecule.is_valid() else None

    def _grow(self, seed: Molecule) -> Molecule:
        """
        Explore every east/south/square extension of ``seed`` depth-first.

        Extensions are visited east first, then south, then square, and the
        largest molecule seen wins; on equal size the one found first stays.
        A rectangle reached again along another route is not expanded twice:
        its first expansion already saw every extension it leads to.
        """
        best = seed
        stack = [seed]
        expanded: Set[Tuple[int, int, int, int]] = set()
        while stack:
            molecule = stack.pop()
            if molecule.bounding_box in expanded:
                continue
            expanded.add(molecule.bounding_box)
            east = self._extend_east(molecule)
            south = self._extend_south(molecule)
            square = self._extend_square(east, south)

            for candidate in (east, south, square):
                if candidate is not None and candidate.size > best.size:
                    best = candidate

            # reversed so that east is popped first
            for candidate in (square, south, east):
                if candidate is not None:
                    stack.append(candidate)
        return best

    def _extend_east(self, molecule: Molecule) -> Optional[Molecule]:
        extended = molecule.copy()
        col = molecule.max_col + 1
        for row in range(molecule.min_row, molecule.max_row + 1):
            atom = self._free_atom(col, row, molecule.color)
            if atom is None:
                return None
            extended.add_atom(atom)
        return extended if extended.is_valid() else None

    def _extend_south(self, molecule: Molecule) -> Optional[Molecule]:
        extended = molecule.copy()
        row = molecule.max_row + 1
        for col in range(molecule.min_col, molecule.max_col + 1):
            atom = self._free_atom(col, row, molecule.color)
            if atom is None:
                return None
            extended.add_atom(atom)
        return extended if extended.is_valid() else None

    def _extend_square(self, east: Optional[Molecule],
                       south: Optional[Molecule]) -> Optional[Molecule]:
        if east is None or south is None:
            return None
        # east and south already cover everything but the new corner
        corner = self._free_atom(east.max_col, south.max_row, east.color)
        if corner is None:
            return None
        square = Molecule(east.color, [corner])
        square.add_atoms(east.atoms)
        square.add_atoms(south.atoms)
        return square if square.is_valid() else None


def detect_molecules(board: Board) -> List[Molecule]:
    """Convenience wrapper for a single detection pass."""
    return MoleculeDetector(board).detect_molecules()
