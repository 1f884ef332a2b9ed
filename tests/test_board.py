"""
Tests for the game board.
"""
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomica.board import Board, Cell
from atomica.pieces import make_atom, make_indicator


class TestBoardBasics:
    """Test basic board operations."""

    def test_board_creation(self):
        """New board is 10x10 and empty."""
        board = Board()
        assert board.cols == 10
        assert board.rows == 10
        assert board.pieces() == []
        assert len(board.empty_cells()) == 100

    def test_board_custom_size(self):
        """Test board with custom size."""
        board = Board(cols=4, rows=3)
        assert board.grid.shape == (3, 4)
        assert board.size == 12

    def test_board_reset(self):
        """Reset empties every cell and unplaces the pieces."""
        board = Board(4, 4)
        atom = make_atom(0)
        board.place_piece(atom, 1, 1)

        board.reset()
        assert board.pieces() == []
        assert not atom.is_placed

    def test_resize_discards_pieces(self):
        """Changing dimensions rebuilds the grid."""
        board = Board(4, 4)
        atom = make_atom(1)
        board.place_piece(atom, 3, 3)

        board.set_cols(6)
        assert board.cols == 6
        assert board.pieces() == []
        assert not atom.is_placed

        board.place_piece(make_atom(0), 0, 0)
        board.set_rows(5)
        assert board.rows == 5
        assert board.grid.shape == (5, 6)
        assert board.pieces() == []


class TestPlacement:
    """Test placing, moving and removing pieces."""

    def test_place_piece(self):
        board = Board(4, 4)
        atom = make_atom(0)
        assert board.place_piece(atom, 2, 1) is True
        assert board.query_piece(2, 1) is atom
        assert atom.position == (2, 1)

    def test_place_out_of_bounds(self):
        """Placing outside the grid fails and leaves the piece unplaced."""
        board = Board(4, 4)
        atom = make_atom(0)
        assert board.place_piece(atom, 4, 0) is False
        assert board.place_piece(atom, -1, 0) is False
        assert not atom.is_placed
        assert board.pieces() == []

    def test_place_moves_piece(self):
        """A placed piece moves instead of being duplicated."""
        board = Board(4, 4)
        atom = make_atom(0)
        board.place_piece(atom, 0, 0)
        board.place_piece(atom, 3, 2)

        assert board.query_piece(0, 0) is None
        assert board.query_piece(3, 2) is atom
        assert board.pieces() == [atom]

    def test_place_overwrites(self):
        """Placing on an occupied cell replaces the previous piece."""
        board = Board(4, 4)
        indicator = make_indicator(1)
        atom = make_atom(0)
        board.place_piece(indicator, 1, 1)
        board.place_piece(atom, 1, 1)

        assert board.query_piece(1, 1) is atom
        assert not indicator.is_placed

    def test_remove_piece(self):
        board = Board(4, 4)
        atom = make_atom(0)
        board.place_piece(atom, 1, 2)

        assert board.remove_piece(1, 2) is atom
        assert board.query_piece(1, 2) is None
        assert not atom.is_placed

    def test_remove_empty_is_noop(self):
        board = Board(4, 4)
        assert board.remove_piece(0, 0) is None
        assert board.remove_piece(10, 10) is None

    def test_ownership_invariant(self):
        """After random place/remove sequences every piece is on exactly one cell."""
        rng = np.random.default_rng(7)
        board = Board(5, 5)
        pieces = [make_atom(i % 3) if i % 2 else make_indicator(i % 3) for i in range(12)]

        for _ in range(500):
            col, row = int(rng.integers(-1, 6)), int(rng.integers(-1, 6))
            if rng.random() < 0.7:
                board.place_piece(pieces[int(rng.integers(len(pieces)))], col, row)
            else:
                board.remove_piece(col, row)

            on_board = board.pieces()
            assert len({id(p) for p in on_board}) == len(on_board)
            for piece in on_board:
                assert board.query_piece(piece.col, piece.row) is piece
            for piece in pieces:
                if piece.is_placed:
                    assert board.query_piece(*piece.position) is piece
                else:
                    assert all(p is not piece for p in on_board)


class TestQueries:
    """Test bounds-safe queries."""

    def test_query_out_of_bounds(self):
        """Out-of-range coordinates find nothing instead of raising or wrapping."""
        board = Board(3, 3)
        board.place_piece(make_atom(0), 2, 2)

        assert board.query_piece(-1, -1) is None
        assert board.query_piece(3, 0) is None
        assert board.query_atom(0, 3) is None
        assert board.query_atom(-1, 2) is None

    def test_query_atom_by_color(self):
        board = Board(3, 3)
        board.place_piece(make_atom(1), 0, 0)
        board.place_piece(make_indicator(1), 1, 0)

        assert board.query_atom(0, 0) is not None
        assert board.query_atom(0, 0, 1) is not None
        assert board.query_atom(0, 0, 2) is None
        assert board.query_atom(1, 0) is None
        assert board.query_indicator(1, 0) is not None

    def test_is_blocked(self):
        """Only atoms block a cell."""
        board = Board.from_rows(["Ab.", "...", "..."])
        assert board.is_blocked(0, 0)
        assert not board.is_blocked(1, 0)
        assert not board.is_blocked(2, 0)
        assert not board.is_blocked(5, 5)

    def test_row_major_order(self):
        board = Board.from_rows([".B", "A."])
        assert [a.color for a in board.atoms()] == [1, 0]

    def test_empty_cells(self):
        board = Board.from_rows(["Ab.", "...", "..."])
        empty = board.empty_cells()
        assert len(empty) == 7
        assert Cell(1, 0) not in empty
        assert Cell(2, 0) in empty

        with_indicators = board.empty_cells(allow_indicator_cells=True)
        assert len(with_indicators) == 8
        assert Cell(1, 0) in with_indicators
        assert Cell(0, 0) not in with_indicators


class TestSerialization:
    """Test text and array conversion."""

    def test_from_rows_round_trip(self):
        rows = ["A.b", "..C", "d.."]
        board = Board.from_rows(rows)
        assert board.to_rows() == rows
        assert board.query_atom(2, 1).color == 2
        assert board.query_indicator(0, 2).color == 3

    def test_from_rows_rejects_ragged(self):
        with pytest.raises(ValueError):
            Board.from_rows(["AA", "A"])

    def test_state_round_trip(self):
        board = Board.from_rows(["A.b", "..C", "d.."])
        state = board.get_state()
        assert state.shape == (2, 3, 3)

        other = Board(5, 5)
        other.set_state(state)
        assert other == board
        assert other.to_rows() == board.to_rows()

    def test_copy_is_independent(self):
        board = Board.from_rows(["AA.", "...", "..."])
        copy = board.copy()
        assert copy == board

        copy.remove_piece(0, 0)
        assert board.query_atom(0, 0) is not None
        assert copy != board

    def test_color_grid(self):
        board = Board.from_rows(["A.b"])
        assert board.color_grid().tolist() == [[0, -1, 1]]
        assert board.kind_grid().tolist() == [[1, 0, 2]]
