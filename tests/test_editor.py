"""
Tests for the layout editor.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomica.board import Board
from atomica.editor import Editor, EditorMode
from atomica.exceptions import ConfigurationError
from atomica.pieces import make_atom, make_indicator
from atomica.settings import GameSettings


def make_editor(rows, quota=3):
    board = Board.from_rows(rows)
    settings = GameSettings(cols=board.cols, rows=board.rows,
                            levels=[(1, 0, 5)], indicators_per_round=quota)
    editor = Editor(settings)
    editor.situation.board = board
    return editor


class TestPlacement:
    """Test piece placement rules."""

    def test_default_editor(self):
        editor = Editor()
        assert editor.cols == 10 and editor.rows == 10
        assert editor.number_of_colors == 3
        assert editor.mode == EditorMode.MOVE

    def test_place_atom(self):
        editor = make_editor(["...", "...", "..."])
        atom = make_atom(0)
        assert editor.place_piece(atom, 1, 1)
        assert editor.query_piece(1, 1) is atom

    def test_occupied_cell(self):
        editor = make_editor(["A..", "...", "..."])
        assert not editor.place_piece(make_atom(1), 0, 0)
        assert not editor.place_piece(make_indicator(1), 0, 0)
        assert editor.query_piece(0, 0).color == 0

    def test_out_of_bounds(self):
        editor = make_editor(["...", "...", "..."])
        atom = make_atom(0)
        assert not editor.place_piece(atom, 3, 0)
        assert not editor.place_piece(atom, 0, -1)
        assert not atom.is_placed
        assert not editor.place_piece(None, 0, 0)

    def test_atom_forming_molecule_rejected(self):
        editor = make_editor(["AA.", "A..", "..."])
        atom = make_atom(0)
        assert not editor.place_piece(atom, 1, 1)
        assert editor.query_piece(1, 1) is None
        assert not atom.is_placed

    def test_rejected_move_restores_atom(self):
        """A placed atom that would complete a molecule stays where it was."""
        editor = make_editor(["AA.", "A..", "..A"])
        atom = editor.query_piece(2, 2)
        assert not editor.place_piece(atom, 1, 1)
        assert editor.query_piece(2, 2) is atom
        assert editor.query_piece(1, 1) is None
        assert atom.position == (2, 2)

    def test_move_atom(self):
        editor = make_editor(["A..", "...", "..."])
        atom = editor.query_piece(0, 0)
        assert editor.place_piece(atom, 2, 2)
        assert editor.query_piece(0, 0) is None
        assert editor.query_piece(2, 2) is atom

    def test_other_color_does_not_match(self):
        editor = make_editor(["AA.", "A..", "..."])
        assert editor.place_piece(make_atom(1), 1, 1)


class TestIndicatorQuota:
    """Test the indicator limit."""

    def test_quota_reached(self):
        editor = make_editor(["abc", "...", "..."], quota=3)
        assert not editor.place_piece(make_indicator(0), 1, 1)
        assert len(editor.situation.indicators()) == 3

    def test_moving_existing_indicator(self):
        """An indicator already on the board can still be moved at the quota."""
        editor = make_editor(["abc", "...", "..."], quota=3)
        indicator = editor.query_piece(0, 0)
        assert editor.place_piece(indicator, 1, 1)
        assert editor.query_piece(1, 1) is indicator
        assert editor.query_piece(0, 0) is None

    def test_below_quota(self):
        editor = make_editor(["ab.", "...", "..."], quota=3)
        assert editor.place_piece(make_indicator(2), 2, 2)

    def test_indicators_never_form_molecules(self):
        editor = make_editor(["aa.", "a..", "..."], quota=4)
        assert editor.place_piece(make_indicator(0), 1, 1)


class TestEditing:
    """Test modes, resizing and color changes."""

    def test_remove_piece(self):
        editor = make_editor(["A..", "...", "..."])
        removed = editor.remove_piece(0, 0)
        assert removed is not None and not removed.is_placed
        assert editor.remove_piece(0, 0) is None

    def test_change_size_clears(self):
        editor = make_editor(["A..", ".b.", "..."])
        editor.change_cols(5)
        assert editor.cols == 5
        assert editor.board.pieces() == []

        editor.place_piece(make_atom(0), 4, 2)
        editor.change_rows(4)
        assert editor.rows == 4
        assert editor.situation.settings.rows == 4
        assert editor.board.pieces() == []

    def test_invalid_size_rejected(self):
        editor = make_editor(["A..", "...", "..."])
        with pytest.raises(ConfigurationError):
            editor.change_cols(2)
        assert editor.cols == 3
        assert editor.situation.settings.cols == 3
        assert editor.query_piece(0, 0) is not None

    def test_clear_situation(self):
        editor = make_editor(["A..", ".b.", "..."])
        editor.clear_situation()
        assert editor.board.pieces() == []

    def test_reduce_colors_removes_pieces(self):
        editor = make_editor(["A.E", ".d.", "..C"])
        editor.set_number_of_colors(4)
        assert editor.number_of_colors == 4
        assert editor.board.to_rows() == ["A..", ".d.", "..C"]

        editor.set_number_of_colors(3)
        assert editor.board.to_rows() == ["A..", "...", "..C"]

    def test_invalid_color_count(self):
        editor = make_editor(["A..", "...", "..."])
        with pytest.raises(ConfigurationError):
            editor.set_number_of_colors(13)
        assert editor.number_of_colors == 5

    @pytest.mark.parametrize("mode,keeps_add", [
        (EditorMode.ADD, True),
        (EditorMode.MOVE, False),
        (EditorMode.DELETE, False),
    ])
    def test_set_mode_clears_selection(self, mode, keeps_add):
        editor = make_editor(["A..", "...", "..."])
        editor.piece_to_add = make_atom(1)
        editor.piece_to_move = editor.query_piece(0, 0)

        editor.set_mode(mode)

        assert editor.mode == mode
        assert editor.piece_to_move is None
        assert (editor.piece_to_add is not None) == keeps_add

    def test_observers(self):
        editor = make_editor(["...", "...", "..."])
        calls = []
        editor.subscribe(calls.append)
        editor.place_piece(make_atom(0), 0, 0)
        editor.place_piece(make_atom(0), 0, 0)
        assert len(calls) == 1
