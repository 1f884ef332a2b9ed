"""Atomica rules engine: board, molecule matching, path search, rounds and editor."""
from .pieces import Piece, PieceKind, make_atom, make_indicator
from .board import Board, Cell
from .molecule import Molecule, MoleculeDetector, detect_molecules
from .pathfinding import Path, PathFinder, MAX_SEARCH_DISTANCE
from .settings import GameSettings, Level
from .situation import GameSituation
from .engine import GameEngine, GameStatus, MoveResult, play_random_game
from .editor import Editor, EditorMode
from .exceptions import AtomicaError, ConfigurationError, SituationFormatError

__all__ = [
    "Piece",
    "PieceKind",
    "make_atom",
    "make_indicator",
    "Board",
    "Cell",
    "Molecule",
    "MoleculeDetector",
    "detect_molecules",
    "Path",
    "PathFinder",
    "MAX_SEARCH_DISTANCE",
    "GameSettings",
    "Level",
    "GameSituation",
    "GameEngine",
    "GameStatus",
    "MoveResult",
    "play_random_game",
    "Editor",
    "EditorMode",
    "AtomicaError",
    "ConfigurationError",
    "SituationFormatError",
]
