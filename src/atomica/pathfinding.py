"""
Atomica Path Finding.

A* search over the board used to validate and animate atom moves:
- 4-directional movement with unit step cost
- Straight-line (Euclidean) heuristic
- Cells holding an atom are impassable, indicators are not
- Search depth is capped at MAX_SEARCH_DISTANCE
"""
from bisect import insort
import math
from typing import Iterator, List, Optional, Set
import numpy as np

from .board import Board, Cell
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_SEARCH_DISTANCE = 500
NEIGHBOUR_STEPS = [(0, -1), (-1, 0), (1, 0), (0, 1)]


class Node:
    """Search state of a single cell."""

    __slots__ = ("cell", "parent", "depth", "cost", "heuristic")

    def __init__(self, cell: Cell):
        self.cell = cell
        self.parent: Optional["Node"] = None
        self.depth = 0
        self.cost = 0.0
        self.heuristic = 0.0

    @property
    def col(self) -> int:
        return self.cell.col

    @property
    def row(self) -> int:
        return self.cell.row

    @property
    def priority(self) -> float:
        # single precision keeps ties exactly where the game always had them
        return float(np.float32(self.cost) + np.float32(self.heuristic))

    def set_parent(self, parent: Optional["Node"]) -> int:
        """Attach to a parent node and return the resulting depth."""
        if parent is not None:
            self.depth = parent.depth + 1
        self.parent = parent
        return self.depth

    def __repr__(self) -> str:
        return f"Node({self.col}, {self.row}, cost={self.cost}, h={self.heuristic:.2f})"


class SortedNodeList:
    """
    Open list ordered by priority.

    Nodes with equal priority keep their insertion order. A node's cost is
    never changed while it sits in this list, so inserting to the right of
    its equals is the same as re-sorting stably after every add.
    """

    def __init__(self):
        self._nodes: List[Node] = []

    def add(self, node: Node) -> None:
        insort(self._nodes, node, key=lambda n: n.priority)

    def clear(self) -> None:
        self._nodes.clear()

    def contains(self, node: Node) -> bool:
        return any(n is node for n in self._nodes)

    def first(self) -> Node:
        return self._nodes[0]

    def remove(self, node: Node) -> None:
        for i, n in enumerate(self._nodes):
            if n is node:
                del self._nodes[i]
                return

    def __len__(self) -> int:
        return len(self._nodes)


class Path:
    """Ordered cells from source to destination, both inclusive."""

    def __init__(self, cells: Optional[List[Cell]] = None):
        self.cells: List[Cell] = list(cells or [])

    def prepend(self, cell: Cell) -> None:
        self.cells.insert(0, cell)

    @property
    def length(self) -> int:
        """Number of steps, i.e. cells minus one."""
        return max(len(self.cells) - 1, 0)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __repr__(self) -> str:
        return f"Path({self.cells})"


class PathFinder:
    """
    Shortest path search between two cells of a board.

    The start cell may hold the atom being moved; it is never treated as
    blocked. Nodes whose cost improves are taken out of both the open and
    closed lists and queued again, keeping their old heuristic until they
    are re-added.
    """

    def __init__(self, max_search_distance: int = MAX_SEARCH_DISTANCE):
        self.max_search_distance = max_search_distance
        self.open = SortedNodeList()
        self.closed: Set[Node] = set()
        self.nodes: List[List[Node]] = []
        self.board: Optional[Board] = None

    def _init_nodes(self, board: Board) -> None:
        self.board = board
        self.nodes = [[Node(Cell(col, row)) for col in range(board.cols)]
                      for row in range(board.rows)]

    def _is_valid_move(self, from_cell: Cell, col: int, row: int) -> bool:
        if not self.board.in_bounds(col, row):
            return False
        if (col, row) == tuple(from_cell):
            return True
        return not self.board.is_blocked(col, row)

    @staticmethod
    def _heuristic_cost(node: Node, target: Node) -> float:
        dx = target.col - node.col
        dy = target.row - node.row
        return float(np.float32(math.sqrt(dx * dx + dy * dy)))

    def find_shortest_path(self, board: Board, from_cell: Cell, to_cell: Cell) -> Optional[Path]:
        """
        Find a shortest path from ``from_cell`` to ``to_cell``.

        Returns:
            The path including both end cells, or None if the destination is
            blocked, equal to the source, unreachable or beyond the search
            depth
        """
        from_cell = Cell(*from_cell)
        to_cell = Cell(*to_cell)
        if not board.in_bounds(*from_cell) or not board.in_bounds(*to_cell):
            return None
        if board.is_blocked(*to_cell) or from_cell == to_cell:
            return None

        self._init_nodes(board)
        from_node = self.nodes[from_cell.row][from_cell.col]
        to_node = self.nodes[to_cell.row][to_cell.col]

        from_node.cost = 0.0
        from_node.depth = 0
        self.closed.clear()
        self.open.clear()
        self.open.add(from_node)
        to_node.set_parent(None)

        max_depth = 0
        while max_depth < self.max_search_distance and len(self.open) != 0:
            current = self.open.first()
            if current is to_node:
                break

            self.open.remove(current)
            self.closed.add(current)

            for dc, dr in NEIGHBOUR_STEPS:
                col = current.col + dc
                row = current.row + dr
                if not self._is_valid_move(from_cell, col, row):
                    continue

                neighbour = self.nodes[row][col]
                next_step_cost = current.cost + 1

                if next_step_cost < neighbour.cost:
                    if self.open.contains(neighbour):
                        self.open.remove(neighbour)
                    if neighbour in self.closed:
                        self.closed.discard(neighbour)

                if not self.open.contains(neighbour) and neighbour not in self.closed:
                    neighbour.cost = next_step_cost
                    neighbour.heuristic = self._heuristic_cost(neighbour, to_node)
                    max_depth = max(max_depth, neighbour.set_parent(current))
                    self.open.add(neighbour)

        if to_node.parent is None:
            logger.debug("No path from %s to %s", from_cell, to_cell)
            return None

        path = Path()
        node = to_node
        while node is not from_node:
            path.prepend(node.cell)
            node = node.parent
        path.prepend(from_node.cell)
        return path
