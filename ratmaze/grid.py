import threading
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidCoordinateError, InvalidDimensionError, MazeParseError

# ==========================================
# 1. ENUMS & HELPERS
# ==========================================

class CellState(Enum):
    Blocked = 0
    Open = 1


class Direction(Enum):
    Down = "down"
    Right = "right"


OPEN_SYMBOLS = {"1": CellState.Open, ".": CellState.Open}
BLOCKED_SYMBOLS = {"0": CellState.Blocked, "#": CellState.Blocked}


class Position:
    def __init__(self, row=0, col=0):
        self.row = row
        self.col = col
    def __eq__(self, other):
        if isinstance(other, tuple): return (self.row, self.col) == other
        if not isinstance(other, Position): return NotImplemented
        return self.row == other.row and self.col == other.col
    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result
    def __hash__(self): return hash((self.row, self.col))
    def __iter__(self): return iter((self.row, self.col))
    def move(self, dir: Direction):
        if dir == Direction.Down: return Position(self.row + 1, self.col)
        if dir == Direction.Right: return Position(self.row, self.col + 1)
        return self
    def as_tuple(self): return (self.row, self.col)
    def __repr__(self): return f"({self.row}, {self.col})"


def as_position(value) -> Position:
    if isinstance(value, Position): return value
    row, col = value
    return Position(row, col)

# ==========================================
# 2. GRID MODEL
# ==========================================

class Grid:
    """
    N x N matrix of open/blocked cells.

    The start and goal cells always read as open, whatever is stored for them.
    A grid must not be edited while a search is running over it; reads are
    lock-free and safe from any number of threads.
    """

    def __init__(self, cells: Sequence[Sequence[CellState]], start=None, goal=None):
        size = len(cells)
        if size <= 0:
            raise InvalidDimensionError("Maze size must be a positive integer.")
        for r, row in enumerate(cells):
            if len(row) != size:
                raise InvalidDimensionError(
                    f"Row {r} has {len(row)} cells, expected {size}."
                )
        self.size = size
        self._cells: List[List[CellState]] = [list(row) for row in cells]
        self.start = as_position(start) if start is not None else Position(0, 0)
        self.goal = as_position(goal) if goal is not None else Position(size - 1, size - 1)
        for name, pos in (("start", self.start), ("goal", self.goal)):
            if not self.in_bounds(pos.row, pos.col):
                raise InvalidCoordinateError(
                    f"The {name} cell {pos} is outside a {size}x{size} maze."
                )

    @classmethod
    def open(cls, size: int, start=None, goal=None) -> "Grid":
        if size <= 0:
            raise InvalidDimensionError("Maze size must be a positive integer.")
        return cls([[CellState.Open] * size for _ in range(size)], start=start, goal=goal)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable], start=None, goal=None) -> "Grid":
        """Build a grid from rows of truthy (open) / falsy (blocked) values."""
        cells = [
            [CellState.Open if value else CellState.Blocked for value in row]
            for row in rows
        ]
        return cls(cells, start=start, goal=goal)

    @classmethod
    def parse(cls, text: str, start=None, goal=None) -> "Grid":
        """
        Read a text layout: one line per row, `1`/`.` for open cells and
        `0`/`#` for blocked ones. Whitespace between cells is ignored.
        """
        cells = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            symbols = "".join(line.split())
            if not symbols:
                continue
            row = []
            for ch in symbols:
                if ch in OPEN_SYMBOLS:
                    row.append(OPEN_SYMBOLS[ch])
                elif ch in BLOCKED_SYMBOLS:
                    row.append(BLOCKED_SYMBOLS[ch])
                else:
                    raise MazeParseError(f"Line {lineno}: unknown cell symbol {ch!r}.")
            cells.append(row)
        return cls(cells, start=start, goal=goal)

    def with_endpoints(self, start, goal) -> "Grid":
        """Copy of this grid whose forced-open start and goal are `start` and `goal`."""
        return Grid(self._cells, start=start, goal=goal)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def is_open(self, row: int, col: int) -> bool:
        if not self.in_bounds(row, col): return False
        if (row, col) == (self.start.row, self.start.col): return True
        if (row, col) == (self.goal.row, self.goal.col): return True
        return self._cells[row][col] == CellState.Open

    def get_cell(self, row: int, col: int) -> Optional[CellState]:
        if not self.in_bounds(row, col): return None
        return self._cells[row][col]

    def toggle(self, row: int, col: int) -> bool:
        """Flip a cell between open and blocked. Start and goal stay open."""
        if not self.in_bounds(row, col): return False
        pos = Position(row, col)
        if pos == self.start or pos == self.goal: return False
        current = self._cells[row][col]
        self._cells[row][col] = CellState.Blocked if current == CellState.Open else CellState.Open
        return True

    def render(self, path: Iterable = ()) -> str:
        on_path = {as_position(p) for p in path}
        lines = []
        for r in range(self.size):
            chars = []
            for c in range(self.size):
                pos = Position(r, c)
                if pos in on_path: chars.append("*")
                elif pos == self.start: chars.append("S")
                elif pos == self.goal: chars.append("E")
                elif self.is_open(r, c): chars.append("1")
                else: chars.append("0")
            lines.append(" ".join(chars))
        return "\n".join(lines)

    def __repr__(self): return f"Grid(size={self.size}, start={self.start}, goal={self.goal})"

# ==========================================
# 3. VISITED OVERLAY
# ==========================================

class VisitedSet:
    """
    Shared N x N visited markers.

    `lock` is the single exclusivity guard of a run: the search engine holds
    it for every mark/unmark and for the solution flag transition. The
    `*_locked` methods assume the caller already owns it.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise InvalidDimensionError("Maze size must be a positive integer.")
        self.size = size
        self.lock = threading.Lock()
        self._marks = [[False] * size for _ in range(size)]

    def is_visited(self, row: int, col: int) -> bool:
        if not (0 <= row < self.size and 0 <= col < self.size): return False
        return self._marks[row][col]

    def mark_locked(self, row: int, col: int):
        self._marks[row][col] = True

    def unmark_locked(self, row: int, col: int):
        self._marks[row][col] = False

    def clear(self):
        with self.lock:
            for row in self._marks:
                for c in range(self.size):
                    row[c] = False

    def marked(self) -> List[Position]:
        with self.lock:
            return [
                Position(r, c)
                for r in range(self.size)
                for c in range(self.size)
                if self._marks[r][c]
            ]

    def is_empty(self) -> bool:
        return not self.marked()

    def snapshot(self) -> List[List[bool]]:
        with self.lock:
            return [list(row) for row in self._marks]

    def trace_path(self, start: Position, goal: Position, order=(Direction.Down, Direction.Right)) -> List[Position]:
        """
        Follow marked cells from start to goal using monotone moves. Only the
        winning branch's cells stay marked once a run is over, so the walk is
        unambiguous. Returns an empty list if the marks do not reach the goal.
        """
        start, goal = as_position(start), as_position(goal)
        if start == goal:
            return [start]
        if not self.is_visited(start.row, start.col):
            return []
        path = [start]
        curr = start
        while curr != goal:
            step = None
            for d in order:
                nxt = curr.move(d)
                if nxt == goal or self.is_visited(nxt.row, nxt.col):
                    step = nxt
                    break
            if step is None:
                return []
            path.append(step)
            curr = step
        return path
