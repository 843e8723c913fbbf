"""
ratmaze - rat-in-a-maze solver that splits down/right branches across a
bounded thread pool and stops as soon as one branch reaches the goal.
"""

from .config import SolverConfig
from .errors import (
    InvalidCoordinateError,
    InvalidDimensionError,
    MazeError,
    MazeParseError,
    SearchInProgressError,
)
from .grid import CellState, Direction, Grid, Position, VisitedSet
from .pool import WorkerPool
from .reporter import (
    EventKind,
    LoggingReporter,
    MultiReporter,
    NullReporter,
    PacedReporter,
    PathEvent,
    PathReporter,
    RecordingReporter,
)
from .search import SearchEngine, SearchResult, SearchState, solve, solve_maze

__version__ = "0.1.0"

__all__ = [
    "CellState",
    "Direction",
    "EventKind",
    "Grid",
    "InvalidCoordinateError",
    "InvalidDimensionError",
    "LoggingReporter",
    "MazeError",
    "MazeParseError",
    "MultiReporter",
    "NullReporter",
    "PacedReporter",
    "PathEvent",
    "PathReporter",
    "Position",
    "RecordingReporter",
    "SearchEngine",
    "SearchInProgressError",
    "SearchResult",
    "SearchState",
    "SolverConfig",
    "VisitedSet",
    "WorkerPool",
    "solve",
    "solve_maze",
]
