"""
Concurrent backtracking search over a grid maze.

A branch explores one cell and then its two monotone neighbours (down and
right). When both neighbours are open and the worker pool has room for two
more tasks, each neighbour becomes its own pool task with a fresh color tag;
otherwise the branch walks them inline. The first branch to step on the goal
flips a shared flag and every other branch unwinds as soon as it looks at it.

The visited overlay and the solution flag share one lock (`VisitedSet.lock`).
The grid itself is never written during a run and is read without locking.
"""

import itertools
import logging
import sys
import threading
import time
from concurrent.futures import CancelledError, Future
from functools import partial
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .config import DEFAULT_ORDER, SolverConfig
from .errors import InvalidCoordinateError, SearchInProgressError
from .grid import Direction, Grid, Position, VisitedSet, as_position
from .pool import WorkerPool
from .reporter import NullReporter, PacedReporter, PathReporter

logger = logging.getLogger(__name__)

# ==========================================
# 1. SHARED RUN STATE
# ==========================================

class SearchState:
    """The solution flag of one run. Once set it stays set."""

    def __init__(self, lock: threading.Lock):
        self._lock = lock
        self._found = False
        self.transitions = 0

    @property
    def found(self) -> bool:
        return self._found

    def claim(self) -> bool:
        """Set the flag. Returns True only for the call that actually flipped it."""
        with self._lock:
            if self._found:
                return False
            self._found = True
            self.transitions += 1
            return True


class ColorAllocator:
    """Hands out branch color tags. `next()` on a count is atomic, no lock needed."""

    def __init__(self):
        self._counter = itertools.count()

    def next(self) -> int:
        return next(self._counter)


class SearchResult(BaseModel):
    found: bool
    path: List[Tuple[int, int]] = []
    visits: int = 0
    branches: int = 0
    elapsed_ms: float = 0.0

# ==========================================
# 2. SEARCH ENGINE
# ==========================================

class SearchEngine:
    def __init__(
        self,
        grid: Grid,
        visited: VisitedSet,
        reporter: Optional[PathReporter] = None,
        order: Sequence[Direction] = DEFAULT_ORDER,
        report_backtrack: bool = False,
    ):
        self.grid = grid
        self.visited = visited
        self.reporter = reporter or NullReporter()
        self.order = tuple(order)
        self.report_backtrack = report_backtrack
        self.state = SearchState(visited.lock)
        self.colors = ColorAllocator()
        self.visits = 0
        self.cancelled = 0
        self._goal: Optional[Position] = None
        self._pool: Optional[WorkerPool] = None
        self._run_lock = threading.Lock()
        self._running = False

    def solve(self, start, goal, pool: WorkerPool) -> bool:
        """Explore from `start` in the calling thread. Not reentrant."""
        with self._run_lock:
            if self._running:
                raise SearchInProgressError("A search is already running on this maze.")
            self._running = True
        try:
            start, self._goal = as_position(start), as_position(goal)
            if start != self.grid.start or self._goal != self.grid.goal:
                self.grid = self.grid.with_endpoints(start, self._goal)
            self._pool = pool
            return self._explore(start.row, start.col, self.colors.next())
        finally:
            with self._run_lock:
                self._running = False

    def _is_valid(self, row: int, col: int) -> bool:
        return self.grid.is_open(row, col) and not self.visited.is_visited(row, col)

    def _emit(self, hook, *args):
        try:
            hook(*args)
        except Exception as e:
            logger.error(f"Reporter hook {hook.__name__} failed: {e}", exc_info=True)

    def _explore(self, row: int, col: int, color: int) -> bool:
        if self.state.found:
            with self.visited.lock:
                self.cancelled += 1
            return False

        if self._goal.row == row and self._goal.col == col:
            if self.state.claim():
                self._emit(self.reporter.on_final, row, col)
                return True
            return False

        if not self._is_valid(row, col):
            return False

        here = Position(row, col)
        with self.visited.lock:
            # Re-check: another branch may have claimed the cell since the read above.
            if not self._is_valid(row, col):
                return False
            moves = []
            for d in self.order:
                nxt = here.move(d)
                if self._is_valid(nxt.row, nxt.col):
                    moves.append(nxt)
            self.visited.mark_locked(row, col)
            self.visits += 1

        success = False
        try:
            self._emit(self.reporter.on_visit, row, col, color)
            futures = self._dispatch_pair(moves) if len(moves) == 2 else None
            if futures is not None:
                success = self._join(futures)
            else:
                # Saturated pool or a single open neighbour: stay on this
                # thread, one frame per cell.
                for nxt in moves:
                    if self._explore(nxt.row, nxt.col, color):
                        success = True
                        break
        finally:
            if not success:
                with self.visited.lock:
                    self.visited.unmark_locked(row, col)
        if not success and self.report_backtrack:
            self._emit(self.reporter.on_backtrack, row, col)
        return success

    def _dispatch_pair(self, moves: List[Position]) -> Optional[List[Future]]:
        futures = None
        if self._pool.has_capacity(len(moves)):
            tasks = [partial(self._explore, nxt.row, nxt.col, self.colors.next()) for nxt in moves]
            futures = self._pool.try_dispatch(tasks)
        if futures is None:
            logger.debug(f"Pool saturated, exploring {moves[0]} then {moves[1]} inline")
        else:
            logger.debug(f"Dispatched {moves[0]} and {moves[1]} (active={self._pool.active_count()})")
        return futures

    def _join(self, futures: List[Future]) -> bool:
        """Wait for every dispatched branch in order; success as soon as one succeeds."""
        success = False
        for fut in futures:
            if success and fut.cancel():
                continue
            if self._wait_branch(fut):
                success = True
        return success

    def _wait_branch(self, fut: Future) -> bool:
        try:
            return bool(fut.result())
        except CancelledError:
            logger.debug("Dispatched branch was cancelled before it started")
            return False
        except Exception as e:
            logger.warning(f"Dispatched branch failed: {e}", exc_info=True)
            return False


def solve(grid: Grid, visited: VisitedSet, start, goal, pool: WorkerPool,
          reporter: Optional[PathReporter] = None, order=DEFAULT_ORDER) -> bool:
    return SearchEngine(grid, visited, reporter, order).solve(start, goal, pool)

# ==========================================
# 3. TOP-LEVEL DRIVER
# ==========================================

def _ensure_recursion_limit(size: int):
    # Inline exploration costs one frame per path cell and a monotone path has
    # 2N-1 cells. The rest covers the caller and the reporter hooks.
    needed = 2 * size + 500
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


def solve_maze(
    grid: Grid,
    reporter: Optional[PathReporter] = None,
    config: Optional[SolverConfig] = None,
    start=None,
    goal=None,
    visited: Optional[VisitedSet] = None,
) -> SearchResult:
    """
    Run one search with the root branch in the calling thread, then report
    the outcome exactly once and tear the pool down.

    "No solution" is only reported when the solution flag is still unset
    after the root branch has returned.
    """
    config = config or SolverConfig()
    start = as_position(start) if start is not None else grid.start
    goal = as_position(goal) if goal is not None else grid.goal
    for name, pos in (("start", start), ("goal", goal)):
        if not grid.in_bounds(pos.row, pos.col):
            raise InvalidCoordinateError(
                f"The {name} cell {pos} is outside a {grid.size}x{grid.size} maze."
            )

    if visited is None:
        visited = VisitedSet(grid.size)
    if reporter is None:
        reporter = NullReporter()
    elif config.visit_delay > 0:
        reporter = PacedReporter(reporter, config.visit_delay)
    _ensure_recursion_limit(grid.size)

    engine = SearchEngine(grid, visited, reporter, config.order, config.report_backtrack)
    logger.info(
        f"Solving {grid.size}x{grid.size} maze from {start} to {goal} "
        f"with {config.pool_size} workers"
    )

    started = time.perf_counter()
    pool = WorkerPool(config.pool_size)
    try:
        # The root branch runs in the caller's thread; the pool only hosts
        # dispatched siblings.
        top = engine.solve(start, goal, pool)
        found = top or engine.state.found
        path = visited.trace_path(start, goal, config.order) if found else []
        elapsed_ms = (time.perf_counter() - started) * 1000
        engine._emit(reporter.on_outcome, found)
    finally:
        pool.cancel_all()

    result = SearchResult(
        found=found,
        path=[p.as_tuple() for p in path],
        visits=engine.visits,
        branches=pool.dispatched + 1,
        elapsed_ms=elapsed_ms,
    )
    logger.info(
        f"{'Solution Found!' if found else 'No Solution Exists!'} "
        f"visits={result.visits} branches={result.branches} "
        f"cancelled={engine.cancelled} time={elapsed_ms:.1f}ms"
    )
    return result
