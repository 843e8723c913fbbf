"""
Path reporters: the event sink of a search run.

The search engine calls these hooks synchronously from whichever worker
thread is exploring. Implementations must be thread-safe and must not rely on
being called in any particular order across branches.
"""

import logging
import threading
import time
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Branch palette, indexed by color tag modulo its length.
BRANCH_COLOR_NAMES = ("cyan", "magenta", "green", "blue", "orange")


def color_name(tag: int) -> str:
    return BRANCH_COLOR_NAMES[tag % len(BRANCH_COLOR_NAMES)]


class EventKind(str, Enum):
    VISIT = "visit"
    FINAL = "final"
    BACKTRACK = "backtrack"
    OUTCOME = "outcome"


class PathEvent(BaseModel):
    """One notification emitted during a run."""
    kind: EventKind
    row: Optional[int] = None
    col: Optional[int] = None
    color_tag: Optional[int] = None
    found: Optional[bool] = None
    timestamp: float = Field(default_factory=time.monotonic)

    @property
    def cell(self) -> Optional[Tuple[int, int]]:
        if self.row is None or self.col is None:
            return None
        return (self.row, self.col)


class PathReporter:
    """Base reporter. Every hook is a no-op; subclasses override what they need."""

    def on_visit(self, row: int, col: int, color_tag: int) -> None:
        pass

    def on_final(self, row: int, col: int) -> None:
        pass

    def on_backtrack(self, row: int, col: int) -> None:
        pass

    def on_outcome(self, found: bool) -> None:
        pass


class NullReporter(PathReporter):
    pass


class RecordingReporter(PathReporter):
    """Keeps every event in memory, in arrival order."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events: List[PathEvent] = []

    def _record(self, event: PathEvent):
        with self._lock:
            self.events.append(event)

    def on_visit(self, row, col, color_tag):
        self._record(PathEvent(kind=EventKind.VISIT, row=row, col=col, color_tag=color_tag))

    def on_final(self, row, col):
        self._record(PathEvent(kind=EventKind.FINAL, row=row, col=col))

    def on_backtrack(self, row, col):
        self._record(PathEvent(kind=EventKind.BACKTRACK, row=row, col=col))

    def on_outcome(self, found):
        self._record(PathEvent(kind=EventKind.OUTCOME, found=found))

    def of_kind(self, kind: EventKind) -> List[PathEvent]:
        with self._lock:
            return [e for e in self.events if e.kind == kind]

    @property
    def visits(self) -> List[PathEvent]:
        return self.of_kind(EventKind.VISIT)

    @property
    def finals(self) -> List[PathEvent]:
        return self.of_kind(EventKind.FINAL)

    @property
    def backtracks(self) -> List[PathEvent]:
        return self.of_kind(EventKind.BACKTRACK)

    @property
    def outcomes(self) -> List[bool]:
        return [e.found for e in self.of_kind(EventKind.OUTCOME)]


class LoggingReporter(PathReporter):
    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level

    def on_visit(self, row, col, color_tag):
        self.log.log(self.level, f"visit ({row}, {col}) by {color_name(color_tag)} branch #{color_tag}")

    def on_final(self, row, col):
        self.log.log(self.level, f"goal reached at ({row}, {col})")

    def on_backtrack(self, row, col):
        self.log.log(self.level, f"backtrack from ({row}, {col})")

    def on_outcome(self, found):
        self.log.log(self.level, "Solution Found!" if found else "No Solution Exists!")


class PacedReporter(PathReporter):
    """
    Forwards to another reporter and sleeps after each cell event so a viewer
    can follow the search. The delay only slows the calling branch.
    """

    def __init__(self, inner: PathReporter, delay: float = 0.1):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.inner = inner
        self.delay = delay

    def _pause(self):
        if self.delay > 0:
            time.sleep(self.delay)

    def on_visit(self, row, col, color_tag):
        self.inner.on_visit(row, col, color_tag)
        self._pause()

    def on_final(self, row, col):
        self.inner.on_final(row, col)
        self._pause()

    def on_backtrack(self, row, col):
        self.inner.on_backtrack(row, col)
        self._pause()

    def on_outcome(self, found):
        self.inner.on_outcome(found)


class MultiReporter(PathReporter):
    def __init__(self, reporters: Iterable[PathReporter]):
        self.reporters = list(reporters)

    def on_visit(self, row, col, color_tag):
        for r in self.reporters: r.on_visit(row, col, color_tag)

    def on_final(self, row, col):
        for r in self.reporters: r.on_final(row, col)

    def on_backtrack(self, row, col):
        for r in self.reporters: r.on_backtrack(row, col)

    def on_outcome(self, found):
        for r in self.reporters: r.on_outcome(found)
