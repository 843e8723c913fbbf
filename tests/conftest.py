"""
Pytest configuration and shared fixtures.
"""

import logging
import random
from typing import List

import pytest

from ratmaze import Grid, RecordingReporter, SolverConfig

logging.basicConfig(level=logging.INFO)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep RATMAZE_* variables from the developer's shell out of the tests."""
    for name in ("RATMAZE_POOL_SIZE", "RATMAZE_VISIT_DELAY", "RATMAZE_ORDER",
                 "RATMAZE_REPORT_BACKTRACK", "RATMAZE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fast_config() -> SolverConfig:
    """Four workers, no pacing delay."""
    return SolverConfig(pool_size=4, visit_delay=0.0)


@pytest.fixture
def recorder() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def l_corridor() -> Grid:
    """5x5 maze whose only open cells run down column 0 and then along row 4."""
    return Grid.parse(
        """
        1 0 0 0 0
        1 0 0 0 0
        1 0 0 0 0
        1 0 0 0 0
        1 1 1 1 1
        """
    )


def has_monotone_path(rows: List[List[int]]) -> bool:
    """Reference answer: dynamic programming over down/right reachability."""
    n = len(rows)
    open_ = [[bool(v) for v in row] for row in rows]
    open_[0][0] = open_[n - 1][n - 1] = True
    reach = [[False] * n for _ in range(n)]
    for r in range(n):
        for c in range(n):
            if not open_[r][c]:
                continue
            if r == 0 and c == 0:
                reach[r][c] = True
            else:
                reach[r][c] = (r > 0 and reach[r - 1][c]) or (c > 0 and reach[r][c - 1])
    return reach[n - 1][n - 1]


def random_rows(rng: random.Random, size: int, blocked_ratio: float) -> List[List[int]]:
    return [[0 if rng.random() < blocked_ratio else 1 for _ in range(size)] for _ in range(size)]
