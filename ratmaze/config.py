import os
from typing import Tuple

from pydantic import BaseModel, Field, field_validator

from .grid import Direction
from .pool import default_pool_size

# ==========================================
# SOLVER SETTINGS
# ==========================================

DEFAULT_VISIT_DELAY = 0.1
DEFAULT_ORDER = (Direction.Down, Direction.Right)


def parse_order(value) -> Tuple[Direction, Direction]:
    """Accept "down,right", ["right", "down"] or a tuple of Directions."""
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",") if part.strip()]
    order = tuple(v if isinstance(v, Direction) else Direction(str(v).lower()) for v in value)
    if sorted(d.value for d in order) != ["down", "right"]:
        raise ValueError("order must name 'down' and 'right' exactly once each")
    return order


class SolverConfig(BaseModel):
    """Options of a search run."""

    pool_size: int = Field(default_factory=default_pool_size, ge=1)
    visit_delay: float = Field(default=DEFAULT_VISIT_DELAY, ge=0.0)
    order: Tuple[Direction, Direction] = DEFAULT_ORDER
    report_backtrack: bool = False
    log_level: str = "INFO"

    @field_validator("order", mode="before")
    @classmethod
    def _check_order(cls, value):
        return parse_order(value)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "SolverConfig":
        """Create config from environment variables."""
        values = {}
        if os.getenv("RATMAZE_POOL_SIZE"):
            values["pool_size"] = os.getenv("RATMAZE_POOL_SIZE")
        if os.getenv("RATMAZE_VISIT_DELAY"):
            values["visit_delay"] = os.getenv("RATMAZE_VISIT_DELAY")
        if os.getenv("RATMAZE_ORDER"):
            values["order"] = os.getenv("RATMAZE_ORDER")
        values["report_backtrack"] = os.getenv("RATMAZE_REPORT_BACKTRACK", "false").lower() == "true"
        values["log_level"] = os.getenv("RATMAZE_LOG_LEVEL", "INFO")
        return cls(**values)

# ==========================================
# EDITOR CONFIG
# ==========================================

WINDOW_W = 700
WINDOW_H = 800
PANEL_H = 60
STATUS_H = 40
FPS = 60
DEFAULT_SIZE = 8
MAX_SIZE = 40

COLOR_BG = (238, 238, 238)
COLOR_OPEN = (255, 255, 255)          # Open cell
COLOR_BLOCKED = (192, 192, 192)       # Blocked cell
COLOR_ENDPOINT = (255, 255, 0)        # Start / goal
COLOR_GRID = (120, 120, 120)
COLOR_TEXT = (30, 30, 30)
COLOR_ERROR = (200, 40, 40)
COLOR_SUCCESS = (0, 130, 0)

BRANCH_COLORS = (
    (0, 255, 255),     # cyan
    (255, 0, 255),     # magenta
    (0, 255, 0),       # green
    (0, 0, 255),       # blue
    (255, 200, 0),     # orange
)
COLOR_FINAL = (255, 200, 0)
COLOR_BACKTRACK = (255, 80, 80)

COLOR_PANEL = (230, 230, 230)
COLOR_TRACK = (200, 200, 200)         # Slider track
COLOR_KNOB = (70, 70, 70)
COLOR_DISABLED = (150, 150, 150)      # Buttons while a search runs
