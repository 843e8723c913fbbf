import logging
import os
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_SIZE, SolverConfig
from .errors import MazeError
from .grid import Grid
from .logging_config import setup_logging
from .reporter import RecordingReporter

app = typer.Typer(help="Rat in a Maze - multithreaded down/right backtracking solver.")
console = Console()
logger = logging.getLogger(__name__)


def _build_config(pool_size, delay, order, log_level, default_delay) -> SolverConfig:
    base = SolverConfig.from_env()
    overrides = {}
    if not os.getenv("RATMAZE_VISIT_DELAY"):
        overrides["visit_delay"] = default_delay
    if pool_size is not None:
        overrides["pool_size"] = pool_size
    if delay is not None:
        overrides["visit_delay"] = delay
    if order is not None:
        overrides["order"] = order
    if log_level is not None:
        overrides["log_level"] = log_level
    return SolverConfig(**{**base.model_dump(), **overrides})


@app.command()
def solve(
    maze_file: Optional[Path] = typer.Argument(
        None, help="Text layout: one row per line, 1/. open, 0/# blocked.",
    ),
    size: int = typer.Option(DEFAULT_SIZE, "--size", "-n", help="Size of an all-open maze when no file is given."),
    pool_size: Optional[int] = typer.Option(None, "--pool-size", "-p", help="Worker pool size."),
    delay: Optional[float] = typer.Option(None, "--delay", "-d", help="Seconds to pause after each visit event."),
    order: Optional[str] = typer.Option(None, "--order", help="Exploration order, e.g. 'down,right'."),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR."),
):
    """
    Solve a maze headless and print the path.
    """
    from .search import solve_maze

    try:
        config = _build_config(pool_size, delay, order, log_level, default_delay=0.0)
        setup_logging(level=config.log_level)
        logger.debug(f"Config: {config}")
        if maze_file is not None:
            grid = Grid.parse(maze_file.read_text())
        else:
            grid = Grid.open(size)
    except (MazeError, ValidationError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(getattr(e, 'message', e)))}")
        raise typer.Exit(code=2)

    reporter = RecordingReporter()
    result = solve_maze(grid, reporter=reporter, config=config)

    console.print(grid.render(result.path))
    if result.found:
        console.print(f"[green]Solution Found![/green] path length {len(result.path)}, "
                      f"{result.visits} visits, {result.branches} branches, {result.elapsed_ms:.1f} ms")
    else:
        console.print(f"[red]No Solution Exists![/red] {result.visits} visits, {result.elapsed_ms:.1f} ms")
        raise typer.Exit(code=1)


@app.command()
def gui(
    size: int = typer.Option(DEFAULT_SIZE, "--size", "-n", help="Initial maze size."),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
):
    """
    Open the maze editor.
    """
    from .app import run_editor

    setup_logging(level=log_level)
    run_editor(size=size, config=SolverConfig.from_env())


def main():
    app()


if __name__ == "__main__":
    main()
