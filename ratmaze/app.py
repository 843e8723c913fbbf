import logging
import queue
import sys
import threading
from typing import Dict, Optional, Tuple

import pygame

from . import config as cfg
from .config import SolverConfig
from .errors import MazeError
from .grid import Grid, Position
from .reporter import EventKind, PathEvent, PathReporter
from .search import SearchResult, solve_maze

logger = logging.getLogger(__name__)

# ==========================================
# 1. UI ELEMENTS
# ==========================================

class SizeSlider:
    """Horizontal slider that picks a maze size between 1 and `max_size`."""

    def __init__(self, rect, max_size: int, size: int):
        self.rect = pygame.Rect(rect)
        self.max_size = max_size
        self.size = max(1, min(size, max_size))
        self.dragging = False
        self.knob = pygame.Rect(0, self.rect.y - 5, 14, self.rect.height + 10)
        self._place_knob()

    def _place_knob(self):
        span = max(self.max_size - 1, 1)
        self.knob.centerx = self.rect.x + round(self.rect.width * (self.size - 1) / span)

    def size_at(self, x: int) -> int:
        x = max(self.rect.x, min(x, self.rect.right))
        return 1 + round((x - self.rect.x) * (self.max_size - 1) / self.rect.width)

    def set_size(self, size: int):
        self.size = max(1, min(size, self.max_size))
        self._place_knob()

    def handle_event(self, event):
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.knob.collidepoint(event.pos) or self.rect.collidepoint(event.pos):
                self.dragging = True
                self.set_size(self.size_at(event.pos[0]))
        elif event.type == pygame.MOUSEBUTTONUP:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            self.set_size(self.size_at(event.pos[0]))
        elif event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS, pygame.K_RIGHT):
                self.set_size(self.size + 1)
            elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS, pygame.K_LEFT):
                self.set_size(self.size - 1)

    def draw(self, screen):
        pygame.draw.rect(screen, cfg.COLOR_TRACK, self.rect, border_radius=4)
        pygame.draw.rect(screen, cfg.COLOR_KNOB, self.knob, border_radius=4)


class PanelButton:
    """Control panel button. Disabled buttons ignore clicks and draw grey."""

    def __init__(self, rect, label, action, color):
        self.rect = pygame.Rect(rect)
        self.label = label
        self.action = action
        self.color = color
        self.enabled = True
        self.font = pygame.font.SysFont('Arial', 14, bold=True)

    def handle_event(self, event) -> bool:
        if event.type != pygame.MOUSEBUTTONDOWN or event.button != 1:
            return False
        if not (self.enabled and self.rect.collidepoint(event.pos)):
            return False
        self.action()
        return True

    def draw(self, screen):
        color = self.color if self.enabled else cfg.COLOR_DISABLED
        pygame.draw.rect(screen, color, self.rect, border_radius=5)
        pygame.draw.rect(screen, (0, 0, 0), self.rect, 2, border_radius=5)
        label = self.font.render(self.label, True, (255, 255, 255))
        screen.blit(label, label.get_rect(center=self.rect.center))

# ==========================================
# 2. EVENT BRIDGE
# ==========================================

class QueueReporter(PathReporter):
    """Hands search events from worker threads to the pygame loop."""

    def __init__(self):
        self.events: "queue.Queue[PathEvent]" = queue.Queue()

    def on_visit(self, row, col, color_tag):
        self.events.put(PathEvent(kind=EventKind.VISIT, row=row, col=col, color_tag=color_tag))

    def on_final(self, row, col):
        self.events.put(PathEvent(kind=EventKind.FINAL, row=row, col=col))

    def on_backtrack(self, row, col):
        self.events.put(PathEvent(kind=EventKind.BACKTRACK, row=row, col=col))

    def on_outcome(self, found):
        self.events.put(PathEvent(kind=EventKind.OUTCOME, found=found))

# ==========================================
# 3. EDITOR
# ==========================================

class MazeEditor:
    """
    Grid editor: click cells to toggle them, pick a size and regenerate, then
    solve. Solving runs on a background thread; the main loop paints whatever
    events the search has produced so far.
    """

    def __init__(self, size: int = cfg.DEFAULT_SIZE, config: Optional[SolverConfig] = None):
        self.config = config or SolverConfig()
        self.screen = pygame.display.set_mode((cfg.WINDOW_W, cfg.WINDOW_H))
        pygame.display.set_caption("Rat in a Maze - Multithreading")
        self.font = pygame.font.SysFont('Arial', 18)
        self.font_cell = pygame.font.SysFont('Arial', 14, bold=True)

        self.grid: Optional[Grid] = None
        self.cell_colors: Dict[Tuple[int, int], Tuple[int, int, int]] = {}
        self.reporter: Optional[QueueReporter] = None
        self.solver_thread: Optional[threading.Thread] = None
        self.result: Optional[SearchResult] = None
        self.status = ""
        self.status_color = cfg.COLOR_TEXT

        self.slider = SizeSlider((90, 22, 200, 16), cfg.MAX_SIZE, size)
        self.btn_generate = PanelButton((390, 12, 140, 36), "Generate Maze", self.on_generate, (0, 120, 215))
        self.btn_solve = PanelButton((545, 12, 140, 36), "Solve Maze", self.on_solve, (0, 150, 0))

        self.generate(size)

    @property
    def solving(self) -> bool:
        return self.solver_thread is not None and self.solver_thread.is_alive()

    def set_status(self, text, color=cfg.COLOR_TEXT):
        self.status = text
        self.status_color = color

    # --- Actions ---

    def generate(self, size: int):
        if self.solving:
            return
        try:
            self.grid = Grid.open(size)
        except MazeError as e:
            logger.warning(f"Rejected maze size {size}: {e.message}")
            self.set_status("Please enter a valid positive integer.", cfg.COLOR_ERROR)
            return
        self.cell_colors = {}
        self.result = None
        self.set_status(f"{size}x{size} maze. Click cells to block or open them.")

    def on_generate(self):
        self.generate(self.slider.size)

    def on_solve(self):
        if self.grid is None:
            self.set_status("Please generate a maze first.", cfg.COLOR_ERROR)
            return
        if self.solving:
            return
        self.cell_colors = {}
        self.result = None
        self.reporter = QueueReporter()
        self.set_status("Solving...")
        self.solver_thread = threading.Thread(target=self._solve_worker, name="ratmaze-driver", daemon=True)
        self.solver_thread.start()

    def _solve_worker(self):
        self.result = solve_maze(self.grid, reporter=self.reporter, config=self.config)

    def cell_rect(self, row: int, col: int) -> pygame.Rect:
        area_h = cfg.WINDOW_H - cfg.PANEL_H - cfg.STATUS_H
        step_x = cfg.WINDOW_W / self.grid.size
        step_y = area_h / self.grid.size
        x = int(col * step_x)
        y = cfg.PANEL_H + int(row * step_y)
        w = int((col + 1) * step_x) - int(col * step_x)
        h = int((row + 1) * step_y) - int(row * step_y)
        return pygame.Rect(x, y, w, h)

    def cell_at(self, pixel) -> Optional[Position]:
        px, py = pixel
        area_h = cfg.WINDOW_H - cfg.PANEL_H - cfg.STATUS_H
        if self.grid is None or not (cfg.PANEL_H <= py < cfg.PANEL_H + area_h) or not (0 <= px < cfg.WINDOW_W):
            return None
        col = int(px * self.grid.size / cfg.WINDOW_W)
        row = int((py - cfg.PANEL_H) * self.grid.size / area_h)
        if not self.grid.in_bounds(row, col):
            return None
        return Position(row, col)

    def toggle_at(self, pixel) -> bool:
        if self.solving:
            return False
        pos = self.cell_at(pixel)
        if pos is None:
            return False
        if self.grid.toggle(pos.row, pos.col):
            self.cell_colors = {}
            return True
        return False

    # --- Loop ---

    def pump_search_events(self) -> int:
        if self.reporter is None:
            return 0
        handled = 0
        while True:
            try:
                event = self.reporter.events.get_nowait()
            except queue.Empty:
                break
            handled += 1
            if event.kind == EventKind.VISIT:
                self.cell_colors[event.cell] = cfg.BRANCH_COLORS[event.color_tag % len(cfg.BRANCH_COLORS)]
            elif event.kind == EventKind.FINAL:
                self.cell_colors[event.cell] = cfg.COLOR_FINAL
            elif event.kind == EventKind.BACKTRACK:
                self.cell_colors[event.cell] = cfg.COLOR_BACKTRACK
            elif event.kind == EventKind.OUTCOME:
                if event.found:
                    self.set_status("Solution Found!", cfg.COLOR_SUCCESS)
                else:
                    self.set_status("No Solution Exists!", cfg.COLOR_ERROR)
        return handled

    def handle_event(self, event):
        self.slider.handle_event(event)
        self.btn_generate.handle_event(event)
        self.btn_solve.handle_event(event)
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.toggle_at(event.pos)

    def draw(self):
        self.screen.fill(cfg.COLOR_BG)
        grid = self.grid
        show_text = grid.size <= 20
        for r in range(grid.size):
            for c in range(grid.size):
                rect = self.cell_rect(r, c)
                pos = Position(r, c)
                if (r, c) in self.cell_colors: color = self.cell_colors[(r, c)]
                elif pos == grid.start or pos == grid.goal: color = cfg.COLOR_ENDPOINT
                elif grid.is_open(r, c): color = cfg.COLOR_OPEN
                else: color = cfg.COLOR_BLOCKED
                pygame.draw.rect(self.screen, color, rect)
                pygame.draw.rect(self.screen, cfg.COLOR_GRID, rect, 1)

                if show_text:
                    if pos == grid.start: label = "S"
                    elif pos == grid.goal: label = "E"
                    else: label = "1" if grid.is_open(r, c) else "0"
                    txt_surf = self.font_cell.render(label, True, cfg.COLOR_TEXT)
                    self.screen.blit(txt_surf, txt_surf.get_rect(center=rect.center))

        # Control panel
        pygame.draw.rect(self.screen, cfg.COLOR_PANEL, (0, 0, cfg.WINDOW_W, cfg.PANEL_H))
        self.screen.blit(self.font.render("Size:", True, cfg.COLOR_TEXT), (20, 18))
        self.screen.blit(self.font.render(f"N = {self.slider.size}", True, cfg.COLOR_TEXT), (305, 18))
        self.slider.draw(self.screen)
        self.btn_generate.enabled = not self.solving
        self.btn_solve.enabled = not self.solving
        self.btn_generate.draw(self.screen)
        self.btn_solve.draw(self.screen)

        # Status line
        status_y = cfg.WINDOW_H - cfg.STATUS_H
        pygame.draw.rect(self.screen, cfg.COLOR_PANEL, (0, status_y, cfg.WINDOW_W, cfg.STATUS_H))
        self.screen.blit(self.font.render(self.status, True, self.status_color), (20, status_y + 10))

    def run(self):
        clock = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                else:
                    self.handle_event(event)
            self.pump_search_events()
            self.draw()
            pygame.display.flip()
            clock.tick(cfg.FPS)


def run_editor(size: int = cfg.DEFAULT_SIZE, config: Optional[SolverConfig] = None):
    pygame.init()
    try:
        MazeEditor(size=size, config=config).run()
    finally:
        pygame.quit()
    sys.exit()
