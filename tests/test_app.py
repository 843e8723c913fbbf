import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from ratmaze import SolverConfig
from ratmaze import config as cfg
from ratmaze.app import MazeEditor


@pytest.fixture
def editor():
    pygame.init()
    ed = MazeEditor(size=3, config=SolverConfig(pool_size=2, visit_delay=0.0))
    yield ed
    if ed.solver_thread is not None:
        ed.solver_thread.join(5)
    pygame.quit()


def cell_center(editor, row, col):
    return editor.cell_rect(row, col).center


def finish_solve(editor):
    editor.on_solve()
    editor.solver_thread.join(10)
    assert not editor.solving
    editor.pump_search_events()


def test_generate_and_toggle(editor):
    assert editor.grid.size == 3
    assert editor.toggle_at(cell_center(editor, 1, 1))
    assert not editor.grid.is_open(1, 1)
    # Start cell is fixed.
    assert not editor.toggle_at(cell_center(editor, 0, 0))
    # Clicks on the control panel do not reach the grid.
    assert not editor.toggle_at((10, 10))


def test_cell_at_roundtrip(editor):
    for r in range(3):
        for c in range(3):
            assert editor.cell_at(cell_center(editor, r, c)) == (r, c)


def test_solve_paints_path(editor):
    finish_solve(editor)
    assert editor.status == "Solution Found!"
    assert editor.result.found
    assert editor.cell_colors[(2, 2)] == cfg.COLOR_FINAL
    for cell in editor.result.path[:-1]:
        assert cell in editor.cell_colors
    editor.draw()


def test_solve_reports_no_solution(editor):
    editor.toggle_at(cell_center(editor, 0, 1))
    editor.toggle_at(cell_center(editor, 1, 0))
    finish_solve(editor)
    assert editor.status == "No Solution Exists!"
    assert not editor.result.found


def test_invalid_size_keeps_previous_grid(editor):
    editor.generate(0)
    assert editor.grid.size == 3
    assert editor.status == "Please enter a valid positive integer."


def test_slider_drives_generate(editor):
    editor.slider.set_size(editor.slider.size_at(editor.slider.rect.right))
    editor.on_generate()
    assert editor.grid.size == cfg.MAX_SIZE
    editor.draw()


def test_slider_clamps_and_follows_keys(editor):
    assert editor.slider.size_at(editor.slider.rect.x - 50) == 1
    editor.slider.set_size(cfg.MAX_SIZE + 5)
    assert editor.slider.size == cfg.MAX_SIZE
    editor.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_MINUS))
    assert editor.slider.size == cfg.MAX_SIZE - 1
    editor.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_PLUS))
    assert editor.slider.size == cfg.MAX_SIZE


def test_generate_button_click(editor):
    editor.slider.set_size(5)
    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=editor.btn_generate.rect.center, button=1)
    editor.handle_event(click)
    assert editor.grid.size == 5


def test_disabled_button_ignores_clicks(editor):
    editor.btn_generate.enabled = False
    editor.slider.set_size(6)
    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=editor.btn_generate.rect.center, button=1)
    assert not editor.btn_generate.handle_event(click)
    assert editor.grid.size == 3
