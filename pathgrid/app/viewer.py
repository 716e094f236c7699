# pathgrid/app/viewer.py
#!/usr/bin/env python3
"""
Pathfinding Viewer: paint walls, drag markers, watch the search.

- Mouse:
    left click/drag on a cell -> toggle/paint walls
    drag S or G               -> move start / end
- Keyboard:
    [SPACE]      -> start search
    [P]          -> reset path (keep walls)
    [G]          -> reset grid
    [M]          -> generate maze
    [1]..[4]     -> Dijkstra / A* / BFS / DFS
    [+]/[-]      -> faster / slower
    [Q]/[ESC]    -> quit

Config:
- ENV: PATHGRID_ALGORITHM, PATHGRID_SPEED_MS, PATHGRID_ROWS, PATHGRID_COLS,
       PATHGRID_LOG_LEVEL
- CLI: --algo=..., --speed=..., --rows=..., --cols=...
"""

import logging
import os
import sys
import time
from typing import List, Optional, Tuple

import pygame

from pathgrid.app.session import Session
from pathgrid.core.algorithms import ALGORITHM_LABELS
from pathgrid.core.config import AppConfig, CATEGORY_COLORS, resolve_config
from pathgrid.core.errors import PathgridError
from pathgrid.core.types import Position

logger = logging.getLogger(__name__)

# ---------- Layout ----------
WINDOW_SIZE = (1280, 800)
PANEL_W = 360            # metrics card + buttons
GRID_MARGIN = 16
BUTTON_H = 36
BUTTON_GAP = 8

# ---------- Palette ----------
BADGE_TEXT   = (250, 250, 250)
START_BADGE  = (34, 139, 34)
END_BADGE    = (200, 40, 40)
CELL_BORDER  = (60, 64, 72)
BACKDROP     = ((20, 22, 28), (34, 38, 46))   # top, bottom

PANEL_FILL   = (22, 26, 34, 225)
PANEL_TEXT   = (226, 232, 238)
PANEL_TITLE  = (255, 200, 60)

BUTTON_FILL = {
    "idle":   (38, 42, 52, 220),
    "hover":  (50, 56, 68, 230),
    "active": (52, 92, 150, 235),
}
BUTTON_EDGE = (110, 165, 250)
BUTTON_TEXT = (236, 238, 242)

ALGO_KEYS = {
    pygame.K_1: "dijkstra",
    pygame.K_2: "astar",
    pygame.K_3: "bfs",
    pygame.K_4: "dfs",
}


class UIButton:
    """Rounded panel button; togglable ones show whether their mode is on."""

    def __init__(self, label: str, rect: pygame.Rect, callback,
                 togglable: bool = False, active: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.togglable = togglable
        self.active = active
        self.hover = False

    @property
    def lit(self) -> bool:
        return self.togglable and self.active

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        state = "active" if self.lit else ("hover" if self.hover else "idle")
        plate = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        pygame.draw.rect(plate, BUTTON_FILL[state], plate.get_rect(), border_radius=8)
        screen.blit(plate, self.rect.topleft)
        if self.lit:
            pygame.draw.rect(screen, BUTTON_EDGE, self.rect, width=2, border_radius=8)

        caption = font.render(self.label, True, BUTTON_TEXT)
        screen.blit(caption, caption.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event) -> bool:
        """True when the event clicked this button (its callback has run)."""
        inside = self.rect.collidepoint(event.pos)
        if event.type == pygame.MOUSEMOTION:
            self.hover = inside
            return False
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and inside:
            self.callback()
            return True
        return False



class Viewer:
    def __init__(self, config: AppConfig, session: Optional[Session] = None):
        pygame.init()
        pygame.display.set_caption("Pathfinding Visualizer")
        self.screen = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

        self.config = config
        self.session = session or Session(config)

        self.fonts = {size: pygame.font.Font(None, px)
                      for size, px in (("badge", 14), ("body", 18), ("title", 22))}

        self._buttons: List[UIButton] = []
        self._backdrop: Optional[pygame.Surface] = None
        self.cell_size = 8
        self._quit = False
        self._last_tick_t = 0.0

        self._layout(*WINDOW_SIZE, refit=config.fit_viewport)

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int, refit: bool = False):
        """Size cells to the area left of the panel; center the plate in it."""
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        if refit:
            self.session.fit_to_viewport(avail_w, avail_h)

        grid = self.session.grid
        self.cell_size = max(1, min(avail_w // grid.cols, avail_h // grid.rows))

        plate = pygame.Rect(0, 0,
                            grid.cols * self.cell_size + 2 * GRID_MARGIN,
                            grid.rows * self.cell_size + 2 * GRID_MARGIN)
        plate.topleft = (max(0, (win_w - plate.width - PANEL_W) // 2),
                         max(0, (win_h - plate.height) // 2))
        self.canvas_rect = plate
        self._grid_origin = (plate.x + GRID_MARGIN, plate.y + GRID_MARGIN)
        self._panel = pygame.Rect(plate.right, 0, max(PANEL_W, win_w - plate.right), win_h)

        if self._backdrop is None or self._backdrop.get_size() != (win_w, win_h):
            self._backdrop = _gradient((win_w, win_h), *BACKDROP)
        self._build_buttons()

    def cell_at(self, pixel: Tuple[int, int]) -> Optional[Position]:
        ox, oy = self._grid_origin
        x, y = pixel
        if x < ox or y < oy:
            return None
        pos = ((y - oy) // self.cell_size, (x - ox) // self.cell_size)
        return pos if self.session.grid.in_bounds(pos) else None

    # ---------- loop ----------
    def run(self):
        try:
            while not self._quit:
                self._handle_events()
                self._tick_session()
                self._draw()
                self.clock.tick(60)
        finally:
            self.session.close()
            pygame.quit()

    def _tick_session(self):
        s = self.session
        if not s.running:
            return
        now = time.time()
        # maze frames already sleep speed_ms inside the generator
        if not s.generating and now - self._last_tick_t < s.speed_ms / 1000.0:
            return
        self._last_tick_t = now

        shown = s.grid
        s.tick()
        if s.grid is not shown:
            self._layout(*self.screen.get_size())
        elif not s.running:
            self._build_buttons()

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                self._quit = True
            elif e.type == pygame.KEYDOWN:
                self._handle_key(e.key)
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((e.w, e.h), pygame.RESIZABLE)
                self._layout(e.w, e.h, refit=self.config.fit_viewport)
            elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                if any(b.handle_mouse(e) for b in self._buttons):
                    continue
                pos = self.cell_at(e.pos)
                if pos is not None:
                    self.session.press(pos)
            elif e.type == pygame.MOUSEMOTION:
                for b in self._buttons:
                    b.handle_mouse(e)
                pos = self.cell_at(e.pos) if e.buttons[0] else None
                if pos is not None:
                    self.session.enter(pos)
            elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
                self.session.release()

    def _handle_key(self, key: int):
        s = self.session
        actions = {
            pygame.K_SPACE: s.start_search,
            pygame.K_p: s.reset_path,
            pygame.K_g: s.reset_grid,
            pygame.K_m: s.generate_maze,
        }
        if key in (pygame.K_ESCAPE, pygame.K_q):
            self._quit = True
        elif key in actions:
            self._action(actions[key])
        elif key in ALGO_KEYS:
            self._action(lambda: s.set_algorithm(ALGO_KEYS[key]))
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            s.bump_speed(+1)
        elif key in (pygame.K_MINUS, pygame.K_UNDERSCORE, pygame.K_KP_MINUS):
            s.bump_speed(-1)

    def _action(self, fn):
        try:
            fn()
        except PathgridError as ex:
            logger.error("%s", ex)
        self._layout(*self.screen.get_size())

    # ---------- drawing ----------
    def _draw(self):
        self.screen.blit(self._backdrop, (0, 0))
        self._draw_grid()
        self._draw_panel()
        pygame.display.flip()

    def _draw_grid(self):
        cs = self.cell_size
        ox, oy = self._grid_origin
        grid = self.session.grid
        for cell in grid.iter_cells():
            rect = pygame.Rect(ox + cell.col * cs, oy + cell.row * cs, cs, cs)
            self.screen.fill(CATEGORY_COLORS[cell.category], rect)
            pygame.draw.rect(self.screen, CELL_BORDER, rect, 1)

        self._draw_badge(grid.start, START_BADGE, "S")
        self._draw_badge(grid.end, END_BADGE, "G")

    def _draw_badge(self, pos: Position, color, label: str):
        cs = self.cell_size
        ox, oy = self._grid_origin
        center = (ox + pos[1] * cs + cs // 2, oy + pos[0] * cs + cs // 2)
        pygame.draw.circle(self.screen, color, center, max(4, cs // 2 - 2))
        txt = self.fonts["badge"].render(label, True, BADGE_TEXT)
        self.screen.blit(txt, txt.get_rect(center=center))

    # ---------- panel: metrics + buttons ----------
    def _build_buttons(self):
        s = self.session
        x = self._panel.x + 16
        w = max(160, self._panel.width - 32)
        rows = [
            [("Start", s.start_search, s.running and not s.generating)],
            [("Reset Path", s.reset_path, None)],
            [("Reset Grid", s.reset_grid, None)],
            [("Generate Maze", s.generate_maze, s.generating)],
            [("Slower", lambda: s.bump_speed(-1), None),
             ("Faster", lambda: s.bump_speed(+1), None)],
        ]
        rows += [[(f"Algo: {label}", lambda k=key: s.set_algorithm(k), s.algorithm == key)]
                 for key, label in ALGORITHM_LABELS.items()]

        self._buttons = []
        y = self._panel.y + 250   # below the metrics card
        for row in rows:
            bw = (w - BUTTON_GAP * (len(row) - 1)) // len(row)
            for i, (label, cb, active) in enumerate(row):
                rect = pygame.Rect(x + i * (bw + BUTTON_GAP), y, bw, BUTTON_H)
                self._buttons.append(UIButton(label, rect, lambda cb=cb: self._action(cb),
                                              togglable=active is not None,
                                              active=bool(active)))
            y += BUTTON_H + BUTTON_GAP

    def _metrics_lines(self) -> List[str]:
        s = self.session
        m = s.metrics
        out = [
            f"Popped: {m.get('popped', 0)}",
            f"Open: {m.get('open_size', 0)}",
            f"Closed: {m.get('closed_count', 0)}",
            f"Path Len: {m.get('path_len', 0)}",
        ]
        if m.get("total_cost") is not None:
            out.append(f"Total Cost: {m['total_cost']:g}")
        speed = "Instant" if s.speed_ms == 0 else f"{s.speed_ms} ms"
        out += [
            "",
            f"Algo: {s.algorithm_label}    State: {s.state}",
            f"Speed: {speed}    Grid: {s.grid.rows}x{s.grid.cols}",
        ]
        return out

    def _draw_panel(self):
        card = pygame.Rect(self._panel.x + 10, self._panel.y + 10, self._panel.width - 20, 230)
        plate = pygame.Surface(card.size, pygame.SRCALPHA)
        pygame.draw.rect(plate, PANEL_FILL, plate.get_rect(), border_radius=12)
        self.screen.blit(plate, card.topleft)

        x, y = card.x + 14, card.y + 8
        title = self.fonts["title"].render("Metrics", True, PANEL_TITLE)
        self.screen.blit(title, (x, y))
        y += title.get_height() + 8
        body = self.fonts["body"]
        for text in self._metrics_lines():
            if text:
                self.screen.blit(body.render(text, True, PANEL_TEXT), (x, y))
            y += body.get_linesize() + 4

        for b in self._buttons:
            b.draw(self.screen, body)


def _gradient(size: Tuple[int, int], top, bottom) -> pygame.Surface:
    w, h = size
    surf = pygame.Surface(size)
    for y in range(h):
        t = y / max(1, h - 1)
        color = tuple(int(a + (b - a) * t) for a, b in zip(top, bottom))
        pygame.draw.line(surf, color, (0, y), (w, y))
    return surf


def main():
    logging.basicConfig(
        level=os.getenv("PATHGRID_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = resolve_config()
    except PathgridError as ex:
        logger.error("Invalid configuration: %s", ex)
        sys.exit(2)
    try:
        Viewer(config).run()
    except Exception:
        logger.exception("Viewer crashed")
        sys.exit(1)


if __name__ == "__main__":
    main()
