from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

import pygame

from ..config import HotseatConfig, configure_logging, load_config
from ..engine.board import BoardState
from ..engine.state import Player, Position, WallPlacement
from ..players.hotseat import HotseatController

logger = logging.getLogger(__name__)

CELL_SIZE = 60
PADDING = 40
BG_COLOR = (30, 30, 35)
GRID_COLOR = (180, 180, 180)
PLAYER_COLORS = [
    (50, 160, 255),   # seat 1: blue
    (255, 140, 60),   # seat 2: orange
    (60, 220, 100),   # seat 3: green
    (220, 60, 220),   # seat 4: purple
]
HIGHLIGHT_COLOR = (200, 220, 60)
TEXT_COLOR = (240, 240, 240)
GHOST_LEGAL = (200, 200, 120, 140)
GHOST_ILLEGAL = (255, 50, 50, 120)

SHIFT_KEYS = {
    pygame.K_UP: (-1, 0),
    pygame.K_w: (-1, 0),
    pygame.K_DOWN: (1, 0),
    pygame.K_s: (1, 0),
    pygame.K_LEFT: (0, -1),
    pygame.K_a: (0, -1),
    pygame.K_RIGHT: (0, 1),
    pygame.K_d: (0, 1),
}


class PygameHotseatUI:
    def __init__(self, names: Sequence[str], board_size: int):
        pygame.init()
        self.font = pygame.font.SysFont("consolas", 20)
        self.board = BoardState.new_game(len(names), size=board_size, names=names)
        self.controller = HotseatController(self.board)
        w = h = PADDING * 2 + CELL_SIZE * board_size
        self.screen = pygame.display.set_mode((w, h))
        pygame.display.set_caption("Quoridor Hotseat")
        self.clock = pygame.time.Clock()
        self.running = True
        self.drag_start: Optional[Position] = None  # grid intersection under a right-button press

    def seat_color(self, player: Optional[Player]) -> Tuple[int, int, int]:
        if player is None:
            return (120, 60, 60)
        idx = self.board.players.index(player)
        return PLAYER_COLORS[idx % len(PLAYER_COLORS)]

    def board_to_pixel(self, pos: Position) -> Tuple[int, int]:
        return PADDING + pos.col * CELL_SIZE, PADDING + pos.row * CELL_SIZE

    def pixel_to_corner(self, mx: int, my: int) -> Position:
        return Position(round((my - PADDING) / CELL_SIZE), round((mx - PADDING) / CELL_SIZE))

    def handle_drag(self, start: Position, end: Position):
        # Walls run along grid lines; endpoints map to the cells above / left of the line.
        if start.row == end.row:
            self.controller.preview_from_endpoints(start.translate(-1, 0), end.translate(-1, 0))
        elif start.col == end.col:
            self.controller.preview_from_endpoints(start.translate(0, -1), end.translate(0, -1))

    def pixel_to_cell(self, mx: int, my: int) -> Optional[Position]:
        if mx < PADDING or my < PADDING:
            return None
        pos = Position((my - PADDING) // CELL_SIZE, (mx - PADDING) // CELL_SIZE)
        return pos if self.board.in_bounds(pos) else None

    def wall_rect(self, wall: WallPlacement) -> pygame.Rect:
        base_x, base_y = self.board_to_pixel(Position(wall.row, wall.col))
        if wall.horizontal:
            return pygame.Rect(base_x, base_y + CELL_SIZE - 6, CELL_SIZE * 2, 12)
        return pygame.Rect(base_x + CELL_SIZE - 6, base_y, 12, CELL_SIZE * 2)

    def draw_grid(self):
        size = self.board.size
        for i in range(size + 1):
            off = PADDING + i * CELL_SIZE
            pygame.draw.line(self.screen, GRID_COLOR, (PADDING, off), (PADDING + size * CELL_SIZE, off), 2)
            pygame.draw.line(self.screen, GRID_COLOR, (off, PADDING), (off, PADDING + size * CELL_SIZE), 2)

    def draw_pawns(self):
        current = self.controller.current_player
        for player in self.board.players:
            x, y = self.board_to_pixel(self.board.pawn_position(player))
            rect = pygame.Rect(x + 8, y + 8, CELL_SIZE - 16, CELL_SIZE - 16)
            pygame.draw.rect(self.screen, self.seat_color(player), rect, border_radius=8)
            if player is current:
                pygame.draw.rect(self.screen, (255, 255, 255), rect, 2, border_radius=8)

    def draw_walls(self):
        for wall, owner in self.board.placed_walls():
            pygame.draw.rect(self.screen, self.seat_color(owner), self.wall_rect(wall), border_radius=3)

    def draw_wall_ghost(self):
        preview = self.controller.wall_preview
        if preview is None or self.controller.winner is not None:
            return
        rect = self.wall_rect(preview)
        color = GHOST_LEGAL if self.controller.preview_is_legal() else GHOST_ILLEGAL
        ghost = pygame.Surface(rect.size, pygame.SRCALPHA)
        ghost.fill(color)
        self.screen.blit(ghost, rect.topleft)

    def draw_highlights(self):
        for pos in self.controller.legal_moves:
            x, y = self.board_to_pixel(pos)
            pygame.draw.rect(
                self.screen,
                HIGHLIGHT_COLOR,
                pygame.Rect(x + 20, y + 20, CELL_SIZE - 40, CELL_SIZE - 40),
                2,
            )

    def draw_status(self):
        status = self.controller.status_line()
        if self.controller.winner is not None:
            status += " - R to restart, ESC to quit"
        surf = self.font.render(status, True, TEXT_COLOR)
        self.screen.blit(surf, (PADDING, 8))

    def handle_click(self, pos):
        cell = self.pixel_to_cell(*pos)
        if cell is None:
            return
        mods = pygame.key.get_mods()
        if mods & pygame.KMOD_SHIFT:
            self.controller.confirm_preview()
            return
        self.controller.attempt_move(cell)

    def track_mouse_preview(self):
        # Holding shift drags the wall preview under the mouse.
        if not pygame.key.get_mods() & pygame.KMOD_SHIFT:
            return
        cell = self.pixel_to_cell(*pygame.mouse.get_pos())
        preview = self.controller.begin_wall_preview()
        if cell is None or preview is None:
            return
        wr = self.board.wall_range
        if cell.row < wr and cell.col < wr:
            self.controller.set_wall_preview(WallPlacement(cell.row, cell.col, preview.orientation, wr))

    def handle_key(self, key):
        if key == pygame.K_ESCAPE:
            if self.controller.wall_preview is not None:
                self.controller.cancel_preview()
            else:
                self.running = False
        elif key == pygame.K_r:
            self.controller.restart()
        elif key == pygame.K_p:
            self.controller.begin_wall_preview()
        elif key == pygame.K_SPACE:
            self.controller.rotate_preview()
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if not self.controller.confirm_preview():
                logger.info("Wall preview %s rejected", self.controller.wall_preview)
        elif key in SHIFT_KEYS:
            self.controller.shift_preview(*SHIFT_KEYS[key])

    def loop(self):
        while self.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self.handle_key(event.key)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self.handle_click(event.pos)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
                    self.drag_start = self.pixel_to_corner(*event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 3 and self.drag_start is not None:
                    self.handle_drag(self.drag_start, self.pixel_to_corner(*event.pos))
                    self.drag_start = None
            self.track_mouse_preview()

            self.screen.fill(BG_COLOR)
            self.draw_grid()
            self.draw_highlights()
            self.draw_pawns()
            self.draw_walls()
            self.draw_wall_ghost()
            self.draw_status()
            pygame.display.flip()
            self.clock.tick(30)
        pygame.quit()


def main(argv: Optional[List[str]] = None):
    cfg: HotseatConfig = load_config(argv)
    configure_logging(cfg.log_level)
    logger.info("Starting %d-player hotseat on a %dx%d board", cfg.num_players, cfg.board_size, cfg.board_size)
    ui = PygameHotseatUI(cfg.player_names(), cfg.board_size)
    ui.loop()


if __name__ == "__main__":
    main()
