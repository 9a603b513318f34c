from __future__ import annotations
import logging
from typing import List, Optional

from ..engine.board import BoardState
from ..engine.state import Player, Position, WallPlacement
from ..render.text_renderer import render_board

logger = logging.getLogger(__name__)


class HotseatController:
    """Turn bookkeeping for players sharing one screen.

    The board decides legality; the controller tracks whose turn it is,
    caches the current player's legal moves for highlighting and keeps the
    wall preview a UI shifts around before confirming.
    """

    def __init__(self, board: BoardState):
        self.board = board
        self.turn: int = 0  # completed actions since the last restart
        self._seat: int = 0
        self._cached_moves: List[Position] = []
        self.winner: Optional[Player] = None
        self.wall_preview: Optional[WallPlacement] = None
        self.refresh_moves()

    @property
    def current_player(self) -> Player:
        return self.board.players[self._seat]

    @property
    def legal_moves(self) -> List[Position]:
        return self._cached_moves

    def refresh_moves(self) -> None:
        self.winner = self.board.check_winner()
        if self.winner is None:
            self._cached_moves = self.board.legal_moves(self.current_player)
        else:
            self._cached_moves = []

    def restart(self) -> None:
        self.board.reset()
        self.turn = 0
        self._seat = 0
        self.wall_preview = None
        self.refresh_moves()
        logger.info("Game restarted with %d players", len(self.board.players))

    def attempt_move(self, target: Position) -> bool:
        if self.winner is not None:
            return False
        player = self.current_player
        if not self.board.apply_move(player, target):
            logger.info("Illegal move by %s to %s", player.name, target)
            return False
        logger.info("%s moved to %s", player.name, target)
        self._finish_turn()
        return True

    def attempt_wall(self, placement: Optional[WallPlacement]) -> bool:
        if self.winner is not None:
            return False
        player = self.current_player
        if not self.board.apply_wall(player, placement):
            logger.info("Cannot place wall for %s: %s", player.name, placement)
            return False
        logger.info("%s placed %s", player.name, placement)
        self.wall_preview = None
        self._finish_turn()
        return True

    def _finish_turn(self) -> None:
        self.turn += 1
        self.winner = self.board.check_winner()
        if self.winner is None:
            self._seat = (self._seat + 1) % len(self.board.players)
        else:
            logger.info("%s wins after %d turns", self.winner.name, self.turn)
        self.refresh_moves()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Board after turn %d:\n%s", self.turn, render_board(self.board))

    # -- wall preview --------------------------------------------------

    def begin_wall_preview(self) -> Optional[WallPlacement]:
        if self.winner is not None or self.board.walls_remaining(self.current_player) <= 0:
            self.wall_preview = None
        elif self.wall_preview is None:
            self.wall_preview = WallPlacement.default(self.board.wall_range)
        return self.wall_preview

    def set_wall_preview(self, placement: Optional[WallPlacement]) -> None:
        self.wall_preview = placement

    def preview_from_endpoints(self, start: Position, end: Position) -> Optional[WallPlacement]:
        """Preview the wall spanning two grid points; a bad span keeps the old preview."""
        placement = WallPlacement.from_endpoints(start, end, self.board.wall_range)
        if placement is not None and self.winner is None:
            self.wall_preview = placement
        return placement

    def shift_preview(self, dr: int, dc: int) -> Optional[WallPlacement]:
        if self.wall_preview is not None:
            self.wall_preview = self.wall_preview.shift(dr, dc, self.board.wall_range)
        return self.wall_preview

    def rotate_preview(self) -> Optional[WallPlacement]:
        if self.wall_preview is not None:
            self.wall_preview = self.wall_preview.rotate(self.board.wall_range)
        return self.wall_preview

    def preview_is_legal(self) -> bool:
        return self.board.can_place_wall(self.current_player, self.wall_preview)

    def confirm_preview(self) -> bool:
        return self.attempt_wall(self.wall_preview)

    def cancel_preview(self) -> None:
        self.wall_preview = None

    def status_line(self) -> str:
        if self.winner is not None:
            return f"Winner: {self.winner.name}"
        player = self.current_player
        parts = [f"{player.name} turn | walls left {self.board.walls_remaining(player)}"]
        if len(self.board.players) == 2:
            opponent = self.board.opponent(player)
            parts.append(f"opponent walls {self.board.walls_remaining(opponent)}")
            return " | ".join(parts)
        for other in self.board.players:
            if other is not player:
                parts.append(f"{other.name} {self.board.walls_remaining(other)}")
        return " | ".join(parts)
