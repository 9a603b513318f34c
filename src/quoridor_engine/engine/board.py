from __future__ import annotations
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from . import rules
from .errors import BoardConfigError, UnknownPlayerError
from .state import (
    BOARD_SIZE,
    MIN_BOARD_SIZE,
    WALLS_PER_PLAYER,
    Direction,
    Goal,
    Player,
    Position,
    Seat,
    WallOrientation,
    WallPlacement,
    standard_seats,
)

logger = logging.getLogger(__name__)

Grid = List[List[Optional[Player]]]


class BoardState:
    """Mutable Quoridor board shared by the 2- and 4-player variants.

    Owns the pawn positions, the walls each player has left, one ownership
    grid per wall orientation (indexed by anchor) and a blocked-edge grid per
    direction. Only ``apply_move``, ``apply_wall`` and ``reset`` change it;
    everything else is a query returning copies.

    A failed action leaves the board exactly as it was. The per-board lock
    makes the tentative-wall check atomic when several threads share a game.
    """

    def __init__(
        self,
        players: Sequence[Player],
        seats: Optional[Sequence[Seat]] = None,
        size: int = BOARD_SIZE,
    ):
        players = list(players)
        if len(players) not in WALLS_PER_PLAYER:
            raise BoardConfigError(f"Only 2 or 4 players supported, got {len(players)}")
        if len({id(p) for p in players}) != len(players):
            raise BoardConfigError("Each player may only take one seat")
        if size < MIN_BOARD_SIZE:
            raise BoardConfigError(f"Board size must be at least {MIN_BOARD_SIZE}, got {size}")
        seats = standard_seats(len(players), size) if seats is None else list(seats)
        self._check_seats(seats, len(players), size)

        self._size = size
        self._order: Tuple[Player, ...] = tuple(players)
        self._seats: Dict[Player, Seat] = dict(zip(players, seats))
        self._lock = threading.RLock()

        wr = size - 1
        self._occupants: Grid = [[None] * size for _ in range(size)]
        self._horizontal_walls: Grid = [[None] * wr for _ in range(wr)]
        self._vertical_walls: Grid = [[None] * wr for _ in range(wr)]
        self._blocked: Dict[Direction, List[List[bool]]] = {
            d: [[False] * size for _ in range(size)] for d in Direction
        }
        self._pawns: Dict[Player, Position] = {}
        self._walls_remaining: Dict[Player, int] = {}
        self.reset()

    @staticmethod
    def _check_seats(seats: List[Seat], num_players: int, size: int) -> None:
        if len(seats) != num_players:
            raise BoardConfigError(f"Expected {num_players} seats, got {len(seats)}")
        starts = set()
        for i, seat in enumerate(seats):
            if not seat.start.in_bounds(size):
                raise BoardConfigError(f"Seat {i} starts off the board at {seat.start}")
            if seat.start in starts:
                raise BoardConfigError(f"Seat {i} shares its start cell {seat.start}")
            starts.add(seat.start)
            if not seat.goal.in_range(size):
                raise BoardConfigError(f"Seat {i} goal {seat.goal} is off the board")
            if seat.walls < 0:
                raise BoardConfigError(f"Seat {i} wall budget must not be negative")

    @classmethod
    def new_game(
        cls,
        num_players: int = 2,
        size: int = BOARD_SIZE,
        names: Optional[Sequence[str]] = None,
    ) -> "BoardState":
        if names is None:
            names = [f"Player {i + 1}" for i in range(num_players)]
        if len(names) != num_players:
            raise BoardConfigError(f"Expected {num_players} names, got {len(names)}")
        return cls([Player(n) for n in names], size=size)

    def reset(self) -> None:
        with self._lock:
            size = self._size
            for r in range(size):
                for c in range(size):
                    self._occupants[r][c] = None
                    for d in Direction:
                        self._blocked[d][r][c] = False
            for grid in (self._horizontal_walls, self._vertical_walls):
                for row in grid:
                    row[:] = [None] * len(row)
            self._pawns.clear()
            for p in self._order:
                seat = self._seats[p]
                self._walls_remaining[p] = seat.walls
                self._place_pawn(p, seat.start)
            # outer border
            last = size - 1
            for i in range(size):
                self._blocked[Direction.NORTH][0][i] = True
                self._blocked[Direction.SOUTH][last][i] = True
                self._blocked[Direction.WEST][i][0] = True
                self._blocked[Direction.EAST][i][last] = True
            logger.debug("Board reset: size=%d players=%d", size, len(self._order))

    # -- structure -----------------------------------------------------

    @property
    def size(self) -> int:
        return self._size

    @property
    def wall_range(self) -> int:
        return self._size - 1

    @property
    def players(self) -> Tuple[Player, ...]:
        return self._order

    def seat(self, player: Player) -> Seat:
        try:
            return self._seats[player]
        except KeyError:
            raise UnknownPlayerError(f"{player!r} is not seated on this board") from None

    def goal(self, player: Player) -> Goal:
        return self.seat(player).goal

    def opponent(self, player: Player) -> Player:
        if len(self._order) != 2:
            raise BoardConfigError("opponent() is only defined for two-player boards")
        self.seat(player)
        return self._order[1] if player is self._order[0] else self._order[0]

    # -- queries -------------------------------------------------------

    def pawn_position(self, player: Player) -> Position:
        self.seat(player)
        with self._lock:
            return self._pawns[player]

    def walls_remaining(self, player: Player) -> int:
        self.seat(player)
        with self._lock:
            return self._walls_remaining[player]

    def in_bounds(self, pos: Position) -> bool:
        return pos.in_bounds(self._size)

    def pawn_at(self, pos: Position) -> Optional[Player]:
        if not self.in_bounds(pos):
            return None
        with self._lock:
            return self._occupants[pos.row][pos.col]

    def is_occupied(self, pos: Position) -> bool:
        return self.pawn_at(pos) is not None

    def is_blocked(self, pos: Position, direction: Direction) -> bool:
        with self._lock:
            return self._blocked[direction][pos.row][pos.col]

    def blocked_grid(self, direction: Direction) -> Tuple[Tuple[bool, ...], ...]:
        with self._lock:
            return tuple(tuple(row) for row in self._blocked[direction])

    def _wall_grid(self, orientation: WallOrientation) -> Grid:
        if orientation is WallOrientation.HORIZONTAL:
            return self._horizontal_walls
        return self._vertical_walls

    def wall_owner(self, orientation: WallOrientation, row: int, col: int) -> Optional[Player]:
        """Owner of the wall anchored at (row, col) with this orientation."""
        wr = self.wall_range
        if not (0 <= row < wr and 0 <= col < wr):
            return None
        with self._lock:
            return self._wall_grid(orientation)[row][col]

    def segment_owner(self, pos: Position, direction: Direction) -> Optional[Player]:
        """Owner of the wall covering the given edge of a cell.

        Each edge segment belongs to one of two possible anchors; the outer
        border and open edges have no owner.
        """
        if direction is Direction.NORTH:
            pos, direction = pos.translate(-1, 0), Direction.SOUTH
        elif direction is Direction.WEST:
            pos, direction = pos.translate(0, -1), Direction.EAST
        r, c = pos.row, pos.col
        if direction is Direction.SOUTH:
            orientation = WallOrientation.HORIZONTAL
            anchors = ((r, c), (r, c - 1))
        else:
            orientation = WallOrientation.VERTICAL
            anchors = ((r, c), (r - 1, c))
        for ar, ac in anchors:
            owner = self.wall_owner(orientation, ar, ac)
            if owner is not None:
                return owner
        return None

    def placed_walls(self) -> List[Tuple[WallPlacement, Player]]:
        wr = self.wall_range
        walls = []
        with self._lock:
            for orientation in WallOrientation:
                grid = self._wall_grid(orientation)
                for r in range(wr):
                    for c in range(wr):
                        if grid[r][c] is not None:
                            walls.append((WallPlacement(r, c, orientation, wr), grid[r][c]))
        walls.sort(key=lambda item: item[0].key())
        return walls

    def has_path(self, player: Player) -> bool:
        with self._lock:
            return rules.has_path(self, player)

    def legal_moves(self, player: Player) -> List[Position]:
        with self._lock:
            return rules.legal_moves(self, player)

    def can_place_wall(self, player: Player, placement: Optional[WallPlacement]) -> bool:
        self.seat(player)
        if placement is None:
            return False
        wr = self.wall_range
        if not (0 <= placement.row < wr and 0 <= placement.col < wr):
            return False
        with self._lock:
            if self.walls_remaining(player) <= 0:
                return False
            return not rules.conflicts(self, placement)

    def has_player_won(self, player: Player) -> bool:
        with self._lock:
            return rules.has_player_won(self, player)

    def check_winner(self) -> Optional[Player]:
        with self._lock:
            return rules.check_winner(self)

    # -- actions -------------------------------------------------------

    def apply_move(self, player: Player, target: Position) -> bool:
        with self._lock:
            if target not in rules.legal_moves(self, player):
                logger.debug("Rejected move for %s to %s", player.name, target)
                return False
            self._place_pawn(player, target)
            return True

    def apply_wall(self, player: Player, placement: Optional[WallPlacement]) -> bool:
        with self._lock:
            if not self.can_place_wall(player, placement):
                logger.debug("Rejected wall for %s: %s conflicts or no walls left", player.name, placement)
                return False
            # commit, verify every player still has a path, roll back on failure
            self._set_wall(placement, player)
            try:
                cut_off = rules.first_cut_off(self)
            except BaseException:
                self._set_wall(placement, None)
                raise
            if cut_off is not None:
                self._set_wall(placement, None)
                logger.debug("Rejected wall for %s: %s leaves %s without a path", player.name, placement, cut_off.name)
                return False
            self._walls_remaining[player] -= 1
            return True

    def _place_pawn(self, player: Player, pos: Position) -> None:
        old = self._pawns.get(player)
        if old is not None:
            self._occupants[old.row][old.col] = None
        self._pawns[player] = pos
        self._occupants[pos.row][pos.col] = player

    def _set_wall(self, placement: WallPlacement, owner: Optional[Player]) -> None:
        present = owner is not None
        self._wall_grid(placement.orientation)[placement.row][placement.col] = owner
        for cell, d in rules.wall_segments(placement):
            self._blocked[d][cell.row][cell.col] = present

    def to_dict(self) -> dict:
        """Structural snapshot of the board for renderers and tests."""
        with self._lock:
            winner = rules.check_winner(self)
            return {
                "size": self._size,
                "pawns": [
                    {"player": p.name, "row": self._pawns[p].row, "col": self._pawns[p].col}
                    for p in self._order
                ],
                "walls": [
                    {"row": w.row, "col": w.col, "orientation": w.orientation.value, "owner": owner.name}
                    for w, owner in self.placed_walls()
                ],
                "walls_remaining": [self._walls_remaining[p] for p in self._order],
                "winner": None if winner is None else winner.name,
            }
