from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import BoardConfigError, WallPlacementError

BOARD_SIZE = 9
WALL_RANGE = BOARD_SIZE - 1
WALLS_PER_PLAYER = {2: 10, 4: 5}  # standard budgets, 20 walls in play either way
MIN_BOARD_SIZE = 3


@dataclass(frozen=True, order=True)
class Position:
    row: int
    col: int

    def translate(self, dr: int, dc: int) -> "Position":
        return Position(self.row + dr, self.col + dc)

    def in_bounds(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.row < size and 0 <= self.col < size


class Direction(Enum):
    NORTH = (-1, 0)
    SOUTH = (1, 0)
    EAST = (0, 1)
    WEST = (0, -1)

    @property
    def dr(self) -> int:
        return self.value[0]

    @property
    def dc(self) -> int:
        return self.value[1]

    def opposite(self) -> "Direction":
        return _OPPOSITE[self]

    def perpendiculars(self) -> Tuple["Direction", "Direction"]:
        """Side-step directions tried when a straight jump is not possible."""
        if self in (Direction.NORTH, Direction.SOUTH):
            return (Direction.WEST, Direction.EAST)
        return (Direction.NORTH, Direction.SOUTH)


_OPPOSITE = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


class WallOrientation(Enum):
    HORIZONTAL = "H"
    VERTICAL = "V"

    def flipped(self) -> "WallOrientation":
        if self is WallOrientation.HORIZONTAL:
            return WallOrientation.VERTICAL
        return WallOrientation.HORIZONTAL


@dataclass(frozen=True)
class WallPlacement:
    row: int  # top-left cell (anchor) of the 2x2 block the wall splits
    col: int
    orientation: WallOrientation
    limit: int = field(default=WALL_RANGE, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not 0 <= self.row < self.limit:
            raise WallPlacementError(f"row must be in [0,{self.limit - 1}], got {self.row}")
        if not 0 <= self.col < self.limit:
            raise WallPlacementError(f"col must be in [0,{self.limit - 1}], got {self.col}")

    @property
    def horizontal(self) -> bool:
        return self.orientation is WallOrientation.HORIZONTAL

    def key(self) -> Tuple[int, int, bool]:
        return (self.row, self.col, self.horizontal)

    @staticmethod
    def default(limit: int = WALL_RANGE) -> "WallPlacement":
        mid = limit // 2
        return WallPlacement(mid, mid, WallOrientation.HORIZONTAL, limit)

    @staticmethod
    def from_endpoints(
        start: Position, end: Position, limit: int = WALL_RANGE
    ) -> Optional["WallPlacement"]:
        """Build a wall from the two grid points at its ends.

        Points must be two apart on a single axis. Returns None for anything
        else, or when the wall would sit on the outer border.
        """
        row_diff = abs(start.row - end.row)
        col_diff = abs(start.col - end.col)
        row = min(start.row, end.row)
        col = min(start.col, end.col)
        if row_diff == 0 and col_diff == 2:
            if not (0 <= row < limit and 0 <= col < limit):
                return None
            return WallPlacement(row, col, WallOrientation.HORIZONTAL, limit)
        if col_diff == 0 and row_diff == 2:
            if not (0 <= row < limit and 0 <= col < limit):
                return None
            return WallPlacement(row, col, WallOrientation.VERTICAL, limit)
        return None

    def shift(self, dr: int, dc: int, limit: Optional[int] = None) -> "WallPlacement":
        # An axis that would leave the anchor grid keeps its old value.
        limit = self.limit if limit is None else limit
        new_row = self.row + dr
        new_col = self.col + dc
        if not 0 <= new_row < limit:
            new_row = self.row
        if not 0 <= new_col < limit:
            new_col = self.col
        return WallPlacement(new_row, new_col, self.orientation, limit)

    def rotate(self, limit: Optional[int] = None) -> "WallPlacement":
        limit = self.limit if limit is None else limit
        return WallPlacement(
            min(self.row, limit - 1),
            min(self.col, limit - 1),
            self.orientation.flipped(),
            limit,
        )

    def __str__(self) -> str:
        return f"Wall{{{self.orientation.name} @ ({self.row},{self.col})}}"


@dataclass(frozen=True, eq=False)
class Player:
    """A seated player. Identity based: two players may share a name."""

    name: str = "Player"


@dataclass(frozen=True)
class RowGoal:
    row: int

    def reached(self, pos: Position) -> bool:
        return pos.row == self.row

    def in_range(self, size: int) -> bool:
        return 0 <= self.row < size


@dataclass(frozen=True)
class ColGoal:
    col: int

    def reached(self, pos: Position) -> bool:
        return pos.col == self.col

    def in_range(self, size: int) -> bool:
        return 0 <= self.col < size


Goal = Union[RowGoal, ColGoal]


@dataclass(frozen=True)
class Seat:
    start: Position
    goal: Goal
    walls: int


def standard_seats(num_players: int, size: int = BOARD_SIZE) -> List[Seat]:
    """Start cells, goals and wall budgets of the standard layouts.

    2 players: top -> bottom row, bottom -> top row.
    4 players, seat order top, bottom, left, right; each races to the
    opposite edge.
    """
    if num_players not in WALLS_PER_PLAYER:
        raise BoardConfigError(f"Only 2 or 4 players supported, got {num_players}")
    if size < MIN_BOARD_SIZE:
        raise BoardConfigError(f"Board size must be at least {MIN_BOARD_SIZE}, got {size}")
    mid = size // 2
    last = size - 1
    walls = WALLS_PER_PLAYER[num_players]
    seats = [
        Seat(Position(0, mid), RowGoal(last), walls),
        Seat(Position(last, mid), RowGoal(0), walls),
    ]
    if num_players == 4:
        seats += [
            Seat(Position(mid, 0), ColGoal(last), walls),
            Seat(Position(mid, last), ColGoal(0), walls),
        ]
    return seats
