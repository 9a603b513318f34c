from __future__ import annotations
from collections import deque
from typing import TYPE_CHECKING, Deque, List, Optional, Set, Tuple

from .state import Direction, Player, Position, WallPlacement

if TYPE_CHECKING:
    from .board import BoardState

# Walls live on cell edges. Each cell carries a blocked flag per direction;
# the outer border is blocked from the start. Move generation and path
# search only ever consult those flags, never the wall list itself.

DIRS = list(Direction)  # north, south, east, west


def legal_moves(board: "BoardState", player: Player) -> List[Position]:
    """Destinations the player's pawn may move to, sorted by row then column."""
    current = board.pawn_position(player)
    moves: Set[Position] = set()

    for d in DIRS:
        adj = current.translate(d.dr, d.dc)
        if not board.in_bounds(adj) or board.is_blocked(current, d):
            continue
        if not board.is_occupied(adj):
            moves.add(adj)
            continue
        # another pawn is adjacent; try straight jump first
        jump = adj.translate(d.dr, d.dc)
        if (
            board.in_bounds(jump)
            and not board.is_blocked(adj, d)
            and not board.is_occupied(jump)
        ):
            moves.add(jump)
            continue
        # jump blocked, off-board or occupied -> side-steps around the pawn
        for side in d.perpendiculars():
            diag = adj.translate(side.dr, side.dc)
            if (
                board.in_bounds(diag)
                and not board.is_blocked(adj, side)
                and not board.is_occupied(diag)
            ):
                moves.add(diag)

    return sorted(moves)


def wall_segments(placement: WallPlacement) -> List[Tuple[Position, Direction]]:
    """The four (cell, direction) flags a wall sets, two per spanned segment."""
    r, c = placement.row, placement.col
    if placement.horizontal:
        # blocks vertical movement between rows r and r+1 at columns c and c+1
        return [
            (Position(r, c), Direction.SOUTH),
            (Position(r + 1, c), Direction.NORTH),
            (Position(r, c + 1), Direction.SOUTH),
            (Position(r + 1, c + 1), Direction.NORTH),
        ]
    # blocks horizontal movement between cols c and c+1 at rows r and r+1
    return [
        (Position(r, c), Direction.EAST),
        (Position(r, c + 1), Direction.WEST),
        (Position(r + 1, c), Direction.EAST),
        (Position(r + 1, c + 1), Direction.WEST),
    ]


def conflicts(board: "BoardState", placement: WallPlacement) -> bool:
    """True if the wall overlaps a segment in use or crosses another wall.

    Overlap: either spanned segment is already blocked. Crossing: a wall of
    the other orientation is anchored at the same intersection. Walls that
    merely meet end to end or form a T are fine.
    """
    if any(board.is_blocked(cell, d) for cell, d in wall_segments(placement)):
        return True
    other = placement.orientation.flipped()
    return board.wall_owner(other, placement.row, placement.col) is not None


def has_path(board: "BoardState", player: Player) -> bool:
    """BFS from the player's pawn to any cell satisfying their goal."""
    start = board.pawn_position(player)
    goal = board.goal(player)
    size = board.size
    visited = [[False] * size for _ in range(size)]
    q: Deque[Position] = deque([start])
    visited[start.row][start.col] = True
    while q:
        pos = q.popleft()
        if goal.reached(pos):
            return True
        for d in DIRS:
            nxt = pos.translate(d.dr, d.dc)
            if not board.in_bounds(nxt) or board.is_blocked(pos, d):
                continue
            if not visited[nxt.row][nxt.col]:
                visited[nxt.row][nxt.col] = True
                q.append(nxt)
    return False


def first_cut_off(board: "BoardState") -> Optional[Player]:
    """First player (seat order) with no path to their goal, if any."""
    for p in board.players:
        if not has_path(board, p):
            return p
    return None


def has_player_won(board: "BoardState", player: Player) -> bool:
    return board.goal(player).reached(board.pawn_position(player))


def check_winner(board: "BoardState") -> Optional[Player]:
    for p in board.players:
        if has_player_won(board, p):
            return p
    return None
