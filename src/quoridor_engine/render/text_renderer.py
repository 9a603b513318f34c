from __future__ import annotations
from typing import Mapping, Optional

from ..engine.board import BoardState
from ..engine.state import Direction, Player, Position, WallPlacement

OPEN_H = "---"
WALL_H = "="  # wraps the owner token: =A=
PREVIEW_H = "~~~"
OPEN_V = "|"
WALL_V = "#"
PREVIEW_V = ":"
PREVIEW_CELL = "*"
MARGIN = "    "


def default_token(player: Player) -> str:
    return player.name[:1].upper() or "?"


def _token(player: Optional[Player], tokens: Optional[Mapping[Player, str]]) -> str:
    if player is None:
        return WALL_H
    token = tokens.get(player) if tokens else None
    return token or default_token(player)


def render_board(
    board: BoardState,
    preview_wall: Optional[WallPlacement] = None,
    preview_move: Optional[Position] = None,
    tokens: Optional[Mapping[Player, str]] = None,
) -> str:
    """Plain-text picture of the board.

    Rows and columns are labelled 1..size. Committed walls are drawn with
    ``=A=`` (owner token inside) and ``#``; a preview wall that does not
    overlap an existing one with ``~~~`` and ``:``; a preview move target
    with ``*``.
    """
    size = board.size
    lines = [MARGIN + "".join(f" {c:2d} " for c in range(1, size + 1))]
    for r in range(size):
        lines.append(MARGIN + _horizontal_line(board, r, preview_wall, tokens))
        lines.append(f"{r + 1:2d}  " + _row_content(board, r, preview_wall, preview_move, tokens))
    lines.append(MARGIN + _horizontal_line(board, size, preview_wall, tokens))
    return "\n".join(lines)


def _horizontal_line(
    board: BoardState,
    row_line: int,
    preview: Optional[WallPlacement],
    tokens: Optional[Mapping[Player, str]],
) -> str:
    parts = ["+"]
    for c in range(board.size):
        parts.append(_horizontal_dash(board, row_line, c, preview, tokens))
        parts.append("+")
    return "".join(parts)


def _horizontal_dash(
    board: BoardState,
    row_line: int,
    col: int,
    preview: Optional[WallPlacement],
    tokens: Optional[Mapping[Player, str]],
) -> str:
    if row_line == 0 or row_line == board.size:
        return OPEN_H
    cell = Position(row_line - 1, col)
    if board.is_blocked(cell, Direction.SOUTH):
        owner = board.segment_owner(cell, Direction.SOUTH)
        return WALL_H + _token(owner, tokens) + WALL_H
    if (
        preview is not None
        and preview.horizontal
        and preview.row == row_line - 1
        and col in (preview.col, preview.col + 1)
    ):
        return PREVIEW_H
    return OPEN_H


def _vertical_bar(board: BoardState, row: int, col_line: int, preview: Optional[WallPlacement]) -> str:
    if col_line == 0 or col_line == board.size:
        return OPEN_V
    if board.is_blocked(Position(row, col_line - 1), Direction.EAST):
        return WALL_V
    if (
        preview is not None
        and not preview.horizontal
        and preview.col == col_line - 1
        and row in (preview.row, preview.row + 1)
    ):
        return PREVIEW_V
    return OPEN_V


def _row_content(
    board: BoardState,
    row: int,
    preview_wall: Optional[WallPlacement],
    preview_move: Optional[Position],
    tokens: Optional[Mapping[Player, str]],
) -> str:
    parts = []
    for c in range(board.size):
        parts.append(_vertical_bar(board, row, c, preview_wall))
        pos = Position(row, c)
        occupant = board.pawn_at(pos)
        if preview_move == pos:
            parts.append(f" {PREVIEW_CELL} ")
        elif occupant is not None:
            parts.append(f" {_token(occupant, tokens)} ")
        else:
            parts.append("   ")
    parts.append(_vertical_bar(board, row, board.size, preview_wall))
    return "".join(parts)
