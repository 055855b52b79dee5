from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ecs.components.board import Board
from ecs.components.cell import Cell

Position = Tuple[int, int]  # (x, y)


@dataclass(frozen=True, slots=True)
class GravityMove:
    source: Position
    target: Position
    element: Cell


def is_open(board: Board, x: int, y: int) -> bool:
    """True when (x, y) lies on the board and holds nothing."""
    return board.in_bounds(x, y) and board.is_empty(x, y)


def clear_cells(board: Board, positions: Iterable[Position]) -> List[Tuple[int, int, Cell]]:
    """Empty every listed cell and report what was removed."""
    removed: List[Tuple[int, int, Cell]] = []
    for x, y in positions:
        if not board.in_bounds(x, y):
            continue
        value = board.get(x, y)
        if value is Cell.EMPTY:
            continue
        removed.append((x, y, value))
        board.set(x, y, Cell.EMPTY)
    return removed


def compute_gravity_moves(board: Board) -> List[GravityMove]:
    """Moves that compact each column downward, keeping the column's order."""
    moves: List[GravityMove] = []
    for x in range(board.cols):
        filled_rows = [y for y in range(board.rows) if not board.is_empty(x, y)]
        offset = board.rows - len(filled_rows)
        for index, original_row in enumerate(filled_rows):
            target_row = offset + index
            if target_row == original_row:
                continue
            moves.append(GravityMove(source=(x, original_row), target=(x, target_row), element=board.get(x, original_row)))
    return moves


def apply_gravity(board: Board) -> List[GravityMove]:
    """Compact every column in place and return the moves performed."""
    moves = compute_gravity_moves(board)
    if not moves:
        return moves
    for x in range(board.cols):
        stack = [board.get(x, y) for y in range(board.rows) if not board.is_empty(x, y)]
        empty_count = board.rows - len(stack)
        for y in range(board.rows):
            board.set(x, y, Cell.EMPTY if y < empty_count else stack[y - empty_count])
    return moves


def top_rows_occupied(board: Board, count: int) -> bool:
    for y in range(min(count, board.rows)):
        if any(cell is not Cell.EMPTY for cell in board.cells[y]):
            return True
    return False


def inject_garbage_rows(board: Board, count: int, *, rng: random.Random | None = None) -> Optional[List[int]]:
    """Push ``count`` garbage rows in from the bottom.

    Each new row has one empty gap column. Returns the gap columns (bottom-most
    last), or ``None`` without touching the board when rows would be pushed off
    the top.
    """
    if count <= 0:
        return []
    if top_rows_occupied(board, count):
        return None
    rng = rng or random.Random()
    count = min(count, board.rows)
    shifted = [list(row) for row in board.cells[count:]]
    gaps: List[int] = []
    for _ in range(count):
        gap = rng.randrange(board.cols)
        gaps.append(gap)
        shifted.append([Cell.EMPTY if x == gap else Cell.GARBAGE for x in range(board.cols)])
    board.cells = shifted
    return gaps


def board_is_settled(board: Board) -> bool:
    """No empty cell sits below a filled cell in any column."""
    return not compute_gravity_moves(board)
