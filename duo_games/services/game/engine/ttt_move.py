"""TTT-Move: tic-tac-toe where each side drops three marks and then slides them.

Marks move one cell in any of the eight king's-move directions.
"""

import logging
import random

from duo_games.schemas.ttt_move import (
    GRID_CELLS,
    PIECES_PER_MARK,
    Mark,
    TTTMoveState,
    TTTPhase,
)

from .actions import TTTAction, TTTDropAction, TTTMoveAction
from .validation import IllegalActionError

logger = logging.getLogger(__name__)

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),  # diagonals
)


def _king_neighbours(cell: int) -> frozenset[int]:
    row, col = divmod(cell, 3)
    return frozenset(
        r * 3 + c
        for r in range(row - 1, row + 2)
        for c in range(col - 1, col + 2)
        if 0 <= r < 3 and 0 <= c < 3 and (r, c) != (row, col)
    )


ADJACENCY: dict[int, frozenset[int]] = {cell: _king_neighbours(cell) for cell in range(GRID_CELLS)}


def initial_state(rng: random.Random | None = None) -> TTTMoveState:
    """Empty grid; the opening mark is drawn at random."""
    first = (rng or random.Random()).choice((Mark.X, Mark.O))
    logger.debug("TTT-Move game opened by %s", first.value)
    return TTTMoveState(
        board=(None,) * GRID_CELLS,
        turn=first,
        phase=TTTPhase.DROP,
        pieces_x=0,
        pieces_o=0,
        winner=None,
        log=f"Drop Phase: {first.value}'s Turn",
    )


def check_winner(board: tuple[Mark | None, ...]) -> Mark | None:
    for a, b, c in WINNING_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def _finish_turn(state: TTTMoveState, board: tuple[Mark | None, ...], **update) -> TTTMoveState:
    winner = check_winner(board)
    if winner is not None:
        logger.info("TTT-Move winner: %s", winner.value)
        return state.model_copy(
            update={**update, "board": board, "winner": winner, "log": f"{winner.value} Wins!"}
        )

    phase = update.get("phase", state.phase)
    opponent = state.turn.opponent
    label = "Drop" if phase == TTTPhase.DROP else "Move"
    log = update.pop("log", None) or f"{label} Phase: {opponent.value}'s Turn"
    return state.model_copy(update={**update, "board": board, "turn": opponent, "log": log})


def drop_mark(state: TTTMoveState, index: int) -> TTTMoveState:
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")
    mark = state.turn

    if state.phase != TTTPhase.DROP:
        raise IllegalActionError("INVALID_PHASE", "Not in drop phase")
    if state.board[index] is not None:
        raise IllegalActionError("SLOT_OCCUPIED", f"Cell {index} is occupied")
    if state.pieces_of(mark) >= PIECES_PER_MARK:
        raise IllegalActionError("ALL_PIECES_PLACED", f"{mark.value} has dropped every mark")

    board = tuple(mark if i == index else v for i, v in enumerate(state.board))
    pieces_x = state.pieces_x + (1 if mark == Mark.X else 0)
    pieces_o = state.pieces_o + (1 if mark == Mark.O else 0)
    update = {"pieces_x": pieces_x, "pieces_o": pieces_o}
    if pieces_x == PIECES_PER_MARK and pieces_o == PIECES_PER_MARK:
        update["phase"] = TTTPhase.MOVE
        update["log"] = "Move Phase Begins!"

    return _finish_turn(state, board, **update)


def move_mark(state: TTTMoveState, from_index: int, to_index: int) -> TTTMoveState:
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")
    mark = state.turn

    if state.phase != TTTPhase.MOVE:
        raise IllegalActionError("INVALID_PHASE", "Not in move phase")
    if state.board[from_index] != mark:
        raise IllegalActionError("NOT_YOUR_PIECE", f"Cell {from_index} does not hold {mark.value}")
    if state.board[to_index] is not None:
        raise IllegalActionError("SLOT_OCCUPIED", f"Cell {to_index} is occupied")
    if to_index not in ADJACENCY[from_index]:
        raise IllegalActionError("NOT_ADJACENT", f"Cell {to_index} is not next to cell {from_index}")

    board = list(state.board)
    board[from_index] = None
    board[to_index] = mark
    return _finish_turn(state, tuple(board))


def apply_action(state: TTTMoveState, action: TTTAction) -> TTTMoveState:
    if isinstance(action, TTTDropAction):
        return drop_mark(state, action.index)
    if isinstance(action, TTTMoveAction):
        return move_mark(state, action.from_index, action.to_index)
    raise IllegalActionError("UNKNOWN_ACTION", f"Unknown TTT-Move action: {type(action).__name__}")
