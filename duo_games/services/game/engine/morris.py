"""Three Men's Morris: placement phase, then sliding along the board lines."""

import logging

from duo_games.schemas.morris import (
    BOARD_POINTS,
    PIECES_PER_PLAYER,
    MorrisPhase,
    MorrisState,
)

from .actions import MorrisAction, MorrisMoveAction, MorrisPlaceAction
from .validation import IllegalActionError

logger = logging.getLogger(__name__)

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

# Points joined by a drawn line, both diagonals through the center included
ADJACENCY: dict[int, frozenset[int]] = {
    0: frozenset({1, 3, 4}),
    1: frozenset({0, 2, 4}),
    2: frozenset({1, 5, 4}),
    3: frozenset({0, 6, 4}),
    4: frozenset({0, 1, 2, 3, 5, 6, 7, 8}),
    5: frozenset({2, 8, 4}),
    6: frozenset({3, 7, 4}),
    7: frozenset({6, 8, 4}),
    8: frozenset({5, 7, 4}),
}


def initial_state() -> MorrisState:
    return MorrisState(
        board=(None,) * BOARD_POINTS,
        turn=0,
        phase=MorrisPhase.PLACING,
        pieces_placed=(0, 0),
        winner=None,
        log="Game Started: Place your pieces",
    )


def check_winner(board: tuple[int | None, ...]) -> int | None:
    for a, b, c in WINNING_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def _finish_turn(state: MorrisState, board: tuple[int | None, ...], **update) -> MorrisState:
    winner = check_winner(board)
    if winner is not None:
        logger.info("Morris winner: player=%d", winner)
        return state.model_copy(
            update={**update, "board": board, "winner": winner, "log": f"Player {winner + 1} Wins!"}
        )
    return state.model_copy(update={**update, "board": board, "turn": 1 - state.turn})


def _ensure_in_progress(state: MorrisState) -> None:
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")


def place_piece(state: MorrisState, index: int) -> MorrisState:
    _ensure_in_progress(state)
    player = state.turn

    if state.phase != MorrisPhase.PLACING:
        raise IllegalActionError("INVALID_PHASE", "All pieces are already on the board")
    if state.board[index] is not None:
        raise IllegalActionError("SLOT_OCCUPIED", f"Point {index} is already taken")
    if state.pieces_placed[player] >= PIECES_PER_PLAYER:
        raise IllegalActionError("ALL_PIECES_PLACED", "You have no pieces left to place")

    board = tuple(player if i == index else v for i, v in enumerate(state.board))
    placed = tuple(n + 1 if i == player else n for i, n in enumerate(state.pieces_placed))
    phase = state.phase
    log = f"Player {player + 1} placed a piece"
    if all(n == PIECES_PER_PLAYER for n in placed):
        phase = MorrisPhase.MOVING
        log = "All pieces placed. Movement phase!"
        logger.debug("Morris moving phase started")

    return _finish_turn(state, board, pieces_placed=placed, phase=phase, log=log)


def move_piece(state: MorrisState, from_index: int, to_index: int) -> MorrisState:
    _ensure_in_progress(state)
    player = state.turn

    if state.phase != MorrisPhase.MOVING:
        raise IllegalActionError("INVALID_PHASE", "Pieces cannot move before all are placed")
    if state.board[from_index] != player:
        raise IllegalActionError("NOT_YOUR_PIECE", f"Point {from_index} does not hold your piece")
    if state.board[to_index] is not None:
        raise IllegalActionError("SLOT_OCCUPIED", f"Point {to_index} is already taken")
    if to_index not in ADJACENCY[from_index]:
        raise IllegalActionError(
            "NOT_ADJACENT", f"Point {from_index} is not connected to point {to_index}"
        )

    board = list(state.board)
    board[from_index] = None
    board[to_index] = player
    return _finish_turn(state, tuple(board), log=f"Player {player + 1} moved")


def apply_action(state: MorrisState, action: MorrisAction) -> MorrisState:
    if isinstance(action, MorrisPlaceAction):
        return place_piece(state, action.index)
    if isinstance(action, MorrisMoveAction):
        return move_piece(state, action.from_index, action.to_index)
    raise IllegalActionError("UNKNOWN_ACTION", f"Unknown Morris action: {type(action).__name__}")
