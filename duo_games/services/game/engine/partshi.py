"""Partshi (two-player Ludo) rules.

A turn is a roll followed by at most one move. Pieces travel
base -> track -> home path -> goal, tracked by their progress from the
player's own start square, so wrap-around on the shared ring never needs
special casing.
"""

import logging
import random

from duo_games.schemas.partshi import (
    PartshiPiece,
    PartshiState,
    PieceZone,
)

from .actions import PartshiAction, PartshiMoveAction, RollAction
from .validation import IllegalActionError

logger = logging.getLogger(__name__)


def initial_state() -> PartshiState:
    return PartshiState(log="Game Started: Roll the dice!")


def target_progress(state: PartshiState, piece: PartshiPiece, roll: int) -> int | None:
    """Progress the piece would reach with this roll, or None if it cannot use it."""
    setup = state.board_setup
    if piece.zone == PieceZone.GOAL:
        return None
    if piece.zone == PieceZone.BASE:
        return 0 if roll == setup.get_out_roll else None

    target = piece.progress + roll
    # exact roll needed to reach the goal
    if target > setup.goal_progress:
        return None
    return target


def zone_for_progress(state: PartshiState, progress: int) -> PieceZone:
    setup = state.board_setup
    if progress >= setup.goal_progress:
        return PieceZone.GOAL
    if progress > setup.home_entry_progress:
        return PieceZone.HOME_PATH
    return PieceZone.TRACK


def movable_pieces(state: PartshiState, roll: int) -> list[int]:
    """Ids of the current player's pieces that can legally use this roll."""
    return [
        piece.id
        for piece in state.players[state.turn]
        if target_progress(state, piece, roll) is not None
    ]


def _pass_turn(state: PartshiState, **update) -> PartshiState:
    return state.model_copy(
        update={**update, "turn": 1 - state.turn, "dice": None, "can_roll": True}
    )


def apply_roll(
    state: PartshiState,
    value: int | None = None,
    *,
    rng: random.Random | None = None,
    reroll_on_unusable_six: bool = True,
) -> PartshiState:
    """Roll the die for the player to act.

    When no piece can use the roll the turn passes, except that an unusable
    six earns another roll while `reroll_on_unusable_six` is set.
    """
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")
    if not state.can_roll:
        raise IllegalActionError("CANNOT_ROLL", "Move a piece before rolling again")

    roll = value if value is not None else (rng or random.Random()).randint(1, 6)
    log = f"Rolled a {roll}"
    logger.debug("Partshi roll: player=%d, value=%d", state.turn, roll)

    if movable_pieces(state, roll):
        return state.model_copy(update={"dice": roll, "can_roll": False, "log": log})

    log += " - No moves!"
    if roll == state.board_setup.get_out_roll and reroll_on_unusable_six:
        logger.info("Unusable six: player=%d rolls again", state.turn)
        return state.model_copy(update={"dice": roll, "can_roll": True, "log": log + " (Roll again)"})

    logger.info("No legal moves: player=%d forfeits roll %d", state.turn, roll)
    return _pass_turn(state, log=log)


def _replace_piece(
    pieces: tuple[PartshiPiece, ...], piece: PartshiPiece
) -> tuple[PartshiPiece, ...]:
    return tuple(piece if p.id == piece.id else p for p in pieces)


def _capture(state: PartshiState, square: int) -> tuple[tuple[PartshiPiece, ...], int]:
    """Send every opponent piece on `square` back to base."""
    opponent = 1 - state.turn
    captured = 0
    pieces: list[PartshiPiece] = []
    for piece in state.players[opponent]:
        if state.track_square(opponent, piece) == square:
            pieces.append(piece.model_copy(update={"zone": PieceZone.BASE, "progress": 0}))
            captured += 1
        else:
            pieces.append(piece)
    return tuple(pieces), captured


def apply_move(state: PartshiState, piece_id: int) -> PartshiState:
    """Advance one piece by the pending roll.

    Raises:
        IllegalActionError: no pending roll, unknown piece, a base piece without
            a six, or a roll that overshoots the goal.
    """
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")
    if state.can_roll or state.dice is None:
        raise IllegalActionError("MUST_ROLL_FIRST", "Roll the dice before moving")

    player = state.turn
    roll = state.dice
    setup = state.board_setup
    piece = next((p for p in state.players[player] if p.id == piece_id), None)
    if piece is None:
        raise IllegalActionError("PIECE_NOT_FOUND", f"Piece {piece_id} does not exist")
    if piece.zone == PieceZone.BASE and roll != setup.get_out_roll:
        raise IllegalActionError("NEED_SIX_TO_ENTER", f"Need a {setup.get_out_roll} to enter")

    progress = target_progress(state, piece, roll)
    if progress is None:
        raise IllegalActionError("INVALID_MOVE", f"Piece {piece_id} cannot move {roll}")

    moved = piece.model_copy(update={"zone": zone_for_progress(state, progress), "progress": progress})
    players = list(state.players)
    players[player] = _replace_piece(state.players[player], moved)
    log = "Entered the board" if piece.zone == PieceZone.BASE else f"Moved {roll}"

    captured = 0
    square = state.track_square(player, moved)
    if square is not None and square not in setup.safe_squares:
        players[1 - player], captured = _capture(state, square)
        if captured:
            log += " - Captured!"
            logger.info("Partshi capture: player=%d took %d on square %d", player, captured, square)

    new_state = state.model_copy(update={"players": tuple(players), "log": log})

    if all(p.zone == PieceZone.GOAL for p in players[player]):
        logger.info("Partshi winner: player=%d", player)
        return new_state.model_copy(
            update={
                "winner": player,
                "dice": None,
                "can_roll": False,
                "log": f"Player {player + 1} Wins!",
            }
        )

    if roll == setup.get_out_roll or captured:
        return new_state.model_copy(
            update={"dice": None, "can_roll": True, "log": log + ". Roll again!"}
        )
    return _pass_turn(new_state)


def apply_action(
    state: PartshiState,
    action: PartshiAction,
    *,
    rng: random.Random | None = None,
    reroll_on_unusable_six: bool = True,
) -> PartshiState:
    if isinstance(action, RollAction):
        return apply_roll(
            state, action.value, rng=rng, reroll_on_unusable_six=reroll_on_unusable_six
        )
    if isinstance(action, PartshiMoveAction):
        return apply_move(state, action.piece_id)
    raise IllegalActionError("UNKNOWN_ACTION", f"Unknown Partshi action: {type(action).__name__}")
