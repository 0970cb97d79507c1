"""Error types and the ProcessResult pattern.

Engines raise IllegalActionError at the point a rule is broken; the dispatcher
turns it into a ProcessResult so callers never see a partially applied state.
"""

import logging
from dataclasses import dataclass

from pydantic import BaseModel

from duo_games.schemas.chess import ChessState, Color
from duo_games.schemas.game_engine import FrozenState, GameType
from duo_games.schemas.morris import MorrisState
from duo_games.schemas.partshi import PartshiState
from duo_games.schemas.ttt_move import Mark, TTTMoveState
from duo_games.schemas.uno import UnoState

from .actions import ACTION_GAME

logger = logging.getLogger(__name__)


class IllegalActionError(ValueError):
    """The action breaks the current rules (turn, phase, geometry, precondition).

    Always recoverable: the caller keeps its previous state and re-prompts.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"IllegalActionError(code={self.code!r}, message={self.message!r})"


class MalformedStateError(ValueError):
    """A stored payload could not be repaired into a valid game state."""


@dataclass
class ProcessResult:
    """Result of processing a game action.

    Provides explicit success/failure with error codes suitable for client
    localization.
    """

    state: BaseModel | None = None
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, state: BaseModel) -> "ProcessResult":
        """Create a successful result with the new state."""
        return cls(state=state, success=True)

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            success=False,
            error_code=code,
            error_message=message,
        )

    @classmethod
    def from_error(cls, error: IllegalActionError) -> "ProcessResult":
        return cls.failure(error.code, error.message)


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


STATE_GAME: dict[type[FrozenState], GameType] = {
    UnoState: GameType.UNO,
    ChessState: GameType.CHESS,
    MorrisState: GameType.MORRIS,
    TTTMoveState: GameType.TTT_MOVE,
    PartshiState: GameType.PARTSHI,
}


def game_type_of(state: FrozenState) -> GameType:
    try:
        return STATE_GAME[type(state)]
    except KeyError:
        raise TypeError(f"Unsupported state type: {type(state).__name__}") from None


def seat_to_move(state: FrozenState) -> int:
    """Seat (0 or 1) that owns the current turn. White and X sit in seat 0."""
    if isinstance(state, UnoState):
        return state.current_player_index
    if isinstance(state, ChessState):
        return 0 if state.turn == Color.WHITE else 1
    if isinstance(state, TTTMoveState):
        return 0 if state.turn == Mark.X else 1
    return state.turn


def validate_action(
    state: FrozenState,
    action: BaseModel,
    seat: int | None = None,
) -> ValidationResult:
    """Validate an action before handing it to a game engine.

    Checks:
    - The action belongs to the game the state describes
    - The game has not finished
    - When a seat is given, it owns the current turn

    Rule checks specific to a game (phase, geometry, hand contents) are left
    to the engine itself.
    """
    action_type = type(action).__name__
    game_type = game_type_of(state)
    logger.debug(
        "Validating action: type=%s, game=%s, seat=%s", action_type, game_type.value, seat
    )

    if ACTION_GAME.get(type(action)) != game_type:
        logger.warning(
            "Validation failed: ACTION_GAME_MISMATCH, action=%s, game=%s",
            action_type,
            game_type.value,
        )
        return ValidationResult.error(
            "ACTION_GAME_MISMATCH",
            f"{action_type} cannot be applied to a {game_type.value} game",
        )

    if state.is_finished:
        logger.warning("Validation failed: GAME_FINISHED, game=%s", game_type.value)
        return ValidationResult.error("GAME_FINISHED", "Game has already finished")

    if seat is not None:
        expected = seat_to_move(state)
        if seat != expected:
            logger.warning(
                "Validation failed: NOT_YOUR_TURN, expected=%d, got=%d", expected, seat
            )
            return ValidationResult.error("NOT_YOUR_TURN", "It's not your turn")

    return ValidationResult.ok()
