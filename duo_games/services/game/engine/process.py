"""Main entry point for game action processing.

This module provides the primary interface for processing game actions:
- process_action(): Validates and processes an action for any of the five games
- Dispatches to the engine owning the state type
- Returns ProcessResult with the new state, or the error that rejected the action
"""

import logging
import random

logger = logging.getLogger(__name__)

from duo_games.schemas.chess import ChessState
from duo_games.schemas.game_engine import FrozenState, RuleOptions
from duo_games.schemas.morris import MorrisState
from duo_games.schemas.partshi import PartshiState
from duo_games.schemas.ttt_move import TTTMoveState
from duo_games.schemas.uno import UnoState

from . import chess, morris, partshi, ttt_move, uno
from .actions import GameAction
from .validation import IllegalActionError, ProcessResult, validate_action


def _dispatch(
    state: FrozenState,
    action: GameAction,
    options: RuleOptions,
    rng: random.Random | None,
) -> FrozenState:
    if isinstance(state, UnoState):
        return uno.apply_action(state, action, options=options, rng=rng)
    if isinstance(state, ChessState):
        return chess.apply_action(state, action)
    if isinstance(state, MorrisState):
        return morris.apply_action(state, action)
    if isinstance(state, TTTMoveState):
        return ttt_move.apply_action(state, action)
    if isinstance(state, PartshiState):
        return partshi.apply_action(
            state,
            action,
            rng=rng,
            reroll_on_unusable_six=options.partshi_reroll_on_unusable_six,
        )
    raise IllegalActionError("UNKNOWN_GAME", f"Unsupported state type: {type(state).__name__}")


def process_action(
    state: FrozenState,
    action: GameAction,
    seat: int | None = None,
    *,
    options: RuleOptions | None = None,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Process a game action and return the result.

    This is the main entry point for all game actions. It:
    1. Validates the action belongs to this game and, when a seat is given,
       that the seat owns the turn
    2. Dispatches to the engine for the state's game
    3. Converts a rule violation into a failed ProcessResult

    Args:
        state: Current game state. Never modified.
        action: The action to process.
        seat: Seat (0 or 1) attempting the action, or None to act for whoever
            is to move.
        options: House-rule switches. Defaults to RuleOptions().
        rng: Random source for shuffles and die rolls.

    Returns:
        ProcessResult containing:
        - success: Whether the action was processed successfully
        - state: The new game state (if successful)
        - error_code/error_message: Error details (if failed)

    Example:
        >>> result = process_action(state, MorrisPlaceAction(index=4), seat=0)
        >>> if result.success:
        ...     state = result.state
        ... else:
        ...     show_error(result.error_code, result.error_message)
    """
    action_type = type(action).__name__
    logger.info("Processing action: type=%s, seat=%s", action_type, seat)
    logger.debug("Action details: %s", action)

    validation = validate_action(state, action, seat)
    if not validation.is_valid:
        return ProcessResult.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid action",
        )

    try:
        new_state = _dispatch(state, action, options or RuleOptions(), rng)
    except IllegalActionError as e:
        logger.warning(
            "Action rejected: type=%s, seat=%s, code=%s, message=%s",
            action_type,
            seat,
            e.code,
            e.message,
        )
        return ProcessResult.from_error(e)

    logger.info("Action processed successfully: type=%s, log=%s", action_type, new_state.log)
    return ProcessResult.ok(new_state)
