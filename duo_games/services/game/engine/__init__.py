"""Game engine module - pure functional game logic.

This module provides the rules for all five games with:
- Action types for explicit user inputs
- ProcessResult pattern for error handling
- One engine module per game, each a set of pure state transitions

Usage:
    from duo_games.services.game.engine import (
        process_action,
        ProcessResult,
        RollAction,
        PartshiMoveAction,
    )

    # Process an action
    result = process_action(state, RollAction(value=6), seat=0)

    if result.success:
        new_state = result.state
    else:
        # Handle error
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Actions - explicit user inputs
from .actions import (
    ChessMoveAction,
    DrawCardAction,
    GameAction,
    MorrisMoveAction,
    MorrisPlaceAction,
    PartshiMoveAction,
    PlayCardAction,
    RollAction,
    TTTDropAction,
    TTTMoveAction,
    build_action_from_payload,
)

# Chess move generation
from .chess import get_legal_moves, has_any_legal_move

# Main processing
from .process import process_action

# Result types
from .validation import (
    IllegalActionError,
    MalformedStateError,
    ProcessResult,
    ValidationResult,
    game_type_of,
    seat_to_move,
    validate_action,
)

__all__ = [
    # Actions
    "GameAction",
    "PlayCardAction",
    "DrawCardAction",
    "ChessMoveAction",
    "MorrisPlaceAction",
    "MorrisMoveAction",
    "TTTDropAction",
    "TTTMoveAction",
    "RollAction",
    "PartshiMoveAction",
    "build_action_from_payload",
    # Processing
    "process_action",
    # Validation
    "IllegalActionError",
    "MalformedStateError",
    "ProcessResult",
    "ValidationResult",
    "validate_action",
    "game_type_of",
    "seat_to_move",
    # Chess
    "get_legal_moves",
    "has_any_legal_move",
]
