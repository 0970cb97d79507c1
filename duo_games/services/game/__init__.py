"""Game service module.

Provides:
- Game initialization (start_game.py)
- Game engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    GameAction,
    IllegalActionError,
    ProcessResult,
    build_action_from_payload,
    process_action,
)
from .start_game import initialize_game, validate_player_names

__all__ = [
    # Initialization
    "initialize_game",
    "validate_player_names",
    # Engine
    "GameAction",
    "IllegalActionError",
    "ProcessResult",
    "process_action",
    "build_action_from_payload",
]
