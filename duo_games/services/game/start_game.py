import random

from duo_games.schemas.game_engine import FrozenState, GameType

from .engine import chess, morris, partshi, ttt_move, uno


def validate_player_names(player_names: tuple[str, str]) -> None:
    """Validate the seat names before dealing a game."""
    if len(player_names) != 2:
        raise ValueError("Exactly 2 players are required to start the game.")
    if any(not name.strip() for name in player_names):
        raise ValueError("Player names cannot be blank.")
    if player_names[0] == player_names[1]:
        raise ValueError(f"Duplicate player name found: {player_names[0]}")


def initialize_game(
    game_type: GameType | str,
    rng: random.Random | None = None,
    player_names: tuple[str, str] = uno.DEFAULT_PLAYER_NAMES,
) -> FrozenState:
    """
    Return a fresh starting state for the requested game.

    Args:
        game_type: Which game to start.
        rng: Random source for the UNO shuffle and the TTT-Move opening mark.
        player_names: Seat names, shown in UNO logs.

    Returns:
        A starting state ready for the first action.

    Raises:
        ValueError: If the game type is unknown or the player names are invalid.
    """
    game_type = GameType(game_type)

    if game_type == GameType.UNO:
        validate_player_names(player_names)
        return uno.initial_state(rng, player_names)
    if game_type == GameType.CHESS:
        return chess.initial_state()
    if game_type == GameType.MORRIS:
        return morris.initial_state()
    if game_type == GameType.TTT_MOVE:
        return ttt_move.initial_state(rng)
    return partshi.initial_state()
