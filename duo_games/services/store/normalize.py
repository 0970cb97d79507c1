"""Repair raw JSON read back from the store before it is validated.

Older writers and hand-edited records sometimes drop empty slots, so boards
can arrive as sparse dicts or short lists and optional collections can be
missing altogether. Everything is padded back to its fixed shape here; the
engines only ever see well-formed states.
"""

import logging
from typing import Any, Callable

from pydantic import ValidationError

from duo_games.schemas.chess import BOARD_SIZE, ChessState
from duo_games.schemas.game_engine import FrozenState, GameType
from duo_games.schemas.morris import BOARD_POINTS, MorrisState
from duo_games.schemas.partshi import PIECES_PER_PLAYER, PartshiState
from duo_games.schemas.ttt_move import GRID_CELLS, TTTMoveState
from duo_games.schemas.uno import UnoState
from duo_games.services.game.engine.validation import MalformedStateError

logger = logging.getLogger(__name__)

STATE_MODELS: dict[GameType, type[FrozenState]] = {
    GameType.UNO: UnoState,
    GameType.CHESS: ChessState,
    GameType.MORRIS: MorrisState,
    GameType.TTT_MOVE: TTTMoveState,
    GameType.PARTSHI: PartshiState,
}


def dense_slots(raw: Any, size: int, fill: Callable[[Any], Any] = lambda v: v) -> list[Any]:
    """Turn a list, sparse list or index-keyed dict into exactly `size` slots.

    Missing slots become None; anything past `size` is dropped.
    """
    if raw is None:
        return [None] * size
    if isinstance(raw, dict):
        slots: list[Any] = [None] * size
        for key, value in raw.items():
            index = int(key)
            if 0 <= index < size:
                slots[index] = fill(value)
        return slots
    if isinstance(raw, (list, tuple)):
        values = [fill(v) for v in list(raw)[:size]]
        return values + [None] * (size - len(values))
    raise MalformedStateError(f"Expected a list of {size} slots, got {type(raw).__name__}")


def _normalize_uno(data: dict[str, Any]) -> dict[str, Any]:
    data.setdefault("deck", [])
    data.setdefault("discard_pile", [])
    players = data.get("players") or []
    if isinstance(players, dict):
        players = [players[k] for k in sorted(players, key=int)]
    for index, player in enumerate(players):
        if not isinstance(player, dict):
            raise MalformedStateError(f"UNO player {index} is not an object")
        player.setdefault("hand", [])
    data["players"] = players
    return data


def _normalize_chess(data: dict[str, Any]) -> dict[str, Any]:
    data["board"] = [
        dense_slots(row, BOARD_SIZE) for row in dense_slots(data.get("board"), BOARD_SIZE)
    ]
    return data


def _normalize_morris(data: dict[str, Any]) -> dict[str, Any]:
    data["board"] = dense_slots(data.get("board"), BOARD_POINTS)
    placed = data.get("pieces_placed")
    if isinstance(placed, dict):
        data["pieces_placed"] = [placed.get("0", placed.get(0, 0)), placed.get("1", placed.get(1, 0))]
    return data


def _normalize_ttt(data: dict[str, Any]) -> dict[str, Any]:
    data["board"] = dense_slots(data.get("board"), GRID_CELLS)
    return data


def _normalize_partshi(data: dict[str, Any]) -> dict[str, Any]:
    players = data.get("players")
    if isinstance(players, dict):
        players = [players.get("0", players.get(0)), players.get("1", players.get(1))]
    if players is not None:
        data["players"] = [
            pieces if pieces else [{"id": i} for i in range(PIECES_PER_PLAYER)]
            for pieces in players
        ]
    return data


NORMALIZERS: dict[GameType, Callable[[dict[str, Any]], dict[str, Any]]] = {
    GameType.UNO: _normalize_uno,
    GameType.CHESS: _normalize_chess,
    GameType.MORRIS: _normalize_morris,
    GameType.TTT_MOVE: _normalize_ttt,
    GameType.PARTSHI: _normalize_partshi,
}


def normalize_state(game_type: GameType, raw: dict[str, Any]) -> FrozenState:
    """Pad a raw payload into shape and validate it as the game's state model.

    Raises:
        MalformedStateError: the payload is not an object or cannot be repaired.
    """
    if not isinstance(raw, dict):
        raise MalformedStateError(f"{game_type.value} state must be a JSON object")

    try:
        data = NORMALIZERS[game_type](dict(raw))
        return STATE_MODELS[game_type].model_validate(data)
    except MalformedStateError:
        raise
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("Unrecoverable %s state: %s", game_type.value, e)
        raise MalformedStateError(f"Stored {game_type.value} state is malformed: {e}") from e
