"""Game action types - explicit user inputs separated from game state."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from duo_games.schemas.chess import Square
from duo_games.schemas.game_engine import GameType
from duo_games.schemas.uno import CardColor


class PlayCardAction(BaseModel):
    """UNO: play a card from the current hand."""

    action_type: Literal["uno_play"] = "uno_play"
    card_id: str
    color_choice: CardColor | None = Field(
        None, description="Color a Wild / WildDrawFour should represent"
    )


class DrawCardAction(BaseModel):
    """UNO: draw one card and pass the turn."""

    action_type: Literal["uno_draw"] = "uno_draw"


class ChessMoveAction(BaseModel):
    """Chess: move the piece on from_square to to_square."""

    action_type: Literal["chess_move"] = "chess_move"
    from_square: Square
    to_square: Square

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_on_board(cls, v: Square) -> Square:
        if not v.is_within_bounds():
            raise ValueError(f"Square is off the board: file={v.file}, rank={v.rank}")
        return v

    @classmethod
    def from_uci(cls, uci: str) -> "ChessMoveAction":
        """Build from coordinate notation such as 'e2e4' (promotion is implicit)."""
        if len(uci) != 4:
            raise ValueError(f"Expected four characters such as 'e2e4', got {uci!r}")
        return cls(
            from_square=Square.from_algebraic(uci[:2]),
            to_square=Square.from_algebraic(uci[2:4]),
        )


class MorrisPlaceAction(BaseModel):
    """Morris: place a new piece on an empty point."""

    action_type: Literal["morris_place"] = "morris_place"
    index: int = Field(..., ge=0, le=8)


class MorrisMoveAction(BaseModel):
    """Morris: slide a piece along a board line."""

    action_type: Literal["morris_move"] = "morris_move"
    from_index: int = Field(..., ge=0, le=8)
    to_index: int = Field(..., ge=0, le=8)


class TTTDropAction(BaseModel):
    """TTT-Move: drop a new mark on an empty cell."""

    action_type: Literal["ttt_drop"] = "ttt_drop"
    index: int = Field(..., ge=0, le=8)


class TTTMoveAction(BaseModel):
    """TTT-Move: reposition one of your marks."""

    action_type: Literal["ttt_move"] = "ttt_move"
    from_index: int = Field(..., ge=0, le=8)
    to_index: int = Field(..., ge=0, le=8)


class RollAction(BaseModel):
    """Partshi: roll the die. Leave value empty to let the engine roll."""

    action_type: Literal["partshi_roll"] = "partshi_roll"
    value: int | None = Field(None, ge=1, le=6, description="Dice roll value (1-6)")


class PartshiMoveAction(BaseModel):
    """Partshi: advance a piece by the pending roll."""

    action_type: Literal["partshi_move"] = "partshi_move"
    piece_id: int = Field(..., ge=0, le=3)


UnoAction = PlayCardAction | DrawCardAction
MorrisAction = MorrisPlaceAction | MorrisMoveAction
TTTAction = TTTDropAction | TTTMoveAction
PartshiAction = RollAction | PartshiMoveAction

# Union type for all game actions
GameAction = Annotated[
    PlayCardAction
    | DrawCardAction
    | ChessMoveAction
    | MorrisPlaceAction
    | MorrisMoveAction
    | TTTDropAction
    | TTTMoveAction
    | RollAction
    | PartshiMoveAction,
    Field(discriminator="action_type"),
]

ACTION_TYPES: dict[str, type[BaseModel]] = {
    "uno_play": PlayCardAction,
    "uno_draw": DrawCardAction,
    "chess_move": ChessMoveAction,
    "morris_place": MorrisPlaceAction,
    "morris_move": MorrisMoveAction,
    "ttt_drop": TTTDropAction,
    "ttt_move": TTTMoveAction,
    "partshi_roll": RollAction,
    "partshi_move": PartshiMoveAction,
}

ACTION_GAME: dict[type[BaseModel], GameType] = {
    PlayCardAction: GameType.UNO,
    DrawCardAction: GameType.UNO,
    ChessMoveAction: GameType.CHESS,
    MorrisPlaceAction: GameType.MORRIS,
    MorrisMoveAction: GameType.MORRIS,
    TTTDropAction: GameType.TTT_MOVE,
    TTTMoveAction: GameType.TTT_MOVE,
    RollAction: GameType.PARTSHI,
    PartshiMoveAction: GameType.PARTSHI,
}


def build_action_from_payload(payload: dict) -> GameAction:
    """Build a typed action from a raw payload dict.

    Args:
        payload: Dict with 'action_type' key and action-specific fields.

    Returns:
        The appropriate GameAction subtype.

    Raises:
        ValueError: If action_type is missing or unknown, or the fields are invalid.
    """
    action_type = payload.get("action_type")
    action_cls = ACTION_TYPES.get(action_type)
    if action_cls is None:
        raise ValueError(f"Unknown action type: {action_type}")
    return action_cls.model_validate(payload)
