"""Chess data model.

The board is an 8x8 matrix indexed ``board[rank - 1][file - 1]`` so that
``board[0]`` is White's back rank. Empty squares hold ``None``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from duo_games.schemas.game_engine import FrozenState

# Chess board is always 8x8
BOARD_SIZE = 8

ALGEBRAIC_SQUARE = re.compile(r"[a-h][1-8]")


class PieceType(str, Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}


class Piece(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PieceType
    color: Color
    has_moved: bool = False

    @classmethod
    def from_fen(cls, character: str) -> Piece:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        return cls(type=FEN_TO_PIECE[character.lower()], color=color)

    def to_fen(self) -> str:
        symbol = PIECE_TO_FEN[self.type]
        return symbol.upper() if self.color == Color.WHITE else symbol


class Square(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: int
    rank: int

    @model_validator(mode="before")
    @classmethod
    def parse_algebraic(cls, data: Any) -> Any:
        # payloads may carry squares as plain "e4" strings
        if isinstance(data, str):
            if not ALGEBRAIC_SQUARE.fullmatch(data):
                raise ValueError(f"Not a board square: {data!r}")
            return {"file": ord(data[0]) - ord("a") + 1, "rank": int(data[1])}
        return data

    @classmethod
    def at(cls, file: int, rank: int) -> Square:
        return cls(file=file, rank=rank)

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        return cls.model_validate(sq)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return 1 <= self.file <= BOARD_SIZE and 1 <= self.rank <= BOARD_SIZE

    def __str__(self) -> str:
        return self.to_algebraic()


Board = tuple[tuple[Optional[Piece], ...], ...]


class LastMove(BaseModel):
    """Needed to detect en passant on the following move."""

    model_config = ConfigDict(frozen=True)

    from_square: Square
    to_square: Square
    piece: Piece


ChessWinner = Color | Literal["draw"] | None


class ChessState(FrozenState):
    board: Board
    turn: Color = Color.WHITE
    winner: ChessWinner = None
    last_move: LastMove | None = None
    in_check: bool = False

    @property
    def is_finished(self) -> bool:
        return self.winner is not None
