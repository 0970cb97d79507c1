"""Shared fixtures for game engine and store tests."""

import random

import pytest

from duo_games.schemas.chess import Board, ChessState, Color, Square
from duo_games.schemas.morris import MorrisPhase, MorrisState
from duo_games.schemas.partshi import PartshiPiece, PartshiState, PieceZone
from duo_games.schemas.ttt_move import Mark, TTTMoveState, TTTPhase
from duo_games.schemas.uno import Card, CardColor, CardValue, UnoPlayer, UnoState, UnoStatus
from duo_games.services.game.engine import chess, uno
from duo_games.services.game.engine.chess_moves import piece_at


# Fixed seed for deterministic shuffles and rolls
SEED = 1234


@pytest.fixture
def rng() -> random.Random:
    return random.Random(SEED)


# --- UNO ---


def card(card_id: str, color: CardColor, value: CardValue) -> Card:
    """Helper to create a card."""
    return Card(id=card_id, color=color, value=value)


def create_uno_state(
    hand0: list[Card],
    hand1: list[Card],
    top: Card,
    deck: list[Card] | None = None,
    discard_below: list[Card] | None = None,
    current_player_index: int = 0,
    active_color: CardColor | None = None,
) -> UnoState:
    """UNO game in progress with explicit hands, deck and discard pile."""
    return UnoState(
        deck=tuple(deck or []),
        discard_pile=(*(discard_below or []), top),
        players=(
            UnoPlayer(id=0, name="Player 1", hand=tuple(hand0)),
            UnoPlayer(id=1, name="Player 2", hand=tuple(hand1)),
        ),
        current_player_index=current_player_index,
        direction=1,
        status=UnoStatus.TURN_ACTION,
        active_color=active_color or top.color,
        winner=None,
    )


def filler_cards(prefix: str, count: int) -> list[Card]:
    """Plain yellow number cards nothing in the tests ever wants to play."""
    return [card(f"{prefix}-{i}", CardColor.YELLOW, CardValue.NINE) for i in range(count)]


@pytest.fixture
def uno_game(rng: random.Random) -> UnoState:
    """Freshly dealt UNO game."""
    return uno.initial_state(rng)


# --- Chess ---


def board_from(placement: str) -> Board:
    """Board from a FEN piece-placement string."""
    return chess.board_from_placement(placement)


def chess_state(placement: str, turn: Color = Color.WHITE) -> ChessState:
    return ChessState(board=board_from(placement), turn=turn)


def play_moves(state: ChessState, *moves: str) -> ChessState:
    """Play coordinate moves such as 'e2e4' in order."""
    for move in moves:
        state = chess.perform_move(
            state, Square.from_algebraic(move[:2]), Square.from_algebraic(move[2:4])
        )
    return state


def piece_on(state: ChessState, square: str):
    return piece_at(state.board, Square.from_algebraic(square))


@pytest.fixture
def chess_game() -> ChessState:
    return chess.initial_state()


# --- Morris / TTT-Move ---


def morris_state(
    board: list[int | None],
    turn: int = 0,
    phase: MorrisPhase = MorrisPhase.MOVING,
    pieces_placed: tuple[int, int] = (3, 3),
) -> MorrisState:
    return MorrisState(board=tuple(board), turn=turn, phase=phase, pieces_placed=pieces_placed)


def ttt_state(
    board: list[Mark | None],
    turn: Mark = Mark.X,
    phase: TTTPhase = TTTPhase.MOVE,
) -> TTTMoveState:
    return TTTMoveState(
        board=tuple(board),
        turn=turn,
        phase=phase,
        pieces_x=sum(1 for m in board if m == Mark.X),
        pieces_o=sum(1 for m in board if m == Mark.O),
    )


# --- Partshi ---


def create_piece(piece_id: int, zone: PieceZone = PieceZone.BASE, progress: int = 0) -> PartshiPiece:
    """Helper to create a piece."""
    return PartshiPiece(id=piece_id, zone=zone, progress=progress)


def pieces_in_base(count: int = 4) -> tuple[PartshiPiece, ...]:
    return tuple(create_piece(i) for i in range(count))


def create_partshi_state(
    player0: tuple[PartshiPiece, ...] | None = None,
    player1: tuple[PartshiPiece, ...] | None = None,
    turn: int = 0,
    dice: int | None = None,
) -> PartshiState:
    """Partshi game; passing `dice` puts the player in the move step."""
    return PartshiState(
        players=(player0 or pieces_in_base(), player1 or pieces_in_base()),
        turn=turn,
        dice=dice,
        can_roll=dice is None,
    )


@pytest.fixture
def partshi_game() -> PartshiState:
    return create_partshi_state()
