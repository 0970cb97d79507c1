"""Chess engine: legal-move filtering, move execution and end-of-game detection.

Pseudo-legal geometry lives in chess_moves; this module decides which of those
moves are legal and produces the next ChessState.
"""

import logging
from typing import Optional

from duo_games.schemas.chess import (
    BOARD_SIZE,
    Board,
    ChessState,
    Color,
    LastMove,
    Piece,
    PieceType,
    Square,
)

from .actions import ChessMoveAction
from .chess_moves import (
    castling_rule_for,
    is_in_check,
    piece_at,
    promotion_rank,
    pseudo_legal_moves,
)
from .validation import IllegalActionError

logger = logging.getLogger(__name__)

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def board_from_placement(placement: str) -> Board:
    """Construct a board from the piece-placement field of a FEN string.

    ex. standard starting position:
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
    means:
    * black pieces are on the 8th rank, the first character is the a-file
    * ranks 6 through 3 have 8 consecutive empty squares
    * capital letters are White's pieces
    """
    rows: list[list[Optional[Piece]]] = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for rank_idx, fen_one_rank in enumerate(placement.split("/")):
        # FEN string is read from top rank (8th) to bottom rank (1st)
        rank = BOARD_SIZE - rank_idx
        file = 1
        for character in fen_one_rank:
            if character.isalpha():
                rows[rank - 1][file - 1] = Piece.from_fen(character)
                file += 1
            else:
                # A number denotes the amount of empty squares after each other
                file += int(character)
    return tuple(tuple(row) for row in rows)


def board_to_placement(board: Board) -> str:
    """Ranks are separated by slashes, 8th rank first."""
    fen_ranks: list[str] = []
    for rank in range(BOARD_SIZE, 0, -1):
        fen_characters: list[str] = []
        empty_count = 0
        for piece in board[rank - 1]:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        fen_ranks.append("".join(fen_characters))
    return "/".join(fen_ranks)


def initial_state() -> ChessState:
    return ChessState(
        board=board_from_placement(STARTING_PLACEMENT),
        turn=Color.WHITE,
        winner=None,
        last_move=None,
        in_check=False,
        log="Game Started",
    )


def _is_en_passant_capture(board: Board, from_square: Square, to_square: Square) -> bool:
    # a pawn moving diagonally onto an empty square
    piece = piece_at(board, from_square)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and to_square.file != from_square.file
        and piece_at(board, to_square) is None
    )


def _place(rows: list[list[Optional[Piece]]], square: Square, piece: Optional[Piece]) -> None:
    rows[square.rank - 1][square.file - 1] = piece


def _simulate(board: Board, from_square: Square, to_square: Square) -> Board:
    """Scratch board after the move, used only to test king safety."""
    rows = [list(row) for row in board]
    if _is_en_passant_capture(board, from_square, to_square):
        _place(rows, Square.at(to_square.file, from_square.rank), None)
    _place(rows, to_square, piece_at(board, from_square))
    _place(rows, from_square, None)
    return tuple(tuple(row) for row in rows)


def get_legal_moves(
    board: Board, from_square: Square, last_move: Optional[LastMove] = None
) -> set[Square]:
    """Destinations reachable from `from_square` that do not leave the mover's king in check.

    Castling path safety is already checked during generation, so the rook does not
    need to be moved on the scratch board.
    """
    if not from_square.is_within_bounds():
        return set()
    piece = piece_at(board, from_square)
    if piece is None:
        return set()
    return {
        target
        for target in pseudo_legal_moves(board, from_square, last_move)
        if not is_in_check(_simulate(board, from_square, target), piece.color)
    }


def has_any_legal_move(board: Board, color: Color, last_move: Optional[LastMove]) -> bool:
    for rank_idx, row in enumerate(board):
        for file_idx, piece in enumerate(row):
            if piece is None or piece.color != color:
                continue
            if get_legal_moves(board, Square.at(file_idx + 1, rank_idx + 1), last_move):
                return True
    return False


def count_legal_moves(board: Board, color: Color, last_move: Optional[LastMove] = None) -> int:
    total = 0
    for rank_idx, row in enumerate(board):
        for file_idx, piece in enumerate(row):
            if piece is not None and piece.color == color:
                total += len(get_legal_moves(board, Square.at(file_idx + 1, rank_idx + 1), last_move))
    return total


def perform_move(state: ChessState, from_square: Square, to_square: Square) -> ChessState:
    """Validate and play a move, returning the next state.

    Raises:
        IllegalActionError: the game is over, the square holds no piece of the side
            to move, or the destination is not a legal move.
    """
    if state.is_finished:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")

    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        raise IllegalActionError("ILLEGAL_MOVE", f"Move {from_square}-{to_square} leaves the board")

    board = state.board
    piece = piece_at(board, from_square)
    if piece is None:
        raise IllegalActionError("NO_PIECE", f"There is no piece on {from_square}")
    if piece.color != state.turn:
        raise IllegalActionError("NOT_YOUR_PIECE", f"The piece on {from_square} is not {state.turn.value}")
    if to_square not in get_legal_moves(board, from_square, state.last_move):
        raise IllegalActionError(
            "ILLEGAL_MOVE", f"{piece.type.value} cannot move from {from_square} to {to_square}"
        )

    rows = [list(row) for row in board]
    log = f"{state.turn.value.capitalize()} moved"

    if piece.type == PieceType.KING and abs(to_square.file - from_square.file) > 1:
        rule = castling_rule_for(piece.color, to_square)
        rook = piece_at(board, rule.rook_from)
        _place(rows, rule.rook_from, None)
        _place(rows, rule.rook_to, rook.model_copy(update={"has_moved": True}))
        log = "Castling"

    if _is_en_passant_capture(board, from_square, to_square):
        _place(rows, Square.at(to_square.file, from_square.rank), None)
        log = "En Passant"

    moved = piece.model_copy(update={"has_moved": True})
    # promotion is always to a queen
    if piece.type == PieceType.PAWN and to_square.rank == promotion_rank(piece.color):
        moved = moved.model_copy(update={"type": PieceType.QUEEN})
        log = "Pawn Promoted"

    _place(rows, to_square, moved)
    _place(rows, from_square, None)
    new_board: Board = tuple(tuple(row) for row in rows)

    next_turn = state.turn.opponent
    last_move = LastMove(from_square=from_square, to_square=to_square, piece=piece)
    check = is_in_check(new_board, next_turn)
    winner = state.winner

    if not has_any_legal_move(new_board, next_turn, last_move):
        if check:
            winner = state.turn
            log = "Checkmate!"
        else:
            winner = "draw"
            log = "Stalemate!"
        logger.info("Chess game over: winner=%s", winner)
    elif check:
        log += " (Check)"

    logger.debug(
        "Chess move: %s%s by %s, check=%s", from_square, to_square, state.turn.value, check
    )
    return state.model_copy(
        update={
            "board": new_board,
            "turn": next_turn,
            "winner": winner,
            "last_move": last_move,
            "in_check": check,
            "log": log,
        }
    )


def apply_action(state: ChessState, action: ChessMoveAction) -> ChessState:
    if not isinstance(action, ChessMoveAction):
        raise IllegalActionError("UNKNOWN_ACTION", f"Unknown chess action: {type(action).__name__}")
    return perform_move(state, action.from_square, action.to_square)
