"""
Geometry/Base movement and attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.
Whether a move leaves your own king in check is filtered later by the chess engine.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from duo_games.schemas.chess import (
    BOARD_SIZE,
    Board,
    Color,
    LastMove,
    Piece,
    PieceType,
    Square,
)

Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KING_STEPS: list[Vector] = STRAIGHTS + DIAGONALS
KNIGHT_JUMPS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]


def piece_at(board: Board, square: Square) -> Optional[Piece]:
    return board[square.rank - 1][square.file - 1]


def pawn_direction(color: Color) -> int:
    # White moves UP the board, Black moves DOWN
    return 1 if color == Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_SIZE - 1


def promotion_rank(color: Color) -> int:
    return BOARD_SIZE if color == Color.WHITE else 1


# --- MOVEMENT RULES ---
def raycasting_move(square: Square, board: Board, directions: list[Vector]) -> list[Square]:
    """
    Walk along each direction until we hit another piece or the edge of the board.
    The first occupied square is included only when it holds an opponent's piece.
    """
    player_color = piece_at(board, square).color
    targets: list[Square] = []
    for df, dr in directions:
        file, rank = square.file, square.rank
        while True:
            file += df
            rank += dr
            target_square = Square.at(file, rank)
            if not target_square.is_within_bounds():
                break

            occupant = piece_at(board, target_square)
            if occupant is not None:
                if occupant.color != player_color:
                    targets.append(target_square)
                break

            targets.append(target_square)
    return targets


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights."""
    player_color = piece_at(board, square).color
    targets: list[Square] = []
    for df, dr in deltas:
        target_square = Square.at(square.file + df, square.rank + dr)
        if not target_square.is_within_bounds():
            continue
        occupant = piece_at(board, target_square)
        if occupant is None or occupant.color != player_color:
            targets.append(target_square)
    return targets


def is_en_passant_target(
    square: Square, target_square: Square, color: Color, last_move: Optional[LastMove]
) -> bool:
    """The last move was an enemy pawn's double step that landed right beside this pawn."""
    if last_move is None:
        return False
    moved = last_move.piece
    return (
        moved.type == PieceType.PAWN
        and moved.color != color
        and abs(last_move.from_square.rank - last_move.to_square.rank) == 2
        and last_move.to_square == Square.at(target_square.file, square.rank)
    )


def candidate_pawn_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in their first move (so when on their starting rank)
    - takes diagonally, including en passant right after an enemy double step
    """
    color = piece_at(board, square).color
    direction = pawn_direction(color)
    targets: list[Square] = []

    one_step = Square.at(square.file, square.rank + direction)
    if one_step.is_within_bounds() and piece_at(board, one_step) is None:
        targets.append(one_step)
        two_steps = Square.at(square.file, square.rank + 2 * direction)
        if (
            square.rank == pawn_start_rank(color)
            and two_steps.is_within_bounds()
            and piece_at(board, two_steps) is None
        ):
            targets.append(two_steps)

    for df in (-1, 1):
        target_square = Square.at(square.file + df, square.rank + direction)
        if not target_square.is_within_bounds():
            continue
        occupant = piece_at(board, target_square)
        if occupant is not None:
            if occupant.color != color:
                targets.append(target_square)
        elif is_en_passant_target(square, target_square, color, last_move):
            targets.append(target_square)
    return targets


def candidate_knight_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_JUMPS)


def candidate_bishop_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    """The Queen combines the rook and bishop rays"""
    return raycasting_move(square, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(
    square: Square, board: Board, last_move: Optional[LastMove] = None
) -> list[Square]:
    """Single steps in every direction, plus castling."""
    return single_step_move(square, board, KING_STEPS) + candidate_castling_moves(square, board)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board, Optional[LastMove]], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_legal_moves(
    board: Board, square: Square, last_move: Optional[LastMove] = None
) -> list[Square]:
    piece = piece_at(board, square)
    if piece is None:
        return []
    return MOVEMENT_RULES[piece.type](square, board, last_move)


# --- ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    attacker_types: set[PieceType],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Is the square in the line-of-sight of a piece of `by_color` that slides along these directions?
    Only the first occupied square along each ray matters.
    """
    for df, dr in directions:
        file, rank = square.file, square.rank
        while True:
            file += df
            rank += dr
            target_square = Square.at(file, rank)
            if not target_square.is_within_bounds():
                break

            piece_found = piece_at(board, target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in attacker_types:
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    attacker_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    for df, dr in deltas:
        target_square = Square.at(square.file + df, square.rank + dr)
        if not target_square.is_within_bounds():
            continue
        piece_found = piece_at(board, target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == attacker_type
        ):
            return True
    return False


def is_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """Could any piece of `by_color` capture on this square?

    NOTE: Pawn attacks are not symmetric: a white pawn attacking this square stands one rank
    BELOW it, so the deltas are the opposite of the capture deltas in `candidate_pawn_moves()`.
    """
    inverse_pawn_deltas: list[Vector] = [(-1, -pawn_direction(by_color)), (1, -pawn_direction(by_color))]
    return (
        single_step_attack(square, by_color, PieceType.PAWN, board, inverse_pawn_deltas)
        or single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_JUMPS)
        or single_step_attack(square, by_color, PieceType.KING, board, KING_STEPS)
        or raycasting_attack(
            square, by_color, {PieceType.ROOK, PieceType.QUEEN}, board, STRAIGHTS
        )
        or raycasting_attack(
            square, by_color, {PieceType.BISHOP, PieceType.QUEEN}, board, DIAGONALS
        )
    )


def find_king(board: Board, color: Color) -> Optional[Square]:
    for rank_idx, row in enumerate(board):
        for file_idx, piece in enumerate(row):
            if piece is not None and piece.type == PieceType.KING and piece.color == color:
                return Square.at(file_idx + 1, rank_idx + 1)
    return None


def is_in_check(board: Board, color: Color) -> bool:
    king_square = find_king(board, color)
    if king_square is None:
        return False
    return is_attacked(board, king_square, color.opponent)


# -- CASTLING MOVES ---
@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling,
    the squares that must be empty, and the squares the king passes that must not be attacked.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    between: tuple[Square, ...]
    king_path: tuple[Square, ...]

    @classmethod
    def from_algebraic(
        cls, k_from: str, k_to: str, r_from: str, r_to: str, between: str, king_path: str
    ) -> "CastlingSquares":
        """Convenience method: to make the mapping shown below more readable"""
        return cls(
            king_from=Square.from_algebraic(k_from),
            king_to=Square.from_algebraic(k_to),
            rook_from=Square.from_algebraic(r_from),
            rook_to=Square.from_algebraic(r_to),
            between=tuple(Square.from_algebraic(sq) for sq in between.split()),
            king_path=tuple(Square.from_algebraic(sq) for sq in king_path.split()),
        )


# The moves (in classical chess) made when castling: king side first, then queen side
CASTLING_RULES: dict[Color, tuple[CastlingSquares, ...]] = {
    Color.WHITE: (
        CastlingSquares.from_algebraic("e1", "g1", "h1", "f1", "f1 g1", "f1 g1"),
        CastlingSquares.from_algebraic("e1", "c1", "a1", "d1", "b1 c1 d1", "d1 c1"),
    ),
    Color.BLACK: (
        CastlingSquares.from_algebraic("e8", "g8", "h8", "f8", "f8 g8", "f8 g8"),
        CastlingSquares.from_algebraic("e8", "c8", "a8", "d8", "b8 c8 d8", "d8 c8"),
    ),
}


def castling_rule_for(color: Color, king_to: Square) -> Optional[CastlingSquares]:
    return next((rule for rule in CASTLING_RULES[color] if rule.king_to == king_to), None)


def candidate_castling_moves(square: Square, board: Board) -> list[Square]:
    """
    Castling precondition: king and rook never moved, nothing between them,
    king not in check and not passing through or landing on an attacked square.
    """
    king = piece_at(board, square)
    if king is None or king.type != PieceType.KING or king.has_moved:
        return []
    if is_in_check(board, king.color):
        return []

    opponent = king.color.opponent
    targets: list[Square] = []
    for rule in CASTLING_RULES[king.color]:
        if square != rule.king_from:
            continue
        rook = piece_at(board, rule.rook_from)
        if rook is None or rook.type != PieceType.ROOK or rook.color != king.color or rook.has_moved:
            continue
        if any(piece_at(board, sq) is not None for sq in rule.between):
            continue
        if any(is_attacked(board, sq, opponent) for sq in rule.king_path):
            continue
        targets.append(rule.king_to)
    return targets
