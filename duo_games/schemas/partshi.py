from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from duo_games.schemas.game_engine import FrozenState

PIECES_PER_PLAYER = 4


# Piece zones, in the only order a piece may travel through them
class PieceZone(str, Enum):
    BASE = "base"
    TRACK = "track"
    HOME_PATH = "home_path"
    GOAL = "goal"


class PartshiBoardSetup(BaseModel):
    """Fixed geometry of the two-player board.

    Progress is counted from the player's own start square: 0..50 on the shared
    track, 51..56 on the private home path, 57 at the goal.
    """

    model_config = ConfigDict(frozen=True)

    track_length: int = 52
    start_squares: tuple[int, int] = (0, 26)
    home_entry_progress: int = 50  # last track square before the home path
    home_path_length: int = 6
    safe_squares: tuple[int, ...] = (0, 8, 13, 21, 26, 34, 39, 47)
    get_out_roll: int = 6

    @property
    def goal_progress(self) -> int:
        return self.home_entry_progress + self.home_path_length + 1


class PartshiPiece(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    zone: PieceZone = PieceZone.BASE
    progress: int = 0


def _initial_pieces() -> tuple[PartshiPiece, ...]:
    return tuple(PartshiPiece(id=i) for i in range(PIECES_PER_PLAYER))


class PartshiState(FrozenState):
    players: tuple[tuple[PartshiPiece, ...], tuple[PartshiPiece, ...]] = Field(
        default_factory=lambda: (_initial_pieces(), _initial_pieces())
    )
    turn: int = 0
    dice: int | None = None
    can_roll: bool = True
    winner: int | None = None
    board_setup: PartshiBoardSetup = Field(default_factory=PartshiBoardSetup)

    @property
    def is_finished(self) -> bool:
        return self.winner is not None

    def track_square(self, player_index: int, piece: PartshiPiece) -> int | None:
        """Absolute cell on the shared ring, or None when the piece is off the track."""
        if piece.zone != PieceZone.TRACK:
            return None
        setup = self.board_setup
        return (setup.start_squares[player_index] + piece.progress) % setup.track_length

    def home_index(self, piece: PartshiPiece) -> int | None:
        """Cell 0..5 on the player's private home path, or None elsewhere."""
        if piece.zone != PieceZone.HOME_PATH:
            return None
        return piece.progress - self.board_setup.home_entry_progress - 1
