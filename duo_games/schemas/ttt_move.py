from enum import Enum

from duo_games.schemas.game_engine import FrozenState

PIECES_PER_MARK = 3
GRID_CELLS = 9


class Mark(str, Enum):
    X = "X"
    O = "O"  # noqa: E741

    @property
    def opponent(self) -> "Mark":
        return Mark.O if self == Mark.X else Mark.X


class TTTPhase(str, Enum):
    DROP = "drop"
    MOVE = "move"


class TTTMoveState(FrozenState):
    board: tuple[Mark | None, ...] = (None,) * GRID_CELLS
    turn: Mark = Mark.X
    phase: TTTPhase = TTTPhase.DROP
    pieces_x: int = 0
    pieces_o: int = 0
    winner: Mark | None = None

    @property
    def is_finished(self) -> bool:
        return self.winner is not None

    def pieces_of(self, mark: Mark) -> int:
        return self.pieces_x if mark == Mark.X else self.pieces_o
