from enum import Enum

from duo_games.schemas.game_engine import FrozenState

PIECES_PER_PLAYER = 3

# Board indices:
# 0 - 1 - 2
# | \ | / |
# 3 - 4 - 5
# | / | \ |
# 6 - 7 - 8
BOARD_POINTS = 9


class MorrisPhase(str, Enum):
    PLACING = "placing"
    MOVING = "moving"


class MorrisState(FrozenState):
    board: tuple[int | None, ...] = (None,) * BOARD_POINTS  # None=empty, 0/1=player
    turn: int = 0
    phase: MorrisPhase = MorrisPhase.PLACING
    pieces_placed: tuple[int, int] = (0, 0)
    winner: int | None = None

    @property
    def is_finished(self) -> bool:
        return self.winner is not None
