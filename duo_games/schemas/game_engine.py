from enum import Enum

from pydantic import BaseModel, ConfigDict


# Game catalogue
class GameType(str, Enum):
    UNO = "uno"
    CHESS = "chess"
    MORRIS = "morris"
    TTT_MOVE = "ttt_move"
    PARTSHI = "partshi"


# Order in which a hand-emptying DrawTwo / WildDrawFour resolves
class UnoWinOrder(str, Enum):
    WIN_FIRST = "win_first"
    PENALTY_FIRST = "penalty_first"


class RuleOptions(BaseModel):
    """House-rule switches handed to the engines by the caller."""

    model_config = ConfigDict(frozen=True)

    uno_win_order: UnoWinOrder = UnoWinOrder.WIN_FIRST
    partshi_reroll_on_unusable_six: bool = True


class FrozenState(BaseModel):
    """Base for every game state: an immutable, JSON-serializable snapshot.

    Transitions never mutate a state; they build a new one with model_copy().
    """

    model_config = ConfigDict(frozen=True)

    log: str = ""
