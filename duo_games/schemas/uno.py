from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from duo_games.schemas.game_engine import FrozenState

HAND_SIZE = 7
DECK_SIZE = 108


class CardColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    WILD = "wild"


class CardValue(str, Enum):
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "draw_two"
    WILD = "wild"
    WILD_DRAW_FOUR = "wild_draw_four"


class UnoStatus(str, Enum):
    SETUP = "setup"
    TURN_ACTION = "turn_action"
    FINISHED = "finished"


PLAYABLE_COLORS: tuple[CardColor, ...] = (
    CardColor.RED,
    CardColor.BLUE,
    CardColor.GREEN,
    CardColor.YELLOW,
)


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    color: CardColor
    value: CardValue

    @property
    def is_wild(self) -> bool:
        return self.color == CardColor.WILD


class Annotation(BaseModel):
    """Transient UI decoration (emoji reaction or shout); never read by the rules."""

    model_config = ConfigDict(frozen=True)

    text: str
    timestamp: float


class UnoPlayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    hand: tuple[Card, ...] = ()
    reaction: Annotation | None = None
    shout: Annotation | None = None


class UnoState(FrozenState):
    deck: tuple[Card, ...]  # top of the draw pile is the last card
    discard_pile: tuple[Card, ...]  # last card is the one in play
    players: tuple[UnoPlayer, UnoPlayer]
    current_player_index: int = 0
    direction: Literal[1, -1] = 1
    status: UnoStatus = UnoStatus.SETUP
    active_color: CardColor
    winner: UnoPlayer | None = None

    @property
    def top_card(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def current_player(self) -> UnoPlayer:
        return self.players[self.current_player_index]

    @property
    def is_finished(self) -> bool:
        return self.status == UnoStatus.FINISHED

    @property
    def turn(self) -> int:
        return self.current_player_index

    def card_count(self) -> int:
        return len(self.deck) + len(self.discard_pile) + sum(len(p.hand) for p in self.players)
