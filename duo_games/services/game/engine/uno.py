"""UNO rules for two players.

Covers deck building, play validity, special-card effects, reshuffle-aware
drawing and win detection. Every function returns a new UnoState.
"""

import logging
import random
from itertools import count

from duo_games.schemas.game_engine import RuleOptions, UnoWinOrder
from duo_games.schemas.uno import (
    HAND_SIZE,
    PLAYABLE_COLORS,
    Card,
    CardColor,
    CardValue,
    UnoPlayer,
    UnoState,
    UnoStatus,
)

from .actions import DrawCardAction, PlayCardAction, UnoAction
from .validation import IllegalActionError

logger = logging.getLogger(__name__)

# Each color carries one zero and two of everything below
PAIRED_VALUES: tuple[CardValue, ...] = (
    CardValue.ONE,
    CardValue.TWO,
    CardValue.THREE,
    CardValue.FOUR,
    CardValue.FIVE,
    CardValue.SIX,
    CardValue.SEVEN,
    CardValue.EIGHT,
    CardValue.NINE,
    CardValue.SKIP,
    CardValue.REVERSE,
    CardValue.DRAW_TWO,
)

WILDS_PER_KIND = 4

SKIPPING_VALUES = frozenset(
    {CardValue.SKIP, CardValue.REVERSE, CardValue.DRAW_TWO, CardValue.WILD_DRAW_FOUR}
)

DRAW_PENALTIES: dict[CardValue, int] = {
    CardValue.DRAW_TWO: 2,
    CardValue.WILD_DRAW_FOUR: 4,
}

DEFAULT_PLAYER_NAMES = ("Player 1", "Player 2")


def shuffle(cards: tuple[Card, ...] | list[Card], rng: random.Random | None = None) -> tuple[Card, ...]:
    shuffled = list(cards)
    (rng or random.Random()).shuffle(shuffled)
    return tuple(shuffled)


def create_deck(rng: random.Random | None = None) -> tuple[Card, ...]:
    """Build the 108-card deck with unique ids and return it shuffled."""
    ids = count()
    cards: list[Card] = []

    for color in PLAYABLE_COLORS:
        cards.append(Card(id=f"c-{next(ids)}", color=color, value=CardValue.ZERO))
        for value in PAIRED_VALUES:
            cards.append(Card(id=f"c-{next(ids)}", color=color, value=value))
            cards.append(Card(id=f"c-{next(ids)}", color=color, value=value))

    for _ in range(WILDS_PER_KIND):
        cards.append(Card(id=f"c-{next(ids)}", color=CardColor.WILD, value=CardValue.WILD))
        cards.append(
            Card(id=f"c-{next(ids)}", color=CardColor.WILD, value=CardValue.WILD_DRAW_FOUR)
        )

    logger.debug("Deck created with %d cards", len(cards))
    return shuffle(cards, rng)


def is_valid_move(card: Card, top_card: Card, active_color: CardColor) -> bool:
    """A card is playable if it is wild, matches the active color, or matches the top value."""
    if card.color == CardColor.WILD:
        return True
    if card.color == active_color:
        return True
    return card.value == top_card.value


def initial_state(
    rng: random.Random | None = None,
    player_names: tuple[str, str] = DEFAULT_PLAYER_NAMES,
) -> UnoState:
    """Shuffle, deal seven cards each and turn over a non-wild starter."""
    deck = list(create_deck(rng))
    first_hand = tuple(deck[:HAND_SIZE])
    second_hand = tuple(deck[HAND_SIZE : 2 * HAND_SIZE])
    deck = deck[2 * HAND_SIZE :]

    starter = deck.pop()
    while starter.is_wild:
        logger.debug("Wild starter %s returned to the deck", starter.id)
        deck.insert(0, starter)
        deck = list(shuffle(deck, rng))
        starter = deck.pop()

    players = (
        UnoPlayer(id=0, name=player_names[0], hand=first_hand),
        UnoPlayer(id=1, name=player_names[1], hand=second_hand),
    )
    logger.info("UNO game dealt: starter=%s %s", starter.color.value, starter.value.value)
    return UnoState(
        deck=tuple(deck),
        discard_pile=(starter,),
        players=players,
        current_player_index=0,
        direction=1,
        status=UnoStatus.TURN_ACTION,
        active_color=starter.color,
        winner=None,
        log="New Game Started!",
    )


def _replace_player(
    players: tuple[UnoPlayer, ...], index: int, player: UnoPlayer
) -> tuple[UnoPlayer, ...]:
    return tuple(player if i == index else p for i, p in enumerate(players))


def _next_player_index(state: UnoState, skip: bool = False) -> int:
    step = state.direction * (2 if skip else 1)
    return (state.current_player_index + step) % len(state.players)


def draw_cards(
    state: UnoState,
    amount: int,
    player_index: int,
    rng: random.Random | None = None,
) -> UnoState:
    """Move up to `amount` cards from the deck into a player's hand.

    When the deck runs dry, every discard except the top card is reshuffled into
    a new deck. When both piles are exhausted drawing simply stops.
    """
    deck = list(state.deck)
    discard = list(state.discard_pile)
    hand = list(state.players[player_index].hand)

    for _ in range(amount):
        if not deck:
            if len(discard) <= 1:
                logger.warning(
                    "Deck and discard exhausted: player=%d drew %d of %d",
                    player_index,
                    len(hand) - len(state.players[player_index].hand),
                    amount,
                )
                break
            top = discard.pop()
            deck = list(shuffle(discard, rng))
            discard = [top]
            logger.info("Reshuffled %d discards into the deck", len(deck))
        hand.append(deck.pop())

    player = state.players[player_index].model_copy(update={"hand": tuple(hand)})
    return state.model_copy(
        update={
            "deck": tuple(deck),
            "discard_pile": tuple(discard),
            "players": _replace_player(state.players, player_index, player),
        }
    )


def _ensure_playing(state: UnoState) -> None:
    if state.status == UnoStatus.FINISHED:
        raise IllegalActionError("GAME_FINISHED", "Game has already finished")
    if state.status == UnoStatus.SETUP:
        raise IllegalActionError("GAME_NOT_STARTED", "Cards have not been dealt yet")


def _finish(state: UnoState, winner_index: int) -> UnoState:
    winner = state.players[winner_index]
    logger.info("UNO winner: player=%d (%s)", winner_index, winner.name)
    return state.model_copy(
        update={
            "winner": winner,
            "status": UnoStatus.FINISHED,
            "log": f"{winner.name} won the game!",
        }
    )


def apply_play(
    state: UnoState,
    card_id: str,
    color_choice: CardColor | None = None,
    *,
    win_order: UnoWinOrder = UnoWinOrder.WIN_FIRST,
    rng: random.Random | None = None,
) -> UnoState:
    """Play a card from the current player's hand and resolve its effect.

    Raises:
        IllegalActionError: the card is not held, does not match, or a wild card
            was played without a color choice.
    """
    _ensure_playing(state)
    player_index = state.current_player_index
    player = state.current_player

    card = next((c for c in player.hand if c.id == card_id), None)
    if card is None:
        raise IllegalActionError("CARD_NOT_IN_HAND", f"Card '{card_id}' is not in your hand")

    top = state.top_card
    if top is not None and not is_valid_move(card, top, state.active_color):
        raise IllegalActionError(
            "INVALID_CARD",
            f"{card.color.value} {card.value.value} cannot be played on "
            f"{state.active_color.value} {top.value.value}",
        )

    if card.is_wild:
        if color_choice is None or color_choice == CardColor.WILD:
            raise IllegalActionError(
                "COLOR_CHOICE_REQUIRED", "Choose red, blue, green or yellow for a wild card"
            )
        active_color = color_choice
    else:
        active_color = card.color

    remaining = tuple(c for c in player.hand if c.id != card.id)
    log = f"{player.name} played {card.value.value}"
    if len(remaining) == 1:
        log += " - UNO!"

    new_state = state.model_copy(
        update={
            "players": _replace_player(
                state.players, player_index, player.model_copy(update={"hand": remaining})
            ),
            "discard_pile": (*state.discard_pile, card),
            "active_color": active_color,
            "log": log,
        }
    )
    logger.debug(
        "Card played: player=%d, card=%s, cards_left=%d", player_index, card.id, len(remaining)
    )

    if not remaining and win_order == UnoWinOrder.WIN_FIRST:
        return _finish(new_state, player_index)

    # with two players a reverse hands the turn straight back, same as a skip
    skip = card.value in SKIPPING_VALUES
    penalty = DRAW_PENALTIES.get(card.value, 0)
    if penalty:
        victim_index = (player_index + state.direction) % len(state.players)
        new_state = draw_cards(new_state, penalty, victim_index, rng)
        log += f" - {new_state.players[victim_index].name} +{penalty}"
        logger.info("Draw penalty: player=%d draws %d", victim_index, penalty)

    if not remaining:
        return _finish(new_state, player_index)

    return new_state.model_copy(
        update={
            "current_player_index": _next_player_index(new_state, skip),
            "status": UnoStatus.TURN_ACTION,
            "log": log,
        }
    )


def apply_draw(state: UnoState, rng: random.Random | None = None) -> UnoState:
    """Draw a single card for the current player; the turn always passes."""
    _ensure_playing(state)
    player_index = state.current_player_index
    hand_size = len(state.current_player.hand)

    new_state = draw_cards(state, 1, player_index, rng)
    player = new_state.players[player_index]

    if len(player.hand) == hand_size:
        log = "Deck empty, cannot draw!"
    else:
        drawn = player.hand[-1]
        top = new_state.top_card
        if top is not None and is_valid_move(drawn, top, new_state.active_color):
            log = f"{player.name} drew a playable card!"
        else:
            log = f"{player.name} drew a card"

    logger.debug("Draw: player=%d, hand_size=%d", player_index, len(player.hand))
    return new_state.model_copy(
        update={
            "current_player_index": _next_player_index(new_state),
            "status": UnoStatus.TURN_ACTION,
            "log": log,
        }
    )


def apply_action(
    state: UnoState,
    action: UnoAction,
    *,
    options: RuleOptions | None = None,
    rng: random.Random | None = None,
) -> UnoState:
    options = options or RuleOptions()
    if isinstance(action, PlayCardAction):
        return apply_play(
            state,
            action.card_id,
            action.color_choice,
            win_order=options.uno_win_order,
            rng=rng,
        )
    if isinstance(action, DrawCardAction):
        return apply_draw(state, rng)
    raise IllegalActionError("UNKNOWN_ACTION", f"Unknown UNO action: {type(action).__name__}")
