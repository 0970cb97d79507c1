"""Tests for action validation.

Critical scenarios tested:
- Actions routed to the wrong game
- Finished games
- Seat ownership for every game
"""

import pytest

from duo_games.schemas.chess import Color
from duo_games.schemas.game_engine import FrozenState, GameType
from duo_games.schemas.morris import MorrisState
from duo_games.schemas.ttt_move import Mark, TTTPhase
from duo_games.schemas.uno import UnoState
from duo_games.services.game.engine import (
    ChessMoveAction,
    DrawCardAction,
    MorrisPlaceAction,
    RollAction,
    TTTDropAction,
    game_type_of,
    seat_to_move,
    validate_action,
)

from .conftest import chess_state, create_partshi_state, ttt_state


class TestActionGame:
    """Test matching actions to games."""

    @pytest.mark.parametrize(
        "action",
        [ChessMoveAction.from_uci("e2e4"), MorrisPlaceAction(index=0), RollAction(value=1)],
    )
    def test_foreign_actions_rejected_by_uno(self, uno_game: UnoState, action):
        """Only UNO actions apply to an UNO game."""
        result = validate_action(uno_game, action)

        assert not result.is_valid
        assert result.error_code == "ACTION_GAME_MISMATCH"

    def test_ttt_drop_rejected_by_morris(self):
        """Similar-looking boards still do not share actions."""
        result = validate_action(MorrisState(), TTTDropAction(index=4))

        assert result.error_code == "ACTION_GAME_MISMATCH"

    def test_matching_action_accepted(self, uno_game: UnoState):
        assert validate_action(uno_game, DrawCardAction()).is_valid

    def test_game_type_of_each_state(self, uno_game: UnoState, chess_game):
        assert game_type_of(uno_game) == GameType.UNO
        assert game_type_of(chess_game) == GameType.CHESS
        assert game_type_of(MorrisState()) == GameType.MORRIS
        assert game_type_of(create_partshi_state()) == GameType.PARTSHI

    def test_unknown_state_type(self):
        """The bare base class belongs to no game."""
        with pytest.raises(TypeError):
            game_type_of(FrozenState())


class TestFinished:
    """Test finished-game rejection."""

    def test_mismatch_reported_before_finished(self):
        """A wrong-game action is named as such even on a finished game."""
        state = MorrisState(winner=1)

        assert validate_action(state, RollAction()).error_code == "ACTION_GAME_MISMATCH"
        assert validate_action(state, MorrisPlaceAction(index=0)).error_code == "GAME_FINISHED"

    def test_finished_before_turn(self):
        """A finished game reports GAME_FINISHED whichever seat asks."""
        state = ttt_state([Mark.X, Mark.X, Mark.X, Mark.O, Mark.O, None, None, None, None],
                          turn=Mark.O, phase=TTTPhase.DROP).model_copy(update={"winner": Mark.X})

        assert validate_action(state, TTTDropAction(index=8), seat=0).error_code == (
            "GAME_FINISHED"
        )


class TestSeats:
    """Test which seat owns the turn."""

    def test_uno_seat_follows_current_player(self, uno_game: UnoState):
        state = uno_game.model_copy(update={"current_player_index": 1})

        assert seat_to_move(state) == 1
        assert validate_action(state, DrawCardAction(), seat=0).error_code == "NOT_YOUR_TURN"

    def test_chess_colors(self):
        assert seat_to_move(chess_state("4k3/8/8/8/8/8/8/4K3", Color.WHITE)) == 0
        assert seat_to_move(chess_state("4k3/8/8/8/8/8/8/4K3", Color.BLACK)) == 1

    def test_ttt_marks(self):
        assert seat_to_move(ttt_state([None] * 9, turn=Mark.X, phase=TTTPhase.DROP)) == 0
        assert seat_to_move(ttt_state([None] * 9, turn=Mark.O, phase=TTTPhase.DROP)) == 1

    def test_index_based_games(self):
        assert seat_to_move(MorrisState(turn=1)) == 1
        assert seat_to_move(create_partshi_state(turn=0)) == 0

    def test_no_seat_skips_turn_check(self):
        """Local play passes no seat and is never turned away."""
        state = MorrisState(turn=1)

        assert validate_action(state, MorrisPlaceAction(index=0)).is_valid
        assert validate_action(state, MorrisPlaceAction(index=0), seat=1).is_valid
