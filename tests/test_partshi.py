"""Tests for the Partshi engine.

Critical scenarios tested:
- Entering from base needs exactly a six
- Captures on plain squares, co-existence on safe squares
- Extra roll after a six or a capture
- Home path entry and exact goal arithmetic
- Unusable rolls, with and without the six re-roll
- Winning with all four pieces home
"""

import random

import pytest

from duo_games.schemas.partshi import PieceZone
from duo_games.services.game.engine import partshi
from duo_games.services.game.engine.actions import PartshiMoveAction, RollAction
from duo_games.services.game.engine.validation import IllegalActionError

from .conftest import create_partshi_state, create_piece, pieces_in_base


def on_track(piece_id: int, progress: int):
    return create_piece(piece_id, PieceZone.TRACK, progress)


def at_goal(piece_id: int):
    return create_piece(piece_id, PieceZone.GOAL, 57)


class TestEntering:
    """Test leaving base."""

    @pytest.mark.parametrize("roll", [1, 2, 3, 4, 5])
    def test_base_piece_needs_six(self, roll: int):
        """Any roll other than six cannot bring a piece out of base."""
        player0 = (on_track(0, 10), *pieces_in_base(4)[1:])
        state = create_partshi_state(player0=player0, dice=roll)

        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_move(state, 1)
        assert exc.value.code == "NEED_SIX_TO_ENTER"

    def test_six_enters_on_start_square(self):
        """A six puts the piece on its start square and grants another roll."""
        state = partshi.apply_move(create_partshi_state(dice=6), 0)

        piece = state.players[0][0]
        assert piece.zone == PieceZone.TRACK
        assert state.track_square(0, piece) == 0
        assert state.turn == 0
        assert state.can_roll

    def test_second_player_enters_on_square_26(self):
        """Player 1 starts half a lap away from player 0."""
        state = partshi.apply_move(create_partshi_state(turn=1, dice=6), 2)

        assert state.track_square(1, state.players[1][2]) == 26


class TestRolling:
    """Test the roll step."""

    def test_roll_with_usable_value_waits_for_move(self):
        """A usable roll is stored and rolling is locked until a move."""
        state = partshi.apply_roll(create_partshi_state(), 6)

        assert state.dice == 6
        assert not state.can_roll
        assert state.turn == 0

    def test_unusable_roll_passes_turn(self):
        """With every piece in base a three is forfeited."""
        state = partshi.apply_roll(create_partshi_state(), 3)

        assert state.turn == 1
        assert state.dice is None
        assert state.can_roll
        assert state.log == "Rolled a 3 - No moves!"

    def test_unusable_six_rolls_again_by_default(self):
        """A six nobody can use still earns another roll."""
        player0 = (at_goal(0), at_goal(1), at_goal(2), create_piece(3, PieceZone.HOME_PATH, 55))
        state = partshi.apply_roll(create_partshi_state(player0=player0), 6)

        assert state.turn == 0
        assert state.can_roll

    def test_unusable_six_passes_when_reroll_disabled(self):
        """With the house rule off an unusable six is forfeited like any roll."""
        player0 = (at_goal(0), at_goal(1), at_goal(2), create_piece(3, PieceZone.HOME_PATH, 55))
        state = partshi.apply_roll(
            create_partshi_state(player0=player0), 6, reroll_on_unusable_six=False
        )

        assert state.turn == 1
        assert state.can_roll

    def test_cannot_roll_with_pending_move(self):
        """A pending roll must be used before rolling again."""
        state = create_partshi_state(player0=(on_track(0, 4), *pieces_in_base(4)[1:]), dice=2)

        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_roll(state, 3)
        assert exc.value.code == "CANNOT_ROLL"

    def test_random_roll_in_range(self, rng: random.Random):
        """Without a value the die is rolled from the injected random source."""
        player0 = tuple(on_track(i, 1 + i) for i in range(4))
        state = partshi.apply_roll(create_partshi_state(player0=player0), rng=rng)

        assert 1 <= state.dice <= 6

    def test_move_before_roll_rejected(self):
        """Moving needs a roll first."""
        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_move(create_partshi_state(), 0)
        assert exc.value.code == "MUST_ROLL_FIRST"


class TestMovement:
    """Test moving along the track and home path."""

    def test_plain_move_passes_turn(self):
        """A non-six move hands the turn over."""
        player0 = (on_track(0, 4), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=3), 0)

        assert state.players[0][0].progress == 7
        assert state.turn == 1
        assert state.dice is None
        assert state.can_roll

    def test_six_after_moving_rolls_again(self):
        """A six always earns another roll, move or not."""
        player0 = (on_track(0, 4), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=6), 0)

        assert state.turn == 0
        assert state.can_roll

    def test_second_player_wraps_around_the_ring(self):
        """Player 1 at progress 30 sits on square 4 and keeps counting from there."""
        player1 = (on_track(0, 30), *pieces_in_base(4)[1:])
        state = create_partshi_state(player1=player1, turn=1, dice=2)

        assert state.track_square(1, player1[0]) == 4
        state = partshi.apply_move(state, 0)
        assert state.track_square(1, state.players[1][0]) == 6

    def test_entering_home_path(self):
        """Passing the home entry moves the piece onto its private path."""
        player0 = (on_track(0, 48), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=5), 0)

        piece = state.players[0][0]
        assert piece.zone == PieceZone.HOME_PATH
        assert state.home_index(piece) == 2
        assert state.track_square(0, piece) is None

    def test_exact_roll_reaches_goal(self):
        """Progress 54 plus three lands exactly on the goal."""
        player0 = (create_piece(0, PieceZone.HOME_PATH, 54), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=3), 0)

        assert state.players[0][0].zone == PieceZone.GOAL

    def test_overshooting_goal_rejected(self):
        """Rolls past the goal fail instead of clamping."""
        player0 = (create_piece(0, PieceZone.HOME_PATH, 54), on_track(1, 3), *pieces_in_base(4)[2:])
        state = create_partshi_state(player0=player0, dice=5)

        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_move(state, 0)
        assert exc.value.code == "INVALID_MOVE"
        assert partshi.movable_pieces(state, 5) == [1]

    def test_unknown_piece_rejected(self):
        """Piece ids must belong to the player."""
        state = create_partshi_state(dice=6)
        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_move(state.model_copy(update={"players": ((), state.players[1])}), 0)
        assert exc.value.code == "PIECE_NOT_FOUND"


class TestCaptures:
    """Test landing on opponent pieces."""

    def test_landing_on_opponent_sends_it_to_base(self):
        """Square 10 is not safe: player 1's piece there goes back to base."""
        player0 = (on_track(0, 5), *pieces_in_base(4)[1:])
        player1 = (on_track(0, 36), *pieces_in_base(4)[1:])  # (26 + 36) % 52 == 10
        state = partshi.apply_move(create_partshi_state(player0, player1, dice=5), 0)

        assert state.players[1][0].zone == PieceZone.BASE
        assert state.players[1][0].progress == 0
        assert "Captured!" in state.log

    def test_capture_grants_another_roll(self):
        """The capturing player rolls again."""
        player0 = (on_track(0, 5), *pieces_in_base(4)[1:])
        player1 = (on_track(0, 36), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0, player1, dice=5), 0)

        assert state.turn == 0
        assert state.can_roll

    def test_every_opponent_piece_on_the_square_is_captured(self):
        """Two opponent pieces on one plain square both go home."""
        player0 = (on_track(0, 5), *pieces_in_base(4)[1:])
        player1 = (on_track(0, 36), on_track(1, 36), *pieces_in_base(4)[2:])
        state = partshi.apply_move(create_partshi_state(player0, player1, dice=5), 0)

        assert all(p.zone == PieceZone.BASE for p in state.players[1])

    def test_safe_square_allows_coexistence(self):
        """Square 8 is safe: both pieces stay and the turn passes."""
        player0 = (on_track(0, 5), *pieces_in_base(4)[1:])
        player1 = (on_track(0, 34), *pieces_in_base(4)[1:])  # (26 + 34) % 52 == 8
        state = partshi.apply_move(create_partshi_state(player0, player1, dice=3), 0)

        assert state.track_square(0, state.players[0][0]) == 8
        assert state.track_square(1, state.players[1][0]) == 8
        assert state.turn == 1

    def test_opponent_start_square_is_safe(self):
        """Entering pieces cannot be captured on square 26."""
        player0 = (on_track(0, 22), *pieces_in_base(4)[1:])
        player1 = (on_track(0, 0), *pieces_in_base(4)[1:])
        state = partshi.apply_move(create_partshi_state(player0, player1, dice=4), 0)

        assert state.players[1][0].zone == PieceZone.TRACK


class TestWin:
    """Test finishing the race."""

    def test_all_four_home_wins(self):
        """The fourth piece reaching the goal wins the game."""
        player0 = (at_goal(0), at_goal(1), at_goal(2), create_piece(3, PieceZone.HOME_PATH, 55))
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=2), 3)

        assert state.winner == 0
        assert state.is_finished
        assert state.log == "Player 1 Wins!"

    def test_three_home_is_not_a_win(self):
        """The game goes on while any piece is still out."""
        player0 = (at_goal(0), at_goal(1), create_piece(2, PieceZone.HOME_PATH, 52), on_track(3, 40))
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=2), 3)

        assert state.winner is None

    def test_finished_game_rejects_roll(self):
        """No rolls after a win."""
        player0 = (at_goal(0), at_goal(1), at_goal(2), create_piece(3, PieceZone.HOME_PATH, 55))
        state = partshi.apply_move(create_partshi_state(player0=player0, dice=2), 3)

        with pytest.raises(IllegalActionError) as exc:
            partshi.apply_roll(state, 4)
        assert exc.value.code == "GAME_FINISHED"

    def test_apply_action_full_turn(self):
        """Roll then move through the typed actions."""
        state = partshi.apply_action(create_partshi_state(), RollAction(value=6))
        state = partshi.apply_action(state, PartshiMoveAction(piece_id=0))

        assert state.players[0][0].zone == PieceZone.TRACK
        assert state.can_roll
