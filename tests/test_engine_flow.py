"""Game lifecycle, subscriptions, dice, movement and turn flow."""

import pytest

from mathquest.config import GameConfig
from mathquest.engine import GameEngine
from mathquest.events import EventType
from mathquest.exceptions import ConfigError
from mathquest.state import NO_ROLL, GameScreen, MathProblem, MessageType


def test_initial_state(engine):
    state = engine.state
    assert state.screen == GameScreen.SETUP
    assert state.round == 1
    assert state.moves_in_round == 0
    assert state.players == ()
    assert state.tiles == ()


class TestAvatarSelection:
    def test_start_avatar_selection_merges_config(self, engine):
        assert engine.start_avatar_selection(2, config={"negativePointsEnabled": False, "timer_enabled": True})

        state = engine.state
        assert state.screen == GameScreen.AVATAR_SELECTION
        assert state.avatar_selection_player_count == 2
        assert state.config.negative_points_enabled is False
        assert state.config.timer_enabled is True
        assert state.config.seed == 42

    def test_unknown_option_raises(self, engine):
        with pytest.raises(ConfigError):
            engine.start_avatar_selection(2, config={"turboMode": True})

    def test_only_from_setup(self, engine):
        engine.start_avatar_selection(2)
        assert engine.start_avatar_selection(3) is False
        assert engine.state.avatar_selection_player_count == 2

    def test_selection_flow_starts_game(self, engine, three_problems):
        engine.start_avatar_selection(2, problems=three_problems)

        engine.select_avatar(4, "#000000")
        assert engine.state.screen == GameScreen.AVATAR_SELECTION
        assert engine.state.avatar_selection_current_player == 1
        assert engine.state.selected_avatars == (4,)

        engine.select_avatar(1, "#ffffff")
        state = engine.state
        assert state.screen == GameScreen.PLAYING
        assert [p.avatar_index for p in state.players] == [4, 1]
        assert [p.color for p in state.players] == ["#000000", "#ffffff"]
        assert len(state.tiles) == 40
        assert len(state.problem_pool.pool) == 3
        assert state.imported_problems is three_problems

    def test_select_avatar_outside_selection_is_noop(self, engine):
        assert engine.select_avatar(0, "#000000") is False
        assert engine.state.screen == GameScreen.SETUP


def test_legacy_start_game(engine):
    engine.start_game(3, config={"maxRounds": 5})

    state = engine.state
    assert state.screen == GameScreen.PLAYING
    assert [p.name for p in state.players] == ["Player 1", "Player 2", "Player 3"]
    assert state.config.max_rounds == 5
    assert state.current_player == 0
    assert engine.event_log.events[-1].event_type == EventType.GAME_START


def test_same_seed_same_board():
    first = GameEngine(GameConfig(seed=7))
    second = GameEngine(GameConfig(seed=7))
    first.start_game(2)
    second.start_game(2)
    assert first.state.tiles == second.state.tiles


class TestSubscriptions:
    def test_listener_receives_each_snapshot(self, playing_engine):
        seen = []
        playing_engine.subscribe(seen.append)

        playing_engine.set_time_left(12)
        playing_engine.toggle_pause()

        assert len(seen) == 2
        assert seen[0].time_left == 12
        assert seen[1].is_paused is True
        assert seen[-1] is playing_engine.state

    def test_unsubscribe_removes_one_registration(self, playing_engine):
        calls = []
        listener = calls.append
        unsubscribe_first = playing_engine.subscribe(listener)
        playing_engine.subscribe(listener)

        playing_engine.close_message()
        assert len(calls) == 2

        unsubscribe_first()
        unsubscribe_first()
        playing_engine.close_message()
        assert len(calls) == 3

    def test_noop_does_not_notify(self, playing_engine):
        calls = []
        playing_engine.subscribe(calls.append)

        assert playing_engine.submit_answer(5) is False
        playing_engine.submit_answer_timeout()
        assert playing_engine.confirm_teleport() is False

        assert calls == []

    def test_snapshots_are_not_mutated(self, playing_engine):
        before = playing_engine.state
        playing_engine.move_player_step(0, 3)
        assert before.players[0].position == 0
        assert playing_engine.state.players[0].position == 3

    def test_listener_errors_propagate(self, playing_engine):
        def broken(state):
            raise RuntimeError("boom")

        playing_engine.subscribe(broken)
        with pytest.raises(RuntimeError):
            playing_engine.close_message()


class TestDice:
    def test_roll_returns_die_value(self, playing_engine):
        value = playing_engine.roll_dice()
        assert 1 <= value <= 6
        assert playing_engine.state.is_rolling is True

    def test_double_roll_rejected(self, playing_engine):
        playing_engine.roll_dice()
        assert playing_engine.roll_dice() == NO_ROLL

    def test_pending_value_blocks_roll(self, playing_engine):
        value = playing_engine.roll_dice()
        playing_engine.complete_dice_roll(value)

        assert playing_engine.state.dice_value == value
        assert playing_engine.state.is_rolling is False
        assert playing_engine.roll_dice() == NO_ROLL

    def test_moving_player_blocks_roll(self, playing_engine):
        playing_engine.start_moving_player(0)
        assert playing_engine.roll_dice() == NO_ROLL
        playing_engine.complete_player_movement()
        assert playing_engine.roll_dice() != NO_ROLL

    def test_open_problem_blocks_roll(self, playing_engine, stage):
        stage(playing_engine, math_problem=MathProblem("1 + 1", 2, 10))
        assert playing_engine.roll_dice() == NO_ROLL

    def test_no_roll_before_game(self, engine):
        assert engine.roll_dice() == NO_ROLL

    def test_set_rolling(self, playing_engine):
        playing_engine.set_rolling(True)
        assert playing_engine.roll_dice() == NO_ROLL
        playing_engine.set_rolling(False)
        assert playing_engine.roll_dice() != NO_ROLL


class TestMovement:
    def test_wrap_pays_pass_start_once(self, playing_engine, stage_player):
        """From 38, five steps end on 3 with exactly one START bonus."""
        stage_player(playing_engine, 0, position=38)
        passes = 0

        playing_engine.start_moving_player(0)
        for _ in range(5):
            position = playing_engine.state.players[0].position
            if playing_engine.move_player_step(0, (position + 1) % 40):
                passes += 1
                playing_engine.apply_pass_start_bonus(0)
        playing_engine.complete_player_movement()

        player = playing_engine.state.players[0]
        assert player.position == 3
        assert passes == 1
        assert player.score == 50
        assert player.coins == 30
        assert playing_engine.state.banner_message.text == "Passed START! +50 points!"
        assert playing_engine.state.moving_player is None

    def test_unknown_player_step(self, playing_engine):
        assert playing_engine.move_player_step(9, 3) is False

    def test_set_player_position(self, playing_engine):
        assert playing_engine.set_player_position(1, 39)
        assert playing_engine.state.players[1].position == 39
        assert playing_engine.set_player_position(1, 40) is False


class TestNextTurn:
    def test_next_turn_clears_turn_state(self, playing_engine):
        value = playing_engine.roll_dice()
        playing_engine.complete_dice_roll(value)
        playing_engine.open_shop()

        playing_engine.next_turn()

        state = playing_engine.state
        assert state.current_player == 1
        assert state.moves_in_round == 1
        assert state.dice_value == 0
        assert state.message is None
        assert state.shop_open is False

    def test_round_accounting(self, four_player_engine):
        for _ in range(4):
            four_player_engine.next_turn()

        assert four_player_engine.state.round == 2
        assert four_player_engine.state.moves_in_round == 0
        assert four_player_engine.state.current_player == 0

    def test_game_over_after_max_rounds(self, engine):
        engine.start_game(2, config={"max_rounds": 2})
        for _ in range(3):
            engine.next_turn()
        before = engine.state

        engine.next_turn()

        after = engine.state
        assert after.screen == GameScreen.GAME_OVER
        assert after.current_player == before.current_player
        assert after.round == before.round
        assert after.players == before.players
        assert engine.event_log.events[-1].event_type == EventType.GAME_END

    def test_next_turn_after_game_over_is_noop(self, engine):
        engine.start_game(1, config={"max_rounds": 1})
        engine.next_turn()
        over = engine.state

        engine.next_turn()
        assert engine.state is over


def test_reset_game(playing_engine):
    playing_engine.move_player_step(0, 4)
    calls = []
    playing_engine.subscribe(calls.append)

    playing_engine.reset_game()

    state = playing_engine.state
    assert state.screen == GameScreen.SETUP
    assert state.players == ()
    assert state.round == 1
    assert state.config == playing_engine.base_config
    assert len(calls) == 1


def test_messages(playing_engine):
    playing_engine.set_banner_message("Hello", MessageType.SUCCESS)
    assert playing_engine.state.banner_message.text == "Hello"
    playing_engine.clear_banner_message()
    assert playing_engine.state.banner_message is None
