"""Unit tests for /src/pong/game.py"""

import random

import pytest

from src.core.exceptions import EngineInvariantViolation, InvalidActionError, MalformedInputError
from src.core.primitives import Vec2
from src.core.shared_types import Phase, Seat
from src.pong.game import WIN_SCORE, PongState
from src.pong.physics import FIELD_HEIGHT, FIELD_WIDTH, PADDLE_WIDTH, Ball


@pytest.fixture
def state() -> PongState:
    pong = PongState.new_game(FIELD_WIDTH, FIELD_HEIGHT, ball_speed=3.0)
    pong.start()
    return pong


def test_new_game_layout() -> None:
    pong = PongState.new_game(FIELD_WIDTH, FIELD_HEIGHT, ball_speed=3.0)
    assert pong.phase == Phase.PAUSED
    assert pong.bot_paddle.position == Vec2(140.0, 10.0)
    assert pong.player_paddle.position == Vec2(140.0, 375.0)
    assert pong.ball.position == Vec2(180.0, 200.0)


def test_phases() -> None:
    pong = PongState.new_game(FIELD_WIDTH, FIELD_HEIGHT, ball_speed=3.0)
    with pytest.raises(InvalidActionError):
        pong.tick(0.0, random.Random(0))
    pong.start()
    with pytest.raises(InvalidActionError):
        pong.start()
    pong.pause()
    assert pong.phase == Phase.PAUSED


def test_human_scores_when_the_ball_leaves_at_the_top(state: PongState) -> None:
    state.bot_paddle.position.x = 0.0
    state.ball = Ball(Vec2(300.0, 2.0), Vec2(0.0, -3.0))
    state.tick(0.0, random.Random(0))
    assert (state.player_score, state.bot_score) == (1, 0)
    # re-served from the centre towards the side that conceded
    assert state.ball.position == Vec2(180.0, 200.0)
    assert state.ball.velocity.y < 0


def test_bot_scores_when_the_ball_leaves_at_the_bottom(state: PongState) -> None:
    state.player_paddle.position.x = 0.0
    state.ball = Ball(Vec2(300.0, FIELD_HEIGHT - 1.0), Vec2(0.0, 3.0))
    state.tick(0.0, random.Random(0))
    assert (state.player_score, state.bot_score) == (0, 1)
    assert state.ball.velocity.y > 0


def test_game_ends_on_the_exact_tick_of_the_winning_point(state: PongState) -> None:
    """The ball is kept going straight up; the bot paddle sits in the corner and never returns it"""
    rng = random.Random(2)
    state.bot_paddle.position.x = 0.0
    ticks = 0
    while state.phase == Phase.PLAYING:
        state.ball.velocity.x = 0.0
        state.ball.velocity.y = -abs(state.ball.velocity.y)
        state.tick(0.0, rng)
        ticks += 1
        assert (state.phase == Phase.GAME_OVER) == (state.player_score == WIN_SCORE)
        assert ticks < 10_000

    assert state.winner == Seat.HUMAN
    assert state.player_score == WIN_SCORE
    with pytest.raises(InvalidActionError):
        state.tick(0.0, rng)


def test_returns_count_as_a_rally(state: PongState) -> None:
    paddle = state.player_paddle
    state.ball = Ball(Vec2(paddle.center_x, paddle.position.y - 9.0), Vec2(0.0, 3.0))
    state.tick(0.0, random.Random(0))
    assert state.ball.velocity.y < 0
    assert state.ball_hits_player == 1
    assert state.current_rally == 1
    assert state.longest_rally == 1


def test_bot_paddle_moves_by_the_given_step(state: PongState) -> None:
    state.tick(5.0, random.Random(0))
    assert state.bot_paddle.position.x == 145.0
    state.tick(1000.0, random.Random(0))
    assert state.bot_paddle.position.x == FIELD_WIDTH - PADDLE_WIDTH


def test_move_player_paddle_is_clamped(state: PongState) -> None:
    state.move_player_paddle(-20.0)
    assert state.player_paddle.position.x == 0.0
    state.move_player_paddle(10_000.0)
    assert state.player_paddle.position.x == FIELD_WIDTH - PADDLE_WIDTH


def test_ball_speed_rescales_the_velocity(state: PongState) -> None:
    state.ball.velocity = Vec2(3.0, -3.0)
    state.set_ball_speed(6.0)
    assert state.ball.velocity == Vec2(6.0, -6.0)
    assert state.ball_speed == 6.0


@pytest.mark.parametrize("speed", [0.5, 8.5, float("nan")])
def test_ball_speed_out_of_range(state: PongState, speed: float) -> None:
    with pytest.raises(MalformedInputError):
        state.set_ball_speed(speed)


def test_paddle_outside_the_field_breaks_the_invariant(state: PongState) -> None:
    state.player_paddle.position.x = -1.0
    with pytest.raises(EngineInvariantViolation):
        state.check_invariants()


def test_snapshot_round_trip(state: PongState) -> None:
    state.tick(2.0, random.Random(0))
    assert PongState.from_snapshot(state.to_snapshot()) == state
