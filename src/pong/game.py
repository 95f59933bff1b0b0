"""Pong game state: phases, the fixed-step tick, scoring and rally bookkeeping."""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Optional, Self

from src.core.exceptions import EngineInvariantViolation, InvalidActionError, MalformedInputError
from src.core.primitives import Vec2
from src.core.shared_types import Phase, Seat
from src.pong.physics import (
    BALL_SPEED_MAX,
    BALL_SPEED_MIN,
    PADDLE_HEIGHT,
    PADDLE_MARGIN,
    PADDLE_WIDTH,
    Ball,
    Paddle,
    bounce_off_side_walls,
    deflect,
    perturb,
    serve,
    touches_paddle,
)

logger = logging.getLogger(__name__)

WIN_SCORE = 5


@dataclass
class PongState:
    player_paddle: Paddle
    bot_paddle: Paddle
    ball: Ball
    field_width: float
    field_height: float
    ball_speed: float
    win_score: int = WIN_SCORE
    player_score: int = 0
    bot_score: int = 0
    phase: Phase = Phase.PAUSED
    winner: Optional[Seat] = None
    ball_hits_player: int = 0
    ball_hits_bot: int = 0
    current_rally: int = 0
    longest_rally: int = 0
    ticks: int = 0

    @classmethod
    def new_game(cls, field_width: float, field_height: float, ball_speed: float, win_score: int = WIN_SCORE) -> Self:
        paddle_x = field_width / 2 - PADDLE_WIDTH / 2
        return cls(
            player_paddle=Paddle(Vec2(paddle_x, field_height - PADDLE_HEIGHT - PADDLE_MARGIN)),
            bot_paddle=Paddle(Vec2(paddle_x, PADDLE_MARGIN)),
            ball=Ball(Vec2(field_width / 2, field_height / 2), Vec2(ball_speed, ball_speed)),
            field_width=field_width,
            field_height=field_height,
            ball_speed=ball_speed,
            win_score=win_score,
        )

    # --- PHASE CONTROL ---
    def start(self) -> None:
        if self.phase != Phase.PAUSED:
            raise InvalidActionError(f"Cannot start while {self.phase}")
        self.phase = Phase.PLAYING

    def pause(self) -> None:
        if self.phase != Phase.PLAYING:
            raise InvalidActionError(f"Cannot pause while {self.phase}")
        self.phase = Phase.PAUSED

    # --- INPUT ---
    def move_player_paddle(self, x: float) -> None:
        if self.phase != Phase.PLAYING:
            raise InvalidActionError("The paddle only moves while playing")
        self.player_paddle.move_to(x, self.field_width)

    def set_ball_speed(self, speed: float) -> None:
        """Rescale the current velocity so its direction is kept"""
        if self.phase == Phase.GAME_OVER:
            raise InvalidActionError("Game is over")
        if not BALL_SPEED_MIN <= speed <= BALL_SPEED_MAX:
            raise MalformedInputError(
                f"Ball speed {speed} outside of [{BALL_SPEED_MIN}, {BALL_SPEED_MAX}]"
            )
        factor = speed / self.ball_speed
        self.ball.velocity = self.ball.velocity.scaled(factor)
        self.ball_speed = speed

    # --- SIMULATION ---
    def tick(self, bot_dx: float, rng: random.Random) -> None:
        """
        One fixed simulation step (~16 ms)
        ----

        1. move the ball
        2. bounce off the side walls
        3. bounce off a paddle the ball is heading towards
        4. move the bot paddle
        5. score if the ball left the field at the top or bottom; end the game on the winning point
        """
        if self.phase != Phase.PLAYING:
            raise InvalidActionError(f"Cannot advance the simulation while {self.phase}")

        self.ticks += 1
        self.ball.integrate()
        bounce_off_side_walls(self.ball, self.field_width)

        if self.ball.velocity.y > 0 and touches_paddle(self.ball, self.player_paddle):
            deflect(self.ball, self.player_paddle, self.ball_speed)
            self.ball_hits_player += 1
            self._count_return()
        elif self.ball.velocity.y < 0 and touches_paddle(self.ball, self.bot_paddle):
            deflect(self.ball, self.bot_paddle, self.ball_speed)
            perturb(self.ball, rng)
            self.ball_hits_bot += 1
            self._count_return()

        self.bot_paddle.move_to(self.bot_paddle.position.x + bot_dx, self.field_width)

        if self.ball.position.y < 0:
            self._score(Seat.HUMAN, rng)
        elif self.ball.position.y > self.field_height:
            self._score(Seat.BOT, rng)

    def _count_return(self) -> None:
        self.current_rally += 1
        self.longest_rally = max(self.longest_rally, self.current_rally)

    def _score(self, scorer: Seat, rng: random.Random) -> None:
        if scorer == Seat.HUMAN:
            self.player_score += 1
        else:
            self.bot_score += 1
        self.current_rally = 0
        logger.debug("Pong point for %s: %d - %d", scorer, self.player_score, self.bot_score)

        # serve towards whoever just conceded: the bot defends the top edge
        self.ball = serve(
            self.field_width,
            self.field_height,
            self.ball_speed,
            towards_top=(scorer == Seat.HUMAN),
            rng=rng,
        )

        if max(self.player_score, self.bot_score) >= self.win_score:
            self.phase = Phase.GAME_OVER
            self.winner = scorer
            logger.info("Pong won by %s (%d - %d)", scorer, self.player_score, self.bot_score)

    def check_invariants(self) -> None:
        for name, paddle in (("player", self.player_paddle), ("bot", self.bot_paddle)):
            if not paddle.is_within(self.field_width):
                logger.error("%s paddle left the field: x=%s", name, paddle.position.x)
                raise EngineInvariantViolation(f"{name} paddle outside of the field")
        if not all(
            math.isfinite(value)
            for value in (*vars(self.ball.position).values(), *vars(self.ball.velocity).values())
        ):
            raise EngineInvariantViolation("Ball position/velocity is not finite")

    # --- SNAPSHOT ---
    def to_snapshot(self) -> dict[str, Any]:
        return {
            "player_paddle": self.player_paddle.to_dict(),
            "bot_paddle": self.bot_paddle.to_dict(),
            "ball": self.ball.to_dict(),
            "field_width": self.field_width,
            "field_height": self.field_height,
            "ball_speed": self.ball_speed,
            "win_score": self.win_score,
            "player_score": self.player_score,
            "bot_score": self.bot_score,
            "phase": self.phase.value,
            "winner": self.winner.value if self.winner else None,
            "ball_hits_player": self.ball_hits_player,
            "ball_hits_bot": self.ball_hits_bot,
            "current_rally": self.current_rally,
            "longest_rally": self.longest_rally,
            "ticks": self.ticks,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> Self:
        try:
            return cls(
                player_paddle=Paddle.from_dict(snapshot["player_paddle"]),
                bot_paddle=Paddle.from_dict(snapshot["bot_paddle"]),
                ball=Ball.from_dict(snapshot["ball"]),
                field_width=float(snapshot["field_width"]),
                field_height=float(snapshot["field_height"]),
                ball_speed=float(snapshot["ball_speed"]),
                win_score=int(snapshot["win_score"]),
                player_score=int(snapshot["player_score"]),
                bot_score=int(snapshot["bot_score"]),
                phase=Phase(snapshot["phase"]),
                winner=Seat(snapshot["winner"]) if snapshot["winner"] else None,
                ball_hits_player=int(snapshot["ball_hits_player"]),
                ball_hits_bot=int(snapshot["ball_hits_bot"]),
                current_rally=int(snapshot["current_rally"]),
                longest_rally=int(snapshot["longest_rally"]),
                ticks=int(snapshot["ticks"]),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid pong snapshot: {exc}") from exc
