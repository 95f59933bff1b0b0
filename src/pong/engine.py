"""
Pong behind the common engine contract.

Unlike the turn-based games, the human never waits for the bot: the bot paddle moves inside
every `Tick`. `current_seat` therefore always answers HUMAN.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.engine import Rejected, Terminal, run_transition
from src.core.exceptions import GameStateError, MalformedInputError
from src.core.primitives import new_rng, require_keys
from src.core.shared_types import GameType, Phase, Seat
from src.pong import bot
from src.pong.game import WIN_SCORE, PongState
from src.pong.physics import (
    BALL_SPEED_DEFAULT,
    BALL_SPEED_MAX,
    BALL_SPEED_MIN,
    FIELD_HEIGHT,
    FIELD_WIDTH,
    PADDLE_WIDTH,
)

logger = logging.getLogger(__name__)


# --- ACTIONS ---
@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class MovePaddle:
    """Human paddle target (left edge, pixels). Clamped to the field."""

    x: float


@dataclass(frozen=True)
class SetBallSpeed:
    speed: float


@dataclass(frozen=True)
class BotPaddleMove:
    """What the bot wants to do this tick: horizontal displacement of its paddle"""

    dx: float


PongAction = Start | Pause | Tick | MovePaddle | SetBallSpeed

ACTION_NAMES: dict[str, type] = {
    "start": Start,
    "pause": Pause,
    "tick": Tick,
    "move_paddle": MovePaddle,
    "set_ball_speed": SetBallSpeed,
}
ACTION_KINDS: dict[type, str] = {action_type: name for name, action_type in ACTION_NAMES.items()}


class PongConfig(BaseModel):
    ball_speed: float = Field(default=BALL_SPEED_DEFAULT, ge=BALL_SPEED_MIN, le=BALL_SPEED_MAX)
    win_score: int = Field(default=WIN_SCORE, ge=1)
    field_width: float = Field(default=FIELD_WIDTH, gt=PADDLE_WIDTH)
    field_height: float = Field(default=FIELD_HEIGHT, gt=0)


class PongEngine:
    game_type = GameType.PONG

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = new_rng(seed)

    def initialize(self, config: Optional[PongConfig] = None) -> PongState:
        config = config or PongConfig()
        logger.info("New pong game (ball speed %s, first to %d)", config.ball_speed, config.win_score)
        return PongState.new_game(
            config.field_width, config.field_height, config.ball_speed, config.win_score
        )

    def legal_actions(self, state: PongState) -> list[PongAction]:
        """
        Paddle position and ball speed are continuous. The listed MovePaddle / SetBallSpeed carry
        the current values; any value of the same kind is accepted.
        """
        if state.phase == Phase.PAUSED:
            return [Start(), SetBallSpeed(state.ball_speed)]
        if state.phase == Phase.PLAYING:
            return [
                Tick(),
                Pause(),
                MovePaddle(state.player_paddle.position.x),
                SetBallSpeed(state.ball_speed),
            ]
        return []

    def apply_action(self, state: PongState, action: PongAction) -> PongState | Rejected:
        if type(action) not in ACTION_KINDS:
            raise MalformedInputError(f"Unknown pong action {action!r}")
        if isinstance(action, MovePaddle) and not math.isfinite(action.x):
            raise MalformedInputError(f"Paddle position must be finite, got {action.x!r}")
        return run_transition(state, action, self._apply, PongState.check_invariants)

    def _apply(self, state: PongState, action: PongAction) -> None:
        match action:
            case Start():
                state.start()
            case Pause():
                state.pause()
            case MovePaddle(x=x):
                state.move_player_paddle(x)
            case SetBallSpeed(speed=speed):
                state.set_ball_speed(speed)
            case Tick():
                bot_move = self.bot_decision(state) if state.phase == Phase.PLAYING else BotPaddleMove(0.0)
                state.tick(bot_move.dx, self.rng)

    def bot_decision(self, state: PongState) -> BotPaddleMove:
        if state.phase == Phase.GAME_OVER:
            raise GameStateError("Game is over")
        return BotPaddleMove(bot.paddle_step(state.bot_paddle, state.ball.position.x, self.rng))

    def is_terminal(self, state: PongState) -> Terminal:
        if state.phase != Phase.GAME_OVER:
            return Terminal(False)
        return Terminal(True, winner=state.winner)

    def current_seat(self, state: PongState) -> Seat:
        return Seat.HUMAN

    # --- SNAPSHOTS / WIRE FORMAT ---
    def to_snapshot(self, state: PongState) -> dict[str, Any]:
        return state.to_snapshot()

    def from_snapshot(self, snapshot: dict[str, Any]) -> PongState:
        return PongState.from_snapshot(snapshot)

    def action_from_payload(self, payload: dict[str, Any]) -> PongAction:
        """payload: {"kind": "tick"} / {"kind": "move_paddle", "x": 120.0} / {"kind": "set_ball_speed", "speed": 4}"""
        kind = require_keys(payload, "kind")["kind"]
        if kind not in ACTION_NAMES:
            raise MalformedInputError(f"Unknown pong action kind {kind!r}")
        if kind == "move_paddle":
            return MovePaddle(_number(require_keys(payload, "x")["x"]))
        if kind == "set_ball_speed":
            return SetBallSpeed(_number(require_keys(payload, "speed")["speed"]))
        return ACTION_NAMES[kind]()

    def action_to_payload(self, action: PongAction) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": ACTION_KINDS[type(action)]}
        if isinstance(action, MovePaddle):
            payload["x"] = action.x
        elif isinstance(action, SetBallSpeed):
            payload["speed"] = action.speed
        return payload

    # --- OUTCOME ---
    def outcome_counters(self, state: PongState) -> dict[str, Any]:
        return {
            "ball_hits_player1": state.ball_hits_player,
            "ball_hits_player2": state.ball_hits_bot,
            "longest_rally": state.longest_rally,
        }

    def scores(self, state: PongState) -> tuple[int, int]:
        return state.player_score, state.bot_score


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInputError(f"Expected a number, got {value!r}")
    return float(value)
