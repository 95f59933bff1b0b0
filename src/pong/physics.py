"""
Ball / paddle kinematics for Pong.

Coordinates are in pixels with the origin at the top-left of the field: the bot defends the top
edge, the human the bottom edge, and the side walls bounce the ball back.
"""

import random
from dataclasses import dataclass
from typing import Any, Self

from src.core.primitives import Vec2, clamp

FIELD_WIDTH = 360.0
FIELD_HEIGHT = 400.0
PADDLE_WIDTH = 80.0
PADDLE_HEIGHT = 15.0
PADDLE_MARGIN = 10.0
PADDLE_SPEED = 5.0
BALL_RADIUS = 8.0

BALL_SPEED_DEFAULT = 3.0
BALL_SPEED_MIN = 1.0
BALL_SPEED_MAX = 8.0

# A hit on the very edge of a paddle sends the ball off at this fraction of the ball speed sideways
MAX_DEFLECTION = 0.75
# The bot's returns are a bit sloppy
BOT_RETURN_PERTURBATION = 0.5


@dataclass
class Paddle:
    position: Vec2
    width: float = PADDLE_WIDTH
    height: float = PADDLE_HEIGHT
    speed: float = PADDLE_SPEED

    @property
    def center_x(self) -> float:
        return self.position.x + self.width / 2

    def move_to(self, x: float, field_width: float) -> None:
        """Paddles never leave the field: x stays within [0, field_width - width]"""
        self.position.x = float(clamp(x, 0.0, field_width - self.width))

    def is_within(self, field_width: float) -> bool:
        return 0.0 <= self.position.x <= field_width - self.width

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "width": self.width,
            "height": self.height,
            "speed": self.speed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            Vec2.from_dict(data["position"]),
            float(data["width"]),
            float(data["height"]),
            float(data["speed"]),
        )


@dataclass
class Ball:
    position: Vec2
    velocity: Vec2
    radius: float = BALL_RADIUS

    def integrate(self) -> None:
        """One fixed step: position += velocity"""
        self.position.x += self.velocity.x
        self.position.y += self.velocity.y

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "velocity": self.velocity.to_dict(),
            "radius": self.radius,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            Vec2.from_dict(data["position"]),
            Vec2.from_dict(data["velocity"]),
            float(data["radius"]),
        )


def bounce_off_side_walls(ball: Ball, field_width: float) -> bool:
    """Reflect velocity.x on contact with the left/right wall. The ball is pushed back inside so it cannot stick."""
    if ball.position.x <= ball.radius:
        ball.position.x = ball.radius
        ball.velocity.x = abs(ball.velocity.x)
        return True
    if ball.position.x >= field_width - ball.radius:
        ball.position.x = field_width - ball.radius
        ball.velocity.x = -abs(ball.velocity.x)
        return True
    return False


def touches_paddle(ball: Ball, paddle: Paddle) -> bool:
    """Ball's vertical extent overlaps the paddle band and its centre is over the paddle's span"""
    overlaps_band = (
        ball.position.y + ball.radius >= paddle.position.y
        and ball.position.y - ball.radius <= paddle.position.y + paddle.height
    )
    over_span = paddle.position.x <= ball.position.x <= paddle.position.x + paddle.width
    return overlaps_band and over_span


def deflect(ball: Ball, paddle: Paddle, ball_speed: float) -> None:
    """
    Reflect velocity.y and steer velocity.x by where the ball hit:
    centre of the paddle -> straight, edges -> up to MAX_DEFLECTION * ball_speed sideways.
    """
    offset = clamp((ball.position.x - paddle.center_x) / (paddle.width / 2), -1.0, 1.0)
    ball.velocity.y = -ball.velocity.y
    ball.velocity.x = offset * ball_speed * MAX_DEFLECTION


def perturb(ball: Ball, rng: random.Random) -> None:
    ball.velocity.x += rng.uniform(-BOT_RETURN_PERTURBATION, BOT_RETURN_PERTURBATION)


def serve(field_width: float, field_height: float, ball_speed: float, towards_top: bool, rng: random.Random) -> Ball:
    """Fresh ball in the centre, heading diagonally towards the requested side"""
    vx = ball_speed * rng.choice((-1.0, 1.0))
    vy = -ball_speed if towards_top else ball_speed
    return Ball(Vec2(field_width / 2, field_height / 2), Vec2(vx, vy))
