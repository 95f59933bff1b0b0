"""
Reactive Pong bot. It follows the ball but is deliberately imperfect:
it ignores small offsets, sometimes does nothing, and sometimes reacts at half speed.
"""

import random

from src.pong.physics import Paddle

# Offsets smaller than this are ignored to avoid jitter
DEAD_ZONE = 10.0
IDLE_CHANCE = 0.15
SLOW_CHANCE = 0.20
SLOW_FACTOR = 0.5


def paddle_step(paddle: Paddle, ball_x: float, rng: random.Random) -> float:
    """Horizontal displacement of the bot paddle for this tick"""
    offset = ball_x - paddle.center_x
    if abs(offset) <= DEAD_ZONE:
        return 0.0
    if rng.random() < IDLE_CHANCE:
        return 0.0
    speed = paddle.speed * SLOW_FACTOR if rng.random() < SLOW_CHANCE else paddle.speed
    return speed if offset > 0 else -speed
