"""Geometry and randomness primitives shared by the engines"""

import random
from dataclasses import dataclass
from typing import Any, Optional, Self

from src.core.exceptions import MalformedInputError

# Grid step (column/file delta, row/rank delta)
Vector = tuple[int, int]


@dataclass
class Vec2:
    """Continuous 2D point or velocity (Pong)"""

    x: float
    y: float

    def scaled(self, factor: float) -> Self:
        return type(self)(self.x * factor, self.y * factor)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(float(data["x"]), float(data["y"]))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def new_rng(seed: Optional[int] = None) -> random.Random:
    """Every engine owns exactly one of these. seed=None draws from OS entropy."""
    return random.Random(seed)


def require_keys(payload: Any, *keys: str) -> dict[str, Any]:
    """Shape check for wire payloads / snapshots before any field is read."""
    if not isinstance(payload, dict):
        raise MalformedInputError(f"Expected a mapping, got {type(payload).__name__}")
    missing = [key for key in keys if key not in payload]
    if missing:
        raise MalformedInputError(f"Missing field(s): {', '.join(missing)}")
    return payload
