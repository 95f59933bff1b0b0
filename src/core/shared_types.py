"""
Type definitions used across layers
"""

from enum import StrEnum


class GameType(StrEnum):
    CHESS = "chess"
    CONNECT4 = "connect4"
    PONG = "pong"
    UNO = "uno"


class Phase(StrEnum):
    """Lifecycle of a single game. Only Pong ever uses PAUSED."""

    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Seat(StrEnum):
    """Every game is single-device: one human against one bot."""

    HUMAN = "human"
    BOT = "bot"

    @property
    def opponent(self) -> "Seat":
        return Seat.BOT if self == Seat.HUMAN else Seat.HUMAN


class GameStatus(StrEnum):
    """Stored alongside the snapshot so finished games can be told apart without an engine."""

    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
