"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the persistence layer (lower) and the API layer (higher) send/receive these,
so neither has to know what an engine's state object looks like.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Type aliases to make the models easier to read
SeatName = str
PlayerId = str
Snapshot = dict[str, Any]


@dataclass
class GameModel:
    """Transport-safe representation of a game in progress (or archived once finished)."""

    game_type: str
    snapshot: Snapshot
    players: dict[SeatName, PlayerId]
    status: str
    started_at: datetime


@dataclass
class GameOutcome:
    """What gets reported to the statistics collaborator once a game is over."""

    game_type: str
    player1_id: PlayerId
    player2_id: PlayerId
    winner_id: Optional[PlayerId]
    is_draw: bool
    duration_seconds: int
    player1_score: int = 0
    player2_score: int = 0
    counters: dict[str, Any] = field(default_factory=dict)


@dataclass
class PairSummary:
    """Aggregated results of all games played by the same two players."""

    player1_id: PlayerId
    player2_id: PlayerId
    total_games: int
    player1_wins: int
    player2_wins: int
    draws: int
    games_by_type: dict[str, int]
    last_played: Optional[datetime]

    @property
    def player1_win_rate(self) -> float:
        return self.player1_wins / self.total_games if self.total_games else 0.0

    @property
    def player2_win_rate(self) -> float:
        return self.player2_wins / self.total_games if self.total_games else 0.0
