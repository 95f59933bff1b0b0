"""Protocol repositories: what the service layer needs from storage, whatever the backend."""

from typing import Protocol
from uuid import UUID

from src.core.models import GameModel, GameOutcome, PairSummary


class GameRepository(Protocol):
    """Persistence of opaque game snapshots"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Replace the snapshot / status of an existing record."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        ...


class StatsRepository(Protocol):
    """The statistics collaborator: finished games only."""

    def record_outcome(self, outcome: GameOutcome) -> UUID:
        """Store the outcome of a finished game and return the record ID."""
        ...

    def recent_outcomes(self, player_id: str, limit: int = 10) -> list[GameOutcome]:
        """Latest outcomes the player took part in, newest first."""
        ...

    def outcomes_by_type(self, player_id: str, game_type: str) -> list[GameOutcome]:
        ...

    def pair_summary(self, player1_id: str, player2_id: str) -> PairSummary:
        """Head-to-head results of two players, whichever seat each of them had."""
        ...
