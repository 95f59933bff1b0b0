"""In-memory stand-ins for the repositories, shared by the service and session tests."""

from typing import Iterator
from uuid import UUID, uuid4

import pytest

from src.core.config import Settings
from src.core.models import GameModel, GameOutcome


class MockRepository:
    """Mock the GameRepository using a dictionary of game models."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        game_id = uuid4()
        self._games[game_id] = game
        return game, game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        return game

    def delete_game(self, game_id: UUID) -> GameModel | None:
        return self._games.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._games.clear()


class MockStatsRepository:
    """Mock the StatsRepository with a plain list, oldest outcome first."""

    def __init__(self) -> None:
        self.outcomes: list[GameOutcome] = []

    def record_outcome(self, outcome: GameOutcome) -> UUID:
        self.outcomes.append(outcome)
        return uuid4()

    def recent_outcomes(self, player_id: str, limit: int = 10) -> list[GameOutcome]:
        mine = [o for o in self.outcomes if player_id in (o.player1_id, o.player2_id)]
        return mine[::-1][:limit]


@pytest.fixture
def mock_repository() -> Iterator[MockRepository]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def mock_stats() -> MockStatsRepository:
    return MockStatsRepository()


@pytest.fixture
def settings() -> Settings:
    """Seeded, and without reading a local .env file"""
    return Settings(_env_file=None, random_seed=1)
