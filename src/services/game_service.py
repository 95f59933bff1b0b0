"""Orchestration of communication from API models to the engines and persistence layers (and the reverse direction)."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from src.api.models import (
    ActionRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameRequest,
    GameResponse,
    LegalActionsRequest,
    LegalActionsResponse,
)
from src.core.config import Settings, get_settings
from src.core.engine import GameEngine, Rejected
from src.core.exceptions import GameStateError, InvalidActionError, NotYourTurnError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import GameStatus, Seat
from src.db.repository import GameRepository, StatsRepository
from src.services.outcomes import build_outcome
from src.services.registry import build_engine, parse_config

logger = logging.getLogger(__name__)


class GameService:
    """
    Request/response orchestration for all games.

    Nothing is kept between calls: every request loads the snapshot, rebuilds the engine state,
    applies one transition and stores the result.
    """

    def __init__(
        self,
        repository: GameRepository,
        stats: StatsRepository,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repo = repository
        self.stats = stats
        self.settings = settings or get_settings()

    # -- Request logic ---
    def create_game(self, request: CreateGameRequest) -> GameResponse:
        """Human player requested a new game against the bot."""

        config = parse_config(request.game_type, request.config)
        engine = self._engine(request.game_type)
        state = engine.initialize(config)

        model = GameModel(
            game_type=request.game_type,
            snapshot=engine.to_snapshot(state),
            players={Seat.HUMAN.value: request.player_id, Seat.BOT.value: request.bot_id},
            status=GameStatus.IN_PROGRESS,
            started_at=datetime.now(timezone.utc),
        )
        stored_game, game_id = self.repo.create_game(model)
        logger.info("Created %s game %s for %s", request.game_type, game_id, request.player_id)
        return self._create_game_response(game_id, stored_game, engine, state)

    def get_game(self, request: GameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in a "polling" loop by a frontend, e.g. to find out when the bot has moved.
        """
        model = self._fetch_game(request.game_id)
        engine = self._engine(model.game_type)
        state = engine.from_snapshot(model.snapshot)
        return self._create_game_response(request.game_id, model, engine, state)

    def legal_actions(self, request: LegalActionsRequest) -> LegalActionsResponse:
        """Actions the player may submit right now. Empty when it is not their turn."""
        model = self._fetch_game(request.game_id)
        engine = self._engine(model.game_type)
        state = engine.from_snapshot(model.snapshot)

        seat = self._seat_of(model, request.player_id)
        actions: list[dict[str, Any]] = []
        if not engine.is_terminal(state).terminal and engine.current_seat(state) == seat:
            actions = [engine.action_to_payload(action) for action in engine.legal_actions(state)]
        return LegalActionsResponse(
            game_id=request.game_id, player_id=request.player_id, legal_actions=actions
        )

    def submit_action(self, request: ActionRequest) -> GameResponse:
        """
        Human action attempt.
        ----
        Raises InvalidActionError when the rules refuse it; nothing is stored in that case.
        """
        model = self._fetch_game(request.game_id)
        engine = self._engine(model.game_type)
        state = self._playable_state(engine, model)

        seat = self._seat_of(model, request.player_id)
        if engine.current_seat(state) != seat:
            raise NotYourTurnError(f"It is not {request.player_id}'s turn.")

        action = engine.action_from_payload(request.action)
        return self._apply(request.game_id, model, engine, state, action)

    def play_bot_turn(self, request: GameRequest) -> GameResponse:
        """Let the bot take its turn (the caller decides how long the bot "thinks")."""
        model = self._fetch_game(request.game_id)
        engine = self._engine(model.game_type)
        state = self._playable_state(engine, model)

        if engine.current_seat(state) != Seat.BOT:
            raise NotYourTurnError("The bot is not the one to move.")
        action = engine.bot_decision(state)
        return self._apply(request.game_id, model, engine, state, action)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")

    # -- Internal helpers --
    def _apply(self, game_id: UUID, model: GameModel, engine: GameEngine, state: Any, action: Any) -> GameResponse:
        result = engine.apply_action(state, action)
        if isinstance(result, Rejected):
            raise InvalidActionError(result.reason)

        terminal = engine.is_terminal(result)
        after_action = GameModel(
            game_type=model.game_type,
            snapshot=engine.to_snapshot(result),
            players=model.players,
            status=GameStatus.FINISHED if terminal.terminal else GameStatus.IN_PROGRESS,
            started_at=model.started_at,
        )
        self.repo.update_game(game_id, after_action)

        # Finished games refuse further actions, so this runs once per game
        if terminal.terminal:
            self.stats.record_outcome(build_outcome(engine, result, after_action))
            logger.info("Game %s finished", game_id)
        return self._create_game_response(game_id, after_action, engine, result)

    def _playable_state(self, engine: GameEngine, model: GameModel) -> Any:
        state = engine.from_snapshot(model.snapshot)
        if model.status == GameStatus.FINISHED or engine.is_terminal(state).terminal:
            raise GameStateError("Game is already over.")
        return state

    def _engine(self, game_type: str) -> GameEngine:
        return build_engine(game_type, self.settings.random_seed)

    def _seat_of(self, model: GameModel, player_id: str) -> Seat:
        for seat, seated_player in model.players.items():
            if seated_player == player_id:
                return Seat(seat)
        raise NotYourTurnError(f"{player_id} is not playing in this game.")

    def _create_game_response(self, game_id: UUID, model: GameModel, engine: GameEngine, state: Any) -> GameResponse:
        """Convert info in GameModel (and the rebuilt state) to a GameResponse."""
        terminal = engine.is_terminal(state)
        return GameResponse(
            game_id=game_id,
            game_type=model.game_type,
            players=model.players,
            state=model.snapshot,
            status=model.status,
            to_move=None if terminal.terminal else engine.current_seat(state),
            winner_id=model.players[terminal.winner] if terminal.winner else None,
            is_draw=terminal.draw,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
