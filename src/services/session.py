"""
Live, single-device game loop
----

One `GameSession` owns one engine state. Human input is applied synchronously; the bot's turn is
scheduled after a short delay so it looks like it is thinking; Pong ticks on a fixed interval while
playing. Nothing here runs in parallel: each callback runs one transition to completion.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Self
from uuid import UUID

from src.core.config import Settings, get_settings
from src.core.engine import GameEngine, Rejected
from src.core.exceptions import (
    EngineInvariantViolation,
    GameStateError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.models import GameModel
from src.core.shared_types import GameStatus, GameType, Phase, Seat
from src.db.repository import GameRepository, StatsRepository
from src.pong.engine import Tick
from src.services.outcomes import build_outcome
from src.services.registry import build_engine, parse_config
from src.services.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class GameSession:
    def __init__(
        self,
        game_id: UUID,
        model: GameModel,
        engine: GameEngine,
        state: Any,
        repository: GameRepository,
        stats: StatsRepository,
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
    ) -> None:
        self.game_id = game_id
        self.model = model
        self.engine = engine
        self.repo = repository
        self.stats = stats
        self.scheduler = scheduler
        self.settings = settings or get_settings()

        self._state = state
        self._pending: Optional[ScheduledTask] = None
        self._closed = False
        # A game that was already over when loaded had its outcome reported back then
        self._outcome_reported = engine.is_terminal(state).terminal

    # --- LIFECYCLE ---
    @classmethod
    def start(
        cls,
        game_type: GameType,
        player_id: str,
        bot_id: str,
        repository: GameRepository,
        stats: StatsRepository,
        scheduler: Scheduler,
        config: Optional[dict[str, Any]] = None,
        settings: Optional[Settings] = None,
    ) -> Self:
        settings = settings or get_settings()
        engine = build_engine(game_type, settings.random_seed)
        state = engine.initialize(parse_config(game_type, config))
        model = GameModel(
            game_type=GameType(game_type),
            snapshot=engine.to_snapshot(state),
            players={Seat.HUMAN.value: player_id, Seat.BOT.value: bot_id},
            status=GameStatus.IN_PROGRESS,
            started_at=datetime.now(timezone.utc),
        )
        model, game_id = repository.create_game(model)
        session = cls(game_id, model, engine, state, repository, stats, scheduler, settings)
        session._schedule_next()
        logger.info("Session started: %s game %s", game_type, game_id)
        return session

    @classmethod
    def resume(
        cls,
        game_id: UUID,
        repository: GameRepository,
        stats: StatsRepository,
        scheduler: Scheduler,
        settings: Optional[Settings] = None,
    ) -> Self:
        """Pick up a stored game where it was left (a paused Pong game stays paused)."""
        settings = settings or get_settings()
        model = repository.get_game(game_id)
        if model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        engine = build_engine(model.game_type, settings.random_seed)
        state = engine.from_snapshot(model.snapshot)
        session = cls(game_id, model, engine, state, repository, stats, scheduler, settings)
        session._schedule_next()
        logger.info("Session resumed: %s game %s", model.game_type, game_id)
        return session

    def close(self) -> None:
        """Cancel whatever is scheduled and store the current state"""
        if self._closed:
            return
        self._cancel_pending()
        self._closed = True
        self._save()
        logger.info("Session closed: game %s", self.game_id)

    # --- QUERIES ---
    @property
    def state(self) -> Any:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_task(self) -> bool:
        return self._pending is not None

    def legal_actions(self) -> list[dict[str, Any]]:
        if self.engine.current_seat(self._state) != Seat.HUMAN:
            return []
        return [self.engine.action_to_payload(action) for action in self.engine.legal_actions(self._state)]

    # --- INPUT ---
    def submit(self, payload: dict[str, Any]) -> Any:
        """
        Apply a human action.
        ----

        Returns the new state, or `Rejected` (state unchanged) so the caller can prompt again.
        """
        if self._closed:
            raise GameStateError("Session is closed.")
        if self.engine.is_terminal(self._state).terminal:
            raise GameStateError("Game is already over.")
        if self.engine.current_seat(self._state) != Seat.HUMAN:
            raise NotYourTurnError("Wait for the bot to finish its turn.")

        action = self.engine.action_from_payload(payload)
        result = self._transition(action)
        if isinstance(result, Rejected):
            return result

        self._save()
        self._schedule_next()
        return result

    # --- SCHEDULED CALLBACKS ---
    def _play_bot_turn(self) -> None:
        self._pending = None
        if self._closed:
            return
        action = self.engine.bot_decision(self._state)
        result = self._transition(action)
        if isinstance(result, Rejected):
            logger.error("Bot produced an illegal action %r: %s", action, result.reason)
            self._abandon()
            raise EngineInvariantViolation(f"Bot action rejected: {result.reason}")
        self._save()
        self._schedule_next()

    def _tick(self) -> None:
        self._pending = None
        if self._closed:
            return
        result = self._transition(Tick())
        if isinstance(result, Rejected):
            # paused between scheduling and firing
            return
        # Ticks are not stored one by one, only the one that ends the game
        if self.engine.is_terminal(result).terminal:
            self._save()
        self._schedule_next()

    # --- INTERNALS ---
    def _transition(self, action: Any) -> Any:
        try:
            result = self.engine.apply_action(self._state, action)
        except EngineInvariantViolation:
            logger.exception("Invariant broken in game %s, abandoning the session", self.game_id)
            self._abandon()
            raise
        if isinstance(result, Rejected):
            return result

        self._state = result
        if self.engine.is_terminal(result).terminal:
            self._report_outcome()
        return result

    def _schedule_next(self) -> None:
        """At most one pending task: either the next Pong tick or the bot's turn."""
        self._cancel_pending()
        if self._closed or self.engine.is_terminal(self._state).terminal:
            return

        if self.model.game_type == GameType.PONG:
            if self._state.phase == Phase.PLAYING:
                self._pending = self.scheduler.call_later(self.settings.pong_tick_seconds, self._tick)
            return

        if self.engine.current_seat(self._state) == Seat.BOT:
            self._pending = self.scheduler.call_later(self._bot_delay(), self._play_bot_turn)

    def _bot_delay(self) -> float:
        delays = {
            GameType.CHESS: self.settings.chess_bot_delay_seconds,
            GameType.CONNECT4: self.settings.connect4_bot_delay_seconds,
            GameType.UNO: self.settings.uno_bot_delay_seconds,
        }
        return delays[GameType(self.model.game_type)]

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _save(self) -> None:
        terminal = self.engine.is_terminal(self._state).terminal
        self.model = GameModel(
            game_type=self.model.game_type,
            snapshot=self.engine.to_snapshot(self._state),
            players=self.model.players,
            status=GameStatus.FINISHED if terminal else GameStatus.IN_PROGRESS,
            started_at=self.model.started_at,
        )
        self.repo.update_game(self.game_id, self.model)

    def _report_outcome(self) -> None:
        if self._outcome_reported:
            return
        self._outcome_reported = True
        self.stats.record_outcome(build_outcome(self.engine, self._state, self.model))
        logger.info("Game %s over, outcome reported", self.game_id)

    def _abandon(self) -> None:
        """The state can no longer be trusted: stop scheduling and do not store it."""
        self._cancel_pending()
        self._closed = True
