"""Turn a finished game into the record the statistics collaborator stores."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from src.core.engine import GameEngine
from src.core.exceptions import GameStateError
from src.core.models import GameModel, GameOutcome
from src.core.shared_types import Seat

logger = logging.getLogger(__name__)


def build_outcome(
    engine: GameEngine,
    state: Any,
    model: GameModel,
    finished_at: Optional[datetime] = None,
) -> GameOutcome:
    """
    player1 is always the human seat, player2 the bot.
    ----

    Raises GameStateError when the game is not over yet.
    """
    terminal = engine.is_terminal(state)
    if not terminal.terminal:
        raise GameStateError("Only finished games have an outcome")

    finished_at = finished_at or datetime.now(timezone.utc)
    duration = max(0, int((finished_at - model.started_at).total_seconds()))
    human_score, bot_score = engine.scores(state)

    outcome = GameOutcome(
        game_type=model.game_type,
        player1_id=model.players[Seat.HUMAN],
        player2_id=model.players[Seat.BOT],
        winner_id=model.players[terminal.winner] if terminal.winner else None,
        is_draw=terminal.draw,
        duration_seconds=duration,
        player1_score=human_score,
        player2_score=bot_score,
        counters=engine.outcome_counters(state),
    )
    logger.debug("Outcome built: %s", outcome)
    return outcome
