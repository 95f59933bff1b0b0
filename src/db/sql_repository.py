"""Implementation of the repositories using SQLAlchemy"""

import logging
from uuid import UUID, uuid4

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from src.core.models import GameModel, GameOutcome, PairSummary
from src.db.schema import DBGame, DBGameOutcome, as_utc

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            game_type=game.game_type,
            snapshot=game.snapshot,
            players=game.players,
            status=game.status,
            started_at=game.started_at,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        logger.debug("Stored new %s game %s", game.game_type, new_id)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Replace the snapshot / status of an existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_db.snapshot = game.snapshot
        game_db.players = game.players
        game_db.status = game.status
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            game_type=game_db.game_type,
            snapshot=game_db.snapshot,
            players=game_db.players,
            status=game_db.status,
            started_at=as_utc(game_db.started_at),
        )


class SQLStatsRepository:
    """Outcome statistics stored with SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def record_outcome(self, outcome: GameOutcome) -> UUID:
        """Store the outcome of a finished game and return the record ID."""
        outcome_db = DBGameOutcome(
            game_type=outcome.game_type,
            player1_id=outcome.player1_id,
            player2_id=outcome.player2_id,
            winner_id=outcome.winner_id,
            is_draw=outcome.is_draw,
            duration_seconds=outcome.duration_seconds,
            player1_score=outcome.player1_score,
            player2_score=outcome.player2_score,
            counters=outcome.counters,
        )
        self.db.add(outcome_db)
        self.db.commit()
        self.db.refresh(outcome_db)
        logger.info("Recorded %s outcome %s (winner: %s)", outcome.game_type, outcome_db.id, outcome.winner_id)
        return outcome_db.id

    def recent_outcomes(self, player_id: str, limit: int = 10) -> list[GameOutcome]:
        """Latest outcomes the player took part in, newest first."""
        query = (
            select(DBGameOutcome)
            .where(self._involves(player_id))
            .order_by(DBGameOutcome.created_at.desc())
            .limit(limit)
        )
        return [self._to_model(row) for row in self.db.scalars(query)]

    def outcomes_by_type(self, player_id: str, game_type: str) -> list[GameOutcome]:
        query = (
            select(DBGameOutcome)
            .where(self._involves(player_id), DBGameOutcome.game_type == game_type)
            .order_by(DBGameOutcome.created_at)
        )
        return [self._to_model(row) for row in self.db.scalars(query)]

    def pair_summary(self, player1_id: str, player2_id: str) -> PairSummary:
        """Head-to-head results of two players, whichever seat each of them had."""
        between_pair = or_(
            and_(DBGameOutcome.player1_id == player1_id, DBGameOutcome.player2_id == player2_id),
            and_(DBGameOutcome.player1_id == player2_id, DBGameOutcome.player2_id == player1_id),
        )
        rows = list(self.db.scalars(select(DBGameOutcome).where(between_pair)))

        by_type_query = (
            select(DBGameOutcome.game_type, func.count())
            .where(between_pair)
            .group_by(DBGameOutcome.game_type)
        )
        games_by_type = {game_type: count for game_type, count in self.db.execute(by_type_query)}

        return PairSummary(
            player1_id=player1_id,
            player2_id=player2_id,
            total_games=len(rows),
            player1_wins=sum(1 for row in rows if row.winner_id == player1_id),
            player2_wins=sum(1 for row in rows if row.winner_id == player2_id),
            draws=sum(1 for row in rows if row.is_draw),
            games_by_type=games_by_type,
            last_played=max((as_utc(row.created_at) for row in rows), default=None),
        )

    @staticmethod
    def _involves(player_id: str):
        return or_(DBGameOutcome.player1_id == player_id, DBGameOutcome.player2_id == player_id)

    def _to_model(self, outcome_db: DBGameOutcome) -> GameOutcome:
        return GameOutcome(
            game_type=outcome_db.game_type,
            player1_id=outcome_db.player1_id,
            player2_id=outcome_db.player2_id,
            winner_id=outcome_db.winner_id,
            is_draw=outcome_db.is_draw,
            duration_seconds=outcome_db.duration_seconds,
            player1_score=outcome_db.player1_score,
            player2_score=outcome_db.player2_score,
            counters=outcome_db.counters,
        )
