"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back without tzinfo. Everything stored here is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    """A game in progress (or kept after it finished). The engine state is an opaque JSON snapshot."""

    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    game_type: Mapped[str]
    snapshot: Mapped[dict[str, Any]] = mapped_column(JSON)
    players: Mapped[dict[str, str]] = mapped_column(JSON)
    status: Mapped[str]
    started_at: Mapped[datetime]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBGameOutcome(Base):
    """One row per finished game, written by the statistics side."""

    __tablename__ = "game_outcomes"
    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    game_type: Mapped[str] = mapped_column(index=True)
    player1_id: Mapped[str] = mapped_column(index=True)
    player2_id: Mapped[str] = mapped_column(index=True)
    winner_id: Mapped[Optional[str]]
    is_draw: Mapped[bool] = mapped_column(default=False)
    duration_seconds: Mapped[int]
    player1_score: Mapped[int] = mapped_column(default=0)
    player2_score: Mapped[int] = mapped_column(default=0)
    counters: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
