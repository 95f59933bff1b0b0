"""Generate database session"""

from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, get_settings
from src.db.schema import Base


def create_db_engine(settings: Optional[Settings] = None) -> Engine:
    """Engine for the configured database, with all tables created."""
    settings = settings or get_settings()
    engine = create_engine(settings.database_url, echo=settings.database_echo)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(engine: Optional[Engine] = None) -> Iterator[Session]:
    session_factory = sessionmaker(bind=engine or create_db_engine())
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
