"""Application settings (environment variables prefixed with MINIGAMES_) and logging setup."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MINIGAMES_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///minigames.sqlite3"
    database_echo: bool = False
    log_level: str = "INFO"

    # None: every engine seeds itself from OS entropy
    random_seed: Optional[int] = None

    # Pacing of the bot's "thinking". Presentation concern only, engines never wait.
    chess_bot_delay_seconds: float = Field(default=1.0, ge=0)
    connect4_bot_delay_seconds: float = Field(default=1.0, ge=0)
    uno_bot_delay_seconds: float = Field(default=1.5, ge=0)
    pong_tick_seconds: float = Field(default=0.016, gt=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    logging.getLogger("src").setLevel(settings.log_level.upper())
