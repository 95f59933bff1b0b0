"""Which engine (and which config model) serves which game type."""

from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from src.chess.engine import ChessConfig, ChessEngine
from src.connect4.engine import Connect4Config, Connect4Engine
from src.core.engine import GameEngine
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import GameType
from src.pong.engine import PongConfig, PongEngine
from src.uno.engine import UnoConfig, UnoEngine

ENGINES: dict[GameType, type] = {
    GameType.CHESS: ChessEngine,
    GameType.CONNECT4: Connect4Engine,
    GameType.PONG: PongEngine,
    GameType.UNO: UnoEngine,
}

CONFIGS: dict[GameType, type[BaseModel]] = {
    GameType.CHESS: ChessConfig,
    GameType.CONNECT4: Connect4Config,
    GameType.PONG: PongConfig,
    GameType.UNO: UnoConfig,
}


def build_engine(game_type: GameType | str, seed: Optional[int] = None) -> GameEngine:
    return ENGINES[GameType(game_type)](seed)


def parse_config(game_type: GameType | str, raw: Optional[dict[str, Any]]) -> BaseModel:
    """Validate request tunables against the engine's config model."""
    try:
        return CONFIGS[GameType(game_type)].model_validate(raw or {})
    except ValidationError as exc:
        raise InvalidRequestError(f"Invalid {game_type} config: {exc}") from exc
