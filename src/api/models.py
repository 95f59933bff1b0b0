"""Requests and Response models"""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import GameStatus, GameType, Seat

PlayerId = str
ActionPayload = dict[str, Any]


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    game_type: GameType
    player_id: PlayerId
    bot_id: PlayerId = "bot"
    # Engine tunables, validated against the engine's own config model
    config: Optional[dict[str, Any]] = None

    @field_validator("player_id", "bot_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("Player IDs cannot be blank.")
        return value

    @model_validator(mode="after")
    def validate_distinct_players(self) -> "CreateGameRequest":
        if self.player_id == self.bot_id:
            raise InvalidRequestError(f"The player and the bot cannot share the ID {self.player_id!r}.")
        return self


class GameRequest(BaseModel):
    game_id: UUID


class LegalActionsRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId


class ActionRequest(BaseModel):
    game_id: UUID
    player_id: PlayerId
    action: ActionPayload

    @field_validator("action")
    @classmethod
    def validate_action(cls, value: ActionPayload) -> ActionPayload:
        if not value:
            raise InvalidRequestError("Action payload cannot be empty.")
        return value


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    game_type: GameType
    players: dict[str, PlayerId]
    state: dict[str, Any]
    status: GameStatus
    # Whose input the game waits for. None once it is over.
    to_move: Optional[Seat]
    winner_id: Optional[PlayerId] = None
    is_draw: bool = False


class LegalActionsResponse(BaseModel):
    game_id: UUID
    player_id: PlayerId
    legal_actions: list[ActionPayload]
