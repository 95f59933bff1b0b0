"""Connect-4 behind the common engine contract. The human plays red, the bot yellow."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel

from src.connect4 import bot
from src.connect4.board import COLS, Disc
from src.connect4.game import Connect4State, winning_column
from src.core.engine import Rejected, Terminal, run_transition
from src.core.exceptions import GameStateError, MalformedInputError
from src.core.primitives import new_rng, require_keys
from src.core.shared_types import GameType, Phase, Seat

logger = logging.getLogger(__name__)

SEAT_DISCS: dict[Seat, Disc] = {Seat.HUMAN: Disc.RED, Seat.BOT: Disc.YELLOW}
DISC_SEATS: dict[Disc, Seat] = {disc: seat for seat, disc in SEAT_DISCS.items()}


@dataclass(frozen=True)
class DropDisc:
    column: int


class Connect4Config(BaseModel):
    """Nothing to tune yet. Kept so every engine has the same `initialize(config)` signature."""


class Connect4Engine:
    game_type = GameType.CONNECT4

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = new_rng(seed)

    def initialize(self, config: Optional[Connect4Config] = None) -> Connect4State:
        logger.info("New connect-4 game")
        return Connect4State()

    def legal_actions(self, state: Connect4State) -> list[DropDisc]:
        return [DropDisc(col) for col in state.legal_columns()]

    def apply_action(self, state: Connect4State, action: DropDisc) -> Connect4State | Rejected:
        if not isinstance(action, DropDisc):
            raise MalformedInputError(f"Connect-4 actions are disc drops, got {type(action).__name__}")
        if not isinstance(action.column, int) or not 0 <= action.column < COLS:
            raise MalformedInputError(f"Column {action.column!r} outside of 0..{COLS - 1}")
        return run_transition(
            state,
            action,
            lambda new_state, drop: new_state.drop(drop.column),
            Connect4State.check_invariants,
        )

    def bot_decision(self, state: Connect4State) -> DropDisc:
        if not state.legal_columns():
            raise GameStateError("No column left to play")
        return DropDisc(bot.choose_column(state.board, state.current_player, self.rng))

    def is_terminal(self, state: Connect4State) -> Terminal:
        if state.phase != Phase.GAME_OVER:
            return Terminal(False)
        winner = DISC_SEATS[state.winner] if state.winner else None
        return Terminal(True, winner=winner, draw=state.is_draw)

    def current_seat(self, state: Connect4State) -> Seat:
        return DISC_SEATS[state.current_player]

    # --- SNAPSHOTS / WIRE FORMAT ---
    def to_snapshot(self, state: Connect4State) -> dict[str, Any]:
        return state.to_snapshot()

    def from_snapshot(self, snapshot: dict[str, Any]) -> Connect4State:
        return Connect4State.from_snapshot(snapshot)

    def action_from_payload(self, payload: dict[str, Any]) -> DropDisc:
        column = require_keys(payload, "column")["column"]
        if isinstance(column, bool) or not isinstance(column, int):
            raise MalformedInputError(f"Column must be an integer, got {column!r}")
        return DropDisc(column)

    def action_to_payload(self, action: DropDisc) -> dict[str, Any]:
        return {"column": action.column}

    # --- OUTCOME ---
    def outcome_counters(self, state: Connect4State) -> dict[str, Any]:
        return {"moves": state.moves_count, "winning_move": winning_column(state)}

    def scores(self, state: Connect4State) -> tuple[int, int]:
        human_won = state.winner == SEAT_DISCS[Seat.HUMAN]
        bot_won = state.winner == SEAT_DISCS[Seat.BOT]
        return int(human_won), int(bot_won)
