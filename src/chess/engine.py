"""Chess behind the common engine contract. The human plays White, the bot plays Black."""

import logging
from typing import Any, Optional

from pydantic import BaseModel

from src.chess import bot
from src.chess.game import ChessState
from src.chess.moves import Move
from src.chess.pieces import Color
from src.core.engine import Rejected, Terminal, run_transition
from src.core.exceptions import GameStateError, MalformedInputError
from src.core.primitives import new_rng, require_keys
from src.core.shared_types import GameType, Phase, Seat

logger = logging.getLogger(__name__)

SEAT_COLORS: dict[Seat, Color] = {Seat.HUMAN: Color.WHITE, Seat.BOT: Color.BLACK}
COLOR_SEATS: dict[Color, Seat] = {color: seat for seat, color in SEAT_COLORS.items()}


class ChessConfig(BaseModel):
    # Placement [+ color to move] to start from a custom position. None: standard setup.
    starting_fen: Optional[str] = None


class ChessEngine:
    game_type = GameType.CHESS

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = new_rng(seed)

    def initialize(self, config: Optional[ChessConfig] = None) -> ChessState:
        config = config or ChessConfig()
        state = ChessState.new_game(config.starting_fen)
        logger.info("New chess game (custom position: %s)", config.starting_fen is not None)
        return state

    def legal_actions(self, state: ChessState) -> list[Move]:
        return state.legal_moves()

    def apply_action(self, state: ChessState, action: Move) -> ChessState | Rejected:
        if not isinstance(action, Move):
            raise MalformedInputError(f"Chess actions are moves, got {type(action).__name__}")
        return run_transition(state, action, ChessState.make_move, ChessState.check_invariants)

    def bot_decision(self, state: ChessState) -> Move:
        legal_moves = state.legal_moves()
        if not legal_moves:
            raise GameStateError("No legal move left to choose from")
        return bot.choose_move(legal_moves, self.rng)

    def is_terminal(self, state: ChessState) -> Terminal:
        if state.phase != Phase.GAME_OVER:
            return Terminal(False)
        winner = COLOR_SEATS[state.winner] if state.winner else None
        return Terminal(True, winner=winner, draw=state.stalemate)

    def current_seat(self, state: ChessState) -> Seat:
        return COLOR_SEATS[state.current_player]

    # --- SNAPSHOTS / WIRE FORMAT ---
    def to_snapshot(self, state: ChessState) -> dict[str, Any]:
        return state.to_snapshot()

    def from_snapshot(self, snapshot: dict[str, Any]) -> ChessState:
        return ChessState.from_snapshot(snapshot)

    def action_from_payload(self, payload: dict[str, Any]) -> Move:
        """payload: {"uci": "e2e4"} (promotions: "e7e8q")"""
        return Move.from_uci(require_keys(payload, "uci")["uci"])

    def action_to_payload(self, action: Move) -> dict[str, Any]:
        return {"uci": action.to_uci()}

    # --- OUTCOME ---
    def outcome_counters(self, state: ChessState) -> dict[str, Any]:
        return {
            "moves": state.moves_count,
            "pieces_captured_player1": state.captures_by_player[SEAT_COLORS[Seat.HUMAN]],
            "pieces_captured_player2": state.captures_by_player[SEAT_COLORS[Seat.BOT]],
            "checkmate": state.checkmate,
            "stalemate": state.stalemate,
        }

    def scores(self, state: ChessState) -> tuple[int, int]:
        return (
            state.captures_by_player[SEAT_COLORS[Seat.HUMAN]],
            state.captures_by_player[SEAT_COLORS[Seat.BOT]],
        )
