"""Uno behind the common engine contract. Player 0 is the human, player 1 the bot."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.core.engine import Rejected, Terminal, run_transition
from src.core.exceptions import GameStateError, MalformedInputError
from src.core.primitives import new_rng, require_keys
from src.core.shared_types import GameType, Phase, Seat
from src.uno import bot
from src.uno.cards import BASE_COLORS, CardColor
from src.uno.game import HAND_SIZE, UnoState

logger = logging.getLogger(__name__)

HUMAN_INDEX = 0
BOT_INDEX = 1


@dataclass(frozen=True)
class PlayCard:
    card_id: str
    # Declared color, wild cards only
    color: Optional[CardColor] = None


@dataclass(frozen=True)
class DrawCard:
    pass


UnoAction = PlayCard | DrawCard


class UnoConfig(BaseModel):
    # 2 x 30 cards dealt still leaves a starter and a draw pile out of 108
    hand_size: int = Field(default=HAND_SIZE, ge=1, le=30)


class UnoEngine:
    game_type = GameType.UNO

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = new_rng(seed)

    def initialize(self, config: Optional[UnoConfig] = None) -> UnoState:
        config = config or UnoConfig()
        state = UnoState.new_game(self.rng, config.hand_size)
        logger.info("New uno game (%d cards each, starter %s)", config.hand_size, state.top_card.id)
        return state

    def legal_actions(self, state: UnoState) -> list[UnoAction]:
        """Drawing is always allowed; wild cards are listed once per color they can declare."""
        if state.phase == Phase.GAME_OVER:
            return []
        actions: list[UnoAction] = []
        for card in state.playable_cards():
            if card.is_wild:
                actions.extend(PlayCard(card.id, color) for color in BASE_COLORS)
            else:
                actions.append(PlayCard(card.id))
        actions.append(DrawCard())
        return actions

    def apply_action(self, state: UnoState, action: UnoAction) -> UnoState | Rejected:
        if not isinstance(action, (PlayCard, DrawCard)):
            raise MalformedInputError(f"Unknown uno action {action!r}")
        if isinstance(action, PlayCard) and not isinstance(action.card_id, str):
            raise MalformedInputError(f"Card id must be a string, got {action.card_id!r}")
        return run_transition(state, action, self._apply, UnoState.check_invariants)

    def _apply(self, state: UnoState, action: UnoAction) -> None:
        match action:
            case PlayCard(card_id=card_id, color=color):
                state.play_card(card_id, color)
            case DrawCard():
                state.draw(self.rng)

    def bot_decision(self, state: UnoState) -> UnoAction:
        if state.phase == Phase.GAME_OVER:
            raise GameStateError("Game is over")
        card = bot.choose_card(state.playable_cards())
        if card is None:
            return DrawCard()
        color = bot.choose_color(self.rng) if card.is_wild else None
        logger.debug("Uno bot picks %s (%s)", card.id, color)
        return PlayCard(card.id, color)

    def is_terminal(self, state: UnoState) -> Terminal:
        if state.phase != Phase.GAME_OVER:
            return Terminal(False)
        return Terminal(True, winner=_seat(state, state.winner))

    def current_seat(self, state: UnoState) -> Seat:
        return _seat(state, state.current_player_index)

    # --- SNAPSHOTS / WIRE FORMAT ---
    def to_snapshot(self, state: UnoState) -> dict[str, Any]:
        return state.to_snapshot()

    def from_snapshot(self, snapshot: dict[str, Any]) -> UnoState:
        return UnoState.from_snapshot(snapshot)

    def action_from_payload(self, payload: dict[str, Any]) -> UnoAction:
        """payload: {"kind": "draw"} / {"kind": "play", "card_id": "red-7-1"} / {"kind": "play", "card_id": "wild-0", "color": "blue"}"""
        kind = require_keys(payload, "kind")["kind"]
        if kind == "draw":
            return DrawCard()
        if kind != "play":
            raise MalformedInputError(f"Unknown uno action kind {kind!r}")
        card_id = require_keys(payload, "card_id")["card_id"]
        color = payload.get("color")
        if color is None:
            return PlayCard(card_id)
        if color not in [c.value for c in BASE_COLORS]:
            raise MalformedInputError(f"{color!r} is not a color a wild can declare")
        return PlayCard(card_id, CardColor(color))

    def action_to_payload(self, action: UnoAction) -> dict[str, Any]:
        if isinstance(action, DrawCard):
            return {"kind": "draw"}
        payload: dict[str, Any] = {"kind": "play", "card_id": action.card_id}
        if action.color is not None:
            payload["color"] = action.color.value
        return payload

    # --- OUTCOME ---
    def outcome_counters(self, state: UnoState) -> dict[str, Any]:
        return {
            "cards_played_player1": state.players[HUMAN_INDEX].cards_played,
            "cards_played_player2": state.players[BOT_INDEX].cards_played,
            "special_cards_used": state.special_cards_used,
            "total_cards_played": state.total_cards_played,
            "loser_hand_points": _loser_hand_points(state),
        }

    def scores(self, state: UnoState) -> tuple[int, int]:
        """The winner scores the points left in the loser's hand"""
        points = _loser_hand_points(state)
        return (
            points if state.winner == HUMAN_INDEX else 0,
            points if state.winner == BOT_INDEX else 0,
        )


def _seat(state: UnoState, index: Optional[int]) -> Optional[Seat]:
    if index is None:
        return None
    return Seat.BOT if state.players[index].is_bot else Seat.HUMAN


def _loser_hand_points(state: UnoState) -> int:
    if state.winner is None:
        return 0
    return sum(player.hand_points() for index, player in enumerate(state.players) if index != state.winner)
