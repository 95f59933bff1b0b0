"""Uno game state: dealing, playability, special card effects and the turn pointer."""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.core.exceptions import (
    EngineInvariantViolation,
    InvalidActionError,
    MalformedInputError,
    UnplayableCardError,
)
from src.core.shared_types import Phase
from src.uno.cards import BASE_COLORS, DECK_SIZE, Card, CardColor, CardValue, shuffled_deck

logger = logging.getLogger(__name__)

HAND_SIZE = 7
DRAW_PENALTIES: dict[CardValue, int] = {CardValue.DRAW2: 2, CardValue.WILD4: 4}


@dataclass
class UnoPlayer:
    id: str
    name: str
    is_bot: bool
    hand: list[Card] = field(default_factory=list)
    cards_played: int = 0

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((card for card in self.hand if card.id == card_id), None)

    def hand_points(self) -> int:
        return sum(card.points for card in self.hand)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_bot": self.is_bot,
            "hand": [card.to_dict() for card in self.hand],
            "cards_played": self.cards_played,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            is_bot=bool(data["is_bot"]),
            hand=[Card.from_dict(card) for card in data["hand"]],
            cards_played=int(data["cards_played"]),
        )


def default_players() -> list[UnoPlayer]:
    return [UnoPlayer("player", "You", is_bot=False), UnoPlayer("bot", "Bot", is_bot=True)]


@dataclass
class UnoState:
    """
    Draw pile and discard pile are both read from the end: `deck[-1]` is the next card drawn,
    `discard_pile[-1]` the last card played.
    """

    deck: list[Card]
    discard_pile: list[Card]
    players: list[UnoPlayer]
    current_player_index: int = 0
    direction: int = 1
    draw_count: int = 0
    phase: Phase = Phase.PLAYING
    winner: Optional[int] = None
    special_cards_used: int = 0

    @classmethod
    def new_game(cls, rng: random.Random, hand_size: int = HAND_SIZE) -> Self:
        deck = shuffled_deck(rng)
        players = default_players()
        for _ in range(hand_size):
            for player in players:
                player.hand.append(deck.pop())

        # Only a plain number card may open the discard pile
        while deck[-1].is_special:
            deck.insert(0, deck.pop())
        starter = deck.pop()
        logger.debug("Uno starts on %s", starter.id)
        return cls(deck=deck, discard_pile=[starter], players=players)

    # --- QUERIES ---
    @property
    def top_card(self) -> Card:
        return self.discard_pile[-1]

    @property
    def current_color(self) -> CardColor:
        """Played wilds carry the declared color, so the top card's color is always the one to match"""
        return self.top_card.color

    @property
    def current_player(self) -> UnoPlayer:
        return self.players[self.current_player_index]

    @property
    def total_cards_played(self) -> int:
        return sum(player.cards_played for player in self.players)

    def can_play(self, card: Card) -> bool:
        return card.is_wild or card.color == self.current_color or card.value == self.top_card.value

    def playable_cards(self) -> list[Card]:
        """Cards the current player may put down. A pending penalty does not block playing; it keeps growing."""
        if self.phase == Phase.GAME_OVER:
            return []
        return [card for card in self.current_player.hand if self.can_play(card)]

    def count_cards(self) -> int:
        return len(self.deck) + len(self.discard_pile) + sum(len(player.hand) for player in self.players)

    # --- TRANSITIONS ---
    def play_card(self, card_id: str, color: Optional[CardColor] = None) -> None:
        """
        Current player puts down `card_id`
        ----

        A wild needs a declared base color; any other card must come without one.
        Emptying the hand ends the game at once: the card's effect is not applied.
        """
        if self.phase == Phase.GAME_OVER:
            raise InvalidActionError("Game is over")

        player = self.current_player
        card = player.find_card(card_id)
        if card is None:
            raise UnplayableCardError(f"{card_id} is not in {player.name}'s hand")
        if card.is_wild and color not in BASE_COLORS:
            raise MalformedInputError(f"Wild card {card_id} needs one of {[c.value for c in BASE_COLORS]}")
        if not card.is_wild and color is not None:
            raise MalformedInputError(f"Only wild cards take a color, {card_id} does not")
        if not self.can_play(card):
            raise UnplayableCardError(
                f"{card_id} matches neither {self.current_color} nor {self.top_card.value}"
            )

        player.hand.remove(card)
        self.discard_pile.append(card.with_color(color) if card.is_wild else card)
        player.cards_played += 1
        if card.is_special:
            self.special_cards_used += 1
        logger.debug("%s plays %s", player.name, card_id)

        if not player.hand:
            self.phase = Phase.GAME_OVER
            self.winner = self.current_player_index
            logger.info("Uno won by %s", player.name)
            return

        match card.value:
            case CardValue.SKIP:
                self._advance(2)
            case CardValue.REVERSE:
                self.direction = -self.direction
                self._advance()
            case CardValue.DRAW2 | CardValue.WILD4:
                self.draw_count += DRAW_PENALTIES[card.value]
                self._advance()
            case _:
                self._advance()

    def draw(self, rng: random.Random) -> None:
        """Current player takes the pending penalty (or one card) and the turn passes"""
        if self.phase == Phase.GAME_OVER:
            raise InvalidActionError("Game is over")

        player = self.current_player
        amount = max(1, self.draw_count)
        for _ in range(amount):
            if not self.deck:
                self._reshuffle(rng)
            if not self.deck:
                logger.warning("No card left to draw, %s gets fewer than %d", player.name, amount)
                break
            player.hand.append(self.deck.pop())
        logger.debug("%s draws %d card(s)", player.name, amount)

        self.draw_count = 0
        self._advance()

    def _advance(self, steps: int = 1) -> None:
        self.current_player_index = (
            self.current_player_index + steps * self.direction
        ) % len(self.players)

    def _reshuffle(self, rng: random.Random) -> None:
        """Everything under the top of the discard pile becomes the new draw pile"""
        if len(self.discard_pile) <= 1:
            return
        top = self.discard_pile.pop()
        pile = [card.with_color(CardColor.WILD) if card.is_wild else card for card in self.discard_pile]
        rng.shuffle(pile)
        self.deck = pile
        self.discard_pile = [top]
        logger.debug("Reshuffled %d cards into the draw pile", len(pile))

    def check_invariants(self) -> None:
        card_ids = [card.id for card in self.deck]
        card_ids += [card.id for card in self.discard_pile]
        for player in self.players:
            card_ids += [card.id for card in player.hand]
        if len(card_ids) != DECK_SIZE or len(set(card_ids)) != DECK_SIZE:
            logger.error("Uno card count broken: %d cards, %d distinct", len(card_ids), len(set(card_ids)))
            raise EngineInvariantViolation(f"Expected {DECK_SIZE} distinct cards, found {len(card_ids)}")

    # --- SNAPSHOT ---
    def to_snapshot(self) -> dict[str, Any]:
        return {
            "deck": [card.to_dict() for card in self.deck],
            "discard_pile": [card.to_dict() for card in self.discard_pile],
            "players": [player.to_dict() for player in self.players],
            "current_player_index": self.current_player_index,
            "direction": self.direction,
            "draw_count": self.draw_count,
            "phase": self.phase.value,
            "winner": self.winner,
            "special_cards_used": self.special_cards_used,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> Self:
        try:
            state = cls(
                deck=[Card.from_dict(card) for card in snapshot["deck"]],
                discard_pile=[Card.from_dict(card) for card in snapshot["discard_pile"]],
                players=[UnoPlayer.from_dict(player) for player in snapshot["players"]],
                current_player_index=int(snapshot["current_player_index"]),
                direction=int(snapshot["direction"]),
                draw_count=int(snapshot["draw_count"]),
                phase=Phase(snapshot["phase"]),
                winner=None if snapshot["winner"] is None else int(snapshot["winner"]),
                special_cards_used=int(snapshot["special_cards_used"]),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid uno snapshot: {exc}") from exc
        if not state.discard_pile or state.direction not in (1, -1):
            raise MalformedInputError("Invalid uno snapshot: empty discard pile or bad direction")
        seats = range(len(state.players))
        if state.current_player_index not in seats or (state.winner is not None and state.winner not in seats):
            raise MalformedInputError("Invalid uno snapshot: player index out of range")
        return state
