"""Uno cards and the 108-card deck"""

import random
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Self

from src.core.exceptions import MalformedInputError


class CardColor(StrEnum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    WILD = "wild"


class CardValue(StrEnum):
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW2 = "draw2"
    WILD = "wild"
    WILD4 = "wild4"


BASE_COLORS: tuple[CardColor, ...] = (CardColor.RED, CardColor.BLUE, CardColor.GREEN, CardColor.YELLOW)
ACTION_VALUES = frozenset({CardValue.SKIP, CardValue.REVERSE, CardValue.DRAW2})
WILD_VALUES = frozenset({CardValue.WILD, CardValue.WILD4})
COLORED_VALUES: tuple[CardValue, ...] = tuple(value for value in CardValue if value not in WILD_VALUES)

ACTION_CARD_POINTS = 20
WILD_CARD_POINTS = 50
WILD_CARDS_PER_KIND = 4
DECK_SIZE = 108


def points_for(value: CardValue) -> int:
    """Classic Uno scoring: face value for numbers, 20 for action cards, 50 for wilds"""
    if value in WILD_VALUES:
        return WILD_CARD_POINTS
    if value in ACTION_VALUES:
        return ACTION_CARD_POINTS
    return int(value)


@dataclass(frozen=True)
class Card:
    """
    A single physical card. `id` is unique within a deck.
    A played wild keeps its id and value but shows the declared color.
    """

    id: str
    color: CardColor
    value: CardValue
    points: int

    @property
    def is_wild(self) -> bool:
        return self.value in WILD_VALUES

    @property
    def is_special(self) -> bool:
        return self.value in ACTION_VALUES or self.is_wild

    def with_color(self, color: CardColor) -> Self:
        return replace(self, color=color)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "color": self.color.value, "value": self.value.value, "points": self.points}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        try:
            return cls(data["id"], CardColor(data["color"]), CardValue(data["value"]), int(data["points"]))
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid card {data!r}") from exc


def build_deck() -> list[Card]:
    """
    Unshuffled 108-card deck
    ----

    Per color: one 0, two of each 1-9, two of each skip / reverse / draw2 (25 cards).
    Then four wilds and four wild-draw-4s.
    """
    deck = []
    for color in BASE_COLORS:
        for value in COLORED_VALUES:
            copies = 1 if value == CardValue.ZERO else 2
            for n in range(copies):
                deck.append(Card(f"{color}-{value}-{n}", color, value, points_for(value)))
    for value in (CardValue.WILD, CardValue.WILD4):
        for n in range(WILD_CARDS_PER_KIND):
            deck.append(Card(f"{value}-{n}", CardColor.WILD, value, points_for(value)))
    return deck


def shuffled_deck(rng: random.Random) -> list[Card]:
    deck = build_deck()
    # random.shuffle is a Fisher-Yates shuffle
    rng.shuffle(deck)
    return deck
