"""Greedy Uno bot: get rid of the most expensive card it can."""

import random
from typing import Optional

from src.uno.cards import BASE_COLORS, Card, CardColor, CardValue

# Among equally expensive cards the wild-draw-4 goes first, then the wild
TIE_BREAK: dict[CardValue, int] = {CardValue.WILD4: 2, CardValue.WILD: 1}


def choose_card(playable: list[Card]) -> Optional[Card]:
    """None means there is nothing to play and the bot has to draw"""
    if not playable:
        return None
    return max(playable, key=lambda card: (card.points, TIE_BREAK.get(card.value, 0)))


def choose_color(rng: random.Random) -> CardColor:
    return rng.choice(BASE_COLORS)
