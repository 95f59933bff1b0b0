"""Unit tests for /src/uno/game.py and /src/uno/bot.py"""

import random

import pytest

from src.core.exceptions import EngineInvariantViolation, MalformedInputError, UnplayableCardError
from src.core.shared_types import Phase
from src.uno import bot
from src.uno.cards import DECK_SIZE, CardColor, build_deck
from src.uno.game import HAND_SIZE, UnoState, default_players


def deal(hand0: list[str], hand1: list[str], top: str) -> UnoState:
    """Fixed hands and discard top; every other card stays in the (unshuffled) draw pile"""
    cards = {card.id: card for card in build_deck()}
    players = default_players()
    players[0].hand = [cards.pop(card_id) for card_id in hand0]
    players[1].hand = [cards.pop(card_id) for card_id in hand1]
    discard = [cards.pop(top)]
    return UnoState(deck=list(cards.values()), discard_pile=discard, players=players)


@pytest.fixture
def state() -> UnoState:
    return deal(
        ["red-draw2-0", "red-skip-0", "red-reverse-0", "wild-0", "green-5-0"],
        ["yellow-1-0", "blue-2-0", "green-3-0"],
        "red-7-0",
    )


def test_new_game() -> None:
    uno = UnoState.new_game(random.Random(4))
    assert all(len(player.hand) == HAND_SIZE for player in uno.players)
    assert len(uno.discard_pile) == 1
    assert not uno.top_card.is_special
    assert uno.count_cards() == DECK_SIZE
    assert uno.current_player_index == 0
    assert uno.direction == 1


def test_starter_is_never_special() -> None:
    for seed in range(50):
        assert not UnoState.new_game(random.Random(seed)).top_card.is_special


def test_playability(state: UnoState) -> None:
    playable = {card.id for card in state.playable_cards()}
    # red cards match the color, wilds always match, green 5 matches nothing
    assert playable == {"red-draw2-0", "red-skip-0", "red-reverse-0", "wild-0"}


def test_same_value_matches() -> None:
    uno = deal(["blue-7-0", "blue-8-0"], ["yellow-1-0"], "red-7-0")
    assert [card.id for card in uno.playable_cards()] == ["blue-7-0"]


def test_unplayable_card(state: UnoState) -> None:
    with pytest.raises(UnplayableCardError):
        state.play_card("green-5-0")


def test_card_not_in_hand(state: UnoState) -> None:
    with pytest.raises(UnplayableCardError):
        state.play_card("yellow-1-0")


def test_draw2_is_absorbed_by_the_next_player(state: UnoState) -> None:
    state.play_card("red-draw2-0")
    assert state.draw_count == 2
    assert state.current_player_index == 1
    assert state.playable_cards() == []

    state.draw(random.Random(0))
    assert len(state.players[1].hand) == 3 + 2
    assert state.draw_count == 0
    assert state.current_player_index == 0


def test_draw2_on_draw2_stacks() -> None:
    uno = deal(["red-draw2-0", "red-3-0"], ["blue-draw2-0", "green-1-0"], "red-7-0")
    uno.play_card("red-draw2-0")
    # same value matches, the pending count grows instead of being drawn
    assert [card.id for card in uno.playable_cards()] == ["blue-draw2-0"]
    uno.play_card("blue-draw2-0")
    assert uno.draw_count == 4
    assert uno.current_player_index == 0

    uno.draw(random.Random(0))
    assert len(uno.players[0].hand) == 1 + 4
    assert uno.draw_count == 0
    assert uno.current_player_index == 1


def test_wild4_adds_to_a_pending_draw2() -> None:
    uno = deal(["red-draw2-0", "red-3-0"], ["wild4-0", "green-1-0"], "red-7-0")
    uno.play_card("red-draw2-0")
    uno.play_card("wild4-0", CardColor.GREEN)
    assert uno.draw_count == 6


def test_plain_draw_takes_one_card(state: UnoState) -> None:
    state.draw(random.Random(0))
    assert len(state.players[0].hand) == 6
    assert state.current_player_index == 1


def test_skip_gives_the_turn_back(state: UnoState) -> None:
    """Two players: skipping the opponent means playing again"""
    state.play_card("red-skip-0")
    assert state.current_player_index == 0


def test_reverse_flips_direction(state: UnoState) -> None:
    state.play_card("red-reverse-0")
    assert state.direction == -1
    assert state.current_player_index == 1


def test_wild_needs_a_color(state: UnoState) -> None:
    with pytest.raises(MalformedInputError):
        state.play_card("wild-0")
    with pytest.raises(MalformedInputError):
        state.play_card("red-skip-0", CardColor.BLUE)


def test_wild_declares_the_color(state: UnoState) -> None:
    state.play_card("wild-0", CardColor.BLUE)
    assert state.current_color == CardColor.BLUE
    assert state.top_card.id == "wild-0"
    assert [card.id for card in state.playable_cards()] == ["blue-2-0"]


def test_last_card_wins_without_effect() -> None:
    uno = deal(["red-draw2-0"], ["yellow-1-0"], "red-7-0")
    uno.play_card("red-draw2-0")
    assert uno.phase == Phase.GAME_OVER
    assert uno.winner == 0
    assert uno.draw_count == 0
    assert uno.current_player_index == 0


def test_reshuffle_when_the_draw_pile_runs_out(state: UnoState) -> None:
    """Discard pile minus its top becomes the new draw pile; declared wild colors are reset"""
    state.play_card("wild-0", CardColor.GREEN)
    top = state.top_card
    state.discard_pile = state.deck + state.discard_pile
    state.deck = []

    state.draw(random.Random(1))
    assert state.top_card == top
    assert state.discard_pile == [top]
    assert len(state.deck) == DECK_SIZE - 1 - len(state.players[0].hand) - len(state.players[1].hand)
    assert state.count_cards() == DECK_SIZE


def test_reshuffle_resets_declared_colors() -> None:
    uno = deal(["blue-2-0"], ["blue-3-0"], "red-7-0")
    wild = uno.deck.pop(next(i for i, card in enumerate(uno.deck) if card.id == "wild4-1"))
    uno.discard_pile = uno.deck + [wild.with_color(CardColor.RED), uno.discard_pile[-1]]
    uno.deck = []
    uno.draw(random.Random(0))
    reshuffled = {card.id: card for card in uno.deck + uno.players[0].hand}
    assert reshuffled["wild4-1"].color == CardColor.WILD


def test_draw_with_nothing_left() -> None:
    """Every card in a hand: the draw gives nothing but still passes the turn"""
    uno = deal(["blue-2-0"], ["blue-3-0"], "red-7-0")
    uno.players[1].hand += uno.deck
    uno.deck = []
    uno.draw_count = 4
    uno.draw(random.Random(0))
    assert len(uno.players[0].hand) == 1
    assert uno.draw_count == 0
    assert uno.current_player_index == 1


def test_card_count_invariant(state: UnoState) -> None:
    state.check_invariants()
    state.deck.pop()
    with pytest.raises(EngineInvariantViolation):
        state.check_invariants()


def test_snapshot_round_trip(state: UnoState) -> None:
    state.play_card("wild-0", CardColor.YELLOW)
    assert UnoState.from_snapshot(state.to_snapshot()) == state


# --- BOT ---
def test_bot_prefers_expensive_cards() -> None:
    uno = deal(["red-9-0", "red-skip-0", "red-3-0"], ["blue-3-0"], "red-7-0")
    assert bot.choose_card(uno.playable_cards()).id == "red-skip-0"


def test_bot_breaks_ties_for_wild4_then_wild() -> None:
    uno = deal(["wild-0", "wild4-0", "red-skip-0"], ["blue-3-0"], "red-7-0")
    assert bot.choose_card(uno.playable_cards()).id == "wild4-0"
    uno = deal(["red-draw2-0", "wild-0"], ["blue-3-0"], "red-7-0")
    assert bot.choose_card(uno.playable_cards()).id == "wild-0"


def test_bot_has_nothing_to_play() -> None:
    assert bot.choose_card([]) is None


def test_bot_color_is_a_base_color() -> None:
    rng = random.Random(0)
    colors = {bot.choose_color(rng) for _ in range(100)}
    assert colors == {CardColor.RED, CardColor.BLUE, CardColor.GREEN, CardColor.YELLOW}
