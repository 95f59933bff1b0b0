"""Unit tests for /src/uno/engine.py"""

import json

import pytest
from pydantic import ValidationError

from src.core.engine import Rejected
from src.core.exceptions import GameStateError, MalformedInputError
from src.core.shared_types import Phase, Seat
from src.uno.cards import DECK_SIZE, CardColor, build_deck
from src.uno.engine import DrawCard, PlayCard, UnoConfig, UnoEngine
from src.uno.game import UnoState, default_players


@pytest.fixture
def engine() -> UnoEngine:
    return UnoEngine(seed=8)


def deal(hand0: list[str], hand1: list[str], top: str) -> UnoState:
    cards = {card.id: card for card in build_deck()}
    players = default_players()
    players[0].hand = [cards.pop(card_id) for card_id in hand0]
    players[1].hand = [cards.pop(card_id) for card_id in hand1]
    discard = [cards.pop(top)]
    return UnoState(deck=list(cards.values()), discard_pile=discard, players=players)


def test_initialize(engine: UnoEngine) -> None:
    state = engine.initialize(UnoConfig(hand_size=5))
    assert [len(player.hand) for player in state.players] == [5, 5]
    assert engine.current_seat(state) == Seat.HUMAN
    assert not engine.is_terminal(state).terminal


def test_config_range() -> None:
    with pytest.raises(ValidationError):
        UnoConfig(hand_size=0)
    with pytest.raises(ValidationError):
        UnoConfig(hand_size=31)


def test_legal_actions_list_every_wild_color(engine: UnoEngine) -> None:
    state = deal(["wild-0", "red-3-0", "blue-4-0"], ["green-1-0"], "red-7-0")
    assert engine.legal_actions(state) == [
        PlayCard("wild-0", CardColor.RED),
        PlayCard("wild-0", CardColor.BLUE),
        PlayCard("wild-0", CardColor.GREEN),
        PlayCard("wild-0", CardColor.YELLOW),
        PlayCard("red-3-0"),
        DrawCard(),
    ]


def test_penalty_is_drawn_when_nothing_matches(engine: UnoEngine) -> None:
    state = deal(["red-draw2-0", "red-3-0"], ["green-1-0", "yellow-2-0"], "red-7-0")
    state = engine.apply_action(state, PlayCard("red-draw2-0"))
    assert engine.current_seat(state) == Seat.BOT
    assert engine.legal_actions(state) == [DrawCard()]
    assert engine.bot_decision(state) == DrawCard()

    state = engine.apply_action(state, engine.bot_decision(state))
    assert len(state.players[1].hand) == 4
    assert state.draw_count == 0
    assert engine.current_seat(state) == Seat.HUMAN


def test_bot_stacks_a_pending_penalty(engine: UnoEngine) -> None:
    state = deal(["red-draw2-0", "red-3-0"], ["blue-draw2-0", "green-1-0"], "red-7-0")
    state = engine.apply_action(state, PlayCard("red-draw2-0"))
    assert engine.legal_actions(state) == [PlayCard("blue-draw2-0"), DrawCard()]

    state = engine.apply_action(state, engine.bot_decision(state))
    assert state.draw_count == 4
    assert engine.current_seat(state) == Seat.HUMAN

    state = engine.apply_action(state, DrawCard())
    assert len(state.players[0].hand) == 1 + 4
    assert state.draw_count == 0
    assert engine.current_seat(state) == Seat.BOT


def test_unplayable_card_is_rejected(engine: UnoEngine) -> None:
    state = deal(["green-5-0", "red-3-0"], ["red-4-0"], "red-7-0")
    result = engine.apply_action(state, PlayCard("green-5-0"))
    assert isinstance(result, Rejected)
    # original untouched
    assert len(state.players[0].hand) == 2
    assert state.top_card.id == "red-7-0"


def test_wild_without_color_is_malformed(engine: UnoEngine) -> None:
    state = deal(["wild-0", "red-3-0"], ["red-4-0"], "red-7-0")
    with pytest.raises(MalformedInputError):
        engine.apply_action(state, PlayCard("wild-0"))
    with pytest.raises(MalformedInputError):
        engine.apply_action(state, "draw")


def test_bot_plays_wild_with_a_base_color(engine: UnoEngine) -> None:
    state = deal(["red-3-0", "blue-4-0"], ["wild4-0", "green-1-0"], "red-7-0")
    state = engine.apply_action(state, PlayCard("red-3-0"))
    action = engine.bot_decision(state)
    assert action.card_id == "wild4-0"
    assert action.color in (CardColor.RED, CardColor.BLUE, CardColor.GREEN, CardColor.YELLOW)
    state = engine.apply_action(state, action)
    assert state.draw_count == 4


def test_bot_draws_when_stuck(engine: UnoEngine) -> None:
    state = deal(["red-3-0", "blue-4-0"], ["green-1-0", "yellow-2-0"], "red-7-0")
    state = engine.apply_action(state, PlayCard("red-3-0"))
    assert engine.bot_decision(state) == DrawCard()


def test_win_and_outcome(engine: UnoEngine) -> None:
    state = deal(["red-3-0"], ["wild4-0", "green-skip-0", "blue-9-1"], "red-7-0")
    state = engine.apply_action(state, PlayCard("red-3-0"))
    terminal = engine.is_terminal(state)
    assert terminal.terminal
    assert terminal.winner == Seat.HUMAN
    assert not terminal.draw
    assert engine.scores(state) == (50 + 20 + 9, 0)
    assert engine.outcome_counters(state) == {
        "cards_played_player1": 1,
        "cards_played_player2": 0,
        "special_cards_used": 0,
        "total_cards_played": 1,
        "loser_hand_points": 79,
    }
    assert engine.legal_actions(state) == []
    assert isinstance(engine.apply_action(state, DrawCard()), Rejected)
    with pytest.raises(GameStateError):
        engine.bot_decision(state)


def test_card_conservation_over_a_whole_game() -> None:
    """Both seats driven by the bot policy; 108 distinct cards after every transition"""
    engine = UnoEngine(seed=13)
    state = engine.initialize()
    for _ in range(3000):
        if engine.is_terminal(state).terminal:
            break
        state = engine.apply_action(state, engine.bot_decision(state))
        assert state.count_cards() == DECK_SIZE
        assert state.draw_count >= 0
    assert state.total_cards_played > 0


# --- WIRE FORMAT ---
@pytest.mark.parametrize(
    "payload, action",
    [
        ({"kind": "draw"}, DrawCard()),
        ({"kind": "play", "card_id": "red-7-1"}, PlayCard("red-7-1")),
        ({"kind": "play", "card_id": "wild-0", "color": "blue"}, PlayCard("wild-0", CardColor.BLUE)),
    ],
)
def test_payloads(engine: UnoEngine, payload: dict, action: object) -> None:
    assert engine.action_from_payload(payload) == action
    assert engine.action_to_payload(action) == payload


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"kind": "discard"},
        {"kind": "play"},
        {"kind": "play", "card_id": "wild-0", "color": "wild"},
        {"kind": "play", "card_id": "wild-0", "color": "purple"},
        ["draw"],
    ],
)
def test_malformed_payloads(engine: UnoEngine, payload: object) -> None:
    with pytest.raises(MalformedInputError):
        engine.action_from_payload(payload)


def test_malformed_snapshot(engine: UnoEngine) -> None:
    snapshot = engine.to_snapshot(engine.initialize())
    snapshot["direction"] = 2
    with pytest.raises(MalformedInputError):
        engine.from_snapshot(snapshot)
    with pytest.raises(MalformedInputError):
        engine.from_snapshot({"deck": []})


@pytest.mark.parametrize("field, value", [("current_player_index", 5), ("current_player_index", -1), ("winner", 2)])
def test_snapshot_player_index_out_of_range(engine: UnoEngine, field: str, value: int) -> None:
    snapshot = engine.to_snapshot(engine.initialize())
    snapshot[field] = value
    with pytest.raises(MalformedInputError):
        engine.from_snapshot(snapshot)


def test_snapshot_round_trip_and_continue() -> None:
    original = UnoEngine(seed=5)
    state = original.initialize()
    for _ in range(10):
        state = original.apply_action(state, original.bot_decision(state))

    serialized = json.dumps(original.to_snapshot(state))
    continuing, restored_engine = UnoEngine(seed=6), UnoEngine(seed=6)
    restored = restored_engine.from_snapshot(json.loads(serialized))
    assert restored == state
    assert json.dumps(restored_engine.to_snapshot(restored)) == serialized

    for _ in range(40):
        if continuing.is_terminal(state).terminal:
            break
        state = continuing.apply_action(state, continuing.bot_decision(state))
        restored = restored_engine.apply_action(restored, restored_engine.bot_decision(restored))
    assert continuing.to_snapshot(state) == restored_engine.to_snapshot(restored)
    assert state.phase in (Phase.PLAYING, Phase.GAME_OVER)
