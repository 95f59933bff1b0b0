"""Unit tests for /src/core/engine.py"""

from dataclasses import dataclass, field

import pytest

from src.core.engine import Rejected, run_transition
from src.core.exceptions import EngineInvariantViolation, InvalidActionError, MalformedInputError


@dataclass
class Counter:
    values: list[int] = field(default_factory=list)


def append(state: Counter, action: int) -> None:
    state.values.append(action)
    if action < 0:
        raise InvalidActionError("negative")
    if action > 100:
        raise MalformedInputError("way out of range")


def at_most_three(state: Counter) -> None:
    if len(state.values) > 3:
        raise EngineInvariantViolation("too many values")


def test_accepted_action_returns_a_new_state() -> None:
    state = Counter([1])
    result = run_transition(state, 2, append, at_most_three)
    assert result == Counter([1, 2])
    assert state == Counter([1])


def test_refused_action_leaves_the_original_untouched() -> None:
    """The rules mutate before refusing; none of that may leak"""
    state = Counter([1])
    result = run_transition(state, -5, append, at_most_three)
    assert isinstance(result, Rejected)
    assert result.reason == "negative"
    assert state == Counter([1])


def test_malformed_input_propagates() -> None:
    with pytest.raises(MalformedInputError):
        run_transition(Counter(), 101, append, at_most_three)


def test_invariant_violation_propagates() -> None:
    with pytest.raises(EngineInvariantViolation):
        run_transition(Counter([1, 2, 3]), 4, append, at_most_three)
