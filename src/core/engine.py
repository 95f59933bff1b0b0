"""
Contract every game engine fulfils towards the orchestration layer.

Engines are pure rule machines: no I/O, no timers, no storage. The only side effect they
have is consuming their own random number generator.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, TypeVar

from src.core.exceptions import InvalidActionError
from src.core.shared_types import GameType, Seat

logger = logging.getLogger(__name__)

State = TypeVar("State")
Action = Any


@dataclass(frozen=True)
class Rejected:
    """Returned instead of a new state when the action is not legal. The old state stays valid."""

    reason: str


@dataclass(frozen=True)
class Terminal:
    terminal: bool
    winner: Optional[Seat] = None
    draw: bool = False


class GameEngine(Protocol):
    """What the service/session layers need from an engine"""

    game_type: GameType

    def initialize(self, config: Any = None) -> Any: ...
    def legal_actions(self, state: Any) -> list[Action]: ...
    def apply_action(self, state: Any, action: Action) -> Any: ...
    def bot_decision(self, state: Any) -> Action: ...
    def is_terminal(self, state: Any) -> Terminal: ...
    def current_seat(self, state: Any) -> Seat: ...
    def to_snapshot(self, state: Any) -> dict[str, Any]: ...
    def from_snapshot(self, snapshot: dict[str, Any]) -> Any: ...
    def action_from_payload(self, payload: dict[str, Any]) -> Action: ...
    def action_to_payload(self, action: Action) -> dict[str, Any]: ...
    def outcome_counters(self, state: Any) -> dict[str, Any]: ...
    def scores(self, state: Any) -> tuple[int, int]: ...


def run_transition(
    state: State,
    action: Action,
    apply_fn: Callable[[State, Action], object],
    check_invariants: Callable[[State], object],
) -> State | Rejected:
    """
    All-or-nothing transition.
    ---

    The rules mutate a private copy. If they refuse the action the copy is thrown away and the
    caller keeps the untouched original. Invariant violations are NOT converted: they propagate.
    """
    new_state = deepcopy(state)
    try:
        apply_fn(new_state, action)
    except InvalidActionError as exc:
        logger.warning("Rejected action %r: %s", action, exc)
        return Rejected(str(exc))
    check_invariants(new_state)
    return new_state
