"""
Errors shared by all layers.

Three families matter to callers:

* InvalidActionError: a well-formed action the rules do not allow right now. Recoverable, the state is untouched.
* MalformedInputError: the payload itself is broken (wrong shape, out-of-range index). A programming/UI error.
* EngineInvariantViolation: the engine produced an inconsistent state. Fatal for the session.
"""


class GameError(Exception):
    """Base class for every error raised on purpose by this package."""


# --- RULE VIOLATIONS ---
class InvalidActionError(GameError):
    """Action is not among the legal actions of the current state."""


class IllegalMoveError(InvalidActionError):
    """Chess move that is not legal in the current position."""


class ColumnFullError(InvalidActionError):
    """Connect-4 disc dropped into a column without free cells."""


class UnplayableCardError(InvalidActionError):
    """Uno card that does not match the current color or value (or is not in the hand)."""


# --- BROKEN INPUT ---
class MalformedInputError(GameError):
    """Payload with the wrong shape or with out-of-bounds values."""


class InvalidRequestError(MalformedInputError):
    """Request model failed validation."""


class InvalidFENError(MalformedInputError):
    """FEN placement string cannot be parsed."""


# --- ENGINE / SESSION STATE ---
class EngineInvariantViolation(GameError):
    """Internal consistency check failed. Abandon the session and start a new game."""


class GameStateError(GameError):
    """Operation not allowed in the current phase of the game (e.g. playing after game over)."""


class NotYourTurnError(GameError):
    """Player tried to act while it is the opponent's turn."""


class RepositoryError(GameError):
    """Record could not be found or stored."""
