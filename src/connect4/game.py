"""Connect-4 game state and turn rules. Red (the human) always opens."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.connect4.board import Axis, Disc, Grid
from src.core.exceptions import (
    EngineInvariantViolation,
    InvalidActionError,
    MalformedInputError,
)
from src.core.shared_types import Phase

logger = logging.getLogger(__name__)


@dataclass
class Connect4State:
    board: Grid = field(default_factory=Grid)
    current_player: Disc = Disc.RED
    phase: Phase = Phase.PLAYING
    winner: Optional[Disc] = None
    last_move: Optional[tuple[int, int]] = None
    moves_count: int = 0
    winning_axis: Optional[Axis] = None
    winning_cells: list[tuple[int, int]] = field(default_factory=list)

    @property
    def is_draw(self) -> bool:
        return self.phase == Phase.GAME_OVER and self.winner is None

    def legal_columns(self) -> list[int]:
        if self.phase == Phase.GAME_OVER:
            return []
        return self.board.open_columns()

    def drop(self, col: int) -> None:
        """Current player drops a disc in `col`; then win / draw / hand over the turn."""
        if self.phase == Phase.GAME_OVER:
            raise InvalidActionError("Game is over, no more discs can be dropped")

        row = self.board.drop_disc(col, self.current_player)
        self.last_move = (row, col)
        self.moves_count += 1

        line = self.board.winning_line(row, col)
        if line is not None:
            self.phase = Phase.GAME_OVER
            self.winner = self.current_player
            self.winning_axis = line.axis
            self.winning_cells = list(line.cells)
            logger.info("Connect-4 won by %s (%s)", self.winner, line.axis)
        elif self.board.is_full():
            self.phase = Phase.GAME_OVER
            logger.info("Connect-4 ended in a draw")
        else:
            self.current_player = self.current_player.opponent

    def check_invariants(self) -> None:
        if not self.board.is_gravity_consistent():
            logger.error("Floating disc in grid %s", self.board.to_list())
            raise EngineInvariantViolation("Column cells are not contiguous from the bottom")

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "board": self.board.to_list(),
            "current_player": self.current_player.value,
            "phase": self.phase.value,
            "winner": self.winner.value if self.winner else None,
            "last_move": {"row": self.last_move[0], "col": self.last_move[1]}
            if self.last_move
            else None,
            "moves_count": self.moves_count,
            "winning_axis": self.winning_axis.value if self.winning_axis else None,
            "winning_cells": [[row, col] for row, col in self.winning_cells],
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> Self:
        try:
            last_move = snapshot["last_move"]
            return cls(
                board=Grid.from_list(snapshot["board"]),
                current_player=Disc(snapshot["current_player"]),
                phase=Phase(snapshot["phase"]),
                winner=Disc(snapshot["winner"]) if snapshot["winner"] else None,
                last_move=(int(last_move["row"]), int(last_move["col"])) if last_move else None,
                moves_count=int(snapshot["moves_count"]),
                winning_axis=Axis(snapshot["winning_axis"]) if snapshot["winning_axis"] else None,
                winning_cells=[(int(row), int(col)) for row, col in snapshot["winning_cells"]],
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid connect-4 snapshot: {exc}") from exc


def winning_column(state: Connect4State) -> Optional[int]:
    """Column of the disc that completed the line (None unless someone won)"""
    if state.winner is None or state.last_move is None:
        return None
    return state.last_move[1]
