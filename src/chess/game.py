"""
The Game state is the entrypoint into the chess rules for the engine adapter.
It is responsible for orchestrating all the logic required to play a half-move:
validating it against the legal moves, updating the board and counters, and detecting the end of the game.
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional, Self

from src.chess.board import Board
from src.chess.moves import Move
from src.chess.pieces import Color, PieceType
from src.core.exceptions import (
    EngineInvariantViolation,
    IllegalMoveError,
    InvalidFENError,
    MalformedInputError,
)
from src.core.shared_types import Phase

logger = logging.getLogger(__name__)


class Status(StrEnum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def legal_moves_for(board: Board, color: Color) -> list[Move]:
    """
    List of legal moves for the player with the 'color' pieces
    ----

    1. generate candidate moves, using the basic movement rules for all pieces (the board does this calculation)
    2. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
    """
    return [
        move
        for move in board.generate_candidate_moves(color)
        if not board.leaves_king_in_check(move)
    ]


@dataclass
class ChessState:
    board: Board
    current_player: Color = Color.WHITE
    status: Status = Status.IN_PROGRESS
    phase: Phase = Phase.PLAYING
    winner: Optional[Color] = None
    last_move: Optional[Move] = None
    moves_count: int = 0
    captures_by_player: dict[Color, int] = field(
        default_factory=lambda: {Color.WHITE: 0, Color.BLACK: 0}
    )
    checkmate: bool = False
    stalemate: bool = False

    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None) -> Self:
        """
        Standard starting position, or a FEN. Only the first two FEN fields are read:
        the placement and (optionally) the color to move.
        """
        if not starting_fen:
            return cls(Board.starting_position())

        fields = starting_fen.split(" ")
        board = Board.from_fen(fields[0])
        color_to_move = Color.BLACK if len(fields) > 1 and fields[1] == "b" else Color.WHITE
        state = cls(board, current_player=color_to_move)
        state._validate_starting_position(starting_fen)
        state._update_game_status()
        return state

    # --- RULES ---
    def legal_moves(self) -> list[Move]:
        if self.phase == Phase.GAME_OVER:
            return []
        return legal_moves_for(self.board, self.current_player)

    def make_move(self, requested: Move) -> Move:
        """
        Attempt to make a move
        -----

        1. look the requested squares (+ promotion) up in the legal moves of the player to move
        2. update the board
        3. update counters (moves, captures) and the last move
        4. hand the turn over and update game status (check / checkmate / stalemate)

        Returns the fully populated move (with moving and captured pieces).
        """
        if self.phase == Phase.GAME_OVER:
            raise IllegalMoveError(f"Game is over. status: {self.status}")

        move = self._find_legal_move(requested)
        self.board.make_move(move)
        self.moves_count += 1
        self.last_move = move
        if move.captured_piece is not None:
            self.captures_by_player[self.current_player] += 1

        logger.debug("%s played %s", self.current_player, move.to_uci())
        self.current_player = self.current_player.opponent
        self._update_game_status()
        return move

    def _validate_starting_position(self, fen: str) -> None:
        """One king per color, and the side that just 'moved' cannot have left its king attacked."""
        for color in Color:
            kings = self.board.locate_pieces(PieceType.KING, color)
            if len(kings) != 1:
                raise InvalidFENError(f"Expected exactly one {color} king in {fen!r}, found {len(kings)}")
        waiting = self.current_player.opponent
        if self.board.is_check(waiting):
            raise InvalidFENError(f"{waiting} is in check while {self.current_player} is to move in {fen!r}")

    def _find_legal_move(self, requested: Move) -> Move:
        """Match on the squares and promotion only: the request may not carry the pieces."""
        for move in self.legal_moves():
            if (move.from_square, move.to_square, move.promotion) == (
                requested.from_square,
                requested.to_square,
                requested.promotion,
            ):
                return move
        raise IllegalMoveError(f"Move not allowed: {requested.to_uci()}")

    def _update_game_status(self) -> None:
        """
        Performs checks to see if game has ended and changes status accordingly.

        NOTE the turn has already been handed over: the current player is the one who has to answer the move.
        """
        in_check = self.board.is_check(self.current_player)
        has_legal_move = bool(legal_moves_for(self.board, self.current_player))

        if has_legal_move:
            self.status = Status.CHECK if in_check else Status.IN_PROGRESS
            return

        self.phase = Phase.GAME_OVER
        if in_check:
            self.status = Status.CHECKMATE
            self.checkmate = True
            self.winner = self.current_player.opponent
        else:
            self.status = Status.STALEMATE
            self.stalemate = True
        logger.info("Chess game over: %s (winner: %s)", self.status, self.winner)

    def check_invariants(self) -> None:
        """Exactly one king of each color must be on the board at all times."""
        for color in Color:
            kings = self.board.locate_pieces(PieceType.KING, color)
            if len(kings) != 1:
                logger.error("Found %d %s king(s) on %s", len(kings), color, self.board.to_fen())
                raise EngineInvariantViolation(
                    f"Expected exactly one {color} king, found {len(kings)}"
                )

    # --- SNAPSHOT ---
    def to_snapshot(self) -> dict[str, Any]:
        return {
            "board": self.board.to_list(),
            "current_player": self.current_player.value,
            "status": self.status.value,
            "phase": self.phase.value,
            "winner": self.winner.value if self.winner else None,
            "last_move": self.last_move.to_dict() if self.last_move else None,
            "moves_count": self.moves_count,
            "captures_by_player": {
                color.value: count for color, count in self.captures_by_player.items()
            },
            "checkmate": self.checkmate,
            "stalemate": self.stalemate,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> Self:
        try:
            return cls(
                board=Board.from_list(snapshot["board"]),
                current_player=Color(snapshot["current_player"]),
                status=Status(snapshot["status"]),
                phase=Phase(snapshot["phase"]),
                winner=Color(snapshot["winner"]) if snapshot["winner"] else None,
                last_move=Move.from_dict(snapshot["last_move"]) if snapshot["last_move"] else None,
                moves_count=int(snapshot["moves_count"]),
                captures_by_player={
                    Color(color): int(count)
                    for color, count in snapshot["captures_by_player"].items()
                },
                checkmate=bool(snapshot["checkmate"]),
                stalemate=bool(snapshot["stalemate"]),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as exc:
            raise MalformedInputError(f"Invalid chess snapshot: {exc}") from exc
