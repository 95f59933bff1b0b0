"""
The Game board implements all rules that affect the `position` (in chess: the configuration of pieces on the board)

The position is a flat array of 64 cells (a1 = 0 ... h8 = 63). Legality checks play a move,
look at the king, and take the move back again instead of copying the whole board.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.chess.moves import MOVEMENT_RULES, CandidateMovesFn, Move, is_square_attacked
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, NUM_SQUARES, Square
from src.core.exceptions import InvalidFENError, MalformedInputError

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass(frozen=True)
class UndoRecord:
    """Everything needed to take a move back"""

    move: Move
    moved_piece: Piece
    captured_piece: Optional[Piece]


@dataclass
class Board:
    cells: list[Optional[Piece]] = field(default_factory=lambda: [None] * NUM_SQUARES)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, read from the a-file to the h-file
        * ranks 6 through 3 have 8 consecutive empty squares
        * capital letters are white pieces
        """
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[1]:
            raise InvalidFENError(f"Expected {BOARD_DIMENSIONS[1]} ranks in {fen_str!r}")

        board = cls()
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            file = 1
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
                    continue
                if file > BOARD_DIMENSIONS[0]:
                    raise InvalidFENError(f"Rank {rank} overflows in {fen_str!r}")
                board.place_piece(Piece.from_fen(character), Square(file, rank))
                file += 1
            if file != BOARD_DIMENSIONS[0] + 1:
                raise InvalidFENError(f"Rank {rank} does not have 8 files in {fen_str!r}")
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, BOARD_DIMENSIONS[0] + 1):
            piece = self.piece(Square(file, rank))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- ACCESS ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.cells[square.index]

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.cells[square.index] = piece

    def remove_piece(self, square: Square) -> None:
        self.cells[square.index] = None

    def locate_color(self, color: Color) -> list[Square]:
        return [
            Square.from_index(index)
            for index, piece in enumerate(self.cells)
            if piece is not None and piece.color == color
        ]

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        return [
            Square.from_index(index)
            for index, piece in enumerate(self.cells)
            if piece is not None and (piece.type, piece.color) == (piece_type, color)
        ]

    # --- MOVES ---
    def generate_candidate_moves(self, color: Color) -> list[Move]:
        """
        Pseudo-legal moves for all pieces of `color`: the movement rules only, whether the
        own king is left in check is not considered here.
        """
        candidate_moves: list[Move] = []
        for starting_square in self.locate_color(color):
            piece = self.piece(starting_square)
            assert piece is not None
            movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
            candidate_moves.extend(movement_rule(starting_square, self))
        return candidate_moves

    def make_move(self, move: Move) -> UndoRecord:
        """Update the position on the board. Returns what `unmake_move()` needs to revert it."""
        moving_piece = self.piece(move.from_square)
        if moving_piece is None:
            raise MalformedInputError(f"No piece on {move.from_square.to_algebraic()}")
        captured_piece = self.piece(move.to_square)
        self.remove_piece(move.from_square)
        self.place_piece(moving_piece.moved(move.promotion), move.to_square)
        return UndoRecord(move, moving_piece, captured_piece)

    def unmake_move(self, undo: UndoRecord) -> None:
        self.place_piece(undo.moved_piece, undo.move.from_square)
        if undo.captured_piece is None:
            self.remove_piece(undo.move.to_square)
        else:
            self.place_piece(undo.captured_piece, undo.move.to_square)

    # --- CHECK ---
    def is_check(self, color: Color) -> bool:
        """The king of `color` stands on a square attacked by the opponent. No king on the board: never in check."""
        kings = self.locate_pieces(PieceType.KING, color)
        if not kings:
            return False
        return is_square_attacked(kings[0], color.opponent, self)

    def leaves_king_in_check(self, move: Move) -> bool:
        """Simulate the move: apply, test the mover's king, revert."""
        undo = self.make_move(move)
        try:
            mover = undo.moved_piece.color
            return self.is_check(mover)
        finally:
            self.unmake_move(undo)

    # --- SNAPSHOT ---
    def to_list(self) -> list[Optional[dict[str, Any]]]:
        return [piece.to_dict() if piece else None for piece in self.cells]

    @classmethod
    def from_list(cls, cells: list[Optional[dict[str, Any]]]) -> Self:
        if not isinstance(cells, list) or len(cells) != NUM_SQUARES:
            raise MalformedInputError(f"A board snapshot needs exactly {NUM_SQUARES} cells")
        return cls([Piece.from_dict(cell) if cell else None for cell in cells])
