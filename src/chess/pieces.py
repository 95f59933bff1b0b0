"""Defines the types of chess pieces"""

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Optional, Self

from src.core.exceptions import InvalidFENError, MalformedInputError


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# Material values as the bot sees them. The king is "priceless", hence the large number.
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.type]

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        if character.lower() not in FEN_TO_PIECE:
            raise InvalidFENError(f"Unknown piece character {character!r}")
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def moved(self, promote_to: Optional[PieceType] = None) -> Self:
        """Copy of the piece as it stands after moving (and promoting, for pawns)"""
        return replace(self, type=promote_to or self.type, has_moved=True)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "color": self.color.value, "has_moved": self.has_moved}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        try:
            return cls(PieceType(data["type"]), Color(data["color"]), bool(data["has_moved"]))
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid piece record {data!r}") from exc
