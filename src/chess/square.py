"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import MalformedInputError

# Chess board is always 8x8.
BOARD_DIMENSIONS = (8, 8)
NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        if not is_algebraic(sq):
            raise MalformedInputError(f"Cannot interpret {sq!r} as a square name.")
        file = ord(sq[0]) - ord("a") + 1
        rank = int(sq[1])
        return cls(file, rank)

    @classmethod
    def from_index(cls, index: int) -> Square:
        return cls(index % BOARD_DIMENSIONS[0] + 1, index // BOARD_DIMENSIONS[0] + 1)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    @property
    def index(self) -> int:
        """Position in the flat board array (a1 = 0, h1 = 7, a2 = 8, ..., h8 = 63)"""
        return (self.rank - 1) * BOARD_DIMENSIONS[0] + (self.file - 1)

    def offset(self, df: int, dr: int) -> Square:
        return Square(self.file + df, self.rank + dr)


def is_algebraic(sq: str) -> bool:
    return (
        isinstance(sq, str)
        and len(sq) == 2
        and "a" <= sq[0] <= chr(ord("a") + BOARD_DIMENSIONS[0] - 1)
        and sq[1].isdigit()
        and 1 <= int(sq[1]) <= BOARD_DIMENSIONS[1]
    )
