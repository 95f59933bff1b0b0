"""
Connect-4 grid: drop semantics and 4-in-a-row detection.

Row 0 is the top of the grid, so discs fall towards the highest row index.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional, Self

from src.core.exceptions import ColumnFullError, MalformedInputError
from src.core.primitives import Vector

ROWS = 6
COLS = 7
WIN_LENGTH = 4


class Disc(StrEnum):
    RED = "red"
    YELLOW = "yellow"

    @property
    def opponent(self) -> "Disc":
        return Disc.YELLOW if self == Disc.RED else Disc.RED


class Axis(StrEnum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"  # top-left to bottom-right
    ANTI_DIAGONAL = "anti_diagonal"  # bottom-left to top-right


# (row delta, column delta). The opposite direction is scanned as well.
AXIS_DIRECTIONS: dict[Axis, Vector] = {
    Axis.HORIZONTAL: (0, 1),
    Axis.VERTICAL: (1, 0),
    Axis.DIAGONAL: (1, 1),
    Axis.ANTI_DIAGONAL: (1, -1),
}

Cell = tuple[int, int]


@dataclass(frozen=True)
class WinningLine:
    axis: Axis
    cells: tuple[Cell, ...]


@dataclass
class Grid:
    cells: list[list[Optional[Disc]]] = field(
        default_factory=lambda: [[None] * COLS for _ in range(ROWS)]
    )

    def disc(self, row: int, col: int) -> Optional[Disc]:
        return self.cells[row][col]

    def lowest_empty_row(self, col: int) -> Optional[int]:
        """Scan bottom-up. None when the column is full."""
        for row in range(ROWS - 1, -1, -1):
            if self.cells[row][col] is None:
                return row
        return None

    def is_column_full(self, col: int) -> bool:
        return self.cells[0][col] is not None

    def open_columns(self) -> list[int]:
        return [col for col in range(COLS) if not self.is_column_full(col)]

    def is_full(self) -> bool:
        """Top row has no empty cell left"""
        return all(cell is not None for cell in self.cells[0])

    def drop_disc(self, col: int, disc: Disc) -> int:
        """Place the disc on the lowest free cell of `col` and return its row."""
        if not 0 <= col < COLS:
            raise MalformedInputError(f"Column {col} outside of 0..{COLS - 1}")
        row = self.lowest_empty_row(col)
        if row is None:
            raise ColumnFullError(f"Column {col} is full")
        self.cells[row][col] = disc
        return row

    def undo_drop(self, row: int, col: int) -> None:
        self.cells[row][col] = None

    def winning_line(self, row: int, col: int) -> Optional[WinningLine]:
        """
        Starting at the cell just played, count consecutive discs of the same color along each axis,
        in both directions. WIN_LENGTH or more (the placed disc included) is a win.
        """
        disc = self.cells[row][col]
        if disc is None:
            return None

        for axis, (dr, dc) in AXIS_DIRECTIONS.items():
            backwards = self._run(row, col, -dr, -dc, disc)
            forwards = self._run(row, col, dr, dc, disc)
            line = list(reversed(backwards)) + [(row, col)] + forwards
            if len(line) >= WIN_LENGTH:
                return WinningLine(axis, tuple(line))
        return None

    def _run(self, row: int, col: int, dr: int, dc: int, disc: Disc) -> list[Cell]:
        cells: list[Cell] = []
        r, c = row + dr, col + dc
        while 0 <= r < ROWS and 0 <= c < COLS and self.cells[r][c] == disc:
            cells.append((r, c))
            r, c = r + dr, c + dc
        return cells

    def is_gravity_consistent(self) -> bool:
        """No empty cell below a filled one in any column"""
        for col in range(COLS):
            seen_disc = False
            for row in range(ROWS):
                if self.cells[row][col] is not None:
                    seen_disc = True
                elif seen_disc:
                    return False
        return True

    def to_list(self) -> list[list[Optional[str]]]:
        return [[cell.value if cell else None for cell in row] for row in self.cells]

    @classmethod
    def from_list(cls, rows: Any) -> Self:
        if not isinstance(rows, list) or len(rows) != ROWS or any(
            not isinstance(row, list) or len(row) != COLS for row in rows
        ):
            raise MalformedInputError(f"A grid snapshot needs {ROWS} rows of {COLS} cells")
        return cls([[Disc(cell) if cell else None for cell in row] for row in rows])
