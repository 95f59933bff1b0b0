"""Two-ply Connect-4 bot: win if possible, else block, else random."""

import logging
import random
from typing import Optional

from src.connect4.board import Disc, Grid

logger = logging.getLogger(__name__)


def completing_column(grid: Grid, disc: Disc) -> Optional[int]:
    """First column (left to right) where dropping `disc` wins immediately"""
    for col in grid.open_columns():
        row = grid.drop_disc(col, disc)
        try:
            if grid.winning_line(row, col) is not None:
                return col
        finally:
            grid.undo_drop(row, col)
    return None


def choose_column(grid: Grid, bot_disc: Disc, rng: random.Random) -> int:
    winning = completing_column(grid, bot_disc)
    if winning is not None:
        logger.debug("Connect-4 bot wins in column %d", winning)
        return winning

    blocking = completing_column(grid, bot_disc.opponent)
    if blocking is not None:
        logger.debug("Connect-4 bot blocks column %d", blocking)
        return blocking

    return rng.choice(grid.open_columns())
