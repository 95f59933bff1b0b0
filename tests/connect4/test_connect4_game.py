"""Unit tests for /src/connect4/game.py and /src/connect4/bot.py"""

import random

import pytest

from src.connect4 import bot
from src.connect4.board import COLS, ROWS, Axis, Disc, Grid
from src.connect4.game import Connect4State, winning_column
from src.core.exceptions import ColumnFullError, InvalidActionError
from src.core.shared_types import Phase


def play(state: Connect4State, *columns: int) -> Connect4State:
    for col in columns:
        state.drop(col)
    return state


def test_red_opens() -> None:
    state = Connect4State()
    assert state.current_player == Disc.RED
    assert state.legal_columns() == list(range(COLS))


def test_horizontal_win_for_red() -> None:
    """Red on (5,0) (5,1) (5,2) then (5,3), yellow stacking on top of red"""
    state = play(Connect4State(), 0, 0, 1, 1, 2, 2)
    assert state.phase == Phase.PLAYING
    play(state, 3)
    assert state.phase == Phase.GAME_OVER
    assert state.winner == Disc.RED
    assert state.winning_axis == Axis.HORIZONTAL
    assert state.winning_cells == [(5, 0), (5, 1), (5, 2), (5, 3)]
    assert state.last_move == (5, 3)
    assert winning_column(state) == 3


def test_full_column_is_refused() -> None:
    state = play(Connect4State(), *[0] * ROWS)
    with pytest.raises(ColumnFullError):
        state.drop(0)


def test_no_drop_after_game_over() -> None:
    state = play(Connect4State(), 0, 1, 0, 1, 0, 1, 0)
    assert state.winner == Disc.RED
    assert state.winning_axis == Axis.VERTICAL
    with pytest.raises(InvalidActionError):
        state.drop(2)
    assert state.legal_columns() == []


def test_draw_on_full_board() -> None:
    """Column pairs filled in a pattern that never lines up four"""
    state = Connect4State()
    order = [0, 1, 0, 1, 0, 1, 1, 0, 1, 0, 1, 0,
             2, 3, 2, 3, 2, 3, 3, 2, 3, 2, 3, 2,
             4, 5, 4, 5, 4, 5, 5, 4, 5, 4, 5, 4,
             6, 6, 6, 6, 6, 6]
    play(state, *order)
    assert state.phase == Phase.GAME_OVER
    assert state.winner is None
    assert state.is_draw
    assert state.moves_count == ROWS * COLS


def test_snapshot_round_trip() -> None:
    state = play(Connect4State(), 3, 3, 4)
    assert Connect4State.from_snapshot(state.to_snapshot()) == state


def test_bot_takes_the_win() -> None:
    grid = Grid()
    for col in range(3):
        grid.drop_disc(col, Disc.YELLOW)
        grid.drop_disc(col, Disc.RED)
    # yellow completes the bottom row before red can complete the second one
    assert bot.choose_column(grid, Disc.YELLOW, random.Random(0)) == 3


def test_bot_blocks_the_opponent() -> None:
    grid = Grid()
    for col in (0, 1, 2):
        grid.drop_disc(col, Disc.RED)
    grid.drop_disc(6, Disc.YELLOW)
    assert bot.choose_column(grid, Disc.YELLOW, random.Random(0)) == 3


def test_bot_plays_random_open_column() -> None:
    grid = Grid()
    for _ in range(ROWS):
        grid.drop_disc(2, Disc.RED if _ % 2 else Disc.YELLOW)
    picks = {bot.choose_column(grid, Disc.YELLOW, random.Random(seed)) for seed in range(100)}
    assert 2 not in picks
    assert picks == {0, 1, 3, 4, 5, 6}


def test_completing_column_leaves_grid_untouched() -> None:
    grid = Grid()
    grid.drop_disc(0, Disc.RED)
    before = grid.to_list()
    bot.completing_column(grid, Disc.RED)
    assert grid.to_list() == before
