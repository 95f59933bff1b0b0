"""Greedy chess bot: grab the most valuable piece it can, otherwise head for the centre."""

import logging
import random

from src.chess.moves import Move
from src.chess.square import BOARD_DIMENSIONS

logger = logging.getLogger(__name__)

CAPTURE_WEIGHT = 10
CENTER_WEIGHT = 0.5
# Largest Manhattan distance a square can have from the centre of the board (the corners)
MAX_CENTER_DISTANCE = 7
CENTER = ((BOARD_DIMENSIONS[0] + 1) / 2, (BOARD_DIMENSIONS[1] + 1) / 2)


def center_distance(move: Move) -> float:
    return abs(move.to_square.file - CENTER[0]) + abs(move.to_square.rank - CENTER[1])


def score_move(move: Move) -> float:
    score = CENTER_WEIGHT * (MAX_CENTER_DISTANCE - center_distance(move))
    if move.captured_piece is not None:
        score += CAPTURE_WEIGHT * move.captured_piece.value
    return score


def choose_move(legal_moves: list[Move], rng: random.Random) -> Move:
    """Uniformly random among the moves tied for the best score. Needs at least one move."""
    scored = [(score_move(move), move) for move in legal_moves]
    best_score = max(score for score, _ in scored)
    best_moves = [move for score, move in scored if score == best_score]
    choice = rng.choice(best_moves)
    logger.debug(
        "Chess bot picked %s (score %.1f, %d tied)", choice.to_uci(), best_score, len(best_moves)
    )
    return choice
