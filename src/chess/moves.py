"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.
The tables are keyed by PieceType, so every rule is a plain function that can be tested on its own.

Legality (not leaving your own king in check) is checked later by the game rules.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Self

from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square, is_algebraic
from src.core.exceptions import MalformedInputError
from src.core.primitives import Vector


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


@dataclass(frozen=True)
class Move:
    """
    Value object describing one state transition.

    `piece` / `captured_piece` get filled in by the move generators. A move parsed from UCI only
    knows its squares; the game rules match it against the generated moves.
    """

    from_square: Square
    to_square: Square
    piece: Optional[Piece] = None
    captured_piece: Optional[Piece] = None
    promotion: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        if not isinstance(uci, str) or len(uci) not in (4, 5):
            raise MalformedInputError(f"Cannot interpret {uci!r} as a UCI move.")
        if not (is_algebraic(uci[:2]) and is_algebraic(uci[2:4])):
            raise MalformedInputError(f"Cannot interpret {uci!r} as a UCI move.")
        promotion = None
        if len(uci) == 5:
            if uci[4] not in PROMOTION_CHARS:
                raise MalformedInputError(f"Cannot promote to {uci[4]!r}")
            promotion = FEN_TO_PIECE[uci[4]]
        return cls(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]), promotion=promotion)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_square.to_algebraic(),
            "to": self.to_square.to_algebraic(),
            "piece": self.piece.to_dict() if self.piece else None,
            "captured_piece": self.captured_piece.to_dict() if self.captured_piece else None,
            "promotion": self.promotion.value if self.promotion else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        try:
            return cls(
                from_square=Square.from_algebraic(data["from"]),
                to_square=Square.from_algebraic(data["to"]),
                piece=Piece.from_dict(data["piece"]) if data["piece"] else None,
                captured_piece=(
                    Piece.from_dict(data["captured_piece"]) if data["captured_piece"] else None
                ),
                promotion=PieceType(data["promotion"]) if data["promotion"] else None,
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise MalformedInputError(f"Invalid move record {data!r}") from exc


# --- DIRECTION TABLES ---
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_JUMPS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_STEPS: list[Vector] = STRAIGHTS + DIAGONALS


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    We walk along each direction until we hit another piece or the edge of the board.
    The first occupied square ends the ray: it is a capture if the piece belongs to the opponent.
    """
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            occupant = board.piece(target_square)
            if occupant is None:
                moves.append(Move(square, target_square, mover))
            else:
                if occupant.color != mover.color:
                    moves.append(Move(square, target_square, mover, captured_piece=occupant))
                break
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump by a fixed delta"""
    mover = board.piece(square)
    assert mover is not None

    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != mover.color:
            moves.append(Move(square, target_square, mover, captured_piece=occupant))

    return moves


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_starting_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - can move by two from its starting rank, if both squares are empty.
    - takes diagonally, and only when an opponent's piece stands there.
    """
    pawn = board.piece(square)
    assert pawn is not None
    direction = pawn_direction(pawn.color)

    moves: list[Move] = []
    one_step = square.offset(0, direction)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        moves.append(Move(square, one_step, pawn))

        two_steps = square.offset(0, 2 * direction)
        if square.rank == pawn_starting_rank(pawn.color) and board.piece(two_steps) is None:
            moves.append(Move(square, two_steps, pawn))

    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue
        occupant = board.piece(target_square)
        if occupant is not None and occupant.color != pawn.color:
            moves.append(Move(square, target_square, pawn, captured_piece=occupant))

    return expand_promotions(moves)


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_JUMPS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """The king moves like the queen, but only by a single square at the time."""
    return single_step_move(square, board, KING_STEPS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` answers
    _"What is the line-of-sight of the piece standing on the specified square?"_

    this function answers
    _"Is the specified square in the line-of-sight of a piece of the given color and type(s)?"_

    Only the first occupied square along each ray matters.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """The equivalent of `raycasting_attack()` for pieces that jump/step by a fixed delta."""
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is not None and (piece_found.color, piece_found.type) == (by_color, by_piece_type):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square -->
    look one rank DOWN the board, i.e. the vectors are the inverse of the ones in `candidate_pawn_moves()`.
    """
    back = -pawn_direction(by_color)
    return single_step_attack(square, by_color, PieceType.PAWN, board, [(1, back), (-1, back)])


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_JUMPS)


def is_attacked_on_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_on_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_STEPS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_on_diagonal,
    is_attacked_on_straight,
    is_attacked_by_king,
)


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    return any(rule(square, by_color, board) for rule in ATTACK_RULES)


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]
PROMOTION_CHARS = {PIECE_TO_FEN[piece_type] for piece_type in PROMOTION_OPTIONS}


def reaches_promotion_rank(move: Move) -> bool:
    return move.to_square.rank in (1, BOARD_DIMENSIONS[1])


def expand_promotions(pawn_moves: list[Move]) -> list[Move]:
    """A pawn move onto the last rank becomes one move per piece type it may promote into."""
    expanded: list[Move] = []
    for move in pawn_moves:
        if not reaches_promotion_rank(move):
            expanded.append(move)
            continue
        expanded.extend(
            Move(move.from_square, move.to_square, move.piece, move.captured_piece, piece_type)
            for piece_type in PROMOTION_OPTIONS
        )
    return expanded
