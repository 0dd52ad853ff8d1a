"""
Move Validator
----

Decides if a move is legal in a given position. Illegality is an expected outcome, not an error:
`validate_move()` never raises, it returns either `Valid()` or `Invalid(reason)`.

The reasons are meant for display / debugging only. Do not branch on their text.

Checks, in order (stop at the first failure):
1. there is a piece on the starting square
2. it belongs to the player whose turn it is
3. the target square is not occupied by one of your own pieces
4. the piece is allowed to move like that (geometry, obstruction, castling, en passant)
5. after the move, your own king is not in check
"""

from dataclasses import dataclass
from typing import Callable

from src.chess.applicator import apply_move_unchecked
from src.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    castling_direction_for_king_move,
    castling_path,
)
from src.chess.moves import (
    KING_DELTAS,
    KNIGHT_DELTAS,
    Move,
    en_passant_rank,
    is_diagonal_line,
    is_king_in_check,
    is_path_clear,
    is_straight_line,
    pawn_direction,
    pawn_start_rank,
    promotion_rank,
)
from src.chess.pieces import PROMOTION_OPTIONS, Piece
from src.chess.position import Position
from src.chess.square import Square
from src.core.shared_types import PieceType


@dataclass(frozen=True)
class Valid:
    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    reason: str

    @property
    def is_valid(self) -> bool:
        return False


ValidationResult = Valid | Invalid


def validate_move(position: Position, move: Move) -> ValidationResult:
    """Is the move legal in this position?"""
    piece = position.piece_at(move.from_square)
    if piece is None:
        return Invalid("empty square")

    if piece.color != position.active_color:
        return Invalid("wrong turn")

    target = position.piece_at(move.to_square)
    if target is not None and target.color == piece.color:
        return Invalid("own piece")

    piece_rule = PIECE_RULES[piece.type]
    result = piece_rule(position, move, piece)
    if not result.is_valid:
        return result

    # simulate the move (without validating it again) and look at your own king
    simulated = apply_move_unchecked(position, move)
    if is_king_in_check(simulated, piece.color):
        return Invalid("own king in check")

    return Valid()


def is_legal(position: Position, move: Move) -> bool:
    return validate_move(position, move).is_valid


def requires_promotion(position: Position, move: Move) -> bool:
    """
    True if the move is a pawn reaching the last rank.

    A UI can use this to ask for the piece to promote into. Without a choice the pawn becomes a Queen.
    """
    piece = position.piece_at(move.from_square)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and move.to_square.rank == promotion_rank(piece.color)
    )


# --- MOVEMENT RULES ---
def _deltas(move: Move) -> tuple[int, int]:
    return (
        move.to_square.file - move.from_square.file,
        move.to_square.rank - move.from_square.rank,
    )


def validate_pawn_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """
    A pawn:
    - moves by a single square forward.
    - It can move by two in their first move (so when on their starting rank), if both squares are free
    - never takes forward, only diagonally
    - takes en passant on the square the opponent's pawn skipped over on the previous move
    """
    df, dr = _deltas(move)
    direction = pawn_direction(piece.color)

    if move.promotion is not None and move.promotion not in PROMOTION_OPTIONS:
        return Invalid(f"Cannot promote to a {move.promotion}")

    if df == 0:
        if not position.is_empty(move.to_square):
            return Invalid("Pawn cannot capture forward")

        if dr == direction:
            return Valid()

        if dr == 2 * direction and move.from_square.rank == pawn_start_rank(piece.color):
            skipped_square = move.from_square.offset(0, direction)
            if not position.is_empty(skipped_square):
                return Invalid("Path is blocked")
            return Valid()

        return Invalid("Invalid pawn move")

    if abs(df) == 1 and dr == direction:
        target = position.piece_at(move.to_square)
        if target is not None and target.color != piece.color:
            return Valid()

        if _is_valid_en_passant(position, move, piece):
            return Valid()

        return Invalid("Pawn can only move diagonally when capturing")

    return Invalid("Invalid pawn move")


def _is_valid_en_passant(position: Position, move: Move, piece: Piece) -> bool:
    """
    The target must be the en passant square, and the opponent's pawn that just made the double step
    must be standing next to you: on the target's file, on your rank.
    """
    if position.en_passant_target != move.to_square:
        return False

    if move.from_square.rank != en_passant_rank(piece.color):
        return False

    captured_square = Square(move.to_square.file, move.from_square.rank)
    captured = position.piece_at(captured_square)
    return (
        captured is not None
        and captured.type == PieceType.PAWN
        and captured.color != piece.color
    )


def validate_knight_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """Knights always move such that |delta_rank| + |delta_file| = 3 (and they jump)"""
    if _deltas(move) in KNIGHT_DELTAS:
        return Valid()
    return Invalid("Invalid knight move")


def validate_bishop_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    if not is_diagonal_line(move.from_square, move.to_square):
        return Invalid("Bishop can only move diagonally")
    if not is_path_clear(position, move.from_square, move.to_square):
        return Invalid("Path is blocked")
    return Valid()


def validate_rook_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """Rooks move either horizontally or vertically"""
    if not is_straight_line(move.from_square, move.to_square):
        return Invalid("Rook can only move horizontally or vertically")
    if not is_path_clear(position, move.from_square, move.to_square):
        return Invalid("Path is blocked")
    return Valid()


def validate_queen_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    on_a_line = is_straight_line(move.from_square, move.to_square) or is_diagonal_line(
        move.from_square, move.to_square
    )
    if not on_a_line:
        return Invalid("Invalid queen move")
    if not is_path_clear(position, move.from_square, move.to_square):
        return Invalid("Path is blocked")
    return Valid()


def validate_king_move(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: two files along the home rank.
    """
    df, dr = _deltas(move)
    if dr == 0 and abs(df) == 2:
        return validate_castling(position, move, piece)

    if (df, dr) not in KING_DELTAS:
        return Invalid("King can only move one square")
    return Valid()


def validate_castling(position: Position, move: Move, piece: Piece) -> ValidationResult:
    """
    **you are allowed to castle if**

    * King and rook are on their starting squares, and the right to castle in this direction was not revoked.
    * All squares between king and rook (and the king's destination) are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through, or land on, a square that is under attack.
    """
    direction = castling_direction_for_king_move(
        piece.color, move.from_square, move.to_square
    )
    if direction is None:
        return Invalid("Castling can only be performed from the king's starting square")

    rule = CASTLING_RULES[direction]
    if position.piece_at(rule.rook_from) != Piece(PieceType.ROOK, piece.color):
        return Invalid("Castling requires the rook on its starting square")

    if not position.castling_rights.has_right(direction):
        return Invalid("Castling rights have been lost")

    if any(not position.is_empty(square) for square in castling_path(direction)):
        return Invalid("Path between king and rook is not clear")

    if is_king_in_check(position, piece.color):
        return Invalid("Cannot castle while in check")

    # NOTE: the square the rook lands on is exactly the square the king passes through
    if _king_attacked_on(position, direction, rule.rook_to, piece):
        return Invalid("Cannot castle through an attacked square")

    if _king_attacked_on(position, direction, rule.king_to, piece):
        return Invalid("Cannot castle onto an attacked square")

    return Valid()


def _king_attacked_on(
    position: Position, direction: CastlingDirection, square: Square, king: Piece
) -> bool:
    """Place the king on the given square (and nothing else changes) and see if it would be in check."""
    squares = dict(position.squares)
    del squares[CASTLING_RULES[direction].king_from]
    squares[square] = king
    return is_king_in_check(position.with_squares(squares), king.color)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
PieceRuleFn = Callable[[Position, Move, Piece], ValidationResult]
PIECE_RULES: dict[PieceType, PieceRuleFn] = {
    PieceType.PAWN: validate_pawn_move,
    PieceType.KNIGHT: validate_knight_move,
    PieceType.BISHOP: validate_bishop_move,
    PieceType.ROOK: validate_rook_move,
    PieceType.QUEEN: validate_queen_move,
    PieceType.KING: validate_king_move,
}
