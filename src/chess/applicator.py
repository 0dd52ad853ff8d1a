"""
Move Applicator
----

Produce the position after a move. The given position is left untouched, a new one is returned.

* `apply_move()` is the public entry point. It validates first: applying an illegal move is a bug in the caller
  (it skipped validation), so it raises an `IllegalMoveError`.
* `apply_move_unchecked()` assumes the move is legal. The validator uses it to simulate a move when checking
  if your own king would be left in check (validating again at that point would never end).
"""

import logging
from typing import Optional

from src.chess.castling import (
    CASTLING_RULES,
    CastlingRights,
    castling_direction_for_king_move,
    castling_direction_for_rook_square,
)
from src.chess.fen import position_to_fen
from src.chess.moves import Move, pawn_direction, promotion_rank
from src.chess.pieces import Piece
from src.chess.position import Position
from src.chess.square import Square
from src.core.exceptions import IllegalMoveError
from src.core.shared_types import Color, PieceType, opponent

logger = logging.getLogger(__name__)

DEFAULT_PROMOTION = PieceType.QUEEN


def apply_move(position: Position, move: Move) -> Position:
    """Validate, then apply. Raises IllegalMoveError if the move is not legal."""
    from src.chess.validation import validate_move

    result = validate_move(position, move)
    if not result.is_valid:
        raise IllegalMoveError(
            f"Invalid move {move.to_uci()} in {position_to_fen(position)}: {result.reason}"
        )
    return apply_move_unchecked(position, move)


def apply_move_unchecked(position: Position, move: Move) -> Position:
    """
    Apply a move that is known to be legal
    -----

    1. castling: the rook moves along with the king
    2. en passant: remove the pawn that got taken (it is NOT standing on the target square)
    3. move the piece (and promote it when a pawn reaches the last rank)
    4. update castling rights, en passant target, move counters, and the color to move
    """
    piece = position.piece_at(move.from_square)
    if piece is None:
        raise IllegalMoveError(
            f"Cannot apply move {move.to_uci()}: no piece on {move.from_square}"
        )

    captured = position.piece_at(move.to_square)
    squares = dict(position.squares)

    if piece.type == PieceType.KING:
        _move_castling_rook(squares, piece, move)

    is_en_passant = _is_en_passant_capture(position, piece, move)
    if is_en_passant:
        # The pawn that gets taken stands on the target's file, on the rank the capturing pawn started from.
        del squares[Square(move.to_square.file, move.from_square.rank)]

    del squares[move.from_square]
    squares[move.to_square] = _piece_after_move(piece, move)

    is_capture = captured is not None or is_en_passant
    half_move_clock = (
        0 if (piece.type == PieceType.PAWN or is_capture) else position.half_move_clock + 1
    )
    full_move_number = (
        position.full_move_number + 1
        if position.active_color == Color.BLACK
        else position.full_move_number
    )

    return position.with_squares(
        squares,
        active_color=opponent(position.active_color),
        castling_rights=_updated_castling_rights(
            position.castling_rights, piece, captured, move
        ),
        en_passant_target=_en_passant_target_after(piece, move),
        half_move_clock=half_move_clock,
        full_move_number=full_move_number,
    )


def _move_castling_rook(squares: dict[Square, Piece], king: Piece, move: Move) -> None:
    """If the king move is a castling move, relocate the rook in the same update."""
    direction = castling_direction_for_king_move(king.color, move.from_square, move.to_square)
    if direction is None:
        return

    rule = CASTLING_RULES[direction]
    rook = squares.get(rule.rook_from)
    if rook == Piece(PieceType.ROOK, king.color):
        del squares[rule.rook_from]
        squares[rule.rook_to] = rook


def _is_en_passant_capture(position: Position, piece: Piece, move: Move) -> bool:
    return (
        piece.type == PieceType.PAWN
        and position.en_passant_target == move.to_square
        and move.from_square.file != move.to_square.file
    )


def _piece_after_move(piece: Piece, move: Move) -> Piece:
    """A pawn reaching the last rank is replaced. Without a choice, it becomes a Queen."""
    if piece.type != PieceType.PAWN or move.to_square.rank != promotion_rank(piece.color):
        return piece

    if move.promotion is None:
        logger.debug(
            "No promotion piece given for %s, defaulting to %s",
            move.to_uci(),
            DEFAULT_PROMOTION,
        )
        return piece.promoted_to(DEFAULT_PROMOTION)
    return piece.promoted_to(move.promotion)


def _updated_castling_rights(
    rights: CastlingRights, piece: Piece, captured: Optional[Piece], move: Move
) -> CastlingRights:
    """
    Checks which rights should get revoked
    ----

    1. If you are moving your king (castling included) --> revoke both
    2. If you are moving a rook off its starting square --> revoke the right in that direction
    3. If you take your opponent's rook on its starting square --> revoke your opponent's right in that direction
    """
    if piece.type == PieceType.KING:
        rights = rights.revoke_all(piece.color)

    if piece.type == PieceType.ROOK:
        direction = castling_direction_for_rook_square(move.from_square)
        if direction is not None and direction.color == piece.color:
            rights = rights.revoke(direction)

    if captured is not None and captured.type == PieceType.ROOK:
        direction = castling_direction_for_rook_square(move.to_square)
        if direction is not None and direction.color == captured.color:
            rights = rights.revoke(direction)

    return rights


def _en_passant_target_after(piece: Piece, move: Move) -> Optional[Square]:
    """Only right after a pawn's double step: the square it skipped over."""
    ranks_moved = move.to_square.rank - move.from_square.rank
    if piece.type == PieceType.PAWN and abs(ranks_moved) == 2:
        return move.from_square.offset(0, pawn_direction(piece.color))
    return None
