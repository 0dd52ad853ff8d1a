"""
Legal Move Enumerator

Try every square on the board as a destination and keep the ones the validator accepts.
There is no separate move generator: the validator is the single source of truth for what is legal.
(64 validations per piece is cheap on an 8x8 board.)
"""

from src.chess.moves import Move
from src.chess.position import Position
from src.chess.square import ALL_SQUARES, Square
from src.chess.validation import validate_move


def legal_moves(position: Position, from_square: Square) -> frozenset[Square]:
    """
    All legal destination squares for the piece on `from_square`.
    Empty if the square is empty or holds a piece of the player who is not to move.
    """
    piece = position.piece_at(from_square)
    if piece is None or piece.color != position.active_color:
        return frozenset()

    return frozenset(
        to_square
        for to_square in ALL_SQUARES
        if to_square != from_square
        and validate_move(position, Move(from_square, to_square)).is_valid
    )


def all_legal_moves(position: Position) -> list[Move]:
    """Every legal move of the player to move. Promotions are listed once (with the default promotion)."""
    return [
        Move(from_square, to_square)
        for from_square in position.locate_color(position.active_color)
        for to_square in sorted(legal_moves(position, from_square))
    ]


def has_any_legal_move(position: Position) -> bool:
    """Stops at the first piece that can move"""
    return any(
        legal_moves(position, from_square)
        for from_square in position.locate_color(position.active_color)
    )
