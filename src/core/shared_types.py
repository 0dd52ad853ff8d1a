"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class DrawReason(StrEnum):
    """The values double as the human readable reason shown in exported notation."""

    THREEFOLD_REPETITION = "threefold repetition"
    FIFTY_MOVE_RULE = "50-move rule"
    AGREED = "agreed"


def opponent(color: Color) -> Color:
    return Color.BLACK if color == Color.WHITE else Color.WHITE
